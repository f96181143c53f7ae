"""
日別の自転車シェア利用データ読み込みクラス
CSVの列名をドメインの列名に揃えて型を整える
"""
import logging
from pathlib import Path
from typing import Dict, Iterator, Union

import pandas as pd

from analysis.exceptions import UnmappedCodeError
from dataset.models import DayObservation

logger = logging.getLogger(__name__)

# CSVの列名 → ドメインの列名
COLUMN_MAP = {
    'dteday': 'date',
    'season': 'season',
    'yr': 'year',
    'holiday': 'holiday',
    'workingday': 'working_day',
    'weathersit': 'weather_situation',
    'temp': 'temp_normalized',
    'atemp': 'feeling_temp_normalized',
    'hum': 'humidity_normalized',
    'windspeed': 'windspeed_normalized',
    'casual': 'casual_count',
    'registered': 'registered_count',
    'cnt': 'total_count',
}

REQUIRED_COLUMNS = list(COLUMN_MAP.values())
COUNT_COLUMNS = ['casual_count', 'registered_count', 'total_count']
HOLIDAY_CODES = {0: False, 1: True}


class BikeshareDataLoader:
    """
    日別データ (day.csv) を読み込むクラス
    """

    def __init__(self, csv_path: Union[str, Path] = 'data/day.csv'):
        """
        Args:
            csv_path: CSVファイルのパス
        """
        self.csv_path = Path(csv_path)
        logger.info(f"Loader initialized for {self.csv_path}")

    def load(self) -> pd.DataFrame:
        """
        CSVを読み込んで整形済みのテーブルを返す

        Returns:
            日付順に並んだ DataFrame
        """
        if not self.csv_path.exists():
            raise FileNotFoundError(f"Dataset not found: {self.csv_path}")

        raw = pd.read_csv(self.csv_path)
        table = self.prepare_frame(raw)
        logger.info(f"Loaded {len(table)} daily rows from {self.csv_path.name}")
        return table

    @staticmethod
    def prepare_frame(raw: pd.DataFrame) -> pd.DataFrame:
        """
        生データの列名と型を整える

        Args:
            raw: CSVの列名 (dteday, yr, ...) またはドメイン列名の DataFrame

        Returns:
            必要な列だけを持つ新しい DataFrame
        """
        table = raw.rename(columns=lambda c: c.strip())
        table = table.rename(columns=COLUMN_MAP)

        # 必要な列の確認
        missing = [c for c in REQUIRED_COLUMNS if c not in table.columns]
        if missing:
            raise KeyError(f"Missing required columns: {missing}")

        table = table[REQUIRED_COLUMNS].copy()
        table['date'] = pd.to_datetime(table['date'])

        for column in COUNT_COLUMNS:
            table[column] = table[column].astype(int)

        if table['holiday'].dtype != bool:
            holiday = table['holiday'].map(HOLIDAY_CODES)
            if holiday.isna().any():
                raise UnmappedCodeError('holiday', sorted(set(table.loc[holiday.isna(), 'holiday'])))
            table['holiday'] = holiday.astype(bool)

        # 重複日付は警告のみ
        duplicated = int(table['date'].duplicated().sum())
        if duplicated:
            logger.warning(f"{duplicated} duplicate date(s) in dataset")

        return table.sort_values('date').reset_index(drop=True)

    @staticmethod
    def summarize(table: pd.DataFrame) -> Dict:
        """
        データの概要を取得

        Returns:
            行数と日付範囲の辞書
        """
        return {
            'rows': len(table),
            'date_range': (table['date'].min(), table['date'].max()),
            'total_rides': int(table['total_count'].sum()),
        }

    @staticmethod
    def to_observations(table: pd.DataFrame) -> Iterator[DayObservation]:
        """カテゴリ変換済みのテーブルを DayObservation として1行ずつ返す"""
        for rec in table.to_dict(orient='records'):
            yield DayObservation(
                date=pd.Timestamp(rec['date']).date(),
                season=str(rec['season']),
                year=str(rec['year']),
                holiday=bool(rec['holiday']),
                working_day=str(rec['working_day']),
                weather_situation=str(rec['weather_situation']),
                temp_normalized=float(rec['temp_normalized']),
                feeling_temp_normalized=float(rec['feeling_temp_normalized']),
                humidity_normalized=float(rec['humidity_normalized']),
                windspeed_normalized=float(rec['windspeed_normalized']),
                casual_count=int(rec['casual_count']),
                registered_count=int(rec['registered_count']),
                total_count=int(rec['total_count']),
            )
