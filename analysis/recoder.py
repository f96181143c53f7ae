"""
数値コードのカテゴリ列をラベル付きカテゴリに変換する
"""
import logging
from typing import Dict, Optional

import pandas as pd

from analysis.exceptions import UnmappedCodeError
from dataset.models import CategoricalSpec

logger = logging.getLogger(__name__)


SEASON = CategoricalSpec(
    column='season',
    codes={1: 'winter', 2: 'spring', 3: 'summer', 4: 'fall'},
    baseline='spring',
)

WORKING_DAY = CategoricalSpec(
    column='working_day',
    codes={0: 'no', 1: 'yes'},
    baseline='no',
)

YEAR = CategoricalSpec(
    column='year',
    codes={0: '2011', 1: '2012'},
    baseline='2011',
)

WEATHER_SITUATION = CategoricalSpec(
    column='weather_situation',
    codes={
        1: 'clear',
        2: 'mist',
        3: 'light precipitation',
        4: 'heavy precipitation',
    },
    baseline='clear',
)

CATEGORICAL_SPECS: Dict[str, CategoricalSpec] = {
    spec.column: spec for spec in (SEASON, WORKING_DAY, YEAR, WEATHER_SITUATION)
}


def recode_column(codes: pd.Series, spec: CategoricalSpec) -> pd.Series:
    """
    コード列をカテゴリ列に変換

    行の順序と件数はそのまま保持する。

    Args:
        codes: 整数コードの列
        spec: カテゴリ定義

    Returns:
        カテゴリ集合が spec のラベルと一致する Categorical の Series

    Raises:
        UnmappedCodeError: 対応表にないコード(欠損を含む)がある場合
    """
    # コード→ラベル
    labels = codes.map(spec.codes)
    unmapped = labels.isna()
    if unmapped.any():
        bad_codes = sorted(set(codes[unmapped].tolist()), key=str)
        raise UnmappedCodeError(spec.column, bad_codes)

    return pd.Series(
        pd.Categorical(labels, categories=list(spec.categories)),
        index=codes.index,
        name=codes.name,
    )


def recode_table(table: pd.DataFrame,
                 specs: Optional[Dict[str, CategoricalSpec]] = None) -> pd.DataFrame:
    """
    テーブルのカテゴリ列をまとめて変換

    Args:
        table: コード値のままのテーブル
        specs: 列名→カテゴリ定義 (省略時は標準の4列)

    Returns:
        変換後の新しい DataFrame (入力は変更しない)
    """
    specs = CATEGORICAL_SPECS if specs is None else specs
    recoded = table.copy()

    for column, spec in specs.items():
        recoded[column] = recode_column(table[column], spec)
        logger.debug(f"Recoded '{column}' (baseline={spec.baseline})")

    logger.info(f"Recoded {len(specs)} categorical columns")
    return recoded
