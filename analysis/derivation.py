"""
正規化済みの気象列から物理単位の列を計算する
"""
import logging
from typing import Dict, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

# 正規化列 → (物理単位の列名, 最大値)
RAW_UNIT_SCALES: Dict[str, Tuple[str, float]] = {
    'temp_normalized': ('temp_raw', 41),               # ℃
    'feeling_temp_normalized': ('feeling_temp_raw', 50),  # ℃
    'humidity_normalized': ('humidity_raw', 100),      # %
    'windspeed_normalized': ('windspeed_raw', 67),     # km/h
}


def out_of_range_counts(table: pd.DataFrame) -> Dict[str, int]:
    """正規化列ごとに [0, 1] の範囲外の値の件数を数える"""
    counts = {}
    for column in RAW_UNIT_SCALES:
        values = table[column]
        counts[column] = int(((values < 0) | (values > 1)).sum())
    return counts


def add_raw_unit_columns(table: pd.DataFrame) -> pd.DataFrame:
    """
    物理単位の列を追加した新しいテーブルを返す

    元の正規化列はそのまま残す。範囲外の値は警告のみで補正はしない。

    Args:
        table: 正規化列を含むテーブル

    Returns:
        temp_raw, feeling_temp_raw, humidity_raw, windspeed_raw を追加した DataFrame
    """
    for column, count in out_of_range_counts(table).items():
        if count:
            logger.warning(f"{count} value(s) of '{column}' outside [0, 1]")

    derived = {
        raw_column: table[column] * scale
        for column, (raw_column, scale) in RAW_UNIT_SCALES.items()
    }
    return table.assign(**derived)
