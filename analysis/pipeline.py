"""
読み込み済みデータから分析用テーブルを作る
カテゴリ変換 → 物理単位の列の追加 → 整合性チェック
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional

import pandas as pd

from analysis.derivation import add_raw_unit_columns
from analysis.integrity import IntegrityReport, check_rider_totals
from analysis.recoder import CATEGORICAL_SPECS, recode_table
from dataset.models import CategoricalSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedData:
    """分析用テーブルと付随情報"""
    table: pd.DataFrame
    categorical_specs: Dict[str, CategoricalSpec]
    integrity: IntegrityReport


def prepare_dataset(raw: pd.DataFrame,
                    specs: Optional[Dict[str, CategoricalSpec]] = None) -> PreparedData:
    """
    分析用テーブルを作成

    整合性チェックに失敗しても処理は続行し、結果は integrity に残す。

    Args:
        raw: BikeshareDataLoader で読み込んだテーブル
        specs: カテゴリ定義 (省略時は標準の4列)

    Returns:
        PreparedData
    """
    specs = CATEGORICAL_SPECS if specs is None else specs

    recoded = recode_table(raw, specs)
    derived = add_raw_unit_columns(recoded)
    integrity = check_rider_totals(derived)
    # 判定結果を列として残す
    table = derived.assign(counts_match=integrity.row_check)

    logger.info(f"Prepared table: {len(table)} rows, {len(table.columns)} columns")
    return PreparedData(table=table, categorical_specs=dict(specs), integrity=integrity)
