"""
利用数の整合性チェック (casual + registered == total)
"""
import logging
from dataclasses import dataclass, field
from typing import List

import pandas as pd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntegrityReport:
    """整合性チェックの結果"""
    passed: bool
    checked_rows: int
    mismatch_count: int
    mismatched_dates: List[pd.Timestamp] = field(default_factory=list)
    row_check: pd.Series = field(default=None, repr=False)


def check_rider_totals(table: pd.DataFrame) -> IntegrityReport:
    """
    各行で casual_count + registered_count == total_count を確認

    不一致は診断結果として返すだけで、行の除外や修正はしない。

    Args:
        table: casual_count, registered_count, total_count, date を含むテーブル

    Returns:
        IntegrityReport
    """
    row_check = (table['casual_count'] + table['registered_count']) == table['total_count']
    row_check = row_check.rename('counts_match')

    # 不一致の行の日付
    mismatched = table.loc[~row_check, 'date']
    report = IntegrityReport(
        passed=bool(row_check.all()),
        checked_rows=len(table),
        mismatch_count=int((~row_check).sum()),
        mismatched_dates=list(mismatched),
        row_check=row_check,
    )

    if report.passed:
        logger.info(f"Rider totals consistent for all {report.checked_rows} rows")
    else:
        dates = ', '.join(str(pd.Timestamp(d).date()) for d in report.mismatched_dates)
        logger.warning(
            f"Rider totals mismatch in {report.mismatch_count} of "
            f"{report.checked_rows} rows: {dates}"
        )
    return report
