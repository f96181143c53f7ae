"""
分析処理の例外定義
"""
from typing import Iterable


class AnalysisError(Exception):
    """分析処理の基底例外"""


class UnmappedCodeError(AnalysisError):
    """カテゴリ列に対応表にないコードが含まれている"""

    def __init__(self, column: str, codes: Iterable):
        self.column = column
        self.codes = list(codes)
        super().__init__(f"Unmapped codes in column '{column}': {self.codes}")


class DomainError(AnalysisError):
    """対数変換に0以下の値が渡された"""

    def __init__(self, column: str, count: int):
        self.column = column
        self.count = count
        super().__init__(
            f"Cannot take log of '{column}': {count} non-positive value(s)"
        )
