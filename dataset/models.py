"""
データモデル定義
"""
from dataclasses import dataclass, field
from datetime import date as Date
from typing import Dict, Tuple


@dataclass(frozen=True)
class DayObservation:
    """日別の利用・気象データモデル"""
    date: Date                        # 観測日
    season: str                       # 季節 (spring/summer/fall/winter)
    year: str                         # 年 ("2011" / "2012")
    holiday: bool                     # 祝日フラグ
    working_day: str                  # 平日 (yes/no)
    weather_situation: str            # 天候区分
    temp_normalized: float            # 気温 (0-1に正規化)
    feeling_temp_normalized: float    # 体感気温 (0-1に正規化)
    humidity_normalized: float        # 湿度 (0-1に正規化)
    windspeed_normalized: float       # 風速 (0-1に正規化)
    casual_count: int                 # 非会員の利用数
    registered_count: int             # 会員の利用数
    total_count: int                  # 合計利用数


@dataclass(frozen=True)
class CategoricalSpec:
    """
    カテゴリ変数の定義 (コード→ラベル対応と基準カテゴリ)

    回帰モデルでは基準カテゴリには係数が割り当てられず、
    他カテゴリの係数は基準カテゴリとの差として解釈される。
    """
    column: str
    codes: Dict[int, str] = field(hash=False)
    baseline: str

    def __post_init__(self):
        labels = list(self.codes.values())
        if len(set(labels)) != len(labels):
            raise ValueError(f"Duplicate labels in mapping for '{self.column}': {labels}")
        if self.baseline not in labels:
            raise ValueError(
                f"Baseline '{self.baseline}' is not a label of '{self.column}' ({labels})"
            )

    @property
    def categories(self) -> Tuple[str, ...]:
        """コード順のラベル一覧"""
        return tuple(self.codes[code] for code in sorted(self.codes))

    @property
    def non_baseline(self) -> Tuple[str, ...]:
        """基準カテゴリ以外のラベル (ダミー変数になる水準)"""
        return tuple(label for label in self.categories if label != self.baseline)

    def encode(self, label: str) -> int:
        """ラベルから元のコードを逆引き"""
        for code, mapped in self.codes.items():
            if mapped == label:
                return code
        raise KeyError(f"Unknown label for '{self.column}': {label!r}")
