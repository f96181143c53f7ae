"""
自転車シェア利用数と気象データの分析クラス
相関分析・回帰モデル・サマリーレポートをまとめて扱う
"""
import logging
from typing import Dict, List, Optional

import pandas as pd
from scipy import stats

from analysis.pipeline import PreparedData
from analysis.regression import ModelSuite, fit_standard_models

logger = logging.getLogger(__name__)

WEATHER_VARIABLES = ['temp_raw', 'feeling_temp_raw', 'humidity_raw', 'windspeed_raw']


class RidershipAnalyzer:
    """
    利用数と気象データの分析クラス
    """

    def __init__(self, prepared: PreparedData):
        """
        Args:
            prepared: prepare_dataset の結果
        """
        self.prepared = prepared
        self.table = prepared.table
        logger.info("Analyzer initialized")

    def analyze_correlation(self,
                            weather_variable: str = 'temp_raw',
                            ridership_variable: str = 'total_count') -> Dict:
        """
        気象要素と利用数の相関分析

        Args:
            weather_variable: 分析する気象要素
            ridership_variable: 分析する利用数の列

        Returns:
            分析結果の辞書
        """
        # 欠損値を除外
        valid_data = self.table[[weather_variable, ridership_variable]].dropna()

        if len(valid_data) < 10:
            logger.warning("Insufficient data for correlation analysis")
            return {'error': 'Insufficient data'}

        # 相関係数計算
        correlation, p_value = stats.pearsonr(
            valid_data[weather_variable],
            valid_data[ridership_variable]
        )
        # スピアマンの順位相関も計算
        spearman_corr, spearman_p = stats.spearmanr(
            valid_data[weather_variable],
            valid_data[ridership_variable]
        )

        results = {
            'pearson_correlation': float(correlation),
            'pearson_p_value': float(p_value),
            'spearman_correlation': float(spearman_corr),
            'spearman_p_value': float(spearman_p),
            'sample_size': len(valid_data),
            'weather_mean': valid_data[weather_variable].mean(),
            'weather_std': valid_data[weather_variable].std(),
            'ridership_mean': valid_data[ridership_variable].mean(),
            'ridership_std': valid_data[ridership_variable].std(),
        }

        logger.info(f"Correlation {weather_variable}: {correlation:.3f} (p={p_value:.4f})")
        return results

    def compare_weather_variables(self,
                                  variables: Optional[List[str]] = None) -> pd.DataFrame:
        """
        複数の気象要素について利用数との相関を比較

        Returns:
            相関係数の大きい順に並べた DataFrame
        """
        variables = WEATHER_VARIABLES if variables is None else variables
        rows = []

        for variable in variables:
            result = self.analyze_correlation(variable)
            if 'error' not in result:
                rows.append({
                    'variable': variable,
                    'correlation': result['pearson_correlation'],
                    'p_value': result['pearson_p_value'],
                    'spearman': result['spearman_correlation'],
                })

        comparison = pd.DataFrame(rows, columns=['variable', 'correlation', 'p_value', 'spearman'])
        return comparison.sort_values('correlation', ascending=False).reset_index(drop=True)

    def fit_models(self) -> ModelSuite:
        """標準の回帰モデルを当てはめる"""
        return fit_standard_models(self.table, self.prepared.categorical_specs)

    def generate_summary_report(self, suite: Optional[ModelSuite] = None) -> str:
        """
        分析結果のサマリーレポートを生成

        Args:
            suite: 当てはめ済みのモデル (省略時はここで当てはめる)

        Returns:
            レポート文字列
        """
        suite = self.fit_models() if suite is None else suite
        integrity = self.prepared.integrity
        start, end = self.table['date'].min(), self.table['date'].max()

        if integrity.passed:
            integrity_line = f"casual + registered == total for all {integrity.checked_rows} rows"
        else:
            integrity_line = (
                f"{integrity.mismatch_count} of {integrity.checked_rows} rows do not add up"
            )

        # 気象要素との相関
        correlations = self.compare_weather_variables()
        correlation_lines = '\n'.join(
            f"{row.variable:<20} r={row.correlation:+.3f}  p={row.p_value:.4f}"
            for row in correlations.itertuples()
        )

        # 回帰モデルの結果
        model_sections = [report.summary_text() for report in suite.reports.values()]
        model_sections += [
            f"Model {key} failed: {error}" for key, error in suite.failures.items()
        ]

        report = f"""
========================================
Bike-share Ridership Analysis
========================================
Period: {start.date()} to {end.date()}
Days: {len(self.table)}

[Integrity Check]
{integrity_line}

[Weather vs Total Rentals]
{correlation_lines}

[Regression Models]
{chr(10).join(model_sections)}

========================================
"""
        return report
