"""
分析用テーブルの可視化
各メソッドは Matplotlib の Figure を返す (保存・表示は呼び出し側)
"""
import logging
from typing import Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from analysis.recoder import SEASON
from analysis.regression import RegressionReport, residual_frame

logger = logging.getLogger(__name__)

sns.set(style="whitegrid")
plt.rcParams['axes.unicode_minus'] = False

LABELS = {
    'date': 'Date',
    'total_count': 'Total rentals per day',
    'casual_count': 'Casual rentals per day',
    'registered_count': 'Registered rentals per day',
    'temp_raw': 'Temperature (C)',
    'feeling_temp_raw': 'Feeling temperature (C)',
    'humidity_raw': 'Humidity (%)',
    'windspeed_raw': 'Wind speed (km/h)',
    'season': 'Season',
    'holiday': 'Holiday',
}

TITLES = {
    'count_over_time': 'Daily bike rentals over time',
    'count_by_season': 'Total bike rentals by season',
    'temp_by_holiday': 'Bike rentals vs temperature, by holiday',
    'feeling_temp_by_season': 'Bike rentals vs feeling temperature, by season',
    'residuals': 'Residuals vs fitted values',
}


class RidershipVisualizer:
    """
    利用数と気象データの可視化クラス
    """

    def __init__(self, table: pd.DataFrame):
        """
        Args:
            table: prepare_dataset で作成した分析用テーブル
        """
        self.table = table
        logger.info(f"Visualizer initialized with {len(table)} rows")

    def plot_count_over_time(self, figsize: Tuple[int, int] = (10, 5)) -> plt.Figure:
        """日付と利用数の散布図 (色は気温)"""
        fig, ax = plt.subplots(figsize=figsize)

        points = ax.scatter(
            self.table['date'], self.table['total_count'],
            c=self.table['temp_raw'], cmap='coolwarm', s=12, alpha=0.8
        )
        # 色で気温を表す
        fig.colorbar(points, ax=ax, label=self._get_label('temp_raw'))

        ax.set_xlabel(self._get_label('date'))
        ax.set_ylabel(self._get_label('total_count'))
        ax.set_title(TITLES['count_over_time'])

        fig.tight_layout()
        return fig

    def plot_count_by_season(self, figsize: Tuple[int, int] = (8, 4)) -> plt.Figure:
        """季節ごとの利用数合計 (横棒グラフ)"""
        totals = (
            self.table.groupby('season', observed=False)['total_count']
            .sum()
            .reindex(list(SEASON.categories))
        )

        fig, ax = plt.subplots(figsize=figsize)
        ax.barh(totals.index.astype(str), totals.values)

        ax.set_xlabel(self._get_label('total_count').replace(' per day', ''))
        ax.set_ylabel(self._get_label('season'))
        ax.set_title(TITLES['count_by_season'])

        fig.tight_layout()
        return fig

    def plot_temp_by_holiday(self,
                             report: Optional[RegressionReport] = None,
                             figsize: Tuple[int, int] = (12, 5)) -> plt.Figure:
        """
        気温と利用数の散布図を祝日かどうかで分割

        Args:
            report: 当てはめ結果 (指定すると各パネルに回帰直線を重ねる)
            figsize: 図のサイズ

        Returns:
            Figure
        """
        panels = [(False, 'Non-holiday'), (True, 'Holiday')]
        return self._faceted_scatter(
            'temp_raw', 'holiday', panels, report, figsize, TITLES['temp_by_holiday']
        )

    def plot_feeling_temp_by_season(self,
                                    report: Optional[RegressionReport] = None,
                                    figsize: Tuple[int, int] = (14, 4)) -> plt.Figure:
        """体感気温と利用数の散布図を季節ごとに分割"""
        panels = [(season, season.capitalize()) for season in SEASON.categories]
        return self._faceted_scatter(
            'feeling_temp_raw', 'season', panels, report, figsize, TITLES['feeling_temp_by_season']
        )

    def plot_residuals(self,
                       report: RegressionReport,
                       figsize: Tuple[int, int] = (7, 4)) -> plt.Figure:
        """残差と予測値の散布図"""
        frame = residual_frame(report)

        fig, ax = plt.subplots(figsize=figsize)
        ax.scatter(frame['fitted'], frame['residual'], alpha=0.5, s=12)
        # 残差0の基準線
        ax.axhline(0, linestyle='--', color='red')

        ax.set_xlabel(f"Fitted {report.formula.response}")
        ax.set_ylabel('Residual')
        ax.set_title(f"{TITLES['residuals']}\n{report.formula.describe()}")

        fig.tight_layout()
        return fig

    def plot_fitted_line(self,
                         report: RegressionReport,
                         x: str,
                         figsize: Tuple[int, int] = (7, 5)) -> plt.Figure:
        """
        単回帰の散布図と回帰直線

        Args:
            report: x を唯一の説明変数とする当てはめ結果
            x: 横軸の列名
        """
        fig, ax = plt.subplots(figsize=figsize)
        ax.scatter(self.table[x], self.table[report.formula.response], alpha=0.5, s=12)

        grid = self._grid(x, self.table)
        ax.plot(grid[x], report.predict(grid), 'r--', alpha=0.8)

        ax.set_xlabel(self._get_label(x))
        ax.set_ylabel(self._get_label(report.formula.response))
        ax.set_title(f"{report.formula.describe()}\nR^2={report.r_squared:.3f}")

        fig.tight_layout()
        return fig

    def _faceted_scatter(self, x, facet, panels, report, figsize, title) -> plt.Figure:
        fig, axes = plt.subplots(1, len(panels), figsize=figsize, sharex=True, sharey=True)

        for ax, (value, panel_title) in zip(np.atleast_1d(axes), panels):
            subset = self.table[self.table[facet] == value]
            ax.scatter(subset[x], subset['total_count'], alpha=0.5, s=12)

            # 回帰直線を追加
            if report is not None and len(subset):
                grid = self._grid(x, subset).assign(**{facet: value})
                ax.plot(grid[x], report.predict(grid), 'r--', alpha=0.8)

            ax.set_title(f"{self._get_label(facet)}: {panel_title}")
            ax.set_xlabel(self._get_label(x))
            ax.grid(True, alpha=0.3)

        np.atleast_1d(axes)[0].set_ylabel(self._get_label('total_count'))
        fig.suptitle(title)
        fig.tight_layout()
        return fig

    @staticmethod
    def _grid(x: str, rows: pd.DataFrame, points: int = 100) -> pd.DataFrame:
        return pd.DataFrame({x: np.linspace(rows[x].min(), rows[x].max(), points)})

    def _get_label(self, variable: str) -> str:
        """
        変数名から表示用ラベルを取得

        Args:
            variable: 変数名

        Returns:
            ラベル文字列
        """
        return LABELS.get(variable, variable)
