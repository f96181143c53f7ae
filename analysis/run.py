"""
分析の一括実行
データ取得 → 読み込み → 前処理 → 図の保存 → モデルのレポート出力
"""
import logging
from pathlib import Path

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import pandas as pd

from analysis.analyzer import RidershipAnalyzer
from analysis.pipeline import prepare_dataset
from analysis.visualizer import RidershipVisualizer
from dataset.loader import BikeshareDataLoader
from dataset.models import DayObservation
from fetchers.uci_fetcher import BikeshareFetcher

logger = logging.getLogger(__name__)

DATA_DIR = Path('data')
OUTPUT_DIR = Path('output')


def save_fig(fig: plt.Figure, fname: str) -> Path:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    path = OUTPUT_DIR / fname
    fig.savefig(path)
    plt.close(fig)
    logger.info(f"Saved {path}")
    return path


def log_busiest_day(table: pd.DataFrame) -> DayObservation:
    """利用数が最も多かった日を記録"""
    busiest = max(BikeshareDataLoader.to_observations(table), key=lambda o: o.total_count)
    logger.info(f"Busiest day: {busiest.date} ({busiest.total_count} rides, "
                f"{busiest.season}, {busiest.weather_situation})")
    return busiest


def main():
    logging.basicConfig(level=logging.INFO)

    csv_path = BikeshareFetcher(DATA_DIR).fetch()
    if csv_path is None:
        raise SystemExit("Dataset could not be fetched")

    raw = BikeshareDataLoader(csv_path).load()
    stats = BikeshareDataLoader.summarize(raw)
    start, end = stats['date_range']
    logger.info(f"{stats['rows']} days from {start.date()} to {end.date()}, "
                f"{stats['total_rides']} rides in total")

    prepared = prepare_dataset(raw)
    log_busiest_day(prepared.table)

    analyzer = RidershipAnalyzer(prepared)
    suite = analyzer.fit_models()

    viz = RidershipVisualizer(prepared.table)
    save_fig(viz.plot_count_over_time(), 'count_over_time.png')
    save_fig(viz.plot_count_by_season(), 'count_by_season.png')
    save_fig(viz.plot_temp_by_holiday(suite.reports.get('temp_holiday_interaction')),
             'temp_by_holiday.png')
    save_fig(viz.plot_feeling_temp_by_season(suite.reports.get('feeling_temp_season')),
             'feeling_temp_by_season.png')

    if 'temp' in suite.reports:
        save_fig(viz.plot_fitted_line(suite.reports['temp'], 'temp_raw'), 'fit_temp.png')
        save_fig(viz.plot_residuals(suite.reports['temp']), 'residuals_temp.png')
    if 'feeling_temp' in suite.reports:
        save_fig(viz.plot_fitted_line(suite.reports['feeling_temp'], 'feeling_temp_raw'),
                 'fit_feeling_temp.png')

    print(analyzer.generate_summary_report(suite))


if __name__ == "__main__":
    main()
