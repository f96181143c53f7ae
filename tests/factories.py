"""
テスト用の合成データ (day.csv と同じ列構成)
"""
import numpy as np
import pandas as pd


def make_raw_days(n: int = 729, seed: int = 0) -> pd.DataFrame:
    """気温が高いほど利用数が多くなる合成データを作成"""
    rng = np.random.default_rng(seed)
    dates = pd.date_range('2011-01-01', periods=n, freq='D')

    month = dates.month.to_numpy()
    weekday = dates.dayofweek.to_numpy()

    season = month % 12 // 3 + 1
    seasonal = 0.5 - 0.35 * np.cos(2 * np.pi * (dates.dayofyear.to_numpy() - 15) / 365)
    temp = np.clip(seasonal + rng.normal(0, 0.05, n), 0.05, 0.95)
    holiday = (rng.random(n) < 0.05).astype(int)
    workingday = ((weekday < 5) & (holiday == 0)).astype(int)

    cnt = np.clip(np.round(800 + 6000 * temp + rng.normal(0, 500, n)), 50, None).astype(int)
    casual = (cnt * rng.uniform(0.1, 0.3, n)).astype(int)

    return pd.DataFrame({
        'instant': np.arange(1, n + 1),
        'dteday': dates.strftime('%Y-%m-%d'),
        'season': season,
        'yr': dates.year.to_numpy() - 2011,
        'mnth': month,
        'holiday': holiday,
        'weekday': weekday,
        'workingday': workingday,
        'weathersit': rng.choice([1, 2, 3], size=n, p=[0.6, 0.3, 0.1]),
        'temp': temp,
        'atemp': np.clip(temp * 0.9 + rng.normal(0, 0.02, n), 0.0, 1.0),
        'hum': rng.uniform(0.3, 0.95, n),
        'windspeed': rng.uniform(0.05, 0.5, n),
        'casual': casual,
        'registered': cnt - casual,
        'cnt': cnt,
    })


def make_table(n: int = 729, seed: int = 0):
    """前処理済みの PreparedData を作成"""
    from analysis.pipeline import prepare_dataset
    from dataset.loader import BikeshareDataLoader

    return prepare_dataset(BikeshareDataLoader.prepare_frame(make_raw_days(n, seed)))
