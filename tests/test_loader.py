import tempfile
import unittest
from pathlib import Path

import pandas as pd

from analysis.exceptions import UnmappedCodeError
from analysis.recoder import recode_table
from dataset.loader import REQUIRED_COLUMNS, BikeshareDataLoader
from dataset.models import DayObservation
from factories import make_raw_days


class LoaderTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.csv_path = Path(self.tmp.name) / 'day.csv'

    def tearDown(self):
        self.tmp.cleanup()

    def test_load_renames_and_types(self):
        raw = make_raw_days(30)
        raw.sample(frac=1, random_state=1).to_csv(self.csv_path, index=False)

        table = BikeshareDataLoader(self.csv_path).load()

        self.assertEqual(list(table.columns), REQUIRED_COLUMNS)
        self.assertEqual(len(table), 30)
        self.assertTrue(table['date'].is_monotonic_increasing)
        self.assertEqual(table['holiday'].dtype, bool)
        self.assertEqual(int(table['total_count'].sum()), int(raw['cnt'].sum()))

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            BikeshareDataLoader(self.csv_path).load()

    def test_missing_columns(self):
        make_raw_days(5).drop(columns=['cnt', 'hum']).to_csv(self.csv_path, index=False)
        with self.assertRaises(KeyError):
            BikeshareDataLoader(self.csv_path).load()

    def test_duplicate_dates_warned_not_dropped(self):
        raw = make_raw_days(5)
        raw.loc[3, 'dteday'] = raw.loc[2, 'dteday']

        with self.assertLogs('dataset.loader', level='WARNING') as logs:
            table = BikeshareDataLoader.prepare_frame(raw)

        self.assertEqual(len(table), 5)
        self.assertIn('1 duplicate date', logs.output[0])

    def test_invalid_holiday_code(self):
        raw = make_raw_days(5)
        raw.loc[2, 'holiday'] = 2
        with self.assertRaises(UnmappedCodeError):
            BikeshareDataLoader.prepare_frame(raw)

    def test_domain_column_names_accepted(self):
        table = BikeshareDataLoader.prepare_frame(make_raw_days(5))
        again = BikeshareDataLoader.prepare_frame(table)
        pd.testing.assert_frame_equal(table, again)

    def test_summarize(self):
        table = BikeshareDataLoader.prepare_frame(make_raw_days(10))
        summary = BikeshareDataLoader.summarize(table)

        self.assertEqual(summary['rows'], 10)
        self.assertEqual(summary['date_range'][0], pd.Timestamp('2011-01-01'))
        self.assertEqual(summary['date_range'][1], pd.Timestamp('2011-01-10'))

    def test_to_observations(self):
        table = recode_table(BikeshareDataLoader.prepare_frame(make_raw_days(3)))
        observations = list(BikeshareDataLoader.to_observations(table))

        self.assertEqual(len(observations), 3)
        first = observations[0]
        self.assertIsInstance(first, DayObservation)
        self.assertEqual(first.season, 'winter')
        self.assertEqual(first.year, '2011')
        self.assertEqual(first.casual_count + first.registered_count, first.total_count)
