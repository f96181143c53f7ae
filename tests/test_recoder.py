import unittest

import numpy as np
import pandas as pd

from analysis.exceptions import UnmappedCodeError
from analysis.recoder import (
    CATEGORICAL_SPECS, SEASON, WEATHER_SITUATION, WORKING_DAY, YEAR,
    recode_column, recode_table,
)
from dataset.models import CategoricalSpec


class CategoricalSpecTests(unittest.TestCase):
    def test_categories_follow_code_order(self):
        self.assertEqual(SEASON.categories, ('winter', 'spring', 'summer', 'fall'))
        self.assertEqual(SEASON.non_baseline, ('winter', 'summer', 'fall'))

    def test_baselines(self):
        self.assertEqual(SEASON.baseline, 'spring')
        self.assertEqual(WORKING_DAY.baseline, 'no')
        self.assertEqual(YEAR.baseline, '2011')
        self.assertEqual(WEATHER_SITUATION.baseline, 'clear')
        for spec in CATEGORICAL_SPECS.values():
            self.assertIn(spec.baseline, spec.categories)

    def test_encode_round_trip(self):
        for spec in CATEGORICAL_SPECS.values():
            for code, label in spec.codes.items():
                self.assertEqual(spec.encode(label), code)

    def test_unknown_baseline_rejected(self):
        with self.assertRaises(ValueError):
            CategoricalSpec(column='x', codes={0: 'a', 1: 'b'}, baseline='c')

    def test_duplicate_labels_rejected(self):
        with self.assertRaises(ValueError):
            CategoricalSpec(column='x', codes={0: 'a', 1: 'a'}, baseline='a')


class RecodeColumnTests(unittest.TestCase):
    def test_maps_codes_and_preserves_order(self):
        codes = pd.Series([3, 1, 4, 2, 2], index=[10, 11, 12, 13, 14], name='season')
        recoded = recode_column(codes, SEASON)

        self.assertEqual(list(recoded), ['summer', 'winter', 'fall', 'spring', 'spring'])
        self.assertEqual(list(recoded.index), [10, 11, 12, 13, 14])
        self.assertEqual(recoded.name, 'season')
        self.assertEqual(tuple(recoded.cat.categories), SEASON.categories)

    def test_category_set_is_complete_even_if_unobserved(self):
        recoded = recode_column(pd.Series([1, 1]), WEATHER_SITUATION)
        self.assertEqual(len(recoded.cat.categories), 4)

    def test_labels_round_trip_to_codes(self):
        codes = pd.Series([0, 1, 1, 0])
        recoded = recode_column(codes, YEAR)
        self.assertEqual([YEAR.encode(label) for label in recoded], list(codes))

    def test_unmapped_code(self):
        with self.assertRaises(UnmappedCodeError) as ctx:
            recode_column(pd.Series([1, 2, 5, 5]), SEASON)
        self.assertEqual(ctx.exception.column, 'season')
        self.assertEqual(ctx.exception.codes, [5])

    def test_missing_code_is_unmapped(self):
        with self.assertRaises(UnmappedCodeError):
            recode_column(pd.Series([0, np.nan]), WORKING_DAY)


class RecodeTableTests(unittest.TestCase):
    def test_does_not_mutate_input(self):
        table = pd.DataFrame({
            'season': [1, 2],
            'working_day': [0, 1],
            'year': [0, 1],
            'weather_situation': [1, 3],
            'total_count': [100, 200],
        })
        original = table.copy()

        recoded = recode_table(table)

        pd.testing.assert_frame_equal(table, original)
        self.assertEqual(list(recoded['weather_situation']), ['clear', 'light precipitation'])
        self.assertEqual(list(recoded['working_day']), ['no', 'yes'])
        self.assertEqual(list(recoded['total_count']), [100, 200])
