import unittest

from analysis.analyzer import WEATHER_VARIABLES, RidershipAnalyzer
from analysis.pipeline import prepare_dataset
from dataset.loader import BikeshareDataLoader
from factories import make_raw_days, make_table


class AnalyzerTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.analyzer = RidershipAnalyzer(make_table())

    def test_temperature_correlation_positive(self):
        results = self.analyzer.analyze_correlation('temp_raw')
        self.assertGreater(results['pearson_correlation'], 0)
        self.assertGreater(results['spearman_correlation'], 0)
        self.assertEqual(results['sample_size'], 729)

    def test_insufficient_data(self):
        analyzer = RidershipAnalyzer(
            prepare_dataset(BikeshareDataLoader.prepare_frame(make_raw_days(5)))
        )
        self.assertEqual(analyzer.analyze_correlation('temp_raw'), {'error': 'Insufficient data'})

    def test_compare_weather_variables(self):
        comparison = self.analyzer.compare_weather_variables()
        self.assertEqual(set(comparison['variable']), set(WEATHER_VARIABLES))
        self.assertTrue(comparison['correlation'].is_monotonic_decreasing)

    def test_summary_report(self):
        report = self.analyzer.generate_summary_report()
        self.assertIn('[Integrity Check]', report)
        self.assertIn('for all 729 rows', report)
        self.assertIn('total_count ~ temp_raw * holiday', report)
        self.assertIn('log(total_count) ~ log(windspeed_raw)', report)
