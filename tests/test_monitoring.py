"""
Tests for PerformanceMonitor and ScheduleQualityTracker.
"""

import json
import tempfile
import unittest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from nurse_scheduler.monitoring import PerformanceMonitor, ScheduleQualityTracker


def score(fairness_index, violations=0, understaffed=0):
    return {
        'fairness_index': fairness_index,
        'breakdown': {'stdDev': 1.0, 'violations': violations, 'understaffed_slots': understaffed},
    }


class TestPerformanceMonitor(unittest.TestCase):
    """Test cases for PerformanceMonitor."""

    def test_record_pass(self):
        """Test best results are tracked across passes."""
        monitor = PerformanceMonitor()
        monitor.record_pass(score(70.0, violations=4), 0.5)
        monitor.record_pass(score(85.0, violations=6), 1.5)
        monitor.record_pass(score(80.0, violations=2))

        summary = monitor.get_summary()
        self.assertEqual(summary['passes_completed'], 3)
        self.assertEqual(summary['best_fairness_index'], 85.0)
        self.assertEqual(summary['fewest_violations'], 2)
        self.assertEqual(summary['avg_pass_time_seconds'], 1.0)
        self.assertEqual(summary['slowest_pass_seconds'], 1.5)
        self.assertFalse(summary['budget_exhausted'])

    def test_timer(self):
        """Test timer durations are recorded."""
        monitor = PerformanceMonitor()
        duration = monitor.end_timer(monitor.start_timer())

        self.assertGreaterEqual(duration, 0)
        self.assertEqual(len(monitor.metrics['pass_times']), 1)

    def test_budget_flag(self):
        """Test the budget flag."""
        monitor = PerformanceMonitor()
        monitor.record_budget_exhausted()
        self.assertTrue(monitor.get_summary()['budget_exhausted'])

    def test_save_session_log(self):
        """Test the session log is written as JSON."""
        with tempfile.TemporaryDirectory() as tmpdir:
            monitor = PerformanceMonitor(os.path.join(tmpdir, "logs"))
            monitor.record_pass(score(90.0), 0.1)
            log_file = monitor.save_session_log()

            with open(log_file) as f:
                data = json.load(f)

        self.assertEqual(data['passes_completed'], 1)
        self.assertIn('session_start', data)
        self.assertIn('session_end', data)


class TestScheduleQualityTracker(unittest.TestCase):
    """Test cases for ScheduleQualityTracker."""

    def test_insufficient_data(self):
        """Test a single pass cannot show a trend."""
        tracker = ScheduleQualityTracker()
        tracker.add_result(0, score(80.0))
        self.assertEqual(tracker.get_improvement_trend(), {"status": "insufficient_data"})

    def test_trend(self):
        """Test trend, best pass and spread."""
        tracker = ScheduleQualityTracker()
        for index, value in enumerate([60.0, 70.0, 80.0, 90.0]):
            tracker.add_result(index, score(value))

        trend = tracker.get_improvement_trend()
        self.assertEqual(trend['status'], 'analyzed')
        self.assertEqual(trend['total_passes'], 4)
        self.assertEqual(trend['best_pass'], 3)
        self.assertEqual(trend['spread'], 30.0)
        # last three average 80, first three average 70
        self.assertEqual(trend['fairness_trend'], 10.0)

    def test_mark_selected(self):
        """Test exactly one record is marked selected."""
        tracker = ScheduleQualityTracker()
        for index in range(3):
            tracker.add_result(index, score(50.0 + index))
        tracker.mark_selected(1)

        self.assertEqual([r['selected'] for r in tracker.history], [False, True, False])

    def test_save_history(self):
        """Test history is written with a summary."""
        tracker = ScheduleQualityTracker()
        tracker.add_result(0, score(75.0, violations=3))

        with tempfile.TemporaryDirectory() as tmpdir:
            filename = tracker.save_history(os.path.join(tmpdir, "history.json"))
            with open(filename) as f:
                data = json.load(f)

        self.assertEqual(data['summary']['total_passes'], 1)
        self.assertEqual(data['summary']['best_fairness_index'], 75.0)
        self.assertEqual(data['summary']['fewest_violations'], 3)


if __name__ == '__main__':
    unittest.main()
