"""
Performance Monitoring for Nurse Shift Scheduler

Tracks pass timings and candidate quality across multi-pass generation.
"""

import time
import json
import os
from typing import Dict, Optional
from datetime import datetime


class PerformanceMonitor:
    """Monitors and logs performance metrics"""

    def __init__(self, log_dir: str = "logs"):
        self.log_dir = log_dir
        self.session_start = datetime.now()
        self.metrics = {
            'pass_times': [],
            'passes_completed': 0,
            'schedules_generated': 0,
            'best_fairness_index': None,
            'fewest_violations': None,
            'budget_exhausted': False,
        }

    def start_timer(self) -> float:
        """Start timing an operation"""
        return time.perf_counter()

    def end_timer(self, start_time: float) -> float:
        """End timing and record duration of one pass"""
        duration = time.perf_counter() - start_time
        self.metrics['pass_times'].append(duration)
        return duration

    def record_pass(self, score_result: Dict, duration: Optional[float] = None):
        """Record one generated candidate and its quality"""
        if duration is not None:
            self.metrics['pass_times'].append(duration)
        self.metrics['passes_completed'] += 1
        self.metrics['schedules_generated'] += 1

        fairness_index = score_result.get('fairness_index', 0)
        violations = score_result.get('breakdown', {}).get('violations', 0)

        # Track best results
        best = self.metrics['best_fairness_index']
        if best is None or fairness_index > best:
            self.metrics['best_fairness_index'] = fairness_index
        fewest = self.metrics['fewest_violations']
        if fewest is None or violations < fewest:
            self.metrics['fewest_violations'] = violations

    def record_budget_exhausted(self):
        self.metrics['budget_exhausted'] = True

    def get_summary(self) -> Dict:
        """Get performance summary"""
        session_duration = (datetime.now() - self.session_start).total_seconds()
        pass_times = self.metrics['pass_times']

        avg_pass_time = sum(pass_times) / len(pass_times) if pass_times else 0

        return {
            'session_duration_seconds': round(session_duration, 2),
            'passes_completed': self.metrics['passes_completed'],
            'schedules_generated': self.metrics['schedules_generated'],
            'avg_pass_time_seconds': round(avg_pass_time, 3),
            'slowest_pass_seconds': round(max(pass_times), 3) if pass_times else 0,
            'best_fairness_index': self.metrics['best_fairness_index'],
            'fewest_violations': self.metrics['fewest_violations'],
            'budget_exhausted': self.metrics['budget_exhausted'],
        }

    def save_session_log(self) -> str:
        """Save session metrics to file"""
        os.makedirs(self.log_dir, exist_ok=True)
        timestamp = self.session_start.strftime("%Y%m%d_%H%M%S")
        log_file = os.path.join(self.log_dir, f"performance_{timestamp}.json")

        summary = self.get_summary()
        summary['session_start'] = self.session_start.isoformat()
        summary['session_end'] = datetime.now().isoformat()

        with open(log_file, 'w') as f:
            json.dump(summary, f, indent=2)

        return log_file

    def print_realtime_status(self):
        """Print current performance status"""
        summary = self.get_summary()

        print("\n" + "="*60)
        print("🔍 PERFORMANCE MONITOR")
        print("="*60)
        print(f"Session Duration: {summary['session_duration_seconds']}s")
        print(f"Passes Completed: {summary['passes_completed']}")
        if summary['budget_exhausted']:
            print("⏳ Time budget reached before all passes ran")
        print(f"\n📊 BEST RESULTS:")
        print(f"  Fairness Index: {summary['best_fairness_index']}")
        print(f"  Fewest Violations: {summary['fewest_violations']}")
        print(f"\n⚡ EFFICIENCY:")
        print(f"  Avg Pass Time: {summary['avg_pass_time_seconds']}s")
        print(f"  Slowest Pass: {summary['slowest_pass_seconds']}s")
        print("="*60)


class ScheduleQualityTracker:
    """Tracks candidate quality pass by pass"""

    def __init__(self):
        self.history = []

    def add_result(self, pass_index: int, score_result: Dict, selected: bool = False):
        """Add a candidate result to history"""
        breakdown = score_result.get('breakdown', {})
        self.history.append({
            'pass_index': pass_index,
            'timestamp': datetime.now().isoformat(),
            'fairness_index': score_result.get('fairness_index', 0),
            'std_dev': breakdown.get('stdDev', 0),
            'violations': breakdown.get('violations', 0),
            'understaffed_slots': breakdown.get('understaffed_slots', 0),
            'selected': selected,
        })

    def mark_selected(self, pass_index: int):
        for record in self.history:
            record['selected'] = record['pass_index'] == pass_index

    def get_improvement_trend(self) -> Dict:
        """Analyze how candidate quality moved across passes"""
        if len(self.history) < 2:
            return {"status": "insufficient_data"}

        ordered = sorted(self.history, key=lambda r: r['pass_index'])
        first_batch = ordered[:3]
        last_batch = ordered[-3:]

        avg_early = sum(r['fairness_index'] for r in first_batch) / len(first_batch)
        avg_late = sum(r['fairness_index'] for r in last_batch) / len(last_batch)
        best = max(ordered, key=lambda r: r['fairness_index'])

        return {
            'status': 'analyzed',
            'fairness_trend': round(avg_late - avg_early, 2),
            'total_passes': len(ordered),
            'best_pass': best['pass_index'],
            'spread': round(best['fairness_index'] - min(r['fairness_index'] for r in ordered), 2),
        }

    def save_history(self, filename: Optional[str] = None) -> str:
        """Save quality history to file"""
        if not filename:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"logs/quality_history_{timestamp}.json"

        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(filename, 'w') as f:
            json.dump({
                'history': self.history,
                'trend_analysis': self.get_improvement_trend(),
                'summary': {
                    'total_passes': len(self.history),
                    'best_fairness_index': max((r['fairness_index'] for r in self.history), default=None),
                    'fewest_violations': min((r['violations'] for r in self.history), default=None),
                }
            }, f, indent=2)

        return filename
