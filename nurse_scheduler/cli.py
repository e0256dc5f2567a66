"""
Nurse Shift Scheduler command line

Loads a roster, organization settings and holidays from JSON, runs the
multi-pass generator and saves the selected schedule.

Run: python -m nurse_scheduler --month 2026-02
"""

import argparse
import json
import os
import sys
from datetime import datetime
from typing import Dict, List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from .analysis import ScheduleAnalyzer
from .config import NurseSchedulerConfig, load_config
from .exceptions import ConfigurationError, ScheduleInputError
from .fairness import rank_by_fairness
from .models import Schedule, ShiftType
from .monitoring import PerformanceMonitor, ScheduleQualityTracker
from .schemas import GenerateScheduleInput
from .selector import generate_schedule

# Load environment variables
load_dotenv()

EXIT_INVALID_INPUT = 2


# Logging utility
class TeeLogger:
    """Logs to both console and file"""
    def __init__(self, filename):
        self.terminal = sys.stdout
        self.log = open(filename, 'w', encoding='utf-8')

    def write(self, message):
        self.terminal.write(message)
        self.log.write(message)

    def flush(self):
        self.terminal.flush()
        self.log.flush()

    def close(self):
        self.log.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nurse_scheduler",
        description="Generate a fair monthly nurse shift schedule"
    )
    parser.add_argument("--month", required=True, help="Month to schedule (YYYY-MM)")
    parser.add_argument("--config", help="Configuration JSON (default: config/scheduler_config.json)")
    parser.add_argument("--nurses", help="Roster JSON file")
    parser.add_argument("--organization", help="Organization settings JSON file")
    parser.add_argument("--holidays", help="Holiday list JSON file")
    parser.add_argument("--passes", type=int, help="Number of candidate passes")
    parser.add_argument("--seed", type=int, help="Seed for reproducible runs")
    parser.add_argument("--workers", type=int, help="Passes to run in parallel")
    parser.add_argument("--time-budget", type=float, help="Wall-clock budget in seconds")
    parser.add_argument("--output", help="Directory to save the schedule JSON")
    parser.add_argument("--log-dir", help="Directory for run and performance logs")
    parser.add_argument("--no-log", action="store_true", help="Do not tee output to a log file")
    parser.add_argument("--quiet", action="store_true", help="Only print the final summary")
    return parser


def apply_arguments(config: NurseSchedulerConfig, args: argparse.Namespace) -> NurseSchedulerConfig:
    """Command line flags override file and environment configuration"""
    if args.nurses:
        config.nurses_file = args.nurses
    if args.organization:
        config.organization_file = args.organization
    if args.holidays:
        config.holidays_file = args.holidays
    if args.output:
        config.output_directory = args.output
    if args.log_dir:
        config.monitoring.log_directory = args.log_dir
    if args.passes is not None:
        config.generation.num_passes = args.passes
    if args.seed is not None:
        config.generation.seed = args.seed
    if args.workers is not None:
        config.generation.max_workers = args.workers
    if args.time_budget is not None:
        config.generation.max_generation_time_seconds = args.time_budget
    return config


def _load_json(path: str):
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_input(config: NurseSchedulerConfig, year_month: str) -> GenerateScheduleInput:
    """
    Read roster, organization and holiday files into a validated request.

    The organization file may hold the settings directly or wrap them as
    {"organizationId": ..., "settings": {...}}.
    """
    organization = _load_json(config.organization_file)
    if "settings" in organization:
        organization_id = organization.get("organizationId", "")
        settings = organization["settings"]
    else:
        organization_id = ""
        settings = organization

    holidays = []
    if config.holidays_file:
        holidays = _load_json(config.holidays_file)

    return GenerateScheduleInput.model_validate({
        "organizationId": organization_id,
        "yearMonth": year_month,
        "settings": settings,
        "nurses": _load_json(config.nurses_file),
        "holidays": holidays,
    })


def save_schedule(schedule: Schedule, analysis: Dict, output_directory: str, timestamp: str) -> str:
    os.makedirs(output_directory, exist_ok=True)
    schedule_file = os.path.join(output_directory, f"schedule_{schedule.year_month}_{timestamp}.json")

    with open(schedule_file, 'w', encoding='utf-8') as f:
        json.dump({
            'schedule': schedule.to_dict(),
            'timestamp': timestamp,
            'ranking': rank_by_fairness(schedule.statistics),
            'analysis': analysis,
        }, f, indent=2)

    return schedule_file


def print_schedule_summary(schedule: Schedule, analysis: Dict, names: Dict[str, str]):
    fairness = schedule.fairness

    print("\n" + "="*60)
    print(f"📅 SCHEDULE {schedule.year_month}")
    print("="*60)
    print(f"Selected pass: {schedule.metadata.get('pass_index', 0) + 1} "
          f"of {schedule.metadata.get('passes_run', 1)}")
    print(f"Fairness index: {fairness.get('fairnessIndex')}")
    print(f"Weighted hours: avg {fairness.get('average')}, std {fairness.get('stdDev')}, "
          f"range {fairness.get('min')}-{fairness.get('max')}")

    charge = analysis['charge_distribution']
    print(f"Charge distribution: avg {charge['average']}, std {charge['stdDev']} "
          f"({'balanced' if charge['isBalanced'] else 'unbalanced'})")

    print(f"\nViolations: {analysis['total_violations']}")
    for rule, count in analysis['violations_by_rule'].items():
        print(f"  {rule}: {count}")

    if analysis['off_day_shortfalls']:
        print(f"\n⚠️  {len(analysis['off_day_shortfalls'])} nurse(s) below the monthly off-day target")

    print(f"\n{'Nurse':<24}{'Day':>5}{'Eve':>5}{'Ngt':>5}{'Chg':>5}{'Off':>5}{'Weighted':>10}{'Score':>8}")
    for nurse_id, stats in schedule.statistics.items():
        counts = stats.shift_counts
        score = "-" if stats.dedicated else f"{stats.fairness_score:.1f}"
        print(f"{names.get(nurse_id, nurse_id)[:23]:<24}"
              f"{counts[ShiftType.DAY.value]:>5}{counts[ShiftType.EVENING.value]:>5}"
              f"{counts[ShiftType.NIGHT.value]:>5}{counts[ShiftType.CHARGE.value]:>5}"
              f"{counts[ShiftType.OFF.value]:>5}{stats.weighted_hours:>10.1f}{score:>8}")
    print("="*60)


def run(args: argparse.Namespace) -> int:
    try:
        config = apply_arguments(load_config(args.config), args)
    except ConfigurationError as e:
        print(f"✗ {e}")
        return EXIT_INVALID_INPUT

    verbose = not args.quiet

    try:
        schedule_input = load_input(config, args.month)
    except (OSError, json.JSONDecodeError) as e:
        print(f"✗ Could not read input files: {e}")
        return 1
    except ValidationError as e:
        print(f"✗ Invalid input:\n{e}")
        return EXIT_INVALID_INPUT

    context = schedule_input.to_context()

    monitor = None
    if config.monitoring.enable_monitoring:
        monitor = PerformanceMonitor(config.monitoring.log_directory)
    tracker = ScheduleQualityTracker()

    if verbose:
        print(f"Generating {context.year_month} for {len(context.nurses)} nurses "
              f"({config.generation.num_passes} passes, {config.generation.max_workers} worker(s))")

    try:
        schedule = generate_schedule(context, config, monitor=monitor, tracker=tracker, verbose=verbose)
    except ScheduleInputError as e:
        print(f"✗ Invalid input: {e}")
        return EXIT_INVALID_INPUT

    analysis = ScheduleAnalyzer(context).analyze(schedule)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    schedule_file = save_schedule(schedule, analysis, config.output_directory, timestamp)

    names = {n.id: n.display_name for n in context.nurses}
    print_schedule_summary(schedule, analysis, names)
    print(f"✓ Schedule saved to: {schedule_file}")

    if monitor:
        if config.monitoring.print_realtime_status and verbose:
            monitor.print_realtime_status()
        if config.monitoring.save_session_logs:
            print(f"✓ Performance log saved to: {monitor.save_session_log()}")

    if config.monitoring.save_session_logs:
        history_file = os.path.join(config.monitoring.log_directory, f"quality_history_{timestamp}.json")
        print(f"✓ Pass history saved to: {tracker.save_history(history_file)}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.no_log:
        return run(args)

    # Setup logging to file
    log_dir = args.log_dir or os.getenv("SCHEDULER_LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"scheduler_run_{timestamp}.txt")
    tee = TeeLogger(log_file)
    sys.stdout = tee

    try:
        print(f"Logging to: {log_file}")
        return run(args)
    finally:
        # Restore stdout and close log file
        sys.stdout = tee.terminal
        tee.close()


if __name__ == "__main__":
    sys.exit(main())
