"""
Nurse Shift Scheduler - Candidate Selector (multi-pass driver)

Runs the single-pass generator several times with different tie-break jitter
and keeps the candidate with the strictly highest fairness index. Passes are
independent: each gets its own PassState and its own random.Random, so they
can run on a thread pool. A wall-clock budget stops further passes once
exceeded; the first pass always completes.
"""

import random
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import List, Optional, Tuple

from .config import GenerationConfig, NurseSchedulerConfig, SchedulingConfig
from .dates import parse_date, parse_year_month
from .exceptions import ScheduleInputError
from .fairness import ScheduleScorer
from .generator import ScheduleGenerator
from .models import Schedule, SchedulerContext, ShiftType
from .monitoring import PerformanceMonitor, ScheduleQualityTracker


def check_preconditions(context: SchedulerContext):
    """Reject malformed input before any pass runs"""
    if not context.nurses:
        raise ScheduleInputError("At least one nurse is required to generate a schedule")

    try:
        parse_year_month(context.year_month)
    except ValueError as e:
        raise ScheduleInputError(str(e))

    ids = [n.id for n in context.nurses]
    duplicates = sorted({nid for nid in ids if ids.count(nid) > 1})
    if duplicates:
        raise ScheduleInputError(f"Duplicate nurse ids: {', '.join(duplicates)}")

    settings = context.settings
    staff = settings.simultaneous_staff
    headcounts = {'day': staff.day, 'evening': staff.evening, 'night': staff.night}
    negative = [name for name, count in headcounts.items() if count < 0]
    if negative:
        raise ScheduleInputError(f"Required headcount cannot be negative: {', '.join(negative)}")
    if sum(headcounts.values()) == 0:
        raise ScheduleInputError("Required headcount is zero for every shift type")

    if settings.max_consecutive_work_days < 1:
        raise ScheduleInputError("max_consecutive_work_days must be at least 1")
    if settings.max_consecutive_night_days < 1:
        raise ScheduleInputError("max_consecutive_night_days must be at least 1")
    if settings.monthly_off_days < 0:
        raise ScheduleInputError("monthly_off_days cannot be negative")
    if settings.charge_settings.intensity_weight < 1.0:
        raise ScheduleInputError("Charge intensity weight must be at least 1.0")
    if settings.charge_settings.min_years_required < 0:
        raise ScheduleInputError("Charge minimum years cannot be negative")

    for nurse in context.nurses:
        selected = nurse.personal_rules.selected_shifts_only or ()
        unknown = [s for s in selected if not isinstance(s, ShiftType)]
        if unknown:
            raise ScheduleInputError(f"Nurse {nurse.id} selects unknown shift types: {unknown}")

        for date_str in nurse.personal_rules.vacation_dates:
            try:
                parse_date(date_str)
            except (TypeError, ValueError):
                raise ScheduleInputError(
                    f"Nurse {nurse.id} has a malformed vacation date {date_str!r} (expected YYYY-MM-DD)"
                )

    for date_str in context.holidays:
        try:
            parse_date(date_str)
        except (TypeError, ValueError):
            raise ScheduleInputError(f"Malformed holiday date {date_str!r} (expected YYYY-MM-DD)")


class CandidateSelector:
    """
    Monte-Carlo style search over heuristic passes.

    The best candidate is the first one whose fairness index no later
    candidate strictly beats; candidates are compared in pass order.
    """

    def __init__(self, context: SchedulerContext,
                 config: Optional[NurseSchedulerConfig] = None,
                 monitor: Optional[PerformanceMonitor] = None,
                 tracker: Optional[ScheduleQualityTracker] = None,
                 pre_passes: Optional[List] = None,
                 verbose: bool = False):
        config = config or NurseSchedulerConfig()
        self.context = context
        self.generation: GenerationConfig = config.generation
        self.scheduling: SchedulingConfig = config.scheduling
        self.monitor = monitor
        self.tracker = tracker
        self.verbose = verbose
        self.scorer = ScheduleScorer()
        self.generator = ScheduleGenerator(context, self.scheduling, pre_passes=pre_passes, verbose=verbose)

    def pass_seeds(self, rng: Optional[random.Random] = None) -> List[int]:
        """One seed per pass, drawn up front so serial and threaded runs agree"""
        if rng is None:
            rng = random.Random(self.generation.seed)
        return [rng.randrange(2 ** 32) for _ in range(max(1, self.generation.num_passes))]

    def run(self, rng: Optional[random.Random] = None) -> Schedule:
        seeds = self.pass_seeds(rng)
        if self.generation.max_workers > 1 and len(seeds) > 1:
            results = self._run_threaded(seeds)
        else:
            results = self._run_serial(seeds)
        return self._select(results, len(seeds))

    def _run_pass(self, pass_index: int, seed: int) -> Tuple[int, int, Schedule, float]:
        start = time.perf_counter()
        schedule = self.generator.generate(random.Random(seed))
        return pass_index, seed, schedule, time.perf_counter() - start

    def _run_serial(self, seeds: List[int]) -> List[Tuple[int, int, Schedule, float]]:
        deadline = time.monotonic() + self.generation.max_generation_time_seconds
        results = []
        for pass_index, seed in enumerate(seeds):
            if results and time.monotonic() >= deadline:
                self._budget_exhausted(len(results), len(seeds))
                break
            results.append(self._run_pass(pass_index, seed))
        return results

    def _run_threaded(self, seeds: List[int]) -> List[Tuple[int, int, Schedule, float]]:
        executor = ThreadPoolExecutor(max_workers=self.generation.max_workers)
        try:
            futures = [executor.submit(self._run_pass, i, seed) for i, seed in enumerate(seeds)]
            done, pending = wait(futures, timeout=self.generation.max_generation_time_seconds)
            if not done:
                done, pending = wait(futures, return_when=FIRST_COMPLETED)
            if pending:
                self._budget_exhausted(len(done), len(seeds))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return sorted((f.result() for f in done), key=lambda r: r[0])

    def _budget_exhausted(self, completed: int, planned: int):
        if self.monitor:
            self.monitor.record_budget_exhausted()
        if self.verbose:
            print(f"⏳ Time budget of {self.generation.max_generation_time_seconds}s reached "
                  f"after {completed}/{planned} passes - keeping best so far")

    def _select(self, results, planned: int) -> Schedule:
        best = None
        best_score = None
        best_meta = None

        for pass_index, seed, schedule, duration in results:
            score_result = self.scorer.score(schedule)

            if self.monitor:
                self.monitor.record_pass(score_result, duration)
            if self.tracker:
                self.tracker.add_result(pass_index, score_result)
            if self.verbose:
                print(f"  Pass {pass_index + 1}/{planned}: fairness index {score_result['fairness_index']}, "
                      f"{score_result['breakdown']['violations']} violations ({duration:.2f}s)")

            if self.scorer.is_better(score_result, best_score):
                best, best_score = schedule, score_result
                best_meta = (pass_index, seed)

        if self.tracker:
            self.tracker.mark_selected(best_meta[0])

        best.metadata.update({
            'pass_index': best_meta[0],
            'seed': best_meta[1],
            'passes_run': len(results),
            'passes_planned': planned,
            'score': best_score['breakdown'],
        })

        if self.verbose:
            print(f"✨ Selected pass {best_meta[0] + 1}: fairness index {best_score['fairness_index']}")

        return best


def generate_schedule(context: SchedulerContext,
                      config: Optional[NurseSchedulerConfig] = None,
                      rng: Optional[random.Random] = None,
                      monitor: Optional[PerformanceMonitor] = None,
                      tracker: Optional[ScheduleQualityTracker] = None,
                      verbose: bool = False) -> Schedule:
    """
    Generate the best of several candidate schedules for one month.

    Raises ScheduleInputError for malformed input; rule violations and
    understaffing are reported on the returned Schedule instead.
    """
    check_preconditions(context)
    selector = CandidateSelector(context, config, monitor=monitor, tracker=tracker, verbose=verbose)
    return selector.run(rng)
