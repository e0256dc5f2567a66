"""
Nurse Shift Scheduler - Schedule Generator (single pass)

Greedy month-long assignment with fairness-driven candidate ordering:

Phase 0: empty DailyAssignment per date, vacation days pre-placed in off
         (then any configured pre-passes, e.g. dedicated off blocks)
Phase 1: dedicated night/charge nurses placed on their shift type
Phase 2: per date, slots filled in order night, charge, evening, day; when
         no legal candidate remains a relaxed fallback places anyone who does
         not break a forbidden transition or charge eligibility, recording
         the broken rule as a Violation
Phase 3: everyone still unplaced on a date is off
Phase 4: per-nurse statistics and fairness scores

Each call to generate() works on its own PassState, so one generator can serve
several concurrent passes as long as each gets its own random source.
"""

import math
import random
from typing import Dict, List, Optional, Sequence

from .config import SchedulingConfig
from .dates import day_type, format_date, get_days_in_month, parse_date, shift_date
from .fairness import calculate_overall_fairness, score_statistics
from .models import (
    DailyAssignment, DedicatedRole, Nurse, NurseScore, NurseStatistics,
    SHIFT_TIMES, Schedule, SchedulerContext, ShiftType, Violation, WEIGHTS
)
from .validator import RuleValidator

# Night and charge have the tightest eligibility and transition rules
FILL_ORDER = (ShiftType.NIGHT, ShiftType.CHARGE, ShiftType.EVENING, ShiftType.DAY)


class PassState:
    """Mutable arena owned by exactly one generation pass"""

    def __init__(self, context: SchedulerContext, dates: Sequence[str]):
        self.dates = list(dates)
        self.assignments: Dict[str, DailyAssignment] = {d: DailyAssignment() for d in self.dates}
        self.scores: Dict[str, NurseScore] = {
            nurse.id: NurseScore(nurse.id, years_of_experience=nurse.years_of_experience)
            for nurse in context.nurses
        }
        self.violations: List[Violation] = []


def weighted_hours_for(shift_type: ShiftType, date_str: str, holidays, charge_weight: float) -> float:
    """Weighted hours one shift adds; off adds nothing"""
    if not shift_type.is_work:
        return 0.0
    weight = WEIGHTS[day_type(parse_date(date_str), holidays)][shift_type]
    if shift_type is ShiftType.CHARGE:
        weight *= charge_weight
    return SHIFT_TIMES[shift_type].hours * weight


def median_years(nurses: Sequence[Nurse]) -> float:
    if not nurses:
        return 0
    years = sorted(n.years_of_experience for n in nurses)
    mid = len(years) // 2
    if len(years) % 2 == 0:
        return (years[mid - 1] + years[mid]) / 2
    return years[mid]


class DedicatedOffBlockPlanner:
    """
    Pre-pass granting dedicated-role nurses two-day off blocks spread evenly
    across the month, so they are not scheduled on their shift every day.

    The number of off days targeted is the organization's monthly off-day
    setting, or `off_ratio` of the month when that is unset. Vacation days
    already count toward the target. Blocks are staggered per nurse so
    dedicated colleagues are not all off together, and never run past the
    last day of the month. Days a block loses to vacation are made up one at
    a time, on the open day furthest from the nurse's other days off.
    """

    def __init__(self, off_ratio: float = 0.3, block_length: int = 2):
        self.off_ratio = off_ratio
        self.block_length = block_length

    def target_off_days(self, context: SchedulerContext, num_days: int) -> int:
        if context.settings.monthly_off_days > 0:
            return min(num_days, context.settings.monthly_off_days)
        return int(round(num_days * self.off_ratio))

    def apply(self, state: PassState, context: SchedulerContext):
        num_days = len(state.dates)
        target = self.target_off_days(context, num_days)
        dedicated = [n for n in context.nurses if n.is_dedicated]
        block_length = max(1, min(self.block_length, num_days))

        for index, nurse in enumerate(dedicated):
            off_positions = {i for i, d in enumerate(state.dates) if nurse.id in state.assignments[d].off}
            remaining = target - len(off_positions)
            if remaining <= 0:
                continue

            blocks = math.ceil(remaining / block_length)
            spacing = num_days / blocks
            stagger = (index * block_length) % max(1, int(spacing))

            for block in range(blocks):
                start = min(int(block * spacing) + stagger, num_days - block_length)
                for position in range(start, start + block_length):
                    if remaining <= 0:
                        break
                    if self._grant_off(state, nurse.id, position):
                        off_positions.add(position)
                        remaining -= 1

            # Blocks that landed on vacation or other pre-placed days come up short
            while remaining > 0:
                position = self._furthest_from_off(state, nurse.id, off_positions)
                if position is None:
                    break
                self._grant_off(state, nurse.id, position)
                off_positions.add(position)
                remaining -= 1

    @staticmethod
    def _grant_off(state: PassState, nurse_id: str, position: int) -> bool:
        daily = state.assignments[state.dates[position]]
        if daily.is_assigned(nurse_id):
            return False
        daily.add(ShiftType.OFF, nurse_id)
        return True

    @staticmethod
    def _furthest_from_off(state: PassState, nurse_id: str, off_positions) -> Optional[int]:
        open_positions = [
            i for i, d in enumerate(state.dates) if not state.assignments[d].is_assigned(nurse_id)
        ]
        if not open_positions:
            return None
        if not off_positions:
            return open_positions[0]
        return max(open_positions, key=lambda i: (min(abs(i - p) for p in off_positions), -i))


class ScheduleGenerator:
    """
    Single-pass heuristic generator for one organization and month.

    Candidate ordering per slot (first difference wins):
    1. charge slots: dedicated charge nurses, then fewest prior charge shifts
    2. continuity: worked the previous day before coming back from a day off
    3. weighted hours ascending, plus random jitter of at most half of
       `tie_threshold_hours` so only near-ties can swap places
    4. keeps the slot's average experience nearest the roster median
    """

    def __init__(self, context: SchedulerContext, config: Optional[SchedulingConfig] = None,
                 pre_passes: Optional[List] = None, verbose: bool = False):
        self.context = context
        self.settings = context.settings
        self.config = config or SchedulingConfig()
        self.validator = RuleValidator(self.settings, self.config.consecutive_lookback_days)
        self.verbose = verbose

        self.nurses = list(context.nurses)
        self.nurses_by_id = {n.id: n for n in self.nurses}
        self.dates = [format_date(d) for d in get_days_in_month(context.year_month)]
        self.median_years = median_years(self.nurses)

        if pre_passes is None:
            pre_passes = []
            if self.config.enable_dedicated_off_blocks:
                pre_passes.append(DedicatedOffBlockPlanner(self.config.dedicated_off_ratio))
        self.pre_passes = pre_passes

    def generate(self, rng: Optional[random.Random] = None) -> Schedule:
        """Run one full pass. `rng` drives tie-break jitter; None disables jitter."""
        state = PassState(self.context, self.dates)

        self._initialize(state)
        for pre_pass in self.pre_passes:
            pre_pass.apply(state, self.context)
        self._assign_dedicated(state)

        for date_str in self.dates:
            for shift_type in FILL_ORDER:
                self._fill_slot(state, date_str, shift_type, rng)
            self._assign_residual_off(state, date_str)

        return self._build_schedule(state)

    # Phase 0

    def _initialize(self, state: PassState):
        for date_str in self.dates:
            for nurse in self.nurses:
                if nurse.is_on_vacation(date_str):
                    state.assignments[date_str].add(ShiftType.OFF, nurse.id)

    # Phase 1

    def _assign_dedicated(self, state: PassState):
        night_dedicated = [n for n in self.nurses if n.dedicated_role is DedicatedRole.NIGHT]
        charge_dedicated = [n for n in self.nurses if n.dedicated_role is DedicatedRole.CHARGE]

        for date_str in self.dates:
            daily = state.assignments[date_str]

            for nurse in night_dedicated:
                if daily.is_assigned(nurse.id):
                    continue
                if self.validator.is_valid(nurse, date_str, ShiftType.NIGHT, state.assignments):
                    self._assign(state, nurse, date_str, ShiftType.NIGHT)

            # One charge slot per day, lowest weighted hours first
            if daily.charge:
                continue
            available = [
                n for n in charge_dedicated
                if not daily.is_assigned(n.id)
                and self.validator.is_valid(n, date_str, ShiftType.CHARGE, state.assignments)
            ]
            if available:
                available.sort(key=lambda n: state.scores[n.id].weighted_hours)
                self._assign(state, available[0], date_str, ShiftType.CHARGE)

    # Phase 2

    def _fill_slot(self, state: PassState, date_str: str, shift_type: ShiftType,
                   rng: Optional[random.Random]):
        daily = state.assignments[date_str]
        required = self.settings.required_count(shift_type)
        if len(daily.ids(shift_type)) >= required:
            return

        candidates = self.eligible_candidates(state, date_str, shift_type, rng)
        for nurse in candidates[:required - len(daily.ids(shift_type))]:
            self._assign(state, nurse, date_str, shift_type)

        if len(daily.ids(shift_type)) < required:
            self._fill_relaxed(state, date_str, shift_type, required)

        assigned = len(daily.ids(shift_type))
        if assigned < required:
            state.violations.append(Violation(
                nurse_id=None,
                date=date_str,
                rule='understaffed',
                reason=f"{shift_type.label} needs {required} nurse(s) but only {assigned} could be assigned.",
                shift_type=shift_type,
            ))

    def eligible_candidates(self, state: PassState, date_str: str, shift_type: ShiftType,
                            rng: Optional[random.Random] = None) -> List[Nurse]:
        """Unplaced nurses that may legally take the slot, best candidate first"""
        daily = state.assignments[date_str]
        min_years = self.settings.charge_settings.min_years_required
        eligible = []

        for nurse in self.nurses:
            if daily.is_assigned(nurse.id):
                continue
            role = nurse.dedicated_role
            if role is not None and role.shift_type is not shift_type:
                continue
            if not nurse.allows_shift(shift_type):
                continue
            if shift_type is ShiftType.CHARGE and nurse.years_of_experience < min_years:
                continue
            if self.validator.is_valid(nurse, date_str, shift_type, state.assignments):
                eligible.append(nurse)

        return self._sort_candidates(state, date_str, shift_type, eligible, rng)

    def _sort_candidates(self, state: PassState, date_str: str, shift_type: ShiftType,
                         candidates: List[Nurse], rng: Optional[random.Random]) -> List[Nurse]:
        # Jitter stays within half the tie threshold, so nurses further apart
        # than the threshold always keep their weighted-hours order
        spread = min(self.config.jitter_hours, self.config.tie_threshold_hours) / 2
        if rng is None:
            spread = 0.0
        previous = state.assignments.get(shift_date(date_str, -1))
        slot_years = [self.nurses_by_id[nid].years_of_experience for nid in state.assignments[date_str].ids(shift_type)]

        def sort_key(nurse: Nurse):
            score = state.scores[nurse.id]

            if shift_type is not ShiftType.CHARGE:
                charge_rank = (0, 0)
            elif nurse.dedicated_role is DedicatedRole.CHARGE:
                charge_rank = (0, 0)
            else:
                charge_rank = (1, score.charge_count)

            rested = False
            if self.config.prefer_continuity and previous is not None:
                rested = not previous.is_working(nurse.id)

            noisy_hours = score.weighted_hours + (rng.uniform(-spread, spread) if spread else 0.0)

            years = slot_years + [nurse.years_of_experience]
            experience_gap = abs(sum(years) / len(years) - self.median_years)

            return (charge_rank, rested, noisy_hours, experience_gap)

        return sorted(candidates, key=sort_key)

    def _fill_relaxed(self, state: PassState, date_str: str, shift_type: ShiftType, required: int):
        """
        Coverage fallback: place any unplaced nurse, recording the rule they
        break. Forbidden transitions and charge eligibility are never forced.
        """
        daily = state.assignments[date_str]
        min_years = self.settings.charge_settings.min_years_required

        remaining = []
        for nurse in self.nurses:
            if daily.is_assigned(nurse.id):
                continue
            if shift_type is ShiftType.CHARGE and nurse.years_of_experience < min_years:
                continue
            transition = self.validator.check_forbidden_transition(
                nurse.id, date_str, shift_type, state.assignments
            )
            if not transition.valid:
                continue
            remaining.append(nurse)

        # Generalists before dedicated nurses, then lightest load
        remaining.sort(key=lambda n: (n.is_dedicated, state.scores[n.id].weighted_hours))

        still_needed = required - len(daily.ids(shift_type))
        if remaining and still_needed > 0 and self.verbose:
            print(f"🚨 Relaxed placement for {shift_type.label} on {date_str}: "
                  f"{min(still_needed, len(remaining))} of {still_needed} from {len(remaining)} unplaced nurses")

        for nurse in remaining[:still_needed]:
            validation = self.validator.validate(nurse, date_str, shift_type, state.assignments)
            if not validation.valid:
                state.violations.append(Violation(
                    nurse_id=nurse.id,
                    date=date_str,
                    rule=validation.violated_rule or 'unknown',
                    reason=validation.reason or "Rule violation",
                    shift_type=shift_type,
                ))
            elif nurse.dedicated_role is not None and nurse.dedicated_role.shift_type is not shift_type:
                state.violations.append(Violation(
                    nurse_id=nurse.id,
                    date=date_str,
                    rule='dedicatedRole',
                    reason=f"Dedicated {nurse.dedicated_role.value} nurse placed on {shift_type.label}.",
                    shift_type=shift_type,
                ))
            self._assign(state, nurse, date_str, shift_type)

    # Phase 3

    def _assign_residual_off(self, state: PassState, date_str: str):
        daily = state.assignments[date_str]
        for nurse in self.nurses:
            if not daily.is_assigned(nurse.id):
                daily.add(ShiftType.OFF, nurse.id)

    def _assign(self, state: PassState, nurse: Nurse, date_str: str, shift_type: ShiftType):
        state.assignments[date_str].add(shift_type, nurse.id)
        self.update_score(state.scores[nurse.id], date_str, shift_type)

    def update_score(self, score: NurseScore, date_str: str, shift_type: ShiftType):
        """Accumulate weighted hours (and the charge counter) for one placement"""
        if not shift_type.is_work:
            return
        score.weighted_hours += weighted_hours_for(
            shift_type, date_str, self.context.holidays,
            self.settings.charge_settings.intensity_weight
        )
        if shift_type is ShiftType.CHARGE:
            score.charge_count += 1

    # Phase 4

    def _build_schedule(self, state: PassState) -> Schedule:
        dedicated_ids = [n.id for n in self.nurses if n.is_dedicated]
        fairness_scores = score_statistics(state.scores, dedicated_ids)

        statistics = {}
        for nurse in self.nurses:
            stats = NurseStatistics(dedicated=nurse.is_dedicated)
            for date_str in self.dates:
                shift_type = state.assignments[date_str].shift_of(nurse.id)
                stats.shift_counts[shift_type.value] += 1
                stats.total_hours += SHIFT_TIMES[shift_type].hours
            score = state.scores[nurse.id]
            stats.weighted_hours = score.weighted_hours
            stats.charge_count = score.charge_count
            stats.fairness_score = fairness_scores[nurse.id]
            statistics[nurse.id] = stats

        return Schedule(
            organization_id=self.context.organization_id,
            year_month=self.context.year_month,
            assignments=state.assignments,
            statistics=statistics,
            violations=state.violations,
            fairness=calculate_overall_fairness(statistics),
        )
