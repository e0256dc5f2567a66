"""
Nurse Shift Scheduler - Rule Validator

Pure predicate deciding whether a nurse may take a shift on a date given the
assignments built so far. Checks run in a fixed order and the first failing
rule wins (a day off is always valid):

1. vacation                 - date is one of the nurse's vacation dates
2. selectedShifts           - nurse restricted to other shift types (charge exempt)
3. chargeMinYears           - charge requires minimum years of experience
4. maxConsecutiveWorkDays   - too many worked days immediately before
5. maxConsecutiveNightDays  - too many night/charge days immediately before
6. forbiddenTransition      - shift pair on adjacent dates leaves too little rest
7. prohibitNOD              - Night -> Off -> Day
8. prohibitEOD              - Evening -> Off -> Day

Rest between shifts is modeled with a static table of forbidden
(previous day -> next day) pairs rather than rest-hour arithmetic.
"""

from typing import Dict, FrozenSet, Optional

from .dates import shift_date
from .models import (
    Assignments, DailyAssignment, Nurse, OrganizationSettings, ShiftRef,
    ShiftType, SwapValidationResult, ValidationResult, VALID, copy_assignments
)

DEFAULT_LOOKBACK_DAYS = 10

# Previous-day shift -> next-day shifts that leave under two shift slots of rest
FORBIDDEN_TRANSITIONS: Dict[ShiftType, FrozenSet[ShiftType]] = {
    # N(22:30-07:30) -> D(07:00) no rest, -> E(15:00) one slot, -> C(10:00) 2.5h
    ShiftType.NIGHT: frozenset({ShiftType.DAY, ShiftType.EVENING, ShiftType.CHARGE}),
    # E(15:00-23:00) -> D(07:00) one slot
    ShiftType.EVENING: frozenset({ShiftType.DAY}),
    # C(10:00-18:30) -> N(22:30)
    ShiftType.CHARGE: frozenset({ShiftType.NIGHT}),
}

_NIGHT_OR_CHARGE = (ShiftType.NIGHT, ShiftType.CHARGE)


def is_forbidden_transition(previous: Optional[ShiftType], following: Optional[ShiftType]) -> bool:
    if previous is None or following is None:
        return False
    return following in FORBIDDEN_TRANSITIONS.get(previous, frozenset())


class RuleValidator:
    """
    Per-assignment rule checks against one organization's settings.

    Stateless apart from the settings it was built with; safe to share
    between concurrent generation passes.
    """

    def __init__(self, settings: OrganizationSettings, lookback_days: int = DEFAULT_LOOKBACK_DAYS):
        self.settings = settings
        self.lookback_days = lookback_days

    def validate(self, nurse: Nurse, date_str: str, shift_type: ShiftType,
                 assignments: Assignments) -> ValidationResult:
        """
        Decide whether `nurse` may work `shift_type` on `date_str`.

        Only dates present in `assignments` are inspected, so the map's keys
        bound the lookback to the month being generated.
        """
        settings = self.settings

        if not shift_type.is_work:
            return VALID

        if nurse.is_on_vacation(date_str):
            return ValidationResult(False, 'vacation', "Date is a requested vacation day.")

        if not nurse.allows_shift(shift_type):
            return ValidationResult(
                False, 'selectedShifts',
                f"{shift_type.label} is not one of the nurse's selected shift types."
            )

        min_years = settings.charge_settings.min_years_required
        if shift_type is ShiftType.CHARGE and nurse.years_of_experience < min_years:
            return ValidationResult(
                False, 'chargeMinYears',
                f"Charge requires at least {min_years:g} years of experience."
            )

        worked = self.consecutive_work_days(nurse.id, date_str, assignments)
        if worked >= settings.max_consecutive_work_days:
            return ValidationResult(
                False, 'maxConsecutiveWorkDays',
                f"Exceeds the maximum of {settings.max_consecutive_work_days} consecutive work days."
            )

        if shift_type in _NIGHT_OR_CHARGE:
            nights = self.consecutive_night_charge_days(nurse.id, date_str, assignments)
            if nights >= settings.max_consecutive_night_days:
                return ValidationResult(
                    False, 'maxConsecutiveNightDays',
                    f"Exceeds the maximum of {settings.max_consecutive_night_days} consecutive Night/Charge days."
                )

        transition = self.check_forbidden_transition(nurse.id, date_str, shift_type, assignments)
        if not transition.valid:
            return transition

        if shift_type is ShiftType.DAY:
            if settings.prohibit_nod and self._follows_off_after(nurse.id, date_str, ShiftType.NIGHT, assignments):
                return ValidationResult(False, 'prohibitNOD', "Night-Off-Day pattern is prohibited.")
            if settings.prohibit_eod and self._follows_off_after(nurse.id, date_str, ShiftType.EVENING, assignments):
                return ValidationResult(False, 'prohibitEOD', "Evening-Off-Day pattern is prohibited.")

        return VALID

    def is_valid(self, nurse: Nurse, date_str: str, shift_type: ShiftType,
                 assignments: Assignments) -> bool:
        return self.validate(nurse, date_str, shift_type, assignments).valid

    def consecutive_work_days(self, nurse_id: str, date_str: str, assignments: Assignments) -> int:
        """Worked days immediately before `date_str`, stopping at the first day off or missing record"""
        return self._count_back(nurse_id, date_str, assignments, DailyAssignment.is_working)

    def consecutive_night_charge_days(self, nurse_id: str, date_str: str, assignments: Assignments) -> int:
        def on_night_or_charge(daily: DailyAssignment, nid: str) -> bool:
            return nid in daily.night or nid in daily.charge

        return self._count_back(nurse_id, date_str, assignments, on_night_or_charge)

    def _count_back(self, nurse_id, date_str, assignments, predicate) -> int:
        count = 0
        for offset in range(1, self.lookback_days + 1):
            daily = assignments.get(shift_date(date_str, -offset))
            if daily is None or not predicate(daily, nurse_id):
                break
            count += 1
        return count

    def check_forbidden_transition(self, nurse_id: str, date_str: str, shift_type: ShiftType,
                                   assignments: Assignments) -> ValidationResult:
        """
        Check the pair formed with the previous date and, when the nurse
        already holds a shift there, with the following date.
        """
        previous = self._shift_on(nurse_id, shift_date(date_str, -1), assignments)
        if is_forbidden_transition(previous, shift_type):
            return ValidationResult(
                False, 'forbiddenTransition',
                f"Forbidden shift transition: {previous.value.upper()} -> {shift_type.value.upper()} "
                f"(at least two shift slots of rest required)."
            )

        following = self._shift_on(nurse_id, shift_date(date_str, 1), assignments)
        if is_forbidden_transition(shift_type, following):
            return ValidationResult(
                False, 'forbiddenTransition',
                f"Forbidden shift transition: {shift_type.value.upper()} -> {following.value.upper()} "
                f"(at least two shift slots of rest required)."
            )

        return VALID

    @staticmethod
    def _shift_on(nurse_id: str, date_str: str, assignments: Assignments) -> Optional[ShiftType]:
        daily = assignments.get(date_str)
        if daily is None:
            return None
        return daily.shift_of(nurse_id)

    def _follows_off_after(self, nurse_id: str, date_str: str, first: ShiftType,
                           assignments: Assignments) -> bool:
        """True when the nurse worked `first` two days ago and was off yesterday"""
        two_days_ago = assignments.get(shift_date(date_str, -2))
        one_day_ago = assignments.get(shift_date(date_str, -1))
        if two_days_ago is None or one_day_ago is None:
            return False
        return nurse_id in two_days_ago.ids(first) and nurse_id in one_day_ago.off

    def validate_swap(self, requester: Nurse, target: Nurse,
                      requester_shift: ShiftRef, target_shift: ShiftRef,
                      assignments: Assignments) -> SwapValidationResult:
        """
        Check a shift swap between two nurses.

        Builds the hypothetical post-swap map (requester takes `target_shift`,
        target takes `requester_shift`) and re-validates each nurse in the new
        slot. Violations do not reject the swap; they flag it for admin approval.
        """
        swapped = self.apply_swap(requester.id, target.id, requester_shift, target_shift, assignments)

        violations = []
        for nurse, new_slot in ((requester, target_shift), (target, requester_shift)):
            result = self.validate(nurse, new_slot.date, new_slot.type, swapped)
            if not result.valid:
                violations.append(f"{nurse.display_name}: {result.reason}")

        return SwapValidationResult(
            valid=not violations,
            requires_admin_approval=bool(violations),
            violations=violations,
        )

    @staticmethod
    def apply_swap(requester_id: str, target_id: str,
                   requester_shift: ShiftRef, target_shift: ShiftRef,
                   assignments: Assignments) -> Assignments:
        """
        Copy of `assignments` with the two slots exchanged.

        When the slots fall on different dates, each nurse's day off on the
        date they move to is given up and the date they leave becomes a day
        off, so every nurse still holds exactly one list per date.
        """
        swapped = copy_assignments(assignments)
        for shift_ref in (requester_shift, target_shift):
            swapped.setdefault(shift_ref.date, DailyAssignment())

        swapped[requester_shift.date].remove(requester_shift.type, requester_id)
        swapped[target_shift.date].remove(target_shift.type, target_id)

        moves = ((requester_id, requester_shift, target_shift), (target_id, target_shift, requester_shift))
        for nurse_id, old_slot, new_slot in moves:
            if old_slot.date != new_slot.date:
                swapped[new_slot.date].remove(ShiftType.OFF, nurse_id)
            swapped[new_slot.date].add(new_slot.type, nurse_id)

        for nurse_id, old_slot, new_slot in moves:
            if old_slot.date != new_slot.date and not swapped[old_slot.date].is_assigned(nurse_id):
                swapped[old_slot.date].add(ShiftType.OFF, nurse_id)

        return swapped


def validate_assignment(nurse: Nurse, date_str: str, shift_type: ShiftType,
                        assignments: Assignments, settings: OrganizationSettings,
                        lookback_days: int = DEFAULT_LOOKBACK_DAYS) -> ValidationResult:
    """Functional entry point for one-off checks"""
    return RuleValidator(settings, lookback_days).validate(nurse, date_str, shift_type, assignments)


def validate_swap_request(requester: Nurse, target: Nurse,
                          requester_shift: ShiftRef, target_shift: ShiftRef,
                          assignments: Assignments,
                          settings: OrganizationSettings) -> SwapValidationResult:
    """Functional entry point used by the swap-request workflow"""
    return RuleValidator(settings).validate_swap(
        requester, target, requester_shift, target_shift, assignments
    )
