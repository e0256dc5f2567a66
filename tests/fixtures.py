"""
Test fixtures and utilities for nurse scheduler tests.
"""

import json
from typing import Dict, List, Optional

from nurse_scheduler.dates import shift_date
from nurse_scheduler.models import (
    ChargeSettings, DailyAssignment, DedicatedRole, Nurse, OrganizationSettings,
    PersonalRules, SchedulerContext, ShiftType, SimultaneousStaff, WORK_SHIFTS
)
from nurse_scheduler.validator import is_forbidden_transition


# 2026-02 starts on a Sunday; 28 days, weekends on 1, 7-8, 14-15, 21-22, 28
TEST_MONTH = "2026-02"
TEST_HOLIDAYS = ["2026-02-16", "2026-02-17", "2026-02-18"]

# Test data fixtures (serialized roster, as loaded from JSON)
SAMPLE_NURSES = [
    {
        "id": "N001",
        "name": "Alice Kim",
        "yearsOfExperience": 8,
        "personalRules": {"vacationDates": [], "selectedShiftsOnly": None, "dedicatedRole": None}
    },
    {
        "id": "N002",
        "name": "Bob Lee",
        "yearsOfExperience": 1,
        "personalRules": {"vacationDates": ["2026-02-10", "2026-02-11"], "selectedShiftsOnly": None,
                          "dedicatedRole": None}
    },
    {
        "id": "N003",
        "name": "Carol Park",
        "yearsOfExperience": 5,
        "personalRules": {"vacationDates": [], "selectedShiftsOnly": ["day", "evening"], "dedicatedRole": None}
    },
    {
        "id": "N004",
        "name": "Dan Choi",
        "yearsOfExperience": 2,
        "personalRules": {"vacationDates": [], "selectedShiftsOnly": None, "dedicatedRole": "night"}
    },
]

SAMPLE_ORGANIZATION = {
    "organizationId": "ward-test",
    "settings": {
        "simultaneousStaff": {"day": 2, "evening": 2, "night": 1},
        "maxConsecutiveWorkDays": 5,
        "maxConsecutiveNightDays": 3,
        "monthlyOffDays": 8,
        "chargeSettings": {"intensityWeight": 1.2, "minYearsRequired": 3},
        "prohibitNOD": True,
        "prohibitEOD": False,
    }
}


def make_nurse(nurse_id: str, years: float = 5, vacation: Optional[List[str]] = None,
               selected: Optional[List[ShiftType]] = None,
               role: Optional[DedicatedRole] = None, name: str = "") -> Nurse:
    """Create a nurse with the given personal rules."""
    return Nurse(
        id=nurse_id,
        name=name,
        years_of_experience=years,
        personal_rules=PersonalRules(
            vacation_dates=tuple(vacation or ()),
            selected_shifts_only=tuple(selected) if selected is not None else None,
            dedicated_role=role,
        ),
    )


def make_settings(day: int = 1, evening: int = 1, night: int = 1, **overrides) -> OrganizationSettings:
    """Create organization settings with the given headcount."""
    charge = overrides.pop("charge_settings", None) or ChargeSettings(intensity_weight=1.0, min_years_required=3)
    return OrganizationSettings(
        simultaneous_staff=SimultaneousStaff(day=day, evening=evening, night=night),
        charge_settings=charge,
        **overrides
    )


def make_roster(count: int = 12, years=(1, 2, 3, 5, 8, 10)) -> List[Nurse]:
    """Generalist roster cycling through experience levels."""
    return [make_nurse(f"N{i+1:03d}", years=years[i % len(years)], name=f"Nurse {i+1}") for i in range(count)]


def make_context(nurses: Optional[List[Nurse]] = None, settings: Optional[OrganizationSettings] = None,
                 year_month: str = TEST_MONTH, holidays=()) -> SchedulerContext:
    return SchedulerContext(
        settings=settings or make_settings(),
        nurses=tuple(nurses if nurses is not None else make_roster()),
        year_month=year_month,
        holidays=frozenset(holidays),
        organization_id="ward-test",
    )


def make_assignments(entries: Dict[str, Dict[str, List[str]]]) -> Dict[str, DailyAssignment]:
    """Build an assignments map from {date: {shift: [ids]}}."""
    return {date_str: DailyAssignment(**shifts) for date_str, shifts in entries.items()}


def save_test_data(base_path: str, nurses: List[Dict] = None, organization: Dict = None,
                   holidays: List = None) -> Dict[str, str]:
    """Save test data to JSON files and return their paths."""
    import os
    os.makedirs(base_path, exist_ok=True)

    paths = {
        "nurses": os.path.join(base_path, "nurses.json"),
        "organization": os.path.join(base_path, "organization.json"),
        "holidays": os.path.join(base_path, "holidays.json"),
    }

    with open(paths["nurses"], "w") as f:
        json.dump(nurses if nurses is not None else SAMPLE_NURSES, f, indent=2)

    with open(paths["organization"], "w") as f:
        json.dump(organization if organization is not None else SAMPLE_ORGANIZATION, f, indent=2)

    with open(paths["holidays"], "w") as f:
        json.dump(holidays if holidays is not None else TEST_HOLIDAYS, f, indent=2)

    return paths


class ScheduleAssertions:
    """Invariant checks shared by generator and selector tests."""

    def assertComplete(self, schedule, context):
        nurse_ids = sorted(n.id for n in context.nurses)
        for date_str, daily in schedule.assignments.items():
            ids = [nid for lists in daily.to_dict().values() for nid in lists]
            self.assertEqual(sorted(ids), nurse_ids, date_str)

    def assertNoForbiddenTransitions(self, schedule, context):
        for date_str in schedule.assignments:
            following = shift_date(date_str, 1)
            if following not in schedule.assignments:
                continue
            for nurse in context.nurses:
                self.assertFalse(
                    is_forbidden_transition(schedule.shift_of(nurse.id, date_str),
                                            schedule.shift_of(nurse.id, following)),
                    f"{nurse.id} {date_str} -> {following}"
                )

    def assertCoverage(self, schedule, context):
        """Each slot is filled or documented as understaffed."""
        understaffed = {(v.date, v.shift_type) for v in schedule.violations if v.rule == 'understaffed'}
        for date_str, daily in schedule.assignments.items():
            for shift_type in WORK_SHIFTS:
                required = context.settings.required_count(shift_type)
                count = len(daily.ids(shift_type))
                if (date_str, shift_type) in understaffed:
                    self.assertLess(count, required)
                else:
                    self.assertGreaterEqual(count, required, f"{date_str} {shift_type.value}")
            self.assertLessEqual(len(daily.charge), 1)

    def violation_keys(self, schedule):
        return {(v.nurse_id, v.date) for v in schedule.violations}
