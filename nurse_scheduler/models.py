"""
Nurse Shift Scheduler - Domain Model

Shift catalogue, weight tables, roster/organization inputs and the
schedule value objects produced by a generation pass.

All dates are carried as 'YYYY-MM-DD' strings and the month as 'YYYY-MM',
matching the serialized form consumed by persistence and presentation layers.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field


class ShiftType(str, Enum):
    """Closed set of daily shift types"""
    DAY = "day"
    EVENING = "evening"
    NIGHT = "night"
    CHARGE = "charge"
    OFF = "off"

    @property
    def is_work(self) -> bool:
        return self is not ShiftType.OFF

    @property
    def label(self) -> str:
        return SHIFT_LABELS[self]


class DedicatedRole(str, Enum):
    """Permanent bias toward one shift type"""
    NIGHT = "night"
    CHARGE = "charge"

    @property
    def shift_type(self) -> ShiftType:
        return ShiftType(self.value)


@dataclass(frozen=True)
class ShiftTime:
    """Fixed clock window of a shift (night ends the next calendar day)"""
    start: str
    end: str
    hours: float


SHIFT_TIMES: Dict[ShiftType, ShiftTime] = {
    ShiftType.DAY: ShiftTime("07:00", "15:30", 8.5),
    ShiftType.EVENING: ShiftTime("15:00", "23:00", 8.0),
    ShiftType.NIGHT: ShiftTime("22:30", "07:30", 9.0),
    ShiftType.CHARGE: ShiftTime("10:00", "18:30", 8.5),
    ShiftType.OFF: ShiftTime("", "", 0.0),
}

SHIFT_LABELS: Dict[ShiftType, str] = {
    ShiftType.DAY: "Day",
    ShiftType.EVENING: "Evening",
    ShiftType.NIGHT: "Night",
    ShiftType.CHARGE: "Charge",
    ShiftType.OFF: "Off",
}

# Order of the five lists inside a DailyAssignment
ALL_SHIFTS: Tuple[ShiftType, ...] = (
    ShiftType.DAY, ShiftType.EVENING, ShiftType.NIGHT, ShiftType.CHARGE, ShiftType.OFF
)
WORK_SHIFTS: Tuple[ShiftType, ...] = ALL_SHIFTS[:4]

# Weighted-hours multipliers by day type; night and weekend/holiday work weigh more
WEIGHTS: Dict[str, Dict[ShiftType, float]] = {
    "weekday": {ShiftType.DAY: 1.0, ShiftType.EVENING: 1.0, ShiftType.NIGHT: 1.5, ShiftType.CHARGE: 1.0},
    "weekend": {ShiftType.DAY: 1.5, ShiftType.EVENING: 1.5, ShiftType.NIGHT: 2.0, ShiftType.CHARGE: 1.5},
    "holiday": {ShiftType.DAY: 1.5, ShiftType.EVENING: 1.5, ShiftType.NIGHT: 2.0, ShiftType.CHARGE: 1.5},
}

# Reported in place of a fairness score for dedicated-role nurses
FAIRNESS_NOT_APPLICABLE = -1.0


@dataclass(frozen=True)
class PersonalRules:
    """Per-nurse constraints supplied with the roster"""
    vacation_dates: Tuple[str, ...] = ()
    selected_shifts_only: Optional[Tuple[ShiftType, ...]] = None  # None = every shift allowed
    dedicated_role: Optional[DedicatedRole] = None


@dataclass(frozen=True)
class Nurse:
    """Roster entry; immutable for the duration of a generation run"""
    id: str
    name: str = ""
    years_of_experience: float = 0
    personal_rules: PersonalRules = field(default_factory=PersonalRules)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def dedicated_role(self) -> Optional[DedicatedRole]:
        return self.personal_rules.dedicated_role

    @property
    def is_dedicated(self) -> bool:
        return self.personal_rules.dedicated_role is not None

    def is_on_vacation(self, date_str: str) -> bool:
        return date_str in self.personal_rules.vacation_dates

    def allows_shift(self, shift_type: ShiftType) -> bool:
        """Selected-shifts-only check; charge is always exempt"""
        allowed = self.personal_rules.selected_shifts_only
        if allowed is None or shift_type is ShiftType.CHARGE:
            return True
        return shift_type in allowed


@dataclass(frozen=True)
class SimultaneousStaff:
    """Required headcount per shift type on every date"""
    day: int = 1
    evening: int = 1
    night: int = 1


@dataclass(frozen=True)
class ChargeSettings:
    intensity_weight: float = 1.0  # 1.0 ~ 1.5
    min_years_required: float = 3


@dataclass(frozen=True)
class OrganizationSettings:
    """Rule parameters for one organization; read-only during generation"""
    simultaneous_staff: SimultaneousStaff = field(default_factory=SimultaneousStaff)
    max_consecutive_work_days: int = 5
    max_consecutive_night_days: int = 3
    monthly_off_days: int = 8
    charge_settings: ChargeSettings = field(default_factory=ChargeSettings)
    prohibit_nod: bool = True
    prohibit_eod: bool = False

    def required_count(self, shift_type: ShiftType) -> int:
        """Headcount required for a shift; exactly one charge nurse per day"""
        if shift_type is ShiftType.CHARGE:
            return 1
        if shift_type is ShiftType.OFF:
            return 0
        return getattr(self.simultaneous_staff, shift_type.value)


@dataclass
class DailyAssignment:
    """Five disjoint lists of nurse ids for one calendar date"""
    day: List[str] = field(default_factory=list)
    evening: List[str] = field(default_factory=list)
    night: List[str] = field(default_factory=list)
    charge: List[str] = field(default_factory=list)
    off: List[str] = field(default_factory=list)

    def ids(self, shift_type: ShiftType) -> List[str]:
        return getattr(self, shift_type.value)

    def add(self, shift_type: ShiftType, nurse_id: str):
        self.ids(shift_type).append(nurse_id)

    def remove(self, shift_type: ShiftType, nurse_id: str) -> bool:
        ids = self.ids(shift_type)
        if nurse_id in ids:
            ids.remove(nurse_id)
            return True
        return False

    def shift_of(self, nurse_id: str) -> Optional[ShiftType]:
        """Shift the nurse holds on this date, None when unplaced"""
        for shift_type in ALL_SHIFTS:
            if nurse_id in self.ids(shift_type):
                return shift_type
        return None

    def is_assigned(self, nurse_id: str) -> bool:
        return self.shift_of(nurse_id) is not None

    def is_working(self, nurse_id: str) -> bool:
        return any(nurse_id in self.ids(s) for s in WORK_SHIFTS)

    def copy(self) -> "DailyAssignment":
        return DailyAssignment(
            day=list(self.day), evening=list(self.evening), night=list(self.night),
            charge=list(self.charge), off=list(self.off)
        )

    def to_dict(self) -> Dict[str, List[str]]:
        return {s.value: list(self.ids(s)) for s in ALL_SHIFTS}


Assignments = Dict[str, DailyAssignment]


def copy_assignments(assignments: Assignments) -> Assignments:
    return {date_str: daily.copy() for date_str, daily in assignments.items()}


@dataclass
class NurseScore:
    """Generation-time accumulator; mutated as shifts are assigned"""
    nurse_id: str
    weighted_hours: float = 0.0
    charge_count: int = 0
    years_of_experience: float = 0


@dataclass(frozen=True)
class Violation:
    """A placement made (or left short) against a rule"""
    nurse_id: Optional[str]
    date: str
    rule: str
    reason: str
    shift_type: Optional[ShiftType] = None

    def to_dict(self) -> Dict:
        data = {
            'userId': self.nurse_id,
            'date': self.date,
            'rule': self.rule,
            'reason': self.reason,
        }
        if self.shift_type is not None:
            data['shiftType'] = self.shift_type.value
        return data


@dataclass
class NurseStatistics:
    total_hours: float = 0.0
    weighted_hours: float = 0.0
    charge_count: int = 0
    shift_counts: Dict[str, int] = field(default_factory=lambda: {s.value: 0 for s in ALL_SHIFTS})
    fairness_score: float = FAIRNESS_NOT_APPLICABLE
    dedicated: bool = False

    def to_dict(self) -> Dict:
        return {
            'totalHours': round(self.total_hours, 1),
            'weightedHours': round(self.weighted_hours, 2),
            'chargeCount': self.charge_count,
            'shiftCounts': dict(self.shift_counts),
            'fairnessScore': self.fairness_score,
            'dedicated': self.dedicated,
        }


@dataclass
class Schedule:
    """Output of one generation pass (value object, always complete)"""
    organization_id: str
    year_month: str
    assignments: Assignments
    statistics: Dict[str, NurseStatistics]
    violations: List[Violation]
    status: str = "draft"  # 'draft' | 'published', owned by the persistence layer
    fairness: Dict[str, float] = field(default_factory=dict)
    metadata: Dict = field(default_factory=dict)

    def shift_of(self, nurse_id: str, date_str: str) -> Optional[ShiftType]:
        daily = self.assignments.get(date_str)
        return daily.shift_of(nurse_id) if daily else None

    def included_statistics(self) -> Dict[str, NurseStatistics]:
        """Statistics of nurses that take part in fairness ranking"""
        return {nid: s for nid, s in self.statistics.items() if not s.dedicated}

    def to_dict(self) -> Dict:
        return {
            'organizationId': self.organization_id,
            'yearMonth': self.year_month,
            'assignments': {d: a.to_dict() for d, a in sorted(self.assignments.items())},
            'statistics': {nid: s.to_dict() for nid, s in self.statistics.items()},
            'violations': [v.to_dict() for v in self.violations],
            'status': self.status,
            'fairness': dict(self.fairness),
            'metadata': dict(self.metadata),
        }


@dataclass(frozen=True)
class SchedulerContext:
    """Everything a generation run reads; shared read-only across passes"""
    settings: OrganizationSettings
    nurses: Tuple[Nurse, ...]
    year_month: str
    holidays: frozenset = frozenset()
    organization_id: str = ""

    def __post_init__(self):
        # Normalize containers so passes can never mutate shared input
        object.__setattr__(self, 'nurses', tuple(self.nurses))
        object.__setattr__(self, 'holidays', frozenset(self.holidays))


@dataclass(frozen=True)
class ShiftRef:
    """(date, shift type) a nurse currently holds, used by swap requests"""
    date: str
    type: ShiftType


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    violated_rule: Optional[str] = None
    reason: Optional[str] = None


VALID = ValidationResult(valid=True)


@dataclass
class SwapValidationResult:
    valid: bool
    requires_admin_approval: bool
    violations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'valid': self.valid,
            'requiresAdminApproval': self.requires_admin_approval,
            'violations': list(self.violations),
        }
