"""
Nurse Shift Scheduler

Monthly nurse rostering with hard rule validation, weighted-hours fairness
and repeated heuristic passes that keep the fairest candidate.
"""

__version__ = "1.0.0"

from .models import (
    ShiftType,
    DedicatedRole,
    Nurse,
    PersonalRules,
    OrganizationSettings,
    SimultaneousStaff,
    ChargeSettings,
    SchedulerContext,
    Schedule,
    ShiftRef,
)
from .validator import RuleValidator, validate_assignment, validate_swap_request
from .fairness import (
    calculate_fairness_score,
    calculate_overall_fairness,
    rank_by_fairness,
    ScheduleScorer,
)
from .generator import ScheduleGenerator
from .selector import CandidateSelector, generate_schedule
from .analysis import ScheduleAnalyzer
from .exceptions import ScheduleInputError, ConfigurationError

__all__ = [
    "ShiftType",
    "DedicatedRole",
    "Nurse",
    "PersonalRules",
    "OrganizationSettings",
    "SimultaneousStaff",
    "ChargeSettings",
    "SchedulerContext",
    "Schedule",
    "ShiftRef",
    "RuleValidator",
    "validate_assignment",
    "validate_swap_request",
    "calculate_fairness_score",
    "calculate_overall_fairness",
    "rank_by_fairness",
    "ScheduleScorer",
    "ScheduleGenerator",
    "CandidateSelector",
    "generate_schedule",
    "ScheduleAnalyzer",
    "ScheduleInputError",
    "ConfigurationError",
]
