"""
Input schemas for the scheduler boundary.

pydantic models that parse the camelCase JSON exchanged with the rest of the
application (roster documents, organization settings, swap requests) and
convert it into the immutable domain dataclasses used by generation.
"""

from typing import Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .dates import parse_date, parse_year_month
from .exceptions import ScheduleInputError
from .models import (
    Assignments, ChargeSettings, DailyAssignment, DedicatedRole, Nurse,
    OrganizationSettings, PersonalRules, SchedulerContext, ShiftRef, ShiftType,
    SimultaneousStaff, SwapValidationResult
)
from .validator import validate_swap_request


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


def _check_date(value: str) -> str:
    try:
        parse_date(value)
    except (TypeError, ValueError):
        raise ValueError(f"expected a YYYY-MM-DD date, got {value!r}")
    return value


class PersonalRulesInput(CamelModel):
    """Per-nurse constraints"""
    vacation_dates: List[str] = Field(default_factory=list, alias="vacationDates",
                                      description="Requested days off (YYYY-MM-DD)")
    selected_shifts_only: Optional[List[ShiftType]] = Field(
        default=None, alias="selectedShiftsOnly",
        description="Shift types the nurse may work; null means every shift"
    )
    dedicated_role: Optional[DedicatedRole] = Field(default=None, alias="dedicatedRole",
                                                    description="'night' | 'charge' | null")

    @field_validator("vacation_dates")
    @classmethod
    def _vacation_dates_are_dates(cls, value: List[str]) -> List[str]:
        return [_check_date(v) for v in value]

    def to_domain(self) -> PersonalRules:
        return PersonalRules(
            vacation_dates=tuple(self.vacation_dates),
            selected_shifts_only=tuple(self.selected_shifts_only) if self.selected_shifts_only is not None else None,
            dedicated_role=self.dedicated_role,
        )


class NurseInput(CamelModel):
    """Roster entry"""
    id: str = Field(min_length=1, description="Unique nurse id")
    name: str = Field(default="", description="Display name")
    years_of_experience: float = Field(default=0, ge=0, alias="yearsOfExperience")
    personal_rules: PersonalRulesInput = Field(default_factory=PersonalRulesInput, alias="personalRules")

    def to_domain(self) -> Nurse:
        return Nurse(
            id=self.id,
            name=self.name,
            years_of_experience=self.years_of_experience,
            personal_rules=self.personal_rules.to_domain(),
        )


class SimultaneousStaffInput(CamelModel):
    day: int = Field(default=1, ge=0)
    evening: int = Field(default=1, ge=0)
    night: int = Field(default=1, ge=0)


class ChargeSettingsInput(CamelModel):
    intensity_weight: float = Field(default=1.0, ge=1.0, alias="intensityWeight",
                                    description="Charge weight multiplier, typically 1.0 to 1.5")
    min_years_required: float = Field(default=3, ge=0, alias="minYearsRequired")


class OrganizationSettingsInput(CamelModel):
    """Organization rule parameters"""
    simultaneous_staff: SimultaneousStaffInput = Field(default_factory=SimultaneousStaffInput,
                                                       alias="simultaneousStaff")
    max_consecutive_work_days: int = Field(default=5, ge=1, alias="maxConsecutiveWorkDays")
    max_consecutive_night_days: int = Field(default=3, ge=1, alias="maxConsecutiveNightDays")
    monthly_off_days: int = Field(default=8, ge=0, alias="monthlyOffDays")
    charge_settings: ChargeSettingsInput = Field(default_factory=ChargeSettingsInput, alias="chargeSettings")
    prohibit_nod: bool = Field(default=True, alias="prohibitNOD", description="Forbid Night-Off-Day")
    prohibit_eod: bool = Field(default=False, alias="prohibitEOD", description="Forbid Evening-Off-Day")

    def to_domain(self) -> OrganizationSettings:
        return OrganizationSettings(
            simultaneous_staff=SimultaneousStaff(**self.simultaneous_staff.model_dump()),
            max_consecutive_work_days=self.max_consecutive_work_days,
            max_consecutive_night_days=self.max_consecutive_night_days,
            monthly_off_days=self.monthly_off_days,
            charge_settings=ChargeSettings(
                intensity_weight=self.charge_settings.intensity_weight,
                min_years_required=self.charge_settings.min_years_required,
            ),
            prohibit_nod=self.prohibit_nod,
            prohibit_eod=self.prohibit_eod,
        )


class HolidayInput(CamelModel):
    date: str
    name: str = ""

    @field_validator("date")
    @classmethod
    def _date_is_date(cls, value: str) -> str:
        return _check_date(value)


class GenerateScheduleInput(CamelModel):
    """Everything needed to generate one month"""
    organization_id: str = Field(default="", alias="organizationId")
    year_month: str = Field(alias="yearMonth", description="Month to schedule (YYYY-MM)")
    settings: OrganizationSettingsInput = Field(default_factory=OrganizationSettingsInput)
    nurses: List[NurseInput] = Field(min_length=1)
    holidays: List[Union[str, HolidayInput]] = Field(
        default_factory=list, description="Holiday dates, plain or as {date, name}"
    )

    @field_validator("year_month")
    @classmethod
    def _year_month_is_month(cls, value: str) -> str:
        parse_year_month(value)
        return value

    @field_validator("holidays")
    @classmethod
    def _holidays_are_dates(cls, value):
        return [_check_date(h) if isinstance(h, str) else h for h in value]

    def holiday_dates(self) -> List[str]:
        return [h if isinstance(h, str) else h.date for h in self.holidays]

    def to_context(self) -> SchedulerContext:
        return SchedulerContext(
            settings=self.settings.to_domain(),
            nurses=tuple(n.to_domain() for n in self.nurses),
            year_month=self.year_month,
            holidays=frozenset(self.holiday_dates()),
            organization_id=self.organization_id,
        )


class ShiftRefInput(CamelModel):
    date: str
    type: ShiftType

    @field_validator("date")
    @classmethod
    def _date_is_date(cls, value: str) -> str:
        return _check_date(value)

    def to_domain(self) -> ShiftRef:
        return ShiftRef(date=self.date, type=self.type)


class DailyAssignmentInput(CamelModel):
    day: List[str] = Field(default_factory=list)
    evening: List[str] = Field(default_factory=list)
    night: List[str] = Field(default_factory=list)
    charge: List[str] = Field(default_factory=list)
    off: List[str] = Field(default_factory=list)

    def to_domain(self) -> DailyAssignment:
        return DailyAssignment(**self.model_dump())


class SwapRequestInput(CamelModel):
    """Shift swap between two nurses, checked against the published assignments"""
    requester_id: str = Field(alias="requesterId")
    target_id: str = Field(alias="targetId")
    requester_shift: ShiftRefInput = Field(alias="requesterShift")
    target_shift: ShiftRefInput = Field(alias="targetShift")
    assignments: Dict[str, DailyAssignmentInput] = Field(
        default_factory=dict, description="Current schedule assignments keyed by YYYY-MM-DD"
    )

    def to_domain(self) -> Tuple[ShiftRef, ShiftRef, Assignments]:
        return (
            self.requester_shift.to_domain(),
            self.target_shift.to_domain(),
            {date_str: daily.to_domain() for date_str, daily in self.assignments.items()},
        )

    def resolve_nurses(self, roster: Iterable[Nurse]) -> Tuple[Nurse, Nurse]:
        """Look up the requester and target in the roster"""
        by_id = {nurse.id: nurse for nurse in roster}
        missing = [nid for nid in (self.requester_id, self.target_id) if nid not in by_id]
        if missing:
            raise ScheduleInputError(f"Swap names nurses not on the roster: {', '.join(missing)}")
        return by_id[self.requester_id], by_id[self.target_id]

    def validate_against(self, roster: Iterable[Nurse], settings: OrganizationSettings) -> SwapValidationResult:
        """Run swap validation for this request"""
        requester, target = self.resolve_nurses(roster)
        requester_shift, target_shift, assignments = self.to_domain()
        return validate_swap_request(requester, target, requester_shift, target_shift, assignments, settings)


def parse_nurses(data: List[Dict]) -> List[Nurse]:
    """Roster JSON -> Nurse list"""
    return [NurseInput.model_validate(entry).to_domain() for entry in data]


def parse_settings(data: Dict) -> OrganizationSettings:
    """Organization settings JSON -> OrganizationSettings"""
    return OrganizationSettingsInput.model_validate(data).to_domain()
