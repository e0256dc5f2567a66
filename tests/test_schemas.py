"""
Tests for the pydantic input schemas.
"""

import unittest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pydantic import ValidationError

from nurse_scheduler.exceptions import ScheduleInputError
from nurse_scheduler.models import DedicatedRole, ShiftType
from nurse_scheduler.schemas import (
    GenerateScheduleInput, NurseInput, OrganizationSettingsInput, SwapRequestInput,
    parse_nurses, parse_settings
)
from tests.fixtures import SAMPLE_NURSES, SAMPLE_ORGANIZATION, TEST_HOLIDAYS, TEST_MONTH


class TestSchemas(unittest.TestCase):
    """Test cases for boundary parsing."""

    def test_parse_nurses(self):
        """Test camelCase roster entries become Nurse objects."""
        nurses = parse_nurses(SAMPLE_NURSES)

        self.assertEqual(len(nurses), 4)
        self.assertEqual(nurses[0].name, "Alice Kim")
        self.assertEqual(nurses[0].years_of_experience, 8)
        self.assertEqual(nurses[1].personal_rules.vacation_dates, ("2026-02-10", "2026-02-11"))
        self.assertEqual(nurses[2].personal_rules.selected_shifts_only, (ShiftType.DAY, ShiftType.EVENING))
        self.assertIsNone(nurses[0].personal_rules.selected_shifts_only)
        self.assertEqual(nurses[3].dedicated_role, DedicatedRole.NIGHT)

    def test_parse_settings(self):
        """Test organization settings conversion."""
        settings = parse_settings(SAMPLE_ORGANIZATION["settings"])

        self.assertEqual(settings.simultaneous_staff.day, 2)
        self.assertEqual(settings.simultaneous_staff.night, 1)
        self.assertEqual(settings.charge_settings.intensity_weight, 1.2)
        self.assertTrue(settings.prohibit_nod)
        self.assertFalse(settings.prohibit_eod)

    def test_settings_defaults(self):
        """Test missing settings fall back to defaults."""
        settings = OrganizationSettingsInput.model_validate({}).to_domain()
        self.assertEqual(settings.max_consecutive_work_days, 5)
        self.assertEqual(settings.monthly_off_days, 8)

    def test_snake_case_accepted(self):
        """Test field names are accepted alongside aliases."""
        nurse = NurseInput.model_validate({"id": "N1", "years_of_experience": 4}).to_domain()
        self.assertEqual(nurse.years_of_experience, 4)

    def test_unknown_shift_rejected(self):
        """Test unknown shift names fail validation."""
        with self.assertRaises(ValidationError):
            NurseInput.model_validate({"id": "N1", "personalRules": {"selectedShiftsOnly": ["mornings"]}})

    def test_malformed_vacation_rejected(self):
        """Test vacation dates must be YYYY-MM-DD."""
        with self.assertRaises(ValidationError):
            NurseInput.model_validate({"id": "N1", "personalRules": {"vacationDates": ["10/02/2026"]}})

    def test_negative_headcount_rejected(self):
        """Test headcount bounds."""
        with self.assertRaises(ValidationError):
            OrganizationSettingsInput.model_validate({"simultaneousStaff": {"day": -1}})

    def test_low_charge_weight_rejected(self):
        """Test charge intensity must be at least 1.0."""
        with self.assertRaises(ValidationError):
            OrganizationSettingsInput.model_validate({"chargeSettings": {"intensityWeight": 0.8}})

    def test_generate_input_to_context(self):
        """Test a full request converts into a SchedulerContext."""
        request = GenerateScheduleInput.model_validate({
            "organizationId": "ward-test",
            "yearMonth": TEST_MONTH,
            "settings": SAMPLE_ORGANIZATION["settings"],
            "nurses": SAMPLE_NURSES,
            "holidays": [TEST_HOLIDAYS[0], {"date": TEST_HOLIDAYS[1], "name": "Lunar New Year"}],
        })
        context = request.to_context()

        self.assertEqual(context.organization_id, "ward-test")
        self.assertEqual(context.year_month, TEST_MONTH)
        self.assertEqual(len(context.nurses), 4)
        self.assertEqual(context.holidays, frozenset(TEST_HOLIDAYS[:2]))

    def test_generate_input_rejects_bad_month(self):
        """Test year-month format at parse time."""
        with self.assertRaises(ValidationError):
            GenerateScheduleInput.model_validate({"yearMonth": "2026-13", "nurses": SAMPLE_NURSES})

    def test_generate_input_requires_nurses(self):
        """Test an empty roster fails validation."""
        with self.assertRaises(ValidationError):
            GenerateScheduleInput.model_validate({"yearMonth": TEST_MONTH, "nurses": []})

    def test_swap_request(self):
        """Test swap request conversion."""
        request = SwapRequestInput.model_validate({
            "requesterId": "N001",
            "targetId": "N002",
            "requesterShift": {"date": "2026-02-05", "type": "day"},
            "targetShift": {"date": "2026-02-05", "type": "evening"},
            "assignments": {"2026-02-05": {"day": ["N001"], "evening": ["N002"]}},
        })
        requester_shift, target_shift, assignments = request.to_domain()

        self.assertEqual(requester_shift.type, ShiftType.DAY)
        self.assertEqual(target_shift.type, ShiftType.EVENING)
        self.assertEqual(assignments["2026-02-05"].evening, ["N002"])
        self.assertEqual(assignments["2026-02-05"].off, [])

    def test_swap_request_resolves_roster(self):
        """Test requester and target ids are looked up and validated against the roster."""
        roster = parse_nurses(SAMPLE_NURSES)
        settings = parse_settings(SAMPLE_ORGANIZATION["settings"])
        request = SwapRequestInput.model_validate({
            "requesterId": "N001",
            "targetId": "N002",
            "requesterShift": {"date": "2026-02-10", "type": "day"},
            "targetShift": {"date": "2026-02-10", "type": "off"},
            "assignments": {"2026-02-10": {"day": ["N001"], "off": ["N002"]}},
        })

        requester, target = request.resolve_nurses(roster)
        self.assertEqual(requester.name, "Alice Kim")
        self.assertEqual(target.name, "Bob Lee")

        result = request.validate_against(roster, settings)
        self.assertTrue(result.requires_admin_approval)
        self.assertEqual(result.violations, ["Bob Lee: Date is a requested vacation day."])

    def test_swap_request_unknown_nurse(self):
        """Test ids missing from the roster are rejected."""
        request = SwapRequestInput.model_validate({
            "requesterId": "N001",
            "targetId": "N999",
            "requesterShift": {"date": "2026-02-05", "type": "day"},
            "targetShift": {"date": "2026-02-05", "type": "evening"},
        })

        with self.assertRaises(ScheduleInputError) as ctx:
            request.resolve_nurses(parse_nurses(SAMPLE_NURSES))
        self.assertIn("N999", str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
