"""
Nurse Roster Data Generator

Generates a realistic ward roster, organization settings and a holiday list
for trying the scheduler by hand.

Run: python scripts/generate_data.py
"""

import json
import random
from typing import List, Dict
import os

# Configuration
NUM_NURSES = 18
NUM_NIGHT_DEDICATED = 2
NUM_CHARGE_DEDICATED = 1
YEAR_MONTH = "2026-02"
DAYS = 28

HOLIDAYS = [
    {"date": "2026-02-16", "name": "Lunar New Year holiday"},
    {"date": "2026-02-17", "name": "Lunar New Year"},
    {"date": "2026-02-18", "name": "Lunar New Year holiday"},
]

SHIFT_PREFERENCES = [
    ["day", "evening"],
    ["day"],
    ["evening", "night"],
]

# Ensure data directory exists
os.makedirs("data", exist_ok=True)


def generate_vacation_dates() -> List[str]:
    """A short vacation for roughly a third of the roster"""
    if random.random() >= 0.35:
        return []
    start = random.randint(1, DAYS - 3)
    length = random.randint(1, 3)
    return [f"{YEAR_MONTH}-{day:02d}" for day in range(start, min(start + length, DAYS) + 1)]


def generate_nurses() -> List[Dict]:
    """Generate roster entries with a spread of experience and personal rules"""
    nurses = []
    first_names = ["Emma", "James", "Olivia", "Liam", "Ava", "Noah", "Sophia", "William",
                   "Isabella", "Benjamin", "Mia", "Lucas", "Charlotte", "Henry", "Amelia",
                   "Ethan", "Harper", "Daniel", "Grace", "Leah", "Hazel", "Nora", "Owen"]
    last_names = ["Kim", "Lee", "Park", "Choi", "Jung", "Kang", "Cho", "Yoon", "Jang",
                  "Lim", "Han", "Oh", "Seo", "Shin", "Kwon", "Hwang", "Ahn", "Song"]

    # Track used names to ensure uniqueness
    used_names = set()

    for i in range(NUM_NURSES):
        nurse_id = f"N{i+1:03d}"

        while True:
            name = f"{random.choice(first_names)} {random.choice(last_names)}"
            if name not in used_names:
                used_names.add(name)
                break

        # Experience skewed toward junior staff
        years = random.choices([0, 1, 2, 3, 5, 8, 12], weights=[10, 20, 20, 15, 15, 12, 8])[0]

        dedicated_role = None
        if i < NUM_NIGHT_DEDICATED:
            dedicated_role = "night"
        elif i < NUM_NIGHT_DEDICATED + NUM_CHARGE_DEDICATED:
            dedicated_role = "charge"
            years = max(years, 5)

        selected_shifts = None
        if dedicated_role is None and random.random() < 0.15:
            selected_shifts = random.choice(SHIFT_PREFERENCES)

        nurses.append({
            "id": nurse_id,
            "name": name,
            "yearsOfExperience": years,
            "personalRules": {
                "vacationDates": generate_vacation_dates(),
                "selectedShiftsOnly": selected_shifts,
                "dedicatedRole": dedicated_role,
            }
        })

    return nurses


def generate_organization() -> Dict:
    return {
        "organizationId": "ward-7a",
        "settings": {
            "simultaneousStaff": {"day": 3, "evening": 3, "night": 2},
            "maxConsecutiveWorkDays": 5,
            "maxConsecutiveNightDays": 3,
            "monthlyOffDays": 8,
            "chargeSettings": {"intensityWeight": 1.2, "minYearsRequired": 3},
            "prohibitNOD": True,
            "prohibitEOD": False,
        }
    }


def print_summary(nurses: List[Dict], organization: Dict):
    """Print summary statistics"""
    print("\n" + "="*60)
    print("DATA GENERATION SUMMARY")
    print("="*60)

    settings = organization["settings"]
    staff = settings["simultaneousStaff"]

    print(f"\nNurses: {len(nurses)}")
    print(f"  Night dedicated: {sum(1 for n in nurses if n['personalRules']['dedicatedRole'] == 'night')}")
    print(f"  Charge dedicated: {sum(1 for n in nurses if n['personalRules']['dedicatedRole'] == 'charge')}")
    print(f"  Restricted shifts: {sum(1 for n in nurses if n['personalRules']['selectedShiftsOnly'])}")
    print(f"  On vacation: {sum(1 for n in nurses if n['personalRules']['vacationDates'])}")

    min_years = settings["chargeSettings"]["minYearsRequired"]
    charge_eligible = sum(1 for n in nurses if n["yearsOfExperience"] >= min_years)
    print(f"\n  Charge eligible ({min_years}+ years): {charge_eligible}")

    per_day = staff["day"] + staff["evening"] + staff["night"] + 1
    needed = per_day * DAYS
    available = sum(
        DAYS - settings["monthlyOffDays"] - len(n["personalRules"]["vacationDates"])
        for n in nurses
    )
    print(f"\n  Nurse-shifts needed: {needed} ({per_day}/day)")
    print(f"  Nurse-shifts available after off days: {available}")

    ratio = available / needed if needed > 0 else 0
    print(f"  Availability ratio: {ratio:.2f}x")
    if ratio < 1.0:
        print("  ⚠️  WARNING: Not enough nurses to cover every slot!")
    elif ratio < 1.2:
        print("  ⚠️  WARNING: Tight roster - expect relaxed placements")
    else:
        print("  ✓ Adequate roster for scheduling")


def main():
    print("Generating nurse roster data...")

    random.seed(42)  # For reproducibility

    nurses = generate_nurses()
    organization = generate_organization()

    with open('data/nurses.json', 'w') as f:
        json.dump(nurses, f, indent=2)

    with open('data/organization.json', 'w') as f:
        json.dump(organization, f, indent=2)

    with open('data/holidays.json', 'w') as f:
        json.dump(HOLIDAYS, f, indent=2)

    print("\n✓ Generated files:")
    print("  - data/nurses.json")
    print("  - data/organization.json")
    print("  - data/holidays.json")

    print_summary(nurses, organization)

    print("\n" + "="*60)
    print("Sample Nurse:")
    print(json.dumps(nurses[0], indent=2))
    print("="*60)


if __name__ == "__main__":
    main()
