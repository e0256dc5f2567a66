"""
Post-generation review of a schedule.

Turns the violations and statistics of a generated month into a summary an
administrator can act on before publishing.
"""

from collections import defaultdict
from typing import Dict, List

from .fairness import analyze_charge_distribution, rank_by_fairness
from .models import Schedule, SchedulerContext, ShiftType


class ScheduleAnalyzer:
    """
    Staffing review based on violation patterns and per-nurse load.

    Groups violations by rule, lists understaffed slots, flags nurses below
    the monthly off-day target and nurses carrying well above the average
    weighted hours, and suggests where extra staff would help.
    """

    def __init__(self, context: SchedulerContext, overwork_ratio: float = 1.2):
        self.context = context
        self.nurses = {n.id: n for n in context.nurses}
        self.overwork_ratio = overwork_ratio

    def analyze(self, schedule: Schedule) -> Dict:
        """Analyze staffing based on a schedule and its violations."""
        violations_by_rule = defaultdict(int)
        understaffed = []
        understaffed_by_shift = defaultdict(int)

        for violation in schedule.violations:
            violations_by_rule[violation.rule] += 1
            if violation.rule == 'understaffed':
                understaffed.append({
                    'date': violation.date,
                    'shift_type': violation.shift_type.value if violation.shift_type else None,
                    'reason': violation.reason,
                })
                if violation.shift_type is not None:
                    understaffed_by_shift[violation.shift_type.value] += 1

        included = schedule.included_statistics()
        hours = [s.weighted_hours for s in included.values()]
        average_hours = sum(hours) / len(hours) if hours else 0

        overworked = []
        for nurse_id, stats in included.items():
            if average_hours > 0 and stats.weighted_hours > average_hours * self.overwork_ratio:
                overworked.append({
                    'nurse_id': nurse_id,
                    'name': self.nurses[nurse_id].display_name if nurse_id in self.nurses else nurse_id,
                    'weighted_hours': round(stats.weighted_hours, 1),
                    'average_hours': round(average_hours, 1),
                    'reason': f"{round(stats.weighted_hours / average_hours * 100)}% of the average weighted hours",
                })

        target = self.context.settings.monthly_off_days
        off_shortfalls = []
        for nurse_id, stats in schedule.statistics.items():
            off_days = stats.shift_counts.get(ShiftType.OFF.value, 0)
            if off_days < target:
                off_shortfalls.append({
                    'nurse_id': nurse_id,
                    'off_days': off_days,
                    'target': target,
                    'missing': target - off_days,
                })

        return {
            'violations_by_rule': dict(sorted(violations_by_rule.items(), key=lambda x: -x[1])),
            'total_violations': len(schedule.violations),
            'understaffed_slots': understaffed,
            'understaffed_by_shift': dict(understaffed_by_shift),
            'charge_distribution': analyze_charge_distribution(schedule.statistics),
            'fairness_ranking': rank_by_fairness(schedule.statistics),
            'off_day_shortfalls': off_shortfalls,
            'overworked_nurses': sorted(overworked, key=lambda x: -x['weighted_hours']),
            'hiring_recommendations': self._recommend(understaffed_by_shift, len(schedule.assignments)),
        }

    def _recommend(self, understaffed_by_shift: Dict[str, int], num_days: int) -> List[Dict]:
        recommendations = []
        for shift_value, gaps in sorted(understaffed_by_shift.items(), key=lambda x: -x[1]):
            share = gaps / num_days if num_days else 0
            shift_type = ShiftType(shift_value)
            recommendations.append({
                'shift_type': shift_value,
                'urgency': 'HIGH' if share > 0.5 else 'MEDIUM' if share > 0.2 else 'LOW',
                'gaps': gaps,
                'reason': f"{shift_type.label} was short on {gaps} of {num_days} days",
            })
        return recommendations


def analyze_schedule(schedule: Schedule, context: SchedulerContext) -> Dict:
    """Convenience wrapper around ScheduleAnalyzer"""
    return ScheduleAnalyzer(context).analyze(schedule)
