"""
Nurse Shift Scheduler - Fairness Model

Weighted hours are the fairness currency. Individual scores measure distance
from the population mean (z-score), the population index measures spread
(coefficient of variation). Dedicated-role nurses never enter either
computation and report FAIRNESS_NOT_APPLICABLE instead of a score.
"""

import math
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .models import FAIRNESS_NOT_APPLICABLE, NurseScore, NurseStatistics, Schedule


StatisticsLike = Mapping[str, Union[NurseStatistics, Mapping]]


def _mean_std(values: List[float]):
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return mean, math.sqrt(variance)


def _field(stats, name: str, key: str):
    """Read a field from a NurseStatistics or a serialized camelCase dict"""
    if isinstance(stats, Mapping):
        return stats[key]
    return getattr(stats, name)


def _included(statistics: StatisticsLike) -> Dict:
    return {
        nurse_id: stats for nurse_id, stats in statistics.items()
        if not (stats.get('dedicated', False) if isinstance(stats, Mapping) else stats.dedicated)
    }


def calculate_fairness_score(individual_weighted_hours: float,
                             population: Union[Iterable[float], Mapping[str, NurseScore]]) -> float:
    """
    Fairness score in [0, 100]; 100 means exactly on the population mean.

    `population` holds the weighted hours of every included nurse, either as
    plain numbers or as a nurse id -> NurseScore map. A z-score of 2 or more
    scores 0.
    """
    if isinstance(population, Mapping):
        hours = [s.weighted_hours for s in population.values()]
    else:
        hours = list(population)

    if not hours:
        return 100.0

    mean, std_dev = _mean_std(hours)
    if mean == 0 or std_dev == 0:
        return 100.0

    z_score = abs(individual_weighted_hours - mean) / std_dev
    score = max(0.0, min(100.0, 100 - z_score * 50))
    return round(score, 1)


def calculate_overall_fairness(statistics: StatisticsLike) -> Dict[str, float]:
    """
    Population summary of weighted hours over non-dedicated nurses.

    fairnessIndex = clamp(100 - cv * 5, 0, 100) where cv is the coefficient of
    variation in percent. This is what the multi-pass driver maximizes.
    """
    hours = [_field(s, 'weighted_hours', 'weightedHours') for s in _included(statistics).values()]

    if not hours:
        return {'average': 0.0, 'stdDev': 0.0, 'min': 0.0, 'max': 0.0, 'fairnessIndex': 100.0}

    average, std_dev = _mean_std(hours)
    cv = (std_dev / average) * 100 if average > 0 else 0
    fairness_index = max(0.0, min(100.0, 100 - cv * 5))

    return {
        'average': round(average, 1),
        'stdDev': round(std_dev, 1),
        'min': round(min(hours), 1),
        'max': round(max(hours), 1),
        'fairnessIndex': round(fairness_index, 1),
    }


def rank_by_fairness(statistics: StatisticsLike) -> List[Dict]:
    """Non-dedicated nurses ordered by fairness score, rank 1 closest to the mean"""
    entries = [
        {
            'userId': nurse_id,
            'weightedHours': _field(stats, 'weighted_hours', 'weightedHours'),
            'fairnessScore': _field(stats, 'fairness_score', 'fairnessScore'),
        }
        for nurse_id, stats in _included(statistics).items()
    ]

    # Stable: equal scores keep roster order
    entries.sort(key=lambda e: -e['fairnessScore'])

    for index, entry in enumerate(entries):
        entry['rank'] = index + 1

    return entries


def analyze_charge_distribution(statistics: StatisticsLike) -> Dict:
    """Spread of charge assignments; balanced when stdDev is within 30% of the mean"""
    counts = [_field(s, 'charge_count', 'chargeCount') for s in _included(statistics).values()]

    if not counts:
        return {'average': 0.0, 'stdDev': 0.0, 'isBalanced': True}

    average, std_dev = _mean_std(counts)
    is_balanced = average == 0 or std_dev / average <= 0.3

    return {
        'average': round(average, 1),
        'stdDev': round(std_dev, 1),
        'isBalanced': is_balanced,
    }


def score_statistics(scores: Mapping[str, NurseScore], dedicated_ids: Iterable[str]) -> Dict[str, float]:
    """Fairness score per nurse; dedicated nurses get the not-applicable sentinel"""
    dedicated = set(dedicated_ids)
    population = [s.weighted_hours for nid, s in scores.items() if nid not in dedicated]

    return {
        nurse_id: (
            FAIRNESS_NOT_APPLICABLE if nurse_id in dedicated
            else calculate_fairness_score(score.weighted_hours, population)
        )
        for nurse_id, score in scores.items()
    }


class ScheduleScorer:
    """
    Candidate scoring for the multi-pass driver.

    Higher fairness index wins; the breakdown carries the population summary
    plus violation counts so callers can report why a candidate was chosen.
    """

    def score(self, schedule: Schedule) -> Dict:
        overall = calculate_overall_fairness(schedule.statistics)
        understaffed = sum(1 for v in schedule.violations if v.rule == 'understaffed')

        return {
            'fairness_index': overall['fairnessIndex'],
            'breakdown': {
                **overall,
                'violations': len(schedule.violations),
                'understaffed_slots': understaffed,
                'charge_distribution': analyze_charge_distribution(schedule.statistics),
            }
        }

    def is_better(self, candidate: Dict, incumbent: Optional[Dict]) -> bool:
        """Strictly higher fairness index replaces the incumbent"""
        if incumbent is None:
            return True
        return candidate['fairness_index'] > incumbent['fairness_index']
