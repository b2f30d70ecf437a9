"""Scoring policy loader.

Loads and caches the data-quality deductions and readiness bands from YAML.
"""

from typing import Dict, Any, Optional, List
from functools import lru_cache
from dataclasses import dataclass

import yaml

from config.settings import SCORING_POLICY_FILE


@dataclass(frozen=True)
class ScoreBand:
    """One row of a readiness points table."""
    points: int
    impact: str
    lower: Optional[float] = None   # inclusive lower bound (min)
    upper: Optional[float] = None   # bound for below/max rows
    inclusive_upper: bool = False
    rating: str = ""

    def matches(self, value: float) -> bool:
        if self.lower is not None and value < self.lower:
            return False
        if self.upper is not None:
            if self.inclusive_upper:
                return value <= self.upper
            return value < self.upper
        return True


@dataclass(frozen=True)
class TierThreshold:
    tier: str
    min_score: int


@lru_cache(maxsize=1)
def load_scoring_policy() -> Dict[str, Any]:
    """Load and cache the scoring policy from YAML."""
    with open(SCORING_POLICY_FILE, 'r') as f:
        return yaml.safe_load(f)


def get_deduction_weights() -> Dict[str, int]:
    """Get points deducted per finding severity."""
    config = load_scoring_policy()
    deductions = config.get('data_quality', {}).get('deductions', {})
    return {
        'error': int(deductions.get('error', 15)),
        'warning': int(deductions.get('warning', 5)),
        'info': int(deductions.get('info', 0)),
    }


def get_score_bands(component: str) -> List[ScoreBand]:
    """
    Get the ordered points bands for a readiness component.

    Args:
        component: One of 'credit_score', 'utilization_pct',
            'derogatory_count', 'tradeline_count'

    Returns:
        List of ScoreBand, checked in order. Empty if component is unknown.
    """
    config = load_scoring_policy()
    rows = config.get('readiness', {}).get(component, [])

    bands = []
    for row in rows:
        if 'below' in row:
            bands.append(ScoreBand(
                points=row['points'], impact=row['impact'],
                upper=row['below'], rating=row.get('rating', ''),
            ))
        elif 'max' in row:
            bands.append(ScoreBand(
                points=row['points'], impact=row['impact'],
                upper=row['max'], inclusive_upper=True, rating=row.get('rating', ''),
            ))
        else:
            bands.append(ScoreBand(
                points=row['points'], impact=row['impact'],
                lower=row.get('min'), rating=row.get('rating', ''),
            ))
    return bands


def get_tier_thresholds() -> List[TierThreshold]:
    """Get tier cut-offs sorted from best to worst."""
    config = load_scoring_policy()
    rows = config.get('readiness', {}).get('tiers', [])
    thresholds = [TierThreshold(tier=str(r['tier']), min_score=int(r['min'])) for r in rows]
    return sorted(thresholds, key=lambda t: t.min_score, reverse=True)
