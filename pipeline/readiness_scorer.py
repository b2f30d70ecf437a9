"""Readiness scorer - tiered green-financing readiness from one primary record.

Reads only the selected primary record and its own tradelines, so the
recommender always sees a single consistent basis. Points per component
and tier cut-offs come from the scoring policy table.

All logic is deterministic. Factor text is the only formatting done here.
"""

import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

from config.policy_loader import ScoreBand, get_score_bands, get_tier_thresholds
from features.canonical_record import CanonicalRecord
from schemas.readiness import GreenReadiness, ReadinessFactor
from schemas.source import SOURCE_ORDER, Bureau
from utils.helpers import format_currency

logger = logging.getLogger(__name__)


class ReconciliationError(Exception):
    """Base class for hard failures of the reconciliation core."""
    pass


class NoPrimaryRecordError(ReconciliationError):
    """Raised when no source produced a usable canonical record."""
    pass


@dataclass(frozen=True)
class CreditMetrics:
    """Aggregate metrics of one canonical record."""
    credit_score: int
    utilization: float
    total_debt: float
    total_credit_limit: float
    revolving_balance: float
    revolving_limit: float
    tradeline_count: int
    derogatory_count: int


def select_primary_record(
    records: Mapping[Bureau, Optional[CanonicalRecord]],
    order: Sequence[Bureau] = SOURCE_ORDER,
) -> CanonicalRecord:
    """Pick the first available record in source order.

    Raises:
        NoPrimaryRecordError: If every source is unavailable.
    """
    for source in order:
        record = records.get(source)
        if record is not None:
            return record
    raise NoPrimaryRecordError("No primary record available: all sources failed")


def compute_credit_metrics(record: CanonicalRecord) -> CreditMetrics:
    """Derive utilization, debt and limit totals from a record's tradelines.

    Utilization = revolving balance / revolving limit, clamped non-negative;
    0 when there is no revolving limit.
    """
    total_debt = sum(tl.balance for tl in record.tradelines)
    total_limit = sum(tl.credit_limit for tl in record.tradelines)

    revolving = [tl for tl in record.tradelines if tl.is_revolving]
    revolving_balance = sum(tl.balance for tl in revolving)
    revolving_limit = sum(tl.credit_limit for tl in revolving)

    utilization = revolving_balance / revolving_limit if revolving_limit > 0 else 0.0

    return CreditMetrics(
        credit_score=record.score_value or 0,
        utilization=max(0.0, utilization),
        total_debt=total_debt,
        total_credit_limit=total_limit,
        revolving_balance=revolving_balance,
        revolving_limit=revolving_limit,
        tradeline_count=len(record.tradelines),
        derogatory_count=record.derogatory_count,
    )


def _pick_band(component: str, value: float) -> ScoreBand:
    bands = get_score_bands(component)
    for band in bands:
        if band.matches(value):
            return band
    # Below every configured floor (e.g. a negative count): worst band
    return bands[-1]


def _credit_score_factor(credit_score: int) -> Tuple[int, ReadinessFactor]:
    band = _pick_band("credit_score", credit_score)
    if band.impact == "positive":
        outlook = "you qualify for the best green financing rates." if band.rating == "Excellent" \
            else "you qualify for most green financing options."
    elif band.impact == "neutral":
        outlook = "many green financing options are available to you."
    else:
        outlook = "focus on free/low-cost green actions while building credit."
    return band.points, ReadinessFactor(
        label="Credit Score",
        impact=band.impact,
        description=f"Your credit score of {credit_score} is in the '{band.rating}' range: {outlook}",
    )


def _utilization_factor(metrics: CreditMetrics) -> Tuple[int, ReadinessFactor]:
    pct = metrics.utilization * 100
    band = _pick_band("utilization_pct", pct)
    if band.impact == "positive":
        description = f"Utilization at {pct:.0f}% is within the healthy range (below 30%)."
    else:
        description = (
            f"Utilization at {pct:.0f}% of a {format_currency(metrics.revolving_limit)} revolving limit. "
            "Paying down balances could unlock better rates."
        )
    return band.points, ReadinessFactor(label="Credit Utilization", impact=band.impact, description=description)


def _derogatory_factor(count: int) -> Tuple[int, ReadinessFactor]:
    band = _pick_band("derogatory_count", count)
    if count == 0:
        description = "No derogatory marks on your report, great for loan approvals."
    else:
        description = f"{count} derogatory mark(s) found. Resolving these will improve your options."
    return band.points, ReadinessFactor(label="Derogatory Marks", impact=band.impact, description=description)


def _diversity_factor(count: int) -> Tuple[int, ReadinessFactor]:
    band = _pick_band("tradeline_count", count)
    if count == 0:
        description = "No accounts found. Establishing credit history is the first step."
    else:
        description = f"{count} account(s) on file."
    return band.points, ReadinessFactor(label="Account Diversity", impact=band.impact, description=description)


def assign_tier(score: int) -> str:
    """Map a readiness score to its tier via the policy thresholds."""
    thresholds = get_tier_thresholds()
    for threshold in thresholds:
        if score >= threshold.min_score:
            return threshold.tier
    return thresholds[-1].tier


def score_readiness(record: Optional[CanonicalRecord]) -> GreenReadiness:
    """Compute the readiness score and tier for the primary record.

    Args:
        record: The primary canonical record (see select_primary_record).

    Returns:
        GreenReadiness with score 0-100, tier and contributing factors.

    Raises:
        NoPrimaryRecordError: If record is None.
    """
    if record is None:
        raise NoPrimaryRecordError("No primary record available: all sources failed")

    metrics = compute_credit_metrics(record)
    components = [
        _credit_score_factor(metrics.credit_score),
        _utilization_factor(metrics),
        _derogatory_factor(metrics.derogatory_count),
        _diversity_factor(metrics.tradeline_count),
    ]
    score = max(0, min(100, sum(points for points, _ in components)))
    factors: List[ReadinessFactor] = [factor for _, factor in components]

    readiness = GreenReadiness(
        tier=assign_tier(score),
        score=score,
        source=record.source,
        credit_score=metrics.credit_score,
        utilization=round(metrics.utilization, 4),
        total_debt=metrics.total_debt,
        total_credit_limit=metrics.total_credit_limit,
        tradeline_count=metrics.tradeline_count,
        derogatory_count=metrics.derogatory_count,
        factors=factors,
    )
    logger.debug(f"Readiness for {record.source.value}: score={score}, tier={readiness.tier}")
    return readiness
