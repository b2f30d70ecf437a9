"""Tests for primary-record selection and green readiness scoring."""

import pytest

from pipeline.readiness_scorer import (
    NoPrimaryRecordError,
    assign_tier,
    compute_credit_metrics,
    score_readiness,
    select_primary_record,
)
from pipeline.source_normalizer import normalize_source, normalize_sources
from schemas.source import Bureau

from conftest import make_payload


def _record(source=Bureau.EXPERIAN, **kwargs):
    return normalize_source(make_payload(**kwargs), source).record


def _revolving(balance, limit):
    return {"subscriberName": "CARD", "accountType": "Revolving",
            "currentBalanceAmount": balance, "creditLimitAmount": limit}


class TestPrimarySelection:

    def test_first_available_in_order(self, tri_bureau):
        records = {s: r.record for s, r in normalize_sources(tri_bureau).items()}
        assert select_primary_record(records).source == Bureau.EXPERIAN

    def test_skips_unavailable_sources(self):
        records = {Bureau.EXPERIAN: None, Bureau.TRANSUNION: None,
                   Bureau.EQUIFAX: _record(Bureau.EQUIFAX)}
        assert select_primary_record(records).source == Bureau.EQUIFAX

    def test_custom_order(self, tri_bureau):
        records = {s: r.record for s, r in normalize_sources(tri_bureau).items()}
        order = (Bureau.EQUIFAX, Bureau.EXPERIAN, Bureau.TRANSUNION)
        assert select_primary_record(records, order).source == Bureau.EQUIFAX

    def test_all_unavailable_raises(self):
        with pytest.raises(NoPrimaryRecordError):
            select_primary_record({Bureau.EXPERIAN: None, Bureau.TRANSUNION: None, Bureau.EQUIFAX: None})

    def test_score_readiness_without_record_raises(self):
        with pytest.raises(NoPrimaryRecordError):
            score_readiness(None)


class TestMetrics:

    def test_default_payload_metrics(self):
        metrics = compute_credit_metrics(_record())
        assert metrics.credit_score == 720
        assert metrics.utilization == pytest.approx(0.2)
        assert metrics.total_debt == 14000
        assert metrics.total_credit_limit == 30000
        assert metrics.tradeline_count == 2

    def test_no_revolving_limit_means_zero_utilization(self):
        tradelines = [{"subscriberName": "AUTO", "accountType": "Installment", "currentBalanceAmount": 5000}]
        assert compute_credit_metrics(_record(tradelines=tradelines)).utilization == 0.0

    def test_utilization_never_negative(self):
        metrics = compute_credit_metrics(_record(tradelines=[_revolving(-300, 1000)]))
        assert metrics.utilization == 0.0

    def test_missing_score_counts_as_zero(self):
        payload = make_payload()
        del payload["scores"]
        record = normalize_source(payload, Bureau.EXPERIAN).record
        assert compute_credit_metrics(record).credit_score == 0


class TestReadiness:

    def test_default_payload_is_tier_b(self):
        readiness = score_readiness(_record())
        # 30 (score 720) + 20 (20% util) + 15 (no derogs) + 4 (2 accounts)
        assert readiness.score == 69
        assert readiness.tier == "B"
        assert readiness.source == Bureau.EXPERIAN
        assert [f.label for f in readiness.factors] == [
            "Credit Score", "Credit Utilization", "Derogatory Marks", "Account Diversity",
        ]

    def test_best_profile_is_tier_a(self):
        tradelines = [_revolving(100, 10000)] + [
            {"subscriberName": f"LENDER {i}", "accountType": "Installment", "currentBalanceAmount": 1000}
            for i in range(4)
        ]
        readiness = score_readiness(_record(score=810, tradelines=tradelines))
        assert readiness.score == 100
        assert readiness.tier == "A"

    def test_worst_profile_is_tier_f(self):
        payload = make_payload(score=520, tradelines=[_revolving(9500, 10000)],
                               summaries={"derogatorySummary": {"collectionsCount": 6}})
        readiness = score_readiness(normalize_source(payload, Bureau.EXPERIAN).record)
        # 8 + 2 + 0 + 4
        assert readiness.score == 14
        assert readiness.tier == "F"
        assert readiness.derogatory_count == 6

    def test_tier_monotone_in_credit_score(self):
        tiers = "ABCDF"
        previous = None
        for score in range(300, 851, 10):
            tier = score_readiness(_record(score=score)).tier
            if previous is not None:
                assert tiers.index(tier) <= tiers.index(previous)
            previous = tier

    def test_lower_utilization_never_worse(self):
        low = score_readiness(_record(tradelines=[_revolving(500, 10000)]))
        high = score_readiness(_record(tradelines=[_revolving(8000, 10000)]))
        assert low.score >= high.score

    @pytest.mark.parametrize("score,tier", [
        (100, "A"), (80, "A"), (79, "B"), (65, "B"), (64, "C"), (50, "C"), (49, "D"), (35, "D"), (34, "F"), (0, "F"),
    ])
    def test_tier_thresholds(self, score, tier):
        assert assign_tier(score) == tier
