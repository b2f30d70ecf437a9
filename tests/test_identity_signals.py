"""Tests for FlexID, Fraud Finder and score-spread signals."""

import pytest

from pipeline.identity_signals import (
    check_flexid_payload,
    check_fraud_finder_payload,
    collect_identity_anomalies,
    flexid_anomalies,
    fraud_finder_anomalies,
    score_spread_anomaly,
)
from pipeline.source_normalizer import normalize_sources
from schemas.source import Bureau

from conftest import make_payload


def _records(scores):
    payloads = {source: make_payload(score=score) for source, score in scores.items()}
    return {source: result.record for source, result in normalize_sources(payloads).items()}


class TestFlexId:

    @pytest.mark.parametrize("payload", [None, {}, {"notRegistered": True}])
    def test_absent_or_unregistered_produces_nothing(self, form, payload):
        assert flexid_anomalies(payload, form) == []

    def test_only_explicit_false_is_flagged(self, form):
        payload = {"result": {"verifiedElementSummary": {"streetAddress": False, "homePhone": None, "ssn": True}}}
        anomalies = flexid_anomalies(payload, form)
        assert [(a.field, a.severity) for a in anomalies] == [("address_line1", "warning")]

    def test_ssn_and_dob_mismatch_are_critical(self, form):
        payload = {"result": {"verifiedElementSummary": {"ssn": False, "dob": False}}}
        anomalies = flexid_anomalies(payload, form)
        assert {a.field: a.severity for a in anomalies} == {"ssn": "critical", "birth_date": "critical"}
        assert anomalies[0].user_value == "••••6789"

    @pytest.mark.parametrize("cvi,flagged", [(0, False), (10, True), (19, True), (20, False), (40, False)])
    def test_low_cvi(self, form, cvi, flagged):
        payload = {"result": {"comprehensiveVerification": {"comprehensiveVerificationIndex": cvi}}}
        ids = [a.id for a in flexid_anomalies(payload, form)]
        assert ("flexid-cvi-low" in ids) is flagged

    def test_cvi_out_of_range_finding(self):
        payload = {"result": {"comprehensiveVerification": {"comprehensiveVerificationIndex": 75}}}
        findings = check_flexid_payload(payload)
        assert [(f.source, f.severity) for f in findings] == [("FlexID", "warning")]

    def test_cvi_in_range_no_finding(self):
        payload = {"result": {"comprehensiveVerification": {"comprehensiveVerificationIndex": 30}}}
        assert check_flexid_payload(payload) == []
        assert check_flexid_payload(None) == []


class TestFraudFinder:

    def test_clean_payload(self, form):
        payload = {"risk": {"score": 12, "postal": {"deliverability": "deliverable"}},
                   "email_validation": {"status": "valid"}}
        assert fraud_finder_anomalies(payload, form) == []
        assert check_fraud_finder_payload(payload) == []

    def test_invalid_email_is_critical(self, form):
        anomalies = fraud_finder_anomalies({"email_validation": {"status": "invalid"}}, form)
        assert [(a.field, a.severity) for a in anomalies] == [("email", "critical")]
        assert anomalies[0].user_value == "jane@example.com"

    def test_postal_flags_are_warnings(self, form):
        payload = {"risk": {"postal": {
            "deliverability": "undeliverable",
            "first_name_match": "mismatch",
            "last_name_match": "match",
            "address_type": "Commercial",
        }}}
        anomalies = fraud_finder_anomalies(payload, form)
        assert [a.id for a in anomalies] == [
            "fraud-address-undeliverable", "fraud-firstname-mismatch", "fraud-address-commercial",
        ]
        assert all(a.severity == "warning" for a in anomalies)
        assert anomalies[0].user_value == "42 Elm Street, Springfield, IL"

    def test_risk_score_out_of_range(self):
        findings = check_fraud_finder_payload({"risk": {"score": 140}})
        assert [(f.source, f.severity, f.field) for f in findings] == [("Fraud Finder", "warning", "risk.score")]

    def test_unknown_email_status_is_info(self):
        findings = check_fraud_finder_payload({"email_validation": {"status": "bouncing"}})
        assert [f.severity for f in findings] == ["info"]


class TestScoreSpread:

    def test_small_spread_ignored(self):
        assert score_spread_anomaly(_records({Bureau.EXPERIAN: 720, Bureau.EQUIFAX: 700})) is None

    def test_large_spread_is_warning(self):
        anomaly = score_spread_anomaly(_records({Bureau.EXPERIAN: 720, Bureau.TRANSUNION: 660}))
        assert anomaly.severity == "warning"
        assert anomaly.field == "credit_file"
        assert "Experian (720) and TransUnion (660)" in anomaly.message

    def test_extreme_spread_is_critical(self):
        anomaly = score_spread_anomaly(_records({
            Bureau.EXPERIAN: 700, Bureau.TRANSUNION: 790, Bureau.EQUIFAX: 705,
        }))
        assert anomaly.severity == "critical"
        assert "90 pts" in anomaly.message

    def test_single_score_ignored(self):
        assert score_spread_anomaly(_records({Bureau.EXPERIAN: 720})) is None


class TestCollect:

    def test_order_flexid_fraud_spread(self, form):
        anomalies = collect_identity_anomalies(
            form,
            _records({Bureau.EXPERIAN: 800, Bureau.EQUIFAX: 600}),
            flexid_payload={"result": {"verifiedElementSummary": {"homePhone": False}}},
            fraud_payload={"email_validation": {"status": "invalid"}},
        )
        assert [a.id for a in anomalies] == ["flexid-phone", "fraud-email", "bureau-spread-extreme"]

    def test_nothing_supplied(self, form):
        assert collect_identity_anomalies(form, {}) == []
