"""Identity-verification and fraud-check signals.

Turns FlexID and Fraud Finder payloads, plus the spread of bureau scores,
into anomalies for the anomaly detector and structural findings for the
data quality report.

KEY RULE: only explicit contradictions are flagged. A payload that is
absent, marked not-registered, or simply silent on a field produces
nothing.

NO network calls - payloads arrive already fetched.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from features.canonical_record import CanonicalRecord
from schemas.anomaly import FIELD_LABELS, Anomaly, IdentityForm
from schemas.data_quality import Finding
from schemas.source import SOURCE_ORDER, Bureau, get_bureau_display_name
from utils.helpers import mask_ssn, parse_number

logger = logging.getLogger(__name__)

FLEXID_SOURCE = "LexisNexis FlexID"
FRAUD_FINDER_SOURCE = "CRS Fraud Finder"
TRI_BUREAU_SOURCE = "Tri-Bureau Comparison"

# CVI below this (but above 0 = no data) signals weak identity confidence
LOW_CVI_THRESHOLD = 20
CVI_RANGE = (0, 50)
FRAUD_SCORE_RANGE = (0, 100)

SCORE_SPREAD_CRITICAL = 80
SCORE_SPREAD_WARNING = 50

KNOWN_EMAIL_STATUSES = {"valid", "invalid", "unknown", "risky"}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _flexid_result(payload: Dict[str, Any]) -> Dict[str, Any]:
    return _as_dict(payload.get("result")) or payload


def _address_value(form: IdentityForm) -> str:
    return ", ".join(p for p in (form.address_line1, form.city, form.state) if p)


def flexid_anomalies(payload: Optional[Mapping[str, Any]], form: IdentityForm) -> List[Anomaly]:
    """Field-level mismatches FlexID explicitly reported as False."""
    if not isinstance(payload, dict) or not payload or payload.get("notRegistered"):
        return []

    result = _flexid_result(payload)
    elements = _as_dict(result.get("verifiedElementSummary")) or _as_dict(payload.get("verifiedElements"))

    anomalies = []
    if elements.get("streetAddress") is False or elements.get("address") is False:
        anomalies.append(Anomaly(
            id="flexid-address", field="address_line1", field_label=FIELD_LABELS["address_line1"],
            source=FLEXID_SOURCE, severity="warning",
            message="Address does not match records associated with this identity.",
            user_value=form.address_line1,
        ))
    if elements.get("homePhone") is False or elements.get("phone") is False:
        anomalies.append(Anomaly(
            id="flexid-phone", field="phone", field_label=FIELD_LABELS["phone"],
            source=FLEXID_SOURCE, severity="warning",
            message="Phone number does not match records for this identity.",
            user_value=form.phone,
        ))
    if elements.get("ssn") is False:
        anomalies.append(Anomaly(
            id="flexid-ssn", field="ssn", field_label=FIELD_LABELS["ssn"],
            source=FLEXID_SOURCE, severity="critical",
            message="SSN does not match records for this identity.",
            user_value=mask_ssn(form.ssn),
        ))
    if elements.get("dateOfBirth") is False or elements.get("dob") is False:
        anomalies.append(Anomaly(
            id="flexid-dob", field="birth_date", field_label=FIELD_LABELS["birth_date"],
            source=FLEXID_SOURCE, severity="critical",
            message="Date of birth does not match records for this identity.",
            user_value=form.birth_date,
        ))

    cvi = parse_number(_as_dict(result.get("comprehensiveVerification")).get("comprehensiveVerificationIndex"))
    if cvi is not None and 0 < cvi < LOW_CVI_THRESHOLD:
        anomalies.append(Anomaly(
            id="flexid-cvi-low", field="ssn", field_label="Identity Confidence",
            source=FLEXID_SOURCE, severity="critical",
            message=f"Low verification confidence (CVI: {int(cvi)}). Multiple identity fields may not match.",
            user_value=mask_ssn(form.ssn),
        ))
    return anomalies


def fraud_finder_anomalies(payload: Optional[Mapping[str, Any]], form: IdentityForm) -> List[Anomaly]:
    """Email, postal and name-at-address contradictions from Fraud Finder."""
    if not isinstance(payload, dict) or not payload:
        return []

    postal = _as_dict(_as_dict(payload.get("risk")).get("postal"))
    email_validation = _as_dict(payload.get("email_validation"))

    anomalies = []
    if email_validation.get("status") == "invalid":
        anomalies.append(Anomaly(
            id="fraud-email", field="email", field_label=FIELD_LABELS["email"],
            source=FRAUD_FINDER_SOURCE, severity="critical",
            message="Email address is invalid or does not exist.",
            user_value=form.email,
        ))
    if postal.get("deliverability") == "undeliverable":
        anomalies.append(Anomaly(
            id="fraud-address-undeliverable", field="address_line1", field_label=FIELD_LABELS["address_line1"],
            source=FRAUD_FINDER_SOURCE, severity="warning",
            message="Address flagged as undeliverable by postal service.",
            user_value=_address_value(form),
        ))
    if postal.get("first_name_match") == "mismatch":
        anomalies.append(Anomaly(
            id="fraud-firstname-mismatch", field="first_name", field_label=FIELD_LABELS["first_name"],
            source=FRAUD_FINDER_SOURCE, severity="warning",
            message="First name does not match postal records at this address.",
            user_value=form.first_name,
        ))
    if postal.get("last_name_match") == "mismatch":
        anomalies.append(Anomaly(
            id="fraud-lastname-mismatch", field="last_name", field_label=FIELD_LABELS["last_name"],
            source=FRAUD_FINDER_SOURCE, severity="warning",
            message="Last name does not match postal records at this address.",
            user_value=form.last_name,
        ))
    if postal.get("address_type") == "Commercial":
        anomalies.append(Anomaly(
            id="fraud-address-commercial", field="address_line1", field_label=FIELD_LABELS["address_line1"],
            source=FRAUD_FINDER_SOURCE, severity="warning",
            message="Address identified as a commercial location, not a residential address.",
            user_value=_address_value(form),
        ))
    return anomalies


def score_spread_anomaly(
    records: Mapping[Bureau, Optional[CanonicalRecord]],
    order: Sequence[Bureau] = SOURCE_ORDER,
) -> Optional[Anomaly]:
    """Flag a large disagreement between bureau scores (mixed file risk)."""
    scores = [
        (source, records[source].score_value)
        for source in order
        if records.get(source) is not None and (records[source].score_value or 0) > 0
    ]
    if len(scores) < 2:
        return None

    # First in order wins ties for highest/lowest
    highest = max(scores, key=lambda s: s[1])
    lowest = min(scores, key=lambda s: s[1])
    spread = highest[1] - lowest[1]
    pair = (
        f"{get_bureau_display_name(highest[0])} ({highest[1]}) and "
        f"{get_bureau_display_name(lowest[0])} ({lowest[1]})"
    )

    if spread >= SCORE_SPREAD_CRITICAL:
        return Anomaly(
            id="bureau-spread-extreme", field="credit_file", field_label=FIELD_LABELS["credit_file"],
            source=TRI_BUREAU_SOURCE, severity="critical",
            message=(
                f"Extreme score discrepancy ({spread} pts) between {pair}. "
                "This may indicate a mixed credit file or data entry error."
            ),
        )
    if spread >= SCORE_SPREAD_WARNING:
        return Anomaly(
            id="bureau-spread-large", field="credit_file", field_label=FIELD_LABELS["credit_file"],
            source=TRI_BUREAU_SOURCE, severity="warning",
            message=(
                f"Large score spread ({spread} pts) between {pair}. "
                "Verify your address and name are consistent across all accounts."
            ),
        )
    return None


def collect_identity_anomalies(
    form: IdentityForm,
    records: Mapping[Bureau, Optional[CanonicalRecord]],
    flexid_payload: Optional[Mapping[str, Any]] = None,
    fraud_payload: Optional[Mapping[str, Any]] = None,
    order: Sequence[Bureau] = SOURCE_ORDER,
) -> List[Anomaly]:
    """All supplementary anomalies, FlexID first, then Fraud Finder, then score spread."""
    anomalies = flexid_anomalies(flexid_payload, form)
    anomalies.extend(fraud_finder_anomalies(fraud_payload, form))
    spread = score_spread_anomaly(records, order)
    if spread is not None:
        anomalies.append(spread)
    return anomalies


# =============================================================================
# STRUCTURAL FINDINGS
# =============================================================================

def check_flexid_payload(payload: Optional[Mapping[str, Any]]) -> List[Finding]:
    """Range checks on a FlexID response. Absent payloads produce nothing."""
    if not isinstance(payload, dict) or not payload:
        return []

    findings = []
    verification = _as_dict(_flexid_result(payload).get("comprehensiveVerification"))
    if "comprehensiveVerificationIndex" in verification:
        cvi = parse_number(verification["comprehensiveVerificationIndex"])
        if cvi is None or not (CVI_RANGE[0] <= cvi <= CVI_RANGE[1]):
            findings.append(Finding(
                source="FlexID", severity="warning", field="comprehensiveVerificationIndex",
                message=f"CVI outside expected range ({CVI_RANGE[0]}–{CVI_RANGE[1]}).",
            ))
    return findings


def check_fraud_finder_payload(payload: Optional[Mapping[str, Any]]) -> List[Finding]:
    """Range and vocabulary checks on a Fraud Finder response."""
    if not isinstance(payload, dict) or not payload:
        return []

    findings = []
    risk = _as_dict(payload.get("risk"))
    score = risk.get("score")
    if isinstance(score, (int, float)) and not isinstance(score, bool):
        if not (FRAUD_SCORE_RANGE[0] <= score <= FRAUD_SCORE_RANGE[1]):
            findings.append(Finding(
                source="Fraud Finder", severity="warning", field="risk.score",
                message=f"Risk score outside {FRAUD_SCORE_RANGE[0]}–{FRAUD_SCORE_RANGE[1]}.",
            ))

    email_validation = _as_dict(payload.get("email_validation"))
    if email_validation.get("status") is not None:
        status = str(email_validation["status"]).lower()
        if status not in KNOWN_EMAIL_STATUSES:
            findings.append(Finding(
                source="Fraud Finder", severity="info", field="email_validation.status",
                message=f"Unexpected email status: {status}.",
            ))
    return findings
