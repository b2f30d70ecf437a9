"""Anomaly detector - submitted identity vs. bureau-echoed identity.

Compares each submitted form field against the value every responding
bureau echoed back, using a field-specific equality rule. At most one
anomaly is surfaced per field; its message names every disagreeing
bureau.

Severity policy:
    critical  SSN or birth date mismatch, or all responding bureaus disagree
    warning   anything else (single-bureau noise, formatting differences)

A suggested value is offered when a plurality of responding bureaus
agree on something other than the submission. Ties offer nothing.

Only MISMATCHING data is flagged. A bureau that echoed nothing for a
field is not responding for that field and is not an anomaly.
"""

import logging
from collections import Counter
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from features.canonical_record import CanonicalRecord
from schemas.anomaly import FIELD_LABELS, Anomaly, AnomalyReport, IdentityForm
from schemas.source import SOURCE_ORDER, Bureau, get_bureau_display_name
from utils.helpers import collapse_whitespace, digits_only, mask_ssn, parse_date

logger = logging.getLogger(__name__)

CRITICAL_FIELDS = frozenset({"ssn", "birth_date"})

SSN_LENGTH = 9


def _normalize_ssn(value: str) -> str:
    return digits_only(value)


def _normalize_birth_date(value: str) -> str:
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else collapse_whitespace(value)


def _normalize_postal_code(value: str) -> str:
    return digits_only(value)[:5]


def _normalize_phone(value: str) -> str:
    digits = digits_only(value)
    if len(digits) == 11 and digits.startswith("1"):
        return digits[1:]
    return digits


# Form field -> normalization applied to both sides before comparison.
# Order here is the order anomalies are reported in.
FIELD_RULES: Dict[str, Callable[[str], str]] = {
    "ssn": _normalize_ssn,
    "birth_date": _normalize_birth_date,
    "first_name": collapse_whitespace,
    "middle_name": collapse_whitespace,
    "last_name": collapse_whitespace,
    "address_line1": collapse_whitespace,
    "address_line2": collapse_whitespace,
    "city": collapse_whitespace,
    "state": collapse_whitespace,
    "postal_code": _normalize_postal_code,
    "phone": _normalize_phone,
}


def _values_match(field: str, submitted: str, echoed: str) -> bool:
    if field == "ssn" and len(echoed) < SSN_LENGTH:
        # Masked echo ('XXX-XX-6789'): only the visible suffix can be compared
        return bool(echoed) and submitted.endswith(echoed)
    return submitted == echoed


def _plurality(values: List[str]) -> Optional[str]:
    """Most common value, or None when the top count is tied."""
    if not values:
        return None
    ranked = Counter(values).most_common()
    if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
        return None
    return ranked[0][0]


def _display_user_value(field: str, raw: str) -> str:
    return mask_ssn(raw) if field == "ssn" else raw


def _join_names(names: List[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    return ", ".join(names[:-1]) + " and " + names[-1]


def _compare_field(
    field: str,
    submitted_raw: str,
    records: Mapping[Bureau, Optional[CanonicalRecord]],
    order: Sequence[Bureau],
) -> Optional[Anomaly]:
    normalize = FIELD_RULES[field]
    submitted = normalize(submitted_raw)
    if not submitted:
        return None

    # (bureau, normalized echo, raw echo) for every bureau that echoed this field
    responding: List[Tuple[Bureau, str, str]] = []
    for source in order:
        record = records.get(source)
        if record is None:
            continue
        raw = record.request_echo.get(field)
        if not raw:
            continue
        echoed = normalize(raw)
        if echoed:
            responding.append((source, echoed, raw))

    mismatched = [r for r in responding if not _values_match(field, submitted, r[1])]
    if not mismatched:
        return None

    all_disagree = len(mismatched) == len(responding)
    severity = "critical" if field in CRITICAL_FIELDS or all_disagree else "warning"

    # Masked SSN echoes cannot vote for a full replacement value
    voters = [r for r in responding if not (field == "ssn" and len(r[1]) < SSN_LENGTH)]
    winner = _plurality([r[1] for r in voters])
    suggested_value = None
    if winner is not None and not _values_match(field, submitted, winner):
        suggested_value = next(raw for _, echoed, raw in voters if echoed == winner)
        if field == "ssn":
            suggested_value = digits_only(suggested_value)

    label = FIELD_LABELS.get(field, field)
    names = [get_bureau_display_name(s) for s, _, _ in mismatched]
    message = (
        f"{label} does not match records at {_join_names(names)} "
        f"({len(mismatched)} of {len(responding)} responding bureaus)."
    )

    return Anomaly(
        id=f"bureau-{field.replace('_', '-')}",
        field=field,
        field_label=label,
        severity=severity,
        message=message,
        source=", ".join(names),
        user_value=_display_user_value(field, submitted_raw),
        suggested_value=suggested_value,
    )


def deduplicate_anomalies(anomalies: Iterable[Anomaly]) -> List[Anomaly]:
    """Keep one anomaly per field: a critical replaces a warning, else first wins."""
    by_field: Dict[str, Anomaly] = {}
    for anomaly in anomalies:
        existing = by_field.get(anomaly.field)
        if existing is None:
            by_field[anomaly.field] = anomaly
        elif anomaly.severity == "critical" and existing.severity != "critical":
            by_field[anomaly.field] = anomaly
    return list(by_field.values())


def detect_anomalies(
    form: IdentityForm,
    records: Mapping[Bureau, Optional[CanonicalRecord]],
    order: Sequence[Bureau] = SOURCE_ORDER,
    identity_anomalies: Iterable[Anomaly] = (),
) -> AnomalyReport:
    """Cross-reference the submitted form against every bureau's echo.

    Args:
        form: The submitted identity form.
        records: Bureau -> canonical record (None for unavailable sources).
        order: Source iteration order for votes and messages.
        identity_anomalies: Extra anomalies from identity-verification and
            fraud-check payloads, merged per field after bureau checks.

    Returns:
        AnomalyReport with at most one anomaly per field.
    """
    anomalies: List[Anomaly] = []
    for field in FIELD_RULES:
        anomaly = _compare_field(field, getattr(form, field, ""), records, order)
        if anomaly is not None:
            anomalies.append(anomaly)

    anomalies.extend(identity_anomalies)
    deduped = deduplicate_anomalies(anomalies)

    if deduped:
        logger.info(
            f"Detected {len(deduped)} identity anomalies "
            f"({sum(1 for a in deduped if a.severity == 'critical')} critical)"
        )
    return AnomalyReport.from_anomalies(deduped)
