"""Source normalization from raw bureau payloads.

Maps each bureau's vendor-shaped JSON into a CanonicalRecord and records
structural findings along the way. Score, tradelines, request echo and
trade summary are located through ordered extraction rules; the first
alias that parses wins.

Never raises for malformed input: malformed input becomes a Finding.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from config.settings import SCORE_MAX, SCORE_MIN
from features.canonical_record import CanonicalRecord, RequestEcho, Tradeline
from pipeline.extraction import (
    ACCOUNT_NUMBER_RULES,
    ACCOUNT_TYPE_RULES,
    BALANCE_RULES,
    CREDIT_LIMIT_RULES,
    CREDITOR_RULES,
    DATE_OPENED_RULES,
    MISSING,
    ExtractionRule,
    any_present,
    extract_first,
    parse_dict,
    parse_first_dict,
    parse_int,
    parse_list,
    parse_non_empty_list,
    parse_text,
    resolve_path,
)
from pipeline.tradeline_fingerprint import build_display_label, compute_fingerprint, full_account_id
from schemas.data_quality import Finding
from schemas.source import SOURCE_ORDER, Bureau
from utils.helpers import parse_date, parse_number

logger = logging.getLogger(__name__)


# =============================================================================
# PAYLOAD RULES
# =============================================================================

SCORE_RULES = (
    ExtractionRule("score:scores[0].scoreValue", ("scores", 0, "scoreValue"), parse_int),
    ExtractionRule("score:scores[0].value", ("scores", 0, "value"), parse_int),
    ExtractionRule("score:scores[0].score", ("scores", 0, "score"), parse_int),
    ExtractionRule("score:creditScore", ("creditScore",), parse_int),
    ExtractionRule("score:score", ("score",), parse_int),
)

# Non-empty arrays first; an explicitly empty top-level array is the last resort
TRADELINE_RULES = (
    ExtractionRule("tradelines:tradelines", ("tradelines",), parse_non_empty_list),
    ExtractionRule("tradelines:creditFiles[0].tradelines", ("creditFiles", 0, "tradelines"), parse_list),
    ExtractionRule("tradelines:creditFiles[0].trades", ("creditFiles", 0, "trades"), parse_list),
    ExtractionRule("tradelines:tradelines(empty)", ("tradelines",), parse_list),
)

ECHO_RULES = (
    ExtractionRule("echo:requestData", ("requestData",), parse_dict),
    ExtractionRule("echo:request", ("request",), parse_dict),
)

SUMMARIES_RULES = (
    ExtractionRule("summaries:summaries", ("summaries",), parse_first_dict),
    ExtractionRule("summaries:creditFiles[0].summaries", ("creditFiles", 0, "summaries"), parse_first_dict),
)

TRADE_SUMMARY_KEYS = ("tradeSummary", "TradeSummary")
UTILIZATION_KEYS = ("revolvingCreditUtilization", "RevolvingCreditUtilization", "revolving_credit_utilization")
BALANCE_TOTAL_KEYS = ("balanceTotal", "BalanceTotal", "balance_total")
COLLECTIONS_KEYS = ("collectionsCount", "CollectionsCount")

# Echo field -> aliases inside requestData (address fields read from addresses[0] first)
_ECHO_FIELDS: Dict[str, Sequence[str]] = {
    "first_name": ("firstName", "first_name", "FirstName"),
    "last_name": ("lastName", "last_name", "LastName"),
    "middle_name": ("middleName", "middle_name", "MiddleName"),
    "ssn": ("ssn", "SSN", "socialSecurityNumber"),
    "birth_date": ("birthDate", "dateOfBirth", "dob", "birth_date"),
    "phone": ("phone", "phoneNumber", "homePhone"),
}
_ECHO_ADDRESS_FIELDS: Dict[str, Sequence[str]] = {
    "address_line1": ("addressLine1", "streetAddress", "address_line1"),
    "address_line2": ("addressLine2", "address_line2"),
    "city": ("city", "City"),
    "state": ("state", "State"),
    "postal_code": ("postalCode", "zipCode", "zip", "postal_code"),
}


@dataclass
class NormalizationResult:
    """Output of normalizing one source: a record (or None) plus findings."""
    source: Bureau
    record: Optional[CanonicalRecord]
    findings: List[Finding] = field(default_factory=list)


def _finding(source: Bureau, severity: str, message: str, field_name: Optional[str] = None) -> Finding:
    return Finding(source="Credit", bureau=source, field=field_name, severity=severity, message=message)


def _first_key(obj: Dict[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if obj.get(key) is not None:
            return obj[key]
    return MISSING


def _extract_score(payload: Dict[str, Any], source: Bureau, findings: List[Finding]) -> Optional[int]:
    score, _ = extract_first(payload, SCORE_RULES)
    if score is None:
        if any_present(payload, SCORE_RULES):
            findings.append(_finding(source, "warning", "Score value is not a number.", "scores"))
        else:
            findings.append(_finding(source, "warning", "Missing or empty scores array.", "scores"))
        return None

    if score < SCORE_MIN or score > SCORE_MAX:
        findings.append(_finding(
            source, "warning",
            f"Score value {score} outside expected range ({SCORE_MIN}–{SCORE_MAX}).", "scores",
        ))
        return None
    return score


def _extract_raw_tradelines(payload: Dict[str, Any], source: Bureau, findings: List[Finding]) -> List[Any]:
    tradelines, _ = extract_first(payload, TRADELINE_RULES)
    if tradelines is not None:
        return tradelines

    if any_present(payload, TRADELINE_RULES):
        findings.append(_finding(source, "warning", "Malformed tradelines array.", "tradelines"))
    else:
        findings.append(_finding(source, "warning", "Missing tradelines array.", "tradelines"))
    return []


def _build_tradeline(raw: Dict[str, Any], source: Bureau, index: int, findings: List[Finding]) -> Tradeline:
    balance = extract_first(raw, BALANCE_RULES)[0]
    if balance is None and any_present(raw, BALANCE_RULES):
        findings.append(_finding(source, "warning", f"Tradeline {index + 1}: balance is not a number.", "balance"))
    elif balance is not None and balance < 0:
        findings.append(_finding(source, "warning", f"Tradeline {index + 1} has negative balance.", "tradeline"))

    credit_limit = extract_first(raw, CREDIT_LIMIT_RULES)[0]
    if credit_limit is None and any_present(raw, CREDIT_LIMIT_RULES):
        findings.append(_finding(
            source, "warning", f"Tradeline {index + 1}: credit limit is not a number.", "creditLimit",
        ))

    account_number = extract_first(raw, ACCOUNT_NUMBER_RULES)[0] or ""

    date_opened = extract_first(raw, DATE_OPENED_RULES)[0]
    if date_opened is not None and parse_date(date_opened) is None:
        findings.append(_finding(source, "info", f"Tradeline {index + 1}: dateOpened not parseable.", "dateOpened"))

    return Tradeline(
        source=source,
        index_in_source=index,
        fingerprint=compute_fingerprint(raw),
        display_label=build_display_label(raw),
        creditor=extract_first(raw, CREDITOR_RULES)[0] or "",
        account_type=extract_first(raw, ACCOUNT_TYPE_RULES)[0] or "",
        account_number=account_number,
        account_key=full_account_id(account_number),
        balance=balance if balance is not None else 0.0,
        credit_limit=credit_limit or 0.0,
        date_opened=date_opened,
    )


def _extract_request_echo(payload: Dict[str, Any]) -> RequestEcho:
    echo, _ = extract_first(payload, ECHO_RULES)
    if echo is None:
        return RequestEcho()

    values: Dict[str, Optional[str]] = {}
    for field_name, keys in _ECHO_FIELDS.items():
        raw = _first_key(echo, keys)
        values[field_name] = parse_text(raw) if raw is not MISSING else None

    address = parse_first_dict(echo.get("addresses")) or parse_dict(echo.get("address")) or echo
    for field_name, keys in _ECHO_ADDRESS_FIELDS.items():
        raw = _first_key(address, keys)
        values[field_name] = parse_text(raw) if raw is not MISSING else None

    return RequestEcho(**values)


def _extract_summaries(payload: Dict[str, Any], source: Bureau, findings: List[Finding]) -> tuple:
    """Return (balance_total, derogatory_count) and check the trade summary."""
    summaries, _ = extract_first(payload, SUMMARIES_RULES)
    if summaries is None:
        return None, 0

    balance_total = None
    trade_summary = _first_key(summaries, TRADE_SUMMARY_KEYS)
    if isinstance(trade_summary, dict):
        util_raw = _first_key(trade_summary, UTILIZATION_KEYS)
        # '>100' style values are bureau shorthand, not malformed
        if util_raw is not MISSING and not str(util_raw).strip().startswith(">"):
            util = parse_number(util_raw)
            if util is None:
                findings.append(_finding(source, "warning", "Utilization is not a number.", "revolvingCreditUtilization"))
            elif util < 0 or util > 100:
                findings.append(_finding(source, "warning", "Utilization outside 0–100.", "revolvingCreditUtilization"))

        raw_total = _first_key(trade_summary, BALANCE_TOTAL_KEYS)
        if raw_total is not MISSING:
            balance_total = parse_number(raw_total)
            if balance_total is None:
                findings.append(_finding(source, "warning", "Total balance is not a number.", "balanceTotal"))
            elif balance_total < 0:
                findings.append(_finding(source, "warning", "Negative total balance.", "balanceTotal"))
                balance_total = None

    derogatory_count = 0
    derog = resolve_path(summaries, ("derogatorySummary",))
    if isinstance(derog, dict):
        raw_count = _first_key(derog, COLLECTIONS_KEYS)
        if raw_count is not MISSING:
            count = parse_int(raw_count)
            if count is None:
                findings.append(_finding(source, "warning", "Collections count is not a number.", "collectionsCount"))
            else:
                derogatory_count = max(0, count)

    return balance_total, derogatory_count


def normalize_source(payload: Any, source: Bureau) -> NormalizationResult:
    """Normalize one bureau payload into a CanonicalRecord.

    Args:
        payload: Raw bureau response, or None if the fetch failed.
        source: Which bureau the payload came from.

    Returns:
        NormalizationResult with record=None when the source is unavailable.
    """
    findings: List[Finding] = []

    if not isinstance(payload, dict) or not payload:
        logger.warning(f"No usable payload from {source.value}")
        findings.append(_finding(source, "error", "No report returned."))
        return NormalizationResult(source=source, record=None, findings=findings)

    score_value = _extract_score(payload, source, findings)

    tradelines = []
    for index, raw in enumerate(_extract_raw_tradelines(payload, source, findings)):
        if not isinstance(raw, dict):
            findings.append(_finding(source, "warning", f"Tradeline {index + 1} is not an object.", "tradeline"))
            continue
        tradelines.append(_build_tradeline(raw, source, index, findings))

    balance_total, derogatory_count = _extract_summaries(payload, source, findings)

    record = CanonicalRecord(
        source=source,
        score_value=score_value,
        tradelines=tuple(tradelines),
        request_echo=_extract_request_echo(payload),
        balance_total=balance_total,
        derogatory_count=derogatory_count,
    )
    logger.debug(f"Normalized {source.value}: score={score_value}, tradelines={len(tradelines)}, findings={len(findings)}")
    return NormalizationResult(source=source, record=record, findings=findings)


def normalize_sources(
    payloads: Mapping[Any, Any],
    order: Sequence[Bureau] = SOURCE_ORDER,
) -> Dict[Bureau, NormalizationResult]:
    """Normalize every source in order. Missing keys count as unavailable.

    Args:
        payloads: Bureau (or its string value) -> raw payload or None.
        order: Source iteration order.
    """
    by_value = {(k.value if isinstance(k, Bureau) else str(k).strip().lower()): v for k, v in payloads.items()}
    return {source: normalize_source(by_value.get(source.value), source) for source in order}
