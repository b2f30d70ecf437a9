"""Ordered extraction rules for vendor-shaped bureau payloads.

Each canonical field has an explicit, ordered tuple of ExtractionRule.
A rule names the key path it reads and the parse function applied to the
raw value; the first rule that yields a parsed value wins. Parse failures
are treated as absent, never raised.

All logic is deterministic, with no I/O.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from utils.helpers import parse_number

PathKey = Union[str, int]

# Sentinel for "path does not exist" (distinct from an explicit null)
MISSING = object()


@dataclass(frozen=True)
class ExtractionRule:
    """One alias for a canonical field."""
    name: str
    path: Tuple[PathKey, ...]
    parse: Callable[[Any], Any]


def resolve_path(payload: Any, path: Sequence[PathKey]) -> Any:
    """Walk a key path through nested dicts/lists. Returns MISSING on any miss."""
    node = payload
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, list) or key >= len(node) or key < -len(node):
                return MISSING
            node = node[key]
        else:
            if not isinstance(node, dict) or key not in node:
                return MISSING
            node = node[key]
    return node


def extract_first(payload: Any, rules: Sequence[ExtractionRule]) -> Tuple[Optional[Any], Optional[ExtractionRule]]:
    """Apply rules in order and return (value, rule) for the first parsed hit.

    Returns (None, None) if no rule produces a value.
    """
    for rule in rules:
        raw = resolve_path(payload, rule.path)
        if raw is MISSING or raw is None:
            continue
        value = rule.parse(raw)
        if value is not None:
            return value, rule
    return None, None


def any_present(payload: Any, rules: Sequence[ExtractionRule]) -> bool:
    """True if at least one rule's path exists with a non-null value."""
    for rule in rules:
        raw = resolve_path(payload, rule.path)
        if raw is not MISSING and raw is not None:
            return True
    return False


# =============================================================================
# PARSE FUNCTIONS
# =============================================================================

def parse_text(value: Any) -> Optional[str]:
    """Non-empty stripped string, or None."""
    if isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def parse_int(value: Any) -> Optional[int]:
    number = parse_number(value)
    return int(number) if number is not None else None


def parse_dict(value: Any) -> Optional[Dict[str, Any]]:
    return value if isinstance(value, dict) else None


def parse_first_dict(value: Any) -> Optional[Dict[str, Any]]:
    """A dict, or the first element of a non-empty list of dicts."""
    if isinstance(value, dict):
        return value
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return None


def parse_non_empty_list(value: Any) -> Optional[List[Any]]:
    return value if isinstance(value, list) and value else None


def parse_list(value: Any) -> Optional[List[Any]]:
    return value if isinstance(value, list) else None


def _field_rules(field: str, aliases: Sequence[str], parse: Callable[[Any], Any]) -> Tuple[ExtractionRule, ...]:
    return tuple(ExtractionRule(name=f"{field}:{alias}", path=(alias,), parse=parse) for alias in aliases)


# =============================================================================
# TRADELINE FIELD RULES
# =============================================================================

ACCOUNT_NUMBER_RULES = _field_rules(
    "account_number",
    ("accountNumber", "accountIdentifier", "AccountNumber", "account number", "subscriberAccountNumber"),
    parse_text,
)

CREDITOR_RULES = _field_rules(
    "creditor",
    ("subscriberName", "creditorName", "subscriber", "creditor", "SubscriberName", "CreditorName", "companyName"),
    parse_text,
)

ACCOUNT_TYPE_RULES = _field_rules(
    "account_type",
    ("accountType", "type", "AccountType"),
    parse_text,
)

BALANCE_RULES = _field_rules(
    "balance",
    ("currentBalanceAmount", "currentBalance", "balanceAmount", "balance",
     "CurrentBalanceAmount", "BalanceAmount"),
    parse_number,
)

CREDIT_LIMIT_RULES = _field_rules(
    "credit_limit",
    ("creditLimitAmount", "creditLimit", "highCreditAmount", "highCredit", "highBalanceAmount"),
    parse_number,
)

DATE_OPENED_RULES = _field_rules(
    "date_opened",
    ("dateOpened", "dateofFirstAccountActivity", "openDate"),
    parse_text,
)
