"""Tradeline fingerprinting.

A fingerprint is a derived key identifying "the same underlying account"
within or across bureaus:

    acct:<last 4 of normalized account number>       when one is reported
    cred:<creditor>|<account type>|<balance bucket>   otherwise

The creditor form is intentionally coarse; it flags candidates for a
human reviewer and is never used for automated action.
"""

import re
from typing import Any, Dict, Optional

from config.settings import ACCOUNT_ID_MIN_LENGTH
from pipeline.extraction import (
    ACCOUNT_NUMBER_RULES,
    ACCOUNT_TYPE_RULES,
    BALANCE_RULES,
    CREDITOR_RULES,
    extract_first,
)

# Masking prefixes bureaus put in front of partial account numbers
_MASK_PREFIX = re.compile(r"^[\*\.xX#•\-]+")
_NON_ALNUM = re.compile(r"[^0-9A-Za-z]")
# Masking anywhere in the number: '*', '•', '#', 'XX' runs, '..' runs
_MASKED = re.compile(r"[\*•#]|[xX]{2,}|\.{2,}")


def normalize_account_id(raw: Optional[str]) -> Optional[str]:
    """Reduce a reported account number to its comparable trailing identifier.

    '9988776655', '...6655' and 'XXXXXX6655' all normalize to '6655'.
    Returns None when fewer than ACCOUNT_ID_MIN_LENGTH characters remain.
    """
    if not raw:
        return None
    compact = re.sub(r"\s", "", raw)
    compact = _MASK_PREFIX.sub("", compact)
    compact = _NON_ALNUM.sub("", compact)
    if len(compact) < ACCOUNT_ID_MIN_LENGTH:
        return None
    return compact[-ACCOUNT_ID_MIN_LENGTH:]


def full_account_id(raw: Optional[str]) -> Optional[str]:
    """The complete account number when it was reported unmasked.

    '4266-8412-0000-1111' -> '4266841200001111'; masked renderings
    ('...6655', 'XXXX6655', '****6655') and short identifiers return None.
    Two tradelines sharing a fingerprint but carrying different full
    numbers are different accounts.
    """
    if not raw:
        return None
    compact = re.sub(r"\s", "", raw)
    if _MASKED.search(compact):
        return None
    compact = _NON_ALNUM.sub("", compact).lower()
    if len(compact) <= ACCOUNT_ID_MIN_LENGTH:
        return None
    return compact


def balance_bucket(balance: float) -> str:
    if balance < 0:
        return "neg"
    if balance < 100:
        return "0"
    if balance < 1000:
        return "1k"
    if balance < 10000:
        return "10k"
    return "10k+"


def compute_fingerprint(tradeline: Dict[str, Any]) -> str:
    """Build the dedup key for one raw tradeline.

    Deterministic: the same raw fields always yield the same string.
    """
    account_id = normalize_account_id(extract_first(tradeline, ACCOUNT_NUMBER_RULES)[0])
    if account_id:
        return f"acct:{account_id.lower()}"

    creditor = (extract_first(tradeline, CREDITOR_RULES)[0] or "").lower()
    account_type = (extract_first(tradeline, ACCOUNT_TYPE_RULES)[0] or "").lower()
    balance = extract_first(tradeline, BALANCE_RULES)[0] or 0.0
    return f"cred:{creditor or 'unknown'}|{account_type or 'unknown'}|{balance_bucket(balance)}"


def build_display_label(tradeline: Dict[str, Any]) -> str:
    """Label shown to reviewers, e.g. 'CHASE BANK USA •••• 6655'."""
    creditor = extract_first(tradeline, CREDITOR_RULES)[0]
    account_number = extract_first(tradeline, ACCOUNT_NUMBER_RULES)[0] or ""
    last4 = account_number[-4:]
    if creditor and last4:
        return f"{creditor} •••• {last4}"
    if creditor:
        return creditor
    return "Unknown account"
