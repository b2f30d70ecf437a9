"""
Utility functions used across the project.
"""

import math
import re
from datetime import datetime, date
from typing import Any, Optional

_NON_DIGIT = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s+")

# Accepted birth-date / open-date layouts, tried in order
_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m-%d-%Y", "%Y/%m/%d", "%m%d%Y", "%Y%m%d")


def format_currency(amount: float) -> str:
    """Format a number as currency."""
    return f"${amount:,.2f}"


def digits_only(value: Any) -> str:
    """Strip everything except digits ('123-45-6789' -> '123456789')."""
    if value is None:
        return ""
    return _NON_DIGIT.sub("", str(value))


def collapse_whitespace(value: Any) -> str:
    """Casefold and collapse internal whitespace ('  Main   St ' -> 'main st')."""
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value)).strip().casefold()


def parse_number(value: Any) -> Optional[float]:
    """Parse a bureau numeric value, returning None for NULL/empty/invalid.

    Accepts ints, floats and strings such as '1,200', '$350.00'.
    Booleans are not numbers here, and neither are NaN or infinities
    ('NaN', 'Infinity', '1e400').
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        raw = value
    else:
        raw = str(value).strip().replace(",", "").replace("$", "")
        if not raw or raw.upper() == "NULL":
            return None
    try:
        number = float(raw)
    except (ValueError, TypeError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def parse_date(value: Any) -> Optional[date]:
    """Parse a date string safely. Tries ISO first, then US layouts."""
    if value is None:
        return None
    cleaned = str(value).strip().split("T")[0].split(" ")[0]
    if not cleaned or cleaned.upper() == "NULL":
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except (ValueError, TypeError):
            continue
    return None


def print_header(title: str, char: str = "=", width: int = 60):
    """Print a formatted header."""
    print(char * width)
    print(title.center(width))
    print(char * width)


def print_section(title: str, char: str = "-", width: int = 40):
    """Print a section divider."""
    print(f"\n{title}")
    print(char * width)


def mask_ssn(ssn: Any) -> str:
    """
    Mask an SSN to show only the last 4 digits.

    Args:
        ssn: SSN in any layout ('123-45-6789', 123456789)

    Returns:
        Masked string showing only last 4 digits (e.g., "••••6789")

    Examples:
        >>> mask_ssn("123-45-6789")
        '••••6789'
        >>> mask_ssn("789")
        '••••789'
    """
    digits = digits_only(ssn)
    return f"••••{digits[-4:]}"
