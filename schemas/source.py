"""Bureau taxonomy for tri-bureau reconciliation.

Single source of truth for source identifiers and the fixed source order
used wherever a result depends on tie-breaking.
"""

from enum import Enum
from typing import Dict, Tuple


class Bureau(str, Enum):
    EXPERIAN = "experian"
    TRANSUNION = "transunion"
    EQUIFAX = "equifax"


# Tie-break order for duplicate labels, primary selection and vote suggestions
SOURCE_ORDER: Tuple[Bureau, ...] = (Bureau.EXPERIAN, Bureau.TRANSUNION, Bureau.EQUIFAX)


# Human-readable display names for messages
BUREAU_DISPLAY_NAMES: Dict[str, str] = {
    "experian": "Experian",
    "transunion": "TransUnion",
    "equifax": "Equifax",
}


def get_bureau_display_name(bureau) -> str:
    """Get human-readable display name for a Bureau.

    Args:
        bureau: Bureau enum or its string value.

    Returns:
        Human-readable name like 'TransUnion'.
    """
    value = bureau.value if isinstance(bureau, Bureau) else str(bureau)
    return BUREAU_DISPLAY_NAMES.get(value, value.title())
