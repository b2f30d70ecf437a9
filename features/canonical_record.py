"""Canonical bureau record definition.

Each CanonicalRecord is the normalized, shape-independent representation
of one bureau's report. Records are frozen once the normalizer builds
them and belong to the verification attempt that produced them.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional, Tuple

from schemas.source import Bureau
from utils.helpers import mask_ssn


@dataclass(frozen=True)
class RequestEcho:
    """Identity fields the bureau echoed back from the request."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    middle_name: Optional[str] = None
    ssn: Optional[str] = None
    birth_date: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    phone: Optional[str] = None

    @property
    def masked_ssn(self) -> str:
        return mask_ssn(self.ssn) if self.ssn else ""

    def get(self, field_name: str) -> Optional[str]:
        return getattr(self, field_name, None)


@dataclass(frozen=True)
class Tradeline:
    source: Bureau
    index_in_source: int
    fingerprint: str
    display_label: str

    creditor: str = ""
    account_type: str = ""
    account_number: str = ""          # as reported, possibly masked
    account_key: Optional[str] = None  # full number when reported unmasked
    balance: float = 0.0
    credit_limit: float = 0.0
    date_opened: Optional[str] = None

    @property
    def is_revolving(self) -> bool:
        account_type = self.account_type.lower()
        return "revolv" in account_type or "credit" in account_type


@dataclass(frozen=True)
class CanonicalRecord:
    source: Bureau
    score_value: Optional[int]
    tradelines: Tuple[Tradeline, ...] = ()
    request_echo: RequestEcho = field(default_factory=RequestEcho)

    balance_total: Optional[float] = None   # tradeSummary.balanceTotal
    derogatory_count: int = 0               # derogatorySummary.collectionsCount

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["source"] = self.source.value
        data["request_echo"]["ssn"] = self.request_echo.masked_ssn
        for tl in data["tradelines"]:
            tl["source"] = self.source.value
        return data


@dataclass(frozen=True)
class DuplicateGroup:
    """Tradelines believed to describe the same underlying account."""
    fingerprint: str
    refs: Tuple[Tradeline, ...]
    suggested_label: str

    @property
    def is_cross_bureau(self) -> bool:
        return len({ref.source for ref in self.refs}) > 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fingerprint": self.fingerprint,
            "suggested_label": self.suggested_label,
            "refs": [
                {
                    "source": ref.source.value,
                    "index_in_source": ref.index_in_source,
                    "fingerprint": ref.fingerprint,
                    "display_label": ref.display_label,
                }
                for ref in self.refs
            ],
        }
