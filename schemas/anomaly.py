"""Identity form and anomaly schemas.

The submitted form is an immutable snapshot; corrections produce a new
form. Anomalies live only for the duration of one verification attempt.
"""

from typing import Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


AnomalySeverity = Literal["critical", "warning"]

# Human-readable labels for form fields
FIELD_LABELS: Dict[str, str] = {
    "first_name": "First Name",
    "last_name": "Last Name",
    "middle_name": "Middle Name",
    "ssn": "SSN",
    "birth_date": "Date of Birth",
    "address_line1": "Address",
    "address_line2": "Address Line 2",
    "city": "City",
    "state": "State",
    "postal_code": "ZIP Code",
    "phone": "Phone Number",
    "email": "Email Address",
    "credit_file": "Credit Identity",
}


class IdentityForm(BaseModel):
    """Identity fields submitted by the user.

    Accepts snake_case or camelCase keys ('birth_date' or 'birthDate').
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    first_name: str = ""
    last_name: str = ""
    middle_name: str = ""
    ssn: str = ""
    birth_date: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    phone: str = ""
    email: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        """JSON null means the field was left blank."""
        return "" if v is None else v


def merge_corrections(form: IdentityForm, corrections: Mapping[str, str]) -> IdentityForm:
    """Apply user corrections on top of a submitted form.

    The original form is left untouched; a new IdentityForm is returned.

    Args:
        form: The previously submitted form.
        corrections: Field name (snake_case or camelCase) to corrected value.

    Raises:
        ValueError: If a correction names an unknown field.
    """
    by_alias = {info.alias: name for name, info in IdentityForm.model_fields.items()}
    update = {}
    for key, value in corrections.items():
        name = key if key in IdentityForm.model_fields else by_alias.get(key)
        if name is None:
            raise ValueError(f"Unknown form field: {key}")
        update[name] = "" if value is None else str(value)

    merged = form.model_dump()
    merged.update(update)
    return IdentityForm.model_validate(merged)


class Anomaly(BaseModel):
    """A single mismatch between submitted identity data and a source."""
    id: str
    field: str
    field_label: str
    severity: AnomalySeverity
    message: str
    source: str
    user_value: str = ""
    suggested_value: Optional[str] = None


class AnomalyReport(BaseModel):
    """All anomalies found in one verification attempt, one per field."""
    has_anomalies: bool = False
    has_critical: bool = False
    anomalies: List[Anomaly] = Field(default_factory=list)

    @classmethod
    def from_anomalies(cls, anomalies: List[Anomaly]) -> "AnomalyReport":
        return cls(
            has_anomalies=len(anomalies) > 0,
            has_critical=any(a.severity == "critical" for a in anomalies),
            anomalies=list(anomalies),
        )

    def get(self, field: str) -> Optional[Anomaly]:
        for anomaly in self.anomalies:
            if anomaly.field == field:
                return anomaly
        return None
