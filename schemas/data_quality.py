"""Data quality schemas - structural findings and the rolled-up report."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from schemas.source import Bureau


FindingSeverity = Literal["error", "warning", "info"]
FindingSource = Literal["Credit", "FlexID", "Fraud Finder"]


class Finding(BaseModel):
    """A structural or data-quality observation about one source payload."""
    source: FindingSource
    bureau: Optional[Bureau] = None
    field: Optional[str] = None
    severity: FindingSeverity
    message: str


class DataQualityReport(BaseModel):
    score: int = Field(default=100, ge=0, le=100)
    findings: List[Finding] = Field(default_factory=list)
    summary: str = ""

    @property
    def error_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == "error")

    @property
    def warning_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == "warning")
