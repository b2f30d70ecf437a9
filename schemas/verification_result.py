"""Verification result schema - single source of truth for one attempt.

This module defines the object that flows out of the reconciliation
pipeline. Canonical records are retained for auditability; every part
serializes to plain JSON-compatible data via to_dict().
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from features.canonical_record import CanonicalRecord, DuplicateGroup
from schemas.anomaly import AnomalyReport
from schemas.data_quality import DataQualityReport, Finding
from schemas.readiness import GreenReadiness
from schemas.source import Bureau


@dataclass
class VerificationResult:
    records: Dict[Bureau, Optional[CanonicalRecord]]
    findings: List[Finding] = field(default_factory=list)
    duplicate_groups: List[DuplicateGroup] = field(default_factory=list)
    anomaly_report: AnomalyReport = field(default_factory=AnomalyReport)
    data_quality: DataQualityReport = field(default_factory=DataQualityReport)
    primary_source: Optional[Bureau] = None
    readiness: Optional[GreenReadiness] = None
    readiness_error: Optional[str] = None   # set when no primary record exists

    @property
    def available_sources(self) -> List[Bureau]:
        return [source for source, record in self.records.items() if record is not None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "records": {
                source.value: record.to_dict() if record is not None else None
                for source, record in self.records.items()
            },
            "duplicate_groups": [group.to_dict() for group in self.duplicate_groups],
            "anomaly_report": self.anomaly_report.model_dump(mode="json"),
            "data_quality": self.data_quality.model_dump(mode="json"),
            "primary_source": self.primary_source.value if self.primary_source else None,
            "readiness": self.readiness.model_dump(mode="json") if self.readiness else None,
            "readiness_error": self.readiness_error,
        }
