"""Pydantic schemas for the pipeline."""

from .source import Bureau, SOURCE_ORDER
from .anomaly import IdentityForm, Anomaly, AnomalyReport, merge_corrections
from .data_quality import Finding, DataQualityReport
from .readiness import GreenReadiness, ReadinessFactor

__all__ = [
    "Bureau",
    "SOURCE_ORDER",
    "IdentityForm",
    "Anomaly",
    "AnomalyReport",
    "merge_corrections",
    "Finding",
    "DataQualityReport",
    "GreenReadiness",
    "ReadinessFactor",
]
