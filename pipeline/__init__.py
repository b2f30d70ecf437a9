"""Pipeline module for tri-bureau reconciliation."""

from .verification_builder import build_verification
from .source_normalizer import normalize_source, normalize_sources
from .tradeline_deduplicator import detect_duplicate_tradelines, DuplicateGroup
from .anomaly_detector import detect_anomalies
from .data_quality import build_data_quality_report
from .readiness_scorer import score_readiness, select_primary_record, NoPrimaryRecordError
from .source_collector import collect_source_payloads

__all__ = [
    "build_verification",
    "normalize_source",
    "normalize_sources",
    "detect_duplicate_tradelines",
    "DuplicateGroup",
    "detect_anomalies",
    "build_data_quality_report",
    "score_readiness",
    "select_primary_record",
    "NoPrimaryRecordError",
    "collect_source_payloads",
]
