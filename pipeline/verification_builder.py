"""Verification builder - deterministic reconciliation without I/O.

Orchestrates normalization, deduplication, anomaly detection, quality
scoring and readiness scoring to produce a VerificationResult. Every
stage degrades gracefully; only the readiness stage can fail outright,
and that failure is surfaced on the result rather than raised.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pipeline.anomaly_detector import detect_anomalies
from pipeline.data_quality import build_data_quality_report
from pipeline.identity_signals import (
    check_flexid_payload,
    check_fraud_finder_payload,
    collect_identity_anomalies,
)
from pipeline.readiness_scorer import NoPrimaryRecordError, score_readiness, select_primary_record
from pipeline.source_normalizer import normalize_sources
from pipeline.tradeline_deduplicator import detect_duplicate_tradelines
from schemas.anomaly import IdentityForm
from schemas.data_quality import Finding
from schemas.source import SOURCE_ORDER, Bureau
from schemas.verification_result import VerificationResult

logger = logging.getLogger(__name__)


def build_verification(
    payloads: Mapping[Any, Optional[Dict[str, Any]]],
    form: Union[IdentityForm, Mapping[str, Any]],
    flexid_payload: Optional[Dict[str, Any]] = None,
    fraud_payload: Optional[Dict[str, Any]] = None,
    order: Sequence[Bureau] = SOURCE_ORDER,
) -> VerificationResult:
    """Reconcile already-fetched bureau payloads against a submitted form.

    Steps:
        1. Normalize each bureau payload into a canonical record
        2. Detect duplicate tradelines across and within bureaus
        3. Detect identity anomalies (bureau echoes + identity signals)
        4. Roll structural findings into the data quality report
        5. Score readiness on the primary record

    Args:
        payloads: Bureau (or its string value) -> raw payload, None if failed.
            Any subset of bureaus, including none, is valid input.
        form: Submitted identity form, as IdentityForm or a flat mapping.
        flexid_payload: Optional FlexID identity-verification response.
        fraud_payload: Optional Fraud Finder response.
        order: Source order used for every tie-break.

    Returns:
        VerificationResult. readiness is None and readiness_error is set
        when no bureau produced a record.
    """
    if not isinstance(form, IdentityForm):
        form = IdentityForm.model_validate(dict(form))

    # 1. Normalization
    normalized = normalize_sources(payloads, order)
    records = {source: result.record for source, result in normalized.items()}
    findings: List[Finding] = [f for result in normalized.values() for f in result.findings]

    # 2. Duplicates
    duplicate_groups = detect_duplicate_tradelines(records, order)

    # 3. Anomalies
    identity_anomalies = collect_identity_anomalies(form, records, flexid_payload, fraud_payload, order)
    anomaly_report = detect_anomalies(form, records, order, identity_anomalies=identity_anomalies)

    # 4. Data quality
    findings.extend(check_flexid_payload(flexid_payload))
    findings.extend(check_fraud_finder_payload(fraud_payload))
    data_quality = build_data_quality_report(findings)

    # 5. Readiness (the only stage that cannot degrade)
    primary_source = None
    readiness = None
    readiness_error = None
    try:
        primary = select_primary_record(records, order)
        primary_source = primary.source
        readiness = score_readiness(primary)
    except NoPrimaryRecordError as e:
        logger.error(f"Readiness unavailable: {e}")
        readiness_error = str(e)

    logger.info(
        f"Verification complete: {sum(1 for r in records.values() if r is not None)} sources, "
        f"{len(duplicate_groups)} duplicate groups, {len(anomaly_report.anomalies)} anomalies, "
        f"quality={data_quality.score}"
    )

    return VerificationResult(
        records=records,
        findings=findings,
        duplicate_groups=duplicate_groups,
        anomaly_report=anomaly_report,
        data_quality=data_quality,
        primary_source=primary_source,
        readiness=readiness,
        readiness_error=readiness_error,
    )
