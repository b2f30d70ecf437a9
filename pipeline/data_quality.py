"""Data quality scorer - rolls structural findings into a 0-100 score.

Pure aggregation: severity meaning is decided upstream by whichever
stage produced the finding. Deduction weights come from the scoring
policy table; info findings are listed but never deduct.
"""

from typing import Iterable, List

from config.policy_loader import get_deduction_weights
from schemas.data_quality import DataQualityReport, Finding


def _summarize(findings: List[Finding], errors: int, warnings: int) -> str:
    if not findings:
        return "No issues found"
    if errors > 0:
        return f"{errors} error(s), {warnings} warning(s). Review findings below."
    if warnings > 0:
        return f"{warnings} warning(s) found. Data is generally usable."
    return f"{len(findings)} minor note(s). Data quality is good."


def build_data_quality_report(findings: Iterable[Finding]) -> DataQualityReport:
    """Merge findings from every stage into one DataQualityReport.

    Args:
        findings: Findings in the order they should be listed.

    Returns:
        DataQualityReport with score = 100 minus weighted deductions, floored at 0.

    Note:
        Info findings never deduct, so a report holding only info findings
        still scores 100. "Score is 100 only when there are no findings"
        therefore holds for errors and warnings, not for info notes.
    """
    findings = list(findings)
    weights = get_deduction_weights()

    errors = sum(1 for f in findings if f.severity == "error")
    warnings = sum(1 for f in findings if f.severity == "warning")

    deduct = errors * weights["error"] + warnings * weights["warning"]
    score = max(0, min(100, 100 - deduct))

    return DataQualityReport(
        score=score,
        findings=findings,
        summary=_summarize(findings, errors, warnings),
    )
