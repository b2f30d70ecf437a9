"""Tests for the data quality scorer."""

import pytest

from pipeline.data_quality import build_data_quality_report
from pipeline.source_normalizer import normalize_sources
from schemas.data_quality import Finding
from schemas.source import Bureau


def _finding(severity, bureau=Bureau.EXPERIAN):
    return Finding(source="Credit", bureau=bureau, severity=severity, message=f"{severity} finding")


class TestScore:

    def test_no_findings_is_perfect(self):
        report = build_data_quality_report([])
        assert report.score == 100
        assert report.summary == "No issues found"

    def test_all_sources_missing(self):
        results = normalize_sources({Bureau.EXPERIAN: None, Bureau.TRANSUNION: None, Bureau.EQUIFAX: None})
        findings = [f for result in results.values() for f in result.findings]
        report = build_data_quality_report(findings)
        assert report.error_count == 3
        assert report.score == 55

    def test_warnings_deduct_less_than_errors(self):
        assert build_data_quality_report([_finding("warning")]).score == 95
        assert build_data_quality_report([_finding("error")]).score == 85

    def test_info_is_listed_but_free(self):
        report = build_data_quality_report([_finding("info")])
        assert report.score == 100
        assert len(report.findings) == 1
        assert report.summary == "1 minor note(s). Data quality is good."

    def test_floor_at_zero(self):
        report = build_data_quality_report([_finding("error")] * 10)
        assert report.score == 0

    @pytest.mark.parametrize("severities", [
        ["warning"], ["warning", "warning"], ["error", "warning"], ["error", "error", "info"],
    ])
    def test_more_findings_never_raise_score(self, severities):
        findings = [_finding(s) for s in severities]
        shorter = build_data_quality_report(findings[:-1]).score
        assert build_data_quality_report(findings).score <= shorter


class TestSummary:

    def test_errors_summary(self):
        report = build_data_quality_report([_finding("error"), _finding("warning")])
        assert report.summary == "1 error(s), 1 warning(s). Review findings below."
        assert (report.error_count, report.warning_count) == (1, 1)

    def test_warnings_summary(self):
        report = build_data_quality_report([_finding("warning"), _finding("info")])
        assert report.summary == "1 warning(s) found. Data is generally usable."

    def test_findings_kept_in_order(self):
        findings = [_finding("info"), _finding("error", Bureau.EQUIFAX), _finding("warning")]
        report = build_data_quality_report(findings)
        assert [f.severity for f in report.findings] == ["info", "error", "warning"]
