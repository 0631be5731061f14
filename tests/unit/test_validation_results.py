"""Tests for validation result data structures."""

from __future__ import annotations

import json

import pytest

from plugcat_cli.validation.results import Finding, Severity, ValidationReport


def _finding(severity: Severity, subject: str = "official/foo", message: str = "msg") -> Finding:
    return Finding(severity=severity, subject=subject, message=message, rule_name="test")


class TestSeverity:
    """Tests for Severity enum."""

    @pytest.mark.unit
    def test_severity_values(self) -> None:
        """Severity values serialize as lowercase strings."""
        assert Severity.ERROR.value == "error"
        assert Severity.WARNING.value == "warning"
        assert Severity.INFO.value == "info"


class TestFinding:
    """Tests for Finding dataclass."""

    @pytest.mark.unit
    def test_finding_is_immutable(self) -> None:
        """Findings are frozen once emitted."""
        item = _finding(Severity.ERROR)
        with pytest.raises(AttributeError):
            item.message = "changed"  # type: ignore[misc]

    @pytest.mark.unit
    def test_to_dict_omits_missing_fix_hint(self) -> None:
        """to_dict() leaves out fix_hint when there is none."""
        item = _finding(Severity.WARNING)

        assert item.to_dict() == {
            "severity": "warning",
            "subject": "official/foo",
            "message": "msg",
            "rule_name": "test",
        }

    @pytest.mark.unit
    def test_to_dict_includes_fix_hint(self) -> None:
        """to_dict() carries the fix hint when present."""
        item = Finding(Severity.ERROR, "x", "bad", rule_name="naming", fix_hint="Rename it")

        assert item.to_dict()["fix_hint"] == "Rename it"


class TestValidationReport:
    """Tests for ValidationReport aggregation."""

    @pytest.mark.unit
    def test_empty_report_passes(self) -> None:
        """A report with no findings passes."""
        report = ValidationReport()

        assert report.passed is True
        assert report.findings == []

    @pytest.mark.unit
    def test_warnings_and_infos_do_not_fail(self) -> None:
        """Only ERROR findings fail the report."""
        report = ValidationReport()
        report.append(_finding(Severity.WARNING), _finding(Severity.INFO))

        assert report.passed is True

    @pytest.mark.unit
    def test_single_error_fails(self) -> None:
        """One ERROR finding fails the report."""
        report = ValidationReport()
        report.append(_finding(Severity.WARNING), _finding(Severity.ERROR))

        assert report.passed is False

    @pytest.mark.unit
    def test_filters_by_severity(self) -> None:
        """errors, warnings and infos partition the findings."""
        error = _finding(Severity.ERROR, message="e")
        warning = _finding(Severity.WARNING, message="w")
        info = _finding(Severity.INFO, message="i")
        report = ValidationReport(findings=[info, error, warning])

        assert report.errors == [error]
        assert report.warnings == [warning]
        assert report.infos == [info]

    @pytest.mark.unit
    def test_append_preserves_order(self) -> None:
        """append() keeps emission order."""
        first = _finding(Severity.INFO, message="first")
        second = _finding(Severity.ERROR, message="second")
        report = ValidationReport()
        report.append(first)
        report.append(second)

        assert [f.message for f in report.findings] == ["first", "second"]

    @pytest.mark.unit
    def test_merge_concatenates_without_mutating(self) -> None:
        """merge() returns a new report and leaves both operands untouched."""
        left = ValidationReport(findings=[_finding(Severity.ERROR, message="a")])
        right = ValidationReport(findings=[_finding(Severity.WARNING, message="b")])

        merged = left.merge(right)

        assert [f.message for f in merged.findings] == ["a", "b"]
        assert len(left.findings) == 1
        assert len(right.findings) == 1
        assert merged is not left

    @pytest.mark.unit
    def test_merge_with_empty_is_identity(self) -> None:
        """Merging with an empty report keeps the findings as they were."""
        report = ValidationReport(findings=[_finding(Severity.ERROR)])

        assert report.merge(ValidationReport()).findings == report.findings
        assert ValidationReport().merge(report).findings == report.findings

    @pytest.mark.unit
    def test_subjects_in_first_seen_order(self) -> None:
        """subjects lists each subject once, in first-seen order."""
        report = ValidationReport(
            findings=[
                _finding(Severity.ERROR, subject="b"),
                _finding(Severity.ERROR, subject="a"),
                _finding(Severity.WARNING, subject="b"),
            ]
        )

        assert report.subjects == ["b", "a"]
        assert len(report.for_subject("b")) == 2

    @pytest.mark.unit
    def test_to_dict_is_json_serializable(self) -> None:
        """to_dict() output survives json.dumps with the right counts."""
        report = ValidationReport(
            findings=[_finding(Severity.ERROR), _finding(Severity.WARNING), _finding(Severity.INFO)]
        )

        data = json.loads(json.dumps(report.to_dict()))

        assert data["passed"] is False
        assert data["error_count"] == 1
        assert data["warning_count"] == 1
        assert data["info_count"] == 1
        assert [f["severity"] for f in data["findings"]] == ["error", "warning", "info"]
