"""Validation result data structures.

These classes capture the findings emitted by every check and aggregate
them into a report for CLI display and JSON export.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(Enum):
    """Severity level for findings.

    ERROR: Fails the run
    WARNING: Non-blocking issue (run passes with warnings)
    INFO: Advisory note (always passes)
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Finding:
    """One reported validation issue.

    Attributes:
        severity: How serious the issue is (only ERROR fails the run).
        subject: Human path or identifier the issue is about.
        message: Human-readable description of the issue.
        rule_name: Identifier of the check that emitted the finding.
        fix_hint: Optional suggestion for fixing the issue.
    """

    severity: Severity
    subject: str
    message: str
    rule_name: str = ""
    fix_hint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        d: dict[str, Any] = {
            "severity": self.severity.value,
            "subject": self.subject,
            "message": self.message,
            "rule_name": self.rule_name,
        }
        if self.fix_hint is not None:
            d["fix_hint"] = self.fix_hint
        return d


@dataclass
class ValidationReport:
    """Ordered aggregate of findings.

    Attributes:
        findings: Findings in emission order.
    """

    findings: list[Finding] = field(default_factory=list)

    def append(self, *findings: Finding) -> None:
        """Add findings to the end of the report."""
        self.findings.extend(findings)

    def merge(self, other: ValidationReport) -> ValidationReport:
        """Return a new report with this report's findings followed by ``other``'s.

        Neither operand is modified.
        """
        return ValidationReport(findings=[*self.findings, *other.findings])

    @property
    def passed(self) -> bool:
        """True if no finding has ERROR severity."""
        return not any(f.severity == Severity.ERROR for f in self.findings)

    @property
    def errors(self) -> list[Finding]:
        """Return only ERROR-severity findings."""
        return [f for f in self.findings if f.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Finding]:
        """Return only WARNING-severity findings."""
        return [f for f in self.findings if f.severity == Severity.WARNING]

    @property
    def infos(self) -> list[Finding]:
        """Return only INFO-severity findings."""
        return [f for f in self.findings if f.severity == Severity.INFO]

    @property
    def subjects(self) -> list[str]:
        """Distinct finding subjects in first-seen order."""
        return list(dict.fromkeys(f.subject for f in self.findings))

    def for_subject(self, subject: str) -> list[Finding]:
        """Return the findings about ``subject``, in order."""
        return [f for f in self.findings if f.subject == subject]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict for --json output."""
        return {
            "passed": self.passed,
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "info_count": len(self.infos),
            "findings": [f.to_dict() for f in self.findings],
        }
