"""JSON envelopes for machine-readable command output.

Every command run with ``--format json`` (or ``--json``) prints exactly one
envelope on stdout, so CI jobs can parse results without scraping text:

    {
        "success": true|false,
        "command": "check",
        "data": {...},
        "errors": [...]  # only when success is false
    }

Validation commands put the report in ``data`` (see report_envelope()); a
failed run lists each error finding under ``errors`` as well. Fatal errors
carry their PLGCT-* code.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from plugcat_cli.errors import PlugcatError
from plugcat_cli.validation.results import Finding, ValidationReport


@dataclass
class ErrorDetail:
    """One entry of the envelope's ``errors`` array.

    Attributes:
        type: Error class name, or "ValidationError" for an error finding.
        message: Human-readable description.
        code: PLGCT-* code of a fatal error, None for findings.
    """

    type: str
    message: str
    code: str | None = None

    @classmethod
    def from_error(cls, err: PlugcatError) -> ErrorDetail:
        return cls(type=type(err).__name__, message=err.message, code=err.code)

    @classmethod
    def from_finding(cls, item: Finding) -> ErrorDetail:
        return cls(type="ValidationError", message=f"{item.subject}: {item.message}")

    def to_dict(self) -> dict[str, str]:
        d = {"type": self.type, "message": self.message}
        if self.code is not None:
            d["code"] = self.code
        return d


@dataclass
class OutputEnvelope:
    """Wrapper printed by every command in JSON mode.

    Attributes:
        success: False if the command failed or validation found errors.
        command: Command name, e.g. "check" or "config set".
        data: Command payload.
        errors: Present only when success is False.
    """

    success: bool
    command: str
    data: dict[str, Any] | None
    errors: list[ErrorDetail] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "command": self.command,
            "data": self.data,
        }
        if self.errors is not None:
            result["errors"] = [e.to_dict() for e in self.errors]
        return result

    def to_json(self, *, indent: int | None = 2) -> str:
        """Serialize the envelope; ``indent=None`` gives a single line."""
        return json.dumps(self.to_dict(), indent=indent)


def success_envelope(command: str, data: dict[str, Any]) -> OutputEnvelope:
    """Envelope for a command that succeeded."""
    return OutputEnvelope(success=True, command=command, data=data)


def error_envelope(
    command: str,
    errors: list[ErrorDetail],
    *,
    data: dict[str, Any] | None = None,
) -> OutputEnvelope:
    """Envelope for a command that failed.

    Args:
        command: Command name.
        errors: What went wrong.
        data: Partial payload; an empty dict when omitted.
    """
    return OutputEnvelope(
        success=False,
        command=command,
        data=data if data is not None else {},
        errors=errors,
    )


def report_envelope(command: str, report: ValidationReport) -> OutputEnvelope:
    """Envelope for a finished validation run.

    ``data`` is the report's dict form plus a ``summary`` of counts; when the
    report did not pass, each error finding is also listed under ``errors``.
    """
    data = report.to_dict()
    data["summary"] = {
        "total": len(report.findings),
        "errors": len(report.errors),
        "warnings": len(report.warnings),
        "infos": len(report.infos),
    }
    if report.passed:
        return success_envelope(command, data)
    return error_envelope(command, [ErrorDetail.from_finding(f) for f in report.errors], data=data)
