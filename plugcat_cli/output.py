"""Standardized terminal output utilities.

All user-facing CLI messages should use these functions for consistent
formatting across the application.

Basic Usage:
    from plugcat_cli.output import success, info, warn, error, detail

    success("All 12 plugin(s) passed validation")
    info("Found 12 plugin(s) to validate")
    warn("commands/ directory exists but contains no .md files")
    error("Missing LICENSE file")
    detail("Hint: Rename the directory, e.g. 'my-plugin'")

Findings:
    finding() picks the style from a finding's severity, so reporters never
    decide severity by choosing a print function themselves:

    finding(Finding(Severity.WARNING, "official/foo", "Missing README.md"))
    # Output: ⚠ Missing README.md
"""

from __future__ import annotations

import sys
from typing import TextIO

import click

from plugcat_cli.validation.results import Finding, Severity

# ANSI color codes via click's style system
_STYLES = {
    "success": {"fg": "green"},
    "info": {"fg": "blue"},
    "warn": {"fg": "yellow"},
    "error": {"fg": "red"},
    "detail": {"fg": "bright_black"},  # Dimmed/gray
    "heading": {"fg": None, "bold": True},
}

_PREFIXES = {
    "success": "✓",  # checkmark
    "info": "ℹ",  # information source
    "warn": "⚠",  # warning
    "error": "✗",  # X
    "detail": " ",  # space (no prefix, just indent)
    "heading": "",
}

_SEVERITY_STYLES = {
    Severity.ERROR: "error",
    Severity.WARNING: "warn",
    Severity.INFO: "info",
}


def _output(
    message: str,
    style: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    indent: int = 0,
) -> None:
    """Internal helper for styled output.

    Args:
        message: The message to display.
        style: The style name (success, error, info, warn, detail, heading).
        file: File to write to.
        nl: Whether to print a newline after the message.
        indent: Number of leading spaces.
    """
    prefix = _PREFIXES[style]
    styled_prefix = click.style(prefix, **_STYLES[style])
    styled_message = click.style(message, **_STYLES[style])
    line = f"{styled_prefix} {styled_message}" if prefix else styled_message
    click.echo(" " * indent + line, file=file, nl=nl)


def success(message: str, *, file: TextIO | None = None, nl: bool = True, indent: int = 0) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("marketplace.json schema validation passed")
        ✓ marketplace.json schema validation passed
    """
    _output(message, "success", file=file, nl=nl, indent=indent)


def info(message: str, *, file: TextIO | None = None, nl: bool = True, indent: int = 0) -> None:
    """Print an info message with blue marker.

    Example:
        >>> info("Found 3 plugin(s) to validate")
        ℹ Found 3 plugin(s) to validate
    """
    _output(message, "info", file=file, nl=nl, indent=indent)


def warn(message: str, *, file: TextIO | None = None, nl: bool = True, indent: int = 0) -> None:
    """Print a warning message with yellow warning symbol (default: stderr).

    Example:
        >>> warn("Skill \"lint\" missing SKILL.md")
        ⚠ Skill "lint" missing SKILL.md
    """
    _output(message, "warn", file=file or sys.stderr, nl=nl, indent=indent)


def error(message: str, *, file: TextIO | None = None, nl: bool = True, indent: int = 0) -> None:
    """Print an error message with red X (default: stderr).

    Example:
        >>> error("Missing README.md")
        ✗ Missing README.md
    """
    _output(message, "error", file=file or sys.stderr, nl=nl, indent=indent)


def detail(message: str, *, file: TextIO | None = None, nl: bool = True, indent: int = 0) -> None:
    """Print a detail message in dimmed text."""
    _output(message, "detail", file=file, nl=nl, indent=indent)


def heading(message: str, *, file: TextIO | None = None) -> None:
    """Print a bold section heading preceded by a blank line."""
    click.echo("", file=file)
    _output(message, "heading", file=file)


def finding(
    item: Finding,
    *,
    file: TextIO | None = None,
    indent: int = 2,
    show_hint: bool = True,
) -> None:
    """Print one finding styled by its severity, optionally followed by its fix hint."""
    _output(item.message, _SEVERITY_STYLES[item.severity], file=file, indent=indent)
    if show_hint and item.fix_hint:
        detail(f"Hint: {item.fix_hint}", file=file, indent=indent + 2)

