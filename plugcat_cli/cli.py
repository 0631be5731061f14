"""plugcat CLI - Command-line interface for validating plugin registries.

The CLI is a thin wrapper around the validation API (see plugcat_cli.validation).
The engine returns a ValidationReport; rendering it and choosing the exit
status happen here and nowhere else.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any

import click

from plugcat_cli.config import (
    KNOWN_SETTINGS,
    get_setting,
    list_settings,
    load_settings,
    set_setting,
    unset_setting,
)
from plugcat_cli.errors import PlugcatError
from plugcat_cli.json_output import (
    ErrorDetail,
    OutputEnvelope,
    error_envelope,
    report_envelope,
    success_envelope,
)
from plugcat_cli.output import detail, error, finding, heading, info, success, warn
from plugcat_cli.validation import (
    ValidationReport,
    validate_catalog,
    validate_packages,
    validate_registry,
)

Validator = Callable[..., ValidationReport]


def should_output_json(ctx: click.Context, json_flag: bool = False) -> bool:
    """Determine if JSON output should be used.

    Global --format=json takes precedence, but per-command --json flags also work.
    """
    obj = ctx.find_root().obj or {}
    return obj.get("format", "text") == "json" or json_flag


def output_json_envelope(envelope: OutputEnvelope) -> None:
    """Output a JSON envelope to stdout."""
    click.echo(envelope.to_json())


@click.group()
@click.version_option(package_name="plugcat-cli")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format (json for machine parsing, text for humans).",
)
@click.option("--debug", is_flag=True, help="Log engine internals to stderr.")
@click.pass_context
def cli(ctx: click.Context, output_format: str, debug: bool) -> None:
    """plugcat - Validate plugin marketplace catalogs and plugin directories."""
    ctx.ensure_object(dict)
    ctx.obj["format"] = output_format
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _validation_command(func: Callable[..., None]) -> Callable[..., None]:
    """Attach the options shared by every validation command."""

    @click.argument("root", type=click.Path(path_type=Path), default=".")
    @click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
    @click.option("--verbose", "-v", is_flag=True, help="Show fix hints for each finding")
    @click.option("--catalog", default=None, help="Catalog path relative to ROOT.")
    @click.option("--plugins-dir", default=None, help="Plugins directory relative to ROOT.")
    @click.option(
        "--schema-dir",
        type=click.Path(path_type=Path),
        default=None,
        help="Directory holding marketplace-schema.json and plugin-manifest-schema.json.",
    )
    @click.option(
        "--jobs",
        "-j",
        type=click.IntRange(min=1),
        default=None,
        help="Validate plugins in parallel.",
    )
    @click.pass_context
    @wraps(func)
    def wrapper(ctx: click.Context, **kwargs: Any) -> None:
        func(ctx, **kwargs)

    return wrapper


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def _print_report(report: ValidationReport, *, verbose: bool) -> None:
    """Print findings grouped by subject, then a summary line."""
    for subject in report.subjects:
        heading(f"--- {subject} ---")
        for item in report.for_subject(subject):
            finding(item, show_hint=verbose)

    click.echo("")
    warning_count = len(report.warnings)
    if report.passed:
        suffix = f" ({_plural(warning_count, 'warning')})" if warning_count else ""
        success(f"All validation checks passed{suffix}")
        return

    parts = [_plural(len(report.errors), "error")]
    if warning_count:
        parts.append(_plural(warning_count, "warning"))
    error(f"Validation failed: {', '.join(parts)}")


def _report_fatal(command: str, err: PlugcatError, *, use_json: bool) -> None:
    if use_json:
        output_json_envelope(error_envelope(command, [ErrorDetail.from_error(err)]))
    else:
        error(f"{err.message} [{err.code}]")


def _run_validation(
    ctx: click.Context,
    command: str,
    validator: Validator,
    *,
    root: Path,
    json_output: bool,
    verbose: bool,
    **cli_values: Any,
) -> None:
    use_json = should_output_json(ctx, json_output)

    # Validate path exists (handle in code for JSON envelope support)
    if not root.is_dir():
        message = f"Registry root is not a directory: {root}"
        if use_json:
            errors = [ErrorDetail(type="PathNotFoundError", message=message)]
            output_json_envelope(error_envelope(command, errors))
        else:
            error(message)
        raise SystemExit(1)

    if cli_values.get("schema_dir") is not None:
        cli_values["schema_dir"] = cli_values["schema_dir"].resolve()

    try:
        settings = load_settings(root, **cli_values)
        if not use_json:
            info(f"Validating {root.resolve()}")
        report = validator(root, settings=settings)
    except PlugcatError as err:
        _report_fatal(command, err, use_json=use_json)
        raise SystemExit(1) from err

    if use_json:
        output_json_envelope(report_envelope(command, report))
    else:
        _print_report(report, verbose=verbose)

    # Exit code: 1 if any errors (not warnings)
    if not report.passed:
        raise SystemExit(1)


@cli.command()
@_validation_command
def check(ctx: click.Context, root: Path, **options: Any) -> None:
    """Validate the catalog and every plugin directory.

    ROOT is the registry root containing .claude-plugin/marketplace.json and
    plugins/ (default: current directory).
    """
    _run_validation(ctx, "check", validate_registry, root=root, **options)


@cli.command()
@_validation_command
def marketplace(ctx: click.Context, root: Path, **options: Any) -> None:
    """Validate the catalog and the plugins it references.

    Checks the catalog schema, duplicate plugin names, relative source paths
    and the structure of every locally sourced plugin.
    """
    _run_validation(ctx, "marketplace", validate_catalog, root=root, **options)


@cli.command()
@_validation_command
def plugins(ctx: click.Context, root: Path, **options: Any) -> None:
    """Validate every plugin directory under the plugins directory.

    The catalog is not read; every plugin must carry its own manifest.
    """
    _run_validation(ctx, "plugins", validate_packages, root=root, **options)


# ─────────────────────────────────────────────────────────────────────────────
# Config commands
# ─────────────────────────────────────────────────────────────────────────────


@cli.group()
def config() -> None:
    """Read and write registry settings in plugcat.yaml."""


_root_option = click.option(
    "--root",
    type=click.Path(path_type=Path, file_okay=False),
    default=".",
    help="Registry root holding plugcat.yaml.",
)


@config.command("set")
@click.argument("key")
@click.argument("value")
@_root_option
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str, root: Path) -> None:
    """Set KEY to VALUE in the registry config file."""
    use_json = should_output_json(ctx)
    if key not in KNOWN_SETTINGS and not use_json:
        warn(f"Unknown setting '{key}'")
    try:
        set_setting(root, key, value)
    except PlugcatError as err:
        _report_fatal("config set", err, use_json=use_json)
        raise SystemExit(1) from err

    if use_json:
        output_json_envelope(success_envelope("config set", {"key": key, "value": value}))
    else:
        success(f"Set {key} = {value}")


@config.command("get")
@click.argument("key")
@_root_option
@click.pass_context
def config_get(ctx: click.Context, key: str, root: Path) -> None:
    """Print the resolved value of KEY."""
    use_json = should_output_json(ctx)
    try:
        value = get_setting(key, registry_path=root)
    except PlugcatError as err:
        _report_fatal("config get", err, use_json=use_json)
        raise SystemExit(1) from err

    if use_json:
        output_json_envelope(success_envelope("config get", {"key": key, "value": value}))
    elif value is None:
        info(f"{key} is not set")
    else:
        click.echo(f"{key} = {value}")


@config.command("unset")
@click.argument("key")
@_root_option
@click.pass_context
def config_unset(ctx: click.Context, key: str, root: Path) -> None:
    """Remove KEY from the registry config file."""
    use_json = should_output_json(ctx)
    try:
        removed = unset_setting(root, key)
    except PlugcatError as err:
        _report_fatal("config unset", err, use_json=use_json)
        raise SystemExit(1) from err

    if use_json:
        output_json_envelope(success_envelope("config unset", {"key": key, "removed": removed}))
    elif removed:
        success(f"Removed {key}")
    else:
        info(f"{key} was not set")


@config.command("list")
@_root_option
@click.pass_context
def config_list(ctx: click.Context, root: Path) -> None:
    """List every setting with its value and source."""
    use_json = should_output_json(ctx)
    try:
        settings = list_settings(root)
    except PlugcatError as err:
        _report_fatal("config list", err, use_json=use_json)
        raise SystemExit(1) from err

    if use_json:
        output_json_envelope(success_envelope("config list", {"settings": settings}))
        return
    for key, entry in settings.items():
        click.echo(f"{key} = {entry['value']}")
        detail(f"source: {entry['source']}", indent=2)
