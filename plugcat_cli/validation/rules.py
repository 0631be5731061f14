"""Package rule base class and built-in structural rules.

Each rule inspects one PackageLayout snapshot and emits zero or more
findings. Rules never touch storage and never depend on one another, so
they are unit-testable in isolation and composable into a rule set.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from plugcat_cli.constants import (
    AGENTS_DIRNAME,
    COMMANDS_DIRNAME,
    HOOKS_DIRNAME,
    HOOKS_FILENAME,
    KEBAB_CASE_PATTERN,
    LICENSE_FILENAME,
    MANIFEST_FILENAME,
    METADATA_DIRNAME,
    README_FILENAME,
    SERVICE_CONFIG_FILENAME,
    SKILL_FILENAME,
    SKILLS_DIRNAME,
)
from plugcat_cli.loader import MANIFEST_SCHEMA_ID
from plugcat_cli.models import PluginEntry
from plugcat_cli.validation.layout import LoadedDocument, PackageLayout
from plugcat_cli.validation.results import Finding, Severity
from plugcat_cli.validation.schema import SchemaValidator, violations_to_findings


def is_kebab_case(name: str) -> bool:
    """Return True for lowercase alphanumeric segments joined by single hyphens."""
    return KEBAB_CASE_PATTERN.match(name) is not None


@dataclass(frozen=True)
class PackageContext:
    """Identity of the package a rule is looking at.

    Attributes:
        identity: The package directory name.
        subject: Display subject for findings (e.g. "official/my-plugin").
        entry: The catalog entry that points at the package, if any.
        discovered: True if the package was found by walking the plugins
            directory, False if it is only reachable through the catalog.
    """

    identity: str
    subject: str
    entry: PluginEntry | None = None
    discovered: bool = True


class PackageRule(ABC):
    """Base class for all package rules.

    Subclasses must define:
        name: Unique identifier for the rule
        description: Human-readable explanation for --verbose

    Subclasses must implement:
        check(): Inspect the layout and return findings
    """

    name: str
    description: str

    @abstractmethod
    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        """Run this rule against one package.

        Args:
            layout: Snapshot of the package directory.
            context: Package identity and catalog entry.

        Returns:
            Findings in a stable order; empty if the package complies.
        """
        ...

    def _finding(
        self,
        severity: Severity,
        context: PackageContext,
        message: str,
        *,
        fix_hint: str | None = None,
    ) -> Finding:
        """Helper to create a finding attributed to this rule."""
        return Finding(
            severity=severity,
            subject=context.subject,
            message=message,
            rule_name=self.name,
            fix_hint=fix_hint,
        )

    def _document_finding(
        self, context: PackageContext, document: LoadedDocument, label: str
    ) -> Finding:
        """Finding for a descriptor that exists but could not be loaded.

        Malformed content is an error; an unreadable file is an I/O anomaly.
        """
        if document.malformed:
            message = f"{label} is not valid JSON: {document.error}"
            return self._finding(Severity.ERROR, context, message)
        return self._finding(Severity.WARNING, context, f"Could not read {label}: {document.error}")


class NamingRule(PackageRule):
    """Check that the package directory name is kebab-case."""

    name = "naming"
    description = "Verify the plugin directory name uses kebab-case"

    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        if is_kebab_case(context.identity):
            return []
        return [
            self._finding(
                Severity.ERROR,
                context,
                f'Plugin name "{context.identity}" should use kebab-case (lowercase with hyphens)',
                fix_hint="Rename the directory, e.g. 'my-plugin'",
            )
        ]


class ManifestPresentRule(PackageRule):
    """Check that a package found on disk carries its manifest.

    Applies to every discovered package, catalogued or not; a catalog
    entry's ``strict`` flag does not relax it. Packages only reachable
    through the catalog are covered by StrictModeRule alone.
    """

    name = "manifest_present"
    description = f"Verify {METADATA_DIRNAME}/{MANIFEST_FILENAME} exists"

    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        if not context.discovered:
            return []
        if not layout.has_metadata_dir:
            return [
                self._finding(
                    Severity.ERROR,
                    context,
                    f"Missing {METADATA_DIRNAME}/ directory",
                    fix_hint=f"Create {METADATA_DIRNAME}/{MANIFEST_FILENAME}",
                )
            ]
        if layout.manifest is None:
            return [self._finding(Severity.ERROR, context, f"Missing {MANIFEST_FILENAME}")]
        return []


class StrictModeRule(PackageRule):
    """Check plugin metadata against the catalog entry's ``strict`` flag.

    A missing metadata directory is always at least a warning; a missing
    manifest inside an existing metadata directory is only reported as an
    error in strict mode and is an informational note otherwise.
    """

    name = "strict_mode"
    description = "Verify plugin metadata required by strict catalog entries"

    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        entry = context.entry
        if entry is None:
            return []

        findings: list[Finding] = []
        if not layout.has_metadata_dir:
            findings.append(
                self._finding(Severity.WARNING, context, f"Missing {METADATA_DIRNAME}/ directory")
            )
            if entry.strict:
                findings.append(
                    self._finding(
                        Severity.ERROR,
                        context,
                        f"Plugin is strict mode but missing {METADATA_DIRNAME}/ directory",
                        fix_hint='Add the manifest or set "strict": false in the catalog entry',
                    )
                )
        elif layout.manifest is None:
            if entry.strict:
                findings.append(
                    self._finding(
                        Severity.ERROR,
                        context,
                        f"Plugin is strict mode but missing {MANIFEST_FILENAME}",
                        fix_hint='Add the manifest or set "strict": false in the catalog entry',
                    )
                )
            else:
                findings.append(
                    self._finding(
                        Severity.INFO, context, f"Plugin has no {MANIFEST_FILENAME} (strict: false)"
                    )
                )
        return findings


class ManifestSchemaRule(PackageRule):
    """Check that the manifest parses and conforms to the manifest schema."""

    name = "manifest_schema"
    description = f"Verify {MANIFEST_FILENAME} is valid JSON and matches the manifest schema"

    def __init__(self, validator: SchemaValidator) -> None:
        self.validator = validator

    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        manifest = layout.manifest
        if manifest is None:
            return []
        if not manifest.ok:
            return [self._document_finding(context, manifest, MANIFEST_FILENAME)]
        violations = self.validator.validate(manifest.data, MANIFEST_SCHEMA_ID)
        return violations_to_findings(violations, subject=context.subject, rule_name=self.name)


class ManifestNameRule(PackageRule):
    """Warn when the manifest's name drifts from the directory name."""

    name = "manifest_name"
    description = "Verify the manifest name matches the plugin directory"

    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        manifest = layout.manifest
        if manifest is None or not manifest.ok or not isinstance(manifest.data, dict):
            return []
        declared = manifest.data.get("name")
        # A missing name is reported by the manifest schema
        if declared is None or declared == context.identity:
            return []
        return [
            self._finding(
                Severity.WARNING,
                context,
                f'{MANIFEST_FILENAME} name "{declared}" '
                f'doesn\'t match directory name "{context.identity}"',
            )
        ]


class RequiredFilesRule(PackageRule):
    """Check that README.md and LICENSE exist, whatever the strict flag."""

    name = "required_files"
    description = f"Verify {README_FILENAME} and {LICENSE_FILENAME} exist"

    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        findings: list[Finding] = []
        if not layout.has_readme:
            findings.append(self._finding(Severity.ERROR, context, f"Missing {README_FILENAME}"))
        if not layout.has_license:
            findings.append(
                self._finding(Severity.ERROR, context, f"Missing {LICENSE_FILENAME} file")
            )
        return findings


class CommandsRule(PackageRule):
    """Warn about a commands/ directory without command documents."""

    name = "commands"
    description = f"Verify {COMMANDS_DIRNAME}/ contains .md files"

    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        if layout.commands is None or layout.commands:
            return []
        return [
            self._finding(
                Severity.WARNING,
                context,
                f"{COMMANDS_DIRNAME}/ directory exists but contains no .md files",
            )
        ]


class AgentsRule(PackageRule):
    """Warn about an agents/ directory without agent documents."""

    name = "agents"
    description = f"Verify {AGENTS_DIRNAME}/ contains .md files"

    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        if layout.agents is None or layout.agents:
            return []
        return [
            self._finding(
                Severity.WARNING,
                context,
                f"{AGENTS_DIRNAME}/ directory exists but contains no .md files",
            )
        ]


class SkillsRule(PackageRule):
    """Check skill directories and their SKILL.md files."""

    name = "skills"
    description = f"Verify every skill directory has a {SKILL_FILENAME}"

    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        if layout.skills is None:
            return []
        if not layout.skills:
            return [
                self._finding(
                    Severity.WARNING,
                    context,
                    f"{SKILLS_DIRNAME}/ directory exists but contains no skill directories",
                )
            ]
        return [
            self._finding(
                Severity.WARNING, context, f'Skill "{skill.name}" missing {SKILL_FILENAME}'
            )
            for skill in layout.skills
            if not skill.has_skill_file
        ]


class HooksRule(PackageRule):
    """Check the hooks/ descriptor is present and parses."""

    name = "hooks"
    description = f"Verify {HOOKS_DIRNAME}/{HOOKS_FILENAME} exists and is valid JSON"

    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        if not layout.has_hooks_dir:
            return []
        if layout.hooks is None:
            return [
                self._finding(
                    Severity.WARNING,
                    context,
                    f"{HOOKS_DIRNAME}/ directory exists but missing {HOOKS_FILENAME}",
                )
            ]
        if not layout.hooks.ok:
            label = f"{HOOKS_DIRNAME}/{HOOKS_FILENAME}"
            return [self._document_finding(context, layout.hooks, label)]
        return []


class ServiceConfigRule(PackageRule):
    """Check the optional service config parses when present."""

    name = "service_config"
    description = f"Verify {SERVICE_CONFIG_FILENAME} is valid JSON when present"

    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        if layout.service_config is None or layout.service_config.ok:
            return []
        return [self._document_finding(context, layout.service_config, SERVICE_CONFIG_FILENAME)]


class ProbeAnomalyRule(PackageRule):
    """Report paths that could not be inspected while scanning."""

    name = "probe_anomalies"
    description = "Report filesystem errors met while scanning the plugin"

    def check(self, layout: PackageLayout, context: PackageContext) -> list[Finding]:
        return [
            self._finding(Severity.WARNING, context, failure, fix_hint="Check file permissions")
            for failure in layout.io_failures
        ]


def default_rules(validator: SchemaValidator) -> tuple[PackageRule, ...]:
    """Return the standard rule set, in emission order.

    Args:
        validator: Schema validator used for the manifest.
    """
    return (
        NamingRule(),
        ManifestPresentRule(),
        StrictModeRule(),
        ManifestSchemaRule(validator),
        ManifestNameRule(),
        RequiredFilesRule(),
        CommandsRule(),
        AgentsRule(),
        SkillsRule(),
        HooksRule(),
        ServiceConfigRule(),
        ProbeAnomalyRule(),
    )


def apply_rules(
    rules: Sequence[PackageRule],
    layout: PackageLayout,
    context: PackageContext,
) -> list[Finding]:
    """Run ``rules`` in order and concatenate their findings."""
    findings: list[Finding] = []
    for rule in rules:
        findings.extend(rule.check(layout, context))
    return findings
