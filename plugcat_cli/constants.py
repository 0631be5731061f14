"""Shared constants for the plugcat CLI.

This module contains the well-known file and directory names of a plugin
registry so that the loader, the rules and the CLI agree on them.
"""

from __future__ import annotations

import re

# Metadata directory inside every plugin (and at the registry root)
METADATA_DIRNAME: str = ".claude-plugin"

# Plugin manifest, relative to the plugin directory
MANIFEST_FILENAME: str = "plugin.json"

# Catalog document, relative to the registry root
DEFAULT_CATALOG_PATH: str = f"{METADATA_DIRNAME}/marketplace.json"

# Directory holding plugin categories, relative to the registry root
DEFAULT_PLUGINS_DIR: str = "plugins"

# Category directories that group plugins one level deeper (category/domain/plugin)
DEFAULT_NAMESPACE_DIRS: tuple[str, ...] = ("specialized",)

README_FILENAME: str = "README.md"
LICENSE_FILENAME: str = "LICENSE"

COMMANDS_DIRNAME: str = "commands"
AGENTS_DIRNAME: str = "agents"
SKILLS_DIRNAME: str = "skills"
HOOKS_DIRNAME: str = "hooks"

SKILL_FILENAME: str = "SKILL.md"
HOOKS_FILENAME: str = "hooks.json"
SERVICE_CONFIG_FILENAME: str = ".mcp.json"

# Extension of command and agent documents
DOCUMENT_SUFFIX: str = ".md"

# Relative source references in the catalog start with this prefix
RELATIVE_SOURCE_PREFIX: str = "./"

# Lowercase alphanumeric segments joined by single hyphens
KEBAB_CASE_PATTERN: re.Pattern[str] = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

# Semantic Versioning 2.0.0 (https://semver.org)
SEMVER_PATTERN: re.Pattern[str] = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)
