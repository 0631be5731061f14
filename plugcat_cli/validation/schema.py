"""Schema validation of structured documents.

SchemaValidator compiles the schemas of a SchemaRepository with jsonschema
and reports every violation of a document in one pass. It knows nothing
about the filesystem; cross-document and on-disk checks live in the rule
and referential layers.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from jsonschema import Draft7Validator, FormatChecker, validators
from jsonschema.exceptions import ValidationError

from plugcat_cli.constants import SEMVER_PATTERN
from plugcat_cli.errors import UnknownSchemaError
from plugcat_cli.loader import SchemaRepository
from plugcat_cli.validation.results import Finding, Severity

ROOT_PATH = "root"

format_checker = FormatChecker()


@format_checker.checks("semver")
def is_semver(instance: object) -> bool:
    """Check a Semantic Versioning 2.0.0 string; non-strings are left to ``type``."""
    if not isinstance(instance, str):
        return True
    return SEMVER_PATTERN.match(instance) is not None


@dataclass(frozen=True)
class SchemaViolation:
    """One failed schema constraint.

    Attributes:
        path: JSON pointer to the failing value, or "root" for the document itself.
        message: Human-readable description from the validator.
        constraint: The schema keyword that failed (e.g. "required", "enum").
        params: The keyword's value in the schema (e.g. the allowed enum values).
    """

    path: str
    message: str
    constraint: str
    params: Any = None


def _json_pointer(parts: Iterable[Any]) -> str:
    tokens = [str(p).replace("~", "~0").replace("/", "~1") for p in parts]
    if not tokens:
        return ROOT_PATH
    return "/" + "/".join(tokens)


def _to_violation(error: ValidationError) -> SchemaViolation:
    return SchemaViolation(
        path=_json_pointer(error.absolute_path),
        message=error.message,
        constraint=str(error.validator),
        params=error.validator_value,
    )


class SchemaValidator:
    """Validate documents against the schemas of a repository.

    All schemas are compiled up front, so one instance can be shared by
    worker threads.
    """

    def __init__(self, repository: SchemaRepository) -> None:
        self._validators: dict[str, Any] = {}
        for schema_id, schema in repository.schemas.items():
            cls = validators.validator_for(schema, default=Draft7Validator)
            self._validators[schema_id] = cls(schema, format_checker=format_checker)

    def validate(self, document: Any, schema_id: str) -> list[SchemaViolation]:
        """Check ``document`` against the schema registered as ``schema_id``.

        Args:
            document: Parsed JSON value.
            schema_id: Identifier of the schema to apply.

        Returns:
            Every violation, sorted by path, constraint and message.

        Raises:
            UnknownSchemaError: If ``schema_id`` is not in the repository.
        """
        try:
            validator = self._validators[schema_id]
        except KeyError as e:
            raise UnknownSchemaError(schema_id) from e
        violations = [_to_violation(e) for e in validator.iter_errors(document)]
        return sorted(violations, key=lambda v: (v.path, v.constraint, v.message))


def violations_to_findings(
    violations: Iterable[SchemaViolation],
    *,
    subject: str,
    rule_name: str,
) -> list[Finding]:
    """Turn schema violations into ERROR findings about ``subject``."""
    return [
        Finding(
            severity=Severity.ERROR,
            subject=subject,
            message=f"{v.path}: {v.message}",
            rule_name=rule_name,
        )
        for v in violations
    ]
