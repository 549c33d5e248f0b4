"""JSON Schema validation of attribute definition documents.

A :class:`SchemaValidator` compiles its schema once, at construction, and is
then reused for every document it checks. The bundled schema describes the
CANPi definition format and is compiled at most once per process through
:meth:`SchemaValidator.default`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import Draft202012Validator

from .errors import ConfigIOError, ConfigParseError, SchemaCompileError, SchemaViolationError

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_RESOURCE = "canpi-config-schema.json"


@dataclass(frozen=True)
class Violation:
    """A single schema violation.

    Attributes:
        message: Human readable description.
        path: Location in the document, e.g. ``/canid/action``.
    """

    message: str
    path: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class SchemaValidator:
    """Checks documents against a compiled JSON Schema.

    Raises:
        SchemaCompileError: If *schema* is not a valid JSON Schema.
    """

    def __init__(self, schema: dict[str, Any]) -> None:
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as exc:
            raise SchemaCompileError(f"Invalid definition schema: {exc.message}") from exc
        self.schema = schema
        self._validator = Draft202012Validator(schema)

    @classmethod
    def from_file(cls, path: str | Path) -> "SchemaValidator":
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigIOError(path, f"cannot read schema: {exc.strerror or exc}") from exc
        try:
            schema = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigParseError(str(path), f"invalid JSON: {exc}") from exc
        return cls(schema)

    @classmethod
    def default(cls) -> "SchemaValidator":
        """Return the shared validator for the bundled CANPi schema."""
        return _default_validator()

    def is_valid(self, document: Any) -> bool:
        return self._validator.is_valid(document)

    def violations(self, document: Any) -> list[Violation]:
        errors = sorted(self._validator.iter_errors(document), key=_error_path)
        return [Violation(message=e.message, path=_error_path(e)) for e in errors]

    def validate(self, document: Any, source: str | None = None) -> None:
        """Raise :class:`SchemaViolationError` if *document* does not conform."""
        violations = self.violations(document)
        if violations:
            logger.debug("%d schema violation(s) in %s", len(violations), source or "<string>")
            raise SchemaViolationError(source, violations)


def _error_path(error: jsonschema.ValidationError) -> str:
    return "/" + "/".join(str(part) for part in error.absolute_path)


@lru_cache(maxsize=1)
def _default_validator() -> SchemaValidator:
    resource = resources.files(__package__) / "static" / DEFAULT_SCHEMA_RESOURCE
    text = resource.read_text(encoding="utf-8")
    return SchemaValidator(json.loads(text))
