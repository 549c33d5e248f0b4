"""Exception hierarchy for canpi-config.

Every fallible operation in the package raises a subclass of
:class:`CanpiConfigError`; none of them exit the process.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .schema import Violation


class CanpiConfigError(Exception):
    """Base class for all configuration errors."""
    pass


class ConfigIOError(CanpiConfigError):
    """A file could not be opened, read or written.

    Attributes:
        path: The file involved.
    """

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class ValueStoreNotFoundError(ConfigIOError):
    """The value file does not exist.

    Kept separate from other I/O failures so callers can fall back to the
    definition defaults.
    """

    def __init__(self, path: str | Path):
        super().__init__(path, "value file not found")


class ConfigParseError(CanpiConfigError):
    """A definition or value document is malformed."""

    def __init__(self, source: str | None, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source or '<string>'}: {reason}")


class SchemaViolationError(CanpiConfigError):
    """A well-formed definition document does not conform to the schema.

    Attributes:
        source: File path of the document, when it came from a file.
        violations: The individual schema violations.
    """

    def __init__(self, source: str | None, violations: Sequence["Violation"]):
        self.source = source
        self.violations = list(violations)
        detail = "; ".join(str(v) for v in self.violations[:3])
        if len(self.violations) > 3:
            detail += f" (+{len(self.violations) - 3} more)"
        super().__init__(
            f"{source or '<string>'} does not match the definition schema: {detail}"
        )


class DecodeError(CanpiConfigError):
    """A schema-valid document could not be mapped onto the attribute model.

    This points at a mismatch between the schema and the model rather than
    at bad user input.
    """

    def __init__(self, source: str | None, key: str | None, reason: str):
        self.source = source
        self.key = key
        self.reason = reason
        where = f" (attribute {key!r})" if key is not None else ""
        super().__init__(f"{source or '<string>'}{where}: {reason}")


class UnwritableValueError(CanpiConfigError):
    """A key or value cannot be stored as a single ``key=value`` line.

    Raised before anything is written, so the value file is left as it was.
    """

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"cannot write {key!r}: {reason}")


class UninitializedError(CanpiConfigError):
    """An operation needs definitions that have not been loaded yet."""
    pass


class SchemaCompileError(CanpiConfigError):
    """The schema document itself is invalid."""
    pass


class BackupError(CanpiConfigError):
    """A backup copy could not be made."""
    pass
