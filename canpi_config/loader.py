"""Load CANPi attribute definition documents.

A definition document is a JSON object mapping each attribute key to its
definition. Loading always runs the same pipeline, whether the document comes
from a file or from a string:

* parse the JSON text
* validate it against the compiled schema
* decode the validated document into a :class:`DefinitionStore`

Decoding is only attempted once validation has passed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .errors import ConfigIOError, ConfigParseError, DecodeError
from .models import Attribute
from .schema import SchemaValidator
from .store import DefinitionStore

logger = logging.getLogger(__name__)


class DefinitionLoader:
    """Parses, validates and decodes definition documents.

    Parameters:
        validator: Compiled schema to check documents against. Defaults to
            the bundled CANPi schema.
    """

    def __init__(self, validator: SchemaValidator | None = None) -> None:
        self.validator = validator or SchemaValidator.default()

    def load_file(self, path: str | Path) -> DefinitionStore:
        """Load a definition document from *path*.

        Raises:
            ConfigIOError: If the file cannot be read.
            ConfigParseError: If the file is not valid JSON.
            SchemaViolationError: If the document does not match the schema.
            DecodeError: If the document cannot be mapped to attributes.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigIOError(path, "definition file not found") from exc
        except OSError as exc:
            raise ConfigIOError(path, f"cannot read definition file: {exc.strerror or exc}") from exc
        store = self.load_str(text, source=str(path))
        logger.info("Loaded %d attribute definitions from %s", len(store), path)
        return store

    def load_str(self, text: str, source: str | None = None) -> DefinitionStore:
        """Load a definition document held in memory.

        *source* names the document in error messages.
        """
        document = self.parse(text, source)
        self.validator.validate(document, source)
        return self.decode(document, source)

    @staticmethod
    def parse(text: str, source: str | None = None) -> Any:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigParseError(source, f"invalid JSON: {exc}") from exc

    @staticmethod
    def decode(document: Any, source: str | None = None) -> DefinitionStore:
        if not isinstance(document, dict):
            raise DecodeError(source, None, "definition document must be a JSON object")
        store = DefinitionStore()
        for key, entry in document.items():
            try:
                store.set_attribute(key, Attribute.model_validate(entry))
            except ValidationError as exc:
                raise DecodeError(source, key, _summarise(exc)) from exc
        return store


def load_definitions(
    source: str | Path, validator: SchemaValidator | None = None
) -> DefinitionStore:
    """Load definitions from a file (``Path``) or a JSON document (``str``).

    A ``str`` is never taken as a path; use :func:`load_definitions_file` for
    that. Value-file functions such as
    :func:`~canpi_config.value_store.reconcile` do the opposite and read a
    ``str`` as a path.
    """
    loader = DefinitionLoader(validator)
    if isinstance(source, Path):
        return loader.load_file(source)
    return loader.load_str(source)


def load_definitions_file(
    path: str | Path, validator: SchemaValidator | None = None
) -> DefinitionStore:
    return DefinitionLoader(validator).load_file(path)


def validate_defn_file(schema_file: str | Path, defn_file: str | Path) -> None:
    """Check a definition file against a schema file.

    Raises the same errors as :meth:`DefinitionLoader.load_file`, plus
    :class:`~canpi_config.errors.SchemaCompileError` for a broken schema.
    """
    validator = SchemaValidator.from_file(schema_file)
    DefinitionLoader(validator).load_file(defn_file)


def _summarise(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<entry>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)
