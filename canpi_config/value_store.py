"""Read, reconcile and write the CANPi value file.

The value file is a flat INI-style document of ``key=value`` lines. Lines
before the first ``[section]`` header form the unnamed (general) section,
which is where the CANPi daemons keep their settings. Named sections may be
present; they are only consulted when explicitly selected and are always
preserved when the file is rewritten.

Only the ``current`` value of an attribute is ever stored here.
"""

from __future__ import annotations

import configparser
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Sequence, Union

from .backup import backup_file
from .errors import (
    BackupError,
    ConfigIOError,
    ConfigParseError,
    UnwritableValueError,
    ValueStoreNotFoundError,
)
from .store import DefinitionStore

logger = logging.getLogger(__name__)

# Section names as accepted by ``sections=`` arguments; None is the unnamed section.
SectionName = Optional[str]

_GENERAL_HEADER = "__canpi_general__"
_NO_DEFAULT_SECTION = "__canpi_no_default__"
_QUOTES = ("'", '"')
# First characters that make a line a comment or a section header.
_LINE_PREFIXES = ("#", ";", "[")


@dataclass
class ValueDocument:
    """Parsed contents of a value file.

    Attributes:
        general: Pairs of the unnamed section, in file order.
        sections: Named sections, in file order.
    """

    general: Dict[str, str] = field(default_factory=dict)
    sections: Dict[str, Dict[str, str]] = field(default_factory=dict)

    # -- parsing -------------------------------------------------------------

    @classmethod
    def parse(cls, text: str, source: str | None = None) -> "ValueDocument":
        """Parse value-file text.

        Raises:
            ConfigParseError: On malformed lines or duplicate keys/sections.
        """
        parser = configparser.ConfigParser(
            interpolation=None,
            delimiters=("=",),
            comment_prefixes=("#", ";"),
            strict=True,
            default_section=_NO_DEFAULT_SECTION,
        )
        parser.optionxform = str  # keys are case-sensitive
        lines = [line.strip() for line in text.splitlines()]
        try:
            parser.read_string("\n".join([f"[{_GENERAL_HEADER}]", *lines]), source or "<string>")
        except configparser.Error as exc:
            raise ConfigParseError(source, f"malformed value file: {exc}") from exc

        doc = cls()
        for name in parser.sections():
            pairs = {key: _unquote(value) for key, value in parser.items(name, raw=True)}
            if name == _GENERAL_HEADER:
                doc.general = pairs
            else:
                doc.sections[name] = pairs
        return doc

    @classmethod
    def read(cls, path: str | Path) -> "ValueDocument":
        """Read and parse the value file at *path*.

        Raises:
            ValueStoreNotFoundError: If *path* does not exist.
            ConfigIOError: If *path* cannot be read.
            ConfigParseError: If the contents are malformed.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ValueStoreNotFoundError(path) from exc
        except UnicodeDecodeError as exc:
            raise ConfigParseError(str(path), f"not UTF-8 text: {exc.reason}") from exc
        except OSError as exc:
            raise ConfigIOError(path, f"cannot read value file: {exc.strerror or exc}") from exc
        return cls.parse(text, source=str(path))

    # -- access --------------------------------------------------------------

    def section(self, name: SectionName = None) -> Dict[str, str]:
        """Return the pairs of section *name* (``None`` is the unnamed section)."""
        if name is None:
            return self.general
        return self.sections.get(name, {})

    def values(self, sections: Optional[Sequence[SectionName]] = None) -> Dict[str, str]:
        """Merge the selected sections into one mapping.

        Only the unnamed section is used unless *sections* says otherwise.
        On duplicate keys the earlier section wins.
        """
        merged: Dict[str, str] = {}
        for name in sections or (None,):
            if name is not None and name not in self.sections:
                logger.debug("Value file has no section [%s]", name)
            for key, value in self.section(name).items():
                merged.setdefault(key, value)
        return merged

    def locate(
        self, key: str, sections: Optional[Sequence[SectionName]] = None
    ) -> tuple[bool, SectionName]:
        """Return ``(found, section)`` for the first of *sections* holding *key*.

        Only the unnamed section is searched unless *sections* says otherwise,
        matching :meth:`values`.
        """
        for name in sections or (None,):
            if key in self.section(name):
                return True, name
        return False, None

    def put(
        self,
        key: str,
        value: str,
        section: SectionName = None,
        sections: Optional[Sequence[SectionName]] = None,
    ) -> None:
        """Set *key*, updating it where it already lives or adding it to *section*.

        Only *sections* are searched for an existing entry, so a key living in
        a section that was never read is not overwritten.
        """
        found, where = self.locate(key, sections)
        if not found:
            where = section
        if where is None:
            self.general[key] = value
        else:
            self.sections.setdefault(where, {})[key] = value

    # -- output --------------------------------------------------------------

    def render(self) -> str:
        lines = [f"{key}={_quote(value)}" for key, value in self.general.items()]
        for name, pairs in self.sections.items():
            if lines:
                lines.append("")
            lines.append(f"[{name}]")
            lines.extend(f"{key}={_quote(value)}" for key, value in pairs.items())
        return "\n".join(lines) + "\n" if lines else ""

    def write(self, path: str | Path) -> None:
        """Atomically write the document to *path*.

        Writes to a temporary file first, then renames, so readers never see
        a partial file. An existing file's permission bits are kept.
        """
        path = Path(path)
        tmp = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(self.render(), encoding="utf-8")
            if path.is_file():
                shutil.copymode(path, tmp)
            tmp.replace(path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise ConfigIOError(path, f"cannot write value file: {exc.strerror or exc}") from exc


ValueSource = Union[str, Path, ValueDocument, Mapping[str, str]]


def read_value_store(
    path: str | Path, sections: Optional[Sequence[SectionName]] = None
) -> Dict[str, str]:
    """Return the ``key -> value`` pairs of the selected sections of *path*."""
    return ValueDocument.read(path).values(sections)


def unknown_keys(store: Mapping[str, object], values: Iterable[str]) -> list[str]:
    """Return the keys of *values* that have no definition in *store*."""
    return sorted(key for key in values if key not in store)


def reconcile(
    store: DefinitionStore,
    source: ValueSource,
    sections: Optional[Sequence[SectionName]] = None,
) -> DefinitionStore:
    """Overlay the values of *source* onto the ``current`` fields of *store*.

    *source* is a value-file path, a parsed :class:`ValueDocument` or a plain
    mapping. A ``str`` is always taken as a path here, unlike
    :func:`~canpi_config.loader.load_definitions` where it is document text.
    A new store is returned; *store* itself is left untouched. Keys without
    a definition are logged and skipped.

    Raises:
        ValueStoreNotFoundError: If *source* is a path that does not exist.
        ConfigIOError: If *source* cannot be read.
        ConfigParseError: If *source* is malformed.
    """
    if isinstance(source, (str, Path)):
        values = read_value_store(source, sections)
    elif isinstance(source, ValueDocument):
        values = source.values(sections)
    else:
        values = dict(source)

    merged = store.copy()
    for key, value in values.items():
        attribute = merged.get_attribute(key)
        if attribute is None:
            logger.warning("Ignoring value for undefined attribute %r", key)
            continue
        logger.debug("Setting %s=%r", key, value)
        merged.set_attribute(key, attribute.with_current(value))
    return merged


def write_value_store(
    store: DefinitionStore,
    destination: str | Path,
    *,
    backup: bool = False,
    keys: Optional[Iterable[str]] = None,
    section: SectionName = None,
    sections: Optional[Sequence[SectionName]] = None,
    backup_dir: str | Path | None = None,
) -> Optional[Path]:
    """Persist the ``current`` values of *store* to *destination*.

    An existing file keeps its other keys and sections. A key already present
    in one of *sections* (the sections the values were read from; the unnamed
    section by default) is updated in place. Other keys are appended, sorted,
    to *section*.

    With *backup*, an existing file is first copied aside; a failed backup is
    logged and the write goes ahead. Returns the backup path, if one was made.

    Raises:
        KeyError: If *keys* names an attribute missing from *store*.
        UnwritableValueError: If a key or value cannot be written as one
            ``key=value`` line. Nothing is written.
        ConfigIOError: If the file cannot be written.
        ConfigParseError: If the existing file is malformed.
    """
    destination = Path(destination)
    selected = sorted(store if keys is None else keys)
    missing = [key for key in selected if key not in store]
    if missing:
        raise KeyError(f"No such attribute(s): {', '.join(missing)}")
    if section is not None:
        _check_section(section)
    for key in selected:
        _check_pair(key, store[key].current)

    backup_path: Optional[Path] = None
    try:
        document = ValueDocument.read(destination)
    except ValueStoreNotFoundError:
        document = ValueDocument()
    else:
        if backup:
            try:
                backup_path = backup_file(destination, backup_dir)
            except BackupError as exc:
                logger.warning("Continuing without backup: %s", exc)

    for key in selected:
        document.put(key, store[key].current, section, sections)
    document.write(destination)
    logger.info("Wrote %d value(s) to %s", len(selected), destination)
    return backup_path


def _check_pair(key: str, value: str) -> None:
    if not key or key != key.strip():
        raise UnwritableValueError(key, "key is empty or has surrounding whitespace")
    if key[0] in _LINE_PREFIXES:
        raise UnwritableValueError(key, f"key starts with {key[0]!r}")
    if "=" in key or _has_line_break(key):
        raise UnwritableValueError(key, "key contains '=' or a line break")
    if _has_line_break(value):
        raise UnwritableValueError(key, "value contains a line break")


def _check_section(name: str) -> None:
    if (
        not name
        or name != name.strip()
        or "]" in name
        or _has_line_break(name)
        or name in (_GENERAL_HEADER, _NO_DEFAULT_SECTION)
    ):
        raise UnwritableValueError(name, "not a usable section name")


def _has_line_break(text: str) -> bool:
    # Anything str.splitlines() splits on would break the line when read back.
    return "".join(text.splitlines()) != text


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value


def _quote(value: str) -> str:
    if value != value.strip() or _unquote(value) != value:
        return f'"{value}"'
    return value
