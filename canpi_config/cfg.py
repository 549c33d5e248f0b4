"""Configuration session: definitions merged with the live value file.

A :class:`Cfg` starts out uninitialized and becomes loaded once a definition
document has been read. Every operation other than loading requires the
loaded state and raises :class:`UninitializedError` otherwise.

Example:
    cfg = Cfg()
    cfg.load_configuration("/home/pi/canpi/canpi.cfg", "static/canpi-config-defn.json")
    editable = cfg.attributes_with_visibility(Visibility.EDITABLE)
    cfg.set_current("start_event_id", "2")
    cfg.write_cfg()
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from .errors import UninitializedError, ValueStoreNotFoundError
from .loader import DefinitionLoader
from .models import Attribute, Visibility
from .schema import SchemaValidator
from .store import DefinitionStore, filter_by_visibility
from .value_store import SectionName, ValueDocument, reconcile, unknown_keys, write_value_store

logger = logging.getLogger(__name__)


class CfgState(str, Enum):
    """Lifecycle states of a :class:`Cfg`."""

    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"


class Cfg:
    """One configuration session for a CANPi device.

    Parameters:
        validator: Compiled definition schema; the bundled schema by default.
        sections: Value-file sections to read. Only the unnamed section is
            read unless this is given.
    """

    def __init__(
        self,
        validator: SchemaValidator | None = None,
        sections: Optional[Sequence[SectionName]] = None,
    ) -> None:
        self._loader = DefinitionLoader(validator)
        self.sections = list(sections) if sections else [None]
        self.cfg_file: Optional[Path] = None
        self.defn_file: Optional[Path] = None
        self.unknown_keys: list[str] = []
        self._store: Optional[DefinitionStore] = None

    @property
    def state(self) -> CfgState:
        return CfgState.UNINITIALIZED if self._store is None else CfgState.LOADED

    @property
    def store(self) -> DefinitionStore:
        return self._require_loaded()

    # -- loading -------------------------------------------------------------

    def load_configuration(
        self,
        cfg_file: str | Path,
        defn_file: str | Path,
        *,
        missing_ok: bool = False,
    ) -> DefinitionStore:
        """Load *defn_file* and overlay the values found in *cfg_file*.

        With *missing_ok*, a missing value file leaves every attribute at its
        defined value instead of raising :class:`ValueStoreNotFoundError`.
        The session is only changed if everything loads.
        """
        store = self._loader.load_file(defn_file)
        cfg_file = Path(cfg_file)
        try:
            document = ValueDocument.read(cfg_file)
        except ValueStoreNotFoundError:
            if not missing_ok:
                raise
            logger.info("No value file at %s, using defined values", cfg_file)
            document = ValueDocument()

        self.unknown_keys = unknown_keys(store, document.values(self.sections))
        self._store = reconcile(store, document, self.sections)
        self.cfg_file = cfg_file
        self.defn_file = Path(defn_file)
        return self._store

    def load_definitions_str(self, text: str) -> DefinitionStore:
        """Load definitions from an in-memory JSON document, without values."""
        self._store = self._loader.load_str(text)
        self.unknown_keys = []
        return self._store

    def reload_values(self, cfg_file: str | Path | None = None) -> DefinitionStore:
        """Overlay a value file onto the loaded definitions."""
        store = self._require_loaded()
        document = ValueDocument.read(cfg_file or self._require_cfg_file())
        self.unknown_keys = unknown_keys(store, document.values(self.sections))
        self._store = reconcile(store, document, self.sections)
        return self._store

    # -- attributes ----------------------------------------------------------

    def get_attribute(self, key: str) -> Optional[Attribute]:
        return self._require_loaded().get_attribute(key)

    def set_attribute(self, key: str, attribute: Attribute) -> None:
        """Insert or replace the definition stored under *key*."""
        self._require_loaded().set_attribute(key, attribute)

    def set_current(self, key: str, value: str) -> Attribute:
        """Change the live value of an existing attribute.

        Raises:
            KeyError: If *key* has no definition.
        """
        store = self._require_loaded()
        attribute = store.get_attribute(key)
        if attribute is None:
            raise KeyError(f"Attribute {key!r} not defined")
        updated = attribute.with_current(value)
        store.set_attribute(key, updated)
        return updated

    def attributes_with_visibility(self, visibility: Visibility) -> DefinitionStore:
        return filter_by_visibility(self._require_loaded(), visibility)

    # -- persistence ---------------------------------------------------------

    def write_cfg(
        self,
        destination: str | Path | None = None,
        *,
        backup: bool = True,
        keys: Optional[Sequence[str]] = None,
    ) -> Optional[Path]:
        """Write current values to *destination* (the loaded value file by default).

        Keys are updated in place only in the sections this session reads;
        a key that lives solely in another section is left alone there.
        """
        store = self._require_loaded()
        return write_value_store(
            store,
            destination or self._require_cfg_file(),
            backup=backup,
            keys=keys,
            sections=self.sections,
        )

    # -- helpers -------------------------------------------------------------

    def _require_loaded(self) -> DefinitionStore:
        if self._store is None:
            raise UninitializedError("Configuration definitions have not been loaded")
        return self._store

    def _require_cfg_file(self) -> Path:
        self._require_loaded()
        if self.cfg_file is None:
            raise UninitializedError("No value file has been loaded; pass a destination")
        return self.cfg_file
