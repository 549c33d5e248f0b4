"""CANPi configuration -- attribute definitions merged with the live value file."""

__version__ = "0.3.0"

from .errors import (
    BackupError,
    CanpiConfigError,
    ConfigIOError,
    ConfigParseError,
    DecodeError,
    SchemaCompileError,
    SchemaViolationError,
    UninitializedError,
    UnwritableValueError,
    ValueStoreNotFoundError,
)
from .models import Attribute, Visibility
from .store import DefinitionStore, filter_by_visibility
from .schema import SchemaValidator, Violation
from .loader import (
    DefinitionLoader,
    load_definitions,
    load_definitions_file,
    validate_defn_file,
)
from .value_store import (
    ValueDocument,
    read_value_store,
    reconcile,
    unknown_keys,
    write_value_store,
)
from .backup import backup_file
from .cfg import Cfg, CfgState

__all__ = [
    "Attribute",
    "BackupError",
    "CanpiConfigError",
    "Cfg",
    "CfgState",
    "ConfigIOError",
    "ConfigParseError",
    "DecodeError",
    "DefinitionLoader",
    "DefinitionStore",
    "SchemaCompileError",
    "SchemaValidator",
    "SchemaViolationError",
    "UninitializedError",
    "UnwritableValueError",
    "ValueDocument",
    "ValueStoreNotFoundError",
    "Violation",
    "Visibility",
    "backup_file",
    "filter_by_visibility",
    "load_definitions",
    "load_definitions_file",
    "read_value_store",
    "reconcile",
    "unknown_keys",
    "validate_defn_file",
    "write_value_store",
]
