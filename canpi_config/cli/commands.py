"""
canpi-config CLI - Commands

Commands:
    show     - Display attributes with their current values
    get      - Print the current value of one attribute
    set      - Change the current value of an editable attribute
    validate - Validate a definition file against the schema
    sections - Dump every section of a value file
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from canpi_config.cfg import Cfg
from canpi_config.cli import app, console
from canpi_config.cli.output import (
    print_error,
    print_json,
    print_success,
    print_table,
    print_warning,
)
from canpi_config.errors import CanpiConfigError, SchemaViolationError
from canpi_config.loader import DefinitionLoader
from canpi_config.models import Visibility
from canpi_config.schema import SchemaValidator
from canpi_config.settings import get_settings
from canpi_config.store import DefinitionStore
from canpi_config.value_store import ValueDocument

_DEFN_OPTION = typer.Option(
    None,
    "--defn",
    "-d",
    help="Definition file (defaults to CANPI_DEFN_FILE).",
)
_CFG_OPTION = typer.Option(
    None,
    "--cfg",
    "-c",
    help="Value file (defaults to CANPI_CFG_FILE).",
)
_SCHEMA_OPTION = typer.Option(
    None,
    "--schema",
    "-s",
    help="Schema file (defaults to CANPI_SCHEMA_FILE or the bundled schema).",
)


@app.command("show")
def show(
    visibility: Optional[Visibility] = typer.Option(
        None,
        "--visibility",
        "-a",
        help="Only show attributes with this action.",
    ),
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table, json.",
    ),
    defn: Optional[Path] = _DEFN_OPTION,
    cfg_file: Optional[Path] = _CFG_OPTION,
    schema: Optional[Path] = _SCHEMA_OPTION,
) -> None:
    """
    Display attributes with their current values.

    Hidden attributes are only listed when asked for explicitly.
    """
    cfg = _load(defn, cfg_file, schema)
    if visibility is None:
        store = DefinitionStore(
            {k: a for k, a in cfg.store.items() if a.visibility != Visibility.HIDDEN}
        )
    else:
        store = cfg.attributes_with_visibility(visibility)

    if format == "json":
        print_json(store.to_document())
        return

    rows = [
        [key, attr.prompt, attr.current, attr.default, attr.visibility.value]
        for key, attr in sorted(store.items())
    ]
    print_table(
        "CANPi configuration",
        ["Key", "Prompt", "Current", "Default", "Action"],
        rows,
        styles=["cyan", None, "green", "dim", None],
    )
    for key in cfg.unknown_keys:
        print_warning(f"Value file sets undefined attribute '{key}'")


@app.command("get")
def get(
    key: str = typer.Argument(..., help="Attribute key."),
    defn: Optional[Path] = _DEFN_OPTION,
    cfg_file: Optional[Path] = _CFG_OPTION,
    schema: Optional[Path] = _SCHEMA_OPTION,
) -> None:
    """
    Print the current value of one attribute.

    Only the value is printed, for use in scripts.
    """
    cfg = _load(defn, cfg_file, schema)
    attr = cfg.get_attribute(key)
    if attr is None:
        print_error(f"Attribute not defined: {key}")
        raise typer.Exit(1)
    console.print(attr.current, markup=False, highlight=False)


@app.command("set")
def set_value(
    key: str = typer.Argument(..., help="Attribute key."),
    value: str = typer.Argument(..., help="New value."),
    force: bool = typer.Option(
        False,
        "--force",
        help="Allow changing attributes that are not editable.",
    ),
    backup: Optional[bool] = typer.Option(
        None,
        "--backup/--no-backup",
        help="Back up the value file before writing (defaults to CANPI_BACKUP_ON_WRITE).",
    ),
    defn: Optional[Path] = _DEFN_OPTION,
    cfg_file: Optional[Path] = _CFG_OPTION,
    schema: Optional[Path] = _SCHEMA_OPTION,
) -> None:
    """
    Change the current value of an attribute and save the value file.

    A missing value file is created holding just this attribute.
    """
    cfg = _load(defn, cfg_file, schema, missing_ok=True)
    attr = cfg.get_attribute(key)
    if attr is None:
        print_error(f"Attribute not defined: {key}")
        raise typer.Exit(1)
    if attr.visibility != Visibility.EDITABLE and not force:
        print_error(
            f"Attribute '{key}' is not editable (action {attr.visibility.value})",
            hint="Use --force to change it anyway",
        )
        raise typer.Exit(1)

    cfg.set_current(key, value)
    if backup is None:
        backup = get_settings().BACKUP_ON_WRITE
    try:
        backup_path = cfg.write_cfg(backup=backup, keys=[key])
    except CanpiConfigError as exc:
        print_error("Could not save the value file", details=str(exc))
        raise typer.Exit(1)

    print_success(f"{key} = {value}", details=f"Saved to {cfg.cfg_file}")
    if backup_path is not None:
        console.print(f"[dim]Previous values saved to {backup_path}[/dim]")


@app.command("validate")
def validate(
    defn: Optional[Path] = typer.Argument(
        None,
        help="Definition file (defaults to CANPI_DEFN_FILE).",
    ),
    schema: Optional[Path] = _SCHEMA_OPTION,
) -> None:
    """
    Validate a definition file against the schema.

    Lists every violation when the file does not conform.
    """
    settings = get_settings()
    defn = defn or settings.DEFN_FILE
    try:
        store = DefinitionLoader(_validator(schema)).load_file(defn)
    except SchemaViolationError as exc:
        print_error(f"{defn} does not match the schema")
        print_table(
            "Schema violations",
            ["Location", "Problem"],
            [[v.path, v.message] for v in exc.violations],
            styles=["cyan", "red"],
        )
        raise typer.Exit(1)
    except CanpiConfigError as exc:
        print_error(str(exc))
        raise typer.Exit(1)

    print_success(f"{defn} is valid", details=f"{len(store)} attributes defined")


@app.command("sections")
def sections(
    cfg_file: Optional[Path] = typer.Argument(
        None,
        help="Value file (defaults to CANPI_CFG_FILE).",
    ),
) -> None:
    """
    Dump every section of a value file.

    The unnamed section is listed first as "General Section".
    """
    cfg_file = cfg_file or get_settings().CFG_FILE
    try:
        document = ValueDocument.read(cfg_file)
    except CanpiConfigError as exc:
        print_error(str(exc))
        raise typer.Exit(1)

    print_table("General Section", ["Key", "Value"], [[k, v] for k, v in document.general.items()])
    for name, pairs in document.sections.items():
        print_table(f"Section: {name}", ["Key", "Value"], [[k, v] for k, v in pairs.items()])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _validator(schema: Optional[Path]) -> SchemaValidator:
    schema = schema or get_settings().SCHEMA_FILE
    if schema is None:
        return SchemaValidator.default()
    try:
        return SchemaValidator.from_file(schema)
    except CanpiConfigError as exc:
        print_error("Could not load the schema", details=str(exc))
        raise typer.Exit(1)


def _load(
    defn: Optional[Path],
    cfg_file: Optional[Path],
    schema: Optional[Path],
    missing_ok: bool = False,
) -> Cfg:
    settings = get_settings()
    cfg = Cfg(_validator(schema), sections=settings.section_names())
    try:
        cfg.load_configuration(
            cfg_file or settings.CFG_FILE,
            defn or settings.DEFN_FILE,
            missing_ok=missing_ok,
        )
    except CanpiConfigError as exc:
        print_error("Could not load the configuration", details=str(exc))
        raise typer.Exit(1)
    return cfg
