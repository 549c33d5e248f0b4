"""Timestamped backup copies of files about to be overwritten."""

from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path

from .errors import BackupError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


def backup_file(
    path: str | Path,
    backup_dir: str | Path | None = None,
    now: datetime | None = None,
) -> Path:
    """Copy *path* to ``<name>.<timestamp>.bak`` and return the copy's path.

    The copy is placed next to the original unless *backup_dir* is given.
    A ``-N`` suffix is added when a backup with the same timestamp exists.

    Raises:
        BackupError: If *path* does not exist or the copy fails.
    """
    path = Path(path)
    if not path.is_file():
        raise BackupError(f"Nothing to back up: {path} does not exist")

    target_dir = Path(backup_dir) if backup_dir is not None else path.parent
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    target = target_dir / f"{path.name}.{stamp}.bak"
    counter = 1
    while target.exists():
        target = target_dir / f"{path.name}.{stamp}-{counter}.bak"
        counter += 1

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
    except OSError as exc:
        raise BackupError(f"Backup of {path} to {target} failed: {exc}") from exc

    logger.info("Backed up %s to %s", path, target)
    return target
