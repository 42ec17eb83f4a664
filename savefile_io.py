"""Reading, backing up and writing save files around the in-memory patcher."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import d2s
from policies import PatchPolicy

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

BACKUP_SUFFIX = ".bak"


@dataclass
class PatchOutcome:
    path: Path
    policy: str
    checksum: int
    backup_path: Optional[Path] = None


def load(path: PathLike) -> bytes:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"save file not found: {path}")
    return path.read_bytes()


def backup_name(original: PathLike, when: Optional[datetime] = None) -> Path:
    """``<original>.<yyyyMMddHHmmssfff>.bak`` beside the original file."""
    original = Path(original)
    stamp = (when or datetime.now()).strftime("%Y%m%d%H%M%S%f")[:-3]
    return original.with_name(f"{original.name}.{stamp}{BACKUP_SUFFIX}")


def backup(data: bytes, original_path: PathLike, when: Optional[datetime] = None) -> Path:
    target = backup_name(original_path, when)
    # write_bytes truncates any earlier backup with the same name
    target.write_bytes(bytes(data))
    logger.info("backup written to %s", target)
    return target


def save(data: bytes, path: PathLike) -> None:
    Path(path).write_bytes(bytes(data))
    logger.info("save written to %s", path)


def patch_file(path: PathLike, policy: PatchPolicy, make_backup: bool = True) -> PatchOutcome:
    """Load, validate, back up, patch and write back a save file.

    Nothing is written when the file is not a recognized save.
    """
    path = Path(path)
    original = load(path)
    if not d2s.is_valid_save(original):
        raise d2s.UnrecognizedFormatError(f"{path.name} is not a recognized D2R save file")

    backup_path = backup(original, path) if make_backup else None

    buffer = bytearray(original)
    d2s.apply_policy(buffer, policy)
    save(buffer, path)
    return PatchOutcome(
        path=path,
        policy=policy.name,
        checksum=d2s.stored_checksum(buffer),
        backup_path=backup_path,
    )
