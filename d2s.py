"""Core save patching for Diablo II: Resurrected ``.d2s`` files.

The game rejects a save whose checksum field does not match its own rolling
checksum, so every mutation made here ends with :func:`recompute_checksum`.
"""

from __future__ import annotations

import logging
from typing import Union

from policies import (
    CHARACTER_PROGRESSION_OFFSET,
    GAME_COMPLETED_ON_NORMAL,
    QUEST_COMPLETE,
    QUESTS_SECTION_OFFSET,
    WAYPOINTS_A3WP1_ENABLED,
    Act,
    BufferTooShortError,
    Difficulty,
    PatchPolicy,
    Quest,
    SaveFixError,
    complete_all_act2_edits,
    quest_offset,
    waypoint_offset,
)

logger = logging.getLogger(__name__)

SAVE_MAGIC = b"\x55\xaa\x55\xaa"
VERSION_OFFSET = 4
MIN_VERSION = 0x61
HEADER_LENGTH = 765
CHECKSUM_OFFSET = 0x0C
CHECKSUM_LENGTH = 4

BytesLike = Union[bytes, bytearray, memoryview]

__all__ = [
    "BufferTooShortError",
    "SaveFixError",
    "UnrecognizedFormatError",
    "apply_policy",
    "calc_checksum",
    "complete_all_act2",
    "difficulty_unlocked",
    "has_valid_checksum",
    "is_valid_save",
    "quest_completed",
    "recompute_checksum",
    "stored_checksum",
    "unlock",
    "waypoint_unlocked",
]


class UnrecognizedFormatError(SaveFixError, ValueError):
    """The buffer is not a supported D2R character save."""


def is_valid_save(data: BytesLike) -> bool:
    if data is None or len(data) < HEADER_LENGTH:
        return False
    if bytes(data[:4]) != SAVE_MAGIC:
        return False
    if data[VERSION_OFFSET] < MIN_VERSION:
        return False
    return True


def calc_checksum(data: BytesLike) -> int:
    """Rolling checksum the game stores at :data:`CHECKSUM_OFFSET`.

    The four checksum bytes are kept as one little-endian 32-bit word. For
    every input byte the word is doubled and the byte plus the carry (the
    word's top bit from the previous step) is added; overflow out of the top
    byte is dropped. The checksum field is *not* skipped, callers clear it.
    """
    checksum = 0
    for byte in data:
        carry = checksum >> 31
        checksum = ((checksum << 1) + byte + carry) & 0xFFFFFFFF
    return checksum


def recompute_checksum(buffer: bytearray, checksum_offset: int = CHECKSUM_OFFSET) -> None:
    if buffer is None or len(buffer) < checksum_offset + CHECKSUM_LENGTH:
        logger.warning("buffer too short for a checksum at 0x%02X, left untouched", checksum_offset)
        return

    end = checksum_offset + CHECKSUM_LENGTH
    buffer[checksum_offset:end] = bytes(CHECKSUM_LENGTH)
    checksum = calc_checksum(buffer)
    buffer[checksum_offset:end] = checksum.to_bytes(CHECKSUM_LENGTH, "little")
    logger.debug("checksum 0x%08X written at 0x%02X", checksum, checksum_offset)


def stored_checksum(data: BytesLike, checksum_offset: int = CHECKSUM_OFFSET) -> int:
    return int.from_bytes(data[checksum_offset:checksum_offset + CHECKSUM_LENGTH], "little")


def has_valid_checksum(data: BytesLike, checksum_offset: int = CHECKSUM_OFFSET) -> bool:
    if len(data) < checksum_offset + CHECKSUM_LENGTH:
        return False
    scratch = bytearray(data)
    recompute_checksum(scratch, checksum_offset)
    return stored_checksum(scratch, checksum_offset) == stored_checksum(data, checksum_offset)


def apply_policy(buffer: bytearray, policy: PatchPolicy) -> bytearray:
    """Apply ``policy`` to ``buffer`` in place and refresh its checksum.

    Raises :class:`UnrecognizedFormatError` before touching the buffer when
    it is not a supported save. Returns the same buffer for chaining.
    """
    if not isinstance(buffer, bytearray):
        raise TypeError(f"expected a bytearray, got {type(buffer).__name__}")
    if not is_valid_save(buffer):
        raise UnrecognizedFormatError("not a recognized D2R save file")

    policy.apply(buffer)
    recompute_checksum(buffer, CHECKSUM_OFFSET)
    logger.debug("applied %s profile (%d edits)", policy.name, len(policy.edits))
    return buffer


def unlock(data: BytesLike, policy: PatchPolicy) -> bytes:
    """Copying counterpart of :func:`apply_policy` for immutable input."""
    buffer = bytearray(data)
    apply_policy(buffer, policy)
    return bytes(buffer)


def complete_all_act2(buffer: bytearray) -> bytearray:
    return apply_policy(
        buffer,
        PatchPolicy(name="complete-act2", edits=complete_all_act2_edits()),
    )


# ---------------------------------------------------------------------------
# Read-back helpers
# ---------------------------------------------------------------------------

def difficulty_unlocked(data: BytesLike) -> bool:
    return bool(data[CHARACTER_PROGRESSION_OFFSET] & GAME_COMPLETED_ON_NORMAL)


def waypoint_unlocked(data: BytesLike, difficulty: Difficulty) -> bool:
    return bool(data[waypoint_offset(difficulty)] & WAYPOINTS_A3WP1_ENABLED)


def quest_completed(data: BytesLike, difficulty: Difficulty, act: Act, quest: Quest) -> bool:
    offset = QUESTS_SECTION_OFFSET + quest_offset(difficulty, act, quest)
    return bool(data[offset] & QUEST_COMPLETE)
