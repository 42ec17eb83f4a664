"""Unlock profiles for Diablo II: Resurrected character saves.

A profile is a :class:`PatchPolicy`: an ordered tuple of :class:`PatchEdit`
values, each one either OR-ing a bitmask into a byte or writing a literal
byte. Offsets are computed from the difficulty/act/quest ordinals below, so
the order of the enum members matters.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, Tuple


GAME_COMPLETED_ON_NORMAL = 0x08
CHARACTER_PROGRESSION_OFFSET = 0x25

QUESTS_SECTION_OFFSET = 0x014F
QUESTS_HEADER_LENGTH = 10
QUEST_DATA_OFFSET = QUESTS_SECTION_OFFSET + QUESTS_HEADER_LENGTH  # 345
QUEST_COMPLETE = 0x01
QUEST_LOG_VIEWED = 0x10
QUEST_REWARD_PENDING = 0xC0
NEXT_ACT_ENABLED = 0x01

WAYPOINTS_A3WP1_ENABLED = 0x04
WAYPOINTS_SECTION_OFFSET = 0x0279
WAYPOINTS_DATA_OFFSET = 0x08
WAYPOINTS_DIFFICULTY_OFFSET = 0x18
WAYPOINTS_A3WP1_BYTE = 4


class Difficulty(IntEnum):
    NORMAL = 0
    NIGHTMARE = 1
    HELL = 2


class Act(IntEnum):
    THE_SIGHTLESS_EYE = 0
    SECRET_OF_THE_VIZJEREI = 1
    THE_INFERNAL_GATE = 2
    THE_HARROWING = 3
    LORD_OF_DESTRUCTION = 4


class Quest(IntEnum):
    FIRST = 0
    SECOND = 1
    THIRD = 2
    FOURTH = 3
    FIFTH = 4
    SIXTH = 5


class EditMode(Enum):
    OR = "or"
    SET = "set"


class SaveFixError(Exception):
    """Base class for errors raised while patching a save."""


class BufferTooShortError(SaveFixError, IndexError):
    """An edit points past the end of the buffer it is applied to."""


@dataclass(frozen=True)
class PatchEdit:
    offset: int
    value: int
    mode: EditMode = EditMode.OR

    def apply(self, buffer: bytearray) -> None:
        if self.offset >= len(buffer):
            raise BufferTooShortError(
                f"edit at 0x{self.offset:04X} is outside a {len(buffer)} byte buffer"
            )
        if self.mode is EditMode.OR:
            buffer[self.offset] |= self.value
        else:
            buffer[self.offset] = self.value


@dataclass(frozen=True)
class PatchPolicy:
    name: str
    edits: Tuple[PatchEdit, ...]
    description: str = ""

    def extended(self, edits: Iterable[PatchEdit], name: str | None = None) -> "PatchPolicy":
        """Return a copy of this policy with ``edits`` appended."""
        return PatchPolicy(
            name=name or self.name,
            edits=self.edits + tuple(edits),
            description=self.description,
        )

    def apply(self, buffer: bytearray) -> None:
        for edit in self.edits:
            edit.apply(buffer)


# ---------------------------------------------------------------------------
# Quests
# ---------------------------------------------------------------------------

def quest_offset(difficulty: Difficulty, act: Act, quest: Quest) -> int:
    """Offset of a quest's two status bytes relative to the quest section."""
    if act == Act.THE_HARROWING and quest >= Quest.FOURTH:
        raise ValueError(f"Act IV has no {Quest(quest).name.lower()} quest")

    offset = 12                         # 10 byte section header, 2 byte act introduction
    offset += int(difficulty) * 96
    offset += int(act) * 16
    offset += int(quest) * 2
    if act == Act.LORD_OF_DESTRUCTION:
        offset += 4                     # Act IV block carries four extra bytes
    return offset


def _is_last_quest(act: Act, quest: Quest) -> bool:
    # Diablo is the second quest of Act IV
    if act == Act.THE_HARROWING:
        return quest == Quest.SECOND
    return quest == Quest.SIXTH


def change_quest_edits(
    difficulty: Difficulty, act: Act, quest: Quest, complete: bool = True
) -> Tuple[PatchEdit, ...]:
    offset = QUESTS_SECTION_OFFSET + quest_offset(difficulty, act, quest)

    if not complete:
        return (
            PatchEdit(offset, 0, EditMode.SET),
            PatchEdit(offset + 1, 0, EditMode.SET),
        )

    status = QUEST_COMPLETE
    if act == Act.LORD_OF_DESTRUCTION and quest == Quest.THIRD:
        # scroll of resistance reward
        status += QUEST_REWARD_PENDING
    edits = [
        PatchEdit(offset, status, EditMode.SET),
        PatchEdit(offset + 1, QUEST_LOG_VIEWED, EditMode.SET),
    ]

    if _is_last_quest(act, quest):
        travel = offset + 4 if act == Act.THE_HARROWING else offset + 2
        edits.append(PatchEdit(travel, NEXT_ACT_ENABLED, EditMode.SET))
    return tuple(edits)


def allow_travel_to_next_act_edits(difficulty: Difficulty, act: Act) -> Tuple[PatchEdit, ...]:
    last = Quest.SECOND if act == Act.THE_HARROWING else Quest.SIXTH
    return change_quest_edits(difficulty, act, last, complete=True)


def complete_act2_edits(difficulty: Difficulty) -> Tuple[PatchEdit, ...]:
    return allow_travel_to_next_act_edits(difficulty, Act.SECRET_OF_THE_VIZJEREI)


def complete_all_act2_edits() -> Tuple[PatchEdit, ...]:
    edits: Tuple[PatchEdit, ...] = ()
    for difficulty in Difficulty:
        edits += complete_act2_edits(difficulty)
    return edits


# ---------------------------------------------------------------------------
# Waypoints
# ---------------------------------------------------------------------------

def waypoint_offset(difficulty: Difficulty) -> int:
    """Byte holding the first Act III waypoint (Kurast Docks) flag."""
    return (
        WAYPOINTS_SECTION_OFFSET
        + WAYPOINTS_DATA_OFFSET
        + int(difficulty) * WAYPOINTS_DIFFICULTY_OFFSET
        + WAYPOINTS_A3WP1_BYTE
    )


def waypoint_edits() -> Tuple[PatchEdit, ...]:
    return tuple(
        PatchEdit(waypoint_offset(difficulty), WAYPOINTS_A3WP1_ENABLED)
        for difficulty in Difficulty
    )


# ---------------------------------------------------------------------------
# Quest completion table
# ---------------------------------------------------------------------------

# OR masks for the quest data starting at QUEST_DATA_OFFSET. Each act block
# is: introduction word, six quest words (complete | log viewed), travel word.
# Act IV only has three quests and Act V sits four bytes further on.
QUEST_TABLE: Tuple[int, ...] = (
    # Normal
    0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x00,  # Act I
    0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x00,  # Act II
    0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x00,  # Act III
    0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00,  # Act IV
    0x00, 0x00, 0x00, 0x00, 0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10,  # Act V
    0x01, 0x10, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00,
    # Nightmare
    0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x00,  # Act I
    0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x00,  # Act II
    0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x00,  # Act III
    0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00,  # Act IV
    0x00, 0x00, 0x00, 0x00, 0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10,  # Act V
    0x01, 0x10, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00,
    # Hell, up to the Act IV travel flag
    0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x00,  # Act I
    0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x00,  # Act II
    0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01, 0x00,  # Act III
    0x01, 0x00, 0x01, 0x10, 0x01, 0x10, 0x01, 0x10, 0x01,                                            # Act IV
)


def quest_table_edits(table: Tuple[int, ...] = QUEST_TABLE) -> Tuple[PatchEdit, ...]:
    return tuple(
        PatchEdit(QUEST_DATA_OFFSET + index, mask)
        for index, mask in enumerate(table)
        if mask
    )


def difficulty_unlock_edits() -> Tuple[PatchEdit, ...]:
    return (PatchEdit(CHARACTER_PROGRESSION_OFFSET, GAME_COMPLETED_ON_NORMAL),)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

MINIMAL_UNLOCK = PatchPolicy(
    name="minimal",
    edits=difficulty_unlock_edits() + waypoint_edits(),
    description="Mark Normal as completed and open the first Act III waypoint on every difficulty.",
)

FULL_UNLOCK = PatchPolicy(
    name="full",
    edits=difficulty_unlock_edits() + quest_table_edits() + waypoint_edits(),
    description="Unlock every difficulty, complete the quest table and open the first Act III waypoint.",
)

POLICIES = {
    MINIMAL_UNLOCK.name: MINIMAL_UNLOCK,
    FULL_UNLOCK.name: FULL_UNLOCK,
}


def get_policy(name: str, complete_act2: bool = False) -> PatchPolicy:
    try:
        policy = POLICIES[name]
    except KeyError:
        raise ValueError(f"unknown profile {name!r}, expected one of {sorted(POLICIES)}") from None
    if complete_act2:
        policy = policy.extended(complete_all_act2_edits(), name=f"{policy.name}+act2")
    return policy
