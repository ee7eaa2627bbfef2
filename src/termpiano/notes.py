"""
Note Model
==========
Resolved note descriptor and the keyboard constants shared by the input,
audio and display layers.
"""

from dataclasses import dataclass
from typing import Tuple

# Chromatic sound classes, in sample catalog order
SOUNDS: Tuple[str, ...] = ("a", "as", "b", "c", "cs", "d", "ds", "e", "f", "fs", "g", "gs")
WHITE_SOUNDS = frozenset({"a", "b", "c", "d", "e", "f", "g"})

# Octave sequences the sample store scans
SEQUENCE_MIN = -1
SEQUENCE_MAX = 7

# Playable columns lie strictly between these bounds
POSITION_MIN = 0
POSITION_MAX = 155


@dataclass(frozen=True)
class Note:
    """A key press resolved to a sound, octave and diagram column"""
    sound: str
    sequence: int
    position: int
    white: bool

    @property
    def playable(self) -> bool:
        return POSITION_MIN < self.position < POSITION_MAX

    @property
    def sample_name(self) -> str:
        return f"{self.sound}{self.sequence}"

    def __str__(self) -> str:
        return f"{self.sound.upper().replace('S', '#')}{self.sequence}"


def is_white(sound: str) -> bool:
    return sound in WHITE_SOUNDS
