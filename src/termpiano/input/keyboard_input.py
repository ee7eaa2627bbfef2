"""
Keyboard Input Module

Handles QWERTY keyboard mapping, session parameters and key event processing.
"""

import curses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from ..notes import Note, POSITION_MIN, is_white

log = logging.getLogger(__name__)

Key = Union[str, int]

# Octave offset the diagram columns are laid out for
DEFAULT_OCTAVE_OFFSET = 2

OCTAVE_OFFSET_MIN = 0
OCTAVE_OFFSET_MAX = 5
NOTE_DURATION_MIN = 0
NOTE_DURATION_MAX = 8000
NOTE_DURATION_STEP = 50

WHITE_KEY_SPACING = 3
OCTAVE_SPACING = 21
BLACK_KEY_OFFSETS: Dict[str, int] = {"cs": 9, "ds": 12, "fs": 18, "gs": 21, "as": 24}

ESCAPE = 27


def white_key_index(sound: str, sequence: int) -> int:
    """Index of a natural on the diagram, counting white keys from a-1"""
    letter = sound[0]
    # Octave numbers change at c, so a and b sit in the next a-based group
    group = sequence + 1 if letter in ("a", "b") else sequence
    return group * 7 + "abcdefg".index(letter)


def column_for(sound: str, sequence: int) -> int:
    """Diagram column of a note's highlight cell"""
    if is_white(sound):
        return white_key_index(sound, sequence) * WHITE_KEY_SPACING + 1
    return BLACK_KEY_OFFSETS[sound] + OCTAVE_SPACING * sequence


class KeyboardMapper:
    """
    Maps QWERTY keyboard to piano notes.

    Layout (two rows of keys like a piano):

        upper:   2     4  5     7  8  9     -  =
               q  w  e  r  t  y  u  i  o  p  [  ]
               A  B  C  D  E  F  G  A  B  C  D  E

        lower:   s     f  g     j  k  l
               z  x  c  v  b  n  m  ,  .  /
               A  B  C  D  E  F  G  A  B  C      (one octave down)
    """

    # key -> (sound class, octave bias)
    NOTE_MAP: Dict[str, Tuple[str, int]] = {
        # Lower row
        'z': ("a", -1), 'x': ("b", -1), 'c': ("c", 0), 'v': ("d", 0),
        'b': ("e", 0), 'n': ("f", 0), 'm': ("g", 0), ',': ("a", 0),
        '.': ("b", 0), '/': ("c", 1),
        's': ("as", -1), 'f': ("cs", 0), 'g': ("ds", 0), 'j': ("fs", 0),
        'k': ("gs", 0), 'l': ("as", 0),
        # Upper row
        'q': ("a", 0), 'w': ("b", 0), 'e': ("c", 1), 'r': ("d", 1),
        't': ("e", 1), 'y': ("f", 1), 'u': ("g", 1), 'i': ("a", 1),
        'o': ("b", 1), 'p': ("c", 2), '[': ("d", 2), ']': ("e", 2),
        '2': ("as", 0), '4': ("cs", 1), '5': ("ds", 1), '7': ("fs", 1),
        '8': ("gs", 1), '9': ("as", 1), '-': ("cs", 2), '=': ("ds", 2),
    }

    # Columns never move with the octave offset
    POSITIONS: Dict[str, int] = {
        key: column_for(sound, bias + DEFAULT_OCTAVE_OFFSET)
        for key, (sound, bias) in NOTE_MAP.items()
    }

    @classmethod
    def resolve(cls, key: Key, octave_offset: int) -> Note:
        """
        Resolve a key press to a Note.

        Total over every input: keys without a piano assignment come back
        with a position outside the playable span.
        """
        char = cls.key_char(key)
        if char not in cls.NOTE_MAP:
            return Note(sound="", sequence=octave_offset, position=POSITION_MIN, white=False)

        sound, bias = cls.NOTE_MAP[char]
        return Note(
            sound=sound,
            sequence=bias + octave_offset,
            position=cls.POSITIONS[char],
            white=is_white(sound),
        )

    @classmethod
    def get_note(cls, key: Key, octave_offset: int) -> Optional[Note]:
        note = cls.resolve(key, octave_offset)
        return note if note.playable else None

    @staticmethod
    def key_char(key: Key) -> Optional[str]:
        if isinstance(key, str):
            return key if len(key) == 1 else None
        if 0 <= key < 256:
            return chr(key)
        return None


@dataclass
class SessionState:
    """Session parameters read on every key event"""
    octave_offset: int = DEFAULT_OCTAVE_OFFSET
    note_duration: int = 0
    highlight_duration: int = 500

    def octave_up(self):
        self.octave_offset = min(OCTAVE_OFFSET_MAX, self.octave_offset + 1)

    def octave_down(self):
        self.octave_offset = max(OCTAVE_OFFSET_MIN, self.octave_offset - 1)

    def duration_up(self):
        self.note_duration = min(NOTE_DURATION_MAX, self.note_duration + NOTE_DURATION_STEP)

    def duration_down(self):
        self.note_duration = max(NOTE_DURATION_MIN, self.note_duration - NOTE_DURATION_STEP)


class KeyAction(Enum):
    NOTE = "note"
    CONTROL = "control"
    EXIT = "exit"
    IGNORED = "ignored"


class KeyboardInputHandler:
    """Main keyboard input handler"""

    CTRL_OCTAVE_UP = curses.KEY_RIGHT
    CTRL_OCTAVE_DOWN = curses.KEY_LEFT
    CTRL_DURATION_UP = curses.KEY_UP
    CTRL_DURATION_DOWN = curses.KEY_DOWN
    CTRL_EXIT = ESCAPE

    def __init__(self, session: SessionState):
        self.session = session
        self.mapper = KeyboardMapper()
        self._controls = {
            self.CTRL_OCTAVE_UP: session.octave_up,
            self.CTRL_OCTAVE_DOWN: session.octave_down,
            self.CTRL_DURATION_UP: session.duration_up,
            self.CTRL_DURATION_DOWN: session.duration_down,
        }

    def handle_key(self, key: Key) -> Tuple[KeyAction, Optional[Note]]:
        """
        Handle a key press

        Returns:
            Tuple of (action, note); note is set only for KeyAction.NOTE
        """
        note = self.mapper.get_note(key, self.session.octave_offset)
        if note is not None:
            log.debug(f"Key press: {key!r} -> {note}")
            return KeyAction.NOTE, note

        if key == self.CTRL_EXIT or key == '\x1b':
            return KeyAction.EXIT, None

        control = self._controls.get(key)
        if control is not None:
            control()
            log.debug(f"Octave {self.session.octave_offset}, "
                      f"note duration {self.session.note_duration}ms")
            return KeyAction.CONTROL, None

        return KeyAction.IGNORED, None
