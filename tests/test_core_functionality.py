"""
Unit tests for termpiano core functionality

Uses unittest framework for compatibility.
"""

import curses
import unittest

# Add src to path
import sys
from os.path import dirname, join
sys.path.insert(0, join(dirname(dirname(__file__)), 'src'))

from termpiano.notes import Note, POSITION_MIN, POSITION_MAX
from termpiano.input.keyboard_input import (
    KeyboardMapper, SessionState, KeyAction, KeyboardInputHandler,
    OCTAVE_OFFSET_MIN, OCTAVE_OFFSET_MAX, NOTE_DURATION_MAX, NOTE_DURATION_STEP,
    white_key_index, column_for,
)
from termpiano.ui.keyboard import black_key_columns

OFFSETS = range(OCTAVE_OFFSET_MIN, OCTAVE_OFFSET_MAX + 1)
UNMAPPED_KEYS = ['a', 'd', 'h', ';', '1', '3', '6', '0', ' ', 'Q', 'Z', '\n',
                 curses.KEY_F1, curses.KEY_HOME, -1, 300]


class TestNote(unittest.TestCase):
    """Test the Note value type"""

    def test_note_is_immutable(self):
        note = Note("a", 2, 64, True)
        with self.assertRaises(AttributeError):
            note.position = 10

    def test_playable_bounds_are_exclusive(self):
        self.assertFalse(Note("a", 0, POSITION_MIN, True).playable)
        self.assertFalse(Note("a", 0, POSITION_MAX, True).playable)
        self.assertTrue(Note("a", 0, 1, True).playable)
        self.assertTrue(Note("a", 0, POSITION_MAX - 1, True).playable)

    def test_note_names(self):
        self.assertEqual(Note("cs", 4, 72, False).sample_name, "cs4")
        self.assertEqual(str(Note("cs", 4, 72, False)), "C#4")
        self.assertEqual(str(Note("a", -1, 1, True)), "A-1")


class TestKeyboardMapper(unittest.TestCase):
    """Test key to note resolution"""

    def test_q_at_octave_two(self):
        """q with offset 2 is a2 at column 64"""
        note = KeyboardMapper.resolve('q', 2)
        self.assertEqual(note, Note(sound="a", sequence=2, position=64, white=True))

    def test_curses_key_codes_resolve_like_characters(self):
        self.assertEqual(KeyboardMapper.resolve(ord('q'), 2), KeyboardMapper.resolve('q', 2))

    def test_position_and_color_ignore_octave_offset(self):
        for key in KeyboardMapper.NOTE_MAP:
            notes = [KeyboardMapper.resolve(key, offset) for offset in OFFSETS]
            self.assertEqual(len({n.position for n in notes}), 1, key)
            self.assertEqual(len({n.white for n in notes}), 1, key)
            self.assertEqual(len({n.sound for n in notes}), 1, key)

    def test_sequence_follows_octave_offset(self):
        for key, (_, bias) in KeyboardMapper.NOTE_MAP.items():
            for offset in OFFSETS:
                self.assertEqual(KeyboardMapper.resolve(key, offset).sequence, bias + offset)

    def test_mapped_keys_are_playable(self):
        for key in KeyboardMapper.NOTE_MAP:
            for offset in OFFSETS:
                self.assertTrue(KeyboardMapper.resolve(key, offset).playable, key)

    def test_unmapped_keys_are_not_playable(self):
        for key in UNMAPPED_KEYS:
            for offset in OFFSETS:
                note = KeyboardMapper.resolve(key, offset)
                self.assertFalse(POSITION_MIN < note.position < POSITION_MAX, key)
                self.assertIsNone(KeyboardMapper.get_note(key, offset))

    def test_resolve_is_deterministic(self):
        for key in list(KeyboardMapper.NOTE_MAP) + UNMAPPED_KEYS:
            self.assertEqual(KeyboardMapper.resolve(key, 3), KeyboardMapper.resolve(key, 3))

    def test_white_keys_land_on_white_key_cells(self):
        for key, (sound, _) in KeyboardMapper.NOTE_MAP.items():
            note = KeyboardMapper.resolve(key, 2)
            if note.white:
                self.assertEqual(note.position % 3, 1, key)
            else:
                self.assertIn(note.position, black_key_columns(), key)

    def test_white_flag_follows_sound_class(self):
        self.assertTrue(KeyboardMapper.resolve('c', 2).white)
        self.assertFalse(KeyboardMapper.resolve('f', 2).white)
        self.assertEqual(KeyboardMapper.resolve('f', 2).sound, "cs")

    def test_black_keys_sit_between_their_neighbours(self):
        """c#2 is drawn on the border between c2 and d2"""
        c = KeyboardMapper.resolve('c', 2).position
        cs = KeyboardMapper.resolve('f', 2).position
        d = KeyboardMapper.resolve('v', 2).position
        self.assertEqual(cs, c + 2)
        self.assertEqual(d, cs + 1)

    def test_duplicate_notes_share_a_column(self):
        """, and q both play a, so both mark the same key"""
        self.assertEqual(KeyboardMapper.resolve(',', 4), KeyboardMapper.resolve('q', 4))


class TestDiagramColumns(unittest.TestCase):
    """Test pitch to column arithmetic"""

    def test_white_key_index_changes_octave_at_c(self):
        self.assertEqual(white_key_index("a", -1), 0)
        self.assertEqual(white_key_index("b", -1), 1)
        self.assertEqual(white_key_index("c", 0), 2)
        self.assertEqual(white_key_index("a", 0), 7)

    def test_lowest_keys(self):
        self.assertEqual(column_for("a", -1), 1)
        self.assertEqual(column_for("as", -1), 3)
        self.assertEqual(column_for("c", 7), 154)


class TestSessionState(unittest.TestCase):
    """Test octave and duration controls"""

    def test_defaults(self):
        session = SessionState()
        self.assertEqual(session.octave_offset, 2)
        self.assertEqual(session.note_duration, 0)
        self.assertEqual(session.highlight_duration, 500)

    def test_octave_is_clamped(self):
        session = SessionState(octave_offset=0)
        session.octave_down()
        self.assertEqual(session.octave_offset, 0)
        for _ in range(10):
            session.octave_up()
            self.assertLessEqual(session.octave_offset, OCTAVE_OFFSET_MAX)
        self.assertEqual(session.octave_offset, OCTAVE_OFFSET_MAX)

    def test_duration_moves_in_steps(self):
        session = SessionState()
        previous = session.note_duration
        for _ in range(200):
            session.duration_up()
            self.assertIn(session.note_duration - previous, (0, NOTE_DURATION_STEP))
            previous = session.note_duration
        self.assertEqual(session.note_duration, NOTE_DURATION_MAX)

        for _ in range(200):
            session.duration_down()
            self.assertGreaterEqual(session.note_duration, 0)
        self.assertEqual(session.note_duration, 0)


class TestKeyboardInputHandler(unittest.TestCase):
    """Test key dispatch"""

    def setUp(self):
        self.session = SessionState()
        self.handler = KeyboardInputHandler(self.session)

    def test_piano_key(self):
        action, note = self.handler.handle_key(ord('q'))
        self.assertEqual(action, KeyAction.NOTE)
        self.assertEqual(note.sound, "a")

    def test_note_uses_current_octave(self):
        self.handler.handle_key(curses.KEY_RIGHT)
        _, note = self.handler.handle_key(ord('q'))
        self.assertEqual(note.sequence, 3)
        self.assertEqual(note.position, 64)

    def test_controls(self):
        self.assertEqual(self.handler.handle_key(curses.KEY_LEFT), (KeyAction.CONTROL, None))
        self.assertEqual(self.session.octave_offset, 1)
        self.handler.handle_key(curses.KEY_UP)
        self.assertEqual(self.session.note_duration, 50)
        self.handler.handle_key(curses.KEY_DOWN)
        self.assertEqual(self.session.note_duration, 0)

    def test_escape_exits(self):
        self.assertEqual(self.handler.handle_key(27), (KeyAction.EXIT, None))

    def test_other_keys_ignored(self):
        for key in UNMAPPED_KEYS:
            self.assertEqual(self.handler.handle_key(key), (KeyAction.IGNORED, None))
        self.assertEqual(self.session, SessionState())


if __name__ == '__main__':
    unittest.main()
