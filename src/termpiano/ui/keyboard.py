"""
Keyboard Diagram and Highlights
================================
Draws the 52-key piano diagram and flashes the key that was just played.

    |██|██|██|██| ...      white keys: rows 0-15, one every 3 columns
       █     █  █          black keys: rows 0-8, on the white-key borders

A highlight paints ▒▒ (white key, row 15) or ▒ (black key, row 8) in the
highlight color, then a detached timer puts the diagram glyph back.
"""

import logging
import threading
from typing import Tuple

from ..production.error_handler import ConfigError
from ..timers import run_after

log = logging.getLogger(__name__)

COLOR_NAMES = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")

WHITE_KEY_COUNT = 52
WHITE_KEY_ROWS = 16
BLACK_KEY_ROWS = 9
BLACK_KEY_GROUPS = 7
DIAGRAM_WIDTH = WHITE_KEY_COUNT * 3 + 1

WHITE_MARK_ROW = WHITE_KEY_ROWS - 1
BLACK_MARK_ROW = BLACK_KEY_ROWS - 1
STATUS_ROW = WHITE_KEY_ROWS + 1
SURFACE_HEIGHT = STATUS_ROW + 1

# (glyph, fg, bg)
BORDER = ("|", "black", "white")
WHITE_KEY = ("██", "white", "black")
BLACK_KEY = ("█", "black", "white")
WHITE_MARK = "▒▒"
BLACK_MARK = "▒"


def validate_color(color: str) -> str:
    if color not in COLOR_NAMES:
        raise ConfigError(
            f"Unknown highlight color '{color}'",
            {'color': color, 'valid': ", ".join(COLOR_NAMES)},
        )
    return color


def black_key_columns():
    """Columns of every black key on the diagram"""
    columns = [3]  # the lone a#-1
    for group in range(BLACK_KEY_GROUPS):
        first = group * 21 + 9
        columns.extend([first, first + 3, first + 9, first + 12, first + 15])
    return columns


def draw_white_keys(surface):
    for row in range(WHITE_KEY_ROWS):
        surface.paint(DIAGRAM_WIDTH - 1, row, *BORDER)
        for x in range(WHITE_KEY_COUNT):
            surface.paint(x * 3, row, *BORDER)
            surface.paint(x * 3 + 1, row, *WHITE_KEY)


def draw_black_keys(surface):
    columns = black_key_columns()
    for row in range(BLACK_KEY_ROWS):
        for col in columns:
            surface.paint(col, row, *BLACK_KEY)


def draw_keyboard(surface):
    """Paint the whole diagram in one frame"""
    with surface.frame():
        draw_white_keys(surface)
        draw_black_keys(surface)


def draw_status(surface, octave_offset: int, note_duration: int):
    note = f"{note_duration}ms" if note_duration else "full"
    line = (f" octave {octave_offset}  note {note:<6}"
            f"  [←/→] octave  [↑/↓] note length  [esc] quit")
    with surface.frame():
        surface.paint(0, STATUS_ROW, line.ljust(DIAGRAM_WIDTH), "white", "black")


def mark_cell(white: bool) -> Tuple[int, str]:
    """Row and highlight glyph for a key's mark cell"""
    if white:
        return WHITE_MARK_ROW, WHITE_MARK
    return BLACK_MARK_ROW, BLACK_MARK


def base_glyph(white: bool) -> Tuple[str, str, str]:
    return WHITE_KEY if white else BLACK_KEY


class HighlightEngine:
    """
    Timed key highlights on a shared surface.

    Flashes on the same cell are independent: each schedules its own revert,
    so an earlier revert can clear a later, still-running highlight.
    """

    def __init__(self, surface, color: str = "red", duration_ms: int = 500):
        self.surface = surface
        self.color = validate_color(color)
        self.duration_ms = duration_ms

    def flash(self, position: int, white: bool, color_name: str = None,
              duration_ms: int = None) -> threading.Thread:
        """
        Paint a key's mark now and schedule its revert.

        color_name must be one of COLOR_NAMES; the engine's own color, checked
        when the engine was built, is used when it is omitted.
        """
        color = color_name or self.color
        duration = self.duration_ms if duration_ms is None else duration_ms
        row, glyph = mark_cell(white)

        with self.surface.frame():
            self.surface.paint(position, row, glyph, color, "white")

        return run_after(duration, lambda: self._revert(position, white),
                         name=f"revert-{position}")

    def _revert(self, position: int, white: bool):
        row, _ = mark_cell(white)
        with self.surface.frame():
            self.surface.paint(position, row, *base_glyph(white))
