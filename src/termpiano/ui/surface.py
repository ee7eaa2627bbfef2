"""
Terminal Surface
================
The one rendering target shared by the input loop and the highlight timers.

Every paint happens inside `frame()`, which holds the surface lock for a
single paint-and-present and never longer. Callers must not sleep inside a
frame.
"""

import curses
import locale
import logging
import os
import select
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..production.error_handler import BackendUnavailableError

log = logging.getLogger(__name__)

CURSES_COLORS: Dict[str, int] = {
    "black": curses.COLOR_BLACK,
    "red": curses.COLOR_RED,
    "green": curses.COLOR_GREEN,
    "yellow": curses.COLOR_YELLOW,
    "blue": curses.COLOR_BLUE,
    "magenta": curses.COLOR_MAGENTA,
    "cyan": curses.COLOR_CYAN,
    "white": curses.COLOR_WHITE,
}

ESCAPE_DELAY_MS = 25


@dataclass(frozen=True)
class Cell:
    glyph: str
    fg: str
    bg: str


class TerminalSurface:
    """Character grid addressed by (column, row), kept in memory"""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.frames_presented = 0
        self._cells: Dict[Tuple[int, int], Cell] = {}
        self._lock = threading.RLock()

    @contextmanager
    def frame(self):
        """Exclusive access for one paint-and-present"""
        with self._lock:
            yield self
            self._present()

    def paint(self, col: int, row: int, text: str, fg: str, bg: str):
        """Paint one cell per character of text; call inside frame()"""
        for offset, glyph in enumerate(text):
            x = col + offset
            if not self.in_bounds(x, row):
                continue
            self._cells[(x, row)] = Cell(glyph, fg, bg)
            self._draw(x, row, glyph, fg, bg)

    def cell(self, col: int, row: int) -> Optional[Cell]:
        with self._lock:
            return self._cells.get((col, row))

    def text(self, col: int, row: int, length: int) -> str:
        with self._lock:
            return "".join(
                self._cells[(x, row)].glyph if (x, row) in self._cells else " "
                for x in range(col, col + length)
            )

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def _draw(self, col: int, row: int, glyph: str, fg: str, bg: str):
        pass

    def _present(self):
        self.frames_presented += 1


class CursesSurface(TerminalSurface):
    """TerminalSurface mirrored onto a curses screen"""

    def __init__(self):
        super().__init__(0, 0)
        self._screen = None
        self._pairs: Dict[Tuple[str, str], int] = {}
        self._input = sys.stdin

    def start(self):
        """Take over the terminal; raises BackendUnavailableError on failure"""
        locale.setlocale(locale.LC_ALL, '')
        os.environ.setdefault('ESCDELAY', str(ESCAPE_DELAY_MS))
        try:
            self._screen = curses.initscr()
            curses.noecho()
            curses.cbreak()
            self._screen.keypad(True)
            self._screen.nodelay(True)
            curses.start_color()
        except curses.error as e:
            self._screen = None
            raise BackendUnavailableError('terminal', str(e), {'TERM': os.environ.get('TERM')}) from e

        try:
            curses.curs_set(0)
        except curses.error:
            log.debug("Terminal cannot hide the cursor")

        self.height, self.width = self._screen.getmaxyx()
        log.info(f"Terminal ready: {self.width}x{self.height}")

    def stop(self):
        if self._screen is None:
            return
        with self._lock:
            self._screen.keypad(False)
            curses.nocbreak()
            curses.echo()
            curses.endwin()
            self._screen = None

    def read_key(self) -> int:
        """Block until the next key press and return its curses key code"""
        while True:
            with self._lock:
                key = self._screen.getch()
            if key != -1:
                return key
            select.select([self._input], [], [])

    def resize(self):
        """Pick up a new terminal size and repaint every known cell"""
        with self.frame():
            curses.update_lines_cols()
            self.height, self.width = self._screen.getmaxyx()
            self._screen.erase()
            for (col, row), cell in self._cells.items():
                if self.in_bounds(col, row):
                    self._draw(col, row, cell.glyph, cell.fg, cell.bg)
        log.debug(f"Terminal resized to {self.width}x{self.height}")

    def in_bounds(self, col: int, row: int) -> bool:
        # curses refuses the bottom-right cell
        if col == self.width - 1 and row == self.height - 1:
            return False
        return super().in_bounds(col, row)

    def _pair(self, fg: str, bg: str) -> int:
        key = (fg, bg)
        if key not in self._pairs:
            number = len(self._pairs) + 1
            curses.init_pair(number, CURSES_COLORS[fg], CURSES_COLORS[bg])
            self._pairs[key] = number
        return curses.color_pair(self._pairs[key])

    # After stop() the grid still updates but nothing reaches the terminal

    def _draw(self, col: int, row: int, glyph: str, fg: str, bg: str):
        if self._screen is None:
            return
        self._screen.addstr(row, col, glyph, self._pair(fg, bg) | curses.A_BOLD)

    def _present(self):
        if self._screen is None:
            return
        self._screen.refresh()
        super()._present()
