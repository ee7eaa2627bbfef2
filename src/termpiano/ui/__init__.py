"""
Terminal UI Module

Provides the shared terminal surface, keyboard diagram and key highlights.
"""

from .surface import TerminalSurface, CursesSurface, Cell
from .keyboard import HighlightEngine, draw_keyboard, draw_status, COLOR_NAMES

__all__ = [
    'TerminalSurface',
    'CursesSurface',
    'Cell',
    'HighlightEngine',
    'draw_keyboard',
    'draw_status',
    'COLOR_NAMES',
]
