"""
termpiano - Play piano in the terminal using the PC keyboard
============================================================

Key presses resolve to notes, play piano samples through pygame.mixer and
flash the played key on an ASCII keyboard diagram drawn with curses.

Main entry point: app.py
Configuration: config.py
Terminal UI: ui/
"""

__version__ = "0.1.0"
__description__ = "Play piano in the terminal using PC keyboard"

from .notes import Note
from .input.keyboard_input import KeyboardMapper, SessionState
from .samples.manager import SampleStore
from .engine.playback import PlaybackController
from .ui.keyboard import HighlightEngine
from .config import PianoConfig, load_config, save_config, create_default_config
from .app import TermPiano, main

__all__ = [
    'Note',
    'KeyboardMapper',
    'SessionState',
    'SampleStore',
    'PlaybackController',
    'HighlightEngine',
    'PianoConfig',
    'load_config',
    'save_config',
    'create_default_config',
    'TermPiano',
    'main',
]
