"""
Input Module

Provides keyboard mapping and session controls for termpiano.
"""

from .keyboard_input import (
    KeyboardMapper,
    SessionState,
    KeyAction,
    KeyboardInputHandler,
)

__all__ = [
    'KeyboardMapper',
    'SessionState',
    'KeyAction',
    'KeyboardInputHandler',
]
