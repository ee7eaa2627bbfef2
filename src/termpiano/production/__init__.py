"""
termpiano Production Module

Ambient support shared by every layer:
- Error taxonomy with user-facing messages and suggested fixes
- Configuration validation before the terminal and audio start
- Colored console and rotating file logging
"""

from .error_handler import (
    ProductionErrorHandler,
    ErrorContext,
    ErrorKind,
    ErrorSeverity,
    TermPianoError,
    ConfigError,
    BackendUnavailableError,
)
from .logging import setup_logging, console_muted

__all__ = [
    'ProductionErrorHandler',
    'ErrorContext',
    'ErrorKind',
    'ErrorSeverity',
    'TermPianoError',
    'ConfigError',
    'BackendUnavailableError',
    'setup_logging',
    'console_muted',
]
