"""
Production Error Handler

Centralized error classification for termpiano.
Provides user-friendly error messages with actionable solutions.

Failures fall into three kinds: a missing sample (tolerated), an input or
configured value outside the recognized set (ignored for keys, fatal for
configuration), and an audio or terminal backend that cannot start (fatal).
Nothing here retries.
"""

import time
import logging
import traceback
from typing import Dict, Optional, Any, List, Tuple
from dataclasses import dataclass, field
from enum import Enum

log = logging.getLogger(__name__)


class TermPianoError(Exception):
    """Base class for errors that stop termpiano"""

    context = "startup"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigError(TermPianoError):
    """A configured value is outside its recognized set"""

    context = "config"


class BackendUnavailableError(TermPianoError):
    """The audio output or the terminal could not be initialized"""

    def __init__(self, context: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.context = context


class ErrorKind(Enum):
    """Error taxonomy"""
    MISSING_RESOURCE = "missing_resource"
    OUT_OF_RANGE = "out_of_range"
    BACKEND_UNAVAILABLE = "backend_unavailable"


class ErrorSeverity(Enum):
    """Error severity levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Contexts and how they are classified
CONTEXT_KINDS: Dict[str, ErrorKind] = {
    'sample_load': ErrorKind.MISSING_RESOURCE,
    'sample_decode': ErrorKind.MISSING_RESOURCE,
    'config': ErrorKind.OUT_OF_RANGE,
    'audio_output': ErrorKind.BACKEND_UNAVAILABLE,
    'terminal': ErrorKind.BACKEND_UNAVAILABLE,
}


@dataclass
class ErrorContext:
    """Context information for error handling"""
    error: Exception
    context: str
    kind: ErrorKind
    severity: ErrorSeverity
    user_message: str
    solutions: List[str]
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    @property
    def fatal(self) -> bool:
        return self.kind is not ErrorKind.MISSING_RESOURCE


class ProductionErrorHandler:
    """Classifies, logs and formats errors"""

    def __init__(self):
        self.error_counts: Dict[str, int] = {}
        self.error_history: List[ErrorContext] = []
        self.max_history = 100

    def handle_error(self, error: Exception, context: str,
                     details: Optional[Dict[str, Any]] = None) -> ErrorContext:
        """
        Record and log an error

        Args:
            error: The exception that occurred
            context: Context where the error occurred
            details: Additional context details

        Returns:
            The classified error context; callers abort when it is fatal
        """
        self.error_counts[context] = self.error_counts.get(context, 0) + 1

        error_ctx = self._create_error_context(error, context, details or {})
        self._log_error(error_ctx)

        self.error_history.append(error_ctx)
        if len(self.error_history) > self.max_history:
            self.error_history.pop(0)

        return error_ctx

    def handle_fatal(self, error: TermPianoError) -> ErrorContext:
        """Classify a fatal startup error raised by termpiano itself"""
        return self.handle_error(error, error.context, error.details)

    def format_error(self, error_ctx: ErrorContext) -> str:
        """Format error for user display with solutions"""
        lines = []

        lines.append("╔" + "═" * 74 + "╗")
        lines.append(f"║  Error: {error_ctx.user_message[:64]:<64} ║")
        lines.append("╠" + "═" * 74 + "╣")

        cause = str(error_ctx.error) or type(error_ctx.error).__name__
        lines.append(f"║  {cause[:72]:<72}║")

        if error_ctx.solutions:
            lines.append("╠" + "═" * 74 + "╣")
            lines.append(f"║  {'Solution(s):':<72}║")
            for i, solution in enumerate(error_ctx.solutions[:3], 1):
                lines.append(f"║    {i}. {solution[:67]:<67}║")

        if error_ctx.details:
            lines.append("╠" + "═" * 74 + "╣")
            lines.append(f"║  {'Details:':<72}║")
            for key, value in list(error_ctx.details.items())[:5]:
                entry = f"{key}: {value}"
                lines.append(f"║    {entry[:70]:<70}║")

        lines.append("╚" + "═" * 74 + "╝")

        return "\n".join(lines)

    def get_error_statistics(self) -> Dict[str, Any]:
        """Get error statistics"""
        return {
            'total_errors': sum(self.error_counts.values()),
            'error_counts': dict(self.error_counts),
            'recent_errors': len([e for e in self.error_history
                                  if e.timestamp > (time.time() - 3600)]),
        }

    def _create_error_context(self, error: Exception, context: str,
                              details: Dict[str, Any]) -> ErrorContext:
        kind = CONTEXT_KINDS.get(context, ErrorKind.BACKEND_UNAVAILABLE)
        user_message, solutions = self._analyze_error(error, context)

        if kind is ErrorKind.MISSING_RESOURCE:
            severity = ErrorSeverity.MEDIUM
        elif kind is ErrorKind.OUT_OF_RANGE:
            severity = ErrorSeverity.HIGH
        else:
            severity = ErrorSeverity.CRITICAL

        return ErrorContext(
            error=error,
            context=context,
            kind=kind,
            severity=severity,
            user_message=user_message,
            solutions=solutions,
            details=details,
        )

    def _analyze_error(self, error: Exception, context: str) -> Tuple[str, List[str]]:
        """Generate user-friendly message and solutions"""

        if context in ('sample_load', 'sample_decode'):
            return (
                "Piano Sample Unavailable",
                [
                    "Check the assets directory: termpiano --check-samples",
                    "Point termpiano at the samples: --assets /path/to/assets",
                    "Check file permissions: ls -la assets/",
                ],
            )

        elif context == 'config':
            return (
                "Invalid Configuration",
                [
                    "Colors: black, red, green, yellow, blue, magenta, cyan, white",
                    "Octave (--sequence) must be 0-5, note duration 0-8000 ms",
                    "Show the config file in use: python -m termpiano.config show",
                ],
            )

        elif context == 'audio_output':
            return (
                "Audio Output Failed",
                [
                    "Check if an audio device is available: aplay -l",
                    "Check that PulseAudio/PipeWire is running",
                    "Select an SDL driver explicitly: SDL_AUDIODRIVER=alsa",
                ],
            )

        elif context == 'terminal':
            return (
                "Terminal Initialization Failed",
                [
                    "Run termpiano in an interactive terminal (not a pipe)",
                    "Check the TERM environment variable",
                    "Widen the terminal to at least 157 columns",
                ],
            )

        return (
            f"Unexpected Error in {context}",
            [
                "Run again with --verbose --log-file termpiano.log",
                "Report the issue with the log attached",
            ],
        )

    def _log_error(self, error_ctx: ErrorContext):
        message = f"[{error_ctx.context}] {error_ctx.user_message}: {error_ctx.error}"
        if error_ctx.details:
            message += " (" + ", ".join(f"{k}={v}" for k, v in error_ctx.details.items()) + ")"

        if error_ctx.severity == ErrorSeverity.CRITICAL:
            log.critical(message)
        elif error_ctx.severity == ErrorSeverity.HIGH:
            log.error(message)
        elif error_ctx.severity == ErrorSeverity.MEDIUM:
            log.warning(message)
        else:
            log.debug(message)

        if error_ctx.error.__traceback__ is not None:
            log.debug(f"Stack trace:\n{''.join(traceback.format_tb(error_ctx.error.__traceback__))}")
