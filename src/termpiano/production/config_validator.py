"""
Production Configuration Validator

Configuration validation with detailed error reporting.
Ensures all piano settings are valid before the terminal and audio start.
"""

import logging
from typing import List
from pathlib import Path

from ..input.keyboard_input import (
    OCTAVE_OFFSET_MIN, OCTAVE_OFFSET_MAX,
    NOTE_DURATION_MIN, NOTE_DURATION_MAX, NOTE_DURATION_STEP,
)
from ..ui.keyboard import COLOR_NAMES
from .error_handler import ConfigError

log = logging.getLogger(__name__)


class ValidationError:
    """Configuration validation error"""

    def __init__(self, field: str, message: str, severity: str = "error"):
        self.field = field
        self.message = message
        self.severity = severity

    def __repr__(self):
        return f"ValidationError({self.field!r}, {self.message!r}, {self.severity!r})"


class ProductionConfigValidator:
    """Production-ready configuration validator"""

    def __init__(self):
        self.validation_rules = self._setup_validation_rules()

    def validate(self, config) -> List[ValidationError]:
        """
        Validate configuration object

        Args:
            config: Configuration object to validate

        Returns:
            List of validation errors
        """
        errors = []
        for rule in self.validation_rules:
            errors.extend(rule(config))
        return errors

    def ensure_valid(self, config):
        """Log warnings and raise ConfigError on the first critical problem"""
        errors = self.validate(config)

        for error in errors:
            if error.severity == "warning":
                log.warning(f"Config {error.field}: {error.message}")

        critical = [e for e in errors if e.severity == "critical"]
        if critical:
            raise ConfigError(
                critical[0].message,
                {e.field: e.message for e in critical},
            )

    def _setup_validation_rules(self) -> List[callable]:
        return [
            self._validate_color,
            self._validate_octave,
            self._validate_durations,
            self._validate_audio_settings,
            self._validate_file_paths,
        ]

    def _validate_color(self, config) -> List[ValidationError]:
        """Validate the highlight color"""
        errors = []

        if config.color not in COLOR_NAMES:
            errors.append(ValidationError(
                "color",
                f"Invalid color '{config.color}'. Valid options: {', '.join(COLOR_NAMES)}",
                "critical"
            ))

        return errors

    def _validate_octave(self, config) -> List[ValidationError]:
        errors = []

        octave = config.octave
        if not isinstance(octave, int) or not (OCTAVE_OFFSET_MIN <= octave <= OCTAVE_OFFSET_MAX):
            errors.append(ValidationError(
                "octave",
                f"Octave must be {OCTAVE_OFFSET_MIN}-{OCTAVE_OFFSET_MAX}, got {octave}",
                "critical"
            ))

        return errors

    def _validate_durations(self, config) -> List[ValidationError]:
        """Validate note and highlight durations"""
        errors = []

        duration = config.note_duration
        if not isinstance(duration, int) or not (NOTE_DURATION_MIN <= duration <= NOTE_DURATION_MAX):
            errors.append(ValidationError(
                "note_duration",
                f"Note duration must be {NOTE_DURATION_MIN}-{NOTE_DURATION_MAX} ms, got {duration}",
                "critical"
            ))
        elif duration % NOTE_DURATION_STEP:
            errors.append(ValidationError(
                "note_duration",
                f"Note duration {duration} ms is off the {NOTE_DURATION_STEP} ms grid "
                f"the arrow keys step on",
                "warning"
            ))

        mark = config.mark_duration
        if not isinstance(mark, int) or mark < 0:
            errors.append(ValidationError(
                "mark_duration",
                f"Mark duration must be a non-negative number of ms, got {mark}",
                "critical"
            ))

        return errors

    def _validate_audio_settings(self, config) -> List[ValidationError]:
        errors = []

        channels = config.channels
        if not isinstance(channels, int) or channels < 2:
            errors.append(ValidationError(
                "channels",
                f"At least 2 mixer channels are needed, got {channels!r}",
                "critical"
            ))

        buffer = config.buffer
        if not isinstance(buffer, int) or buffer <= 0:
            errors.append(ValidationError(
                "buffer",
                f"Mixer buffer must be a positive number of frames, got {buffer!r}",
                "critical"
            ))

        frequency = config.frequency
        if not isinstance(frequency, int) or frequency <= 0:
            errors.append(ValidationError(
                "frequency",
                f"Mixer frequency must be a positive number of Hz, got {frequency!r}",
                "critical"
            ))
        elif frequency not in (22050, 44100, 48000):
            errors.append(ValidationError(
                "frequency",
                f"Unusual mixer frequency {frequency} Hz",
                "warning"
            ))

        return errors

    def _validate_file_paths(self, config) -> List[ValidationError]:
        errors = []

        assets = Path(config.assets)
        if not assets.is_dir():
            errors.append(ValidationError(
                "assets",
                f"Assets directory not found: {assets}",
                "warning"
            ))

        return errors
