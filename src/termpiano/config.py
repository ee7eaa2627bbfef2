#!/usr/bin/env python3
"""
termpiano Configuration Module
==============================
Handles the YAML configuration file and the runtime settings built from it
and from the command line.
"""

import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

import yaml

from .samples.manager import default_assets_dir

log = logging.getLogger(__name__)


# Default configuration as YAML template
DEFAULT_CONFIG_YAML = """# termpiano Configuration
# =======================
# Place in ~/.config/termpiano/config.yaml
# Command line flags override anything set here.

# Audio settings
audio:
  assets: null        # null = $TERMPIANO_ASSETS or ./assets
  frequency: 44100    # Mixer sample rate (Hz)
  buffer: 512         # Mixer buffer size (frames)
  channels: 64        # Mixer channels, one is kept for the keep-alive stream

# Keyboard settings
keyboard:
  octave: 2           # Octave offset to start with (0-5)
  note_duration: 0    # ms to play each note, 0 = until the sample ends (0-8000)

# Display settings
display:
  color: red          # black, red, green, yellow, blue, magenta, cyan, white
  mark_duration: 500  # ms to show a key highlight
"""


@dataclass
class AudioConfig:
    assets: Optional[str] = None
    frequency: int = 44100
    buffer: int = 512
    channels: int = 64


@dataclass
class KeyboardConfig:
    octave: int = 2
    note_duration: int = 0


@dataclass
class DisplayConfig:
    color: str = "red"
    mark_duration: int = 500


@dataclass
class FullConfig:
    audio: AudioConfig = field(default_factory=AudioConfig)
    keyboard: KeyboardConfig = field(default_factory=KeyboardConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)


@dataclass
class PianoConfig:
    """Runtime configuration for the piano"""
    assets: Path = field(default_factory=default_assets_dir)
    frequency: int = 44100
    buffer: int = 512
    channels: int = 64

    # Keyboard settings
    octave: int = 2
    note_duration: int = 0  # ms, 0 = play to the end of the sample

    # Visual feedback
    color: str = "red"
    mark_duration: int = 500  # ms

    # Logging
    verbose: bool = False
    log_file: Optional[Path] = None

    @classmethod
    def from_file_config(cls, config: FullConfig) -> 'PianoConfig':
        assets = Path(config.audio.assets) if config.audio.assets else default_assets_dir()
        return cls(
            assets=assets,
            frequency=config.audio.frequency,
            buffer=config.audio.buffer,
            channels=config.audio.channels,
            octave=config.keyboard.octave,
            note_duration=config.keyboard.note_duration,
            color=config.display.color,
            mark_duration=config.display.mark_duration,
        )


def get_config_path() -> Path:
    """Get the configuration file path"""
    xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
    return Path(xdg_config) / 'termpiano' / 'config.yaml'


def create_default_config() -> Path:
    """Create default configuration file"""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if not config_path.exists():
        config_path.write_text(DEFAULT_CONFIG_YAML)
        print(f"Created default config: {config_path}")
    else:
        print(f"Config already exists: {config_path}")

    return config_path


def load_config(path: Optional[str] = None) -> FullConfig:
    """Load configuration from YAML file"""
    config_path = Path(path) if path else get_config_path()

    config = FullConfig()

    if not config_path.exists():
        return config

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        log.warning(f"Failed to load config {config_path}: {e}")
        return config

    if not data:
        return config

    if 'audio' in data:
        audio = data['audio'] or {}
        config.audio = AudioConfig(
            assets=audio.get('assets'),
            frequency=audio.get('frequency', 44100),
            buffer=audio.get('buffer', 512),
            channels=audio.get('channels', 64),
        )

    if 'keyboard' in data:
        kb = data['keyboard'] or {}
        config.keyboard = KeyboardConfig(
            octave=kb.get('octave', 2),
            note_duration=kb.get('note_duration', 0),
        )

    if 'display' in data:
        disp = data['display'] or {}
        config.display = DisplayConfig(
            color=disp.get('color', 'red'),
            mark_duration=disp.get('mark_duration', 500),
        )

    log.debug(f"Loaded config: {config_path}")
    return config


def save_config(config: FullConfig, path: Optional[str] = None) -> Path:
    """Save configuration to YAML file"""
    config_path = Path(path) if path else get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w') as f:
        yaml.safe_dump(asdict(config), f, default_flow_style=False, sort_keys=False)

    log.debug(f"Saved config: {config_path}")
    return config_path


# CLI for config management
if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="termpiano Configuration Manager")
    parser.add_argument('command', choices=['init', 'show', 'path'],
                        help="Command: init (create default), show (display current), path (show config path)")

    args = parser.parse_args()

    if args.command == 'init':
        create_default_config()
    elif args.command == 'path':
        print(get_config_path())
    elif args.command == 'show':
        print(yaml.safe_dump(asdict(load_config()), default_flow_style=False, sort_keys=False))
