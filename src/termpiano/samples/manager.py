"""
Sample Management Module

Handles piano sample discovery, eager loading and the catalog self-check.
"""

import io
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..notes import SOUNDS, SEQUENCE_MIN, SEQUENCE_MAX
from ..production.error_handler import ProductionErrorHandler

log = logging.getLogger(__name__)

SAMPLE_EXTENSION = ".ogg"
ASSETS_ENV_VAR = "TERMPIANO_ASSETS"
DEFAULT_ASSETS_DIR = Path("assets")

# Only these two classes have samples below octave 0
LEGACY_LOW_SOUNDS = ("a", "as")


def sample_key(sound: str, sequence: int) -> str:
    return f"{sound}{sequence}"


def resource_name(sound: str, sequence: int) -> str:
    """File name of a sample, e.g. "cs4.ogg" or "a-1.ogg" """
    return f"{sample_key(sound, sequence)}{SAMPLE_EXTENSION}"


def expected_resources() -> List[str]:
    """Every sample file a complete assets directory holds"""
    names = []
    for sound in SOUNDS:
        if sound in LEGACY_LOW_SOUNDS:
            names.append(resource_name(sound, -1))
        for sequence in range(0, SEQUENCE_MAX + 1):
            names.append(resource_name(sound, sequence))
    return names


def find_missing(assets_dir: Union[str, Path]) -> List[str]:
    """Names from the expected catalog that are absent from assets_dir"""
    assets_dir = Path(assets_dir)
    return [name for name in expected_resources() if not (assets_dir / name).is_file()]


def default_assets_dir() -> Path:
    env_path = os.environ.get(ASSETS_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_ASSETS_DIR


class SampleStore:
    """
    Encoded piano samples held in memory for the life of the process.

    Keyed by "{sound}{sequence}". Lookups hand out a fresh stream over a
    private copy of the bytes, so concurrent plays of one note never share a
    read position.
    """

    def __init__(self, samples: Optional[Dict[str, bytes]] = None,
                 assets_dir: Optional[Path] = None):
        self._samples: Dict[str, bytes] = dict(samples or {})
        self.assets_dir = assets_dir

    @classmethod
    def load_all(cls, assets_dir: Union[str, Path, None] = None,
                 error_handler: Optional[ProductionErrorHandler] = None) -> 'SampleStore':
        """Read every (sound, sequence) sample present in assets_dir"""
        assets_dir = Path(assets_dir) if assets_dir is not None else default_assets_dir()
        error_handler = error_handler or ProductionErrorHandler()
        samples: Dict[str, bytes] = {}

        for sound in SOUNDS:
            for sequence in range(SEQUENCE_MIN, SEQUENCE_MAX + 1):
                path = assets_dir / resource_name(sound, sequence)
                try:
                    samples[sample_key(sound, sequence)] = path.read_bytes()
                except FileNotFoundError:
                    continue
                except OSError as e:
                    error_handler.handle_error(e, 'sample_load', {'sample': path.name})

        total_kb = sum(len(v) for v in samples.values()) / 1024
        log.info(f"Loaded {len(samples)} samples ({total_kb:.0f} KB) from {assets_dir}")
        return cls(samples, assets_dir)

    def lookup(self, sound: str, sequence: int) -> Optional[io.BytesIO]:
        data = self._samples.get(sample_key(sound, sequence))
        if data is None:
            return None
        return io.BytesIO(data)

    def __contains__(self, key: str) -> bool:
        return key in self._samples

    def __len__(self) -> int:
        return len(self._samples)

    def keys(self) -> List[str]:
        return sorted(self._samples)
