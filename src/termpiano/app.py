"""
termpiano - Play piano in the terminal using the PC keyboard
============================================================
Key presses play piano samples and flash the matching key on an ASCII
keyboard diagram.

Controls:
  z..., q...    piano keys (two rows, black keys on the rows above)
  ← / →         octave offset down / up (0-5)
  ↓ / ↑         note duration -/+ 50 ms (0 = let the sample ring)
  Esc           quit
"""

import argparse
import curses
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import PianoConfig, load_config
from .engine.playback import PlaybackController
from .input.keyboard_input import KeyAction, KeyboardInputHandler, SessionState
from .production.config_validator import ProductionConfigValidator
from .production.error_handler import ProductionErrorHandler, TermPianoError
from .production.logging import console_muted, setup_logging
from .samples.manager import SampleStore, expected_resources, find_missing
from .ui.keyboard import COLOR_NAMES, HighlightEngine, draw_keyboard, draw_status
from .ui.surface import CursesSurface

log = logging.getLogger('termpiano')


class TermPiano:
    """Owns the session: samples, audio output, terminal and input loop"""

    def __init__(self, config: PianoConfig):
        self.config = config
        self.session = SessionState(
            octave_offset=config.octave,
            note_duration=config.note_duration,
            highlight_duration=config.mark_duration,
        )
        self.input = KeyboardInputHandler(self.session)
        self.error_handler = ProductionErrorHandler()

        self.store: Optional[SampleStore] = None
        self.playback: Optional[PlaybackController] = None
        self.surface: Optional[CursesSurface] = None
        self.highlights: Optional[HighlightEngine] = None

    def initialize(self):
        """Start everything in order; any TermPianoError here is fatal"""
        ProductionConfigValidator().ensure_valid(self.config)

        self.store = SampleStore.load_all(self.config.assets, self.error_handler)
        self._report_missing_samples()

        self.playback = PlaybackController(
            self.store,
            frequency=self.config.frequency,
            buffer=self.config.buffer,
            channels=self.config.channels,
            error_handler=self.error_handler,
        )
        self.playback.initialize()

        self.surface = CursesSurface()
        self.surface.start()
        self.highlights = HighlightEngine(self.surface, self.config.color, self.config.mark_duration)

        draw_keyboard(self.surface)
        draw_status(self.surface, self.session.octave_offset, self.session.note_duration)

    def _report_missing_samples(self):
        missing = find_missing(self.config.assets)
        if missing:
            log.warning(f"{len(missing)} of {len(expected_resources())} samples missing "
                        f"from {self.config.assets}: {', '.join(missing)}")

    def handle_key(self, key) -> bool:
        """Process one key press; returns False when the session should end"""
        action, note = self.input.handle_key(key)

        if action is KeyAction.NOTE:
            self.playback.play(note, self.session.note_duration)
            self.highlights.flash(note.position, note.white,
                                  duration_ms=self.session.highlight_duration)

        elif action is KeyAction.CONTROL:
            draw_status(self.surface, self.session.octave_offset, self.session.note_duration)

        elif action is KeyAction.EXIT:
            return False

        return True

    def run(self):
        """Block on key presses until Esc"""
        log.info("Ready - press Esc to quit")
        with console_muted():
            while True:
                key = self.surface.read_key()
                if key == curses.KEY_RESIZE:
                    self.surface.resize()
                    continue
                if not self.handle_key(key):
                    break
        log.info("Session ended")
        self._report_errors()

    def _report_errors(self):
        stats = self.error_handler.get_error_statistics()
        if stats['total_errors']:
            counts = ", ".join(f"{context} x{count}" for context, count in stats['error_counts'].items())
            log.warning(f"{stats['total_errors']} sample errors this session: {counts}")

    def stop(self):
        # Pending stop and revert timers are left to run out
        if self.surface is not None:
            self.surface.stop()
            self.surface = None
        if self.playback is not None:
            self.playback.shutdown()
            self.playback = None


# =============================================================================
# ENTRY POINT
# =============================================================================

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="termpiano",
        description="Play piano in the terminal using PC keyboard.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                        # Start with defaults
  %(prog)s -c cyan -s 3           # Cyan marks, one octave up
  %(prog)s -n 300                 # Staccato: stop each note after 300 ms
  %(prog)s --check-samples        # List missing samples and exit
        """
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")

    play = parser.add_argument_group('Playing')
    play.add_argument('-s', '--sequence', type=int, metavar='SEQUENCE',
                      help='Octave offset from 0 to 5 to begin with (default: 2)')
    play.add_argument('-n', '--note-duration', type=int, metavar='DURATION',
                      help='Duration to play each note for in ms, where 0 means '
                           'till the end of note (default: 0)')

    display = parser.add_argument_group('Display')
    display.add_argument('-c', '--color', metavar='COLOR',
                         help=f'Color of the mark shown when a note is played, '
                              f'one of {", ".join(COLOR_NAMES)} (default: red)')
    display.add_argument('-m', '--mark-duration', type=int, metavar='DURATION',
                         help='Duration to show the piano mark for, in ms (default: 500)')

    files = parser.add_argument_group('Files')
    files.add_argument('--assets', metavar='DIR',
                       help='Directory holding the .ogg samples (default: $TERMPIANO_ASSETS or ./assets)')
    files.add_argument('--config', metavar='PATH', help='Config file (default: ~/.config/termpiano/config.yaml)')
    files.add_argument('--check-samples', action='store_true',
                       help='Report missing samples and exit')

    debug = parser.add_argument_group('Debug')
    debug.add_argument('-v', '--verbose', action='store_true', help='Verbose logging')
    debug.add_argument('--log-file', metavar='PATH', help='Log to file')

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> PianoConfig:
    """File config first, command line on top"""
    config = PianoConfig.from_file_config(load_config(args.config))

    if args.assets is not None:
        config.assets = Path(args.assets)
    if args.sequence is not None:
        config.octave = args.sequence
    if args.note_duration is not None:
        config.note_duration = args.note_duration
    if args.color is not None:
        config.color = args.color
    if args.mark_duration is not None:
        config.mark_duration = args.mark_duration

    config.verbose = args.verbose
    config.log_file = Path(args.log_file) if args.log_file else None
    return config


def check_samples(assets: Path) -> int:
    missing = find_missing(assets)
    total = len(expected_resources())
    if not missing:
        print(f"All {total} samples present in {assets}")
        return 0
    print(f"{len(missing)} of {total} samples missing from {assets}:")
    for name in missing:
        print(f"  • {name}")
    return 1


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    setup_logging(args.verbose, Path(args.log_file) if args.log_file else None)
    config = build_config(args)

    if args.check_samples:
        sys.exit(check_samples(config.assets))

    piano = TermPiano(config)

    def signal_handler(sig, frame):
        piano.stop()
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)

    fatal = None
    try:
        piano.initialize()
        piano.run()
    except TermPianoError as e:
        fatal = e
    except KeyboardInterrupt:
        pass
    finally:
        piano.stop()

    if fatal is not None:
        error_ctx = piano.error_handler.handle_fatal(fatal)
        print(piano.error_handler.format_error(error_ctx), file=sys.stderr)
        sys.exit(1)

