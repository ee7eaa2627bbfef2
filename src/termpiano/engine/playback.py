"""
Sample Playback Engine Module

Plays piano samples through pygame.mixer, with optional timed stops for
staccato playing.
"""

import logging
import threading
from os import environ
from typing import Optional

environ.setdefault('PYGAME_HIDE_SUPPORT_PROMPT', '1')
import numpy as np
import pygame
import pygame.sndarray

from ..notes import Note
from ..production.error_handler import BackendUnavailableError, ProductionErrorHandler
from ..samples.manager import SampleStore
from ..timers import run_after

log = logging.getLogger(__name__)

KEEP_ALIVE_CHANNEL = 0
KEEP_ALIVE_SECONDS = 1.0


class PlaybackController:
    """
    Starts sample playback for resolved notes.

    A silent looping stream runs on a reserved mixer channel for the life of
    the process. Without it some audio backends click between discrete
    samples, so it is started once and never stopped.
    """

    def __init__(self, store: SampleStore, frequency: int = 44100, buffer: int = 512,
                 channels: int = 64, mixer=None,
                 error_handler: Optional[ProductionErrorHandler] = None):
        self.store = store
        self.frequency = frequency
        self.buffer = buffer
        self.channels = channels
        self.mixer = mixer if mixer is not None else pygame.mixer
        self.error_handler = error_handler or ProductionErrorHandler()
        self._keep_alive = None
        self._initialized = False
        self._lock = threading.Lock()

    def initialize(self):
        """Open the audio output; raises BackendUnavailableError on failure"""
        try:
            self.mixer.init(frequency=self.frequency, size=-16, channels=2, buffer=self.buffer)
        except pygame.error as e:
            raise BackendUnavailableError(
                'audio_output', str(e),
                {'frequency': self.frequency, 'buffer': self.buffer},
            ) from e

        self.mixer.set_num_channels(self.channels)
        self.mixer.set_reserved(1)
        self._initialized = True
        log.info(f"Audio output ready: {self.frequency} Hz, {self.channels} channels")

        self._start_keep_alive()

    def _start_keep_alive(self):
        frequency, _size, out_channels = self.mixer.get_init()
        frames = int(frequency * KEEP_ALIVE_SECONDS)
        shape = (frames, out_channels) if out_channels > 1 else (frames,)
        silence = np.zeros(shape, dtype=np.int16)
        self._keep_alive = pygame.sndarray.make_sound(silence)
        self.mixer.Channel(KEEP_ALIVE_CHANNEL).play(self._keep_alive, loops=-1)
        log.debug("Keep-alive stream started")

    def play(self, note: Note, duration_ms: int = 0):
        """
        Play a note's sample.

        With duration_ms == 0 the sample runs to its natural end. Otherwise
        it is stopped after duration_ms even if it has not finished. A note
        without a sample is silently skipped.

        Returns:
            The pygame Sound started, or None
        """
        stream = self.store.lookup(note.sound, note.sequence)
        if stream is None:
            log.debug(f"No sample for {note.sample_name}")
            return None

        try:
            sound = self.mixer.Sound(file=stream)
        except pygame.error as e:
            self.error_handler.handle_error(e, 'sample_decode', {'sample': note.sample_name})
            return None

        channel = sound.play()
        if channel is None:
            log.debug(f"No free mixer channel for {note.sample_name}")
            return None

        if duration_ms > 0:
            run_after(duration_ms, lambda: self._stop_sound(sound),
                      name=f"stop-{note.sample_name}")

        return sound

    def _stop_sound(self, sound):
        # Stop the Sound, not the channel: a later note may reuse the channel
        with self._lock:
            if not self.mixer.get_init():
                return
            sound.stop()

    def shutdown(self):
        with self._lock:
            if self._initialized:
                self.mixer.quit()
                self._initialized = False
                self._keep_alive = None
