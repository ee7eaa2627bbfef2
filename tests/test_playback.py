"""
Tests for sample playback and timed stops

The mixer is replaced by a Mock, so no audio device is needed.
"""

import threading
import time
import unittest
from unittest.mock import Mock, patch

import sys
from os.path import dirname, join
sys.path.insert(0, join(dirname(dirname(__file__)), 'src'))

import pygame

from termpiano.engine.playback import PlaybackController, KEEP_ALIVE_CHANNEL
from termpiano.notes import Note
from termpiano.production.error_handler import BackendUnavailableError, ProductionErrorHandler
from termpiano.samples.manager import SampleStore

A2 = Note("a", 2, 64, True)


def make_mixer():
    mixer = Mock()
    sound = Mock()
    sound.play.return_value = Mock(name="channel")
    mixer.Sound.return_value = sound
    mixer.get_init.return_value = (44100, -16, 2)
    return mixer, sound


class TestPlaybackController(unittest.TestCase):
    """Test note playback against a mock mixer"""

    def setUp(self):
        self.store = SampleStore({"a2": b"OggS-a2"})
        self.mixer, self.sound = make_mixer()
        self.controller = PlaybackController(self.store, mixer=self.mixer)

    def test_play_decodes_sample_stream(self):
        result = self.controller.play(A2)
        self.assertIs(result, self.sound)
        stream = self.mixer.Sound.call_args.kwargs['file']
        self.assertEqual(stream.read(), b"OggS-a2")
        self.sound.play.assert_called_once()

    def test_zero_duration_is_never_stopped(self):
        self.controller.play(A2, 0)
        time.sleep(0.15)
        self.sound.stop.assert_not_called()

    def test_timed_stop(self):
        stopped = threading.Event()
        self.sound.stop.side_effect = stopped.set

        start = time.monotonic()
        self.controller.play(A2, 300)
        self.assertFalse(stopped.wait(0.2))
        self.assertTrue(stopped.wait(0.4))
        self.assertGreaterEqual(time.monotonic() - start, 0.29)

    def test_play_returns_before_stop(self):
        start = time.monotonic()
        self.controller.play(A2, 500)
        self.assertLess(time.monotonic() - start, 0.1)

    def test_missing_sample_is_skipped(self):
        result = self.controller.play(Note("b", 3, 0, True), 300)
        self.assertIsNone(result)
        self.mixer.Sound.assert_not_called()

    def test_unmapped_note_is_skipped(self):
        self.assertIsNone(self.controller.play(Note("", 2, 0, False)))
        self.mixer.Sound.assert_not_called()

    def test_undecodable_sample_is_reported(self):
        self.mixer.Sound.side_effect = pygame.error("Unrecognized audio format")
        self.assertIsNone(self.controller.play(A2, 300))

        stats = self.controller.error_handler.get_error_statistics()
        self.assertEqual(stats['error_counts'], {'sample_decode': 1})
        self.assertEqual(self.controller.error_handler.error_history[0].details, {'sample': 'a2'})

    def test_shared_error_handler(self):
        handler = ProductionErrorHandler()
        controller = PlaybackController(self.store, mixer=self.mixer, error_handler=handler)
        self.assertIs(controller.error_handler, handler)

    def test_timed_stop_after_mixer_closed(self):
        """A stop that fires after shutdown does nothing and logs nothing"""
        with patch('termpiano.timers.log') as timer_log:
            self.controller.play(A2, 50)
            self.mixer.get_init.return_value = None
            time.sleep(0.2)

        self.sound.stop.assert_not_called()
        timer_log.exception.assert_not_called()

    def test_no_free_channel(self):
        self.sound.play.return_value = None
        self.assertIsNone(self.controller.play(A2, 300))


class TestMixerLifecycle(unittest.TestCase):
    """Test mixer startup and shutdown"""

    def setUp(self):
        self.mixer, _ = make_mixer()
        self.controller = PlaybackController(SampleStore(), frequency=48000, buffer=256,
                                             channels=32, mixer=self.mixer)

    @patch('termpiano.engine.playback.pygame.sndarray.make_sound')
    def test_initialize_starts_keep_alive(self, make_sound):
        self.controller.initialize()

        self.mixer.init.assert_called_once_with(frequency=48000, size=-16, channels=2, buffer=256)
        self.mixer.set_num_channels.assert_called_once_with(32)
        self.mixer.set_reserved.assert_called_once_with(1)

        silence = make_sound.call_args.args[0]
        self.assertEqual(silence.shape, (44100, 2))
        self.assertFalse(silence.any())

        self.mixer.Channel.assert_called_with(KEEP_ALIVE_CHANNEL)
        self.mixer.Channel.return_value.play.assert_called_once_with(
            make_sound.return_value, loops=-1)

    @patch('termpiano.engine.playback.pygame.sndarray.make_sound')
    def test_mono_keep_alive(self, make_sound):
        self.mixer.get_init.return_value = (22050, -16, 1)
        self.controller.initialize()
        self.assertEqual(make_sound.call_args.args[0].shape, (22050,))

    def test_unavailable_audio_output(self):
        self.mixer.init.side_effect = pygame.error("No available audio device")
        with self.assertRaises(BackendUnavailableError) as cm:
            self.controller.initialize()
        self.assertEqual(cm.exception.context, 'audio_output')
        self.assertEqual(cm.exception.details['frequency'], 48000)

    @patch('termpiano.engine.playback.pygame.sndarray.make_sound')
    def test_shutdown(self, make_sound):
        self.controller.initialize()
        self.controller.shutdown()
        self.controller.shutdown()
        self.mixer.quit.assert_called_once()

    def test_shutdown_before_initialize(self):
        self.controller.shutdown()
        self.mixer.quit.assert_not_called()

    @patch('termpiano.engine.playback.pygame.sndarray.make_sound')
    def test_stop_pending_at_shutdown(self, make_sound):
        controller = PlaybackController(SampleStore({"a2": b"OggS-a2"}), mixer=self.mixer)
        sound = self.mixer.Sound.return_value
        self.mixer.quit.side_effect = lambda: setattr(self.mixer.get_init, 'return_value', None)

        with patch('termpiano.timers.log') as timer_log:
            controller.initialize()
            controller.play(A2, 50)
            controller.shutdown()
            time.sleep(0.2)

        sound.stop.assert_not_called()
        timer_log.exception.assert_not_called()


if __name__ == '__main__':
    unittest.main()
