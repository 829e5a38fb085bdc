import sys
import unittest
from unittest import mock

import numpy as np

from config import AudioConfig, Config
from locomotion import LocomotionController
from sinks import AnimatorParameterSink, NullAnimationSink, NullAudioSink, SoundDeviceAudioSink
from transform import Transform


class _FakePortAudioError(Exception):
    pass


class TestAnimatorParameterSink(unittest.TestCase):
    def test_stores_named_parameter(self):
        sink = AnimatorParameterSink("WalkSpeed")
        self.assertEqual(sink.parameters, {"WalkSpeed": 0.0})

        sink.set_speed(-2.5)
        self.assertEqual(sink.parameters["WalkSpeed"], -2.5)
        self.assertEqual(sink.speed, -2.5)

    def test_counts_only_real_changes(self):
        sink = AnimatorParameterSink()
        sink.set_speed(0.0)
        sink.set_speed(1.0)
        sink.set_speed(1.0)
        sink.set_speed(0.5)
        self.assertEqual(sink.change_count, 2)

    def test_null_sinks_accept_calls(self):
        NullAnimationSink().set_speed(1.0)
        NullAudioSink().play_one_shot(1.0)


class TestSoundDeviceAudioSink(unittest.TestCase):
    def setUp(self):
        self.fake_sd = mock.MagicMock()
        patcher = mock.patch.dict(sys.modules, {"sounddevice": self.fake_sd})
        patcher.start()
        self.addCleanup(patcher.stop)
        self.cfg = AudioConfig(enabled=True, sample_rate=8000, click_duration_ms=50, volume=0.5)

    def test_thump_length_and_level(self):
        sink = SoundDeviceAudioSink(self.cfg)
        self.assertEqual(len(sink._buffer), 400)
        self.assertEqual(sink._buffer.dtype, np.float32)
        self.assertLessEqual(float(np.max(np.abs(sink._buffer))), 0.5 + 1e-6)

    def test_pitch_changes_length(self):
        sink = SoundDeviceAudioSink(self.cfg)
        self.assertEqual(len(sink.render(1.0)), 400)
        self.assertEqual(len(sink.render(2.0)), 200)
        self.assertEqual(len(sink.render(0.5)), 800)

    def test_play_one_shot_hands_samples_to_sounddevice(self):
        sink = SoundDeviceAudioSink(self.cfg, device=3)
        sink.play_one_shot(1.25)

        self.fake_sd.play.assert_called_once()
        args, kwargs = self.fake_sd.play.call_args
        self.assertEqual(len(args[0]), 320)
        self.assertEqual(kwargs["samplerate"], 8000)
        self.assertEqual(kwargs["device"], 3)

    def test_playback_failure_mutes_instead_of_raising(self):
        self.fake_sd.PortAudioError = _FakePortAudioError
        self.fake_sd.play.side_effect = _FakePortAudioError("Error querying device -1")
        sink = SoundDeviceAudioSink(self.cfg)

        with self.assertLogs("stridebeats", level="WARNING") as cm:
            sink.play_one_shot(1.0)
        self.assertTrue(sink.muted)
        self.assertIn("Playback failed", cm.output[0])

        sink.play_one_shot(1.1)
        self.fake_sd.play.assert_called_once()

    def test_controller_keeps_ticking_after_playback_failure(self):
        self.fake_sd.PortAudioError = _FakePortAudioError
        self.fake_sd.play.side_effect = _FakePortAudioError("Error querying device -1")
        controller = LocomotionController(Config(), Transform(), audio_sink=SoundDeviceAudioSink(self.cfg))

        controller.tick(True, False, 0.0, 0.0)
        controller.tick(False, True, 0.5, 0.5)

        self.assertEqual(controller.stats.steps_accepted, 2)


if __name__ == "__main__":
    unittest.main()
