"""
stridebeats - Effect Sinks
Animation and audio are fire-and-forget collaborators of the locomotion
controller. A missing collaborator is replaced by a null sink, so the
controller never checks for None.
"""

from typing import Optional, Protocol

import numpy as np

from config import AudioConfig
from logging_utils import log_event


class AnimationSink(Protocol):
    def set_speed(self, speed: float) -> None:
        """Positive = forward walk scale, negative = backward scale, 0 = idle."""


class AudioSink(Protocol):
    def play_one_shot(self, pitch: float) -> None:
        """Play the step sound once at the given pitch factor."""


class NullAnimationSink:
    def set_speed(self, speed: float) -> None:
        pass


class NullAudioSink:
    def play_one_shot(self, pitch: float) -> None:
        pass


class AnimatorParameterSink:
    """Stores the speed signal as a named float parameter, like an animator
    controller does, and keeps the last value for status output."""

    def __init__(self, parameter_name: str = "Speed"):
        self.parameter_name = parameter_name
        self.parameters: dict[str, float] = {parameter_name: 0.0}
        self.change_count = 0

    def set_speed(self, speed: float) -> None:
        previous = self.parameters.get(self.parameter_name)
        value = float(speed)
        self.parameters[self.parameter_name] = value
        if previous is None or abs(previous - value) > 1e-6:
            self.change_count += 1

    @property
    def speed(self) -> float:
        return self.parameters[self.parameter_name]


class SoundDeviceAudioSink:
    """
    Plays a synthesized step thump through sounddevice.

    The thump is a short exponentially decaying sine. Pitch is applied by
    resampling: pitch 2.0 plays the buffer in half the time, an octave up.
    Playback is non-blocking; a new one-shot cuts off the previous one.
    The first PortAudio failure mutes the sink for the rest of the run.
    """

    def __init__(self, config: AudioConfig, device: Optional[int] = None):
        # PortAudio is loaded on import, so only pay for it when audio is wanted
        import sounddevice as sd

        self._sd = sd
        self.config = config
        self.device = device
        self.muted = False
        self.sample_rate = int(config.sample_rate)
        self._buffer = self._synthesize_thump()
        log_event("INFO", "Audio", "Step sound ready",
                  samples=len(self._buffer), sample_rate=self.sample_rate)

    def _synthesize_thump(self) -> np.ndarray:
        cfg = self.config
        n = max(1, int(self.sample_rate * cfg.click_duration_ms / 1000.0))
        t = np.arange(n, dtype=np.float64) / self.sample_rate
        envelope = np.exp(-t * (6.0 / max(t[-1], 1e-3)))
        wave = np.sin(2.0 * np.pi * cfg.click_freq * t) * envelope
        return (wave * float(np.clip(cfg.volume, 0.0, 1.0))).astype(np.float32)

    def render(self, pitch: float) -> np.ndarray:
        """Return the thump resampled for the given pitch factor."""
        pitch = max(0.05, float(pitch))
        n = len(self._buffer)
        out_len = max(1, int(round(n / pitch)))
        src_idx = np.linspace(0.0, n - 1, out_len)
        return np.interp(src_idx, np.arange(n), self._buffer).astype(np.float32)

    def play_one_shot(self, pitch: float) -> None:
        if self.muted:
            return
        samples = self.render(pitch)
        try:
            self._sd.play(samples, samplerate=self.sample_rate, device=self.device)
        except self._sd.PortAudioError as e:
            self.muted = True
            log_event("WARN", "Audio", "Playback failed, step sounds muted", device=self.device, error=e)
