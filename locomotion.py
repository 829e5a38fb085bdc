"""
stridebeats - Locomotion Controller
Turns alternating left/right presses into forward steps, then carries the
walker back to where it started.

States:
  Idle           waiting for a step; drifts into Returning when away from home
  MovingForward  walking to the current step target
  Descending     max distance reached, sliding back along a fixed line
  Returning      stopped short of the max, walking back home

Presses while Descending/Returning do not step. Any button adds resistance
(slowing the automatic motion) and shoves the walker sideways within a
corridor around the ideal line home.

One tick = decay resistance -> handle presses -> move -> notify sinks.
"""

import random
from dataclasses import asdict, dataclass
from typing import Callable, ClassVar, Optional, Union

import numpy as np

from alternation_gate import next_expected_button, resolve_step_button
from config import Config
from difficulty_curve import ProgressiveDifficulty
from logging_utils import log_event
from motion_math import axis_distance, clamp01, distance, lerp, move_towards
from resistance_model import DescentResistance, line_progress
from rhythm_tracker import RhythmTracker
from sinks import AnimationSink, AudioSink, NullAnimationSink, NullAudioSink
from transform import Transform


ARRIVAL_DISTANCE = 0.01         # Step target / return arrival
DESCENT_ARRIVAL_DISTANCE = 0.1  # Descent snaps home from a bit farther out
RETURN_TRIGGER_DISTANCE = 0.1   # Idle farther than this from home starts returning
_LIMIT_EPSILON = 1e-6           # Float slack on the max-distance comparison


# ---------------------------------------------------------------------------
# State variants
# ---------------------------------------------------------------------------

@dataclass
class Idle:
    name: ClassVar[str] = "Idle"


@dataclass
class MovingForward:
    target: np.ndarray
    name: ClassVar[str] = "MovingForward"


@dataclass
class Descending:
    descent_start: np.ndarray
    name: ClassVar[str] = "Descending"


@dataclass
class Returning:
    return_start: np.ndarray
    name: ClassVar[str] = "Returning"


LocomotionState = Union[Idle, MovingForward, Descending, Returning]


@dataclass
class CycleStats:
    """Counters for one out-and-back cycle"""
    cycle_index: int = 0
    started_at: Optional[float] = None
    ended_at: Optional[float] = None
    ended_by: str = ""                 # "descent" or "return"
    steps_accepted: int = 0
    wrong_button: int = 0
    off_rhythm: int = 0
    resistance_presses: int = 0
    lateral_rejections: int = 0
    max_progress: float = 0.0
    reached_max: bool = False
    rhythm_period: float = 0.0
    rhythm_confidence: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class LocomotionController:
    """
    Single owner of walker position, rhythm, resistance and alternation.

    Sinks are optional; absent ones become null sinks. `cycle_callback`
    receives a CycleStats each time the walker gets back home.
    """

    def __init__(self, config: Config, transform: Transform,
                 animation_sink: Optional[AnimationSink] = None,
                 audio_sink: Optional[AudioSink] = None,
                 rng: Optional[random.Random] = None,
                 cycle_callback: Optional[Callable[[CycleStats], None]] = None):
        self.config = config
        self.transform = transform
        self.animation: AnimationSink = animation_sink if animation_sink is not None else NullAnimationSink()
        self.audio: AudioSink = audio_sink if audio_sink is not None else NullAudioSink()
        self.rng = rng if rng is not None else random.Random()
        self.cycle_callback = cycle_callback

        self.rhythm = RhythmTracker(config.rhythm)
        self.difficulty = ProgressiveDifficulty(config.difficulty)
        self.resistance = DescentResistance(config.descent)

        self.initial_position: np.ndarray = transform.position
        self.state: LocomotionState = Idle()
        self.last_step_was_left: bool = False
        self.animation_speed: float = 0.0
        self._cycle_count = 0
        self.stats = CycleStats(cycle_index=self._cycle_count)

        self._set_animation_speed(0.0)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def position(self) -> np.ndarray:
        return self.transform.position

    @property
    def state_name(self) -> str:
        return self.state.name

    @property
    def resistance_effect(self) -> float:
        return self.resistance.resistance_effect

    @property
    def target_position(self) -> Optional[np.ndarray]:
        if isinstance(self.state, MovingForward):
            return self.state.target.copy()
        return None

    @property
    def descent_start_position(self) -> Optional[np.ndarray]:
        if isinstance(self.state, Descending):
            return self.state.descent_start.copy()
        return None

    def forward_distance(self, point: Optional[np.ndarray] = None) -> float:
        """Signed distance from home along the forward axis."""
        if point is None:
            point = self.transform.position
        return axis_distance(point, self.initial_position, self.transform.forward)

    def progress_ratio(self) -> float:
        max_z = self.config.movement.max_z_position
        if max_z <= 0:
            return 1.0
        return clamp01(self.forward_distance() / max_z)

    def descent_progress(self) -> float:
        if isinstance(self.state, Descending):
            return line_progress(self.transform.position, self.state.descent_start, self.initial_position)
        return 0.0

    def _at_max_distance(self, point: np.ndarray) -> bool:
        return self.forward_distance(point) >= self.config.movement.max_z_position - _LIMIT_EPSILON

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, left_pressed: bool, right_pressed: bool, now: float, dt: float) -> None:
        """Advance one frame with this frame's edge-triggered presses."""
        self.resistance.decay(dt)

        if left_pressed or right_pressed:
            self._handle_press(left_pressed, right_pressed, now, dt)

        if isinstance(self.state, MovingForward):
            self._advance_forward(self.state, now, dt)
        elif isinstance(self.state, Descending):
            self._advance_descent(self.state, now, dt)
        elif isinstance(self.state, Returning):
            self._advance_return(now, dt)
        else:
            self._check_return(now)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _handle_press(self, left_pressed: bool, right_pressed: bool, now: float, dt: float) -> None:
        self._play_step_sound()

        if isinstance(self.state, (Idle, MovingForward)):
            self._try_step(left_pressed, right_pressed, now)
        else:
            self._apply_resistance(left_pressed, right_pressed, dt)

    def _play_step_sound(self) -> None:
        audio_cfg = self.config.audio
        pitch = self.rng.uniform(audio_cfg.min_pitch, audio_cfg.max_pitch)
        self.audio.play_one_shot(pitch)

    def _try_step(self, left_pressed: bool, right_pressed: bool, now: float) -> None:
        button = resolve_step_button(left_pressed, right_pressed, self.last_step_was_left)
        if button is None:
            self.stats.wrong_button += 1
            log_event("DEBUG", "Locomotion", "Wrong button",
                      expected=next_expected_button(self.last_step_was_left))
            return

        in_rhythm = self.rhythm.is_valid_rhythm_step(now)
        self.rhythm.update_tracking(now)
        if not in_rhythm:
            self.stats.off_rhythm += 1
            log_event("DEBUG", "Locomotion", "Off rhythm",
                      established=self.rhythm.has_established_rhythm,
                      period=f"{self.rhythm.established_period:.3f}s")
            return

        self.last_step_was_left = button
        self._take_step(now)

    def _take_step(self, now: float) -> None:
        position = self.transform.position
        forward = self.transform.forward
        max_z = self.config.movement.max_z_position

        target = position + forward * self.config.movement.step_distance
        if self._at_max_distance(target):
            target = self.initial_position + forward * max_z

        if self.stats.started_at is None:
            self.stats.started_at = now
        self.stats.steps_accepted += 1

        self._set_state(MovingForward(target=target), now)
        self._set_animation_speed(self.difficulty.forward_multiplier(self.progress_ratio()))
        log_event("DEBUG", "Locomotion", "Step",
                  foot="L" if self.last_step_was_left else "R",
                  target_z=self.forward_distance(target))

    def _apply_resistance(self, left_pressed: bool, right_pressed: bool, dt: float) -> None:
        self.resistance.register_press()
        self.stats.resistance_presses += 1

        direction = (1 if right_pressed else 0) - (1 if left_pressed else 0)
        if direction == 0:
            return

        if isinstance(self.state, Descending):
            line_start = self.state.descent_start
        else:
            line_start = self.state.return_start

        pushed = self.resistance.try_lateral_push(
            self.transform.position, direction, self.transform.right,
            line_start, self.initial_position, dt)
        if pushed is None:
            self.stats.lateral_rejections += 1
            log_event("DEBUG", "Locomotion", "Sideways push rejected",
                      resistance=self.resistance_effect)
            return
        self.transform.set_position(pushed)

    # ------------------------------------------------------------------
    # Motion per state
    # ------------------------------------------------------------------

    def _advance_forward(self, state: MovingForward, now: float, dt: float) -> None:
        multiplier = self.difficulty.forward_multiplier(self.progress_ratio())
        max_delta = self.config.movement.step_speed * multiplier * dt
        position = move_towards(self.transform.position, state.target, max_delta)
        self.transform.set_position(position)
        self.stats.max_progress = max(self.stats.max_progress, self.progress_ratio())

        if distance(position, state.target) >= ARRIVAL_DISTANCE:
            return

        self.transform.set_position(state.target)
        if self._at_max_distance(state.target):
            self.stats.reached_max = True
            self._set_state(Descending(descent_start=state.target.copy()), now)
            self._set_animation_speed(-1.0)
        else:
            self._set_state(Idle(), now)
            self._set_animation_speed(0.0)

    def _check_return(self, now: float) -> None:
        position = self.transform.position
        if distance(position, self.initial_position) <= RETURN_TRIGGER_DISTANCE:
            return
        if self._at_max_distance(position):
            return

        self._set_state(Returning(return_start=position), now)
        self._set_animation_speed(-self.difficulty.return_multiplier(self.progress_ratio()))

    def _advance_descent(self, state: Descending, now: float, dt: float) -> None:
        speed = self.config.descent.descent_speed * self.resistance.speed_factor
        position = move_towards(self.transform.position, self.initial_position, speed * dt)
        self.transform.set_position(position)

        if distance(position, self.initial_position) < DESCENT_ARRIVAL_DISTANCE:
            self._complete_cycle("descent", now)
            return

        progress = line_progress(position, state.descent_start, self.initial_position)
        max_mult = self.config.difficulty.max_return_speed_multiplier
        self._set_animation_speed(lerp(-1.0, -max_mult, progress) * self.resistance.animation_damping)

    def _advance_return(self, now: float, dt: float) -> None:
        multiplier = self.difficulty.return_multiplier(self.progress_ratio())
        speed = self.config.movement.return_speed * multiplier * self.resistance.speed_factor
        position = move_towards(self.transform.position, self.initial_position, speed * dt)
        self.transform.set_position(position)

        if distance(position, self.initial_position) < ARRIVAL_DISTANCE:
            self._complete_cycle("return", now)
            return

        self._set_animation_speed(-multiplier * self.resistance.animation_damping)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _set_state(self, new_state: LocomotionState, now: float) -> None:
        old_name = self.state.name
        self.state = new_state
        if old_name != new_state.name:
            log_event("INFO", "Locomotion", "State change",
                      old=old_name, new=new_state.name,
                      z=self.forward_distance(), t=now)

    def _set_animation_speed(self, speed: float) -> None:
        self.animation_speed = float(speed)
        self.animation.set_speed(self.animation_speed)

    def _complete_cycle(self, ended_by: str, now: float) -> None:
        self.transform.set_position(self.initial_position)

        stats = self.stats
        stats.ended_at = now
        stats.ended_by = ended_by
        if stats.started_at is None:
            stats.started_at = now
        stats.rhythm_period = self.rhythm.established_period
        stats.rhythm_confidence = self.rhythm.confidence

        self.resistance.reset()
        self.rhythm.reset()
        self.last_step_was_left = False
        self._set_state(Idle(), now)
        self._set_animation_speed(0.0)

        log_event("INFO", "Locomotion", "Cycle complete",
                  cycle=stats.cycle_index, ended_by=ended_by,
                  steps=stats.steps_accepted, max_progress=stats.max_progress,
                  wrong=stats.wrong_button, off_rhythm=stats.off_rhythm,
                  resist=stats.resistance_presses)

        self._cycle_count += 1
        self.stats = CycleStats(cycle_index=self._cycle_count)
        if self.cycle_callback is not None:
            self.cycle_callback(stats)

    # ------------------------------------------------------------------
    # Operator actions
    # ------------------------------------------------------------------

    def set_new_initial_position(self) -> None:
        """Make the current position home. Rhythm learning is kept."""
        self.initial_position = self.transform.position
        self.state = Idle()
        self.last_step_was_left = False
        self._set_animation_speed(0.0)
        log_event("INFO", "Locomotion", "New initial position", position=self.initial_position)

    def set_max_z_position(self, new_max_z: float) -> None:
        self.config.movement.max_z_position = new_max_z

    # ------------------------------------------------------------------
    # Debug surface
    # ------------------------------------------------------------------

    def status_text(self) -> str:
        info = self.rhythm.get_rhythm_info()
        if info['established']:
            rhythm = f"{info['period']:.2f}s ({info['confidence']:.0%})"
        else:
            rhythm = f"learning ({info['interval_count']}/{self.config.rhythm.min_beats_for_rhythm})"
        return (f"State: {self.state_name} | "
                f"Resistance: {self.resistance_effect * 100:.0f}% | "
                f"Rhythm: {rhythm} | "
                f"Next: {next_expected_button(self.last_step_was_left)}")
