# stridebeats Configuration
# All default values and constants

from dataclasses import dataclass, field, is_dataclass
from enum import IntEnum
from typing import List

from logging_utils import log_event


CURRENT_CONFIG_VERSION = 1

class CurveInterpolation(IntEnum):
    """How a response curve fills the space between its control points"""
    LINEAR = 1        # Straight segments (numpy.interp)
    EASE_IN_OUT = 2   # Zero-tangent cubic Hermite per segment (flat at every key)
    PCHIP = 3         # Shape-preserving monotone cubic through all keys

@dataclass
class CurveConfig:
    """Monotonic [0,1] -> [0,1] response curve stored as data"""
    points: List[List[float]] = field(default_factory=lambda: [[0.0, 0.0], [1.0, 1.0]])
    interpolation: CurveInterpolation = CurveInterpolation.EASE_IN_OUT

@dataclass
class MovementConfig:
    """Forward stepping and automatic return"""
    step_distance: float = 1.0        # Distance gained by one accepted step
    step_speed: float = 1.5           # Units/sec while moving to a step target (slow enough to chain on-beat steps)
    return_speed: float = 3.0         # Units/sec while returning (before multiplier)
    max_z_position: float = 10.0      # Max forward distance from the initial position

@dataclass
class DescentConfig:
    """Automatic descent and player resistance"""
    descent_speed: float = 2.0            # Units/sec of automatic backward motion at zero resistance
    resistance_strength: float = 0.5      # Lateral push per press (units/sec, scaled by dt)
    max_sideways_deviation: float = 1.0   # Max lateral offset from the ideal descent line
    resistance_slowdown: float = 0.3      # Resistance added per press (0.0-1.0)
    resistance_decay: float = 0.5         # Resistance lost per second

@dataclass
class DifficultyConfig:
    """Progress-dependent speed shaping"""
    min_forward_speed: float = 0.3              # Forward multiplier right at the max distance
    max_return_speed_multiplier: float = 3.0    # Return multiplier right at the max distance
    difficulty_curve: CurveConfig = field(default_factory=CurveConfig)
    return_curve: CurveConfig = field(default_factory=CurveConfig)

@dataclass
class RhythmConfig:
    """Click rhythm learning"""
    ideal_beat_interval: float = 0.5    # Expected seconds between clicks before a rhythm is learned
    rhythm_tolerance: float = 0.15      # Allowed timing error (seconds)
    rhythm_buffer_time: float = 0.1     # Reserved, not read by the controller
    min_beats_for_rhythm: int = 4       # Intervals needed before a rhythm can be established

@dataclass
class AudioConfig:
    """Step one-shot playback"""
    enabled: bool = False             # Use the sounddevice sink from the CLI
    min_pitch: float = 0.8            # Lowest random pitch factor
    max_pitch: float = 1.2            # Highest random pitch factor
    sample_rate: int = 44100
    click_freq: float = 180.0         # Base frequency of the synthesized step thump (Hz)
    click_duration_ms: int = 90       # Length of the step thump
    volume: float = 0.6               # Output gain (0.0-1.0)

@dataclass
class AnimationConfig:
    """Animator parameter wiring"""
    speed_parameter_name: str = "Speed"

@dataclass
class Config:
    """Master configuration"""
    version: int = 1                  # Schema version for persisted configs
    movement: MovementConfig = field(default_factory=MovementConfig)
    descent: DescentConfig = field(default_factory=DescentConfig)
    difficulty: DifficultyConfig = field(default_factory=DifficultyConfig)
    rhythm: RhythmConfig = field(default_factory=RhythmConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    animation: AnimationConfig = field(default_factory=AnimationConfig)

    # Global
    log_level: str = "INFO"                   # Logging level (DEBUG/INFO/WARNING/ERROR)
    report_generation_enabled: bool = True    # Write per-cycle session reports


# Flat inspector-style keys written by version 0 files -> (section, field)
LEGACY_FLAT_KEYS = {
    'stepDistance': ('movement', 'step_distance'),
    'stepSpeed': ('movement', 'step_speed'),
    'returnSpeed': ('movement', 'return_speed'),
    'maxZPosition': ('movement', 'max_z_position'),
    'descentSpeed': ('descent', 'descent_speed'),
    'resistanceStrength': ('descent', 'resistance_strength'),
    'maxSidewaysDeviation': ('descent', 'max_sideways_deviation'),
    'resistanceSlowdown': ('descent', 'resistance_slowdown'),
    'resistanceDecay': ('descent', 'resistance_decay'),
    'minForwardSpeed': ('difficulty', 'min_forward_speed'),
    'maxReturnSpeedMultiplier': ('difficulty', 'max_return_speed_multiplier'),
    'idealBeatInterval': ('rhythm', 'ideal_beat_interval'),
    'rhythmTolerance': ('rhythm', 'rhythm_tolerance'),
    'rhythmBufferTime': ('rhythm', 'rhythm_buffer_time'),
    'minBeatsForRhythm': ('rhythm', 'min_beats_for_rhythm'),
    'minPitch': ('audio', 'min_pitch'),
    'maxPitch': ('audio', 'max_pitch'),
    'speedParameterName': ('animation', 'speed_parameter_name'),
}


def apply_dict_to_dataclass(target, data) -> None:
    """Recursively apply values from a dict onto a dataclass instance.
    Unknown keys are ignored; IntEnum fields are coerced when possible."""
    if not isinstance(data, dict):
        return

    for key, value in data.items():
        if not hasattr(target, key):
            continue

        current = getattr(target, key)

        if is_dataclass(current) and isinstance(value, dict):
            apply_dict_to_dataclass(current, value)
            continue

        if isinstance(current, IntEnum):
            try:
                setattr(target, key, current.__class__(value))
            except ValueError:
                log_event("WARN", "Config", "Could not convert value, keeping default",
                          key=key, enum=current.__class__.__name__, value=value)
            continue

        setattr(target, key, value)


def apply_legacy_flat_keys(config: Config, data) -> int:
    """Copy flat camelCase keys (version 0 layout) into their nested sections.
    Returns how many keys were mapped."""
    if not isinstance(data, dict):
        return 0

    mapped = 0
    for legacy_key, (section_name, field_name) in LEGACY_FLAT_KEYS.items():
        if legacy_key not in data or data[legacy_key] is None:
            continue
        section = getattr(config, section_name)
        setattr(section, field_name, data[legacy_key])
        mapped += 1
    return mapped


def migrate_config(config: Config, loaded_version, data=None) -> None:
    """Upgrade older config structures to the current schema.
    Maps legacy flat keys, restores defaults for None values and bumps version."""
    try:
        version = int(loaded_version) if loaded_version is not None else 0
    except (TypeError, ValueError):
        version = 0

    if version < 1 and data is not None:
        mapped = apply_legacy_flat_keys(config, data)
        if mapped:
            log_event("INFO", "Config", "Migrated legacy flat keys", count=mapped)

    # Any section field left as None by a hand-edited file falls back to its default
    for section_name, section_cls in (
        ('movement', MovementConfig),
        ('descent', DescentConfig),
        ('difficulty', DifficultyConfig),
        ('rhythm', RhythmConfig),
        ('audio', AudioConfig),
        ('animation', AnimationConfig),
    ):
        section = getattr(config, section_name)
        defaults = section_cls()
        for name, default_value in vars(defaults).items():
            if getattr(section, name, None) is None:
                setattr(section, name, default_value)

    for curve_name in ('difficulty_curve', 'return_curve'):
        curve = getattr(config.difficulty, curve_name)
        if not curve.points:
            curve.points = CurveConfig().points

    if getattr(config, 'log_level', None) is None:
        config.log_level = "INFO"
    if getattr(config, 'report_generation_enabled', True) is None:
        config.report_generation_enabled = True

    # Pitch range must be ordered for random.uniform to stay inside it
    if config.audio.min_pitch > config.audio.max_pitch:
        config.audio.min_pitch, config.audio.max_pitch = config.audio.max_pitch, config.audio.min_pitch

    try:
        beats = int(config.rhythm.min_beats_for_rhythm)
    except (TypeError, ValueError):
        beats = RhythmConfig().min_beats_for_rhythm
    config.rhythm.min_beats_for_rhythm = max(1, beats)

    config.version = CURRENT_CONFIG_VERSION
