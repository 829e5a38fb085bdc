"""
stridebeats - Replay Driver
Feeds a click timeline into a LocomotionController with a fixed frame rate.
The rhythm clock and the integration delta both come from the same frame
counter, so a replay is deterministic for a given timeline and fps.
"""

import json
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from locomotion import LocomotionController
from logging_utils import log_event


BUTTONS = ("left", "right")

# Seconds to keep ticking after the last click when no duration is given
DEFAULT_SETTLE_SECONDS = 10.0


@dataclass
class ClickEvent:
    time: float
    button: str  # "left" or "right"


@dataclass
class ReplayFrame:
    time: float
    state: str
    z: float
    lateral: float
    progress: float
    resistance: float
    animation_speed: float


def load_click_script(path: Path) -> List[ClickEvent]:
    """Load [{"t": seconds, "button": "left"|"right"}, ...] sorted by time."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError("click script must be a JSON list")

    clicks = []
    for idx, entry in enumerate(data):
        if not isinstance(entry, dict) or "t" not in entry or "button" not in entry:
            raise ValueError(f"click #{idx} needs 't' and 'button'")
        button = str(entry["button"]).lower()
        if button not in BUTTONS:
            raise ValueError(f"click #{idx} has unknown button {entry['button']!r}")
        clicks.append(ClickEvent(time=float(entry["t"]), button=button))

    clicks.sort(key=lambda c: c.time)
    return clicks


def synthesize_clicks(count: int, interval: float, start: float = 0.0,
                      jitter: float = 0.0, rng: Optional[random.Random] = None) -> List[ClickEvent]:
    """Alternating left/right clicks, optionally with uniform timing jitter."""
    rng = rng if rng is not None else random.Random(0)
    clicks = []
    for i in range(max(0, int(count))):
        t = start + i * interval
        if jitter > 0:
            t += rng.uniform(-jitter, jitter)
        clicks.append(ClickEvent(time=max(0.0, t), button=BUTTONS[i % 2]))
    clicks.sort(key=lambda c: c.time)
    return clicks


def run_replay(controller: LocomotionController, clicks: List[ClickEvent],
               fps: float = 60.0, duration: Optional[float] = None,
               on_frame: Optional[Callable[[ReplayFrame], None]] = None) -> List[ReplayFrame]:
    """Tick the controller at `fps` until `duration`, pressing the button of
    each click on the first free frame at or after its time. At most one click
    fires per frame, so clicks closer together than a frame are delayed rather
    than merged."""
    if fps <= 0:
        raise ValueError("fps must be positive")

    pending = sorted(clicks, key=lambda c: c.time)
    if duration is None:
        duration = (pending[-1].time if pending else 0.0) + DEFAULT_SETTLE_SECONDS

    frame_count = int(duration * fps) + 1
    dt = 1.0 / fps
    frames: List[ReplayFrame] = []
    next_click = 0

    log_event("INFO", "Replay", "Starting replay",
              clicks=len(pending), fps=fps, duration=f"{duration:.2f}s")

    for n in range(frame_count):
        now = n / fps
        left = right = False
        # One click per frame; clicks sharing a frame queue onto the next ones
        if next_click < len(pending) and pending[next_click].time <= now + 1e-9:
            if pending[next_click].button == "left":
                left = True
            else:
                right = True
            next_click += 1

        controller.tick(left, right, now, dt if n > 0 else 0.0)

        position = controller.position
        frame = ReplayFrame(
            time=now,
            state=controller.state_name,
            z=controller.forward_distance(position),
            lateral=float((position - controller.initial_position) @ controller.transform.right),
            progress=controller.progress_ratio(),
            resistance=controller.resistance_effect,
            animation_speed=controller.animation_speed,
        )
        frames.append(frame)
        if on_frame is not None:
            on_frame(frame)

    log_event("INFO", "Replay", "Replay finished", frames=len(frames),
              final_state=controller.state_name)
    return frames
