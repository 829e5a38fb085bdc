#!/usr/bin/env python3
"""
stridebeats - Rhythm Walk Simulator

Replays a left/right click timeline through the locomotion controller and
prints the walker status while it steps out, descends and returns.
"""

import argparse
import cProfile
import random
import sys
from pathlib import Path

from config import Config
from config_persistence import get_config_dir, load_config
from locomotion import LocomotionController
from logging_utils import log_event, set_log_level
from replay import load_click_script, run_replay, synthesize_clicks
from sinks import AnimatorParameterSink, SoundDeviceAudioSink
from transform import Transform
from walk_session_reporter import WalkSessionReporter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the stridebeats walk simulator")
    parser.add_argument("--script", type=Path, default=None,
                        help="JSON click timeline: [{\"t\": 0.0, \"button\": \"left\"}, ...]")
    parser.add_argument("--steps", type=int, default=16,
                        help="Synthetic alternating clicks when no --script is given (default: 16)")
    parser.add_argument("--interval", type=float, default=None,
                        help="Seconds between synthetic clicks (default: rhythm.ideal_beat_interval)")
    parser.add_argument("--jitter", type=float, default=0.0,
                        help="Uniform +/- timing jitter for synthetic clicks (seconds)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for jitter and step pitch")
    parser.add_argument("--fps", type=float, default=60.0, help="Simulation frame rate (default: 60)")
    parser.add_argument("--duration", type=float, default=None,
                        help="Seconds to simulate (default: last click + 10s)")
    parser.add_argument("--status-every", type=float, default=0.25,
                        help="Print the status line every N simulated seconds (0 = never)")
    parser.add_argument("--config", type=Path, default=None,
                        help="Config JSON path (default: ~/.stridebeats/config.json)")
    parser.add_argument("--report-dir", type=Path, default=None,
                        help="Where to write walk session reports (default: config dir)")
    parser.add_argument("--audio", action="store_true", help="Play step sounds through sounddevice")
    parser.add_argument("--log-level", default=None, help="DEBUG/INFO/WARNING/ERROR")
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Enable cProfile and save stats to --profile-out",
    )
    parser.add_argument(
        "--profile-out",
        default="profile.prof",
        help="Path to save cProfile stats (default: profile.prof)",
    )
    return parser


def run_simulation(args: argparse.Namespace, config: Config) -> int:
    level = set_log_level(args.log_level or config.log_level)
    log_event("DEBUG", "Run", "Simulation starting", log_level=level, fps=args.fps, seed=args.seed)
    rng = random.Random(args.seed)

    if args.script is not None:
        try:
            clicks = load_click_script(args.script)
        except (OSError, ValueError) as e:
            log_event("ERROR", "Run", "Could not load click script", path=args.script, error=e)
            return 2
    else:
        interval = args.interval if args.interval is not None else config.rhythm.ideal_beat_interval
        clicks = synthesize_clicks(args.steps, interval, jitter=args.jitter, rng=rng)

    audio_sink = None
    if args.audio or config.audio.enabled:
        try:
            audio_sink = SoundDeviceAudioSink(config.audio)
        except OSError as e:
            log_event("WARN", "Audio", "sounddevice unavailable, running silent", error=e)

    reporter = None
    if config.report_generation_enabled:
        report_dir = args.report_dir if args.report_dir is not None else get_config_dir() / "reports"
        reporter = WalkSessionReporter(report_dir)

    animator = AnimatorParameterSink(config.animation.speed_parameter_name)
    controller = LocomotionController(
        config,
        Transform(),
        animation_sink=animator,
        audio_sink=audio_sink,
        rng=rng,
        cycle_callback=reporter.save_cycle if reporter is not None else None,
    )

    status_every = max(0.0, args.status_every)
    next_status = [0.0]

    def print_status(frame):
        if status_every <= 0 or frame.time + 1e-9 < next_status[0]:
            return
        next_status[0] += status_every
        print(f"t={frame.time:6.2f}s z={frame.z:6.3f} x={frame.lateral:+.3f} "
              f"{animator.parameter_name}={frame.animation_speed:+.2f} | {controller.status_text()}",
              flush=True)

    try:
        run_replay(controller, clicks, fps=args.fps, duration=args.duration, on_frame=print_status)
    except ValueError as e:
        log_event("ERROR", "Run", "Replay failed", error=e)
        return 2
    return 0


def main() -> None:
    args = build_parser().parse_args()
    config = load_config(args.config)

    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        exit_code = run_simulation(args, config)
        profiler.disable()
        profiler.dump_stats(args.profile_out)
    else:
        exit_code = run_simulation(args, config)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
