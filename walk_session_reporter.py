import csv
import json
import time
from pathlib import Path

from locomotion import CycleStats
from logging_utils import log_event


CSV_FIELDS = [
    "cycle_index",
    "started_at",
    "ended_at",
    "seconds",
    "ended_by",
    "steps_accepted",
    "wrong_button",
    "off_rhythm",
    "step_accuracy",
    "resistance_presses",
    "lateral_rejections",
    "max_progress",
    "reached_max",
    "rhythm_period",
    "rhythm_confidence",
]


class WalkSessionReporter:
    """Persists per-cycle walk summaries to JSON and CSV reports."""

    def __init__(self, report_dir: Path, max_cycles: int = 500):
        self.report_dir = Path(report_dir)
        self.report_dir.mkdir(parents=True, exist_ok=True)
        self.json_path = self.report_dir / "walk_session_report.json"
        self.csv_path = self.report_dir / "walk_session_report.csv"
        self.max_cycles = max(1, int(max_cycles))

    def _load_existing_cycles(self) -> list[dict]:
        if not self.json_path.exists():
            return []
        try:
            with open(self.json_path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError):
            log_event("WARN", "Report", "Existing report unreadable, starting fresh", path=self.json_path)
            return []
        cycles = payload.get("cycles", []) if isinstance(payload, dict) else []
        return cycles if isinstance(cycles, list) else []

    def summarize(self, stats: CycleStats) -> dict:
        row = stats.to_dict()
        started = row.get("started_at") or 0.0
        ended = row.get("ended_at") or started
        row["seconds"] = max(0.0, float(ended) - float(started))
        attempts = stats.steps_accepted + stats.wrong_button + stats.off_rhythm
        row["step_accuracy"] = stats.steps_accepted / attempts if attempts else 0.0
        return row

    def save_cycle(self, stats: CycleStats) -> dict:
        row = self.summarize(stats)
        cycles = self._load_existing_cycles()
        cycles.append(row)
        if len(cycles) > self.max_cycles:
            cycles = cycles[-self.max_cycles :]

        payload = {
            "generated_at": time.time(),
            "cycle_count": len(cycles),
            "latest": cycles[-1],
            "cycles": cycles,
        }

        with open(self.json_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

        with open(self.csv_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
            writer.writeheader()
            for cycle in cycles:
                writer.writerow({key: cycle.get(key, "") for key in CSV_FIELDS})

        return row
