import io
import json
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

from config import Config
from run import build_parser, run_simulation


class _FakePortAudioError(Exception):
    pass


class TestRunCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmpdir = Path(self._tmp.name)

    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        self.assertIsNone(args.script)
        self.assertEqual(args.steps, 16)
        self.assertEqual(args.fps, 60.0)
        self.assertFalse(args.audio)
        self.assertFalse(args.profile)

    def test_synthetic_run_writes_cycle_report(self):
        config = Config()
        config.movement.max_z_position = 2.0
        args = build_parser().parse_args([
            "--steps", "8", "--seed", "1", "--status-every", "0.5",
            "--report-dir", str(self.tmpdir / "reports"), "--log-level", "ERROR",
        ])

        out = io.StringIO()
        with redirect_stdout(out):
            exit_code = run_simulation(args, config)

        self.assertEqual(exit_code, 0)
        self.assertIn("State: Idle", out.getvalue())
        self.assertIn("State: Descending", out.getvalue())

        payload = json.loads((self.tmpdir / "reports" / "walk_session_report.json").read_text(encoding="utf-8"))
        self.assertEqual(payload["cycle_count"], 1)
        self.assertEqual(payload["latest"]["ended_by"], "descent")

    def test_missing_script_returns_error_code(self):
        config = Config()
        config.report_generation_enabled = False
        args = build_parser().parse_args([
            "--script", str(self.tmpdir / "missing.json"), "--log-level", "CRITICAL",
        ])
        self.assertEqual(run_simulation(args, config), 2)

    def test_audio_failure_does_not_abort_run(self):
        fake_sd = mock.MagicMock()
        fake_sd.PortAudioError = _FakePortAudioError
        fake_sd.play.side_effect = _FakePortAudioError("Error querying device -1")
        config = Config()
        config.movement.max_z_position = 2.0
        config.report_generation_enabled = False
        args = build_parser().parse_args([
            "--steps", "4", "--audio", "--duration", "3", "--status-every", "0", "--log-level", "CRITICAL",
        ])

        with mock.patch.dict(sys.modules, {"sounddevice": fake_sd}):
            exit_code = run_simulation(args, config)

        self.assertEqual(exit_code, 0)
        fake_sd.play.assert_called_once()


if __name__ == "__main__":
    unittest.main()
