import unittest

from config import (
    Config,
    CURRENT_CONFIG_VERSION,
    CurveInterpolation,
    apply_dict_to_dataclass,
    migrate_config,
)


class TestConfigMigration(unittest.TestCase):
    def test_missing_version_sets_defaults_and_bumps(self):
        cfg = Config()
        data = {
            # version intentionally omitted to simulate legacy file
            "movement": {},
            "rhythm": {},
        }

        apply_dict_to_dataclass(cfg, data)
        migrate_config(cfg, data.get("version"), data)

        self.assertEqual(cfg.version, CURRENT_CONFIG_VERSION)
        self.assertEqual(cfg.movement.step_distance, 1.0)
        self.assertEqual(cfg.rhythm.min_beats_for_rhythm, 4)

    def test_legacy_flat_keys_are_mapped(self):
        cfg = Config()
        data = {
            "stepDistance": 2.0,
            "maxZPosition": 6.0,
            "resistanceDecay": 0.25,
            "idealBeatInterval": 0.4,
            "minPitch": 0.9,
            "speedParameterName": "WalkSpeed",
            "unknownKey": 3,
        }

        apply_dict_to_dataclass(cfg, data)
        migrate_config(cfg, data.get("version"), data)

        self.assertEqual(cfg.version, CURRENT_CONFIG_VERSION)
        self.assertEqual(cfg.movement.step_distance, 2.0)
        self.assertEqual(cfg.movement.max_z_position, 6.0)
        self.assertEqual(cfg.descent.resistance_decay, 0.25)
        self.assertEqual(cfg.rhythm.ideal_beat_interval, 0.4)
        self.assertEqual(cfg.audio.min_pitch, 0.9)
        self.assertEqual(cfg.animation.speed_parameter_name, "WalkSpeed")

    def test_flat_keys_ignored_for_current_version(self):
        cfg = Config()
        data = {"version": 1, "stepDistance": 9.0}

        apply_dict_to_dataclass(cfg, data)
        migrate_config(cfg, data.get("version"), data)

        self.assertEqual(cfg.movement.step_distance, 1.0)

    def test_none_values_are_sanitized(self):
        cfg = Config()
        data = {
            "version": 0,
            "movement": {"step_speed": None},
            "descent": {"resistance_decay": None},
            "difficulty": {"difficulty_curve": {"points": []}},
            "log_level": None,
            "report_generation_enabled": None,
        }

        apply_dict_to_dataclass(cfg, data)
        migrate_config(cfg, data.get("version"), data)

        self.assertEqual(cfg.version, CURRENT_CONFIG_VERSION)
        self.assertEqual(cfg.movement.step_speed, 1.5)
        self.assertEqual(cfg.descent.resistance_decay, 0.5)
        self.assertEqual(cfg.difficulty.difficulty_curve.points, [[0.0, 0.0], [1.0, 1.0]])
        self.assertEqual(cfg.log_level, "INFO")
        self.assertTrue(cfg.report_generation_enabled)

    def test_preserves_custom_values(self):
        cfg = Config()
        data = {
            "version": 1,
            "movement": {"max_z_position": 4.5},
            "difficulty": {
                "min_forward_speed": 0.2,
                "return_curve": {"points": [[0.0, 0.0], [0.5, 0.8], [1.0, 1.0]], "interpolation": 3},
            },
            "audio": {"enabled": True},
        }

        apply_dict_to_dataclass(cfg, data)
        migrate_config(cfg, data.get("version"), data)

        self.assertEqual(cfg.movement.max_z_position, 4.5)
        self.assertEqual(cfg.difficulty.min_forward_speed, 0.2)
        self.assertEqual(cfg.difficulty.return_curve.interpolation, CurveInterpolation.PCHIP)
        self.assertEqual(len(cfg.difficulty.return_curve.points), 3)
        self.assertTrue(cfg.audio.enabled)

    def test_bad_enum_value_keeps_default(self):
        cfg = Config()
        apply_dict_to_dataclass(cfg, {"difficulty": {"difficulty_curve": {"interpolation": 42}}})
        self.assertEqual(cfg.difficulty.difficulty_curve.interpolation, CurveInterpolation.EASE_IN_OUT)

    def test_inverted_pitch_range_and_min_beats_fixed(self):
        cfg = Config()
        data = {"version": 1, "audio": {"min_pitch": 1.3, "max_pitch": 0.7}, "rhythm": {"min_beats_for_rhythm": 0}}

        apply_dict_to_dataclass(cfg, data)
        migrate_config(cfg, data.get("version"), data)

        self.assertEqual((cfg.audio.min_pitch, cfg.audio.max_pitch), (0.7, 1.3))
        self.assertEqual(cfg.rhythm.min_beats_for_rhythm, 1)

    def test_unparseable_version_treated_as_legacy(self):
        cfg = Config()
        data = {"version": "old", "stepSpeed": 2.5}
        migrate_config(cfg, data["version"], data)
        self.assertEqual(cfg.movement.step_speed, 2.5)
        self.assertEqual(cfg.version, CURRENT_CONFIG_VERSION)


if __name__ == "__main__":
    unittest.main()
