import tempfile
import unittest
from pathlib import Path

from advisor import settings_store


class SettingsStoreTestCase(unittest.TestCase):
    def test_missing_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as td:
            settings = settings_store.load_settings(Path(td) / "missing.ini")
        self.assertEqual(settings_store.DEFAULT_SETTINGS, settings)

    def test_save_and_load_round_trip(self):
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "nested" / "settings.ini"
            settings_store.save_settings(
                {"draw_count": "3", "conservative_foundations": "1", "verbosity": "2", "max_moves": "250"},
                path,
            )
            loaded = settings_store.load_settings(path)
        self.assertEqual("3", loaded["draw_count"])
        self.assertEqual("1", loaded["conservative_foundations"])
        self.assertEqual("2", loaded["verbosity"])
        self.assertEqual("250", loaded["max_moves"])
        self.assertTrue(settings_store.is_turn3(loaded))
        self.assertTrue(settings_store.policy_from_settings(loaded).conservative_foundations)

    def test_bad_values_fall_back(self):
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "settings.ini"
            path.write_text(
                "[advisor]\ndraw_count = 2\nconservative_foundations = maybe\nverbosity = 9\nmax_moves = -5\n",
                encoding="utf-8",
            )
            loaded = settings_store.load_settings(path)
        self.assertEqual("1", loaded["draw_count"])
        self.assertEqual("1", loaded["conservative_foundations"])
        self.assertEqual("3", loaded["verbosity"])
        self.assertEqual("1000", loaded["max_moves"])

    def test_unreadable_or_foreign_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as td:
            garbage = Path(td) / "garbage.ini"
            garbage.write_text("this is not an ini file\n", encoding="utf-8")
            other = Path(td) / "other.ini"
            other.write_text("[ui]\ntheme = dark\n", encoding="utf-8")
            self.assertEqual(settings_store.DEFAULT_SETTINGS, settings_store.load_settings(garbage))
            self.assertEqual(settings_store.DEFAULT_SETTINGS, settings_store.load_settings(other))

    def test_unknown_keys_are_dropped(self):
        policy = settings_store.policy_from_settings({"theme": "dark"})
        self.assertTrue(policy.conservative_foundations)
        self.assertFalse(settings_store.policy_from_settings({"conservative_foundations": "0"}).conservative_foundations)
        self.assertFalse(settings_store.is_turn3({"draw_count": "1"}))


if __name__ == "__main__":
    unittest.main()
