import json
import tempfile
import unittest
from pathlib import Path

from stravagist.config import Settings
from stravagist.storage import read_json, write_json
from stravagist.token_cache import (
    Credentials,
    load_cached_credentials,
    resolve_credentials,
    save_cached_credentials,
)


def _settings(state_dir: str, **env: str) -> Settings:
    values = {"STATE_DIR": state_dir, **env}
    return Settings.from_env(getenv=values.get)


class TestStorage(unittest.TestCase):
    def test_json_round_trip_creates_parent_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / "auth.json"
            write_json(path, {"a": 1})
            self.assertEqual(read_json(path), {"a": 1})
            self.assertFalse(path.with_suffix(".tmp").exists())

    def test_read_json_missing_file_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            self.assertIsNone(read_json(Path(tmpdir) / "missing.json"))

    def test_read_json_rejects_non_object(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "list.json"
            path.write_text("[1, 2]", encoding="utf-8")
            with self.assertRaises(ValueError):
                read_json(path)


class TestTokenCache(unittest.TestCase):
    def test_missing_cache_is_not_an_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            loaded = load_cached_credentials(Path(tmpdir) / "strava-auth.json")
            self.assertTrue(loaded.ok)
            self.assertIsNone(loaded.credentials)

    def test_corrupt_cache_reports_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "strava-auth.json"
            path.write_text("{not json", encoding="utf-8")
            loaded = load_cached_credentials(path)
            self.assertFalse(loaded.ok)
            self.assertIsNone(loaded.credentials)
            self.assertIn("JSONDecodeError", loaded.error)

    def test_save_writes_camel_case_keys(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "strava-auth.json"
            save_cached_credentials(path, Credentials(access_token="acc", refresh_token="ref"))
            self.assertEqual(
                json.loads(path.read_text(encoding="utf-8")),
                {"stravaAccessToken": "acc", "stravaRefreshToken": "ref"},
            )

    def test_cache_overrides_environment_tokens(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = _settings(tmpdir, STRAVA_ACCESS_TOKEN="env-acc", STRAVA_REFRESH_TOKEN="env-ref")
            write_json(
                settings.strava_auth_cache_file,
                {"stravaAccessToken": "cached-acc", "stravaRefreshToken": "cached-ref"},
            )
            credentials = resolve_credentials(settings)
            self.assertEqual(credentials.access_token, "cached-acc")
            self.assertEqual(credentials.refresh_token, "cached-ref")

    def test_blank_cached_values_keep_environment_tokens(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = _settings(tmpdir, STRAVA_ACCESS_TOKEN="env-acc", STRAVA_REFRESH_TOKEN="env-ref")
            write_json(
                settings.strava_auth_cache_file,
                {"stravaAccessToken": "cached-acc", "stravaRefreshToken": ""},
            )
            credentials = resolve_credentials(settings)
            self.assertEqual(credentials.access_token, "cached-acc")
            self.assertEqual(credentials.refresh_token, "env-ref")

    def test_corrupt_cache_falls_back_to_environment(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = _settings(tmpdir, STRAVA_ACCESS_TOKEN="env-acc", STRAVA_REFRESH_TOKEN="env-ref")
            settings.strava_auth_cache_file.parent.mkdir(parents=True, exist_ok=True)
            settings.strava_auth_cache_file.write_text("garbage", encoding="utf-8")
            with self.assertLogs("stravagist.token_cache", level="WARNING") as logs:
                credentials = resolve_credentials(settings)
            self.assertEqual(credentials, Credentials(access_token="env-acc", refresh_token="env-ref"))
            self.assertIn("Error reading auth cache", logs.output[0])


if __name__ == "__main__":
    unittest.main()
