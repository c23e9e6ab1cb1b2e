import tempfile
import unittest
from unittest.mock import Mock, patch

from stravagist.config import ConfigurationError, Settings
from stravagist.pipeline import run_once


def _settings(state_dir: str, **env: str) -> Settings:
    values = {
        "STATE_DIR": state_dir,
        "STRAVA_CLIENT_ID": "client-id",
        "STRAVA_CLIENT_SECRET": "client-secret",
        "STRAVA_ATHLETE_ID": "12345",
        "STRAVA_REFRESH_TOKEN": "ref",
        "GIST_ID": "abc123",
        "GH_TOKEN": "gh-token",
        "GIST_TITLE": "My Strava Stats",
        **env,
    }
    return Settings.from_env(getenv=values.get)


def _strava_client() -> Mock:
    client = Mock()
    client.get_athlete_stats.return_value = {
        "ytd_run_totals": {"distance": 10000, "moving_time": 3600},
        "ytd_swim_totals": {"distance": 0, "moving_time": 0},
        "ytd_ride_totals": {"distance": 10000, "moving_time": 1800},
    }
    client.get_recent_activities.return_value = []
    return client


class TestRunOnce(unittest.TestCase):
    def test_refreshes_then_fetches_then_publishes(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            strava = _strava_client()
            gist = Mock()

            result = run_once(_settings(tmpdir), strava_client=strava, gist_client=gist)

            self.assertEqual(result["status"], "updated")
            self.assertEqual(result["gist_id"], "abc123")
            self.assertEqual(
                [call[0] for call in strava.method_calls],
                ["refresh_access_token", "get_athlete_stats", "get_recent_activities"],
            )
            strava.get_recent_activities.assert_called_once_with(per_page=30)
            gist.update_gist.assert_called_once()
            content, title = gist.update_gist.call_args.args
            self.assertEqual(title, "My Strava Stats")
            self.assertIn("7 Days:", content)
            self.assertIn("Running", content)
            self.assertEqual(result["line_count"], len(content.splitlines()))

    def test_dry_run_does_not_publish(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            gist = Mock()
            result = run_once(_settings(tmpdir), dry_run=True, strava_client=_strava_client(), gist_client=gist)
            self.assertEqual(result["status"], "dry_run")
            gist.update_gist.assert_not_called()

    def test_fetch_failure_stops_before_publish(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            strava = _strava_client()
            strava.get_athlete_stats.side_effect = RuntimeError("network down")
            gist = Mock()
            with self.assertRaises(RuntimeError):
                run_once(_settings(tmpdir), strava_client=strava, gist_client=gist)
            strava.refresh_access_token.assert_called_once()
            gist.update_gist.assert_not_called()

    def test_invalid_settings_fail_fast(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            strava = _strava_client()
            with self.assertRaises(ConfigurationError):
                run_once(_settings(tmpdir, GIST_ID=""), strava_client=strava, gist_client=Mock())
            strava.refresh_access_token.assert_not_called()

    def test_unknown_timezone_falls_back_to_utc(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertLogs("stravagist.pipeline", level="WARNING"):
                result = run_once(
                    _settings(tmpdir, TZ="Mars/Olympus_Mons"),
                    strava_client=_strava_client(),
                    gist_client=Mock(),
                )
            self.assertEqual(result["status"], "updated")

    def test_main_passes_dry_run_flag(self) -> None:
        with patch("stravagist.pipeline.run_once", return_value={"status": "dry_run"}) as run:
            with patch("sys.argv", ["strava-gist-stats", "--dry-run"]):
                from stravagist.pipeline import main

                main()
        run.assert_called_once_with(dry_run=True)


if __name__ == "__main__":
    unittest.main()
