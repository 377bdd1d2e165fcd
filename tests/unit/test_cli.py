"""Unit tests for the command line entry point."""

import json
import os
from datetime import UTC, datetime
from pathlib import Path
from unittest import mock

import pytest
import yaml

from carbontrackr.__main__ import (
    EXIT_BUSINESS_ERROR,
    EXIT_CONFIG_ERROR,
    format_leaderboard,
    main,
    parse_args,
    run_command,
)
from carbontrackr.analytics import CarbonAnalyticsService
from carbontrackr.analytics.models import Activity, Category, UserRecord
from carbontrackr.config import CarbonConfig
from carbontrackr.config.profiles import PROFILE_ENV
from carbontrackr.storage.memory import InMemoryAnalyticsStore

NOW = datetime(2024, 1, 17, 12, 0, tzinfo=UTC)


@pytest.fixture
def service() -> CarbonAnalyticsService:
    store = InMemoryAnalyticsStore()
    store.save_user(UserRecord("alice", "alice", "Alice", datetime(2023, 1, 1, tzinfo=UTC)))
    store.save_user(UserRecord("bob", "bob", "Bob", datetime(2023, 1, 2, tzinfo=UTC)))
    for user_id, category, value, day in [
        ("alice", Category.TRANSPORT, 10.0, 9),
        ("alice", Category.FOOD, 5.0, 10),
        ("alice", Category.FOOD, 2.0, 16),
        ("bob", Category.ENERGY, 3.0, 16),
    ]:
        store.save_activity(
            Activity(user_id, category, "logged", value, datetime(2024, 1, day, tzinfo=UTC))
        )
    return CarbonAnalyticsService(store, clock=lambda: NOW)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_subcommand_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])

    def test_summary_options(self) -> None:
        args = parse_args(["--json", "summary", "--user", "alice", "--week", "2024-01-08"])

        assert args.command == "summary"
        assert args.user == "alice"
        assert args.week == "2024-01-08"
        assert args.json is True


class TestRunCommand:
    """Tests for run_command against a seeded store."""

    def test_dashboard(
        self, service: CarbonAnalyticsService, capsys: pytest.CaptureFixture[str]
    ) -> None:
        run_command(parse_args(["dashboard", "--user", "alice"]), service, CarbonConfig())

        out = capsys.readouterr().out
        assert "Dashboard for alice" in out
        assert "Total: 17.00 kg" in out
        assert "Top category: Transport" in out

    def test_generate_then_list(
        self, service: CarbonAnalyticsService, capsys: pytest.CaptureFixture[str]
    ) -> None:
        run_command(parse_args(["generate", "--user", "alice"]), service, CarbonConfig())
        run_command(parse_args(["--json", "summaries", "--user", "alice"]), service, CarbonConfig())

        out = capsys.readouterr().out
        assert "Week 2024-01-08 - 2024-01-14 (generated)" in out
        listed = json.loads(out[out.index("[") :])
        assert listed[0]["total_emissions"] == 15.0
        assert listed[0]["highest_emission_category"]["category"] == "Transport"

    def test_current_week(
        self, service: CarbonAnalyticsService, capsys: pytest.CaptureFixture[str]
    ) -> None:
        run_command(parse_args(["current", "--user", "alice"]), service, CarbonConfig())

        out = capsys.readouterr().out
        assert "(live)" in out
        assert "Total: 2.00 kg" in out

    def test_leaderboard_uses_config_limit(
        self, service: CarbonAnalyticsService, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config = CarbonConfig()
        config.leaderboard.limit = 1

        run_command(parse_args(["--json", "leaderboard"]), service, config)

        entries = json.loads(capsys.readouterr().out)
        assert len(entries) == 1
        assert entries[0]["user_id"] == "bob"
        assert entries[0]["rank"] == 1

    def test_format_empty_leaderboard(self) -> None:
        assert format_leaderboard([]) == "No participants yet."


class TestMain:
    """Tests for main with the in-memory test profile."""

    def test_leaderboard_empty(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--profile", "test", "leaderboard"]) == 0
        assert "No participants yet." in capsys.readouterr().out

    def test_profile_from_environment(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Without --profile the environment selects the profile."""
        with mock.patch.dict(os.environ, {PROFILE_ENV: "test"}):
            assert main(["leaderboard"]) == 0
        assert "No participants yet." in capsys.readouterr().out

    def test_generate_without_activity(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Business outcomes exit with their own code."""
        assert main(["--profile", "test", "generate", "--user", "alice"]) == EXIT_BUSINESS_ERROR
        assert "No activities" in capsys.readouterr().err

    def test_invalid_week(self) -> None:
        code = main(["--profile", "test", "summary", "--user", "alice", "--week", "2024-01-16"])
        assert code == EXIT_BUSINESS_ERROR

    def test_missing_config_file(self, tmp_path: Path) -> None:
        code = main(["--config", str(tmp_path / "missing.yaml"), "leaderboard"])
        assert code == EXIT_CONFIG_ERROR

    def test_invalid_threshold(self, tmp_path: Path) -> None:
        """An out-of-range tip threshold is a config error."""
        path = tmp_path / "bad.yaml"
        path.write_text(
            yaml.dump(
                {
                    "carbontrackr": {
                        "storage": {"backend": "memory"},
                        "tips": {"dominance_threshold": 3},
                    }
                }
            )
        )

        assert main(["--config", str(path), "leaderboard"]) == EXIT_CONFIG_ERROR
