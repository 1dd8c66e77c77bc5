"""Tests for the maintenance commands of the CLI."""

import pytest
from typer.testing import CliRunner

from skill_roadmap import cli
from skill_roadmap.config import AppConfig, CacheConfig

runner = CliRunner()


@pytest.fixture
def cache_dir(tmp_path, monkeypatch):
    config = AppConfig(
        cache=CacheConfig(
            db_path=str(tmp_path / "cache.db"),
            analysis_db_path=str(tmp_path / "analyses.db"),
            runs_db_path=str(tmp_path / "runs.db"),
        )
    )
    monkeypatch.setattr(cli, "load_config", lambda: config)
    return tmp_path


def _corrupt(path):
    path.write_bytes(b"this is not a sqlite database\n" * 64)


class TestMaintenanceCommands:
    def test_history_empty(self, cache_dir):
        result = runner.invoke(cli.app, ["history"])
        assert result.exit_code == 0
        assert "No runs recorded" in result.output

    def test_cache_stats_on_fresh_databases(self, cache_dir):
        result = runner.invoke(cli.app, ["cache-stats"])
        assert result.exit_code == 0
        assert "Occupations: 0 active" in result.output

    def test_history_reports_unreadable_run_log(self, cache_dir):
        _corrupt(cache_dir / "runs.db")
        result = runner.invoke(cli.app, ["history"])
        assert result.exit_code == 1
        assert "not a database" in result.output
        assert "Traceback" not in result.output

    def test_cache_stats_reports_unreadable_cache(self, cache_dir):
        _corrupt(cache_dir / "analyses.db")
        result = runner.invoke(cli.app, ["cache-stats"])
        assert result.exit_code == 1
        assert "Analysis cache" in result.output

    def test_cache_sweep_reports_unreadable_cache(self, cache_dir):
        _corrupt(cache_dir / "cache.db")
        result = runner.invoke(cli.app, ["cache-sweep"])
        assert result.exit_code == 1
        assert "Occupation cache" in result.output
