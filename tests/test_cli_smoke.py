from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bracket_sync.cli import common
from bracket_sync.cli.app import app
from bracket_sync.core.config import Settings

SNAPSHOT = {
    "id": "local",
    "name": "Local NCAA Tournament",
    "bracket": {
        "rounds": [
            {
                "number": 4,
                "matchups": [
                    {
                        "id": "77",
                        "note": "EAST",
                        "competitors": [
                            {
                                "homeAway": "home",
                                "team": {"id": "150", "displayName": "Duke Blue Devils"},
                                "curatedRank": {"current": 1},
                            },
                            {
                                "homeAway": "away",
                                "team": {"id": "97", "displayName": "Arizona Wildcats"},
                                "curatedRank": {"current": 4},
                            },
                        ],
                    }
                ],
            }
        ]
    },
}


def _write_snapshot(tmp_path: Path) -> Path:
    path = tmp_path / "override.json"
    path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
    return path


def test_cli_help_smoke() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("bracket", "refresh", "watch", "detail"):
        assert command in result.stdout


def test_bracket_command_prints_local_override(tmp_path: Path) -> None:
    path = _write_snapshot(tmp_path)

    runner = CliRunner()
    result = runner.invoke(app, ["bracket", "--bracket-json", str(path), "--year", "2026"])

    assert result.exit_code == 0, result.output
    assert "Local NCAA Tournament" in result.stdout
    assert "via local_override" in result.stdout
    assert "East:" in result.stdout
    assert "Sweet 16:" in result.stdout
    assert "(1) Duke Blue Devils vs (4) Arizona Wildcats" in result.stdout


def test_watch_command_stops_after_ticks(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _write_snapshot(tmp_path)
    # Nothing listens on the discard port, so the live refresh fails fast and softly.
    monkeypatch.setattr(
        common,
        "settings",
        Settings(refresh_interval_s=0.0, espn_site_base_url="http://127.0.0.1:9"),
    )

    runner = CliRunner()
    result = runner.invoke(app, ["watch", "--bracket-json", str(path), "--ticks", "1"])

    assert result.exit_code == 0, result.output
    assert "Loaded Local NCAA Tournament via local_override" in result.output
