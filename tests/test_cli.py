"""Tests for the typer command line interface."""

import json
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from demoreel.analysis.events import GameEvent
from demoreel.cli import app
from demoreel.core.config import reset_config
from demoreel.core.constants import EventKind
from demoreel.parser import DemoData

PLAYER = "76561198055776914"

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run each command from an empty directory with no DEMOREEL_* overrides."""
    import os

    for key in list(os.environ):
        if key.startswith("DEMOREEL_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def demo_file(tmp_path):
    path = tmp_path / "match.dem"
    path.write_bytes(b"PBDEMS2\x00")
    return path


@pytest.fixture
def parsed(demo_file):
    """Patch the parser to return a two-round match."""
    data = DemoData(
        file_path=demo_file,
        steam_id=PLAYER,
        tick_rate=64,
        map_name="de_inferno",
        events=[
            GameEvent(EventKind.PLAYER_SPAWN, 100, PLAYER),
            GameEvent(EventKind.PLAYER_DEATH, 1000, PLAYER),
            GameEvent(EventKind.ROUND_OFFICIALLY_ENDED, 2000),
            GameEvent(EventKind.PLAYER_SPAWN, 2100, PLAYER),
            GameEvent(EventKind.MATCH_WON, 6000),
        ],
        tick_samples=[],
    )
    with patch("demoreel.cli.DemoParser") as parser_cls:
        parser_cls.return_value.parse.return_value = data
        yield parser_cls


class TestVoiceCommand:
    """Tests for `demoreel voice`."""

    def test_mask(self):
        """The decimal mask is printed."""
        result = runner.invoke(app, ["voice", "4", "6", "8", "9", "11"])
        assert result.exit_code == 0
        assert "1448" in result.output
        assert "tv_listen_voice_indices 1448" in result.output

    def test_invalid_slot(self):
        """Out-of-range slots fail."""
        result = runner.invoke(app, ["voice", "3"])
        assert result.exit_code == 1
        assert "Invalid player number" in result.output


class TestInitConfigCommand:
    """Tests for `demoreel init-config`."""

    def test_writes_file(self, tmp_path):
        """A default YAML file is written."""
        path = tmp_path / "demoreel.yaml"
        result = runner.invoke(app, ["init-config", str(path)])
        assert result.exit_code == 0
        assert yaml.safe_load(path.read_text())["clips"]["tick_rate"] == 64

    def test_refuses_overwrite(self, tmp_path):
        """Existing files need --force."""
        path = tmp_path / "demoreel.yaml"
        path.write_text("clips: {}\n")
        assert runner.invoke(app, ["init-config", str(path)]).exit_code == 1
        assert runner.invoke(app, ["init-config", str(path), "--force"]).exit_code == 0
        assert "tracked_buttons" in path.read_text()


class TestPlanCommands:
    """Tests for `demoreel plan` and `demoreel sequences`."""

    def test_sequences(self, demo_file, parsed):
        """Each window is printed as a start/end pair."""
        result = runner.invoke(app, ["sequences", str(demo_file), "--player", PLAYER])
        assert result.exit_code == 0
        assert "740 1192" in result.output
        assert "2740 6000" in result.output
        parsed.return_value.parse.assert_called_once_with(PLAYER)

    def test_plan_exports_json(self, demo_file, parsed, tmp_path):
        """--output writes the plan as JSON."""
        out = tmp_path / "plan.json"
        result = runner.invoke(
            app,
            ["plan", str(demo_file), "-p", PLAYER, "-o", str(out), "--clips-dir", str(tmp_path / "clips")],
        )
        assert result.exit_code == 0
        data = json.loads(out.read_text())
        assert data["demo_info"]["map"] == "de_inferno"
        assert [(c["start_tick"], c["end_tick"]) for c in data["clips"]] == [(740, 1192), (2740, 6000)]
        assert data["player"]["voice_mask"] is None
        assert data["concat"]["final_path"] == str(tmp_path / "clips" / "final.overlay.mp4")

    def test_plan_with_config(self, demo_file, parsed, tmp_path):
        """Timing settings are read from --config."""
        cfg = tmp_path / "custom.yaml"
        cfg.write_text("clips:\n  death_padding_seconds: 0\n")
        result = runner.invoke(app, ["sequences", str(demo_file), "-p", PLAYER, "-c", str(cfg)])
        assert result.exit_code == 0
        assert "740 1000" in result.output

    def test_missing_config(self, demo_file, parsed, tmp_path):
        """A missing config file is an error."""
        result = runner.invoke(
            app, ["sequences", str(demo_file), "-p", PLAYER, "-c", str(tmp_path / "nope.yaml")]
        )
        assert result.exit_code == 1

    def test_parse_failure(self, demo_file):
        """Parser errors exit with status 1."""
        with patch("demoreel.cli.DemoParser", side_effect=ImportError("demoparser2 is required")):
            result = runner.invoke(app, ["sequences", str(demo_file), "-p", PLAYER])
        assert result.exit_code == 1
        assert "Error parsing demo" in result.output

    def test_no_match_end(self, demo_file, parsed):
        """Incomplete demos exit with status 1."""
        data = parsed.return_value.parse.return_value
        data.events = data.events[:-1]
        result = runner.invoke(app, ["sequences", str(demo_file), "-p", PLAYER])
        assert result.exit_code == 1
        assert "No match win event found" in result.output

    def test_missing_demo(self, tmp_path):
        """Typer rejects a demo path that does not exist."""
        result = runner.invoke(app, ["sequences", str(tmp_path / "nope.dem"), "-p", PLAYER])
        assert result.exit_code != 0
