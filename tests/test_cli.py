"""
Tests for the command line interface.
"""

import json
import os
from unittest.mock import patch

import pytest
from rich.errors import LiveError
from rich.live import Live
from typer.testing import CliRunner

from cabinete.cli import app
from cabinete.config import CONFIG_ENV_VAR, GranularityPolicy, OrganizerConfig

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's real ~/.cabinete.rc out of the tests."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.setattr("cabinete.config.DEFAULT_CONFIG_PATH", tmp_path / "absent.rc")


def test_organize_with_display(source_tree):
    result = runner.invoke(app, ["organize", "--dir", str(source_tree)])

    assert result.exit_code == 0, result.output
    assert "Files have been organized!" in result.output
    assert (source_tree / "2024" / "03 - March" / "07" / "a.jpg").exists()
    assert (source_tree / "2023" / "12 - December" / "25" / "c.jpg").exists()


def test_organize_by_year(source_tree):
    result = runner.invoke(app, ["organize", "-d", str(source_tree), "--year", "--no-display"])

    assert result.exit_code == 0, result.output
    assert (source_tree / "2024" / "a.jpg").exists()
    assert (source_tree / "2023" / "c.jpg").exists()


def test_organize_by_month_within_year(source_tree):
    result = runner.invoke(app, ["organize", "-d", str(source_tree), "-y", "-m", "--no-display"])

    assert result.exit_code == 0, result.output
    assert (source_tree / "2024" / "03 - March" / "b.jpg").exists()


def test_organize_by_day(source_tree):
    result = runner.invoke(app, ["organize", "-d", str(source_tree), "-g", "day", "--no-display"])

    assert result.exit_code == 0, result.output
    assert (source_tree / "07" / "a.jpg").exists()
    assert (source_tree / "25" / "c.jpg").exists()


def test_dry_run_reports_without_moving(source_tree):
    result = runner.invoke(app, ["organize", "-d", str(source_tree), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Would organize 3 files" in result.output
    assert (source_tree / "a.jpg").exists()


def test_move_failures_keep_exit_code_zero(source_tree):
    real_rename = os.rename

    def flaky_rename(src, dst):
        if os.path.basename(src) == "b.jpg":
            raise PermissionError(13, "Permission denied")
        return real_rename(src, dst)

    with patch("cabinete.mover.os.rename", side_effect=flaky_rename):
        result = runner.invoke(app, ["organize", "-d", str(source_tree), "--year", "--no-display"])

    assert result.exit_code == 0, result.output
    assert "Failed" in result.output
    assert (source_tree / "b.jpg").exists()
    assert (source_tree / "2024" / "a.jpg").exists()


def test_directory_is_required():
    result = runner.invoke(app, ["organize"])
    assert result.exit_code != 0


def test_directory_error_exits_nonzero(source_tree):
    (source_tree / "2024").write_text("not a folder")
    result = runner.invoke(app, ["organize", "-d", str(source_tree), "-y", "-e", "2024"])

    assert result.exit_code == 1
    assert "Files have been organized!" not in result.output


def test_display_start_error_exits_nonzero(source_tree):
    with patch.object(Live, "start", side_effect=LiveError("busy")):
        result = runner.invoke(app, ["organize", "-d", str(source_tree)])

    assert result.exit_code == 1
    assert (source_tree / "a.jpg").exists()


def test_init_and_show_config(tmp_path):
    config_file = tmp_path / "cabinete.rc"
    result = runner.invoke(app, ["init", "-g", "year", "-e", "*.tmp", "--config", str(config_file)])

    assert result.exit_code == 0, result.output
    data = json.loads(config_file.read_text())
    assert data["granularity"] == "year"
    assert data["exclude_patterns"] == ["*.tmp"]

    result = runner.invoke(app, ["show-config", "--config", str(config_file)])
    assert result.exit_code == 0, result.output
    assert "year" in result.output
    assert "*.tmp" in result.output


def test_config_granularity_is_the_default(tmp_path, source_tree):
    config_file = tmp_path / "cabinete.rc"
    OrganizerConfig(granularity=GranularityPolicy.YEAR).save_config(config_file)

    result = runner.invoke(app, ["organize", "-d", str(source_tree), "-c", str(config_file), "--no-display"])

    assert result.exit_code == 0, result.output
    assert (source_tree / "2024" / "a.jpg").exists()


def test_missing_explicit_config(tmp_path, source_tree):
    result = runner.invoke(app, ["organize", "-d", str(source_tree), "-c", str(tmp_path / "nope.rc")])
    assert result.exit_code == 1


def test_config_from_environment(tmp_path, monkeypatch):
    config_file = tmp_path / "env.rc"
    config_file.write_text(json.dumps({"granularity": "day", "skip_hidden": True}))
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

    config = OrganizerConfig.load_config()

    assert config.granularity is GranularityPolicy.DAY
    assert config.skip_hidden


def test_invalid_config_values(tmp_path):
    config_file = tmp_path / "bad.rc"
    config_file.write_text(json.dumps({"refresh_per_second": 0}))
    with pytest.raises(ValueError):
        OrganizerConfig.load_config(config_file)

    config_file.write_text("{not json")
    with pytest.raises(ValueError):
        OrganizerConfig.load_config(config_file)
