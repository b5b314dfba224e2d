"""Tests for the folio command line."""

from pathlib import Path

import pytest

from folio.__main__ import build_parser, main
from folio.settings_persistence import SettingsPersistence
from folio.view_mode import ViewMode


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    directory = tmp_path / "config"
    monkeypatch.setattr("platformdirs.user_config_dir", lambda *args, **kwargs: str(directory))
    return directory


@pytest.fixture
def document(tmp_path):
    path = tmp_path / "conclusions.txt"
    path.write_text("\n".join(f"line {i}" for i in range(60)), encoding="utf-8")
    return path


def test_version(capsys):
    assert main(["--version"]) == 0
    assert capsys.readouterr().out.startswith("folio ")


def test_missing_file_argument(capsys):
    assert main([]) == 2
    assert "required" in capsys.readouterr().err


def test_unreadable_file(tmp_path, capsys):
    assert main([str(tmp_path / "absent.txt")]) == 1
    assert "cannot read" in capsys.readouterr().err


def test_pages_per_row_argument():
    parser = build_parser()
    assert parser.parse_args(["--pages-per-row", "auto"]).pages_per_row == "auto"
    assert parser.parse_args(["--pages-per-row", "2"]).pages_per_row == 2
    with pytest.raises(SystemExit):
        parser.parse_args(["--pages-per-row", "4"])


def test_scroll_mode_prints_flowing_text(document, capsys):
    assert main([str(document)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "line 0"
    assert len(out) == 60


def test_scroll_mode_break_indicators(document, capsys):
    assert main([str(document), "--break-style", "line"]) == 0
    out = capsys.readouterr().out
    assert " Page 2 " in out


def test_page_mode_prints_frames(document, capsys):
    assert main([str(document), "--mode", "page", "--all"]) == 0
    out = capsys.readouterr().out
    assert "┌ 1/2 * " in out
    assert "┌ 2/2 " in out
    assert "Page 2 / 2" in out


def test_page_argument_activates_that_page(document, capsys):
    assert main([str(document), "--mode", "page", "--all", "--page", "2"]) == 0
    out = capsys.readouterr().out
    assert "┌ 2/2 * " in out
    assert "┌ 1/2 * " not in out


def test_save_remembers_settings(document, config_dir):
    assert main([str(document), "--mode", "continuous", "--zoom", "1.5", "--save"]) == 0
    stored = SettingsPersistence(config_dir=Path(config_dir)).load(str(document))
    assert stored.view_mode is ViewMode.CONTINUOUS
    assert stored.zoom == 1.5
    # Reused on the next run without flags
    assert main([str(document), "--all"]) == 0
