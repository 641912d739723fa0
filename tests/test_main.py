"""Tests for the command-line entry point."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, List

import pytest

from tests.sample_data import BEIJING, MID_PACIFIC
from tzlocate import config
from tzlocate.__main__ import main, run
from tzlocate.finder import DefaultFinder


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for key in config.ENV_CASTERS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config, "DEFAULT_ENV_FILE", tmp_path / "absent.env")
    # Keep the root logger pointed at pytest's handlers.
    monkeypatch.setattr("tzlocate.__main__.configure_logging", lambda level: None)


def _run(finder: DefaultFinder, argv: List[str]) -> tuple[int, str]:
    args = config.build_cli().parse_args(argv)
    out = io.StringIO()
    code = run(args, finder, out)
    return code, out.getvalue()


def test_run_single_lookup(finder: DefaultFinder):
    code, output = _run(finder, ["--lng", str(BEIJING[0]), "--lat", str(BEIJING[1])])
    assert code == 0
    assert output == "Asia/Shanghai\n"


def test_run_all_matches(finder: DefaultFinder):
    code, output = _run(finder, ["--lng", "11.5", "--lat", "11.5", "--all"])
    assert code == 0
    assert output.splitlines() == ["Test/First", "Test/Second"]


def test_run_no_match_exit_code(finder: DefaultFinder):
    code, output = _run(finder, ["--lng", str(MID_PACIFIC[0]), "--lat", str(MID_PACIFIC[1])])
    assert code == 1
    assert output == ""


def test_run_list(finder: DefaultFinder):
    code, output = _run(finder, ["--list"])
    assert code == 0
    assert output.splitlines() == finder.list_region_names()


def test_run_requires_coordinates(finder: DefaultFinder):
    code, _ = _run(finder, ["--lng", "10.0"])
    assert code == 2


def test_main_end_to_end(snapshot_files: Dict[str, Path], capsys: pytest.CaptureFixture[str]):
    code = main(
        [
            "--regions",
            str(snapshot_files["regions"]),
            "--tiles",
            str(snapshot_files["tiles"]),
            "--lng",
            "139.4382",
            "--lat",
            "36.4432",
        ]
    )
    assert code == 0
    assert capsys.readouterr().out == "Asia/Tokyo\n"


def test_main_reports_bad_snapshot(tmp_path: Path):
    code = main(["--regions", str(tmp_path / "absent.json"), "--tiles", "none", "--list"])
    assert code == 2


def test_main_logs_finder_ready(snapshot_files: Dict[str, Path], caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.INFO, logger="tzlocate.runtime"):
        code = main(["--regions", str(snapshot_files["regions"]), "--tiles", "none", "--list"])

    assert code == 0
    ready = [record for record in caplog.records if getattr(record, "event", None) == "finder_ready"]
    assert len(ready) == 1
    assert ready[0].regions == 9
    assert ready[0].tiles == 0
