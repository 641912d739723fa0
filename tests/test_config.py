from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tzlocate import config


def _clear_known_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in config.ENV_CASTERS:
        monkeypatch.delenv(key, raising=False)


def test_build_cli_parses_point_query():
    parser = config.build_cli()
    args = parser.parse_args(["--lng", "116.3883", "--lat", "39.9289", "--all"])
    assert args.lng == pytest.approx(116.3883)
    assert args.lat == pytest.approx(39.9289)
    assert args.all is True
    assert args.serve is False


def test_build_cli_serve_and_list_are_exclusive():
    parser = config.build_cli()
    with pytest.raises(SystemExit):
        parser.parse_args(["--serve", "--list"])


def test_resolve_runtime_config_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _clear_known_env(monkeypatch)
    env_file = tmp_path / ".env"
    env_file.write_text("", encoding="utf-8")

    resolved, _ = config.resolve_runtime_config(argv=[], env_path=env_file)

    assert resolved.region_snapshot_path == config.DEFAULTS["region_snapshot_path"]
    assert resolved.tile_snapshot_path == config.DEFAULTS["tile_snapshot_path"]
    assert resolved.log_level == "INFO"
    assert resolved.port == 8000


def test_environment_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _clear_known_env(monkeypatch)
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "# snapshot locations",
                "REGION_SNAPSHOT=/srv/tz/regions.json",
                "TILE_SNAPSHOT='/srv/tz/tiles.json'",
                "LOG_LEVEL=debug",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("SERVICE_PORT", "9100")

    resolved, _ = config.resolve_runtime_config(argv=[], env_path=env_file)

    assert resolved.region_snapshot_path == Path("/srv/tz/regions.json")
    assert resolved.tile_snapshot_path == Path("/srv/tz/tiles.json")
    assert resolved.log_level == "DEBUG"
    assert resolved.port == 9100


def test_cli_precedence_overrides_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _clear_known_env(monkeypatch)
    env_file = tmp_path / ".env"
    env_file.write_text("REGION_SNAPSHOT=/srv/tz/regions.json\nSERVICE_HOST=0.0.0.0", encoding="utf-8")

    resolved, _ = config.resolve_runtime_config(
        argv=["--regions", "local.yml", "--host", "::1", "--port", "8081"],
        env_path=env_file,
    )

    assert resolved.region_snapshot_path == Path("local.yml")
    assert resolved.host == "::1"
    assert resolved.port == 8081


def test_tiles_can_be_disabled(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _clear_known_env(monkeypatch)
    monkeypatch.setenv("TILE_SNAPSHOT", "none")

    resolved, _ = config.resolve_runtime_config(argv=[], env_path=tmp_path / "missing.env")
    assert resolved.tile_snapshot_path is None


def test_invalid_values_are_rejected(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _clear_known_env(monkeypatch)
    with pytest.raises(ValueError):
        config.resolve_runtime_config(argv=["--port", "70000"], env_path=tmp_path / "missing.env")
    with pytest.raises(ValueError):
        config.resolve_runtime_config(argv=["--log-level", "chatty"], env_path=tmp_path / "missing.env")

    monkeypatch.setenv("SERVICE_PORT", "eighty")
    with pytest.raises(ValueError, match="SERVICE_PORT"):
        config.resolve_runtime_config(argv=[], env_path=tmp_path / "missing.env")


def test_redacted_dict_is_serialisable(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _clear_known_env(monkeypatch)
    resolved, _ = config.resolve_runtime_config(argv=["--tiles", "off"], env_path=tmp_path / "missing.env")
    snapshot = resolved.redacted_dict()
    assert snapshot["tile_snapshot_path"] is None
    assert isinstance(snapshot["region_snapshot_path"], str)


def test_env_file_warns_about_lines_it_cannot_use(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "REGION_SNAPSHOT=/srv/tz/regions.json",
                "TILE_SNAPSHOT /srv/tz/tiles.json",
                "TILE_SNAPSHOTS=/srv/tz/tiles.json",
            ]
        ),
        encoding="utf-8",
    )

    with caplog.at_level(logging.WARNING, logger="tzlocate.config"):
        env = config.load_env_file(env_file)

    assert env["REGION_SNAPSHOT"] == "/srv/tz/regions.json"
    assert "TILE_SNAPSHOT" not in env
    warnings = [(record.event, record.line) for record in caplog.records]
    assert warnings == [("env_line_malformed", 2), ("env_key_unknown", 3)]
    assert caplog.records[1].key == "TILE_SNAPSHOTS"
