"""Configuration assembly for the timezone finder."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .datatypes import ResolvedConfig
from .logging_utils import get_logger

logger = get_logger("tzlocate.config")

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"

DEFAULTS: Dict[str, Any] = {
    "region_snapshot_path": PROJECT_ROOT / "data" / "regions.json",
    "tile_snapshot_path": PROJECT_ROOT / "data" / "tiles.json",
    "log_level": "INFO",
    "host": "127.0.0.1",
    "port": 8000,
}

ENV_CASTERS: Dict[str, Any] = {
    "REGION_SNAPSHOT": str,
    "TILE_SNAPSHOT": str,
    "LOG_LEVEL": str,
    "SERVICE_HOST": str,
    "SERVICE_PORT": int,
}

# Empty TILE_SNAPSHOT/--tiles value disables the tile pyramid.
_DISABLED = {"", "none", "off"}


def build_cli() -> argparse.ArgumentParser:
    """Construct the top-level CLI."""

    parser = argparse.ArgumentParser(description="Offline coordinate to timezone lookup")

    action_group = parser.add_mutually_exclusive_group()
    action_group.add_argument(
        "--serve",
        action="store_true",
        help="Serve lookups over HTTP instead of answering a single query",
    )
    action_group.add_argument(
        "--list",
        action="store_true",
        help="Print every known timezone name and exit",
    )

    parser.add_argument("--lng", type=float, help="Longitude of the point to resolve")
    parser.add_argument("--lat", type=float, help="Latitude of the point to resolve")
    parser.add_argument(
        "--all",
        action="store_true",
        help="Print every matching timezone instead of the best one",
    )
    parser.add_argument(
        "--regions",
        type=str,
        help="Path to the decoded region snapshot (JSON or YAML)",
    )
    parser.add_argument(
        "--tiles",
        type=str,
        help="Path to the decoded tile pyramid snapshot; 'none' disables it",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level for the structured logger",
    )
    parser.add_argument("--host", type=str, help="Bind address for --serve")
    parser.add_argument("--port", type=int, help="Bind port for --serve")
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Path to a .env file (defaults to project root .env)",
    )

    return parser


def load_env_file(path: Optional[Path]) -> Dict[str, str]:
    """Parse a dotenv-style file into a dictionary."""

    env: Dict[str, str] = {}
    if not path or not path.exists():
        return env

    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if "=" not in stripped:
            logger.warning(
                "env_line_malformed",
                extra={"event": "env_line_malformed", "path": path, "line": lineno},
            )
            continue
        key, value = stripped.split("=", 1)
        key = key.strip()
        if key not in ENV_CASTERS:
            logger.warning(
                "env_key_unknown",
                extra={"event": "env_key_unknown", "path": path, "line": lineno, "key": key},
            )
        env[key] = value.strip().strip("'\"")
    return env


def load_environment(env_path: Optional[Path] = None) -> Dict[str, str]:
    """Combine .env values with process environment variables."""

    combined = load_env_file(env_path)
    for key in ENV_CASTERS:
        if key in os.environ:
            combined[key] = os.environ[key]
    return combined


def normalise_environment(raw_env: Mapping[str, str]) -> Dict[str, Any]:
    """Coerce environment values to their expected Python types."""

    typed: Dict[str, Any] = {}
    for key, caster in ENV_CASTERS.items():
        if key not in raw_env:
            continue
        try:
            typed[key] = caster(raw_env[key])
        except ValueError as exc:
            raise ValueError(f"Invalid value for {key}: {raw_env[key]!r}") from exc
    return typed


def _cli_or_env(
    cli_value: Any,
    env: Mapping[str, Any],
    env_key: str,
    default: Any,
) -> Any:
    """Resolution helper obeying CLI > env > default."""

    if cli_value is not None:
        return cli_value
    if env_key in env:
        return env[env_key]
    return default


def resolve_config(args: argparse.Namespace, env: Mapping[str, Any]) -> ResolvedConfig:
    """Build a ResolvedConfig using precedence rules."""

    region_snapshot_path = Path(
        _cli_or_env(
            getattr(args, "regions", None),
            env,
            "REGION_SNAPSHOT",
            DEFAULTS["region_snapshot_path"],
        )
    )

    tile_value = _cli_or_env(
        getattr(args, "tiles", None),
        env,
        "TILE_SNAPSHOT",
        DEFAULTS["tile_snapshot_path"],
    )
    tile_snapshot_path: Optional[Path] = None
    if tile_value is not None and str(tile_value).strip().lower() not in _DISABLED:
        tile_snapshot_path = Path(tile_value)

    log_level = str(
        _cli_or_env(getattr(args, "log_level", None), env, "LOG_LEVEL", DEFAULTS["log_level"])
    ).upper()

    host = str(_cli_or_env(getattr(args, "host", None), env, "SERVICE_HOST", DEFAULTS["host"]))
    port = int(_cli_or_env(getattr(args, "port", None), env, "SERVICE_PORT", DEFAULTS["port"]))

    if not 0 < port < 65536:
        raise ValueError("port must be between 1 and 65535")
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ValueError(f"Unknown log level '{log_level}'")

    raw_cli = {k: v for k, v in vars(args).items() if not k.startswith("_")}

    return ResolvedConfig(
        region_snapshot_path=region_snapshot_path,
        tile_snapshot_path=tile_snapshot_path,
        log_level=log_level,
        host=host,
        port=port,
        raw_cli=raw_cli,
        raw_env=dict(env),
    )


def resolve_runtime_config(
    argv: Optional[Sequence[str]] = None,
    env_path: Optional[Path] = None,
) -> Tuple[ResolvedConfig, argparse.Namespace]:
    """End-to-end configuration resolution helper."""

    parser = build_cli()
    args = parser.parse_args(argv)

    effective_env_path = env_path or (
        Path(getattr(args, "env_file")) if getattr(args, "env_file", None) else DEFAULT_ENV_FILE
    )
    raw_env = load_environment(effective_env_path)
    typed_env = normalise_environment(raw_env)

    config = resolve_config(args, typed_env)
    return config, args
