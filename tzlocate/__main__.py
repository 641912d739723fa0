"""Entry point for running the timezone finder package."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence, TextIO

import uvicorn

from .config import resolve_runtime_config
from .datatypes import ResolvedConfig
from .finder import DefaultFinder, build_finder
from .logging_utils import configure_logging, get_logger, log_finder_ready
from .service import ServiceState, app as fastapi_app, attach_state
from .snapshot import SnapshotError


def _serve(config: ResolvedConfig, finder: DefaultFinder) -> None:
    logger = get_logger("tzlocate.runtime")

    state = ServiceState()
    state.set_config(config)
    state.set_finder(finder)
    attach_state(state)

    logger.info(
        "service_starting",
        extra={"event": "service_starting", "host": config.host, "port": config.port},
    )
    uvicorn.run(
        fastapi_app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


def run(args: argparse.Namespace, finder: DefaultFinder, out: TextIO) -> int:
    """Answer the one-shot query described by ``args``; return an exit code."""

    if args.list:
        for name in finder.list_region_names():
            print(name, file=out)
        return 0

    if args.lng is None or args.lat is None:
        print("error: --lng and --lat are required unless --list or --serve is given", file=sys.stderr)
        return 2

    if args.all:
        names = finder.resolve_all(args.lng, args.lat)
        for name in names:
            print(name, file=out)
        return 0 if names else 1

    name = finder.resolve_one(args.lng, args.lat)
    if name is None:
        return 1
    print(name, file=out)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""

    config, args = resolve_runtime_config(argv)
    configure_logging(config.log_level)

    try:
        finder = build_finder(config)
    except SnapshotError as exc:
        get_logger("tzlocate.runtime").error(
            "finder_build_failed", extra={"event": "finder_build_failed", "error": str(exc)}
        )
        return 2
    log_finder_ready(config, finder)

    if args.serve:
        _serve(config, finder)
        return 0
    return run(args, finder, sys.stdout)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
