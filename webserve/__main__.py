"""Command-line entry point for the static file server."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from .app import run
from .config import ConfigError, build_parser, load_config
from .watcher import WatcherStartError


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    try:
        config = load_config(args)
    except ConfigError as exc:
        logging.error("%s", exc)
        raise SystemExit(2) from exc

    try:
        run(config)
    except WatcherStartError as exc:
        logging.error("Live reload requested but unavailable: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
