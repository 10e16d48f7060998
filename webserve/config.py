"""Command line parsing and the immutable server configuration."""
from __future__ import annotations

import argparse
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from .broadcaster import DEFAULT_CAPACITY
from .resolver import canonical_root

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080


class ConfigError(Exception):
    """Raised when the command line describes an unusable server."""


class Transport(str, Enum):
    """How the injected client learns about changes."""

    POLL = "poll"
    WEBSOCKET = "websocket"


@dataclass(frozen=True)
class ServeConfig:
    """Options fixed at startup and shared read-only with every request."""

    root: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    spa: bool = False
    watch: bool = False
    transport: Transport = Transport.POLL
    capacity: int = DEFAULT_CAPACITY

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webserve",
        description="A simple static file server with live reload.",
    )
    parser.add_argument(
        "-d",
        "--dir",
        dest="directory",
        help="Directory to serve files from (default: current directory)",
    )
    parser.add_argument("--host", default=DEFAULT_HOST, help="Address to bind to (default: %(default)s)")
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help="Port to listen on (default: %(default)s)",
    )
    parser.add_argument(
        "--spa",
        action="store_true",
        help="Single page application mode: fall back to index.html for unknown paths",
    )
    parser.add_argument(
        "-w",
        "--watch",
        action="store_true",
        help="Reload connected browsers when files change",
    )
    parser.add_argument(
        "--transport",
        choices=[t.value for t in Transport],
        default=Transport.POLL.value,
        help="Live reload transport used by the injected script (default: %(default)s)",
    )
    parser.add_argument(
        "--reload-buffer",
        dest="capacity",
        type=int,
        default=DEFAULT_CAPACITY,
        help="Pending change events kept per live reload client (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def load_config(args: argparse.Namespace) -> ServeConfig:
    """Validate parsed arguments and freeze them into a ``ServeConfig``."""

    root = canonical_root(args.directory or Path.cwd())
    if not root.exists():
        raise ConfigError(f"Directory not found: {root}")
    if not root.is_dir():
        raise ConfigError(f"Not a directory: {root}")

    if not 0 <= args.port <= 65535:
        raise ConfigError(f"Port must be between 0 and 65535, got {args.port}")

    if args.capacity < 1:
        raise ConfigError("Reload buffer capacity must be positive")

    return ServeConfig(
        root=root,
        host=args.host,
        port=args.port,
        spa=args.spa,
        watch=args.watch,
        transport=Transport(args.transport),
        capacity=args.capacity,
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> ServeConfig:
    return load_config(build_parser().parse_args(argv))
