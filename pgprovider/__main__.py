"""Assemble the provider configuration and print the resulting descriptor."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .assembler import ConfigurationAssembler
from .config import CONFIG_FILE, load_provider_config
from .errors import PgProviderError


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pgprovider", description=__doc__)
    parser.add_argument("--config", type=Path, default=CONFIG_FILE, help="Provider config TOML file")
    parser.add_argument(
        "--command-timeout",
        type=float,
        default=None,
        help="Seconds to wait for password_command before giving up",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    assembler = ConfigurationAssembler(command_timeout=args.command_timeout)
    try:
        config = load_provider_config(args.config)
        descriptor = asyncio.run(assembler.assemble(config))
    except PgProviderError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(descriptor.redacted(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
