#!/usr/bin/env python3
"""Farmstand Marketplace - interactive console."""

import asyncio
import sys

from src.cli.console import RED, NC, Console
from src.cli.dependencies import build_app
from src.config import get_settings
from src.domain.errors import ConfigurationError
from src.logging_config import configure_logging


async def run_console() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    await Console(build_app(settings)).run()


def main() -> int:
    try:
        asyncio.run(run_console())
    except ConfigurationError as exc:
        print(f"{RED}{exc.message}{NC}", file=sys.stderr)
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\nGoodbye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
