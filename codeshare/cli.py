#!/usr/bin/env python3
"""
Codeshare Client - Command Line Entry Point

Usage:
    codeshare send PATH
    codeshare info CODE
    codeshare receive CODE [--dest DIR]

Settings come from CODESHARE_* environment variables; --api-url and --dest
override them for one invocation.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from codeshare.application.dependency_container import DependencyContainer
from codeshare.application.event_publisher import EventPublisher
from codeshare.application.retrieval_session import RetrievalSession
from codeshare.application.upload_session import UploadSession
from codeshare.config import ClientConfig, configure_logging
from codeshare.presentation import ConsoleRenderer

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codeshare",
        description="Share a file through a one-time 8-character code",
    )
    parser.add_argument('--api-url', type=str, default=None,
                        help='Share server API base URL (default: $CODESHARE_API_BASE_URL)')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Logging level (default: $CODESHARE_LOG_LEVEL or WARNING)')

    commands = parser.add_subparsers(dest="command", required=True)

    send = commands.add_parser("send", help="Upload a file and print its share code")
    send.add_argument("path", type=Path, help="File to upload")

    info = commands.add_parser("info", help="Show what a share code points to")
    info.add_argument("code", type=str, help="8-character share code")

    receive = commands.add_parser("receive", help="Download the file behind a share code")
    receive.add_argument("code", type=str, help="8-character share code")
    receive.add_argument('--dest', type=Path, default=None,
                         help='Directory to save into (default: $CODESHARE_DOWNLOAD_DIR)')

    return parser


async def send_file(container: DependencyContainer, path: Path) -> int:
    session = container.resolve(UploadSession)

    result = session.select_path(path)
    if not result.success:
        return EXIT_FAILED

    result = await session.submit()
    return EXIT_OK if result.success else EXIT_FAILED


async def show_info(container: DependencyContainer, code: str) -> int:
    session: RetrievalSession = container.resolve(RetrievalSession)
    session.set_code(code)

    result = await session.fetch_metadata()
    return EXIT_OK if result.success else EXIT_FAILED


async def receive_file(container: DependencyContainer, code: str) -> int:
    session: RetrievalSession = container.resolve(RetrievalSession)
    session.set_code(code)

    result = await session.fetch_metadata()
    if not result.success:
        return EXIT_FAILED

    result = await session.download()
    return EXIT_OK if result.success else EXIT_FAILED


async def run_command(container: DependencyContainer, args: argparse.Namespace) -> int:
    """Run one parsed command and release the container's resources."""
    try:
        if args.command == "send":
            return await send_file(container, args.path)
        if args.command == "info":
            return await show_info(container, args.code)
        if args.command == "receive":
            return await receive_file(container, args.code)
        raise ValueError(f"Unknown command: {args.command}")
    finally:
        await container.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    config = ClientConfig()
    if args.api_url:
        config.api_base_url = args.api_url.rstrip("/")
    if args.log_level:
        config.log_level = args.log_level.upper()
    if getattr(args, "dest", None) is not None:
        config.download_dir = args.dest.expanduser()

    configure_logging(config.log_level)
    logger.debug(f"Configuration: {config.to_dict()}")

    container = DependencyContainer(config)
    container.setup_infrastructure()
    container.setup_event_handlers()
    ConsoleRenderer().attach(container.resolve(EventPublisher))

    try:
        return asyncio.run(run_command(container, args))
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
