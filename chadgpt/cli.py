"""ChadGPT - command-line entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from contextlib import suppress
from typing import Optional

from . import __version__
from .claude_client import ClaudeClient, get_api_key
from .config import Config, ConfigError, load_config
from .dispatcher import Dispatcher, run_dispatcher
from .identity import IdentityManager
from .irc_client import IRCActions, IRCClient
from .runtime_paths import DEFAULT_CONFIG_NAME

logger = logging.getLogger("chadgpt")

QUIET_LIBRARIES = ("pydle", "httpx", "httpcore")


def setup_logging(level: str = "INFO") -> None:
    numeric = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    if numeric > logging.DEBUG:
        for name in QUIET_LIBRARIES:
            logging.getLogger(name).setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chadgpt",
        description="IRC bot that answers addressed lines with Claude completions.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help=f"path to {DEFAULT_CONFIG_NAME} (default: ./{DEFAULT_CONFIG_NAME}, $CHADGPT_CONFIG, or the user config dir)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging verbosity",
    )
    return parser


def build_bot(cfg: Config) -> tuple[IRCClient, Dispatcher]:
    backend = cfg.backend
    env_dir = cfg.path.parent if cfg.path else None
    gateway = ClaudeClient(api_key=get_api_key(backend.api_key, env_dir), api_url=backend.api_url)
    if not gateway.is_available():
        logger.warning("No Anthropic API key configured - every request will report an error")

    dispatcher: Optional[Dispatcher] = None

    def post(event):
        dispatcher.post(event)

    client = IRCClient(cfg.irc, post)
    actions = IRCActions(client)
    identity = IdentityManager(
        actions,
        preferred_nick=cfg.irc.nick,
        channels=cfg.irc.channels,
        keepnick=cfg.irc.keepnick,
        max_nick_attempts=cfg.irc.max_nick_attempts,
    )
    dispatcher = Dispatcher(
        identity=identity,
        gateway=gateway,
        actions=actions,
        templates=backend.messages,
        model=backend.model,
        sampling={
            "temperature": backend.temperature,
            "max_tokens": backend.max_tokens,
            "top_p": backend.top_p,
            "frequency_penalty": backend.frequency_penalty,
            "presence_penalty": backend.presence_penalty,
        },
        ignored_nicks=cfg.irc.ignored_nicks,
        max_lines=backend.max_lines,
        backend_name=backend.name,
    )
    return client, dispatcher


async def serve(cfg: Config) -> None:
    client, dispatcher = build_bot(cfg)
    worker = asyncio.create_task(run_dispatcher(dispatcher), name="dispatcher")
    try:
        await client.start()
        while client.connected:
            await asyncio.sleep(1)
        logger.warning("Disconnected from %s - exiting", cfg.irc.host)
    finally:
        if client.connected:
            with suppress(Exception):
                await client.disconnect(expected=True)
        worker.cancel()
        with suppress(asyncio.CancelledError):
            await worker


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    try:
        cfg = load_config(args.config)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2
    try:
        asyncio.run(serve(cfg))
    except KeyboardInterrupt:
        logger.info("Interrupted - shutting down.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
