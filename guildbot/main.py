"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from typing import Sequence

from .chat_adapters.slack_adapter import SlackAdapter
from .core import (
    ChannelRef,
    CommandClient,
    CommandSpec,
    Config,
    ConfigError,
    GuildBotError,
    Invocation,
    load_config,
)
from .core.models import ChannelType, Membership

LOGGER = logging.getLogger(__name__)

SAY_COMMAND = CommandSpec(
    name="say",
    usage="guildbot say <channel_id> <text>",
    description="Send a message as the bot.",
)


def cli(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        prog="guildbot",
        description="guildbot - inspect permissions and send messages as the bot",
    )
    parser.add_argument(
        "--config-dir",
        default=None,
        help="Directory holding .env, permissions.yaml and profiles.yaml (default: ~/.guildbot)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    permissions_parser = subparsers.add_parser(
        "permissions",
        help="Show the effective permission tier of a user in the home scope",
    )
    permissions_parser.add_argument("user_id")

    say_parser = subparsers.add_parser(
        "say",
        help="Send a plain text message into a channel",
    )
    say_parser.add_argument("channel_id")
    say_parser.add_argument("text", nargs="+")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    _configure_logging()
    try:
        config = load_config(args.config_dir)
    except ConfigError as exc:
        LOGGER.error("Configuration error: %s", exc)
        return 1

    if args.command == "permissions":
        runner = _show_permissions(config, args.user_id)
    else:
        runner = _say(config, args.channel_id, " ".join(args.text))

    try:
        return asyncio.run(runner)
    except GuildBotError as exc:
        LOGGER.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        LOGGER.info("Interrupted by user")
        return 130


def run() -> None:
    raise SystemExit(cli())


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_name, logging.INFO)
    logging.getLogger().setLevel(log_level)


def _build_client(config: Config) -> CommandClient:
    adapter = SlackAdapter(bot_token=config.slack_bot_token)
    return CommandClient.from_config(config, transport=adapter, directory=adapter)


async def _show_permissions(config: Config, user_id: str) -> int:
    client = _build_client(config)
    permission = await client.effective_permission(user_id)
    print(f"{user_id}: {permission.name.lower()}")
    return 0


async def _say(config: Config, channel_id: str, text: str) -> int:
    client = _build_client(config)
    invocation = Invocation(
        message_id=f"cli-{channel_id}",
        channel=ChannelRef(id=channel_id, type=ChannelType.TEXT),
        author_id="cli",
        scope_id=config.home_scope_id,
        membership=Membership(user_id="cli", scope_id=config.home_scope_id),
    )
    context = await client.create_context(invocation, SAY_COMMAND)
    sent = await context.respond(text)
    LOGGER.info("Sent message %s to %s", sent.message_id, sent.channel_id)
    return 0


if __name__ == "__main__":
    raise SystemExit(cli())
