"""Shared fixtures for dispatch context tests."""

from __future__ import annotations

import pytest

from guildbot.core.commands.context import DispatchContext
from guildbot.core.commands.help import HelpFormatter
from guildbot.core.models import Arguments
from guildbot.core.tracking import ResponseTracker


@pytest.fixture
def tracker():
    return ResponseTracker()


@pytest.fixture
def make_context(transport, tracker, evaluator, command_spec, guild_invocation):
    """Build a DispatchContext without going through resolution."""

    def _make(
        invocation=None,
        membership="attached",
        profile=None,
        channel="invocation",
        channel_error=None,
        help_formatter=None,
        self_user_id="U-BOT",
    ):
        invocation = invocation or guild_invocation
        return DispatchContext(
            invocation=invocation,
            command=command_spec,
            args=Arguments(("U-SPAM", "spamming")),
            profile=profile,
            scope_id=invocation.scope_id or "T-HOME",
            membership=invocation.membership if membership == "attached" else membership,
            channel=invocation.channel if channel == "invocation" else channel,
            channel_error=channel_error,
            transport=transport,
            tracker=tracker,
            evaluator=evaluator,
            help_formatter=help_formatter or HelpFormatter(),
            self_user_id=self_user_id,
        )

    return _make
