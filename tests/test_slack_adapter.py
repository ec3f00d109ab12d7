"""Tests for SlackAdapter with a mocked web client."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from slack_sdk.errors import SlackApiError

from guildbot.chat_adapters.slack_adapter import SlackAdapter, render_blocks, suppress_mentions
from guildbot.core.errors import SlackError
from guildbot.core.messages import BROAD_MENTIONS, MessageConvention, MessageField, StructuredMessage, normalize_payload
from guildbot.core.models import ChannelRef, ChannelType, Membership, SentMessage


@pytest.fixture
def web_client():
    client = MagicMock()
    client.chat_postMessage = AsyncMock(return_value={"ok": True, "channel": "C1", "ts": "1700000000.000300"})
    client.chat_delete = AsyncMock(return_value={"ok": True})
    client.conversations_info = AsyncMock()
    client.users_info = AsyncMock()
    client.usergroups_list = AsyncMock(
        return_value={"usergroups": [{"id": "S-MODS", "users": ["U1"]}, {"id": "S-OPS", "users": ["U2"]}]}
    )
    client.auth_test = AsyncMock(return_value={"ok": True, "user_id": "U-BOT"})
    return client


@pytest.fixture
def adapter(web_client):
    return SlackAdapter(bot_token="xoxb-test", web_client=web_client)


def _api_error(code: str) -> SlackApiError:
    return SlackApiError(f"The request failed: {code}", {"ok": False, "error": code})


class TestSuppressMentions:
    def test_broadcasts_become_plain_text(self):
        text = "ping <!here> and <!channel> and <!everyone|everyone>, hi <@U1>"

        result = suppress_mentions(text, BROAD_MENTIONS)

        assert result == "ping @here and @channel and @everyone, hi <@U1>"

    def test_allowed_mentions_untouched(self):
        assert suppress_mentions("<!here>", frozenset()) == "<!here>"


class TestSendToChannel:
    @pytest.mark.asyncio
    async def test_plain_text(self, adapter, web_client):
        sent = await adapter.send_to_channel(ChannelRef(id="C1"), normalize_payload("hey <!everyone>"))

        assert sent == SentMessage(channel_id="C1", message_id="1700000000.000300")
        web_client.chat_postMessage.assert_awaited_once_with(
            channel="C1", link_names=False, text="hey @everyone"
        )

    @pytest.mark.asyncio
    async def test_structured_with_color_uses_attachment(self, adapter, web_client):
        payload = normalize_payload(MessageConvention.success("Done", "All good"))

        await adapter.send_to_channel(ChannelRef(id="C1"), payload)

        kwargs = web_client.chat_postMessage.await_args.kwargs
        assert kwargs["text"].endswith("Done")
        assert kwargs["attachments"][0]["color"] == "#2ecc71"
        assert kwargs["attachments"][0]["blocks"][0]["type"] == "header"

    @pytest.mark.asyncio
    async def test_structured_without_color_uses_blocks(self, adapter, web_client):
        payload = normalize_payload(StructuredMessage(description="Just text"))

        await adapter.send_to_channel(ChannelRef(id="C1"), payload)

        kwargs = web_client.chat_postMessage.await_args.kwargs
        assert kwargs["blocks"] == [{"type": "section", "text": {"type": "mrkdwn", "text": "Just text"}}]
        assert "attachments" not in kwargs

    @pytest.mark.asyncio
    async def test_structured_broadcasts_are_suppressed(self, adapter, web_client):
        convention = MessageConvention.warning("Ping <!channel>", "Wake up <!here>")
        convention.add_field("Who", "<!everyone>")

        await adapter.send_to_channel(ChannelRef(id="C1"), normalize_payload(convention))

        kwargs = web_client.chat_postMessage.await_args.kwargs
        blocks = kwargs["attachments"][0]["blocks"]
        assert blocks[0]["text"]["text"].endswith("Ping @channel")
        assert blocks[1]["text"]["text"] == "Wake up @here"
        assert blocks[2]["fields"][0]["text"] == "*Who*\n@everyone"
        assert kwargs["text"].endswith("Ping @channel")

    @pytest.mark.asyncio
    async def test_api_error_is_wrapped(self, adapter, web_client):
        web_client.chat_postMessage.side_effect = _api_error("channel_not_found")

        with pytest.raises(SlackError):
            await adapter.send_to_channel(ChannelRef(id="C404"), normalize_payload("hi"))

    @pytest.mark.asyncio
    async def test_delete_message(self, adapter, web_client):
        await adapter.delete_message("C1", "1.2")

        web_client.chat_delete.assert_awaited_once_with(channel="C1", ts="1.2")


class TestRenderBlocks:
    def test_fields_split_into_sections_of_ten(self):
        message = StructuredMessage(
            title="Big",
            fields=tuple(MessageField(name=f"f{i}", value=str(i)) for i in range(12)),
            footer="footer",
        )

        blocks = render_blocks(message)

        assert [block["type"] for block in blocks] == ["header", "section", "section", "context"]
        assert len(blocks[1]["fields"]) == 10
        assert len(blocks[2]["fields"]) == 2
        assert blocks[1]["fields"][0]["text"] == "*f0*\n0"


class TestDirectory:
    @pytest.mark.asyncio
    async def test_resolve_scope_of_channel(self, adapter, web_client):
        web_client.conversations_info.return_value = {"channel": {"id": "C1", "context_team_id": "T1"}}

        assert await adapter.resolve_scope(ChannelRef(id="C1")) == "T1"

    @pytest.mark.asyncio
    async def test_resolve_scope_of_direct_message(self, adapter, web_client):
        web_client.conversations_info.return_value = {"channel": {"id": "D1", "is_im": True}}

        assert await adapter.resolve_scope(ChannelRef(id="D1", type=ChannelType.PRIVATE)) is None

    @pytest.mark.asyncio
    async def test_resolve_membership(self, adapter, web_client):
        web_client.users_info.return_value = {"user": {"id": "U1", "team_id": "T1", "is_admin": False}}

        membership = await adapter.resolve_membership("U1", "T1")

        assert membership == Membership(user_id="U1", scope_id="T1", role_ids=frozenset({"S-MODS"}))

    @pytest.mark.asyncio
    async def test_usergroups_are_cached(self, adapter, web_client):
        web_client.users_info.return_value = {"user": {"id": "U1", "team_id": "T1"}}

        await adapter.resolve_membership("U1", "T1")
        await adapter.resolve_membership("U1", "T1")

        web_client.usergroups_list.assert_awaited_once_with(include_users=True, team_id="T1")

    @pytest.mark.asyncio
    async def test_owner_flags(self, adapter, web_client):
        web_client.users_info.return_value = {"user": {"id": "U3", "team_id": "T1", "is_primary_owner": True}}

        membership = await adapter.resolve_membership("U3", "T1")

        assert membership.is_owner

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "user",
        [
            {"id": "U1", "team_id": "T-ELSEWHERE"},
            {"id": "U1", "team_id": "T1", "deleted": True},
        ],
    )
    async def test_membership_absent(self, adapter, web_client, user):
        web_client.users_info.return_value = {"user": user}

        assert await adapter.resolve_membership("U1", "T1") is None

    @pytest.mark.asyncio
    async def test_unknown_user(self, adapter, web_client):
        web_client.users_info.side_effect = _api_error("user_not_found")

        assert await adapter.resolve_membership("U404", "T1") is None

    @pytest.mark.asyncio
    async def test_lookup_error_is_wrapped(self, adapter, web_client):
        web_client.users_info.side_effect = _api_error("ratelimited")

        with pytest.raises(SlackError):
            await adapter.resolve_membership("U1", "T1")

    @pytest.mark.asyncio
    async def test_resolve_self_id(self, adapter, web_client):
        assert await adapter.resolve_self_id() == "U-BOT"
        assert await adapter.resolve_self_id() == "U-BOT"

        web_client.auth_test.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_resolve_self_id_error_is_wrapped(self, adapter, web_client):
        web_client.auth_test.side_effect = _api_error("invalid_auth")

        with pytest.raises(SlackError):
            await adapter.resolve_self_id()


class TestUsergroupExpiry:
    @pytest.fixture
    def clock(self):
        return MagicMock(return_value=1000.0)

    @pytest.fixture
    def adapter(self, web_client, clock):
        web_client.users_info.return_value = {"user": {"id": "U1", "team_id": "T1"}}
        return SlackAdapter(bot_token="xoxb-test", web_client=web_client, usergroup_ttl=60.0, clock=clock)

    @pytest.mark.asyncio
    async def test_groups_reused_within_ttl(self, adapter, web_client, clock):
        await adapter.resolve_membership("U1", "T1")
        clock.return_value = 1059.0

        membership = await adapter.resolve_membership("U1", "T1")

        assert membership.role_ids == frozenset({"S-MODS"})
        assert web_client.usergroups_list.await_count == 1

    @pytest.mark.asyncio
    async def test_revoked_group_drops_after_ttl(self, adapter, web_client, clock):
        first = await adapter.resolve_membership("U1", "T1")
        web_client.usergroups_list.return_value = {
            "usergroups": [{"id": "S-MODS", "users": []}, {"id": "S-OPS", "users": ["U1", "U2"]}]
        }
        clock.return_value = 1061.0

        second = await adapter.resolve_membership("U1", "T1")

        assert first.role_ids == frozenset({"S-MODS"})
        assert second.role_ids == frozenset({"S-OPS"})
        assert web_client.usergroups_list.await_count == 2

    @pytest.mark.asyncio
    async def test_clear_cache_forces_refetch(self, adapter, web_client):
        await adapter.resolve_membership("U1", "T1")
        adapter.clear_cache()
        await adapter.resolve_membership("U1", "T1")

        assert web_client.usergroups_list.await_count == 2
