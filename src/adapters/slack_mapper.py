"""Slack-to-core event mapping adapter.

This keeps Events API payload details out of the core pipeline.
"""

from __future__ import annotations

from typing import Any, Optional

from adapters.slack_client import SlackClient
from core.models import ReactionContext


def _reply_target(event: Optional[dict[str, Any]]) -> tuple[Optional[str], Optional[str]]:
    item = event.get("item") if isinstance(event, dict) else None
    if not isinstance(item, dict):
        return None, None
    return item.get("channel"), item.get("ts")


def build_context(event: Optional[dict[str, Any]], slack_client: SlackClient) -> ReactionContext:
    """Build a core ReactionContext from an Events API ``event`` object.

    Replies go to the thread of the reacted-to message. Events without a
    message item have nowhere to reply, so replying to them raises.
    """

    channel_id, thread_ts = _reply_target(event)

    async def reply(text: str) -> None:
        if not channel_id or not thread_ts:
            raise ValueError("event has no message to reply to")
        await slack_client.post_reply(channel_id, thread_ts, text)

    return ReactionContext(raw_event=event, reply=reply)
