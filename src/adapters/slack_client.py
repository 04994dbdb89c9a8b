"""Slack Web API adapter.

Implements the core SlackClientPort plus the thread reply the host uses,
over a single pooled httpx client.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

LOGGER = logging.getLogger(__name__)

SLACK_API_BASE_URL = "https://slack.com/api/"


class SlackApiError(RuntimeError):
    """Raised when the Slack Web API rejects or fails a request."""


class SlackClient:
    """Thin async Slack Web API client that satisfies the SlackClientPort contract."""

    def __init__(
        self,
        token: str,
        success_reaction: str,
        timeout: float = 5.0,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._success_reaction = success_reaction
        self._client = httpx.AsyncClient(
            base_url=base_url or SLACK_API_BASE_URL,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )
        # Channel names and the team domain rarely change, and they are looked
        # up for every reaction event.
        self._channel_names: dict[str, str] = {}
        self._team_domain: Optional[str] = None

    async def _call(self, method: str, **params: Any) -> dict[str, Any]:
        response = await self._client.post(method, data=params)
        if response.status_code != 200:
            raise SlackApiError(
                f"received {response.status_code} response from Slack API method {method}"
            )
        payload = response.json()
        if not payload.get("ok"):
            raise SlackApiError(
                f"Slack API method {method} failed: {payload.get('error', 'unknown error')}"
            )
        return payload

    async def get_channel_name(self, channel_id: str) -> str:
        if channel_id not in self._channel_names:
            payload = await self._call("conversations.info", channel=channel_id)
            self._channel_names[channel_id] = payload["channel"]["name"]
        return self._channel_names[channel_id]

    async def get_team_domain(self) -> str:
        if self._team_domain is None:
            payload = await self._call("team.info")
            self._team_domain = payload["team"]["domain"]
        return self._team_domain

    async def get_reactions(self, channel_id: str, timestamp: str) -> dict[str, Any]:
        """Return the ``reactions.get`` payload, including the message text."""

        return await self._call(
            "reactions.get", channel=channel_id, timestamp=timestamp, full="true"
        )

    async def add_success_reaction(self, channel_id: str, timestamp: str) -> dict[str, Any]:
        return await self._call(
            "reactions.add",
            channel=channel_id,
            timestamp=timestamp,
            name=self._success_reaction,
        )

    async def post_reply(self, channel_id: str, thread_ts: str, text: str) -> dict[str, Any]:
        """Post ``text`` in the thread of the given message."""

        return await self._call(
            "chat.postMessage", channel=channel_id, thread_ts=thread_ts, text=text
        )

    async def aclose(self) -> None:
        LOGGER.debug("Closing Slack client")
        await self._client.aclose()
