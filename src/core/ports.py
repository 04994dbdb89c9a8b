"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the chat, issue tracker, and logging
adapters so that the core can be reused with different backends and tested
with fakes.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol


class SlackClientPort(Protocol):
    """Chat operations required by the core pipeline."""

    async def get_channel_name(self, channel_id: str) -> str:
        ...

    async def get_team_domain(self) -> str:
        ...

    async def get_reactions(self, channel_id: str, timestamp: str) -> dict[str, Any]:
        ...

    async def add_success_reaction(self, channel_id: str, timestamp: str) -> Any:
        ...


class GitHubClientPort(Protocol):
    """Issue tracker operations required by the core pipeline."""

    async def create_issue(self, repository: str, title: str, body: str) -> str:
        ...


class LoggerPort(Protocol):
    """Logging keyed by message id; ``None`` marks unattributed entries."""

    def info(self, message_id: Optional[str], *parts: Any) -> None:
        ...

    def error(self, message_id: Optional[str], *parts: Any) -> None:
        ...
