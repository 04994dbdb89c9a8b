"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional


@dataclass(frozen=True)
class RequestMetadata:
    """Everything the pipeline needs to know about the reacted-to message."""

    channel: str
    channel_id: str
    timestamp: str
    url: str
    message_id: str
    user: Optional[str]
    reaction: str
    date: datetime
    title: str


@dataclass(frozen=True)
class ReactionContext:
    """What the host hands to the pipeline for one inbound event.

    ``raw_event`` may be ``None`` when the host received something that is not
    an event at all; ``reply`` posts text back next to the originating message.
    """

    raw_event: Optional[dict[str, Any]]
    reply: Callable[[str], Awaitable[None]]
