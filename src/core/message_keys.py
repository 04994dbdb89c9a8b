"""Helpers for building Slack message identifiers and permalinks."""

from __future__ import annotations

MESSAGE_ID_SEPARATOR = ":"


def build_message_id(channel_id: str, timestamp: str) -> str:
    """Return the dedup key for a message: ``<channel id>:<ts>``."""

    return f"{channel_id}{MESSAGE_ID_SEPARATOR}{timestamp}"


def build_permalink(team_domain: str, channel_name: str, timestamp: str) -> str:
    """Return the archive URL Slack uses for a message.

    Slack drops the dot from the message ts and prefixes it with ``p``.
    """

    return (
        f"https://{team_domain}.slack.com/archives/{channel_name}"
        f"/p{timestamp.replace('.', '')}"
    )
