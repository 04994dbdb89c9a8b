"""Shared fixtures data and fake collaborators for the test suite."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from core.config import build_config
from core.models import ReactionContext

CHANNEL_ID = "C5150OU812"
TIMESTAMP = "1360782804.083113"
USER_ID = "U5150OU812"
MESSAGE_ID = f"{CHANNEL_ID}:{TIMESTAMP}"
PERMALINK = "https://mbland.slack.com/archives/handbook/p1360782804083113"
ISSUE_URL = "https://github.com/mbland/handbook/issues/1"
SUCCESS_REACTION = "heavy_check_mark"
MESSAGE_TEXT = "Hello, world!"


def base_config() -> dict[str, Any]:
    return {
        "githubUser": "mbland",
        "githubTimeout": 5000,
        "slackTimeout": 5000,
        "successReaction": SUCCESS_REACTION,
        "rules": [
            {"reactionName": "smiley", "githubRepository": "hub", "channelName": "hub"},
            {"reactionName": "evergreen_tree", "githubRepository": "hub", "channelName": "hub"},
            {"reactionName": "evergreen_tree", "githubRepository": "handbook"},
        ],
    }


def config():
    return build_config(base_config())


def reaction_added_message() -> dict[str, Any]:
    return {
        "type": "reaction_added",
        "user": USER_ID,
        "item": {"type": "message", "channel": CHANNEL_ID, "ts": TIMESTAMP},
        "reaction": "evergreen_tree",
        "event_ts": "1360782804.083113",
    }


def message_with_reactions() -> dict[str, Any]:
    return {
        "ok": True,
        "type": "message",
        "channel": CHANNEL_ID,
        "message": {
            "type": "message",
            "ts": TIMESTAMP,
            "text": MESSAGE_TEXT,
            "reactions": [{"name": "evergreen_tree", "count": 1, "users": [USER_ID]}],
        },
    }


class FakeSlackClient:
    def __init__(self) -> None:
        self.channel_name = "handbook"
        self.team_domain = "mbland"
        self.reactions: dict[str, Any] = message_with_reactions()
        self.channel_name_error: Optional[Exception] = None
        self.reactions_error: Optional[Exception] = None
        self.add_reaction_error: Optional[Exception] = None
        self.channel_name_calls: list[str] = []
        self.reactions_calls: list[tuple[str, str]] = []
        self.add_reaction_calls: list[tuple[str, str]] = []

    async def get_channel_name(self, channel_id: str) -> str:
        self.channel_name_calls.append(channel_id)
        if self.channel_name_error is not None:
            raise self.channel_name_error
        return self.channel_name

    async def get_team_domain(self) -> str:
        return self.team_domain

    async def get_reactions(self, channel_id: str, timestamp: str) -> dict[str, Any]:
        self.reactions_calls.append((channel_id, timestamp))
        # Suspend like a real API call so concurrent runs can interleave.
        await asyncio.sleep(0)
        if self.reactions_error is not None:
            raise self.reactions_error
        return self.reactions

    async def add_success_reaction(self, channel_id: str, timestamp: str) -> dict[str, Any]:
        self.add_reaction_calls.append((channel_id, timestamp))
        if self.add_reaction_error is not None:
            raise self.add_reaction_error
        return {"ok": True}


class FakeGitHubClient:
    def __init__(self) -> None:
        self.issue_url = ISSUE_URL
        self.error: Optional[Exception] = None
        self.calls: list[tuple[str, str, str]] = []

    async def create_issue(self, repository: str, title: str, body: str) -> str:
        self.calls.append((repository, title, body))
        if self.error is not None:
            raise self.error
        return self.issue_url


class RecordingLogger:
    def __init__(self) -> None:
        self.info_calls: list[tuple[Any, ...]] = []
        self.error_calls: list[tuple[Any, ...]] = []

    def info(self, message_id: Optional[str], *parts: Any) -> None:
        self.info_calls.append((message_id, *parts))

    def error(self, message_id: Optional[str], *parts: Any) -> None:
        self.error_calls.append((message_id, *parts))


class ReplyRecorder:
    def __init__(self) -> None:
        self.replies: list[str] = []

    async def __call__(self, text: str) -> None:
        self.replies.append(text)


def log_args(*parts: Any) -> tuple[Any, ...]:
    return (MESSAGE_ID, *parts)


def reaction_context(
    raw_event: Optional[dict[str, Any]] = None, reply: Optional[ReplyRecorder] = None
) -> ReactionContext:
    return ReactionContext(
        raw_event=reaction_added_message() if raw_event is None else raw_event,
        reply=reply or ReplyRecorder(),
    )
