"""Rule matching logic (core domain)."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from core.config import Rule

REACTION_ADDED = "reaction_added"
MESSAGE_ITEM = "message"


def is_reaction_added_message(event: Any) -> bool:
    """Return whether ``event`` is a reaction added to a message.

    Hosts may hand us ``None`` or payloads of any shape; those are simply not
    eligible rather than errors.
    """

    if not isinstance(event, dict):
        return False
    if event.get("type") != REACTION_ADDED:
        return False
    item = event.get("item")
    return isinstance(item, dict) and item.get("type") == MESSAGE_ITEM


def match_rule(
    reaction_name: str, channel_name: Optional[str], rules: Iterable[Rule]
) -> Optional[Rule]:
    """Return the first rule matching the reaction and channel.

    Rule order is the priority order, so this stays a linear scan: a rule
    without a channel can match anywhere, which rules out indexing by
    reaction name alone.
    """

    for rule in rules:
        if rule.matches(reaction_name, channel_name):
            return rule
    return None
