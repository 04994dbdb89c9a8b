"""Issue title and body formatting.

Keeping formatting here means every issue filed looks the same no matter
which tracker adapter sends it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from core.models import RequestMetadata


def message_date(timestamp: str) -> datetime:
    """Convert a Slack ts (``"<seconds>.<micros>"``) to an aware UTC datetime."""

    # Parsed as two integers; going through float can be off by a microsecond.
    seconds, _, fraction = timestamp.partition(".")
    micros = int(fraction[:6].ljust(6, "0")) if fraction else 0
    return datetime.fromtimestamp(int(seconds), tz=timezone.utc).replace(microsecond=micros)


def format_http_date(value: datetime) -> str:
    # Fixed English names keep titles independent of the process locale.
    days = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
    months = (
        "Jan", "Feb", "Mar", "Apr", "May", "Jun",
        "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
    )
    value = value.astimezone(timezone.utc)
    return (
        f"{days[value.weekday()]}, {value.day:02d} {months[value.month - 1]} "
        f"{value.year} {value:%H:%M:%S} GMT"
    )


def format_issue_title(channel_name: str, date: datetime) -> str:
    return f"Update from #{channel_name} at {format_http_date(date)}"


def message_text(reactions: Any) -> Optional[str]:
    """Pull the message text out of a reactions snapshot, if present."""

    if not isinstance(reactions, dict):
        return None
    message = reactions.get("message")
    if not isinstance(message, dict):
        return None
    text = message.get("text")
    if isinstance(text, str) and text.strip():
        return text
    return None


def format_issue_body(metadata: RequestMetadata, text: Optional[str] = None) -> str:
    """Create the Markdown issue body: the permalink, then the quoted message."""

    if not text:
        return metadata.url
    quoted = "\n".join(f"> {line}" if line else ">" for line in text.splitlines())
    return f"{metadata.url}\n\n{quoted}"
