"""In-flight deduplication (core domain).

The registry lives for the lifetime of the process only. It is touched from
the event loop thread alone, so a claim is an atomic check-and-insert as long
as nothing awaits between the check and the insert.
"""

from __future__ import annotations

from typing import Dict


class InFlightRegistry:
    """Set of message ids whose pipeline run is currently executing."""

    def __init__(self) -> None:
        self._entries: Dict[str, bool] = {}

    def claim(self, message_id: str) -> bool:
        """Insert ``message_id`` unless present; return whether it was inserted."""

        if message_id in self._entries:
            return False
        self._entries[message_id] = True
        return True

    def release(self, message_id: str) -> None:
        self._entries.pop(message_id, None)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
