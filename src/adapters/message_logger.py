"""Logging adapter keyed by Slack message id.

Implements the core LoggerPort on top of the standard logging module.
"""

from __future__ import annotations

import logging
from typing import Any, Optional


class MessageLogger:
    """Prefix every entry with the message id it concerns."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("slack_github_issues")

    @staticmethod
    def format(message_id: Optional[str], parts: tuple[Any, ...]) -> str:
        text = " ".join(str(part) for part in parts)
        if message_id is None:
            return text
        return f"{message_id}: {text}"

    def info(self, message_id: Optional[str], *parts: Any) -> None:
        self._logger.info("%s", self.format(message_id, parts))

    def error(self, message_id: Optional[str], *parts: Any) -> None:
        self._logger.error("%s", self.format(message_id, parts))
