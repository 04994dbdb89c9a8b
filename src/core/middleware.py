"""Core reaction-to-issue pipeline.

This module is integration-agnostic. It only relies on ports for Slack,
GitHub, and logging, enabling other hosts or adapters without changes here.

A run goes through these stages, strictly in order:
1) Match the event against the configured rules
2) Extract request metadata (channel name, permalink, message id)
3) Claim the message id in the in-flight registry
4) Fetch the message's current reactions
5) Stop if the success reaction is already there
6) File the GitHub issue
7) Add the success reaction
8) Reply with the issue URL
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from core.config import Config, Rule
from core.dedup import InFlightRegistry
from core.errors import (
    AlreadyProcessed,
    InProgress,
    IssueCreationError,
    MarkerApplicationError,
    PipelineError,
    ReactionFetchError,
    UnanticipatedError,
    Unmatched,
)
from core.formatting import format_issue_body, format_issue_title, message_date, message_text
from core.message_keys import build_message_id, build_permalink
from core.models import ReactionContext, RequestMetadata
from core.ports import GitHubClientPort, LoggerPort, SlackClientPort
from core.rules_engine import is_reaction_added_message, match_rule

LOGGER = logging.getLogger(__name__)


def message_id_for(event: dict[str, Any]) -> str:
    item = event["item"]
    return build_message_id(item["channel"], item["ts"])


def has_reaction(reactions: Any, name: str) -> bool:
    """Return whether a reactions snapshot includes the named reaction."""

    message = reactions.get("message") or {}
    return any(reaction.get("name") == name for reaction in message.get("reactions") or [])


class Middleware:
    """Files one GitHub issue per reacted-to message, at most once at a time."""

    def __init__(
        self,
        config: Config,
        slack_client: SlackClientPort,
        github_client: GitHubClientPort,
        logger: LoggerPort,
    ) -> None:
        self._rules = config.rules
        self._success_reaction = config.success_reaction
        self._slack = slack_client
        self._github = github_client
        self._logger = logger
        self._in_flight = InFlightRegistry()

    @property
    def in_flight(self) -> InFlightRegistry:
        return self._in_flight

    async def find_matching_rule(self, event: Any) -> Optional[Rule]:
        """Return the first rule matching ``event``, or None."""

        if not is_reaction_added_message(event):
            return None
        # Resolve the channel once per event, not once per channel-scoped rule.
        channel_name = await self._slack.get_channel_name(event["item"]["channel"])
        return match_rule(event.get("reaction"), channel_name, self._rules)

    async def parse_metadata(self, event: dict[str, Any]) -> RequestMetadata:
        """Build the request metadata for an event that already matched a rule."""

        item = event["item"]
        channel_name = await self._slack.get_channel_name(item["channel"])
        team_domain = await self._slack.get_team_domain()
        timestamp = item["ts"]
        date = message_date(timestamp)
        return RequestMetadata(
            channel=channel_name,
            channel_id=item["channel"],
            timestamp=timestamp,
            url=build_permalink(team_domain, channel_name, timestamp),
            message_id=message_id_for(event),
            user=event.get("user"),
            reaction=event["reaction"],
            date=date,
            title=format_issue_title(channel_name, date),
        )

    async def execute(
        self,
        context: ReactionContext,
        next_: Callable[[Any], Any],
        done: Any,
    ) -> str:
        """Run the full pipeline for one event and return the new issue's URL.

        Raises a ``MiddlewareError`` subclass for every other outcome. ``next_``
        is called with ``done`` exactly once, however the run ends.
        """

        try:
            return await self._execute(context)
        finally:
            next_(done)

    async def _execute(self, context: ReactionContext) -> str:
        event = context.raw_event
        try:
            rule = await self.find_matching_rule(event)
            if rule is None:
                raise Unmatched()
            message_id = message_id_for(event)
            self._logger.info(message_id, "matches rule:", rule)
            metadata = await self.parse_metadata(event)
        except Unmatched:
            raise
        except Exception as err:
            raise await self._unanticipated(context, err) from err

        # No await between the check and the insert, so concurrent runs for
        # the same message cannot both get past this point.
        if not self._in_flight.claim(metadata.message_id):
            self._logger.info(metadata.message_id, "already in progress")
            raise InProgress(metadata.message_id)

        try:
            issue_url = await self._process(rule, metadata)
        except AlreadyProcessed as err:
            self._logger.info(metadata.message_id, str(err))
            raise
        except PipelineError as err:
            self._logger.error(metadata.message_id, str(err))
            await context.reply(str(err))
            raise
        except Exception as err:
            raise await self._unanticipated(context, err) from err

        self._logger.info(metadata.message_id, f"created: {issue_url}")
        await context.reply(f"created: {issue_url}")
        return issue_url

    async def _process(self, rule: Rule, metadata: RequestMetadata) -> str:
        try:
            return await self._file_issue(rule, metadata)
        finally:
            self._in_flight.release(metadata.message_id)

    async def _file_issue(self, rule: Rule, metadata: RequestMetadata) -> str:
        message_id = metadata.message_id

        self._logger.info(message_id, "getting reactions for", metadata.url)
        try:
            reactions = await self._slack.get_reactions(metadata.channel_id, metadata.timestamp)
        except Exception as err:
            raise ReactionFetchError(metadata.url, err) from err

        if has_reaction(reactions, self._success_reaction):
            raise AlreadyProcessed(metadata.url)

        self._logger.info(message_id, "making GitHub request for", metadata.url)
        body = format_issue_body(metadata, message_text(reactions))
        try:
            issue_url = await self._github.create_issue(
                rule.github_repository, metadata.title, body
            )
        except Exception as err:
            raise IssueCreationError(rule.github_repository, err) from err

        self._logger.info(message_id, "adding", self._success_reaction)
        try:
            await self._slack.add_success_reaction(metadata.channel_id, metadata.timestamp)
        except Exception as err:
            raise MarkerApplicationError(issue_url, self._success_reaction, err) from err

        return issue_url

    async def _unanticipated(self, context: ReactionContext, err: Exception) -> UnanticipatedError:
        LOGGER.debug("Unanticipated pipeline failure", exc_info=err)
        error = UnanticipatedError(err, context.raw_event)
        self._logger.error(None, str(error))
        await context.reply(str(error))
        return error
