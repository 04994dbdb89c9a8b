from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone

import pytest

import helpers
from core.config import Rule
from core.errors import (
    AlreadyProcessed,
    InProgress,
    IssueCreationError,
    MarkerApplicationError,
    ReactionFetchError,
    UnanticipatedError,
    Unmatched,
)
from core.middleware import Middleware
from core.models import ReactionContext, RequestMetadata


class Harness:
    def __init__(self) -> None:
        self.config = helpers.config()
        self.slack = helpers.FakeSlackClient()
        self.github = helpers.FakeGitHubClient()
        self.logger = helpers.RecordingLogger()
        self.middleware = Middleware(self.config, self.slack, self.github, self.logger)
        self.reply = helpers.ReplyRecorder()
        self.context = helpers.reaction_context(reply=self.reply)
        self.done = object()
        self.next_calls: list[object] = []

    def execute(self, context: "ReactionContext | None" = None):
        return self.middleware.execute(context or self.context, self.next_calls.append, self.done)

    def run(self, context: "ReactionContext | None" = None) -> str:
        return asyncio.run(self.execute(context))


@pytest.fixture
def harness() -> Harness:
    return Harness()


def test_find_matching_rule_returns_channel_agnostic_rule(harness: Harness) -> None:
    harness.slack.channel_name = "not-any-channel-from-any-config-rule"
    rule = asyncio.run(harness.middleware.find_matching_rule(helpers.reaction_added_message()))

    assert rule == Rule(reaction_name="evergreen_tree", github_repository="mbland/handbook")
    assert rule.channel_name is None
    assert harness.slack.channel_name_calls == [helpers.CHANNEL_ID]


def test_find_matching_rule_prefers_earlier_rule(harness: Harness) -> None:
    harness.slack.channel_name = "hub"
    rule = asyncio.run(harness.middleware.find_matching_rule(helpers.reaction_added_message()))

    assert rule == harness.config.rules[1]
    assert rule.github_repository == "mbland/hub"


def test_find_matching_rule_ignores_missing_event(harness: Harness) -> None:
    assert asyncio.run(harness.middleware.find_matching_rule(None)) is None
    assert harness.slack.channel_name_calls == []


def test_find_matching_rule_ignores_other_event_types(harness: Harness) -> None:
    message = helpers.reaction_added_message()
    message["type"] = "hello"
    assert asyncio.run(harness.middleware.find_matching_rule(message)) is None
    assert harness.slack.channel_name_calls == []


def test_find_matching_rule_ignores_other_item_types(harness: Harness) -> None:
    message = helpers.reaction_added_message()
    message["item"]["type"] = "file"
    assert asyncio.run(harness.middleware.find_matching_rule(message)) is None


def test_find_matching_rule_ignores_unconfigured_reactions(harness: Harness) -> None:
    message = helpers.reaction_added_message()
    message["reaction"] = "sad-face"
    assert asyncio.run(harness.middleware.find_matching_rule(message)) is None
    assert len(harness.slack.channel_name_calls) == 1


def test_parse_metadata(harness: Harness) -> None:
    metadata = asyncio.run(harness.middleware.parse_metadata(helpers.reaction_added_message()))

    assert metadata == RequestMetadata(
        channel="handbook",
        channel_id=helpers.CHANNEL_ID,
        timestamp=helpers.TIMESTAMP,
        url=helpers.PERMALINK,
        message_id=helpers.MESSAGE_ID,
        user=helpers.USER_ID,
        reaction="evergreen_tree",
        date=datetime(2013, 2, 13, 19, 13, 24, 83113, tzinfo=timezone.utc),
        title="Update from #handbook at Wed, 13 Feb 2013 19:13:24 GMT",
    )
    assert harness.slack.channel_name_calls == [helpers.CHANNEL_ID]


def test_execute_files_an_issue(harness: Harness) -> None:
    assert harness.run() == helpers.ISSUE_URL

    assert harness.reply.replies == [f"created: {helpers.ISSUE_URL}"]
    assert harness.next_calls == [harness.done]
    assert harness.logger.info_calls == [
        helpers.log_args("matches rule:", harness.config.rules[2]),
        helpers.log_args("getting reactions for", helpers.PERMALINK),
        helpers.log_args("making GitHub request for", helpers.PERMALINK),
        helpers.log_args("adding", helpers.SUCCESS_REACTION),
        helpers.log_args(f"created: {helpers.ISSUE_URL}"),
    ]
    assert harness.logger.error_calls == []
    assert harness.github.calls == [
        (
            "mbland/handbook",
            "Update from #handbook at Wed, 13 Feb 2013 19:13:24 GMT",
            f"{helpers.PERMALINK}\n\n> {helpers.MESSAGE_TEXT}",
        )
    ]
    assert harness.slack.add_reaction_calls == [(helpers.CHANNEL_ID, helpers.TIMESTAMP)]
    assert helpers.MESSAGE_ID not in harness.middleware.in_flight


def test_execute_ignores_events_that_do_not_match(harness: Harness) -> None:
    context = ReactionContext(raw_event=None, reply=harness.reply)

    with pytest.raises(Unmatched) as excinfo:
        harness.run(context)

    assert str(excinfo.value) == ""
    assert harness.next_calls == [harness.done]
    assert harness.logger.info_calls == []
    assert harness.logger.error_calls == []
    assert harness.reply.replies == []


def test_execute_rejects_duplicate_while_in_progress(harness: Harness) -> None:
    async def scenario():
        return await asyncio.gather(harness.execute(), harness.execute(), return_exceptions=True)

    first, second = asyncio.run(scenario())

    assert first == helpers.ISSUE_URL
    assert isinstance(second, InProgress)
    assert second.message_id == helpers.MESSAGE_ID
    assert helpers.log_args("already in progress") in harness.logger.info_calls
    assert len(harness.slack.reactions_calls) == 1
    assert len(harness.github.calls) == 1
    assert harness.next_calls == [harness.done, harness.done]
    assert len(harness.middleware.in_flight) == 0

    # The id was released, so the same message can be processed again. The
    # fake still reports no success reaction, so this files another issue.
    assert harness.run() == helpers.ISSUE_URL


def test_execute_skips_already_processed_messages(harness: Harness) -> None:
    harness.slack.reactions["message"]["reactions"].append(
        {"name": helpers.SUCCESS_REACTION, "count": 1, "users": [helpers.USER_ID]}
    )

    with pytest.raises(AlreadyProcessed, match="already processed"):
        harness.run()

    assert len(harness.slack.reactions_calls) == 1
    assert harness.github.calls == []
    assert harness.slack.add_reaction_calls == []
    assert harness.reply.replies == []
    assert harness.logger.error_calls == []
    assert helpers.log_args(f"already processed {helpers.PERMALINK}") in harness.logger.info_calls
    assert harness.next_calls == [harness.done]

    # Released like any other exit, so the next attempt starts over from Match.
    assert len(harness.middleware.in_flight) == 0
    with pytest.raises(AlreadyProcessed):
        harness.run()
    assert len(harness.slack.reactions_calls) == 2


def _check_error_response(harness: Harness, error_message: str) -> None:
    assert harness.reply.replies == [error_message]
    assert harness.logger.error_calls == [(helpers.MESSAGE_ID, error_message)]
    assert harness.next_calls == [harness.done]
    assert len(harness.middleware.in_flight) == 0


def test_execute_fails_to_get_reactions(harness: Harness) -> None:
    error_message = f"failed to get reactions for {helpers.PERMALINK}: test failure"
    harness.slack.reactions_error = RuntimeError("test failure")

    with pytest.raises(ReactionFetchError) as excinfo:
        harness.run()

    assert str(excinfo.value) == error_message
    assert len(harness.slack.reactions_calls) == 1
    assert harness.github.calls == []
    assert harness.slack.add_reaction_calls == []
    _check_error_response(harness, error_message)


def test_execute_fails_to_file_an_issue(harness: Harness) -> None:
    error_message = "failed to create a GitHub issue in mbland/handbook: test failure"
    harness.github.error = RuntimeError("test failure")

    with pytest.raises(IssueCreationError) as excinfo:
        harness.run()

    assert str(excinfo.value) == error_message
    assert excinfo.value.repository == "mbland/handbook"
    assert len(harness.slack.reactions_calls) == 1
    assert len(harness.github.calls) == 1
    assert harness.slack.add_reaction_calls == []
    _check_error_response(harness, error_message)


def test_execute_files_an_issue_but_fails_to_add_reaction(harness: Harness) -> None:
    error_message = (
        f"created {helpers.ISSUE_URL} but failed to add "
        f"{helpers.SUCCESS_REACTION}: test failure"
    )
    harness.slack.add_reaction_error = RuntimeError("test failure")

    with pytest.raises(MarkerApplicationError) as excinfo:
        harness.run()

    assert str(excinfo.value) == error_message
    assert excinfo.value.issue_url == helpers.ISSUE_URL
    assert len(harness.slack.reactions_calls) == 1
    assert len(harness.github.calls) == 1
    assert len(harness.slack.add_reaction_calls) == 1
    _check_error_response(harness, error_message)


def test_execute_catches_and_logs_unanticipated_errors(harness: Harness) -> None:
    error_message = "unhandled error: RuntimeError\nmessage: " + json.dumps(
        helpers.reaction_added_message(), indent=2
    )
    harness.slack.channel_name_error = RuntimeError()

    with pytest.raises(UnanticipatedError) as excinfo:
        harness.run()

    assert str(excinfo.value) == error_message
    assert harness.next_calls == [harness.done]
    assert harness.reply.replies == [error_message]
    assert harness.logger.error_calls == [(None, error_message)]
    assert len(harness.middleware.in_flight) == 0


def test_execute_reports_malformed_reactions_as_unanticipated(harness: Harness) -> None:
    harness.slack.reactions = None

    with pytest.raises(UnanticipatedError, match="unhandled error: AttributeError: "):
        harness.run()

    assert harness.github.calls == []
    assert harness.logger.error_calls[0][0] is None
    assert len(harness.middleware.in_flight) == 0
    assert harness.next_calls == [harness.done]
