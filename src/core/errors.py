"""Outcomes of a pipeline run that are not a filed issue.

Every non-success termination of ``Middleware.execute`` raises one of these,
so hosts can tell an ignored event from a duplicate or a real failure by
type instead of by message text.
"""

from __future__ import annotations

import json
from typing import Any


class MiddlewareError(Exception):
    """Base class for every non-success pipeline outcome."""


class Unmatched(MiddlewareError):
    """The event matched no rule. Not an error; nothing is logged."""


class InProgress(MiddlewareError):
    """Another run for the same message is still executing."""

    def __init__(self, message_id: str) -> None:
        self.message_id = message_id
        super().__init__("already in progress")


class AlreadyProcessed(MiddlewareError):
    """The message already carries the success reaction."""

    def __init__(self, permalink: str) -> None:
        self.permalink = permalink
        super().__init__(f"already processed {permalink}")


class PipelineError(MiddlewareError):
    """A collaborator call failed during one of the pipeline stages."""

    def __init__(self, message: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(message)


class ReactionFetchError(PipelineError):
    def __init__(self, permalink: str, cause: BaseException) -> None:
        self.permalink = permalink
        super().__init__(f"failed to get reactions for {permalink}: {cause}", cause)


class IssueCreationError(PipelineError):
    def __init__(self, repository: str, cause: BaseException) -> None:
        self.repository = repository
        super().__init__(
            f"failed to create a GitHub issue in {repository}: {cause}", cause
        )


class MarkerApplicationError(PipelineError):
    """The issue exists but the success reaction could not be added."""

    def __init__(self, issue_url: str, success_reaction: str, cause: BaseException) -> None:
        self.issue_url = issue_url
        self.success_reaction = success_reaction
        super().__init__(
            f"created {issue_url} but failed to add {success_reaction}: {cause}", cause
        )


def describe_error(err: BaseException) -> str:
    """Return the class name of an error, plus its message if it has one."""

    name = type(err).__name__
    text = str(err)
    return f"{name}: {text}" if text else name


class UnanticipatedError(MiddlewareError):
    """Catch-all for failures outside the modeled stages."""

    def __init__(self, cause: BaseException, raw_event: Any) -> None:
        self.cause = cause
        self.raw_event = raw_event
        dumped = json.dumps(raw_event, indent=2, ensure_ascii=False, default=str)
        super().__init__(f"unhandled error: {describe_error(cause)}\nmessage: {dumped}")
