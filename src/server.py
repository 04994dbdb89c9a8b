"""Slack Events API endpoint.

Slack expects an acknowledgement within a few seconds, so the handler only
maps the payload and schedules the pipeline as a background task.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

from fastapi import BackgroundTasks, FastAPI
from pydantic import BaseModel

from adapters.github_client import GitHubClient
from adapters.slack_client import SlackClient
from adapters.slack_mapper import build_context
from core.errors import AlreadyProcessed, InProgress, MiddlewareError, Unmatched
from core.middleware import Middleware
from core.models import ReactionContext

LOGGER = logging.getLogger(__name__)


class SlackEventEnvelope(BaseModel):
    """Outer Events API payload.

    Attributes:
        type: "url_verification" or "event_callback"
        challenge: Echoed back during URL verification
        event_id: Unique id of the delivered event
        event: The inner event object
    """

    type: str
    challenge: Optional[str] = None
    event_id: Optional[str] = None
    event: Optional[dict[str, Any]] = None


def _next(done: Callable[[], None]) -> None:
    done()


async def dispatch(middleware: Middleware, context: ReactionContext, event_id: Optional[str] = None) -> None:
    """Run the pipeline for one event, logging how it ended."""

    def done() -> None:
        LOGGER.debug("Finished event %s", event_id)

    try:
        issue_url = await middleware.execute(context, _next, done)
    except (Unmatched, InProgress, AlreadyProcessed) as err:
        LOGGER.debug("Event %s skipped: %s", event_id, type(err).__name__)
    except MiddlewareError as err:
        # Already logged and replied to by the pipeline.
        LOGGER.debug("Event %s failed: %s", event_id, type(err).__name__)
    else:
        LOGGER.debug("Event %s filed %s", event_id, issue_url)


def create_app(
    middleware: Middleware,
    slack_client: SlackClient,
    github_client: Optional[GitHubClient] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Both clients own connection pools bound to the server's event loop.
        await slack_client.aclose()
        if github_client is not None:
            await github_client.aclose()
        LOGGER.info("API clients closed")

    app = FastAPI(title="slack-github-issues", lifespan=lifespan)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/slack/events")
    async def slack_events(envelope: SlackEventEnvelope, background_tasks: BackgroundTasks) -> dict[str, Any]:
        if envelope.type == "url_verification":
            return {"challenge": envelope.challenge}

        if envelope.type == "event_callback":
            context = build_context(envelope.event, slack_client)
            background_tasks.add_task(dispatch, middleware, context, envelope.event_id)
        else:
            LOGGER.info("Ignoring Slack payload of type %s", envelope.type)
        return {"ok": True}

    return app
