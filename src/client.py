"""Slack and GitHub client factory for slack-github-issues.

We read the API tokens via python-dotenv to keep secrets out of the repo and
out of the JSON config.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from adapters.github_client import GitHubClient
from adapters.slack_client import SlackClient
from core.config import Config


def build_clients(config: Config) -> tuple[SlackClient, GitHubClient]:
    """Create both API clients from environment tokens and config timeouts."""

    load_dotenv()

    slack_token = os.getenv("SLACK_API_TOKEN")
    github_token = os.getenv("GITHUB_API_TOKEN")

    # Fail fast on missing credentials instead of on the first reaction.
    if not slack_token or not github_token:
        raise RuntimeError("Missing SLACK_API_TOKEN or GITHUB_API_TOKEN in environment")

    logging.getLogger(__name__).info("Initializing Slack and GitHub clients")

    slack_client = SlackClient(
        slack_token,
        config.success_reaction,
        timeout=config.slack_timeout_ms / 1000,
        base_url=config.slack_api_base_url,
    )
    github_client = GitHubClient(
        github_token,
        timeout=config.github_timeout_ms / 1000,
        base_url=config.github_api_base_url,
    )
    return slack_client, github_client
