"""Core configuration dataclasses.

We keep config loading outside the core, but these dataclasses define the
shape the core expects and validate it once so adapters and app layers can
build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

DEFAULT_TIMEOUT_MS = 5000

_CONFIG_KEYS = {
    "githubUser": str,
    "githubTimeout": int,
    "githubApiBaseUrl": str,
    "slackTimeout": int,
    "slackApiBaseUrl": str,
    "successReaction": str,
    "rules": list,
}
_REQUIRED_CONFIG_KEYS = ("successReaction", "rules")

_RULE_KEYS = {
    "reactionName": str,
    "githubRepository": str,
    "channelName": str,
}
_REQUIRED_RULE_KEYS = ("reactionName", "githubRepository")

_TYPE_NAMES = {str: "a string", int: "an integer", list: "a list"}


class ConfigError(ValueError):
    """Raised when the configuration fails validation."""

    def __init__(self, problems: List[str]) -> None:
        self.problems = list(problems)
        super().__init__("Invalid configuration:\n  " + "\n  ".join(self.problems))


@dataclass(frozen=True)
class Rule:
    """Maps a reaction (and optionally a channel) to a GitHub repository."""

    reaction_name: str
    github_repository: str
    channel_name: Optional[str] = None

    def matches(self, reaction_name: str, channel_name: Optional[str]) -> bool:
        if self.reaction_name != reaction_name:
            return False
        # Rules without a channel apply to every channel.
        return self.channel_name is None or self.channel_name == channel_name


@dataclass(frozen=True)
class Config:
    """Validated settings shared by every pipeline run."""

    rules: Tuple[Rule, ...]
    success_reaction: str
    github_user: Optional[str] = None
    github_timeout_ms: int = DEFAULT_TIMEOUT_MS
    slack_timeout_ms: int = DEFAULT_TIMEOUT_MS
    github_api_base_url: Optional[str] = None
    slack_api_base_url: Optional[str] = None


def _check_types(
    raw: dict, schema: dict, required: Tuple[str, ...], label: str
) -> List[str]:
    problems: List[str] = []
    for key in required:
        if key not in raw:
            problems.append(f"{label}missing {key}")
    for key, value in raw.items():
        expected = schema.get(key)
        if expected is None:
            problems.append(f"{label}unknown property {key}")
        # bool is an int subclass, so reject it explicitly for numeric fields.
        elif not isinstance(value, expected) or isinstance(value, bool):
            problems.append(f"{label}{key} must be {_TYPE_NAMES[expected]}")
    return problems


def _qualify_repository(repository: str, github_user: Optional[str]) -> Optional[str]:
    if "/" in repository:
        owner, _, name = repository.partition("/")
        if owner and name and "/" not in name:
            return repository
        return None
    if not github_user or not repository:
        return None
    return f"{github_user}/{repository}"


def _build_rule(index: int, raw: Any, github_user: Optional[str]) -> Tuple[Optional[Rule], List[str]]:
    label = f"rules[{index}]: "
    if not isinstance(raw, dict):
        return None, [f"{label}must be an object"]

    problems = _check_types(raw, _RULE_KEYS, _REQUIRED_RULE_KEYS, label)
    if problems:
        return None, problems

    if not raw["reactionName"]:
        problems.append(f"{label}reactionName must not be empty")
    if "channelName" in raw and not raw["channelName"]:
        problems.append(f"{label}channelName must not be empty")
    repository = _qualify_repository(raw["githubRepository"], github_user)
    if repository is None:
        problems.append(
            f"{label}githubRepository must be \"owner/repo\", "
            "or a repo name when githubUser is set"
        )
    if problems:
        return None, problems

    return (
        Rule(
            reaction_name=raw["reactionName"],
            github_repository=repository,
            channel_name=raw.get("channelName"),
        ),
        [],
    )


def build_config(raw: Any) -> Config:
    """Validate a parsed configuration object and build the core Config.

    All problems are collected before raising so a broken config file can be
    fixed in a single pass.
    """

    if not isinstance(raw, dict):
        raise ConfigError(["configuration must be an object"])

    problems = _check_types(raw, _CONFIG_KEYS, _REQUIRED_CONFIG_KEYS, "")
    if "successReaction" in raw and raw["successReaction"] == "":
        problems.append("successReaction must not be empty")
    for key in ("githubTimeout", "slackTimeout"):
        value = raw.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value <= 0:
            problems.append(f"{key} must be positive")

    github_user = raw.get("githubUser") if isinstance(raw.get("githubUser"), str) else None
    rules: List[Rule] = []
    raw_rules = raw.get("rules")
    if isinstance(raw_rules, list):
        if not raw_rules:
            problems.append("rules must not be empty")
        for index, raw_rule in enumerate(raw_rules):
            rule, rule_problems = _build_rule(index, raw_rule, github_user)
            problems.extend(rule_problems)
            if rule is not None:
                rules.append(rule)

    if problems:
        raise ConfigError(problems)

    return Config(
        rules=tuple(rules),
        success_reaction=raw["successReaction"],
        github_user=github_user,
        github_timeout_ms=raw.get("githubTimeout", DEFAULT_TIMEOUT_MS),
        slack_timeout_ms=raw.get("slackTimeout", DEFAULT_TIMEOUT_MS),
        github_api_base_url=raw.get("githubApiBaseUrl"),
        slack_api_base_url=raw.get("slackApiBaseUrl"),
    )
