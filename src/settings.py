"""Configuration loading for slack-github-issues.

Rules and service settings live in a single JSON file so they can be edited
without touching Python; tokens come from the environment.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Optional

from dotenv import load_dotenv

from core.config import Config, build_config

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH_ENV = "SLACK_GITHUB_ISSUES_CONFIG_PATH"
DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "slack-github-issues.json")

# Sections consumed by the host app; everything else belongs to the core.
_HOST_SECTIONS = ("server", "logging")

# Env vars whose values are masked in log output unless overridden.
DEFAULT_REDACT_PATTERNS = ["SLACK_API_TOKEN", "GITHUB_API_TOKEN"]


@dataclass(frozen=True)
class Settings:
    """Everything the app needs at startup."""

    config: Config
    host: str = "127.0.0.1"
    port: int = 8080
    logging: dict[str, Any] = field(default_factory=dict)
    path: str = DEFAULT_CONFIG_PATH


def config_path() -> str:
    load_dotenv()
    path = os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
    if not os.path.isabs(path):
        path = os.path.join(PROJECT_ROOT, path)
    return path


def _load_json_config(path: str) -> dict:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def load_settings(path: Optional[str] = None) -> Settings:
    """Load and validate the config file.

    Raises FileNotFoundError when the file is missing and core.config.ConfigError
    when it is invalid.
    """

    path = path or config_path()
    raw = _load_json_config(path)
    if not isinstance(raw, dict):
        # Let build_config report the shape problem.
        return Settings(config=build_config(raw), path=path)

    core_raw = {key: value for key, value in raw.items() if key not in _HOST_SECTIONS}
    server = raw.get("server", {}) or {}
    return Settings(
        config=build_config(core_raw),
        host=str(server.get("host", "127.0.0.1")),
        port=int(server.get("port", 8080)),
        logging=raw.get("logging", {}) or {},
        path=path,
    )
