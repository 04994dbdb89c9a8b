"""Application entry point for the slack-github-issues service."""

from __future__ import annotations

import argparse
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

import uvicorn
from art import tprint
from dotenv import load_dotenv

import settings
from adapters.message_logger import MessageLogger
from client import build_clients
from core.config import ConfigError
from core.middleware import Middleware
from server import create_app

NAME = "SLACK ISSUES"
FONT = "small"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", True):
        return []
    values = []
    for name in redact_cfg.get("patterns", settings.DEFAULT_REDACT_PATTERNS):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging(config: dict) -> None:
    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/slack-github-issues.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _run(config_path: Optional[str]) -> None:
    _print_banner()
    app_settings = settings.load_settings(config_path)
    if app_settings.logging.get("enabled", True):
        _configure_logging(app_settings.logging)
    logger = logging.getLogger(__name__)

    logger.info("Starting slack-github-issues")
    logger.info("%s rules are loaded from %s", len(app_settings.config.rules), app_settings.path)

    slack_client, github_client = build_clients(app_settings.config)
    middleware = Middleware(
        app_settings.config,
        slack_client,
        github_client,
        MessageLogger(logging.getLogger("slack_github_issues")),
    )
    app = create_app(middleware, slack_client, github_client)

    logger.info("Listening for Slack events on %s:%s", app_settings.host, app_settings.port)
    uvicorn.run(app, host=app_settings.host, port=app_settings.port, log_config=None)


def _check(config_path: Optional[str]) -> int:
    try:
        app_settings = settings.load_settings(config_path)
    except (FileNotFoundError, ConfigError) as err:
        print(err)
        return 1
    print(f"{app_settings.path}: {len(app_settings.config.rules)} rules are valid")
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="slack-github-issues")
    parser.add_argument(
        "--config",
        help=f"Path to the JSON config (default: ${settings.CONFIG_PATH_ENV} or config/slack-github-issues.json)",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Serve the Slack Events API endpoint")
    subparsers.add_parser("check", help="Validate the config file and exit")

    args = parser.parse_args(argv)
    if args.command == "check":
        raise SystemExit(_check(args.config))
    _run(args.config)


if __name__ == "__main__":
    main()
