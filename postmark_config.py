"""
postmark_config.py
------------------
Process configuration, resolved once at startup.

Required:
    POSTMARK_SERVER_TOKEN   → Postmark server API token
    DEFAULT_SENDER_EMAIL    → From address used when a tool call omits `from`
    DEFAULT_MESSAGE_STREAM  → stream used when a tool call omits `messageStream`

Optional:
    POSTMARK_ACCOUNT_TOKEN    → account token for the domain endpoints
    POSTMARK_API_URL          → defaults to https://api.postmarkapp.com
    POSTMARK_TIMEOUT_SECONDS  → per-request timeout (default 30)
    LOG_LEVEL                 → logging level name (default INFO)
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv

from tool_errors import ConfigurationMissing

DEFAULT_API_URL = "https://api.postmarkapp.com"
DEFAULT_TIMEOUT_SECONDS = 30.0

REQUIRED_VARIABLES = (
    "POSTMARK_SERVER_TOKEN",
    "DEFAULT_SENDER_EMAIL",
    "DEFAULT_MESSAGE_STREAM",
)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"


@dataclass(frozen=True)
class Settings:
    server_token: str = field(repr=False)
    default_sender: str
    default_message_stream: str
    account_token: Optional[str] = field(default=None, repr=False)
    api_base_url: str = DEFAULT_API_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def load_settings(environ: Mapping[str, str] = None) -> Settings:
    """
    Build Settings from the environment.

    Raises ConfigurationMissing naming every required variable that is
    absent or blank, so a misconfigured process reports all problems at once.
    """
    env = os.environ if environ is None else environ

    missing = [name for name in REQUIRED_VARIABLES if not _clean(env.get(name))]
    if missing:
        raise ConfigurationMissing(missing)

    raw_timeout = _clean(env.get("POSTMARK_TIMEOUT_SECONDS"))
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SECONDS
    except ValueError:
        raise ConfigurationMissing(["POSTMARK_TIMEOUT_SECONDS (must be a number)"]) from None
    if timeout <= 0:
        raise ConfigurationMissing(["POSTMARK_TIMEOUT_SECONDS (must be positive)"])

    return Settings(
        server_token=_clean(env.get("POSTMARK_SERVER_TOKEN")),
        default_sender=_clean(env.get("DEFAULT_SENDER_EMAIL")),
        default_message_stream=_clean(env.get("DEFAULT_MESSAGE_STREAM")),
        account_token=_clean(env.get("POSTMARK_ACCOUNT_TOKEN")) or None,
        api_base_url=(_clean(env.get("POSTMARK_API_URL")) or DEFAULT_API_URL).rstrip("/"),
        timeout_seconds=timeout,
        log_level=_clean(env.get("LOG_LEVEL")).upper() or "INFO",
    )


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr; stdout carries the MCP stdio stream."""
    value = getattr(logging, level.upper(), None)
    if not isinstance(value, int):
        value = logging.INFO
    logging.basicConfig(level=value, format=LOG_FORMAT)
    logging.getLogger().setLevel(value)


def resolve_settings() -> Settings:
    """Load .env (if present) and resolve settings. Used by the entry points."""
    load_dotenv()
    return load_settings()
