"""Client configuration -- environment variables and their defaults.

Reads ``TELEGRAM_*`` variables (optionally from a ``.env`` file via
``python-dotenv``) into a :class:`TelegramSettings` model.  Nothing is read at
import time; call :func:`load_settings` from the application's entry point.

=============================== ============================ ==========
Variable                        Meaning                      Default
=============================== ============================ ==========
``TELEGRAM_BOT_TOKEN``          bot token from BotFather     (required)
``TELEGRAM_API_BASE_URL``       Bot API host                 ``https://api.telegram.org``
``TELEGRAM_HTTP_TIMEOUT``       per-attempt timeout, seconds ``10``
``TELEGRAM_HTTP_RETRIES``       attempts per call            ``3``
``TELEGRAM_HTTP_RETRY_DELAY``   pause between attempts, ms   ``500``
``TELEGRAM_DEFAULT_CHAT_ID``    chat used by ``notify()``    unset
=============================== ============================ ==========
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import logging
import os
from typing import Mapping, Optional

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# ── tgbridge ─────────────────────────────────────────────────────────────────
from tgbridge.models import DEFAULT_API_BASE_URL, RetryPolicy

logger = logging.getLogger("tgbridge.config")

DEFAULT_TIMEOUT: float = 10.0
DEFAULT_RETRIES: int = 3
DEFAULT_RETRY_DELAY_MS: int = 500


class TelegramSettings(BaseModel):
    """Resolved client configuration."""

    bot_token: str = Field("", repr=False)
    api_base_url: str = DEFAULT_API_BASE_URL
    http_timeout: float = DEFAULT_TIMEOUT
    http_retries: int = DEFAULT_RETRIES
    http_retry_delay: int = DEFAULT_RETRY_DELAY_MS
    default_chat_id: Optional[str] = None

    model_config = {"frozen": True}

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            timeout=self.http_timeout,
            max_attempts=self.http_retries,
            delay_ms=self.http_retry_delay,
        )


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_number(env: Mapping[str, str], name: str, default, cast, minimum):
    """Read *name* from *env* and convert it with *cast*.

    Missing, non-numeric, or below-*minimum* values fall back to *default*
    with a warning.
    """
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-numeric setting", extra={"setting": name, "value": raw, "default": default})
        return default
    if not value >= minimum:
        logger.warning("Ignoring out-of-range setting", extra={"setting": name, "value": raw, "default": default})
        return default
    return value


# ── Public API ───────────────────────────────────────────────────────────────


def load_settings(env_file: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> TelegramSettings:
    """Resolve :class:`TelegramSettings` from the environment.

    Args:
        env_file: Path to a ``.env`` file. When omitted, ``python-dotenv``
            searches upwards from the working directory. Variables already
            present in the process environment win over the file.
        environ: Mapping to read instead of :data:`os.environ`; no ``.env``
            file is loaded when given.
    """
    if environ is None:
        load_dotenv(env_file)
        environ = os.environ

    settings = TelegramSettings(
        bot_token=environ.get("TELEGRAM_BOT_TOKEN", ""),
        api_base_url=environ.get("TELEGRAM_API_BASE_URL") or DEFAULT_API_BASE_URL,
        http_timeout=_parse_number(environ, "TELEGRAM_HTTP_TIMEOUT", DEFAULT_TIMEOUT, float, 0.001),
        http_retries=_parse_number(environ, "TELEGRAM_HTTP_RETRIES", DEFAULT_RETRIES, int, 1),
        http_retry_delay=_parse_number(environ, "TELEGRAM_HTTP_RETRY_DELAY", DEFAULT_RETRY_DELAY_MS, int, 0),
        default_chat_id=environ.get("TELEGRAM_DEFAULT_CHAT_ID") or None,
    )

    # ── Startup diagnostics ──────────────────────────────────────────────
    if settings.bot_token:
        logger.info("Config loaded: TELEGRAM_BOT_TOKEN is set", extra={"api_base_url": settings.api_base_url})
    else:
        logger.warning("Config loaded: TELEGRAM_BOT_TOKEN is NOT set")

    return settings
