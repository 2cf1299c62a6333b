"""Connectivity check: ``python -m tgbridge``.

Loads ``TELEGRAM_*`` settings, calls ``getMe`` and ``getWebhookInfo`` and logs
the results as JSON.  Exits non-zero on any client error or on a result
that does not fit the expected type.
"""

import sys

from pydantic import ValidationError

from tgbridge.client import TelegramClient
from tgbridge.config import load_settings
from tgbridge.exceptions import TelegramSDKException
from tgbridge.logger import TgBridgeLogger
from tgbridge.models import User, WebhookInfo

logger = TgBridgeLogger.get_logger()


def main() -> int:
    settings = load_settings()
    try:
        with TelegramClient.from_settings(settings) as client:
            me = client.get_me().result_as(User)
            logger.info("Bot reachable", extra={"bot_id": me.id, "username": me.username})

            webhook = client.get_webhook_info().result_as(WebhookInfo)
            logger.info(
                "Webhook status",
                extra={"webhook_set": bool(webhook.url), "pending_update_count": webhook.pending_update_count},
            )
    except (TelegramSDKException, ValidationError) as exc:
        logger.error("Connectivity check failed", extra={"error_type": type(exc).__name__, "error": str(exc)})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
