"""Tests for the ``python -m tgbridge`` connectivity check."""

import sys
import os
from unittest.mock import patch, MagicMock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tgbridge import __main__ as cli
from tgbridge.config import TelegramSettings
from tgbridge.exceptions import ApiError
from tgbridge.models import ResponseEnvelope


def _client(get_me=None, webhook=None) -> MagicMock:
    client = MagicMock()
    client.__enter__.return_value = client
    client.get_me.return_value = get_me or ResponseEnvelope(
        ok=True, result={"id": 1, "is_bot": True, "first_name": "Bot", "username": "test_bot"}
    )
    client.get_webhook_info.return_value = webhook or ResponseEnvelope(
        ok=True, result={"url": "", "has_custom_certificate": False, "pending_update_count": 0}
    )
    return client


class TestMain:
    """Validate exit codes of the connectivity check."""

    @patch("tgbridge.__main__.load_settings", return_value=TelegramSettings())
    def test_missing_token_fails(self, mock_settings: MagicMock) -> None:
        assert cli.main() == 1

    @patch("tgbridge.__main__.TelegramClient.from_settings")
    @patch("tgbridge.__main__.load_settings", return_value=TelegramSettings(bot_token="abc"))
    def test_success(self, mock_settings: MagicMock, mock_from_settings: MagicMock) -> None:
        client = _client()
        mock_from_settings.return_value = client
        assert cli.main() == 0
        client.get_me.assert_called_once()
        client.get_webhook_info.assert_called_once()

    @patch("tgbridge.__main__.TelegramClient.from_settings")
    @patch("tgbridge.__main__.load_settings", return_value=TelegramSettings(bot_token="abc"))
    def test_api_error(self, mock_settings: MagicMock, mock_from_settings: MagicMock) -> None:
        client = _client()
        client.get_me.side_effect = ApiError("Unauthorized", 401)
        mock_from_settings.return_value = client
        assert cli.main() == 1

    @patch("tgbridge.__main__.TelegramClient.from_settings")
    @patch("tgbridge.__main__.load_settings", return_value=TelegramSettings(bot_token="abc"))
    def test_unexpected_result_shape(self, mock_settings: MagicMock, mock_from_settings: MagicMock) -> None:
        client = _client(get_me=ResponseEnvelope(ok=True, result={"id": 1}))
        mock_from_settings.return_value = client
        assert cli.main() == 1
        client.get_webhook_info.assert_not_called()
