"""Telegram Bot API sender with error classification and retries."""

import logging
from typing import Any, Dict, Optional

import requests

from ..config.configuration import TelegramConfig
from ..utils.exceptions import TelegramAPIError, TelegramAuthError, TelegramRejectedError
from ..utils.retry import retry_with_backoff
from .base import MessageSender

logger = logging.getLogger(__name__)

class TelegramSender(MessageSender):
    """Sends plain text messages through the Telegram Bot API."""

    def __init__(
        self,
        bot_token: str,
        api_url: str = 'https://api.telegram.org',
        timeout_seconds: float = 10,
        retries: int = 3,
        backoff_in_seconds: float = 2,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the sender.

        Args:
            bot_token: Bot token issued by BotFather
            api_url: Bot API base URL
            timeout_seconds: Per-request timeout
            retries: Attempts per message for transient failures
            backoff_in_seconds: Wait before the first retry
            session: Optional requests session (one is created otherwise)
        """
        self.api_url = api_url.rstrip('/')
        self.timeout_seconds = timeout_seconds
        self._bot_token = bot_token
        self.session = session or requests.Session()
        self.session.headers.update({'Accept': 'application/json'})

        # Bad tokens and rejected payloads will not get better by retrying
        self._send_with_retry = retry_with_backoff(
            retries=retries,
            backoff_in_seconds=backoff_in_seconds,
            exceptions_to_check=TelegramAPIError,
            exceptions_to_raise=(TelegramAuthError, TelegramRejectedError)
        )(self._send_once)

    @classmethod
    def from_config(cls, config: TelegramConfig, **kwargs) -> 'TelegramSender':
        return cls(
            bot_token=config.bot_token,
            api_url=config.api_url,
            timeout_seconds=config.timeout_seconds,
            retries=config.retries,
            **kwargs
        )

    def _method_url(self, method: str) -> str:
        return f"{self.api_url}/bot{self._bot_token}/{method}"

    def send(self, chat_id: str, text: str) -> Dict[str, Any]:
        """
        Send a text message.

        Args:
            chat_id: Chat id or @channel username
            text: Message text

        Returns:
            The ``result`` object of the sendMessage response

        Raises:
            TelegramAuthError: If the bot token is rejected
            TelegramRejectedError: If Telegram refuses the request (unknown chat, bad text)
            TelegramAPIError: If the request still fails after all retries
        """
        result = self._send_with_retry(chat_id, text)
        logger.info(f"Message {result.get('message_id')} sent to {chat_id}")
        return result

    def _send_once(self, chat_id: str, text: str) -> Dict[str, Any]:
        try:
            response = self.session.post(
                self._method_url('sendMessage'),
                json={'chat_id': chat_id, 'text': text},
                timeout=self.timeout_seconds
            )
        except requests.exceptions.Timeout:
            raise TelegramAPIError(f"sendMessage to {chat_id} timed out")
        except requests.exceptions.RequestException as e:
            # Do not echo the URL, it contains the token
            raise TelegramAPIError(f"sendMessage to {chat_id} failed: {type(e).__name__}")

        return self._parse_response(response, chat_id)

    def _parse_response(self, response: requests.Response, chat_id: str) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.ok and payload.get('ok'):
            return payload.get('result') or {}

        status = response.status_code
        description = payload.get('description') or response.reason or 'no description'
        message = f"sendMessage to {chat_id} failed with {status}: {description}"

        if status == 401:
            raise TelegramAuthError(message, response)
        if status == 429 or status >= 500:
            raise TelegramAPIError(message, response)
        if 400 <= status < 500:
            raise TelegramRejectedError(message, response)

        # 2xx with ok=false
        raise TelegramAPIError(message, response)
