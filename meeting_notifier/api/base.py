"""Base interface for message senders."""

from abc import ABC, abstractmethod
from typing import Any, Dict


class MessageSender(ABC):
    """Abstract base class for anything that can deliver a text message to a chat."""

    @abstractmethod
    def send(self, chat_id: str, text: str) -> Dict[str, Any]:
        """
        Deliver ``text`` to ``chat_id``.

        Args:
            chat_id: Destination chat identifier
            text: Message body

        Returns:
            Delivery metadata reported by the backend

        Raises:
            NotifierError: If the message could not be delivered
        """
        pass


def render_message(template: str, hhmm: str) -> str:
    """Fill the ``{HHMM}`` placeholder of a message template."""
    return template.replace('{HHMM}', hhmm)
