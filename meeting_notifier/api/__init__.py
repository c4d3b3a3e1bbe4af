"""Message delivery for the Meeting Notifier."""

from .base import MessageSender, render_message
from .telegram import TelegramSender

__all__ = ['MessageSender', 'render_message', 'TelegramSender']
