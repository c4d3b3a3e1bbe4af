"""Custom exceptions for the Meeting Notifier."""

class NotifierError(Exception):
    """Base exception for notifier errors."""
    pass

class NotifierConfigError(NotifierError):
    """Exception raised for configuration errors."""
    pass

class TelegramAPIError(NotifierError):
    """Exception raised for errors returned by the Telegram Bot API."""
    def __init__(self, message, response=None):
        self.message = message
        self.response = response
        super().__init__(self.message)

class TelegramAuthError(TelegramAPIError):
    """Exception raised when the bot token is rejected."""
    pass

class TelegramRejectedError(TelegramAPIError):
    """Exception raised when Telegram rejects a request permanently (bad chat, bad payload)."""
    pass
