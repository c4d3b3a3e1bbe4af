"""Sends "meeting an hour before sunset" messages on a weekly schedule."""

__version__ = "1.0.0"
