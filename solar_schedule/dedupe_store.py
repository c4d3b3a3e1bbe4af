"""Last-fired bookkeeping for rules, used to suppress duplicate notifications."""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional

from .models import SolarScheduleError
from .utils import ensure_utc, from_epoch_ms, to_epoch_ms

logger = logging.getLogger(__name__)


class DedupeStoreError(SolarScheduleError):
    """Raised when the store cannot be written."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(f"{message} ({path})" if path else message)


class DedupeStore(ABC):
    """Maps a rule's dedupe key to the instant it last fired."""

    @abstractmethod
    def get(self, key: str) -> Optional[datetime]:
        """
        Get when ``key`` last fired.

        Args:
            key: Rule dedupe key

        Returns:
            UTC datetime of the last firing, or None if it never fired
        """
        pass

    @abstractmethod
    def set(self, key: str, instant: datetime) -> None:
        """
        Record that ``key`` fired at ``instant``.

        Args:
            key: Rule dedupe key
            instant: Timezone-aware instant of the firing
        """
        pass

    def load(self) -> None:
        """Read persisted state. No-op for stores without backing storage."""
        pass

    def save(self) -> None:
        """Persist state. No-op for stores without backing storage."""
        pass


class InMemoryDedupeStore(DedupeStore):
    """Dictionary-backed store; nothing survives the process."""

    def __init__(self, entries: Optional[Dict[str, datetime]] = None):
        self._entries: Dict[str, datetime] = {}
        for key, instant in (entries or {}).items():
            self.set(key, instant)

    def get(self, key: str) -> Optional[datetime]:
        return self._entries.get(key)

    def set(self, key: str, instant: datetime) -> None:
        instant = ensure_utc(instant)
        current = self._entries.get(key)
        # Never move a key backwards in time
        if current is None or instant > current:
            self._entries[key] = instant

    def items(self):
        return self._entries.items()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


class JsonFileDedupeStore(InMemoryDedupeStore):
    """
    Store persisted as a flat JSON object of key -> epoch milliseconds (as a string).

    Reads are forgiving: a missing or corrupt file is an empty store, so a bad
    cache can never suppress a notification. Writes are atomic and raise
    :class:`DedupeStoreError` on failure.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = path

    def load(self) -> None:
        self._entries = {}

        if not os.path.exists(self.path):
            logger.info(f"No dedupe cache at {self.path}, starting empty")
            return

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read dedupe cache {self.path}, starting empty: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Dedupe cache {self.path} is not a JSON object, starting empty")
            return

        for key, value in data.items():
            try:
                self.set(key, from_epoch_ms(int(value)))
            except (TypeError, ValueError, OverflowError) as e:
                logger.warning(f"Ignoring unreadable cache entry {key!r}={value!r}: {e}")

        logger.info(f"Loaded {len(self._entries)} dedupe entries from {self.path}")

    def save(self) -> None:
        payload = {key: str(to_epoch_ms(instant)) for key, instant in self._entries.items()}
        directory = os.path.dirname(os.path.abspath(self.path))

        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix='.dedupe-', suffix='.tmp', dir=directory)
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(payload, f, sort_keys=True)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as e:
            raise DedupeStoreError(f"Failed to write dedupe cache: {e}", self.path) from e

        logger.info(f"Saved {len(payload)} dedupe entries to {self.path}")
