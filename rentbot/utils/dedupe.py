"""
In-memory duplicate detection for inbound channel messages.

Webhook providers may deliver the same event more than once; message ids
seen within the TTL are reported as duplicates.
"""
import time
from collections import OrderedDict
from typing import Callable, Optional

from rentbot.core.logging import get_logger

logger = get_logger(__name__)


class InboundDeduplicator:
    """Bounded TTL set of channel message ids."""

    def __init__(
        self,
        ttl_seconds: float = 86400,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._seen: "OrderedDict[str, float]" = OrderedDict()

    def _evict(self, now: float) -> None:
        while self._seen:
            message_id, seen_at = next(iter(self._seen.items()))
            if now - seen_at < self.ttl_seconds and len(self._seen) <= self.max_entries:
                break
            self._seen.popitem(last=False)

    def check_and_mark(self, message_id: Optional[str]) -> bool:
        """
        Record ``message_id`` and report whether it was already seen.

        Messages without an id are never treated as duplicates.
        """
        if not message_id:
            return False

        now = self._clock()
        self._evict(now)

        if message_id in self._seen:
            logger.info("Duplicate inbound message skipped", message_id=message_id)
            return True

        self._seen[message_id] = now
        if len(self._seen) > self.max_entries:
            self._seen.popitem(last=False)
        return False

    def __len__(self) -> int:
        return len(self._seen)
