"""Track which bot messages answer which command invocation."""

from __future__ import annotations

import logging
from threading import RLock
from typing import Dict, List, Tuple

from .models import ResponseRecord

LOGGER = logging.getLogger(__name__)


class ResponseTracker:
    """Thread-safe, append-only index of responses keyed by invocation message id.

    One tracker lives for the whole running service and is shared by every
    dispatch context.
    """

    def __init__(self) -> None:
        self._records: Dict[str, List[ResponseRecord]] = {}
        self._lock = RLock()

    def register(self, invocation_id: str, channel_id: str, message_id: str) -> ResponseRecord:
        record = ResponseRecord(
            invocation_id=invocation_id,
            channel_id=channel_id,
            message_id=message_id,
        )
        with self._lock:
            self._records.setdefault(invocation_id, []).append(record)
        LOGGER.debug(
            "Registered response %s in %s for invocation %s", message_id, channel_id, invocation_id
        )
        return record

    def responses_for(self, invocation_id: str) -> Tuple[ResponseRecord, ...]:
        with self._lock:
            return tuple(self._records.get(invocation_id, ()))

    def pop(self, invocation_id: str) -> Tuple[ResponseRecord, ...]:
        """Remove and return every record of ``invocation_id``."""
        with self._lock:
            return tuple(self._records.pop(invocation_id, ()))

    def __contains__(self, invocation_id: object) -> bool:
        with self._lock:
            return invocation_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return sum(len(records) for records in self._records.values())
