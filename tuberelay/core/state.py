"""
In-memory relay state.

`RelayState` owns everything the poll routines and command handlers share:
the tracked mapping (mirrored to the Mapping Store), the per-source
notification state and the quota backoff. It is created once in `main`
and handed to the handlers through middleware.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

from tuberelay.core.store import MappingStore, ChannelMap

logger = logging.getLogger(__name__)


@dataclass
class NotificationState:
    """What was last announced for one source, and when it was last polled."""
    last_notified_video_id: str = ""
    last_checked_at: Optional[datetime] = None


class Backoff:
    """
    Delay between timer-driven poll cycles.
    
    `widen()` doubles the delay and arms a reset deadline; once the deadline
    has passed `current()` reports the default again.
    """
    
    def __init__(
        self,
        default_seconds: float,
        reset_after_seconds: float,
        max_seconds: Optional[float] = None,
    ):
        self.default_seconds = default_seconds
        self.reset_after = timedelta(seconds=reset_after_seconds)
        self.max_seconds = max_seconds
        self._seconds = default_seconds
        self._reset_at: Optional[datetime] = None
    
    def current(self, now: datetime) -> float:
        if self._reset_at is not None and now >= self._reset_at:
            logger.info(f"Backoff reset to {self.default_seconds:.0f}s")
            self._seconds = self.default_seconds
            self._reset_at = None
        return self._seconds
    
    def widen(self, now: datetime) -> float:
        seconds = self.current(now) * 2
        if self.max_seconds is not None:
            seconds = min(seconds, self.max_seconds)
        self._seconds = seconds
        self._reset_at = now + self.reset_after
        logger.warning(f"Backoff widened to {seconds:.0f}s until {self._reset_at.isoformat()}")
        return seconds


class RelayState:
    """Tracked mappings plus the process-lifetime notification state."""
    
    def __init__(self, store: MappingStore, backoff: Backoff, mapping: Optional[ChannelMap] = None):
        self.store = store
        self.backoff = backoff
        self._mapping: ChannelMap = dict(mapping or {})
        self._notifications: Dict[str, NotificationState] = {}
    
    @classmethod
    def from_store(cls, store: MappingStore, backoff: Backoff) -> "RelayState":
        """Build state from the persisted mapping. MappingParseError propagates."""
        return cls(store, backoff, store.load())
    
    def mappings(self) -> ChannelMap:
        """Snapshot of the tracked pairs, safe to iterate while commands mutate state."""
        return dict(self._mapping)
    
    def destination_for(self, source_id: str) -> Optional[str]:
        return self._mapping.get(source_id)
    
    def notification_state(self, source_id: str) -> NotificationState:
        state = self._notifications.get(source_id)
        if state is None:
            state = self._notifications[source_id] = NotificationState()
        return state
    
    def is_due(self, source_id: str, now: datetime, interval: timedelta) -> bool:
        """True when the source was never checked or the interval has elapsed since."""
        last_checked = self.notification_state(source_id).last_checked_at
        return last_checked is None or now - last_checked > interval
    
    def add_mapping(self, source_id: str, destination_id: str) -> None:
        """
        Upsert a mapping and forget what was announced for the source.
        
        The file is written first; if that fails the in-memory mapping is untouched.
        """
        updated = dict(self._mapping)
        updated[source_id] = destination_id
        self.store.save(updated)
        self._mapping = updated
        
        state = self.notification_state(source_id)
        state.last_notified_video_id = ""
        logger.info(f"Tracking {source_id} -> {destination_id}")
    
    def remove_mapping(self, source_id: str) -> bool:
        """Drop a mapping and its notification state. Returns whether it existed."""
        existed = source_id in self._mapping
        updated = {k: v for k, v in self._mapping.items() if k != source_id}
        self.store.save(updated)
        self._mapping = updated
        self._notifications.pop(source_id, None)
        logger.info(f"Stopped tracking {source_id} (existed={existed})")
        return existed
