"""Core modules for the relay."""

from tuberelay.core.errors import RelayError, PersistenceError, MappingParseError, MappingWriteError
from tuberelay.core.results import FailureReason, QueryResult, SendResult, CycleReport
from tuberelay.core.store import MappingStore
from tuberelay.core.state import RelayState, NotificationState, Backoff
from tuberelay.core.scheduler import CycleRunner

__all__ = [
    "RelayError",
    "PersistenceError",
    "MappingParseError",
    "MappingWriteError",
    "FailureReason",
    "QueryResult",
    "SendResult",
    "CycleReport",
    "MappingStore",
    "RelayState",
    "NotificationState",
    "Backoff",
    "CycleRunner",
]
