"""
Result types for calls to the video and chat platforms.

Platform calls never raise for expected failures; they return one of these
so callers have to look at `ok` before using the payload.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Any


class FailureReason(Enum):
    """Why a platform call did not succeed."""
    QUOTA_EXCEEDED = "quota_exceeded"
    QUERY_FAILED = "query_failed"
    DESTINATION_NOT_FOUND = "destination_not_found"
    SEND_FAILED = "send_failed"
    EMPTY_NOTIFICATION = "empty_notification"


@dataclass(frozen=True)
class QueryResult:
    """Outcome of a video search."""
    ok: bool
    videos: List[Any] = field(default_factory=list)  # List[VideoCandidate]
    reason: Optional[FailureReason] = None
    detail: str = ""
    
    @classmethod
    def success(cls, videos: List[Any]) -> "QueryResult":
        return cls(ok=True, videos=list(videos))
    
    @classmethod
    def failure(cls, reason: FailureReason, detail: str = "") -> "QueryResult":
        return cls(ok=False, reason=reason, detail=detail)
    
    @property
    def quota_exceeded(self) -> bool:
        return self.reason is FailureReason.QUOTA_EXCEEDED


@dataclass(frozen=True)
class SendResult:
    """Outcome of delivering one notification."""
    ok: bool
    reason: Optional[FailureReason] = None
    detail: str = ""
    message_id: Optional[int] = None
    
    @classmethod
    def success(cls, message_id: Optional[int] = None) -> "SendResult":
        return cls(ok=True, message_id=message_id)
    
    @classmethod
    def failure(cls, reason: FailureReason, detail: str = "") -> "SendResult":
        return cls(ok=False, reason=reason, detail=detail)


@dataclass
class CycleReport:
    """Counters for one Poll Cycle or Recent-Window Scan run."""
    checked: int = 0
    skipped: int = 0
    notified: int = 0
    failures: int = 0
    quota_exceeded: bool = False
    
    def __str__(self) -> str:
        return (
            f"checked={self.checked} skipped={self.skipped} "
            f"notified={self.notified} failures={self.failures}"
        )
