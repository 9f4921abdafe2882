"""
Test doubles for the video and chat platforms.

Both record every call so tests can assert on queries made and
notifications delivered.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from tuberelay.core.results import FailureReason, QueryResult, SendResult
from tuberelay.types import VideoCandidate

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_video(
    video_id: str = "vX",
    title: str = "Brand new upload",
    hours_ago: float = 1,
    channel_title: str = "Some Channel",
    thumbnail_url: Optional[str] = "https://i.ytimg.com/vi/vX/hqdefault.jpg",
) -> VideoCandidate:
    return VideoCandidate(
        video_id=video_id,
        title=title,
        published_at=NOW - timedelta(hours=hours_ago),
        thumbnail_url=thumbnail_url,
        channel_title=channel_title,
    )


class FakeClock:
    """Callable clock that only moves when told to."""
    
    def __init__(self, now: datetime = NOW):
        self.now = now
    
    def __call__(self) -> datetime:
        return self.now
    
    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeVideoSource:
    """Stands in for YouTubeClient."""
    
    def __init__(self):
        self.calls: List[Tuple[str, datetime, int]] = []
        self._results: Dict[str, QueryResult] = {}
        self._errors: Dict[str, Exception] = {}
    
    def set_videos(self, channel_id: str, *videos: VideoCandidate):
        self._results[channel_id] = QueryResult.success(list(videos))
    
    def set_failure(self, channel_id: str, reason: FailureReason, detail: str = "boom"):
        self._results[channel_id] = QueryResult.failure(reason, detail)
    
    def set_exception(self, channel_id: str, error: Exception):
        self._errors[channel_id] = error
    
    def queried(self) -> List[str]:
        return [channel_id for channel_id, _, _ in self.calls]
    
    async def search_videos(self, channel_id: str, published_after: datetime, max_results: int = 1) -> QueryResult:
        self.calls.append((channel_id, published_after, max_results))
        if channel_id in self._errors:
            raise self._errors[channel_id]
        result = self._results.get(channel_id, QueryResult.success([]))
        if not result.ok:
            return result
        return QueryResult.success(result.videos[:max_results])


class FakeNotifier:
    """Stands in for TelegramNotifier."""
    
    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []
        self._results: Dict[str, SendResult] = {}
    
    def fail_for(self, destination_id: str, reason: FailureReason = FailureReason.DESTINATION_NOT_FOUND):
        self._results[destination_id] = SendResult.failure(reason, "chat not found")
    
    def sent_to(self, destination_id: str) -> List[str]:
        return [video_id for dest, video_id, _ in self.sent if dest == destination_id]
    
    async def send_video(self, destination_id: str, video: VideoCandidate, headline_key: str = "notify_new_video") -> SendResult:
        self.sent.append((destination_id, video.video_id, headline_key))
        return self._results.get(destination_id, SendResult.success(len(self.sent)))
