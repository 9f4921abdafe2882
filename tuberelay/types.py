"""
Type definitions for the relay using TypedDict, dataclasses and Protocol.

Raw payload shapes mirror the YouTube Data API v3 `search.list` response;
only the fields the relay reads are declared.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import TypedDict, Protocol, Optional, List, Dict

from tuberelay.core.results import QueryResult, SendResult


# ============== YouTube payloads ==============

class ThumbnailData(TypedDict, total=False):
    """One thumbnail variant."""
    url: str
    width: int
    height: int


class SnippetData(TypedDict, total=False):
    """`snippet` part of a search result."""
    publishedAt: str
    channelId: str
    title: str
    description: str
    thumbnails: Dict[str, ThumbnailData]  # "default", "medium", "high"
    channelTitle: str


class SearchItemId(TypedDict, total=False):
    kind: str
    videoId: str


class SearchItem(TypedDict, total=False):
    """Single entry of `items` in a search response."""
    kind: str
    etag: str
    id: SearchItemId
    snippet: SnippetData


class SearchResponse(TypedDict, total=False):
    kind: str
    nextPageToken: str
    items: List[SearchItem]


# ============== Data Models ==============

@dataclass(frozen=True)
class VideoCandidate:
    """A video returned by a search, consumed immediately to build a notification."""
    video_id: str
    title: str
    published_at: Optional[datetime]
    thumbnail_url: Optional[str]
    channel_title: str


# ============== Service Protocols ==============

class VideoSourceProtocol(Protocol):
    """Protocol for the video platform search client."""
    
    async def search_videos(
        self,
        channel_id: str,
        published_after: datetime,
        max_results: int = 1,
    ) -> QueryResult:
        """Most recent videos of a channel published after a moment, newest first."""
        ...


class NotifierProtocol(Protocol):
    """Protocol for the chat platform delivery side."""
    
    async def send_video(
        self,
        destination_id: str,
        video: VideoCandidate,
        headline_key: str = "notify_new_video",
    ) -> SendResult:
        """Send one video notification to a destination chat."""
        ...
