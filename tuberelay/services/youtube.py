"""YouTube Data API v3 search client."""

import html
import logging
from datetime import datetime, timezone
from typing import List, Optional

import httpx

from tuberelay.core.results import FailureReason, QueryResult
from tuberelay.types import SearchItem, SearchResponse, VideoCandidate

logger = logging.getLogger(__name__)

# `reason` values YouTube reports for quota and rate limiting
QUOTA_REASONS = {"quotaExceeded", "dailyLimitExceeded", "rateLimitExceeded", "userRateLimitExceeded"}

THUMBNAIL_PREFERENCE = ("high", "medium", "default")


def to_rfc3339(moment: datetime) -> str:
    """Format a datetime the way `publishedAfter` expects: UTC with a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_published_at(value: Optional[str]) -> Optional[datetime]:
    """Parse YouTube's ISO 8601 timestamps into an aware UTC datetime."""
    if not value:
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
    except ValueError:
        logger.warning(f"Unparseable publishedAt: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def pick_thumbnail(item: SearchItem) -> Optional[str]:
    thumbnails = item.get("snippet", {}).get("thumbnails") or {}
    for size in THUMBNAIL_PREFERENCE:
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return None


def parse_search_item(item: SearchItem) -> Optional[VideoCandidate]:
    """
    Turn one search result into a VideoCandidate; None when it has no video id.
    
    The API returns title and channelTitle HTML-entity encoded; they are decoded here.
    """
    video_id = (item.get("id") or {}).get("videoId")
    if not video_id:
        return None
    snippet = item.get("snippet") or {}
    return VideoCandidate(
        video_id=video_id,
        title=html.unescape(snippet.get("title", "")),
        published_at=parse_published_at(snippet.get("publishedAt")),
        thumbnail_url=pick_thumbnail(item),
        channel_title=html.unescape(snippet.get("channelTitle", "")),
    )


def _error_reasons(response: httpx.Response) -> List[str]:
    try:
        body = response.json()
    except ValueError:
        return []
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return []
    return [e.get("reason", "") for e in error.get("errors") or [] if isinstance(e, dict)]


class YouTubeClient:
    """Client for the `search.list` endpoint, returning QueryResult instead of raising."""
    
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.googleapis.com/youtube/v3",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=timeout)
    
    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()
    
    async def search_videos(
        self,
        channel_id: str,
        published_after: datetime,
        max_results: int = 1,
    ) -> QueryResult:
        """
        Videos uploaded by a channel after a moment, most recent first.
        
        Args:
            channel_id: YouTube channel id
            published_after: Lower bound on the publish time
            max_results: Upper bound on the number of results (1-50)
        
        Returns:
            QueryResult with VideoCandidate entries, or a failure reason
        """
        params = {
            "key": self.api_key,
            "channelId": channel_id,
            "part": "snippet",
            "type": "video",
            "order": "date",
            "publishedAfter": to_rfc3339(published_after),
            "maxResults": max_results,
        }
        try:
            response = await self.client.get(f"{self.base_url}/search", params=params)
            response.raise_for_status()
            payload: SearchResponse = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            reasons = _error_reasons(e.response)
            if status in (403, 429) or QUOTA_REASONS.intersection(reasons):
                return QueryResult.failure(
                    FailureReason.QUOTA_EXCEEDED,
                    f"HTTP {status} for {channel_id}: {', '.join(reasons) or 'forbidden'}",
                )
            return QueryResult.failure(
                FailureReason.QUERY_FAILED,
                f"HTTP {status} for {channel_id}: {', '.join(reasons) or e.response.reason_phrase}",
            )
        except httpx.HTTPError as e:
            return QueryResult.failure(FailureReason.QUERY_FAILED, f"{type(e).__name__} for {channel_id}: {e}")
        except ValueError as e:
            return QueryResult.failure(FailureReason.QUERY_FAILED, f"invalid JSON for {channel_id}: {e}")
        
        videos = []
        for item in payload.get("items") or []:
            candidate = parse_search_item(item)
            if candidate is not None:
                videos.append(candidate)
        return QueryResult.success(videos[:max_results])
