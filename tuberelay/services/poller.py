"""
New-video detection.

Poll Cycle: for each tracked source whose check interval has elapsed, fetch
the newest upload of the last day and announce it unless it is the video
already announced for that source.

Recent-Window Scan: fetch every upload of the last couple of hours and
announce all of them, without looking at what was announced before.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from tuberelay.config import Settings
from tuberelay.core.results import CycleReport
from tuberelay.core.scheduler import utcnow
from tuberelay.core.state import RelayState
from tuberelay.services.notifier import NEW_VIDEO, RECENT_VIDEO
from tuberelay.types import NotifierProtocol, VideoSourceProtocol

logger = logging.getLogger(__name__)


class VideoPoller:
    """Runs Poll Cycles and Recent-Window Scans against a RelayState."""
    
    def __init__(
        self,
        state: RelayState,
        source: VideoSourceProtocol,
        notifier: NotifierProtocol,
        check_interval: timedelta = timedelta(hours=2),
        poll_window: timedelta = timedelta(hours=24),
        recent_window: timedelta = timedelta(hours=2),
        recent_max_results: int = 5,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.state = state
        self.source = source
        self.notifier = notifier
        self.check_interval = check_interval
        self.poll_window = poll_window
        self.recent_window = recent_window
        self.recent_max_results = recent_max_results
        self.clock = clock
    
    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        state: RelayState,
        source: VideoSourceProtocol,
        notifier: NotifierProtocol,
    ) -> "VideoPoller":
        return cls(
            state,
            source,
            notifier,
            check_interval=timedelta(seconds=settings.check_interval_seconds),
            poll_window=timedelta(hours=settings.poll_window_hours),
            recent_window=timedelta(hours=settings.recent_window_hours),
            recent_max_results=settings.recent_max_results,
        )
    
    async def run_poll_cycle(self) -> CycleReport:
        """Check every due source once; one failing source does not stop the others."""
        now = self.clock()
        published_after = now - self.poll_window
        report = CycleReport()
        logger.info("Checking new videos...")
        
        for source_id in self.state.mappings():
            if not self.state.is_due(source_id, now, self.check_interval):
                report.skipped += 1
                continue
            
            report.checked += 1
            try:
                await self._poll_source(source_id, now, published_after, report)
            except Exception as e:
                report.failures += 1
                logger.error(f"Error checking channel {source_id}: {e}", exc_info=True)
            
            if report.quota_exceeded:
                # Quota is per API key; the remaining sources stay due for the next cycle
                break
        
        logger.info(f"Poll cycle finished: {report}")
        return report
    
    async def _poll_source(
        self,
        source_id: str,
        now: datetime,
        published_after: datetime,
        report: CycleReport,
    ) -> None:
        result = await self.source.search_videos(source_id, published_after, max_results=1)
        if not result.ok:
            report.failures += 1
            if result.quota_exceeded:
                report.quota_exceeded = True
                logger.error(f"Quota exceeded. Please check your YouTube API quota. ({result.detail})")
            else:
                logger.error(f"Error checking channel {source_id}: {result.detail}")
            return
        
        # The mapping may have been removed or repointed while the query was in flight
        destination_id = self.state.destination_for(source_id)
        if destination_id is None:
            logger.debug(f"Channel {source_id} was removed during the check")
            return
        
        state = self.state.notification_state(source_id)
        state.last_checked_at = now
        
        if not result.videos:
            logger.debug(f"No videos from {source_id} since {published_after.isoformat()}")
            return
        
        video = result.videos[0]
        if video.video_id == state.last_notified_video_id:
            logger.debug(f"Video {video.video_id} from {source_id} already announced")
            return
        
        sent = await self.notifier.send_video(destination_id, video, NEW_VIDEO)
        if sent.ok:
            report.notified += 1
        else:
            report.failures += 1
        # Recorded even when delivery failed; the video is not retried
        state.last_notified_video_id = video.video_id
    
    async def run_recent_scan(self) -> CycleReport:
        """Announce every upload inside the recent window for every source, no de-duplication."""
        now = self.clock()
        published_after = now - self.recent_window
        report = CycleReport()
        logger.info("Checking for recent videos...")
        
        for source_id, destination_id in self.state.mappings().items():
            report.checked += 1
            try:
                await self._scan_source(source_id, destination_id, now, published_after, report)
            except Exception as e:
                report.failures += 1
                logger.error(f"Error scanning channel {source_id}: {e}", exc_info=True)
            
            if report.quota_exceeded:
                break
        
        logger.info(f"Recent scan finished: {report}")
        return report
    
    async def _scan_source(
        self,
        source_id: str,
        destination_id: str,
        now: datetime,
        published_after: datetime,
        report: CycleReport,
    ) -> None:
        result = await self.source.search_videos(
            source_id, published_after, max_results=self.recent_max_results
        )
        if not result.ok:
            report.failures += 1
            if result.quota_exceeded:
                report.quota_exceeded = True
                logger.error(f"Quota exceeded. Please check your YouTube API quota. ({result.detail})")
                self.state.backoff.widen(now)
            else:
                logger.error(f"Error scanning channel {source_id}: {result.detail}")
            return
        
        for video in result.videos:
            sent = await self.notifier.send_video(destination_id, video, RECENT_VIDEO)
            if sent.ok:
                report.notified += 1
            else:
                report.failures += 1
