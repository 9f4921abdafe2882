"""Service modules for the relay."""

from tuberelay.services.youtube import YouTubeClient
from tuberelay.services.notifier import TelegramNotifier, VideoNotification
from tuberelay.services.poller import VideoPoller

__all__ = [
    "YouTubeClient",
    "TelegramNotifier",
    "VideoNotification",
    "VideoPoller",
]
