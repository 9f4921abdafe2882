"""
Delivery of video notifications to Telegram chats.

A notification is a photo (the video thumbnail) with an HTML caption holding
the title link, the headline naming the channel, the watch link and the
publish time. Without a usable thumbnail it degrades to a text message.
"""

import html
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from aiogram import Bot
from aiogram.enums import ParseMode
from aiogram.exceptions import (
    TelegramAPIError,
    TelegramBadRequest,
    TelegramForbiddenError,
    TelegramNotFound,
)

from tuberelay.core.results import FailureReason, SendResult
from tuberelay.texts import TextManager, get_texts
from tuberelay.types import VideoCandidate

logger = logging.getLogger(__name__)

# Telegram caption limit
TELEGRAM_CAPTION_LIMIT = 1024
# Keeps the rendered caption well under the limit
MAX_TITLE_LENGTH = 300
MAX_CHANNEL_LENGTH = 100

# Text keys for the headline line
NEW_VIDEO = "notify_new_video"
RECENT_VIDEO = "notify_recent_video"

_NUMERIC_CHAT_ID = re.compile(r"-?\d+")
_CHAT_NOT_FOUND_MARKERS = ("chat not found", "peer_id_invalid", "channel_invalid", "chat_id is empty")


def resolve_chat_id(destination_id: str) -> Union[int, str]:
    """Numeric ids become ints; anything else (e.g. @channel) is passed through."""
    destination_id = destination_id.strip()
    if _NUMERIC_CHAT_ID.fullmatch(destination_id):
        return int(destination_id)
    return destination_id


def _is_chat_missing(error: TelegramAPIError) -> bool:
    if isinstance(error, (TelegramForbiddenError, TelegramNotFound)):
        return True
    message = str(error).lower()
    return any(marker in message for marker in _CHAT_NOT_FOUND_MARKERS)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


@dataclass(frozen=True)
class VideoNotification:
    """Everything shown for one video."""
    title: str
    url: str
    channel_title: str
    timestamp: Optional[datetime]
    thumbnail_url: Optional[str]
    headline_key: str = NEW_VIDEO
    
    @classmethod
    def from_video(cls, video: VideoCandidate, watch_url: str, headline_key: str = NEW_VIDEO) -> "VideoNotification":
        return cls(
            title=video.title,
            url=f"{watch_url}{video.video_id}",
            channel_title=video.channel_title,
            timestamp=video.published_at,
            thumbnail_url=video.thumbnail_url,
            headline_key=headline_key,
        )
    
    def is_empty(self) -> bool:
        """Nothing to show besides the link."""
        return not (self.title or self.channel_title)
    
    def render_html(self, texts: TextManager) -> str:
        url = html.escape(self.url, quote=True)
        lines = []
        if self.title:
            lines.append(f'<b><a href="{url}">{html.escape(_truncate(self.title, MAX_TITLE_LENGTH))}</a></b>')
            lines.append("")
        if self.channel_title:
            lines.append(texts.get(self.headline_key, channel=html.escape(_truncate(self.channel_title, MAX_CHANNEL_LENGTH))))
            lines.append("")
        lines.append(texts.get("notify_watch", url=url))
        if self.timestamp:
            lines.append(f"<i>{texts.get('notify_published', timestamp=self.timestamp.strftime('%Y-%m-%d %H:%M UTC'))}</i>")
        return "\n".join(lines)


class TelegramNotifier:
    """Sends VideoNotification messages through an aiogram Bot."""
    
    def __init__(self, bot: Bot, watch_url: str = "https://www.youtube.com/watch?v=", texts: Optional[TextManager] = None):
        self.bot = bot
        self.watch_url = watch_url
        self.texts = texts or get_texts()
    
    async def send_video(self, destination_id: str, video: VideoCandidate, headline_key: str = NEW_VIDEO) -> SendResult:
        """
        Send one notification.
        
        Returns:
            SendResult; DESTINATION_NOT_FOUND when the chat does not resolve,
            EMPTY_NOTIFICATION when the video carries nothing to show
        """
        notification = VideoNotification.from_video(video, self.watch_url, headline_key)
        if notification.is_empty():
            logger.warning(f"Notification for video {video.video_id} is empty, not sending")
            return SendResult.failure(FailureReason.EMPTY_NOTIFICATION, video.video_id)
        
        chat_id = resolve_chat_id(destination_id)
        try:
            message = None
            if notification.thumbnail_url:
                message = await self._send_photo(chat_id, notification)
            if message is None:
                message = await self.bot.send_message(
                    chat_id=chat_id,
                    text=notification.render_html(self.texts),
                    parse_mode=ParseMode.HTML,
                )
        except TelegramAPIError as e:
            if _is_chat_missing(e):
                logger.warning(f"Chat not found for ID: {destination_id} ({e})")
                return SendResult.failure(FailureReason.DESTINATION_NOT_FOUND, str(e))
            logger.error(f"Failed to send video {video.video_id} to {destination_id}: {e}")
            return SendResult.failure(FailureReason.SEND_FAILED, str(e))
        
        logger.info(f"Announced video {video.video_id} in chat {destination_id}")
        return SendResult.success(message.message_id if message else None)
    
    async def _send_photo(self, chat_id: Union[int, str], notification: VideoNotification):
        """Send as photo; None when Telegram rejects the thumbnail and text should be used instead."""
        caption = notification.render_html(self.texts)
        if len(caption) > TELEGRAM_CAPTION_LIMIT:
            return None
        try:
            return await self.bot.send_photo(
                chat_id=chat_id,
                photo=notification.thumbnail_url,
                caption=caption,
                parse_mode=ParseMode.HTML,
            )
        except TelegramBadRequest as e:
            if _is_chat_missing(e):
                raise
            logger.warning(f"Thumbnail rejected for {notification.url}, sending as text: {e}")
            return None
