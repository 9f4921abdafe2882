"""Middleware for command handlers."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Any, Awaitable
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from tuberelay.core.scheduler import CycleRunner
from tuberelay.core.state import RelayState

if TYPE_CHECKING:
    from tuberelay.services.poller import VideoPoller

logger = logging.getLogger(__name__)


@dataclass
class RelayContext:
    """What command handlers need: shared state, the poller and the job queue."""
    state: RelayState
    poller: "VideoPoller"
    runner: CycleRunner
    recent_window_hours: int = 2


class RelayContextMiddleware(BaseMiddleware):
    """Middleware to inject RelayContext into handlers as `relay`."""
    
    def __init__(self, relay: RelayContext):
        self.relay = relay
    
    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        data["relay"] = self.relay
        return await handler(event, data)
