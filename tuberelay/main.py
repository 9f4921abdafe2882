"""
Main entry point for the relay bot.
"""

import asyncio
import logging
from typing import Optional

import redis.asyncio as redis
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from tuberelay.config import get_settings
from tuberelay.core import Backoff, CycleRunner, MappingStore, RelayState
from tuberelay.core.middleware import RelayContext, RelayContextMiddleware
from tuberelay.handlers import commands
from tuberelay.logging_config import setup_logging, get_logger
from tuberelay.services import TelegramNotifier, VideoPoller, YouTubeClient

logger = get_logger(__name__)

HEARTBEAT_KEY = "tuberelay:heartbeat"
LAST_SEEN_KEY = "tuberelay:last_seen"
HEARTBEAT_SECONDS = 30


async def heartbeat_loop(redis_url: str, interval: float = HEARTBEAT_SECONDS):
    """Write a liveness key to Redis every `interval` seconds."""
    redis_client = None
    try:
        redis_client = redis.from_url(redis_url)
        while True:
            try:
                await redis_client.set(HEARTBEAT_KEY, "alive", ex=60)
                await redis_client.set(LAST_SEEN_KEY, str(int(asyncio.get_running_loop().time())), ex=120)
            except Exception as e:
                logger.warning(f"Heartbeat error: {e}")
            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        pass
    finally:
        if redis_client:
            await redis_client.aclose()


async def _cancel(task: Optional[asyncio.Task]):
    if task:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


async def main():
    """Load state, wire services and poll Telegram for commands."""
    settings = get_settings()
    setup_logging(log_level=settings.log_level, log_dir=settings.log_dir)
    
    # A corrupt mapping file halts startup here
    store = MappingStore(settings.channel_map_path)
    backoff = Backoff(
        default_seconds=settings.check_interval_seconds,
        reset_after_seconds=settings.backoff_reset_seconds,
        max_seconds=settings.backoff_max_seconds,
    )
    state = RelayState.from_store(store, backoff)
    
    if not settings.youtube_api_key:
        logger.warning("YOUTUBE_API_KEY is not set, every search will fail")
    
    bot = Bot(
        token=settings.telegram_bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML)
    )
    dp = Dispatcher()
    
    youtube = YouTubeClient(
        api_key=settings.youtube_api_key,
        base_url=settings.youtube_api_url,
        timeout=settings.request_timeout,
    )
    notifier = TelegramNotifier(bot, watch_url=settings.youtube_watch_url)
    poller = VideoPoller.from_settings(settings, state, youtube, notifier)
    runner = CycleRunner(periodic=poller.run_poll_cycle, interval=backoff.current)
    relay = RelayContext(
        state=state,
        poller=poller,
        runner=runner,
        recent_window_hours=settings.recent_window_hours,
    )
    
    dp.include_router(commands.router)
    dp.update.middleware(RelayContextMiddleware(relay))
    
    heartbeat_task: Optional[asyncio.Task] = None
    
    async def on_startup():
        nonlocal heartbeat_task
        me = await bot.get_me()
        logger.info(f"Logged in as @{me.username}!")
        if settings.redis_url:
            heartbeat_task = asyncio.create_task(heartbeat_loop(settings.redis_url))
        # First Poll Cycle runs immediately, then every interval
        await runner.start()
        logger.info(
            f"Tracking {len(state.mappings())} channel(s), "
            f"checking every {settings.check_interval_seconds}s"
        )
    
    async def on_shutdown():
        nonlocal heartbeat_task
        logger.info("Relay shutting down...")
        await runner.stop()
        await _cancel(heartbeat_task)
        heartbeat_task = None
        await youtube.close()
        logger.info("Relay shut down successfully!")
    
    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)
    
    try:
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await bot.session.close()


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
