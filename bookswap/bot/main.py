"""
Bot assembly and run modes.

``build_dispatcher`` wires storage, middlewares, the controller and routing;
``run_polling_bot`` and ``run_webhook_bot`` run it with a health endpoint.
"""

import asyncio
import logging

from aiogram import Bot, Dispatcher, types
from aiogram.fsm.storage.base import BaseStorage
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.fsm.storage.redis import RedisStorage
from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bookswap.bot.context import BotContext
from bookswap.bot.controller import ConversationController
from bookswap.bot.handlers import register_handlers
from bookswap.bot.middlewares import StateLoggingMiddleware, ThrottlingMiddleware
from bookswap.bot.session import SessionStore
from bookswap.bot.utils.messaging import BotMessenger
from bookswap.core.config import Settings, get_settings
from bookswap.db import get_async_engine, get_session_factory, init_models

logger = logging.getLogger(__name__)


def create_storage(settings: Settings) -> BaseStorage:
    """Redis with a TTL when configured, otherwise process memory."""
    if settings.REDIS_URL:
        logger.info("Using Redis storage for sessions")
        return RedisStorage.from_url(
            settings.REDIS_URL,
            state_ttl=settings.SESSION_TTL_SECONDS,
            data_ttl=settings.SESSION_TTL_SECONDS,
        )
    logger.info("Using in-memory storage for sessions")
    return MemoryStorage()


def build_dispatcher(
    bot: Bot,
    settings: Settings,
    session_pool: async_sessionmaker[AsyncSession],
    storage: BaseStorage,
) -> tuple[Dispatcher, BotContext]:
    messenger = BotMessenger(bot)
    ctx = BotContext(session_pool=session_pool, messenger=messenger, notifier=messenger, settings=settings)
    sessions = SessionStore(storage, bot.id)
    controller = ConversationController(ctx, sessions)

    dp = Dispatcher(storage=storage)
    dp.update.outer_middleware(StateLoggingMiddleware(sessions))
    throttling = ThrottlingMiddleware(limit=settings.RATE_LIMIT_PER_MINUTE)
    dp.message.outer_middleware(throttling)
    dp.callback_query.outer_middleware(throttling)
    register_handlers(dp, controller)
    return dp, ctx


async def on_shutdown(dispatcher: Dispatcher, bot: Bot, ctx: BotContext) -> None:
    """Let pending match notifications finish, then release connections."""
    logger.info("Shutting down the bot")
    await ctx.match_notifier.wait_pending()
    try:
        await dispatcher.storage.close()
        logger.info("Session storage closed")
    except Exception as e:
        logger.error(f"Error closing session storage: {e}")
    try:
        await bot.session.close()
        logger.info("Bot session closed")
    except Exception as e:
        logger.error(f"Error closing bot session: {e}")


async def health_handler(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "service": "bookswap"})


def create_web_app(dp: Dispatcher | None = None, bot: Bot | None = None, webhook_path: str = "/webhook") -> web.Application:
    """Health endpoints, plus the webhook route when a dispatcher is given."""
    app = web.Application()
    app.router.add_get("/health", health_handler)
    app.router.add_get("/ping", health_handler)

    if dp is not None and bot is not None:
        async def webhook_handler(request: web.Request) -> web.Response:
            try:
                update = types.Update.model_validate_json(await request.read())
                await dp.feed_update(bot, update)
            except Exception as e:
                logger.error(f"Error in webhook handler: {e}")
                return web.json_response({"ok": False, "error": "Internal error"}, status=500)
            return web.json_response({"ok": True})

        app.router.add_post(webhook_path, webhook_handler)
        logger.info(f"Webhook handler listening at {webhook_path}")
    return app


async def _serve(app: web.Application, port: int) -> web.AppRunner:
    runner = web.AppRunner(app)
    await runner.setup()
    await web.TCPSite(runner, "0.0.0.0", port).start()
    logger.info(f"HTTP server listening on 0.0.0.0:{port}")
    return runner


async def run_polling_bot(settings: Settings, dp: Dispatcher, bot: Bot, ctx: BotContext) -> None:
    logger.info("Starting bot in polling mode")
    runner = await _serve(create_web_app(), settings.BOT_PORT)
    try:
        await bot.delete_webhook(drop_pending_updates=True)
        await dp.start_polling(bot)
    finally:
        await runner.cleanup()
        await on_shutdown(dp, bot, ctx)


async def run_webhook_bot(settings: Settings, dp: Dispatcher, bot: Bot, ctx: BotContext) -> None:
    logger.info("Starting bot in webhook mode")
    runner = await _serve(create_web_app(dp, bot, settings.WEBHOOK_PATH), settings.BOT_PORT)
    try:
        if settings.WEBHOOK_HOST:
            webhook_url = f"{settings.WEBHOOK_HOST.rstrip('/')}{settings.WEBHOOK_PATH}"
            await bot.set_webhook(url=webhook_url, drop_pending_updates=True)
            logger.info(f"Webhook set to {webhook_url}")
        else:
            logger.warning("No WEBHOOK_HOST configured, skipping webhook registration")
        # Serve until cancelled
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
        await on_shutdown(dp, bot, ctx)


async def start_bot() -> None:
    settings = get_settings()

    engine = get_async_engine(settings.DB_URL, echo=settings.DEBUG)
    await init_models(engine)

    bot = Bot(token=settings.BOT_TOKEN)
    dp, ctx = build_dispatcher(bot, settings, get_session_factory(engine), create_storage(settings))

    try:
        if settings.USE_WEBHOOK:
            await run_webhook_bot(settings, dp, bot, ctx)
        else:
            await run_polling_bot(settings, dp, bot, ctx)
    finally:
        await engine.dispose()
        logger.info("Database engine disposed")
