#!/usr/bin/env python3
"""
Main entry point for BookSwap Bot
"""

import asyncio
import logging
import sys

from loguru import logger

from bookswap.core.config import get_settings


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records (aiogram, aiohttp, our handler modules) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO") -> None:
    logger.remove()
    # catch=True keeps a failing sink from raising into the caller
    logger.add(sys.stderr, level=level, catch=True)
    logger.add("logs/bookswap_bot_{time}.log", rotation="10 MB", retention=5, level="DEBUG", catch=True)
    logging.basicConfig(handlers=[InterceptHandler()], level=logging.INFO, force=True)


async def main() -> None:
    # Imported here so the bot modules load after logging is configured
    from bookswap.bot.main import start_bot

    logger.info("Starting BookSwap Bot...")
    try:
        await start_bot()
    except asyncio.CancelledError:
        logger.info("Bot task cancelled")
    finally:
        logger.info("BookSwap Bot shutdown complete")


def run() -> None:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by keyboard interrupt")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
