"""Middleware module for bot handlers."""

from bookswap.bot.middlewares.logging_middleware import StateLoggingMiddleware
from bookswap.bot.middlewares.throttling import ThrottlingMiddleware

__all__ = ["StateLoggingMiddleware", "ThrottlingMiddleware"]
