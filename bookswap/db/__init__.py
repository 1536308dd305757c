from bookswap.db.base import Base, get_async_engine, get_session_factory, init_models

__all__ = ["Base", "get_async_engine", "get_session_factory", "init_models"]
