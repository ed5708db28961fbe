from .base import Base
from .engine import create_app_engine
from .session import DbSession, create_session_maker, get_db_session


__all__ = [
    "Base",
    "DbSession",
    "create_app_engine",
    "create_session_maker",
    "get_db_session",
]
