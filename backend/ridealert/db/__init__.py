from ridealert.db.base import Base
from ridealert.db.session import make_engine, make_session_factory
from ridealert.db.tables import ALL_TABLE_NAMES

__all__ = ["Base", "make_engine", "make_session_factory", "ALL_TABLE_NAMES"]
