from merchant_dashboard.database.base import Base
from merchant_dashboard.database.engine import build_engine, engine
from merchant_dashboard.database.session import SessionLocal, session_scope

__all__ = ["Base", "SessionLocal", "build_engine", "engine", "session_scope"]
