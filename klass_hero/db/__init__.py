from klass_hero.db.base import Base
from klass_hero.db.session import SessionLocal, engine, get_db

__all__ = ["Base", "SessionLocal", "engine", "get_db"]
