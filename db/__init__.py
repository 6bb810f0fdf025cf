from .database import init_db, get_db, get_db_dependency, make_engine, engine, SessionLocal
from .models import Base, AppListing, StoreReport

__all__ = [
    "init_db", "get_db", "get_db_dependency", "make_engine", "engine", "SessionLocal",
    "Base", "AppListing", "StoreReport",
]
