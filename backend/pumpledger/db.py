"""
Record store connection.

The ledger engine never touches the database; this module only serves the
routes that fetch raw records and hand them to the engine.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Iterator

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _database_url() -> str:
    url = os.getenv("DATABASE_URL") or os.getenv("SQLALCHEMY_DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL or SQLALCHEMY_DATABASE_URL must be set to reach the ledger record store."
        )
    return url


def _engine_options(url: str) -> Dict[str, Any]:
    opts: Dict[str, Any] = {"future": True, "echo": _env_flag("SQL_ECHO")}
    if url.startswith("sqlite"):
        # TestClient and uvicorn workers share the connection across threads
        opts["connect_args"] = {"check_same_thread": False}
    else:
        opts["pool_pre_ping"] = True
    return opts


DATABASE_URL = _database_url()
engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


class Base(DeclarativeBase):
    pass


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
