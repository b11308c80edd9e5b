from __future__ import annotations

import os

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None
_SESSIONMAKER: sessionmaker | None = None


def _default_db_url() -> str:
    # Local-only default. Deployments provide DATABASE_URL explicitly.
    return "sqlite+pysqlite:///.local/storefront.db"


def get_engine() -> Engine:
    """Return a cached SQLAlchemy engine.

    We cache based on DATABASE_URL so tests can override DATABASE_URL before first use.
    """

    global _ENGINE, _ENGINE_URL, _SESSIONMAKER

    url = os.getenv("DATABASE_URL", _default_db_url())

    if _ENGINE is not None and _ENGINE_URL == url:
        return _ENGINE

    if url.startswith("sqlite") and ":///" in url:
        db_path = url.split(":///", 1)[1]
        if db_path and db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)

    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    _ENGINE = create_engine(url, future=True, connect_args=connect_args)
    _ENGINE_URL = url
    _SESSIONMAKER = sessionmaker(bind=_ENGINE, class_=Session, autocommit=False, autoflush=False)
    return _ENGINE


def db_session() -> Session:
    get_engine()  # ensure _SESSIONMAKER is created
    assert _SESSIONMAKER is not None
    return _SESSIONMAKER()
