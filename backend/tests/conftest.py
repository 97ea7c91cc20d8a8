import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from backend.app.db.base import Base  # noqa: E402
from backend.app.db.models import models_v1  # noqa: F401,E402
from backend.services.locking import StockLocker  # noqa: E402


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Session DB isolée par test (SQLite en mémoire).

    record_production commit lui-même : base neuve à chaque test.
    """
    engine = create_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(bind=engine)

    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture(scope="function")
def session_factory(tmp_path):
    """
    Fabrique de sessions sur un fichier SQLite : une session par thread
    pour les tests de concurrence.
    """
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'pcb.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    finally:
        engine.dispose()


@pytest.fixture()
def locker() -> StockLocker:
    return StockLocker()
