"""
Database connection management.

Supports:
  - SQLite (default, DATA_DIR/app.db — no setup)
  - Any SQLAlchemy URL via DATABASE_URL (e.g. PostgreSQL)
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from linkface.infrastructure.db.models import Base

logger = logging.getLogger(__name__)

# Colunas adicionadas depois da primeira versão do schema: (tabela, coluna, DDL)
_COLUMN_MIGRATIONS = [
    ("employees", "email", "ALTER TABLE employees ADD COLUMN email VARCHAR(255)"),
    ("submissions", "consent_accepted", "ALTER TABLE submissions ADD COLUMN consent_accepted BOOLEAN DEFAULT 0"),
]


def create_db_engine(db_url: str) -> Engine:
    """Create SQLAlchemy engine."""
    if db_url.startswith("sqlite"):
        db_file = db_url.replace("sqlite:///", "", 1)
        if db_file and db_file != ":memory:" and db_url.startswith("sqlite:///"):
            Path(db_file).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            db_url,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    else:
        engine = create_engine(
            db_url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
            echo=False,
        )

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


def _apply_column_migrations(engine: Engine) -> None:
    """Adiciona colunas ausentes em bancos criados por versões antigas."""
    inspector = inspect(engine)
    for table, column, ddl in _COLUMN_MIGRATIONS:
        if not inspector.has_table(table):
            continue
        existing = {c["name"] for c in inspector.get_columns(table)}
        if column not in existing:
            with engine.begin() as conn:
                conn.execute(text(ddl))
            logger.info(f"Added column {table}.{column}")


def init_db(engine: Engine) -> None:
    """Create all tables. Safe to call multiple times."""
    Base.metadata.create_all(engine)
    _apply_column_migrations(engine)
    url = engine.url.render_as_string(hide_password=True)
    logger.info(f"Database initialized: {url.split('@')[-1] if '@' in url else url}")


def ping(engine: Engine) -> bool:
    """True se o banco responde a SELECT 1."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database ping failed: {e}")
        return False


@contextmanager
def get_db(session_factory: sessionmaker) -> Session:
    """Context manager for database sessions."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
