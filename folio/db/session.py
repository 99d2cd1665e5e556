"""
Folio Database Session Management.

Single entry point for DB initialisation plus a context manager for
transactional access. Uses the global EngineRegistry.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy.orm import Session, sessionmaker

from folio.db.base import Base, engine_registry
from folio.engine.config import DatabaseConfig

CORE_ENGINE = "folio_core"


def init_db(
    db_url: str,
    create_tables: bool = False,
    name: str = CORE_ENGINE,
    pool_size: int = 10,
    max_overflow: int = 20,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
    pool_pre_ping: bool = True,
    echo: bool = False,
) -> sessionmaker:
    """
    Register the engine and return its session factory.

    Args:
        db_url:        SQLAlchemy URL (sqlite:///folio.db, postgresql://...).
        create_tables: When True, run Base.metadata.create_all(). Use for
                       ``folio init`` and tests.
        name:          Registry name for the engine.

    Returns:
        A ``sessionmaker`` bound to the initialised engine.
    """
    # Table metadata must be imported before create_all()
    import folio.db.models  # noqa: F401

    engine_registry.register(
        name, db_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        pool_pre_ping=pool_pre_ping,
        echo=echo,
    )
    engine = engine_registry.get(name)

    if create_tables:
        Base.metadata.create_all(engine)

    return engine_registry.get_session_factory(name)


def init_db_from_config(config: DatabaseConfig, create_tables: bool = False) -> sessionmaker:
    """Initialise the core engine from the ``database`` section of folio.yaml."""
    return init_db(
        config.url,
        create_tables=create_tables,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        pool_recycle=config.pool_recycle,
        pool_pre_ping=config.pool_pre_ping,
        echo=config.echo,
    )


@contextmanager
def session_scope(factory: Optional[sessionmaker] = None) -> Generator[Session, None, None]:
    """
    Context manager for DB sessions with auto-commit/rollback.

    Usage:
        with session_scope(factory) as session:
            session.execute(select(DocumentRow))
    """
    session = factory() if factory is not None else engine_registry.get_session(CORE_ENGINE)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def close_all_sessions() -> None:
    """Dispose all engines. Used during shutdown."""
    engine_registry.dispose()
