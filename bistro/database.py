import logging

from fastapi import HTTPException, status
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from bistro.core import config


logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


def _engine_options(database_url: str) -> dict:
    if database_url.startswith('sqlite'):
        # Handlers run in FastAPI's threadpool, so a connection may cross threads.
        return {'connect_args': {'check_same_thread': False}}
    return {'pool_pre_ping': True}


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def database_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE_DETAIL,
    )


def create_tables() -> None:
    # Model modules register their tables on Base when imported.
    from bistro.models import cart, menu, payment, review, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info('Database tables ensured at %s', engine.url.render_as_string(hide_password=True))
