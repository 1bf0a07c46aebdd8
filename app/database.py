"""
Registry database: engine, sessions and table creation.
PostgreSQL through psycopg2. The `users` table (drivers) and the `vehicles`
table live in the same schema; the import pipeline reads the first and
writes the second through one request-scoped session from get_db().
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,          # Auto-reconnect if DB connection drops
    pool_size=10,
    max_overflow=20,
    echo=False,                  # Set True to log all SQL queries (debug only)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.driver import Driver     # noqa
    from app.models.vehicle import Vehicle   # noqa

    Base.metadata.create_all(bind=engine)
