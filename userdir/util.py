"""Helpers and Flask application integration."""

from typing import Generator, Optional
from datetime import datetime
from contextlib import contextmanager
import logging

from flask import Flask
from pytz import UTC
from sqlalchemy.orm.session import Session

from .models import db

logger = logging.getLogger(__name__)


def now() -> datetime:
    """Get the current time, in UTC."""
    return datetime.now(tz=UTC)


def to_db(t: datetime) -> datetime:
    """Convert an aware datetime to the naive UTC form stored in the DB."""
    if t.tzinfo is None:
        return t
    return t.astimezone(UTC).replace(tzinfo=None)


def from_db(t: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a naive datetime read from the DB."""
    if t is None or t.tzinfo is not None:
        return t
    return UTC.localize(t)


@contextmanager
def transaction() -> Generator[Session, None, None]:
    """Context manager for database transaction."""
    try:
        yield db.session
        # The caller may have explicitly committed already, in order to
        # implement exception handling logic. We only want to commit here if
        # there is anything remaining that is not flushed.
        if db.session.new or db.session.dirty or db.session.deleted:
            db.session.commit()
    except Exception as e:
        logger.warning('Commit failed, rolling back: %s', str(e))
        db.session.rollback()
        raise


def init_app(app: Flask) -> None:
    """Set configuration defaults and attach session to the application."""
    app.config.setdefault('SQLALCHEMY_DATABASE_URI', 'sqlite:///:memory:')
    app.config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
    db.init_app(app)


def current_session() -> Session:
    """Get/create database session for this context."""
    return db.session


def create_all() -> None:
    """Create all tables in the database."""
    db.create_all()


def drop_all() -> None:
    """Drop all tables in the database."""
    db.drop_all()
