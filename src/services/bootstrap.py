"""Wire the layers together: settings -> logging -> database -> service."""

from pathlib import Path
from typing import Generator, Optional

from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings, load_settings
from src.core.logging import setup_logging
from src.db.database import create_db_engine, create_session_factory, get_db
from src.db.sql_repository import SQLGameRepository
from src.services.game_service import GameService


def bootstrap(
    config_path: Optional[str | Path] = None, overrides: Optional[list[str]] = None
) -> tuple[Settings, sessionmaker[Session]]:
    """Load the settings, configure logging and connect to the database. Call once at startup."""
    settings = load_settings(config_path, overrides)
    setup_logging(settings)
    engine = create_db_engine(settings)
    return settings, create_session_factory(engine)


def game_service(session_factory: sessionmaker[Session]) -> Generator[GameService, None, None]:
    """A GameService bound to its own database session, closed when the unit of work is done."""
    for db in get_db(session_factory):
        yield GameService(SQLGameRepository(db))
