"""loguru sinks for the chess service, configured from Settings."""

import sys
from pathlib import Path

from loguru import logger

from src.core.config import Settings

# Records logged outside of a game (startup, config) show "-" as game id
NO_GAME = "-"
CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <8}</level> "
    "<magenta>[{extra[game_id]}]</magenta> <cyan>{name}:{line}</cyan> {message}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} {level: <8} [{extra[game_id]}] {name}:{function}:{line} {message}"


def setup_logging(settings: Settings) -> list[int]:
    """
    Replace loguru's default handler by a console sink plus, when `settings.log_file` is set, a rotating file sink.

    Use `logger.bind(game_id=...)` to tag the records belonging to one game.
    Returns the handler ids, so a caller can remove exactly these sinks again.
    """
    logger.remove()
    logger.configure(extra={"game_id": NO_GAME})

    handler_ids = [
        logger.add(sys.stderr, level=settings.log_level, format=CONSOLE_FORMAT, colorize=True)
    ]
    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler_ids.append(
            logger.add(
                log_path,
                level=settings.log_level,
                format=FILE_FORMAT,
                rotation=settings.log_rotation,
                retention=settings.log_retention,
                compression="gz",
            )
        )

    logger.info(f"Logging at {settings.log_level}, file: {settings.log_file or 'none'}")
    return handler_ids
