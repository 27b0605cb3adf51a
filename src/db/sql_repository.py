"""Implementation of (Game)Repository using SQLAlchemy"""

from uuid import UUID, uuid4

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.models import GameModel
from src.db.schema import DBGame


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_model(game_db)
        return None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""

        new_id = uuid4()
        game_db = DBGame(
            id=new_id,
            initial_fen=game.initial_fen,
            current_fen=game.current_fen,
            moves_uci=list(game.moves_uci),
            redo_uci=list(game.redo_uci),
            status=game.status,
        )
        self.db.add(game_db)
        self.db.commit()
        self.db.refresh(game_db)
        logger.info(f"Created game {new_id}")
        return self._to_model(game_db), new_id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Overwrite the snapshot of an existing record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            logger.warning(f"Cannot update game {game_id}: no such record")
            return None
        game_db.initial_fen = game.initial_fen
        game_db.current_fen = game.current_fen
        # NOTE: assign new lists, so SQLAlchemy notices the JSON columns changed
        game_db.moves_uci = list(game.moves_uci)
        game_db.redo_uci = list(game.redo_uci)
        game_db.status = game.status
        self.db.commit()
        self.db.refresh(game_db)
        logger.debug(f"Updated game {game_id}: {game.current_fen}")
        return self._to_model(game_db)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_model = self._to_model(game_db)
        self.db.delete(game_db)
        self.db.commit()
        logger.info(f"Deleted game {game_id}")
        return game_model

    def _fetch_game(self, game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            initial_fen=game_db.initial_fen,
            current_fen=game_db.current_fen,
            moves_uci=list(game_db.moves_uci),
            redo_uci=list(game_db.redo_uci),
            status=game_db.status,
        )
