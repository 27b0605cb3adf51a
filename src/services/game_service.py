"""Orchestration of communication from the presentation layer to business logic and persistence layers (and the reverse direction)."""

from uuid import UUID

from loguru import logger

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    ExportPGNRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    PGNResponse,
    RedoRequest,
    UndoRequest,
)
from src.chess.fen import board_to_fen
from src.chess.game import Game
from src.chess.pieces import PieceType
from src.chess.square import Square
from src.core.exceptions import RepositoryError
from src.core.models import GameModel
from src.core.shared_types import Color, Status
from src.db.repository import GameRepository


class GameService:
    """Orchestration of layers for chess game.

    The repository only ever sees snapshots (GameModel). Every request rebuilds its own Game from the stored snapshot,
    so no game state lives in the service between requests.
    """

    def __init__(self, repository: GameRepository) -> None:
        self.repo = repository

    # -- Presentation layer requests ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Create a new game (from the standard starting position, or from the requested FEN)."""

        new_game = Game.new_game(starting_fen=request.starting_fen)
        stored_game, game_id = self.repo.create_game(new_game.to_model())
        logger.bind(game_id=str(game_id)).info(f"New game from {stored_game.initial_fen}")
        return self._create_game_response(game_id, new_game)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """Retrieve current game state."""
        game = self._load_game(request.game_id)
        return self._create_game_response(request.game_id, game)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Retrieve set of legal moves (all of them, or those of a single piece for move hints)."""
        game = self._load_game(request.game_id)
        from_square = (
            Square.from_algebraic(request.from_square) if request.from_square else None
        )
        legal_moves = game.legal_moves(from_square)
        return LegalMovesResponse(
            game_id=request.game_id,
            color=Color[game.board.color_to_move.name],
            legal_moves=[move.to_uci() for move in legal_moves],
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """Make a move attempt. An illegal move raises and nothing gets stored."""
        game = self._load_game(request.game_id)
        game.make_move(
            from_square=Square.from_algebraic(request.from_square),
            to_square=Square.from_algebraic(request.to_square),
            promote_to=PieceType[request.promote_to.name] if request.promote_to else None,
        )
        return self._store(request.game_id, game)

    def undo_move(self, request: UndoRequest) -> GameResponse:
        game = self._load_game(request.game_id)
        game.undo()
        return self._store(request.game_id, game)

    def redo_move(self, request: RedoRequest) -> GameResponse:
        game = self._load_game(request.game_id)
        game.redo()
        return self._store(request.game_id, game)

    def export_pgn(self, request: ExportPGNRequest) -> PGNResponse:
        game = self._load_game(request.game_id)
        return PGNResponse(game_id=request.game_id, pgn=game.to_pgn(request.headers))

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        if self.repo.delete_game(request.game_id) is None:
            raise RepositoryError(f"Game with {request.game_id=} not found.")

    # -- Internal helpers --
    def _create_game_response(self, game_id: UUID, game: Game) -> GameResponse:
        winner = game.winner
        return GameResponse(
            game_id=game_id,
            fen_state=game.fen(),
            starting_state=board_to_fen(game.initial_board),
            status=Status(game.status_name),
            move_history=game.san_moves(),
            can_undo=bool(game.history),
            can_redo=bool(game.redo_stack),
            winner=Color[winner.name] if winner else None,
        )

    def _store(self, game_id: UUID, game: Game) -> GameResponse:
        """Persist the game after a successful transition."""
        if self.repo.update_game(game_id, game.to_model()) is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        logger.bind(game_id=str(game_id)).debug(f"Stored {game.fen()} ({game.status_name})")
        return self._create_game_response(game_id, game)

    def _load_game(self, game_id: UUID) -> Game:
        """Attempt to find the game in the repository and raise error if it fails."""
        return Game.from_model(self._fetch_game(game_id))

    def _fetch_game(self, game_id: UUID) -> GameModel:
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model
