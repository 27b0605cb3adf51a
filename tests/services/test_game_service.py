"""Unit tests for src/services/game_service.py"""

from typing import Generator
from uuid import UUID, uuid4

import pytest

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    ExportPGNRequest,
    GetGameRequest,
    LegalMovesRequest,
    MoveRequest,
    RedoRequest,
    UndoRequest,
)
from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    MalformedNotationError,
    NoHistoryError,
    NoRedoError,
    RepositoryError,
)
from src.core.models import GameModel
from src.core.shared_types import Color, PieceType, Status
from src.services.game_service import GameService

# --- MOCK DEPENDENCIES ----
STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
PROMOTION_FEN = "4k3/P7/8/8/8/8/8/4K3 w - - 0 1"


class MockRepository:
    """Mock the GameRepository using a dictionary of game models."""

    def __init__(self) -> None:
        self._games: dict[UUID, GameModel] = {}

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        game_id = uuid4()
        self._games[game_id] = game
        return game, game_id

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        return self._games.get(game_id)

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Overwrite the snapshot of an existing record."""
        if game_id not in self._games:
            return None
        self._games[game_id] = game
        return game

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        return self._games.pop(game_id, None)

    def clear(self) -> None:
        """Clear the repository (useful in between tests)"""
        self._games.clear()


@pytest.fixture
def mock_repository() -> Generator[MockRepository, None, None]:
    """Ensures to clear the repository between tests"""
    repo = MockRepository()
    try:
        yield repo
    finally:
        repo.clear()


@pytest.fixture
def service(mock_repository: MockRepository) -> GameService:
    return GameService(mock_repository)


def new_game_id(service: GameService, starting_fen: str | None = None) -> UUID:
    return service.create_new_game(CreateGameRequest(starting_fen=starting_fen)).game_id


def move(service: GameService, game_id: UUID, *ucis: str) -> None:
    for uci in ucis:
        service.make_move(
            MoveRequest(game_id=game_id, from_square=uci[:2], to_square=uci[2:4])
        )


# --- SERVICE - CREATE NEW GAME ----
def test_create_a_new_game(service: GameService, mock_repository: MockRepository) -> None:
    """Check that new game is created, persisted in repo, and return has the appropriate information."""
    response = service.create_new_game(CreateGameRequest())

    assert response.fen_state == STARTING_FEN
    assert response.starting_state == STARTING_FEN
    assert response.status == Status.IN_PROGRESS
    assert response.move_history == []
    assert not response.can_undo
    assert not response.can_redo
    assert response.winner is None

    stored = mock_repository.get_game(response.game_id)
    assert stored == GameModel(initial_fen=STARTING_FEN, current_fen=STARTING_FEN)


def test_create_game_from_fen(service: GameService) -> None:
    response = service.create_new_game(CreateGameRequest(starting_fen=PROMOTION_FEN))
    assert response.fen_state == PROMOTION_FEN
    assert response.starting_state == PROMOTION_FEN


@pytest.mark.parametrize(
    "fen, error",
    [
        ("8/8/8/8/8/8/8/8 w - - 0 1", GameStateError),  # no kings
        ("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 0", MalformedNotationError),
    ],
)
def test_create_game_from_invalid_fen(
    service: GameService, mock_repository: MockRepository, fen: str, error: type[Exception]
) -> None:
    with pytest.raises(error):
        service.create_new_game(CreateGameRequest(starting_fen=fen))
    assert mock_repository._games == {}


# --- SERVICE - QUERIES ----
def test_get_game_state(service: GameService) -> None:
    game_id = new_game_id(service)
    move(service, game_id, "e2e4")
    response = service.get_game_state(GetGameRequest(game_id=game_id))
    assert response.move_history == ["e4"]
    assert response.can_undo


def test_get_unknown_game(service: GameService) -> None:
    with pytest.raises(RepositoryError):
        service.get_game_state(GetGameRequest(game_id=uuid4()))


def test_legal_moves(service: GameService) -> None:
    game_id = new_game_id(service)
    response = service.legal_moves(LegalMovesRequest(game_id=game_id))
    assert response.color == Color.WHITE
    assert len(response.legal_moves) == 20

    hints = service.legal_moves(LegalMovesRequest(game_id=game_id, from_square="b1"))
    assert sorted(hints.legal_moves) == ["b1a3", "b1c3"]


# --- SERVICE - MOVES ----
def test_make_move_persists_the_game(service: GameService, mock_repository: MockRepository) -> None:
    game_id = new_game_id(service)
    move(service, game_id, "e2e4", "e7e5")

    stored = mock_repository.get_game(game_id)
    assert stored is not None
    assert stored.moves_uci == ["e2e4", "e7e5"]
    assert stored.current_fen == "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq e6 0 2"


def test_illegal_move_is_not_stored(service: GameService, mock_repository: MockRepository) -> None:
    game_id = new_game_id(service)
    before = mock_repository.get_game(game_id)
    with pytest.raises(IllegalMoveError):
        move(service, game_id, "e2e5")
    assert mock_repository.get_game(game_id) == before


def test_promotion_request(service: GameService) -> None:
    game_id = new_game_id(service, PROMOTION_FEN)
    response = service.make_move(
        MoveRequest(game_id=game_id, from_square="a7", to_square="a8", promote_to=PieceType.QUEEN)
    )
    assert response.move_history == ["a8=Q+"]
    assert response.status == Status.CHECK


def test_checkmate_response(service: GameService) -> None:
    game_id = new_game_id(service)
    move(service, game_id, "f2f3", "e7e5", "g2g4", "d8h4")
    response = service.get_game_state(GetGameRequest(game_id=game_id))
    assert response.status == Status.CHECKMATE
    assert response.winner == Color.BLACK

    with pytest.raises(IllegalMoveError):
        move(service, game_id, "a2a3")


# --- SERVICE - UNDO / REDO ----
def test_undo_and_redo(service: GameService) -> None:
    game_id = new_game_id(service)
    move(service, game_id, "e2e4", "e7e5")

    response = service.undo_move(UndoRequest(game_id=game_id))
    assert response.move_history == ["e4"]
    assert response.can_redo

    response = service.redo_move(RedoRequest(game_id=game_id))
    assert response.move_history == ["e4", "e5"]
    assert not response.can_redo


def test_undo_without_moves(service: GameService) -> None:
    game_id = new_game_id(service)
    with pytest.raises(NoHistoryError):
        service.undo_move(UndoRequest(game_id=game_id))


def test_redo_buffer_survives_reload(service: GameService) -> None:
    """Undo and redo happen in separate requests, so the redo buffer has to be part of the snapshot"""
    game_id = new_game_id(service)
    move(service, game_id, "e2e4", "e7e5", "g1f3")
    service.undo_move(UndoRequest(game_id=game_id))
    service.undo_move(UndoRequest(game_id=game_id))

    service.redo_move(RedoRequest(game_id=game_id))
    response = service.redo_move(RedoRequest(game_id=game_id))
    assert response.move_history == ["e4", "e5", "Nf3"]

    with pytest.raises(NoRedoError):
        service.redo_move(RedoRequest(game_id=game_id))


# --- SERVICE - PGN ----
def test_export_pgn(service: GameService) -> None:
    game_id = new_game_id(service)
    move(service, game_id, "f2f3", "e7e5", "g2g4", "d8h4")
    response = service.export_pgn(ExportPGNRequest(game_id=game_id, headers={"White": "Alice"}))
    assert response.game_id == game_id
    assert '[White "Alice"]' in response.pgn
    assert "1. f3 e5 2. g4 Qh4# 0-1" in response.pgn


# --- SERVICE - DELETE ----
def test_delete_game(service: GameService, mock_repository: MockRepository) -> None:
    game_id = new_game_id(service)
    service.delete_game(DeleteGameRequest(game_id=game_id))
    assert mock_repository.get_game(game_id) is None

    with pytest.raises(RepositoryError):
        service.delete_game(DeleteGameRequest(game_id=game_id))


def test_corrupted_record(service: GameService, mock_repository: MockRepository) -> None:
    game_id = new_game_id(service)
    mock_repository.update_game(
        game_id, GameModel(initial_fen=STARTING_FEN, current_fen=STARTING_FEN, moves_uci=["e2e5"])
    )
    with pytest.raises(GameStateError):
        service.get_game_state(GetGameRequest(game_id=game_id))
