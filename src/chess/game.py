"""
The Game class will be the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a move:
validate the move, compute the next board, record it in the history, and re-evaluate the game status.
It also supports undo/redo and converting the game to/from a snapshot (GameModel) or PGN.

A Game is an independently owned unit: no state is shared between Game instances.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Self

from loguru import logger

from src.chess.board import Board
from src.chess.fen import STARTING_FEN, board_from_fen, board_to_fen
from src.chess.moves import Move
from src.chess.pgn import (
    build_pgn,
    move_to_san,
    parse_pgn,
    result_token,
    san_to_move,
)
from src.chess.pieces import (
    PAWN_DIRECTION,
    PAWN_START_RANK,
    PROMOTION_RANK,
    Color,
    Piece,
    PieceType,
)
from src.chess.square import Square
from src.chess.validator import (
    GameStatus,
    Status,
    game_status,
    is_in_check,
    legal_moves,
)
from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    MalformedNotationError,
    NoHistoryError,
    NoRedoError,
)
from src.core.models import GameModel
from src.core.shared_types import Status as StatusName

__all__ = [
    "Game",
    "GameState",
    "GameStatus",
    "HistoryEntry",
    "Status",
]


class GameState(Enum):
    """Coarse state of the game. Every state but IN_PROGRESS is terminal: no further moves accepted."""

    IN_PROGRESS = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    DRAWN = auto()


STATE_BY_STATUS: dict[Status, GameState] = {
    Status.IN_PROGRESS: GameState.IN_PROGRESS,
    Status.CHECK: GameState.IN_PROGRESS,
    Status.CHECKMATE: GameState.CHECKMATE,
    Status.STALEMATE: GameState.STALEMATE,
    Status.DRAW_FIFTY_MOVE: GameState.DRAWN,
    Status.DRAW_INSUFFICIENT_MATERIAL: GameState.DRAWN,
    Status.DRAW_REPETITION: GameState.DRAWN,
}

DEFAULT_PGN_HEADERS: dict[str, str] = {
    "Event": "?",
    "Site": "?",
    "Date": "????.??.??",
    "Round": "?",
    "White": "?",
    "Black": "?",
}


@dataclass(frozen=True)
class HistoryEntry:
    """A move that was played, the board it resulted in, and its SAN (as shown in a move list)"""

    move: Move
    board: Board
    san: str


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    initial_board: Board
    history: list[HistoryEntry] = field(default_factory=list)
    redo_stack: list[HistoryEntry] = field(default_factory=list)
    status: GameStatus = field(init=False)

    def __post_init__(self) -> None:
        self._update_game_status()

    # --- CREATION LOGIC ---
    @classmethod
    def new_game(cls, starting_fen: Optional[str] = None) -> Self:
        """Start a new game from the canonical starting position, or from a custom FEN."""
        return cls.from_fen(starting_fen or STARTING_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        board = board_from_fen(fen)
        assert_playable(board)
        return cls(board)

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """
        Define how to construct a Game from the information the Service layer actually has.
        ----

        Replays all moves (played and undone) from the initial position, then undoes the redo part again,
        so that history, redo buffer and status come out exactly as they were stored.
        """
        if model.status not in {status.value for status in StatusName}:
            raise GameStateError(
                f"Invalid status: {model.status!r}. \nPick one from {', '.join(StatusName)}"
            )

        game = cls.from_fen(model.initial_fen)
        for move_uci in model.moves_uci + model.redo_uci:
            try:
                game.play_uci(move_uci)
            except IllegalMoveError as exc:
                raise GameStateError(f"Stored game contains an illegal move: {exc}") from exc
        for _ in model.redo_uci:
            game.undo()

        if game.fen() != model.current_fen:
            raise GameStateError(
                f"Stored position {model.current_fen!r} does not match the replayed moves ({game.fen()!r})."
            )
        if game.status_name != model.status:
            raise GameStateError(
                f"Stored status {model.status!r} does not match the replayed moves ({game.status_name!r})."
            )
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            initial_fen=board_to_fen(self.initial_board),
            current_fen=self.fen(),
            moves_uci=[move.to_uci() for move in self.moves],
            redo_uci=[entry.move.to_uci() for entry in reversed(self.redo_stack)],
            status=self.status_name,
        )

    @classmethod
    def from_pgn(cls, pgn: str) -> Self:
        """Replay the main line of a PGN game. A "FEN" header sets a custom starting position."""
        parsed = parse_pgn(pgn)
        game = cls.new_game(parsed.headers.get("FEN"))
        for san in parsed.sans:
            try:
                game.apply_move(san_to_move(game.board, san))
            except IllegalMoveError as exc:
                raise MalformedNotationError(f"PGN move {san!r} cannot be played: {exc}") from exc
        return game

    def to_pgn(self, headers: Optional[dict[str, str]] = None) -> str:
        """The game (played moves, without the redo buffer) as a PGN document"""
        result = result_token(self.status)
        pgn_headers = {**DEFAULT_PGN_HEADERS, **(headers or {}), "Result": result}

        initial_fen = board_to_fen(self.initial_board)
        if initial_fen != STARTING_FEN:
            pgn_headers.update({"SetUp": "1", "FEN": initial_fen})

        return build_pgn(
            pgn_headers,
            self.san_moves(),
            result,
            first_color=self.initial_board.color_to_move,
            first_move_number=self.initial_board.full_move_number,
        )

    # --- QUERY SURFACE ---
    @property
    def board(self) -> Board:
        """The current board: the one reached by the last move played"""
        return self.history[-1].board if self.history else self.initial_board

    @property
    def state(self) -> GameState:
        return STATE_BY_STATUS[self.status.status]

    @property
    def is_over(self) -> bool:
        return self.status.is_terminal

    @property
    def status_name(self) -> str:
        return StatusName[self.status.status.name].value

    @property
    def winner(self) -> Optional[Color]:
        """Only checkmate has a winner: the opponent of the player who just got mated."""
        if self.status.status != Status.CHECKMATE or self.status.color is None:
            return None
        return self.status.color.opponent

    @property
    def moves(self) -> list[Move]:
        return [entry.move for entry in self.history]

    def history_list(self) -> list[HistoryEntry]:
        """Copy of the history, oldest move first (for displaying the move list)"""
        return list(self.history)

    def san_moves(self) -> list[str]:
        return [entry.san for entry in self.history]

    def fen(self) -> str:
        return board_to_fen(self.board)

    def legal_moves(self, from_square: Optional[Square] = None) -> list[Move]:
        """
        Legal moves of the side to move, or just those of the piece on `from_square` (used for move hints).
        A game that is over has no legal moves.
        """
        if self.is_over:
            return []
        moves = legal_moves(self.board)
        if from_square is None:
            return moves
        return [move for move in moves if move.from_square == from_square]

    # --- TRANSITIONS ---
    def apply_move(self, move: Move) -> HistoryEntry:
        """
        Attempt to make a move
        -----

        1. make sure the game is (still) in progress
        2. look up the move in the legal move set (this also resolves the kind of move: castling, en passant...)
        3. compute the new board and append it to the history
        4. drop the redo buffer (the undone moves belong to an abandoned line now)
        5. update game status

        A failing move raises IllegalMoveError and leaves the game untouched.
        """
        if self.is_over:
            raise IllegalMoveError(
                f"Game is over ({self.status_name}). Move not allowed: {move}"
            )

        accepted_move = self._resolve_legal_move(move)
        board_before = self.board
        entry = HistoryEntry(
            move=accepted_move,
            board=board_before.apply(accepted_move),
            san=move_to_san(board_before, accepted_move),
        )

        self.history.append(entry)
        self.redo_stack.clear()
        self._update_game_status()
        logger.debug(f"Played {entry.san} ({accepted_move.to_uci()}), status: {self.status_name}")
        if self.is_over:
            logger.info(f"Game over after {len(self.history)} half moves: {self.status_name}")
        return entry

    def make_move(
        self,
        from_square: Square,
        to_square: Square,
        promote_to: Optional[PieceType] = None,
    ) -> HistoryEntry:
        """Move intent coming from the presentation layer: the core decides whether it is legal."""
        return self.apply_move(Move(from_square, to_square, promote_to))

    def play_uci(self, move_uci: str) -> HistoryEntry:
        return self.apply_move(Move.from_uci(move_uci))

    def undo(self) -> HistoryEntry:
        """Take back the last move. It is kept on the redo stack until a new move is played."""
        if not self.history:
            raise NoHistoryError("No moves to undo.")

        entry = self.history.pop()
        self.redo_stack.append(entry)
        self._update_game_status()
        logger.debug(f"Undid {entry.san}, status: {self.status_name}")
        return entry

    def redo(self) -> HistoryEntry:
        """Replay the move that was undone last."""
        if not self.redo_stack:
            raise NoRedoError("No moves to redo.")

        entry = self.redo_stack.pop()
        self.history.append(entry)
        self._update_game_status()
        logger.debug(f"Redid {entry.san}, status: {self.status_name}")
        return entry

    # -- PRIVATE HELPERS ---
    def _resolve_legal_move(self, move: Move) -> Move:
        """Find the legal move matching the intent (from, to, promotion). Moves compare equal regardless of their kind."""
        for legal_move in legal_moves(self.board):
            if legal_move == move:
                return legal_move
        raise IllegalMoveError(f"Move not allowed: {move}")

    def _previous_boards(self) -> list[Board]:
        """All positions before the current one (needed for the repetition rule)"""
        boards = [self.initial_board] + [entry.board for entry in self.history]
        return boards[:-1]

    def _update_game_status(self) -> None:
        self.status = game_status(self.board, self._previous_boards())


def assert_playable(board: Board) -> None:
    """
    A game can only start from a position that obeys the invariants of chess:
    * exactly one king of each color
    * no pawns on the first or last rank
    * the player who is not to move cannot be in check (they would have just made an illegal move)
    * an en passant square must be one a double pawn push of the opponent just skipped over
    """
    for color in Color:
        num_kings = len(board.locate_pieces(PieceType.KING, color))
        if num_kings != 1:
            raise GameStateError(
                f"Position must contain exactly one {color.name.lower()} king, found {num_kings}."
            )

    back_ranks = set(PROMOTION_RANK.values())
    if any(square.rank in back_ranks for square in board.locate_pieces(PieceType.PAWN)):
        raise GameStateError("Pawns cannot stand on the first or last rank.")

    if is_in_check(board, board.color_to_move.opponent):
        raise GameStateError(
            f"The {board.color_to_move.opponent.name.lower()} king is in check while it is not their move."
        )

    if board.en_passant_square is not None and not _is_en_passant_plausible(board):
        raise GameStateError(
            f"No double pawn push can have produced en passant square {board.en_passant_square}."
        )


def _is_en_passant_plausible(board: Board) -> bool:
    """The skipped square and the pawn's starting square are empty, and the pawn stands right behind the skipped square."""
    target = board.en_passant_square
    mover = board.color_to_move.opponent
    forward = PAWN_DIRECTION[mover]
    if target is None or target.rank != PAWN_START_RANK[mover] + forward:
        return False

    start_square = target.offset(0, -forward)
    pawn_square = target.offset(0, forward)
    return (
        board.piece(target) is None
        and start_square is not None
        and board.piece(start_square) is None
        and pawn_square is not None
        and board.piece(pawn_square) == Piece(PieceType.PAWN, mover)
    )
