"""
Move validation and game status.

Filters the pseudo-legal moves produced by the movement rules down to the legal moves: a move is legal when the
board after the move does not leave the mover's own king attacked.
On top of that, determines whether a position is check, checkmate, stalemate or a draw.

All functions are stateless: they look at a Board snapshot and never change it.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Optional

from src.chess.attacks import is_in_check, is_square_attacked
from src.chess.board import Board
from src.chess.moves import Move, pseudo_legal_moves
from src.chess.pieces import MINOR_PIECES, Color, PieceType
from src.chess.square import Square

__all__ = [
    "GameStatus",
    "Status",
    "game_status",
    "has_insufficient_material",
    "is_fifty_move_draw",
    "is_in_check",
    "is_legal",
    "is_repetition_draw",
    "is_square_attacked",
    "legal_moves",
    "legal_moves_from",
]

# 50 moves by each player without a pawn move or capture
FIFTY_MOVE_RULE_PLIES = 100
REPETITION_COUNT = 3


class Status(Enum):
    IN_PROGRESS = auto()
    CHECK = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    DRAW_FIFTY_MOVE = auto()
    DRAW_INSUFFICIENT_MATERIAL = auto()
    DRAW_REPETITION = auto()


DRAWS: frozenset[Status] = frozenset(
    {
        Status.STALEMATE,
        Status.DRAW_FIFTY_MOVE,
        Status.DRAW_INSUFFICIENT_MATERIAL,
        Status.DRAW_REPETITION,
    }
)


@dataclass(frozen=True)
class GameStatus:
    """
    The status of a position.

    `color` is the side in check for CHECK, the side that got mated (lost) for CHECKMATE, and None otherwise.
    """

    status: Status
    color: Optional[Color] = None

    @property
    def is_terminal(self) -> bool:
        return self.status not in (Status.IN_PROGRESS, Status.CHECK)

    @property
    def is_draw(self) -> bool:
        return self.status in DRAWS


def is_legal(board: Board, move: Move) -> bool:
    """Simulate the move and check whether the mover's king ends up attacked."""
    return not is_in_check(board.apply(move), board.color_to_move)


def legal_moves(board: Board) -> list[Move]:
    """pseudo-legal moves minus the ones that put (or leave) you in check"""
    return [move for move in pseudo_legal_moves(board) if is_legal(board, move)]


def legal_moves_from(board: Board, square: Square) -> list[Move]:
    """Legal moves of the piece standing on `square` (used for showing move hints)"""
    return [move for move in legal_moves(board) if move.from_square == square]


# --- DRAW CONDITIONS ---
def is_fifty_move_draw(board: Board) -> bool:
    return board.half_move_clock >= FIFTY_MOVE_RULE_PLIES


def has_insufficient_material(board: Board) -> bool:
    """
    Neither side has enough material to force mate.
    ----

    Deliberately conservative: only a bare king or a king plus one single minor piece per side counts.
    (K vs K, K+N vs K, K+B vs K, K+minor vs K+minor). Richer endings, such as two knights or same-colored bishops,
    are not treated as a draw.
    """
    for color in Color:
        pieces = [
            piece.type
            for square in board.locate_color(color)
            if (piece := board.piece(square)) is not None and piece.type != PieceType.KING
        ]
        if len(pieces) > 1:
            return False
        if pieces and pieces[0] not in MINOR_PIECES:
            return False
    return True


def is_repetition_draw(board: Board, previous_boards: Iterable[Board]) -> bool:
    """Has the current position occurred for the third time? (counting the current occurrence)"""
    key = board.repetition_key()
    occurrences = Counter(previous.repetition_key() for previous in previous_boards)
    return occurrences[key] + 1 >= REPETITION_COUNT


def game_status(board: Board, previous_boards: Iterable[Board] = ()) -> GameStatus:
    """
    Status of the position for the side to move.
    ----

    1. Checkmate: no legal moves and in check (the side to move lost)
    2. Stalemate: no legal moves, not in check
    3. Draws: fifty-move rule, insufficient material, threefold repetition
    4. Check: in check with legal moves remaining
    5. In progress otherwise

    `previous_boards` are the positions that occurred earlier in the game (not including `board` itself).
    """
    color = board.color_to_move
    in_check = is_in_check(board, color)
    if not legal_moves(board):
        if in_check:
            return GameStatus(Status.CHECKMATE, color)
        return GameStatus(Status.STALEMATE)

    if is_fifty_move_draw(board):
        return GameStatus(Status.DRAW_FIFTY_MOVE)

    if has_insufficient_material(board):
        return GameStatus(Status.DRAW_INSUFFICIENT_MATERIAL)

    if is_repetition_draw(board, previous_boards):
        return GameStatus(Status.DRAW_REPETITION)

    if in_check:
        return GameStatus(Status.CHECK, color)
    return GameStatus(Status.IN_PROGRESS)
