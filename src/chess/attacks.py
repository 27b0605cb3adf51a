"""
Capturing rules / attacking rules

Where the movement rules answer _"where can the piece on this square go?"_, the attack rules answer the
reverse question: _"is this square in the line-of-sight of a piece of the given color?"_

Used for check detection and to forbid castling through attacked squares.
Key idea: same strategy pattern as the movement rules, one attack test per piece type.
"""

from typing import Callable, Optional, Protocol

from src.chess.pieces import PAWN_DIRECTION, Color, Piece, PieceType
from src.chess.square import (
    DIAGONALS,
    KING_DELTAS,
    KNIGHT_DELTAS,
    STRAIGHTS,
    Square,
    Vector,
)


class Board(Protocol):
    """Just the parts the attack rules need"""

    def piece(self, square: Square) -> Optional[Piece]: ...
    def king_square(self, color: Color) -> Optional[Square]: ...


def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: frozenset[PieceType],
    board: Board,
    directions: tuple[Vector, ...],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Walk away from the square along each direction until we hit a piece or the edge of the board.
    Only the first piece found matters: if it belongs to `by_color` and is allowed to slide along
    that direction, the square is attacked.
    """
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square is not None:
            piece_found = board.piece(target_square)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    return True
                break
            target_square = target_square.offset(df, dr)
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: tuple[Vector, ...],
) -> bool:
    """
    Raycasting is for sliding pieces. This is the equivalent for pawns, kings, and knights that just can move a single step along a direction.
    """
    attacker = Piece(by_piece_type, by_color)
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if target_square is not None and board.piece(target_square) == attacker:
            return True
    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric, so to check IF a white pawn could take on your square -->
    Must look one rank DOWN the board. Pawns attack diagonally whether or not the square is occupied.
    """
    behind = -PAWN_DIRECTION[by_color]
    inverse_pawn_take_deltas: tuple[Vector, ...] = ((1, behind), (-1, behind))
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, inverse_pawn_take_deltas
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_bishop(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(
        square, by_color, frozenset({PieceType.BISHOP}), board, DIAGONALS
    )


def is_attacked_by_rook(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(
        square, by_color, frozenset({PieceType.ROOK}), board, STRAIGHTS
    )


def is_attacked_by_queen(square: Square, by_color: Color, board: Board) -> bool:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_attack(
        square, by_color, frozenset({PieceType.QUEEN}), board, STRAIGHTS + DIAGONALS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: dict[PieceType, IsAttackedFn] = {
    PieceType.PAWN: is_attacked_by_pawn,
    PieceType.KNIGHT: is_attacked_by_knight,
    PieceType.BISHOP: is_attacked_by_bishop,
    PieceType.ROOK: is_attacked_by_rook,
    PieceType.QUEEN: is_attacked_by_queen,
    PieceType.KING: is_attacked_by_king,
}


def is_square_attacked(board: Board, square: Square, by_color: Color) -> bool:
    """True if any piece of `by_color` could capture on `square` (ignoring the safety of its own king)"""
    return any(
        is_attacked(square, by_color, board) for is_attacked in ATTACK_RULES.values()
    )


def is_in_check(board: Board, color: Color) -> bool:
    """Is the king of `color` attacked? A board without that king is never in check."""
    king_square = board.king_square(color)
    if king_square is None:
        return False
    return is_square_attacked(board, king_square, color.opponent)
