"""
Geometry/Base movement rules: the pseudo-legal move generator

Key idea: Use strategy pattern to define candidate move sets for each piece type.
Special rules (castling, en passant, promotion) are added on top of the basic movement patterns.

The moves produced here obey the movement patterns and board occupancy, but may leave the mover's own king
in check. Legality is checked later by the validator.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional, Protocol, Self

from src.chess.attacks import is_in_check, is_square_attacked
from src.chess.castling import CASTLING_RULES, CastlingDirection, castling_options
from src.chess.pieces import (
    FEN_TO_PIECE,
    PAWN_DIRECTION,
    PAWN_START_RANK,
    PIECE_TO_FEN,
    PROMOTION_OPTIONS,
    PROMOTION_RANK,
    Color,
    Piece,
    PieceType,
)
from src.chess.square import (
    DIAGONALS,
    KING_DELTAS,
    KNIGHT_DELTAS,
    STRAIGHTS,
    Square,
    Vector,
    is_valid_algebraic,
)
from src.core.exceptions import MalformedNotationError


class Board(Protocol):
    """Just the parts the movement strategies need"""

    @property
    def color_to_move(self) -> Color: ...
    @property
    def castling_rights(self) -> frozenset[CastlingDirection]: ...
    @property
    def en_passant_square(self) -> Optional[Square]: ...

    def piece(self, square: Square) -> Optional[Piece]: ...
    def locate_color(self, color: Color) -> list[Square]: ...
    def king_square(self, color: Color) -> Optional[Square]: ...


class MoveKind(Enum):
    """Derived by the generator. Tells the board how to apply the move and the notation how to render it."""

    NORMAL = auto()
    CAPTURE = auto()
    DOUBLE_PAWN_PUSH = auto()
    EN_PASSANT = auto()
    CASTLE_KINGSIDE = auto()
    CASTLE_QUEENSIDE = auto()
    PROMOTION = auto()


CASTLING_KINDS: frozenset[MoveKind] = frozenset(
    {MoveKind.CASTLE_KINGSIDE, MoveKind.CASTLE_QUEENSIDE}
)


@dataclass(frozen=True)
class Move:
    """
    basic definition of a move to be made

    NOTE: `kind` is not part of equality. A bare intent like Move(e2, e4) compares equal to the generated
    Move(e2, e4, kind=DOUBLE_PAWN_PUSH), so an intent can be looked up in the legal move set.
    """

    from_square: Square
    to_square: Square
    promote_to: Optional[PieceType] = None
    kind: MoveKind = field(default=MoveKind.NORMAL, compare=False)

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        * "e1g1": the king castles king side

        NOTE: the kind of move (castling / en passant / ...) gets resolved against the legal move set by Game
        """
        if len(uci) not in (4, 5):
            raise MalformedNotationError(f"UCI move must have 4 or 5 characters: {uci!r}")
        from_uci, to_uci = uci[:2], uci[2:4]
        if not (is_valid_algebraic(from_uci) and is_valid_algebraic(to_uci)):
            raise MalformedNotationError(f"Invalid square in UCI move: {uci!r}")

        promote_to = None
        if len(uci) == 5:
            promote_to = FEN_TO_PIECE.get(uci[4])
            if promote_to not in PROMOTION_OPTIONS:
                raise MalformedNotationError(f"Invalid promotion piece in UCI move: {uci!r}")
        return cls(Square.from_algebraic(from_uci), Square.from_algebraic(to_uci), promote_to)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    @property
    def is_castling(self) -> bool:
        return self.kind in CASTLING_KINDS

    def __str__(self) -> str:
        return self.to_uci()


# --- MOVEMENT RULES ---
def _step_kind(target_square: Square, board: Board) -> MoveKind:
    return MoveKind.NORMAL if board.piece(target_square) is None else MoveKind.CAPTURE


def raycasting_move(
    square: Square, board: Board, directions: tuple[Vector, ...]
) -> list[Move]:
    """
    Raycasting algorithm
    -----

    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    player_color = board.piece(square).color  # type: ignore[union-attr]

    moves: list[Move] = []
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square is not None:
            piece_found = board.piece(target_square)
            if piece_found is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if piece_found.color != player_color:
                    moves.append(Move(square, target_square, kind=MoveKind.CAPTURE))
                break

            moves.append(Move(square, target_square))
            target_square = target_square.offset(df, dr)
    return moves


def single_step_move(
    square: Square, board: Board, deltas: tuple[Vector, ...]
) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    player_color = board.piece(square).color  # type: ignore[union-attr]

    moves: list[Move] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if target_square is None:
            continue

        piece_found = board.piece(target_square)
        if piece_found is None or piece_found.color != player_color:
            moves.append(
                Move(square, target_square, kind=_step_kind(target_square, board))
            )
    return moves


def candidate_pawn_moves(square: Square, board: Board) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward (onto an empty square).
    - It can move by two in their first move (so when on their starting rank), if both squares are empty
    - takes diagonally, onto an enemy piece or onto the en passant square
    - promotes when reaching the final rank
    """
    player_color = board.piece(square).color  # type: ignore[union-attr]
    forward = PAWN_DIRECTION[player_color]

    moves: list[Move] = []
    one_step = square.offset(0, forward)
    if one_step is not None and board.piece(one_step) is None:
        moves.append(Move(square, one_step))

        two_steps = one_step.offset(0, forward)
        on_start_rank = square.rank == PAWN_START_RANK[player_color]
        if on_start_rank and two_steps is not None and board.piece(two_steps) is None:
            moves.append(Move(square, two_steps, kind=MoveKind.DOUBLE_PAWN_PUSH))

    # pawns take diagonally:
    for df in (-1, 1):
        target_square = square.offset(df, forward)
        if target_square is None:
            continue

        piece_found = board.piece(target_square)
        if piece_found is not None and piece_found.color != player_color:
            moves.append(Move(square, target_square, kind=MoveKind.CAPTURE))
        elif piece_found is None and target_square == board.en_passant_square:
            moves.append(Move(square, target_square, kind=MoveKind.EN_PASSANT))

    return expand_promotions(moves, player_color)


def candidate_knight_moves(square: Square, board: Board) -> list[Move]:
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Move]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_move(square, board, STRAIGHTS + DIAGONALS)


def candidate_king_moves(square: Square, board: Board) -> list[Move]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move (handled separately).
    """
    return single_step_move(square, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# -- PAWN PROMOTION MOVES --
def expand_promotions(pawn_moves: list[Move], color: Color) -> list[Move]:
    """Replace every pawn move onto the final rank by one copy per piece type the pawn can promote into."""
    expanded: list[Move] = []
    for move in pawn_moves:
        if move.to_square.rank != PROMOTION_RANK[color]:
            expanded.append(move)
            continue
        expanded.extend(
            Move(move.from_square, move.to_square, piece_type, MoveKind.PROMOTION)
            for piece_type in PROMOTION_OPTIONS
        )
    return expanded


# -- CASTLING MOVES ---
CASTLING_MOVE_KIND: dict[CastlingDirection, MoveKind] = {
    CastlingDirection.WHITE_KING_SIDE: MoveKind.CASTLE_KINGSIDE,
    CastlingDirection.WHITE_QUEEN_SIDE: MoveKind.CASTLE_QUEENSIDE,
    CastlingDirection.BLACK_KING_SIDE: MoveKind.CASTLE_KINGSIDE,
    CastlingDirection.BLACK_QUEEN_SIDE: MoveKind.CASTLE_QUEENSIDE,
}


def castling_direction_of(move: Move, color: Color) -> Optional[CastlingDirection]:
    """Which castling direction a castling move of `color` belongs to (None for any other move)"""
    if not move.is_castling:
        return None
    return next(
        direction
        for direction in castling_options(color)
        if CASTLING_MOVE_KIND[direction] == move.kind
    )


def candidate_castling_move(direction: CastlingDirection) -> Move:
    rule = CASTLING_RULES[direction]
    return Move(rule.king_from, rule.king_to, kind=CASTLING_MOVE_KIND[direction])


def can_castle(board: Board, direction: CastlingDirection) -> bool:
    """
    **you are allowed to castle if**

    * Castling rights are not yet revoked (and king and rook still stand on their home squares).
    * All squares in between the king and the rook are empty.
    * You are not currently in check (you cannot castle out of check).
    * The king does not pass through or land on a square that is under attack.
    """
    color = direction.color
    if direction not in board.castling_rights:
        return False

    rule = CASTLING_RULES[direction]
    if board.piece(rule.king_from) != Piece(PieceType.KING, color):
        return False
    if board.piece(rule.rook_from) != Piece(PieceType.ROOK, color):
        return False

    if any(board.piece(square) is not None for square in rule.squares_between):
        return False

    if is_in_check(board, color):
        return False

    return not any(
        is_square_attacked(board, square, color.opponent) for square in rule.king_path
    )


def castling_moves(board: Board) -> list[Move]:
    """Use CASTLING_RULES to construct the castling moves available to the side to move"""
    return [
        candidate_castling_move(direction)
        for direction in castling_options(board.color_to_move)
        if can_castle(board, direction)
    ]


# --- MOVE GENERATOR ---
def pseudo_legal_moves(board: Board) -> list[Move]:
    """
    All candidate moves for the side to move: basic movement rules for every piece plus castling.
    (En passant and promotions are part of the pawn rule.)
    """
    color = board.color_to_move
    candidate_moves: list[Move] = []
    for starting_square in board.locate_color(color):
        piece_type = board.piece(starting_square).type  # type: ignore[union-attr]
        movement_rule: CandidateMovesFn = MOVEMENT_RULES[piece_type]
        candidate_moves.extend(movement_rule(starting_square, board))

    candidate_moves.extend(castling_moves(board))
    return candidate_moves
