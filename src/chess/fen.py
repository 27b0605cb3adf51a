"""
FEN notation adapter: convert a Board to/from a FEN string.

FEN, or Forsyth-Edwards Notation, is a standard notation for describing a particular board position of a chess game.
The purpose of FEN is to provide all the necessary information to restart a game from a particular position.

<board position string> <active color> <castling rights> <en passant square> <half move clock> <full move number>

* The string to describe the board position is described in the Board class
* The active color is either "w" or "b"
* Castling rights are denoted as "k" for king-side or "q" for queen-side. Capital letters for the white pieces, small letters for the black pieces.
    In the starting position: KQkq (all rights available). If no rights are left, a "-" is used.
* The en passant square indicates the square a pawn can take on. If not available a "-" is used.
* The half move clock counts the number of half moves made since the last pawn move or capture. (A draw is reached when this number reaches 100)
* The full move number starts at 1 and increments after every move black makes.

ex) The standard starting position has a FEN
rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
"""

from src.chess.board import Board
from src.chess.castling import (
    CastlingDirection,
    castling_from_fen,
    castling_to_fen,
)
from src.chess.pieces import FEN_TO_PIECE, Color
from src.chess.square import BOARD_DIMENSIONS, Square, is_valid_algebraic
from src.core.exceptions import MalformedNotationError

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
NUM_FEN_FIELDS = 6
COLOR_CODES: dict[str, Color] = {"w": Color.WHITE, "b": Color.BLACK}
CASTLING_CHARACTERS = frozenset(direction.value for direction in CastlingDirection)
# Empty-square run lengths in a placement rank
DIGITS = "12345678"


# --- VALIDATION ---
def validate_fen(fen: str) -> None:
    """
    Check if given string follows proper FEN notation.
    Raises MalformedNotationError stating the first problem found.
    """
    parts = fen.strip().split()
    if len(parts) != NUM_FEN_FIELDS:
        raise MalformedNotationError(
            f"FEN must have {NUM_FEN_FIELDS} space separated fields, found {len(parts)}: {fen!r}"
        )

    position, color, castling, en_passant, half_move_clock, full_move_number = parts
    validate_position(position)

    if not is_valid_color_code(color):
        raise MalformedNotationError(f"Side to move must be 'w' or 'b', found {color!r}")

    if not is_valid_castling_rights(castling):
        raise MalformedNotationError(f"Invalid castling field: {castling!r}")

    if not is_valid_en_passant(en_passant):
        raise MalformedNotationError(f"Invalid en passant field: {en_passant!r}")

    if not is_valid_move_counter(half_move_clock):
        raise MalformedNotationError(f"Invalid half move clock: {half_move_clock!r}")

    if not is_valid_move_counter(full_move_number) or int(full_move_number) < 1:
        raise MalformedNotationError(f"Invalid full move number: {full_move_number!r}")


def is_valid_fen(fen: str) -> bool:
    try:
        validate_fen(fen)
    except MalformedNotationError:
        return False
    return True


def validate_position(position: str) -> None:
    """Only check the part of the FEN encoding for the board position: exactly 8 ranks of exactly 8 files."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        raise MalformedNotationError(
            f"Piece placement must describe {num_ranks} ranks, found {len(rank_fens)}: {position!r}"
        )

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            # make sure every character is valid
            if character in DIGITS:
                file_count += int(character)
            elif character.isascii() and character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                raise MalformedNotationError(
                    f"Invalid character {character!r} in piece placement: {position!r}"
                )

        # make sure you are creating a correctly sized board
        if file_count != num_files:
            raise MalformedNotationError(
                f"Rank {rank_fen!r} describes {file_count} files instead of {num_files}"
            )


def is_valid_position(position: str) -> bool:
    try:
        validate_position(position)
    except MalformedNotationError:
        return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in COLOR_CODES


def is_valid_castling_rights(castling: str) -> bool:
    """Either a '-' if all rights have been revoked, or any of K, Q, k, q, each at most once."""
    if castling == "-":
        return True
    return (
        len(castling) > 0
        and set(castling) <= CASTLING_CHARACTERS
        and len(set(castling)) == len(castling)
    )


def is_valid_en_passant(en_passant: str) -> bool:
    """Valid en passant square encoding should be a square that exists on the board or a '-'"""
    return (en_passant == "-") or (len(en_passant) == 2 and is_valid_algebraic(en_passant))


def is_valid_move_counter(counter: str) -> bool:
    return counter.isascii() and counter.isdigit()


# --- CONVERSION ---
def board_from_fen(fen: str) -> Board:
    """Parse the FEN into a Board"""

    # raise an exception if invalid FEN:
    validate_fen(fen)

    # extract the different components. FEN is space separated
    (
        position,
        active_color,
        castling_str,
        en_passant_algebraic,
        half_move_clock,
        full_move_number,
    ) = fen.strip().split()

    return Board(
        position=Board.position_from_fen(position),
        color_to_move=COLOR_CODES[active_color],
        castling_rights=castling_from_fen(castling_str),
        en_passant_square=(
            Square.from_algebraic(en_passant_algebraic)
            if en_passant_algebraic != "-"
            else None
        ),
        half_move_clock=int(half_move_clock),
        full_move_number=int(full_move_number),
    )


def board_to_fen(board: Board) -> str:
    """reverse operation: write a FEN from the given board"""
    active_color = "w" if board.color_to_move == Color.WHITE else "b"
    castling_str = castling_to_fen(board.castling_rights)
    en_passant_algebraic = (
        board.en_passant_square.to_algebraic()
        if board.en_passant_square is not None
        else "-"
    )
    return (
        f"{board.position_to_fen()} {active_color} {castling_str} {en_passant_algebraic} "
        f"{board.half_move_clock} {board.full_move_number}"
    )
