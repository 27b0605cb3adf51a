"""
Type definitions used across layers

String valued counterparts of the domain enums. These are what travels through the API and gets stored in the database.
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW_FIFTY_MOVE = "draw by fifty-move rule"
    DRAW_INSUFFICIENT_MATERIAL = "draw by insufficient material"
    DRAW_REPETITION = "draw by repetition"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    """Piece types a pawn can promote into"""

    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
