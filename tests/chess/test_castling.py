"""Unit tests for /src/chess/castling.py"""

import pytest

from src.chess.castling import (
    ALL_CASTLING_RIGHTS,
    CASTLING_RULES,
    CastlingDirection,
    castling_from_fen,
    castling_options,
    castling_to_fen,
    revoked_rights,
    squares_between_on_rank,
)
from src.chess.pieces import Color
from src.chess.square import Square


def squares(*names: str) -> list[Square]:
    return [Square.from_algebraic(name) for name in names]


@pytest.mark.parametrize(
    "fen, expected_rights",
    [
        ("KQkq", ALL_CASTLING_RIGHTS),
        (
            "KQk",
            frozenset(
                {
                    CastlingDirection.WHITE_KING_SIDE,
                    CastlingDirection.WHITE_QUEEN_SIDE,
                    CastlingDirection.BLACK_KING_SIDE,
                }
            ),
        ),
        ("q", frozenset({CastlingDirection.BLACK_QUEEN_SIDE})),
        ("-", frozenset()),
    ],
)
def test_castling_fen_roundtrip(
    fen: str, expected_rights: frozenset[CastlingDirection]
) -> None:
    """Check encoding of castling rights is correctly decoded (and encoded back in canonical order)"""
    assert castling_from_fen(fen) == expected_rights
    assert castling_to_fen(expected_rights) == fen


def test_castling_to_fen_uses_canonical_order() -> None:
    assert castling_to_fen(castling_from_fen("qkQK")) == "KQkq"


def test_castling_paths() -> None:
    white_queen_side = CASTLING_RULES[CastlingDirection.WHITE_QUEEN_SIDE]
    assert white_queen_side.squares_between == squares("d1", "c1", "b1")
    # b1 only needs to be empty: the king never crosses it
    assert white_queen_side.king_path == squares("d1", "c1")

    black_king_side = CASTLING_RULES[CastlingDirection.BLACK_KING_SIDE]
    assert black_king_side.squares_between == squares("f8", "g8")
    assert black_king_side.king_path == squares("f8", "g8")


def test_squares_between_requires_same_rank() -> None:
    with pytest.raises(ValueError):
        squares_between_on_rank(Square.from_algebraic("a1"), Square.from_algebraic("a2"))


def test_castling_options_per_color() -> None:
    assert castling_options(Color.WHITE) == [
        CastlingDirection.WHITE_KING_SIDE,
        CastlingDirection.WHITE_QUEEN_SIDE,
    ]
    assert all(direction.color == Color.BLACK for direction in castling_options(Color.BLACK))


@pytest.mark.parametrize(
    "touched, remaining",
    [
        (squares("e1", "e2"), "kq"),  # white king moved
        (squares("h1", "h5"), "Qkq"),  # white rook moved
        (squares("b2", "a8"), "KQk"),  # black rook captured on its home square
        (squares("d2", "d4"), "KQkq"),  # nothing to do with castling
    ],
)
def test_revoking_rights(touched: list[Square], remaining: str) -> None:
    assert revoked_rights(ALL_CASTLING_RIGHTS, set(touched)) == castling_from_fen(remaining)
