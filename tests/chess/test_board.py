"""Unit tests for /src/chess/board.py"""

import pytest

from src.chess.board import STARTING_POSITION, Board
from src.chess.castling import castling_from_fen
from src.chess.fen import board_from_fen
from src.chess.moves import Move, MoveKind
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square

EMPTY_FEN = "/".join(["8"] * 8)


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


@pytest.mark.parametrize(
    "position",
    [
        STARTING_POSITION,
        EMPTY_FEN,
        "r3k2r/pppq1ppp/2npbn2/4p3/2B1P3/2NP1N2/PPP2PPP/R1BQ1RK1",
        "8/8/8/3P4/8/8/8/8",
    ],
)
def test_position_fen_roundtrip(position: str) -> None:
    board = Board(position=Board.position_from_fen(position))
    assert board.position_to_fen() == position


def test_starting_position() -> None:
    board = Board.starting_position()
    assert len(board.position) == 32
    assert board.piece(sq("e1")) == Piece(PieceType.KING, Color.WHITE)
    assert board.piece(sq("d8")) == Piece(PieceType.QUEEN, Color.BLACK)
    assert board.piece(sq("e4")) is None
    assert board.color_to_move == Color.WHITE
    assert board.castling_rights == castling_from_fen("KQkq")


def test_locating_pieces() -> None:
    board = Board.starting_position()
    assert set(board.locate_pieces(PieceType.ROOK)) == {sq("a1"), sq("h1"), sq("a8"), sq("h8")}
    assert set(board.locate_pieces(PieceType.ROOK, Color.BLACK)) == {sq("a8"), sq("h8")}
    assert len(board.locate_color(Color.WHITE)) == 16
    assert board.king_square(Color.BLACK) == sq("e8")
    assert Board().king_square(Color.WHITE) is None


def test_apply_returns_new_board() -> None:
    """The board itself never changes: history entries stay valid."""
    board = Board.starting_position()
    fen_before = board.position_to_fen()
    after = board.apply(Move(sq("g1"), sq("f3")))

    assert board.position_to_fen() == fen_before
    assert after.piece(sq("f3")) == Piece(PieceType.KNIGHT, Color.WHITE)
    assert after.piece(sq("g1")) is None
    assert after.color_to_move == Color.BLACK
    assert after.half_move_clock == 1
    assert after.full_move_number == 1


def test_double_pawn_push_sets_en_passant_square() -> None:
    board = Board.starting_position()
    after = board.apply(Move(sq("e2"), sq("e4"), kind=MoveKind.DOUBLE_PAWN_PUSH))
    assert after.en_passant_square == sq("e3")
    assert after.half_move_clock == 0

    # ... and it is cleared again by the next move
    after_reply = after.apply(Move(sq("g8"), sq("f6")))
    assert after_reply.en_passant_square is None
    assert after_reply.full_move_number == 2


def test_capture_resets_half_move_clock() -> None:
    board = board_from_fen("4k3/8/8/3p4/8/8/8/3RK3 w - - 17 40")
    after = board.apply(Move(sq("d1"), sq("d5"), kind=MoveKind.CAPTURE))
    assert after.piece(sq("d5")) == Piece(PieceType.ROOK, Color.WHITE)
    assert after.half_move_clock == 0
    assert len(after.position) == 3


def test_en_passant_removes_captured_pawn() -> None:
    board = board_from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 2")
    after = board.apply(Move(sq("e5"), sq("d6"), kind=MoveKind.EN_PASSANT))
    assert after.piece(sq("d6")) == Piece(PieceType.PAWN, Color.WHITE)
    assert after.piece(sq("d5")) is None
    assert after.piece(sq("e5")) is None
    assert board.is_capture(Move(sq("e5"), sq("d6"), kind=MoveKind.EN_PASSANT))


@pytest.mark.parametrize(
    "king_to, kind, rook_from, rook_to",
    [
        ("g1", MoveKind.CASTLE_KINGSIDE, "h1", "f1"),
        ("c1", MoveKind.CASTLE_QUEENSIDE, "a1", "d1"),
    ],
)
def test_castling_moves_the_rook(
    king_to: str, kind: MoveKind, rook_from: str, rook_to: str
) -> None:
    board = board_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    after = board.apply(Move(sq("e1"), sq(king_to), kind=kind))
    assert after.piece(sq(king_to)) == Piece(PieceType.KING, Color.WHITE)
    assert after.piece(sq(rook_to)) == Piece(PieceType.ROOK, Color.WHITE)
    assert after.piece(sq(rook_from)) is None
    assert after.castling_rights == castling_from_fen("kq")


def test_promotion_substitutes_the_pawn() -> None:
    board = board_from_fen("1n2k3/P7/8/8/8/8/8/4K3 w - - 0 1")
    after = board.apply(Move(sq("a7"), sq("b8"), PieceType.KNIGHT, MoveKind.PROMOTION))
    assert after.piece(sq("b8")) == Piece(PieceType.KNIGHT, Color.WHITE)
    assert after.locate_pieces(PieceType.PAWN) == []
    assert board.is_capture(Move(sq("a7"), sq("b8"), PieceType.KNIGHT, MoveKind.PROMOTION))


def test_capturing_rook_revokes_opponent_right() -> None:
    """a1 takes a8: the white rook leaves its home square, the black one gets captured on it"""
    board = board_from_fen("r3k2r/8/8/8/8/8/8/R3K3 w Qkq - 0 1")
    after = board.apply(Move(sq("a1"), sq("a8"), kind=MoveKind.CAPTURE))
    assert after.castling_rights == castling_from_fen("k")


def test_apply_without_piece_raises() -> None:
    with pytest.raises(ValueError):
        Board.starting_position().apply(Move(sq("e4"), sq("e5")))


def test_repetition_key_ignores_move_counters() -> None:
    board = board_from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    later = board_from_fen("4k3/8/8/8/8/8/8/4K3 w - - 12 30")
    assert board.repetition_key() == later.repetition_key()
    assert board != later


def test_board_is_read_only() -> None:
    placement = Board.position_from_fen("4k3/8/8/8/8/8/8/4K3")
    board = Board(position=placement)

    # changing the dict the board was built from does not change the board
    placement[sq("d4")] = Piece(PieceType.QUEEN, Color.WHITE)
    assert board.piece(sq("d4")) is None

    with pytest.raises(TypeError):
        board.position[sq("d4")] = Piece(PieceType.QUEEN, Color.WHITE)  # type: ignore[index]


def test_equal_boards_hash_equal() -> None:
    board = board_from_fen("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1")
    same = board_from_fen("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1")
    assert board == same
    assert hash(board) == hash(same)
    assert len({board, same, Board.starting_position()}) == 2
