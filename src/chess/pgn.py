"""
Notation adapter for move lists: SAN (Standard Algebraic Notation) and PGN (Portable Game Notation).

SAN describes a move relative to a specific board, e.g. "Nbd7", "exd6", "O-O", "e8=Q#".
PGN wraps a list of SAN moves with header tags and a result token.
"""

import re
from dataclasses import dataclass, field

from src.chess.board import Board
from src.chess.moves import Move, MoveKind
from src.chess.pieces import Color, PieceType
from src.chess.square import FILE_NAMES, Square
from src.chess.validator import GameStatus, Status, is_in_check, legal_moves
from src.core.exceptions import MalformedNotationError

SAN_PIECE: dict[PieceType, str] = {
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}
SAN_TO_PIECE: dict[str, PieceType] = {value: key for key, value in SAN_PIECE.items()}

CASTLING_SAN: dict[MoveKind, str] = {
    MoveKind.CASTLE_KINGSIDE: "O-O",
    MoveKind.CASTLE_QUEENSIDE: "O-O-O",
}

RESULT_TOKENS = ("1-0", "0-1", "1/2-1/2", "*")
UNFINISHED = "*"

# <piece><from file><from rank><x><to square><=promotion>, everything but the target square optional
SAN_PATTERN = re.compile(
    r"^(?P<piece>[NBRQK])?(?P<file>[a-h])?(?P<rank>[1-8])?(?P<capture>x)?"
    r"(?P<to>[a-h][1-8])(?:=?(?P<promotion>[NBRQ]))?$"
)
HEADER_PATTERN = re.compile(r'^\[(\w+)\s+"((?:[^"\\]|\\.)*)"\]\s*$')
MOVE_NUMBER_PATTERN = re.compile(r"^\d+\.+")
# Comments in braces, rest-of-line comments and numeric annotation glyphs carry no moves
COMMENT_PATTERN = re.compile(r"\{[^}]*\}|;[^\n]*|\$\d+")


# --- SAN ---
def move_to_san(board: Board, move: Move) -> str:
    """
    Convert a legal move to SAN, given the board before the move.

    A disambiguator (file, rank, or full square) is added only if several pieces of the same type
    can legally reach the same target square. The check/mate suffix is derived from the board after the move.
    """
    if move.is_castling:
        san = CASTLING_SAN[move.kind]
    else:
        san = _piece_part(board, move)
        if board.is_capture(move):
            san += "x"
        san += move.to_square.to_algebraic()
        if move.promote_to is not None:
            san += "=" + SAN_PIECE[move.promote_to]

    return san + check_suffix(board.apply(move))


def check_suffix(board_after: Board) -> str:
    """SAN suffix: "+" when the side to move is in check, "#" when that check is mate"""
    if not is_in_check(board_after, board_after.color_to_move):
        return ""
    return "+" if legal_moves(board_after) else "#"


def _piece_part(board: Board, move: Move) -> str:
    """Piece letter + disambiguator. Pawns only show their file, and only when capturing."""
    moving_piece = board.piece(move.from_square)
    if moving_piece is None:
        raise ValueError(f"No piece on {move.from_square}")

    if moving_piece.type == PieceType.PAWN:
        return FILE_NAMES[move.from_square.file] if board.is_capture(move) else ""

    rivals = [
        other.from_square
        for other in legal_moves(board)
        if other.to_square == move.to_square
        and other.from_square != move.from_square
        and board.piece(other.from_square) == moving_piece
    ]
    letter = SAN_PIECE[moving_piece.type]
    if not rivals:
        return letter
    if all(square.file != move.from_square.file for square in rivals):
        return letter + FILE_NAMES[move.from_square.file]
    if all(square.rank != move.from_square.rank for square in rivals):
        return letter + str(move.from_square.rank + 1)
    return letter + move.from_square.to_algebraic()


def san_to_move(board: Board, san: str) -> Move:
    """Parse a SAN string into the matching legal move on the given board."""
    clean = san.strip().rstrip("+#!?")
    candidates = legal_moves(board)

    if clean in ("O-O", "0-0", "O-O-O", "0-0-0"):
        kind = (
            MoveKind.CASTLE_KINGSIDE
            if clean in ("O-O", "0-0")
            else MoveKind.CASTLE_QUEENSIDE
        )
        matches = [move for move in candidates if move.kind == kind]
    else:
        parsed = SAN_PATTERN.match(clean)
        if parsed is None:
            raise MalformedNotationError(f"Cannot interpret {san!r} as a SAN move")

        piece_type = SAN_TO_PIECE.get(parsed["piece"] or "", PieceType.PAWN)
        to_square = Square.from_algebraic(parsed["to"])
        promote_to = SAN_TO_PIECE[parsed["promotion"]] if parsed["promotion"] else None
        from_file = FILE_NAMES.index(parsed["file"]) if parsed["file"] else None
        from_rank = int(parsed["rank"]) - 1 if parsed["rank"] else None

        matches = [
            move
            for move in candidates
            if move.to_square == to_square
            and move.promote_to == promote_to
            and not move.is_castling
            and board.piece(move.from_square).type == piece_type  # type: ignore[union-attr]
            and (from_file is None or move.from_square.file == from_file)
            and (from_rank is None or move.from_square.rank == from_rank)
        ]

    if not matches:
        raise MalformedNotationError(f"No legal move matches {san!r}")
    if len(matches) > 1:
        raise MalformedNotationError(
            f"Ambiguous move {san!r}: {', '.join(move.to_uci() for move in matches)}"
        )
    return matches[0]


# --- PGN ---
@dataclass
class ParsedPGN:
    """Raw content of a single PGN game: header tags, main line SAN moves, and the result token"""

    headers: dict[str, str] = field(default_factory=dict)
    sans: list[str] = field(default_factory=list)
    result: str = UNFINISHED


def result_token(status: GameStatus) -> str:
    """PGN result for a game with the given status"""
    if status.status == Status.CHECKMATE:
        return "0-1" if status.color == Color.WHITE else "1-0"
    if status.is_draw:
        return "1/2-1/2"
    return UNFINISHED


def movetext(
    sans: list[str],
    result: str,
    first_color: Color = Color.WHITE,
    first_move_number: int = 1,
) -> str:
    """Numbered move list: "1. e4 e5 2. Nf3 *". A game starting with black to move opens with "1... "."""
    parts: list[str] = []
    move_number = first_move_number
    color = first_color
    for ply, san in enumerate(sans):
        if color == Color.WHITE:
            parts.append(f"{move_number}.")
        elif ply == 0:
            parts.append(f"{move_number}...")
        parts.append(san)
        if color == Color.BLACK:
            move_number += 1
        color = color.opponent
    parts.append(result)
    return " ".join(parts)


def build_pgn(
    headers: dict[str, str],
    sans: list[str],
    result: str,
    first_color: Color = Color.WHITE,
    first_move_number: int = 1,
) -> str:
    """Build a single-game PGN document"""
    lines: list[str] = []
    for key, value in headers.items():
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        lines.append(f'[{key} "{escaped}"]')
    lines.append("")
    lines.append(movetext(sans, result, first_color, first_move_number))
    lines.append("")
    return "\n".join(lines)


def parse_pgn(text: str) -> ParsedPGN:
    """
    Split a PGN document into headers, SAN moves and result.

    Comments, numeric annotation glyphs and variations (in parentheses) are skipped: only the main line is kept.
    SAN moves are not checked against a board here; that happens when the moves get replayed.
    """
    parsed = ParsedPGN()
    movetext_lines: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("["):
            header = HEADER_PATTERN.match(stripped)
            if header is None:
                raise MalformedNotationError(f"Invalid PGN header line: {stripped!r}")
            key, value = header.groups()
            parsed.headers[key] = value.replace('\\"', '"').replace("\\\\", "\\")
        elif stripped:
            movetext_lines.append(stripped)

    tokens = COMMENT_PATTERN.sub(" ", "\n".join(movetext_lines)).split()
    depth = 0
    for token in _split_parentheses(tokens):
        if token == "(":
            depth += 1
            continue
        if token == ")":
            depth -= 1
            if depth < 0:
                raise MalformedNotationError("Unbalanced ')' in PGN movetext")
            continue
        if depth > 0:
            continue

        if token in RESULT_TOKENS:
            parsed.result = token
            continue

        # "12." or "12..." may be glued to the move itself ("12.Nf3")
        san = MOVE_NUMBER_PATTERN.sub("", token)
        if san:
            parsed.sans.append(san)

    if depth != 0:
        raise MalformedNotationError("Unbalanced '(' in PGN movetext")
    return parsed


def _split_parentheses(tokens: list[str]) -> list[str]:
    """Make sure "(" and ")" are tokens of their own, even when written as "(5.Nf3" or "Nf3)"."""
    split: list[str] = []
    for token in tokens:
        split.extend(part for part in re.split(r"([()])", token) if part)
    return split
