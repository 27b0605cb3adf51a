"""
The Board holds all positional truth of a game: which piece stands where plus the auxiliary state
that FEN encodes (side to move, castling rights, en passant square, move counters).

A Board is an immutable snapshot. Applying a move never changes a board in place; it returns the successor board.
That way positions stored in a game's history can never be altered by later moves.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional, Self

from src.chess.castling import (
    ALL_CASTLING_RIGHTS,
    CASTLING_RULES,
    CastlingDirection,
    revoked_rights,
)
from src.chess.moves import Move, MoveKind, castling_direction_of
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import BOARD_DIMENSIONS, Square

STARTING_POSITION = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

# Everything except the move counters: two positions with the same key are "the same position" for repetition
RepetitionKey = tuple[str, Color, frozenset[CastlingDirection], Optional[Square]]


@dataclass(frozen=True)
class Board:
    position: Mapping[Square, Piece] = field(default_factory=dict)
    color_to_move: Color = Color.WHITE
    castling_rights: frozenset[CastlingDirection] = frozenset()
    en_passant_square: Optional[Square] = None
    half_move_clock: int = 0
    full_move_number: int = 1

    def __post_init__(self) -> None:
        # read-only copy: neither the caller's dict nor a reader of a stored board can change the placement
        object.__setattr__(self, "position", MappingProxyType(dict(self.position)))

    def __hash__(self) -> int:
        return hash(
            (
                frozenset(self.position.items()),
                self.color_to_move,
                self.castling_rights,
                self.en_passant_square,
                self.half_move_clock,
                self.full_move_number,
            )
        )

    @classmethod
    def starting_position(cls) -> Self:
        return cls(
            position=cls.position_from_fen(STARTING_POSITION),
            castling_rights=ALL_CASTLING_RIGHTS,
        )

    @staticmethod
    def position_from_fen(fen_str: str) -> dict[Square, Piece]:
        """Decode the piece placement part of a FEN string.

        That is, we supply the first part of the FEN string that denotes the board position
        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces, again read from the a-file to the h-file.

        NOTE: assumes the placement was validated already (see fen.py)
        """
        position: dict[Square, Piece] = {}
        for rank_idx, fen_one_rank in enumerate(fen_str.split("/")):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - 1 - rank_idx
            # ... but the first character is the a-file, so reads in normal direction
            file = 0
            for character in fen_one_rank:
                if character.isalpha():
                    # simple case: a letter directly denotes the piece that should be created
                    position[Square(file, rank)] = Piece.from_fen(character)
                    file += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
        return position

    def position_to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(BOARD_DIMENSIONS[0]):
            piece = self.piece(Square(file, rank))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- QUERIES ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.position.get(square)

    def locate_pieces(
        self, piece_type: PieceType, color: Optional[Color] = None
    ) -> list[Square]:
        return [
            square
            for square, piece in self.position.items()
            if piece.type == piece_type and (color is None or piece.color == color)
        ]

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square for square, piece in self.position.items() if piece.color == color
        ]

    def king_square(self, color: Color) -> Optional[Square]:
        kings = self.locate_pieces(PieceType.KING, color)
        return kings[0] if kings else None

    def is_capture(self, move: Move) -> bool:
        """Promotions and en passant are tagged by their own kind, so look at the board to see if anything gets taken."""
        return move.kind == MoveKind.EN_PASSANT or self.piece(move.to_square) is not None

    def repetition_key(self) -> RepetitionKey:
        return (
            self.position_to_fen(),
            self.color_to_move,
            self.castling_rights,
            self.en_passant_square,
        )

    # --- SUCCESSOR BOARD ---
    def apply(self, move: Move) -> "Board":
        """
        The board after making the move. This board itself stays untouched.
        ---

        1. move the piece (for castling: move the rook as well; for en passant: remove the pawn that gets taken)
        2. substitute the promoted piece for the pawn
        3. revoke castling rights when the king or a rook leaves (or a rook gets captured on) its home square
        4. set the en passant square after a double pawn push, clear it otherwise
        5. update the move counters and hand the move over to the opponent
        """
        moving_piece = self.piece(move.from_square)
        if moving_piece is None:
            raise ValueError(f"No piece on {move.from_square} to move.")
        color = moving_piece.color

        position = dict(self.position)
        del position[move.from_square]
        captured_piece = position.pop(move.to_square, None)

        if move.kind == MoveKind.EN_PASSANT:
            # The pawn taken stands on the file of the en passant square, in the rank the moving pawn started from.
            captured_piece = position.pop(
                Square(move.to_square.file, move.from_square.rank), None
            )

        direction = castling_direction_of(move, color)
        if direction is not None:
            rule = CASTLING_RULES[direction]
            position[rule.rook_to] = position.pop(rule.rook_from)

        position[move.to_square] = (
            Piece(move.promote_to, color) if move.promote_to else moving_piece
        )

        en_passant_square = None
        if move.kind == MoveKind.DOUBLE_PAWN_PUSH:
            en_passant_square = Square(
                move.from_square.file, (move.from_square.rank + move.to_square.rank) // 2
            )

        resets_clock = moving_piece.type == PieceType.PAWN or captured_piece is not None
        return replace(
            self,
            position=position,
            color_to_move=color.opponent,
            castling_rights=revoked_rights(
                self.castling_rights, {move.from_square, move.to_square}
            ),
            en_passant_square=en_passant_square,
            half_move_clock=0 if resets_clock else self.half_move_clock + 1,
            full_move_number=self.full_move_number + (1 if color == Color.BLACK else 0),
        )
