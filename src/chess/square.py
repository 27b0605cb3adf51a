"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase
from typing import Optional

# Chess board is always 8x8. Files and ranks are zero-based: a1 is (0, 0), h8 is (7, 7)
BOARD_DIMENSIONS = (8, 8)
FILE_NAMES = ascii_lowercase[: BOARD_DIMENSIONS[0]]


def is_on_board(file: int, rank: int) -> bool:
    return (0 <= file < BOARD_DIMENSIONS[0]) and (0 <= rank < BOARD_DIMENSIONS[1])


@dataclass(frozen=True)
class Square:
    file: int
    rank: int

    def __post_init__(self) -> None:
        # An off-board square is never a valid value. Use `offset()` to probe neighbours safely.
        if not is_on_board(self.file, self.rank):
            raise ValueError(
                f"Square ({self.file}, {self.rank}) lies outside the {BOARD_DIMENSIONS} board."
            )

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        if not is_valid_algebraic(sq):
            raise ValueError(f"Cannot interpret {sq!r} as a square name.")
        file = FILE_NAMES.index(sq[0])
        rank = int(sq[1:]) - 1
        return cls(file, rank)

    def to_algebraic(self) -> str:
        return f"{FILE_NAMES[self.file]}{self.rank + 1}"

    def offset(self, df: int, dr: int) -> Optional[Square]:
        """The square reached by stepping (df, dr) from here, or None when that step leaves the board."""
        file = self.file + df
        rank = self.rank + dr
        if not is_on_board(file, rank):
            return None
        return Square(file, rank)

    def is_light(self) -> bool:
        """a1 is a dark square"""
        return (self.file + self.rank) % 2 == 1

    def __str__(self) -> str:
        return self.to_algebraic()


def is_valid_algebraic(sq: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    if len(sq) < 2:
        return False
    file_char, rank_chars = sq[0], sq[1:]
    if file_char not in FILE_NAMES:
        return False
    if not (rank_chars.isascii() and rank_chars.isdigit()):
        return False
    return 1 <= int(rank_chars) <= BOARD_DIMENSIONS[1]


ALL_SQUARES: tuple[Square, ...] = tuple(
    Square(file, rank)
    for rank in range(BOARD_DIMENSIONS[1])
    for file in range(BOARD_DIMENSIONS[0])
)


# --- GEOMETRY SHARED BY MOVEMENT AND ATTACK RULES ---
Vector = tuple[int, int]

DIAGONALS: tuple[Vector, ...] = ((1, 1), (-1, 1), (1, -1), (-1, -1))
STRAIGHTS: tuple[Vector, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
# Knights always move such that |delta_rank| + |delta_file| = 3
KNIGHT_DELTAS: tuple[Vector, ...] = (
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
)
KING_DELTAS: tuple[Vector, ...] = STRAIGHTS + DIAGONALS
