"""Requests and Response models exchanged with the presentation layer"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.chess.square import is_valid_algebraic
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, PieceType, Status


def _validate_square_name(value: str) -> str:
    if len(value) != 2 or not is_valid_algebraic(value):
        raise InvalidRequestError(f"Cannot interpret {value!r} as a valid square name.")
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    starting_fen: Optional[str] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        """Only a structural check. The FEN parser reports what exactly is wrong with a malformed FEN."""
        if value is None:
            return value

        parts = value.strip().split(" ")
        if len(parts) != 6:
            raise InvalidRequestError(
                "FEN string must contain 6 space-separated parts."
            )
        return value.strip()


class GetGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


class UndoRequest(BaseModel):
    game_id: UUID


class RedoRequest(BaseModel):
    game_id: UUID


class ExportPGNRequest(BaseModel):
    game_id: UUID
    headers: dict[str, str] = {}


class LegalMovesRequest(BaseModel):
    """Leave out `from_square` to get all legal moves, or pick a square to get the hints for one piece."""

    game_id: UUID
    from_square: Optional[str] = None

    @field_validator("from_square")
    @classmethod
    def validate_square(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _validate_square_name(value)


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    fen_state: str
    starting_state: str
    status: Status
    move_history: list[str]
    can_undo: bool
    can_redo: bool
    winner: Optional[Color] = None


class LegalMovesResponse(BaseModel):
    game_id: UUID
    color: Color
    legal_moves: list[str]


class PGNResponse(BaseModel):
    game_id: UUID
    pgn: str
