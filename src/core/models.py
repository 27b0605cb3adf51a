"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field


@dataclass
class GameModel:
    """
    Transport-safe snapshot of a chess game used between API, Service, DB, and Game layers.

    The moves are replayed from `initial_fen` to rebuild the history; `redo_uci` holds the undone moves,
    the first one being the move a redo would play next. `current_fen` and `status` are stored as well,
    so a consumer can show the position without replaying anything (and so a corrupted record can be detected).
    """

    initial_fen: str
    current_fen: str
    moves_uci: list[str] = field(default_factory=list)
    redo_uci: list[str] = field(default_factory=list)
    status: str = "in progress"
