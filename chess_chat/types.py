from enum import Enum
from typing import Literal

import chess
from typing_extensions import Self
from pydantic import BaseModel, ConfigDict, Field, model_validator

OriginId = str
PieceKind = Literal["pawn", "knight", "bishop", "rook", "queen", "king"]
SessionScope = Literal["user", "channel"]


class Square(BaseModel):
    """Board position as 0-indexed file (A-H) and rank (1-8)."""

    file: int = Field(ge=0, le=7)
    rank: int = Field(ge=0, le=7)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_index(cls, square: chess.Square) -> "Square":
        """Build from a python-chess square index (0 = a1, 63 = h8)."""
        return cls(file=chess.square_file(square), rank=chess.square_rank(square))

    @property
    def index(self) -> chess.Square:
        return chess.square(self.file, self.rank)

    def __str__(self) -> str:
        return chess.square_name(self.index)


class MoveRequest(BaseModel):
    """Two squares typed by a player, before any board is consulted."""

    source: Square
    destination: Square

    model_config = ConfigDict(frozen=True)

    @property
    def file_distance(self) -> int:
        return abs(self.destination.file - self.source.file)

    @property
    def rank_distance(self) -> int:
        return abs(self.destination.rank - self.source.rank)

    @property
    def distance(self) -> int:
        """Chebyshev distance between the two squares."""
        return max(self.file_distance, self.rank_distance)

    def __str__(self) -> str:
        return f"{self.source}{self.destination}"


class MoveFlag(str, Enum):
    """Semantic category of a move."""

    QUIET = "quiet"
    CAPTURE = "capture"
    EN_PASSANT = "en_passant"
    DOUBLE_PAWN_PUSH = "double_pawn_push"
    CASTLE = "castle"
    PROMOTION = "promotion"


class MoveDescriptor(BaseModel):
    """Fully specified move handed to the rules engine.

    `king_side` is only meaningful for castles; `capture` and `promoted_to`
    only for promotions. Everything else leaves them as None.
    """

    source: Square
    destination: Square
    flag: MoveFlag
    king_side: bool | None = None
    capture: bool | None = None
    promoted_to: PieceKind | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_flag_payload(self) -> Self:
        """Ensure flag-specific fields are present exactly when the flag needs them.

        Returns:
            Validated instance.

        Raises:
            ValueError: If a payload field is missing or set for the wrong flag.
        """
        is_castle = self.flag is MoveFlag.CASTLE
        is_promotion = self.flag is MoveFlag.PROMOTION

        if is_castle != (self.king_side is not None):
            raise ValueError("`king_side` is required for castles and only for castles")
        if is_promotion != (self.capture is not None):
            raise ValueError(
                "`capture` is required for promotions and only for promotions"
            )
        if is_promotion != (self.promoted_to is not None):
            raise ValueError(
                "`promoted_to` is required for promotions and only for promotions"
            )
        return self

    def to_chess_move(self) -> chess.Move:
        """Convert to the python-chess move this descriptor stands for."""
        promotion = None
        if self.promoted_to is not None:
            promotion = chess.PIECE_NAMES.index(self.promoted_to)
        return chess.Move(self.source.index, self.destination.index, promotion=promotion)

    def __str__(self) -> str:
        return f"{self.source}{self.destination} ({self.flag.value})"


class Session(BaseModel):
    """The one game an origin owns. Replaced wholesale, never edited in place."""

    origin: OriginId
    board: chess.Board = Field(default_factory=chess.Board)

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class PendingConfirmation(BaseModel):
    """An overwrite prompt that has been posted and not yet resolved."""

    origin: OriginId
    requesting_user: str
    deadline: float

    model_config = ConfigDict(frozen=True)


class ConfirmationState(str, Enum):
    IDLE = "idle"
    PROMPT_SENT = "prompt_sent"
    APPROVED = "approved"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (
            ConfirmationState.APPROVED,
            ConfirmationState.REJECTED,
            ConfirmationState.TIMED_OUT,
        )
