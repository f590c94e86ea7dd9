from chess_chat.types import ConfirmationState


class MoveError(ValueError):
    """Base exception for all move-related errors."""

    pass


class ParseMoveError(MoveError):
    """Move text could not be split into two valid squares (e.g., 'ZZ 99')."""

    pass


class InvalidMoveError(MoveError):
    """Move text was understood but the move was rejected."""

    pass


class OwnershipError(InvalidMoveError):
    """Source square is empty or holds a piece of the side not to move."""

    pass


class IllegalMoveError(InvalidMoveError):
    """Move is well-formed but not in the rules engine's legal-move set."""

    pass


class SessionError(Exception):
    """Base exception for game session lifecycle errors."""

    pass


class NoActiveSessionError(SessionError):
    """A move was requested for an origin without a running game."""

    pass


class ConfirmationPendingError(SessionError):
    """An overwrite confirmation is already awaiting an answer for this origin."""

    pass


class ConfirmationAbortedError(SessionError):
    """Overwrite confirmation was rejected or timed out."""

    def __init__(self, message: str, state: ConfirmationState | None = None) -> None:
        super().__init__(message)
        self.state = state
