"""In-memory store of running games, one per origin.

Each origin gets its own ``asyncio.Lock``. A command that reads a session,
works on it and writes it back holds only that origin's lock, so a player
thinking over a confirmation prompt never blocks anyone else. There is no
store-wide lock; dictionary access is atomic within the event loop.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import chess
from loguru import logger

from chess_chat.exceptions import ConfirmationPendingError
from chess_chat.types import OriginId, PendingConfirmation, Session


class SessionStore:
    """Mapping from origin to its current game."""

    def __init__(self) -> None:
        self._sessions: dict[OriginId, Session] = {}
        self._locks: dict[OriginId, asyncio.Lock] = {}
        self._lock_users: dict[OriginId, int] = {}
        self._pending: dict[OriginId, PendingConfirmation] = {}

    def get(self, origin: OriginId) -> Session | None:
        return self._sessions.get(origin)

    def put(self, origin: OriginId, board: chess.Board) -> Session:
        """Insert or replace the origin's session.

        Args:
            origin: Owner of the game.
            board: Board the session will hold.

        Returns:
            The stored session.
        """
        session = Session(origin=origin, board=board)
        self._sessions[origin] = session
        return session

    def remove(self, origin: OriginId) -> Session | None:
        session = self._sessions.pop(origin, None)
        if session is not None:
            logger.info(f"Removed game for {origin}")
        return session

    def __contains__(self, origin: object) -> bool:
        return origin in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    @asynccontextmanager
    async def lock(self, origin: OriginId) -> AsyncIterator[None]:
        """Hold the origin's lock for a read-modify-write sequence.

        The lock is dropped once no task holds or waits for it, so only
        origins with a command in flight keep one.
        """
        lock = self._locks.setdefault(origin, asyncio.Lock())
        self._lock_users[origin] = self._lock_users.get(origin, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[origin] -= 1
            if not self._lock_users[origin]:
                del self._lock_users[origin]
                del self._locks[origin]

    def pending(self, origin: OriginId) -> PendingConfirmation | None:
        return self._pending.get(origin)

    def begin_confirmation(
        self, origin: OriginId, requesting_user: str, timeout: float
    ) -> PendingConfirmation:
        """Register an overwrite prompt for an origin.

        Args:
            origin: Origin whose game would be overwritten.
            requesting_user: Only user allowed to answer.
            timeout: Seconds until the prompt expires.

        Returns:
            The registered confirmation.

        Raises:
            ConfirmationPendingError: If the origin already has one.
        """
        if origin in self._pending:
            raise ConfirmationPendingError(
                f"Confirmation already pending for {origin}"
            )
        loop = asyncio.get_running_loop()
        pending = PendingConfirmation(
            origin=origin,
            requesting_user=requesting_user,
            deadline=loop.time() + timeout,
        )
        self._pending[origin] = pending
        return pending

    def end_confirmation(self, origin: OriginId) -> None:
        self._pending.pop(origin, None)
