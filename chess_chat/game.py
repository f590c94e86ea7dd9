import chess
from loguru import logger

from chess_chat.board_display import format_board_message
from chess_chat.confirmation import DEFAULT_TIMEOUT_SECONDS, ConfirmationFlow
from chess_chat.config import Settings
from chess_chat.exceptions import (
    ConfirmationAbortedError,
    ConfirmationPendingError,
    MoveError,
    NoActiveSessionError,
)
from chess_chat.gateway import play_move
from chess_chat.notation import parse_move_text
from chess_chat.session_store import SessionStore
from chess_chat.transport import ChatTransport
from chess_chat.types import ConfirmationState, MoveDescriptor, OriginId, Session

PONG = "Pong!"
INVALID_MOVE = "Invalid move"
ABORTED = "Aborted"
NO_GAME = "You don't currently have a game running"
STARTING = "Starting a new game..."
CONFIRMATION_PENDING = "A confirmation is already pending for this game"


class ChessSessionService:
    """Handles the start and move commands for every origin.

    Failures are reported back to the origin that caused them and never leave
    a session half-updated.
    """

    def __init__(
        self,
        transport: ChatTransport,
        store: SessionStore | None = None,
        confirmation_timeout: float = DEFAULT_TIMEOUT_SECONDS,
        unicode_pieces: bool = False,
    ) -> None:
        """Initialize the service.

        Args:
            transport: Chat platform replies go through.
            store: Session store to use. A fresh empty one by default.
            confirmation_timeout: Seconds to wait for an overwrite answer.
            unicode_pieces: Whether boards are drawn with Unicode glyphs.
        """
        self.transport = transport
        self.store = store if store is not None else SessionStore()
        self.confirmation_timeout = confirmation_timeout
        self.unicode_pieces = unicode_pieces

    @classmethod
    def from_settings(
        cls, transport: ChatTransport, settings: Settings
    ) -> "ChessSessionService":
        return cls(
            transport,
            confirmation_timeout=settings.confirmation_timeout,
            unicode_pieces=settings.unicode_pieces,
        )

    def ping(self) -> str:
        return PONG

    async def start(self, origin: OriginId, user: str) -> Session | None:
        """Start a new game, asking first if one is already running.

        Args:
            origin: Origin the game belongs to.
            user: User who asked; the only one who may confirm an overwrite.

        Returns:
            The new session, or None if the start was refused or aborted.
        """
        async with self.store.lock(origin):
            existing = self.store.get(origin)

        # The answer is awaited without holding the origin's lock
        if existing is not None:
            try:
                await self._confirm_overwrite(origin, user)
            except ConfirmationPendingError as e:
                logger.warning(f"Start refused for {origin}: {e}")
                await self.transport.send(origin, CONFIRMATION_PENDING)
                return None
            except ConfirmationAbortedError as e:
                logger.info(f"Start aborted for {origin}: {e}")
                await self.transport.send(origin, ABORTED)
                return None

        async with self.store.lock(origin):
            self.store.remove(origin)
            session = self.store.put(origin, chess.Board())
        logger.info(f"Started new game for {origin} (requested by {user})")

        await self.transport.send(origin, STARTING)
        await self.transport.send(origin, self._board_message(session.board))
        return session

    async def move(
        self, origin: OriginId, user: str, text: str
    ) -> MoveDescriptor | None:
        """Play a typed move in the origin's game.

        Args:
            origin: Origin whose game the move belongs to.
            user: User who typed the move.
            text: Move text, e.g. "E2 E4".

        Returns:
            The applied move, or None if it was rejected.

        Raises:
            Exception: Anything other than a move or session error is logged
                and propagated.
        """
        descriptor = None
        try:
            async with self.store.lock(origin):
                session = self.store.get(origin)
                if session is None:
                    raise NoActiveSessionError(f"No game running for {origin}")

                request = parse_move_text(text)
                descriptor, board = play_move(session.board, request)
                session = self.store.put(origin, board)
        except NoActiveSessionError as e:
            logger.warning(f"Move by {user} rejected: {e}")
            reply = NO_GAME
        except MoveError as e:
            logger.warning(f"Move '{text}' by {user} in {origin} rejected: {e}")
            reply = INVALID_MOVE
        except Exception as e:
            logger.exception(f"Unexpected error handling move '{text}' by {user}: {e}")
            raise
        else:
            logger.info(f"{user} played {descriptor} in {origin}")
            reply = self._board_message(session.board)

        await self.transport.send(origin, reply)
        return descriptor

    async def _confirm_overwrite(self, origin: OriginId, user: str) -> None:
        """Ask the user whether the running game may be discarded.

        Raises:
            ConfirmationPendingError: If another confirmation is open for
                the origin.
            ConfirmationAbortedError: If the user rejected or did not answer.
        """
        self.store.begin_confirmation(origin, user, self.confirmation_timeout)
        try:
            flow = ConfirmationFlow(
                self.transport, origin, user, timeout=self.confirmation_timeout
            )
            state = await flow.run()
        finally:
            self.store.end_confirmation(origin)

        if state is not ConfirmationState.APPROVED:
            raise ConfirmationAbortedError(
                f"Overwrite not approved: {state.value}", state=state
            )
        logger.info(f"{user} approved replacing the game in {origin}")

    def _board_message(self, board: chess.Board) -> str:
        return format_board_message(board, unicode=self.unicode_pieces)
