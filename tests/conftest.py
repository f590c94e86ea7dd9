"""Shared test fixtures and utilities for the test suite."""

import asyncio
from collections.abc import Sequence

import chess
import pytest

from chess_chat.game import ChessSessionService
from chess_chat.session_store import SessionStore
from chess_chat.transport import CONFIRMATION_OPTIONS, ChatTransport
from chess_chat.types import OriginId


# Common Board Positions
@pytest.fixture
def common_positions():
    """Dictionary of commonly used FEN positions for testing."""
    return {
        "castling": "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1",
        "black_castling": "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R b KQkq - 0 1",
        "white_promotion": "8/P6k/8/8/8/8/8/K7 w - - 0 1",
        "white_promotion_capture": "1r5k/P7/8/8/8/8/8/K7 w - - 0 1",
        "black_promotion": "k7/8/8/8/8/8/p7/7K b - - 0 1",
        "en_passant": "rnbqkb1r/ppp1pppp/5n2/3pP3/8/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 3",
        "scandinavian": "rnbqkbnr/ppp1pppp/8/3p4/4P3/8/PPPP1PPP/RNBQKBNR w KQkq - 0 2",
        "fools_mate": "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3",
        "black_in_check": "rnbqkbnr/ppppp1pp/5p2/7Q/4P3/8/PPPP1PPP/RNB1KBNR b KQkq - 1 2",
    }


# Helper Classes for Testing
class RecordingTransport(ChatTransport):
    """Transport that records replies and answers prompts from a script.

    With no scripted answers left, prompts never resolve, so the caller's
    deadline fires. With a gate, prompts wait until the test sets it.
    """

    def __init__(
        self,
        answers: Sequence[str | None] = (),
        gate: asyncio.Event | None = None,
    ) -> None:
        self.answers = list(answers)
        self.gate = gate
        self.sent: list[tuple[OriginId, str]] = []
        self.prompts: list[tuple[OriginId, str, str, tuple[str, ...]]] = []

    async def send(self, origin: OriginId, text: str) -> None:
        self.sent.append((origin, text))

    async def prompt(
        self,
        origin: OriginId,
        user: str,
        text: str,
        options: Sequence[str] = CONFIRMATION_OPTIONS,
    ) -> str | None:
        self.prompts.append((origin, user, text, tuple(options)))
        if self.gate is not None:
            await self.gate.wait()
        if not self.answers:
            await asyncio.Event().wait()
        return self.answers.pop(0)

    def messages_to(self, origin: OriginId) -> list[str]:
        return [text for sent_origin, text in self.sent if sent_origin == origin]

    @property
    def last_message(self) -> str:
        return self.sent[-1][1]


class FailingPromptTransport(RecordingTransport):
    """Transport whose prompts fail, like a channel the bot may not post in."""

    def __init__(self, error: Exception) -> None:
        super().__init__()
        self.error = error

    async def prompt(
        self,
        origin: OriginId,
        user: str,
        text: str,
        options: Sequence[str] = CONFIRMATION_OPTIONS,
    ) -> str | None:
        self.prompts.append((origin, user, text, tuple(options)))
        raise self.error


@pytest.fixture
def transport():
    """Transport with no scripted answers."""
    return RecordingTransport()


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def service(transport, store):
    """Service with a short confirmation timeout so timeouts stay fast."""
    return ChessSessionService(transport, store=store, confirmation_timeout=0.05)


# Assertion Helpers
async def wait_for_prompt(transport: RecordingTransport, count: int = 1) -> None:
    """Yield to the event loop until the transport has seen `count` prompts."""
    for _ in range(100):
        if len(transport.prompts) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"Expected {count} prompt(s), saw {len(transport.prompts)}")


def setup_session_from_fen(
    store: SessionStore, origin: OriginId, fen_string: str
) -> chess.Board:
    """Put a session whose board starts from the provided FEN.

    Args:
        store: Store to insert into.
        origin: Origin the session belongs to.
        fen_string: FEN string describing the desired position.

    Returns:
        chess.Board: The board stored in the session.
    """
    board = chess.Board(fen_string)
    store.put(origin, board)
    return board
