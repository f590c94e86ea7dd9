import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence

from loguru import logger

from chess_chat.types import OriginId

APPROVE = "✅"
REJECT = "❌"
CONFIRMATION_OPTIONS = (APPROVE, REJECT)


class ChatTransport(ABC):
    """Abstract base class for the chat platform a game is played over."""

    @abstractmethod
    async def send(self, origin: OriginId, text: str) -> None:
        """Deliver a message to the origin.

        Args:
            origin: Where the reply goes.
            text: Message body.
        """
        pass

    @abstractmethod
    async def prompt(
        self,
        origin: OriginId,
        user: str,
        text: str,
        options: Sequence[str] = CONFIRMATION_OPTIONS,
    ) -> str | None:
        """Post a question and wait for one user's answer.

        Implementations may wait indefinitely; the caller enforces the
        deadline by cancelling the wait.

        Args:
            origin: Where the question is posted.
            user: Only user whose answer counts.
            text: Question body.
            options: Answers offered to the user.

        Returns:
            The chosen option, or None if the user gave no usable answer.
        """
        pass


class ConsoleTransport(ChatTransport):
    """Transport over stdout for playing without a chat platform.

    The transport never reads stdin itself. Whoever owns the input loop
    hands each typed line to `feed`, which answers a waiting prompt.
    """

    def __init__(self) -> None:
        self.prompting = asyncio.Event()
        self._answers: asyncio.Queue[str] = asyncio.Queue()

    async def send(self, origin: OriginId, text: str) -> None:
        print(f"[{origin}] {text}")

    async def prompt(
        self,
        origin: OriginId,
        user: str,
        text: str,
        options: Sequence[str] = CONFIRMATION_OPTIONS,
    ) -> str | None:
        # y/n stand in for the reaction options on a terminal
        print(f"[{origin}] {text} [y/n] ", end="", flush=True)
        self.prompting.set()
        try:
            answer = await self._answers.get()
        finally:
            self.prompting.clear()
            # A line fed as the deadline fired belongs to no prompt
            while not self._answers.empty():
                self._answers.get_nowait()
        logger.debug(f"{user} answered '{answer}'")
        return options[0] if answer.strip().lower() in ("y", "yes") else options[-1]

    def feed(self, line: str) -> bool:
        """Hand a typed line to the waiting prompt.

        Returns:
            True if a prompt took the line, False if none was waiting.
        """
        if not self.prompting.is_set():
            return False
        self._answers.put_nowait(line)
        return True
