import asyncio

from loguru import logger

from chess_chat.transport import APPROVE, CONFIRMATION_OPTIONS, ChatTransport
from chess_chat.types import ConfirmationState, OriginId

OVERWRITE_PROMPT = "Previous game found, delete and add new game?"
DEFAULT_TIMEOUT_SECONDS = 15.0


class ConfirmationFlow:
    """One-shot yes/no prompt guarding the overwrite of a running game.

    Goes Idle -> PromptSent -> Approved | Rejected | TimedOut. Only the
    approve option approves; any other answer rejects, and no answer before
    the deadline times out. An instance resolves exactly once.
    """

    def __init__(
        self,
        transport: ChatTransport,
        origin: OriginId,
        requesting_user: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        text: str = OVERWRITE_PROMPT,
    ) -> None:
        """Prepare a confirmation without posting anything yet.

        Args:
            transport: Chat platform to prompt through.
            origin: Origin the prompt is posted to.
            requesting_user: Only user whose answer counts.
            timeout: Seconds to wait for an answer.
            text: Question shown to the user.
        """
        if timeout <= 0:
            raise ValueError(f"Confirmation timeout must be positive: {timeout}")

        self.transport = transport
        self.origin = origin
        self.requesting_user = requesting_user
        self.timeout = timeout
        self.text = text
        self.state = ConfirmationState.IDLE

    async def run(self) -> ConfirmationState:
        """Post the prompt and wait for it to resolve.

        Returns:
            The terminal state reached.

        Raises:
            RuntimeError: If the flow has already been run.
        """
        if self.state is not ConfirmationState.IDLE:
            raise RuntimeError(f"Confirmation already run, state: {self.state.value}")

        self._transition(ConfirmationState.PROMPT_SENT)
        try:
            answer = await asyncio.wait_for(
                self.transport.prompt(
                    self.origin,
                    self.requesting_user,
                    self.text,
                    CONFIRMATION_OPTIONS,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            self._transition(ConfirmationState.TIMED_OUT)
            return self.state
        except Exception as e:
            # A prompt that could not be posted counts as a refusal
            logger.exception(f"Confirmation prompt for {self.origin} failed: {e}")
            self._transition(ConfirmationState.REJECTED)
            return self.state

        if answer == APPROVE:
            self._transition(ConfirmationState.APPROVED)
        else:
            self._transition(ConfirmationState.REJECTED)
        return self.state

    def _transition(self, state: ConfirmationState) -> None:
        logger.debug(
            f"Confirmation for {self.origin} by {self.requesting_user}: "
            f"{self.state.value} -> {state.value}"
        )
        self.state = state
