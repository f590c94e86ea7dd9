#!/usr/bin/env python3
"""Demo script to play a chess session on the terminal."""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from chess_chat.config import Settings, load_env
from chess_chat.game import ChessSessionService
from chess_chat.transport import ConsoleTransport

# Load environment variables
load_env()

ORIGIN = "console"
USER = "player"


async def dispatch(service: ChessSessionService, line: str) -> bool:
    """Route one typed line to a command.

    Args:
        service: Session service to call.
        line: Line such as "start" or "move E2 E4".

    Returns:
        False once the player asks to quit, True otherwise.
    """
    command, _, argument = line.strip().partition(" ")
    command = command.lower()

    if command in ("quit", "exit"):
        return False
    if command == "ping":
        print(service.ping())
    elif command in ("start", "startchess"):
        await service.start(ORIGIN, USER)
    elif command == "move":
        await service.move(ORIGIN, USER, argument)
    elif command:
        print("Commands: start, move <src> <dst>, ping, quit")
    return True


async def main() -> None:
    """Read commands from stdin until EOF or quit.

    Plays against yourself: both colours are moved from the same terminal.
    """
    settings = Settings.from_env()
    transport = ConsoleTransport()
    service = ChessSessionService.from_settings(transport, settings)
    waiting: set[asyncio.Task] = set()

    print("Commands: start, move <src> <dst>, ping, quit")
    while True:
        # The only stdin reader; prompt answers are fed through it too
        line = await asyncio.to_thread(sys.stdin.readline)
        if not line:
            break
        if transport.feed(line):
            continue

        command = asyncio.create_task(dispatch(service, line))
        prompted = asyncio.create_task(transport.prompting.wait())
        await asyncio.wait({command, prompted}, return_when=asyncio.FIRST_COMPLETED)
        prompted.cancel()
        if not command.done():
            # Parked on a prompt; the next line typed answers it
            waiting.add(command)
            command.add_done_callback(waiting.discard)
        elif not command.result():
            break

    # Unanswered prompts run out their deadline before exit
    await asyncio.gather(*waiting)
    print(f"Games running at exit: {len(service.store)}")


if __name__ == "__main__":
    asyncio.run(main())
