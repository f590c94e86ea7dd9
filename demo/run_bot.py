#!/usr/bin/env python3
"""Demo script to serve chess sessions on Discord.

Requires DISCORD_TOKEN in the environment or a .env file.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from chess_chat.bot import run_bot
from chess_chat.config import Settings, load_env

# Load environment variables
load_env()


def main() -> None:
    """Run the bot with settings taken from the environment."""
    run_bot(Settings.from_env())


if __name__ == "__main__":
    main()
