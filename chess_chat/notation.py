"""Parsing of typed move text such as ``"E2 E4"`` into squares."""

from loguru import logger

from chess_chat.exceptions import ParseMoveError
from chess_chat.types import MoveRequest, Square

FILES = "ABCDEFGH"
RANKS = "12345678"


def parse_square(token: str) -> Square:
    """Parse one coordinate token into a square.

    The token is case-insensitive, may list file and rank in either order
    ("E2" or "2e"), and any character that is not a letter or digit is
    ignored.

    Args:
        token: Raw token as typed by the player.

    Returns:
        The square the token names.

    Raises:
        ParseMoveError: If the token does not reduce to one file letter A-H
            and one rank digit 1-8.
    """
    filtered = "".join(ch for ch in token.upper() if ch.isalnum())
    if len(filtered) != 2:
        raise ParseMoveError(f"Invalid square: '{token}'")

    letters = [ch for ch in filtered if ch in FILES]
    digits = [ch for ch in filtered if ch in RANKS]
    if len(letters) != 1 or len(digits) != 1:
        raise ParseMoveError(f"Invalid square: '{token}'")

    return Square(file=FILES.index(letters[0]), rank=RANKS.index(digits[0]))


def parse_move_text(text: str) -> MoveRequest:
    """Parse the argument of a move command into source and destination.

    Args:
        text: Remainder of the command, e.g. "E2 E4".

    Returns:
        Request holding both squares.

    Raises:
        ParseMoveError: If the text does not hold exactly two valid squares.
    """
    tokens = text.split()
    if len(tokens) != 2:
        raise ParseMoveError(f"Expected two squares, got {len(tokens)}: '{text}'")

    request = MoveRequest(source=parse_square(tokens[0]), destination=parse_square(tokens[1]))
    logger.debug(f"Parsed '{text}' as {request}")
    return request
