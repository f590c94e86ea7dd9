"""Fixed-width text rendering of chess boards for chat messages.

Chat clients show code blocks in a monospaced font, so the board is drawn as
plain text with one character per square and wrapped in a fenced block.
"""

import chess

# Unicode chess pieces, used when the chat font renders them at fixed width
PIECE_SYMBOLS: dict[str, str] = {
    "K": "♔",  # White King
    "Q": "♕",  # White Queen
    "R": "♖",  # White Rook
    "B": "♗",  # White Bishop
    "N": "♘",  # White Knight
    "P": "♙",  # White Pawn
    "k": "♚",  # Black King
    "q": "♛",  # Black Queen
    "r": "♜",  # Black Rook
    "b": "♝",  # Black Bishop
    "n": "♞",  # Black Knight
    "p": "♟",  # Black Pawn
}

EMPTY_SQUARE = "."
FILE_LABELS = "abcdefgh"


def get_piece_display(piece: chess.Piece | None, unicode: bool = False) -> str:
    """Get the character drawn for a square's content.

    Args:
        piece: Chess piece or None for empty square.
        unicode: Whether to use Unicode glyphs instead of letters.

    Returns:
        Single character for the square.
    """
    if piece is None:
        return EMPTY_SQUARE
    if unicode:
        return PIECE_SYMBOLS.get(piece.symbol(), piece.symbol())
    return piece.symbol()


def render_board(board: chess.Board, unicode: bool = False) -> str:
    """Draw the board from white's side with file and rank labels.

    Args:
        board: Chess board to draw.
        unicode: Whether to use Unicode glyphs instead of letters.

    Returns:
        Multi-line diagram; identical boards give identical text.
    """
    file_header = "   " + " ".join(FILE_LABELS)
    lines = [file_header]

    for rank in range(7, -1, -1):
        row = " ".join(
            get_piece_display(board.piece_at(chess.square(file, rank)), unicode)
            for file in range(8)
        )
        lines.append(f"{rank + 1}  {row}  {rank + 1}")

    lines.append(file_header)
    return "\n".join(lines)


def render_status(board: chess.Board) -> str:
    """Describe whose turn it is, or how the game ended.

    Args:
        board: Current chess board.

    Returns:
        One-line status.
    """
    outcome = board.outcome()
    if outcome is not None:
        return f"Game over: {outcome.result()} ({outcome.termination.name.lower()})"

    turn_name = "White" if board.turn == chess.WHITE else "Black"
    if board.is_check():
        return f"{turn_name} to move, check"
    return f"{turn_name} to move"


def format_board_message(board: chess.Board, unicode: bool = False) -> str:
    """Wrap the diagram and status in a monospaced block for chat.

    Args:
        board: Chess board to show.
        unicode: Whether to use Unicode glyphs instead of letters.

    Returns:
        Message body ready to send.
    """
    return f"```\n{render_board(board, unicode)}\n\n{render_status(board)}\n```"
