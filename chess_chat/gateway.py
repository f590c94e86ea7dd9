import chess
from loguru import logger

from chess_chat.exceptions import IllegalMoveError
from chess_chat.inference import infer_move
from chess_chat.types import MoveDescriptor, MoveFlag, MoveRequest, Square


def describe_move(board: chess.Board, move: chess.Move) -> MoveDescriptor | None:
    """Describe a python-chess move using the engine's own classification.

    Args:
        board: Position the move is played in.
        move: Pseudo-legal or legal move in that position.

    Returns:
        The matching descriptor, or None for underpromotions, which players
        cannot request.
    """
    fields = {
        "source": Square.from_index(move.from_square),
        "destination": Square.from_index(move.to_square),
    }

    if move.promotion is not None:
        if move.promotion != chess.QUEEN:
            return None
        return MoveDescriptor(
            **fields,
            flag=MoveFlag.PROMOTION,
            capture=board.is_capture(move),
            promoted_to="queen",
        )
    if board.is_castling(move):
        return MoveDescriptor(
            **fields,
            flag=MoveFlag.CASTLE,
            king_side=board.is_kingside_castling(move),
        )
    if board.is_en_passant(move):
        return MoveDescriptor(**fields, flag=MoveFlag.EN_PASSANT)
    if board.is_capture(move):
        return MoveDescriptor(**fields, flag=MoveFlag.CAPTURE)
    if (
        board.piece_type_at(move.from_square) == chess.PAWN
        and chess.square_distance(move.from_square, move.to_square) == 2
    ):
        return MoveDescriptor(**fields, flag=MoveFlag.DOUBLE_PAWN_PUSH)
    return MoveDescriptor(**fields, flag=MoveFlag.QUIET)


def legal_descriptors(board: chess.Board) -> set[MoveDescriptor]:
    """Get every move a player can request in the current position.

    Args:
        board: Current board state.

    Returns:
        Descriptors for all legal moves, queen promotions only.
    """
    descriptors = (describe_move(board, move) for move in board.legal_moves)
    return {descriptor for descriptor in descriptors if descriptor is not None}


def is_legal(board: chess.Board, descriptor: MoveDescriptor) -> bool:
    return descriptor in legal_descriptors(board)


def apply_move(board: chess.Board, descriptor: MoveDescriptor) -> chess.Board:
    """Apply a proposed move to a copy of the board.

    Args:
        board: Position before the move. Never modified.
        descriptor: Proposed move.

    Returns:
        New board with the move played.

    Raises:
        IllegalMoveError: If the descriptor is not among the legal moves.
    """
    if not is_legal(board, descriptor):
        raise IllegalMoveError(f"Illegal move in current position: {descriptor}")

    # Copy keeps the session's board untouched until the caller swaps it in
    new_board = board.copy()
    new_board.push(descriptor.to_chess_move())
    logger.debug(f"Applied {descriptor}, new position: {new_board.fen()}")
    return new_board


def play_move(
    board: chess.Board, request: MoveRequest
) -> tuple[MoveDescriptor, chess.Board]:
    """Infer, check and apply a requested move.

    Args:
        board: Position before the move. Never modified.
        request: Parsed source and destination.

    Returns:
        The inferred descriptor and the board after the move.

    Raises:
        OwnershipError: If the source square does not hold a piece of the
            side to move.
        IllegalMoveError: If the inferred move is not legal.
    """
    descriptor = infer_move(board, request)
    return descriptor, apply_move(board, descriptor)
