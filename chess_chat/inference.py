"""Work out what kind of move two squares describe on a given board.

Players only type a source and a destination. Whether that is a castle, a
promotion, an en passant capture or a plain push has to be read off the board
before the rules engine can be asked about it. The checks run in a fixed
order and the first one that matches decides the flag: a pawn reaching the
last rank onto an occupied square is a capturing promotion, not a capture.
"""

import chess
from loguru import logger

from chess_chat.exceptions import OwnershipError
from chess_chat.types import MoveDescriptor, MoveFlag, MoveRequest

# Rank index a pawn promotes from, and onto, per colour.
PROMOTION_RANKS = {chess.WHITE: (6, 7), chess.BLACK: (1, 0)}


def infer_move(board: chess.Board, request: MoveRequest) -> MoveDescriptor:
    """Build the move descriptor for a request on the current board.

    Args:
        board: Position the move is played in. Not modified.
        request: Source and destination squares.

    Returns:
        Descriptor carrying the inferred flag.

    Raises:
        OwnershipError: If the source square is empty or holds a piece of the
            side not to move.
    """
    piece = board.piece_at(request.source.index)
    if piece is None:
        raise OwnershipError(f"No piece on {request.source}")
    if piece.color != board.turn:
        raise OwnershipError(
            f"Piece on {request.source} belongs to the side not to move"
        )

    destination_occupied = board.piece_at(request.destination.index) is not None
    fields = {"source": request.source, "destination": request.destination}

    if piece.piece_type == chess.KING and request.distance > 1:
        descriptor = MoveDescriptor(
            **fields,
            flag=MoveFlag.CASTLE,
            king_side=request.destination.file > 4,
        )
    elif piece.piece_type == chess.PAWN and _is_promotion(piece.color, request):
        descriptor = MoveDescriptor(
            **fields,
            flag=MoveFlag.PROMOTION,
            capture=destination_occupied,
            promoted_to="queen",
        )
    elif (
        piece.piece_type == chess.PAWN
        and request.rank_distance > 1
        and request.file_distance == 0
    ):
        descriptor = MoveDescriptor(**fields, flag=MoveFlag.DOUBLE_PAWN_PUSH)
    elif (
        piece.piece_type == chess.PAWN
        and request.file_distance > 0
        and not destination_occupied
    ):
        descriptor = MoveDescriptor(**fields, flag=MoveFlag.EN_PASSANT)
    elif destination_occupied:
        descriptor = MoveDescriptor(**fields, flag=MoveFlag.CAPTURE)
    else:
        descriptor = MoveDescriptor(**fields, flag=MoveFlag.QUIET)

    logger.debug(f"Inferred {descriptor}")
    return descriptor


def _is_promotion(color: chess.Color, request: MoveRequest) -> bool:
    from_rank, to_rank = PROMOTION_RANKS[color]
    return request.source.rank == from_rank and request.destination.rank == to_rank
