"""Unit tests exercising the session service command handlers."""

import chess
import pytest

from chess_chat.board_display import format_board_message, render_board
from chess_chat.config import Settings
from chess_chat.game import (
    ABORTED,
    INVALID_MOVE,
    NO_GAME,
    PONG,
    STARTING,
    ChessSessionService,
)
from chess_chat.transport import APPROVE, REJECT
from chess_chat.types import MoveFlag
from tests.conftest import (
    FailingPromptTransport,
    RecordingTransport,
    setup_session_from_fen,
)

ORIGIN = "user:1"
USER = "1"


class TestStart:
    """Creating games."""

    @pytest.mark.asyncio
    async def test_start__on_fresh_origin__creates_game_without_prompt(
        self, service, transport, store
    ):
        session = await service.start(ORIGIN, USER)

        assert session is store.get(ORIGIN)
        assert session.board == chess.Board()
        assert transport.prompts == []
        assert transport.messages_to(ORIGIN) == [
            STARTING,
            format_board_message(chess.Board()),
        ]

    @pytest.mark.asyncio
    async def test_start__on_existing_game__approved__replaces_game(self, store):
        transport = RecordingTransport(answers=[APPROVE])
        service = ChessSessionService(transport, store=store)
        setup_session_from_fen(store, ORIGIN, chess.Board().fen())
        await service.move(ORIGIN, USER, "E2 E4")

        session = await service.start(ORIGIN, USER)

        assert session is store.get(ORIGIN)
        assert session.board == chess.Board()
        assert len(transport.prompts) == 1
        assert transport.messages_to(ORIGIN)[-2] == STARTING

    @pytest.mark.asyncio
    async def test_start__on_existing_game__rejected__keeps_game(self, store):
        transport = RecordingTransport(answers=[REJECT])
        service = ChessSessionService(transport, store=store)
        board = setup_session_from_fen(store, ORIGIN, chess.Board().fen())
        original = store.get(ORIGIN)

        assert await service.start(ORIGIN, USER) is None

        assert store.get(ORIGIN) is original
        assert store.get(ORIGIN).board is board
        assert transport.last_message == ABORTED
        assert store.pending(ORIGIN) is None

    @pytest.mark.asyncio
    async def test_start__on_existing_game__timeout__keeps_game(
        self, service, transport, store
    ):
        setup_session_from_fen(store, ORIGIN, chess.Board().fen())
        original = store.get(ORIGIN)

        assert await service.start(ORIGIN, USER) is None

        assert store.get(ORIGIN) is original
        assert transport.last_message == ABORTED
        assert STARTING not in transport.messages_to(ORIGIN)

    @pytest.mark.asyncio
    async def test_start__on_existing_game__prompt_fails__aborts(self, store):
        transport = FailingPromptTransport(RuntimeError("403 Forbidden"))
        service = ChessSessionService(transport, store=store)
        setup_session_from_fen(store, ORIGIN, chess.Board().fen())
        original = store.get(ORIGIN)

        assert await service.start(ORIGIN, USER) is None

        assert store.get(ORIGIN) is original
        assert transport.messages_to(ORIGIN) == [ABORTED]
        assert store.pending(ORIGIN) is None

    @pytest.mark.asyncio
    async def test_start__does_not_touch_other_origins(self, service, store):
        setup_session_from_fen(store, "user:2", chess.Board().fen())
        other = store.get("user:2")

        await service.start(ORIGIN, USER)

        assert store.get("user:2") is other
        assert len(store) == 2


class TestMove:
    """Playing moves."""

    @pytest.mark.asyncio
    async def test_move__without_game__reports_no_game(self, service, transport, store):
        assert await service.move(ORIGIN, USER, "E2 E4") is None

        assert transport.last_message == NO_GAME
        assert ORIGIN not in store

    @pytest.mark.asyncio
    async def test_move__double_push__updates_board(self, service, transport, store):
        await service.start(ORIGIN, USER)

        descriptor = await service.move(ORIGIN, USER, "E2 E4")

        assert descriptor.flag is MoveFlag.DOUBLE_PAWN_PUSH
        board = store.get(ORIGIN).board
        assert board.piece_at(chess.E4) == chess.Piece(chess.PAWN, chess.WHITE)
        assert transport.last_message == format_board_message(board)
        assert "Black to move" in transport.last_message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "text",
        [
            "ZZ 99",  # unparseable
            "E2",  # wrong token count
            "E4 E5",  # empty source
            "E7 E5",  # opponent's piece
            "E2 E5",  # illegal
        ],
    )
    async def test_move__rejected__reports_invalid_and_keeps_board(
        self, service, transport, store, text
    ):
        await service.start(ORIGIN, USER)
        session = store.get(ORIGIN)
        rendered_before = render_board(session.board)

        assert await service.move(ORIGIN, USER, text) is None

        assert transport.last_message == INVALID_MOVE
        assert store.get(ORIGIN) is session
        assert render_board(store.get(ORIGIN).board) == rendered_before

    @pytest.mark.asyncio
    async def test_move__unicode_setting__renders_glyphs(self, store):
        transport = RecordingTransport()
        service = ChessSessionService.from_settings(
            transport, Settings(unicode_pieces=True)
        )
        await service.start(ORIGIN, USER)
        await service.move(ORIGIN, USER, "E2 E4")

        assert "♙" in transport.last_message

    @pytest.mark.asyncio
    async def test_move__unexpected_error__propagates(self, service, store, monkeypatch):
        await service.start(ORIGIN, USER)

        def explode(*args, **kwargs):
            raise RuntimeError("engine crashed")

        monkeypatch.setattr("chess_chat.game.play_move", explode)

        with pytest.raises(RuntimeError, match="engine crashed"):
            await service.move(ORIGIN, USER, "E2 E4")
        assert store.get(ORIGIN).board == chess.Board()


def test_ping__returns_pong(service):
    assert service.ping() == PONG


def test_from_settings__uses_timeout(transport):
    service = ChessSessionService.from_settings(
        transport, Settings(confirmation_timeout=3)
    )
    assert service.confirmation_timeout == 3
    assert len(service.store) == 0
