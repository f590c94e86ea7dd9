"""Core package for chat-driven chess sessions."""

__all__ = [
    "board_display",
    "bot",
    "config",
    "confirmation",
    "exceptions",
    "game",
    "gateway",
    "inference",
    "notation",
    "session_store",
    "transport",
    "types",
]
