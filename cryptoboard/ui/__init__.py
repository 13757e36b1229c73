"""UI package (TUI + view state)."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .app import CryptoBoardApp as CryptoBoardApp

__all__ = ["CryptoBoardApp"]


def __getattr__(name: str):
    if name == "CryptoBoardApp":
        from .app import CryptoBoardApp

        return CryptoBoardApp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
