"""Fixed command vocabulary and the yes/no confirmation registry."""
from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

log = logging.getLogger("commands")


class CommandKind(Enum):
    NO = "no"
    HELP = "help"
    STOP = "stop"
    MIC_OFF = "mic-off"
    FLIP = "flip"
    REMATCH = "rematch"
    DRAW = "draw"
    RESIGN = "resign"
    NEXT = "next"
    TAKEBACK = "takeback"
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"
    SOLVE = "solve"

    @classmethod
    def from_value(cls, val: str) -> "CommandKind | None":
        try:
            return cls(val)
        except ValueError:
            return None


class ConfirmationRegistry:
    """Pending requests (e.g. an opponent's takeback offer) awaiting a spoken answer."""

    def __init__(self) -> None:
        self._pending: dict[str, Callable[[bool], None]] = {}

    def register(self, name: str, callback: Callable[[bool], None] | None = None) -> None:
        if callback:
            self._pending[name] = callback
        else:
            self._pending.pop(name, None)

    def resolve(self, val: str) -> str | None:
        """Answer the first request matched by yes, no or its own name; return its name."""
        for name, callback in list(self._pending.items()):
            if val in ("yes", "no") or val == name:
                del self._pending[name]
                log.info("Confirmation %s answered %s", name, val)
                callback(val != "no")
                return name
        return None

    def decline_all(self) -> None:
        pending, self._pending = self._pending, {}
        for callback in pending.values():
            callback(False)

    def __contains__(self, name: str) -> bool:
        return name in self._pending

    def __len__(self) -> int:
        return len(self._pending)
