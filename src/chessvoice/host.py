"""
Capabilities the controller drives: move application, board UI and the recognizer.

VoiceHost implements every hook as a no-op; subclass it and override what the embedding
game view supports.
"""
from __future__ import annotations

from collections.abc import Sequence

from .hints import Hint


class VoiceHost:
    name: str = "Null"

    # Move application
    def select_square(self, square: str | None) -> None:
        pass

    def submit_move(self, orig: str, dest: str, promotion: str | None = None) -> None:
        pass

    # Board UI
    def set_hints(self, hints: Sequence[Hint]) -> None:
        pass

    def show_help(self, show: bool) -> None:
        pass

    def help_shown(self) -> bool:
        return False

    def flip(self) -> None:
        pass

    # Recognizer; mode is "default", "timer" or "idle"
    def set_recognizer(self, mode: str, words: Sequence[str]) -> None:
        pass

    def mic_off(self) -> None:
        pass

    # Game actions
    def rematch(self) -> None:
        pass

    def offer_draw(self) -> None:
        pass

    def resign(self) -> None:
        pass

    def takeback(self) -> None:
        pass

    # Puzzle actions
    def next(self) -> None:
        pass

    def vote(self, up: bool) -> None:
        pass

    def solve(self) -> None:
        pass
