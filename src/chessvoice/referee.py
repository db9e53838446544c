"""
Referee: a python-chess game that voice moves are applied to.

- Owns a python-chess Board and applies submitted moves after a legality check.
- Implements VoiceHost so a VoiceMoveController can drive it directly (selection, hints,
  help, flip, resign, draw offers, takebacks).
- Manages PGN headers and a result override; pgn() serializes finished or ongoing games.
"""
from __future__ import annotations

import datetime
import logging
from collections.abc import Callable, Sequence
from typing import Optional

import chess
import chess.pgn

from .hints import Hint
from .host import VoiceHost

log = logging.getLogger("referee")


class Referee(VoiceHost):
    """Plain chess referee around python-chess Board and PGN export."""

    name = "Referee"

    def __init__(self, starting_fen: str | None = None):
        self.board = chess.Board(fen=starting_fen) if starting_fen else chess.Board()
        self._headers: dict[str, str] = {}
        self._result_override: Optional[str] = None
        self._termination_comment: Optional[str] = None
        self.selected: str | None = None
        self.hints: list[Hint] = []
        self.help_visible = False
        self.white_pov = True
        self.recognizer_mode = "default"
        self.draw_offered = False
        self.on_move: list[Callable[[chess.Board], None]] = []

    # ---------------- Header / Result Management -----------------
    def set_headers(self, event: str = "Voice Chess", site: str = "?", date: Optional[str] = None,
                    round_: str = "?", white: str = "?", black: str = "?") -> None:
        date = date or datetime.date.today().strftime("%Y.%m.%d")
        self._headers.update({
            "Event": event,
            "Site": site,
            "Date": date,
            "Round": round_,
            "White": white,
            "Black": black,
        })

    def set_result(self, result: str, termination_reason: Optional[str] = None) -> None:
        self._result_override = result
        if termination_reason:
            self._termination_comment = f"Termination: {termination_reason}"

    # ---------------- Move Application -----------------
    def apply_uci(self, uci: str) -> tuple[bool, str | None]:
        try:
            mv = chess.Move.from_uci(uci)
        except ValueError:
            return False, None
        if mv not in self.board.legal_moves:
            return False, None
        san = self.board.san(mv)
        self.board.push(mv)
        self.draw_offered = False
        for cb in self.on_move:
            cb(self.board)
        return True, san

    def submit_move(self, orig: str, dest: str, promotion: str | None = None) -> None:
        uci = f"{orig}{dest}{promotion or ''}"
        if not promotion:
            # an unqualified move onto the last rank promotes to a queen
            piece = self.board.piece_at(chess.parse_square(orig))
            if piece and piece.piece_type == chess.PAWN and dest[1] in "18":
                uci += "q"
        ok, san = self.apply_uci(uci)
        if ok:
            log.info("Played %s (%s)", san, uci)
        else:
            log.warning("Rejected submitted move %s", uci)
        self.selected = None

    def select_square(self, square: str | None) -> None:
        self.selected = square

    # ---------------- Board UI -----------------
    def set_hints(self, hints: Sequence[Hint]) -> None:
        self.hints = list(hints)

    def show_help(self, show: bool) -> None:
        self.help_visible = show

    def help_shown(self) -> bool:
        return self.help_visible

    def flip(self) -> None:
        self.white_pov = not self.white_pov

    def set_recognizer(self, mode: str, words: Sequence[str]) -> None:
        self.recognizer_mode = mode
        log.debug("Recognizer %s with %d words", mode, len(words))

    # ---------------- Game actions -----------------
    def resign(self) -> None:
        result = "0-1" if self.board.turn == chess.WHITE else "1-0"
        self.set_result(result, "resignation")

    def offer_draw(self) -> None:
        self.draw_offered = True

    def takeback(self) -> None:
        if self.board.move_stack:
            self.board.pop()
            for cb in self.on_move:
                cb(self.board)

    # ---------------- PGN / Status -----------------
    def pgn(self) -> str:
        game = chess.pgn.Game.from_board(self.board)  # keeps a custom starting FEN
        for k, v in self._headers.items():
            game.headers[k] = v
        game.headers["Result"] = self.status()
        if self._termination_comment:
            game.comment = self._termination_comment
        exporter = chess.pgn.StringExporter(headers=True, variations=False, comments=bool(self._termination_comment))
        return game.accept(exporter)

    def status(self) -> str:
        if self._result_override:
            return self._result_override
        if self.board.is_game_over():
            return self.board.result()
        return "*"
