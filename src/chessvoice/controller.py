"""
Voice move controller: one per game view.

- Owns the lexicon store, both phrase indices, the selection, the active choice set, the
  confirmation registry and the two countdowns (choice auto-submit, wake-mode idle).
- resolve(text, kind) handles one recognizer event to completion: commands and confirmations
  first, then a pending choice label, then move matching. Unmatched input does nothing.
- update(board) must be called after every ply; indices are rebuilt and any move in progress
  is dropped.

Thread model: events are handled one at a time under a reentrant lock that countdown callbacks
also take, so a firing timer never interleaves with resolve().
"""
from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from itertools import chain
from typing import Any

import chess

from .commands import CommandKind, ConfirmationRegistry
from .config import SETTINGS, VoiceConfig
from .hints import BRUSHES, Hint, make_hints
from .host import VoiceHost
from .lexicon import Lexicon, LexiconStore
from .matcher import Match, Matcher
from .phrases import (
    PhraseIndex,
    build_move_index,
    build_square_index,
    dest,
    legal_ucis,
    promo,
    spread_map,
    src,
)
from .policy import Choices, Decision, ambiguate, choose_moves
from .timers import TimerFactory, TimerSlot


class ActionKind(Enum):
    NONE = "none"
    COMMAND = "command"
    CONFIRMATION = "confirmation"
    MOVE = "move"
    SELECT = "select"
    AMBIGUITY = "ambiguity"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    value: str | None = None
    choices: dict[str, str] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.kind is not ActionKind.NONE


NO_ACTION = Action(ActionKind.NONE)


class VoiceMoveController:
    def __init__(
        self,
        host: VoiceHost | None = None,
        cfg: VoiceConfig | None = None,
        store: LexiconStore | None = None,
        board: chess.Board | None = None,
        timer_factory: TimerFactory | None = None,
        context: str = "round",
    ):
        self.log = logging.getLogger("VoiceMoveController")
        self.host = host or VoiceHost()
        self.cfg = cfg or VoiceConfig()
        self.store = store or LexiconStore(grammar_dir=SETTINGS.grammar_dir)
        self.matcher = Matcher(self.store, self.cfg)
        self.context = context  # "round" or "puzzle"; narrows the default vocabulary
        self.confirm = ConfirmationRegistry()
        self._lock = threading.RLock()
        self._choice_timer = TimerSlot("choice", timer_factory, self._lock)
        self._idle_timer = TimerSlot("idle", timer_factory, self._lock)

        self.board = chess.Board()
        self.ucis: list[str] = []
        self.moves: PhraseIndex = {}
        self.squares: PhraseIndex = {}
        self.selection: str | None = None
        self.choices: Choices | None = None
        self.recognizer_mode = "default"

        if not len(self.store.lexicon):
            self.store.load(self.cfg.lang)
        self.update(board if board is not None else chess.Board())
        self._set_recognizer("default")

    @property
    def lexicon(self) -> Lexicon:
        return self.store.lexicon

    @property
    def move_in_progress(self) -> bool:
        return self.selection is not None or self.choices is not None

    @property
    def countdown_armed(self) -> bool:
        return self._choice_timer.armed

    # ---------------- Position / language -----------------
    def update(self, board: chess.Board, ucis: Iterable[str] | None = None) -> None:
        """Take a new position snapshot and rebuild both indices against it."""
        with self._lock:
            self.clear_move_progress()
            self.board = board.copy(stack=False)
            self.ucis = legal_ucis(self.board) if ucis is None else list(ucis)
            self.moves = build_move_index(self.board, self.ucis)
            self.squares = build_square_index(self.board, self.ucis, None, self.cfg.max_choices)
            self.log.debug("Indexed %d moves: %d move phrases, %d square phrases",
                           len(self.ucis), len(self.moves), len(self.squares))

    def set_lang(self, source: str | Mapping[str, Any]) -> bool:
        """Swap the grammar; on failure the current language stays active."""
        with self._lock:
            if not self.store.load(source):
                return False
            if isinstance(source, str):
                self.cfg.lang = self.lexicon.lang or source
            self.update(self.board, self.ucis)
            self._set_recognizer("default")
            return True

    # ---------------- Recognizer events -----------------
    def resolve(self, text: str, kind: str = "full") -> Action:
        with self._lock:
            if kind == "stop":
                was_busy = self.move_in_progress
                self.clear_move_progress()
                return Action(ActionKind.CANCELLED) if was_busy else NO_ACTION
            if kind == "partial":
                return self.listen_timer(text)
            text = text.strip().lower()
            if not text:
                return NO_ACTION
            # a new utterance always disarms a running countdown
            if self._choice_timer.armed:
                self._choice_timer.cancel()
                self._set_recognizer("default")
            action = self._handle_command(text) or self._handle_ambiguity(text) or self._handle_move(text)
            if action:
                self.confirm.decline_all()
                if action.value != CommandKind.STOP.value:
                    self.schedule_idle()
            else:
                self.log.debug("No action for %r", text)
            return action or NO_ACTION

    def listen_timer(self, word: str) -> Action:
        """Narrow recognizer while a countdown runs: a label submits, stop/no cancels."""
        with self._lock:
            if not self.choices or not self._choice_timer.armed:
                return NO_ACTION
            val = self.lexicon.value_of_word(word.strip().lower())
            ident = self.choices.labels.get(val)
            if val not in ("stop", "no") and not ident:
                return NO_ACTION
            self.clear_move_progress()
            action = self._submit(ident) if ident else Action(ActionKind.CANCELLED)
            self._set_recognizer("default")
            if val == "stop":
                self.schedule_idle(0)
            else:
                self.schedule_idle()
            return action

    def listen_wake(self, text: str) -> bool:
        with self._lock:
            phrase = self.lexicon.partials.wake_phrase
            if not phrase or text.strip().lower() != phrase:
                return False
            self._set_recognizer("default")
            self.schedule_idle()
            return True

    def request_confirmation(self, name: str, callback=None) -> None:
        """Register (or with no callback, withdraw) a yes/no request such as a takeback offer."""
        with self._lock:
            self.confirm.register(name, callback)

    def promotion_choice(self, text: str, roles: Iterable[str] = "qrbn") -> str | None:
        """Return the spoken promotion role ('q', 'r', 'b', 'n'), 'no' to cancel, or None."""
        with self._lock:
            match = self.matcher.match_one_tags(text.strip().lower(), ("role",), ("no",))
            if not match:
                return None
            val = match[0]
            if val == "no":
                return "no"
            role = val.lower()
            return role if role in roles else None

    # ---------------- Handlers -----------------
    def _handle_command(self, text: str) -> Action | None:
        match = self.matcher.match_one_tags(text, ("command", "choice"))
        if not match:
            return None
        val = match[0]
        name = self.confirm.resolve(val)
        if name:
            return Action(ActionKind.CONFIRMATION, name)
        kind = CommandKind.from_value(val)
        if kind is None:
            return None
        self.log.info("Command %s (cost=%.2f)", kind.value, match[1])
        self._run_command(kind)
        return Action(ActionKind.COMMAND, kind.value)

    def _run_command(self, kind: CommandKind) -> None:
        host = self.host
        if kind is CommandKind.NO:
            if host.help_shown():
                host.show_help(False)
            else:
                self.clear_move_progress()
        elif kind is CommandKind.HELP:
            host.show_help(True)
        elif kind is CommandKind.STOP:
            self.clear_move_progress()
            self.schedule_idle(0)
        elif kind is CommandKind.MIC_OFF:
            host.mic_off()
        elif kind is CommandKind.FLIP:
            host.flip()
        elif kind is CommandKind.REMATCH:
            host.rematch()
        elif kind is CommandKind.DRAW:
            host.offer_draw()
        elif kind is CommandKind.RESIGN:
            host.resign()
        elif kind is CommandKind.NEXT:
            host.next()
        elif kind is CommandKind.TAKEBACK:
            host.takeback()
        elif kind is CommandKind.UPVOTE:
            host.vote(True)
        elif kind is CommandKind.DOWNVOTE:
            host.vote(False)
        elif kind is CommandKind.SOLVE:
            host.solve()
        else:
            raise AssertionError(f"unhandled command {kind}")

    def _handle_ambiguity(self, text: str) -> Action | None:
        if not self.choices:
            return None
        chosen = None
        if " " not in text:
            chosen = self.matcher.match_one(text, [(label, [ident]) for label, ident in self.choices.labels.items()])
        if not chosen:
            self.log.debug("No choice matched %r among %s", text, self.choices.labels)
            self.clear_move_progress()
            return None
        self.log.info("Choice %r -> %s (cost=%.2f)", text, chosen[0], chosen[1])
        return self._submit(chosen[0])

    def _handle_move(self, text: str) -> Action | None:
        if self.selection:
            action = self._choose_moves(self.matcher.match_many(text, spread_map(self.squares)))
            if action:
                return action
        return self._choose_moves(self.matcher.match_many(text, spread_map(self.moves) + spread_map(self.squares)))

    def _choose_moves(self, ranked: list[Match]) -> Action | None:
        verdict = choose_moves(ranked, self.cfg)
        if verdict.decision is Decision.NONE:
            return None
        if verdict.decision is Decision.SUBMIT:
            self.log.info("Chose %s cost=%.2f", verdict.choice, ranked[0][1])
            return self._submit(verdict.choice)
        return self._ambiguate(ranked)

    def _ambiguate(self, ranked: list[Match]) -> Action | None:
        choices = ambiguate(ranked, self.board, self.cfg, self._color_labels())
        if choices is None:
            return None
        self.clear_move_progress()
        self.choices = choices
        self.log.info("Ambiguous: %s", choices.labels)
        if choices.preferred and self.cfg.timer:
            self._choice_timer.arm(
                self.cfg.timer + self.cfg.timer_grace_secs,
                functools.partial(self._on_choice_timeout, choices.preferred),
            )
            self._set_recognizer("timer")
        self.host.set_hints(self.hints())
        return Action(ActionKind.AMBIGUITY, choices.preferred, dict(choices.labels))

    def _on_choice_timeout(self, ident: str) -> None:
        self.log.info("Choice countdown expired; submitting %s", ident)
        self._submit(ident)
        if self.recognizer_mode == "timer":
            self._set_recognizer("default")

    def _submit(self, ident: str) -> Action:
        previous = self.selection
        self.clear_move_progress()
        if len(ident) < 3:
            dests = [u for u in self.ucis if u.startswith(ident)]
            if self.cfg.square_choices and len(dests) <= self.cfg.max_choices:
                action = self._ambiguate([(u, 0.0) for u in dests])
                if action:
                    return action
            square = None if ident == previous else ident
            self._select(square)
            return Action(ActionKind.SELECT, square)
        self.log.info("Submitting %s", ident)
        self.host.submit_move(src(ident), dest(ident), promo(ident) or None)
        return Action(ActionKind.MOVE, ident)

    # ---------------- Session state -----------------
    def _select(self, square: str | None) -> None:
        if square == self.selection:
            return
        self.selection = square
        self.host.select_square(square)
        self.squares = build_square_index(self.board, self.ucis, square, self.cfg.max_choices)

    def clear_move_progress(self) -> None:
        with self._lock:
            had_choices = self.choices is not None
            self._choice_timer.cancel()
            self.choices = None
            if had_choices:
                self.host.set_hints([])
            self._select(None)

    def schedule_idle(self, secs: float | None = None) -> None:
        if not self.cfg.wake_mode:
            return
        with self._lock:
            self._idle_timer.arm(self.cfg.idle_secs if secs is None else secs, self._on_idle)

    def _on_idle(self) -> None:
        self.log.debug("Idle; waiting for wake phrase")
        self._set_recognizer("idle")

    def _set_recognizer(self, mode: str) -> None:
        self.recognizer_mode = mode
        self.host.set_recognizer(mode, self.vocabulary(mode))

    # ---------------- Introspection -----------------
    def _color_labels(self) -> tuple[str, ...]:
        return self.lexicon.partials.colors or BRUSHES

    def vocabulary(self, mode: str = "default") -> list[str]:
        """Words the recognizer should listen for in the given mode."""
        lex = self.lexicon
        if mode == "timer":
            labels = self._color_labels() if self.cfg.use_colors else lex.partials.numbers
            return [lex.word_of_value(v) for v in chain(lex.partials.commands, labels)]
        if mode == "idle":
            if not self.cfg.wake_mode or not lex.partials.wake_phrase:
                return []
            return [*lex.partials.wake_ignore, lex.partials.wake_phrase]
        exclude = "puzzle" if self.context == "round" else "round"
        return [e.word for e in lex.entries if exclude not in e.tags]

    def hints(self) -> list[Hint]:
        if not self.choices:
            return []
        seconds = self.cfg.timer if self._choice_timer.armed else None
        return make_hints(self.choices.labels.items(), self.cfg.use_colors, seconds)

    def list_all_phrases(self) -> list[tuple[str, str]]:
        """Every phrase the current position accepts, spelled in input words, with its result."""
        lex = self.lexicon
        res: dict[str, str] = {}
        for vals, outs in chain(self.moves.items(), self.squares.items()):
            to = outs if isinstance(outs, str) else "[...]"
            for phrase in lex.values_to_words(vals, self.cfg.max_expansions):
                res[phrase] = to
        for e in lex.entries_by_tags(("command", "choice")):
            for phrase in lex.values_to_words(e.val, self.cfg.max_expansions):
                res[phrase] = e.val
        return list(res.items())
