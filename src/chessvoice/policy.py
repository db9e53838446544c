"""
Decision policy and ambiguity resolution over ranked (candidate, cost) matches.

choose_moves decides between submitting the best candidate outright and asking the player;
ambiguate turns the ranked list into a labeled choice set. Both are pure: the controller owns
the countdown, the recognizer switch and the visual hints.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

import chess

from .config import VoiceConfig
from .hints import BRUSHES
from .matcher import Match


class Decision(Enum):
    NONE = "none"
    SUBMIT = "submit"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class Verdict:
    decision: Decision
    choice: str | None = None


@dataclass
class Choices:
    """Labeled candidates of one ambiguity session (labels are lexicon values)."""

    labels: dict[str, str] = field(default_factory=dict)
    preferred: str | None = None
    ranked: list[Match] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ranked)


def choose_moves(ranked: Sequence[Match], cfg: VoiceConfig) -> Verdict:
    if not ranked:
        return Verdict(Decision.NONE)
    if len(ranked) == 1 and ranked[0][1] < cfg.auto_submit_cost:
        return Verdict(Decision.SUBMIT, ranked[0][0])
    if len(ranked) > 1 and ranked[1][1] - ranked[0][1] > cfg.clarity_gap():
        return Verdict(Decision.SUBMIT, ranked[0][0])
    return Verdict(Decision.AMBIGUOUS)


def _is_pawn_move(board: chess.Board, ident: str) -> bool:
    if len(ident) < 4:
        return False
    piece = board.piece_at(chess.parse_square(ident[:2]))
    return piece is not None and piece.piece_type == chess.PAWN


def ambiguate(
    ranked: Sequence[Match],
    board: chess.Board,
    cfg: VoiceConfig,
    color_labels: Sequence[str] = BRUSHES,
) -> Choices | None:
    if not ranked:
        return None
    # dedup by coordinate pair, keeping the cheapest
    seen: set[str] = set()
    choices: list[list] = []
    for ident, cost in sorted(ranked, key=lambda m: m[1]):
        if ident[:4] in seen:
            continue
        seen.add(ident[:4])
        choices.append([ident, cost])
    limit = min(cfg.max_choices, len(color_labels)) if cfg.use_colors else cfg.max_choices
    choices = choices[:limit]
    if not choices:
        return None

    # on an exact tie at the head, a lone pawn move wins
    same_low = [c for c in choices if c[1] == choices[0][1]]
    pawns = [c for c in same_low if _is_pawn_move(board, c[0])]
    if len(pawns) == 1 and len(same_low) > 1:
        p = same_low.index(pawns[0])
        choices[0], choices[p] = choices[p], choices[0]
        for c in choices[1:len(same_low)]:
            c[1] += cfg.pawn_tie_nudge

    if cfg.timer:
        lowest = choices[0][1]
        choices = [c for c in choices if c[1] - lowest <= cfg.clarity_window()]

    preferred = choices[0][0] if len(choices) == 1 or choices[0][1] < choices[1][1] else None
    labels: dict[str, str] = {}
    if preferred:
        labels["yes"] = preferred
    if cfg.use_colors:
        for label, (ident, _) in zip(color_labels, choices):
            labels[label] = ident
    else:
        for i, (ident, _) in enumerate(choices):
            labels[str(i + 1)] = ident
    return Choices(labels=labels, preferred=preferred, ranked=[(i, c) for i, c in choices])
