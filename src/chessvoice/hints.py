"""
Visual hints for an ambiguity session: one labeled marker per choice.

Colored mode draws each choice with the brush named by its label; numbered mode draws every
choice in one brush and carries the number as the label. A selectable square (two-character
identifier) becomes a circle rather than an arrow.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

BRUSHES = ("green", "blue", "purple", "pink", "yellow", "orange", "red", "grey")
NUMBER_BRUSH = "grey"
PREFERRED_BRUSH = "green"


@dataclass(frozen=True)
class Hint:
    orig: str
    dest: str | None  # None draws a circle on orig
    brush: str
    label: str | None = None
    seconds: float | None = None  # countdown shown on the preferred choice


def _marker(ident: str, brush: str, label: str | None, seconds: float | None) -> Hint:
    if len(ident) < 4:
        return Hint(orig=ident, dest=None, brush=brush, label=label, seconds=seconds)
    return Hint(orig=ident[:2], dest=ident[2:4], brush=brush, label=label, seconds=seconds)


def colored_hints(choices: Iterable[tuple[str, str]], seconds: float | None = None) -> list[Hint]:
    labels = dict(choices)
    preferred = labels.get("yes")
    return [
        _marker(ident, label, None, seconds if ident == preferred else None)
        for label, ident in labels.items()
        if label in BRUSHES
    ]


def numbered_hints(choices: Iterable[tuple[str, str]], seconds: float | None = None) -> list[Hint]:
    labels = dict(choices)
    preferred = labels.get("yes")
    hints = []
    for label, ident in labels.items():
        if not label.isdigit():
            continue
        brush = PREFERRED_BRUSH if ident == preferred else NUMBER_BRUSH
        hints.append(_marker(ident, brush, label, seconds if ident == preferred else None))
    return hints


def make_hints(choices: Iterable[tuple[str, str]], use_colors: bool, seconds: float | None = None) -> list[Hint]:
    return colored_hints(choices, seconds) if use_colors else numbered_hints(choices, seconds)
