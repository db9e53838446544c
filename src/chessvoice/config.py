"""
Configuration and environment loading for chessvoice.

- Loads settings.yml (YAML) from repo root if present; falls back to environment variables.
- Exposes SETTINGS with the user preferences (language, clarity, timer, labels, wake mode).
- VoiceConfig carries per-controller knobs, including the tuned matching constants.
"""
from dataclasses import dataclass
import os
from typing import Any, Callable

import yaml
from dotenv import load_dotenv

load_dotenv()

# Countdown durations in seconds, indexed by the timer preference (0 disables the countdown)
TIMER_STEPS = (0.0, 1.5, 2.0, 2.5, 3.0, 5.0)


def _repo_root() -> str:
    # this file: src/chessvoice/config.py → repo root is two levels up
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def _load_yaml(path: str) -> dict:
    if not os.path.isfile(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return data if isinstance(data, dict) else {}


_cfg = _load_yaml(os.path.join(_repo_root(), "settings.yml"))


def _get(name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
    if name in _cfg:
        val = _cfg[name]
        return cast(val) if cast else val
    env = os.environ.get(name)
    if env is not None:
        return cast(env) if cast else env
    return default


def _bool(val: Any) -> bool:
    if isinstance(val, str):
        return val.strip().lower() in {"1", "true", "yes", "on"}
    return bool(val)


@dataclass(frozen=True)
class Settings:
    # User preferences
    lang: str
    clarity: int
    timer_index: int
    use_colors: bool
    wake_mode: bool

    # Optional directory holding moves-<lang>.yml grammar files
    grammar_dir: str | None


SETTINGS = Settings(
    lang=_get("CHESSVOICE_LANG", "en"),
    clarity=int(_get("CHESSVOICE_CLARITY", 0, cast=int)),
    timer_index=int(_get("CHESSVOICE_TIMER", 3, cast=int)),
    use_colors=_get("CHESSVOICE_USE_COLORS", True, cast=_bool),
    wake_mode=_get("CHESSVOICE_WAKE_MODE", False, cast=_bool),
    grammar_dir=_get("CHESSVOICE_GRAMMAR_DIR", None),
)


@dataclass
class VoiceConfig:
    lang: str = SETTINGS.lang
    clarity: int = SETTINGS.clarity  # 0 = loose, 2 = strict
    timer_index: int = SETTINGS.timer_index
    use_colors: bool = SETTINGS.use_colors
    wake_mode: bool = SETTINGS.wake_mode
    # Tuned constants; their interaction with the grammar substitution costs is load-bearing
    auto_submit_cost: float = 0.4
    clarity_gaps: tuple[float, ...] = (0.7, 0.5, 0.3)
    clarity_windows: tuple[float, ...] = (1.0, 0.6, 0.001)
    pawn_tie_nudge: float = 0.01
    forbidden_cost: float = 100.0
    match_ceiling: float = 1.0
    max_choices: int = 8
    # present a spoken square's destinations as choices instead of selecting it when they fit
    square_choices: bool = False
    max_expansions: int = 512
    idle_secs: float = 20.0
    timer_grace_secs: float = 0.1

    @property
    def timer(self) -> float:
        """Countdown seconds for the current timer preference (0 when disabled)."""
        idx = min(max(self.timer_index, 0), len(TIMER_STEPS) - 1)
        return TIMER_STEPS[idx]

    def clarity_level(self) -> int:
        return min(max(self.clarity, 0), len(self.clarity_gaps) - 1)

    def clarity_gap(self) -> float:
        return self.clarity_gaps[self.clarity_level()]

    def clarity_window(self) -> float:
        return self.clarity_windows[self.clarity_level()]
