"""
Lexicon: word/token/value mappings and substitution costs for one spoken language.

- Entry: one recognizable input word with its single-character token, its coarser value,
  tags, and the substitutions the matcher may apply when that token is heard.
- Lexicon: an immutable generation of the by-word, by-token and by-value maps.
- LexiconStore: owns the active generation and replaces it wholesale on load; a failed load
  keeps the previous generation.

Grammar resources are YAML files named moves-<lang>.yml with an `entries` list and an
optional `partials` mapping (word lists for the narrow timer and wake recognizers).
"""
from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from itertools import islice, product
from typing import Any

import yaml

log = logging.getLogger("lexicon")

GRAMMAR_DIR = os.path.join(os.path.dirname(__file__), "grammar")


class GrammarError(ValueError):
    """Raised when a grammar resource is malformed."""


def _strings(raw: Mapping[str, Any], key: str) -> tuple[str, ...]:
    val = raw.get(key) or ()
    if not isinstance(val, (list, tuple)):
        raise GrammarError(f"{key!r} must be a list, got {val!r}")
    return tuple(str(x) for x in val)


@dataclass(frozen=True)
class Substitution:
    to: str  # "" means the heard token may be dropped
    cost: float


@dataclass(frozen=True)
class Entry:
    word: str
    tok: str
    val: str
    tags: tuple[str, ...] = ()
    subs: tuple[Substitution, ...] = ()

    def sub_cost(self, to: str) -> float | None:
        for sub in self.subs:
            if sub.to == to:
                return sub.cost
        return None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Entry":
        try:
            word = str(raw["word"])
            tok = str(raw["tok"])
        except KeyError as e:
            raise GrammarError(f"entry missing {e.args[0]!r}: {dict(raw)!r}") from e
        if len(tok) != 1:
            raise GrammarError(f"token for {word!r} must be a single character, got {tok!r}")
        val = raw.get("val")
        raw_subs = raw.get("subs") or ()
        if not isinstance(raw_subs, (list, tuple)):
            raise GrammarError(f"subs for {word!r} must be a list, got {raw_subs!r}")
        subs = []
        for s in raw_subs:
            try:
                to = "" if s.get("to") is None else str(s["to"])
                cost = float(s["cost"])
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise GrammarError(f"bad substitution for {word!r}: {s!r}") from e
            if len(to) > 1:
                raise GrammarError(f"substitution target for {word!r} must be a token, got {to!r}")
            subs.append(Substitution(to=to, cost=cost))
        return cls(
            word=word,
            tok=tok,
            val=tok if val is None else str(val),
            tags=_strings(raw, "tags"),
            subs=tuple(subs),
        )


@dataclass(frozen=True)
class Partials:
    commands: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()
    numbers: tuple[str, ...] = ()
    wake_ignore: tuple[str, ...] = ()
    wake_phrase: str | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> "Partials":
        raw = raw or {}
        if not isinstance(raw, Mapping):
            raise GrammarError(f"partials must be a mapping, got {raw!r}")
        wake = raw.get("wake") or {}
        if not isinstance(wake, Mapping):
            raise GrammarError(f"partials.wake must be a mapping, got {wake!r}")
        phrase = wake.get("phrase")
        return cls(
            commands=_strings(raw, "commands"),
            colors=_strings(raw, "colors"),
            numbers=_strings(raw, "numbers"),
            wake_ignore=_strings(wake, "ignore"),
            wake_phrase=None if phrase is None else str(phrase),
        )


class Lexicon:
    """One immutable generation of the three lookup maps."""

    def __init__(self, entries: Iterable[Entry], partials: Partials | None = None, lang: str = ""):
        self.lang = lang
        self.entries: tuple[Entry, ...] = tuple(entries)
        self.partials = partials or Partials()
        by_word: dict[str, Entry] = {}
        by_tok: dict[str, Entry] = {}
        by_val: dict[str, Entry | tuple[Entry, ...]] = {}
        for e in self.entries:
            if e.word in by_word:
                raise GrammarError(f"duplicate word {e.word!r}")
            if e.tok in by_tok:
                raise GrammarError(f"duplicate token {e.tok!r} ({by_tok[e.tok].word!r}, {e.word!r})")
            by_word[e.word] = e
            by_tok[e.tok] = e
            prior = by_val.get(e.val)
            if prior is None:
                by_val[e.val] = e
            elif isinstance(prior, Entry):
                by_val[e.val] = (prior, e)
            else:
                by_val[e.val] = prior + (e,)
        self.by_word = by_word
        self.by_tok = by_tok
        self.by_val = by_val

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], lang: str = "") -> "Lexicon":
        if not isinstance(raw, Mapping) or not isinstance(raw.get("entries"), list):
            raise GrammarError("grammar must be a mapping with an 'entries' list")
        if not all(isinstance(e, Mapping) for e in raw["entries"]):
            raise GrammarError("every grammar entry must be a mapping")
        entries = [Entry.from_dict(e) for e in raw["entries"]]
        return cls(entries, Partials.from_dict(raw.get("partials")), lang=str(raw.get("lang", lang)))

    @classmethod
    def empty(cls) -> "Lexicon":
        return cls(())

    def __len__(self) -> int:
        return len(self.entries)

    # ---------------- Lookups -----------------
    def token_of_word(self, word: str) -> str:
        e = self.by_word.get(word)
        return e.tok if e else ""

    def value_of_word(self, word: str) -> str:
        e = self.by_word.get(word)
        return e.val if e else word

    def entry_of_token(self, tok: str) -> Entry | None:
        return self.by_tok.get(tok)

    def word_of_token(self, tok: str) -> str | None:
        e = self.by_tok.get(tok)
        return e.word if e else None

    def entries_of_value(self, val: str) -> tuple[Entry, ...]:
        v = self.by_val.get(val)
        if v is None:
            return ()
        return (v,) if isinstance(v, Entry) else v

    def tokens_of_value(self, val: str) -> list[str]:
        return [e.tok for e in self.entries_of_value(val)]

    def word_of_value(self, val: str, tag: str | None = None) -> str:
        """Return an input word for val, the first one unless tag narrows it."""
        found = self.entries_of_value(val)
        if not found:
            e = self.by_tok.get(val)
            return e.word if e else val
        if tag:
            for e in found:
                if tag in e.tags:
                    return e.word
        return found[0].word

    def entries_by_tags(self, tags: Iterable[str] | None = None, intersect: bool = False) -> list[Entry]:
        if tags is None:
            return list(self.entries)
        tags = set(tags)
        if intersect:
            return [e for e in self.entries if all(t in tags for t in e.tags)]
        return [e for e in self.entries if any(t in tags for t in e.tags)]

    def words_by_tags(self, tags: Iterable[str] | None = None, intersect: bool = False) -> list[str]:
        return [e.word for e in self.entries_by_tags(tags, intersect)]

    # ---------------- Phrase conversion -----------------
    def words_to_tokens(self, phrase: str) -> str:
        """Map each heard word to its token; unknown words contribute nothing."""
        return "".join(self.token_of_word(w) for w in phrase.split())

    def values_to_tokens(self, vals: str, limit: int | None = None) -> Iterator[str]:
        """Lazily yield every token string equivalent to a comma-joined value sequence."""
        pools = [self.tokens_of_value(v) for v in vals.split(",")]
        if not all(pools):
            return
        for combo in islice(product(*pools), limit):
            yield "".join(combo)

    def values_to_words(self, vals: str, limit: int | None = None) -> list[str]:
        return [
            " ".join(self.word_of_token(t) or t for t in toks)
            for toks in self.values_to_tokens(vals, limit)
        ]


def grammar_path(lang: str, grammar_dir: str | None = None) -> str:
    return os.path.join(grammar_dir or GRAMMAR_DIR, f"moves-{lang}.yml")


def read_grammar(source: str | Mapping[str, Any], grammar_dir: str | None = None) -> Lexicon:
    """Parse a grammar from a mapping, a YAML path, or a language code."""
    if isinstance(source, Mapping):
        return Lexicon.from_dict(source)
    path = source if os.path.isfile(source) else grammar_path(source, grammar_dir)
    lang = "" if path == source else source
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    return Lexicon.from_dict(raw, lang=lang)


class LexiconStore:
    """Holds the authoritative Lexicon generation for a controller."""

    def __init__(self, lexicon: Lexicon | None = None, grammar_dir: str | None = None):
        self._lexicon = lexicon or Lexicon.empty()
        self.grammar_dir = grammar_dir
        self.generation = 0

    @property
    def lexicon(self) -> Lexicon:
        return self._lexicon

    def load(self, source: str | Mapping[str, Any]) -> bool:
        """Replace the active lexicon; on any failure keep the current one and return False."""
        try:
            fresh = read_grammar(source, self.grammar_dir)
        except (OSError, yaml.YAMLError, GrammarError):
            log.exception("Failed loading grammar %r; keeping %r", source if isinstance(source, str) else "<mapping>", self._lexicon.lang)
            return False
        self._lexicon = fresh
        self.generation += 1
        log.info("Loaded grammar lang=%s entries=%d", fresh.lang or "?", len(fresh))
        return True
