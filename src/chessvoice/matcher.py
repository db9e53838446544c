"""
Cost-based matching of heard phrases against indexed candidate phrases.

Heard words become a token string; each candidate value sequence expands into every equivalent
token string. The cost of a pair is the cheapest edit script turning the heard tokens into the
candidate tokens, where only the lexicon's listed substitutions (and listed drops) are cheap and
everything else costs the forbidden cost.

Partite matching additionally forbids substituting between two tokens with identical tag sets.
Choice labels (colors, numbers) each form such a partition, so "red" can never pass for "blue".
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from .config import VoiceConfig
from .lexicon import Lexicon, LexiconStore

log = logging.getLogger("matcher")

Candidate = tuple[str, Iterable[str]]  # (comma-joined values, outputs)
Match = tuple[str, float]


class Matcher:
    def __init__(self, store: LexiconStore, cfg: VoiceConfig | None = None):
        self.store = store
        self.cfg = cfg or VoiceConfig()

    @property
    def lexicon(self) -> Lexicon:
        return self.store.lexicon

    def transform_cost(self, frm: str, to: str, partite: bool = False) -> float:
        """Cost of turning heard token frm into to ("" on either side is a drop or an insert)."""
        if frm == to:
            return 0.0
        lex = self.lexicon
        entry = lex.entry_of_token(frm) if frm else None
        if entry is None:
            return self.cfg.forbidden_cost
        if partite and to:
            other = lex.entry_of_token(to)
            if other is not None and set(entry.tags) == set(other.tags) and len(entry.tags) == len(other.tags):
                return self.cfg.forbidden_cost
        cost = entry.sub_cost(to)
        return self.cfg.forbidden_cost if cost is None else cost

    def cost_to_match(self, heard: str, phrase: str, partite: bool = False) -> float:
        if heard == phrase:
            return 0.0
        tc = self.transform_cost
        prev = [0.0]
        for tok in phrase:
            prev.append(prev[-1] + tc("", tok, partite))
        for h in heard:
            cur = [prev[0] + tc(h, "", partite)]
            for j, x in enumerate(phrase, start=1):
                cur.append(min(
                    prev[j - 1] + tc(h, x, partite),
                    prev[j] + tc(h, "", partite),
                    cur[j - 1] + tc("", x, partite),
                ))
            prev = cur
        return prev[-1]

    def match_many(self, phrase: str, candidates: Iterable[Candidate], partite: bool = False) -> list[Match]:
        """Rank outputs whose cheapest expansion costs less than the match ceiling."""
        lex = self.lexicon
        heard = lex.words_to_tokens(phrase)
        if not heard:
            return []
        toks_to_outs: dict[str, list[str]] = {}
        for vals, outs in candidates:
            for toks in lex.values_to_tokens(vals, self.cfg.max_expansions):
                bucket = toks_to_outs.setdefault(toks, [])
                for out in outs:
                    if out not in bucket:
                        bucket.append(out)
        best: dict[str, float] = {}
        for toks, outs in toks_to_outs.items():
            cost = self.cost_to_match(heard, toks, partite)
            if cost >= self.cfg.match_ceiling:
                continue
            for out in outs:
                if out not in best or best[out] > cost:
                    best[out] = cost
        matches = sorted(best.items(), key=lambda kv: kv[1])
        if matches:
            log.debug("match_many %r -> %s", phrase, matches[:8])
        return matches

    def match_one(self, phrase: str, candidates: Iterable[Candidate]) -> Match | None:
        matches = self.match_many(phrase, candidates, partite=True)
        return matches[0] if matches else None

    def match_one_tags(self, phrase: str, tags: Iterable[str], vals: Iterable[str] = ()) -> Match | None:
        """Match against the values of every lexicon entry carrying one of tags, plus vals."""
        candidates: list[Candidate] = [(v, [v]) for v in vals]
        candidates += [(e.val, [e.val]) for e in self.lexicon.entries_by_tags(tags)]
        return self.match_one(phrase, candidates)
