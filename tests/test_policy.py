import unittest

import chess

from chessvoice.config import VoiceConfig
from chessvoice.hints import NUMBER_BRUSH, PREFERRED_BRUSH, make_hints
from chessvoice.policy import Decision, ambiguate, choose_moves

E_FOUR = [("e2e4", 0.0), ("d2d4", 0.4), ("b2b4", 0.5), ("c2c4", 0.6)]


def _cfg(**kw) -> VoiceConfig:
    base = dict(lang="en", clarity=0, timer_index=0, use_colors=True, wake_mode=False)
    base.update(kw)
    return VoiceConfig(**base)


class ChooseMovesTests(unittest.TestCase):
    def test_nothing_matched(self):
        self.assertIs(choose_moves([], _cfg()).decision, Decision.NONE)

    def test_single_cheap_match_submits(self):
        verdict = choose_moves([("a1b1", 0.0)], _cfg())
        self.assertIs(verdict.decision, Decision.SUBMIT)
        self.assertEqual(verdict.choice, "a1b1")

    def test_single_costly_match_asks(self):
        self.assertIs(choose_moves([("a1b1", 0.5)], _cfg()).decision, Decision.AMBIGUOUS)

    def test_clarity_sets_the_required_gap(self):
        ranked = [("e2e4", 0.0), ("d2d4", 0.4)]
        self.assertIs(choose_moves(ranked, _cfg(clarity=0)).decision, Decision.AMBIGUOUS)
        self.assertIs(choose_moves(ranked, _cfg(clarity=1)).decision, Decision.AMBIGUOUS)
        verdict = choose_moves(ranked, _cfg(clarity=2))
        self.assertIs(verdict.decision, Decision.SUBMIT)
        self.assertEqual(verdict.choice, "e2e4")

    def test_same_input_same_verdict(self):
        ranked = [("e2e4", 0.0), ("d2d4", 0.4), ("b2b4", 0.5)]
        for clarity in (0, 1, 2):
            cfg = _cfg(clarity=clarity)
            first = choose_moves(ranked, cfg)
            self.assertEqual(choose_moves(list(ranked), cfg), first)
            self.assertEqual(ranked, [("e2e4", 0.0), ("d2d4", 0.4), ("b2b4", 0.5)])


class AmbiguateTests(unittest.TestCase):
    def setUp(self):
        self.board = chess.Board()

    def test_loose_timer_keeps_every_close_choice(self):
        choices = ambiguate(E_FOUR, self.board, _cfg(timer_index=4))
        self.assertEqual(choices.preferred, "e2e4")
        self.assertEqual(choices.labels, {
            "yes": "e2e4", "green": "e2e4", "blue": "d2d4", "purple": "b2b4", "pink": "c2c4",
        })

    def test_strict_timer_narrows_to_the_best(self):
        choices = ambiguate(E_FOUR, self.board, _cfg(clarity=2, timer_index=4))
        self.assertEqual(choices.labels, {"yes": "e2e4", "green": "e2e4"})

    def test_no_window_without_timer(self):
        choices = ambiguate(E_FOUR, self.board, _cfg(clarity=2, timer_index=0))
        self.assertEqual(len(choices), 4)

    def test_exact_tie_has_no_preferred_choice(self):
        board = chess.Board("4k3/8/8/8/8/8/4K3/R6R w - - 0 1")
        choices = ambiguate([("a1d1", 0.0), ("h1d1", 0.0)], board, _cfg())
        self.assertIsNone(choices.preferred)
        self.assertEqual(choices.labels, {"green": "a1d1", "blue": "h1d1"})

    def test_lone_pawn_wins_an_exact_tie(self):
        choices = ambiguate([("g1f3", 0.0), ("f2f3", 0.0)], self.board, _cfg())
        self.assertEqual(choices.preferred, "f2f3")
        self.assertEqual([c for _, c in choices.ranked], [0.0, 0.01])
        self.assertEqual(choices.labels["blue"], "g1f3")

    def test_promotions_collapse_to_one_choice(self):
        board = chess.Board("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")
        ranked = [("e7e8q", 0.0), ("e7e8n", 0.1), ("e7e8", 0.2)]
        choices = ambiguate(ranked, board, _cfg())
        self.assertEqual(choices.labels, {"yes": "e7e8q", "green": "e7e8q"})

    def test_numbered_labels(self):
        choices = ambiguate(E_FOUR[:2], self.board, _cfg(use_colors=False))
        self.assertEqual(choices.labels, {"yes": "e2e4", "1": "e2e4", "2": "d2d4"})

    def test_label_supply_caps_the_choices(self):
        choices = ambiguate(E_FOUR, self.board, _cfg(), color_labels=("green", "blue"))
        self.assertEqual(choices.labels, {"yes": "e2e4", "green": "e2e4", "blue": "d2d4"})
        self.assertIsNone(ambiguate(E_FOUR, self.board, _cfg(), color_labels=()))

    def test_nothing_to_ask(self):
        self.assertIsNone(ambiguate([], self.board, _cfg()))


class HintTests(unittest.TestCase):
    def test_colored_hints_mark_the_countdown_on_the_preferred_arrow(self):
        labels = {"yes": "e2e4", "green": "e2e4", "blue": "d2d4"}
        hints = make_hints(labels.items(), use_colors=True, seconds=3.0)
        self.assertEqual([(h.orig, h.dest, h.brush) for h in hints], [("e2", "e4", "green"), ("d2", "d4", "blue")])
        self.assertEqual([h.seconds for h in hints], [3.0, None])

    def test_numbered_hints_share_one_brush(self):
        labels = {"yes": "e2e4", "1": "e2e4", "2": "d2d4"}
        hints = make_hints(labels.items(), use_colors=False)
        self.assertEqual([(h.label, h.brush) for h in hints], [("1", PREFERRED_BRUSH), ("2", NUMBER_BRUSH)])

    def test_square_choices_are_circles(self):
        hints = make_hints({"green": "g1"}.items(), use_colors=True)
        self.assertEqual((hints[0].orig, hints[0].dest), ("g1", None))


if __name__ == "__main__":
    unittest.main()
