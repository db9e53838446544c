import unittest

from chessvoice.config import VoiceConfig
from chessvoice.lexicon import Lexicon, LexiconStore
from chessvoice.matcher import Matcher

LABELS = {
    "entries": [
        {"word": "red", "tok": "D", "val": "red", "tags": ["choice", "color"],
         "subs": [{"to": "U", "cost": 0.1}, {"to": "1", "cost": 0.2}]},
        {"word": "blue", "tok": "U", "val": "blue", "tags": ["choice", "color"]},
        {"word": "one", "tok": "1", "tags": ["choice", "rank"]},
    ]
}


def _cfg() -> VoiceConfig:
    return VoiceConfig(lang="en", clarity=0, timer_index=0, use_colors=True, wake_mode=False)


class CostTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        store = LexiconStore()
        store.load("en")
        cls.m = Matcher(store, _cfg())

    def test_identical_phrases_cost_nothing(self):
        self.assertEqual(self.m.cost_to_match("Nf3", "Nf3"), 0.0)
        self.assertEqual(self.m.transform_cost("e", "e"), 0.0)

    def test_listed_substitution(self):
        self.assertAlmostEqual(self.m.cost_to_match("d4", "e4"), 0.4)
        self.assertAlmostEqual(self.m.transform_cost("N", "K"), 0.6)

    def test_listed_drop(self):
        self.assertAlmostEqual(self.m.cost_to_match("Pe4", "e4"), 0.2)
        self.assertAlmostEqual(self.m.cost_to_match("Nxf3", "Nf3"), 0.3)

    def test_insertions_and_unlisted_substitutions_are_forbidden(self):
        self.assertGreaterEqual(self.m.cost_to_match("e4", "Pe4"), 100.0)
        self.assertGreaterEqual(self.m.cost_to_match("e4", "f4"), 100.0)
        self.assertEqual(self.m.transform_cost("?", "e"), 100.0)


class PartiteTests(unittest.TestCase):
    def setUp(self):
        self.m = Matcher(LexiconStore(Lexicon.from_dict(LABELS)), _cfg())

    def test_same_partition_substitution_only_without_partite(self):
        self.assertAlmostEqual(self.m.transform_cost("D", "U"), 0.1)
        self.assertEqual(self.m.transform_cost("D", "U", partite=True), 100.0)

    def test_cross_partition_substitution_stays_allowed(self):
        self.assertAlmostEqual(self.m.transform_cost("D", "1", partite=True), 0.2)

    def test_match_one_never_confuses_labels(self):
        candidates = [("blue", ["h1d1"]), ("green", ["a1d1"])]
        self.assertIsNone(self.m.match_one("red", candidates))
        self.assertEqual(self.m.match_many("red", candidates), [("h1d1", 0.1)])


class MatchManyTests(unittest.TestCase):
    def setUp(self):
        store = LexiconStore()
        store.load("en")
        self.m = Matcher(store, _cfg())

    def test_ranked_by_cost_under_the_ceiling(self):
        candidates = [("e,4", ["e2e4"]), ("d,4", ["d2d4"]), ("f,3", ["f2f3"])]
        self.assertEqual(self.m.match_many("e four", candidates), [("e2e4", 0.0), ("d2d4", 0.4)])

    def test_equivalent_words_share_a_value(self):
        self.assertEqual(self.m.match_many("e for", [("e,4", ["e2e4"])]), [("e2e4", 0.0)])
        self.assertEqual(self.m.match_many("night f three", [("N,f,3", ["g1f3"])]), [("g1f3", 0.0)])

    def test_unknown_words_are_ignored(self):
        self.assertEqual(self.m.match_many("um e four", [("e,4", ["e2e4"])]), [("e2e4", 0.0)])
        self.assertEqual(self.m.match_many("hmm", [("e,4", ["e2e4"])]), [])

    def test_output_keeps_its_cheapest_phrase(self):
        candidates = [("e,4", ["e2e4"]), ("P,e,4", ["e2e4"])]
        self.assertEqual(self.m.match_many("pawn e four", candidates), [("e2e4", 0.0)])

    def test_match_one_tags(self):
        self.assertEqual(self.m.match_one_tags("blue", ["color"]), ("blue", 0.0))
        self.assertEqual(self.m.match_one_tags("gray", ["color"]), ("grey", 0.0))
        self.assertEqual(self.m.match_one_tags("yes", ["choice"]), ("yes", 0.0))
        self.assertEqual(self.m.match_one_tags("cancel", ["command"]), ("stop", 0.0))
        self.assertIsNone(self.m.match_one_tags("knight", ["command"]))


if __name__ == "__main__":
    unittest.main()
