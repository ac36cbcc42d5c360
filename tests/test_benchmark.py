import unittest

from advisor.benchmark import DealResult, new_game, play_deal, play_deals, summarize


class BenchmarkTestCase(unittest.TestCase):
    def test_new_game_is_seeded(self):
        self.assertEqual(new_game(5).saveGameAsLines(), new_game(5).saveGameAsLines())
        self.assertTrue(new_game(5, turn3=True).isTurn3())

    def test_play_deal_finishes_without_rejection(self):
        for result in play_deals(range(3), max_moves=3000):
            self.assertIn(result.status, ("won", "gave_up"))
            self.assertLess(result.moves, 3000)
            self.assertLessEqual(result.cycles, result.moves)
            self.assertGreaterEqual(result.banked, 0)

    def test_move_limit_is_respected(self):
        result = play_deal(1, max_moves=3)
        self.assertEqual(3, result.moves)
        self.assertEqual("move_limit", result.status)
        self.assertFalse(result.won)

    def test_play_deal_is_deterministic(self):
        first = play_deal(9, turn3=True, max_moves=200)
        second = play_deal(9, turn3=True, max_moves=200)
        self.assertEqual((first.status, first.moves, first.banked), (second.status, second.moves, second.banked))

    def test_summarize(self):
        results = [
            DealResult(seed=1, turn3=False, status="won", moves=120, cycles=30, banked=52, elapsed_ms=4.0),
            DealResult(seed=2, turn3=False, status="gave_up", moves=80, cycles=50, banked=9, elapsed_ms=3.0),
            DealResult(seed=3, turn3=False, status="gave_up", moves=40, cycles=20, banked=4, elapsed_ms=1.0),
        ]
        summary = summarize(results)
        self.assertEqual(3, summary["games"])
        self.assertEqual(1, summary["wins"])
        self.assertEqual(2, summary["losses"])
        self.assertEqual(33.33, summary["win_rate"])
        self.assertEqual(80.0, summary["moves_per_game"])
        self.assertEqual(120.0, summary["moves_per_win"])
        self.assertEqual({"gave_up": 2, "won": 1}, summary["statuses"])
        self.assertTrue(results[0].to_dict()["won"])

    def test_summarize_nothing(self):
        summary = summarize([])
        self.assertEqual(0, summary["games"])
        self.assertIsNone(summary["moves_per_win"])


if __name__ == "__main__":
    unittest.main()
