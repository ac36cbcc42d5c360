import unittest

from klondike.CommandLine import Session
from klondike.Core import GameConfig


class SessionTestCase(unittest.TestCase):
    def make_session(self, maxMoves):
        config = GameConfig()
        config.seed = 4
        session = Session(config, maxMoves)
        session.interface.quiet = True
        session.newGame()
        return session

    def test_auto_mode_follows_advice_under_the_limit(self):
        session = self.make_session(maxMoves=3)
        session.turns = 2
        self.assertEqual("cycle", session.autoCommand("cycle"))

    def test_auto_mode_resets_at_the_move_limit(self):
        session = self.make_session(maxMoves=3)
        session.turns = 3
        self.assertEqual("reset", session.autoCommand("cycle"))

    def test_new_game_clears_the_turn_count(self):
        session = self.make_session(maxMoves=3)
        session.turns = 3
        session.recordReset()
        session.newGame()
        self.assertEqual(0, session.turns)
        self.assertEqual(1, session.losses)
        self.assertEqual(6, session.config.seed)


if __name__ == "__main__":
    unittest.main()
