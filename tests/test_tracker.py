import unittest

from advisor.snapshot import Snapshot
from advisor.tracker import CardStatus, KnowledgeTracker
from klondike.Card import ALL_CARDS, Card


def c(text):
    return Card.fromString(text)


class KnowledgeTrackerTestCase(unittest.TestCase):
    def assertPartition(self, tracker):
        missing = tracker.missing
        reserve = set(tracker.in_reserve)
        in_play = tracker.in_play
        self.assertEqual(52, len(missing) + len(reserve) + len(in_play))
        self.assertEqual(set(ALL_CARDS), missing | reserve | in_play)
        self.assertFalse(missing & reserve or missing & in_play or reserve & in_play)

    def test_fresh_tracker_has_everything_missing(self):
        tracker = KnowledgeTracker()
        self.assertEqual(frozenset(ALL_CARDS), tracker.missing)
        self.assertEqual((), tracker.in_reserve)
        self.assertEqual(0, tracker.seen_reserve_count)
        self.assertPartition(tracker)

    def test_update_classifies_reserve_tableau_and_foundations(self):
        tracker = KnowledgeTracker()
        snapshot = Snapshot.from_notation(["## 7S 6H", "KD"], foundations="2C", reserve="9D")
        tracker.update(snapshot)
        self.assertEqual((c("9D"),), tracker.in_reserve)
        self.assertEqual(1, tracker.seen_reserve_count)
        self.assertEqual({c("7S"), c("6H"), c("KD"), c("2C")}, set(tracker.in_play))
        self.assertIs(CardStatus.MISSING, tracker.status(c("AC")))
        self.assertPartition(tracker)

    def test_reserve_order_follows_first_sighting(self):
        tracker = KnowledgeTracker()
        for top in ("4S", "JH", "2D"):
            tracker.update(Snapshot.from_notation([], reserve=top))
        tracker.update(Snapshot.from_notation([], reserve="4S"))
        self.assertEqual((c("4S"), c("JH"), c("2D")), tracker.in_reserve)
        self.assertEqual(3, tracker.seen_reserve_count)

    def test_triple_draw_records_bottom_card_first(self):
        tracker = KnowledgeTracker()
        tracker.update(Snapshot.from_notation([], reserve="3S 4S 5S", turn3=True))
        self.assertEqual((c("5S"), c("4S"), c("3S")), tracker.in_reserve)
        self.assertEqual(3, tracker.seen_reserve_count)

    def test_reserve_card_played_moves_to_in_play_for_good(self):
        tracker = KnowledgeTracker()
        tracker.update(Snapshot.from_notation(["8C"], reserve="7D"))
        tracker.update(Snapshot.from_notation(["8C 7D"], reserve="QS"))
        self.assertIs(CardStatus.IN_PLAY, tracker.status(c("7D")))
        self.assertEqual((c("QS"),), tracker.in_reserve)
        # a later snapshot showing it in the reserve again cannot pull it back
        tracker.update(Snapshot.from_notation([], reserve="7D"))
        self.assertIs(CardStatus.IN_PLAY, tracker.status(c("7D")))
        self.assertPartition(tracker)

    def test_in_play_only_grows(self):
        tracker = KnowledgeTracker()
        snapshots = [
            Snapshot.from_notation(["## ## 9H", "## 4C"], reserve="AS"),
            Snapshot.from_notation(["## 8S", "## 4C"], foundations="AS", reserve="2D"),
            Snapshot.from_notation(["5D", "## 4C 3H"], foundations="AS", reserve="TC"),
        ]
        previous = frozenset()
        for snapshot in snapshots:
            tracker.update(snapshot)
            self.assertTrue(previous <= tracker.in_play)
            previous = tracker.in_play
            self.assertPartition(tracker)

    def test_seen_count_saturates_at_reserve_size(self):
        tracker = KnowledgeTracker()
        for card in ALL_CARDS[:30]:
            tracker.update(Snapshot.from_notation([], reserve=card.notation()))
        self.assertEqual(24, tracker.seen_reserve_count)
        self.assertEqual(24, len(tracker.in_reserve))
        self.assertIs(CardStatus.MISSING, tracker.status(ALL_CARDS[29]))
        self.assertTrue(tracker.knowledge().reserve_fully_seen)

    def test_update_is_idempotent(self):
        tracker = KnowledgeTracker()
        snapshot = Snapshot.from_notation(["## 7S"], foundations="AH", reserve="KC 2S 3D", turn3=True)
        tracker.update(snapshot)
        first = tracker.knowledge()
        tracker.update(snapshot)
        self.assertEqual(first, tracker.knowledge())

    def test_reset_forgets_everything(self):
        tracker = KnowledgeTracker()
        tracker.update(Snapshot.from_notation(["7S"], reserve="9D"))
        tracker.reset()
        self.assertEqual(frozenset(ALL_CARDS), tracker.missing)
        self.assertEqual(0, tracker.seen_reserve_count)
        self.assertEqual(KnowledgeTracker().knowledge(), tracker.knowledge())
        # arrival order restarts too
        tracker.update(Snapshot.from_notation([], reserve="2C"))
        tracker.update(Snapshot.from_notation([], reserve="9D"))
        self.assertEqual((c("2C"), c("9D")), tracker.in_reserve)


if __name__ == "__main__":
    unittest.main()
