import unittest

from klondike.Card import ALL_CARDS, CLUBS, DIAMONDS, HEARTS, SPADES, Card


class CardTestCase(unittest.TestCase):
    def test_rank_and_suit_come_from_id(self):
        card = Card.fromSuitAndRank(CLUBS, 12)
        self.assertEqual(CLUBS * 13 + 11, card.id)
        self.assertEqual(12, card.rank)
        self.assertEqual(CLUBS, card.suit)
        self.assertEqual("QC", card.notation())

    def test_colors(self):
        self.assertEqual("black", Card.fromSuitAndRank(SPADES, 1).color())
        self.assertEqual("black", Card.fromSuitAndRank(CLUBS, 1).color())
        self.assertEqual("red", Card.fromSuitAndRank(HEARTS, 1).color())
        self.assertEqual("red", Card.fromSuitAndRank(DIAMONDS, 1).color())

    def test_parse_accepts_several_spellings(self):
        ten = Card.fromSuitAndRank(HEARTS, 10)
        self.assertEqual(ten, Card.fromString("TH"))
        self.assertEqual(ten, Card.fromString("10h"))
        self.assertEqual(ten, Card.fromString("10♥"))
        self.assertEqual(Card.fromSuitAndRank(DIAMONDS, 13), Card.fromString(" K♦ "))

    def test_parse_rejects_garbage(self):
        for text in ("", "X", "1S", "11S", "7X", "ZZ"):
            with self.assertRaises(ValueError, msg=text):
                Card.fromString(text)

    def test_bad_values_raise(self):
        with self.assertRaises(ValueError):
            Card(52)
        with self.assertRaises(ValueError):
            Card.fromSuitAndRank(SPADES, 0)

    def test_notation_round_trips_whole_deck(self):
        self.assertEqual(52, len(set(ALL_CARDS)))
        for card in ALL_CARDS:
            self.assertEqual(card, Card.fromString(card.notation()))

    def test_tableau_stacking_rule(self):
        self.assertTrue(Card.fromString("8S").suitableAsBaseFor(Card.fromString("7H")))
        self.assertFalse(Card.fromString("8S").suitableAsBaseFor(Card.fromString("7C")))
        self.assertFalse(Card.fromString("8S").suitableAsBaseFor(Card.fromString("6H")))

    def test_cards_of_color(self):
        self.assertEqual((Card.fromString("5S"), Card.fromString("5C")), Card.cardsOfColor(5, True))
        self.assertEqual((Card.fromString("5H"), Card.fromString("5D")), Card.cardsOfColor(5, False))

    def test_cards_are_immutable_values(self):
        card = Card.fromString("AS")
        with self.assertRaises(AttributeError):
            card.id = 3
        self.assertEqual(card, Card(0))
        self.assertEqual(1, len({card, Card(0)}))


if __name__ == "__main__":
    unittest.main()
