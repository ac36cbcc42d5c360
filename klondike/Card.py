from dataclasses import dataclass

SPADES = 0
HEARTS = 1
CLUBS = 2
DIAMONDS = 3


@dataclass(frozen=True)
class Card:
    """
    A card of the 52-card deck, identified by ``id``.
    suit = id // 13 (spades, hearts, clubs, diamonds), rank = id % 13 + 1.
    """
    id: int

    NUM_PER_SUIT = 13
    SUIT_COUNT = 4
    SUITS = "♠♥♣♦"
    SUIT_LETTERS = "SHCD"
    RANK_LETTERS = "A23456789TJQK"
    NUMS = ("A ", "2 ", "3 ", "4 ", "5 ", "6 ", "7 ", "8 ", "9 ", "10", "J ", "Q ", "K ")

    def __post_init__(self):
        if not 0 <= self.id < Card.NUM_PER_SUIT * Card.SUIT_COUNT:
            raise ValueError(f"card id out of range: {self.id}")

    @property
    def suit(self) -> int:
        return self.id // Card.NUM_PER_SUIT

    @property
    def rank(self) -> int:
        return self.id % Card.NUM_PER_SUIT + 1

    def isBlack(self) -> bool:
        return self.suit % 2 == 0

    def color(self):
        if self.isBlack():
            return "black"
        else:
            return "red"

    def sameColor(self, other) -> bool:
        return self.isBlack() == other.isBlack()

    def suitableAsBaseFor(self, upper):
        """True if ``upper`` may be stacked on this card in the tableau."""
        return self.rank == upper.rank + 1 and not self.sameColor(upper)

    def notation(self) -> str:
        return Card.RANK_LETTERS[self.rank - 1] + Card.SUIT_LETTERS[self.suit]

    def gameStr(self):
        return Card.SUITS[self.suit] + Card.NUMS[self.rank - 1]

    def __str__(self):
        return self.notation()

    def __repr__(self):
        return f"Card({self.notation()})"

    @staticmethod
    def fromSuitAndRank(suit, rank):
        if not 1 <= rank <= Card.NUM_PER_SUIT:
            raise ValueError(f"rank must be between 1 and 13, got {rank}")
        if not 0 <= suit < Card.SUIT_COUNT:
            raise ValueError(f"suit must be between 0 and 3, got {suit}")
        return Card(suit * Card.NUM_PER_SUIT + rank - 1)

    @staticmethod
    def fromString(text: str):
        """
        Parses notation such as ``7S``, ``TH``, ``10h`` or ``Q♦``.
        :raises ValueError: if the text is not a card
        """
        s = text.strip().upper()
        if len(s) < 2:
            raise ValueError(f"not a card: {text!r}")
        rankPart, suitPart = s[:-1], s[-1]
        if rankPart == "10":
            rankPart = "T"
        if len(rankPart) != 1 or rankPart not in Card.RANK_LETTERS:
            raise ValueError(f"bad rank in {text!r}")
        if suitPart in Card.SUIT_LETTERS:
            suit = Card.SUIT_LETTERS.index(suitPart)
        elif suitPart in Card.SUITS:
            suit = Card.SUITS.index(suitPart)
        else:
            raise ValueError(f"bad suit in {text!r}")
        return Card.fromSuitAndRank(suit, Card.RANK_LETTERS.index(rankPart) + 1)

    @staticmethod
    def cardsOfColor(rank, black):
        """The two cards of ``rank`` in the given color, lower suit first."""
        first = SPADES if black else HEARTS
        return (Card.fromSuitAndRank(first, rank), Card.fromSuitAndRank(first + 2, rank))


class FaceDown:
    """Placeholder for a card that is on the board but not yet turned up."""

    def __str__(self):
        return "##"

    def __repr__(self):
        return "FACE_DOWN"

    def gameStr(self):
        return "---"


FACE_DOWN = FaceDown()

ALL_CARDS = tuple(Card(i) for i in range(Card.NUM_PER_SUIT * Card.SUIT_COUNT))
