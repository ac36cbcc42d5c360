from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

from klondike.Card import Card, FACE_DOWN
from klondike.Core import COLUMN_COUNT

Column = tuple  # FACE_DOWN markers followed by face-up Cards


class GameView(Protocol):
    """What the advisor reads from a game engine on every call."""

    def isTurn3(self) -> bool: ...

    def getColumns(self): ...

    def getFoundations(self): ...

    def peekReserveTop(self) -> Optional[Card]: ...

    def peekReserveTopThree(self): ...


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable observation of the table, built once per advisory call."""

    columns: tuple[Column, ...]
    # Top card per suit (spades, hearts, clubs, diamonds), None for an empty foundation.
    foundations: tuple[Optional[Card], ...]
    # Revealed waste cards, top to bottom. Only the first is playable.
    reserve: tuple[Card, ...] = ()
    turn3: bool = False

    @staticmethod
    def capture(game: GameView, turn3: bool) -> Snapshot:
        columns = tuple(tuple(column) for column in game.getColumns())
        foundations = tuple(game.getFoundations())
        if turn3:
            reserve = tuple(card for card in game.peekReserveTopThree() if card is not None)
        else:
            top = game.peekReserveTop()
            reserve = () if top is None else (top,)
        return Snapshot(columns=columns, foundations=foundations, reserve=reserve, turn3=turn3)

    @staticmethod
    def from_notation(
        columns: list[str],
        foundations: str = "",
        reserve: str = "",
        turn3: bool = False,
    ) -> Snapshot:
        """
        Builds a snapshot from text, e.g. ``columns=["## ## 7S 6H", "", "KD"]``,
        ``foundations="5S 2H"``, ``reserve="9C 4D"`` (top first). Missing columns
        are empty and missing suits have empty foundations.
        """
        parsed = []
        for text in columns:
            parsed.append(tuple(FACE_DOWN if token == "##" else Card.fromString(token) for token in text.split()))
        while len(parsed) < COLUMN_COUNT:
            parsed.append(())

        tops: list[Optional[Card]] = [None] * Card.SUIT_COUNT
        for token in foundations.split():
            card = Card.fromString(token)
            tops[card.suit] = card
        return Snapshot(
            columns=tuple(parsed),
            foundations=tuple(tops),
            reserve=tuple(Card.fromString(token) for token in reserve.split()),
            turn3=turn3,
        )

    @property
    def reserve_top(self) -> Optional[Card]:
        return self.reserve[0] if self.reserve else None

    def face_down(self, idx: int) -> int:
        count = 0
        for item in self.columns[idx]:
            if item is not FACE_DOWN:
                break
            count += 1
        return count

    def face_up(self, idx: int) -> tuple[Card, ...]:
        return self.columns[idx][self.face_down(idx):]

    def top(self, idx: int) -> Optional[Card]:
        """The accessible card of a column."""
        column = self.columns[idx]
        if not column or column[-1] is FACE_DOWN:
            return None
        return column[-1]

    def root(self, idx: int) -> Optional[Card]:
        """The lowest-revealed card, i.e. the base of the face-up run."""
        run = self.face_up(idx)
        return run[0] if run else None

    def is_empty(self, idx: int) -> bool:
        return len(self.columns[idx]) == 0

    def empty_columns(self) -> list[int]:
        return [i for i in range(len(self.columns)) if self.is_empty(i)]

    def foundation_rank(self, suit: int) -> int:
        card = self.foundations[suit]
        return 0 if card is None else card.rank

    def min_foundation_rank(self) -> int:
        return min(self.foundation_rank(suit) for suit in range(Card.SUIT_COUNT))

    def can_bank(self, card: Card) -> bool:
        return card.rank == self.foundation_rank(card.suit) + 1

    def is_complete(self) -> bool:
        return all(self.foundation_rank(suit) == Card.NUM_PER_SUIT for suit in range(Card.SUIT_COUNT))

    def visible_cards(self) -> list[Card]:
        """Every card the table shows face up, foundation tops included."""
        cards = [item for column in self.columns for item in column if item is not FACE_DOWN]
        cards.extend(card for card in self.foundations if card is not None)
        cards.extend(self.reserve)
        return cards

    def duplicates(self) -> set[Card]:
        seen: set[Card] = set()
        dup: set[Card] = set()
        for card in self.visible_cards():
            if card in seen:
                dup.add(card)
            seen.add(card)
        return dup


@dataclass(frozen=True, slots=True)
class Directive:
    """One recommended action, rendered as ``verb args (note)``."""

    verb: str
    args: tuple[int, ...] = ()
    note: str = field(default="", compare=False)

    def __str__(self) -> str:
        text = " ".join([self.verb, *(str(a) for a in self.args)])
        if self.note:
            text += f" ({self.note})"
        return text

    @staticmethod
    def parse(text: str) -> Directive:
        head, _, tail = text.partition("(")
        parts = head.split()
        if not parts:
            raise ValueError("empty directive")
        note = tail.rsplit(")", 1)[0].strip() if tail else ""
        return Directive(verb=parts[0], args=tuple(int(x) for x in parts[1:]), note=note)

    @staticmethod
    def cycle(note: str = "") -> Directive:
        return Directive("cycle", note=note)

    @staticmethod
    def reset(note: str = "") -> Directive:
        return Directive("reset", note=note)

    @staticmethod
    def stf() -> Directive:
        return Directive("stf")

    @staticmethod
    def btf(column: int) -> Directive:
        return Directive("btf", (column,))

    @staticmethod
    def stb(column: int, note: str = "") -> Directive:
        return Directive("stb", (column,), note)

    @staticmethod
    def move(start: int, end: int, offset: int = 0) -> Directive:
        if offset:
            return Directive("move", (start, end, offset))
        return Directive("move", (start, end))
