from __future__ import annotations

import enum
from dataclasses import dataclass

from absl import logging

from advisor.snapshot import Snapshot
from klondike.Card import ALL_CARDS, Card, FACE_DOWN
from klondike.Core import STOCK_SIZE


class CardStatus(enum.Enum):
    MISSING = "missing"
    IN_RESERVE = "in_reserve"
    IN_PLAY = "in_play"


@dataclass(frozen=True, slots=True)
class Knowledge:
    """Read-only view of the tracker handed to the proposers."""

    missing: frozenset[Card]
    in_reserve: tuple[Card, ...]  # oldest seen first
    in_play: frozenset[Card]
    seen_reserve_count: int

    @property
    def reserve_fully_seen(self) -> bool:
        return self.seen_reserve_count >= STOCK_SIZE


class KnowledgeTracker:
    """
    Reconstructs what is known about every card from repeated observation.

    One slot per card id holds its status, so missing / in reserve / in play
    always partition the deck. Reserve slots also keep the order in which the
    card was first seen. IN_PLAY is final for the rest of the deal.
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self._status: list[CardStatus] = [CardStatus.MISSING] * len(ALL_CARDS)
        self._arrival: list[int] = [-1] * len(ALL_CARDS)
        self._next_arrival = 0
        self.seen_reserve_count = 0

    def status(self, card: Card) -> CardStatus:
        return self._status[card.id]

    def update(self, snapshot: Snapshot) -> None:
        # Oldest exposed first so arrival order follows the draw order.
        for card in reversed(snapshot.reserve):
            if self.seen_reserve_count >= STOCK_SIZE:
                break
            if self._status[card.id] is CardStatus.MISSING:
                self._status[card.id] = CardStatus.IN_RESERVE
                self._arrival[card.id] = self._next_arrival
                self._next_arrival += 1
                self.seen_reserve_count += 1
                logging.vlog(2, "reserve card %s seen (%d/%d)", card, self.seen_reserve_count, STOCK_SIZE)

        for column in snapshot.columns:
            for item in column:
                if item is not FACE_DOWN:
                    self._mark_in_play(item)
        for card in snapshot.foundations:
            if card is not None:
                self._mark_in_play(card)

    def _mark_in_play(self, card: Card) -> None:
        if self._status[card.id] is not CardStatus.IN_PLAY:
            self._status[card.id] = CardStatus.IN_PLAY
            self._arrival[card.id] = -1

    @property
    def missing(self) -> frozenset[Card]:
        return frozenset(c for c in ALL_CARDS if self._status[c.id] is CardStatus.MISSING)

    @property
    def in_play(self) -> frozenset[Card]:
        return frozenset(c for c in ALL_CARDS if self._status[c.id] is CardStatus.IN_PLAY)

    @property
    def in_reserve(self) -> tuple[Card, ...]:
        cards = [c for c in ALL_CARDS if self._status[c.id] is CardStatus.IN_RESERVE]
        cards.sort(key=lambda c: self._arrival[c.id])
        return tuple(cards)

    def knowledge(self) -> Knowledge:
        return Knowledge(
            missing=self.missing,
            in_reserve=self.in_reserve,
            in_play=self.in_play,
            seen_reserve_count=self.seen_reserve_count,
        )
