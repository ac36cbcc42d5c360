from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from absl import logging

from advisor.snapshot import Directive, Snapshot
from advisor.tracker import Knowledge
from klondike.Card import Card
from klondike.Core import STOCK_SIZE

ChainLink = tuple[Card, Card]


@dataclass(frozen=True, slots=True)
class AdvisorPolicy:
    # BoardToFoundation and ReserveToFoundation only bank a card at most one
    # rank above the lowest foundation; other promotions wait for the Any*
    # fallbacks at the end of the cascade. False banks any legal promotion early.
    conservative_foundations: bool = True


DEFAULT_POLICY = AdvisorPolicy()


def chain_links(start: Card, target: Card) -> Optional[tuple[ChainLink, ...]]:
    """
    The cards that could bridge ``start`` down to ``target`` (both exclusive)
    in an alternating-color descending run: one pair of same-color candidates
    per interior rank, highest rank first. None when no such run can exist.
    """
    delta = start.rank - target.rank
    color_bit = 0 if start.sameColor(target) else 1
    if delta < 1 or delta % 2 != color_bit:
        return None
    links = []
    black = not start.isBlack()
    for rank in range(start.rank - 1, target.rank, -1):
        links.append(Card.cardsOfColor(rank, black))
        black = not black
    return tuple(links)


def chain_exists(start: Card, target: Card, in_reserve: Iterable[Card]) -> bool:
    """True if cards known to be in the reserve can fill every link between ``start`` and ``target``."""
    links = chain_links(start, target)
    if links is None:
        return False
    reserve = set(in_reserve)
    return all(a in reserve or b in reserve for a, b in links)


def _pick_most_face_down(snapshot: Snapshot, columns: list[int], prefer_right: bool) -> int:
    best = max(snapshot.face_down(i) for i in columns)
    for i in sorted(columns, reverse=prefer_right):
        if snapshot.face_down(i) == best:
            return i
    raise AssertionError("unreachable")


def _bank_now(snapshot: Snapshot, card: Card, policy: AdvisorPolicy) -> bool:
    if not snapshot.can_bank(card):
        return False
    return not policy.conservative_foundations or card.rank <= snapshot.min_foundation_rank() + 1


def _targets_for(snapshot: Snapshot, card: Card) -> list[int]:
    """Non-empty columns whose accessible card can take ``card``, left to right."""
    targets = []
    for j in range(len(snapshot.columns)):
        top = snapshot.top(j)
        if top is not None and top.suitableAsBaseFor(card):
            targets.append(j)
    return targets


def _cards_str(cards) -> str:
    return " or ".join(str(c) for c in cards)


class Proposer:
    """One rule of the cascade. Returns a directive, or None when it does not apply."""

    name = "proposer"

    def propose(self, snapshot: Snapshot, knowledge: Knowledge, policy: AdvisorPolicy) -> Optional[Directive]:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}()"


class VictoryCheck(Proposer):
    name = "victory"

    def propose(self, snapshot, knowledge, policy):
        if snapshot.is_complete():
            return Directive.reset("deal complete")
        return None


class BoardToFoundation(Proposer):
    """Bank an accessible card, from the column hiding the most cards."""

    name = "board_to_foundation"

    def propose(self, snapshot, knowledge, policy):
        candidates = []
        for i in range(len(snapshot.columns)):
            top = snapshot.top(i)
            if top is not None and _bank_now(snapshot, top, policy):
                candidates.append(i)
        if not candidates:
            return None
        return Directive.btf(_pick_most_face_down(snapshot, candidates, prefer_right=True))


class ReserveToFoundation(Proposer):
    name = "reserve_to_foundation"

    def propose(self, snapshot, knowledge, policy):
        top = snapshot.reserve_top
        if top is not None and _bank_now(snapshot, top, policy):
            return Directive.stf()
        return None


class KingRelocation(Proposer):
    """Move a King that sits on face-down cards into the leftmost empty column."""

    name = "king_relocation"

    def propose(self, snapshot, knowledge, policy):
        empty = snapshot.empty_columns()
        if not empty:
            return None
        kings = []
        for i in range(len(snapshot.columns)):
            root = snapshot.root(i)
            if root is not None and root.rank == Card.NUM_PER_SUIT and snapshot.face_down(i) > 0:
                kings.append(i)
        if not kings:
            return None
        source = _pick_most_face_down(snapshot, kings, prefer_right=False)
        return Directive.move(source, min(empty))


class ChainMoveAndReveal(Proposer):
    """Move a whole face-up run onto another column's accessible card."""

    name = "chain_move"

    def propose(self, snapshot, knowledge, policy):
        destinations = {}
        for i in range(len(snapshot.columns)):
            root = snapshot.root(i)
            if root is None:
                continue
            for j in _targets_for(snapshot, root):
                if j != i:
                    destinations[i] = j
                    break
        if not destinations:
            return None
        source = _pick_most_face_down(snapshot, list(destinations), prefer_right=True)
        return Directive.move(source, destinations[source])


class ReserveKingToEmpty(Proposer):
    name = "reserve_king"

    def propose(self, snapshot, knowledge, policy):
        top = snapshot.reserve_top
        empty = snapshot.empty_columns()
        if top is not None and top.rank == Card.NUM_PER_SUIT and empty:
            return Directive.stb(min(empty))
        return None


class ReserveWithFollowUp(Proposer):
    """Place the reserve card only where something can go on it right away."""

    name = "reserve_follow_up"

    def propose(self, snapshot, knowledge, policy):
        card = snapshot.reserve_top
        if card is None:
            return None
        for j in _targets_for(snapshot, card):
            follower = self._follower(snapshot, card, j)
            if follower is not None:
                return Directive.stb(j, f"for {follower}")
        return None

    @staticmethod
    def _follower(snapshot: Snapshot, card: Card, target: int) -> Optional[Card]:
        for k in range(len(snapshot.columns)):
            if k == target:
                continue
            for upper in snapshot.face_up(k):
                if card.suitableAsBaseFor(upper):
                    return upper
        if snapshot.turn3 and len(snapshot.reserve) > 1 and card.suitableAsBaseFor(snapshot.reserve[1]):
            return snapshot.reserve[1]
        return None


class ReserveChainLink(Proposer):
    """Place the reserve card when known reserve cards can link it down to a visible root."""

    name = "reserve_chain_link"

    def propose(self, snapshot, knowledge, policy):
        card = snapshot.reserve_top
        if card is None:
            return None
        for j in _targets_for(snapshot, card):
            for k in range(len(snapshot.columns)):
                root = snapshot.root(k)
                if k == j or root is None or root.rank >= card.rank - 1:
                    continue
                if chain_exists(card, root, knowledge.in_reserve):
                    return Directive.stb(j, f"chain to {root}")
        return None


def _gap_pairs(snapshot: Snapshot):
    """(source, root, target column, accessible card) for every root that could reveal cards."""
    for i in range(len(snapshot.columns)):
        root = snapshot.root(i)
        if root is None or snapshot.face_down(i) == 0:
            continue
        for j in range(len(snapshot.columns)):
            top = snapshot.top(j)
            if j != i and top is not None:
                yield i, root, j, top


class CycleForFiller(Proposer):
    """A root two ranks below a same-colored card needs one unseen card in between."""

    name = "cycle_for_filler"

    def propose(self, snapshot, knowledge, policy):
        if knowledge.reserve_fully_seen:
            return None
        for _, root, _, top in _gap_pairs(snapshot):
            if top.rank != root.rank + 2 or not top.sameColor(root):
                continue
            wanted = [c for c in Card.cardsOfColor(root.rank + 1, not root.isBlack()) if c in knowledge.missing]
            if wanted:
                return Directive.cycle(f"looking for {_cards_str(wanted)}")
        return None


class CycleForChain(Proposer):
    """Like CycleForFiller, for longer chains with some links already known to be in the reserve."""

    name = "cycle_for_chain"

    def propose(self, snapshot, knowledge, policy):
        if knowledge.reserve_fully_seen:
            return None
        reserve = set(knowledge.in_reserve)
        for _, root, _, top in _gap_pairs(snapshot):
            if top.rank - root.rank < 3:
                continue
            links = chain_links(top, root)
            if links is None:
                continue
            wanted = []
            for pair in links:
                if pair[0] in reserve or pair[1] in reserve:
                    continue
                unseen = [c for c in pair if c in knowledge.missing]
                if not unseen:
                    wanted = []
                    break
                wanted.extend(unseen)
            if wanted:
                return Directive.cycle(f"chain {top}..{root} needs {_cards_str(wanted)}")
        return None


class CycleToLearn(Proposer):
    name = "cycle_to_learn"

    def propose(self, snapshot, knowledge, policy):
        if knowledge.reserve_fully_seen:
            return None
        return Directive.cycle(f"learning reserve, {knowledge.seen_reserve_count}/{STOCK_SIZE} seen")


class ReserveAnywhere(Proposer):
    name = "reserve_anywhere"

    def propose(self, snapshot, knowledge, policy):
        card = snapshot.reserve_top
        if card is None:
            return None
        targets = _targets_for(snapshot, card)
        if targets:
            return Directive.stb(targets[0])
        return None


class AnyBoardToFoundation(Proposer):
    """Bank the lowest accessible card that can go up at all."""

    name = "any_board_to_foundation"

    def propose(self, snapshot, knowledge, policy):
        best = None
        for i in range(len(snapshot.columns)):
            top = snapshot.top(i)
            if top is None or not snapshot.can_bank(top):
                continue
            key = (top.rank, -snapshot.face_down(i), -i)
            if best is None or key < best[0]:
                best = (key, i)
        if best is None:
            return None
        return Directive.btf(best[1])


class AnyReserveToFoundation(Proposer):
    name = "any_reserve_to_foundation"

    def propose(self, snapshot, knowledge, policy):
        top = snapshot.reserve_top
        if top is not None and snapshot.can_bank(top):
            return Directive.stf()
        return None


@dataclass(frozen=True)
class Cascade:
    """Proposers in priority order. The first one that fires decides the move."""

    proposers: tuple[Proposer, ...]

    def propose_move(
        self,
        snapshot: Snapshot,
        knowledge: Knowledge,
        policy: AdvisorPolicy = DEFAULT_POLICY,
    ) -> Optional[Directive]:
        for proposer in self.proposers:
            directive = proposer.propose(snapshot, knowledge, policy)
            if directive is not None:
                logging.vlog(1, "%s -> %s", proposer.name, directive)
                return directive
        logging.vlog(1, "no proposer fired")
        return None

    def names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.proposers)


DEFAULT_CASCADE = Cascade(
    (
        VictoryCheck(),
        BoardToFoundation(),
        ReserveToFoundation(),
        KingRelocation(),
        ChainMoveAndReveal(),
        ReserveKingToEmpty(),
        ReserveWithFollowUp(),
        ReserveChainLink(),
        CycleForFiller(),
        CycleForChain(),
        CycleToLearn(),
        ReserveAnywhere(),
        AnyBoardToFoundation(),
        AnyReserveToFoundation(),
    )
)
