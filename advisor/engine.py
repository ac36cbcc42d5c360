from __future__ import annotations

import enum
from typing import Optional

from absl import logging

from advisor.cascade import DEFAULT_CASCADE, DEFAULT_POLICY, AdvisorPolicy, Cascade
from advisor.snapshot import Directive, GameView, Snapshot
from advisor.tracker import KnowledgeTracker
from klondike.Card import Card


class AdvisorError(Exception):
    pass


class AdvisorNotBoundError(AdvisorError):
    pass


class SolverProgress(enum.Enum):
    NORMAL = "normal"
    STUMPED = "stumped"
    GAVE_UP = "gave_up"


class StallDetector:
    """
    Turns "no proposer fired" into a cycle request, or into a restart once the
    reserve has gone all the way round without anything to do.

    ``cycle_anchor`` is the reserve top when the stall began. Every top seen
    since then is kept in ``visited_tops``: the table does not change while
    stumped, so the first top to come back (the anchor itself in single draw)
    means the rotation has closed. Tops that never return, such as an empty
    waste that the engine refills on the next draw, cannot stall the machine.
    """

    def __init__(self):
        self.state = SolverProgress.NORMAL
        self.cycle_anchor: Optional[Card] = None
        self.visited_tops: set = set()

    def reset(self) -> None:
        self.state = SolverProgress.NORMAL
        self.cycle_anchor = None
        self.visited_tops.clear()

    @property
    def anchored(self) -> bool:
        return self.state is not SolverProgress.NORMAL

    def step(self, proposal: Optional[Directive], reserve_top: Optional[Card]) -> Directive:
        if proposal is not None:
            self.reset()
            return proposal

        if self.state is SolverProgress.GAVE_UP:
            return Directive.reset("gave up")

        if reserve_top in self.visited_tops:
            self.state = SolverProgress.GAVE_UP
            logging.info("reserve cycled back to %s with nothing to do, giving up", reserve_top or "empty")
            return Directive.reset("gave up")

        if not self.anchored:
            self.cycle_anchor = reserve_top
        self.visited_tops.add(reserve_top)
        self.state = SolverProgress.STUMPED
        return Directive.cycle("stumped")


class Advisor:
    """
    Recommends one move per call for the game it is bound to.

    Not safe for concurrent use. Bind one advisor per game being advised.
    """

    def __init__(
        self,
        game: Optional[GameView] = None,
        policy: AdvisorPolicy = DEFAULT_POLICY,
        cascade: Cascade = DEFAULT_CASCADE,
    ):
        self.policy = policy
        self.cascade = cascade
        self.tracker = KnowledgeTracker()
        self.stall = StallDetector()
        self.game: Optional[GameView] = None
        self.turn3 = False
        if game is not None:
            self.bind(game)

    def bind(self, game: GameView) -> None:
        self.game = game
        self.turn3 = bool(game.isTurn3())
        self.tracker.reset()
        self.stall.reset()

    def reset(self, game: Optional[GameView] = None) -> None:
        """Forget everything learned; call after every new deal."""
        if game is None:
            game = self._require_game()
        self.bind(game)

    @property
    def progress(self) -> SolverProgress:
        return self.stall.state

    def _require_game(self) -> GameView:
        if self.game is None:
            raise AdvisorNotBoundError("advisor is not bound to a game")
        return self.game

    def _observe(self) -> Snapshot:
        snapshot = Snapshot.capture(self._require_game(), self.turn3)
        dup = snapshot.duplicates()
        if dup:
            logging.warning("malformed snapshot, cards seen twice: %s", " ".join(sorted(str(c) for c in dup)))
        self.tracker.update(snapshot)
        return snapshot

    def propose_move(self) -> Optional[Directive]:
        """Observe and run the cascade, leaving the stall state untouched."""
        snapshot = self._observe()
        return self.cascade.propose_move(snapshot, self.tracker.knowledge(), self.policy)

    def advise_directive(self) -> Directive:
        snapshot = self._observe()
        proposal = self.cascade.propose_move(snapshot, self.tracker.knowledge(), self.policy)
        directive = self.stall.step(proposal, snapshot.reserve_top)
        if directive.verb == "reset":
            logging.info("advising reset: %s", directive.note)
        return directive

    def advise(self) -> str:
        return str(self.advise_directive())
