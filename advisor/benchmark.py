from __future__ import annotations

import argparse
import json
import time
from dataclasses import dataclass
from typing import Iterable

from absl import logging

from advisor import settings_store
from advisor.cascade import DEFAULT_POLICY, AdvisorPolicy
from advisor.engine import Advisor
from klondike.Commands import performCommand
from klondike.Core import Core, GameConfig
from klondike.Interface import Interface


@dataclass(slots=True)
class DealResult:
    seed: int
    turn3: bool
    # won, gave_up, move_limit or rejected
    status: str
    moves: int
    cycles: int
    banked: int
    elapsed_ms: float
    reason: str = ""

    @property
    def won(self) -> bool:
        return self.status == "won"

    def to_dict(self) -> dict:
        return {
            "seed": self.seed,
            "turn3": self.turn3,
            "status": self.status,
            "won": self.won,
            "moves": self.moves,
            "cycles": self.cycles,
            "banked": self.banked,
            "elapsed_ms": self.elapsed_ms,
            "reason": self.reason,
        }


def new_game(seed: int, turn3: bool = False) -> Core:
    config = GameConfig()
    config.seed = seed
    config.turn3 = 1 if turn3 else 0
    core = Core()
    core.registerInterface(Interface())
    core.startGame(config)
    return core


def play_deal(
    seed: int,
    turn3: bool = False,
    max_moves: int = 1000,
    policy: AdvisorPolicy = DEFAULT_POLICY,
) -> DealResult:
    """Let the advisor play one deal to the end without a human."""
    t0 = time.perf_counter()
    core = new_game(seed, turn3)
    advisor = Advisor(core, policy=policy)

    moves = 0
    cycles = 0
    status = "move_limit"
    reason = ""
    while moves < max_moves:
        directive = advisor.advise_directive()
        if directive.verb == "reset":
            status = "won" if core.gameEnded else "gave_up"
            reason = directive.note
            break
        result = performCommand(core, str(directive))
        if not result.ok:
            status = "rejected"
            reason = f"{directive}: {result.message}"
            logging.warning("seed %d: engine rejected %s (%s)", seed, directive, result.message)
            break
        moves += 1
        if directive.verb == "cycle":
            cycles += 1

    elapsed_ms = (time.perf_counter() - t0) * 1000.0
    logging.vlog(1, "seed %d finished: %s after %d moves", seed, status, moves)
    return DealResult(
        seed=seed,
        turn3=turn3,
        status=status,
        moves=moves,
        cycles=cycles,
        banked=sum(core.foundations),
        elapsed_ms=round(elapsed_ms, 3),
        reason=reason,
    )


def play_deals(
    seeds: Iterable[int],
    turn3: bool = False,
    max_moves: int = 1000,
    policy: AdvisorPolicy = DEFAULT_POLICY,
) -> list[DealResult]:
    return [play_deal(seed, turn3=turn3, max_moves=max_moves, policy=policy) for seed in seeds]


def summarize(results: list[DealResult]) -> dict:
    games = len(results)
    wins = [r for r in results if r.won]
    total_moves = sum(r.moves for r in results)
    return {
        "games": games,
        "wins": len(wins),
        "losses": games - len(wins),
        "win_rate": round(100.0 * len(wins) / games, 2) if games else 0.0,
        "moves_per_game": round(total_moves / games, 2) if games else 0.0,
        "moves_per_win": round(sum(r.moves for r in wins) / len(wins), 2) if wins else None,
        "statuses": {s: sum(1 for r in results if r.status == s) for s in sorted({r.status for r in results})},
    }


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Let the Klondike advisor play deals unattended.")
    parser.add_argument("--seed", type=int, action="append", help="Seed to play; can be repeated.")
    parser.add_argument("--start-seed", type=int, default=0, help="First seed when --seed is not given.")
    parser.add_argument("--count", type=int, default=100, help="How many seeds to play from --start-seed.")
    parser.add_argument("--turn3", action="store_true", help="Draw three cards per cycle.")
    parser.add_argument("--max-moves", type=int, default=None, help="Per-deal move limit.")
    parser.add_argument("--eager", action="store_true", help="Bank any card that can go up, not only the lowest ones.")
    parser.add_argument("--settings", type=str, default=None, help="Advisor settings ini file.")
    parser.add_argument("--verbosity", type=int, default=None, help="absl logging verbosity.")
    parser.add_argument("--details", action="store_true", help="Include every deal in the output.")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print json output.")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    settings = settings_store.load_settings(args.settings)
    logging.set_verbosity(args.verbosity if args.verbosity is not None else int(settings["verbosity"]))

    policy = settings_store.policy_from_settings(settings)
    if args.eager:
        policy = AdvisorPolicy(conservative_foundations=False)
    turn3 = args.turn3 or settings_store.is_turn3(settings)
    max_moves = args.max_moves if args.max_moves is not None else int(settings["max_moves"])
    seeds = args.seed if args.seed else range(args.start_seed, args.start_seed + args.count)

    results = play_deals(seeds, turn3=turn3, max_moves=max_moves, policy=policy)
    payload = {"summary": summarize(results)}
    if args.details:
        payload["deals"] = [r.to_dict() for r in results]

    if args.pretty:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(json.dumps(payload, ensure_ascii=False))


if __name__ == "__main__":
    main()
