import argparse

from absl import logging

from advisor import settings_store
from advisor.engine import Advisor
from klondike.Card import Card
from klondike.Commands import performCommand
from klondike.Core import Core, GameConfig
from klondike.Interface import Interface


class CommandLineInterface(Interface):

    def __init__(self):
        super().__init__()
        self.quiet = False

    def printAll(self):
        core = self.core
        reserve = core.peekReserveTop()
        line = "## " + (reserve.gameStr() if reserve is not None else "   ") + "   "
        if core.isTurn3():
            line += " ".join(c.gameStr() for c in core.peekReserveTopThree()[1:])
        line += "    "
        for suit, rank in enumerate(core.foundations):
            line += (Card.fromSuitAndRank(suit, rank).gameStr() if rank > 0 else "[ ]") + " "
        print(line)
        print(f"Reserve: {core.reserveCount()}")
        print("--0----1----2----3----4----5----6---")
        i = 0
        while True:
            has = False
            line = ""
            for column in core.getColumns():
                if len(column) <= i:
                    line += "     "
                    continue
                has = True
                line += str(column[i].gameStr())
                line += "  "
            if not has:
                break
            print(line)
            i += 1
        print()

    def onStart(self):
        super().onStart()
        if not self.quiet:
            print("Game started!")

    def onWin(self):
        if not self.quiet:
            print("You win!")


class Session:
    """Bookkeeping for a run of games in one terminal session."""

    def __init__(self, config: GameConfig, maxMoves: int = 1000):
        self.config = config
        self.maxMoves = maxMoves
        self.turns = 0  # commands played in the current deal
        self.interface = CommandLineInterface()
        self.core = Core()
        self.core.registerInterface(self.interface)
        self.advisor = Advisor()
        self.wins = 0
        self.losses = 0
        self.totalMoves = 0
        self.winningMoves = 0

    def newGame(self):
        self.core.startGame(self.config)
        self.advisor.reset(self.core)
        self.turns = 0
        if self.config.seed is not None:
            self.config.seed += 1

    def recordReset(self):
        moves = self.interface.moveCount
        self.totalMoves += moves
        if all(rank == Card.NUM_PER_SUIT for rank in self.core.foundations):
            self.wins += 1
            self.winningMoves += moves
        else:
            self.losses += 1

    def autoCommand(self, suggested):
        """What auto mode plays next: the advice, or a new deal once the move limit is hit."""
        if self.turns >= self.maxMoves:
            logging.info("no result after %d moves, starting a new deal", self.turns)
            return "reset"
        return suggested

    def played(self):
        return self.wins + self.losses

    def statsLine(self):
        played = self.played()
        line = f"Moves: {self.interface.moveCount}"
        if played > 0:
            line = (f"Total Wins: {self.wins} | Total Losses: {self.losses} | "
                    f"Winrate: {self.wins / played * 100:.2f}%\n") + line
            line += f" | Moves per Game: {self.totalMoves / played:.2f}"
        if self.wins > 0:
            line += f" | Moves per Win: {self.winningMoves / self.wins:.2f}"
        return line


def _parse_args():
    parser = argparse.ArgumentParser(description="Play Klondike with a move advisor.")
    parser.add_argument("--turn3", action="store_true", help="Draw three cards per cycle.")
    parser.add_argument("--seed", type=int, default=None, help="Seed of the first deal.")
    parser.add_argument("--games", type=int, default=1000, help="How many games to play before quitting.")
    parser.add_argument("--config", type=str, default=None, help="Game config file (key=value lines).")
    parser.add_argument("--settings", type=str, default=None, help="Advisor settings ini file.")
    parser.add_argument("--max-moves", type=int, default=None, help="Per-deal move limit in auto mode.")
    parser.add_argument("--verbosity", type=int, default=None, help="absl logging verbosity.")
    return parser.parse_args()


def main():
    args = _parse_args()
    settings = settings_store.load_settings(args.settings)
    logging.set_verbosity(args.verbosity if args.verbosity is not None else int(settings["verbosity"]))

    config = GameConfig.loadFromFile(args.config) if args.config else GameConfig()
    if args.turn3 or settings_store.is_turn3(settings):
        config.turn3 = 1
    if args.seed is not None:
        config.seed = args.seed

    maxMoves = args.max_moves if args.max_moves is not None else int(settings["max_moves"])
    session = Session(config, maxMoves)
    session.advisor.policy = settings_store.policy_from_settings(settings)
    core = session.core
    session.newGame()
    session.interface.printAll()
    suggested = session.advisor.advise()
    print("Solver recommends: " + suggested)

    auto = False
    while session.played() < args.games:
        if auto:
            command = session.autoCommand(suggested)
        else:
            try:
                command = input("> ").strip()
            except EOFError:
                break
            if len(command) == 0:
                command = suggested
                print("[ " + command + " ]")
            if command.split(" ")[0] in ("auto", "warp"):
                print("\nWarp Speed activated...\n")
                session.interface.quiet = True
                auto = True
                command = session.autoCommand(suggested)

        verb = command.split(" ")[0]
        if verb == "exit":
            break
        if verb == "reset":
            session.recordReset()
            session.newGame()
            played = session.played()
            if auto and played % max(1, args.games // 10) == 0:
                print(f"{played} games played...")
        elif verb != "board":
            result = performCommand(core, command)
            if result.message and not auto:
                print(result.message)
            if not result.ok:
                if auto:
                    logging.warning("engine rejected %r, starting a new deal", command)
                    suggested = "reset"
                continue
            session.turns += 1

        suggested = session.advisor.advise()
        if not auto:
            session.interface.printAll()
            print(session.statsLine())
            print("Solver recommends: " + suggested)

    print("\n==========================================\n")
    print(session.statsLine())


if __name__ == '__main__':
    main()
