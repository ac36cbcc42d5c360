from dataclasses import dataclass

from klondike.Core import COLUMN_COUNT, Core

USAGE = {
    "btf": "btf <column>",
    "stb": "stb <column>",
    "ftb": "ftb <suit> <column>",
    "move": "move <start> <end> [offset=0]",
}


@dataclass(frozen=True)
class CommandResult:
    ok: bool
    message: str = ""


def parseCommand(text: str):
    """
    Splits a directive such as ``stb 3 (for 5H)`` into its verb and integer arguments.
    The parenthesised note is for humans only and is dropped.
    :raises ValueError: if an argument is not an integer
    """
    head = text.split("(", 1)[0].split()
    if len(head) == 0:
        return "", ()
    return head[0].lower(), tuple(int(x) for x in head[1:])


def _column(value, name="Column"):
    if not 0 <= value < COLUMN_COUNT:
        raise ValueError(f"{name} must be an integer between 0 and {COLUMN_COUNT - 1}.")
    return value


def performCommand(core: Core, text: str) -> CommandResult:
    """
    Performs one move command on ``core``. Bad input and illegal moves are
    reported in the result, never raised. ``reset`` is left to the caller.
    """
    try:
        verb, args = parseCommand(text)
    except ValueError:
        return CommandResult(False, "Arguments must be integers.")

    if verb in USAGE and len(args) < USAGE[verb].count("<"):
        return CommandResult(False, "Usage: " + USAGE[verb])

    try:
        if verb == "cycle":
            # cycling an exhausted reserve is a no-op, not an error
            if not core.askCycle():
                return CommandResult(True, "No card left in the stock.")
            return CommandResult(True)
        if verb == "stf":
            ok = core.askStockToFoundation()
        elif verb == "btf":
            ok = core.askBoardToFoundation(_column(args[0]))
        elif verb == "stb":
            ok = core.askStockToBoard(_column(args[0]))
        elif verb == "ftb":
            if not 0 <= args[0] < 4:
                raise ValueError("Suit must be an integer between 0 and 3.")
            ok = core.askFoundationToBoard(args[0], _column(args[1]))
        elif verb == "move":
            offset = args[2] if len(args) > 2 else 0
            if offset < 0:
                raise ValueError("Offset must be positive.")
            ok = core.askMove(_column(args[0], "Start column"), _column(args[1], "End column"), offset)
        elif verb == "undo":
            ok = core.askUndo()
            return CommandResult(ok, "" if ok else "Cannot undo!")
        elif verb == "redo":
            ok = core.askRedo()
            return CommandResult(ok, "" if ok else "Cannot redo!")
        else:
            return CommandResult(False, "Unknown command.")
    except ValueError as e:
        return CommandResult(False, str(e))

    return CommandResult(ok, "" if ok else "This action is not valid.")
