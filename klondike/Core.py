import random

from absl import logging

from klondike.Card import Card, FACE_DOWN

COLUMN_COUNT = 7
STOCK_SIZE = 24
DECK_SIZE = Card.NUM_PER_SUIT * Card.SUIT_COUNT


class GameError(Exception):
    pass


def lastOf(lst):
    return lst[len(lst) - 1]


def decodeStack(code: str):
    """
    Decodes a stack written by ``encodeStack``.
    :return: a pair of (cards, number of face-down cards at the bottom)
    """
    code = code.strip()
    if code.startswith("empty"):
        return [], 0

    cards = []
    faceDown = 0
    for s in code.split(","):
        data = s.split()
        cards.append(Card(int(data[0])))
        if data[1] == "1":
            faceDown += 1
    return cards, faceDown


def encodeStack(cards: list, faceDown=0):
    if len(cards) == 0:
        return "empty"

    def encodeCard(i, card: Card):
        if i < faceDown:
            return f"{card.id} 1"
        return f"{card.id} 0"

    return ",".join(encodeCard(i, c) for i, c in enumerate(cards))


def decodeDeck(code: str):
    ids = [int(x) for x in code.replace(",", " ").split()]
    if sorted(ids) != list(range(DECK_SIZE)):
        raise ValueError("a deck code must list every card id exactly once")
    return [Card(i) for i in ids]


def encodeDeck(deck: list):
    return ",".join(str(card.id) for card in deck)


class GameConfig:
    def __init__(self):
        self.turn3 = 0
        self.seed = None
        # comma separated card ids, the last one is dealt first
        self.gameCode = None

    def isTurn3(self):
        return self.turn3 == 1

    def drawCount(self):
        return 3 if self.isTurn3() else 1

    @staticmethod
    def loadFromFile(path):
        config = GameConfig()
        try:
            with open(path, encoding="utf-8") as f:
                lines = f.readlines()
        except OSError as e:
            logging.warning("cannot read game config %s: %s", path, e)
            return config
        for l in lines:
            l = l.strip()
            if len(l) == 0 or l.startswith("#") or "=" not in l:
                continue
            (k, v) = l.split("=", 1)
            k = k.strip()
            v = v.strip()
            if v == "None":
                v = None
            else:
                try:
                    v = int(v)
                except ValueError:
                    pass
            config.__setattr__(k, v)
        return config

    def saveToFile(self, path):
        with open(path, "w+", encoding="utf-8") as f:
            for k, v in self.__dict__.items():
                f.write(f"{k}={str(v)}\n")

    def initDeck(self):
        if self.gameCode is not None:
            try:
                return decodeDeck(str(self.gameCode))
            except ValueError as e:
                logging.warning("ignoring invalid game code: %s", e)
        deck = [Card(i) for i in range(DECK_SIZE)]
        random.Random(self.seed).shuffle(deck)
        return deck


class GameEvent:
    def perform(self, core):
        pass

    def undo(self, core):
        pass

    def isAuto(self) -> bool:
        return False


class CycleStock(GameEvent):
    def __init__(self, drawCount: int, recycled: bool):
        self.drawCount = drawCount
        self.recycled = recycled

    def undo(self, core):
        core.undoCycle(self)

    def perform(self, core):
        core.doCycle(False)


class StockToFoundation(GameEvent):
    def __init__(self, card: Card):
        self.card = card

    def undo(self, core):
        core.undoStockToFoundation(self)

    def perform(self, core):
        core.doStockToFoundation(False)


class StockToBoard(GameEvent):
    def __init__(self, dest: int):
        self.dest = dest

    def undo(self, core):
        core.undoStockToBoard(self)

    def perform(self, core):
        core.doStockToBoard(self.dest, False)


class BoardToFoundation(GameEvent):
    def __init__(self, column: int, card: Card):
        self.column = column
        self.card = card

    def undo(self, core):
        core.undoBoardToFoundation(self)

    def perform(self, core):
        core.doBoardToFoundation(self.column, False)


class FoundationToBoard(GameEvent):
    def __init__(self, suit: int, dest: int):
        self.suit = suit
        self.dest = dest

    def undo(self, core):
        core.undoFoundationToBoard(self)

    def perform(self, core):
        core.doFoundationToBoard(self.suit, self.dest, False)


class CardMove(GameEvent):
    def __init__(self, src: (int, int), dest: (int, int)):
        self.src = src
        self.dest = dest

    def undo(self, core):
        core.undoMove(self)

    def perform(self, core):
        core.doMove(self.src, self.dest[0], False)


class RevealTop(GameEvent):
    def __init__(self, idx):
        self.idx = idx

    def undo(self, core):
        core.undoReveal(self)

    def perform(self, core):
        core.doReveal(self.idx, False)

    def isAuto(self):
        return True


class Core:
    """
    ask*** : should be called by the player, checks the rules first.
    do*** : actual operation, no doing other things.
    get***/peek*** : read-only observation of the table, used by the advisor.

    Stock and waste are lists with their top card last. ``faceDown[i]`` is the
    number of face-down cards at the bottom of column ``i``.
    """
    DEFAULT_CONFIG = GameConfig()

    def __init__(self):
        self.interface = None

        self.turn3 = False
        self.stock = None
        self.waste = None
        self.columns = None
        self.faceDown = None
        self.foundations = None  # highest rank banked per suit, 0 for empty
        self.gameEnded = None

        self.history: HistoryRecorder = None

    def registerInterface(self, interface):
        self.interface = interface
        interface.core = self

    def startGame(self, gameConfig: GameConfig = DEFAULT_CONFIG):
        if self.interface is None:
            raise GameError("no interface registered")
        self.turn3 = gameConfig.isTurn3()
        deck = gameConfig.initDeck()
        self.columns = [[] for _ in range(COLUMN_COUNT)]
        for i in range(COLUMN_COUNT):
            for _ in range(i + 1):
                self.columns[i].append(deck.pop())
        self.faceDown = list(range(COLUMN_COUNT))
        self.stock = deck
        self.waste = []
        self.foundations = [0] * Card.SUIT_COUNT

        self.history = HistoryRecorder(self)
        self.gameEnded = False
        logging.debug("dealt new game: seed=%s turn3=%s", gameConfig.seed, self.turn3)
        self.interface.onStart()

    def resumeGame(self):
        if self.interface is None:
            raise GameError("no interface registered")
        self.interface.onStart()

    def checkWin(self):
        for rank in self.foundations:
            if rank != Card.NUM_PER_SUIT:
                return False
        self.gameEnded = True
        self.interface.onWin()
        return True

    def drawCount(self):
        return 3 if self.turn3 else 1

    def reserveCount(self):
        return len(self.stock) + len(self.waste)

    # observation

    def isTurn3(self):
        return self.turn3

    def getColumns(self):
        return tuple(
            tuple([FACE_DOWN] * self.faceDown[i] + column[self.faceDown[i]:])
            for i, column in enumerate(self.columns)
        )

    def getFoundations(self):
        return tuple(
            Card.fromSuitAndRank(suit, rank) if rank > 0 else None
            for suit, rank in enumerate(self.foundations)
        )

    def peekReserveTop(self):
        if len(self.waste) == 0:
            return None
        return lastOf(self.waste)

    def peekReserveTopThree(self):
        """Up to three waste cards, top to bottom. Only the first one is playable."""
        return tuple(reversed(self.waste[-3:]))

    # rules

    def canBank(self, card: Card):
        return card.rank == self.foundations[card.suit] + 1

    def topOf(self, idx):
        """The face-up card at the end of column ``idx``, or None."""
        column = self.columns[idx]
        if len(column) == 0 or self.faceDown[idx] >= len(column):
            return None
        return lastOf(column)

    def canPlace(self, card: Card, dest: int):
        if dest < 0 or dest >= len(self.columns):
            return False
        if len(self.columns[dest]) == 0:
            return card.rank == Card.NUM_PER_SUIT
        top = self.topOf(dest)
        return top is not None and top.suitableAsBaseFor(card)

    def isValidSequence(self, src):
        """
        :param src: a pair of (index of column, index of the start of the run)
        """
        (s, idx) = src
        if s < 0 or s >= len(self.columns):
            return False
        column = self.columns[s]
        if idx < self.faceDown[s] or idx >= len(column):
            return False
        base = column[idx]
        for i in range(idx + 1, len(column)):
            upper = column[i]
            if not base.suitableAsBaseFor(upper):
                return False
            base = upper
        return True

    def canMove(self, start: int, end: int, offset=0):
        if start == end or end < 0 or end >= len(self.columns):
            return False
        if start < 0 or start >= len(self.columns) or offset < 0:
            return False
        src = (start, self.faceDown[start] + offset)
        if not self.isValidSequence(src):
            return False
        return self.canPlace(self.columns[start][src[1]], end)

    def askMove(self, start: int, end: int, offset=0) -> bool:
        if not self.canMove(start, end, offset):
            return False
        self.doMove((start, self.faceDown[start] + offset), end, True)
        self.doReveal(start, True)
        return True

    def askCycle(self) -> bool:
        return self.doCycle(True)

    def askStockToFoundation(self) -> bool:
        card = self.peekReserveTop()
        if card is None or not self.canBank(card):
            return False
        self.doStockToFoundation(True)
        self.checkWin()
        return True

    def askBoardToFoundation(self, column: int) -> bool:
        if column < 0 or column >= len(self.columns):
            return False
        card = self.topOf(column)
        if card is None or not self.canBank(card):
            return False
        self.doBoardToFoundation(column, True)
        self.doReveal(column, True)
        self.checkWin()
        return True

    def askStockToBoard(self, dest: int) -> bool:
        card = self.peekReserveTop()
        if card is None or not self.canPlace(card, dest):
            return False
        self.doStockToBoard(dest, True)
        return True

    def askFoundationToBoard(self, suit: int, dest: int) -> bool:
        if suit < 0 or suit >= Card.SUIT_COUNT or self.foundations[suit] == 0:
            return False
        card = Card.fromSuitAndRank(suit, self.foundations[suit])
        if not self.canPlace(card, dest):
            return False
        self.doFoundationToBoard(suit, dest, True)
        return True

    def askUndo(self):
        return self.history.undo()

    def askRedo(self):
        return self.history.redo()

    def _record(self, event, doLog):
        if doLog:
            self.history.log(event)
        self.interface.onEvent(event)

    def doCycle(self, doLog=True):
        stock = self.stock
        waste = self.waste
        recycled = False
        if len(stock) == 0:
            if len(waste) == 0:
                return False
            stock.extend(reversed(waste))
            waste.clear()
            recycled = True
        count = min(self.drawCount(), len(stock))
        for _ in range(count):
            waste.append(stock.pop())
        self._record(CycleStock(count, recycled), doLog)
        return True

    def doStockToFoundation(self, doLog=True):
        card = self.waste.pop()
        self.foundations[card.suit] = card.rank
        self._record(StockToFoundation(card), doLog)

    def doBoardToFoundation(self, column: int, doLog=True):
        card = self.columns[column].pop()
        self.foundations[card.suit] = card.rank
        self._record(BoardToFoundation(column, card), doLog)

    def doStockToBoard(self, dest: int, doLog=True):
        self.columns[dest].append(self.waste.pop())
        self._record(StockToBoard(dest), doLog)

    def doFoundationToBoard(self, suit: int, dest: int, doLog=True):
        card = Card.fromSuitAndRank(suit, self.foundations[suit])
        self.foundations[suit] -= 1
        self.columns[dest].append(card)
        self._record(FoundationToBoard(suit, dest), doLog)

    def doMove(self, src: (int, int), dest: int, doLog=True):
        columns = self.columns
        srcColumn = columns[src[0]]
        destColumn = columns[dest]
        destPair = (dest, len(destColumn))
        columns[src[0]] = srcColumn[:src[1]]
        destColumn.extend(srcColumn[src[1]:])
        self._record(CardMove(src, destPair), doLog)

    def doReveal(self, idx: int, doLog=True):
        if idx < 0 or idx >= len(self.columns):
            return False
        length = len(self.columns[idx])
        if length == 0 or self.faceDown[idx] < length:
            return False
        self.faceDown[idx] = length - 1
        self._record(RevealTop(idx), doLog)
        return True

    def undoCycle(self, event: CycleStock):
        for _ in range(event.drawCount):
            self.stock.append(self.waste.pop())
        if event.recycled:
            self.waste.extend(reversed(self.stock))
            self.stock.clear()
        self.interface.onUndoEvent(event)

    def undoStockToFoundation(self, event: StockToFoundation):
        self.foundations[event.card.suit] -= 1
        self.waste.append(event.card)
        self.interface.onUndoEvent(event)

    def undoBoardToFoundation(self, event: BoardToFoundation):
        self.columns[event.column].append(event.card)
        self.foundations[event.card.suit] -= 1
        self.interface.onUndoEvent(event)

    def undoStockToBoard(self, event: StockToBoard):
        self.waste.append(self.columns[event.dest].pop())
        self.interface.onUndoEvent(event)

    def undoFoundationToBoard(self, event: FoundationToBoard):
        self.columns[event.dest].pop()
        self.foundations[event.suit] += 1
        self.interface.onUndoEvent(event)

    def undoMove(self, event: CardMove):
        src = event.src
        dest = event.dest
        destColumn = self.columns[dest[0]]
        srcColumn = self.columns[src[0]]
        self.columns[dest[0]] = destColumn[:dest[1]]
        srcColumn.extend(destColumn[dest[1]:])
        self.interface.onUndoEvent(event)

    def undoReveal(self, event: RevealTop):
        self.faceDown[event.idx] += 1
        self.interface.onUndoEvent(event)

    def saveGameAsLines(self):
        lines = []
        lines.append("1" if self.turn3 else "0")
        lines.append(str(self.gameEnded))
        lines.append(" ".join(str(rank) for rank in self.foundations))
        lines.append(encodeStack(self.stock, len(self.stock)))
        lines.append(encodeStack(self.waste))
        for i, column in enumerate(self.columns):
            lines.append(encodeStack(column, self.faceDown[i]))
        return lines

    def loadGameFromLines(self, lines):
        def lineFilter(s: str):
            return not s.isspace() and not s.startswith("#")

        lines = list(filter(lineFilter, lines))
        self.turn3 = lines[0].strip() == "1"
        self.gameEnded = lines[1].strip() == "True"
        self.foundations = [int(x) for x in lines[2].split()]
        self.stock = decodeStack(lines[3])[0]
        self.waste = decodeStack(lines[4])[0]
        self.columns = []
        self.faceDown = []
        for line in lines[5:]:
            cards, faceDown = decodeStack(line)
            self.columns.append(cards)
            self.faceDown.append(faceDown)
        self.history = HistoryRecorder(self)


def saveGameToFile(core: Core, path):
    import time
    with open(path, "w+", encoding="utf-8") as f:
        dateInfo = "# date: " + time.strftime("%Y-%m-%d %H:%M:%S", time.localtime()) + "\n"
        f.write(dateInfo)
        f.writelines([x + "\n" for x in core.saveGameAsLines()])


def loadGameFromFile(path):
    with open(path, "r", encoding="utf-8") as f:
        lines = f.readlines()
        core = Core()
        core.loadGameFromLines(lines)
        return core


class HistoryRecorder:
    def __init__(self, core):
        self.core = core
        self.lst = []
        self.idx = 0  # idx - 1 is equal to the index of next operation to be undo

    def __preLog(self):
        if self.idx != len(self.lst):
            self.lst = self.lst[:self.idx]
        self.idx += 1

    def log(self, event):
        self.__preLog()
        self.lst.append(event)

    def undo(self):
        idx = self.idx - 1
        lst = self.lst
        if idx < 0 or idx >= len(lst):
            return False
        while idx >= 0:
            event = lst[idx]
            event.undo(self.core)
            if not event.isAuto():
                break
            idx -= 1
        self.idx = idx
        return True

    def redo(self):
        idx = self.idx
        lst = self.lst
        if idx < 0 or idx >= len(lst):
            return False
        has = False
        while idx < len(lst):
            event = lst[idx]
            if not event.isAuto():
                if has:
                    break
                has = True
            event.perform(self.core)
            idx += 1
        self.idx = idx
        return True
