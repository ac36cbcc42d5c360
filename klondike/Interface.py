from klondike.Core import Core, GameEvent


class Interface:
    """
    Receives callbacks from a Core. The base class only keeps ``moveCount``,
    the number of player actions in the current game: automatic reveals are
    not counted and undoing an action takes it back.
    """

    def __init__(self):
        self.core: Core = None
        self.moveCount = 0

    def onStart(self):
        self.moveCount = 0

    def onEvent(self, event: GameEvent):
        """
        Invoked after an event is performed, automatic reveals included.
        """
        if not event.isAuto():
            self.moveCount += 1
        self.notifyRedraw()

    def onUndoEvent(self, event: GameEvent):
        if not event.isAuto():
            self.moveCount -= 1
        self.notifyRedraw()

    def notifyRedraw(self):
        pass

    def onWin(self):
        pass
