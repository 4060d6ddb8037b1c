"""Exception types raised by the opponent engine."""


class OpponentError(Exception):
    """Base class for errors raised by the opponent package."""


class IllegalMoveError(OpponentError, ValueError):
    """Raised when the rules adapter rejects a move for the current position."""

    def __init__(self, move, fen):
        super().__init__(f"Illegal move {move} in position {fen}")
        self.move = move
        self.fen = fen


class BoardMutationError(OpponentError, RuntimeError):
    """Raised when a scoring pass leaves its board different from how it found it."""
