"""
Exceptions raised by the Tic-Tac-Toe engine.

All of them derive from ValueError so callers that only guard against bad
input keep working.
"""


class TicTacToeError(ValueError):
    """Base class for engine errors."""


class InvalidMove(TicTacToeError):
    """A move targets an occupied cell, an index off the board, or the wrong turn."""

    def __init__(self, move, reason: str = "cell is occupied"):
        self.move = move
        self.reason = reason
        super().__init__(f"Invalid move {move!r}: {reason}")


class NoLegalMoves(TicTacToeError):
    """Search was asked for a move on a board with no empty cells."""


class DatasetError(TicTacToeError):
    """A dataset could not be read or contains no usable rows."""


class InvalidGameRecord(TicTacToeError):
    """A finished game whose board, winner and move count don't agree."""
