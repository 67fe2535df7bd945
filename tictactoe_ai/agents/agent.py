"""
Base Agent class for Tic-Tac-Toe.
"""
from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from tictactoe_ai.game.game import Game


class Agent(ABC):
    """
    Abstract base class for Tic-Tac-Toe agents.

    All agents must implement the select_move method to choose a move
    from the available legal moves.
    """

    def __init__(self, mark: str):
        """
        Initialize an agent.

        Args:
            mark: The mark ('X' or 'O') this agent plays
        """
        self.mark = mark

    @abstractmethod
    def select_move(self, game: 'Game') -> Optional[int]:
        """
        Select a move from the available legal moves.

        Args:
            game: The current game state

        Returns:
            A cell index 0-8, or None if no legal moves are available
        """
        pass

    def __repr__(self):
        return f"{type(self).__name__}(mark={self.mark!r})"
