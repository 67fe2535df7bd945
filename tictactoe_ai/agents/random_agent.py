"""
Random Agent for Tic-Tac-Toe.
"""
import random
from typing import Optional, TYPE_CHECKING
from tictactoe_ai.agents.agent import Agent

if TYPE_CHECKING:
    from tictactoe_ai.game.game import Game


class RandomAgent(Agent):
    """
    Agent that selects moves randomly from available legal moves.

    This serves as a baseline agent and can be used for testing.
    """

    def __init__(self, mark: str, rng: Optional[random.Random] = None):
        super().__init__(mark)
        self.rng = rng or random.Random()

    def select_move(self, game: 'Game') -> Optional[int]:
        legal_moves = game.get_legal_moves()
        if not legal_moves:
            return None
        return self.rng.choice(legal_moves)
