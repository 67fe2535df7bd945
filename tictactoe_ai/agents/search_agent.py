"""
Search-based agents: alpha-beta over the classical or linear evaluator.
"""
import random
from typing import Optional, TYPE_CHECKING

from tictactoe_ai.agents.agent import Agent
from tictactoe_ai.engine import analyze_position
from tictactoe_ai.evaluation.search import SearchResult
from tictactoe_ai.evaluation.weights import Weights, DEFAULT_MODEL_WEIGHTS
from tictactoe_ai.utils.constants import CLASSICAL, ML, NORMAL

if TYPE_CHECKING:
    from tictactoe_ai.game.game import Game


class SearchAgent(Agent):
    """
    Agent that plays the best move found by alpha-beta search.

    The last SearchResult is kept on `last_result` so callers can show
    the ranked move list.
    """

    evaluation_type = CLASSICAL

    def __init__(self, mark: str, difficulty: str = NORMAL):
        """
        Args:
            mark: The mark ('X' or 'O') this agent plays
            difficulty: 'easy', 'normal' or 'hard'
        """
        super().__init__(mark)
        self.difficulty = difficulty
        self.last_result: Optional[SearchResult] = None

    def _analyze(self, game: 'Game') -> SearchResult:
        return analyze_position(game.board, self.mark, self.evaluation_type, self.difficulty)

    def select_move(self, game: 'Game') -> Optional[int]:
        if not game.get_legal_moves():
            return None
        self.last_result = self._analyze(game)
        return self.last_result.best_move

    def __repr__(self):
        return f"{type(self).__name__}(mark={self.mark!r}, difficulty={self.difficulty!r})"


class ClassicalAgent(SearchAgent):
    """Alpha-beta over the hand-tuned classical evaluator."""

    evaluation_type = CLASSICAL


class LinearAgent(SearchAgent):
    """
    Alpha-beta over the linear evaluator V(s) = b + w^T * φ(s).

    Below 'hard' the evaluator is wrapped in bounded noise, drawn from
    `rng` when given.
    """

    evaluation_type = ML

    def __init__(
        self,
        mark: str,
        difficulty: str = NORMAL,
        weights: Optional[Weights] = None,
        rng: Optional[random.Random] = None
    ):
        super().__init__(mark, difficulty)
        self.weights = weights if weights is not None else DEFAULT_MODEL_WEIGHTS
        self.rng = rng

    def _analyze(self, game: 'Game') -> SearchResult:
        return analyze_position(
            game.board, self.mark, self.evaluation_type, self.difficulty,
            weights=self.weights, rng=self.rng
        )

    def get_weights(self) -> Weights:
        return self.weights

    def set_weights(self, weights: Weights) -> None:
        self.weights = weights
