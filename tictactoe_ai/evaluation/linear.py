"""
Learned evaluation functions for Tic-Tac-Toe.

LinearEvaluator scores V(s) = b + w^T * φ(s) over the 6 dataset features,
the same features the trainer fits, so freshly trained weights drop
straight in. The basic and advanced evaluators work on the symmetric
per-player features instead.

All evaluators clamp non-terminal scores to [-90, 90] so they can never be
mistaken for a search terminal value (+/-(100 - depth)).
"""
import random
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from tictactoe_ai.evaluation.features import (
    extract_dataset_features, adjust_features_for_player, extract_player_features
)
from tictactoe_ai.evaluation.weights import (
    FEATURE_NAMES, DEFAULT_MODEL_WEIGHTS, BASIC_WEIGHTS, BASIC_BIAS, Weights
)
from tictactoe_ai.game.rules import Board, evaluate_outcome
from tictactoe_ai.utils.constants import (
    WIN, TERMINAL_SCORE, EVAL_CLAMP, ML_CONFIGS, NORMAL
)

Evaluator = Callable[[Board, str], float]


def clamp(score: float, limit: float = EVAL_CLAMP) -> float:
    return max(-limit, min(limit, score))


def _terminal_score(board: Board, player: str) -> Optional[float]:
    """+/-100 or 0 for finished games, None while the game is on."""
    outcome = evaluate_outcome(board)
    if not outcome.is_terminal:
        return None
    if outcome.status != WIN:
        return 0.0
    return float(TERMINAL_SCORE) if outcome.winner == player else -float(TERMINAL_SCORE)


def linear_evaluate(board: Board, player: str, weights: Weights = DEFAULT_MODEL_WEIGHTS) -> float:
    """
    Score `board` for `player` with an explicit weight set.

    Features are extracted X-relative and flipped for O (center read from
    the board), then combined as bias + sum(w_i * f_i) and clamped.
    """
    terminal = _terminal_score(board, player)
    if terminal is not None:
        return terminal
    features = adjust_features_for_player(extract_dataset_features(board), player, board)
    return clamp(weights.score(features))


class LinearEvaluator:
    """
    Callable linear evaluator bound to one immutable weight set.

    Usage:
        evaluator = LinearEvaluator(trained_weights)
        score = evaluator(board, 'O')

        # Swapping weights yields a new evaluator; searches holding the
        # old one keep using the old weights.
        evaluator = evaluator.with_weights(new_weights)
    """

    def __init__(self, weights: Optional[Weights] = None):
        self.weights = weights if weights is not None else DEFAULT_MODEL_WEIGHTS

    def __call__(self, board: Board, player: str) -> float:
        return linear_evaluate(board, player, self.weights)

    def with_weights(self, weights: Weights) -> 'LinearEvaluator':
        return LinearEvaluator(weights)

    def __repr__(self):
        return f"LinearEvaluator(bias={self.weights.bias:.3f}, weights={list(self.weights.coefficients)})"


def basic_evaluate(board: Board, player: str) -> float:
    """Linear score over the symmetric player features."""
    terminal = _terminal_score(board, player)
    if terminal is not None:
        return terminal

    features = extract_player_features(board, player)
    score = BASIC_BIAS
    for name, value in features._asdict().items():
        score += value * BASIC_WEIGHTS[name]
    return clamp(score)


def advanced_evaluate(board: Board, player: str) -> float:
    """Non-linear combination of the symmetric player features."""
    terminal = _terminal_score(board, player)
    if terminal is not None:
        return terminal

    f = extract_player_features(board, player)
    threat_difference = f.player_two_in_row - f.opponent_two_in_row
    control_difference = f.player_one_in_row - f.opponent_one_in_row
    position_advantage = f.center_control * 6 + (f.player_corners - f.opponent_corners) * 3

    # Interaction terms
    fork_potential = 20 if f.player_two_in_row > 1 else 0
    blocking_necessity = -25 if f.opponent_two_in_row > 1 else 0

    score = (
        threat_difference * 20
        + control_difference * 5
        + position_advantage
        + fork_potential
        + blocking_necessity
        + (f.player_marks - f.opponent_marks) * 2
    )
    return clamp(score)


class NoisyEvaluator:
    """
    Wraps an evaluator with bounded uniform noise to emulate a weaker player.

    The search only calls evaluators on non-terminal cutoff nodes, so the
    noise never touches a terminal value. The result is re-clamped to
    +/-90.
    """

    def __init__(self, evaluator: Evaluator, noise_level: float, rng: Optional[random.Random] = None):
        """
        Args:
            evaluator: Wrapped evaluation function
            noise_level: 0-1; noise is uniform in +/- noise_level * 20
            rng: Random source (module random if None)
        """
        if noise_level < 0:
            raise ValueError(f"noise_level must be >= 0, got {noise_level}")
        self.evaluator = evaluator
        self.noise_level = noise_level
        self.rng = rng or random.Random()

    def __call__(self, board: Board, player: str) -> float:
        score = self.evaluator(board, player)
        if self.noise_level == 0:
            return score
        amplitude = self.noise_level * 20
        return clamp(score + self.rng.uniform(-amplitude, amplitude))


@dataclass(frozen=True)
class MLConfig:
    """Search settings for the learned evaluators at one difficulty."""
    depth: int
    noise_level: float


def get_ml_config(difficulty: str) -> MLConfig:
    """Depth and noise for 'easy', 'normal' or 'hard'; unknown means normal."""
    depth, noise = ML_CONFIGS.get(difficulty, ML_CONFIGS[NORMAL])
    return MLConfig(depth=depth, noise_level=noise)


def explain_features(
    board: Board,
    player: str,
    weights: Weights = DEFAULT_MODEL_WEIGHTS
) -> Dict[str, object]:
    """
    Break a linear evaluation down into per-feature contributions.

    Returns:
        Dict with 'features' (name -> value), 'contributions'
        (name -> weight * value), 'bias' and 'score'
    """
    features = adjust_features_for_player(extract_dataset_features(board), player, board)
    contributions = {
        name: w * f for name, w, f in zip(FEATURE_NAMES, weights.coefficients, features)
    }
    return {
        'features': dict(zip(FEATURE_NAMES, features)),
        'contributions': contributions,
        'bias': weights.bias,
        'score': linear_evaluate(board, player, weights),
    }
