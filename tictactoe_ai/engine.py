"""
Search API: pick an evaluator and depth for a difficulty and search.
"""
import random
from typing import Optional

from tictactoe_ai.evaluation.classical import classical_search_evaluate, get_classical_depth
from tictactoe_ai.evaluation.linear import (
    Evaluator, LinearEvaluator, NoisyEvaluator,
    basic_evaluate, advanced_evaluate, get_ml_config
)
from tictactoe_ai.evaluation.search import SearchResult, SearchStats, find_best_move
from tictactoe_ai.evaluation.weights import Weights
from tictactoe_ai.game.rules import Board
from tictactoe_ai.utils.constants import (
    CLASSICAL, ML, ML_BASIC, ML_ADVANCED, EVALUATION_TYPES, NORMAL
)


def build_evaluator(
    evaluation_type: str,
    difficulty: str = NORMAL,
    weights: Optional[Weights] = None,
    rng: Optional[random.Random] = None
) -> tuple:
    """
    Resolve an evaluation type and difficulty to (evaluator, depth).

    Raises:
        ValueError: for an unknown evaluation type
    """
    if evaluation_type == CLASSICAL:
        return classical_search_evaluate, get_classical_depth(difficulty)

    if evaluation_type == ML:
        base: Evaluator = LinearEvaluator(weights)
    elif evaluation_type == ML_BASIC:
        base = basic_evaluate
    elif evaluation_type == ML_ADVANCED:
        base = advanced_evaluate
    else:
        raise ValueError(
            f"Unknown evaluation type {evaluation_type!r}; expected one of {EVALUATION_TYPES}"
        )

    config = get_ml_config(difficulty)
    if config.noise_level > 0:
        return NoisyEvaluator(base, config.noise_level, rng), config.depth
    return base, config.depth


def analyze_position(
    board: Board,
    ai_mark: str,
    evaluation_type: str = CLASSICAL,
    difficulty: str = NORMAL,
    weights: Optional[Weights] = None,
    rng: Optional[random.Random] = None,
    stats: Optional[SearchStats] = None
) -> SearchResult:
    """
    Best move for `ai_mark` plus the ranked value of every legal move.

    Args:
        board: Position to analyze
        ai_mark: 'X' or 'O'
        evaluation_type: 'classical', 'ml', 'ml-basic' or 'ml-advanced'
        difficulty: 'easy', 'normal' or 'hard'
        weights: Linear weights for 'ml' (defaults when None)
        rng: Random source for evaluator noise
        stats: Optional search counters

    Raises:
        ValueError: for an unknown evaluation type
        NoLegalMoves: if the board is full
    """
    evaluator, depth = build_evaluator(evaluation_type, difficulty, weights, rng)
    return find_best_move(tuple(board), ai_mark, evaluator, depth, stats)
