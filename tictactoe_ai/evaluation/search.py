"""
Depth-limited minimax search with alpha-beta pruning.

The search maximizes for the AI mark and minimizes for its opponent. It is
generic over an evaluator callable `evaluator(board, ai_mark) -> float`,
which is only consulted at non-terminal nodes on the depth cutoff.

Scoring:
    - AI win:   100 - depth   (prefer faster wins)
    - AI loss:  depth - 100   (prefer slower losses)
    - Draw:     0
    - Cutoff:   evaluator(board, ai_mark)

Each root move is searched with a fresh (-inf, +inf) window, so the value
reported for every root move is exact, not a pruning bound.
"""
import math
from dataclasses import dataclass, field
from typing import Callable, List, NamedTuple, Optional

from tictactoe_ai.exceptions import NoLegalMoves
from tictactoe_ai.game.rules import Board, legal_moves, apply_move, evaluate_outcome, opponent
from tictactoe_ai.utils.constants import WIN, TERMINAL_SCORE

Evaluator = Callable[[Board, str], float]


class MoveEvaluation(NamedTuple):
    """Search value of one root move."""
    move: int
    value: float


@dataclass
class SearchResult:
    """Best move plus every root move's value, ranked best first."""
    best_move: int
    best_value: float
    move_evaluations: List[MoveEvaluation] = field(default_factory=list)

    def __repr__(self):
        return f"SearchResult(best_move={self.best_move}, best_value={self.best_value})"


@dataclass
class SearchStats:
    """Node and cutoff counters, filled in when passed to a search."""
    nodes: int = 0
    cutoffs: int = 0
    evaluations: int = 0


def _terminal_value(board: Board, depth: int, ai_mark: str) -> Optional[float]:
    outcome = evaluate_outcome(board)
    if not outcome.is_terminal:
        return None
    if outcome.status != WIN:
        return 0
    if outcome.winner == ai_mark:
        return TERMINAL_SCORE - depth
    return depth - TERMINAL_SCORE


def alpha_beta(
    board: Board,
    depth: int,
    alpha: float,
    beta: float,
    maximizing: bool,
    ai_mark: str,
    evaluator: Evaluator,
    max_depth: int,
    stats: Optional[SearchStats] = None
) -> float:
    """
    Alpha-beta minimax value of `board`.

    Args:
        board: Position to score
        depth: Plies below the root move (the root move's board is depth 0)
        alpha: Best value the maximizer can already guarantee
        beta: Best value the minimizer can already guarantee
        maximizing: True when `ai_mark` is to move
        ai_mark: The searching side
        evaluator: Static evaluation for non-terminal cutoff nodes
        max_depth: Depth at which the evaluator replaces further search
        stats: Optional counters

    Returns:
        Minimax value from `ai_mark`'s perspective
    """
    if stats is not None:
        stats.nodes += 1

    terminal = _terminal_value(board, depth, ai_mark)
    if terminal is not None:
        return terminal

    if depth >= max_depth:
        if stats is not None:
            stats.evaluations += 1
        return evaluator(board, ai_mark)

    if maximizing:
        best = -math.inf
        for move in legal_moves(board):
            child = apply_move(board, move, ai_mark)
            value = alpha_beta(child, depth + 1, alpha, beta, False,
                               ai_mark, evaluator, max_depth, stats)
            best = max(best, value)
            alpha = max(alpha, value)
            if beta <= alpha:
                if stats is not None:
                    stats.cutoffs += 1
                break
        return best

    best = math.inf
    opp = opponent(ai_mark)
    for move in legal_moves(board):
        child = apply_move(board, move, opp)
        value = alpha_beta(child, depth + 1, alpha, beta, True,
                           ai_mark, evaluator, max_depth, stats)
        best = min(best, value)
        beta = min(beta, value)
        if beta <= alpha:
            if stats is not None:
                stats.cutoffs += 1
            break
    return best


def minimax(
    board: Board,
    depth: int,
    maximizing: bool,
    ai_mark: str,
    evaluator: Evaluator,
    max_depth: int
) -> float:
    """Plain minimax with the same scoring as alpha_beta but no pruning."""
    terminal = _terminal_value(board, depth, ai_mark)
    if terminal is not None:
        return terminal
    if depth >= max_depth:
        return evaluator(board, ai_mark)

    mover = ai_mark if maximizing else opponent(ai_mark)
    values = [
        minimax(apply_move(board, move, mover), depth + 1, not maximizing,
                ai_mark, evaluator, max_depth)
        for move in legal_moves(board)
    ]
    return max(values) if maximizing else min(values)


def get_all_move_evaluations(
    board: Board,
    ai_mark: str,
    evaluator: Evaluator,
    max_depth: int,
    stats: Optional[SearchStats] = None
) -> List[MoveEvaluation]:
    """
    Value of every legal move for `ai_mark`, in ascending move order.

    Raises:
        NoLegalMoves: if the board is full
    """
    moves = legal_moves(board)
    if not moves:
        raise NoLegalMoves("No legal moves: the board is full")

    evaluations = []
    for move in moves:
        child = apply_move(board, move, ai_mark)
        value = alpha_beta(child, 0, -math.inf, math.inf, False,
                           ai_mark, evaluator, max_depth, stats)
        evaluations.append(MoveEvaluation(move, value))
    return evaluations


def find_best_move(
    board: Board,
    ai_mark: str,
    evaluator: Evaluator,
    max_depth: int,
    stats: Optional[SearchStats] = None
) -> SearchResult:
    """
    Find the best move for `ai_mark`.

    Ties go to the lowest move index: a later move must be strictly better
    to replace the running best.

    Returns:
        SearchResult with best move, its value and all root move values
        sorted descending (equal values keep ascending move order)

    Raises:
        NoLegalMoves: if the board is full
    """
    evaluations = get_all_move_evaluations(board, ai_mark, evaluator, max_depth, stats)

    best_move, best_value = None, -math.inf
    for move, value in evaluations:
        if best_move is None or value > best_value:
            best_move, best_value = move, value

    ranked = sorted(evaluations, key=lambda e: e.value, reverse=True)
    return SearchResult(best_move=best_move, best_value=best_value, move_evaluations=ranked)
