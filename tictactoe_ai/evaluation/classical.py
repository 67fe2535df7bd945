"""
Classical heuristic evaluation for Tic-Tac-Toe.

Scores a position the way a careful human would read it:
    1. Win immediately if possible
    2. Block the opponent's immediate win
    3. Create forks (multiple winning threats)
    4. Control the center
    5. Control corners
    6. Build towards winning lines
    7. Edges last
"""
from tictactoe_ai.evaluation.features import extract_player_features, line_counts
from tictactoe_ai.evaluation.weights import CLASSICAL_WEIGHTS
from tictactoe_ai.game.rules import Board, evaluate_outcome, opponent
from tictactoe_ai.utils.constants import (
    CENTER, EDGES, OPPOSITE_CORNERS, WIN_LINES, WIN, EMPTY,
    CLASSICAL_DEPTHS, DEFAULT_CLASSICAL_DEPTH, CLASSICAL_SEARCH_SCALE, EVAL_CLAMP
)


def classical_evaluate(board: Board, player: str) -> float:
    """
    Evaluate a board from `player`'s perspective.

    Terminal boards score +/-1000 (0 for a draw), dwarfing every
    heuristic term. Higher is better for `player`.
    """
    w = CLASSICAL_WEIGHTS
    outcome = evaluate_outcome(board)
    if outcome.is_terminal:
        if outcome.status != WIN:
            return 0.0
        return w['terminal'] if outcome.winner == player else -w['terminal']

    opp = opponent(player)
    features = extract_player_features(board, player)
    score = 0.0

    # Immediate threats
    score += features.player_two_in_row * w['player_two_in_row']
    score += features.opponent_two_in_row * w['opponent_two_in_row']

    # Forks
    if features.player_two_in_row >= 2:
        score += w['player_fork']
    if features.opponent_two_in_row >= 2:
        score += w['opponent_fork']

    # Building towards lines
    score += features.player_one_in_row * w['player_one_in_row']
    score += features.opponent_one_in_row * w['opponent_one_in_row']

    # Center
    if board[CENTER] is EMPTY:
        score += w['empty_center']
    else:
        score += features.center_control * w['center']

    # Corners
    score += (features.player_corners - features.opponent_corners) * w['corner']
    for a, b in OPPOSITE_CORNERS:
        if board[a] == board[b] == player:
            score += w['player_opposite_corners']
            break
    for a, b in OPPOSITE_CORNERS:
        if board[a] == board[b] == opp:
            score += w['opponent_opposite_corners']
            break
    if board[CENTER] == player:
        score += features.player_corners * w['center_corner_combo']

    # Edges
    for edge in EDGES:
        if board[edge] == player:
            score += w['edge']
        elif board[edge] == opp:
            score -= w['edge']

    # Lines still open to one side only
    for line in WIN_LINES:
        own, theirs, _ = line_counts(board, line, player)
        if own and not theirs:
            score += w['open_line']
        elif theirs and not own:
            score -= w['open_line']

    return score


def get_classical_depth(difficulty: str) -> int:
    """
    Search depth for the classical evaluator.

    Args:
        difficulty: 'easy', 'normal' or 'hard'

    Returns:
        1, 3 or 9 plies; unknown levels fall back to 3
    """
    return CLASSICAL_DEPTHS.get(difficulty, DEFAULT_CLASSICAL_DEPTH)


def classical_search_evaluate(board: Board, player: str) -> float:
    """
    Classical score scaled into the evaluator band used by the search.

    Raw classical scores reach the hundreds, which would outrank real
    wins and losses (+/-(100 - depth)). Scaling by 1/10 keeps the term
    ordering and the result is clamped to +/-90.
    """
    score = classical_evaluate(board, player) / CLASSICAL_SEARCH_SCALE
    return max(-EVAL_CLAMP, min(EVAL_CLAMP, score))
