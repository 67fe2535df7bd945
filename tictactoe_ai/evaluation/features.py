"""
Feature extraction for Tic-Tac-Toe board positions.

Two extractors live here and must not be mixed up:

Dataset features (6 values):
    Always computed from X's absolute perspective, matching the columns of
    the training dataset. Used by the trainer and the linear evaluator.
    Scoring for O requires the explicit perspective flip in
    adjust_features_for_player().

Player features (9 values):
    Computed directly from the evaluated player's perspective. Used by the
    classical, basic and advanced evaluators; never fed to the trainer.
"""
from typing import List, NamedTuple, Optional, Sequence, Tuple

from tictactoe_ai.evaluation.weights import Weights
from tictactoe_ai.game.rules import Board, opponent
from tictactoe_ai.utils.constants import X, O, EMPTY, CENTER, CORNERS, WIN_LINES


class FeatureVector(NamedTuple):
    """Dataset-format features, X-relative."""
    x_count: int
    o_count: int
    x_almost_win: int
    o_almost_win: int
    x_center: int
    x_corners: int


class PlayerFeatures(NamedTuple):
    """Symmetric features from one player's point of view."""
    player_marks: int
    opponent_marks: int
    player_two_in_row: int
    opponent_two_in_row: int
    player_one_in_row: int
    opponent_one_in_row: int
    center_control: int      # 1 own, -1 opponent, 0 empty
    player_corners: int
    opponent_corners: int


def line_counts(board: Board, line: Tuple[int, int, int], mark: str) -> Tuple[int, int, int]:
    """Return (own, opponent, empty) cell counts on one line."""
    cells = [board[i] for i in line]
    own = sum(1 for c in cells if c == mark)
    empty = sum(1 for c in cells if c is EMPTY)
    return own, 3 - own - empty, empty


def count_almost_wins(board: Board, mark: str) -> int:
    """Lines where `mark` has two cells and the third is empty."""
    total = 0
    for line in WIN_LINES:
        own, opp, empty = line_counts(board, line, mark)
        if own == 2 and empty == 1:
            total += 1
    return total


def extract_dataset_features(board: Board) -> FeatureVector:
    """
    Extract the 6 dataset features, always from X's perspective.

    Returns:
        FeatureVector(x_count, o_count, x_almost_win, o_almost_win,
        x_center, x_corners)
    """
    return FeatureVector(
        x_count=board.count(X),
        o_count=board.count(O),
        x_almost_win=count_almost_wins(board, X),
        o_almost_win=count_almost_wins(board, O),
        x_center=1 if board[CENTER] == X else 0,
        x_corners=sum(1 for i in CORNERS if board[i] == X),
    )


def adjust_features_for_player(
    features: Sequence[float],
    player: str,
    board: Optional[Board] = None
) -> List[float]:
    """
    Flip dataset features so they read relative to `player`.

    For X the vector is returned unchanged. For O the mark counts (0<->1)
    and almost-win counts (2<->3) are swapped. The corner count stays
    X-relative.

    The center component for O is read from the board when one is given.
    Without a board it is inferred: 1 if X does not hold the center and at
    least one mark has been placed. That inference is wrong whenever the
    center is empty, so pass the board whenever it is available.
    """
    features = list(features)
    if player != O:
        return features

    if board is not None:
        o_center = 1 if board[CENTER] == O else 0
    else:
        o_center = 1 if features[4] == 0 and features[0] + features[1] >= 1 else 0

    return [
        features[1],
        features[0],
        features[3],
        features[2],
        o_center,
        features[5],
    ]


def extract_player_features(board: Board, player: str) -> PlayerFeatures:
    """Extract the 9 symmetric features from `player`'s perspective."""
    opp = opponent(player)

    player_two = opponent_two = 0
    player_one = opponent_one = 0
    for line in WIN_LINES:
        own, theirs, empty = line_counts(board, line, player)
        if own == 2 and empty == 1:
            player_two += 1
        if theirs == 2 and empty == 1:
            opponent_two += 1
        if own == 1 and empty == 2:
            player_one += 1
        if theirs == 1 and empty == 2:
            opponent_one += 1

    if board[CENTER] == player:
        center_control = 1
    elif board[CENTER] == opp:
        center_control = -1
    else:
        center_control = 0

    return PlayerFeatures(
        player_marks=board.count(player),
        opponent_marks=board.count(opp),
        player_two_in_row=player_two,
        opponent_two_in_row=opponent_two,
        player_one_in_row=player_one,
        opponent_one_in_row=opponent_one,
        center_control=center_control,
        player_corners=sum(1 for i in CORNERS if board[i] == player),
        opponent_corners=sum(1 for i in CORNERS if board[i] == opp),
    )


class FeatureExtractor:
    """
    Extracts features from Tic-Tac-Toe positions.

    Bundles both extractors so agents and the trainer share one entry point.
    """

    def extract(self, board: Board) -> FeatureVector:
        """Dataset features, X-relative."""
        return extract_dataset_features(board)

    def extract_as_array(self, board: Board, perspective: str = X) -> List[float]:
        """
        Dataset features as a list, flipped for `perspective`.

        Args:
            board: Board to featurize
            perspective: Player the features should read relative to

        Returns:
            List of 6 floats
        """
        features = [float(f) for f in self.extract(board)]
        return adjust_features_for_player(features, perspective, board)

    def extract_player(self, board: Board, perspective: str) -> PlayerFeatures:
        return extract_player_features(board, perspective)

    def evaluate(self, board: Board, perspective: str, weights: Weights) -> float:
        """Compute the unclamped V(s) = b + w^T * φ(s) for `perspective`."""
        return weights.score(self.extract_as_array(board, perspective))

