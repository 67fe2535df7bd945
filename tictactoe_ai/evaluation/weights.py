"""
Weight tables for the Tic-Tac-Toe evaluators.

The linear evaluator computes V(s) = b + w^T * φ(s) where φ(s) is the
6-value dataset feature vector. The classical and basic tables score the
symmetric per-player features.
"""
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

# Dataset feature names in column order (for logging/debugging and export)
FEATURE_NAMES = [
    'x_count',
    'o_count',
    'x_almost_win',
    'o_almost_win',
    'x_center',
    'x_corners',
]
NUM_FEATURES = len(FEATURE_NAMES)

# Default weights for the linear evaluator - hand-tuned starting point.
# Read relative to the evaluated player once features are flipped for O.
DEFAULT_WEIGHTS = {
    'x_count': 1.0,          # own marks
    'o_count': -1.0,         # opponent marks
    'x_almost_win': 12.0,    # own open two-in-a-rows
    'o_almost_win': -15.0,   # opponent threats weigh more (defensive)
    'x_center': 6.0,
    'x_corners': 2.0,
}
DEFAULT_BIAS = 0.0

# As ordered list for dot product with feature vector
DEFAULT_WEIGHT_VECTOR = [DEFAULT_WEIGHTS[name] for name in FEATURE_NAMES]


@dataclass(frozen=True)
class Weights:
    """
    Immutable weight set for the linear evaluator.

    Passed explicitly into every evaluation so that swapping in newly
    trained weights never affects a search already in progress.
    """
    bias: float
    coefficients: Tuple[float, ...]

    def __post_init__(self):
        if len(self.coefficients) != NUM_FEATURES:
            raise ValueError(
                f"Expected {NUM_FEATURES} weights, got {len(self.coefficients)}"
            )
        object.__setattr__(self, 'coefficients', tuple(float(w) for w in self.coefficients))
        object.__setattr__(self, 'bias', float(self.bias))

    @classmethod
    def from_sequence(cls, coefficients: Sequence[float], bias: float = 0.0) -> 'Weights':
        return cls(bias=bias, coefficients=tuple(coefficients))

    @classmethod
    def from_dict(cls, weights: Dict[str, float], bias: float = 0.0) -> 'Weights':
        """Build from a name -> weight mapping keyed by FEATURE_NAMES."""
        return cls(bias=bias, coefficients=tuple(weights[name] for name in FEATURE_NAMES))

    def to_dict(self) -> Dict[str, float]:
        return dict(zip(FEATURE_NAMES, self.coefficients))

    def score(self, features: Sequence[float]) -> float:
        """Unclamped b + w^T * φ."""
        return self.bias + sum(w * f for w, f in zip(self.coefficients, features))


DEFAULT_MODEL_WEIGHTS = Weights(bias=DEFAULT_BIAS, coefficients=tuple(DEFAULT_WEIGHT_VECTOR))


# Symmetric per-player feature names (see features.PlayerFeatures)
PLAYER_FEATURE_NAMES = [
    'player_marks',
    'opponent_marks',
    'player_two_in_row',
    'opponent_two_in_row',
    'player_one_in_row',
    'opponent_one_in_row',
    'center_control',
    'player_corners',
    'opponent_corners',
]

# Linear weights over the symmetric features (the "basic" learned evaluator)
BASIC_WEIGHTS = {
    'player_marks': 2.5,
    'opponent_marks': -2.5,
    'player_two_in_row': 18.0,
    'opponent_two_in_row': -22.0,
    'player_one_in_row': 4.5,
    'opponent_one_in_row': -4.5,
    'center_control': 6.0,
    'player_corners': 3.5,
    'opponent_corners': -3.5,
}
BASIC_BIAS = 0.5

# Classical heuristic scoring table.
# Priority: terminal > block opponent win > own win now > fork > center
#           > corner > one-in-a-row > edge
CLASSICAL_WEIGHTS = {
    'terminal': 1000.0,
    'opponent_two_in_row': -600.0,   # must block, outweighs own threat
    'player_two_in_row': 500.0,      # can win next move
    'player_fork': 300.0,            # on top of the per-line bonus
    'opponent_fork': -400.0,
    'center': 40.0,
    'empty_center': 5.0,
    'corner': 20.0,
    'player_opposite_corners': 50.0,
    'opponent_opposite_corners': -60.0,
    'center_corner_combo': 15.0,
    'player_one_in_row': 10.0,
    'opponent_one_in_row': -12.0,
    'open_line': 3.0,
    'edge': 5.0,
}
