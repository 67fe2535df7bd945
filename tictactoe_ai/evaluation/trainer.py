"""
Training logic for the linear value function.

Implements full-batch gradient descent on mean squared error with L2
regularization, plus accuracy, k-fold cross-validation, feature
importance, and grid search over the L2 penalty.

Labels are +1 (X won) / -1 (O won); predictions are classified by sign,
with an exact 0 counting as +1.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from sklearn.metrics import accuracy_score
from sklearn.model_selection import KFold

from tictactoe_ai.evaluation.data_loader import Dataset, TrainingSample
from tictactoe_ai.evaluation.weights import FEATURE_NAMES, Weights
from tictactoe_ai.utils.constants import ACCURACY_EVERY


@dataclass
class TrainingConfig:
    """Hyperparameters for one gradient descent run."""
    learning_rate: float = 0.01
    epochs: int = 1000
    l2_lambda: float = 0.001
    random_state: Optional[int] = None

    def as_kwargs(self) -> Dict[str, object]:
        return {
            'learning_rate': self.learning_rate,
            'epochs': self.epochs,
            'l2_lambda': self.l2_lambda,
            'random_state': self.random_state,
        }


@dataclass
class TrainHistory:
    """Per-epoch loss and periodic (epoch, accuracy %) snapshots."""
    losses: List[float] = field(default_factory=list)
    accuracies: List[Tuple[int, float]] = field(default_factory=list)

    @property
    def final_loss(self) -> Optional[float]:
        return self.losses[-1] if self.losses else None

    @property
    def final_accuracy(self) -> Optional[float]:
        return self.accuracies[-1][1] if self.accuracies else None

    def diverged(self) -> bool:
        """True if any recorded loss is NaN or infinite."""
        return not all(np.isfinite(self.losses))


@dataclass
class TrainingResult:
    """
    Results from a single training run.

    Contains the fitted coefficients, bias and the loss/accuracy history.
    """
    weights: np.ndarray     # Coefficient vector (n_features,)
    bias: float
    history: TrainHistory

    def __repr__(self):
        loss = self.history.final_loss
        loss_str = f"{loss:.4f}" if loss is not None else "n/a"
        return (
            f"TrainingResult(weights={np.round(self.weights, 4).tolist()}, "
            f"bias={self.bias:.4f}, final_loss={loss_str})"
        )

    def to_weights(self) -> Weights:
        """Convert to the evaluator's Weights (requires 6 coefficients)."""
        return Weights.from_sequence(self.weights.tolist(), bias=self.bias)


@dataclass
class CrossValidationResult:
    accuracies: List[float]
    mean_accuracy: float
    std_accuracy: float

    def __repr__(self):
        return (
            f"CrossValidationResult(k={len(self.accuracies)}, "
            f"mean={self.mean_accuracy:.2f}%, std={self.std_accuracy:.2f})"
        )


@dataclass
class FeatureImportance:
    feature: str
    weight: float
    abs_weight: float
    impact: str             # 'positive' or 'negative'


@dataclass
class GridSearchResults:
    """
    Results from grid search over the L2 penalty.

    Contains the cross-validation result for every value tried and the
    best model retrained on all data.
    """
    cv_results: Dict[float, CrossValidationResult]
    best_l2: float
    best_model: TrainingResult
    cv_folds: int

    def __repr__(self):
        best_cv = self.cv_results[self.best_l2]
        return (
            f"GridSearchResults(n_models={len(self.cv_results)}, "
            f"best: λ2={self.best_l2:.4f}, cv_accuracy={best_cv.mean_accuracy:.2f}%)"
        )

    def get_sorted_results(self, ascending: bool = False) -> List[Tuple[float, CrossValidationResult]]:
        """(l2, result) pairs sorted by mean CV accuracy."""
        return sorted(
            self.cv_results.items(),
            key=lambda item: item[1].mean_accuracy,
            reverse=not ascending
        )


def _as_arrays(X, y) -> Tuple[np.ndarray, np.ndarray]:
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if X.ndim != 2 or X.shape[0] == 0:
        raise ValueError(f"Expected a non-empty 2D feature matrix, got shape {X.shape}")
    if y.shape != (X.shape[0],):
        raise ValueError(f"Label shape {y.shape} does not match {X.shape[0]} samples")
    return X, y


def predict(X, weights, bias: float) -> np.ndarray:
    """
    Raw linear scores: bias + X @ weights.

    Accepts a single feature vector or a matrix of them.
    """
    return np.asarray(X, dtype=np.float64) @ np.asarray(weights, dtype=np.float64) + bias


def classify(scores: np.ndarray) -> np.ndarray:
    """Sign threshold: >= 0 -> +1, < 0 -> -1."""
    return np.where(np.asarray(scores) >= 0, 1.0, -1.0)


def calculate_accuracy(X, y, weights, bias: float) -> float:
    """
    Classification accuracy as a percentage (0-100).

    Args:
        X: Feature matrix
        y: Labels (+1 / -1)
        weights: Coefficient vector
        bias: Bias term
    """
    X, y = _as_arrays(X, y)
    return float(accuracy_score(y, classify(predict(X, weights, bias))) * 100)


def train_linear_model(
    X,
    y,
    learning_rate: float = 0.01,
    epochs: int = 1000,
    l2_lambda: float = 0.001,
    random_state: Optional[int] = None,
    verbose: bool = False
) -> TrainingResult:
    """
    Fit a linear model by full-batch gradient descent on MSE.

    Args:
        X: Feature matrix, shape (n_samples, n_features)
        y: Labels (+1 / -1), shape (n_samples,)
        learning_rate: Step size
        epochs: Number of full passes over the data
        l2_lambda: L2 penalty on the coefficients (never the bias)
        random_state: Seed for the initial weights
        verbose: Print loss/accuracy at every accuracy snapshot

    Returns:
        TrainingResult with weights, bias and history

    Process:
        1. Initialize weights and bias uniformly in [0, 0.01)
        2. Each epoch:
           a. Predict all samples, error = prediction - label
           b. w -= lr * (X^T error / m + λ2 * w)
           c. b -= lr * (sum(error) / m)
           d. Record the MSE of this epoch's predictions
        3. Every 50 epochs (epoch 0 included), record accuracy

    A diverging run (learning rate too high) shows up as non-finite
    losses; epochs are never aborted.
    """
    X, y = _as_arrays(X, y)
    m, n = X.shape

    rng = np.random.default_rng(random_state)
    initial = rng.uniform(0.0, 0.01, size=n + 1)
    bias = float(initial[0])
    weights = initial[1:].copy()

    if verbose:
        print(f"\n=== Training Linear Model ===")
        print(f"Dataset: {m} samples, {n} features")
        print(f"lr={learning_rate}, epochs={epochs}, λ2={l2_lambda}\n")

    history = TrainHistory()

    with np.errstate(over='ignore', invalid='ignore'):
        for epoch in range(epochs):
            errors = X @ weights + bias - y
            weight_gradient = X.T @ errors
            bias_gradient = float(np.sum(errors))

            weights = weights - learning_rate * (weight_gradient / m + l2_lambda * weights)
            bias = bias - learning_rate * (bias_gradient / m)

            loss = float(np.mean(errors ** 2))
            history.losses.append(loss)

            if epoch % ACCURACY_EVERY == 0:
                accuracy = calculate_accuracy(X, y, weights, bias)
                history.accuracies.append((epoch, accuracy))
                if verbose:
                    print(f"Epoch {epoch}: Loss={loss:.4f}, Accuracy={accuracy:.2f}%")

    if verbose and history.diverged():
        print("Warning: training diverged (non-finite loss); try a lower learning rate")

    return TrainingResult(weights=weights, bias=float(bias), history=history)


def cross_validate(X, y, k: int = 5, **train_kwargs) -> CrossValidationResult:
    """
    k-fold cross-validation over contiguous, unshuffled folds.

    Folds are sized by KFold: the first n % k folds hold one extra
    sample, so every sample is tested exactly once. Cutting every fold
    to floor(n / k) samples instead would leave the last n % k samples
    out of all test folds, so mean accuracy here can differ from that
    scheme when n isn't a multiple of k.

    Args:
        X: Feature matrix
        y: Labels
        k: Number of folds (2 <= k <= n)
        **train_kwargs: Passed through to train_linear_model

    Returns:
        CrossValidationResult with per-fold accuracy, mean and population std

    Raises:
        ValueError: if k < 2 or k > n
    """
    X, y = _as_arrays(X, y)
    if k < 2 or k > len(y):
        raise ValueError(f"k must be between 2 and the number of samples ({len(y)}), got {k}")

    train_kwargs.pop('verbose', None)
    accuracies = []
    for train_idx, test_idx in KFold(n_splits=k, shuffle=False).split(X):
        result = train_linear_model(X[train_idx], y[train_idx], **train_kwargs)
        accuracies.append(calculate_accuracy(X[test_idx], y[test_idx], result.weights, result.bias))

    return CrossValidationResult(
        accuracies=accuracies,
        mean_accuracy=float(np.mean(accuracies)),
        std_accuracy=float(np.std(accuracies))
    )


def analyze_feature_importance(
    weights: Sequence[float],
    feature_names: Optional[Sequence[str]] = None
) -> List[FeatureImportance]:
    """
    Rank features by absolute weight, largest first.

    Args:
        weights: Coefficients (no bias)
        feature_names: Names per coefficient; missing ones become "Feature i"

    Returns:
        List of FeatureImportance
    """
    names = list(feature_names if feature_names is not None else FEATURE_NAMES)
    importance = []
    for i, weight in enumerate(weights):
        weight = float(weight)
        importance.append(FeatureImportance(
            feature=names[i] if i < len(names) else f"Feature {i + 1}",
            weight=weight,
            abs_weight=abs(weight),
            impact='positive' if weight > 0 else 'negative'
        ))
    importance.sort(key=lambda f: f.abs_weight, reverse=True)
    return importance


def grid_search_l2(
    X,
    y,
    l2_values: Sequence[float],
    k: int = 5,
    verbose: bool = False,
    **train_kwargs
) -> GridSearchResults:
    """
    Pick the L2 penalty with the best mean cross-validation accuracy.

    Ties go to the first value in `l2_values`. The winner is retrained on
    all of the data.

    Args:
        X: Feature matrix
        y: Labels
        l2_values: Penalties to try (e.g., [0.0, 0.001, 0.01, 0.1])
        k: Cross-validation folds
        verbose: Print progress information
        **train_kwargs: Other train_linear_model arguments

    Returns:
        GridSearchResults
    """
    if not l2_values:
        raise ValueError("l2_values must not be empty")
    train_kwargs.pop('l2_lambda', None)

    if verbose:
        print(f"\n=== Grid Search over λ2 ===")
        print(f"Values: {list(l2_values)}, cross-validation: {k} folds\n")

    cv_results = {}
    best_l2 = None
    for i, l2 in enumerate(l2_values, start=1):
        cv = cross_validate(X, y, k=k, l2_lambda=l2, **train_kwargs)
        cv_results[l2] = cv
        if verbose:
            print(f"[{i}/{len(l2_values)}] λ2={l2:.4f}: "
                  f"{cv.mean_accuracy:.2f}% ± {cv.std_accuracy:.2f}")
        if best_l2 is None or cv.mean_accuracy > cv_results[best_l2].mean_accuracy:
            best_l2 = l2

    best_model = train_linear_model(X, y, l2_lambda=best_l2, **train_kwargs)

    if verbose:
        print(f"\n=== Grid Search Complete ===")
        print(f"Best λ2={best_l2:.4f}")
        print(f"  CV accuracy:    {cv_results[best_l2].mean_accuracy:.2f}%")
        print(f"  Train accuracy: {best_model.history.final_accuracy:.2f}%")

    return GridSearchResults(
        cv_results=cv_results,
        best_l2=best_l2,
        best_model=best_model,
        cv_folds=k
    )


def train_from_samples(
    samples: Sequence[TrainingSample],
    config: Optional[TrainingConfig] = None,
    verbose: bool = False
) -> TrainingResult:
    """
    Train on a list of TrainingSamples (dataset rows plus game history).

    Raises:
        DatasetError: if `samples` is empty
    """
    config = config or TrainingConfig()
    X, y = Dataset.from_samples(samples).to_arrays()
    return train_linear_model(X, y, verbose=verbose, **config.as_kwargs())
