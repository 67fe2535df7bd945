"""
Data loading pipeline for training the linear evaluator.

Parses delimited numeric text (one row per decisive game: 6 features then
a +1/-1 label) into numpy arrays, splits train/test sets, and min-max
normalizes feature columns.
"""
import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
from sklearn.preprocessing import MinMaxScaler

from tictactoe_ai.exceptions import DatasetError
from tictactoe_ai.evaluation.weights import FEATURE_NAMES

logger = logging.getLogger(__name__)


@dataclass
class TrainingSample:
    """
    Single labeled example.

    Label is +1 if X eventually won, -1 if O won. Draws are never samples.
    """
    features: np.ndarray    # Dataset features, X-relative, shape (6,)
    label: int

    def __repr__(self):
        return f"TrainingSample(features={self.features.tolist()}, label={self.label:+d})"


@dataclass
class Dataset:
    """
    Feature matrix, labels and column names.

    Rows keep the order they were read in.
    """
    features: np.ndarray        # shape (n_samples, n_features)
    labels: np.ndarray          # shape (n_samples,)
    feature_names: List[str] = field(default_factory=lambda: FEATURE_NAMES.copy())

    def __len__(self):
        return len(self.labels)

    def __repr__(self):
        return (
            f"Dataset(n_samples={len(self)}, "
            f"n_features={self.feature_count})"
        )

    @property
    def feature_count(self) -> int:
        return self.features.shape[1] if self.features.ndim == 2 else 0

    @classmethod
    def from_samples(
        cls,
        samples: Sequence[TrainingSample],
        feature_names: Optional[List[str]] = None
    ) -> 'Dataset':
        """
        Build a dataset from TrainingSamples (e.g. recorded game history).

        Raises:
            DatasetError: if `samples` is empty
        """
        if not samples:
            raise DatasetError("Cannot build a dataset from zero samples")
        features = np.array([s.features for s in samples], dtype=np.float64)
        labels = np.array([s.label for s in samples], dtype=np.float64)
        return cls(features, labels, list(feature_names or FEATURE_NAMES))

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return (X, y)."""
        return self.features, self.labels

    def to_samples(self) -> List[TrainingSample]:
        return [
            TrainingSample(features=row.copy(), label=int(label))
            for row, label in zip(self.features, self.labels)
        ]

    def concat(self, other: 'Dataset') -> 'Dataset':
        """Rows of self followed by rows of other."""
        if self.feature_count != other.feature_count:
            raise DatasetError(
                f"Feature count mismatch: {self.feature_count} vs {other.feature_count}"
            )
        return Dataset(
            np.vstack([self.features, other.features]),
            np.concatenate([self.labels, other.labels]),
            self.feature_names.copy()
        )

    def get_statistics(self) -> dict:
        """Get summary statistics of the dataset."""
        n = len(self)
        positive = int(np.sum(self.labels == 1))
        negative = int(np.sum(self.labels == -1))
        return {
            'total_samples': n,
            'positive_count': positive,
            'negative_count': negative,
            'balance': f"{positive / n * 100:.1f}%" if n else "0.0%",
            'feature_means': self.features.mean(axis=0).tolist() if n else [],
            'feature_names': self.feature_names,
        }


class DatasetSplit(NamedTuple):
    train: Dataset
    test: Dataset


class NormalizationResult(NamedTuple):
    normalized: np.ndarray
    mins: np.ndarray
    maxs: np.ndarray


def parse_dataset(text: str, delimiter: str = ',') -> Dataset:
    """
    Parse delimited text into a Dataset.

    The first line is a header of column names; the last column is the
    label and the rest are features. Rows whose column count differs from
    the header, or that hold a non-numeric value, are dropped.

    Args:
        text: Raw file contents
        delimiter: Column separator

    Returns:
        Dataset with every valid row, in file order

    Raises:
        DatasetError: if there is no header or no valid rows remain
    """
    rows = [row for row in csv.reader(io.StringIO(text.strip()), delimiter=delimiter) if row]
    if not rows:
        raise DatasetError("Dataset is empty")

    headers = [h.strip() for h in rows[0]]
    if len(headers) < 2:
        raise DatasetError(f"Dataset needs at least one feature and a label column, got {headers}")

    features = []
    labels = []
    n_dropped = 0

    for line_number, row in enumerate(rows[1:], start=2):
        if len(row) != len(headers):
            logger.debug("Dropping line %d: expected %d columns, got %d",
                         line_number, len(headers), len(row))
            n_dropped += 1
            continue
        try:
            values = [float(v) for v in row]
        except ValueError:
            logger.debug("Dropping line %d: non-numeric value in %r", line_number, row)
            n_dropped += 1
            continue
        if not all(np.isfinite(values)):
            logger.debug("Dropping line %d: non-finite value in %r", line_number, row)
            n_dropped += 1
            continue
        features.append(values[:-1])
        labels.append(values[-1])

    if n_dropped:
        logger.warning("Dropped %d malformed dataset rows", n_dropped)

    if not features:
        raise DatasetError("Dataset has no valid rows")

    return Dataset(
        features=np.array(features, dtype=np.float64),
        labels=np.array(labels, dtype=np.float64),
        feature_names=headers[:-1]
    )


def load_dataset(path: Union[str, Path], delimiter: str = ',') -> Dataset:
    """
    Read and parse a dataset file.

    Raises:
        DatasetError: if the file can't be read or has no valid rows
    """
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise DatasetError(f"Failed to load dataset from {path}: {e}") from e
    return parse_dataset(text, delimiter=delimiter)


def split_dataset(
    dataset: Dataset,
    test_ratio: float = 0.2,
    random_state: Optional[int] = None
) -> DatasetSplit:
    """
    Shuffle rows and split into train and test sets.

    Args:
        dataset: Full dataset
        test_ratio: Fraction held out for testing (0-1)
        random_state: Seed for the shuffle (None = nondeterministic)

    Returns:
        DatasetSplit(train, test); test holds floor(n * test_ratio) rows
    """
    if not 0 <= test_ratio < 1:
        raise ValueError(f"test_ratio must be in [0, 1), got {test_ratio}")

    n = len(dataset)
    test_size = int(np.floor(n * test_ratio))
    train_size = n - test_size

    # Generator.permutation is a Fisher-Yates shuffle
    indices = np.random.default_rng(random_state).permutation(n)
    train_idx, test_idx = indices[:train_size], indices[train_size:]

    def subset(idx: np.ndarray) -> Dataset:
        return Dataset(
            dataset.features[idx],
            dataset.labels[idx],
            dataset.feature_names.copy()
        )

    return DatasetSplit(train=subset(train_idx), test=subset(test_idx))


def normalize_features(X: np.ndarray) -> NormalizationResult:
    """
    Min-max normalize each feature column to [0, 1].

    A column with zero range maps to 0 for every sample.

    Returns:
        NormalizationResult(normalized, mins, maxs)
    """
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2 or X.shape[0] == 0:
        raise ValueError(f"Expected a non-empty 2D feature matrix, got shape {X.shape}")

    # MinMaxScaler treats a zero range as scale 1, so (x - min) gives 0
    scaler = MinMaxScaler()
    normalized = scaler.fit_transform(X)
    return NormalizationResult(normalized, scaler.data_min_.copy(), scaler.data_max_.copy())


def apply_normalization(X: np.ndarray, mins: np.ndarray, maxs: np.ndarray) -> np.ndarray:
    """Normalize new rows with stored mins/maxs (zero-range columns -> 0)."""
    X = np.asarray(X, dtype=np.float64)
    ranges = np.asarray(maxs) - np.asarray(mins)
    safe = np.where(ranges == 0, 1.0, ranges)
    return np.where(ranges == 0, 0.0, (X - mins) / safe)


def denormalize_features(normalized: np.ndarray, mins: np.ndarray, maxs: np.ndarray) -> np.ndarray:
    """Map normalized values back to the original range."""
    normalized = np.asarray(normalized, dtype=np.float64)
    return normalized * (np.asarray(maxs) - np.asarray(mins)) + np.asarray(mins)


def samples_from_dataset(dataset: Dataset) -> List[TrainingSample]:
    return dataset.to_samples()
