"""
Model storage and versioning for linear evaluators.

Provides functionality to save, load, and manage trained models with metadata.
Models are stored as JSON files with enough information to reproduce them.

Also converts between Weights and the portable model snapshot
{weights, bias, featureNames, timestamp, version} exchanged with the UI.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Any, Union
from dataclasses import dataclass, asdict, field

import numpy as np

from tictactoe_ai.evaluation.weights import (
    FEATURE_NAMES, NUM_FEATURES, DEFAULT_WEIGHTS, DEFAULT_BIAS, Weights
)

MODEL_VERSION = "1.0"

# Default paths
MODELS_DIR = Path(__file__).parent.parent.parent / "models"


def export_model(model: Any, feature_names: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Build a model snapshot from Weights or a TrainingResult.

    Args:
        model: Weights, or anything with `weights` (coefficients) and `bias`
        feature_names: Column names (defaults to FEATURE_NAMES)

    Returns:
        Dict with weights, bias, featureNames, timestamp and version
    """
    if isinstance(model, Weights):
        coefficients, bias = list(model.coefficients), model.bias
    else:
        coefficients, bias = np.asarray(model.weights, dtype=float).tolist(), float(model.bias)

    return {
        "weights": [float(w) for w in coefficients],
        "bias": float(bias),
        "featureNames": list(feature_names or FEATURE_NAMES),
        "timestamp": datetime.now().isoformat(),
        "version": MODEL_VERSION,
    }


def import_model(data: Dict[str, Any]) -> Weights:
    """
    Read Weights back from a model snapshot.

    Raises:
        ValueError: if weights or bias are missing or malformed
    """
    if not isinstance(data, dict):
        raise ValueError(f"Model snapshot must be an object, got {type(data).__name__}")

    weights = data.get("weights")
    bias = data.get("bias", DEFAULT_BIAS)

    if not isinstance(weights, (list, tuple)) or len(weights) != NUM_FEATURES:
        raise ValueError(f"Model snapshot needs {NUM_FEATURES} weights, got {weights!r}")
    if isinstance(bias, bool) or not isinstance(bias, (int, float)):
        raise ValueError(f"Model bias must be a number, got {bias!r}")
    for w in weights:
        if isinstance(w, bool) or not isinstance(w, (int, float)):
            raise ValueError(f"Model weights must be numbers, got {w!r}")

    return Weights.from_sequence(weights, bias=bias)


@dataclass
class TrainingInfo:
    """Metadata about how a model was trained."""
    data_source: str = ""
    num_samples: int = 0
    learning_rate: float = 0.01
    epochs: int = 0
    l2_lambda: float = 0.0
    train_accuracy: Optional[float] = None
    test_accuracy: Optional[float] = None
    cv_accuracy: Optional[float] = None
    notes: str = ""


@dataclass
class NormalizationStats:
    """Min-max statistics the model was trained with (empty when raw)."""
    mins: List[float] = field(default_factory=list)
    maxs: List[float] = field(default_factory=list)

    @property
    def enabled(self) -> bool:
        return bool(self.mins)

    def to_raw_space(self, coefficients: List[float], bias: float) -> Weights:
        """
        Fold the min-max scaling into the coefficients and bias.

        With x' = (x - min) / (max - min), w . x' + b equals w'' . x + b''
        for w'' = w / (max - min) and b'' = b - w'' . min. Zero-range columns
        normalize to 0 and so get a zero coefficient.
        """
        mins = np.asarray(self.mins, dtype=np.float64)
        maxs = np.asarray(self.maxs, dtype=np.float64)
        w = np.asarray(coefficients, dtype=np.float64)
        if not (len(mins) == len(maxs) == len(w)):
            raise ValueError(
                f"Normalization stats cover {len(mins)}/{len(maxs)} features, model has {len(w)}"
            )

        ranges = maxs - mins
        scale = np.where(ranges == 0, 0.0, 1.0 / np.where(ranges == 0, 1.0, ranges))
        raw = w * scale
        return Weights.from_sequence(raw.tolist(), bias=float(bias - np.dot(raw, mins)))


@dataclass
class LinearModel:
    """
    A complete linear model with weights and metadata.

    Contains everything needed to use the model:
    - Weights by feature name and bias
    - Normalization statistics (for models trained on normalized features)
    - Training metadata for reproducibility
    """
    name: str
    weights: Dict[str, float]
    bias: float = 0.0
    normalization: Optional[NormalizationStats] = None
    training: Optional[TrainingInfo] = None
    created: str = ""
    model_type: str = "linear"

    def __post_init__(self):
        if not self.created:
            self.created = datetime.now().isoformat()
        if self.normalization is None:
            self.normalization = NormalizationStats()
        if self.training is None:
            self.training = TrainingInfo()

    @classmethod
    def from_weights(cls, name: str, weights: Weights, **kwargs) -> 'LinearModel':
        return cls(name=name, weights=weights.to_dict(), bias=weights.bias, **kwargs)

    def get_weight_vector(self) -> List[float]:
        """Get weights as ordered list matching FEATURE_NAMES."""
        return [self.weights[name] for name in FEATURE_NAMES]

    def get_weights(self) -> Weights:
        """Weights that score raw (unnormalized) features."""
        if self.normalization is not None and self.normalization.enabled:
            return self.normalization.to_raw_space(self.get_weight_vector(), self.bias)
        return Weights.from_sequence(self.get_weight_vector(), bias=self.bias)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "model_type": self.model_type,
            "created": self.created,
            "weights": self.weights,
            "bias": self.bias,
            "normalization": asdict(self.normalization) if self.normalization else None,
            "training": asdict(self.training) if self.training else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LinearModel':
        """Create a LinearModel from a dictionary."""
        norm_data = data.get("normalization")
        train_data = data.get("training")

        return cls(
            name=data["name"],
            weights=data["weights"],
            bias=data.get("bias", 0.0),
            normalization=NormalizationStats(**norm_data) if norm_data else None,
            training=TrainingInfo(**train_data) if train_data else None,
            created=data.get("created", ""),
            model_type=data.get("model_type", "linear"),
        )


@dataclass
class RegistryEntry:
    """Entry in the model registry."""
    name: str
    path: str
    notes: str = ""


class ModelStore:
    """
    Manages storage and retrieval of linear models.

    Models are stored as JSON files in the models/ directory.
    A registry.json file tracks all available models.

    Usage:
        store = ModelStore()

        # Save a new model
        model = LinearModel(name="trained_001", weights={...})
        store.save(model)

        # Load a model by name
        model = store.load("trained_001")

        # List all available models
        models = store.list_models()
    """

    def __init__(self, models_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the model store.

        Args:
            models_dir: Custom models directory (defaults to project models/)
        """
        self.models_dir = Path(models_dir) if models_dir else MODELS_DIR
        self.registry_path = self.models_dir / "registry.json"
        self._ensure_directories()

    def _ensure_directories(self):
        self.models_dir.mkdir(parents=True, exist_ok=True)
        (self.models_dir / "linear").mkdir(exist_ok=True)

        if not self.registry_path.exists():
            self._save_registry({"models": []})

    def _load_registry(self) -> Dict[str, Any]:
        if self.registry_path.exists():
            with open(self.registry_path, 'r') as f:
                return json.load(f)
        return {"models": []}

    def _save_registry(self, registry: Dict[str, Any]):
        with open(self.registry_path, 'w') as f:
            json.dump(registry, f, indent=2)

    def _model_path(self, name: str) -> Path:
        return self.models_dir / "linear" / f"{name}.json"

    def save(self, model: LinearModel, notes: str = "") -> Path:
        """
        Save a model to disk and register it.

        Args:
            model: The LinearModel to save
            notes: Optional notes for the registry entry

        Returns:
            Path to the saved model file
        """
        path = self._model_path(model.name)

        with open(path, 'w') as f:
            json.dump(model.to_dict(), f, indent=2)

        registry = self._load_registry()

        # Re-saving a name replaces its entry
        registry["models"] = [
            m for m in registry["models"] if m["name"] != model.name
        ]
        registry["models"].append({
            "name": model.name,
            "path": f"linear/{model.name}.json",
            "notes": notes or (model.training.notes if model.training else ""),
        })

        self._save_registry(registry)
        return path

    def load(self, name: str) -> LinearModel:
        """
        Load a model by name.

        Raises:
            FileNotFoundError: If the model doesn't exist
        """
        path = self._model_path(name)
        if not path.exists():
            raise FileNotFoundError(f"Model '{name}' not found at {path}")

        with open(path, 'r') as f:
            data = json.load(f)

        return LinearModel.from_dict(data)

    def exists(self, name: str) -> bool:
        return self._model_path(name).exists()

    def list_models(self) -> List[RegistryEntry]:
        registry = self._load_registry()
        return [
            RegistryEntry(**entry) for entry in registry.get("models", [])
        ]

    def delete(self, name: str) -> bool:
        """
        Delete a model from disk and registry.

        Returns:
            True if deleted, False if not found
        """
        path = self._model_path(name)
        if path.exists():
            path.unlink()

        registry = self._load_registry()
        original_count = len(registry["models"])
        registry["models"] = [
            m for m in registry["models"] if m["name"] != name
        ]

        if len(registry["models"]) < original_count:
            self._save_registry(registry)
            return True
        return False


def create_baseline_model() -> LinearModel:
    """
    Create the baseline model from hand-tuned weights.

    Returns:
        LinearModel with default hand-tuned weights
    """
    return LinearModel(
        name="baseline_v1",
        weights=DEFAULT_WEIGHTS.copy(),
        bias=DEFAULT_BIAS,
        training=TrainingInfo(
            notes="Hand-tuned baseline weights"
        ),
    )
