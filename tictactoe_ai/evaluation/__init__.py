"""
Evaluation module for Tic-Tac-Toe positions.

Provides feature extraction, the classical and learned evaluators, the
alpha-beta search, and the training pipeline for the linear evaluator.
"""

from tictactoe_ai.evaluation.features import (
    FeatureExtractor,
    FeatureVector,
    PlayerFeatures,
    extract_dataset_features,
    extract_player_features,
    adjust_features_for_player,
)
from tictactoe_ai.evaluation.weights import (
    DEFAULT_WEIGHTS,
    DEFAULT_WEIGHT_VECTOR,
    DEFAULT_MODEL_WEIGHTS,
    FEATURE_NAMES,
    Weights,
)
from tictactoe_ai.evaluation.classical import (
    classical_evaluate, classical_search_evaluate, get_classical_depth
)
from tictactoe_ai.evaluation.linear import (
    LinearEvaluator,
    NoisyEvaluator,
    linear_evaluate,
    basic_evaluate,
    advanced_evaluate,
    get_ml_config,
)
from tictactoe_ai.evaluation.search import (
    MoveEvaluation,
    SearchResult,
    SearchStats,
    find_best_move,
    get_all_move_evaluations,
)
from tictactoe_ai.evaluation.model_store import (
    ModelStore,
    LinearModel,
    TrainingInfo,
    NormalizationStats,
    create_baseline_model,
    export_model,
    import_model,
)
from tictactoe_ai.evaluation.data_loader import (
    TrainingSample,
    Dataset,
    parse_dataset,
    load_dataset,
    split_dataset,
    normalize_features,
    denormalize_features,
)
from tictactoe_ai.evaluation.trainer import (
    TrainingConfig,
    TrainingResult,
    CrossValidationResult,
    GridSearchResults,
    train_linear_model,
    cross_validate,
    analyze_feature_importance,
    grid_search_l2,
    train_from_samples,
)
from tictactoe_ai.evaluation.history import GameHistory

__all__ = [
    'FeatureExtractor',
    'FeatureVector',
    'PlayerFeatures',
    'extract_dataset_features',
    'extract_player_features',
    'adjust_features_for_player',
    'DEFAULT_WEIGHTS',
    'DEFAULT_WEIGHT_VECTOR',
    'DEFAULT_MODEL_WEIGHTS',
    'FEATURE_NAMES',
    'Weights',
    'classical_evaluate',
    'classical_search_evaluate',
    'get_classical_depth',
    'LinearEvaluator',
    'NoisyEvaluator',
    'linear_evaluate',
    'basic_evaluate',
    'advanced_evaluate',
    'get_ml_config',
    'MoveEvaluation',
    'SearchResult',
    'SearchStats',
    'find_best_move',
    'get_all_move_evaluations',
    'ModelStore',
    'LinearModel',
    'TrainingInfo',
    'NormalizationStats',
    'create_baseline_model',
    'export_model',
    'import_model',
    'TrainingSample',
    'Dataset',
    'parse_dataset',
    'load_dataset',
    'split_dataset',
    'normalize_features',
    'denormalize_features',
    'TrainingConfig',
    'TrainingResult',
    'CrossValidationResult',
    'GridSearchResults',
    'train_linear_model',
    'cross_validate',
    'analyze_feature_importance',
    'grid_search_l2',
    'train_from_samples',
    'GameHistory',
]
