#!/usr/bin/env python3
"""
Train the linear evaluator for Tic-Tac-Toe.

Fits V(s) = b + wᵀφ(s) on a dataset of decisive final positions (and,
optionally, recorded game history) by gradient descent on MSE with L2
regularization, then saves the model to the ModelStore.
"""
import argparse
import sys
from pathlib import Path
from typing import Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tictactoe_ai.exceptions import DatasetError
from tictactoe_ai.evaluation.data_loader import (
    load_dataset, split_dataset, normalize_features, apply_normalization
)
from tictactoe_ai.evaluation.history import GameHistory
from tictactoe_ai.evaluation.trainer import (
    train_linear_model, grid_search_l2, cross_validate,
    calculate_accuracy, analyze_feature_importance
)
from tictactoe_ai.evaluation.model_store import (
    ModelStore, LinearModel, NormalizationStats, TrainingInfo
)
from tictactoe_ai.evaluation.weights import FEATURE_NAMES, NUM_FEATURES


def save_trained_model(
    name: str,
    result,  # TrainingResult
    training_info: TrainingInfo,
    models_dir=None,
    normalization: Optional[NormalizationStats] = None
):
    """
    Save trained model to ModelStore.

    Weights trained on normalized features are stored as-is together with
    the normalization stats; the loaded model folds them back in.

    Returns:
        Path to the saved model file
    """
    model = LinearModel.from_weights(
        name, result.to_weights(), training=training_info, normalization=normalization
    )
    store = ModelStore(models_dir)
    return store.save(model, notes=training_info.notes)


def format_results_table(results):
    """Format grid search results as a table."""
    lines = []
    lines.append("\nCV results (sorted by accuracy):")
    lines.append(f"{'λ₂':<10} {'Mean Acc':<12} {'Std':<10}")
    lines.append("-" * 35)

    for l2, cv in results.get_sorted_results():
        lines.append(f"{l2:<10.4f} {cv.mean_accuracy:<12.2f} {cv.std_accuracy:<10.2f}")

    return "\n".join(lines)


def format_feature_importance(result):
    """Format feature weights as a table, largest magnitude first."""
    lines = []
    lines.append("\nFeature importance:")
    lines.append(f"{'Feature':<20} {'Weight':>10}  {'Impact'}")
    lines.append("-" * 45)

    for f in analyze_feature_importance(result.weights, FEATURE_NAMES):
        lines.append(f"{f.feature:<20} {f.weight:>10.4f}  {f.impact}")

    lines.append(f"\nBias: {result.bias:.4f}")

    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(
        description='Train the linear evaluator for Tic-Tac-Toe',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  # Default training (lr 0.01, 1000 epochs, λ2 0.001)
  python scripts/train_linear.py --dataset data/games.csv --output trained_001

  # Include recorded game history
  python scripts/train_linear.py --dataset data/games.csv \\
      --history data/history.json --output trained_history

  # Grid search over λ2 with 5-fold CV
  python scripts/train_linear.py --dataset data/games.csv \\
      --l2 0.0 0.001 0.01 0.1 --cv-folds 5 --output trained_grid
'''
    )

    # Data options
    parser.add_argument('--dataset', type=str, default=None,
                        help='Dataset file (CSV: 6 features then a +1/-1 label)')
    parser.add_argument('--history', type=str, default=None,
                        help='Game history file to add as training data')
    parser.add_argument('--test-ratio', type=float, default=0.2,
                        help='Fraction held out for testing (default: 0.2)')
    parser.add_argument('--normalize', action='store_true',
                        help='Min-max normalize features before training')

    # Training options
    parser.add_argument('--learning-rate', type=float, default=0.01,
                        help='Gradient descent step size (default: 0.01)')
    parser.add_argument('--epochs', type=int, default=1000,
                        help='Number of epochs (default: 1000)')
    parser.add_argument('--l2', type=float, nargs='+', default=[0.001],
                        help='L2 value, or several to grid search (default: 0.001)')
    parser.add_argument('--cv-folds', type=int, default=5,
                        help='Number of cross-validation folds (default: 5)')
    parser.add_argument('--random-state', type=int, default=42,
                        help='Random seed for reproducibility (default: 42)')

    # Output options
    parser.add_argument('--output', type=str, required=True,
                        help='Name for the trained model (required)')
    parser.add_argument('--models-dir', type=str, default=None,
                        help='Model store directory (default: project models/)')
    parser.add_argument('--notes', type=str, default="",
                        help='Optional notes about this training run')
    parser.add_argument('--quiet', action='store_true',
                        help='Suppress progress output')

    args = parser.parse_args()

    verbose = not args.quiet

    if verbose:
        print("\n" + "=" * 60)
        print("Linear Evaluator Training")
        print("=" * 60)

    if not args.dataset and not args.history:
        print("\nError: give --dataset and/or --history", file=sys.stderr)
        return 1

    # Load training data
    sources = []
    dataset = None
    try:
        if args.dataset:
            dataset = load_dataset(args.dataset)
            sources.append(args.dataset)
        if args.history:
            history = GameHistory.load(args.history)
            if len(history):
                history_data = history.to_dataset()
                dataset = dataset.concat(history_data) if dataset is not None else history_data
                sources.append(f"{args.history} ({len(history)} games)")
    except DatasetError as e:
        print(f"\nError loading data: {e}", file=sys.stderr)
        return 1

    if dataset is None or len(dataset) == 0:
        print("\nError: No training data found", file=sys.stderr)
        return 1
    if dataset.feature_count != NUM_FEATURES:
        print(f"\nError: expected {NUM_FEATURES} feature columns, got {dataset.feature_count}",
              file=sys.stderr)
        return 1

    if verbose:
        stats = dataset.get_statistics()
        print(f"\nDataset loaded from: {', '.join(sources)}")
        print(f"  Samples: {stats['total_samples']}")
        print(f"  X wins:  {stats['positive_count']} ({stats['balance']})")
        print(f"  O wins:  {stats['negative_count']}")

    split = split_dataset(dataset, args.test_ratio, args.random_state)
    X_train, y_train = split.train.to_arrays()
    X_test, y_test = split.test.to_arrays() if len(split.test) else (None, None)
    normalization = None
    if args.normalize:
        X_train, mins, maxs = normalize_features(X_train)
        if X_test is not None:
            X_test = apply_normalization(X_test, mins, maxs)
        normalization = NormalizationStats(mins=mins.tolist(), maxs=maxs.tolist())
    train_kwargs = {
        'learning_rate': args.learning_rate,
        'epochs': args.epochs,
        'random_state': args.random_state,
    }

    try:
        if len(args.l2) > 1:
            results = grid_search_l2(X_train, y_train, args.l2, k=args.cv_folds,
                                     verbose=verbose, **train_kwargs)
            result, l2 = results.best_model, results.best_l2
            cv_accuracy = results.cv_results[l2].mean_accuracy
        else:
            l2 = args.l2[0]
            result = train_linear_model(X_train, y_train, l2_lambda=l2,
                                        verbose=verbose, **train_kwargs)
            cv_accuracy = None
            if 2 <= args.cv_folds <= len(y_train):
                cv_accuracy = cross_validate(X_train, y_train, args.cv_folds,
                                             l2_lambda=l2, **train_kwargs).mean_accuracy
    except ValueError as e:
        print(f"\nError during training: {e}", file=sys.stderr)
        return 1

    if result.history.diverged():
        print("\nError: training diverged; lower --learning-rate", file=sys.stderr)
        return 1

    train_accuracy = calculate_accuracy(X_train, y_train, result.weights, result.bias)
    test_accuracy = None
    if X_test is not None:
        test_accuracy = calculate_accuracy(X_test, y_test, result.weights, result.bias)

    if verbose:
        print("\n" + "=" * 60)
        print("Results")
        print("=" * 60)
        print(f"\nλ₂={l2:.4f}")
        if normalization is not None:
            print("  Features min-max normalized")
        print(f"  Train accuracy: {train_accuracy:.2f}%")
        if test_accuracy is not None:
            print(f"  Test accuracy:  {test_accuracy:.2f}%")
        if cv_accuracy is not None:
            print(f"  CV accuracy:    {cv_accuracy:.2f}%")
        if len(args.l2) > 1:
            print(format_results_table(results))
        print(format_feature_importance(result))

    training_info = TrainingInfo(
        data_source=", ".join(sources),
        num_samples=len(dataset),
        learning_rate=args.learning_rate,
        epochs=args.epochs,
        l2_lambda=l2,
        train_accuracy=train_accuracy,
        test_accuracy=test_accuracy,
        cv_accuracy=cv_accuracy,
        notes=args.notes
    )

    try:
        model_path = save_trained_model(
            args.output, result, training_info, args.models_dir, normalization
        )
    except OSError as e:
        print(f"\nError saving model: {e}", file=sys.stderr)
        return 1

    if verbose:
        print(f"\nModel saved to: {model_path}")
        print("Registry updated.")
        print("\n" + "=" * 60)
        print("Training complete!")
        print("=" * 60)
        print(f"\nTo test the model:")
        print(f"  python main.py --x linear:hard --model {args.output} --o classical --games 100 --quiet")

    return 0


if __name__ == "__main__":
    sys.exit(main())
