"""
FastAPI application for the Tic-Tac-Toe engine.

The active linear weights and the game history live on `app.state`; each
request reads the weights once, so replacing them never affects a search
already running. Searches and training run in a worker thread.
"""
import asyncio
import os
from pathlib import Path
from typing import Optional, Union

from fastapi import FastAPI, HTTPException, Request

from tictactoe_ai.engine import analyze_position
from tictactoe_ai.exceptions import DatasetError, InvalidGameRecord, InvalidMove, NoLegalMoves
from tictactoe_ai.evaluation.data_loader import Dataset, load_dataset, split_dataset
from tictactoe_ai.evaluation.history import GameHistory
from tictactoe_ai.evaluation.model_store import export_model, import_model
from tictactoe_ai.evaluation.trainer import (
    train_linear_model, calculate_accuracy, cross_validate, analyze_feature_importance
)
from tictactoe_ai.evaluation.weights import DEFAULT_MODEL_WEIGHTS, FEATURE_NAMES, NUM_FEATURES
from tictactoe_ai.game.rules import apply_move, current_player, evaluate_outcome, opponent
from tictactoe_ai.game.serialization import deserialize_board, serialize_board, serialize_outcome
from tictactoe_ai.utils.constants import MARKS
from tictactoe_ai.web.models import (
    SearchRequest, SearchResponse, MoveValue, MoveRequest, MoveResponse, OutcomeInfo,
    ModelSnapshot, TrainRequest, TrainResponse, CrossValidationInfo, FeatureImportanceInfo,
    HistoryRecordRequest, HistoryStats, ErrorResponse
)

HISTORY_FILE = "history.json"

# Every HTTPException raised below carries a single `detail` string
BAD_REQUEST = {400: {"model": ErrorResponse}}


def _parse_board(cells):
    try:
        return deserialize_board(cells)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _parse_mark(mark: str) -> str:
    mark = mark.upper()
    if mark not in MARKS:
        raise HTTPException(status_code=400, detail=f"Unknown mark: {mark!r}")
    return mark


def _collect_training_data(app: FastAPI, config: TrainRequest) -> Dataset:
    """Dataset rows followed by history rows, per the request's sources."""
    parts = []
    if config.use_dataset and app.state.dataset_path is not None:
        try:
            parts.append(load_dataset(app.state.dataset_path))
        except DatasetError as e:
            raise HTTPException(status_code=400, detail=str(e))
    if config.use_history and len(app.state.history):
        parts.append(app.state.history.to_dataset())
    if not parts:
        raise HTTPException(status_code=400, detail="No training data available")

    dataset = parts[0]
    for part in parts[1:]:
        try:
            dataset = dataset.concat(part)
        except DatasetError as e:
            raise HTTPException(status_code=400, detail=str(e))
    if dataset.feature_count != NUM_FEATURES:
        raise HTTPException(
            status_code=400,
            detail=f"Training data needs {NUM_FEATURES} feature columns, got {dataset.feature_count}"
        )
    return dataset


def create_app(
    data_dir: Union[str, Path] = "data",
    dataset_path: Optional[Union[str, Path]] = None
) -> FastAPI:
    """
    Build the web application.

    Args:
        data_dir: Directory holding the game history file
        dataset_path: Optional dataset file used by /api/train
    """
    app = FastAPI(
        title="Tic-Tac-Toe AI",
        description="Alpha-beta search with classical and learned evaluators",
        version="1.0.0"
    )

    app.state.data_dir = Path(data_dir)
    app.state.dataset_path = Path(dataset_path) if dataset_path else None
    app.state.history_path = app.state.data_dir / HISTORY_FILE
    app.state.history = GameHistory.load(app.state.history_path)
    app.state.weights = DEFAULT_MODEL_WEIGHTS

    # =========================================================================
    # Search / rules
    # =========================================================================

    @app.post("/api/search", response_model=SearchResponse, responses=BAD_REQUEST)
    async def search(body: SearchRequest, request: Request):
        """Best move for the AI plus the ranked value of every legal move."""
        board = _parse_board(body.board)
        ai_mark = _parse_mark(body.ai_mark)
        if evaluate_outcome(board).is_terminal:
            raise HTTPException(status_code=400, detail="Game is already over")

        weights = request.app.state.weights
        if body.delay:
            await asyncio.sleep(body.delay)

        try:
            result = await asyncio.to_thread(
                analyze_position, board, ai_mark,
                body.evaluation_type, body.difficulty, weights
            )
        except (NoLegalMoves, ValueError) as e:
            raise HTTPException(status_code=400, detail=str(e))

        return SearchResponse(
            best_move=result.best_move,
            best_value=result.best_value,
            moves=[MoveValue(move=m, value=v) for m, v in result.move_evaluations],
            evaluation_type=body.evaluation_type,
            difficulty=body.difficulty,
        )

    @app.post("/api/moves", response_model=MoveResponse, responses=BAD_REQUEST)
    async def make_move(body: MoveRequest):
        """Apply a move and report the resulting outcome."""
        board = _parse_board(body.board)
        if evaluate_outcome(board).is_terminal:
            raise HTTPException(status_code=400, detail="Game is already over")
        mark = _parse_mark(body.mark) if body.mark else current_player(board)

        try:
            board = apply_move(board, body.move, mark)
        except InvalidMove as e:
            raise HTTPException(status_code=400, detail=str(e))

        outcome = evaluate_outcome(board)
        return MoveResponse(
            board=serialize_board(board),
            outcome=OutcomeInfo(**serialize_outcome(outcome)),
            next_player=None if outcome.is_terminal else opponent(mark),
        )

    # =========================================================================
    # Active model
    # =========================================================================

    @app.get("/api/model", response_model=ModelSnapshot)
    async def get_model(request: Request):
        return ModelSnapshot(**export_model(request.app.state.weights))

    @app.put("/api/model", response_model=ModelSnapshot, responses=BAD_REQUEST)
    async def put_model(snapshot: ModelSnapshot, request: Request):
        """Replace the active weights; searches already running keep theirs."""
        try:
            weights = import_model({"weights": snapshot.weights, "bias": snapshot.bias})
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        request.app.state.weights = weights
        return ModelSnapshot(**export_model(weights, snapshot.featureNames))

    @app.post("/api/model/reset", response_model=ModelSnapshot)
    async def reset_model(request: Request):
        request.app.state.weights = DEFAULT_MODEL_WEIGHTS
        return ModelSnapshot(**export_model(DEFAULT_MODEL_WEIGHTS))

    # =========================================================================
    # Training
    # =========================================================================

    @app.post("/api/train", response_model=TrainResponse, responses=BAD_REQUEST)
    async def train(config: TrainRequest, request: Request):
        """Train on the dataset and/or game history and report the result."""
        dataset = await asyncio.to_thread(_collect_training_data, request.app, config)
        split = split_dataset(dataset, config.test_ratio, config.random_state)
        X_train, y_train = split.train.to_arrays()

        train_kwargs = {
            'learning_rate': config.learning_rate,
            'epochs': config.epochs,
            'l2_lambda': config.l2_lambda,
            'random_state': config.random_state,
        }
        result = await asyncio.to_thread(train_linear_model, X_train, y_train, **train_kwargs)
        if result.history.diverged():
            raise HTTPException(status_code=400, detail="Training diverged; lower the learning rate")

        test_accuracy = None
        if len(split.test):
            X_test, y_test = split.test.to_arrays()
            test_accuracy = calculate_accuracy(X_test, y_test, result.weights, result.bias)

        cv_info = None
        if config.cv_folds:
            X_all, y_all = dataset.to_arrays()
            try:
                cv = await asyncio.to_thread(cross_validate, X_all, y_all, config.cv_folds, **train_kwargs)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            cv_info = CrossValidationInfo(
                accuracies=cv.accuracies,
                mean_accuracy=cv.mean_accuracy,
                std_accuracy=cv.std_accuracy,
            )

        weights = result.to_weights()
        if config.activate:
            request.app.state.weights = weights

        return TrainResponse(
            samples=len(dataset),
            train_accuracy=calculate_accuracy(X_train, y_train, result.weights, result.bias),
            test_accuracy=test_accuracy,
            final_loss=result.history.final_loss,
            cross_validation=cv_info,
            importance=[
                FeatureImportanceInfo(
                    feature=f.feature, weight=f.weight, abs_weight=f.abs_weight, impact=f.impact
                )
                for f in analyze_feature_importance(result.weights, FEATURE_NAMES)
            ],
            model=ModelSnapshot(**export_model(weights)),
            activated=config.activate,
        )

    # =========================================================================
    # Game history
    # =========================================================================

    @app.post("/api/history", response_model=HistoryStats, responses=BAD_REQUEST)
    async def record_history(body: HistoryRecordRequest, request: Request):
        """Record a finished game; draws are accepted but not stored."""
        board = _parse_board(body.board)
        history = request.app.state.history
        try:
            record = history.record_game(board, body.winner, body.moves)
        except InvalidGameRecord as e:
            raise HTTPException(status_code=400, detail=str(e))
        if record is not None:
            history.save(request.app.state.history_path)
        return HistoryStats(**history.get_statistics())

    @app.get("/api/history/stats", response_model=HistoryStats)
    async def history_stats(request: Request):
        return HistoryStats(**request.app.state.history.get_statistics())

    @app.delete("/api/history", response_model=HistoryStats)
    async def clear_history(request: Request):
        history = request.app.state.history
        history.clear()
        history.save(request.app.state.history_path)
        return HistoryStats(**history.get_statistics())

    return app


app = create_app(
    data_dir=os.environ.get("TICTACTOE_DATA_DIR", "data"),
    dataset_path=os.environ.get("TICTACTOE_DATASET") or None,
)
