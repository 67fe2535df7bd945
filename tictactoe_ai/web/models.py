"""
Pydantic models for the Tic-Tac-Toe web API.

Defines request/response schemas for the search, move, model, training
and history endpoints. Boards travel as lists of 9 cells, each 'X', 'O'
or null.
"""
from pydantic import BaseModel, Field
from typing import List, Dict, Optional

from tictactoe_ai.evaluation.weights import FEATURE_NAMES


class SearchRequest(BaseModel):
    """Ask the engine for a move."""
    board: List[Optional[str]]
    ai_mark: str = Field(default="O", description="Mark the engine plays: X or O")
    evaluation_type: str = Field(default="classical", description="classical, ml, ml-basic or ml-advanced")
    difficulty: str = Field(default="normal", description="easy, normal or hard")
    delay: float = Field(default=0.0, ge=0.0, le=5.0, description="Seconds to wait before answering")


class MoveValue(BaseModel):
    """Search value of one candidate move."""
    move: int
    value: float


class SearchResponse(BaseModel):
    best_move: int
    best_value: float
    moves: List[MoveValue]      # Ranked best first
    evaluation_type: str
    difficulty: str


class MoveRequest(BaseModel):
    """Apply a move to a board."""
    board: List[Optional[str]]
    move: int = Field(ge=0, le=8)
    mark: Optional[str] = Field(default=None, description="Defaults to the player to move")


class OutcomeInfo(BaseModel):
    status: str                 # in_progress, win or draw
    winner: Optional[str] = None
    line: Optional[List[int]] = None


class MoveResponse(BaseModel):
    board: List[Optional[str]]
    outcome: OutcomeInfo
    next_player: Optional[str] = None


class ModelSnapshot(BaseModel):
    """Portable linear model: 6 weights, bias and their feature names."""
    weights: List[float]
    bias: float = 0.0
    featureNames: List[str] = Field(default_factory=lambda: FEATURE_NAMES.copy())
    timestamp: Optional[str] = None
    version: Optional[str] = None


class TrainRequest(BaseModel):
    """Hyperparameters and data sources for a training run."""
    learning_rate: float = Field(default=0.01, gt=0.0)
    epochs: int = Field(default=1000, ge=1, le=20000)
    l2_lambda: float = Field(default=0.001, ge=0.0)
    test_ratio: float = Field(default=0.2, ge=0.0, lt=1.0)
    cv_folds: Optional[int] = Field(default=None, ge=2)
    use_dataset: bool = True
    use_history: bool = True
    random_state: Optional[int] = None
    activate: bool = Field(default=False, description="Make the trained model the active one")


class CrossValidationInfo(BaseModel):
    accuracies: List[float]
    mean_accuracy: float
    std_accuracy: float


class FeatureImportanceInfo(BaseModel):
    feature: str
    weight: float
    abs_weight: float
    impact: str


class TrainResponse(BaseModel):
    samples: int
    train_accuracy: float
    test_accuracy: Optional[float] = None
    final_loss: Optional[float] = None
    cross_validation: Optional[CrossValidationInfo] = None
    importance: List[FeatureImportanceInfo]
    model: ModelSnapshot
    activated: bool


class HistoryRecordRequest(BaseModel):
    """A finished game to add to the training history."""
    board: List[Optional[str]]
    winner: Optional[str] = Field(default=None, description="X, O, or null for a draw")
    moves: Optional[int] = Field(default=None, ge=0, le=9, description="Checked against the marks on the board")


class HistoryStats(BaseModel):
    total_games: int
    x_wins: int
    o_wins: int
    win_rate: Optional[Dict[str, float]] = None


class ErrorResponse(BaseModel):
    detail: str
