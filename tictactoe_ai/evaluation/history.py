"""
Played-game history used as extra training data.

Only decisive games are kept. Each record stores the dataset features of
the final board (X-relative) and a label of +1 if X won, -1 if O won; the
label is read off the board, never taken from the caller.
The oldest records are evicted once the cap is reached.
"""
import json
import logging
import time
from collections import deque
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Deque, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from tictactoe_ai.exceptions import InvalidGameRecord
from tictactoe_ai.evaluation.data_loader import Dataset, TrainingSample
from tictactoe_ai.evaluation.features import extract_dataset_features
from tictactoe_ai.game.rules import Board, evaluate_outcome
from tictactoe_ai.utils.constants import X, O, DRAW, MAX_HISTORY_GAMES

logger = logging.getLogger(__name__)


@dataclass
class GameRecord:
    features: List[float]
    label: int
    moves: int
    timestamp: float

    def to_sample(self) -> TrainingSample:
        return TrainingSample(features=np.array(self.features, dtype=np.float64), label=self.label)


class GameHistory:
    """
    Bounded FIFO of decisive games.

    Usage:
        history = GameHistory()
        history.record_game(game.board, game.get_winner())
        X, y = history.to_arrays()
    """

    def __init__(self, max_games: int = MAX_HISTORY_GAMES, records: Optional[Sequence[GameRecord]] = None):
        if max_games < 1:
            raise ValueError(f"max_games must be positive, got {max_games}")
        self.max_games = max_games
        self._records: Deque[GameRecord] = deque(records or [], maxlen=max_games)

    def __len__(self):
        return len(self._records)

    def __repr__(self):
        return f"GameHistory(games={len(self)}, max_games={self.max_games})"

    @property
    def records(self) -> List[GameRecord]:
        return list(self._records)

    def record_game(
        self,
        final_board: Board,
        winner: Optional[str],
        moves: Optional[int] = None
    ) -> Optional[GameRecord]:
        """
        Record a finished game.

        The label comes from the board itself; `winner` and `moves` are
        claims checked against it.

        Args:
            final_board: Board after the last move
            winner: 'X', 'O', or None / 'draw'
            moves: Number of moves played (defaults to the marks on the board)

        Returns:
            The stored record, or None for a draw

        Raises:
            InvalidGameRecord: if the board isn't a reachable finished game,
                or the claimed winner or move count disagrees with it
        """
        board = tuple(final_board)
        x_count, o_count = board.count(X), board.count(O)
        if x_count - o_count not in (0, 1):
            raise InvalidGameRecord(f"Unreachable board: {x_count} X marks, {o_count} O marks")

        outcome = evaluate_outcome(board)
        if not outcome.is_terminal:
            raise InvalidGameRecord("Game is not finished")
        if outcome.winner is not None and outcome.winner != (X if x_count > o_count else O):
            raise InvalidGameRecord(f"{outcome.winner} cannot have won on the opponent's turn")

        claimed = None if winner is None or str(winner).lower() == DRAW else str(winner).upper()
        if claimed not in (X, O, None):
            raise InvalidGameRecord(f"Unknown winner: {winner!r}")
        if claimed != outcome.winner:
            raise InvalidGameRecord(
                f"Claimed winner {winner!r} disagrees with the board ({outcome.winner or DRAW})"
            )

        if moves is None:
            moves = x_count + o_count
        elif moves != x_count + o_count:
            raise InvalidGameRecord(f"Board holds {x_count + o_count} marks, not {moves} moves")

        if outcome.winner is None:
            return None

        record = GameRecord(
            features=[float(f) for f in extract_dataset_features(board)],
            label=1 if outcome.winner == X else -1,
            moves=moves,
            timestamp=time.time(),
        )
        self._records.append(record)
        logger.debug("Game saved to history (%d total games)", len(self._records))
        return record

    def get_samples(self) -> List[TrainingSample]:
        return [record.to_sample() for record in self._records]

    def to_dataset(self) -> Dataset:
        """
        Raises:
            DatasetError: if the history is empty
        """
        return Dataset.from_samples(self.get_samples())

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """(X, y); shapes (0, 6) and (0,) when empty."""
        if not self._records:
            return np.zeros((0, 6)), np.zeros(0)
        return self.to_dataset().to_arrays()

    def get_statistics(self) -> Dict[str, object]:
        total = len(self._records)
        x_wins = sum(1 for r in self._records if r.label == 1)
        o_wins = total - x_wins
        stats = {
            'total_games': total,
            'x_wins': x_wins,
            'o_wins': o_wins,
        }
        if total:
            stats['win_rate'] = {
                'x': round(x_wins / total * 100, 1),
                'o': round(o_wins / total * 100, 1),
            }
        return stats

    def clear(self):
        self._records.clear()

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump([asdict(r) for r in self._records], f)
        return path

    @classmethod
    def load(cls, path: Union[str, Path], max_games: int = MAX_HISTORY_GAMES) -> 'GameHistory':
        """
        Load a saved history.

        A missing file gives an empty history; an unreadable one is logged
        and also gives an empty history.
        """
        path = Path(path)
        if not path.exists():
            return cls(max_games=max_games)
        try:
            with open(path, 'r') as f:
                records = [GameRecord(**entry) for entry in json.load(f)]
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Failed to load game history from %s: %s", path, e)
            return cls(max_games=max_games)
        return cls(max_games=max_games, records=records)
