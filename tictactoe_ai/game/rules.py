"""
Rules of Tic-Tac-Toe as pure functions over an immutable board.

A board is a tuple of 9 cells in row-major order; each cell is X, O or
None. Functions never mutate their input.
"""
from typing import List, NamedTuple, Optional, Sequence, Tuple

from tictactoe_ai.exceptions import InvalidMove
from tictactoe_ai.utils.constants import (
    NUM_CELLS, BOARD_SIZE, X, O, EMPTY, WIN_LINES,
    IN_PROGRESS, WIN, DRAW
)

Board = Tuple[Optional[str], ...]


class GameOutcome(NamedTuple):
    """Outcome derived from a board."""
    status: str                             # IN_PROGRESS, WIN or DRAW
    winner: Optional[str] = None            # set only for WIN
    line: Optional[Tuple[int, int, int]] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != IN_PROGRESS


def create_empty_board() -> Board:
    """Return a board with all 9 cells empty."""
    return (EMPTY,) * NUM_CELLS


def to_board(cells: Sequence[Optional[str]]) -> Board:
    """Coerce any 9-cell sequence into a board tuple."""
    if len(cells) != NUM_CELLS:
        raise ValueError(f"Board must have {NUM_CELLS} cells, got {len(cells)}")
    return tuple(cells)


def legal_moves(board: Board) -> List[int]:
    """All empty cell indices in ascending order."""
    return [i for i, cell in enumerate(board) if cell is EMPTY]


def apply_move(board: Board, move: int, mark: str) -> Board:
    """
    Return a new board with `mark` placed at `move`.

    Raises:
        InvalidMove: if the index is off the board or the cell is occupied
    """
    if not 0 <= move < NUM_CELLS:
        raise InvalidMove(move, "index out of range")
    if board[move] is not EMPTY:
        raise InvalidMove(move, f"cell is occupied by {board[move]}")
    return board[:move] + (mark,) + board[move + 1:]


def check_winner(board: Board) -> Optional[Tuple[str, Tuple[int, int, int]]]:
    """Return (winner, line) for the first completed line, or None."""
    for line in WIN_LINES:
        a, b, c = line
        if board[a] is not EMPTY and board[a] == board[b] == board[c]:
            return board[a], line
    return None


def evaluate_outcome(board: Board) -> GameOutcome:
    """Classify the board as in progress, won (with the line) or drawn."""
    result = check_winner(board)
    if result is not None:
        winner, line = result
        return GameOutcome(WIN, winner, line)
    if all(cell is not EMPTY for cell in board):
        return GameOutcome(DRAW)
    return GameOutcome(IN_PROGRESS)


def is_terminal(board: Board) -> bool:
    return evaluate_outcome(board).is_terminal


def opponent(mark: str) -> str:
    return O if mark == X else X


def current_player(board: Board) -> str:
    """Player to move under strict alternation with X first."""
    return X if board.count(X) == board.count(O) else O


def index_to_row_col(index: int) -> Tuple[int, int]:
    return index // BOARD_SIZE, index % BOARD_SIZE


def row_col_to_index(row: int, col: int) -> int:
    return row * BOARD_SIZE + col
