"""
Serialization utilities for Tic-Tac-Toe boards and outcomes.

Converts boards to/from JSON-friendly lists and compact strings for:
- Web API requests and responses
- Command-line board arguments
- Game history records
"""
from typing import Any, Dict, List, Optional, Sequence

from tictactoe_ai.game.rules import Board, GameOutcome, to_board
from tictactoe_ai.utils.constants import NUM_CELLS, X, O, EMPTY

# Characters accepted as an empty cell in compact board strings
EMPTY_CHARS = frozenset('.-_ ')


def serialize_board(board: Board) -> List[Optional[str]]:
    """Convert a board to a JSON list of 'X', 'O' or None."""
    return list(board)


def deserialize_board(cells: Sequence[Optional[str]]) -> Board:
    """
    Convert a JSON list back to a board, normalizing case and blanks.

    Raises:
        ValueError: if the list isn't 9 cells or holds an unknown symbol
    """
    if len(cells) != NUM_CELLS:
        raise ValueError(f"Board must have {NUM_CELLS} cells, got {len(cells)}")
    board = []
    for cell in cells:
        if cell is None or cell == '':
            board.append(EMPTY)
            continue
        mark = str(cell).upper()
        if mark not in (X, O):
            raise ValueError(f"Unknown cell value: {cell!r}")
        board.append(mark)
    return to_board(board)


def board_to_string(board: Board) -> str:
    """Compact 9-character form, '.' for empty cells (e.g. 'XX.OO....')."""
    return ''.join(cell if cell is not None else '.' for cell in board)


def board_from_string(text: str) -> Board:
    """
    Parse the compact form produced by board_to_string.

    Raises:
        ValueError: if the string isn't 9 cells long or has unknown symbols
    """
    # Spaces are empty cells, so only line endings are dropped
    text = text.strip('\r\n')
    if len(text) != NUM_CELLS:
        raise ValueError(f"Board string must have {NUM_CELLS} characters, got {len(text)}")
    return deserialize_board([None if ch in EMPTY_CHARS else ch for ch in text])


def serialize_outcome(outcome: GameOutcome) -> Dict[str, Any]:
    """Convert a GameOutcome to a JSON-serializable dictionary."""
    return {
        'status': outcome.status,
        'winner': outcome.winner,
        'line': list(outcome.line) if outcome.line else None,
    }
