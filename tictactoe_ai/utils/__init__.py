"""
Utilities module for the Tic-Tac-Toe engine.
"""
from tictactoe_ai.utils.constants import (
    BOARD_SIZE, NUM_CELLS, X, O, EMPTY, MARKS,
    IN_PROGRESS, WIN, DRAW,
    EASY, NORMAL, HARD, DIFFICULTIES,
    CLASSICAL, ML, ML_BASIC, ML_ADVANCED, EVALUATION_TYPES
)
from tictactoe_ai.utils.renderer import ConsoleRenderer, ASCIIRenderer

__all__ = [
    'BOARD_SIZE', 'NUM_CELLS', 'X', 'O', 'EMPTY', 'MARKS',
    'IN_PROGRESS', 'WIN', 'DRAW',
    'EASY', 'NORMAL', 'HARD', 'DIFFICULTIES',
    'CLASSICAL', 'ML', 'ML_BASIC', 'ML_ADVANCED', 'EVALUATION_TYPES',
    'ConsoleRenderer', 'ASCIIRenderer'
]
