"""
Game module: Tic-Tac-Toe rules, the Game wrapper and board serialization.
"""
from tictactoe_ai.game.rules import (
    Board,
    GameOutcome,
    create_empty_board,
    legal_moves,
    apply_move,
    evaluate_outcome,
    is_terminal,
    opponent,
    current_player,
)
from tictactoe_ai.game.game import Game

__all__ = [
    'Board',
    'GameOutcome',
    'Game',
    'create_empty_board',
    'legal_moves',
    'apply_move',
    'evaluate_outcome',
    'is_terminal',
    'opponent',
    'current_player',
]
