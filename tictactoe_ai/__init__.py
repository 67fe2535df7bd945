"""
Tic-Tac-Toe decision engine: rules, alpha-beta search, classical and
learned evaluators, and a gradient descent trainer for the linear model.
"""
from tictactoe_ai.engine import analyze_position

__version__ = "1.0.0"

__all__ = ['analyze_position']
