"""
Game class for Tic-Tac-Toe.
"""
from typing import List, Optional, Tuple

from tictactoe_ai.exceptions import InvalidMove
from tictactoe_ai.game.rules import (
    Board, GameOutcome, create_empty_board, to_board, legal_moves,
    apply_move, evaluate_outcome, opponent, current_player
)
from tictactoe_ai.utils.constants import BOARD_SIZE, X, WIN


class Game:
    """
    Represents a Tic-Tac-Toe game in progress.

    Wraps the pure rules functions with turn order and a move history.
    X always moves first.
    """

    def __init__(self, board: Optional[Board] = None):
        """
        Initialize a game.

        Args:
            board: Optional starting position. The player to move is
                inferred from the mark counts.
        """
        self.board = to_board(board) if board is not None else create_empty_board()
        self.current_player = current_player(self.board) if board is not None else X
        self.move_history: List[Tuple[str, int, Board]] = []

    def get_legal_moves(self) -> List[int]:
        """Empty cells, or nothing once the game is over."""
        if self.is_over():
            return []
        return legal_moves(self.board)

    def make_move(self, move: int, player: Optional[str] = None) -> Board:
        """
        Place the current player's mark and pass the turn.

        Args:
            move: Cell index 0-8
            player: Optional mark of the player claiming the move; must match
                the current player when given

        Returns:
            The new board

        Raises:
            InvalidMove: if the game is over, it's not `player`'s turn, or
                the cell is unavailable
        """
        if self.is_over():
            raise InvalidMove(move, "game is already over")
        if player is not None and player != self.current_player:
            raise InvalidMove(move, f"it is {self.current_player}'s turn")

        mover = self.current_player
        self.board = apply_move(self.board, move, mover)
        self.move_history.append((mover, move, self.board))

        if not self.is_over():
            self.current_player = opponent(mover)
        return self.board

    def get_outcome(self) -> GameOutcome:
        return evaluate_outcome(self.board)

    def is_over(self) -> bool:
        return self.get_outcome().is_terminal

    def get_winner(self) -> Optional[str]:
        outcome = self.get_outcome()
        return outcome.winner if outcome.status == WIN else None

    def get_board_state(self) -> Board:
        return self.board

    def get_current_player(self) -> str:
        return self.current_player

    def copy(self) -> 'Game':
        """Independent copy sharing no mutable state."""
        clone = Game.__new__(Game)
        clone.board = self.board
        clone.current_player = self.current_player
        clone.move_history = list(self.move_history)
        return clone

    def __str__(self) -> str:
        rows = []
        for r in range(BOARD_SIZE):
            cells = self.board[r * BOARD_SIZE:(r + 1) * BOARD_SIZE]
            rows.append(" | ".join(c if c is not None else str(r * BOARD_SIZE + i)
                                   for i, c in enumerate(cells)))
        return "\n---------\n".join(rows)
