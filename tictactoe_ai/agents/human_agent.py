"""
Human Agent: reads moves from the terminal.
"""
from typing import Callable, Optional, TYPE_CHECKING

from tictactoe_ai.agents.agent import Agent

if TYPE_CHECKING:
    from tictactoe_ai.game.game import Game


class HumanAgent(Agent):
    """Prompts for a cell index until a legal one is entered."""

    def __init__(self, mark: str, input_fn: Callable[[str], str] = input):
        super().__init__(mark)
        self.input_fn = input_fn

    def select_move(self, game: 'Game') -> Optional[int]:
        legal_moves = game.get_legal_moves()
        if not legal_moves:
            return None
        while True:
            answer = self.input_fn(f"{self.mark} to move {legal_moves}: ").strip()
            if answer.isdigit() and int(answer) in legal_moves:
                return int(answer)
            print(f"Invalid move {answer!r}, choose one of {legal_moves}")
