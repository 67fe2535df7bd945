"""
Renderer for Tic-Tac-Toe games.
"""
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tictactoe_ai.game.game import Game
from tictactoe_ai.utils.constants import BOARD_SIZE, WIN, DRAW


class ConsoleRenderer:
    """
    Renders the game in the console using the game's own string form.
    """

    @staticmethod
    def render(game: 'Game'):
        print(game)


class ASCIIRenderer:
    """
    Renders the game as a boxed grid with row/column coordinates.

    Empty cells show their index so a human knows what to type.
    """

    @staticmethod
    def format(game: 'Game') -> str:
        board = game.get_board_state()
        outcome = game.get_outcome()

        h_line = "+---" * BOARD_SIZE + "+"
        lines = ["   " + "   ".join(str(i) for i in range(BOARD_SIZE)), " " + h_line]

        for r in range(BOARD_SIZE):
            row = f"{r}|"
            for c in range(BOARD_SIZE):
                index = r * BOARD_SIZE + c
                symbol = board[index] if board[index] is not None else str(index)
                row += f" {symbol} |"
            lines.append(row)
            lines.append(" " + h_line)

        if outcome.status == WIN:
            lines.append(f"\n{outcome.winner} wins along {list(outcome.line)}")
        elif outcome.status == DRAW:
            lines.append("\nDraw")
        else:
            lines.append(f"\nCurrent player: {game.get_current_player()}")
        return "\n".join(lines)

    @classmethod
    def render(cls, game: 'Game'):
        print(cls.format(game))
