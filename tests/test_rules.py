"""
Unit tests for the rules engine, the Game wrapper and board serialization.
"""
import itertools

import pytest

from tictactoe_ai.exceptions import InvalidMove
from tictactoe_ai.game.game import Game
from tictactoe_ai.game.rules import (
    create_empty_board, to_board, legal_moves, apply_move, evaluate_outcome,
    is_terminal, opponent, current_player, index_to_row_col, row_col_to_index
)
from tictactoe_ai.game.serialization import (
    serialize_board, deserialize_board, board_to_string, board_from_string,
    serialize_outcome
)
from tictactoe_ai.utils.constants import X, O, IN_PROGRESS, WIN, DRAW, WIN_LINES


def board(text):
    """Build a board from a compact 9-char string like 'XX.OO....'."""
    return board_from_string(text)


class TestRules:
    """Tests for the pure rules functions."""

    def test_empty_board_legal_moves_in_order(self):
        """Every cell of an empty board is legal, ascending."""
        assert legal_moves(create_empty_board()) == list(range(9))

    def test_legal_moves_skip_occupied(self):
        assert legal_moves(board('X...O...X')) == [1, 2, 3, 5, 6, 7]

    def test_apply_move_returns_new_board(self):
        empty = create_empty_board()
        after = apply_move(empty, 4, X)
        assert after[4] == X
        assert empty[4] is None

    def test_apply_move_occupied_raises(self):
        with pytest.raises(InvalidMove) as exc_info:
            apply_move(board('X........'), 0, O)
        assert exc_info.value.move == 0

    @pytest.mark.parametrize("move", [-1, 9, 42])
    def test_apply_move_out_of_range_raises(self, move):
        with pytest.raises(InvalidMove):
            apply_move(create_empty_board(), move, X)

    def test_invalid_move_is_value_error(self):
        """Callers guarding against bad input with ValueError still catch it."""
        with pytest.raises(ValueError):
            apply_move(board('X........'), 0, O)

    def test_top_row_win(self):
        outcome = evaluate_outcome(board('XXXOO....'))
        assert outcome.status == WIN
        assert outcome.winner == X
        assert outcome.line == (0, 1, 2)

    @pytest.mark.parametrize("line", WIN_LINES)
    def test_every_line_wins(self, line):
        cells = [None] * 9
        for i in line:
            cells[i] = O
        outcome = evaluate_outcome(to_board(cells))
        assert outcome.status == WIN
        assert outcome.winner == O
        assert outcome.line == line

    def test_draw(self):
        outcome = evaluate_outcome(board('XOXXOOOXX'))
        assert outcome.status == DRAW
        assert outcome.winner is None
        assert outcome.is_terminal

    def test_in_progress(self):
        outcome = evaluate_outcome(board('XO.......'))
        assert outcome.status == IN_PROGRESS
        assert not outcome.is_terminal
        assert not is_terminal(board('XO.......'))

    def test_full_board_with_win_is_win(self):
        """A win on the last move is a win, not a draw."""
        outcome = evaluate_outcome(board('XOXOXOOXX'))
        assert outcome.status == WIN
        assert outcome.winner == X

    def test_outcome_consistent_on_all_reachable_boards(self):
        """Walk the whole game tree: every outcome is exactly one kind and wins are real lines."""
        seen = set()
        stack = [create_empty_board()]
        while stack:
            b = stack.pop()
            if b in seen:
                continue
            seen.add(b)
            outcome = evaluate_outcome(b)
            assert outcome.status in (IN_PROGRESS, WIN, DRAW)
            if outcome.status == WIN:
                assert outcome.line in WIN_LINES
                assert all(b[i] == outcome.winner for i in outcome.line)
                continue
            if outcome.status == DRAW:
                assert not legal_moves(b)
                continue
            mover = current_player(b)
            for move in legal_moves(b):
                stack.append(apply_move(b, move, mover))
        # 5478 distinct legal positions
        assert len(seen) == 5478

    def test_opponent(self):
        assert opponent(X) == O
        assert opponent(O) == X

    def test_current_player(self):
        assert current_player(create_empty_board()) == X
        assert current_player(board('X........')) == O
        assert current_player(board('XO.......')) == X

    def test_index_row_col_roundtrip(self):
        for index in range(9):
            assert row_col_to_index(*index_to_row_col(index)) == index
        assert index_to_row_col(5) == (1, 2)

    def test_to_board_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            to_board([None] * 8)


class TestGame:
    """Tests for the Game wrapper."""

    def test_x_moves_first_and_turns_alternate(self):
        game = Game()
        assert game.get_current_player() == X
        game.make_move(4)
        assert game.get_current_player() == O
        game.make_move(0)
        assert game.get_current_player() == X
        assert [(mover, move) for mover, move, _ in game.move_history] == [(X, 4), (O, 0)]

    def test_wrong_turn_raises(self):
        game = Game()
        with pytest.raises(InvalidMove):
            game.make_move(0, player=O)

    def test_move_after_game_over_raises(self):
        game = Game()
        for move in [0, 3, 1, 4, 2]:
            game.make_move(move)
        assert game.is_over()
        assert game.get_winner() == X
        assert game.get_legal_moves() == []
        with pytest.raises(InvalidMove):
            game.make_move(5)

    def test_start_from_position_infers_player(self):
        game = Game(board('X........'))
        assert game.get_current_player() == O

    def test_copy_is_independent(self):
        game = Game()
        game.make_move(0)
        clone = game.copy()
        clone.make_move(4)
        assert game.board[4] is None
        assert len(game.move_history) == 1

    def test_str_shows_indices_for_empty_cells(self):
        text = str(Game(board('X...O....')))
        assert text.splitlines()[0] == "X | 1 | 2"


class TestSerialization:
    """Tests for board serialization."""

    def test_serialize_board(self):
        assert serialize_board(board('X...O....')) == ['X', None, None, None, 'O', None, None, None, None]

    def test_deserialize_normalizes_case_and_blanks(self):
        result = deserialize_board(['x', '', None, 'o', None, None, None, None, None])
        assert result == (X, None, None, O, None, None, None, None, None)

    def test_deserialize_rejects_unknown_symbol(self):
        with pytest.raises(ValueError):
            deserialize_board(['Z'] + [None] * 8)

    def test_deserialize_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            deserialize_board([None] * 10)

    def test_board_string_roundtrip(self):
        text = 'XX.OO....'
        assert board_to_string(board_from_string(text)) == text

    def test_board_string_keeps_blank_cells_at_the_edges(self):
        assert board_from_string('XX.OO    ') == (X, X, None, O, O, None, None, None, None)
        assert board_from_string('    X    ') == (None,) * 4 + (X,) + (None,) * 4
        assert board_from_string('XX.OO....\n') == board('XX.OO....')

    def test_board_string_rejects_short_text(self):
        with pytest.raises(ValueError):
            board_from_string('XX.OO')

    def test_serialize_outcome(self):
        outcome = evaluate_outcome(board('XXXOO....'))
        assert serialize_outcome(outcome) == {'status': WIN, 'winner': X, 'line': [0, 1, 2]}
        assert serialize_outcome(evaluate_outcome(create_empty_board()))['line'] is None
