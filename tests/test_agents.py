"""
Tests for agents and the command-line game runner.
"""
import random

import pytest

import main
from main import parse_agent_spec, create_agent, run_game
from tictactoe_ai.agents import (
    Agent, RandomAgent, HumanAgent, ClassicalAgent, LinearAgent
)
from tictactoe_ai.evaluation.history import GameHistory
from tictactoe_ai.evaluation.model_store import ModelStore, LinearModel, NormalizationStats
from tictactoe_ai.evaluation.weights import DEFAULT_MODEL_WEIGHTS, Weights
from tictactoe_ai.game.game import Game
from tictactoe_ai.game.serialization import board_from_string
from tictactoe_ai.utils.constants import X, O


@pytest.fixture
def temp_model_store(tmp_path, monkeypatch):
    """Point main's model store at a temporary directory."""
    store = ModelStore(models_dir=tmp_path / "models")
    monkeypatch.setattr(main, "_model_store", store)
    return store


class TestAgents:
    """Tests for move selection by each agent type."""

    def test_agent_is_abstract(self):
        with pytest.raises(TypeError):
            Agent(X)

    def test_random_agent_picks_legal_move(self):
        game = Game(board_from_string('XOXOX....'))
        agent = RandomAgent(O, rng=random.Random(0))
        for _ in range(10):
            assert agent.select_move(game) in (5, 6, 7, 8)

    def test_random_agent_no_moves(self):
        game = Game(board_from_string('XXXOO....'))
        assert RandomAgent(O).select_move(game) is None

    def test_human_agent_retries_until_legal(self, capsys):
        answers = iter(['9', 'abc', '0', '4'])
        game = Game(board_from_string('X........'))
        agent = HumanAgent(O, input_fn=lambda prompt: next(answers))
        assert agent.select_move(game) == 4
        assert capsys.readouterr().out.count("Invalid move") == 3

    def test_classical_agent_blocks(self):
        game = Game(board_from_string('XX..O....'))
        agent = ClassicalAgent(O, 'hard')
        assert agent.select_move(game) == 2
        assert agent.last_result.best_move == 2

    def test_classical_agent_takes_win(self):
        game = Game(board_from_string('XX.OO....'))
        assert ClassicalAgent(X, 'easy').select_move(game) == 2

    def test_linear_agent_weights(self):
        agent = LinearAgent(X, 'hard')
        assert agent.get_weights() == DEFAULT_MODEL_WEIGHTS
        custom = Weights.from_sequence([1, 1, 1, 1, 1, 1])
        agent.set_weights(custom)
        assert agent.get_weights() == custom

    def test_linear_agent_hard_blocks(self):
        game = Game(board_from_string('OO..X...X'))
        assert LinearAgent(X, 'hard').select_move(game) == 2

    def test_repr(self):
        assert repr(ClassicalAgent(X, 'easy')) == "ClassicalAgent(mark='X', difficulty='easy')"
        assert repr(RandomAgent(O)) == "RandomAgent(mark='O')"


class TestParseAgentSpec:
    """Tests for agent specification strings."""

    @pytest.mark.parametrize("spec,expected", [
        ('random', ('random', None)),
        ('human', ('human', None)),
        ('classical', ('classical', 'normal')),
        ('classical:hard', ('classical', 'hard')),
        ('Linear:EASY', ('linear', 'easy')),
    ])
    def test_valid_specs(self, spec, expected):
        assert parse_agent_spec(spec) == expected

    @pytest.mark.parametrize("spec", ['minimax', 'classical:brutal', 'random:hard'])
    def test_invalid_specs(self, spec):
        with pytest.raises(ValueError):
            parse_agent_spec(spec)


class TestCreateAgent:
    """Tests for building agents from specs."""

    def test_creates_each_type(self):
        assert isinstance(create_agent('random', X), RandomAgent)
        assert isinstance(create_agent('human', X), HumanAgent)
        classical = create_agent('classical:easy', O)
        assert isinstance(classical, ClassicalAgent)
        assert classical.difficulty == 'easy'
        assert classical.mark == O

    def test_linear_defaults_to_built_in_weights(self):
        agent = create_agent('linear:hard', X)
        assert agent.get_weights() == DEFAULT_MODEL_WEIGHTS

    def test_linear_loads_stored_model(self, temp_model_store):
        weights = Weights.from_sequence([2, -2, 10, -10, 3, 1], bias=0.5)
        temp_model_store.save(LinearModel.from_weights("custom", weights))
        agent = create_agent('linear', O, model_name="custom")
        assert agent.get_weights() == weights

    def test_linear_folds_in_normalization(self, temp_model_store):
        weights = Weights.from_sequence([2, -2, 10, -10, 3, 1])
        temp_model_store.save(LinearModel.from_weights(
            "normalized", weights,
            normalization=NormalizationStats(mins=[0.0] * 6, maxs=[5, 5, 2, 2, 1, 4]),
        ))
        agent = create_agent('linear', X, model_name="normalized")
        assert agent.get_weights().coefficients == pytest.approx((0.4, -0.4, 5, -5, 3, 0.25))

    def test_linear_missing_model(self, temp_model_store):
        with pytest.raises(ValueError, match="not found"):
            create_agent('linear', O, model_name="missing")


class TestRunGame:
    """Tests for playing complete games."""

    def test_random_game_finishes(self):
        winner = run_game('random', 'random', verbose=False)
        assert winner in (X, O, None)

    def test_verbose_output(self, capsys):
        run_game('classical:easy', 'classical:easy', verbose=True)
        out = capsys.readouterr().out
        assert "Starting game..." in out
        assert "Game over after" in out

    def test_continues_given_game(self):
        game = Game(board_from_string('XX.OO....'))
        assert run_game('classical:easy', 'random', verbose=False, game=game) == X

    def test_records_history(self):
        history = GameHistory()
        game = Game(board_from_string('XX.OO....'))
        run_game('classical:easy', 'random', verbose=False, history=history, game=game)
        assert len(history) == 1
        assert history.records[0].label == 1

    @pytest.mark.parametrize("x_spec,o_spec,hard_mark", [
        ('classical:hard', 'random', X),
        ('random', 'classical:hard', O),
    ])
    def test_hard_classical_never_loses(self, x_spec, o_spec, hard_mark):
        for _ in range(2):
            winner = run_game(x_spec, o_spec, verbose=False)
            assert winner in (hard_mark, None)
