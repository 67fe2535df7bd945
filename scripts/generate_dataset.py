#!/usr/bin/env python3
"""
Generate a training dataset for the linear evaluator by self-play.

Plays games between two agents and writes one row per decisive game: the
6 dataset features of the final board (X-relative) and a +1/-1 label.
Draws are skipped.
"""
import argparse
import csv
import random
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tictactoe_ai.agents import RandomAgent, ClassicalAgent
from tictactoe_ai.evaluation.features import extract_dataset_features
from tictactoe_ai.evaluation.weights import FEATURE_NAMES
from tictactoe_ai.game.game import Game
from tictactoe_ai.utils.constants import X, O, DIFFICULTIES

LABEL_COLUMN = 'label'


def create_agent(spec: str, mark: str, rng: random.Random):
    """'random' or 'classical[:difficulty]'."""
    agent_type, _, difficulty = spec.lower().partition(':')
    if agent_type == 'random':
        return RandomAgent(mark, rng=rng)
    if agent_type == 'classical':
        difficulty = difficulty or 'easy'
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {difficulty}")
        return ClassicalAgent(mark, difficulty)
    raise ValueError(f"Unknown agent type: {agent_type}")


def play_game(x_agent, o_agent, rng: random.Random, random_opening: int = 0):
    """
    Play one game and return (final_board, winner).

    The first `random_opening` moves are random so deterministic agents
    still produce varied games.
    """
    game = Game()
    agents = {X: x_agent, O: o_agent}
    while not game.is_over():
        if len(game.move_history) < random_opening:
            move = rng.choice(game.get_legal_moves())
        else:
            move = agents[game.get_current_player()].select_move(game)
        game.make_move(move)
    return game.board, game.get_winner()


def generate_rows(x_spec: str, o_spec: str, games: int, seed=None, random_opening: int = 2):
    """Yield (features..., label) rows for each decisive game."""
    rng = random.Random(seed)
    x_agent = create_agent(x_spec, X, rng)
    o_agent = create_agent(o_spec, O, rng)
    for _ in range(games):
        board, winner = play_game(x_agent, o_agent, rng, random_opening)
        if winner is None:
            continue
        yield list(extract_dataset_features(board)) + [1 if winner == X else -1]


def main():
    parser = argparse.ArgumentParser(
        description='Generate a Tic-Tac-Toe training dataset by self-play',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python scripts/generate_dataset.py --output data/games.csv
  python scripts/generate_dataset.py --x classical:easy --o random --games 5000 --output data/games.csv
'''
    )
    parser.add_argument('--x', type=str, default='random',
                        help='Agent for X: random or classical[:difficulty] (default: random)')
    parser.add_argument('--o', type=str, default='random',
                        help='Agent for O: random or classical[:difficulty] (default: random)')
    parser.add_argument('--games', type=int, default=1000,
                        help='Number of games to play (default: 1000)')
    parser.add_argument('--random-opening', type=int, default=2,
                        help='Random moves at the start of each game (default: 2)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')
    parser.add_argument('--output', type=str, required=True,
                        help='Output CSV path')
    parser.add_argument('--quiet', action='store_true',
                        help='Suppress progress output')

    args = parser.parse_args()

    try:
        rows = list(generate_rows(args.x, args.o, args.games, args.seed, args.random_opening))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(FEATURE_NAMES + [LABEL_COLUMN])
        writer.writerows(rows)

    if not args.quiet:
        x_wins = sum(1 for row in rows if row[-1] == 1)
        print(f"Played {args.games} games ({args.x} vs {args.o})")
        print(f"Decisive: {len(rows)} (X wins {x_wins}, O wins {len(rows) - x_wins})")
        print(f"Dataset written to: {output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
