"""
Main script to run Tic-Tac-Toe games between two agents.
"""
import argparse
import time
import sys
from typing import Optional

from tictactoe_ai.utils.constants import X, O, DIFFICULTIES, NORMAL
from tictactoe_ai.game.game import Game
from tictactoe_ai.agents import HumanAgent, RandomAgent, ClassicalAgent, LinearAgent
from tictactoe_ai.utils.renderer import ConsoleRenderer, ASCIIRenderer
from tictactoe_ai.evaluation.model_store import ModelStore
from tictactoe_ai.evaluation.history import GameHistory

# Agent type mapping
AGENT_TYPES = {
    'human': HumanAgent,
    'random': RandomAgent,
    'classical': ClassicalAgent,
    'linear': LinearAgent,
}

# Agents that take a difficulty suffix
SEARCH_AGENTS = ('classical', 'linear')

# Model store for loading versioned models
_model_store = None


def get_model_store():
    """Get or create the model store singleton."""
    global _model_store
    if _model_store is None:
        _model_store = ModelStore()
    return _model_store


def parse_agent_spec(spec: str) -> tuple:
    """
    Parse an agent specification string.

    Formats:
        'random'            -> ('random', None)
        'classical'         -> ('classical', 'normal')
        'classical:hard'    -> ('classical', 'hard')
        'linear:easy'       -> ('linear', 'easy')

    Returns:
        Tuple of (agent_type, difficulty or None)

    Raises:
        ValueError: for an unknown agent type or difficulty
    """
    if ':' in spec:
        agent_type, difficulty = spec.split(':', 1)
        agent_type, difficulty = agent_type.lower(), difficulty.lower()
    else:
        agent_type, difficulty = spec.lower(), None

    if agent_type not in AGENT_TYPES:
        raise ValueError(f"Unknown agent type: {agent_type}. "
                         f"Available: {list(AGENT_TYPES.keys())}")

    if agent_type in SEARCH_AGENTS:
        difficulty = difficulty or NORMAL
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {difficulty}. "
                             f"Available: {list(DIFFICULTIES)}")
    elif difficulty is not None:
        raise ValueError(f"Agent type '{agent_type}' does not take a difficulty")

    return (agent_type, difficulty)


def create_agent(spec: str, mark: str, model_name: Optional[str] = None):
    """
    Create an agent from a specification string.

    Args:
        spec: Agent specification (e.g., 'random', 'linear:hard')
        mark: 'X' or 'O'
        model_name: Stored model for linear agents (default weights if None)

    Returns:
        Agent instance
    """
    agent_type, difficulty = parse_agent_spec(spec)
    agent_class = AGENT_TYPES[agent_type]

    if agent_type == 'linear':
        weights = None
        if model_name:
            store = get_model_store()
            if not store.exists(model_name):
                available = [m.name for m in store.list_models()]
                raise ValueError(f"Model '{model_name}' not found. "
                                 f"Available: {available}")
            weights = store.load(model_name).get_weights()
        return agent_class(mark, difficulty, weights=weights)

    if agent_type == 'classical':
        return agent_class(mark, difficulty)

    return agent_class(mark)


def run_game(x_agent_spec, o_agent_spec, renderer_type='ascii', delay=0.0, verbose=True,
             model_name=None, history=None, game=None):
    """
    Run a game of Tic-Tac-Toe between two agents.

    Args:
        x_agent_spec: Agent specification for X
        o_agent_spec: Agent specification for O
        renderer_type: Type of renderer to use ('console' or 'ascii')
        delay: Delay between moves in seconds (for visualization)
        verbose: Whether to print detailed information
        model_name: Stored model for linear agents
        history: Optional GameHistory that records decisive games
        game: Optional pre-created Game instance

    Returns:
        Winning mark, or None for a draw
    """
    if game is None:
        game = Game()

    agents = {
        X: create_agent(x_agent_spec, X, model_name),
        O: create_agent(o_agent_spec, O, model_name),
    }

    if renderer_type.lower() == 'console':
        renderer = ConsoleRenderer
    else:
        renderer = ASCIIRenderer

    if verbose:
        print("Starting game...")
        print(f"X: {x_agent_spec}, O: {o_agent_spec}")
        print()
        renderer.render(game)
        print("\n")

    move_count = 0
    while not game.is_over():
        current_player = game.get_current_player()
        move = agents[current_player].select_move(game)
        if move is None:
            break

        game.make_move(move)
        move_count += 1

        if verbose:
            print(f"Move {move_count}: {current_player} plays {move}")
            renderer.render(game)
            print("\n")
            time.sleep(delay)

    winner = game.get_winner()
    if verbose:
        print(f"Game over after {move_count} moves.")
        print(f"Outcome: {winner + ' wins' if winner else 'draw'}")

    if history is not None:
        history.record_game(game.board, winner)

    return winner


def main():
    """Main function to parse arguments and run the games."""
    parser = argparse.ArgumentParser(
        description='Run Tic-Tac-Toe games between two agents.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Agent specification formats:
  human                   Moves typed at the terminal
  random                  Random move selection
  classical[:DIFFICULTY]  Alpha-beta with the classical evaluator
  linear[:DIFFICULTY]     Alpha-beta with the linear evaluator
DIFFICULTY is easy, normal (default) or hard.

Examples:
  python main.py --x human --o classical:hard
  python main.py --x linear:normal --o random --games 100 --quiet
  python main.py --x linear --model trained_001 --o classical:easy --games 20
  python main.py --list-models
'''
    )
    parser.add_argument('--x', type=str, default='human',
                        help='Agent for X (e.g., human, random, classical:hard, linear)')
    parser.add_argument('--o', type=str, default='classical',
                        help='Agent for O (e.g., human, random, classical:hard, linear)')
    parser.add_argument('--model', type=str, default=None,
                        help='Stored model name used by linear agents')
    parser.add_argument('--list-models', action='store_true',
                        help='List available models and exit')
    parser.add_argument('--renderer', type=str, choices=['console', 'ascii'], default='ascii',
                        help='Type of renderer to use')
    parser.add_argument('--delay', type=float, default=0.0,
                        help='Delay between moves in seconds')
    parser.add_argument('--quiet', action='store_true',
                        help='Run in quiet mode (no output)')
    parser.add_argument('--games', type=int, default=1,
                        help='Number of games to run (agents alternate marks for balanced evaluation)')
    parser.add_argument('--history', type=str, default=None,
                        help='Record decisive games to this history file (JSON)')

    args = parser.parse_args()

    if args.list_models:
        store = get_model_store()
        models = store.list_models()
        if not models:
            print("No models found.")
        else:
            print("Available models:")
            print(f"{'Name':<20} {'Notes'}")
            print("-" * 60)
            for m in models:
                print(f"{m.name:<20} {m.notes}")
        return

    # Validate agent specs early
    for spec, label in [(args.x, 'x'), (args.o, 'o')]:
        try:
            parse_agent_spec(spec)
        except ValueError as e:
            print(f"Error in --{label}: {e}")
            sys.exit(1)
    if args.model and not get_model_store().exists(args.model):
        print(f"Error: Model '{args.model}' not found")
        print(f"Available models: {[m.name for m in get_model_store().list_models()]}")
        sys.exit(1)

    history = GameHistory.load(args.history) if args.history else None

    # Balanced schedule: first half as given, second half with marks swapped;
    # an odd game out keeps the original assignment
    games_per_side = args.games // 2
    matchup_schedule = (
        [{'x': args.x, 'o': args.o, 'agent1': X}] * games_per_side
        + [{'x': args.o, 'o': args.x, 'agent1': O}] * games_per_side
    )
    if args.games % 2 == 1:
        matchup_schedule.append({'x': args.x, 'o': args.o, 'agent1': X})

    # Track by agent, not by mark
    agent1_wins = 0  # args.x
    agent2_wins = 0  # args.o
    draws = 0

    start_time = time.time()

    for i, matchup in enumerate(matchup_schedule):
        if args.games > 1 and not args.quiet:
            print(f"\n===== Game {i+1} (X: {matchup['x']}, O: {matchup['o']}) =====\n")

        winner = run_game(
            x_agent_spec=matchup['x'],
            o_agent_spec=matchup['o'],
            renderer_type=args.renderer,
            delay=args.delay,
            verbose=not args.quiet,
            model_name=args.model,
            history=history,
        )

        if winner is None:
            draws += 1
        elif winner == matchup['agent1']:
            agent1_wins += 1
        else:
            agent2_wins += 1

    total_time = time.time() - start_time

    if history is not None:
        history.save(args.history)

    if args.games > 1:
        print("\n===== Results =====")
        print(f"Games played: {args.games}")
        print(f"{args.x} wins: {agent1_wins} ({agent1_wins/args.games:.1%})")
        print(f"{args.o} wins: {agent2_wins} ({agent2_wins/args.games:.1%})")
        print(f"Draws: {draws} ({draws/args.games:.1%})")
        print(f"\nTotal time: {total_time:.2f}s, Average: {total_time/args.games:.4f}s per game")
        if history is not None:
            print(f"History: {len(history)} games saved to {args.history}")


if __name__ == "__main__":
    main()
