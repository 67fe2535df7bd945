"""
Agents module for the Tic-Tac-Toe engine.
"""
from tictactoe_ai.agents.agent import Agent
from tictactoe_ai.agents.random_agent import RandomAgent
from tictactoe_ai.agents.human_agent import HumanAgent
from tictactoe_ai.agents.search_agent import SearchAgent, ClassicalAgent, LinearAgent

__all__ = ['Agent', 'RandomAgent', 'HumanAgent', 'SearchAgent', 'ClassicalAgent', 'LinearAgent']
