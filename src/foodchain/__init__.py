"""Food chain board game rules engine."""

from .agents import Agent, ApexAgent, PredatorAgent, PreyAgent, RandomAgent, play_game
from .board import Board
from .config import Config, GameSettings, find_config, list_configs, load_config
from .engine import GameEngine, MoveResult, WinnerResult
from .eras import load_food_chains, parse_food_chains
from .events import EventLog
from .exceptions import (
    ConfigError,
    EraDataError,
    FoodChainError,
    GameOverError,
    NoGameError,
    OutOfBoundsError,
    SaveFormatError,
)
from .persistence import load_from_file, load_game, save_game, save_to_file
from .state import Animal, Food, GameState
from .turns import TurnManager
from .types import CellContent, Era, FoodChain, GridSize, MoveKind, Position, Role

__all__ = [
    # Types
    "CellContent",
    "Era",
    "FoodChain",
    "GridSize",
    "MoveKind",
    "Position",
    "Role",
    # State
    "Animal",
    "Board",
    "Food",
    "GameState",
    "TurnManager",
    # Engine
    "GameEngine",
    "MoveResult",
    "WinnerResult",
    "EventLog",
    # Era data
    "load_food_chains",
    "parse_food_chains",
    # Persistence
    "save_game",
    "load_game",
    "save_to_file",
    "load_from_file",
    # Agents
    "Agent",
    "PreyAgent",
    "PredatorAgent",
    "ApexAgent",
    "RandomAgent",
    "play_game",
    # Config
    "Config",
    "GameSettings",
    "load_config",
    "find_config",
    "list_configs",
    # Exceptions
    "FoodChainError",
    "ConfigError",
    "OutOfBoundsError",
    "SaveFormatError",
    "EraDataError",
    "GameOverError",
    "NoGameError",
]
