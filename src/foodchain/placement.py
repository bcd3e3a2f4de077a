"""Initial setup: random non-overlapping placement and food chain choice."""

import random
from collections.abc import Iterable, Sequence

import structlog

from .board import Board
from .exceptions import ConfigError
from .state import Animal, Food, GameState
from .turns import TurnManager
from .types import Era, FoodChain, GridSize, Position, Role

logger = structlog.get_logger()


def pick_random_empty(
    board: Board, rng: random.Random, exclude: Iterable[Position] = ()
) -> Position:
    """Pick a uniformly random empty cell that is not excluded.

    Raises:
        ConfigError: If no candidate cell remains.
    """
    excluded = set(exclude)
    candidates = [p for p in board.empty_cells() if p not in excluded]
    if not candidates:
        raise ConfigError("No empty cell available")
    return rng.choice(candidates)


def choose_food_chain(chains: Sequence[FoodChain], rng: random.Random) -> FoodChain:
    if not chains:
        raise ConfigError("No food chains to choose from")
    return rng.choice(list(chains))


def new_game(
    era: Era,
    grid_size: GridSize,
    total_rounds: int,
    chains: Sequence[FoodChain],
    rng: random.Random,
) -> tuple[GameState, TurnManager, FoodChain]:
    """
    Build the initial state of a new game.

    Places prey, predator, apex and food (in that order) on distinct random
    cells and names them after one randomly chosen food chain.

    Raises:
        ConfigError: If total_rounds is not positive or no chain is given.
    """
    turns = TurnManager(total_rounds=total_rounds)
    board = Board(size=grid_size.size)
    state = GameState(era=era, board=board, total_rounds=total_rounds)

    used: list[Position] = []
    for _ in range(4):
        used.append(pick_random_empty(board, rng, exclude=used))
    prey_pos, predator_pos, apex_pos, food_pos = used

    chain = choose_food_chain(chains, rng)

    state.init_entities(
        prey=Animal(name=chain.prey, role=Role.PREY, position=prey_pos),
        predator=Animal(name=chain.predator, role=Role.PREDATOR, position=predator_pos),
        apex=Animal(name=chain.apex, role=Role.APEX, position=apex_pos),
        food=Food(name=chain.food, position=food_pos),
    )

    logger.debug(
        "game_placed",
        era=era.name,
        grid_size=grid_size.name,
        prey=str(prey_pos),
        predator=str(predator_pos),
        apex=str(apex_pos),
        food=str(food_pos),
    )
    return state, turns, chain
