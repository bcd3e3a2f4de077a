"""Shared test fixtures for food chain tests."""

import random
from collections.abc import Callable

import pytest

from foodchain.board import Board
from foodchain.engine import GameEngine
from foodchain.events import EventLog
from foodchain.state import Animal, Food, GameState
from foodchain.turns import TurnManager
from foodchain.types import Era, GridSize, Position, Role


def P(row: int, col: int) -> Position:
    return Position(row=row, col=col)


def make_state(
    era: Era = Era.PAST,
    prey: Position = P(0, 0),
    predator: Position = P(9, 9),
    apex: Position = P(0, 9),
    food: Position = P(9, 0),
    size: GridSize = GridSize.SMALL,
    total_rounds: int = 10,
    round: int = 1,
    scores: dict[Role, int] | None = None,
    cooldowns: dict[Role, int] | None = None,
) -> GameState:
    """Build a state with entities at the given cells."""
    scores = scores or {}
    cooldowns = cooldowns or {}
    state = GameState(
        era=era, board=Board(size=size.size), total_rounds=total_rounds, round=round
    )

    def animal(role: Role, name: str, pos: Position) -> Animal:
        return Animal(
            name=name,
            role=role,
            position=pos,
            score=scores.get(role, 0),
            ability_cooldown=cooldowns.get(role, 0),
        )

    state.init_entities(
        prey=animal(Role.PREY, "Gazelle", prey),
        predator=animal(Role.PREDATOR, "Hyena", predator),
        apex=animal(Role.APEX, "Lion", apex),
        food=Food(name="Grass", position=food),
    )
    return state


@pytest.fixture
def event_log() -> EventLog:
    """In-memory event log."""
    return EventLog()


@pytest.fixture
def engine(event_log: EventLog) -> GameEngine:
    """Seeded engine with a fresh 10-round Past game on a small board."""
    engine = GameEngine(rng=random.Random(42), event_log=event_log)
    engine.start_game(Era.PAST, GridSize.SMALL, total_rounds=10)
    return engine


@pytest.fixture
def build_engine(event_log: EventLog) -> Callable[..., GameEngine]:
    """Factory for an engine loaded with a hand-built position.

    Accepts make_state keyword arguments plus ``turn`` (role on turn).
    """

    def build(turn: Role = Role.PREY, seed: int = 7, **kwargs) -> GameEngine:
        state = make_state(**kwargs)
        turns = TurnManager.from_turn(state.total_rounds, turn, state.round)
        engine = GameEngine(rng=random.Random(seed), event_log=event_log)
        engine.load_from(state, turns)
        return engine

    return build
