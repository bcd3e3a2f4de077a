"""Computer players for the three roles.

Each agent scores every legal target cell for its role and requests the
best one (first in row-major order on ties). Staying in place is always
legal on the agent's own turn, so an agent never stalls the turn order.
"""

import random
from abc import ABC, abstractmethod
from collections.abc import Mapping

import structlog

from .engine import GameEngine, WinnerResult
from .types import Position, Role

logger = structlog.get_logger()

CAPTURE_BONUS = 1000
DANGER_PENALTY = 200


class Agent(ABC):
    """
    Base class: plays one role's turns on an engine.

    Subclasses set `role` and implement `score`.
    """

    role: Role

    def __init__(self, engine: GameEngine):
        self.engine = engine

    @abstractmethod
    def score(self, to: Position) -> float:
        """Higher is better."""

    def choose_move(self) -> Position | None:
        candidates = self.engine.legal_moves(self.role)
        if not candidates:
            return None
        return max(candidates, key=self.score)

    def play_turn(self) -> bool:
        """
        Play the agent's turn if it is on turn.

        Returns:
            True if the turn was taken (moved or skipped), False if it was
            not this agent's turn or the game is over.
        """
        if self.engine.is_game_over() or self.engine.current_turn() != self.role:
            return False

        target = self.choose_move()
        if target is None:
            logger.debug("agent_no_moves", role=self.role.name)
            return self.engine.skip(self.role)

        if self.engine.move(self.role, target):
            logger.debug("agent_moved", role=self.role.name, to=str(target))
            return True

        logger.warning("agent_move_refused", role=self.role.name, to=str(target))
        return self.engine.skip(self.role)


class PreyAgent(Agent):
    """Heads for food while keeping away from both hunters."""

    role = Role.PREY

    def score(self, to: Position) -> int:
        state = self.engine.state
        dist_food = to.chebyshev(state.food.position)
        dist_predator = to.chebyshev(state.predator.position)
        dist_apex = to.chebyshev(state.apex.position)

        score = 200 - 20 * dist_food + 6 * dist_predator + 4 * dist_apex
        if dist_predator <= 1:
            score -= DANGER_PENALTY
        if dist_apex <= 1:
            score -= DANGER_PENALTY
        if to == state.food.position:
            score += CAPTURE_BONUS
        return score


class PredatorAgent(Agent):
    """Chases the prey and avoids ending next to the apex."""

    role = Role.PREDATOR

    def score(self, to: Position) -> int:
        state = self.engine.state
        score = -to.chebyshev(state.prey.position)
        if to == state.prey.position:
            score += CAPTURE_BONUS
        if to.chebyshev(state.apex.position) <= 1:
            score -= 5
        return score


class ApexAgent(Agent):
    """Closes in on whichever animal is nearer."""

    role = Role.APEX

    def score(self, to: Position) -> int:
        state = self.engine.state
        prey_pos = state.prey.position
        predator_pos = state.predator.position
        score = -min(to.chebyshev(prey_pos), to.chebyshev(predator_pos))
        if to in (prey_pos, predator_pos):
            score += CAPTURE_BONUS
        return score


class RandomAgent(Agent):
    """Picks uniformly among legal targets."""

    def __init__(self, engine: GameEngine, role: Role, rng: random.Random | None = None):
        super().__init__(engine)
        self.role = role
        self.rng = rng or random.Random()

    def score(self, to: Position) -> float:
        return self.rng.random()


def default_agents(engine: GameEngine) -> dict[Role, Agent]:
    return {
        Role.PREY: PreyAgent(engine),
        Role.PREDATOR: PredatorAgent(engine),
        Role.APEX: ApexAgent(engine),
    }


def play_game(engine: GameEngine, agents: Mapping[Role, Agent] | None = None) -> WinnerResult:
    """Let agents play turns until the game is over.

    Raises:
        KeyError: If no agent is given for a role that comes on turn.
        RuntimeError: If an agent fails to take its turn.
    """
    agents = agents if agents is not None else default_agents(engine)
    while not engine.is_game_over():
        role = engine.current_turn()
        if not agents[role].play_turn():
            raise RuntimeError(f"Agent for {role.name} did not take its turn")

    result = engine.winner()
    logger.info(
        "game_finished",
        winners=[role.name for role in result.winners],
        rounds=engine.turns.total_rounds,
    )
    return result
