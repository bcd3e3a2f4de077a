"""Turn and round progression."""

from dataclasses import dataclass

from .exceptions import ConfigError, GameOverError
from .types import Role

ORDER: tuple[Role, ...] = (Role.PREY, Role.PREDATOR, Role.APEX)


@dataclass
class TurnManager:
    """
    Finite-state turn cycle: Prey -> Predator -> Apex, then the round ends.

    After the Apex turn of the last round the manager becomes terminal
    (game_over) and refuses further transitions.
    """

    total_rounds: int
    index: int = 0
    round: int = 1
    game_over: bool = False

    def __post_init__(self) -> None:
        if self.total_rounds <= 0:
            raise ConfigError("total_rounds must be > 0")
        if self.round <= 0:
            raise ConfigError("round must be > 0")
        if self.round > self.total_rounds:
            raise ConfigError(
                f"round {self.round} exceeds total_rounds {self.total_rounds}"
            )
        if not 0 <= self.index < len(ORDER):
            raise ConfigError(f"Invalid turn index: {self.index}")

    @classmethod
    def from_turn(
        cls, total_rounds: int, turn: Role, round: int, game_over: bool = False
    ) -> "TurnManager":
        """Rebuild a manager positioned at the given role's turn."""
        return cls(
            total_rounds=total_rounds,
            index=ORDER.index(turn),
            round=round,
            game_over=game_over,
        )

    @property
    def current_turn(self) -> Role:
        return ORDER[self.index]

    def end_turn(self) -> bool:
        """
        Advance to the next turn.

        Returns:
            True if the round ended (Apex just acted), False otherwise.

        Raises:
            GameOverError: If the game is already over.
        """
        if self.game_over:
            raise GameOverError("Cannot end turn, game is over")
        if self.index < len(ORDER) - 1:
            self.index += 1
            return False
        self.index = 0
        if self.round >= self.total_rounds:
            self.game_over = True
            return True
        self.round += 1
        return True
