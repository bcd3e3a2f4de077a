"""Game state management."""

from typing import Iterator

from pydantic import BaseModel, PrivateAttr, field_validator

from .board import Board
from .exceptions import ConfigError
from .types import CellContent, Era, Position, Role


class Animal(BaseModel, frozen=True):
    """Immutable animal state."""

    name: str
    role: Role
    position: Position
    score: int = 0
    ability_cooldown: int = 0

    @field_validator("ability_cooldown")
    @classmethod
    def _clamp_cooldown(cls, value: int) -> int:
        return max(0, value)

    @property
    def ability_ready(self) -> bool:
        return self.ability_cooldown == 0

    def with_position(self, new_position: Position) -> "Animal":
        """Return copy with updated position."""
        return self.model_copy(update={"position": new_position})

    def with_score_delta(self, delta: int) -> "Animal":
        """Return copy with score changed by delta (may go negative)."""
        return self.model_copy(update={"score": self.score + delta})

    def with_cooldown(self, cooldown: int) -> "Animal":
        """Return copy with cooldown set, clamped at zero."""
        return self.model_copy(update={"ability_cooldown": max(0, cooldown)})


class Food(BaseModel, frozen=True):
    """Immutable food token state."""

    name: str
    position: Position

    def with_position(self, new_position: Position) -> "Food":
        """Return copy with updated position."""
        return self.model_copy(update={"position": new_position})


class GameState(BaseModel):
    """
    Mutable game state container.

    Holds frozen entity models and replaces them on change, keeping the
    board in sync so that it always mirrors the four entity positions.
    """

    era: Era
    board: Board
    total_rounds: int
    round: int = 1

    _animals: dict[Role, Animal] = PrivateAttr(default_factory=dict)
    _food: Food | None = PrivateAttr(default=None)

    # --- Initialization ---

    def init_entities(
        self,
        prey: Animal | None,
        predator: Animal | None,
        apex: Animal | None,
        food: Food | None,
    ) -> None:
        """Place the four entities on the board.

        Raises:
            ConfigError: If an entity is missing, has the wrong role, lies
                outside the board, or shares a cell with another entity.
        """
        if prey is None or predator is None or apex is None or food is None:
            raise ConfigError("Null entity")

        for role, animal in ((Role.PREY, prey), (Role.PREDATOR, predator), (Role.APEX, apex)):
            if animal.role != role:
                raise ConfigError(f"Expected {role.name} animal, got {animal.role.name}")

        positions = [prey.position, predator.position, apex.position, food.position]
        if not all(self.board.in_bounds(p) for p in positions):
            raise ConfigError("Entity out of bounds")
        if len(set(positions)) != 4:
            raise ConfigError("Overlapping entities")

        self._animals = {Role.PREY: prey, Role.PREDATOR: predator, Role.APEX: apex}
        self._food = food

        self.board.set(prey.position, CellContent.PREY)
        self.board.set(predator.position, CellContent.PREDATOR)
        self.board.set(apex.position, CellContent.APEX)
        self.board.set(food.position, CellContent.FOOD)

    @property
    def has_entities(self) -> bool:
        return self._food is not None

    # --- Accessors ---

    def animal(self, role: Role) -> Animal:
        """Get animal by role.

        Raises:
            ConfigError: If entities have not been initialized.
        """
        if role not in self._animals:
            raise ConfigError("Entities not initialized")
        return self._animals[role]

    @property
    def prey(self) -> Animal:
        return self.animal(Role.PREY)

    @property
    def predator(self) -> Animal:
        return self.animal(Role.PREDATOR)

    @property
    def apex(self) -> Animal:
        return self.animal(Role.APEX)

    @property
    def food(self) -> Food:
        if self._food is None:
            raise ConfigError("Entities not initialized")
        return self._food

    def animals(self) -> Iterator[Animal]:
        """Yield animals in turn order."""
        for role in Role:
            yield self.animal(role)

    def occupied_positions(self) -> set[Position]:
        return {a.position for a in self.animals()} | {self.food.position}

    # --- Mutation (engine only) ---

    def place_animal(self, role: Role, to: Position) -> Animal:
        """Move an animal, clearing its old cell and tagging the new one."""
        animal = self.animal(role)
        if self.board.get(animal.position) == CellContent.for_role(role):
            self.board.set(animal.position, CellContent.EMPTY)
        moved = animal.with_position(to)
        self._animals[role] = moved
        self.board.set(to, CellContent.for_role(role))
        return moved

    def replace_animal(self, animal: Animal) -> None:
        """Replace an animal's score/cooldown; position must be unchanged."""
        current = self.animal(animal.role)
        if current.position != animal.position:
            raise ValueError("replace_animal cannot move an animal, use place_animal")
        self._animals[animal.role] = animal

    def place_food(self, to: Position) -> Food:
        food = self.food
        if self.board.get(food.position) == CellContent.FOOD:
            self.board.set(food.position, CellContent.EMPTY)
        self._food = food.with_position(to)
        self.board.set(to, CellContent.FOOD)
        return self._food

    def clear_cell(self, position: Position) -> None:
        self.board.set(position, CellContent.EMPTY)

    def check_invariant(self) -> None:
        """Verify the board mirrors entity positions exactly.

        Raises:
            ConfigError: If an entity tag is missing or a stray tag exists.
        """
        expected: dict[Position, CellContent] = {
            a.position: CellContent.for_role(a.role) for a in self.animals()
        }
        expected[self.food.position] = CellContent.FOOD
        if len(expected) != 4:
            raise ConfigError("Overlapping entities")
        for content in CellContent:
            if content == CellContent.EMPTY:
                continue
            actual = set(self.board.cells_with(content))
            wanted = {p for p, c in expected.items() if c == content}
            if actual != wanted:
                raise ConfigError(
                    f"Board out of sync for {content.name}: "
                    f"board={sorted(map(str, actual))} entities={sorted(map(str, wanted))}"
                )
