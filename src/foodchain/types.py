"""Core types for the food chain game."""

from enum import Enum, IntEnum, auto

from pydantic import BaseModel

from .exceptions import ConfigError


class Era(Enum):
    """Rule set fixed for the lifetime of a game."""

    PAST = "PAST"
    PRESENT = "PRESENT"
    FUTURE = "FUTURE"

    @classmethod
    def parse(cls, tag: str) -> "Era":
        """Look up an era by name, ignoring case and surrounding whitespace."""
        try:
            return cls[tag.strip().upper()]
        except KeyError:
            raise ConfigError(f"Unknown era: {tag!r}") from None


class Role(Enum):
    """The three animal roles, in turn order."""

    PREY = "PREY"
    PREDATOR = "PREDATOR"
    APEX = "APEX"


class CellContent(IntEnum):
    """Board cell tags, stored as integer codes in the grid."""

    EMPTY = 0
    PREY = 1
    PREDATOR = 2
    APEX = 3
    FOOD = 4

    @classmethod
    def for_role(cls, role: Role) -> "CellContent":
        return cls[role.name]


class GridSize(Enum):
    """Supported board dimensions."""

    SMALL = 10
    MEDIUM = 15
    LARGE = 20

    @property
    def size(self) -> int:
        return self.value

    @classmethod
    def from_size(cls, n: int) -> "GridSize":
        """Map a numeric board size back to its tag.

        Raises:
            ConfigError: If the size is not one of the supported dimensions.
        """
        for member in cls:
            if member.value == n:
                return member
        raise ConfigError(f"Unsupported grid size: {n}")

    @classmethod
    def parse(cls, tag: str) -> "GridSize":
        """Look up a grid size by tag name, ignoring case."""
        try:
            return cls[tag.strip().upper()]
        except KeyError:
            raise ConfigError(f"Unknown grid size: {tag!r}") from None


class MoveKind(Enum):
    """Classification of a requested move."""

    NONE = auto()
    WALK = auto()
    ABILITY = auto()
    SKIP = auto()


# Row/col deltas of the 8 surrounding cells, scanned row-major
NEIGHBOR_DELTAS: tuple[tuple[int, int], ...] = tuple(
    (dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if (dr, dc) != (0, 0)
)


class Position(BaseModel, frozen=True):
    """Immutable board coordinate."""

    row: int
    col: int

    def offset(self, dr: int, dc: int) -> "Position":
        """Return new position shifted by the given row/col deltas."""
        return Position(row=self.row + dr, col=self.col + dc)

    def chebyshev(self, other: "Position") -> int:
        """King-move distance to another position."""
        return max(abs(self.row - other.row), abs(self.col - other.col))

    def is_adjacent(self, other: "Position") -> bool:
        return self.chebyshev(other) == 1

    def neighbors(self) -> list["Position"]:
        """The 8 surrounding positions, which may lie off the board."""
        return [self.offset(dr, dc) for dr, dc in NEIGHBOR_DELTAS]

    def __hash__(self) -> int:
        return hash((self.row, self.col))

    def __str__(self) -> str:
        return f"({self.row},{self.col})"

    def __repr__(self) -> str:
        return f"Position(row={self.row}, col={self.col})"


class FoodChain(BaseModel, frozen=True):
    """Display names for one apex/predator/prey/food triplet plus food."""

    apex: str
    predator: str
    prey: str
    food: str

    def name_for(self, role: Role) -> str:
        if role == Role.APEX:
            return self.apex
        if role == Role.PREDATOR:
            return self.predator
        return self.prey

    def __str__(self) -> str:
        return f"{self.apex}, {self.predator}, {self.prey}, {self.food}"
