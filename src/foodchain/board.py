"""Square game board."""

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, PrivateAttr

from .exceptions import ConfigError, OutOfBoundsError
from .types import CellContent, Position


class Board(BaseModel):
    """
    Fixed-size square grid of cell tags.

    Cells are stored as CellContent codes in a numpy int8 array indexed
    [row, col]. Every cell starts EMPTY.
    """

    size: int

    _grid: NDArray[np.int8] = PrivateAttr()

    def model_post_init(self, __context: object) -> None:
        if self.size <= 0:
            raise ConfigError(f"Board size must be > 0, got {self.size}")
        self._grid = np.full((self.size, self.size), CellContent.EMPTY, dtype=np.int8)

    def in_bounds(self, position: Position) -> bool:
        """Check if position is within the grid."""
        return 0 <= position.row < self.size and 0 <= position.col < self.size

    def _require_in_bounds(self, position: Position) -> None:
        if not self.in_bounds(position):
            raise OutOfBoundsError(f"Out of bounds: {position} size={self.size}")

    def get(self, position: Position) -> CellContent:
        """Get cell content.

        Raises:
            OutOfBoundsError: If position is outside the grid.
        """
        self._require_in_bounds(position)
        return CellContent(int(self._grid[position.row, position.col]))

    def set(self, position: Position, content: CellContent) -> None:
        """Set cell content.

        Raises:
            OutOfBoundsError: If position is outside the grid.
        """
        self._require_in_bounds(position)
        self._grid[position.row, position.col] = int(content)

    def is_empty(self, position: Position) -> bool:
        return self.get(position) == CellContent.EMPTY

    def cells_with(self, content: CellContent) -> list[Position]:
        """All positions holding the given content, row-major."""
        return [
            Position(row=int(r), col=int(c))
            for r, c in np.argwhere(self._grid == int(content))
        ]

    def empty_cells(self) -> list[Position]:
        return self.cells_with(CellContent.EMPTY)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.size == other.size and bool(np.array_equal(self._grid, other._grid))

    def __repr__(self) -> str:
        symbols = {
            CellContent.EMPTY: ".",
            CellContent.PREY: "p",
            CellContent.PREDATOR: "P",
            CellContent.APEX: "A",
            CellContent.FOOD: "f",
        }
        rows = [
            "".join(symbols[CellContent(int(v))] for v in row) for row in self._grid
        ]
        return f"Board(size={self.size})\n" + "\n".join(rows)
