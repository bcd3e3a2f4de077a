"""Custom exceptions for the food chain game."""


class FoodChainError(Exception):
    """Base exception for game errors."""

    pass


class ConfigError(FoodChainError):
    """Raised when a game is constructed from invalid settings or placement."""

    pass


class OutOfBoundsError(FoodChainError, IndexError):
    """Raised when a board cell outside the grid is accessed."""

    pass


class SaveFormatError(FoodChainError):
    """Raised when save file content is corrupted or incomplete."""

    def __init__(self, reason: str):
        super().__init__(f"Invalid save format: {reason}")
        self.reason = reason


class EraDataError(FoodChainError):
    """Raised when an era data file is missing or malformed."""

    pass


class GameOverError(FoodChainError):
    """Raised when the turn order is advanced after the game ended."""

    pass


class NoGameError(FoodChainError):
    """Raised when an operation needs a game session and none is loaded."""

    pass
