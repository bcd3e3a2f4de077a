"""Game configuration loading from TOML files."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigError
from .types import Era, GridSize

CONFIGS_DIR = Path(__file__).parent / "configs"


class GameSettings(BaseModel):
    """Settings for one game from TOML."""

    era: Era = Era.PAST
    grid_size: GridSize = GridSize.SMALL
    total_rounds: int = Field(default=10, gt=0)
    seed: int | None = None
    data_dir: str | None = None  # Directory with <era>.txt food chain files
    event_log: str | None = None  # Path to append the game event log to

    @field_validator("era", mode="before")
    @classmethod
    def _parse_era(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return Era.parse(value)
            except ConfigError as e:
                raise ValueError(str(e)) from e
        return value

    @field_validator("grid_size", mode="before")
    @classmethod
    def _parse_grid_size(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return GridSize.parse(value)
            except ConfigError as e:
                raise ValueError(str(e)) from e
        if isinstance(value, int):
            try:
                return GridSize.from_size(value)
            except ConfigError as e:
                raise ValueError(str(e)) from e
        return value


class Config(BaseModel):
    """Complete configuration for a game run."""

    game: GameSettings = GameSettings()


def load_config(config_path: Path | str) -> Config:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed Config object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
        pydantic.ValidationError: If a setting is invalid.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return Config.model_validate(data)


def find_config(name: str) -> Path:
    """Find a config file by name.

    Searches in the following order:
    1. Exact path if name contains a path separator or ends with .toml
    2. foodchain/configs/{name}.toml

    Raises:
        FileNotFoundError: If config file is not found.
    """
    if "/" in name or name.endswith(".toml"):
        path = Path(name)
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {name}")

    config_path = CONFIGS_DIR / f"{name}.toml"
    if config_path.exists():
        return config_path

    raise FileNotFoundError(
        f"Config '{name}' not found in {CONFIGS_DIR}. "
        f"Available configs: {list_configs()}"
    )


def list_configs() -> list[str]:
    """List available config names."""
    if not CONFIGS_DIR.exists():
        return []
    return sorted(p.stem for p in CONFIGS_DIR.glob("*.toml"))
