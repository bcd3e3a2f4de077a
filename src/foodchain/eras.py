"""Era data loading: which food chains can appear in each era."""

from pathlib import Path

import structlog

from .exceptions import EraDataError
from .types import Era, FoodChain

logger = structlog.get_logger()

DEFAULT_DATA_DIR = Path(__file__).parent / "data"

_PREFIX = "food chain"


def era_file(era: Era, data_dir: Path | str | None = None) -> Path:
    """Path of the data file for an era, e.g. data/past.txt."""
    base = Path(data_dir) if data_dir is not None else DEFAULT_DATA_DIR
    return base / f"{era.name.lower()}.txt"


def parse_food_chains(text: str, source: str = "<string>") -> list[FoodChain]:
    """Parse food chain lines from era data text.

    Lines look like ``Food Chain: <apex>,<predator>,<prey>,<food>``. The
    prefix match ignores case; other lines are skipped.

    Args:
        text: File content.
        source: Name used in error messages.

    Returns:
        Food chains in file order (possibly empty).

    Raises:
        EraDataError: If a food chain line does not have exactly 4 names.
    """
    chains: list[FoodChain] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or not line.lower().startswith(_PREFIX):
            continue
        content = line[line.find(":") + 1 :].strip()
        parts = [part.strip() for part in content.split(",")]
        if len(parts) != 4 or not all(parts):
            raise EraDataError(f"Invalid format in {source}: {line}")
        apex, predator, prey, food = parts
        chains.append(FoodChain(apex=apex, predator=predator, prey=prey, food=food))
    return chains


def load_food_chains(era: Era, data_dir: Path | str | None = None) -> list[FoodChain]:
    """Load the food chains available in an era.

    Raises:
        EraDataError: If the file is missing, malformed, or lists no chains.
    """
    path = era_file(era, data_dir)
    if not path.exists():
        raise EraDataError(f"File not found for era {era.name}: {path}")

    chains = parse_food_chains(path.read_text(encoding="utf-8"), source=path.name)
    if not chains:
        raise EraDataError(f"No food chains defined in {path.name}")

    logger.debug("food_chains_loaded", era=era.name, count=len(chains), path=str(path))
    return chains
