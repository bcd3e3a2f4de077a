"""Save file codec: a line-oriented ``KEY=value`` text format.

Example::

    ERA=PRESENT
    GRIDSIZE=SMALL
    TOTALROUNDS=10
    TURN=PREDATOR
    ROUND=4
    APEX,name=Lion,score=1,cooldown=0,row=2,col=3
    PREDATOR,name=Hyena,score=3,cooldown=0,row=5,col=5
    PREY,name=Gazelle,score=2,cooldown=1,row=7,col=1
    FOOD,name=Grass,row=0,col=9

``GAMEOVER=true`` follows ``ROUND`` only for a finished game.
"""

import re
from pathlib import Path

import structlog

from .board import Board
from .exceptions import ConfigError, SaveFormatError
from .state import Animal, Food, GameState
from .turns import TurnManager
from .types import Era, GridSize, Position, Role

logger = structlog.get_logger()

HEADER_KEYS = ("ERA", "GRIDSIZE", "TOTALROUNDS", "TURN", "ROUND")
ENTITY_TAGS = ("APEX", "PREDATOR", "PREY", "FOOD")
# Plain ASCII decimal, optionally negative
INTEGER = re.compile(r"-?[0-9]+")


def _check_name(name: str) -> str:
    if not name or name != name.strip() or any(ch in name for ch in ",\r\n"):
        raise SaveFormatError(f"Name cannot be saved: {name!r}")
    return name


def _animal_line(animal: Animal) -> str:
    p = animal.position
    return (
        f"{animal.role.name},name={_check_name(animal.name)},score={animal.score},"
        f"cooldown={animal.ability_cooldown},row={p.row},col={p.col}"
    )


def save_game(state: GameState, turns: TurnManager) -> str:
    """Encode a game session as save file text.

    Raises:
        SaveFormatError: If the board size has no grid size tag or an
            entity name cannot be written in this format.
    """
    try:
        grid_size = GridSize.from_size(state.board.size)
    except ConfigError as e:
        raise SaveFormatError(str(e)) from e

    lines = [
        f"ERA={state.era.name}",
        f"GRIDSIZE={grid_size.name}",
        f"TOTALROUNDS={turns.total_rounds}",
        f"TURN={turns.current_turn.name}",
        f"ROUND={turns.round}",
    ]
    if turns.game_over:
        lines.append("GAMEOVER=true")

    lines.append(_animal_line(state.apex))
    lines.append(_animal_line(state.predator))
    lines.append(_animal_line(state.prey))
    food = state.food
    lines.append(
        f"FOOD,name={_check_name(food.name)},"
        f"row={food.position.row},col={food.position.col}"
    )
    return "\n".join(lines) + "\n"


def _require(values: dict[str, str], key: str, where: str) -> str:
    value = values.get(key)
    if value is None or not value.strip():
        raise SaveFormatError(f"Missing {where} key: {key}")
    return value.strip()


def _parse_int(value: str, where: str) -> int:
    text = value.strip()
    if not INTEGER.fullmatch(text):
        raise SaveFormatError(f"Invalid integer for {where}: {value}")
    return int(text)


def _parse_tag(enum_cls, value: str, where: str):
    try:
        return enum_cls[value.strip()]
    except KeyError:
        raise SaveFormatError(f"Invalid enum for {where}: {value}") from None


def _parse_entity_line(line: str) -> tuple[str, dict[str, str]]:
    parts = line.split(",")
    tag = parts[0].strip()
    if tag not in ENTITY_TAGS:
        raise SaveFormatError(f"Unknown entity tag: {tag!r} in line: {line}")

    values: dict[str, str] = {}
    for part in parts[1:]:
        key, sep, value = part.partition("=")
        key = key.strip()
        if not sep or not key:
            raise SaveFormatError(f"Malformed kv: {part} in line: {line}")
        if key in values:
            raise SaveFormatError(f"Duplicate key {key} in line: {line}")
        values[key] = value.strip()
    return tag, values


def _build_animal(values: dict[str, str], role: Role) -> Animal:
    where = role.name.lower()
    name = _require(values, "name", where)
    score = _parse_int(_require(values, "score", where), f"{where}.score")
    cooldown = _parse_int(_require(values, "cooldown", where), f"{where}.cooldown")
    if cooldown < 0:
        raise SaveFormatError(f"Negative cooldown for {where}: {cooldown}")
    row = _parse_int(_require(values, "row", where), f"{where}.row")
    col = _parse_int(_require(values, "col", where), f"{where}.col")
    return Animal(
        name=name,
        role=role,
        position=Position(row=row, col=col),
        score=score,
        ability_cooldown=cooldown,
    )


def load_game(text: str) -> tuple[GameState, TurnManager]:
    """
    Decode save file text into a fresh state and turn manager.

    Args:
        text: Save file content.

    Returns:
        Tuple of (GameState, TurnManager), ready for GameEngine.load_from.

    Raises:
        SaveFormatError: If any header, entity line, placement or turn
            position is invalid.
    """
    header: dict[str, str] = {}
    entities: dict[str, dict[str, str]] = {}

    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        if "=" in line and "," not in line:
            key, _, value = line.partition("=")
            key = key.strip()
            if not key:
                raise SaveFormatError(f"Missing header key in line: {line}")
            if key in header:
                raise SaveFormatError(f"Duplicate header key: {key}")
            header[key] = value.strip()
        else:
            tag, values = _parse_entity_line(line)
            if tag in entities:
                raise SaveFormatError(f"Duplicate entity line: {tag}")
            entities[tag] = values

    era = _parse_tag(Era, _require(header, "ERA", "header"), "ERA")
    grid_size = _parse_tag(GridSize, _require(header, "GRIDSIZE", "header"), "GRIDSIZE")
    total_rounds = _parse_int(_require(header, "TOTALROUNDS", "header"), "TOTALROUNDS")
    turn = _parse_tag(Role, _require(header, "TURN", "header"), "TURN")
    round_ = _parse_int(_require(header, "ROUND", "header"), "ROUND")

    game_over_value = header.get("GAMEOVER", "false").strip().lower()
    if game_over_value not in ("true", "false"):
        raise SaveFormatError(f"Invalid boolean for GAMEOVER: {header['GAMEOVER']}")
    game_over = game_over_value == "true"

    missing = [tag for tag in ENTITY_TAGS if tag not in entities]
    if missing:
        raise SaveFormatError(f"Missing entity line(s): {', '.join(missing)}")

    apex = _build_animal(entities["APEX"], Role.APEX)
    predator = _build_animal(entities["PREDATOR"], Role.PREDATOR)
    prey = _build_animal(entities["PREY"], Role.PREY)

    food_values = entities["FOOD"]
    food = Food(
        name=_require(food_values, "name", "food"),
        position=Position(
            row=_parse_int(_require(food_values, "row", "food"), "food.row"),
            col=_parse_int(_require(food_values, "col", "food"), "food.col"),
        ),
    )

    try:
        turns = TurnManager.from_turn(total_rounds, turn, round_, game_over=game_over)
        state = GameState(
            era=era,
            board=Board(size=grid_size.size),
            total_rounds=total_rounds,
            round=round_,
        )
        state.init_entities(prey=prey, predator=predator, apex=apex, food=food)
    except ConfigError as e:
        raise SaveFormatError(str(e)) from e

    return state, turns


def save_to_file(path: Path | str, state: GameState, turns: TurnManager) -> None:
    """Write a save file, creating parent directories as needed."""
    path = Path(path)
    text = save_game(state, turns)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info("game_saved", path=str(path), round=turns.round, turn=turns.current_turn.name)


def load_from_file(path: Path | str) -> tuple[GameState, TurnManager]:
    """Read and decode a save file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        SaveFormatError: If the content is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Save file not found: {path}")

    state, turns = load_game(path.read_text(encoding="utf-8"))
    logger.info("game_loaded_from_file", path=str(path), round=turns.round)
    return state, turns
