"""Command-line interface: play automated games and inspect save files."""

import argparse
from pathlib import Path

import structlog
from pydantic import ValidationError

from .agents import play_game
from .config import Config, find_config, list_configs, load_config
from .engine import GameEngine
from .exceptions import FoodChainError, SaveFormatError
from .persistence import load_from_file, save_to_file
from .types import Role


def configure_logging(verbose: bool = False) -> None:
    """Configure structlog for console output."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(10 if verbose else 20),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="foodchain",
        description="Food Chain - turn-based predator/prey board game engine",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    play = subparsers.add_parser("play", help="Play a full game with computer agents")
    play.add_argument(
        "--config",
        type=str,
        help=f"Path or name of game TOML config (bundled: {', '.join(list_configs())})",
    )
    play.add_argument("--era", type=str, default=None, help="past, present or future")
    play.add_argument("--grid", type=str, default=None, help="small, medium or large")
    play.add_argument("--rounds", type=int, default=None, help="Number of rounds")
    play.add_argument("--seed", type=int, default=None, help="Random seed")
    play.add_argument("--save", type=str, default=None, help="Save final state to this path")
    play.add_argument(
        "--event-log", type=str, default=None, help="Append game events to this file"
    )
    play.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    show = subparsers.add_parser("show", help="Print a summary of a save file")
    show.add_argument("path", type=str, help="Save file path")
    show.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    return parser


def _resolve_config(args: argparse.Namespace) -> Config:
    logger = structlog.get_logger()

    if args.config:
        config_path = find_config(args.config)
        config = load_config(config_path)
        logger.info("config_loaded", path=str(config_path))
    else:
        config = Config()
        logger.info("using_default_config")

    overrides = {
        "era": args.era,
        "grid_size": args.grid,
        "total_rounds": args.rounds,
        "seed": args.seed,
        "event_log": args.event_log,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if overrides:
        settings = config.game.model_dump()
        settings.update(overrides)
        config = Config.model_validate({"game": settings})
    return config


def cmd_play(args: argparse.Namespace) -> None:
    logger = structlog.get_logger()

    try:
        config = _resolve_config(args)
    except FileNotFoundError as e:
        logger.error("config_not_found", error=str(e))
        raise SystemExit(2)
    except ValidationError as e:
        logger.error("invalid_config", error=str(e))
        raise SystemExit(1)

    settings = config.game
    try:
        engine = GameEngine.from_settings(settings)
    except FoodChainError as e:
        logger.error("game_start_failed", error=str(e))
        raise SystemExit(1)

    try:
        result = play_game(engine)
    finally:
        if engine.event_log is not None:
            engine.event_log.close()

    print(f"Food chain: {engine.food_chain}")
    print(result.text())

    if args.save:
        save_to_file(Path(args.save), engine.state, engine.turns)
        print(f"Saved to {args.save}")


def cmd_show(args: argparse.Namespace) -> None:
    logger = structlog.get_logger()

    try:
        state, turns = load_from_file(args.path)
    except FileNotFoundError:
        logger.error("save_not_found", path=args.path)
        print(f"Save file not found: {args.path}")
        raise SystemExit(2)
    except SaveFormatError as e:
        logger.error("invalid_save", path=args.path, reason=e.reason)
        print(f"Invalid save file: {e.reason}")
        raise SystemExit(1)

    engine = GameEngine()
    engine.load_from(state, turns)

    print(f"Era: {state.era.name}  Grid: {state.board.size}x{state.board.size}")
    status = "game over" if turns.game_over else f"turn {turns.current_turn.name}"
    print(f"Round {turns.round}/{turns.total_rounds}, {status}")
    for role in Role:
        animal = state.animal(role)
        print(
            f"  {role.name:<9} {animal.name:<16} at {animal.position}  "
            f"score={animal.score} cooldown={animal.ability_cooldown}"
        )
    print(f"  {'FOOD':<9} {state.food.name:<16} at {state.food.position}")
    print(engine.winner_text())


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    if args.command == "play":
        cmd_play(args)
    elif args.command == "show":
        cmd_show(args)


if __name__ == "__main__":
    main()
