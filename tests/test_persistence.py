"""Tests for the save file codec."""

import random

import pytest

from conftest import P, make_state
from foodchain.agents import play_game
from foodchain.engine import GameEngine
from foodchain.exceptions import SaveFormatError
from foodchain.persistence import load_from_file, load_game, save_game, save_to_file
from foodchain.state import Animal
from foodchain.turns import TurnManager
from foodchain.types import Era, GridSize, Role

VALID_SAVE = """\
ERA=PRESENT
GRIDSIZE=SMALL
TOTALROUNDS=10
TURN=PREDATOR
ROUND=4
APEX,name=Lion,score=1,cooldown=0,row=2,col=3
PREDATOR,name=Hyena,score=3,cooldown=0,row=5,col=5
PREY,name=Gazelle,score=2,cooldown=1,row=7,col=1
FOOD,name=Grass,row=0,col=9
"""


def replace_line(text: str, old: str, new: str) -> str:
    assert old in text
    return text.replace(old, new)


class TestSave:
    """Tests for save_game."""

    def test_format(self):
        """Header lines come first, then Apex, Predator, Prey and Food."""
        state = make_state(
            era=Era.PRESENT,
            apex=P(2, 3),
            predator=P(5, 5),
            prey=P(7, 1),
            food=P(0, 9),
            round=4,
            scores={Role.APEX: 1, Role.PREDATOR: 3, Role.PREY: 2},
            cooldowns={Role.PREY: 1},
        )
        turns = TurnManager.from_turn(10, Role.PREDATOR, 4)
        assert save_game(state, turns) == VALID_SAVE

    def test_game_over_flag(self):
        """A finished game records GAMEOVER=true after the round."""
        turns = TurnManager.from_turn(1, Role.APEX, 1)
        turns.end_turn()
        text = save_game(make_state(total_rounds=1), turns)
        assert "ROUND=1\nGAMEOVER=true\nAPEX," in text

    def test_unencodable_name(self):
        """Names that would corrupt the format are refused."""
        state = make_state()
        state.replace_animal(
            Animal(name="Big, Bad Wolf", role=Role.APEX, position=state.apex.position)
        )
        with pytest.raises(SaveFormatError):
            save_game(state, TurnManager(total_rounds=10))


class TestLoad:
    """Tests for load_game."""

    def test_load_valid(self):
        """A valid save restores every field."""
        state, turns = load_game(VALID_SAVE)
        assert state.era == Era.PRESENT
        assert state.board.size == GridSize.SMALL.size
        assert state.round == 4
        assert turns.current_turn == Role.PREDATOR
        assert turns.round == 4
        assert turns.total_rounds == 10
        assert state.prey == Animal(
            name="Gazelle", role=Role.PREY, position=P(7, 1), score=2, ability_cooldown=1
        )
        assert state.food.name == "Grass"
        state.check_invariant()

    def test_blank_lines_and_spacing_ignored(self):
        """Blank lines and surrounding spaces are tolerated."""
        text = "\n" + VALID_SAVE.replace("ERA=PRESENT", "  ERA = PRESENT  ") + "\n\n"
        state, _ = load_game(text)
        assert state.era == Era.PRESENT

    @pytest.mark.parametrize(
        "old,new",
        [
            ("TURN=PREDATOR\n", ""),
            ("TURN=PREDATOR", "TURN="),
            ("ERA=PRESENT", "ERA=JURASSIC"),
            ("ERA=PRESENT", "ERA=present"),
            ("GRIDSIZE=SMALL", "GRIDSIZE=TINY"),
            ("TURN=PREDATOR", "TURN=FOOD"),
            ("ROUND=4", "ROUND=four"),
            ("ROUND=4", "ROUND=+4"),
            ("ROUND=4", "ROUND=1_0"),
            ("ROUND=4", "ROUND=٤"),
            ("score=2,", "score=+2,"),
            ("row=7,col=1", "row=٧,col=1"),
            ("ROUND=4", "ROUND=11"),
            ("ROUND=4", "ROUND=0"),
            ("TOTALROUNDS=10", "TOTALROUNDS=0"),
            ("ERA=PRESENT\n", "ERA=PRESENT\nERA=PAST\n"),
            ("ROUND=4\n", "ROUND=4\nGAMEOVER=maybe\n"),
            ("FOOD,name=Grass,row=0,col=9\n", ""),
            ("FOOD,name=Grass,row=0,col=9\n", "FOOD,name=Grass,row=0,col=9\nFOOD,name=Moss,row=1,col=9\n"),
            ("FOOD,name=Grass,row=0,col=9\n", "FOOD,name=Grass,row=0,col=9\nDODO,name=Dodo,row=1,col=9\n"),
            ("score=2,", "score=2,junk,"),
            ("cooldown=1,", ""),
            ("cooldown=1", "cooldown=-1"),
            ("row=7,col=1", "row=7,col=x"),
            ("row=7,col=1", "row=5,col=5"),
            ("row=7,col=1", "row=10,col=1"),
        ],
    )
    def test_corrupted_saves(self, old: str, new: str):
        """Every corruption raises SaveFormatError."""
        with pytest.raises(SaveFormatError):
            load_game(replace_line(VALID_SAVE, old, new))

    def test_error_carries_reason(self):
        """The error exposes a human-readable reason."""
        with pytest.raises(SaveFormatError) as exc_info:
            load_game(replace_line(VALID_SAVE, "ROUND=4", "ROUND=four"))
        assert "ROUND" in exc_info.value.reason
        assert str(exc_info.value).startswith("Invalid save format:")


class TestRoundTrip:
    """Tests for save/load round trips."""

    def test_fresh_game(self, engine: GameEngine):
        """A new game survives a round trip exactly."""
        state, turns = load_game(save_game(engine.state, engine.turns))
        assert state == engine.state
        assert turns == engine.turns

    def test_mid_game(self, engine: GameEngine):
        """A game with scores and cooldowns survives a round trip."""
        for _ in range(7):
            role = engine.current_turn()
            engine.move(role, engine.legal_moves(role)[-1])

        state, turns = load_game(save_game(engine.state, engine.turns))
        assert state == engine.state
        assert turns == engine.turns

    def test_finished_game(self):
        """A finished game reloads as finished."""
        engine = GameEngine(rng=random.Random(5))
        engine.start_game(Era.FUTURE, GridSize.SMALL, 3)
        play_game(engine)

        state, turns = load_game(save_game(engine.state, engine.turns))
        assert turns.game_over
        assert state == engine.state
        assert turns == engine.turns


class TestFiles:
    """Tests for file helpers."""

    def test_save_and_load_file(self, engine: GameEngine, tmp_path):
        """Files are written with parent directories and read back."""
        path = tmp_path / "saves" / "game.txt"
        save_to_file(path, engine.state, engine.turns)

        state, turns = load_from_file(path)
        assert state == engine.state
        assert turns == engine.turns

    def test_missing_file(self, tmp_path):
        """A missing file is not a format error."""
        with pytest.raises(FileNotFoundError):
            load_from_file(tmp_path / "nope.txt")
