"""Tests for the command-line interface."""

import pytest

from foodchain.cli import build_parser, main
from foodchain.persistence import load_from_file


class TestParser:
    """Tests for argument parsing."""

    def test_play_options(self):
        """Play accepts overrides for every setting."""
        args = build_parser().parse_args(
            ["play", "--era", "future", "--grid", "large", "--rounds", "3", "--seed", "5"]
        )
        assert args.command == "play"
        assert args.era == "future"
        assert args.rounds == 3
        assert args.seed == 5

    def test_command_required(self):
        """A subcommand must be given."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestPlay:
    """Tests for the play command."""

    def test_play_and_save(self, tmp_path, capsys):
        """A short game prints the winner and writes a save file."""
        save_path = tmp_path / "out" / "final.txt"
        log_path = tmp_path / "events.log"

        main([
            "play", "--era", "present", "--rounds", "2", "--seed", "1",
            "--save", str(save_path), "--event-log", str(log_path),
        ])

        out = capsys.readouterr().out
        assert " wins | scores: " in out
        state, turns = load_from_file(save_path)
        assert turns.game_over
        assert turns.total_rounds == 2
        assert log_path.read_text().splitlines()[-1].startswith("GAME OVER ")

    def test_bundled_config(self, capsys):
        """A preset name can be used as config."""
        main(["play", "--config", "default", "--rounds", "1", "--seed", "3"])
        assert " wins | scores: " in capsys.readouterr().out

    def test_invalid_override(self):
        """Invalid settings exit with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            main(["play", "--era", "jurassic"])
        assert exc_info.value.code == 1

    def test_unknown_config(self):
        """An unknown config exits with status 2."""
        with pytest.raises(SystemExit) as exc_info:
            main(["play", "--config", "no-such-preset"])
        assert exc_info.value.code == 2


class TestShow:
    """Tests for the show command."""

    def test_show_save(self, tmp_path, capsys):
        """A save file is summarized."""
        path = tmp_path / "game.txt"
        path.write_text(
            "ERA=PAST\nGRIDSIZE=SMALL\nTOTALROUNDS=10\nTURN=APEX\nROUND=3\n"
            "APEX,name=Tyrannosaurus,score=1,cooldown=2,row=0,col=0\n"
            "PREDATOR,name=Velociraptor,score=3,cooldown=0,row=1,col=1\n"
            "PREY,name=Compsognathus,score=3,cooldown=0,row=2,col=2\n"
            "FOOD,name=Dragonfly,row=3,col=3\n"
        )

        main(["show", str(path)])

        out = capsys.readouterr().out
        assert "Round 3/10, turn APEX" in out
        assert "Tyrannosaurus" in out
        assert "PREY & PREDATOR wins | scores: prey=3 predator=3 apex=1" in out

    def test_missing_save(self, tmp_path, capsys):
        """A missing file exits with status 2."""
        with pytest.raises(SystemExit) as exc_info:
            main(["show", str(tmp_path / "nope.txt")])
        assert exc_info.value.code == 2
        assert "not found" in capsys.readouterr().out

    def test_invalid_save(self, tmp_path, capsys):
        """A corrupted file exits with status 1."""
        path = tmp_path / "bad.txt"
        path.write_text("ERA=PAST\n")
        with pytest.raises(SystemExit) as exc_info:
            main(["show", str(path)])
        assert exc_info.value.code == 1
        assert "Invalid save file" in capsys.readouterr().out
