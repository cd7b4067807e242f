"""Tests for the hoard CLI.

Covers:
- Parser construction and argument parsing
- validate / envs / paths against fixture configurations
- Error reporting for missing files, indecision and unknown hoards
"""

import argparse
from pathlib import Path
from unittest.mock import patch

import pytest

from hoard_engine.cli import build_parser, main

FIXTURES = Path(__file__).parent / "fixtures"
MINIMAL = str(FIXTURES / "config-minimal.yaml")
INDECISION = str(FIXTURES / "config-indecision.toml")


# ── Parser construction ──────────────────────────────────────────


class TestParserConstruction:
    def test_build_parser_returns_parser(self):
        parser = build_parser()
        assert isinstance(parser, argparse.ArgumentParser)

    def test_no_args_shows_help(self, capsys):
        with patch("sys.argv", ["hoard"]):
            rc = main()
        assert rc == 0
        assert "hoard" in capsys.readouterr().out

    def test_global_options(self):
        args = build_parser().parse_args(["-c", "/tmp/c.yml", "-r", "/tmp/root", "validate"])
        assert args.config_file == "/tmp/c.yml"
        assert args.hoards_root == "/tmp/root"
        assert args.command == "validate"

    def test_paths_takes_hoard_names(self):
        args = build_parser().parse_args(["paths", "notes", "editor"])
        assert args.hoards == ["notes", "editor"]

    def test_paths_defaults_to_all(self):
        args = build_parser().parse_args(["paths"])
        assert args.hoards == []

    @pytest.mark.parametrize("command", ["validate", "envs", "paths"])
    def test_subcommand_help(self, command, capsys):
        with pytest.raises(SystemExit) as exc:
            main([command, "--help"])
        assert exc.value.code == 0
        assert command in capsys.readouterr().out


# ── validate ─────────────────────────────────────────────────────


class TestValidate:
    def test_valid(self, clean_env, capsys):
        clean_env.setenv("HOARD_TEST_WORK", "1")
        rc = main(["--config-file", MINIMAL, "--hoards-root", "/backups", "validate"])
        out = capsys.readouterr().out
        assert rc == 0
        assert "Configuration is valid." in out
        assert "/backups" in out
        assert "Hoards:       2" in out
        assert "Unresolved:   2 pile(s)" in out

    def test_missing_file(self, tmp_path, capsys):
        rc = main(["--config-file", str(tmp_path / "nope.yml"), "validate"])
        assert rc == 1
        assert "Configuration file not found" in capsys.readouterr().out

    def test_indecision(self, clean_env, capsys):
        clean_env.setenv("HOARD_TEST_FOO", "1")
        clean_env.setenv("HOARD_TEST_BAZ", "1")
        rc = main(["--config-file", INDECISION, "validate"])
        out = capsys.readouterr().out
        assert rc == 1
        assert "ERROR: hoard 'anon_hoard'" in out
        assert "cannot decide" in out

    def test_cycle(self, capsys):
        rc = main(["--config-file", str(FIXTURES / "config-cycle.json"), "validate"])
        assert rc == 1
        assert "cyclic" in capsys.readouterr().out

    def test_malformed(self, tmp_path, capsys):
        path = tmp_path / "config.yml"
        path.write_text("hoards: [a, b]\n")
        rc = main(["--config-file", str(path), "validate"])
        assert rc == 1
        assert "'hoards' must be a mapping" in capsys.readouterr().out


    def test_bad_hoards_root(self, tmp_path, capsys):
        path = tmp_path / "config.yml"
        path.write_text("hoards_root: 5\n")
        rc = main(["--config-file", str(path), "validate"])
        assert rc == 1
        assert "ERROR: 'hoards_root' must be a path string" in capsys.readouterr().out

    def test_overlong_path_exists(self, tmp_path, capsys):
        path = tmp_path / "config.yml"
        path.write_text("envs:\n  deep:\n    path_exists: /" + "a" * 5000 + "\n")
        rc = main(["--config-file", str(path), "validate"])
        assert rc == 0
        assert "Configuration is valid." in capsys.readouterr().out


# ── envs ─────────────────────────────────────────────────────────


class TestEnvs:
    def test_lists_environments(self, clean_env, capsys):
        clean_env.setenv("HOARD_TEST_HOME", "1")
        clean_env.setenv("HOARD_TEST_EDITOR", "vim")
        rc = main(["--config-file", MINIMAL, "envs"])
        out = capsys.readouterr().out
        assert rc == 0
        lines = {line.split()[0]: line.split()[1] for line in out.splitlines()
                 if line.strip() and line.split()[-1] in ("yes", "no") and len(line.split()) == 2}
        assert lines == {
            "anywhere": "yes",
            "home": "yes",
            "neovim": "no",
            "vim": "yes",
            "work": "no",
        }
        assert "neovim, vim" in out
        assert "3 of 5 environment(s) apply" in out

    def test_no_environments(self, tmp_path, capsys):
        path = tmp_path / "config.yml"
        path.write_text("hoards: {}\n")
        rc = main(["--config-file", str(path), "envs"])
        assert rc == 0
        assert "No environments are configured." in capsys.readouterr().out


# ── paths ────────────────────────────────────────────────────────


class TestPaths:
    def test_all_hoards(self, clean_env, capsys):
        clean_env.setenv("HOARD_TEST_WORK", "1")
        clean_env.setenv("HOARD_TEST_EDITOR", "nvim")
        rc = main(["--config-file", MINIMAL, "--hoards-root", "/backups", "paths"])
        out = capsys.readouterr().out
        assert rc == 0
        assert str(Path("/backups/notes")) in out
        assert str(Path("/work/notes")) in out
        assert str(Path("/work/nvim/colors")) in out
        assert "[encrypted: symmetric]" in out
        assert "(anonymous)" in out

    def test_selected_hoard(self, clean_env, capsys):
        clean_env.setenv("HOARD_TEST_HOME", "1")
        rc = main(["--config-file", MINIMAL, "--hoards-root", "/backups", "paths", "editor"])
        out = capsys.readouterr().out
        assert rc == 0
        assert "editor" in out
        assert "notes" not in out
        assert "(no matching environment)" in out

    def test_unknown_hoard(self, clean_env, capsys):
        rc = main(["--config-file", MINIMAL, "paths", "ghost"])
        assert rc == 1
        assert "no such hoard is configured: ghost" in capsys.readouterr().out

    def test_no_hoards(self, tmp_path, capsys):
        path = tmp_path / "config.yml"
        path.write_text("envs: {}\n")
        rc = main(["--config-file", str(path), "paths"])
        assert rc == 0
        assert "No hoards are configured." in capsys.readouterr().out
