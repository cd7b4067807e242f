"""Tests for environment parsing and evaluation."""

import pytest

from hoard_engine.environment.evaluator import (
    EnvironmentEvaluator,
    EnvironmentTable,
    evaluate_environments,
)
from hoard_engine.environment.facts import (
    AllOf,
    AnyOf,
    EnvVarSet,
    ExeExists,
    OsIs,
    PathExists,
    Ref,
    describe,
    parse_environment,
    references,
)
from hoard_engine.environment.host import HostInfo, current_os_name
from hoard_engine.errors import ConfigError, CyclicDependency, UnknownEnvironment


class TestParseEnvironment:
    def test_single_os(self):
        assert parse_environment("linux", {"os": "linux"}) == AnyOf((OsIs("linux"),))

    def test_os_list_is_any_of(self):
        fact = parse_environment("unix", {"os": ["linux", "macos"]})
        assert fact == AnyOf((OsIs("linux"), OsIs("macos")))

    def test_several_keys_are_all_of(self):
        fact = parse_environment("work_linux", {"os": "linux", "hostname": "desk"})
        assert isinstance(fact, AllOf)
        assert len(fact.facts) == 2

    def test_env_entries(self):
        fact = parse_environment("editor", {"env": [{"var": "EDITOR", "expected": "nvim"}, "HOME"]})
        assert fact == AllOf((EnvVarSet("EDITOR", "nvim"), EnvVarSet("HOME")))

    def test_env_expected_coerced_to_string(self):
        fact = parse_environment("flag", {"env": [{"var": "FLAG", "expected": 1}]})
        assert fact == AllOf((EnvVarSet("FLAG", "1"),))

    def test_path_exists_nested_list_is_all_of(self):
        fact = parse_environment("itch", {"path_exists": [["~/.itch", "~/.itch.desktop"], "/opt/itch"]})
        assert fact == AnyOf((
            AllOf((PathExists("~/.itch"), PathExists("~/.itch.desktop"))),
            PathExists("/opt/itch"),
        ))

    def test_exe_exists(self):
        fact = parse_environment("neovim", {"exe_exists": ["nvim", "nvim-qt"]})
        assert fact == AnyOf((ExeExists("nvim"), ExeExists("nvim-qt")))

    def test_references(self):
        fact = parse_environment("both", {"any_of": ["a", "b"], "all_of": ["c"]})
        assert references(fact) == ["a", "b", "c"]

    def test_empty_definition(self):
        assert parse_environment("always", None) == AllOf(())
        assert parse_environment("always", {}) == AllOf(())

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigError, match="unknown condition"):
            parse_environment("bad", {"distro": "arch"})

    def test_non_mapping_rejected(self):
        with pytest.raises(ConfigError):
            parse_environment("bad", ["linux"])

    def test_env_entry_without_var_rejected(self):
        with pytest.raises(ConfigError, match="'var'"):
            parse_environment("bad", {"env": [{"expected": "x"}]})

    def test_empty_name_rejected(self):
        with pytest.raises(ConfigError):
            parse_environment("bad", {"os": ""})

    def test_describe(self):
        fact = parse_environment("x", {"os": "linux", "env": [{"var": "A", "expected": "b"}]})
        assert describe(fact) == "((os=linux) and ($A=='b'))"


class TestEvaluateFacts:
    def test_os(self, make_host):
        table = evaluate_environments(
            {"linux": {"os": "linux"}, "macos": {"os": "macos"}}, make_host(os_name="linux")
        )
        assert table == {"linux": True, "macos": False}

    def test_hostname(self, make_host):
        table = evaluate_environments({"desk": {"hostname": ["desk", "laptop"]}}, make_host(hostname="laptop"))
        assert table["desk"] is True

    def test_env_var_set(self, make_host):
        defs = {"has_a": {"env": ["A"]}, "has_b": {"env": ["B"]}}
        table = evaluate_environments(defs, make_host(A=""))
        assert table["has_a"] is True
        assert table["has_b"] is False

    def test_env_var_expected(self, make_host):
        defs = {
            "nvim": {"env": [{"var": "EDITOR", "expected": "nvim"}]},
            "vim": {"env": [{"var": "EDITOR", "expected": "vim"}]},
        }
        table = evaluate_environments(defs, make_host(EDITOR="nvim"))
        assert table == {"nvim": True, "vim": False}

    def test_exe_exists(self, make_host, tmp_path):
        exe = tmp_path / "mytool"
        exe.write_text("#!/bin/sh\n")
        exe.chmod(0o755)
        defs = {"tool": {"exe_exists": "mytool"}, "other": {"exe_exists": "not-a-tool"}}
        table = evaluate_environments(defs, make_host(search_path=str(tmp_path)))
        assert table == {"tool": True, "other": False}

    def test_path_exists_with_tilde(self, make_host, tmp_path):
        (tmp_path / "marker").touch()
        defs = {"marked": {"path_exists": "~/marker"}, "unmarked": {"path_exists": "~/nope"}}
        table = evaluate_environments(defs, make_host(home=tmp_path))
        assert table == {"marked": True, "unmarked": False}

    def test_path_exists_nested_list_needs_all(self, make_host, tmp_path):
        (tmp_path / "a").touch()
        defs = {
            "partial": {"path_exists": [[str(tmp_path / "a"), str(tmp_path / "b")]]},
            "single": {"path_exists": [[str(tmp_path / "a")]]},
        }
        table = evaluate_environments(defs, make_host())
        assert table == {"partial": False, "single": True}

    def test_path_with_unset_variable_is_false(self, make_host):
        table = evaluate_environments({"p": {"path_exists": "${HOARD_UNSET_VAR}/x"}}, make_host())
        assert table["p"] is False

    def test_overlong_path_is_false(self, host):
        table = evaluate_environments({"p": {"path_exists": "/" + "a" * 5000}}, host)
        assert table["p"] is False

    def test_unreadable_parent_is_false(self, host, tmp_path, monkeypatch):
        def denied(self, *args, **kwargs):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr("pathlib.Path.exists", denied)
        table = evaluate_environments({"p": {"path_exists": str(tmp_path / "locked" / "x")}}, host)
        assert table["p"] is False

    def test_keys_are_anded(self, make_host):
        defs = {"work_linux": {"os": "linux", "env": ["WORK"]}}
        assert evaluate_environments(defs, make_host())["work_linux"] is False
        assert evaluate_environments(defs, make_host(WORK="1"))["work_linux"] is True

    def test_empty_definition_is_true(self, host):
        assert evaluate_environments({"always": {}}, host)["always"] is True

    def test_accepts_parsed_facts(self, host):
        table = evaluate_environments({"linux": OsIs("linux"), "ref": Ref("linux")}, host)
        assert table == {"linux": True, "ref": True}

    def test_no_definitions(self, host):
        assert len(evaluate_environments(None, host)) == 0


class TestReferences:
    def test_forward_reference(self, make_host):
        defs = {
            "any_editor": {"any_of": ["neovim", "vim"]},
            "neovim": {"env": [{"var": "EDITOR", "expected": "nvim"}]},
            "vim": {"env": [{"var": "EDITOR", "expected": "vim"}]},
        }
        table = evaluate_environments(defs, make_host(EDITOR="vim"))
        assert table["any_editor"] is True

    def test_all_of(self, make_host):
        defs = {
            "both": {"all_of": ["a", "b"]},
            "a": {"env": ["A"]},
            "b": {"env": ["B"]},
        }
        assert evaluate_environments(defs, make_host(A="1"))["both"] is False
        assert evaluate_environments(defs, make_host(A="1", B="1"))["both"] is True

    def test_unknown_reference(self, host):
        with pytest.raises(UnknownEnvironment) as exc:
            evaluate_environments({"a": {"any_of": ["ghost"]}}, host)
        assert exc.value.name == "ghost"
        assert exc.value.referenced_by == "a"

    def test_unknown_reference_behind_short_circuit(self, host):
        defs = {"a": {"any_of": ["t", "ghost"]}, "t": {"os": "linux"}}
        with pytest.raises(UnknownEnvironment):
            evaluate_environments(defs, host)

    def test_self_reference(self, host):
        with pytest.raises(CyclicDependency) as exc:
            evaluate_environments({"a": {"any_of": ["a"]}}, host)
        assert exc.value.cycle == ["a", "a"]

    def test_three_way_cycle(self, host):
        defs = {
            "first": {"any_of": ["second"]},
            "second": {"all_of": ["third"]},
            "third": {"any_of": ["first"]},
        }
        with pytest.raises(CyclicDependency) as exc:
            evaluate_environments(defs, host)
        cycle = exc.value.cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"first", "second", "third"}
        assert "->" in str(exc.value)

    def test_cycle_behind_true_branch(self, host):
        defs = {"a": {"any_of": ["t", "b"]}, "b": {"any_of": ["a"]}, "t": {"os": "linux"}}
        with pytest.raises(CyclicDependency):
            evaluate_environments(defs, host)

    def test_lazy_evaluation_memoizes(self, make_host):
        defs = {"a": Ref("c"), "b": Ref("c"), "c": EnvVarSet("C")}
        evaluator = EnvironmentEvaluator(defs, make_host(C="1"))
        assert evaluator.value_of("a") is True
        assert evaluator._values == {"a": True, "c": True}

    def test_debug_log_describes_definition(self, make_host, caplog):
        with caplog.at_level("DEBUG", logger="hoard"):
            evaluate_environments({"work": {"env": ["WORK"]}}, make_host(WORK="1"))
        assert "environment work = True (($WORK))" in caplog.text

    def test_value_of_unknown(self, host):
        with pytest.raises(UnknownEnvironment) as exc:
            EnvironmentEvaluator({}, host).value_of("ghost")
        assert exc.value.referenced_by is None


class TestEnvironmentTable:
    def test_is_read_only(self):
        table = EnvironmentTable({"linux": True})
        with pytest.raises(TypeError):
            table["linux"] = False

    def test_active_sorted(self):
        table = EnvironmentTable({"b": True, "a": True, "c": False})
        assert table.active == ["a", "b"]

    def test_source_mapping_copied(self):
        source = {"linux": True}
        table = EnvironmentTable(source)
        source["linux"] = False
        assert table["linux"] is True


class TestHostInfo:
    def test_current(self):
        host = HostInfo.current()
        assert host.os_name == current_os_name()
        assert host.hostname
        assert host.home is not None
