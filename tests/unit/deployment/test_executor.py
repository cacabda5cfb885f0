"""Tests for unit execution."""

from unittest.mock import MagicMock, call, patch

import pytest

from kubeunits.config.models import HelmLocal, HelmRemote, Manifest, Shell, UnitEntry
from kubeunits.deployment.executor import UnitExecutor, group_namespace
from kubeunits.deployment.shell_commands import ShellCommands
from kubeunits.errors import CommandError, SelectorError, UnitExecutionError
from tests.fixtures import group, noop


def shell(line: str, *depends_on: str) -> UnitEntry:
    return UnitEntry(shell=Shell(input=line), depends_on=list(depends_on) or None)


@pytest.fixture
def mock_commands() -> MagicMock:
    """Create a mock ShellCommands instance."""
    return MagicMock()


@pytest.fixture
def executor(mock_commands: MagicMock) -> UnitExecutor:
    """Create a UnitExecutor with mock commands."""
    return UnitExecutor(mock_commands)


@pytest.fixture
def units() -> dict[str, UnitEntry]:
    """A root scope with one group depending on a plain unit."""
    return {
        "a": noop(),
        "b": group({"c": noop(), "d": noop("c")}, "a"),
    }


def test_group_namespace() -> None:
    """Group paths are joined with colons below the root."""
    assert group_namespace(None, "platform") == "platform"
    assert group_namespace("platform", "ingress") == "platform:ingress"


class TestSelection:
    """Tests for which units run and in which order."""

    def test_everything_runs_without_selectors(self, executor, units) -> None:
        """No selector runs every unit, groups included."""
        assert executor.run(units, []) == ["a", "b", "b:c", "b:d"]

    def test_selected_unit_pulls_its_dependencies(self, executor) -> None:
        """Dependencies are added and ordered before the selected unit."""
        units = {"a": noop(), "b": noop("a"), "c": noop("b")}

        assert executor.run(units, ["c"]) == ["a", "b", "c"]
        assert executor.run(units, ["c"], include_dependencies=False) == ["c"]

    def test_bare_group_runs_whole_group(self, executor, units) -> None:
        """A bare group reference forces dependencies on inside the group."""
        assert executor.run(units, ["b"], include_dependencies=False) == [
            "b",
            "b:c",
            "b:d",
        ]

    def test_qualified_group_respects_no_dependencies(self, executor, units) -> None:
        """A qualified reference runs only the named child."""
        assert executor.run(units, ["b:d"], include_dependencies=False) == ["b", "b:d"]

    def test_qualified_group_with_dependencies(self, executor, units) -> None:
        """Dependencies apply in the root and inside the group."""
        assert executor.run(units, ["b:d"]) == ["a", "b", "b:c", "b:d"]

    def test_nested_groups(self, executor) -> None:
        """Qualifiers are split one level at a time."""
        units = {
            "outer": group(
                {
                    "skip": noop(),
                    "inner": group({"x": noop(), "y": noop()}),
                }
            )
        }

        assert executor.run(units, ["outer:inner:y"]) == [
            "outer",
            "outer:inner",
            "outer:inner:y",
        ]


class TestDispatch:
    """Tests for dispatching units to their command modules."""

    def test_each_unit_type_uses_its_command(
        self, executor: UnitExecutor, mock_commands: MagicMock
    ) -> None:
        """Every payload type reaches the matching command module."""
        remote = HelmRemote(
            name="argo-cd",
            namespace="argocd",
            chart_name="argo/argo-cd",
            chart_version="7.6.8",
        )
        local = HelmLocal(name="app", namespace="default", chart_path="/charts/app")
        units = {
            "sh": shell("echo hi"),
            "manifest": UnitEntry(manifest=Manifest(path="/m.yaml")),
            "remote": UnitEntry(helm_remote=remote),
            "local": UnitEntry(helm_local=local),
            "nothing": noop(),
        }

        executor.run(units, [])

        mock_commands.bash.run.assert_called_once_with("echo hi")
        mock_commands.kubectl.apply.assert_called_once_with("/m.yaml")
        mock_commands.helm.deploy_remote.assert_called_once_with(remote)
        mock_commands.helm.deploy_local.assert_called_once_with(local)

    def test_units_run_in_dependency_order(
        self, executor: UnitExecutor, mock_commands: MagicMock
    ) -> None:
        """Commands are issued one unit after the other in schedule order."""
        units = {"second": shell("echo 2", "first"), "first": shell("echo 1")}

        executor.run(units, [])

        assert mock_commands.bash.run.call_args_list == [call("echo 1"), call("echo 2")]


class TestFailures:
    """Tests for failing units."""

    def test_failure_aborts_remaining_units(
        self, executor: UnitExecutor, mock_commands: MagicMock
    ) -> None:
        """The first failure stops the scope and names the unit."""
        mock_commands.bash.run.side_effect = [
            None,
            CommandError("exit status 3: no such file", returncode=3),
        ]
        units = {
            "ok": shell("true"),
            "grp": group({"broken": shell("false"), "later": noop("broken")}),
            "after": shell("echo never"),
        }

        with pytest.raises(UnitExecutionError) as exc_info:
            executor.run(units, [])

        assert exc_info.value.unit_key == "grp:broken"
        assert exc_info.value.message == 'Unit "grp:broken" failed'
        assert exc_info.value.details == "exit status 3: no such file"
        assert mock_commands.bash.run.call_count == 2

    def test_selector_typo_in_group_runs_nothing(
        self, executor: UnitExecutor, mock_commands: MagicMock
    ) -> None:
        """An unknown child is reported before the group's dependencies run."""
        units = {
            "a": shell("kubectl create ns x"),
            "b": group({"c": noop()}, "a"),
        }

        with pytest.raises(SelectorError, match="'typo'"):
            executor.run(units, ["b:typo"])

        mock_commands.bash.run.assert_not_called()


class TestDryRun:
    """Tests for running units with dry-run commands."""

    @patch("subprocess.run")
    @patch("subprocess.Popen")
    def test_dry_run_never_spawns_processes(self, mock_popen, mock_run) -> None:
        """No process is spawned, not even the helm release query."""
        executor = UnitExecutor(ShellCommands(dry_run=True))
        units = {
            "sh": shell("exit 1"),
            "manifest": UnitEntry(manifest=Manifest(path="/m.yaml")),
            "remote": UnitEntry(
                helm_remote=HelmRemote(
                    name="r", namespace="n", chart_name="repo/r", chart_version="1.0.0"
                )
            ),
            "local": UnitEntry(
                helm_local=HelmLocal(name="l", namespace="n", chart_path="/charts/l")
            ),
        }

        executed = executor.run(units, [])

        assert executed == ["sh", "manifest", "remote", "local"]
        mock_popen.assert_not_called()
        mock_run.assert_not_called()
