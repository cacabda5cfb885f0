"""Unit execution.

Walks the ordered units of a scope, hands each one to the command module
of its type and recurses into groups with a selection derived for the
group. Units run strictly one after another: kubectl and Helm share the
cluster and kubeconfig state, and ordering is the point of the tool.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from kubeunits.config.models import (
    Group,
    HelmLocal,
    HelmRemote,
    Manifest,
    Noop,
    Shell,
    UnitEntry,
)
from kubeunits.errors import CommandError, UnitExecutionError

from .scheduler import schedule
from .selector import (
    Selection,
    check_selector_paths,
    resolve_group_selection,
    resolve_root_selection,
)
from .shell_commands import ShellCommands


def group_namespace(parent_namespace: str | None, key: str) -> str:
    """Return the colon-joined path of a group, for log output.

    Example:
        >>> group_namespace("platform", "ingress")
        'platform:ingress'
    """
    if parent_namespace:
        return f"{parent_namespace}:{key}"
    return key


class UnitExecutor:
    """Runs selected units in dependency order.

    The first failing unit aborts the remaining units of its scope and of
    every enclosing scope. Units applied before the failure stay applied.
    """

    def __init__(self, commands: ShellCommands) -> None:
        """Initialize the executor.

        Args:
            commands: Shell commands, configured for kubeconfig and dry run
        """
        self.commands = commands

    def run_scope(
        self,
        units: dict[str, UnitEntry],
        selection: Selection,
        namespace: str | None = None,
    ) -> list[str]:
        """Run the selected units of one scope, recursing into groups.

        Args:
            units: Mapping of the scope
            selection: Units requested in this scope
            namespace: Colon-joined path of the scope (None for the root)

        Returns:
            Qualified keys of every unit that ran, in execution order

        Raises:
            UnitExecutionError: If a unit's command fails
        """
        logger.info(
            f"Running units of {namespace or 'root'}: {', '.join(selection.tokens)}"
        )

        order = schedule(units, selection.keys, selection.include_dependencies)
        logger.debug(f"Execution order of {namespace or 'root'}: {order}")

        executed: list[str] = []
        for key in order:
            qualified_key = group_namespace(namespace, key)
            executed.append(qualified_key)
            executed.extend(
                self._run_entry(key, units[key], selection, qualified_key)
            )

        return executed

    def _run_entry(
        self,
        key: str,
        entry: UnitEntry,
        selection: Selection,
        qualified_key: str,
    ) -> list[str]:
        """Run one unit; for a group, return the units run inside it."""
        spec = entry.spec
        logger.debug(f"Running unit {qualified_key} = {spec!r}")
        try:
            match spec:
                case Noop():
                    pass
                case Shell():
                    self.commands.bash.run(spec.input)
                case Manifest():
                    self.commands.kubectl.apply(spec.path)
                case HelmRemote():
                    self.commands.helm.deploy_remote(spec)
                case HelmLocal():
                    self.commands.helm.deploy_local(spec)
                case Group():
                    child_selection = resolve_group_selection(
                        spec.units,
                        selection.tokens,
                        key,
                        selection.include_dependencies,
                        namespace=qualified_key,
                    )
                    return self.run_scope(spec.units, child_selection, qualified_key)
                case _:
                    raise TypeError(f"Unsupported unit type: {type(spec).__name__}")
        except CommandError as e:
            raise UnitExecutionError(qualified_key, e) from e
        return []

    def run(
        self,
        units: dict[str, UnitEntry],
        tokens: Sequence[str],
        include_dependencies: bool = True,
    ) -> list[str]:
        """Check every selector path, then resolve the root selection and run it."""
        check_selector_paths(units, tokens)
        selection = resolve_root_selection(units, tokens, include_dependencies)
        return self.run_scope(units, selection)
