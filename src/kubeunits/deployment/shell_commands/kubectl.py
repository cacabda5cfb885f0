"""kubectl command abstractions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class KubectlCommands:
    """Kubernetes kubectl commands."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize kubectl commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    def apply(self, manifest_path: str) -> CommandResult:
        """Apply a manifest file (``kubectl apply -f <path>``).

        Args:
            manifest_path: Path to the manifest, already resolved against the
                deployment file's directory

        Returns:
            CommandResult of the apply
        """
        return self._runner.run_piped(["kubectl", "apply", "-f", manifest_path])
