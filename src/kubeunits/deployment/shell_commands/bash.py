"""bash command abstractions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class BashCommands:
    """Shell command lines run through ``bash -c``."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def run(self, command_line: str) -> CommandResult:
        """Run ``command_line`` with ``bash -c``."""
        return self._runner.run_piped(["bash", "-c", command_line])
