"""Exception hierarchy shared by every layer of kubeunits.

Lower layers raise; the CLI catches ``DeploymentError`` once and renders
``message`` plus the optional ``details`` block.
"""

from __future__ import annotations

from collections.abc import Sequence


class DeploymentError(Exception):
    """Raised when a deployment operation fails."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ConfigurationError(DeploymentError):
    """The deployment file cannot be loaded or is not well-formed."""


class SelectorError(DeploymentError):
    """Unit selector arguments or CLI options are used incorrectly."""


class CommandError(DeploymentError):
    """An external command could not be run or exited with a failure.

    Attributes:
        command: Argument vector that was executed
        returncode: Exit status of the process (None if it never started)
    """

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: int | None = None,
        details: str | None = None,
    ):
        self.command = list(command)
        self.returncode = returncode
        super().__init__(message, details)


class UnitExecutionError(DeploymentError):
    """A unit failed while running; wraps the underlying ``CommandError``.

    The command's captured stderr becomes ``details``.
    """

    def __init__(self, unit_key: str, error: CommandError):
        self.unit_key = unit_key
        self.error = error
        super().__init__(f'Unit "{unit_key}" failed', error.message)
