"""Shell command abstractions for unit execution.

This package provides the interface for the external tools that units
drive. It is organized into specialized modules for each tool:

- bash: Shell command lines
- helm: Helm release and repository management
- kubectl: Manifest application

Design Principles:
- Single Responsibility: Each module focuses on one tool
- Consistent Return Types: Functions return CommandResult or raise CommandError
- Separation of Concerns: Commands are decoupled from scheduling logic

Usage:
    from kubeunits.deployment.shell_commands import ShellCommands

    commands = ShellCommands(kubeconfig="~/.kube/staging", dry_run=True)
    commands.kubectl.apply("manifests/namespace.yaml")
"""

from pathlib import Path

from .bash import BashCommands
from .helm import HelmCommands
from .kubectl import KubectlCommands
from .runner import CommandRunner
from .types import CommandResult, HelmRelease


class ShellCommands:
    """Unified interface for all shell command operations.

    Attributes:
        bash: Shell command lines
        helm: Helm-related commands
        kubectl: Kubernetes kubectl commands

    Example:
        >>> commands = ShellCommands(dry_run=True)
        >>> commands.helm.release_exists("argo-cd", "argocd")
        False
    """

    def __init__(
        self,
        *,
        kubeconfig: str | None = None,
        dry_run: bool = False,
        cwd: Path | None = None,
    ) -> None:
        """Initialize the shell commands executor.

        Args:
            kubeconfig: Optional kubeconfig exported to every command
            dry_run: Log commands instead of running them
            cwd: Working directory for commands (default: current directory)
        """
        self._runner = CommandRunner(kubeconfig=kubeconfig, dry_run=dry_run, cwd=cwd)

        self.bash = BashCommands(self._runner)
        self.helm = HelmCommands(self._runner)
        self.kubectl = KubectlCommands(self._runner)

    @property
    def dry_run(self) -> bool:
        """Whether commands are only logged."""
        return self._runner.dry_run


__all__ = [
    "ShellCommands",
    "CommandResult",
    "HelmRelease",
    "BashCommands",
    "HelmCommands",
    "KubectlCommands",
    "CommandRunner",
]
