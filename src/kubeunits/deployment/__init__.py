"""Validation, scheduling and execution of deployment units.

This package provides:
- validator: Structural checks run once before anything is applied
- selector: Resolution of ``key`` / ``group:key`` selector tokens
- scheduler: Dependency closure and execution order of one scope
- executor: Dispatch of units to bash, kubectl and Helm
- deployer: The ``up`` workflow tying the phases together
"""

from .deployer import UnitDeployer
from .executor import UnitExecutor
from .shell_commands import ShellCommands

__all__ = [
    "ShellCommands",
    "UnitDeployer",
    "UnitExecutor",
]
