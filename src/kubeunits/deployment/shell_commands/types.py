"""Data types for shell command results."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


@dataclass(frozen=True)
class HelmRelease:
    """A Helm release as reported by ``helm list``.

    Attributes:
        name: Release name
        namespace: Kubernetes namespace
    """

    name: str
    namespace: str
