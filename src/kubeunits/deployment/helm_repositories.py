"""Helm repository registration."""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from kubeunits.config.models import HelmRepository

from .shell_commands import ShellCommands


def handle_helm_repositories(
    commands: ShellCommands, repositories: Sequence[HelmRepository]
) -> None:
    """Add and update every configured repository, in declaration order.

    Raises:
        CommandError: On the first ``helm repo`` command that fails
    """
    logger.info("Adding and updating Helm repositories...")

    for repository in repositories:
        commands.helm.repo_add(repository.name, repository.url)
        commands.helm.repo_update(repository.name)
        logger.debug(f"Repository {repository.name} = {repository.url} updated")
