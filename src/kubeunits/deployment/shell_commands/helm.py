"""Helm command abstractions.

This module provides commands for Helm release management and repository
registration. Releases are installed when absent and upgraded when a
release of the same name already exists in the namespace.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import yaml
from loguru import logger

from kubeunits.errors import CommandError

from .types import CommandResult, HelmRelease

if TYPE_CHECKING:
    from kubeunits.config.models import HelmLocal, HelmRemote

    from .runner import CommandRunner


class HelmCommands:
    """Helm-related shell commands.

    Provides operations for:
    - Release management (install or upgrade of remote and local charts)
    - Status queries (list releases, release existence)
    - Repository registration (repo add, repo update)
    """

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Helm commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    # =========================================================================
    # Release Management
    # =========================================================================

    def deploy_remote(self, unit: HelmRemote) -> CommandResult:
        """Install or upgrade a release from a repository chart.

        Args:
            unit: Remote chart unit (chart name is ``<repository>/<chart>``)

        Returns:
            CommandResult of the install/upgrade command
        """
        cmd = self.release_command(
            self._subcommand(unit.name, unit.namespace),
            unit.name,
            unit.chart_name,
            unit.namespace,
            chart_version=unit.chart_version,
            value_files=unit.values,
        )
        return self._runner.run_piped(cmd)

    def deploy_local(self, unit: HelmLocal) -> CommandResult:
        """Install or upgrade a release from a chart directory.

        Args:
            unit: Local chart unit

        Returns:
            CommandResult of the install/upgrade command
        """
        cmd = self.release_command(
            self._subcommand(unit.name, unit.namespace),
            unit.name,
            unit.chart_path,
            unit.namespace,
            value_files=unit.values,
        )
        return self._runner.run_piped(cmd)

    @staticmethod
    def release_command(
        subcommand: str,
        release_name: str,
        chart: str,
        namespace: str,
        *,
        chart_version: str | None = None,
        value_files: list[str] | None = None,
    ) -> list[str]:
        """Build the argument vector of ``helm install`` / ``helm upgrade``.

        Args:
            subcommand: "install" or "upgrade"
            release_name: Name of the Helm release
            chart: Chart reference (``repo/chart``) or chart directory
            namespace: Kubernetes namespace of the release
            chart_version: Version pinned with ``--version`` (remote charts)
            value_files: Values files, each passed with ``-f``

        Returns:
            Full command as a list, starting with "helm"

        Example:
            >>> HelmCommands.release_command(
            ...     "install", "argo-cd", "argo/argo-cd", "argocd", chart_version="7.6.8"
            ... )
            ['helm', 'install', 'argo-cd', 'argo/argo-cd', '--version', '7.6.8', '--namespace', 'argocd']
        """
        cmd = ["helm", subcommand, release_name, chart]
        if chart_version is not None:
            cmd.extend(["--version", chart_version])
        cmd.extend(["--namespace", namespace])

        for vf in value_files or []:
            cmd.extend(["-f", vf])

        return cmd

    def _subcommand(self, release_name: str, namespace: str) -> str:
        if self.release_exists(release_name, namespace):
            return "upgrade"
        return "install"

    # =========================================================================
    # Status Queries
    # =========================================================================

    def list_releases(self, namespace: str) -> list[HelmRelease]:
        """List Helm releases in a namespace.

        Args:
            namespace: Kubernetes namespace to query

        Returns:
            List of HelmRelease objects

        Raises:
            CommandError: If helm fails or its output is not a list of releases
        """
        cmd = ["helm", "list", "--namespace", namespace, "--output", "yaml"]

        result = self._runner.run(cmd)
        if not result.success:
            raise CommandError(
                f"Could not list helm releases in namespace {namespace}",
                command=cmd,
                returncode=result.returncode,
                details=result.stderr,
            )

        try:
            releases_data = yaml.safe_load(result.stdout) or []
        except yaml.YAMLError as e:
            raise CommandError(
                f"Could not read helm releases: {e}", command=cmd
            ) from e

        if not isinstance(releases_data, list) or not all(
            isinstance(r, dict) for r in releases_data
        ):
            raise CommandError(
                "Could not read helm releases: expected a list of releases",
                command=cmd,
                details=result.stdout,
            )

        return [
            HelmRelease(
                name=str(r.get("name", "")),
                namespace=str(r.get("namespace", "")),
            )
            for r in releases_data
        ]

    def release_exists(self, release_name: str, namespace: str) -> bool:
        """Check whether a release is installed under this name and namespace.

        In dry-run mode the cluster is not queried and every release is
        reported as absent, so dry runs always plan an install.
        """
        if self._runner.dry_run:
            return False

        exists = HelmRelease(release_name, namespace) in self.list_releases(namespace)
        logger.debug(
            f"Helm release {namespace}/{release_name} "
            f"{'already installed' if exists else 'not installed'}"
        )
        return exists

    # =========================================================================
    # Repositories
    # =========================================================================

    def repo_add(self, name: str, url: str) -> CommandResult:
        """Register a chart repository (``helm repo add``)."""
        return self._runner.run_piped(["helm", "repo", "add", name, url])

    def repo_update(self, name: str) -> CommandResult:
        """Refresh the index of a chart repository (``helm repo update``)."""
        return self._runner.run_piped(["helm", "repo", "update", name])
