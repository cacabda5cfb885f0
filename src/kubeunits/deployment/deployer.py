"""Deployment orchestration for ``kubeunits up``.

Ties the phases together: validation, Helm repository registration,
root selection and unit execution. Each phase wraps failures of the
layers below with the name of the phase.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from kubeunits.config.models import Config
from kubeunits.errors import CommandError, DeploymentError, UnitExecutionError

from .executor import UnitExecutor
from .helm_repositories import handle_helm_repositories
from .selector import check_selector_paths, resolve_root_selection
from .shell_commands import ShellCommands
from .validator import validate_config


class UnitDeployer:
    """Validates a deployment configuration and applies its units.

    Attributes:
        commands: Shell command executor shared by every phase
    """

    def __init__(self, commands: ShellCommands) -> None:
        """Initialize the deployer.

        Args:
            commands: Shell commands, configured for kubeconfig and dry run
        """
        self.commands = commands

    def up(
        self,
        config: Config,
        unit_args: Sequence[str] = (),
        *,
        include_dependencies: bool = True,
        run_units: bool = True,
        helm_repositories: bool = True,
    ) -> list[str]:
        """Deploy the selected units of ``config``.

        Args:
            config: Loaded configuration, paths already resolved
            unit_args: Selector tokens (``key`` or ``group:key``); empty
                selects every root unit
            include_dependencies: Whether to add transitive dependencies
            run_units: Whether to run units at all
            helm_repositories: Whether to add/update Helm repositories

        Returns:
            Qualified keys of the units that ran, in execution order

        Raises:
            ConfigurationError: If the configuration is not well-formed
            SelectorError: If a selector names an unknown unit
            DeploymentError: If adding repositories or running a unit fails
        """
        validate_config(config)
        if run_units:
            check_selector_paths(config.units, unit_args)

        if self.commands.dry_run:
            logger.info("Dry run: commands are logged but not executed")

        if helm_repositories:
            try:
                handle_helm_repositories(self.commands, config.helm_repositories or [])
            except CommandError as e:
                raise DeploymentError(
                    f"Adding helm repositories failed: {e.message}", e.details
                ) from e

        if not run_units:
            return []

        selection = resolve_root_selection(
            config.units, unit_args, include_dependencies
        )
        executor = UnitExecutor(self.commands)
        try:
            return executor.run_scope(config.units, selection)
        except UnitExecutionError as e:
            raise DeploymentError(
                f"Running units failed: {e.message}", e.details
            ) from e
