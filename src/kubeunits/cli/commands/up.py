"""The ``up`` command: deploy units using the current kubeconfig context."""

import contextlib
from pathlib import Path
from typing import Annotated

import typer

from kubeunits.config import CONFIG_PATH, load_config
from kubeunits.deployment import ShellCommands, UnitDeployer
from kubeunits.errors import SelectorError

from .shared import configure_logging, console, print_header, with_error_handling


def check_unit_options(
    unit_args: list[str], run_units: bool, dependencies: bool | None
) -> None:
    """Reject option combinations that contradict the UNITS argument.

    Raises:
        SelectorError: If --dependencies/--no-dependencies is given without
            UNITS, or --no-units is given together with UNITS
    """
    if dependencies is not None and run_units and not unit_args:
        raise SelectorError(
            "option --dependencies/--no-dependencies only works when you pass "
            "argument UNITS too"
        )
    if not run_units and unit_args:
        raise SelectorError(
            "option --no-units only works when you don't pass argument UNITS, "
            f"you passed [{', '.join(unit_args)}]"
        )


@with_error_handling
def up(
    unit_args: Annotated[
        list[str] | None,
        typer.Argument(
            metavar="UNITS",
            help="Units to deploy, as KEY or GROUP:KEY (default: all units)",
            show_default=False,
        ),
    ] = None,
    file: Annotated[
        Path,
        typer.Option(
            "--file",
            "-f",
            help="Path to the deployment file in YAML format",
        ),
    ] = CONFIG_PATH,
    directory: Annotated[
        Path | None,
        typer.Option(
            "--directory",
            "-C",
            help="Change to DIRECTORY before doing anything",
        ),
    ] = None,
    kubeconfig: Annotated[
        str | None,
        typer.Option(
            "--kubeconfig",
            help="Path to the kubeconfig file to use for CLI requests",
        ),
    ] = None,
    helm_repositories: Annotated[
        bool,
        typer.Option(
            "--helm-repositories/--no-helm-repositories",
            help="Add and update Helm repositories (aka `helm repo add/update`)",
        ),
    ] = True,
    run_units: Annotated[
        bool,
        typer.Option(
            "--units/--no-units",
            help="Apply the units (aka `kubectl apply`, `helm install`, etc)",
        ),
    ] = True,
    dependencies: Annotated[
        bool | None,
        typer.Option(
            "--dependencies/--no-dependencies",
            help="Run units and their dependencies, requires UNITS",
            show_default=False,
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Show logs but do not actually apply changes",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show verbose logs",
        ),
    ] = False,
) -> None:
    """Deploy units using the current Kubernetes config context.

    Examples:
        kubeunits up
        kubeunits up argoCd --no-dependencies
        kubeunits up platform:ingress -f deploy/kubeunits.yaml
        kubeunits up --dry-run -v
    """
    configure_logging(verbose)
    unit_args = unit_args or []
    check_unit_options(unit_args, run_units, dependencies)

    with contextlib.chdir(directory) if directory else contextlib.nullcontext():
        print_header("Deploying units" + (" (dry run)" if dry_run else ""))

        config = load_config(file)
        deployer = UnitDeployer(ShellCommands(kubeconfig=kubeconfig, dry_run=dry_run))
        executed = deployer.up(
            config,
            unit_args,
            include_dependencies=dependencies if dependencies is not None else True,
            run_units=run_units,
            helm_repositories=helm_repositories,
        )

    if executed:
        console.print(f"[green]✅[/green] Deployed {len(executed)} unit(s)")
    else:
        console.print("[dim]No units were run.[/dim]")
