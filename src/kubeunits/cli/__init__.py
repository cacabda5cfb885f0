"""Main CLI application module.

This module provides the main entry point for the kubeunits CLI.
"""

import typer

from .commands import json_schema, up

# Create the main CLI application
app = typer.Typer(
    help="Declarative Kubernetes deployments using kubectl, Helm and more",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("up")(up)
app.command("json-schema")(json_schema)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
