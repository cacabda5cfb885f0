"""The ``json-schema`` command: print the deployment file schema."""

import json

import typer

from kubeunits.config.models import Config


def config_json_schema() -> dict[str, object]:
    """Return the JSON schema of the deployment file format."""
    return Config.model_json_schema(by_alias=True)


def json_schema() -> None:
    """Print the JSON schema of the deployment file.

    Point an editor's YAML language server at it for completion and
    validation of kubeunits.yaml.
    """
    typer.echo(json.dumps(config_json_schema(), indent=2))
