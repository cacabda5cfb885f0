"""CLI command modules.

Commands:
- up: Validate the deployment file and apply the selected units
- json-schema: Print the JSON schema of the deployment file
"""

from .schema import json_schema
from .up import up

__all__ = [
    "json_schema",
    "up",
]
