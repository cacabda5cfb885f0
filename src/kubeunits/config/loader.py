"""Deployment file loading.

Reads the YAML file, validates it into a ``Config`` and rewrites every
file reference so that it is relative to the directory holding the file.
"""

from collections.abc import Hashable
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from kubeunits.config.models import Config, UnitEntry
from kubeunits.errors import ConfigurationError

CONFIG_PATH = Path("kubeunits.yaml")


class UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects a key repeated within one mapping."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _value_node in node.value:
            if key_node.tag == "tag:yaml.org,2002:merge":
                continue
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                continue
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def load_config(file_path: Path = CONFIG_PATH) -> Config:
    """Load and parse a deployment file.

    Args:
        file_path: Path to the YAML deployment file (default: kubeunits.yaml)

    Returns:
        Config whose manifest, chart and values paths are joined onto the
        directory of ``file_path``

    Raises:
        ConfigurationError: If the file cannot be read or does not match the
            deployment file format
    """
    logger.info(f"Deploying from {file_path}...")

    try:
        content = Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Unable to read configuration file: {e}") from e

    config = parse_config(content)
    config = resolve_config_paths(config, Path(file_path).parent)

    logger.debug(f"Configuration: {config!r}")
    return config


def parse_config(content: str) -> Config:
    """Validate raw YAML text into a ``Config`` without touching paths."""
    try:
        data = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Unable to parse configuration file: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Unable to parse configuration file: top level must be a mapping"
        )

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            "Unable to parse configuration file", details=str(e)
        ) from e


def resolve_config_paths(config: Config, base_dir: Path) -> Config:
    """Return a copy of ``config`` with file references joined onto ``base_dir``."""
    return config.model_copy(
        update={"units": resolve_unit_paths(config.units, base_dir)}
    )


def resolve_unit_paths(
    units: dict[str, UnitEntry], base_dir: Path
) -> dict[str, UnitEntry]:
    """Rewrite file references of a scope, recursing into groups.

    Absolute paths are left as they are.
    """
    resolved: dict[str, UnitEntry] = {}
    for key, entry in units.items():
        update: dict[str, object] = {}
        if entry.manifest is not None:
            update["manifest"] = entry.manifest.model_copy(
                update={"path": _join(base_dir, entry.manifest.path)}
            )
        elif entry.helm_remote is not None:
            update["helm_remote"] = entry.helm_remote.model_copy(
                update={"values": _join_all(base_dir, entry.helm_remote.values)}
            )
        elif entry.helm_local is not None:
            update["helm_local"] = entry.helm_local.model_copy(
                update={
                    "chart_path": _join(base_dir, entry.helm_local.chart_path),
                    "values": _join_all(base_dir, entry.helm_local.values),
                }
            )
        elif entry.group is not None:
            update["group"] = resolve_unit_paths(entry.group, base_dir)

        resolved[key] = entry.model_copy(update=update) if update else entry
    return resolved


def _join(base_dir: Path, path: str) -> str:
    return str(base_dir / path)


def _join_all(base_dir: Path, paths: list[str] | None) -> list[str] | None:
    if paths is None:
        return None
    return [_join(base_dir, p) for p in paths]
