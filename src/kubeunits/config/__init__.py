"""Deployment file models and loading."""

from .loader import CONFIG_PATH, load_config, parse_config, resolve_config_paths
from .models import (
    Config,
    Group,
    HelmLocal,
    HelmRemote,
    HelmRepository,
    Manifest,
    Noop,
    Shell,
    UnitEntry,
    UnitSpec,
)

__all__ = [
    "CONFIG_PATH",
    "Config",
    "Group",
    "HelmLocal",
    "HelmRemote",
    "HelmRepository",
    "Manifest",
    "Noop",
    "Shell",
    "UnitEntry",
    "UnitSpec",
    "load_config",
    "parse_config",
    "resolve_config_paths",
]
