"""Structural validation of a unit tree.

Every check walks the tree read-only (``check_files_exist`` also stats the
filesystem) and raises ``ConfigurationError`` on the first problem it
reports. ``validate_config`` runs the checks in a fixed order and stops at
the first failure, so a misconfigured file always surfaces the same error:

1. key format
2. duplicate keys
3. dependency references
4. dependency cycles
5. file existence
6. Helm repository references
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterator
from pathlib import Path

from loguru import logger

from kubeunits.config.models import Config, HelmRepository, UnitEntry
from kubeunits.errors import ConfigurationError

UNIT_KEY_PATTERN = re.compile(r"[A-Za-z0-9]+")

_INVALID = "Configuration is invalid"


def validate_config(config: Config) -> None:
    """Run every structural check in order, stopping at the first failure.

    Raises:
        ConfigurationError: Describing the first problem found
    """
    logger.debug("Validating configuration...")
    check_unit_keys_format(config.units)
    check_duplicate_unit_keys(config.units)
    check_dependency_references(config.units)
    check_dependency_cycles(config.units)
    check_files_exist(config.units)
    check_helm_remote_repositories(config.units, config.helm_repositories)


def iter_scopes(units: dict[str, UnitEntry]) -> Iterator[dict[str, UnitEntry]]:
    """Yield ``units`` and then every nested group mapping, depth first."""
    yield units
    for entry in units.values():
        if entry.group is not None:
            yield from iter_scopes(entry.group)


# =============================================================================
# Keys
# =============================================================================


def check_unit_keys_format(units: dict[str, UnitEntry]) -> None:
    """Ensure every key at every depth is alphanumeric.

    Colons are reserved for the ``group:unit`` selector syntax.
    """
    for key, entry in units.items():
        if not UNIT_KEY_PATTERN.fullmatch(key):
            raise ConfigurationError(
                f"{_INVALID}, unit key can only contain [a-zA-Z0-9]: {key}"
            )
        if entry.group is not None:
            check_unit_keys_format(entry.group)


def check_duplicate_unit_keys(units: dict[str, UnitEntry]) -> None:
    """Ensure no key appears twice anywhere in the tree, across all groups."""
    counts = Counter(key for scope in iter_scopes(units) for key in scope)
    duplicates = sorted(key for key, count in counts.items() if count > 1)
    if duplicates:
        raise ConfigurationError(
            f"{_INVALID}, duplicate unit keys: {', '.join(duplicates)}"
        )


# =============================================================================
# Dependencies
# =============================================================================


def check_dependency_references(units: dict[str, UnitEntry]) -> None:
    """Ensure every ``dependsOn`` entry names a sibling in the same scope.

    Dependencies never reach into a parent or a nested group. Missing keys
    from all scopes are reported together.
    """
    invalid: set[str] = set()
    for scope in iter_scopes(units):
        for entry in scope.values():
            invalid.update(dep for dep in entry.dependencies if dep not in scope)

    if invalid:
        raise ConfigurationError(
            f"{_INVALID}, invalid dependencies: {', '.join(sorted(invalid))}"
        )


def find_dependency_cycle(units: dict[str, UnitEntry]) -> list[str] | None:
    """Look for a dependency cycle within one scope.

    Runs a depth-first search from each key in declaration order, keeping
    the current path on an explicit stack. Nested groups are not visited.

    Returns:
        The cycle as a path that starts and ends on the same key
        (e.g. ``["a", "c", "b", "a"]``), or None if the scope is acyclic
    """
    for key in units:
        cycle = _walk(key, units, set(), [])
        if cycle is not None:
            return cycle
    return None


def _walk(
    key: str,
    units: dict[str, UnitEntry],
    visited: set[str],
    stack: list[str],
) -> list[str] | None:
    if key in stack:
        return stack[stack.index(key) :] + [key]
    if key in visited:
        return None

    visited.add(key)
    stack.append(key)

    entry = units.get(key)
    for dependency in entry.dependencies if entry is not None else []:
        cycle = _walk(dependency, units, visited, stack)
        if cycle is not None:
            return cycle

    stack.pop()
    return None


def check_dependency_cycles(units: dict[str, UnitEntry]) -> None:
    """Ensure the dependency graph of every scope is acyclic.

    The root scope is checked first, then each group in depth-first order.
    """
    for scope in iter_scopes(units):
        cycle = find_dependency_cycle(scope)
        if cycle is not None:
            raise ConfigurationError(
                f'{_INVALID}, dependency cycle for "{cycle[0]}": '
                f"{' -> '.join(cycle)}"
            )


# =============================================================================
# Files
# =============================================================================


def check_files_exist(units: dict[str, UnitEntry]) -> None:
    """Ensure manifests, values files and local chart directories exist.

    Paths are expected to be already resolved against the deployment
    file's directory.
    """
    for key, entry in units.items():
        if entry.manifest is not None:
            _require_file(key, entry.manifest.path)
        elif entry.helm_remote is not None:
            for values_file in entry.helm_remote.values or []:
                _require_file(key, values_file)
        elif entry.helm_local is not None:
            if not Path(entry.helm_local.chart_path).is_dir():
                raise ConfigurationError(
                    f'{_INVALID}, chart directory of unit "{key}" does not '
                    f"exist: {entry.helm_local.chart_path}"
                )
            for values_file in entry.helm_local.values or []:
                _require_file(key, values_file)
        elif entry.group is not None:
            check_files_exist(entry.group)


def _require_file(key: str, path: str) -> None:
    if not Path(path).is_file():
        raise ConfigurationError(
            f'{_INVALID}, file of unit "{key}" does not exist: {path}'
        )


# =============================================================================
# Helm Repositories
# =============================================================================


def check_helm_remote_repositories(
    units: dict[str, UnitEntry],
    repositories: list[HelmRepository] | None,
) -> None:
    """Ensure every remote chart is prefixed by a configured repository.

    A chart name must look like ``<repository>/<chart>`` where
    ``<repository>`` is the name of an entry of ``helmRepositories``.
    """
    for key, entry in units.items():
        if entry.group is not None:
            check_helm_remote_repositories(entry.group, repositories)
            continue
        if entry.helm_remote is None:
            continue

        chart_name = entry.helm_remote.chart_name
        alias, separator, _chart = chart_name.partition("/")
        if not separator:
            raise ConfigurationError(
                f'{_INVALID}, chart name "{chart_name}" of unit "{key}" '
                "doesn't start with a repository name"
            )
        if not repositories:
            raise ConfigurationError(
                f'{_INVALID}, unit "{key}" uses repository "{alias}" but no '
                "helm repositories are configured"
            )

        names = [repository.name for repository in repositories]
        if alias not in names:
            raise ConfigurationError(
                f'{_INVALID}, repository "{alias}" of unit "{key}" not found, '
                f"available repositories: {', '.join(names)}"
            )
