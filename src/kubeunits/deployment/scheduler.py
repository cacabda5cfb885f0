"""Execution ordering of the units of one scope.

Both functions assume the scope was validated first: every dependency
names an existing sibling and the graph is acyclic.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from kubeunits.config.models import UnitEntry


def compute_closure(
    units: dict[str, UnitEntry],
    seeds: Iterable[str],
    include_dependencies: bool,
) -> dict[str, UnitEntry]:
    """Return the requested units, plus their transitive dependencies if asked.

    The result keeps the declaration order of ``units``.
    """
    selected: set[str] = set()
    stack = list(seeds)
    while stack:
        key = stack.pop()
        if key in selected:
            continue
        selected.add(key)

        if include_dependencies:
            stack.extend(units[key].dependencies)

    return {key: entry for key, entry in units.items() if key in selected}


def topological_order(
    units: dict[str, UnitEntry],
    include_dependencies: bool,
) -> list[str]:
    """Order units so that each runs after everything it depends on.

    The scope is scanned in declaration order, appending every unit whose
    dependencies are already placed, until all units are placed. Units
    ready at the same time therefore keep their declaration order. When
    dependencies are not included the declaration order is returned as is.

    Raises:
        ValueError: If a pass places nothing, i.e. a dependency is missing
            from ``units`` or the scope contains a cycle
    """
    if not include_dependencies:
        return list(units)

    ordered: list[str] = []
    placed: set[str] = set()
    while len(ordered) < len(units):
        progressed = False
        for key, entry in units.items():
            if key in placed:
                continue
            missing = [dep for dep in entry.dependencies if dep not in placed]
            if missing:
                logger.debug(f'Skipping unit "{key}", waiting for dependencies: {missing}')
                continue
            ordered.append(key)
            placed.add(key)
            progressed = True

        if not progressed:
            pending = [key for key in units if key not in placed]
            raise ValueError(f"Unable to order units, unresolved dependencies: {pending}")

    return ordered


def schedule(
    units: dict[str, UnitEntry],
    seeds: Iterable[str],
    include_dependencies: bool,
) -> list[str]:
    """Select and order the units to run in one scope."""
    return topological_order(
        compute_closure(units, seeds, include_dependencies), include_dependencies
    )
