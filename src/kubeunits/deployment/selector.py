"""Unit selector resolution.

Selector tokens come from the command line and name a unit of the current
scope (``argoCd``) or a path into nested groups (``platform:ingress``).
Tokens are split on the first colon only; the remainder is handed, still
unsplit, to the scope of the named group.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from kubeunits.config.models import UnitEntry
from kubeunits.errors import SelectorError

SEPARATOR = ":"


@dataclass(frozen=True)
class Selection:
    """Units requested in one scope.

    Attributes:
        tokens: Raw selector tokens for this scope
        keys: Distinct unit keys requested in this scope, in token order
        include_dependencies: Whether transitive dependencies are added
    """

    tokens: tuple[str, ...]
    keys: tuple[str, ...]
    include_dependencies: bool


def head_tokens(tokens: Sequence[str]) -> list[str]:
    """Return the distinct keys named by ``tokens`` in the current scope.

    Example:
        >>> head_tokens(["a", "b:c", "b:d"])
        ['a', 'b']
    """
    heads: list[str] = []
    for token in tokens:
        head = token.split(SEPARATOR, 1)[0]
        if head not in heads:
            heads.append(head)
    return heads


def tail_tokens_for(tokens: Sequence[str], key: str) -> list[str]:
    """Return the selector tokens addressed to the group named ``key``.

    Only qualified tokens (``key:rest``) contribute; a bare ``key`` yields
    nothing.

    Example:
        >>> tail_tokens_for(["a", "b:c", "d:e", "b:f:g"], "b")
        ['c', 'f:g']
    """
    prefix = key + SEPARATOR
    return [token[len(prefix) :] for token in tokens if token.startswith(prefix)]


def resolve_root_selection(
    units: dict[str, UnitEntry],
    tokens: Sequence[str],
    include_dependencies: bool = True,
) -> Selection:
    """Resolve the selection of the root scope.

    Without any token every root unit is selected.
    """
    if not tokens:
        tokens = list(units)
    return _selection(units, tokens, include_dependencies, namespace=None)


def resolve_group_selection(
    group: dict[str, UnitEntry],
    parent_tokens: Sequence[str],
    key: str,
    include_dependencies: bool,
    namespace: str | None = None,
) -> Selection:
    """Resolve the selection inside the group ``key``.

    When the group was requested without a qualifier (bare ``key``), the
    whole group is selected and dependencies are always included, whatever
    the parent asked for. Otherwise only the named children are selected
    and the parent's dependency policy is kept.

    Args:
        group: Units of the group
        parent_tokens: Selector tokens of the scope holding the group
        key: Key of the group in its parent scope
        include_dependencies: Dependency policy inherited from the parent
        namespace: Colon-joined path of the group, used in messages only
    """
    tokens = tail_tokens_for(parent_tokens, key)
    if not tokens:
        return _selection(group, list(group), True, namespace)
    return _selection(group, tokens, include_dependencies, namespace)


def check_selector_paths(
    units: dict[str, UnitEntry],
    tokens: Sequence[str],
    namespace: str | None = None,
) -> None:
    """Ensure every selector token names existing units at every depth.

    Group selections are otherwise only resolved when the group is reached,
    after the units it depends on have run.

    Raises:
        SelectorError: If a token names an unknown unit in any scope
    """
    keys = head_tokens(tokens)
    _check_known(units, keys, namespace)

    for key in keys:
        group = units[key].group
        tail = tail_tokens_for(tokens, key)
        if group is not None and tail:
            path = f"{namespace}{SEPARATOR}{key}" if namespace else key
            check_selector_paths(group, tail, path)


def _check_known(
    units: dict[str, UnitEntry], keys: Sequence[str], namespace: str | None
) -> None:
    unknown = [key for key in keys if key not in units]
    if unknown:
        raise SelectorError(
            f"Unknown unit {', '.join(repr(k) for k in unknown)} in "
            f"{namespace or 'root'}, available units: {', '.join(units)}"
        )


def _selection(
    units: dict[str, UnitEntry],
    tokens: Sequence[str],
    include_dependencies: bool,
    namespace: str | None,
) -> Selection:
    keys = head_tokens(tokens)
    _check_known(units, keys, namespace)

    for key in keys:
        if units[key].group is None and tail_tokens_for(tokens, key):
            logger.warning(f'Unit "{key}" is not a group, ignoring its qualifier')

    return Selection(
        tokens=tuple(tokens),
        keys=tuple(keys),
        include_dependencies=include_dependencies,
    )
