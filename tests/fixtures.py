"""Shared test fixtures and unit tree builders."""

import sys

import pytest
from loguru import logger

from kubeunits.config.models import UnitEntry


def noop(*depends_on: str) -> UnitEntry:
    """Build a no-op unit depending on ``depends_on``."""
    return UnitEntry(noop="", depends_on=list(depends_on) or None)


def group(units: dict[str, UnitEntry], *depends_on: str) -> UnitEntry:
    """Build a group unit depending on ``depends_on``."""
    return UnitEntry(group=units, depends_on=list(depends_on) or None)


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore loguru's default stderr sink after commands reconfigure it."""
    yield
    logger.remove()
    logger.add(sys.stderr)
