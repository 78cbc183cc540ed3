"""Shared pytest fixtures for fixtura tests."""

from collections.abc import Iterator

import pytest

from fixtura import Factory, FactoryRegistry


@pytest.fixture()
def registry() -> Iterator[FactoryRegistry]:
    """Fresh registry, imploded after the test."""
    registry = FactoryRegistry()
    yield registry
    registry.implode()


@pytest.fixture()
def factory() -> Factory:
    """Standalone factory without a construct target."""
    return Factory()
