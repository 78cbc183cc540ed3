from __future__ import annotations

from collections.abc import Iterator

import pytest

from fixtura._internal.registry import FactoryRegistry, factories


@pytest.fixture()
def fixtura_registry() -> Iterator[FactoryRegistry]:
    """Provide a fresh registry that is imploded after the test.

    Factories defined through this fixture never leak between tests, and
    sequence counters always start at 1.

    Yields:
        A new ``FactoryRegistry``.

    """
    registry = FactoryRegistry()
    yield registry
    registry.implode()


@pytest.fixture()
def fixtura_factories() -> Iterator[FactoryRegistry]:
    """Provide the process-wide registry and reset its sequences afterwards.

    Use this when factories are defined once at import time on
    ``fixtura.factories`` and only their sequence state should be isolated
    between tests.

    Yields:
        The default ``FactoryRegistry``.

    """
    yield factories
    factories.reset_all()
