from __future__ import annotations

import logging
import weakref
from collections.abc import Iterator, Mapping
from typing import Any

from fixtura._internal.construction import Construct
from fixtura._internal.factory import Factory
from fixtura._internal.hooks import MaybeAwaitable
from fixtura.exceptions import FixturaFactoryNotDefinedError
from fixtura.lock_mode import LockMode

logger = logging.getLogger(__name__)


class FactoryRegistry:
    """Own a set of named factories and their build state.

    The registry maps names to factories for lookup-by-name helpers and keeps
    a weak set of every factory bound to it, so ``reset_all`` also reaches
    factories that were never given a name. Its lifetime is explicit:
    ``implode`` forgets everything, which test suites usually do in teardown.

    .. code-block:: python

        registry = FactoryRegistry()
        registry.define("user", User).sequence("id").attr("name", "Ada")

        user = registry.build("user", {"name": "Grace"})
        registry.implode()
    """

    def __init__(self, *, lock_mode: LockMode = LockMode.THREAD) -> None:
        """Initialize an empty registry.

        Args:
            lock_mode: Default sequence lock mode for factories created by
                ``define``.

        """
        self._lock_mode = lock_mode
        self._factories: dict[str, Factory] = {}
        self._tracked: weakref.WeakSet[Factory] = weakref.WeakSet()

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __len__(self) -> int:
        return len(self._factories)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(factories={list(self._factories)!r})"

    def names(self) -> list[str]:
        """Return the defined factory names in definition order."""
        return list(self._factories)

    def define(self, name: str, construct: Construct | None = None) -> Factory:
        """Create a factory bound to this registry and register it under ``name``.

        Defining an existing name replaces the previous factory.

        Args:
            name: Lookup name.
            construct: Construct target passed to ``Factory``.

        Returns:
            The new factory, ready for chained declarations.

        """
        factory = Factory(construct, registry=self, lock_mode=self._lock_mode)
        if name in self._factories:
            logger.debug("Redefining factory %r", name)
        self._factories[name] = factory
        return factory

    def track(self, factory: Factory) -> None:
        """Include ``factory`` in ``reset_all`` without giving it a name."""
        self._tracked.add(factory)

    def get(self, name: str) -> Factory:
        """Return the factory registered under ``name``.

        Raises:
            FixturaFactoryNotDefinedError: No factory has that name.

        """
        factory = self._factories.get(name)
        if factory is None:
            raise FixturaFactoryNotDefinedError(name)
        return factory

    def build(
        self,
        name: str,
        attributes: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> MaybeAwaitable:
        """Look up ``name`` and call ``Factory.build``."""
        return self.get(name).build(attributes, options)

    def build_list(
        self,
        name: str,
        size: int,
        attributes: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> MaybeAwaitable:
        """Look up ``name`` and call ``Factory.build_list``."""
        return self.get(name).build_list(size, attributes, options)

    def create(
        self,
        name: str,
        attributes: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> MaybeAwaitable:
        """Look up ``name`` and call ``Factory.create``."""
        return self.get(name).create(attributes, options)

    def create_list(
        self,
        name: str,
        size: int,
        attributes: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> MaybeAwaitable:
        """Look up ``name`` and call ``Factory.create_list``."""
        return self.get(name).create_list(size, attributes, options)

    def attributes(
        self,
        name: str,
        attributes: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Look up ``name`` and call ``Factory.attributes``."""
        return self.get(name).attributes(attributes, options)

    def reset(self, name: str) -> None:
        """Restart the sequence counters of the factory named ``name``."""
        self.get(name).reset()

    def reset_all(self) -> None:
        """Restart the sequence counters of every tracked factory."""
        tracked = list(self._tracked)
        logger.debug("Resetting sequences of %d factories", len(tracked))
        for factory in tracked:
            factory.reset()

    def implode(self) -> None:
        """Forget every registered and tracked factory.

        Factory objects already held by callers keep working; they are only
        unreachable by name and excluded from later ``reset_all`` calls.
        """
        logger.debug("Imploding registry with %d factories", len(self._factories))
        self._factories.clear()
        self._tracked.clear()


factories = FactoryRegistry()
"""Process-wide default registry."""


__all__ = ["FactoryRegistry", "factories"]
