from __future__ import annotations

from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass, field
from typing import Any

from fixtura._internal.declarations import AttributeSpec, OptionSpec
from fixtura._internal.resolution_stack import ResolutionStack
from fixtura.exceptions import (
    FixturaMissingOptionError,
    FixturaOptionDependencyError,
    FixturaUnknownDependencyError,
)

DependencyLookup = Callable[[str], Any]


@dataclass(slots=True)
class BuildContext:
    """Working state of one ``attributes()`` pass.

    ``attributes`` starts as a copy of the caller overrides and receives every
    computed value, so later dependents read it without recomputation.
    """

    attributes: dict[str, Any]
    options: Mapping[str, Any]
    computed: set[str] = field(default_factory=set)


class DependencyResolver:
    """Compute one declared value from its dependencies.

    The resolver knows nothing about attributes or options: callers supply the
    working map and a lookup callback that decides where each dependency comes
    from (and raises for cycles or unknown names).
    """

    def resolve(
        self,
        spec: AttributeSpec | OptionSpec,
        working: dict[str, Any],
        lookup: DependencyLookup,
        *,
        always_build: bool = False,
    ) -> Any:
        """Return the value of ``spec`` and store it in ``working``.

        A value already present in ``working`` wins unless ``always_build`` is
        set. Presence is decided by key membership, so ``None``, ``0`` and
        ``False`` are valid provided values.

        Args:
            spec: Declaration holding the dependency names and the builder.
            working: Map of known values, updated with the result.
            lookup: Callback resolving one dependency name.
            always_build: Call the builder even when a value is present.

        Returns:
            The provided or computed value.

        """
        if not always_build and spec.name in working:
            return working[spec.name]

        builder = spec.builder
        if builder is None:
            raise FixturaMissingOptionError(spec.name)

        args = [lookup(dependency) for dependency in spec.dependencies]
        value = builder(*args)
        working[spec.name] = value
        return value


class OptionEvaluator:
    """Resolve every declared option of a factory.

    Options may depend only on other options. A caller-supplied value always
    wins, so an option builder never runs once its value is known.
    """

    def __init__(
        self,
        specs: Mapping[str, OptionSpec],
        attribute_names: Collection[str],
        resolver: DependencyResolver | None = None,
    ) -> None:
        self._specs = specs
        self._attribute_names = attribute_names
        self._resolver = resolver or DependencyResolver()

    def evaluate(self, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return caller options merged with values for every declared option.

        Undeclared caller options are kept verbatim.

        Raises:
            FixturaMissingOptionError: An option has no default and no value.
            FixturaOptionDependencyError: An option depends on an attribute, or
                on itself without a provided value.
            FixturaDependencyCycleError: Options depend on each other in a cycle.

        """
        options = dict(overrides or {})
        for name in self._specs:
            self._option_value(name, options, ResolutionStack.seeded(name))
        return options

    def _option_value(
        self,
        name: str,
        options: dict[str, Any],
        stack: ResolutionStack,
    ) -> Any:
        if name in options:
            return options[name]

        spec = self._specs[name]

        def lookup(dependency: str) -> Any:
            if dependency in options:
                return options[dependency]
            if dependency == name:
                msg = (
                    f"option `{name}` depends on itself; options cannot be derived from their "
                    f"own value, pass `{name}` explicitly when building"
                )
                raise FixturaOptionDependencyError(msg)
            if dependency not in self._specs:
                if dependency in self._attribute_names:
                    msg = (
                        f"option `{name}` cannot depend on attribute `{dependency}`; "
                        "options may only depend on other options"
                    )
                    raise FixturaOptionDependencyError(msg)
                raise FixturaUnknownDependencyError(name, dependency)

            stack.ensure_acyclic(dependency)
            return self._option_value(dependency, options, stack.push(dependency))

        return self._resolver.resolve(spec, options, lookup)


class AttributeEvaluator:
    """Resolve every declared attribute of a factory.

    Dependencies are looked up in the resolved options first, then as the
    attribute's own provided value (self-dependency), then among sibling
    attributes. Each top-level attribute gets a fresh resolution stack.
    """

    def __init__(
        self,
        specs: Mapping[str, AttributeSpec],
        resolver: DependencyResolver | None = None,
    ) -> None:
        self._specs = specs
        self._resolver = resolver or DependencyResolver()

    def evaluate(
        self,
        overrides: Mapping[str, Any] | None,
        options: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Return caller overrides merged with values for every declared attribute.

        ``overrides`` is copied and never mutated.

        Raises:
            FixturaDependencyCycleError: Attributes depend on each other in a
                cycle that no provided value breaks.
            FixturaUnknownDependencyError: A dependency names nothing resolvable.

        """
        context = BuildContext(attributes=dict(overrides or {}), options=options)
        for name in self._specs:
            self._attribute_value(name, context, ResolutionStack.seeded(name))
        return context.attributes

    def _attribute_value(
        self,
        name: str,
        context: BuildContext,
        stack: ResolutionStack,
    ) -> Any:
        if name in context.computed:
            return context.attributes[name]

        spec = self._specs[name]

        def lookup(dependency: str) -> Any:
            if dependency in context.options:
                return context.options[dependency]
            if dependency == name:
                return context.attributes.get(name)
            stack.ensure_acyclic(dependency)
            if dependency not in self._specs:
                if dependency in context.attributes:
                    return context.attributes[dependency]
                raise FixturaUnknownDependencyError(name, dependency)
            return self._attribute_value(dependency, context, stack.push(dependency))

        value = self._resolver.resolve(
            spec,
            context.attributes,
            lookup,
            always_build=spec.depends_on_itself,
        )
        context.computed.add(name)
        return value


__all__ = [
    "AttributeEvaluator",
    "BuildContext",
    "DependencyLookup",
    "DependencyResolver",
    "OptionEvaluator",
]
