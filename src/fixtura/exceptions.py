from __future__ import annotations

from collections.abc import Sequence


class FixturaError(Exception):
    """Represent a base class for all fixtura-specific failures.

    Catch this type when you want to handle any fixtura error path without
    matching each concrete exception class individually.
    """


class FixturaInvalidDeclarationError(FixturaError):
    """Signal an invalid factory declaration.

    Raised by declaration APIs such as ``Factory.attr``, ``Factory.option``,
    ``Factory.sequence`` and the hook registration methods when names,
    dependency lists or callbacks have the wrong shape.
    """


class FixturaFactoryNotDefinedError(FixturaError):
    """Signal a lookup of a factory name that was never defined.

    Raised by ``FactoryRegistry.get`` and every name-based registry shortcut
    (``build``, ``create``, ``attributes``...). Typical fix is calling
    ``registry.define(name)`` before using the name, or checking that
    ``implode()`` was not called in between.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'The "{name}" factory is not defined.')


class FixturaDependencyCycleError(FixturaError):
    """Signal a cycle in the attribute or option dependency graph.

    Self-dependencies are not cycles. The ``path`` attribute holds the names
    from the requested value back to the repeated one, for example
    ``("fees", "total", "fees")``.

    Typical fix is overriding one of the values in the cycle at build time or
    removing one of the declared dependencies.
    """

    def __init__(self, path: Sequence[str]) -> None:
        self.path = tuple(path)
        super().__init__("detected a dependency cycle: " + " -> ".join(self.path))


class FixturaMissingOptionError(FixturaError):
    """Signal an option with neither a default builder nor a caller value."""

    def __init__(self, option: str) -> None:
        self.option = option
        super().__init__(f"option `{option}` has no default value and none was provided")


class FixturaOptionDependencyError(FixturaError):
    """Signal an option dependency that options cannot have.

    Options may only depend on other options. Raised when an option depends on
    a declared attribute, or depends on itself while no value for it was
    passed at build time.
    """


class FixturaUnknownDependencyError(FixturaError):
    """Signal a dependency name that is neither an attribute nor an option.

    Typical fixes include declaring the missing attribute/option or fixing a
    typo in the dependency list.
    """

    def __init__(self, owner: str, dependency: str) -> None:
        self.owner = owner
        self.dependency = dependency
        super().__init__(
            f"`{owner}` depends on `{dependency}`, which is neither a declared "
            "attribute nor an option and was not provided",
        )
