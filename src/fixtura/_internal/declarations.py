from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeAlias

from fixtura.exceptions import FixturaInvalidDeclarationError

Builder: TypeAlias = Callable[..., Any]
"""A callable receiving resolved dependency values positionally."""

Hook: TypeAlias = Callable[[Any, dict[str, Any]], Any]
"""A lifecycle callback receiving ``(subject, options)``."""


class _Unset:
    """Sentinel type for arguments that were not passed at all."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True, slots=True)
class AttributeSpec:
    """Declaration of one attribute of a factory."""

    name: str
    dependencies: tuple[str, ...]
    """Names passed positionally to ``builder``, in declared order."""
    builder: Builder

    @property
    def depends_on_itself(self) -> bool:
        """Whether the builder must run even when a value was provided."""
        return self.name in self.dependencies


@dataclass(frozen=True, slots=True)
class OptionSpec:
    """Declaration of one option of a factory."""

    name: str
    dependencies: tuple[str, ...]
    builder: Builder | None = None
    """Default builder. ``None`` means the option must be passed at build time."""


def as_builder(value: Any) -> Builder:
    """Normalize a static value or callable into a builder callable.

    Callables are used as-is; any other value (including ``None``) is wrapped
    in a closure returning it, so resolution always invokes one shape.
    """
    if callable(value):
        return value

    def constant(*_args: Any) -> Any:
        return value

    return constant


def split_declaration_args(dependencies: Any, value: Any) -> tuple[Any, Any]:
    """Return ``(dependencies, value)`` for the short and long declaration forms.

    ``attr(name, value)`` and ``attr(name, dependencies, value)`` share one
    signature: when only one extra positional argument was given it is the
    value, not the dependency list.
    """
    if value is UNSET:
        return (), dependencies
    return dependencies, value


class DeclarationValidator:
    """Validates names, dependency lists and callbacks before they are stored."""

    def validate_name(self, name: object, *, kind: str) -> str:
        """Validate an attribute or option name."""
        if not isinstance(name, str) or not name:
            msg = f"{kind.capitalize()} name must be a non-empty string, got {name!r}."
            raise FixturaInvalidDeclarationError(msg)
        return name

    def validate_dependencies(self, dependencies: object, *, owner: str) -> tuple[str, ...]:
        """Validate a dependency list and return it as a tuple."""
        if dependencies is None:
            return ()
        if isinstance(dependencies, str) or not isinstance(dependencies, Iterable):
            msg = (
                f"Dependencies of `{owner}` must be a list of names, got {dependencies!r}. "
                "Pass a single dependency as a one-element list."
            )
            raise FixturaInvalidDeclarationError(msg)

        result = tuple(dependencies)
        for dependency in result:
            if not isinstance(dependency, str) or not dependency:
                msg = f"Dependency names of `{owner}` must be non-empty strings, got {dependency!r}."
                raise FixturaInvalidDeclarationError(msg)
        return result

    def validate_callback(self, callback: object, *, kind: str) -> None:
        """Validate that a hook or builder is callable."""
        if not callable(callback):
            msg = f"{kind.capitalize()} must be callable, got {callback!r}."
            raise FixturaInvalidDeclarationError(msg)


__all__ = [
    "UNSET",
    "AttributeSpec",
    "Builder",
    "DeclarationValidator",
    "Hook",
    "OptionSpec",
    "as_builder",
    "split_declaration_args",
]
