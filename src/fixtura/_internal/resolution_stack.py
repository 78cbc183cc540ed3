from __future__ import annotations

from collections.abc import Iterator

from fixtura.exceptions import FixturaDependencyCycleError


class ResolutionStack:
    """Track the chain of names being resolved for one top-level value.

    Pushing returns a new stack, so sibling branches of the dependency graph
    never see each other's entries.
    """

    __slots__ = ("_names",)

    def __init__(self, names: tuple[str, ...] = ()) -> None:
        self._names = names

    @classmethod
    def seeded(cls, name: str) -> ResolutionStack:
        """Create a stack for resolving ``name`` at the top level."""
        return cls((name,))

    def push(self, name: str) -> ResolutionStack:
        """Return a stack with ``name`` appended."""
        return ResolutionStack((*self._names, name))

    def ensure_acyclic(self, name: str) -> None:
        """Raise when ``name`` is already being resolved further up the chain.

        Raises:
            FixturaDependencyCycleError: With the full path ending in ``name``.

        """
        if name in self._names:
            raise FixturaDependencyCycleError((*self._names, name))

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"ResolutionStack({' -> '.join(self._names)})"


__all__ = ["ResolutionStack"]
