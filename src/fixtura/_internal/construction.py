from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeAlias

from fixtura._internal.integrations.pydantic import is_pydantic_model

Construct: TypeAlias = Callable[[dict[str, Any]], Any]
"""A class or callable turning the resolved attribute mapping into the built object."""


def construct_object(construct: Construct | None, attributes: dict[str, Any]) -> Any:
    """Wrap resolved attributes into the factory's target object.

    Without a construct target the attribute mapping itself is the result.
    Pydantic models receive the mapping through ``model_validate``; any other
    target is called with the mapping as its single positional argument, so
    attribute names need not be valid Python identifiers. Wrap keyword-only
    targets such as dataclasses in a lambda:

    .. code-block:: python

        Factory(lambda attributes: Point(**attributes))
    """
    if construct is None:
        return attributes
    if is_pydantic_model(construct):
        return construct.model_validate(attributes)  # type: ignore[attr-defined]
    return construct(attributes)


__all__ = ["Construct", "construct_object"]
