from __future__ import annotations

import importlib
import types
from typing import Any


def _load_base_model() -> type[Any] | None:
    try:
        module = importlib.import_module("pydantic")
    except ImportError:
        return None
    base_model = getattr(module, "BaseModel", None)
    if isinstance(base_model, type) and hasattr(base_model, "model_validate"):
        return base_model
    return None


BASE_MODEL: type[Any] | None = _load_base_model()


def is_pydantic_model(candidate: object) -> bool:
    """Return whether a construct target is a Pydantic v2 model class.

    Factories build such models through ``model_validate`` so field aliases
    and validators run on the resolved attributes. If Pydantic is not
    installed, this function returns ``False`` for every candidate.

    Args:
        candidate: Construct target registered on a factory.

    Returns:
        ``True`` when ``candidate`` is a runtime class subclassing
        ``pydantic.BaseModel``; otherwise ``False``.

    """
    if BASE_MODEL is None:
        return False
    if not isinstance(candidate, type) or isinstance(candidate, types.GenericAlias):
        return False
    try:
        return issubclass(candidate, BASE_MODEL)
    except TypeError:
        return False


__all__ = ["BASE_MODEL", "is_pydantic_model"]
