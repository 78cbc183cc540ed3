from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeAlias

from fixtura._internal.declarations import Hook

logger = logging.getLogger(__name__)

MaybeAwaitable: TypeAlias = Any
"""A plain value, or an awaitable producing it."""


def replace_subject(subject: Any, outcome: Any) -> Any:
    """Return ``outcome`` when a hook produced one, otherwise ``subject``.

    Only ``None`` means "no replacement"; ``0``, ``False`` and ``""`` replace.
    """
    return subject if outcome is None else outcome


def then(value: MaybeAwaitable, callback: Callable[[Any], MaybeAwaitable]) -> MaybeAwaitable:
    """Apply ``callback`` to ``value`` without suspending unless ``value`` is awaitable.

    A synchronous value gives the callback's result directly; an awaitable gives
    a coroutine that awaits ``value``, then the callback, then whatever the
    callback returns if it is awaitable too.
    """
    if inspect.isawaitable(value):
        return _then_async(value, callback)
    return callback(value)


async def _then_async(
    pending: Awaitable[Any],
    callback: Callable[[Any], MaybeAwaitable],
) -> Any:
    result = callback(await pending)
    if inspect.isawaitable(result):
        result = await result
    return result


def collect(items: list[MaybeAwaitable]) -> MaybeAwaitable:
    """Return ``items`` as a list, or one awaitable when any item is awaitable.

    Awaitable items run concurrently through ``asyncio.gather``; the result
    keeps the index order of ``items``.
    """
    if not any(inspect.isawaitable(item) for item in items):
        return list(items)
    return _gather(items)


def collect_calls(call: Callable[[], MaybeAwaitable], count: int) -> MaybeAwaitable:
    """Call ``call`` ``count`` times and ``collect`` the results.

    If a call raises after earlier calls returned awaitables, those awaitables
    still run to completion: the result is then an awaitable that settles them
    and re-raises the error. Without pending awaitables the error propagates
    immediately.
    """
    issued: list[MaybeAwaitable] = []
    try:
        for _ in range(count):
            issued.append(call())
    except Exception as error:
        pending = [item for item in issued if inspect.isawaitable(item)]
        if not pending:
            raise
        logger.debug(
            "Batch item %d failed; settling %d pending items before re-raising",
            len(issued) + 1,
            len(pending),
        )
        return _settle_then_raise(pending, error)
    return collect(issued)


async def _settle_then_raise(pending: list[Awaitable[Any]], error: Exception) -> Any:
    await asyncio.gather(*pending, return_exceptions=True)
    raise error


async def _ready(value: Any) -> Any:
    return value


async def _gather(items: list[MaybeAwaitable]) -> list[Any]:
    results = await asyncio.gather(
        *(item if inspect.isawaitable(item) else _ready(item) for item in items),
    )
    return list(results)


class HookPipeline:
    """Run lifecycle callbacks in registration order over one subject.

    Each hook receives ``(subject, options)``. A non-``None`` return value
    replaces the subject for the following hooks and for the final result.
    The pipeline stays synchronous until a hook returns an awaitable; from
    that point on the remaining hooks run inside the returned coroutine.
    """

    __slots__ = ("_hooks", "_stage")

    def __init__(self, hooks: Sequence[Hook], *, stage: str = "hooks") -> None:
        self._hooks = tuple(hooks)
        self._stage = stage

    def __len__(self) -> int:
        return len(self._hooks)

    def run(self, subject: Any, options: dict[str, Any]) -> MaybeAwaitable:
        """Run every hook and return the final subject, or an awaitable of it."""
        for index, hook in enumerate(self._hooks):
            outcome = hook(subject, options)
            if inspect.isawaitable(outcome):
                logger.debug(
                    "Hook pipeline %s suspended at hook %d of %d",
                    self._stage,
                    index + 1,
                    len(self._hooks),
                )
                return self._resume(outcome, index + 1, subject, options)
            subject = replace_subject(subject, outcome)
        return subject

    async def _resume(
        self,
        pending: Awaitable[Any],
        start: int,
        subject: Any,
        options: dict[str, Any],
    ) -> Any:
        subject = replace_subject(subject, await pending)
        for hook in self._hooks[start:]:
            outcome = hook(subject, options)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            subject = replace_subject(subject, outcome)
        return subject


__all__ = ["HookPipeline", "MaybeAwaitable", "collect", "collect_calls", "replace_subject", "then"]
