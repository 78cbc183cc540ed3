from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from fixtura._internal.construction import Construct, construct_object
from fixtura._internal.declarations import (
    UNSET,
    AttributeSpec,
    DeclarationValidator,
    Hook,
    OptionSpec,
    as_builder,
    split_declaration_args,
)
from fixtura._internal.hooks import HookPipeline, MaybeAwaitable, collect_calls, then
from fixtura._internal.resolver import AttributeEvaluator, DependencyResolver, OptionEvaluator
from fixtura._internal.sequences import SequenceCounters, sequence_builder
from fixtura.exceptions import FixturaInvalidDeclarationError
from fixtura.lock_mode import LockMode

if TYPE_CHECKING:
    from typing_extensions import Self

    from fixtura._internal.registry import FactoryRegistry


class Factory:
    """Declare how to build one kind of test object.

    A factory holds attribute and option declarations, sequence counters and
    lifecycle hooks. Declaration methods return the factory itself so calls
    can be chained:

    .. code-block:: python

        users = Factory(User)
        users.sequence("id").attr("name", "Ada").attr(
            "email",
            ["name"],
            lambda name: f"{name.lower()}@example.com",
        )

        user = users.build({"name": "Grace"})

    ``build`` and ``create`` return the finished object directly when every
    hook is synchronous and an awaitable as soon as one hook returns one.
    """

    def __init__(
        self,
        construct: Construct | None = None,
        *,
        registry: FactoryRegistry | None = None,
        lock_mode: LockMode = LockMode.THREAD,
    ) -> None:
        """Initialize an empty factory.

        Args:
            construct: Class or callable receiving the resolved attribute
                mapping as its only argument. ``None`` makes ``build`` return
                a ``dict``.
            registry: Registry used to look up factories extended by name.
                Unbound factories are still tracked by ``fixtura.factories``
                so its ``reset_all`` restarts their sequences.
            lock_mode: Locking strategy for sequence counter increments.

        """
        self.construct = construct
        self._registry = registry
        self._validator = DeclarationValidator()
        self._resolver = DependencyResolver()
        self._sequences = SequenceCounters(lock_mode)

        self._attribute_specs: dict[str, AttributeSpec] = {}
        self._option_specs: dict[str, OptionSpec] = {}

        self._before_build_hooks: list[Hook] = []
        self._after_build_hooks: list[Hook] = []
        self._before_create_hooks: list[Hook] = []
        self._create_handler: Hook | None = None
        self._after_create_hooks: list[Hook] = []

        if registry is None:
            from fixtura._internal.registry import factories

            registry = factories
        registry.track(self)

    def __repr__(self) -> str:
        construct = getattr(self.construct, "__qualname__", self.construct)
        return (
            f"{type(self).__name__}(construct={construct!r}, "
            f"attributes={list(self._attribute_specs)!r}, options={list(self._option_specs)!r})"
        )

    # region Introspection
    @property
    def registry(self) -> FactoryRegistry | None:
        """Registry this factory is bound to, if any."""
        return self._registry

    @property
    def attribute_specs(self) -> Mapping[str, AttributeSpec]:
        """Read-only view of the declared attributes."""
        return MappingProxyType(self._attribute_specs)

    @property
    def option_specs(self) -> Mapping[str, OptionSpec]:
        """Read-only view of the declared options."""
        return MappingProxyType(self._option_specs)

    @property
    def sequences(self) -> SequenceCounters:
        """Sequence counters declared by this factory."""
        return self._sequences

    @property
    def before_build_hooks(self) -> tuple[Hook, ...]:
        return tuple(self._before_build_hooks)

    @property
    def after_build_hooks(self) -> tuple[Hook, ...]:
        return tuple(self._after_build_hooks)

    @property
    def before_create_hooks(self) -> tuple[Hook, ...]:
        return tuple(self._before_create_hooks)

    @property
    def create_handler(self) -> Hook | None:
        return self._create_handler

    @property
    def after_create_hooks(self) -> tuple[Hook, ...]:
        return tuple(self._after_create_hooks)

    # endregion Introspection

    # region Declarations
    def attr(self, name: str, dependencies: Any = UNSET, value: Any = UNSET) -> Self:
        """Declare an attribute with an optional default.

        The default may be a static value or a builder callable. With three
        arguments the second one lists the names whose resolved values are
        passed positionally to the builder:

        .. code-block:: python

            factory.attr("age", 18)
            factory.attr("age", lambda: random.randint(1, 99))
            factory.attr("age", ["name"], lambda name: 30 if name == "Brian" else 18)

        A provided value normally skips the builder. Listing the attribute
        among its own dependencies makes the builder run anyway and receive the
        provided value (or ``None``), which is handy for filling in partially
        specified children:

        .. code-block:: python

            factory.attr("spouse", ["spouse"], lambda spouse: people.build(spouse or {}))

        Args:
            name: Attribute name.
            dependencies: Dependency names, or the default when ``value`` is
                omitted.
            value: Static default or builder callable.

        Returns:
            This factory.

        """
        name = self._validator.validate_name(name, kind="attribute")
        dependencies, value = split_declaration_args(dependencies, value)
        if value is UNSET:
            value = None

        self._attribute_specs[name] = AttributeSpec(
            name=name,
            dependencies=self._validator.validate_dependencies(dependencies, owner=name),
            builder=as_builder(value),
        )
        return self

    def attrs(self, attributes: Mapping[str, Any]) -> Self:
        """Declare several attributes without dependencies at once.

        Args:
            attributes: Mapping of attribute name to static default or builder.

        Returns:
            This factory.

        """
        for name, value in attributes.items():
            self.attr(name, value)
        return self

    def option(self, name: str, dependencies: Any = UNSET, value: Any = UNSET) -> Self:
        """Declare an option.

        Options inform builders and hooks but never appear in the built
        object. They take defaults like attributes do, and may depend on other
        options only. An option declared without a default must be passed to
        every ``build``/``create`` call:

        .. code-block:: python

            factory.option("include_spouse", False).attr(
                "spouse",
                ["spouse", "include_spouse"],
                lambda spouse, include: people.build(spouse) if include else None,
            )

            factory.build(options={"include_spouse": True})

        Args:
            name: Option name.
            dependencies: Dependency names, or the default when ``value`` is
                omitted. Omit both for an option without a default.
            value: Static default or builder callable.

        Returns:
            This factory.

        """
        name = self._validator.validate_name(name, kind="option")
        if dependencies is UNSET:
            self._option_specs[name] = OptionSpec(name=name, dependencies=())
            return self

        dependencies, value = split_declaration_args(dependencies, value)
        self._option_specs[name] = OptionSpec(
            name=name,
            dependencies=self._validator.validate_dependencies(dependencies, owner=name),
            builder=as_builder(value),
        )
        return self

    def sequence(self, name: str, dependencies: Any = UNSET, function: Any = UNSET) -> Self:
        """Declare an attribute driven by an auto-incrementing counter.

        The counter starts at 1. ``function`` receives the counter value
        followed by the resolved dependencies and defaults to returning the
        number itself:

        .. code-block:: python

            factory.sequence("id")
            factory.sequence("email", lambda n: f"user{n}@example.com")
            factory.sequence("slot", ["start"], lambda n, start: start + n)

        Factories extending this one reuse its counter, so their values never
        collide with this factory's.

        Args:
            name: Attribute name.
            dependencies: Dependency names, or ``function`` when it is omitted.
            function: Callable computing the value from the counter.

        Returns:
            This factory.

        """
        dependencies, function = split_declaration_args(dependencies, function)
        if function is UNSET:
            function = None
        if function is not None:
            self._validator.validate_callback(function, kind="sequence function")
        return self.attr(name, dependencies, sequence_builder(self._sequences, name, function))

    def before_build(self, hook: Hook) -> Self:
        """Register a hook receiving ``(attributes, options)`` before resolution."""
        self._validator.validate_callback(hook, kind="before_build hook")
        self._before_build_hooks.append(hook)
        return self

    def after_build(self, hook: Hook) -> Self:
        """Register a hook receiving ``(built_object, options)`` after construction."""
        self._validator.validate_callback(hook, kind="after_build hook")
        self._after_build_hooks.append(hook)
        return self

    def after(self, hook: Hook) -> Self:
        """Alias of ``after_build``."""
        return self.after_build(hook)

    def before_create(self, hook: Hook) -> Self:
        """Register a hook running on the built object before the create handler."""
        self._validator.validate_callback(hook, kind="before_create hook")
        self._before_create_hooks.append(hook)
        return self

    def on_create(self, handler: Hook) -> Self:
        """Set the create handler, replacing any previous one.

        The handler performs the external side effect of ``create`` (for
        example saving a model) and may be a coroutine function.
        """
        self._validator.validate_callback(handler, kind="create handler")
        self._create_handler = handler
        return self

    def after_create(self, hook: Hook) -> Self:
        """Register a hook running on the object after the create handler."""
        self._validator.validate_callback(hook, kind="after_create hook")
        self._after_create_hooks.append(hook)
        return self

    def extend(self, parent: str | Factory) -> Self:
        """Copy declarations and hooks from ``parent`` into this factory.

        Attribute and option declarations of the parent are merged over the
        current ones, hook lists are replaced by copies of the parent's lists,
        and the construct target and create handler are inherited only when
        this factory has none. Later changes to the parent do not leak in.

        Args:
            parent: Parent factory, or its name in this factory's registry.

        Returns:
            This factory.

        Raises:
            FixturaInvalidDeclarationError: ``parent`` is a name and this
                factory is not bound to a registry.
            FixturaFactoryNotDefinedError: ``parent`` names an unknown factory.

        """
        if isinstance(parent, str):
            if self._registry is None:
                msg = (
                    f"Cannot extend {parent!r} by name: this factory is not bound to a registry. "
                    "Pass the parent factory itself or create this one with registry=..."
                )
                raise FixturaInvalidDeclarationError(msg)
            parent = self._registry.get(parent)

        if self.construct is None:
            self.construct = parent.construct

        self._attribute_specs.update(parent._attribute_specs)
        self._option_specs.update(parent._option_specs)

        self._before_build_hooks = list(parent._before_build_hooks)
        self._after_build_hooks = list(parent._after_build_hooks)
        self._before_create_hooks = list(parent._before_create_hooks)
        if self._create_handler is None:
            self._create_handler = parent._create_handler
        self._after_create_hooks = list(parent._after_create_hooks)
        return self

    # endregion Declarations

    # region Building
    def options(self, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return the caller options completed with every declared option.

        Raises:
            FixturaMissingOptionError: An option has no default and no value.
            FixturaOptionDependencyError: An option depends on an attribute or
                on itself.

        """
        evaluator = OptionEvaluator(self._option_specs, self._attribute_specs, self._resolver)
        return evaluator.evaluate(options)

    def attributes(
        self,
        attributes: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return the resolved attribute mapping without hooks or construction.

        This equals ``build`` for a factory without a construct target and
        without hooks. Provided attributes that are not declared are kept.

        Args:
            attributes: Attribute values overriding declared defaults.
            options: Option values overriding declared defaults.

        Returns:
            A new ``dict``; ``attributes`` itself is never mutated.

        Raises:
            FixturaDependencyCycleError: Attributes depend on each other in a
                cycle that no provided value breaks.

        """
        return self._resolve_attributes(attributes, self.options(options))

    def _resolve_attributes(
        self,
        attributes: Mapping[str, Any] | None,
        options: Mapping[str, Any],
    ) -> dict[str, Any]:
        return AttributeEvaluator(self._attribute_specs, self._resolver).evaluate(
            attributes,
            options,
        )

    def build(
        self,
        attributes: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> MaybeAwaitable:
        """Build one object.

        Runs ``before_build`` hooks over a copy of ``attributes``, resolves the
        attributes, wraps them with the construct target and runs
        ``after_build`` hooks. Options are resolved once and shared by every
        step.

        Args:
            attributes: Attribute values overriding declared defaults.
            options: Option values overriding declared defaults.

        Returns:
            The built object, or an awaitable of it when a hook is async.

        """
        resolved_options = self.options(options)
        return self._build_with_options(dict(attributes or {}), resolved_options)

    def _build_with_options(
        self,
        attributes: dict[str, Any],
        options: dict[str, Any],
    ) -> MaybeAwaitable:
        before = HookPipeline(self._before_build_hooks, stage="before_build")
        after = HookPipeline(self._after_build_hooks, stage="after_build")
        construct = self.construct

        def finish(prepared: dict[str, Any]) -> MaybeAwaitable:
            built = construct_object(construct, self._resolve_attributes(prepared, options))
            return after.run(built, options)

        return then(before.run(attributes, options), finish)

    def build_list(
        self,
        size: int,
        attributes: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> MaybeAwaitable:
        """Build ``size`` independent objects.

        Options are resolved per item, so option builders run once per object.

        Returns:
            A ``list``, or an awaitable gathering every item in order when at
            least one build is async.

        """
        size = _validate_size(size)
        return collect_calls(lambda: self.build(attributes, options), size)

    def create(
        self,
        attributes: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> MaybeAwaitable:
        """Build one object and pass it through the create lifecycle.

        After ``build``, the object goes through ``before_create`` hooks, the
        create handler and ``after_create`` hooks; each may replace it.

        Returns:
            The created object, or an awaitable of it when any step is async.

        """
        resolved_options = self.options(options)
        built = self._build_with_options(dict(attributes or {}), resolved_options)
        return then(built, lambda obj: self._run_create(obj, resolved_options))

    def _run_create(self, obj: Any, options: dict[str, Any]) -> MaybeAwaitable:
        before = HookPipeline(self._before_create_hooks, stage="before_create")
        handler = HookPipeline(
            [self._create_handler] if self._create_handler is not None else [],
            stage="create",
        )
        after = HookPipeline(self._after_create_hooks, stage="after_create")

        return then(
            before.run(obj, options),
            lambda prepared: then(
                handler.run(prepared, options),
                lambda created: after.run(created, options),
            ),
        )

    def create_list(
        self,
        size: int,
        attributes: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> MaybeAwaitable:
        """Create ``size`` independent objects.

        When one item fails synchronously after earlier items went async, the
        earlier items still complete before the error is raised from the
        returned awaitable.

        Returns:
            A ``list``, or an awaitable gathering every item in order when at
            least one create is async.

        """
        size = _validate_size(size)
        return collect_calls(lambda: self.create(attributes, options), size)

    def reset(self) -> None:
        """Restart this factory's sequence counters.

        Declarations and hooks are kept.
        """
        self._sequences.reset()

    # endregion Building


def _validate_size(size: int) -> int:
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        msg = f"List size must be a non-negative integer, got {size!r}."
        raise FixturaInvalidDeclarationError(msg)
    return size


__all__ = ["Factory"]
