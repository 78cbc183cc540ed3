from fixtura._internal.declarations import AttributeSpec, OptionSpec
from fixtura._internal.factory import Factory
from fixtura._internal.registry import FactoryRegistry, factories
from fixtura._internal.sequences import SequenceCounters
from fixtura.exceptions import (
    FixturaDependencyCycleError,
    FixturaError,
    FixturaFactoryNotDefinedError,
    FixturaInvalidDeclarationError,
    FixturaMissingOptionError,
    FixturaOptionDependencyError,
    FixturaUnknownDependencyError,
)
from fixtura.lock_mode import LockMode

__all__ = [
    "AttributeSpec",
    "Factory",
    "FactoryRegistry",
    "FixturaDependencyCycleError",
    "FixturaError",
    "FixturaFactoryNotDefinedError",
    "FixturaInvalidDeclarationError",
    "FixturaMissingOptionError",
    "FixturaOptionDependencyError",
    "FixturaUnknownDependencyError",
    "LockMode",
    "OptionSpec",
    "SequenceCounters",
    "factories",
]
