# Public API
from .container import Container, ContainerState
from .definition import Definition, Dependency, literal, reference
from .exceptions import (
    BeanCreationError,
    BeanWireError,
    CircularDependencyError,
    ConstructorArityMismatchError,
    ContainerClosedError,
    DuplicateDefinitionError,
    InvalidDefinitionError,
    NoDefaultConstructorError,
    NotInitializedError,
    NoUniqueBeanError,
    UnknownDefinitionError,
    UnknownInjectionPointError,
    UnknownTypeError,
    UnresolvedDependencyError,
)
from .injection import InjectionPoint, InjectionPointKind, InjectionStrategy
from .instantiator import Instantiator
from .registry import Registry
from .resolver import ResolvedGraph, Resolver
from .scope import BeanScope
from .type_lookup import ChainedTypeLookup, ImportTypeLookup, TypeLookup, TypeRegistry

__all__ = [
    "Container",
    "ContainerState",
    "Registry",
    "Resolver",
    "ResolvedGraph",
    "Instantiator",
    # Definition model
    "Definition",
    "Dependency",
    "reference",
    "literal",
    "BeanScope",
    "InjectionStrategy",
    "InjectionPoint",
    "InjectionPointKind",
    # Type lookup
    "TypeLookup",
    "TypeRegistry",
    "ImportTypeLookup",
    "ChainedTypeLookup",
    # Exceptions
    "BeanWireError",
    "InvalidDefinitionError",
    "DuplicateDefinitionError",
    "UnknownDefinitionError",
    "UnresolvedDependencyError",
    "CircularDependencyError",
    "UnknownTypeError",
    "ConstructorArityMismatchError",
    "NoDefaultConstructorError",
    "UnknownInjectionPointError",
    "BeanCreationError",
    "NoUniqueBeanError",
    "NotInitializedError",
    "ContainerClosedError",
]

# Version will be dynamically set by poetry-dynamic-versioning
try:
    from ._version import __version__
except ImportError:
    # Fallback for development
    __version__ = '0.0.0'
