"""
Type Lookup

This module provides the pluggable "type by name" mechanism used by the
Instantiator to turn a Definition's ``type_ref`` into a class:

- TypeLookup: abstract interface
- TypeRegistry: explicit in-memory mapping (handy in tests)
- ImportTypeLookup: resolves dotted paths like ``"myapp.dao.DaoImpl"``
- ChainedTypeLookup: tries several lookups in order

Example::

    types = TypeRegistry()
    types.register("DaoImpl", DaoImpl)
    types.register(MetierImpl)  # registered under its class name

    container = Container(type_lookup=types)
"""

import importlib
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from .exceptions import UnknownTypeError


class TypeLookup(ABC):
    """Abstract lookup from type reference strings to classes."""

    @abstractmethod
    def resolve(self, type_ref: str) -> type:
        """Return the type named by ``type_ref``.

        Raises:
            UnknownTypeError: When no type is known under that reference
        """
        pass

    def __contains__(self, type_ref: str) -> bool:
        try:
            self.resolve(type_ref)
        except UnknownTypeError:
            return False
        return True


class TypeRegistry(TypeLookup):
    """Explicit mapping from names to classes.

    Nothing global is touched, so every test can build its own.
    """

    def __init__(self, types: Optional[Dict[str, type]] = None):
        self._types: Dict[str, type] = {}
        for name, cls in (types or {}).items():
            self.register(name, cls)

    def register(self, name_or_type, cls: Optional[type] = None) -> None:
        """Register a class.

        Both ``register("DaoImpl", DaoImpl)`` and ``register(DaoImpl)``
        are accepted; the latter uses the class ``__name__``.
        """
        if cls is None:
            cls, name = name_or_type, getattr(name_or_type, '__name__', None)
        else:
            name = name_or_type
        if not isinstance(name, str) or not name:
            raise ValueError(f"Type name must be a non-empty string, got {name!r}")
        if not isinstance(cls, type):
            raise TypeError(f"Only classes can be registered, got {cls!r}")
        self._types[name] = cls

    def resolve(self, type_ref: str) -> type:
        try:
            return self._types[type_ref]
        except KeyError:
            known = ", ".join(sorted(self._types)) or "None"
            raise UnknownTypeError(type_ref, f"not registered (known types: {known})") from None


class ImportTypeLookup(TypeLookup):
    """Resolve ``"package.module.ClassName"`` by importing the module.

    Nested classes are reachable as ``"package.module.Outer.Inner"``.
    """

    def resolve(self, type_ref: str) -> type:
        if '.' not in type_ref:
            raise UnknownTypeError(type_ref, "expected a dotted 'module.ClassName' path")

        # Walk back until an importable module prefix is found
        parts = type_ref.split('.')
        for split in range(len(parts) - 1, 0, -1):
            module_name = '.'.join(parts[:split])
            try:
                target = importlib.import_module(module_name)
            except ModuleNotFoundError as e:
                if e.name == module_name or module_name.startswith(f"{e.name}."):
                    continue
                # The module exists but one of its own imports is missing
                raise UnknownTypeError(type_ref, f"import failed: {e}") from e
            except ImportError as e:
                raise UnknownTypeError(type_ref, f"import failed: {e}") from e

            try:
                for attr in parts[split:]:
                    target = getattr(target, attr)
            except AttributeError:
                raise UnknownTypeError(
                    type_ref, f"module '{module_name}' has no attribute '{'.'.join(parts[split:])}'"
                ) from None
            return target

        raise UnknownTypeError(type_ref, "no importable module")


class ChainedTypeLookup(TypeLookup):
    """Try each lookup in turn; the first that knows the reference wins."""

    def __init__(self, lookups: Iterable[TypeLookup]):
        self._lookups = list(lookups)

    def resolve(self, type_ref: str) -> type:
        reasons = []
        for lookup in self._lookups:
            try:
                return lookup.resolve(type_ref)
            except UnknownTypeError as e:
                reasons.append(e.reason)
        raise UnknownTypeError(type_ref, "; ".join(reasons) or "no lookups configured")
