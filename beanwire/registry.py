"""
Registry

This module provides the Registry, the mapping from bean id to Definition.

Definition sources (a static list, a parsed configuration file, annotation
metadata...) feed the Registry; the Container resolves it. Registration
order is kept: it is used as the tie-break between independent subgraphs
and in diagnostics.

Example::

    registry = Registry()
    registry.register(Definition("dao", "DaoImpl"))
    registry.register(Definition("metier", "MetierImpl",
                                 [reference("dao", index=0)]))
"""

import logging
import threading
from typing import Dict, Iterable, Iterator

from .definition import Definition
from .exceptions import DuplicateDefinitionError, UnknownDefinitionError

logger = logging.getLogger(__name__)


class DefinitionsView:
    """Lazy, restartable view over the Definitions of a Registry.

    Each iteration walks a snapshot of the Registry taken when the
    iteration starts, in registration order.
    """

    def __init__(self, registry: 'Registry'):
        self._registry = registry

    def __iter__(self) -> Iterator[Definition]:
        return iter(self._registry._snapshot())

    def __len__(self) -> int:
        return len(self._registry)


class Registry:
    """Mapping from bean id to Definition.

    Thread-safe: registration and lookup may happen from several threads.

    Attributes:
        version: Incremented on every change; lets holders of a resolved
            graph tell whether the Registry moved on since.
    """

    def __init__(self, definitions: Iterable[Definition] = ()):
        """Create a registry, optionally pre-filled.

        Args:
            definitions: Definitions to register, in order

        Raises:
            DuplicateDefinitionError: When two definitions share an id
        """
        self._definitions: Dict[str, Definition] = {}
        self._lock = threading.RLock()
        self.version = 0
        self.register_all(definitions)

    def register(self, definition: Definition) -> None:
        """Register a definition.

        Raises:
            DuplicateDefinitionError: When the id is already registered
        """
        with self._lock:
            if definition.id in self._definitions:
                raise DuplicateDefinitionError(definition.id)
            self._definitions[definition.id] = definition
            self.version += 1
        logger.debug("Registered bean '%s' (%s)", definition.id, definition.type_name)

    def register_all(self, definitions: Iterable[Definition]) -> None:
        """Register several definitions atomically.

        Either all of them are registered or, when one id clashes,
        none are.
        """
        definitions = list(definitions)
        with self._lock:
            seen = set()
            for definition in definitions:
                if definition.id in self._definitions or definition.id in seen:
                    raise DuplicateDefinitionError(definition.id)
                seen.add(definition.id)
            for definition in definitions:
                self.register(definition)

    def unregister(self, bean_id: str) -> Definition:
        """Remove and return a definition.

        Raises:
            UnknownDefinitionError: When the id is not registered
        """
        with self._lock:
            definition = self.get(bean_id)
            del self._definitions[bean_id]
            self.version += 1
        logger.debug("Unregistered bean '%s'", bean_id)
        return definition

    def get(self, bean_id: str) -> Definition:
        """Look up a definition.

        Raises:
            UnknownDefinitionError: When the id is not registered
        """
        try:
            return self._definitions[bean_id]
        except KeyError:
            raise UnknownDefinitionError(bean_id, self.ids()) from None

    def all(self) -> DefinitionsView:
        """All definitions in registration order (lazy and restartable)."""
        return DefinitionsView(self)

    def ids(self) -> list:
        with self._lock:
            return list(self._definitions)

    def _snapshot(self) -> list:
        with self._lock:
            return list(self._definitions.values())

    def __contains__(self, bean_id: object) -> bool:
        return bean_id in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)
