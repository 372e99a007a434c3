"""
Resolver

This module turns a Registry into a ResolvedGraph: the Definitions in an
order where every bean comes after all the beans it references.

Resolution fails fast, before any object is built:

1. Dangling references raise UnresolvedDependencyError
2. Reference cycles raise CircularDependencyError with the full cycle path

The traversal is a depth-first search with three node states. Roots are
visited in registration order, so independent subgraphs keep their relative
registration order and the output is reproducible.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Tuple

from .definition import Definition
from .exceptions import (
    CircularDependencyError,
    UnknownDefinitionError,
    UnresolvedDependencyError,
)
from .registry import Registry
from .scope import BeanScope

logger = logging.getLogger(__name__)


class _VisitState(Enum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


@dataclass(frozen=True)
class ResolvedGraph:
    """Definitions in dependency order (dependencies before dependents).

    Immutable once built.

    Attributes:
        order: Bean ids in instantiation order
        definitions: Read-only mapping from id to Definition
        registry_version: Registry.version the graph was computed from
    """
    order: Tuple[str, ...]
    definitions: Mapping[str, Definition]
    registry_version: int = 0
    _positions: Mapping[str, int] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(
            self, '_positions',
            MappingProxyType({bean_id: i for i, bean_id in enumerate(self.order)}),
        )

    def __iter__(self) -> Iterator[Definition]:
        return (self.definitions[bean_id] for bean_id in self.order)

    def __len__(self) -> int:
        return len(self.order)

    def __contains__(self, bean_id: object) -> bool:
        return bean_id in self.definitions

    def get(self, bean_id: str) -> Definition:
        try:
            return self.definitions[bean_id]
        except KeyError:
            raise UnknownDefinitionError(bean_id, self.order) from None

    def position(self, bean_id: str) -> int:
        """Index of ``bean_id`` in the instantiation order."""
        try:
            return self._positions[bean_id]
        except KeyError:
            raise UnknownDefinitionError(bean_id, self.order) from None

    def dependencies_of(self, bean_id: str) -> Tuple[str, ...]:
        """Referenced ids of a bean, sorted by instantiation order."""
        return tuple(sorted(self.get(bean_id).references, key=self.position))


class Resolver:
    """Computes a ResolvedGraph from a Registry, or fails fast."""

    def resolve(self, registry: Registry) -> ResolvedGraph:
        """Validate the Registry and compute the instantiation order.

        Args:
            registry: The registry to resolve

        Returns:
            The ResolvedGraph

        Raises:
            UnresolvedDependencyError: When a reference points at an
                unregistered id (first one found, in registration order)
            CircularDependencyError: When the references form a cycle
        """
        version = registry.version
        definitions: Dict[str, Definition] = {d.id: d for d in registry.all()}

        self._check_references(definitions)
        order = self._topological_order(definitions)
        self._warn_captive_dependencies(definitions)

        logger.debug("Resolved %d bean(s): %s", len(order), ", ".join(order))
        return ResolvedGraph(
            order=tuple(order),
            definitions=MappingProxyType(definitions),
            registry_version=version,
        )

    @staticmethod
    def _check_references(definitions: Mapping[str, Definition]) -> None:
        for definition in definitions.values():
            for ref in definition.references:
                if ref not in definitions:
                    raise UnresolvedDependencyError(definition.id, ref)

    @staticmethod
    def _topological_order(definitions: Mapping[str, Definition]) -> List[str]:
        """Iterative DFS emitting ids in post-order.

        Roots and the references of each node are both visited in
        registration order.
        """
        state = {bean_id: _VisitState.UNVISITED for bean_id in definitions}
        positions = {bean_id: i for i, bean_id in enumerate(definitions)}
        order: List[str] = []

        def references_of(bean_id: str) -> Iterator[str]:
            return iter(sorted(definitions[bean_id].references, key=positions.__getitem__))

        for root in definitions:
            if state[root] is not _VisitState.UNVISITED:
                continue

            state[root] = _VisitState.IN_PROGRESS
            path = [root]
            pending = [references_of(root)]

            while pending:
                for ref in pending[-1]:
                    ref_state = state[ref]
                    if ref_state is _VisitState.IN_PROGRESS:
                        cycle = path[path.index(ref):] + [ref]
                        raise CircularDependencyError(cycle)
                    if ref_state is _VisitState.UNVISITED:
                        state[ref] = _VisitState.IN_PROGRESS
                        path.append(ref)
                        pending.append(references_of(ref))
                        break
                else:
                    # All references of the node on top of the path are done
                    pending.pop()
                    done = path.pop()
                    state[done] = _VisitState.DONE
                    order.append(done)

        return order

    @staticmethod
    def _warn_captive_dependencies(definitions: Mapping[str, Definition]) -> None:
        for definition in definitions.values():
            if definition.scope is not BeanScope.SINGLETON:
                continue
            for ref in definition.references:
                if definitions[ref].scope is BeanScope.TRANSIENT:
                    logger.warning(
                        "Singleton bean '%s' captures transient bean '%s'; "
                        "it will keep the instance it was built with",
                        definition.id, ref,
                    )
