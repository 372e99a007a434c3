"""
Container

This module provides the Container, the only component callers talk to.
It ties the pieces together:

- Registry: the Definitions, supplied by the caller
- Resolver: validates the Registry and computes the ResolvedGraph
- Instantiator: builds each bean with its injection strategy
- InstanceCache: holds SINGLETON beans for the Container's lifetime

Example::

    types = TypeRegistry({"DaoImpl": DaoImpl, "MetierImpl": MetierImpl})
    registry = Registry([
        Definition("dao", "DaoImpl"),
        Definition("metier", "MetierImpl", [reference("dao", index=0)]),
    ])

    with Container(type_lookup=types) as container:
        container.initialize(registry)
        print(container.get("metier").calcul())
"""

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple, Type, TypeVar

from .definition import Definition
from .exceptions import (
    BeanCreationError,
    BeanWireError,
    ContainerClosedError,
    NoUniqueBeanError,
    NotInitializedError,
)
from .instance_cache import InstanceCache
from .instantiator import Instantiator
from .registry import Registry
from .resolver import ResolvedGraph, Resolver
from .scope import BeanScope
from .type_lookup import ImportTypeLookup, TypeLookup

logger = logging.getLogger(__name__)

T = TypeVar('T')

_Generation = Tuple[Optional[ResolvedGraph], InstanceCache]


class ContainerState(Enum):
    """Lifecycle state of a Container"""
    UNINITIALIZED = "UNINITIALIZED"
    READY = "READY"
    CLOSED = "CLOSED"


class Container:
    """Dependency injection container.

    Every Container is independent: there is no process-wide instance, so
    each test can build its own.

    Thread safety:
        ``get()`` may be called from any number of threads. ``initialize()``,
        ``refresh()`` and ``close()`` are serialized with a single lock, wait
        for ``get()`` calls in flight, and swap the graph and the singleton
        cache in one step. ``get()`` never observes a half-built graph, and a
        generation is only torn down once nothing is building from it. A SINGLETON is constructed at
        most once per graph generation, even under concurrent first access.

    Attributes:
        type_lookup: Resolves ``type_ref`` strings to classes
    """

    def __init__(
        self,
        registry: Optional[Registry] = None,
        type_lookup: Optional[TypeLookup] = None,
        resolver: Optional[Resolver] = None,
    ):
        """Create a container.

        Args:
            registry: If given, ``initialize(registry)`` is called right away
            type_lookup: Type-by-name lookup; defaults to ImportTypeLookup
            resolver: Graph resolver; defaults to Resolver()

        Raises:
            Whatever ``initialize()`` raises when ``registry`` is given
        """
        self.type_lookup = type_lookup or ImportTypeLookup()
        self._resolver = resolver or Resolver()
        self._instantiator = Instantiator(self.type_lookup)
        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._active_gets = 0
        self._swapping = False
        self._local = threading.local()
        self._registry: Optional[Registry] = None
        self._graph: Optional[ResolvedGraph] = None
        self._cache = InstanceCache()
        self._state = ContainerState.UNINITIALIZED

        if registry is not None:
            self.initialize(registry)

    # Lifecycle

    @property
    def state(self) -> ContainerState:
        return self._state

    @property
    def registry(self) -> Optional[Registry]:
        return self._registry

    @property
    def resolved_graph(self) -> ResolvedGraph:
        """The current ResolvedGraph.

        Raises:
            NotInitializedError: Before a successful ``initialize()``
            ContainerClosedError: After ``close()``
        """
        with self._lock:
            return self._current()[0]

    def _ensure_not_closed(self) -> None:
        if self._state is ContainerState.CLOSED:
            raise ContainerClosedError("This container is already closed")

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        """Hold the lock once no get() is in flight on another thread.

        New top-level get() calls wait until the block is left, so the
        graph and cache they snapshot are never torn down under them.
        """
        with self._idle:
            while self._swapping:
                self._idle.wait()
            self._swapping = True
            try:
                own = getattr(self._local, 'depth', 0)
                while self._active_gets > own:
                    self._idle.wait()
                yield
            finally:
                self._swapping = False
                self._idle.notify_all()

    def initialize(self, registry: Registry) -> ResolvedGraph:
        """Resolve ``registry`` and make the container READY.

        All-or-nothing: when resolution (or building an eager singleton)
        fails, the container keeps its previous graph, cache and state.
        On success the singleton cache is replaced by an empty one; beans
        from the previous generation are torn down.

        Waits for get() calls already in flight to finish first.

        Args:
            registry: The Registry to resolve

        Returns:
            The new ResolvedGraph

        Raises:
            UnresolvedDependencyError: Dangling reference
            CircularDependencyError: Reference cycle
            BeanCreationError: An eager singleton failed to build
            ContainerClosedError: The container has been closed
        """
        with self._exclusive():
            self._ensure_not_closed()
            graph, previous = self._install(registry)
        self._retire(previous)
        logger.info("Container ready with %d bean(s)", len(graph))
        return graph

    def refresh(self) -> ResolvedGraph:
        """Re-resolve the Registry and invalidate all cached singletons.

        Idempotent: an unchanged Registry yields an identical ordering.

        Raises:
            NotInitializedError: ``initialize()`` never succeeded
            Same errors as ``initialize()``
        """
        with self._exclusive():
            self._ensure_not_closed()
            if self._registry is None:
                raise NotInitializedError(
                    "Container is not initialized. Call container.initialize(registry) first"
                )
            logger.info("Refreshing container")
            graph, previous = self._install(self._registry)
        self._retire(previous)
        logger.info("Container ready with %d bean(s)", len(graph))
        return graph

    def _install(self, registry: Registry) -> Tuple[ResolvedGraph, _Generation]:
        """Build the new generation and swap it in.

        Returns:
            The new graph and the previous (graph, cache) pair
        """
        graph = self._resolver.resolve(registry)
        self._instantiator.clear()
        cache = InstanceCache()
        try:
            self._create_eager_singletons(graph, cache)
        except BeanWireError:
            self._teardown(graph, cache)
            raise

        previous = self._graph, self._cache
        self._registry = registry
        self._graph = graph
        self._cache = cache
        self._state = ContainerState.READY
        return graph, previous

    def _retire(self, previous: _Generation) -> None:
        previous_graph, previous_cache = previous
        if previous_graph is not None:
            self._teardown(previous_graph, previous_cache)

    def close(self) -> None:
        """Tear down the container.

        Waits for get() calls in flight, then runs the destroy callbacks of
        cached singletons in reverse creation order. Calling close() again
        does nothing.
        """
        with self._exclusive():
            if self._state is ContainerState.CLOSED:
                return
            graph, cache = self._graph, self._cache
            self._state = ContainerState.CLOSED
            self._graph = None
            self._cache = InstanceCache()

        if graph is not None:
            self._teardown(graph, cache)
        logger.info("Container closed")

    def __enter__(self) -> 'Container':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    # Lookup

    def _current(self) -> Tuple[ResolvedGraph, InstanceCache]:
        self._ensure_not_closed()
        if self._graph is None:
            raise NotInitializedError(
                "Container is not initialized. Call container.initialize(registry) first"
            )
        return self._graph, self._cache

    @contextmanager
    def _generation(self) -> Iterator[Tuple[ResolvedGraph, InstanceCache]]:
        """Pin the current (graph, cache) for the duration of a lookup."""
        depth = getattr(self._local, 'depth', 0)
        with self._idle:
            # Nested lookups from inside a constructor must not wait
            while self._swapping and depth == 0:
                self._idle.wait()
            generation = self._current()
            self._active_gets += 1
        self._local.depth = depth + 1
        try:
            yield generation
        finally:
            self._local.depth = depth
            with self._idle:
                self._active_gets -= 1
                self._idle.notify_all()

    def get(self, bean_id: str) -> Any:
        """Get a bean by id.

        SINGLETON beans are built on first request and cached. TRANSIENT
        beans are built on every request; their singleton dependencies come
        from the cache, transient ones are built anew.

        Args:
            bean_id: The bean id

        Returns:
            The fully wired bean

        Raises:
            UnknownDefinitionError: When ``bean_id`` is not registered
            BeanCreationError: When building the bean or one of its
                dependencies failed; ``chain`` tells which one
            NotInitializedError: Before ``initialize()``
            ContainerClosedError: After ``close()``
        """
        with self._generation() as (graph, cache):
            return self._resolve(graph, cache, bean_id, ())

    def __getitem__(self, bean_id: str) -> Any:
        """Support subscript syntax: ``container["metier"]``."""
        return self.get(bean_id)

    def __contains__(self, bean_id: object) -> bool:
        graph = self._graph
        return graph is not None and bean_id in graph

    def get_by_type(self, cls: Type[T]) -> T:
        """Get the only bean whose type is ``cls`` or a subclass of it.

        Beans whose type cannot be resolved are skipped.

        Raises:
            NoUniqueBeanError: When zero or several beans match
        """
        with self._generation() as (graph, cache):
            candidates = []
            for definition in graph:
                try:
                    bean_type = self._instantiator.resolve_type(definition)
                except BeanWireError as e:
                    logger.debug("Skipping bean '%s' in lookup by type: %s", definition.id, e)
                    continue
                if issubclass(bean_type, cls):
                    candidates.append(definition.id)
            if len(candidates) != 1:
                raise NoUniqueBeanError(cls.__qualname__, candidates)
            return self._resolve(graph, cache, candidates[0], ())

    def _resolve(
        self,
        graph: ResolvedGraph,
        cache: InstanceCache,
        bean_id: str,
        chain: Tuple[str, ...],
    ) -> Any:
        definition = graph.get(bean_id)
        chain = chain + (bean_id,)

        if definition.scope is BeanScope.SINGLETON:
            instance = cache.get(bean_id)
            if instance is not None or bean_id in cache:
                logger.debug("Bean '%s' served from cache", bean_id)
                return instance
            return cache.get_or_create(
                bean_id, lambda: self._create(graph, cache, definition, chain)
            )
        return self._create(graph, cache, definition, chain)

    def _create(
        self,
        graph: ResolvedGraph,
        cache: InstanceCache,
        definition: Definition,
        chain: Tuple[str, ...],
    ) -> Any:
        # Dependencies first, in ResolvedGraph order. A failing dependency
        # raises a BeanCreationError whose chain already ends at the culprit.
        resolved: Dict[str, Any] = {
            ref: self._resolve(graph, cache, ref, chain)
            for ref in graph.dependencies_of(definition.id)
        }
        try:
            return self._instantiator.instantiate(definition, resolved)
        except Exception as e:
            raise BeanCreationError(chain, e) from e

    def _create_eager_singletons(self, graph: ResolvedGraph, cache: InstanceCache) -> None:
        for definition in graph:
            if definition.eager:
                self._resolve(graph, cache, definition.id, ())

    def _teardown(self, graph: ResolvedGraph, cache: InstanceCache) -> None:
        for bean_id, instance in cache.drain():
            definition = graph.definitions.get(bean_id)
            if definition is None:
                continue
            try:
                self._instantiator.destroy(definition, instance)
            except Exception:
                logger.warning("Destroy callback of bean '%s' failed", bean_id, exc_info=True)
