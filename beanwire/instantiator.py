"""
Instantiator

This module builds one bean from its Definition and the instances of its
already-resolved dependencies.

For every Definition a ConstructionPlan is computed once and cached:

- the class, obtained from the TypeLookup
- for CONSTRUCTOR injection, a check that the positional arguments bind
  to the constructor signature
- for SETTER / FIELD injection, a check for a zero-argument constructor
  and the setter method or field behind every NAMED injection point

Building an instance then only replays the plan.
"""

import inspect
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from .definition import Definition, Dependency
from .exceptions import (
    ConstructorArityMismatchError,
    InvalidDefinitionError,
    NoDefaultConstructorError,
    UnknownInjectionPointError,
    UnknownTypeError,
)
from .injection import InjectionStrategy
from .type_lookup import TypeLookup

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class NamedInjector:
    """A NAMED dependency bound to its target on the class.

    Attributes:
        dependency: The dependency to inject
        attribute: Setter method name (SETTER) or field name (FIELD)
        is_setter: True when ``attribute`` is a method to call
        verify_on_instance: FIELD only; the field is not declared on the
            class, so it must exist on the constructed instance
    """
    dependency: Dependency
    attribute: str
    is_setter: bool
    verify_on_instance: bool = False


@dataclass(frozen=True)
class ConstructionPlan:
    definition: Definition
    cls: type
    arguments: Tuple[Dependency, ...] = ()
    injectors: Tuple[NamedInjector, ...] = ()


class Instantiator:
    """Builds bean instances following their Definition's strategy.

    Attributes:
        type_lookup: Resolves ``type_ref`` strings to classes
    """

    def __init__(self, type_lookup: TypeLookup):
        self.type_lookup = type_lookup
        self._plans: Dict[str, ConstructionPlan] = {}
        self._lock = threading.Lock()

    def clear(self) -> None:
        """Forget all cached construction plans."""
        with self._lock:
            self._plans.clear()

    def resolve_type(self, definition: Definition) -> type:
        """Resolve a Definition's type reference to a constructible class.

        Raises:
            UnknownTypeError: When the type is unknown, not a class or abstract
        """
        type_ref = definition.type_ref
        if isinstance(type_ref, type):
            cls = type_ref
        else:
            cls = self.type_lookup.resolve(type_ref)

        if not inspect.isclass(cls):
            raise UnknownTypeError(definition.type_name, f"{cls!r} is not a class")
        if inspect.isabstract(cls):
            missing = ", ".join(sorted(getattr(cls, '__abstractmethods__', ())))
            raise UnknownTypeError(
                definition.type_name, f"{cls.__qualname__} is abstract (missing: {missing})"
            )
        return cls

    def plan(self, definition: Definition) -> ConstructionPlan:
        """Get the cached ConstructionPlan for a Definition, building it if needed.

        Raises:
            UnknownTypeError: See resolve_type()
            ConstructorArityMismatchError: CONSTRUCTOR arguments do not bind
            NoDefaultConstructorError: SETTER / FIELD on a type that needs arguments
            UnknownInjectionPointError: No setter or field for a NAMED point
            InvalidDefinitionError: init/destroy method missing on the type
        """
        plan = self._plans.get(definition.id)
        if plan is not None and plan.definition is definition:
            return plan

        plan = self._build_plan(definition)
        with self._lock:
            self._plans[definition.id] = plan
        return plan

    def _build_plan(self, definition: Definition) -> ConstructionPlan:
        cls = self.resolve_type(definition)
        signature = _constructor_signature(cls)

        for method in (definition.init_method, definition.destroy_method):
            if method is not None and not callable(getattr(cls, method, None)):
                raise InvalidDefinitionError(
                    f"Bean '{definition.id}': {cls.__qualname__} has no method '{method}'"
                )

        if definition.injection_strategy is InjectionStrategy.CONSTRUCTOR:
            arguments = definition.positional()
            if signature is not None:
                try:
                    signature.bind(*range(len(arguments)))
                except TypeError as e:
                    raise ConstructorArityMismatchError(
                        cls.__qualname__, len(arguments), f"{e} (signature: {signature})"
                    ) from None
            return ConstructionPlan(definition, cls, arguments=arguments)

        if signature is not None:
            try:
                signature.bind()
            except TypeError as e:
                raise NoDefaultConstructorError(cls.__qualname__, str(e)) from None

        is_setter = definition.injection_strategy is InjectionStrategy.SETTER
        injectors = tuple(
            _setter_injector(cls, dependency) if is_setter else _field_injector(cls, dependency)
            for dependency in definition.named()
        )
        return ConstructionPlan(definition, cls, injectors=injectors)

    def instantiate(self, definition: Definition, resolved: Mapping[str, Any]) -> Any:
        """Build one instance.

        Args:
            definition: The Definition to build
            resolved: Instances of every bean referenced by ``definition``

        Returns:
            The new, fully injected instance

        Raises:
            BeanWireError subclasses from plan(); any exception raised by the
            bean's own constructor, setters or init method propagates as-is
        """
        plan = self.plan(definition)

        def value_of(dependency: Dependency) -> Any:
            return dependency.value if dependency.is_literal else resolved[dependency.ref]

        if definition.injection_strategy is InjectionStrategy.CONSTRUCTOR:
            instance = plan.cls(*(value_of(d) for d in plan.arguments))
        else:
            instance = plan.cls()
            for injector in plan.injectors:
                value = value_of(injector.dependency)
                if injector.is_setter:
                    getattr(instance, injector.attribute)(value)
                    continue
                if injector.verify_on_instance and not hasattr(instance, injector.attribute):
                    raise UnknownInjectionPointError(
                        plan.cls.__qualname__, injector.attribute, "field"
                    )
                setattr(instance, injector.attribute, value)

        if definition.init_method:
            getattr(instance, definition.init_method)()

        logger.debug("Instantiated bean '%s' as %s", definition.id, plan.cls.__qualname__)
        return instance

    @staticmethod
    def destroy(definition: Definition, instance: Any) -> None:
        """Run the destroy callback of a bean, if it declares one."""
        if definition.destroy_method:
            getattr(instance, definition.destroy_method)()


def _constructor_signature(cls: type) -> Optional[inspect.Signature]:
    # Some builtins and C extension types expose no signature; they are
    # called without a pre-check.
    try:
        return inspect.signature(cls)
    except (TypeError, ValueError):
        return None


def _setter_candidates(name: str) -> Tuple[str, ...]:
    return f"set_{name}", f"set{name[0].upper()}{name[1:]}"


def _setter_injector(cls: type, dependency: Dependency) -> NamedInjector:
    name = dependency.point.name
    for candidate in _setter_candidates(name):
        if callable(getattr(cls, candidate, None)):
            return NamedInjector(dependency, candidate, is_setter=True)
    raise UnknownInjectionPointError(cls.__qualname__, name, "setter")


def _field_injector(cls: type, dependency: Dependency) -> NamedInjector:
    name = dependency.point.name
    if _declares_field(cls, name):
        return NamedInjector(dependency, name, is_setter=False)
    if inspect.isroutine(inspect.getattr_static(cls, name, None)):
        raise UnknownInjectionPointError(cls.__qualname__, name, "field")
    if '__dict__' not in _class_attributes(cls):
        # Slotted class without the field: nothing could ever hold it
        raise UnknownInjectionPointError(cls.__qualname__, name, "field")
    return NamedInjector(dependency, name, is_setter=False, verify_on_instance=True)


def _class_attributes(cls: type) -> set:
    names = set()
    for klass in cls.__mro__:
        names.update(vars(klass))
    return names


def _declares_field(cls: type, name: str) -> bool:
    for klass in cls.__mro__:
        if klass is object:
            continue
        if name in inspect.get_annotations(klass):
            return True
        slots = vars(klass).get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        if name in slots:
            return True
    attribute = inspect.getattr_static(cls, name, _MISSING)
    return attribute is not _MISSING and not inspect.isroutine(attribute)
