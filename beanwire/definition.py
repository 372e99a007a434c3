"""
Definition

Immutable data classes describing how to build one bean
"""

from dataclasses import KW_ONLY, dataclass
from typing import Any, Iterable, Optional, Tuple, Union

from .exceptions import InvalidDefinitionError
from .injection import InjectionPoint, InjectionPointKind, InjectionStrategy
from .scope import BeanScope


# A type reference is normally a string resolved through a TypeLookup;
# a class object is accepted as-is.
TypeRef = Union[str, type]


@dataclass(frozen=True)
class Dependency:
    """One dependency of a Definition.

    Either a reference to another bean id (always required) or a literal
    value, delivered through ``point``.
    """
    point: InjectionPoint
    ref: Optional[str] = None
    value: Any = None
    is_literal: bool = False

    @property
    def is_reference(self) -> bool:
        return not self.is_literal

    def __str__(self) -> str:
        target = repr(self.value) if self.is_literal else f"@{self.ref}"
        return f"{self.point}={target}"


def _point_for(index: Optional[int], name: Optional[str]) -> InjectionPoint:
    if (index is None) == (name is None):
        raise ValueError("Specify exactly one of 'index' or 'name'")
    if index is not None:
        return InjectionPoint.positional(index)
    return InjectionPoint.named(name)


def reference(bean_id: str, index: Optional[int] = None, name: Optional[str] = None) -> Dependency:
    """Dependency on another bean.

    Example::

        reference("dao", index=0)     # constructor argument 0
        reference("dao", name="dao")  # set_dao(...) or .dao = ...
    """
    if not isinstance(bean_id, str) or not bean_id:
        raise ValueError(f"Referenced bean id must be a non-empty string, got {bean_id!r}")
    return Dependency(_point_for(index, name), ref=bean_id)


def literal(value: Any, index: Optional[int] = None, name: Optional[str] = None) -> Dependency:
    """Dependency on a plain value, injected as-is."""
    return Dependency(_point_for(index, name), value=value, is_literal=True)


@dataclass(frozen=True)
class Definition:
    """Bean definition.

    When ``injection_strategy`` is omitted it is inferred from the
    dependencies: NAMED points imply SETTER, anything else CONSTRUCTOR.

    Raises:
        InvalidDefinitionError: When the id is empty, strategies are mixed,
            or positional indices are not exactly 0..n-1.
    """
    id: str
    type_ref: TypeRef
    dependencies: Tuple[Dependency, ...] = ()
    _: KW_ONLY
    scope: BeanScope = BeanScope.SINGLETON
    injection_strategy: Optional[InjectionStrategy] = None
    eager: bool = False  # Build during initialize() (SINGLETON only)
    init_method: Optional[str] = None
    destroy_method: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise InvalidDefinitionError(f"Bean id must be a non-empty string, got {self.id!r}")
        if not isinstance(self.type_ref, (str, type)) or not self.type_ref:
            raise InvalidDefinitionError(
                f"Bean '{self.id}': type_ref must be a type name or a class, got {self.type_ref!r}"
            )

        dependencies = tuple(self.dependencies)
        object.__setattr__(self, 'dependencies', dependencies)

        strategy = self.injection_strategy
        if strategy is None:
            strategy = _infer_strategy(dependencies)
            object.__setattr__(self, 'injection_strategy', strategy)

        if self.eager and self.scope is not BeanScope.SINGLETON:
            raise InvalidDefinitionError(
                f"Bean '{self.id}': only SINGLETON beans can be eager"
            )

        self._validate_points(strategy, dependencies)

    def _validate_points(self, strategy: InjectionStrategy, dependencies: Tuple[Dependency, ...]):
        expected = (
            InjectionPointKind.POSITIONAL
            if strategy is InjectionStrategy.CONSTRUCTOR
            else InjectionPointKind.NAMED
        )
        for dependency in dependencies:
            if dependency.point.kind is not expected:
                raise InvalidDefinitionError(
                    f"Bean '{self.id}': {strategy.value} injection requires "
                    f"{expected.value} injection points, got {dependency.point.kind.value} "
                    f"point {dependency.point}. Mixed strategies are not supported; "
                    f"register a second Definition instead."
                )

        if expected is InjectionPointKind.POSITIONAL:
            indices = sorted(d.point.index for d in dependencies)
            if indices != list(range(len(indices))):
                raise InvalidDefinitionError(
                    f"Bean '{self.id}': positional indices must be 0..{len(indices) - 1} "
                    f"without gaps or duplicates, got {indices}"
                )
        else:
            seen = set()
            for dependency in dependencies:
                if dependency.point.name in seen:
                    raise InvalidDefinitionError(
                        f"Bean '{self.id}': injection point '{dependency.point.name}' "
                        f"is declared twice"
                    )
                seen.add(dependency.point.name)

    @property
    def references(self) -> Tuple[str, ...]:
        """Referenced bean ids, in declaration order, without duplicates."""
        return tuple(dict.fromkeys(d.ref for d in self.dependencies if d.is_reference))

    @property
    def type_name(self) -> str:
        if isinstance(self.type_ref, type):
            return self.type_ref.__qualname__
        return self.type_ref

    def positional(self) -> Tuple[Dependency, ...]:
        """Positional dependencies sorted by argument index."""
        return tuple(sorted(
            (d for d in self.dependencies if d.point.is_positional),
            key=lambda d: d.point.index,
        ))

    def named(self) -> Tuple[Dependency, ...]:
        return tuple(d for d in self.dependencies if not d.point.is_positional)


def _infer_strategy(dependencies: Iterable[Dependency]) -> InjectionStrategy:
    kinds = {d.point.kind for d in dependencies}
    if kinds == {InjectionPointKind.NAMED}:
        return InjectionStrategy.SETTER
    return InjectionStrategy.CONSTRUCTOR
