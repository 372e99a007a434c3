"""
Injection

Enums and the InjectionPoint value describing where a dependency goes
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class InjectionStrategy(Enum):
    """How dependencies are handed to a bean"""
    CONSTRUCTOR = "CONSTRUCTOR"
    SETTER = "SETTER"
    FIELD = "FIELD"


class InjectionPointKind(Enum):
    """Addressing mode of an injection point"""
    POSITIONAL = "POSITIONAL"  # constructor argument index
    NAMED = "NAMED"  # setter or field name


@dataclass(frozen=True)
class InjectionPoint:
    """The constructor argument, setter or field receiving one dependency.

    Use the ``positional()`` and ``named()`` constructors rather than
    building instances by hand.

    Attributes:
        kind: POSITIONAL or NAMED
        index: Constructor argument index (POSITIONAL only)
        name: Setter/field name (NAMED only)
    """
    kind: InjectionPointKind
    index: Optional[int] = None
    name: Optional[str] = None

    @classmethod
    def positional(cls, index: int) -> 'InjectionPoint':
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            raise ValueError(f"Positional index must be a non-negative int, got {index!r}")
        return cls(InjectionPointKind.POSITIONAL, index=index)

    @classmethod
    def named(cls, name: str) -> 'InjectionPoint':
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError(f"Injection point name must be an identifier, got {name!r}")
        return cls(InjectionPointKind.NAMED, name=name)

    @property
    def is_positional(self) -> bool:
        return self.kind is InjectionPointKind.POSITIONAL

    def __str__(self) -> str:
        if self.is_positional:
            return f"#{self.index}"
        return self.name
