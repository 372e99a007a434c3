"""
BeanWire Exceptions

Custom exception hierarchy for the BeanWire container
"""

from typing import Optional, Sequence


class BeanWireError(Exception):
    """
    Base exception for all BeanWire errors.

    All BeanWire-specific exceptions inherit from this class.
    You can catch this to handle any BeanWire error generically.

    Example:
        >>> try:
        ...     metier = container.get("metier")
        ... except BeanWireError as e:
        ...     print(f"DI error: {e}")
    """

    pass


class InvalidDefinitionError(BeanWireError):
    """
    Raised when a Definition is malformed.

    Common causes:
        - Mixing POSITIONAL and NAMED injection points in one Definition
        - Using NAMED points with the CONSTRUCTOR strategy (or POSITIONAL
          points with SETTER / FIELD)
        - Positional indices that are duplicated or leave gaps
        - An empty bean id

    Solution:
        Pick one injection strategy per Definition. If a type needs both
        constructor and setter injection, register it as two Definitions.
    """

    pass


class DuplicateDefinitionError(BeanWireError):
    """
    Raised when the same bean id is registered twice in a Registry.

    Common causes:
        - Registering the same Definition from two definition sources
        - Copy-pasted definitions with an unchanged id

    Solution:
        Give every Definition a unique id, or ``unregister()`` the old one
        before registering its replacement.
    """

    def __init__(self, bean_id: str):
        self.bean_id = bean_id
        super().__init__(f"Bean '{bean_id}' is already registered")


class UnknownDefinitionError(BeanWireError):
    """
    Raised when a requested bean id is not registered.

    Note:
        The error message includes the list of registered ids
        to help identify typos.
    """

    def __init__(self, bean_id: str, registered: Sequence[str] = ()):
        self.bean_id = bean_id
        self.registered = tuple(registered)
        listing = ", ".join(self.registered) or "None"
        super().__init__(
            f"Bean '{bean_id}' is not registered.\n"
            f"Registered beans: {listing}"
        )


class UnresolvedDependencyError(BeanWireError):
    """
    Raised at resolution time when a Definition references a missing bean.

    Dangling references are reported by ``Container.initialize()`` before
    any object is built, never as a crash during construction.

    Solution:
        Register the missing Definition, or fix the reference, then call
        ``refresh()``.
    """

    def __init__(self, from_id: str, missing_id: str):
        self.from_id = from_id
        self.missing_id = missing_id
        super().__init__(
            f"Bean '{from_id}' depends on '{missing_id}', which is not registered.\n"
            f"Hint: registry.register(Definition('{missing_id}', ...))"
        )


class CircularDependencyError(BeanWireError):
    """
    Raised when a circular dependency is detected during resolution.

    The ``cycle`` attribute holds the full path, starting and ending
    with the same id, e.g. ``['a', 'b', 'a']``.

    Solution:
        1. Refactor to remove the circular dependency
        2. Extract the shared functionality into a third bean that both
           depend on
    """

    def __init__(self, cycle: Sequence[str]):
        self.cycle = list(cycle)
        super().__init__(
            f"Circular dependency detected: {' -> '.join(self.cycle)}"
        )


class UnknownTypeError(BeanWireError):
    """
    Raised when a ``type_ref`` cannot be turned into a constructible type.

    Common causes:
        - Typo in the type reference
        - The type was never added to the ``TypeRegistry``
        - The module named in a dotted reference cannot be imported
        - The type is abstract
    """

    def __init__(self, type_ref: str, reason: str = "not found"):
        self.type_ref = type_ref
        self.reason = reason
        super().__init__(f"Type '{type_ref}' is not constructible: {reason}")


class ConstructorArityMismatchError(BeanWireError):
    """
    Raised when the positional dependencies of a CONSTRUCTOR Definition
    do not bind to the target type's ``__init__`` signature.
    """

    def __init__(self, type_name: str, given: int, detail: str):
        self.type_name = type_name
        self.given = given
        super().__init__(
            f"Cannot call {type_name} with {given} positional argument(s): {detail}"
        )


class NoDefaultConstructorError(BeanWireError):
    """
    Raised when SETTER or FIELD injection is used on a type whose
    constructor cannot be called without arguments.

    Solution:
        Give the type a zero-argument constructor (defaults are fine),
        or switch the Definition to CONSTRUCTOR injection.
    """

    def __init__(self, type_name: str, detail: str = ""):
        self.type_name = type_name
        message = f"{type_name} has no zero-argument constructor"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UnknownInjectionPointError(BeanWireError):
    """
    Raised when a NAMED injection point has no matching setter or field.

    For SETTER injection both ``set_<name>`` and ``set<Name>`` are tried.
    For FIELD injection the attribute must be declared on the class
    (annotation, class attribute or slot) or set by its constructor.
    """

    def __init__(self, type_name: str, name: str, kind: str):
        self.type_name = type_name
        self.name = name
        self.kind = kind
        super().__init__(f"{type_name} has no {kind} for injection point '{name}'")


class BeanCreationError(BeanWireError):
    """
    Raised by ``Container.get()`` when building a bean fails.

    Wraps the underlying error with the id of the requested bean and
    the chain of ids that led to the failure.

    Attributes:
        bean_id: The bean that was requested
        chain: Ids from the requested bean down to the one that failed
        cause: The original exception raised while building ``chain[-1]``
    """

    def __init__(self, chain: Sequence[str], cause: BaseException):
        self.chain = list(chain)
        self.bean_id = self.chain[0]
        self.cause = cause
        path = " -> ".join(self.chain)
        if len(self.chain) > 1:
            message = (
                f"Error creating bean '{self.bean_id}': "
                f"dependency '{self.chain[-1]}' failed ({path}): {cause}"
            )
        else:
            message = f"Error creating bean '{self.bean_id}': {cause}"
        super().__init__(message)

    @property
    def failed_id(self) -> str:
        """Id of the bean whose construction actually failed."""
        return self.chain[-1]


class NoUniqueBeanError(BeanWireError):
    """
    Raised by ``Container.get_by_type()`` when zero or several beans
    are assignable to the requested type.
    """

    def __init__(self, type_name: str, candidates: Optional[Sequence[str]] = None):
        self.type_name = type_name
        self.candidates = list(candidates or [])
        if self.candidates:
            message = (
                f"Expected a single bean of type {type_name}, "
                f"found {len(self.candidates)}: {', '.join(self.candidates)}"
            )
        else:
            message = f"No bean of type {type_name} is registered"
        super().__init__(message)


class NotInitializedError(BeanWireError):
    """
    Raised when a Container is used before ``initialize()``.

    Solution:
        Initialize the container before requesting beans::

            container = Container()
            container.initialize(registry)  # Initialize first!
            metier = container.get("metier")  # Now this works
    """

    pass


class ContainerClosedError(BeanWireError):
    """
    Raised when attempting to use a closed container.

    Solution:
        Create a new ``Container`` instead of reusing a closed one.
    """

    pass
