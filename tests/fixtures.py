"""
Test Fixtures

Common test classes used across test modules
"""

import threading
import time
from abc import ABC, abstractmethod


class IDao(ABC):
    """Data access interface"""

    @abstractmethod
    def get_data(self) -> float:
        pass


class DaoImpl(IDao):
    """Reads from the 'database'"""

    def get_data(self) -> float:
        return 10.0


class DaoImplV2(IDao):
    """Alternative implementation, swapped in by configuration"""

    def get_data(self) -> float:
        return 12.0


class MetierImpl:
    """Business class; accepts its DAO by constructor or by setter"""

    def __init__(self, dao: IDao = None):
        self.dao = dao

    def calcul(self) -> float:
        return self.dao.get_data() * 25

    def set_dao(self, dao: IDao):
        self.dao = dao


class JavaStyleMetier:
    """Setter named like a Java bean property"""

    def __init__(self):
        self.dao = None
        self.calls = 0

    def setDao(self, dao: IDao):
        self.dao = dao
        self.calls += 1


class FieldMetier:
    """Target for field injection"""
    dao: IDao
    rate: float = 25.0


class Greeter:
    def __init__(self, greeting: str, name: str = "world"):
        self.greeting = greeting
        self.name = name

    def greet(self) -> str:
        return f"{self.greeting}, {self.name}!"


class NeedsArgs:
    def __init__(self, required):
        self.required = required


class Slotted:
    __slots__ = ("dao",)

    def __init__(self):
        pass


class Broken:
    """Constructor always fails"""

    def __init__(self):
        raise RuntimeError("boom")


class Counted:
    """Counts constructor calls across all instances"""
    instances = 0
    _lock = threading.Lock()

    def __init__(self):
        with Counted._lock:
            Counted.instances += 1

    @classmethod
    def reset(cls):
        cls.instances = 0


class SlowCounted:
    """Slow constructor with a side effect, for concurrent first access"""
    instances = 0
    _lock = threading.Lock()

    def __init__(self):
        time.sleep(0.05)
        with SlowCounted._lock:
            SlowCounted.instances += 1

    @classmethod
    def reset(cls):
        cls.instances = 0


class Gated:
    """Constructor blocks until released; counts constructions and stops"""
    entered = threading.Event()
    release = threading.Event()
    instances = 0
    stopped = 0

    def __init__(self):
        Gated.instances += 1
        Gated.entered.set()
        Gated.release.wait(5)

    def stop(self):
        Gated.stopped += 1

    @classmethod
    def reset(cls):
        cls.entered = threading.Event()
        cls.release = threading.Event()
        cls.instances = 0
        cls.stopped = 0


class Resource:
    """Records lifecycle callbacks in a shared journal"""
    journal = []

    def __init__(self, name: str = "resource"):
        self.name = name
        self.started = False

    def start(self):
        self.started = True
        Resource.journal.append(("start", self.name))

    def stop(self):
        Resource.journal.append(("stop", self.name))


class FailingStop(Resource):
    def stop(self):
        raise RuntimeError("cannot stop")


class Level1:
    """First level of nested dependencies"""
    pass


class Level2:
    """Second level of nested dependencies"""

    def __init__(self, l1: Level1):
        self.l1 = l1


class Level3:
    """Third level of nested dependencies"""

    def __init__(self, l2: Level2):
        self.l2 = l2


ALL_TYPES = [
    DaoImpl, DaoImplV2, MetierImpl, JavaStyleMetier, FieldMetier, Greeter,
    NeedsArgs, Slotted, Broken, Counted, SlowCounted, Gated, Resource, FailingStop,
    Level1, Level2, Level3, IDao,
]
