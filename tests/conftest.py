"""
Test Configuration and Utilities

Common base classes and helper functions for BeanWire tests
"""

import unittest

from beanwire import Container, Definition, Registry, TypeRegistry

from fixtures import ALL_TYPES


def create_type_registry() -> TypeRegistry:
    """
    Create a TypeRegistry holding every fixture class under its class name.

    Example:
        >>> types = create_type_registry()
        >>> types.resolve("DaoImpl")
    """
    types = TypeRegistry()
    for cls in ALL_TYPES:
        types.register(cls)
    return types


class BeanWireTestCase(unittest.TestCase):
    """
    Base test case class for BeanWire tests.

    Provides a fresh TypeRegistry per test and closes every container
    created through ``create_container`` after the test.
    """

    def setUp(self):
        self.types = create_type_registry()
        self._containers = []

    def tearDown(self):
        for container in self._containers:
            container.close()

    def create_container(self, *definitions: Definition) -> Container:
        """Build and initialize a container for the given definitions."""
        container = Container(type_lookup=self.types)
        self._containers.append(container)
        container.initialize(Registry(definitions))
        return container
