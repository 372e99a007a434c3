"""
Lifecycle Management Tests

Tests for container lifecycle management:
- eager singletons
- init / destroy callbacks
- close() and the context manager
"""

import logging
import unittest

from beanwire import (
    BeanCreationError,
    BeanScope,
    Container,
    ContainerClosedError,
    ContainerState,
    Definition,
    Registry,
    literal,
    reference,
)

from conftest import BeanWireTestCase
from fixtures import Counted, Resource


class TestEagerSingletons(BeanWireTestCase):
    """Tests for eager=True"""

    def setUp(self):
        super().setUp()
        Counted.reset()

    def test_eager_built_at_initialize(self):
        """Eager singletons exist as soon as initialize() returns."""
        container = self.create_container(
            Definition("eager", "Counted", eager=True),
            Definition("lazy", "Level1"),
        )

        self.assertEqual(Counted.instances, 1)
        container.get("eager")
        self.assertEqual(Counted.instances, 1)

    def test_eager_rebuilt_on_refresh(self):
        container = self.create_container(Definition("eager", "Counted", eager=True))

        container.refresh()

        self.assertEqual(Counted.instances, 2)

    def test_eager_failure_aborts_initialize(self):
        """A failing eager singleton makes initialize() fail as a whole."""
        container = Container(type_lookup=self.types)

        with self.assertRaises(BeanCreationError) as ctx:
            container.initialize(Registry([Definition("broken", "Broken", eager=True)]))

        self.assertEqual(ctx.exception.bean_id, "broken")
        self.assertEqual(container.state, ContainerState.UNINITIALIZED)

    def test_eager_failure_tears_down_partial_beans(self):
        """Eager beans built before the failure are destroyed."""
        Resource.journal.clear()
        container = Container(type_lookup=self.types)

        with self.assertRaises(BeanCreationError):
            container.initialize(Registry([
                Definition("res", "Resource", [literal("db", index=0)],
                           eager=True, destroy_method="stop"),
                Definition("broken", "Broken", eager=True),
            ]))

        self.assertEqual(Resource.journal, [("stop", "db")])


class TestCallbacks(BeanWireTestCase):
    """Tests for init_method / destroy_method"""

    def setUp(self):
        super().setUp()
        Resource.journal.clear()

    def test_destroy_in_reverse_creation_order(self):
        """Dependents are destroyed before their dependencies."""
        container = self.create_container(
            Definition("db", "Resource", [literal("db", index=0)],
                       init_method="start", destroy_method="stop"),
            Definition("cache", "Resource", [literal("cache", index=0)],
                       init_method="start", destroy_method="stop"),
        )
        container.get("db")
        container.get("cache")

        container.close()

        self.assertEqual(Resource.journal, [
            ("start", "db"),
            ("start", "cache"),
            ("stop", "cache"),
            ("stop", "db"),
        ])

    def test_only_created_beans_destroyed(self):
        container = self.create_container(
            Definition("db", "Resource", [literal("db", index=0)], destroy_method="stop"),
        )

        container.close()

        self.assertEqual(Resource.journal, [])

    def test_refresh_destroys_previous_generation(self):
        container = self.create_container(
            Definition("db", "Resource", [literal("db", index=0)], destroy_method="stop"),
        )
        container.get("db")

        container.refresh()

        self.assertEqual(Resource.journal, [("stop", "db")])

    def test_destroy_failure_logged_not_raised(self):
        container = self.create_container(
            Definition("bad", "FailingStop", [literal("bad", index=0)], destroy_method="stop"),
            Definition("db", "Resource", [literal("db", index=0)], destroy_method="stop"),
        )
        container.get("db")
        container.get("bad")

        with self.assertLogs("beanwire.container", level=logging.WARNING) as logs:
            container.close()

        self.assertIn("bad", logs.output[0])
        self.assertEqual(Resource.journal, [("stop", "db")])

    def test_transient_beans_not_tracked(self):
        """The container does not own transient beans."""
        container = self.create_container(
            Definition("tmp", "Resource", [literal("tmp", index=0)],
                       scope=BeanScope.TRANSIENT, destroy_method="stop"),
        )
        container.get("tmp")

        container.close()

        self.assertEqual(Resource.journal, [])


class TestClose(BeanWireTestCase):
    """Tests for close() and the context manager"""

    def test_closed_container_rejects_use(self):
        container = self.create_container(Definition("dao", "DaoImpl"))

        container.close()

        self.assertEqual(container.state, ContainerState.CLOSED)
        with self.assertRaises(ContainerClosedError):
            container.get("dao")
        with self.assertRaises(ContainerClosedError):
            container.refresh()
        with self.assertRaises(ContainerClosedError):
            container.initialize(Registry())

    def test_close_is_idempotent(self):
        container = self.create_container(Definition("dao", "DaoImpl"))

        container.close()
        container.close()

        self.assertEqual(container.state, ContainerState.CLOSED)

    def test_context_manager(self):
        Resource.journal.clear()
        registry = Registry([
            Definition("db", "Resource", [literal("db", index=0)], destroy_method="stop"),
        ])

        with Container(registry, type_lookup=self.types) as container:
            container.get("db")

        self.assertEqual(container.state, ContainerState.CLOSED)
        self.assertEqual(Resource.journal, [("stop", "db")])

    def test_containers_are_isolated(self):
        """Closing one container does not affect another."""
        first = self.create_container(Definition("dao", "DaoImpl"))
        second = self.create_container(
            Definition("dao", "DaoImpl"),
            Definition("metier", "MetierImpl", [reference("dao", index=0)]),
        )

        first.close()

        self.assertIsNot(second.get("dao"), None)
        self.assertEqual(second.get("metier").calcul(), 250.0)


if __name__ == '__main__':
    unittest.main()
