"""
Type Lookup Tests

Tests for resolving type references to classes.
"""

import unittest

from beanwire import ChainedTypeLookup, ImportTypeLookup, TypeRegistry, UnknownTypeError

from fixtures import DaoImpl, DaoImplV2, MetierImpl


class Outer:
    class Inner:
        pass


class TestTypeRegistry(unittest.TestCase):
    """Test the explicit in-memory lookup."""

    def test_register_by_name(self):
        types = TypeRegistry()
        types.register("dao.Default", DaoImpl)

        self.assertIs(types.resolve("dao.Default"), DaoImpl)

    def test_register_by_class_name(self):
        """A class registered alone is keyed by its __name__."""
        types = TypeRegistry()
        types.register(MetierImpl)

        self.assertIs(types.resolve("MetierImpl"), MetierImpl)

    def test_constructor_mapping(self):
        types = TypeRegistry({"DaoImpl": DaoImpl})

        self.assertIn("DaoImpl", types)
        self.assertNotIn("DaoImplV2", types)

    def test_unknown_lists_known_types(self):
        types = TypeRegistry({"DaoImpl": DaoImpl})

        with self.assertRaises(UnknownTypeError) as ctx:
            types.resolve("DaoImplV3")

        self.assertEqual(ctx.exception.type_ref, "DaoImplV3")
        self.assertIn("DaoImpl", str(ctx.exception))

    def test_only_classes(self):
        types = TypeRegistry()

        with self.assertRaises(TypeError):
            types.register("fn", lambda: None)

    def test_registries_are_isolated(self):
        """Registering in one TypeRegistry does not affect another."""
        first = TypeRegistry()
        second = TypeRegistry()
        first.register(DaoImpl)

        self.assertNotIn("DaoImpl", second)


class TestImportTypeLookup(unittest.TestCase):
    """Test dotted-path resolution."""

    def setUp(self):
        self.lookup = ImportTypeLookup()

    def test_resolve_module_class(self):
        self.assertIs(self.lookup.resolve("fixtures.DaoImpl"), DaoImpl)

    def test_resolve_stdlib(self):
        import collections
        self.assertIs(self.lookup.resolve("collections.OrderedDict"), collections.OrderedDict)

    def test_resolve_nested_class(self):
        """Outer.Inner paths are walked attribute by attribute."""
        self.assertIs(self.lookup.resolve(f"{__name__}.Outer.Inner"), Outer.Inner)

    def test_missing_attribute(self):
        with self.assertRaises(UnknownTypeError) as ctx:
            self.lookup.resolve("fixtures.NoSuchDao")

        self.assertIn("NoSuchDao", str(ctx.exception))

    def test_missing_module(self):
        with self.assertRaises(UnknownTypeError):
            self.lookup.resolve("no_such_package.module.Dao")

    def test_bare_name_rejected(self):
        """A reference without a module part cannot be imported."""
        with self.assertRaises(UnknownTypeError):
            self.lookup.resolve("DaoImpl")


class TestChainedTypeLookup(unittest.TestCase):
    """Test fallback between lookups."""

    def test_first_match_wins(self):
        chained = ChainedTypeLookup([
            TypeRegistry({"Dao": DaoImplV2}),
            TypeRegistry({"Dao": DaoImpl}),
        ])

        self.assertIs(chained.resolve("Dao"), DaoImplV2)

    def test_falls_back_to_import(self):
        chained = ChainedTypeLookup([TypeRegistry(), ImportTypeLookup()])

        self.assertIs(chained.resolve("fixtures.DaoImpl"), DaoImpl)

    def test_all_fail(self):
        chained = ChainedTypeLookup([TypeRegistry(), ImportTypeLookup()])

        with self.assertRaises(UnknownTypeError):
            chained.resolve("Nothing")


if __name__ == '__main__':
    unittest.main()
