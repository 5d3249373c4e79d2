import unittest
from unittest.mock import patch

from typegraph.extractors.java import JavaExtractor
from typegraph.java_backend import JavaSyntaxBackend, SourceParseError
from typegraph.model import EntityKind, ModelRegistry


SOURCE = """
package shop;

import java.util.List;

public class OrderService extends BaseService<Order> implements Service, AutoCloseable {
    private final List<Order> orders = new ArrayList<>();
    private int count, limit;
    private Repository repo;

    public OrderService(Repository repo) { this.repo = repo; }

    public Order find(String id, Filter... filters) {
        Helper helper = new Helper();
        return null;
    }

    public void close() {}

    static class Cache {
        private Map<String, Entry> entries;
    }
}

interface Service extends Closeable, Named {
    int VERSION = 1;
    Order find(String id, Filter... filters);
}

enum Status { ACTIVE, CLOSED; public boolean isOpen() { return this == ACTIVE; } }

record Point(int x, int y) implements Shape {}
"""


class TestJavaExtractor(unittest.TestCase):
    """Test projection of tree-sitter Java trees onto the model."""

    @classmethod
    def setUpClass(cls):
        cls.registry = ModelRegistry()
        JavaExtractor().contribute(SOURCE, cls.registry)

    def test_declarations_in_order(self):
        """Nested declarations follow their enclosing declaration."""
        self.assertEqual(
            [e.name for e in self.registry],
            ["OrderService", "Cache", "Service", "Status", "Point"],
        )

    def test_kinds(self):
        kinds = {e.name: e.kind for e in self.registry}
        self.assertEqual(kinds["OrderService"], EntityKind.CLASS)
        self.assertEqual(kinds["Service"], EntityKind.INTERFACE)
        self.assertEqual(kinds["Status"], EntityKind.ENUM)
        self.assertEqual(kinds["Point"], EntityKind.STRUCT)

    def test_superclass_and_interfaces(self):
        service = self.registry.get("OrderService")
        self.assertEqual(service.bases, {"BaseService"})
        self.assertEqual(service.interfaces, {"Service", "AutoCloseable"})

    def test_interface_extends_are_bases(self):
        self.assertEqual(self.registry.get("Service").bases, {"Closeable", "Named"})

    def test_fields_one_per_declarator(self):
        service = self.registry.get("OrderService")
        self.assertEqual(
            [str(f) for f in service.fields],
            ["orders:List<Order>", "count:int", "limit:int", "repo:Repository"],
        )

    def test_methods_exclude_constructors(self):
        service = self.registry.get("OrderService")
        self.assertEqual(
            [str(m) for m in service.methods],
            ["find(String, Filter...):Order", "close():void"],
        )

    def test_dependencies_exclude_nested_declarations(self):
        """References inside a nested type belong to the nested entity."""
        service = self.registry.get("OrderService")
        self.assertEqual(service.dependencies, {"Order", "Repository", "Filter", "Helper"})
        self.assertEqual(self.registry.get("Cache").dependencies, {"Entry"})

    def test_interface_constants_and_methods(self):
        service = self.registry.get("Service")
        self.assertEqual([str(f) for f in service.fields], ["VERSION:int"])
        self.assertEqual([str(m) for m in service.methods], ["find(String, Filter...):Order"])

    def test_enum_constants_and_methods(self):
        status = self.registry.get("Status")
        self.assertEqual([f.name for f in status.fields], ["ACTIVE", "CLOSED"])
        self.assertEqual([str(m) for m in status.methods], ["isOpen():boolean"])

    def test_record_components(self):
        point = self.registry.get("Point")
        self.assertEqual([str(f) for f in point.fields], ["x:int", "y:int"])
        self.assertEqual(point.interfaces, {"Shape"})


class TestJavaBackend(unittest.TestCase):
    """Test the tree-sitter syntax backend."""

    def test_syntax_error_raises(self):
        with self.assertRaises(SourceParseError) as ctx:
            JavaSyntaxBackend().parse("class Broken { void m( }")
        self.assertIn("line 1", str(ctx.exception))

    def test_missing_grammar_raises_import_error(self):
        with patch("typegraph.java_backend.tree_sitter_java", None):
            with self.assertRaises(ImportError):
                JavaSyntaxBackend().parse("class A {}")

    def test_injected_backend_errors_propagate(self):
        """Parse failures are left for the caller to record."""

        class FailingBackend:
            def parse(self, text):
                raise SourceParseError("syntax error near line 3")

        with self.assertRaises(SourceParseError):
            JavaExtractor(backend=FailingBackend()).contribute("class A {", ModelRegistry())


if __name__ == '__main__':
    unittest.main()
