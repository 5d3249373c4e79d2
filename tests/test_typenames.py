import unittest

from typegraph.model import Entity
from typegraph.typenames import (
    CSHARP,
    JAVA,
    PYTHON,
    TYPESCRIPT,
    decompose,
    record_dependencies,
)


class TestDecompose(unittest.TestCase):
    """Test reduction of type expressions to the names they use."""

    def test_bare_name(self):
        """Decomposing a plain name returns exactly that name."""
        self.assertEqual(decompose("Order", CSHARP), {"Order"})
        self.assertEqual(decompose("Order", TYPESCRIPT), {"Order"})

    def test_containers_are_omitted(self):
        """Container wrappers denote shape, their arguments are kept."""
        self.assertEqual(
            decompose("Dictionary<string, List<Order>>", CSHARP),
            {"string", "Order"},
        )

    def test_user_generic_is_kept(self):
        self.assertEqual(decompose("Repository<Order>", CSHARP), {"Repository", "Order"})

    def test_qualified_names_use_last_segment(self):
        self.assertEqual(
            decompose("System.Collections.Generic.List<Models.Order>", CSHARP),
            {"Order"},
        )

    def test_nullable_array_and_modifiers(self):
        """Nullability markers, array ranks and parameter modifiers are stripped."""
        self.assertEqual(decompose("Order?", CSHARP), {"Order"})
        self.assertEqual(decompose("Order[]", CSHARP), {"Order"})
        self.assertEqual(decompose("int[,]", CSHARP), {"int"})
        self.assertEqual(decompose("ref Order", CSHARP), {"Order"})

    def test_tuple_types(self):
        """Named tuple elements contribute their types, not their names."""
        self.assertEqual(decompose("(int Count, Order Last)", CSHARP), {"int", "Order"})

    def test_typescript_unions(self):
        self.assertEqual(decompose("Customer | null", TYPESCRIPT), {"Customer", "null"})
        self.assertEqual(decompose("A & B<C>", TYPESCRIPT), {"A", "B", "C"})

    def test_typescript_parenthesised_union(self):
        """Every alternative of a grouped union is kept."""
        self.assertEqual(decompose("(A | B)[]", TYPESCRIPT), {"A", "B"})
        self.assertEqual(decompose("(Order & Audited)", TYPESCRIPT), {"Order", "Audited"})

    def test_typescript_function_types(self):
        """Parameter annotations and the result of a function type are used."""
        self.assertEqual(decompose("(o: Order) => Receipt", TYPESCRIPT), {"Order", "Receipt"})
        self.assertEqual(
            decompose("Map<string, (o: Order, ...rest: Item[]) => void>", TYPESCRIPT),
            {"string", "Order", "Item", "void"},
        )
        self.assertEqual(decompose("<T>(value: T) => Promise<Ack>", TYPESCRIPT), {"T", "Ack"})
        self.assertEqual(decompose("((e: OrderEvent) => void) | null", TYPESCRIPT),
                         {"OrderEvent", "void", "null"})

    def test_typescript_containers(self):
        self.assertEqual(decompose("Promise<Order[]>", TYPESCRIPT), {"Order"})
        self.assertEqual(decompose("Map<string, Item>", TYPESCRIPT), {"string", "Item"})

    def test_python_forward_reference(self):
        """A quoted annotation names the class it quotes."""
        self.assertEqual(decompose("Optional['Customer']", PYTHON), {"Customer"})

    def test_python_builtin_generics(self):
        self.assertEqual(decompose("dict[str, list[Item]]", PYTHON), {"str", "Item"})

    def test_python_literal_is_opaque(self):
        """Literal arguments are values, not types."""
        self.assertEqual(decompose("Literal['a', 'b']", PYTHON), set())

    def test_python_callable(self):
        self.assertEqual(decompose("Callable[[Order], Receipt]", PYTHON), {"Order", "Receipt"})

    def test_python_union_operator(self):
        self.assertEqual(decompose("Order | None", PYTHON), {"Order", "None"})

    def test_java_generics(self):
        self.assertEqual(decompose("Map<String, List<Order>>", JAVA), {"String", "Order"})

    def test_empty_expression(self):
        self.assertEqual(decompose("", CSHARP), set())
        self.assertEqual(decompose("   ", PYTHON), set())


class TestRecordDependencies(unittest.TestCase):
    """Test that dependency edges are filtered and recorded."""

    def test_primitives_are_filtered(self):
        entity = Entity("Cart")
        record_dependencies(entity, "Dictionary<string, Item>", CSHARP)
        self.assertEqual(entity.dependencies, {"Item"})

    def test_csharp_lowercase_names_are_primitives(self):
        self.assertTrue(CSHARP.is_primitive("dynamic"))
        self.assertFalse(TYPESCRIPT.is_primitive("dynamic"))

    def test_self_reference_is_ignored(self):
        entity = Entity("Node")
        record_dependencies(entity, "List<Node>", CSHARP)
        self.assertEqual(entity.dependencies, set())

    def test_typescript_union(self):
        entity = Entity("Invoice")
        record_dependencies(entity, "string | Customer", TYPESCRIPT)
        self.assertEqual(entity.dependencies, {"Customer"})

    def test_typescript_callback_arguments(self):
        entity = Entity("EventBus")
        record_dependencies(entity, "Map<string, (event: OrderEvent) => void>", TYPESCRIPT)
        self.assertEqual(entity.dependencies, {"OrderEvent"})

    def test_java_boxed_primitives(self):
        entity = Entity("Account")
        record_dependencies(entity, "Map<String, Integer>", JAVA)
        self.assertEqual(entity.dependencies, set())

    def test_blank_expression_is_a_no_op(self):
        entity = Entity("Account")
        record_dependencies(entity, "", PYTHON)
        record_dependencies(entity, None, PYTHON)
        self.assertEqual(entity.dependencies, set())


if __name__ == '__main__':
    unittest.main()
