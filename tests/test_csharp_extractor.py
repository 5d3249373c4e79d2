import unittest

from typegraph.extractors.csharp import CSharpExtractor, parameter_types, split_type_and_name
from typegraph.model import EntityKind, ModelRegistry


def extract(*sources):
    registry = ModelRegistry()
    extractor = CSharpExtractor()
    for source in sources:
        extractor.contribute(source, registry)
    return registry


class TestCSharpDeclarations(unittest.TestCase):
    """Test type declarations and their base lists."""

    def test_class_with_base_and_interface(self):
        """The first base is the base class, later ones are interfaces."""
        registry = extract("class Foo : Bar, IBaz { public int X; public void Run() {} }")
        foo = registry.get("Foo")
        self.assertEqual(foo.kind, EntityKind.CLASS)
        self.assertEqual(foo.bases, {"Bar"})
        self.assertEqual(foo.interfaces, {"IBaz"})
        self.assertEqual([str(f) for f in foo.fields], ["X:int"])
        self.assertEqual([str(m) for m in foo.methods], ["Run():void"])
        self.assertEqual(foo.dependencies, set())

    def test_interface_bases_are_all_interfaces(self):
        source = (
            "public interface IRepo<T> : IDisposable, IQueryable<T> where T : Entity\n"
            "{\n"
            "    T Find(int id);\n"
            "}\n"
        )
        repo = extract(source).get("IRepo")
        self.assertEqual(repo.kind, EntityKind.INTERFACE)
        self.assertEqual(repo.bases, set())
        self.assertEqual(repo.interfaces, {"IDisposable", "IQueryable"})
        self.assertIn("Entity", repo.dependencies)
        self.assertEqual([str(m) for m in repo.methods], ["Find(int):T"])

    def test_interface_keyword_decides_base_role(self):
        """The declaring keyword wins over a kind fixed by an earlier file."""
        registry = extract("class Handler { }", "interface Handler : IDisposable { }")
        handler = registry.get("Handler")
        self.assertEqual(handler.kind, EntityKind.CLASS)
        self.assertEqual(handler.bases, set())
        self.assertEqual(handler.interfaces, {"IDisposable"})

    def test_enum_members(self):
        """Enum members keep their names, values and attributes are dropped."""
        registry = extract("enum Color : byte { Red, Green = 2, [Obsolete] Blue }")
        color = registry.get("Color")
        self.assertEqual(color.kind, EntityKind.ENUM)
        self.assertEqual([f.name for f in color.fields], ["Red", "Green", "Blue"])
        self.assertEqual(color.bases, set())

    def test_positional_record(self):
        """Record parameters become fields and record kind maps to struct."""
        registry = extract("public record Person(string Name, int Age) : Entity(Name);")
        person = registry.get("Person")
        self.assertEqual(person.kind, EntityKind.STRUCT)
        self.assertEqual([str(f) for f in person.fields], ["Name:string", "Age:int"])
        self.assertEqual(person.bases, {"Entity"})

    def test_struct(self):
        registry = extract("public readonly struct Point { public double X; }")
        self.assertEqual(registry.get("Point").kind, EntityKind.STRUCT)

    def test_keywords_inside_literals_are_ignored(self):
        registry = extract('class Real { string S = "class Fake { }"; }')
        self.assertNotIn("Fake", registry)
        self.assertEqual([str(f) for f in registry.get("Real").fields], ["S:string"])

    def test_keywords_inside_comments_are_ignored(self):
        registry = extract("// class Ghost { }\n/* interface IGhost {} */\nclass Real { }")
        self.assertEqual([e.name for e in registry], ["Real"])


class TestCSharpMembers(unittest.TestCase):
    """Test member recovery from type bodies."""

    SOURCE = """
    namespace Shop
    {
        public class Order
        {
            private readonly List<Item> _items = new();
            public Order(Customer customer) { Owner = customer; }
            public decimal Total => _items.Sum(i => i.Price);
            public string Id { get; private set; }
            public event EventHandler Changed;
            public static Order Parse(string text, ref int pos, params string[] rest)
            {
                var helper = new Helper();
                return null;
            }
        }
    }
    """

    def setUp(self):
        self.order = extract(self.SOURCE).get("Order")

    def test_fields_and_properties(self):
        self.assertEqual(
            [str(f) for f in self.order.fields],
            ["_items:List<Item>", "Total:decimal", "Id:string", "Changed:EventHandler"],
        )

    def test_constructor_is_void_method(self):
        self.assertIn("Order(Customer):void", [str(m) for m in self.order.methods])

    def test_parameter_modifiers_removed(self):
        parse = self.order.methods[-1]
        self.assertEqual(parse.parameters, ("string", "int", "string[]"))
        self.assertEqual(parse.return_type, "Order")

    def test_method_bodies_are_not_scanned(self):
        """Locals inside method bodies are neither fields nor dependencies."""
        self.assertIsNone(self.order.get_field("helper"))
        self.assertNotIn("Helper", self.order.dependencies)

    def test_dependencies(self):
        self.assertEqual(self.order.dependencies, {"Item", "Customer", "EventHandler"})

    def test_tuple_return_and_generic_method(self):
        source = (
            "class Svc {\n"
            "    public (int, Order) Load<T>(T key) where T : IKey { return default; }\n"
            "}\n"
        )
        load = extract(source).get("Svc").methods[0]
        self.assertEqual(load.return_type, "(int, Order)")
        self.assertEqual(load.parameters, ("T",))

    def test_nested_types_are_separate_entities(self):
        registry = extract("class Outer { class Inner { int Value; } Inner child; }")
        self.assertEqual([e.name for e in registry], ["Outer", "Inner"])
        self.assertEqual([str(f) for f in registry.get("Outer").fields], ["child:Inner"])
        self.assertEqual([str(f) for f in registry.get("Inner").fields], ["Value:int"])
        self.assertEqual(registry.get("Outer").dependencies, {"Inner"})

    def test_duplicate_method_counted_once(self):
        """The statement and line passes never double count a member."""
        registry = extract("class A {\n    public void Run(int x) { }\n    public int Count;\n}")
        a = registry.get("A")
        self.assertEqual(len(a.methods), 1)
        self.assertEqual(len(a.fields), 1)


class TestCSharpRecovery(unittest.TestCase):
    """Test tolerance of malformed input."""

    def test_unterminated_body_keeps_entity_and_continues(self):
        source = "class Broken : Base {\n    void M( {\n\nclass Good { int X; }\n"
        registry = extract(source)
        broken = registry.get("Broken")
        self.assertIsNotNone(broken)
        self.assertEqual(broken.bases, {"Base"})
        self.assertEqual([str(f) for f in registry.get("Good").fields], ["X:int"])

    def test_missing_body_does_not_claim_next_body(self):
        registry = extract("class A : B\nclass C { int Y; }")
        self.assertEqual(registry.get("A").fields, [])
        self.assertEqual(registry.get("A").bases, {"B"})
        self.assertEqual([str(f) for f in registry.get("C").fields], ["Y:int"])

    def test_partial_declarations_merge(self):
        """Two contributions to one type name produce one merged entity."""
        registry = extract(
            "partial class Cart { int A; }",
            "partial class Cart : Base { void B() {} }",
        )
        self.assertEqual(len(registry), 1)
        cart = registry.get("Cart")
        self.assertEqual([f.name for f in cart.fields], ["A"])
        self.assertEqual([m.name for m in cart.methods], ["B"])
        self.assertEqual(cart.bases, {"Base"})


class TestCSharpHelpers(unittest.TestCase):
    def test_split_type_and_name(self):
        self.assertEqual(
            split_type_and_name("public static Dictionary<string, int> Map"),
            ("Dictionary<string, int>", "Map"),
        )
        self.assertIsNone(split_type_and_name("return"))

    def test_parameter_types(self):
        self.assertEqual(
            parameter_types("[FromBody] Order order, out int count, string name = \"x\""),
            ["Order", "int", "string"],
        )


if __name__ == '__main__':
    unittest.main()
