import unittest

from typegraph.extractors.typescript import TypeScriptExtractor, parameter_types
from typegraph.model import EntityKind, ModelRegistry


def extract(*sources):
    registry = ModelRegistry()
    extractor = TypeScriptExtractor()
    for source in sources:
        extractor.contribute(source, registry)
    return registry


class TestTypeScriptInterfaces(unittest.TestCase):
    """Test interfaces and object-shaped type aliases."""

    def test_interface_fields(self):
        """Primitive-typed fields produce no dependency edges."""
        point = extract("interface Point { x: number; y: number; }").get("Point")
        self.assertEqual(point.kind, EntityKind.INTERFACE)
        self.assertEqual([str(f) for f in point.fields], ["x:number", "y:number"])
        self.assertEqual(point.dependencies, set())

    def test_optional_readonly_and_index_signature(self):
        source = "interface Dict { [key: string]: Item; label?: string; readonly id: number }"
        entity = extract(source).get("Dict")
        self.assertEqual([str(f) for f in entity.fields], ["label:string", "id:number"])
        self.assertNotIn("Item", entity.dependencies)

    def test_interface_method_signature(self):
        source = "interface Store {\n  save(item: Item): Promise<void>;\n}\n"
        store = extract(source).get("Store")
        self.assertEqual([str(m) for m in store.methods], ["save(Item):Promise<void>"])
        self.assertEqual(store.dependencies, {"Item"})

    def test_object_type_alias(self):
        """An alias with an object shape is an interface entity."""
        source = (
            "export type Address = {\n"
            "  street: string;\n"
            "  city: City;\n"
            "  format(style: Style): string;\n"
            "} & Auditable;\n"
        )
        address = extract(source).get("Address")
        self.assertEqual(address.kind, EntityKind.INTERFACE)
        self.assertEqual([str(f) for f in address.fields], ["street:string", "city:City"])
        self.assertEqual([str(m) for m in address.methods], ["format(Style):string"])
        self.assertEqual(address.dependencies, {"City", "Style", "Auditable"})

    def test_alias_without_shape_is_not_an_entity(self):
        registry = extract("type Id = string | number;\ntype Handler<T> = (value: T) => void;\n")
        self.assertEqual(len(registry), 0)


class TestTypeScriptClasses(unittest.TestCase):
    """Test class declarations and their members."""

    SOURCE = """
    @Injectable()
    export class OrderService extends BaseService<Order> implements IService, Disposable {
      private readonly cache: Map<string, Order> = new Map();
      constructor(private repo: OrderRepository, public name: string, logger?: Logger) {
        super();
      }
      get count(): number { return this.cache.size; }
      async find<T>(id: string, opts?: Options): Promise<Order | undefined> {
        return this.repo.get(id);
      }
      handle = (event: OrderEvent): void => { };
      static create() { return new OrderService(null, "", undefined); }
    }
    """

    def setUp(self):
        self.service = extract(self.SOURCE).get("OrderService")

    def test_extends_and_implements(self):
        self.assertEqual(self.service.kind, EntityKind.CLASS)
        self.assertEqual(self.service.bases, {"BaseService"})
        self.assertEqual(self.service.interfaces, {"IService", "Disposable"})

    def test_fields_include_parameter_properties_and_getters(self):
        self.assertEqual(
            [str(f) for f in self.service.fields],
            ["cache:Map<string, Order>", "repo:OrderRepository", "name:string", "count:number"],
        )

    def test_methods(self):
        """Constructors, ordinary methods and arrow properties become methods."""
        self.assertEqual(
            [str(m) for m in self.service.methods],
            [
                "OrderService(OrderRepository, string, Logger):void",
                "find(string, Options):Promise<Order | undefined>",
                "handle(OrderEvent):void",
                "create():void",
            ],
        )

    def test_dependencies(self):
        self.assertEqual(
            self.service.dependencies,
            {"Order", "OrderRepository", "Logger", "Options", "OrderEvent"},
        )

    def test_generic_bounds_are_dependencies(self):
        repo = extract("class Repo<T extends Entity, K = string> { items: T[]; }").get("Repo")
        self.assertIn("Entity", repo.dependencies)
        self.assertEqual([str(f) for f in repo.fields], ["items:T[]"])

    def test_object_type_argument_in_header(self):
        """A brace inside the base's type arguments does not open the body."""
        registry = extract("class Foo extends Base<{ id: string }> { x: number; }\nclass Bar { y: Foo; }")
        foo = registry.get("Foo")
        self.assertEqual(foo.bases, {"Base"})
        self.assertEqual([str(f) for f in foo.fields], ["x:number"])
        self.assertEqual([str(f) for f in registry.get("Bar").fields], ["y:Foo"])

    def test_anonymous_class_expression_is_skipped(self):
        self.assertEqual(len(extract("const X = class extends Base { a: number; }")), 0)

    def test_enum_members(self):
        color = extract('export const enum Direction { Up = 1, Down, Left = "L" }').get("Direction")
        self.assertEqual(color.kind, EntityKind.ENUM)
        self.assertEqual([f.name for f in color.fields], ["Up", "Down", "Left"])

    def test_unterminated_body_continues(self):
        registry = extract("interface Broken { a: string;\nclass Good { b: number; }")
        self.assertEqual(registry.get("Broken").fields, [])
        self.assertEqual([str(f) for f in registry.get("Good").fields], ["b:number"])


class TestParameterTypes(unittest.TestCase):
    def test_rest_optional_and_default(self):
        """Untyped parameters are ``any``; defaults and rest markers are dropped."""
        self.assertEqual(
            parameter_types("...rest: string[], cb?: () => void, x = 5"),
            ["string[]", "() => void", "any"],
        )

    def test_this_parameter_skipped(self):
        self.assertEqual(parameter_types("this: Window, a: number"), ["number"])


if __name__ == '__main__':
    unittest.main()
