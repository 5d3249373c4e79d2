"""Java extractor.

Java sources go through a syntax backend (by default
:class:`~typegraph.java_backend.JavaSyntaxBackend`) and the resulting
tree is projected onto the model: one entity per declared type, nested
ones included, with its ``extends``/``implements`` lists, fields,
methods, enum constants and record components.  Every type reference
inside a declaration becomes a dependency candidate; references inside
nested declarations belong to the nested entity.

Parse failures are not handled here.  They propagate to the builder,
which records the file as failed and moves on.
"""

from __future__ import annotations

from typing import Any, Iterator, List, Optional

from loguru import logger

from ..java_backend import JavaSyntaxBackend
from ..model import Entity, EntityKind, Field, Method, ModelRegistry
from ..typenames import JAVA
from .base import Extractor, extractor_registry

DECLARATIONS = {
    "class_declaration": EntityKind.CLASS,
    "interface_declaration": EntityKind.INTERFACE,
    "enum_declaration": EntityKind.ENUM,
    "record_declaration": EntityKind.STRUCT,
}


def _text(node: Any) -> str:
    return node.text.decode("utf-8") if node is not None else ""


def _named(node: Any, node_type: str) -> Iterator[Any]:
    for child in node.named_children:
        if child.type == node_type:
            yield child


@extractor_registry.register("java")
class JavaExtractor(Extractor):
    """Project a Java syntax tree onto the model."""

    extensions = frozenset({".java"})
    dialect = JAVA

    def __init__(self, backend: Optional[Any] = None) -> None:
        self.backend = backend or JavaSyntaxBackend()

    def contribute(self, text: str, registry: ModelRegistry) -> None:
        tree = self.backend.parse(text)
        for node in self._declarations(tree.root_node):
            self._declaration(node, registry)

    def _declarations(self, node: Any) -> Iterator[Any]:
        """Yield every type declaration below ``node``, outermost first."""
        for child in node.named_children:
            if child.type in DECLARATIONS:
                yield child
            yield from self._declarations(child)

    def _declaration(self, node: Any, registry: ModelRegistry) -> None:
        name = _text(node.child_by_field_name("name"))
        if not name:
            return
        entity = registry.get_or_create(name, DECLARATIONS[node.type])
        logger.debug("Java {} {}", node.type.split("_")[0], name)

        superclass = node.child_by_field_name("superclass")
        if superclass is not None and superclass.named_children:
            base = self._simple_name(superclass.named_children[0])
            if entity.add_base(base):
                logger.debug("Java inheritance {} <|-- {}", base, name)
        for extends in _named(node, "extends_interfaces"):
            # interface extends interface
            for base in self._top_level_types(extends):
                if entity.add_base(base):
                    logger.debug("Java inheritance {} <|-- {}", base, name)
        interfaces = node.child_by_field_name("interfaces")
        if interfaces is not None:
            for interface in self._top_level_types(interfaces):
                if entity.add_interface(interface):
                    logger.debug("Java realization {} <|.. {}", interface, name)

        if node.type == "record_declaration":
            parameters = node.child_by_field_name("parameters")
            if parameters is not None:
                for component in _named(parameters, "formal_parameter"):
                    self._add_field(entity, _text(component.child_by_field_name("name")),
                                    _text(component.child_by_field_name("type")))

        body = node.child_by_field_name("body")
        if body is not None:
            self._members(body, entity)
        for reference in self._type_names(node):
            self._depend(entity, reference)

    def _members(self, body: Any, entity: Entity) -> None:
        for member in body.named_children:
            if member.type == "enum_constant":
                constant = _text(member.child_by_field_name("name"))
                if constant and entity.add_field(Field(constant, "")):
                    logger.debug("Java enum constant {}.{}", entity.name, constant)
            elif member.type == "enum_body_declarations":
                self._members(member, entity)
            elif member.type in ("field_declaration", "constant_declaration"):
                field_type = _text(member.child_by_field_name("type"))
                for declarator in member.children_by_field_name("declarator"):
                    self._add_field(entity, _text(declarator.child_by_field_name("name")), field_type)
            elif member.type == "method_declaration":
                self._add_method(member, entity)

    def _add_method(self, node: Any, entity: Entity) -> None:
        name = _text(node.child_by_field_name("name"))
        return_type = _text(node.child_by_field_name("type")) or "void"
        params: List[str] = []
        parameters = node.child_by_field_name("parameters")
        if parameters is not None:
            for param in parameters.named_children:
                if param.type == "formal_parameter":
                    params.append(_text(param.child_by_field_name("type")))
                elif param.type == "spread_parameter":
                    types = [c for c in param.named_children
                             if c.type not in ("modifiers", "variable_declarator")]
                    if types:
                        params.append(_text(types[0]) + "...")
        method = Method(name, return_type, tuple(params))
        if entity.add_method(method):
            logger.debug("Java method {}.{}", entity.name, method)

    def _add_field(self, entity: Entity, name: str, field_type: str) -> None:
        if name and entity.add_field(Field(name, field_type)):
            logger.debug("Java field {}.{}: {}", entity.name, name, field_type)

    # ------------------------------------------------------------------
    # Type references

    def _top_level_types(self, node: Any) -> Iterator[str]:
        """Names listed in an ``extends``/``implements`` clause, arguments excluded."""
        for type_list in _named(node, "type_list"):
            for entry in type_list.named_children:
                name = self._simple_name(entry)
                if name:
                    yield name

    def _type_names(self, node: Any) -> Iterator[str]:
        """Every type name referenced below ``node``, nested declarations excluded."""
        for child in node.named_children:
            if child.type in DECLARATIONS:
                continue
            if child.type in ("type_identifier", "scoped_type_identifier"):
                yield self._simple_name(child)
            else:
                yield from self._type_names(child)

    @staticmethod
    def _simple_name(node: Any) -> str:
        if node.type == "generic_type":
            node = node.named_children[0]
        if node.type == "scoped_type_identifier":
            return _text(node).rsplit(".", 1)[-1].strip()
        if node.type == "type_identifier":
            return _text(node)
        return ""

    def _depend(self, entity: Entity, name: str) -> None:
        if not name or self.dialect.is_primitive(name) or name in self.dialect.containers:
            return
        if entity.add_dependency(name):
            logger.debug("java edge {} ..> {}", entity.name, name)
