"""
Python code generation backend.

Emits the six output units (objects, responses, call wrappers with raw and
typed parameters, request builders and request records) as Python source.
Declarations are dataclasses decoded with dataclasses_json; inline
composites are hoisted to module level classes named after their owner.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from ..analyzer.enum_lowerer import EnumLowerer
from ..analyzer.ir_nodes import (
    CompositeField,
    CompositeType,
    EnumDef,
    LiteralType,
    NamedType,
    NullableType,
    OpaqueType,
    ScalarKind,
    ScalarType,
    SequenceType,
    TypeDescriptor,
)
from ..analyzer.name_resolver import IdentifierCaser, escape_keyword
from ..analyzer.reference_resolver import DefinitionIndex
from ..analyzer.type_resolver import TypeResolver
from ..config import CodeGeneratorConfig
from ..errors import GenerationError
from ..schema_ast.nodes import (
    CompositionNode,
    EnumNode,
    MethodDefinition,
    MethodResponse,
    NamedDefinition,
    ObjectNode,
    SchemaDocuments,
)
from ..schema_ast.parser import SchemaParser
from .base import CodeBackend, docstring_text, one_line

BANNER = "# Code generated by api_schema_to_code; DO NOT EDIT."

UNIT_DESCRIPTIONS = {
    "objects": "API object types.",
    "responses": "API response types.",
    "methods": "API call wrappers taking raw parameters.",
    "methods_safe": "API call wrappers taking typed requests.",
    "builders": "API request builders.",
    "requests": "API request records.",
}


@dataclass
class AliasDecl:
    """A type alias waiting to be ordered."""

    name: str
    text: str
    description: str | None = None
    dependencies: list[str] = field(default_factory=list)


class PythonBackend(CodeBackend):
    """Python code generation backend."""

    TEMPLATE_LANG = "python"
    FILE_EXTENSION = "py"

    TYPE_MAP = {
        ScalarKind.INTEGER: "int",
        ScalarKind.NUMBER: "float",
        ScalarKind.STRING: "str",
        ScalarKind.BOOLEAN: "bool",
    }

    ZERO_VALUES = {
        ScalarKind.INTEGER: "0",
        ScalarKind.NUMBER: "0.0",
        ScalarKind.STRING: '""',
        ScalarKind.BOOLEAN: "False",
    }

    METHODS_CLASS = "Methods"
    METHODS_SAFE_CLASS = "MethodsSafe"

    # Response variant name marking the extended form of a method
    EXTENDED_MARKER = "extended"

    def __init__(self, config: CodeGeneratorConfig, documents: SchemaDocuments):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
            documents: Parsed schema documents of this run
        """
        super().__init__(config)
        self.documents = documents
        self.caser = IdentifierCaser(enabled=config.case_identifiers)
        self.index = DefinitionIndex([*documents.objects, *documents.responses])
        self.resolver = TypeResolver(self.caser, self.index)
        self.enum_lowerer = EnumLowerer(self.resolver)

        self.prefix_template = self.get_template("prefix")
        self.class_template = self.get_template("class")
        self.enum_template = self.get_template("enum")
        self.methods_template = self.get_template("methods")
        self.builder_template = self.get_template("builder")
        self.request_template = self.get_template("request")

        # Identifiers declared by the object and response units
        self.declared_names = {self.resolver.declaration_name(d) for d in [*documents.objects, *documents.responses]}
        self._reset_unit(set())

    def _reset_unit(self, reserved: set[str]) -> None:
        self.reset_imports()
        self.add_import("__future__", "annotations")
        self.needs_omit_empty = False
        self.reserved_names = self.declared_names | reserved
        self.hoisted_names: set[str] = set()
        self.pending_helpers: list[str] = []

    def emit(self, unit: str) -> str:
        """
        Emit the source text of one output unit.

        Args:
            unit: One of objects, responses, methods, methods_safe, builders, requests

        Returns:
            The unit's source text

        Raises:
            GenerationError: On the first structural inconsistency, with the
                offending entity and the unit attached
        """
        emitters = {
            "objects": self.emit_objects,
            "responses": self.emit_responses,
            "methods": self.emit_methods,
            "methods_safe": self.emit_methods_safe,
            "builders": self.emit_builders,
            "requests": self.emit_requests,
        }
        if unit not in emitters:
            raise ValueError(f"Unknown output unit: {unit}")

        try:
            declarations = emitters[unit]()
        except GenerationError as e:
            raise e.with_context(stage=unit)
        return self._render_unit(unit, declarations)

    # Units

    def emit_objects(self) -> list[str]:
        self._reset_unit(set())
        return self._emit_definitions(self.documents.objects)

    def emit_responses(self) -> list[str]:
        self._reset_unit(set())
        self.star_imports.add(".objects")
        return self._emit_definitions(self.documents.responses)

    def emit_methods(self) -> list[str]:
        self._reset_unit({self.METHODS_CLASS})
        self.add_import(self.config.runtime_module, "Params")
        self.star_imports.update({".objects", ".responses"})
        return self._emit_wrappers(self.METHODS_CLASS, safe=False)

    def emit_methods_safe(self) -> list[str]:
        self._reset_unit({self.METHODS_SAFE_CLASS})
        # Request records share names with objects (leads.complete and leads_complete); keep them qualified
        self.add_import(".", "requests")
        self.star_imports.update({".objects", ".responses"})
        return self._emit_wrappers(self.METHODS_SAFE_CLASS, safe=True)

    def emit_builders(self) -> list[str]:
        self._reset_unit({self._builder_name(m) for m in self.documents.methods})
        self.add_import(self.config.runtime_module, "Params")
        self.star_imports.add(".objects")

        declarations = []
        for method in self.documents.methods:
            try:
                rendered = self._render_builder(method)
            except GenerationError as e:
                raise e.with_context(entity=method.name)
            declarations.extend(self._take_helpers())
            declarations.append(rendered)
        return declarations

    def emit_requests(self) -> list[str]:
        self._reset_unit({self._request_name(m) for m in self.documents.methods})
        self.add_import(self.config.runtime_module, "Params")
        self.star_imports.add(".objects")

        declarations = []
        for method in self.documents.methods:
            try:
                rendered = self._render_request(method)
            except GenerationError as e:
                raise e.with_context(entity=method.name)
            declarations.extend(self._take_helpers())
            declarations.append(rendered)
        return declarations

    # Named definitions

    def _emit_definitions(self, definitions: list[NamedDefinition]) -> list[str]:
        """Emit classes in document order followed by aliases in dependency order."""
        classes: list[str] = []
        aliases: list[AliasDecl] = []
        for definition in definitions:
            try:
                self._emit_definition(definition, classes, aliases)
            except GenerationError as e:
                raise e.with_context(entity=definition.name)

        if aliases:
            classes.append("\n".join(self._render_alias(alias) for alias in self._order_aliases(aliases)))
        return classes

    def _emit_definition(self, definition: NamedDefinition, classes: list[str], aliases: list[AliasDecl]) -> None:
        name = self.resolver.declaration_name(definition)
        body = definition.body

        override = self.config.response_overrides.get(definition.name)
        if override is not None and definition.document == SchemaParser.RESPONSES_DOCUMENT:
            aliases.append(AliasDecl(name, self.translate_type(LiteralType(override), name, "Item"), definition.description))
            return

        if isinstance(body, EnumNode):
            enum_def = self.enum_lowerer.lower(name, body)
            if enum_def.members:
                classes.append(self._render_enum(enum_def, definition.description))
            else:
                aliases.append(AliasDecl(name, self.translate_type(enum_def.underlying, name, "Item"), definition.description))
            return

        if isinstance(body, CompositionNode):
            composite = self.resolver.resolve(body)
            rendered = self._render_dataclass(name, composite.fields, definition.description, composite.origins)
            classes.extend(self._take_helpers())
            classes.append(rendered)
            return

        if isinstance(body, ObjectNode) and body.properties:
            rendered = self._render_dataclass(name, self._object_fields(definition, body), definition.description)
            classes.extend(self._take_helpers())
            classes.append(rendered)
            return

        # References, arrays, scalars and shapeless objects become aliases
        descriptor = self.resolver.resolve(body)
        text = self.translate_type(descriptor, name, "Item")
        classes.extend(self._take_helpers())
        aliases.append(AliasDecl(name, text, definition.description, self._dependencies(descriptor)))

    def _object_fields(self, definition: NamedDefinition, body: ObjectNode) -> list[CompositeField]:
        """Fields of a named object with the optionality policy applied.

        When the object lists required properties, every other property is
        nullable and left out when absent. An object listing none has all
        properties mandatory. A property referring to the enclosing
        definition is always nullable.
        """
        required = set(body.required)
        fields = []
        seen = set()
        for prop in body.properties:
            if prop.name in seen:
                continue
            seen.add(prop.name)

            descriptor = self.resolver.resolve(prop.type_node)
            optional = bool(required) and prop.name not in required
            if optional or self.resolver.is_self_reference(prop.type_node, definition.name):
                descriptor = NullableType(descriptor)

            fields.append(
                CompositeField(
                    name=self.caser.case(prop.name),
                    schema_name=prop.name,
                    type=descriptor,
                    description=prop.description,
                    omit_empty=optional,
                )
            )
        return fields

    def _order_aliases(self, aliases: list[AliasDecl]) -> list[AliasDecl]:
        """Order aliases so each follows the aliases it refers to.

        Ties keep document order; cycles are left in the order reached.
        """
        by_name = {alias.name: alias for alias in aliases}
        ordered: list[AliasDecl] = []
        visited: set[str] = set()

        def visit(alias: AliasDecl) -> None:
            if alias.name in visited:
                return
            visited.add(alias.name)
            for dependency in alias.dependencies:
                if dependency in by_name:
                    visit(by_name[dependency])
            ordered.append(alias)

        for alias in aliases:
            visit(alias)
        return ordered

    def _dependencies(self, descriptor: TypeDescriptor) -> list[str]:
        """Declaration names a descriptor refers to, in traversal order."""
        if isinstance(descriptor, NamedType):
            return [descriptor.name]
        if isinstance(descriptor, SequenceType):
            return self._dependencies(descriptor.element)
        if isinstance(descriptor, NullableType):
            return self._dependencies(descriptor.inner)
        return []

    # Type text

    def translate_type(self, descriptor: TypeDescriptor, owner: str, field_name: str) -> str:
        """
        Translate a descriptor to a Python type expression.

        Args:
            descriptor: The resolved type
            owner: Declaration the type appears in, used to name hoisted composites
            field_name: Field the type appears in (already cased)

        Returns:
            Python type expression
        """
        if isinstance(descriptor, NullableType):
            inner = self.translate_type(descriptor.inner, owner, field_name)
            if inner.endswith(" | None"):
                return inner
            return f"{inner} | None"

        if isinstance(descriptor, ScalarType):
            return self.TYPE_MAP[descriptor.kind]

        if isinstance(descriptor, NamedType):
            return descriptor.name

        if isinstance(descriptor, SequenceType):
            return f"list[{self.translate_type(descriptor.element, owner, field_name)}]"

        if isinstance(descriptor, OpaqueType):
            self.add_import("typing", "Any")
            return "Any"

        if isinstance(descriptor, LiteralType):
            if "Any" in descriptor.text:
                self.add_import("typing", "Any")
            return descriptor.text

        if isinstance(descriptor, CompositeType):
            return self._hoist(owner + field_name, descriptor)

        raise TypeError(f"Unsupported type descriptor: {descriptor!r}")

    def _hoist(self, base_name: str, composite: CompositeType) -> str:
        """Declare an inline composite as a module level class and return its name."""
        name = base_name
        counter = 2
        while name in self.reserved_names or name in self.hoisted_names:
            name = f"{base_name}{counter}"
            counter += 1
        self.hoisted_names.add(name)

        # Nested composites are hoisted while the fields render, ahead of this class
        rendered = self._render_dataclass(name, composite.fields, None, composite.origins)
        self.pending_helpers.append(rendered)
        return name

    def _take_helpers(self) -> list[str]:
        helpers = self.pending_helpers
        self.pending_helpers = []
        return helpers

    # Rendering

    def _field_line(self, owner: str, composite_field: CompositeField) -> str:
        """Render one dataclass field."""
        identifier = escape_keyword(composite_field.name)
        type_text = self.translate_type(composite_field.type, owner, composite_field.name)

        has_default = composite_field.omit_empty or isinstance(composite_field.type, NullableType)
        metadata = []
        if identifier != composite_field.schema_name:
            metadata.append(f"field_name={json.dumps(composite_field.schema_name)}")
        if composite_field.omit_empty:
            metadata.append("exclude=_omit_empty")
            self.needs_omit_empty = True

        if metadata:
            self.add_import("dataclasses", "field")
            self.add_import("dataclasses_json", "config")
            arguments = ["default=None"] if has_default else []
            arguments.append("metadata=config(" + ", ".join(metadata) + ")")
            line = f"{identifier}: {type_text} = field({', '.join(arguments)})"
        elif has_default:
            line = f"{identifier}: {type_text} = None"
        else:
            line = f"{identifier}: {type_text}"

        if composite_field.description:
            line += f"  # {one_line(composite_field.description)}"
        return line

    def _render_dataclass(
        self,
        name: str,
        fields: list[CompositeField] | tuple[CompositeField, ...],
        description: str | None,
        origins: tuple[str, ...] = (),
    ) -> str:
        """Render a decodable dataclass."""
        self.add_import("dataclasses", "dataclass")
        self.add_import("dataclasses_json", "dataclass_json")

        # Mandatory fields may follow defaulted ones because fields are keyword-only
        lines = [self._field_line(name, f) for f in fields]
        return self.class_template.render(
            decorators=["@dataclass_json", "@dataclass(kw_only=True)"],
            name=name,
            bases="",
            docstring=self._docstring([description] if description else [], 4),
            comments=[f"branch: {origin}" for origin in origins],
            fields=lines,
        )

    def _render_enum(self, enum_def: EnumDef, description: str | None) -> str:
        self.add_import("enum", "Enum")
        return self.enum_template.render(
            name=enum_def.name,
            base=self.TYPE_MAP[enum_def.underlying.kind],
            docstring=self._docstring([description] if description else [], 4),
            members=enum_def.members,
        )

    def _render_alias(self, alias: AliasDecl) -> str:
        line = f"{alias.name} = {alias.text}"
        if alias.description:
            return f"# {one_line(alias.description)}\n{line}"
        return line

    def _docstring(self, paragraphs: list[str | None], indent: int) -> str:
        """Docstring body for the given paragraphs, empty when there are none."""
        paragraphs = [docstring_text(one_line(p)) for p in paragraphs if p and p.strip()]
        if not paragraphs:
            return ""
        if len(paragraphs) == 1:
            return paragraphs[0]
        padding = " " * indent
        return f"\n\n{padding}".join(paragraphs) + f"\n{padding}"

    def _render_unit(self, unit: str, declarations: list[str]) -> str:
        """Assemble the unit: banner, docstring, imports, helpers and declarations."""
        prefix = self.prefix_template.render(
            banner=BANNER,
            docstring=docstring_text(f"{self.config.package_name}.{unit}: {UNIT_DESCRIPTIONS[unit]}"),
            imports=self.assemble_imports(),
            omit_empty=self.needs_omit_empty,
        )
        parts = [prefix] + declarations
        return "\n\n\n".join(part.strip("\n") for part in parts) + "\n"

    # Methods

    def _request_name(self, method: MethodDefinition) -> str:
        return escape_keyword(self.caser.case(method.name))

    def _builder_name(self, method: MethodDefinition) -> str:
        return self.caser.case(method.name) + "Builder"

    def _docs_url(self, method: MethodDefinition) -> str:
        return self.config.docs_url.format(method=method.name)

    def _wrapper_name(self, method: MethodDefinition, response: MethodResponse, response_type: str, safe: bool) -> str:
        """
        Name of the call wrapper for one response variant.

        The single or default "response" variant adds no postfix. Other
        variants add their cased name, without a "Response" suffix.
        """
        postfix = self.caser.case(response.name)
        if len(method.responses) == 1 or response.name == "response":
            postfix = ""
        if response.name.endswith("Response"):
            stripped = response.name.replace("Response", "")
            if stripped:
                postfix = self.caser.case(stripped)

        prefix = self.config.method_postfix_prefixes.get(response_type)
        if prefix:
            postfix = prefix + postfix

        name = self.caser.case(method.name) + postfix
        if safe:
            name += "Safe"
        return escape_keyword(name)

    def _emit_wrappers(self, class_name: str, safe: bool) -> list[str]:
        wrappers = []
        for method in self.documents.methods:
            try:
                for response in method.responses:
                    owner = self.caser.case(method.name) + self.caser.case(response.name)
                    response_type = self.translate_type(self.resolver.resolve(response.body), owner, "")
                    if safe:
                        argument = f"req: requests.{self._request_name(method)}"
                        params = "req.params()"
                    else:
                        argument = "params: Params"
                        params = "params"
                    wrappers.append(
                        {
                            "name": self._wrapper_name(method, response, response_type, safe),
                            "argument": argument,
                            "params": params,
                            "response": response_type,
                            "api_name": json.dumps(method.name),
                            "extended": self.EXTENDED_MARKER in response.name.lower(),
                            "docstring": self._docstring([method.description], 8),
                        }
                    )
            except GenerationError as e:
                raise e.with_context(entity=method.name)

        if safe:
            class_docstring = "Call wrappers taking typed request records."
        else:
            class_docstring = "Call wrappers taking raw request parameters."
        rendered = self.methods_template.render(
            name=class_name,
            docstring=class_docstring,
            wrappers=wrappers,
        )
        return [*self._take_helpers(), rendered]

    def _render_builder(self, method: MethodDefinition) -> str:
        """Render the fluent request builder of a method."""
        builder_name = self._builder_name(method)
        setters = []
        for param in method.parameters:
            param_name = self.caser.case(param.name)
            descriptor = self.resolver.resolve(param.body)

            depth = 0
            element = descriptor
            while isinstance(element, SequenceType):
                depth += 1
                element = element.element
            element_text = self.translate_type(element, builder_name, param_name)

            # A flat list is taken as variadic arguments
            if depth == 1:
                argument = f"*v: {element_text}"
                value = "list(v)"
            else:
                argument = f"v: {'list[' * depth}{element_text}{']' * depth}"
                value = "v"

            setters.append(
                {
                    "name": escape_keyword(param_name),
                    "argument": argument,
                    "key": json.dumps(param.name),
                    "value": value,
                    "docstring": self._docstring([param.description], 8),
                }
            )

        return self.builder_template.render(
            name=builder_name,
            docstring=self._docstring([f"{builder_name} builder.", method.description, self._docs_url(method)], 4),
            setters=setters,
        )

    def _render_request(self, method: MethodDefinition) -> str:
        """Render the request record of a method with its params() conversion."""
        request_name = self._request_name(method)
        fields = []
        checks = []
        for param in method.parameters:
            param_name = self.caser.case(param.name)
            identifier = escape_keyword(param_name)
            descriptor = self.resolver.resolve(param.body)
            type_text = self.translate_type(descriptor, request_name, param_name)

            # Built-in scalars and sequences are sent unless empty; anything else unless unset
            if isinstance(descriptor, ScalarType):
                default = self.ZERO_VALUES[descriptor.kind]
                condition = f"self.{identifier}"
            elif isinstance(descriptor, SequenceType):
                self.add_import("dataclasses", "field")
                default = "field(default_factory=list)"
                condition = f"self.{identifier}"
            else:
                type_text = f"{type_text} | None"
                default = "None"
                condition = f"self.{identifier} is not None"

            line = f"{identifier}: {type_text} = {default}"
            if param.description:
                line += f"  # {one_line(param.description)}"
            fields.append(line)
            checks.append({"condition": condition, "key": json.dumps(param.name), "attribute": identifier})

        self.add_import("dataclasses", "dataclass")
        return self.request_template.render(
            name=request_name,
            docstring=self._docstring([f"{request_name} request.", method.description, self._docs_url(method)], 4),
            fields=fields,
            checks=checks,
        )
