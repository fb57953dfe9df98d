"""
Schema parser that builds an AST from the API schema documents.

Phase 1 of the pipeline: turn the raw objects, responses and methods
documents into expression trees without resolving references or doing
any language-specific processing.
"""

from __future__ import annotations

from typing import Any

from ..errors import SchemaParseError
from .nodes import (
    AllOfNode,
    ArrayNode,
    EnumNode,
    MethodDefinition,
    MethodParameter,
    MethodResponse,
    NamedDefinition,
    ObjectNode,
    OneOfNode,
    PrimitiveNode,
    PropertyDef,
    RefNode,
    SchemaDocuments,
    SchemaNode,
)


class SchemaParser:
    """Parses the API schema documents into an AST."""

    OBJECTS_DOCUMENT = "objects.json"
    RESPONSES_DOCUMENT = "responses.json"
    METHODS_DOCUMENT = "methods.json"

    # Property a response definition wraps its payload in
    RESPONSE_PROPERTY = "response"

    def parse(
        self,
        objects: dict[str, Any],
        responses: dict[str, Any],
        methods: dict[str, Any],
    ) -> SchemaDocuments:
        """
        Parse the three documents of one generation run.

        Args:
            objects: The objects document
            responses: The responses document
            methods: The methods document

        Returns:
            SchemaDocuments holding the parsed definitions
        """
        return SchemaDocuments(
            objects=self.parse_objects(objects),
            responses=self.parse_responses(responses),
            methods=self.parse_methods(methods),
        )

    def parse_objects(self, document: dict[str, Any]) -> list[NamedDefinition]:
        """Parse the object definitions document."""
        definitions = []
        for name, schema in self._definitions(document, self.OBJECTS_DOCUMENT).items():
            path = f"{self.OBJECTS_DOCUMENT}#/definitions/{name}"
            body = self._parse_schema_node(schema, path, self.OBJECTS_DOCUMENT)
            definitions.append(
                NamedDefinition(
                    name=name,
                    body=body,
                    description=body.description,
                    document=self.OBJECTS_DOCUMENT,
                )
            )
        return definitions

    def parse_responses(self, document: dict[str, Any]) -> list[NamedDefinition]:
        """Parse the response definitions document.

        A response wrapping its payload in a single "response" property is
        unwrapped to that property's schema.
        """
        definitions = []
        for name, schema in self._definitions(document, self.RESPONSES_DOCUMENT).items():
            path = f"{self.RESPONSES_DOCUMENT}#/definitions/{name}"
            properties = schema.get("properties")
            if isinstance(properties, dict) and list(properties) == [self.RESPONSE_PROPERTY]:
                schema = properties[self.RESPONSE_PROPERTY]
                path = f"{path}/properties/{self.RESPONSE_PROPERTY}"
            body = self._parse_schema_node(schema, path, self.RESPONSES_DOCUMENT)
            definitions.append(
                NamedDefinition(
                    name=name,
                    body=body,
                    description=body.description,
                    document=self.RESPONSES_DOCUMENT,
                )
            )
        return definitions

    def parse_methods(self, document: dict[str, Any]) -> list[MethodDefinition]:
        """Parse the method definitions document."""
        methods = document.get("methods") if isinstance(document, dict) else None
        if not isinstance(methods, list):
            raise SchemaParseError("expected a top-level 'methods' list", entity=self.METHODS_DOCUMENT)

        result = []
        for i, method in enumerate(methods):
            path = f"{self.METHODS_DOCUMENT}#/methods/{i}"
            if not isinstance(method, dict) or not method.get("name"):
                raise SchemaParseError(f"method at {path} has no name", entity=self.METHODS_DOCUMENT)
            name = method["name"]

            parameters = []
            for j, param in enumerate(method.get("parameters", [])):
                param_path = f"{path}/parameters/{j}"
                if not isinstance(param, dict) or not param.get("name"):
                    raise SchemaParseError(f"parameter at {param_path} has no name", entity=name)
                body = self._parse_schema_node(param, param_path, self.METHODS_DOCUMENT)
                parameters.append(
                    MethodParameter(
                        name=param["name"],
                        body=body,
                        description=param.get("description"),
                    )
                )

            responses = []
            raw_responses = method.get("responses", {})
            if not isinstance(raw_responses, dict):
                raise SchemaParseError(f"responses at {path} must be an object", entity=name)
            for response_name, response_schema in raw_responses.items():
                body = self._parse_schema_node(response_schema, f"{path}/responses/{response_name}", self.METHODS_DOCUMENT)
                responses.append(MethodResponse(name=response_name, body=body))

            result.append(
                MethodDefinition(
                    name=name,
                    description=method.get("description"),
                    parameters=parameters,
                    responses=responses,
                )
            )
        return result

    def _definitions(self, document: dict[str, Any], document_name: str) -> dict[str, Any]:
        """Get the definitions mapping of a document."""
        definitions = document.get("definitions") if isinstance(document, dict) else None
        if not isinstance(definitions, dict):
            raise SchemaParseError("expected a top-level 'definitions' object", entity=document_name)
        return definitions

    def _parse_schema_node(self, schema: Any, path: str, document: str) -> SchemaNode:
        """
        Parse a schema node recursively.

        Args:
            schema: The schema dictionary
            path: Current path in schema (for error messages)
            document: Document the node belongs to (for local $ref)

        Returns:
            Appropriate SchemaNode subclass
        """
        if not isinstance(schema, dict):
            raise SchemaParseError(f"expected a schema object at {path}, got {type(schema).__name__}")

        description = schema.get("description")

        if "$ref" in schema:
            return self._parse_ref_node(schema["$ref"], path, document, description)

        if "allOf" in schema:
            branches = self._parse_branches(schema["allOf"], f"{path}/allOf", document)
            return AllOfNode(branches=branches, description=description, source_path=path)

        # anyOf is treated as oneOf: both only need field reconciliation
        if "oneOf" in schema or "anyOf" in schema:
            key = "oneOf" if "oneOf" in schema else "anyOf"
            branches = self._parse_branches(schema[key], f"{path}/{key}", document)
            return OneOfNode(branches=branches, description=description, source_path=path)

        if "enum" in schema:
            return self._parse_enum_node(schema, path, description)

        type_value = schema.get("type")
        if isinstance(type_value, list) and len(type_value) == 1:
            type_value = type_value[0]

        if type_value == "array":
            items = None
            if isinstance(schema.get("items"), dict):
                items = self._parse_schema_node(schema["items"], f"{path}/items", document)
            return ArrayNode(items=items, description=description, source_path=path)

        if type_value == "object" or (type_value is None and "properties" in schema):
            return self._parse_object_node(schema, path, document, description)

        # Multi-kind type lists have no single representation
        if not isinstance(type_value, str):
            type_value = ""

        return PrimitiveNode(type_name=type_value, description=description, source_path=path)

    def _parse_ref_node(self, ref: Any, path: str, document: str, description: str | None) -> RefNode:
        """Parse a $ref such as "objects.json#/definitions/base_bool_int"."""
        if not isinstance(ref, str) or not ref:
            raise SchemaParseError(f"invalid $ref at {path}: {ref!r}")

        if "#" in ref:
            ref_document, fragment = ref.split("#", 1)
        else:
            ref_document, fragment = "", ref
        target = fragment.rstrip("/").split("/")[-1]
        if not target:
            raise SchemaParseError(f"$ref at {path} names no definition: {ref!r}")

        return RefNode(
            target=target,
            document=ref_document or document,
            description=description,
            source_path=path,
        )

    def _parse_branches(self, branches: Any, path: str, document: str) -> list[SchemaNode]:
        """Parse the branches of a composition."""
        if not isinstance(branches, list):
            raise SchemaParseError(f"expected a list of branches at {path}")
        return [self._parse_schema_node(branch, f"{path}/{i}", document) for i, branch in enumerate(branches)]

    def _parse_enum_node(self, schema: dict[str, Any], path: str, description: str | None) -> EnumNode:
        """Parse an enum node."""
        values = schema["enum"]
        if not isinstance(values, list):
            raise SchemaParseError(f"enum at {path} must be a list")

        base_type = schema.get("type")
        if not isinstance(base_type, str):
            base_type = self._infer_type(values[0]) if values else "string"

        names = schema.get("enumNames")
        if names is not None:
            names = [str(name) for name in names]

        return EnumNode(
            base_type=base_type,
            values=values,
            names=names,
            description=description,
            source_path=path,
        )

    def _parse_object_node(self, schema: dict[str, Any], path: str, document: str, description: str | None) -> ObjectNode:
        """Parse an object type node."""
        required = schema.get("required", [])
        required_fields = list(required) if isinstance(required, list) else []

        properties = []
        for prop_name, prop_schema in schema.get("properties", {}).items():
            prop_path = f"{path}/properties/{prop_name}"
            prop_node = self._parse_schema_node(prop_schema, prop_path, document)

            # Older documents mark requiredness on the property itself
            if prop_schema.get("required") is True and prop_name not in required_fields:
                required_fields.append(prop_name)

            properties.append(
                PropertyDef(
                    name=prop_name,
                    type_node=prop_node,
                    description=prop_node.description,
                    source_path=prop_path,
                )
            )

        return ObjectNode(
            properties=properties,
            required=required_fields,
            description=description,
            source_path=path,
        )

    def _infer_type(self, value: Any) -> str:
        """Infer the schema type from a Python value."""
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, int):
            return "integer"
        if isinstance(value, float):
            return "number"
        if isinstance(value, str):
            return "string"
        if value is None:
            return "null"
        return "object"
