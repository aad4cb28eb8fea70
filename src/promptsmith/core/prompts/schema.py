"""Parameter schema introspection.

Tool parameter schemas are described with a small neutral type, ``Schema``.
Concrete schema representations (JSON Schema dicts, pydantic models) are
translated into it by the adapters at the bottom of this module, so the
documentation generator never depends on a particular schema library.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

TYPE_CATEGORIES = (
    "string",
    "number",
    "boolean",
    "array",
    "object",
    "enum",
    "union",
    "literal",
    "unknown",
)

OPTIONAL = "optional"
NO_DESCRIPTION = "No description provided"
OPAQUE_DESCRIPTION = "Schema definition available"


@dataclass(frozen=True)
class Schema:
    """Neutral structural schema.

    ``kind`` is one of TYPE_CATEGORIES or ``"optional"``. Objects carry an
    ordered ``fields`` mapping; optional wrappers and arrays carry ``inner``;
    enums and literals carry ``values``.
    """

    kind: str
    description: str | None = None
    fields: dict[str, "Schema"] = field(default_factory=dict)
    inner: "Schema | None" = None
    values: tuple[Any, ...] = ()

    @classmethod
    def string(cls, description: str | None = None) -> "Schema":
        return cls("string", description)

    @classmethod
    def number(cls, description: str | None = None) -> "Schema":
        return cls("number", description)

    @classmethod
    def boolean(cls, description: str | None = None) -> "Schema":
        return cls("boolean", description)

    @classmethod
    def array(cls, items: "Schema | None" = None, description: str | None = None) -> "Schema":
        return cls("array", description, inner=items)

    @classmethod
    def obj(cls, fields: dict[str, "Schema"], description: str | None = None) -> "Schema":
        return cls("object", description, fields=dict(fields))

    @classmethod
    def enum(cls, values: list[Any] | tuple[Any, ...], description: str | None = None) -> "Schema":
        return cls("enum", description, values=tuple(values))

    @classmethod
    def union(cls, description: str | None = None) -> "Schema":
        return cls("union", description)

    @classmethod
    def literal(cls, value: Any, description: str | None = None) -> "Schema":
        return cls("literal", description, values=(value,))

    @classmethod
    def optional(cls, inner: "Schema", description: str | None = None) -> "Schema":
        return cls(OPTIONAL, description, inner=inner)

    def describe(self, description: str) -> "Schema":
        """Return a copy of this schema carrying ``description``."""
        return Schema(self.kind, description, self.fields, self.inner, self.values)


@dataclass(frozen=True)
class FieldDescriptor:
    """Documentation unit for one tool parameter."""

    name: str
    type_category: str
    required: bool
    description: str

    @property
    def is_opaque(self) -> bool:
        return self == OPAQUE_SCHEMA


OPAQUE_SCHEMA = FieldDescriptor(
    name="",
    type_category="unknown",
    required=False,
    description=OPAQUE_DESCRIPTION,
)


def type_category(schema: Schema) -> str:
    """Resolve the documented type of ``schema``, unwrapping one optional level."""
    kind = schema.kind
    if kind == OPTIONAL:
        kind = schema.inner.kind if schema.inner is not None else None
    if kind in TYPE_CATEGORIES:
        return kind
    return "unknown"


def describe_parameters(schema: Any) -> list[FieldDescriptor]:
    """Turn a parameter schema into an ordered list of field descriptors.

    Anything that is not an object schema yields ``[OPAQUE_SCHEMA]``. Field
    order follows declaration order.
    """
    root = coerce_schema(schema)
    if root.kind != "object":
        return [OPAQUE_SCHEMA]

    descriptors = []
    for name, field_schema in root.fields.items():
        optional = field_schema.kind == OPTIONAL
        description = field_schema.description
        if not description and optional and field_schema.inner is not None:
            description = field_schema.inner.description
        descriptors.append(
            FieldDescriptor(
                name=name,
                type_category=type_category(field_schema),
                required=not optional,
                description=description or NO_DESCRIPTION,
            )
        )
    return descriptors


# Adapters


def coerce_schema(value: Any) -> Schema:
    """Translate a supported schema representation into a ``Schema``.

    Accepts ``Schema`` instances, JSON Schema dicts and pydantic model classes
    or instances. Anything else becomes an ``unknown`` schema.
    """
    if isinstance(value, Schema):
        return value
    if isinstance(value, dict):
        return from_json_schema(value)
    if isinstance(value, type) and issubclass(value, BaseModel):
        return from_pydantic(value)
    if isinstance(value, BaseModel):
        return from_pydantic(type(value))
    return Schema("unknown")


def from_pydantic(model: type[BaseModel]) -> Schema:
    """Build a ``Schema`` from a pydantic model's JSON schema."""
    return from_json_schema(model.model_json_schema())


def from_json_schema(
    node: dict[str, Any],
    root: dict[str, Any] | None = None,
    _resolving: frozenset[str] = frozenset(),
) -> Schema:
    """Build a ``Schema`` from a JSON Schema node.

    Properties missing from ``required`` become optional fields. ``anyOf`` /
    ``oneOf`` unions with a ``null`` branch collapse to the other branch.
    Local ``$ref`` pointers are resolved against ``root``; a recursive
    reference resolves to an opaque ``object``.
    """
    if root is None:
        root = node
    if not isinstance(node, dict):
        return Schema("unknown")

    description = node.get("description")
    if not isinstance(description, str):
        description = None

    ref = node.get("$ref")
    if isinstance(ref, str):
        if ref in _resolving:
            return Schema("object", description)
        target = _resolve_ref(ref, root)
        if target is None:
            return Schema("unknown", description)
        resolved = from_json_schema(target, root, _resolving | {ref})
        return resolved.describe(description) if description else resolved

    if "const" in node:
        return Schema.literal(node["const"], description)
    if isinstance(node.get("enum"), list):
        return Schema.enum(node["enum"], description)

    for key in ("anyOf", "oneOf"):
        branches = node.get(key)
        if isinstance(branches, list):
            non_null = [b for b in branches if not (isinstance(b, dict) and b.get("type") == "null")]
            if len(non_null) == 1:
                inner = from_json_schema(non_null[0], root, _resolving)
                return inner.describe(description) if description else inner
            return Schema.union(description)

    json_type = node.get("type")
    if isinstance(json_type, list):
        non_null = [t for t in json_type if t != "null"]
        json_type = non_null[0] if len(non_null) == 1 else None
        if json_type is None:
            return Schema.union(description)

    if json_type == "object" or (json_type is None and isinstance(node.get("properties"), dict)):
        properties = node.get("properties")
        if not isinstance(properties, dict):
            properties = {}
        required = node.get("required")
        required_names = set(required) if isinstance(required, list) else set()
        fields = {}
        for name, prop in properties.items():
            field_schema = from_json_schema(prop, root, _resolving)
            if name not in required_names:
                field_schema = Schema.optional(field_schema)
            fields[name] = field_schema
        return Schema.obj(fields, description)

    if json_type == "array":
        items = node.get("items")
        item_schema = from_json_schema(items, root, _resolving) if isinstance(items, dict) else None
        return Schema.array(item_schema, description)

    if json_type in ("integer", "number"):
        return Schema.number(description)
    if json_type in ("string", "boolean"):
        return Schema(json_type, description)

    return Schema("unknown", description)


def _resolve_ref(ref: str, root: dict[str, Any]) -> dict[str, Any] | None:
    if not ref.startswith("#/"):
        return None
    target: Any = root
    for part in ref[2:].split("/"):
        if not isinstance(target, dict) or part not in target:
            return None
        target = target[part]
    return target if isinstance(target, dict) else None
