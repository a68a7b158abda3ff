"""Type resolution for OpenAPI schema nodes.

This module provides:
- SchemaKind and classify_schema: the closed set of shapes a schema node can
  take, decided once per node
- TypeDescriptor: the resolved TypeScript type of a node
- TypeResolver: turns any schema node into a TypeDescriptor
"""

import dataclasses
import enum
import json
from collections.abc import Mapping, Sequence
from typing import Any

from svcgen.codegen.utils import resolve_type_name

__all__ = [
    'ANY',
    'DATE_TYPES',
    'DEFAULT_SCHEMA',
    'NUMBER_TYPES',
    'STRING_TYPES',
    'SchemaKind',
    'TypeDescriptor',
    'TypeKind',
    'TypeResolver',
    'classify_schema',
    'effective_type',
    'render_literal',
]

NUMBER_TYPES = frozenset({
    'int64',
    'integer',
    'long',
    'float',
    'double',
    'number',
    'int',
    'int32',
})

DATE_TYPES = frozenset({'Date', 'date', 'dateTime', 'date-time', 'datetime'})

STRING_TYPES = frozenset({'string', 'email', 'password', 'url', 'byte', 'binary'})

# Stands in for missing parameter, body and property schemas
DEFAULT_SCHEMA: Mapping[str, Any] = {
    'type': 'object',
    'properties': {'id': {'type': 'number'}},
}


class SchemaKind(enum.Enum):
    MISSING = 'missing'
    LITERAL = 'literal'
    REFERENCE = 'reference'
    NUMBER = 'number'
    DATE = 'date'
    STRING = 'string'
    BOOLEAN = 'boolean'
    ARRAY = 'array'
    ENUM = 'enum'
    ONE_OF = 'oneOf'
    ALL_OF = 'allOf'
    OBJECT = 'object'
    UNKNOWN = 'unknown'


class TypeKind(str, enum.Enum):
    ANY = 'any'
    PRIMITIVE = 'primitive'
    REFERENCE = 'reference'
    LITERAL = 'literal'
    ARRAY = 'array'
    TUPLE = 'tuple'
    UNION = 'union'
    INTERSECTION = 'intersection'
    OBJECT = 'object'
    LITERAL_UNION = 'literal-union'


@dataclasses.dataclass(frozen=True)
class TypeDescriptor:
    """The resolved TypeScript type of a schema node.

    Attributes:
        kind: Which shape of type this is.
        text: The TypeScript rendering, e.g. ``'(API.Cat | API.Dog)[]'``.
        members: Child descriptors (array item, union members, object
                 property types in declaration order).
        name: The referenced type name for reference descriptors.
    """

    kind: TypeKind
    text: str
    members: tuple['TypeDescriptor', ...] = ()
    name: str | None = None

    def __str__(self) -> str:
        return self.text

    @property
    def is_union(self) -> bool:
        return ' | ' in self.text


ANY = TypeDescriptor(TypeKind.ANY, 'any')


def _format(schema: Mapping[str, Any]) -> str | None:
    format_ = schema.get('format')
    return format_ if isinstance(format_, str) else None


def effective_type(schema: Mapping[str, Any]) -> Any:
    """Compute the type a schema is treated as.

    The declared ``type`` (first non-null entry of a type list), overridden by
    ``number`` when the format is numeric and by ``enum`` when enum values
    are present.
    """
    type_ = schema.get('type')
    if isinstance(type_, list):
        type_ = next((t for t in type_ if t != 'null'), None)
    if _format(schema) in NUMBER_TYPES:
        type_ = 'number'
    if schema.get('enum') is not None:
        type_ = 'enum'
    return type_


def classify_schema(schema: Any) -> SchemaKind:
    """Decide which shape a schema node has.

    The checks run in a fixed order and the first match wins, so a numeric
    ``format`` beats a conflicting ``type`` and an ``enum`` beats both.
    """
    if schema is None:
        return SchemaKind.MISSING
    if not isinstance(schema, Mapping):
        return SchemaKind.LITERAL
    if schema.get('$ref'):
        return SchemaKind.REFERENCE

    type_ = effective_type(schema)
    if not isinstance(type_, str):
        type_ = None

    if type_ in NUMBER_TYPES:
        return SchemaKind.NUMBER
    if type_ in DATE_TYPES or (type_ in (None, 'string') and _format(schema) in DATE_TYPES):
        return SchemaKind.DATE
    if type_ in STRING_TYPES or (type_ is None and _format(schema) in STRING_TYPES):
        return SchemaKind.STRING
    if type_ == 'boolean':
        return SchemaKind.BOOLEAN
    if type_ == 'array':
        return SchemaKind.ARRAY
    if type_ == 'enum':
        return SchemaKind.ENUM
    if schema.get('oneOf'):
        return SchemaKind.ONE_OF
    if schema.get('allOf'):
        return SchemaKind.ALL_OF
    if type_ == 'object' or schema.get('properties'):
        return SchemaKind.OBJECT
    return SchemaKind.UNKNOWN


def render_literal(value: Any) -> str:
    """Render a non-string enum value as a TypeScript literal."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


class TypeResolver:
    """Resolves schema nodes into TypeScript types.

    The resolver is a pure function of the node and the namespace: it never
    dereferences pointers (references become named types) and never raises;
    unrecognized shapes degrade to ``any``.

    Example:
        >>> resolver = TypeResolver('API')
        >>> resolver.get_type({'type': 'array', 'items': {'$ref': '#/components/schemas/Pet'}})
        'API.Pet[]'
    """

    def __init__(self, namespace: str = ''):
        self.namespace = namespace or ''
        self._handlers = {
            SchemaKind.MISSING: self._describe_missing,
            SchemaKind.LITERAL: self._describe_literal,
            SchemaKind.REFERENCE: self._describe_reference,
            SchemaKind.NUMBER: self._primitive('number'),
            SchemaKind.DATE: self._primitive('Date'),
            SchemaKind.STRING: self._primitive('string'),
            SchemaKind.BOOLEAN: self._primitive('boolean'),
            SchemaKind.ARRAY: self._describe_array,
            SchemaKind.ENUM: self._describe_enum,
            SchemaKind.ONE_OF: self._describe_one_of,
            SchemaKind.ALL_OF: self._describe_all_of,
            SchemaKind.OBJECT: self._describe_object,
            SchemaKind.UNKNOWN: self._describe_missing,
        }

    def get_type(self, schema: Any) -> str:
        """Resolve a schema node to its TypeScript type text."""
        return self.describe(schema).text

    def describe(self, schema: Any) -> TypeDescriptor:
        """Resolve a schema node to a TypeDescriptor."""
        return self._handlers[classify_schema(schema)](schema)

    def ref_type_name(self, schema: Mapping[str, Any]) -> str:
        """Sanitized name of the schema a reference node points to."""
        return resolve_type_name(str(schema['$ref']).split('/')[-1], self.namespace)

    def qualify(self, name: str) -> str:
        return '.'.join(s for s in (self.namespace, name) if s)

    def _primitive(self, text: str):
        descriptor = TypeDescriptor(TypeKind.PRIMITIVE, text)
        return lambda schema: descriptor

    def _describe_missing(self, schema: Any) -> TypeDescriptor:
        return ANY

    def _describe_literal(self, schema: Any) -> TypeDescriptor:
        return TypeDescriptor(TypeKind.LITERAL, render_literal(schema))

    def _describe_reference(self, schema: Mapping[str, Any]) -> TypeDescriptor:
        name = self.ref_type_name(schema)
        return TypeDescriptor(TypeKind.REFERENCE, self.qualify(name), name=name)

    def _describe_array(self, schema: Mapping[str, Any]) -> TypeDescriptor:
        items = schema.get('items')
        nested = schema.get('schema')
        if isinstance(nested, Mapping):
            items = nested.get('items')

        if isinstance(items, Sequence) and not isinstance(items, str):
            members = tuple(
                self.describe(item.get('schema', item) if isinstance(item, Mapping) else item)
                for item in items
            )
            text = f'[{",".join(m.text for m in members)}]'
            return TypeDescriptor(TypeKind.TUPLE, text, members)

        item_type = self.describe(items)
        if item_type.is_union:
            text = f'({item_type.text})[]'
        else:
            text = f'{item_type.text}[]'
        return TypeDescriptor(TypeKind.ARRAY, text, (item_type,))

    def _describe_enum(self, schema: Mapping[str, Any]) -> TypeDescriptor:
        values = schema.get('enum')
        if not isinstance(values, list):
            return TypeDescriptor(TypeKind.PRIMITIVE, 'string')

        members: dict[str, TypeDescriptor] = {}
        for value in values:
            if isinstance(value, str):
                escaped = value.replace('"', '\\"')
                member = TypeDescriptor(TypeKind.LITERAL, f'"{escaped}"')
            else:
                member = self.describe(value)
            members.setdefault(member.text, member)

        text = ' | '.join(members)
        return TypeDescriptor(TypeKind.LITERAL_UNION, text, tuple(members.values()))

    def _describe_one_of(self, schema: Mapping[str, Any]) -> TypeDescriptor:
        members = tuple(self.describe(item) for item in schema['oneOf'])
        text = ' | '.join(m.text for m in members)
        return TypeDescriptor(TypeKind.UNION, text, members)

    def _describe_all_of(self, schema: Mapping[str, Any]) -> TypeDescriptor:
        members = tuple(self.describe(item) for item in schema['allOf'])
        text = f'({" & ".join(m.text for m in members)})'
        return TypeDescriptor(TypeKind.INTERSECTION, text, members)

    def _describe_object(self, schema: Mapping[str, Any]) -> TypeDescriptor:
        properties = schema.get('properties') or {}
        if not isinstance(properties, Mapping) or not properties:
            return TypeDescriptor(TypeKind.OBJECT, 'Record<string, any>')

        required = schema.get('required')
        required_keys = set(required) if isinstance(required, list) else set()

        members = []
        fields = []
        for key, prop in properties.items():
            prop_type = self.describe(prop)
            is_required = key in required_keys or (
                isinstance(prop, Mapping) and prop.get('required') is True
            )
            members.append(prop_type)
            fields.append(f"'{key}'{'' if is_required else '?'}: {prop_type.text}; ")

        return TypeDescriptor(TypeKind.OBJECT, f'{{ {"".join(fields)}}}', tuple(members))
