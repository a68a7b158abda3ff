"""Named type declarations built from component schemas and operation parameters.

This module provides:
- PropertyDeclaration and NamedTypeDeclaration: what ends up in typings.d.ts
- DeclarationBuilder: walks the document and produces the sorted declarations
"""

import dataclasses
import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Literal

from svcgen.codegen.naming import FunctionNamer, OperationInfo
from svcgen.codegen.schema import SchemaResolver
from svcgen.codegen.types import DEFAULT_SCHEMA, TypeResolver, render_literal
from svcgen.codegen.utils import resolve_type_name, to_lower_first

if TYPE_CHECKING:
    from svcgen.config import DocumentConfig

__all__ = [
    'HTTP_METHODS',
    'DeclarationBuilder',
    'NamedTypeDeclaration',
    'PropertyDeclaration',
    'iter_operations',
]

logger = logging.getLogger(__name__)

HTTP_METHODS = ('get', 'put', 'post', 'delete', 'patch')

_ENUM_KEY_RE = re.compile(r'(.*?)\(')
_NUMERIC_RE = re.compile(r'^\s*-?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?\s*$')


@dataclasses.dataclass(frozen=True)
class PropertyDeclaration:
    """One property of a declared type.

    Attributes:
        name: The property name as written in the document.
        type: The resolved TypeScript type.
        required: Whether the property is required.
        description: Title and description joined, for the doc comment.
        schema: The raw property schema.
    """

    name: str
    type: str
    required: bool = False
    description: str = ''
    schema: Mapping[str, Any] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class NamedTypeDeclaration:
    """A top-level type emitted into the declarations file.

    Attributes:
        type_name: The sanitized type name.
        kind: ``object`` (interface with properties/parents), ``enum`` or
              ``alias`` (``type X = ...``).
        type: The aliased type text for ``alias`` and ``enum`` kinds.
        properties: The own properties of an object declaration.
        parents: Types an object declaration extends (allOf references).
        is_enum: True when rendered as a TypeScript enum.
    """

    type_name: str
    kind: Literal['object', 'enum', 'alias']
    type: str = 'Record<string, any>'
    properties: tuple[PropertyDeclaration, ...] = ()
    parents: tuple[str, ...] = ()
    is_enum: bool = False


@dataclasses.dataclass
class _Resolved:
    kind: Literal['object', 'enum', 'alias']
    type: str | None = None
    properties: list[PropertyDeclaration] = dataclasses.field(default_factory=list)
    parents: list[str] = dataclasses.field(default_factory=list)
    is_enum: bool = False


def iter_operations(document: Mapping[str, Any]):
    """Yield every operation of the document in document order."""
    for path, path_item in (document.get('paths') or {}).items():
        if not isinstance(path_item, Mapping):
            continue
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, Mapping):
                continue
            yield OperationInfo(path, method, operation, path_item)


class DeclarationBuilder:
    """Builds the NamedTypeDeclaration list of a document.

    One declaration per component schema plus one ``<functionName>Params``
    declaration per operation that has parameters. Declarations are sorted by
    type name; two sources producing the same name are both kept and a
    warning is logged.

    Example:
        >>> builder = DeclarationBuilder(document, config)
        >>> [d.type_name for d in builder.get_interface_tp()]
        ['Pet', 'User', 'getUserParams']
    """

    def __init__(
        self,
        document: Mapping[str, Any],
        config: 'DocumentConfig',
        resolver: SchemaResolver | None = None,
        namer: FunctionNamer | None = None,
    ):
        self.document = document
        self.config = config
        self.namespace = config.namespace
        self.resolver = resolver or SchemaResolver(document)
        self.types = TypeResolver(config.namespace)
        self.namer = namer or FunctionNamer(
            config.namespace,
            (document.get('paths') or {}).keys(),
            config.naming,
            config.function_name_max_length,
        )

    def get_type(self, schema: Any) -> str:
        return self.types.get_type(schema)

    def get_interface_tp(self) -> list[NamedTypeDeclaration]:
        declarations = self._component_declarations()
        declarations.extend(self._parameter_declarations())

        seen: set[str] = set()
        for declaration in declarations:
            if declaration.type_name in seen:
                logger.warning(
                    'Type name %r is generated more than once; the declarations will collide',
                    declaration.type_name,
                )
            seen.add(declaration.type_name)

        return sorted(declarations, key=lambda d: d.type_name)

    def _component_declarations(self) -> list[NamedTypeDeclaration]:
        declarations = []
        for name, schema in self.resolver.get_all_schemas().items():
            result = self.resolve_object(schema)
            declarations.append(
                NamedTypeDeclaration(
                    type_name=resolve_type_name(name, self.namespace),
                    kind=result.kind,
                    type=result.type or 'Record<string, any>',
                    properties=tuple(result.properties),
                    parents=tuple(result.parents),
                    is_enum=result.is_enum,
                )
            )
        return declarations

    def _parameter_declarations(self) -> list[NamedTypeDeclaration]:
        declarations = []
        for operation in iter_operations(self.document):
            parameters = list(operation.operation.get('parameters') or [])
            parameters.extend(operation.path_item.get('parameters') or [])

            properties = []
            for parameter in parameters:
                parameter = self.resolver.resolve_ref(parameter)
                if not isinstance(parameter, Mapping) or not parameter.get('name'):
                    continue
                schema = parameter.get('schema')
                if schema is None and 'type' in parameter:
                    schema = parameter
                properties.append(
                    PropertyDeclaration(
                        name=str(parameter['name']),
                        type=self.get_type(schema),
                        required=parameter.get('required') is True,
                        description=parameter.get('description') or '',
                        schema=schema or {},
                    )
                )

            if properties:
                declarations.append(
                    NamedTypeDeclaration(
                        type_name=self.namer.type_name(operation),
                        kind='object',
                        properties=tuple(properties),
                    )
                )
        return declarations

    def resolve_object(self, schema: Any) -> _Resolved:
        """Dispatch a component schema to the matching resolution."""
        if not isinstance(schema, Mapping):
            return _Resolved('alias', self.get_type(schema))
        if schema.get('$ref'):
            # Fails on dangling or cyclic pointers before the alias is emitted
            self.resolver.resolve_ref(schema)
            return _Resolved('alias', self.get_type(schema))
        if schema.get('enum') is not None:
            return self.resolve_enum_object(schema)
        if schema.get('allOf'):
            return self.resolve_all_of_object(schema)
        if schema.get('properties'):
            return _Resolved('object', properties=self.get_props(schema))
        if schema.get('type') == 'array' and schema.get('items'):
            return _Resolved('alias', self.resolve_array(schema))
        if schema.get('type') == 'object':
            return _Resolved('alias', 'Record<string, any>')
        return _Resolved('alias', self.get_type(schema))

    def resolve_array(self, schema: Mapping[str, Any]) -> str:
        items = schema.get('items')
        if isinstance(items, Mapping) and items.get('$ref'):
            return f'{self.types.ref_type_name(items)}[]'
        return 'any[]'

    def resolve_enum_object(self, schema: Mapping[str, Any]) -> _Resolved:
        values = schema.get('enum')
        if not isinstance(values, list):
            return _Resolved('alias', 'string')

        if self.config.enum_style == 'enum':
            members = ','.join(f'{v}="{v}"' for v in values)
            return _Resolved('enum', f'{{{members}}}', is_enum=True)

        literals: list[Any] = []
        for value in values:
            if isinstance(value, str):
                literals.append('"{}"'.format(value.replace('"', '\\"')))
            else:
                literals.append(self.get_type(value))

        # Values such as 'Active(enabled)=1' also accept 'Active', 'active' and 1.
        for value in values:
            if not isinstance(value, str):
                continue
            key = _ENUM_KEY_RE.match(value)
            if key and key.group(1):
                literals.append('"{}"'.format(key.group(1).replace('"', '\\"')))
                literals.append(
                    '"{}"'.format(to_lower_first(key.group(1)).replace('"', '\\"'))
                )
        for value in values:
            if not isinstance(value, str) or '=' not in value:
                continue
            tail = value.split('=')[1]
            if _NUMERIC_RE.match(tail):
                number = float(tail) if any(c in tail for c in '.eE') else int(tail)
                literals.append(render_literal(number))
            elif tail:
                literals.append(tail)

        text = ' | '.join(dict.fromkeys(str(literal) for literal in literals))
        return _Resolved('alias', text)

    def resolve_all_of_object(self, schema: Mapping[str, Any]) -> _Resolved:
        """Model allOf as multiple-interface composition.

        Referenced members become parents; inline members contribute their
        own properties.
        """
        parents: list[str] = []
        properties: list[PropertyDeclaration] = []
        for item in schema.get('allOf') or []:
            if isinstance(item, Mapping) and item.get('$ref'):
                parents.append(self.types.ref_type_name(item))
            elif isinstance(item, Mapping):
                properties.extend(self.get_props(item))
        return _Resolved('object', properties=properties, parents=parents)

    def get_props(self, schema: Mapping[str, Any]) -> list[PropertyDeclaration]:
        """Property list of an object schema.

        Only the schema-level ``required`` list marks properties as required.
        """
        properties = schema.get('properties') or {}
        if not isinstance(properties, Mapping):
            return []

        required = schema.get('required')
        required_keys = set(required) if isinstance(required, list) else set()

        props = []
        for name, prop in properties.items():
            prop_schema = prop if isinstance(prop, Mapping) else {}
            props.append(
                PropertyDeclaration(
                    name=str(name),
                    type=self.get_type(prop_schema or DEFAULT_SCHEMA),
                    required=name in required_keys,
                    description=' '.join(
                        str(s)
                        for s in (prop_schema.get('title'), prop_schema.get('description'))
                        if s
                    ),
                    schema=prop_schema,
                )
            )
        return props
