"""Operation grouping: turns the paths of a document into per-tag API entries.

This module provides:
- The API entry data classes handed to the service templates
- OperationGrouper: groups operations by tag and extracts their parameters,
  request body, upload fields and response type
"""

import dataclasses
import hashlib
import json
import logging
import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Literal

from svcgen.codegen.models import iter_operations
from svcgen.codegen.naming import FunctionNameRegistry, FunctionNamer, OperationInfo
from svcgen.codegen.schema import SchemaResolver
from svcgen.codegen.types import DEFAULT_SCHEMA, TypeResolver
from svcgen.codegen.utils import (
    get_final_file_name,
    replace_dot,
    resolve_type_name,
    to_lower_first,
)
from svcgen.exceptions import EndpointGenerationError, SchemaResolutionError

if TYPE_CHECKING:
    from svcgen.codegen.models import NamedTypeDeclaration
    from svcgen.config import DocumentConfig

__all__ = [
    'DEFAULT_SCHEMA',
    'PARAMETER_LOCATIONS',
    'ApiEntry',
    'BodyProperty',
    'FileField',
    'GatewayMapping',
    'OperationGrouper',
    'Parameter',
    'RequestBodyInfo',
    'ResponseInfo',
    'ServiceModel',
    'TagGroup',
]

logger = logging.getLogger(__name__)

ParameterLocation = Literal['query', 'path', 'cookie']

# Header parameters are not passed through service functions
PARAMETER_LOCATIONS: tuple[ParameterLocation, ...] = ('query', 'path', 'cookie')

FILE_FORMATS = frozenset({'binary', 'base64'})

GATEWAY_EXTENSION = 'x-antTech-description'

_PATH_PLACEHOLDER_RE = re.compile(r'\{(\w+)\}')
_PATH_TEMPLATE_RE = re.compile(r':([^/]*)|\{([^}]*)\}')
_PATH_TOKEN_RE = re.compile(r'\$?\{[^}]*\}')


# =============================================================================
# API entry model
# =============================================================================


@dataclasses.dataclass
class Parameter:
    """A path, query or cookie parameter of an operation.

    Attributes:
        name: The parameter name as written in the document.
        location: Where the parameter is sent.
        required: Whether the parameter is required.
        type: The resolved TypeScript type.
        is_object: True when the schema is an object, directly or through a
                   referenced component.
        alias: Positional alias (``param0``...) of a path parameter.
        is_complex_type: Set on query parameters that carry an object.
        description: The parameter description.
        schema: The raw parameter schema.
    """

    name: str
    location: ParameterLocation
    required: bool
    type: str
    is_object: bool = False
    alias: str | None = None
    is_complex_type: bool = False
    description: str | None = None
    schema: Mapping[str, Any] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass
class BodyProperty:
    name: str
    type: str
    required: bool = False
    description: str | None = None
    schema: Mapping[str, Any] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass
class RequestBodyInfo:
    """The request body of an operation.

    Attributes:
        media_type: The first declared media type, empty for ``*/*``.
        required: True only when the body declares ``required: true``.
        type: The resolved TypeScript type of the body schema.
        properties: Non-file fields of an object body.
        schema: The raw body schema.
    """

    media_type: str
    required: bool
    type: str
    properties: list[BodyProperty] = dataclasses.field(default_factory=list)
    schema: Mapping[str, Any] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass
class FileField:
    title: str
    multiple: bool = False


@dataclasses.dataclass
class ResponseInfo:
    media_type: str = '*/*'
    type: str = 'any'


@dataclasses.dataclass
class GatewayMapping:
    """Gateway alias recorded from the ``x-antTech-description`` extension.

    Attributes:
        gateway_api: The gateway path that replaces the operation path.
        action: The gateway action (``apiName``).
        product: The gateway product code.
        version: The gateway API version.
    """

    gateway_api: str
    action: str | None = None
    product: str | None = None
    version: str | None = None


@dataclasses.dataclass
class ApiEntry:
    """One callable operation with its resolved names and types."""

    function_name: str
    type_name: str
    method: str
    path: str
    path_in_comment: str
    has_path_variables: bool
    has_api_prefix: bool
    desc: str | None
    has_header: bool
    params: dict[str, list[Parameter]]
    has_params: bool
    body: RequestBodyInfo | None
    files: list[FileField] | None
    has_form_data: bool
    response: ResponseInfo
    operation_id: str | None = None
    summary: str | None = None
    description: str | None = None
    tags: list[str] = dataclasses.field(default_factory=list)
    deprecated: bool = False
    gateway_version: str | None = None
    trace_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


@dataclasses.dataclass
class TagGroup:
    """The API entries sharing a tag, emitted as one service directory.

    Attributes:
        class_name: Directory and controller name.
        instance_name: ``class_name`` with its first letter lower-cased.
        entries: The API entries, sorted by final path.
        gen_type: The generated language, always ``ts``.
    """

    class_name: str
    instance_name: str
    entries: list[ApiEntry]
    gen_type: str = 'ts'


@dataclasses.dataclass
class ServiceModel:
    """Everything one generation run hands to the emitter."""

    declarations: list['NamedTypeDeclaration']
    tag_groups: list[TagGroup]
    mappings: list[GatewayMapping] = dataclasses.field(default_factory=list)


# =============================================================================
# Operation Grouper
# =============================================================================


class OperationGrouper:
    """Groups the operations of a document by tag and builds their API entries.

    Function names are unique within a tag group: the second operation
    claiming a name gets ``_2``, the third ``_3``, in document order.

    Example:
        >>> grouper = OperationGrouper(document, config)
        >>> [(g.class_name, [e.function_name for e in g.entries]) for g in grouper.get_service_tp()]
        [('User', ['getUser', 'getUser_2'])]
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
        self.generate_apis = [
            _PATH_TOKEN_RE.sub('__', api) for api in config.generate_apis or []
        ]
        self.mappings: list[GatewayMapping] = []

    def get_type(self, schema: Any) -> str:
        return self.types.get_type(schema)

    # -------------------------------------------------------------------------
    # Grouping
    # -------------------------------------------------------------------------

    def resolve_tags(self, operation: OperationInfo) -> list[str]:
        """Raw tag names an operation is filed under."""
        controller = operation.operation.get('x-swagger-router-controller')
        if controller:
            return [str(controller)]
        if operation.tags:
            return operation.tags
        if operation.operation_id:
            return [operation.operation_id]
        return [next((s for s in operation.path.split('/') if s), '')]

    def collect_operations(self) -> dict[str, list[OperationInfo]]:
        """Group operations by sanitized tag, in document order."""
        groups: dict[str, list[OperationInfo]] = {}
        for operation in iter_operations(self.document):
            for tag in self.resolve_tags(operation):
                groups.setdefault(resolve_type_name(tag, self.namespace), []).append(
                    operation
                )
        return groups

    def get_service_tp(self) -> list[TagGroup]:
        """Build the tag groups of the document.

        Returns:
            Non-empty tag groups in first-seen tag order, each with its
            entries sorted by final path.

        Raises:
            SchemaResolutionError: If a reference of an operation leads nowhere.
            EndpointGenerationError: If any other error occurs while building
                                     an entry.
        """
        self.mappings = []
        groups = []

        for tag, operations in self.collect_operations().items():
            registry = FunctionNameRegistry()
            entries = []
            for operation in operations:
                # Paths holding template variables are not supported
                if '${' in operation.path:
                    continue
                entry = self._build_entry_safe(tag, operation, registry)
                if self._matches_generate_apis(entry.path):
                    entries.append(entry)

            if not entries:
                continue

            entries.sort(key=lambda e: e.path)
            file_name = replace_dot(tag)
            groups.append(
                TagGroup(
                    class_name=self.namer.class_name(tag, file_name),
                    instance_name=to_lower_first(file_name),
                    entries=entries,
                )
            )

        return groups

    def _build_entry_safe(
        self, tag: str, operation: OperationInfo, registry: FunctionNameRegistry
    ) -> ApiEntry:
        try:
            return self.build_entry(tag, operation, registry)
        except SchemaResolutionError:
            raise
        except Exception as e:
            logger.error(
                'Failed to build %s %s: %s', operation.method.upper(), operation.path, e
            )
            raise EndpointGenerationError(
                operation.operation_id or operation.path,
                operation.method,
                operation.path,
                cause=e,
            ) from e

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def build_entry(
        self, tag: str, operation: OperationInfo, registry: FunctionNameRegistry
    ) -> ApiEntry:
        op = operation.operation
        params = self.get_params_tp(self._operation_parameters(operation), operation.path)
        body = self.get_body_tp(op.get('requestBody'))
        files = self.get_file_tp(op.get('requestBody'))
        response = self.get_response_tp(op.get('responses'))

        has_form_data = bool(files) or bool(body and 'form' in body.media_type)

        function_name = registry.claim(
            get_final_file_name(self.namer.function_name(operation))
        )

        formatted_path = _PATH_TEMPLATE_RE.sub(
            lambda m: '${' + (m.group(1) if m.group(1) is not None else m.group(2)) + '}',
            operation.path,
        )

        gateway_version = None
        gateway = self._gateway_extension(op)
        if gateway is not None:
            formatted_path = gateway.get('antTechApiName') or formatted_path
            gateway_version = gateway.get('antTechVersion')
            self.mappings.append(
                GatewayMapping(
                    gateway_api=formatted_path,
                    action=gateway.get('apiName'),
                    product=gateway.get('productCode'),
                    version=gateway_version,
                )
            )

        if 'path' in params:
            aliased = []
            for index, param in enumerate(params['path']):
                param = dataclasses.replace(param, alias=f'param{index}')
                formatted_path = formatted_path.replace(
                    f'${{{param.name}}}', f'${{{param.alias}}}', 1
                )
                aliased.append(param)
            params['path'] = aliased

        if 'query' in params:
            params['query'] = [
                dataclasses.replace(p, is_complex_type=p.is_object) for p in params['query']
            ]

        summary = operation.summary
        description = operation.description
        if function_name == summary:
            desc = description
        else:
            desc = ' '.join(str(s) for s in (summary, description) if s)

        entry = ApiEntry(
            function_name=function_name,
            type_name=self.namer.type_name(operation),
            method=operation.method,
            path=self._prefix_path(formatted_path, operation.method, tag, function_name),
            path_in_comment=formatted_path.replace('*', '&#42;'),
            has_path_variables='{' in formatted_path,
            has_api_prefix=bool(self.config.api_prefix),
            desc=desc,
            has_header=bool(body and body.media_type),
            params=params,
            has_params=bool(params),
            body=body,
            files=files,
            has_form_data=has_form_data,
            response=response,
            operation_id=operation.operation_id,
            summary=summary,
            description=description,
            tags=operation.tags,
            deprecated=op.get('deprecated') is True,
            gateway_version=gateway_version,
        )

        if self.config.generate_trace_id:
            entry.trace_id = self.get_trace_id(entry)
        return entry

    @staticmethod
    def get_trace_id(entry: ApiEntry) -> str:
        """Stable 32-character hash of an entry."""
        rendered = json.dumps(entry.as_dict(), sort_keys=True, ensure_ascii=False, default=str)
        return hashlib.sha256(rendered.encode('utf-8')).hexdigest()[:32]

    def _operation_parameters(self, operation: OperationInfo) -> list[Any]:
        """Operation parameters followed by the path-item parameters they don't override."""
        parameters = list(operation.operation.get('parameters') or [])
        declared = set()
        for parameter in parameters:
            parameter = self.resolver.resolve_ref(parameter)
            if isinstance(parameter, Mapping):
                declared.add((parameter.get('name'), parameter.get('in')))

        for parameter in operation.path_item.get('parameters') or []:
            resolved = self.resolver.resolve_ref(parameter)
            if isinstance(resolved, Mapping) and (
                (resolved.get('name'), resolved.get('in')) in declared
            ):
                continue
            parameters.append(parameter)
        return parameters

    @staticmethod
    def _gateway_extension(operation: Mapping[str, Any]) -> Mapping[str, Any] | None:
        extension = operation.get(GATEWAY_EXTENSION)
        if extension is None:
            extensions = operation.get('extensions')
            if isinstance(extensions, Mapping):
                extension = extensions.get(GATEWAY_EXTENSION)
        return extension if isinstance(extension, Mapping) else None

    # -------------------------------------------------------------------------
    # Parameters
    # -------------------------------------------------------------------------

    def get_params_tp(
        self, parameters: Iterable[Any] | None = None, path: str | None = None
    ) -> dict[str, list[Parameter]]:
        """Group parameters by location.

        ``{name}`` placeholders of ``path`` without a declared path parameter
        are added as required string parameters. Locations without
        parameters are left out.
        """
        resolved = [self.resolver.resolve_ref(p) for p in parameters or []]
        resolved = [p for p in resolved if isinstance(p, Mapping)]

        params: dict[str, list[Parameter]] = {}
        for location in PARAMETER_LOCATIONS:
            group = [
                self._build_parameter(p, location) for p in resolved if p.get('in') == location
            ]
            if group:
                params[location] = group

        if path:
            path_params = params.get('path', [])
            for name in _PATH_PLACEHOLDER_RE.findall(path):
                if not any(p.name == name for p in path_params):
                    path_params.append(
                        Parameter(
                            name=name,
                            location='path',
                            required=True,
                            type='string',
                            schema={'type': 'string'},
                        )
                    )
            if path_params:
                params['path'] = path_params

        return params

    def _build_parameter(
        self, parameter: Mapping[str, Any], location: ParameterLocation
    ) -> Parameter:
        schema = parameter.get('schema')
        if schema is None and 'type' in parameter:
            schema = parameter
        if not isinstance(schema, Mapping):
            schema = DEFAULT_SCHEMA

        is_direct_object = (schema.get('type') or parameter.get('type')) == 'object'
        ref_name = SchemaResolver.ref_name(schema) or SchemaResolver.ref_name(parameter)
        component = self.resolver.get_component_schema(ref_name) if ref_name else None
        is_ref_object = isinstance(component, Mapping) and component.get('type') == 'object'

        return Parameter(
            name=str(parameter.get('name')),
            location=location,
            required=parameter.get('required') is True,
            type=self.get_type(schema),
            is_object=is_direct_object or is_ref_object,
            description=parameter.get('description'),
            schema=schema,
        )

    # -------------------------------------------------------------------------
    # Request body and files
    # -------------------------------------------------------------------------

    def get_body_tp(self, request_body: Any = None) -> RequestBodyInfo | None:
        body = self.resolver.resolve_ref(request_body)
        if not isinstance(body, Mapping):
            return None
        content = body.get('content')
        if not isinstance(content, Mapping) or not content:
            return None

        media_type = next(iter(content))
        media = content[media_type]
        schema = (media.get('schema') if isinstance(media, Mapping) else None) or DEFAULT_SCHEMA
        if media_type == '*/*':
            media_type = ''

        required = body.get('required')
        required = required if isinstance(required, bool) else False

        properties = []
        props = schema.get('properties') if isinstance(schema, Mapping) else None
        if isinstance(props, Mapping) and schema.get('type') == 'object':
            required_keys = schema.get('required')
            required_keys = set(required_keys) if isinstance(required_keys, list) else set()
            for name, prop in props.items():
                if not isinstance(prop, Mapping) or self._is_file_property(prop):
                    continue
                properties.append(
                    BodyProperty(
                        name=str(name),
                        type=self.get_type(prop),
                        required=name in required_keys,
                        description=prop.get('description'),
                        schema=prop,
                    )
                )

        return RequestBodyInfo(
            media_type=str(media_type),
            required=required,
            type=self.get_type(schema),
            properties=properties,
            schema=schema,
        )

    @staticmethod
    def _is_file_property(prop: Mapping[str, Any]) -> bool:
        if prop.get('format') in FILE_FORMATS:
            return True
        items = prop.get('items')
        return (
            prop.get('type') in ('string[]', 'array')
            and isinstance(items, Mapping)
            and items.get('format') in FILE_FORMATS
        )

    def get_file_tp(self, request_body: Any = None) -> list[FileField] | None:
        body = self.resolver.resolve_ref(request_body)
        if not isinstance(body, Mapping):
            return None
        content = body.get('content')
        if not isinstance(content, Mapping) or 'multipart/form-data' not in content:
            return None

        media = content['multipart/form-data']
        schema = media.get('schema') if isinstance(media, Mapping) else None
        return self.resolve_file_fields(schema) or None

    def resolve_file_fields(self, schema: Any, _seen: set[int] | None = None) -> list[FileField]:
        """Upload fields of a form schema, following references and allOf members."""
        seen = _seen if _seen is not None else set()
        schema = self.resolver.resolve_ref(schema)
        if not isinstance(schema, Mapping) or id(schema) in seen:
            return []
        seen.add(id(schema))

        fields = []
        props = schema.get('properties')
        if isinstance(props, Mapping):
            for name, prop in props.items():
                if isinstance(prop, Mapping) and self._is_file_property(prop):
                    fields.append(
                        FileField(
                            title=str(name),
                            multiple=prop.get('type') in ('string[]', 'array'),
                        )
                    )
        for member in schema.get('allOf') or []:
            fields.extend(self.resolve_file_fields(member, seen))
        return fields

    # -------------------------------------------------------------------------
    # Response
    # -------------------------------------------------------------------------

    def get_response_tp(self, responses: Any = None) -> ResponseInfo:
        if not isinstance(responses, Mapping):
            return ResponseInfo()

        response = None
        for code in ('default', '200', 200, '201', 201):
            response = responses.get(code)
            if response:
                break

        response = self.resolver.resolve_ref(response)
        if not isinstance(response, Mapping):
            return ResponseInfo()
        content = response.get('content')
        if not isinstance(content, Mapping) or not content:
            return ResponseInfo()

        media_type = next(iter(content))
        media = content[media_type]
        schema = (media.get('schema') if isinstance(media, Mapping) else None) or DEFAULT_SCHEMA

        if self.config.data_fields and SchemaResolver.ref_name(schema):
            component = self.resolver.get_component_schema(SchemaResolver.ref_name(schema))
            if (
                isinstance(component, Mapping)
                and component.get('type') == 'object'
                and isinstance(component.get('properties'), Mapping)
            ):
                envelope = component['properties']
                schema = next(
                    (envelope[f] for f in self.config.data_fields if envelope.get(f)), schema
                )

        return ResponseInfo(media_type=str(media_type), type=self.get_type(schema))

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------

    def _prefix_path(
        self, formatted_path: str, method: str, tag: str, function_name: str
    ) -> str:
        """Put the configured prefix in front of a formatted path.

        A quoted prefix is a literal and is skipped when the path already
        starts with it; anything else is an expression rendered as ``${expr}``.
        """
        api_prefix = self.config.api_prefix
        if not api_prefix:
            return formatted_path

        if callable(api_prefix):
            context = {
                'path': formatted_path,
                'method': method,
                'namespace': tag,
                'function_name': function_name,
            }
            prefix = str(api_prefix(context) or '').strip()
        else:
            prefix = api_prefix.strip()

        if not prefix:
            return formatted_path

        if prefix[0] in '\'"`':
            literal = prefix[1:-1]
            if formatted_path.startswith(literal) or formatted_path.startswith(f'/{literal}'):
                return formatted_path
            return f'{literal}{formatted_path}'

        return f'${{{prefix}}}{formatted_path}'

    def _matches_generate_apis(self, path: str) -> bool:
        if not self.generate_apis:
            return True
        normalized = _PATH_TOKEN_RE.sub('__', path)
        return any(normalized.endswith(api) for api in self.generate_apis)
