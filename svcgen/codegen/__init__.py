"""Code generation module for svcgen.

This module turns an OpenAPI/Swagger document into TypeScript declarations
and request functions.

Main Components:
    - Codegen: The main orchestrator for code generation
    - SchemaLoader: Loads OpenAPI documents from URLs or files
    - SchemaResolver: Resolves $ref pointers inside a document
    - TypeResolver: Resolves schema nodes into TypeScript types
    - DeclarationBuilder: Builds the named type declarations
    - OperationGrouper: Groups operations by tag into API entries
    - CodeEmitter: Handles output of generated code

Example:
    >>> from svcgen.codegen import Codegen
    >>> from svcgen.config import DocumentConfig
    >>>
    >>> config = DocumentConfig(
    ...     source="./openapi.json",
    ...     output="./src/service"
    ... )
    >>> codegen = Codegen(config)
    >>> codegen.generate()
"""

from svcgen.codegen.codegen import Codegen
from svcgen.codegen.emitter import CodeEmitter, FileEmitter, StringEmitter
from svcgen.codegen.endpoints import (
    ApiEntry,
    FileField,
    GatewayMapping,
    OperationGrouper,
    Parameter,
    RequestBodyInfo,
    ResponseInfo,
    ServiceModel,
    TagGroup,
)
from svcgen.codegen.models import (
    DeclarationBuilder,
    NamedTypeDeclaration,
    PropertyDeclaration,
)
from svcgen.codegen.naming import (
    DefaultNamingStrategy,
    FunctionNameRegistry,
    FunctionNamer,
    HookNamingStrategy,
    NamingStrategy,
    OperationInfo,
)
from svcgen.codegen.schema import SchemaLoader, SchemaResolver
from svcgen.codegen.types import SchemaKind, TypeDescriptor, TypeResolver
from svcgen.codegen.utils import resolve_type_name

__all__ = [
    # Main classes
    'Codegen',
    'SchemaLoader',
    'SchemaResolver',
    'TypeResolver',
    'DeclarationBuilder',
    'OperationGrouper',
    # Emitters
    'CodeEmitter',
    'FileEmitter',
    'StringEmitter',
    # Naming
    'NamingStrategy',
    'DefaultNamingStrategy',
    'HookNamingStrategy',
    'FunctionNameRegistry',
    'FunctionNamer',
    'OperationInfo',
    'resolve_type_name',
    # Model
    'ApiEntry',
    'FileField',
    'GatewayMapping',
    'NamedTypeDeclaration',
    'Parameter',
    'PropertyDeclaration',
    'RequestBodyInfo',
    'ResponseInfo',
    'SchemaKind',
    'ServiceModel',
    'TagGroup',
    'TypeDescriptor',
]
