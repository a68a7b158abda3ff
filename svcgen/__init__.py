"""svcgen - Generate typed TypeScript services from OpenAPI specifications.

svcgen reads an OpenAPI 3 (or Swagger 2) document and generates a
``typings.d.ts`` file with one declaration per schema plus one request
function per operation, grouped into a directory per tag.

Quick Start:
    >>> from svcgen import Codegen, DocumentConfig
    >>>
    >>> config = DocumentConfig(
    ...     source="https://api.example.com/openapi.json",
    ...     output="./src/service"
    ... )
    >>> codegen = Codegen(config)
    >>> codegen.generate()

CLI Usage:
    $ svcgen generate --config svcgen.yaml
    $ svcgen inspect ./api.yaml  # Show tag groups and declarations
"""

from importlib.metadata import PackageNotFoundError, version

from svcgen.codegen import (
    Codegen,
    DefaultNamingStrategy,
    HookNamingStrategy,
    NamingStrategy,
    SchemaLoader,
    SchemaResolver,
    TypeResolver,
)
from svcgen.config import CodegenConfig, DocumentConfig, get_config
from svcgen.exceptions import (
    CodeGenerationError,
    ConfigurationError,
    CyclicReferenceError,
    EndpointGenerationError,
    OutputError,
    SchemaError,
    SchemaLoadError,
    SchemaResolutionError,
    SvcgenError,
)

__all__ = [
    # Main classes
    'Codegen',
    'SchemaLoader',
    'SchemaResolver',
    'TypeResolver',
    'NamingStrategy',
    'DefaultNamingStrategy',
    'HookNamingStrategy',
    # Configuration
    'CodegenConfig',
    'DocumentConfig',
    'get_config',
    # Exceptions
    'SvcgenError',
    'SchemaError',
    'SchemaLoadError',
    'SchemaResolutionError',
    'CyclicReferenceError',
    'CodeGenerationError',
    'EndpointGenerationError',
    'ConfigurationError',
    'OutputError',
]

try:
    __version__ = version('svcgen')
except PackageNotFoundError:
    __version__ = 'unknown'
