"""Main code generation orchestration for svcgen.

This module provides the Codegen class that runs one document through the
whole pipeline: loading, type declarations, operation grouping and template
emission.
"""

import logging
from typing import TYPE_CHECKING, Any

from svcgen.codegen.emitter import CodeEmitter, FileEmitter
from svcgen.codegen.endpoints import OperationGrouper, ServiceModel
from svcgen.codegen.models import DeclarationBuilder
from svcgen.codegen.naming import FunctionNamer
from svcgen.codegen.schema import SchemaLoader, SchemaResolver

if TYPE_CHECKING:
    from svcgen.config import DocumentConfig

__all__ = ['Codegen']

logger = logging.getLogger(__name__)


class Codegen:
    """Generates TypeScript services from an OpenAPI document.

    The whole model is resolved before anything is written: a reference that
    leads nowhere aborts the run without touching the output directory.

    Example:
        >>> from svcgen.config import DocumentConfig
        >>> from svcgen.codegen.codegen import Codegen
        >>>
        >>> config = DocumentConfig(source='./openapi.json', output='./src/service')
        >>> Codegen(config).generate()
    """

    def __init__(
        self,
        config: 'DocumentConfig',
        schema_loader: SchemaLoader | None = None,
        document: dict[str, Any] | None = None,
    ):
        """Initialize the code generator.

        Args:
            config: The document configuration.
            schema_loader: Loader used to read ``config.source``.
            document: An already parsed document; skips loading when given.
        """
        self.config = config
        self._schema_loader = schema_loader or SchemaLoader()
        self.document = document

    def _load_schema(self) -> dict[str, Any]:
        if self.document is None:
            logger.info('Loading OpenAPI document from %s', self.config.source)
            self.document = self._schema_loader.load(self.config.source)
        return self.document

    def build_model(self) -> ServiceModel:
        """Resolve the document into declarations and tag groups.

        Raises:
            SchemaLoadError: If the document cannot be loaded.
            SchemaResolutionError: If a reference leads nowhere.
            EndpointGenerationError: If an operation cannot be built.
        """
        document = self._load_schema()
        resolver = SchemaResolver(document)
        namer = FunctionNamer(
            self.config.namespace,
            (document.get('paths') or {}).keys(),
            self.config.naming,
            self.config.function_name_max_length,
        )

        declarations = DeclarationBuilder(
            document, self.config, resolver, namer
        ).get_interface_tp()

        grouper = OperationGrouper(document, self.config, resolver, namer)
        tag_groups = grouper.get_service_tp()

        return ServiceModel(
            declarations=declarations,
            tag_groups=tag_groups,
            mappings=grouper.mappings,
        )

    def create_emitter(self) -> CodeEmitter:
        return FileEmitter(
            self.config.project_path,
            namespace=self.config.namespace,
            request_import_statement=self.config.request_import_statement,
            nullable=self.config.nullable,
            templates_folder=self.config.templates_folder,
        )

    def generate(self, emitter: CodeEmitter | None = None) -> list[str]:
        """Generate the service files.

        Args:
            emitter: Where to emit; defaults to files below
                     ``<output>/<project_name>``.

        Returns:
            The locations of the emitted files.
        """
        model = self.build_model()
        emitter = emitter or self.create_emitter()
        written = emitter.emit_all(model.declarations, model.tag_groups)

        logger.info(
            'Generated %d declarations and %d service files for %s',
            len(model.declarations),
            sum(len(g.entries) for g in model.tag_groups),
            self.config.source,
        )
        return written
