"""Template rendering and output of the generated TypeScript services.

This module provides the CodeEmitter interface and concrete implementations
for emitting generated code to disk (FileEmitter) or to memory
(StringEmitter). Both render the same Jinja2 templates.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, TemplateNotFound
from upath import UPath

from svcgen.codegen.utils import get_final_file_name
from svcgen.exceptions import CodeGenerationError, OutputError

if TYPE_CHECKING:
    from svcgen.codegen.endpoints import ApiEntry, TagGroup
    from svcgen.codegen.models import NamedTypeDeclaration

__all__ = [
    'TEMPLATES_DIR',
    'CodeEmitter',
    'FileEmitter',
    'StringEmitter',
    'TemplateRenderer',
    'TemplateType',
]

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / 'templates'

TemplateType = Literal['interface', 'serviceController', 'apiIndex', 'serviceIndex']


class TemplateRenderer:
    """Renders the bundled templates, or overrides found in a templates folder.

    Output is not escaped: the templates produce TypeScript, not HTML.
    """

    def __init__(self, templates_folder: str | Path | None = None):
        loaders = []
        if templates_folder:
            loaders.append(FileSystemLoader(str(templates_folder)))
        loaders.append(FileSystemLoader(str(TEMPLATES_DIR)))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render(self, template: TemplateType, **context: Any) -> str:
        try:
            return self.env.get_template(f'{template}.jinja').render(**context)
        except TemplateNotFound as e:
            raise CodeGenerationError(
                f'Template {template!r} not found', context=template, cause=e
            ) from e


class CodeEmitter(ABC):
    """Abstract base class for code emitters.

    A CodeEmitter renders the declarations and tag groups of a generation
    run and hands every rendered file to :meth:`write`, which decides where
    the text goes.
    """

    def __init__(
        self,
        namespace: str = 'API',
        request_import_statement: str = "import { request } from 'umi';",
        nullable: bool = False,
        templates_folder: str | Path | None = None,
    ):
        self.namespace = namespace
        self.request_import_statement = request_import_statement
        self.nullable = nullable
        self.renderer = TemplateRenderer(templates_folder)

    @abstractmethod
    def write(self, relative_path: str, content: str) -> str:
        """Store one rendered file.

        Args:
            relative_path: POSIX path of the file below the project directory.
            content: The rendered file content.

        Returns:
            Where the file went (a path or an identifier).
        """
        pass

    def emit_declarations(self, declarations: list['NamedTypeDeclaration']) -> str:
        content = self.renderer.render(
            'interface',
            namespace=self.namespace,
            nullable=self.nullable,
            list=declarations,
        )
        return self.write('typings.d.ts', content)

    def emit_service(self, group: 'TagGroup', entry: 'ApiEntry') -> str:
        """Emit the service file of one API entry inside its class directory."""
        content = self.renderer.render(
            'serviceController',
            namespace=self.namespace,
            request_import_statement=self.request_import_statement,
            gen_type=group.gen_type,
            class_name=group.class_name,
            instance_name=group.instance_name,
            list=[entry],
        )
        file_name = get_final_file_name(f'{entry.function_name}.ts')
        return self.write(f'{group.class_name}/{file_name}', content)

    def emit_api_index(self, group: 'TagGroup') -> str:
        items = [
            {
                'controller_name': entry.function_name,
                'file_name': get_final_file_name(entry.function_name),
            }
            for entry in sorted(group.entries, key=lambda e: e.function_name)
        ]
        content = self.renderer.render('apiIndex', list=items)
        return self.write(f'{group.class_name}/index.ts', content)

    def emit_service_index(self, groups: list['TagGroup']) -> str:
        items = [
            {'controller_name': name, 'file_name': name}
            for name in sorted({group.class_name for group in groups})
        ]
        content = self.renderer.render('serviceIndex', list=items)
        return self.write('index.ts', content)

    def emit_all(
        self,
        declarations: list['NamedTypeDeclaration'],
        groups: list['TagGroup'],
    ) -> list[str]:
        """Emit every file of a generation run.

        Returns:
            The locations returned by :meth:`write`, in emission order.
        """
        written = [self.emit_declarations(declarations)]
        for group in groups:
            for entry in group.entries:
                written.append(self.emit_service(group, entry))
            written.append(self.emit_api_index(group))
        written.append(self.emit_service_index(groups))
        return written


class FileEmitter(CodeEmitter):
    """Writes the generated files below ``<output>/<project_name>``.

    An existing file with the name of a generated file is removed before the
    new one is written.
    """

    def __init__(self, output_dir: str | Path | UPath, **kwargs: Any):
        """Initialize the file emitter.

        Args:
            output_dir: The project directory files are written into.
            **kwargs: Passed to :class:`CodeEmitter`.
        """
        super().__init__(**kwargs)
        self.output_dir = UPath(output_dir)
        self._written_files: list[str] = []

    def write(self, relative_path: str, content: str) -> str:
        file_path = self.output_dir / relative_path
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            if file_path.exists() and not file_path.is_dir():
                file_path.unlink()
            file_path.write_text(content, encoding='utf-8')
        except OSError as e:
            raise OutputError(str(file_path), cause=e) from e

        logger.info('Generated %s', file_path)
        self._written_files.append(str(file_path))
        return str(file_path)

    def get_written_files(self) -> list[str]:
        return self._written_files.copy()


class StringEmitter(CodeEmitter):
    """Keeps the rendered files in memory, keyed by relative path.

    Useful for testing or for previewing a generation run.
    """

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self._files: dict[str, str] = {}

    def write(self, relative_path: str, content: str) -> str:
        self._files[relative_path] = content
        return relative_path

    def get_file(self, relative_path: str) -> str | None:
        return self._files.get(relative_path)

    def get_all_files(self) -> dict[str, str]:
        return self._files.copy()
