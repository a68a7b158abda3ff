from typing import Annotated

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from svcgen.codegen.codegen import Codegen
from svcgen.config import DocumentConfig, get_config
from svcgen.exceptions import SvcgenError

console = Console()
app = typer.Typer(
    name='svcgen',
    help='Generate TypeScript services from OpenAPI specifications',
    no_args_is_help=True,
)


@app.command()
def generate(
    config: Annotated[
        str | None,
        typer.Option(
            '--config', '-c', help='Path to configuration file (YAML or JSON)'
        ),
    ] = None,
) -> None:
    """Generate TypeScript services from configuration.

    If no config file is specified, will look for svcgen.yaml in the
    current directory or a [tool.svcgen] table in pyproject.toml.

    Examples:
        svcgen generate
        svcgen generate --config my-config.yaml
        svcgen generate -c config.json
    """
    try:
        codegen_config = get_config(config)

        for document_config in codegen_config.documents:
            with Progress(
                SpinnerColumn(),
                TextColumn('[progress.description]{task.description}'),
                console=console,
            ) as progress:
                task = progress.add_task(
                    f'Generating services for {document_config.source} in {document_config.project_path}...',
                    total=None,
                )

                written = Codegen(document_config).generate()

                progress.update(
                    task,
                    description=f'Code generation completed for {document_config.source}!',
                )
            console.print('[dim]Generated files:[/dim]')
            for path in written:
                console.print(f'  - {path}')

    except SvcgenError as e:
        console.print(f'[red]Error:[/red] {e}')
        raise typer.Exit(1)


@app.command()
def inspect(
    source: Annotated[str, typer.Argument(help='Path or URL of the OpenAPI document')],
    namespace: Annotated[
        str, typer.Option('--namespace', '-n', help='Namespace of the generated types')
    ] = 'API',
) -> None:
    """Show the tag groups and declarations a document resolves to.

    Nothing is written.

    Examples:
        svcgen inspect ./openapi.yaml
        svcgen inspect https://petstore3.swagger.io/api/v3/openapi.json -n PET
    """
    try:
        model = Codegen(DocumentConfig(source=source, namespace=namespace)).build_model()
    except SvcgenError as e:
        console.print(f'[red]Error:[/red] {e}')
        raise typer.Exit(1)

    operations = Table(title='Operations')
    operations.add_column('Class')
    operations.add_column('Function')
    operations.add_column('Method')
    operations.add_column('Path')
    operations.add_column('Response')
    for group in model.tag_groups:
        for entry in group.entries:
            operations.add_row(
                group.class_name,
                entry.function_name,
                entry.method.upper(),
                entry.path,
                entry.response.type,
            )
    console.print(operations)

    declarations = Table(title='Declarations')
    declarations.add_column('Type')
    declarations.add_column('Kind')
    declarations.add_column('Extends')
    for declaration in model.declarations:
        declarations.add_row(
            declaration.type_name,
            declaration.kind,
            ', '.join(declaration.parents),
        )
    console.print(declarations)


@app.command()
def version() -> None:
    """Show the version of svcgen."""
    from svcgen import __version__

    console.print(f'svcgen version: {__version__}')


if __name__ == '__main__':
    app()
