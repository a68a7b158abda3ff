import json
import os
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from svcgen.codegen.naming import DefaultNamingStrategy, NamingStrategy
from svcgen.exceptions import ConfigurationError

DEFAULT_FILENAMES = ['svcgen.yaml', 'svcgen.yml']

_ENV_VAR_RE = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

ApiPrefix = str | Callable[[dict[str, Any]], str]


class DocumentConfig(BaseModel):
    """Represents a single document to be processed."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    source: str = Field(..., description='Path or URL to the OpenAPI document.')

    output: str = Field(
        './src/service',
        description='Directory the generated project directory is written into.',
    )

    project_name: str = Field(
        'api', description='Name of the generated project directory.'
    )

    namespace: str = Field(
        'API', description='Namespace that qualifies every generated type name.'
    )

    enum_style: Literal['enum', 'string-literal'] = Field(
        'string-literal',
        description='Render enum schemas as TypeScript enums or as literal unions.',
    )

    data_fields: list[str] | None = Field(
        None,
        description='Envelope properties whose schema is used as the response type; first match wins.',
    )

    api_prefix: ApiPrefix | None = Field(
        None,
        description='Literal (quoted) or expression prefix added in front of every path.',
    )

    generate_apis: list[str] = Field(
        default_factory=list,
        description='Only generate operations whose path ends with one of these paths.',
    )

    request_import_statement: str = Field(
        "import { request } from 'umi';",
        description='Import statement placed at the top of every service file.',
    )

    nullable: bool = Field(
        False, description='Emit `| null` for optional properties of declarations.'
    )

    generate_trace_id: bool = Field(
        False, description='Attach a stable hash of every API entry to its service function.'
    )

    templates_folder: str | None = Field(
        None, description='Directory holding templates that replace the bundled ones.'
    )

    function_name_max_length: int = Field(
        20,
        ge=0,
        description='Function names containing the namespace are shortened beyond this length.',
    )

    naming: NamingStrategy = Field(
        default_factory=DefaultNamingStrategy,
        description='Naming hooks for functions, parameter types and classes.',
    )

    @field_validator('generate_apis', mode='before')
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return value or []

    @property
    def project_path(self) -> Path:
        return Path(self.output) / self.project_name


class CodegenConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='SVCGEN_')

    documents: list[DocumentConfig] = Field(
        ..., description='List of OpenAPI documents to process.'
    )


def _expand_env_vars(value: str) -> str:
    """Replace ``${VAR}`` references with environment values.

    Unknown variables are left in place.
    """
    return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)


def _expand_env_vars_recursive(value: Any) -> Any:
    if isinstance(value, str):
        return _expand_env_vars(value)
    if isinstance(value, dict):
        return {k: _expand_env_vars_recursive(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars_recursive(v) for v in value]
    return value


def load_yaml(path: str | Path) -> dict:
    return yaml.safe_load(Path(path).read_text(encoding='utf-8')) or {}


def load_json(path: str | Path) -> dict:
    return json.loads(Path(path).read_text(encoding='utf-8'))


def _load_file(path: str | Path) -> dict:
    path = Path(path)
    if not path.exists():
        raise ConfigurationError('Configuration file not found', config_path=str(path))
    try:
        if path.suffix.lower() == '.json':
            return load_json(path)
        return load_yaml(path)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f'Configuration file is not valid: {e}', config_path=str(path)
        ) from e


def _validate(data: dict, config_path: str) -> CodegenConfig:
    try:
        return CodegenConfig.model_validate(_expand_env_vars_recursive(data))
    except ValidationError as e:
        raise ConfigurationError(str(e), config_path=config_path) from e


def get_config(path: str | None = None) -> CodegenConfig:
    """Load configuration from a file or from the current directory.

    Lookup order: the explicit path, ``svcgen.yaml``/``svcgen.yml`` in the
    working directory, then ``[tool.svcgen]`` in ``pyproject.toml``.

    Raises:
        ConfigurationError: If no configuration is found or it is invalid.
    """
    if path:
        return _validate(_load_file(path), str(path))

    cwd = Path(os.getcwd())

    for filename in DEFAULT_FILENAMES:
        candidate = cwd / filename
        if candidate.exists():
            return _validate(_load_file(candidate), str(candidate))

    pyproject_path = cwd / 'pyproject.toml'

    if pyproject_path.exists():
        import tomllib

        pyproject = tomllib.loads(pyproject_path.read_text(encoding='utf-8'))
        tools = pyproject.get('tool', {})

        if 'svcgen' in tools:
            return _validate(tools['svcgen'], str(pyproject_path))

    raise ConfigurationError('No svcgen configuration found', config_path=str(cwd))


def create_default_config(source: str, output: str = './src/service') -> CodegenConfig:
    return CodegenConfig(documents=[DocumentConfig(source=source, output=output)])
