"""Schema loading and reference resolution for OpenAPI documents.

This module provides:
- SchemaLoader: reads an OpenAPI/Swagger document from a URL or a local
  JSON/YAML file into a plain dictionary
- SchemaResolver: dereferences local ``$ref`` pointers inside that dictionary
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
import yaml

from svcgen.exceptions import (
    CyclicReferenceError,
    SchemaLoadError,
    SchemaResolutionError,
)

logger = logging.getLogger(__name__)

__all__ = [
    'SchemaLoader',
    'SchemaResolver',
]


# =============================================================================
# Schema Loader
# =============================================================================


class SchemaLoader:
    """Loads OpenAPI documents from URLs or file paths.

    The document is returned as parsed, without validation: malformed
    constructs are left for the type resolution engine to degrade.

    Example:
        >>> loader = SchemaLoader()
        >>> document = loader.load('https://api.example.com/openapi.json')
        >>> # or
        >>> document = loader.load('/path/to/openapi.yaml')
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        base_path: str | Path | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the schema loader.

        Args:
            http_client: Optional HTTP client to use for URL requests.
            base_path: Base path for relative file sources. Defaults to the
                       current working directory.
            timeout: Timeout in seconds for the single HTTP request.
        """
        self._http_client = http_client
        self._base_path = Path(base_path) if base_path else Path.cwd()
        self._timeout = timeout

    def load(self, source: str) -> dict[str, Any]:
        """Load an OpenAPI document from a URL or file path.

        Args:
            source: URL or file path to the document.

        Returns:
            The parsed document.

        Raises:
            SchemaLoadError: If the document cannot be fetched, read or parsed,
                             or does not contain a mapping at its root.
        """
        try:
            if self._is_url(source):
                content = self._load_from_url(source)
            else:
                content = self._load_from_file(source)
        except SchemaLoadError:
            raise
        except Exception as e:
            raise SchemaLoadError(source, cause=e) from e

        if not isinstance(content, dict):
            raise SchemaLoadError(
                source, cause=ValueError('document root is not a mapping')
            )
        return content

    def _is_url(self, text: str) -> bool:
        """Check if a string is an http(s) URL."""
        try:
            result = urlparse(text)
            return result.scheme in ('http', 'https')
        except ValueError:
            return False

    def _load_from_url(self, url: str) -> Any:
        """Load document content from a URL with a single request."""
        try:
            if self._http_client:
                response = self._http_client.get(url)
            else:
                response = httpx.get(url, follow_redirects=True, timeout=self._timeout)

            response.raise_for_status()
            content_type = response.headers.get('content-type', '')
            content = response.text

            if 'yaml' in content_type or url.endswith(('.yaml', '.yml')):
                return yaml.safe_load(content)
            return json.loads(content)

        except httpx.HTTPError as e:
            raise SchemaLoadError(url, cause=e) from e
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SchemaLoadError(url, cause=e) from e

    def _load_from_file(self, file_path: str) -> Any:
        """Load document content from a file."""
        path = Path(file_path)
        if not path.is_absolute():
            path = self._base_path / path

        if not path.exists():
            raise SchemaLoadError(
                str(file_path), cause=FileNotFoundError(f'File not found: {path}')
            )

        try:
            content = path.read_text(encoding='utf-8')
            if path.suffix.lower() in ('.yaml', '.yml'):
                return yaml.safe_load(content)
            return json.loads(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SchemaLoadError(str(file_path), cause=e) from e
        except OSError as e:
            raise SchemaLoadError(str(file_path), cause=e) from e


# =============================================================================
# Schema Resolver
# =============================================================================


class SchemaResolver:
    """Resolves ``$ref`` pointers inside a loaded OpenAPI document.

    Only local pointers (``#/...``) are followed. Any path inside the document
    may be addressed, not just ``components/schemas``: request bodies,
    parameters and responses are referenced the same way. External pointers
    are handed back untouched.

    Example:
        >>> resolver = SchemaResolver(document)
        >>> resolver.resolve_ref({'$ref': '#/components/schemas/Pet'})
        {'type': 'object', 'properties': {...}}
    """

    def __init__(self, document: Mapping[str, Any]):
        """Initialize the schema resolver.

        Args:
            document: The OpenAPI document to resolve references against.
        """
        self.document = document

    def resolve_ref(self, node: Any) -> Any:
        """Return the node a reference points to, or ``node`` itself.

        Reference-to-reference chains are followed until a concrete node is
        reached.

        Args:
            node: Any document node.

        Returns:
            The concrete node.

        Raises:
            SchemaResolutionError: If a local pointer leads nowhere.
            CyclicReferenceError: If a pointer chain leads back to itself.
        """
        return self._resolve(node, [])

    def _resolve(self, node: Any, chain: list[str]) -> Any:
        if not isinstance(node, Mapping) or not node.get('$ref'):
            return node

        ref = node['$ref']
        if not isinstance(ref, str) or not ref.startswith('#'):
            logger.warning('External reference %r is not resolved', ref)
            return node

        if ref in chain:
            raise CyclicReferenceError(ref, chain)

        target = self._walk(ref)
        return self._resolve(target, chain + [ref])

    def _walk(self, ref: str) -> Any:
        """Follow a local JSON pointer from the document root."""
        current: Any = self.document
        for part in ref[1:].split('/'):
            if part == '':
                continue
            part = part.replace('~1', '/').replace('~0', '~')
            if isinstance(current, Mapping) and part in current:
                current = current[part]
            elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
                current = current[int(part)]
            else:
                raise SchemaResolutionError(ref, f"'{part}' not found")

        if current is None:
            raise SchemaResolutionError(ref, 'points to an empty node')
        return current

    @staticmethod
    def ref_name(node: Any) -> str | None:
        """Extract the last pointer segment of a reference node.

        Returns:
            The segment (e.g. ``'Pet'`` for ``#/components/schemas/Pet``), or
            None if the node is not a reference.
        """
        if not isinstance(node, Mapping) or not isinstance(node.get('$ref'), str):
            return None
        return node['$ref'].split('/')[-1]

    def get_all_schemas(self) -> dict[str, Any]:
        """Get all schemas defined in the components/schemas section.

        Returns:
            Dictionary mapping schema names to schemas, in document order.
            Returns an empty dict if no schemas are defined.
        """
        components = self.document.get('components') or {}
        return dict(components.get('schemas') or {})

    def get_component_schema(self, name: str) -> Any:
        """Get a component schema by name, or None if it isn't defined."""
        return self.get_all_schemas().get(name)
