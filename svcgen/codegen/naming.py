"""Function, type and class naming for API operations.

This module provides:
- OperationInfo: one (path, method) operation of the document
- NamingStrategy: the pluggable naming hooks (default and callable-backed)
- FunctionNameRegistry: per-tag-group function name de-duplication
- FunctionNamer: derives function and parameter-type names for operations
"""

import dataclasses
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from svcgen.codegen.utils import (
    is_reserved_word,
    resolve_type_name,
    strip_dot,
    to_lower_first,
    to_upper_first,
)

__all__ = [
    'DefaultNamingStrategy',
    'FunctionNameRegistry',
    'FunctionNamer',
    'HookNamingStrategy',
    'NamingStrategy',
    'OperationInfo',
    'get_base_prefix',
]

_PATH_PARAM_SEGMENT_RE = re.compile(r'\{(.+)\}|:(.+)')


@dataclasses.dataclass(frozen=True)
class OperationInfo:
    """One operation of the document, identified by (path, method).

    Attributes:
        path: The path template as written in the document.
        method: Lower-case HTTP method.
        operation: The raw operation object.
        path_item: The raw path item the operation belongs to.
    """

    path: str
    method: str
    operation: Mapping[str, Any]
    path_item: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def operation_id(self) -> str | None:
        operation_id = self.operation.get('operationId')
        return operation_id if isinstance(operation_id, str) and operation_id else None

    @property
    def tags(self) -> list[str]:
        return [str(t) for t in self.operation.get('tags') or []]

    @property
    def summary(self) -> str | None:
        return self.operation.get('summary')

    @property
    def description(self) -> str | None:
        return self.operation.get('description')

    def as_dict(self) -> dict[str, Any]:
        """The operation object merged with its path and method."""
        return {**self.operation, 'path': self.path, 'method': self.method}


class NamingStrategy(ABC):
    """Overrides for the names given to generated functions, types and classes.

    Every method returns None to keep the default name.
    """

    @abstractmethod
    def function_name(self, operation: OperationInfo) -> str | None:
        pass

    @abstractmethod
    def type_name(self, operation: OperationInfo) -> str | None:
        pass

    @abstractmethod
    def class_name(self, tag: str) -> str | None:
        pass


class DefaultNamingStrategy(NamingStrategy):
    def function_name(self, operation: OperationInfo) -> str | None:
        return None

    def type_name(self, operation: OperationInfo) -> str | None:
        return None

    def class_name(self, tag: str) -> str | None:
        return None


class HookNamingStrategy(NamingStrategy):
    """Naming strategy backed by plain callables.

    Example:
        >>> strategy = HookNamingStrategy(
        ...     custom_function_name=lambda op: op.operation_id.split('Using')[0],
        ...     custom_class_name=lambda tag: tag.title(),
        ... )
    """

    def __init__(
        self,
        custom_function_name: Callable[[OperationInfo], str | None] | None = None,
        custom_type_name: Callable[[OperationInfo], str | None] | None = None,
        custom_class_name: Callable[[str], str | None] | None = None,
    ):
        self.custom_function_name = custom_function_name
        self.custom_type_name = custom_type_name
        self.custom_class_name = custom_class_name

    def function_name(self, operation: OperationInfo) -> str | None:
        if self.custom_function_name is None:
            return None
        return self.custom_function_name(operation) or None

    def type_name(self, operation: OperationInfo) -> str | None:
        if self.custom_type_name is None:
            return None
        return self.custom_type_name(operation) or None

    def class_name(self, tag: str) -> str | None:
        if self.custom_class_name is None:
            return None
        return self.custom_class_name(tag) or None


class FunctionNameRegistry:
    """Hands out unique function names within one tag group.

    The first claim of a name returns it unchanged, later claims get ``_2``,
    ``_3`` and so on, in claim order.
    """

    def __init__(self):
        self._counts: dict[str, int] = {}

    def claim(self, name: str) -> str:
        if not name:
            return name
        if name in self._counts:
            self._counts[name] += 1
            return f'{name}_{self._counts[name]}'
        self._counts[name] = 1
        return name


def get_base_prefix(paths: Iterable[str]) -> str:
    """Find the leading path segments shared by every path.

    >>> get_base_prefix(['/api/v1/users', '/api/v1/pets'])
    '/api/v1/'
    """
    columns: list[list[str]] = []
    for path in paths:
        for index, segment in enumerate(path.split('/')):
            if len(columns) <= index:
                columns.append([])
            columns[index].append(segment)

    shared = []
    for column in columns:
        distinct = set(column)
        if len(distinct) != 1:
            break
        shared.append(column[0])

    return '/'.join(shared) + '/'


def resolve_function_name(function_name: str, method: str) -> str:
    """Rename function names that collide with a reserved word."""
    if is_reserved_word(function_name):
        return f'{function_name}Using{method.upper()}'
    return function_name


class FunctionNamer:
    """Derives function names and parameter-type names for operations.

    Args:
        namespace: The configured namespace.
        paths: Every path of the document, used to detect the common prefix.
        naming: The naming strategy consulted before the defaults.
        max_length: Names longer than this that contain the namespace are
                    shortened to the method plus the text after it.
    """

    def __init__(
        self,
        namespace: str,
        paths: Iterable[str],
        naming: NamingStrategy | None = None,
        max_length: int = 20,
    ):
        self.namespace = namespace or ''
        self.naming = naming or DefaultNamingStrategy()
        self.max_length = max_length
        self.base_prefix = get_base_prefix(paths)

    def default_function_name(self, path: str) -> str:
        """Build an UpperCamel name from the path segments after the base prefix.

        ``/api/v1/users/{id}/orders`` with base prefix ``/api/v1/`` gives
        ``UsersByIdOrders``.
        """
        parts = []
        for segment in path.replace(self.base_prefix, '', 1).split('/'):
            if not segment:
                continue
            param = _PATH_PARAM_SEGMENT_RE.fullmatch(segment)
            if param:
                name = resolve_type_name(param.group(1) or param.group(2), self.namespace)
                parts.append(f'By{to_upper_first(name)}')
            else:
                parts.append(to_upper_first(resolve_type_name(segment, self.namespace)))
        return ''.join(parts)

    def function_name(self, operation: OperationInfo) -> str:
        name = self.naming.function_name(operation)
        if not name and operation.operation_id:
            name = resolve_function_name(
                strip_dot(operation.operation_id), operation.method
            )
        if not name:
            name = operation.method + self.default_function_name(operation.path)

        if self.namespace:
            index = name.lower().rfind(self.namespace.lower())
            if index != -1 and len(name) > self.max_length:
                name = operation.method + name[index + len(self.namespace) :]

        return to_lower_first(name)

    def type_name(self, operation: OperationInfo) -> str:
        """Name of the type holding the operation's parameters."""
        prefix = f'{self.namespace}.' if self.namespace else ''
        base = self.naming.type_name(operation) or self.function_name(operation)
        return resolve_type_name(f'{prefix}{base}Params', self.namespace)

    def class_name(self, tag: str, default: str) -> str:
        return self.naming.class_name(tag) or default
