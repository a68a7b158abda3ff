"""Identifier helpers for turning raw OpenAPI names into TypeScript names.

The functions here are pure: the same input always yields the same output and
no collision bookkeeping happens at this level (see
:class:`svcgen.codegen.naming.FunctionNameRegistry` for that).
"""

import logging
import re
import unicodedata

from pypinyin import lazy_pinyin

__all__ = (
    'RESERVED_WORDS',
    'RESERVED_PREFIX',
    'NUMERIC_NAME_PREFIX',
    'get_final_file_name',
    'is_reserved_word',
    'remove_accents',
    'replace_dot',
    'resolve_type_name',
    'strip_dot',
    'to_lower_first',
    'to_upper_first',
)

logger = logging.getLogger(__name__)

# ECMAScript 5 reserved words and literals.
RESERVED_WORDS: frozenset[str] = frozenset({
    'break',
    'case',
    'catch',
    'class',
    'const',
    'continue',
    'debugger',
    'default',
    'delete',
    'do',
    'else',
    'enum',
    'export',
    'extends',
    'false',
    'finally',
    'for',
    'function',
    'if',
    'import',
    'in',
    'instanceof',
    'new',
    'null',
    'return',
    'super',
    'switch',
    'this',
    'throw',
    'true',
    'try',
    'typeof',
    'var',
    'void',
    'while',
    'with',
})

RESERVED_PREFIX = '__openAPI__'
NUMERIC_NAME_PREFIX = 'Pinyin_'

_SEPARATOR_RE = re.compile(r'[-_ ]+([A-Za-z0-9])')
_SINGLE_SEPARATOR_RE = re.compile(r'[-_ ]([A-Za-z0-9_])')
_DOT_SEPARATOR_RE = re.compile(r'[-_ .]+([A-Za-z0-9])')
_INVALID_CHARS_RE = re.compile(r'[^A-Za-z0-9_\s\u4e00-\u9fa5]')
_CJK_RE = re.compile(r'[\u3220-\ufa29]')
_LEADING_DIGIT_RE = re.compile(r'^[0-9]')
_WHITESPACE_RE = re.compile(r'\s+')


def is_reserved_word(name: str) -> bool:
    return name in RESERVED_WORDS


def remove_accents(input_str):
    nfkd_form = unicodedata.normalize('NFKD', input_str)
    return ''.join(c for c in nfkd_form if not unicodedata.combining(c))


def to_upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def to_lower_first(text: str) -> str:
    return text[:1].lower() + text[1:]


def _upper_group(match: re.Match) -> str:
    return match.group(1).upper()


def resolve_type_name(type_name: str, namespace: str = '') -> str:
    """Convert a raw schema, tag or path-segment name into a type identifier.

    Reserved words are prefixed with ``__openAPI__``. Otherwise the last
    ``/``-separated part before any ``,`` is camel-cased, reduced to
    word/CJK characters and stripped of the namespace. Names that end up
    empty or start with a digit (usually a sign of a non-Latin source name)
    get the ``Pinyin_`` marker; names that still contain CJK characters are
    transliterated to pinyin.

    Args:
        type_name: The raw name.
        namespace: The active namespace, removed from the result.

    Returns:
        A legal TypeScript identifier.
    """
    if is_reserved_word(type_name):
        return f'{RESERVED_PREFIX}{type_name}'

    last_name = type_name.replace('[[', '_').split('/')[-1].split(',')[0]

    name = _SEPARATOR_RE.sub(_upper_group, remove_accents(last_name))
    name = _INVALID_CHARS_RE.sub('', name)
    if namespace:
        # Removing one occurrence can join the text around it into another
        while namespace in name:
            name = name.replace(namespace, '')

    if not name.strip() or name == '_' or _LEADING_DIGIT_RE.match(name):
        logger.warning(
            'Model name %r starts with a number or is empty; the schema name is '
            'probably not Latin. Prefixing it with %r.',
            type_name,
            NUMERIC_NAME_PREFIX,
        )
        return f'{NUMERIC_NAME_PREFIX}{_WHITESPACE_RE.sub("", name)}'

    name = _WHITESPACE_RE.sub('', name)
    if not _CJK_RE.search(name):
        return name

    return ''.join(lazy_pinyin(name))


def strip_dot(text: str) -> str:
    """Camel-case an operationId and drop characters a function name can't hold."""
    name = _DOT_SEPARATOR_RE.sub(_upper_group, text)
    name = re.sub(r'[^A-Za-z0-9_$]', '', name)
    return name.lstrip('0123456789')


def get_final_file_name(text: str) -> str:
    return re.sub(r'[-_ ]', '', text)


def replace_dot(text: str) -> str:
    return _SINGLE_SEPARATOR_RE.sub(_upper_group, text.replace('.', '_'))
