"""Custom exceptions for svcgen.

This module defines the hierarchy of exceptions raised while loading an
OpenAPI document, resolving it into declarations and API entries, and
writing the generated TypeScript services.
"""


class SvcgenError(Exception):
    """Base exception for all svcgen errors.

    Example:
        try:
            codegen.generate()
        except SvcgenError as e:
            print(f"svcgen error: {e}")
    """

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class SchemaError(SvcgenError):
    """Base exception for schema-related errors."""

    pass


class SchemaLoadError(SchemaError):
    """Failed to load an OpenAPI document from a source.

    Attributes:
        source: The source path or URL that failed to load.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, source: str, cause: Exception | None = None):
        self.source = source
        self.cause = cause
        message = f"Failed to load schema from '{source}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class SchemaResolutionError(SchemaError):
    """A `$ref` pointer does not lead to an existing node of the document.

    The whole generation run is expected to abort on this error.

    Attributes:
        reference: The $ref string that could not be resolved.
        reason: Explanation of why the reference couldn't be resolved.
    """

    def __init__(self, reference: str, reason: str | None = None):
        self.reference = reference
        self.reason = reason
        message = f"Failed to resolve reference '{reference}'"
        if reason:
            message += f': {reason}'
        super().__init__(message)


class CyclicReferenceError(SchemaResolutionError):
    """A chain of `$ref` pointers leads back to itself.

    Attributes:
        chain: The pointers visited before the cycle closed, in order.
    """

    def __init__(self, reference: str, chain: list[str] | None = None):
        self.chain = list(chain or [])
        reason = 'reference cycle'
        if self.chain:
            reason += f' ({" -> ".join(self.chain + [reference])})'
        super().__init__(reference, reason)


class CodeGenerationError(SvcgenError):
    """Error during code generation.

    Attributes:
        context: Additional context about what was being generated.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self, message: str, context: str | None = None, cause: Exception | None = None
    ):
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f'{message} (while generating {context})'
        if cause:
            full_message += f': {cause}'
        super().__init__(full_message)


class EndpointGenerationError(CodeGenerationError):
    """Error building the API entry of one operation.

    Attributes:
        operation_id: The operationId (or function name) of the operation.
        method: The HTTP method of the operation.
        path: The URL path of the operation.
    """

    def __init__(
        self,
        operation_id: str,
        method: str | None = None,
        path: str | None = None,
        cause: Exception | None = None,
    ):
        self.operation_id = operation_id
        self.method = method
        self.path = path
        message = f"Failed to generate service function '{operation_id}'"
        if method and path:
            message += f' ({method.upper()} {path})'
        super().__init__(message, cause=cause)


class ConfigurationError(SvcgenError):
    """Error in configuration.

    Attributes:
        config_path: The path to the configuration file, if applicable.
        field: The specific configuration field that is invalid.
    """

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        full_message = message
        if config_path:
            full_message = f"{message} in '{config_path}'"
        if field:
            full_message += f' (field: {field})'
        super().__init__(full_message)


class OutputError(SvcgenError):
    """Error writing generated output.

    Attributes:
        output_path: The path where output was being written.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, output_path: str, cause: Exception | None = None):
        self.output_path = output_path
        self.cause = cause
        message = f"Failed to write output to '{output_path}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)
