"""Exceptions raised by swagger-forge."""


class SwaggerForgeError(Exception):
    """Base class for swagger-forge errors."""


class DereferenceError(SwaggerForgeError):
    """A finished document could not be flattened into inline schemas."""

    def __init__(self, message: str = "failed to dereference schema", pointer: str | None = None):
        super().__init__(message)
        self.pointer = pointer


class EndpointLoadError(SwaggerForgeError):
    """The CLI could not import an endpoint list from a MODULE:ATTR reference."""

    def __init__(self, target: str, message: str):
        super().__init__(f"Cannot load endpoints from '{target}': {message}")
        self.target = target
