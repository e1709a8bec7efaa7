"""Errors raised while synthesizing interface models.

Every error aborts the whole generation run. The traversal driver fills in
the resource path and action verb before the error escapes.
"""


class GenerationError(Exception):
    """Base class for all generation failures."""

    def __init__(self, message: str, identity: str | None = None):
        super().__init__(message)
        self.message = message
        self.identity = identity
        self.resource_path: str | None = None
        self.verb: str | None = None

    def add_context(self, resource_path: str | None = None, verb: str | None = None) -> None:
        """Record where the error happened, keeping the innermost location."""
        if self.resource_path is None:
            self.resource_path = resource_path
        if self.verb is None:
            self.verb = verb

    def __str__(self) -> str:
        where = []
        if self.verb:
            where.append(self.verb.upper())
        if self.resource_path:
            where.append(self.resource_path)
        prefix = f"[{' '.join(where)}] " if where else ""
        suffix = f" ({self.identity})" if self.identity else ""
        return f"{prefix}{self.message}{suffix}"


class DescriptionError(GenerationError):
    """The API description document is malformed."""


class TemplateResolutionError(GenerationError):
    """A resource type or trait cannot be turned into a parameter type."""


class DuplicateParameterNameError(GenerationError):
    """Two parameters of one method normalize to the same identifier."""


class DuplicateMethodNameError(GenerationError):
    """Two methods of one interface or wrapper resolve to the same identifier."""


class DuplicateInterfaceNameError(GenerationError):
    """Two resources resolve to the same interface name."""


class UnsupportedResponseShapeError(GenerationError):
    """A response body variant has no resolved semantic type."""
