"""Exceptions raised by the annotation engine."""


class AnnotationError(Exception):
    """Base class for annotation engine errors."""


class ValidationError(AnnotationError):
    """A selection cannot become an annotation of the requested kind."""


class OverlapConflictError(AnnotationError):
    """A selection partially overlaps an existing annotation."""

    def __init__(self, message: str, conflicting_id: str):
        self.conflicting_id = conflicting_id
        super().__init__(message)


class StaleRangeError(AnnotationError):
    """Anchors or markup can no longer be resolved in the host content."""


class MetadataFetchError(AnnotationError):
    """The translation service failed to provide metadata for an annotation."""

    def __init__(self, annotation_id: str, reason: str):
        self.annotation_id = annotation_id
        self.reason = reason
        super().__init__(f'Metadata for annotation "{annotation_id}" unavailable: {reason}')


class PersistenceError(AnnotationError):
    """A storage write failed."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Persistence operation {operation} failed: {reason}")
