"""
Custom exceptions for Verb Flow.
"""


class VerbFlowException(Exception):
    """Base exception for all Verb Flow exceptions."""
    pass


class NotAVerbError(VerbFlowException):
    """Raised when an infinitive does not end in -ar, -er or -ir."""

    def __init__(self, infinitive: str):
        self.infinitive = infinitive
        super().__init__(f"Not a verb: {infinitive!r}")


class InvalidGradeError(VerbFlowException):
    """Raised when a review grade is outside 1-4."""

    def __init__(self, grade):
        self.grade = grade
        super().__init__(f"Invalid grade: {grade}")


class EntityNotFoundError(VerbFlowException):
    """Raised when a card or deck id has no record."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class ArtifactUnavailableError(VerbFlowException):
    """Raised when the static conjugation artifact cannot be loaded."""
    pass


class PersistenceFailure(VerbFlowException):
    """Raised when a multi-record write fails and is rolled back."""
    pass


class ConflictError(VerbFlowException):
    """Raised when a record with the same unique name already exists."""
    pass
