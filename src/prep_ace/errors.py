"""Exception types shared across the engine."""


class PrepAceError(Exception):
    """Base class for errors raised by prep_ace."""


class ValidationError(PrepAceError):
    """User input or generated content failed validation."""


class InvalidQuestionError(ValidationError):
    """A generated question violates the question shape."""


class GenerationError(PrepAceError):
    """The generation provider failed or returned unusable output."""
