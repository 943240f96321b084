"""Exceptions raised by the interview practice engine and its collaborators."""


class InterviewPrepError(Exception):
    """Base exception for interview prep errors."""
    pass


class ConfigurationError(InterviewPrepError):
    """Session configuration failed validation before any network call."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid session configuration")


class ServiceError(InterviewPrepError):
    """A collaborator service was unreachable or answered with an error."""

    def __init__(self, message: str, status_code: int = None):
        self.status_code = status_code
        super().__init__(message)


class GenerationError(InterviewPrepError):
    """Question generation failed or returned an unusable payload."""
    pass


class EvaluationError(InterviewPrepError):
    """Answer evaluation failed or returned an unusable payload."""
    pass
