"""
Exception taxonomy for the task parsing pipeline.

Generation, parse and validation failures are recoverable: the task
extractor falls back to the basic parser, and email triage callers
substitute a template reply.
"""


class TaskParsingError(Exception):
    """Base class for all recoverable parsing pipeline failures."""
    pass


class GenerationUnavailable(TaskParsingError):
    """The text-generation service could not produce a completion."""
    pass


class GenerationCancelled(GenerationUnavailable):
    """The caller abandoned the request while generation was in flight."""
    pass


class MalformedResponse(TaskParsingError):
    """No JSON object could be located in or parsed from model output."""
    pass


ParseError = MalformedResponse


class ValidationError(TaskParsingError):
    """Model output parsed as JSON but lacks required fields."""
    pass


class TriageError(TaskParsingError):
    """Email triage could not produce a usable result."""
    pass
