"""Error taxonomy for pipeline runs.

Every error carries a ``kind`` so orchestrators can turn it into a
structured failure result and the HTTP layer can pick a status code.
"""

from enum import StrEnum


class FailureKind(StrEnum):
    """Machine-readable failure categories reported to callers."""

    CONFIGURATION_ERROR = "configuration_error"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    NO_CONTENT = "no_content"
    SYNTHESIS_ERROR = "synthesis_error"
    SYNTHESIS_FORMAT_ERROR = "synthesis_format_error"
    STORE_ERROR = "store_error"
    INTERNAL_ERROR = "internal_error"


class PipelineError(Exception):
    """Base class for all expected pipeline failures."""

    kind: FailureKind = FailureKind.INTERNAL_ERROR


class ConfigurationError(PipelineError):
    """Provider credentials or settings are missing."""

    kind = FailureKind.CONFIGURATION_ERROR


class BadRequest(PipelineError):
    """Caller supplied malformed input."""

    kind = FailureKind.BAD_REQUEST


class EventNotFound(PipelineError):
    """No event record exists for the identifier, or it has no query."""

    kind = FailureKind.NOT_FOUND


class NoContentExtracted(PipelineError):
    """No fetched article cleared the minimum-content threshold."""

    kind = FailureKind.NO_CONTENT


class SynthesisError(PipelineError):
    """The LLM call failed or returned nothing."""

    kind = FailureKind.SYNTHESIS_ERROR


class SynthesisFormatError(SynthesisError):
    """The LLM output did not contain a parseable JSON object."""

    kind = FailureKind.SYNTHESIS_FORMAT_ERROR


class StoreError(PipelineError):
    """A read or write against the event store failed."""

    kind = FailureKind.STORE_ERROR
