class CVServiceError(RuntimeError):
    """Base class for failures raised by the CV analysis/enhancement core."""


class ConfigurationError(CVServiceError):
    """Raised when the completion service credential is missing. Never retried."""


class TransportError(CVServiceError):
    """Raised when a completion could not be retrieved.

    Retried by the retry orchestrator; surfaced only once every attempt failed.
    """


class NetworkError(TransportError):
    """Raised when the outbound call errors or answers with a non-success status."""

    def __init__(self, status_code: int | None, body: str):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            super().__init__(f"Completion request failed: {body}")
        else:
            super().__init__(f"Completion API error: {status_code} {body}")


class CompletionTimeoutError(TransportError):
    """Raised when the completion did not arrive within the timeout."""


class EmptyResponseError(TransportError):
    """Raised when a successful response carries no text."""


class MalformedOutputError(CVServiceError):
    """Raised when a completion is not parseable JSON, even after repair."""


class QualityShortfallError(CVServiceError):
    """Raised when an enhancement candidate fails a quality check."""
