"""
Error taxonomy for the review pipeline.

Every error carries the HTTP status it maps to and an optional ``details``
payload, so the API layer can serialise it without inspecting the type:

    {"error": "<message>", "details": <upstream payload or hint>}

ExtractionError and StructuredOutputError are raised inside the pipeline
but handled there. They never reach the caller as an error response and
declare no HTTP status of their own.
"""
from typing import Any, Dict, Optional


class PipelineError(Exception):
    """Base error with an HTTP status mapping"""

    status_code: int = 500

    def __init__(self, message: str, details: Any = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response"""
        payload: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(PipelineError):
    """Required input missing, empty or undecodable"""
    status_code = 400


class ProfileNotFoundError(PipelineError):
    """Requested pipeline profile does not exist"""
    status_code = 404


class ConfigurationError(PipelineError):
    """Provider API key missing or malformed"""
    status_code = 500


class ProviderError(PipelineError):
    """Upstream LLM call failed (non-2xx, malformed envelope, network fault)"""
    status_code = 500

    def __init__(
        self,
        provider: str,
        message: str,
        details: Any = None,
        upstream_status: Optional[int] = None
    ):
        super().__init__(f"{provider} call failed: {message}", details=details)
        self.provider = provider
        self.upstream_status = upstream_status

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["provider"] = self.provider
        if self.upstream_status is not None:
            payload["upstream_status"] = self.upstream_status
        return payload


class ExtractionError(PipelineError):
    """Binary document text extraction failed (non-fatal)"""


class StructuredOutputError(PipelineError):
    """LLM output could not be parsed as JSON even after repair (non-fatal)"""
