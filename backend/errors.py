"""Error taxonomy for the ingestion → generation → normalization pipeline.

Every error knows the HTTP status it maps to, so route handlers can let them
propagate and a single exception handler renders the `{error, details}` body.
"""
from typing import Optional


class StudyPipelineError(Exception):
    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InputValidationError(StudyPipelineError):
    status_code = 400


class UnsupportedMediaType(StudyPipelineError):
    status_code = 400

    def __init__(self, media_type: str, supported_types: list[str], message: Optional[str] = None):
        super().__init__(message or "Unsupported file type.", details=f"Received: {media_type or 'unknown'}")
        self.media_type = media_type
        self.supported_types = list(supported_types)

    def to_body(self) -> dict:
        body = super().to_body()
        body["supportedTypes"] = self.supported_types
        return body


class UnsupportedContentType(StudyPipelineError):
    status_code = 400

    def __init__(self, content_type: str):
        super().__init__(
            "Unsupported content type. Only plain text and HTML are supported.",
            details=f"Received: {content_type or 'unknown'}",
        )
        self.content_type = content_type


class ExtractionFailed(StudyPipelineError):
    status_code = 400


class ExtractionError(StudyPipelineError):
    """The parser could not open the file at all (corrupt or encrypted)."""
    status_code = 500


class UpstreamFetchError(StudyPipelineError):
    def __init__(self, status: int, reason: str = ""):
        super().__init__(f"Failed to fetch content from the link: {reason}".rstrip(": "))
        self.status = status
        self.status_code = status


class EmptyModelResponse(StudyPipelineError):
    status_code = 500

    def __init__(self, message: str = "Received empty response from AI"):
        super().__init__(message)


class ModelInvocationError(StudyPipelineError):
    status_code = 500


class MalformedResponse(StudyPipelineError):
    status_code = 502
    EXCERPT_CHARS = 200

    def __init__(self, text: str, reason: str = "Invalid JSON response from AI"):
        self.excerpt = text[: self.EXCERPT_CHARS]
        super().__init__(reason, details=self.excerpt)


class MissingStudyMaterials(StudyPipelineError):
    status_code = 502

    def __init__(self):
        super().__init__("Invalid response format: Missing or invalid study materials")


class SessionNotFound(StudyPipelineError):
    status_code = 404

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found.")
        self.session_id = session_id


class RequestInProgress(StudyPipelineError):
    status_code = 409

    def __init__(self, session_id: str, family: str):
        super().__init__(f"A {family} request is already running for this session.")
        self.session_id = session_id
        self.family = family
