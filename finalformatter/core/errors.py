"""Error kinds surfaced by the formatting pipeline.

Architectural role:
    Every failure the core can produce is one of the classes below. Transport
    adapters (HTTP handler, CLI) convert them into a user-readable
    message plus an internal detail string without inspecting the cause.

Propagation policy:
    - All errors are terminal for the request that raised them.
    - No error is fatal to the process; subsequent requests are unaffected.
    - Nothing here retries or substitutes one modality for another.
"""


class FormatterError(Exception):
    """Base class for all pipeline failures.

    Attributes:
        message: Short user-facing text.
        detail: Internal detail string (cause, offending value).
        status_code: HTTP status used by the HTTP adapter.
    """

    status_code = 500
    default_message = "Internal Processing Error"

    def __init__(self, detail: str = "", message: str | None = None):
        self.message = message or self.default_message
        self.detail = detail or self.message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Return the structured error body used by transport adapters."""
        return {"error": self.message, "details": self.detail}


class MissingInstructionsError(FormatterError):
    status_code = 400
    default_message = "Missing formatting instructions."


class MissingContentError(FormatterError):
    status_code = 400
    default_message = "Please provide either a file or document text."


class ConflictingContentError(FormatterError):
    """Raised when a request carries both an uploaded file and pasted text."""

    status_code = 400
    default_message = "Provide either a file or document text, not both."


class UnsupportedMediaTypeError(FormatterError):
    status_code = 400
    default_message = "Unsupported file type. Please upload PDF, DOCX, Image, or Text."


class ContentExtractionError(FormatterError):
    status_code = 422
    default_message = "Could not extract text from the uploaded document."


class ModelInvocationError(FormatterError):
    status_code = 502
    default_message = "The formatting model could not be reached."


class EmptyModelResponseError(FormatterError):
    status_code = 502
    default_message = "AI returned empty response."
