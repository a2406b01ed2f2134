"""Data contracts shared by the formatting pipeline.

Architectural role:
    Defines the artifact union handed in by transport adapters, the closed
    handling-strategy enumeration, the content-part union sent to the model,
    and the per-request payload/result objects.

Determinism:
    All classes are frozen dataclasses or enums. Equal inputs produce equal
    objects, which is what makes payload construction comparable across runs.
"""

from dataclasses import dataclass
from enum import Enum

from finalformatter.core.errors import ConflictingContentError, MissingContentError


# =========================================================
# INPUT ARTIFACT
# =========================================================

@dataclass(frozen=True)
class TextArtifact:
    """Pasted document text."""

    value: str


@dataclass(frozen=True)
class FileArtifact:
    """Uploaded file: declared MIME type plus raw bytes."""

    mime_type: str
    data: bytes


InputArtifact = TextArtifact | FileArtifact


def resolve_artifact(
    content: str | None = None,
    mime_type: str | None = None,
    data: bytes | None = None,
    required: bool = True,
) -> InputArtifact | None:
    """Build the single artifact of a request from loose transport fields.

    Args:
        content: Pasted text, if any.
        mime_type: Declared type of the uploaded file, if any.
        data: Uploaded file bytes, or `None` when no file was sent.
        required: When false, return `None` instead of raising
            `MissingContentError` so the pipeline can order its own checks.

    Returns:
        `FileArtifact` when a file was supplied, otherwise `TextArtifact`.

    Edge cases:
        - Whitespace-only pasted text counts as absent.
        - An uploaded file with zero bytes is still a file.
        - File plus non-blank text raises `ConflictingContentError`.
        - Neither raises `MissingContentError` (or returns `None` when
          `required` is false).
    """
    has_text = bool(content and content.strip())
    has_file = data is not None

    if has_file and has_text:
        raise ConflictingContentError(
            "request contained both an uploaded file and pasted text"
        )

    if has_file:
        return FileArtifact(mime_type=mime_type or "", data=data)

    if has_text:
        return TextArtifact(value=content)

    if not required:
        return None

    raise MissingContentError("neither a file nor document text was supplied")


# =========================================================
# HANDLING STRATEGY
# =========================================================

class Strategy(Enum):
    """How an artifact must be represented for the model."""

    INLINE_BINARY = "inline_binary"
    DOCX_EXTRACT = "docx_extract"
    PLAIN_TEXT_FILE = "plain_text_file"
    PASTED_TEXT = "pasted_text"
    UNSUPPORTED = "unsupported"


# =========================================================
# CONTENT PARTS / PAYLOAD
# =========================================================

@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class InlinePart:
    mime_type: str
    base64_data: str


ContentPart = TextPart | InlinePart


@dataclass(frozen=True)
class RequestPayload:
    """Ordered model request plus the system instruction channel.

    Attributes:
        parts: `(instruction TextPart, content part)`, always in that order.
        system_instruction: Process-wide constant sent alongside `parts`.
    """

    parts: tuple
    system_instruction: str

    def __post_init__(self):
        if len(self.parts) != 2:
            raise ValueError(
                f"payload must hold exactly 2 parts, got {len(self.parts)}"
            )
        if not isinstance(self.parts[0], TextPart):
            raise ValueError("first payload part must be the instruction TextPart")
        if not isinstance(self.parts[1], (TextPart, InlinePart)):
            raise ValueError("second payload part must be a content part")

    @property
    def instruction_part(self) -> TextPart:
        return self.parts[0]

    @property
    def content_part(self) -> ContentPart:
        return self.parts[1]


@dataclass(frozen=True)
class FormattedResult:
    formatted_content: str

    def to_dict(self) -> dict:
        return {"formattedContent": self.formatted_content}


# =========================================================
# PER-REQUEST STATE
# =========================================================

class PipelineState(Enum):
    RECEIVED = "received"
    CLASSIFIED = "classified"
    MATERIALIZED = "materialized"
    ASSEMBLED = "assembled"
    INVOKED = "invoked"
    VALIDATED = "validated"
    COMPLETED = "completed"
    FAILED = "failed"
