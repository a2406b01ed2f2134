"""Content materialization: artifact + strategy -> exactly one content part.

Processing lifecycle:
    1. Receive an artifact already classified by `classifier.ensure_supported`.
    2. Convert it to the representation the strategy requires:
       - inline binary: base64 of the raw bytes, original MIME type kept;
       - DOCX: text from the extraction collaborator (awaited);
       - plain-text file: UTF-8 decoded bytes;
       - pasted text: the string as given.
    3. Text representations carry the `DOCUMENT CONTENT:` label prefix.

Size validation:
    None. The upload ceiling is enforced by the transport adapters.

Error handling strategy:
    - Extraction failures propagate as `ContentExtractionError`; any other
      exception from the collaborator is wrapped into one.
    - An `UNSUPPORTED` strategy or a strategy/artifact mismatch raises instead
      of producing a part.
"""

import base64
from typing import Protocol

from finalformatter.core.errors import ContentExtractionError, UnsupportedMediaTypeError
from finalformatter.core.types import (
    ContentPart,
    FileArtifact,
    InlinePart,
    InputArtifact,
    Strategy,
    TextArtifact,
    TextPart,
)


DOCUMENT_LABEL = "DOCUMENT CONTENT:\n"


class TextExtractor(Protocol):
    """Minimal async interface required for the DOCX strategy."""

    async def extract_text(self, data: bytes) -> str:
        """Return the plain text of an OOXML word-processing document."""
        ...


def label_document_text(text: str) -> TextPart:
    """Wrap document text with the fixed content label."""
    return TextPart(text=f"{DOCUMENT_LABEL}{text}")


def encode_inline(artifact: FileArtifact) -> InlinePart:
    """Base64-encode file bytes for inline transmission."""
    encoded = base64.b64encode(artifact.data).decode("ascii")
    return InlinePart(mime_type=artifact.mime_type, base64_data=encoded)


def _require_file(artifact: InputArtifact, strategy: Strategy) -> FileArtifact:
    if not isinstance(artifact, FileArtifact):
        raise TypeError(f"{strategy.name} requires a file artifact")
    return artifact


async def materialize(
    artifact: InputArtifact,
    strategy: Strategy,
    extractor: TextExtractor,
) -> ContentPart:
    """Convert one artifact into its single content part.

    Args:
        artifact: The request's only artifact.
        strategy: Result of classifying the artifact's declared type.
        extractor: Extraction collaborator, used only for `DOCX_EXTRACT`.

    Returns:
        `InlinePart` for `INLINE_BINARY`, otherwise a labelled `TextPart`.

    Edge cases:
        - Empty extracted DOCX text is valid and yields the bare label.
        - Invalid UTF-8 in a plain-text file is replaced, not rejected.
    """
    if strategy is Strategy.INLINE_BINARY:
        return encode_inline(_require_file(artifact, strategy))

    if strategy is Strategy.DOCX_EXTRACT:
        file_artifact = _require_file(artifact, strategy)
        try:
            text = await extractor.extract_text(file_artifact.data)
        except ContentExtractionError:
            raise
        except Exception as exc:
            raise ContentExtractionError(
                f"extraction collaborator failed: {type(exc).__name__}: {exc}"
            ) from exc
        return label_document_text(text)

    if strategy is Strategy.PLAIN_TEXT_FILE:
        file_artifact = _require_file(artifact, strategy)
        return label_document_text(file_artifact.data.decode("utf-8", errors="replace"))

    if strategy is Strategy.PASTED_TEXT:
        if not isinstance(artifact, TextArtifact):
            raise TypeError("PASTED_TEXT requires a text artifact")
        return label_document_text(artifact.value)

    raise UnsupportedMediaTypeError(
        f"strategy {strategy.name} cannot be materialized"
    )
