"""Modality classification for incoming artifacts.

Maps a declared MIME type to one of the closed `Strategy` variants. The
mapping is a pure function of the string: no I/O, no byte sniffing. A file
whose declared type lies about its content is forwarded as declared.
"""

from finalformatter.core.errors import UnsupportedMediaTypeError
from finalformatter.core.types import Strategy


PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)
PLAIN_TEXT_MIME_TYPE = "text/plain"
IMAGE_MIME_PREFIX = "image/"


def normalize_mime_type(mime_type: str) -> str:
    """Drop MIME parameters and case (`Text/Plain; charset=utf-8` -> `text/plain`)."""
    return mime_type.split(";", 1)[0].strip().lower()


def classify(mime_type: str | None) -> Strategy:
    """Return the handling strategy for a declared MIME type.

    `None` means the artifact is pasted text. The empty string (a file the
    client could not type) is unsupported.
    """
    if mime_type is None:
        return Strategy.PASTED_TEXT

    normalized = normalize_mime_type(mime_type)

    if normalized == PDF_MIME_TYPE or normalized.startswith(IMAGE_MIME_PREFIX):
        return Strategy.INLINE_BINARY

    if normalized == DOCX_MIME_TYPE:
        return Strategy.DOCX_EXTRACT

    if normalized == PLAIN_TEXT_MIME_TYPE:
        return Strategy.PLAIN_TEXT_FILE

    return Strategy.UNSUPPORTED


def ensure_supported(mime_type: str | None) -> Strategy:
    """Classify and stop the pipeline on `Strategy.UNSUPPORTED`."""
    strategy = classify(mime_type)
    if strategy is Strategy.UNSUPPORTED:
        raise UnsupportedMediaTypeError(
            f"unsupported MIME type: {mime_type!r}"
        )
    return strategy
