import asyncio
import base64

import pytest

from conftest import StubExtractor, make_docx_bytes
from finalformatter.core.errors import ContentExtractionError, UnsupportedMediaTypeError
from finalformatter.core.types import FileArtifact, InlinePart, Strategy, TextArtifact, TextPart
from finalformatter.multimodal.classifier import DOCX_MIME_TYPE
from finalformatter.multimodal.docx_extractor import DocxTextExtractor
from finalformatter.multimodal.materializer import DOCUMENT_LABEL, materialize


def run(coro):
    return asyncio.run(coro)


def test_inline_binary_round_trips_bytes():
    data = bytes(range(256)) * 3
    artifact = FileArtifact(mime_type="application/pdf", data=data)

    part = run(materialize(artifact, Strategy.INLINE_BINARY, StubExtractor()))

    assert isinstance(part, InlinePart)
    assert part.mime_type == "application/pdf"
    assert base64.b64decode(part.base64_data) == data


def test_inline_binary_keeps_declared_mime_type_verbatim():
    artifact = FileArtifact(mime_type="image/PNG", data=b"\x89PNG")
    part = run(materialize(artifact, Strategy.INLINE_BINARY, StubExtractor()))
    assert part.mime_type == "image/PNG"


def test_inline_binary_does_not_touch_extractor():
    extractor = StubExtractor()
    run(materialize(FileArtifact("image/jpeg", b"jpg"), Strategy.INLINE_BINARY, extractor))
    assert extractor.calls == []


def test_docx_uses_extractor_and_label():
    extractor = StubExtractor(text="Hello from docx")
    artifact = FileArtifact(mime_type=DOCX_MIME_TYPE, data=b"PK...")

    part = run(materialize(artifact, Strategy.DOCX_EXTRACT, extractor))

    assert part == TextPart("DOCUMENT CONTENT:\nHello from docx")
    assert extractor.calls == [b"PK..."]


def test_docx_empty_extraction_is_valid():
    part = run(materialize(FileArtifact(DOCX_MIME_TYPE, b"x"), Strategy.DOCX_EXTRACT, StubExtractor(text="")))
    assert part == TextPart(DOCUMENT_LABEL)


def test_docx_extraction_error_propagates():
    extractor = StubExtractor(error=ContentExtractionError("broken"))
    with pytest.raises(ContentExtractionError) as info:
        run(materialize(FileArtifact(DOCX_MIME_TYPE, b"x"), Strategy.DOCX_EXTRACT, extractor))
    assert info.value.detail == "broken"


def test_docx_foreign_extractor_error_is_wrapped():
    extractor = StubExtractor(error=RuntimeError("zip exploded"))
    with pytest.raises(ContentExtractionError) as info:
        run(materialize(FileArtifact(DOCX_MIME_TYPE, b"x"), Strategy.DOCX_EXTRACT, extractor))
    assert "zip exploded" in info.value.detail
    assert isinstance(info.value.__cause__, RuntimeError)


def test_docx_with_real_extractor():
    data = make_docx_bytes("First paragraph", "Second paragraph")
    part = run(materialize(FileArtifact(DOCX_MIME_TYPE, data), Strategy.DOCX_EXTRACT, DocxTextExtractor()))
    assert part.text.startswith(DOCUMENT_LABEL)
    assert "First paragraph" in part.text
    assert "Second paragraph" in part.text


def test_plain_text_file_decodes_utf8():
    artifact = FileArtifact("text/plain", "Grüße • café".encode("utf-8"))
    part = run(materialize(artifact, Strategy.PLAIN_TEXT_FILE, StubExtractor()))
    assert part == TextPart("DOCUMENT CONTENT:\nGrüße • café")


def test_plain_text_file_replaces_invalid_utf8():
    artifact = FileArtifact("text/plain", b"ok \xff end")
    part = run(materialize(artifact, Strategy.PLAIN_TEXT_FILE, StubExtractor()))
    assert part.text == "DOCUMENT CONTENT:\nok � end"


def test_pasted_text_is_labelled_verbatim():
    part = run(materialize(TextArtifact("  hello world\n"), Strategy.PASTED_TEXT, StubExtractor()))
    assert part == TextPart("DOCUMENT CONTENT:\n  hello world\n")


def test_unsupported_strategy_never_materializes():
    with pytest.raises(UnsupportedMediaTypeError):
        run(materialize(FileArtifact("application/zip", b"PK"), Strategy.UNSUPPORTED, StubExtractor()))


def test_strategy_artifact_mismatch_raises():
    with pytest.raises(TypeError):
        run(materialize(TextArtifact("text"), Strategy.INLINE_BINARY, StubExtractor()))
