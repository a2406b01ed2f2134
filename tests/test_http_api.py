import base64

import pytest
from fastapi.testclient import TestClient

from conftest import StubExtractor, StubModel, make_docx_bytes
from finalformatter.api import http_api
from finalformatter.core.errors import ModelInvocationError
from finalformatter.core.pipeline import FormatterServices
from finalformatter.core.types import InlinePart, TextPart
from finalformatter.multimodal.classifier import DOCX_MIME_TYPE
from finalformatter.multimodal.docx_extractor import DocxTextExtractor


@pytest.fixture()
def api(stub_model):
    services = FormatterServices(model=stub_model, extractor=DocxTextExtractor())
    return TestClient(http_api.create_app(services))


def test_pasted_text_form(api, stub_model):
    stub_model.reply = "HELLO WORLD"

    response = api.post(
        "/api/format",
        data={"content": "hello world", "instructions": "make it uppercase"},
    )

    assert response.status_code == 200
    assert response.json() == {"formattedContent": "HELLO WORLD"}
    parts, _ = stub_model.calls[0]
    assert parts == [
        TextPart("INSTRUCTIONS:\nmake it uppercase"),
        TextPart("DOCUMENT CONTENT:\nhello world"),
    ]


def test_json_body(api, stub_model):
    response = api.post("/api/format", json={"content": "draft", "instructions": "tidy"})

    assert response.status_code == 200
    assert response.json() == {"formattedContent": "FORMATTED"}


def test_image_upload_is_inline(api, stub_model):
    data = b"\x89PNG\r\n\x1a\n\x00\x01\x02"

    response = api.post(
        "/api/format",
        data={"instructions": "extract text"},
        files={"file": ("scan.png", data, "image/png")},
    )

    assert response.status_code == 200
    content_part = stub_model.calls[0][0][1]
    assert isinstance(content_part, InlinePart)
    assert content_part.mime_type == "image/png"
    assert base64.b64decode(content_part.base64_data) == data


def test_docx_upload_is_extracted(api, stub_model):
    data = make_docx_bytes("Meeting notes", "Action items")

    response = api.post(
        "/api/format",
        data={"instructions": "bullets"},
        files={"file": ("notes.docx", data, DOCX_MIME_TYPE)},
    )

    assert response.status_code == 200
    assert stub_model.calls[0][0][1] == TextPart("DOCUMENT CONTENT:\nMeeting notes\n\nAction items")


def test_text_file_upload(api, stub_model):
    response = api.post(
        "/api/format",
        data={"instructions": "fix"},
        files={"file": ("notes.txt", "line one".encode("utf-8"), "text/plain")},
    )

    assert response.status_code == 200
    assert stub_model.calls[0][0][1] == TextPart("DOCUMENT CONTENT:\nline one")


def test_missing_instructions(api, stub_model):
    response = api.post("/api/format", data={"content": "hello"})

    assert response.status_code == 400
    assert response.json()["error"] == "Missing formatting instructions."
    assert stub_model.calls == []


def test_missing_content(api):
    response = api.post("/api/format", data={"instructions": "format"})

    assert response.status_code == 400
    assert response.json()["error"] == "Please provide either a file or document text."


def test_empty_body(api):
    response = api.post("/api/format")

    assert response.status_code == 400
    assert response.json()["error"] == "Missing formatting instructions."


def test_unsupported_file_without_instructions(api, stub_model):
    response = api.post(
        "/api/format",
        files={"file": ("archive.zip", b"PK\x03\x04", "application/zip")},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Unsupported file type. Please upload PDF, DOCX, Image, or Text."
    assert "application/zip" in body["details"]
    assert stub_model.calls == []


def test_file_and_text_conflict(api):
    response = api.post(
        "/api/format",
        data={"content": "also text", "instructions": "x"},
        files={"file": ("a.txt", b"file text", "text/plain")},
    )

    assert response.status_code == 400
    assert "not both" in response.json()["error"]


def test_malformed_docx(api, stub_model):
    response = api.post(
        "/api/format",
        data={"instructions": "x"},
        files={"file": ("broken.docx", b"not a zip", DOCX_MIME_TYPE)},
    )

    assert response.status_code == 422
    assert "DOCX extraction failed" in response.json()["details"]
    assert stub_model.calls == []


def test_upload_too_large(api, monkeypatch):
    monkeypatch.setattr(http_api, "MAX_UPLOAD_BYTES", 8)

    response = api.post(
        "/api/format",
        data={"instructions": "x"},
        files={"file": ("big.txt", b"0123456789", "text/plain")},
    )

    assert response.status_code == 413


def test_model_failure_and_empty_reply():
    failing = FormatterServices(
        model=StubModel(error=ModelInvocationError("GEMINI HTTP ERROR (500)")),
        extractor=StubExtractor(),
    )
    response = TestClient(http_api.create_app(failing)).post(
        "/api/format", json={"content": "a", "instructions": "b"}
    )
    assert response.status_code == 502
    assert response.json()["details"] == "GEMINI HTTP ERROR (500)"

    empty = FormatterServices(model=StubModel(reply=""), extractor=StubExtractor())
    response = TestClient(http_api.create_app(empty)).post(
        "/api/format", json={"content": "a", "instructions": "b"}
    )
    assert response.status_code == 502
    assert response.json()["error"] == "AI returned empty response."


def test_unexpected_error_is_500():
    app = http_api.create_app()
    app.state.services = object()

    response = TestClient(app).post("/api/format", json={"content": "a", "instructions": "b"})

    assert response.status_code == 500
    assert response.json()["error"] == "Internal Processing Error"


def test_health(api):
    response = api.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_oversize_text_field_is_413(api, stub_model, monkeypatch):
    monkeypatch.setattr(http_api, "MAX_UPLOAD_BYTES", 8)

    response = api.post("/api/format", data={"content": "x" * 50, "instructions": "y"})

    assert response.status_code == 413
    assert response.json()["error"].startswith("File too large.")
    assert stub_model.calls == []


def test_oversize_json_body_is_413(api, stub_model, monkeypatch):
    monkeypatch.setattr(http_api, "MAX_UPLOAD_BYTES", 8)

    response = api.post("/api/format", json={"content": "x" * 50, "instructions": "y"})

    assert response.status_code == 413
    assert stub_model.calls == []


def test_oversize_multipart_field_is_413(api, monkeypatch):
    monkeypatch.setattr(http_api, "MAX_UPLOAD_BYTES", 8)

    response = api.post(
        "/api/format",
        data={"content": "x" * 50, "instructions": "y"},
        files={"file": ("a.txt", b"x", "text/plain")},
    )

    assert response.status_code == 413
    assert "details" in response.json()
