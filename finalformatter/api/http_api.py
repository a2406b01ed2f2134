"""
HTTP API adapter for the FinalFormatter pipeline (server environment).

Architectural role:
- Accept multipart uploads or JSON bodies and turn them into one artifact.
- Delegate all classification/extraction/model work to
  `finalformatter.core.pipeline.format_document`.
- Normalize pipeline results and errors to the JSON transport contract.

Endpoint responsibilities:
- `POST /api/format`: parse `file` / `content` / `instructions`, enforce the
  upload ceiling, run the pipeline, return `{"formattedContent": ...}`.
- `GET /api/health`: liveness probe with the configured model name.
- `/` (optional): built frontend served from `FRONTEND_DIST` when present.

API request lifecycle (`POST /api/format`):
1. Parse multipart form (`file`, `content`, `instructions`) or JSON.
2. Reject uploads, form fields and JSON bodies above `MAX_UPLOAD_BYTES`
   with HTTP 413.
3. Build the single artifact (`resolve_artifact`).
4. Run the pipeline with the collaborators created at startup.
5. Return the formatted text or a structured error.

Error handling strategy:
- Pipeline errors return `{"error": message, "details": detail}` with the
  error kind's status code.
- Unexpected exceptions are logged and returned as HTTP 500
  `Internal Processing Error`; they never affect other requests.

Side effects:
- Loads environment variables at import time via `load_dotenv()`.
- Builds the Gemini client once at startup unless services are injected.
"""

from dotenv import load_dotenv

load_dotenv()

import json
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from starlette.exceptions import HTTPException

from finalformatter.core.errors import FormatterError
from finalformatter.core.pipeline import (
    FormatterServices,
    build_default_services,
    format_document,
)
from finalformatter.core.types import resolve_artifact
from finalformatter.llm.provider_config import MODEL_NAME


logger = logging.getLogger(__name__)

# Sensitive request/response debug logging is opt-in.
DEBUG = os.getenv("DEBUG") == "true"

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "4000"))
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "10"))
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
FRONTEND_DIST = os.getenv("FRONTEND_DIST", os.path.join(BASE_DIR, "dist"))


# ============================================================
# Response Schemas
# ============================================================

class FormatResponse(BaseModel):
    formattedContent: str


class ErrorResponse(BaseModel):
    error: str
    details: str


class UploadTooLargeError(FormatterError):
    status_code = 413
    default_message = f"File too large. Maximum size is {MAX_UPLOAD_MB} MB."


class MalformedRequestError(FormatterError):
    status_code = 400
    default_message = "Malformed request body."


# ============================================================
# Request Parsing
# ============================================================

async def _read_upload(upload) -> tuple[str, bytes] | None:
    """
    Read an uploaded form file within the size ceiling.

    Returns `None` for the empty file field browsers send when nothing was
    selected.
    """
    data = await upload.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise UploadTooLargeError(
            f"upload {upload.filename!r} exceeds {MAX_UPLOAD_BYTES} bytes"
        )

    if not upload.filename and not data:
        return None

    return upload.content_type or "", data


async def parse_format_request(request: Request) -> dict:
    """
    Extract `content`, `instructions` and the optional file from a request.

    Multipart and url-encoded bodies are read as forms; anything else is
    parsed as JSON. A body that is neither yields empty fields, which the
    pipeline then rejects with the matching error kind.
    """
    content_type = request.headers.get("content-type", "")
    fields = {"content": None, "instructions": None, "mime_type": None, "data": None}

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        try:
            form = await request.form(max_part_size=MAX_UPLOAD_BYTES)
        except HTTPException as exc:
            if "maximum size" in str(exc.detail):
                raise UploadTooLargeError(exc.detail) from exc
            raise MalformedRequestError(exc.detail) from exc
        try:
            for name in ("content", "instructions"):
                value = form.get(name)
                if isinstance(value, str):
                    if len(value.encode("utf-8")) > MAX_UPLOAD_BYTES:
                        raise UploadTooLargeError(f"field {name!r} exceeds {MAX_UPLOAD_BYTES} bytes")
                    fields[name] = value

            upload = form.get("file")
            if upload is not None and not isinstance(upload, str):
                file_fields = await _read_upload(upload)
                if file_fields is not None:
                    fields["mime_type"], fields["data"] = file_fields
        finally:
            await form.close()
        return fields

    raw = await request.body()
    if len(raw) > MAX_UPLOAD_BYTES:
        raise UploadTooLargeError(f"request body exceeds {MAX_UPLOAD_BYTES} bytes")

    try:
        body = json.loads(raw)
    except ValueError:
        body = {}

    if isinstance(body, dict):
        for name in ("content", "instructions"):
            value = body.get(name)
            if isinstance(value, str):
                fields[name] = value

    return fields


# ============================================================
# Application Factory
# ============================================================

def create_app(services: FormatterServices | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Pre-built collaborators (tests, embedding). When omitted the
            Gemini client and DOCX extractor are created once at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.services is None:
            app.state.services = build_default_services()
            logger.info("FinalFormatter services initialized (model=%s)", MODEL_NAME)
        yield

    app = FastAPI(title="FinalFormatter", lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    def health():
        return {"status": "ok", "model": MODEL_NAME}

    @app.post(
        "/api/format",
        response_model=FormatResponse,
        responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse},
                   422: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    )
    async def format_endpoint(request: Request):
        """
        Format one document.

        Input validation behavior:
        - Missing instructions -> HTTP 400.
        - Missing content, or both file and text -> HTTP 400.
        - Unsupported file type -> HTTP 400.
        - Upload above the ceiling -> HTTP 413.
        """
        try:
            fields = await parse_format_request(request)

            if DEBUG:
                logger.debug(
                    "Incoming request: has_file=%s mime=%s content_chars=%s",
                    fields["data"] is not None,
                    fields["mime_type"],
                    len(fields["content"] or ""),
                )

            artifact = resolve_artifact(
                content=fields["content"],
                mime_type=fields["mime_type"],
                data=fields["data"],
                required=False,
            )
            result = await format_document(
                artifact,
                fields["instructions"],
                request.app.state.services,
            )
        except FormatterError as exc:
            return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
        except Exception as exc:
            logger.exception("Processing Error")
            return JSONResponse(
                status_code=500,
                content={"error": "Internal Processing Error", "details": str(exc)},
            )

        return result.to_dict()

    if os.path.isdir(FRONTEND_DIST):
        app.mount("/", StaticFiles(directory=FRONTEND_DIST, html=True), name="frontend")

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve `app` with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(name)s | %(levelname)s | %(message)s",
    )
    logger.info("FinalFormatter backend running on http://localhost:%s", PORT)
    uvicorn.run(app, host=HOST, port=PORT)
