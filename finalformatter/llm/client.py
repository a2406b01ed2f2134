"""Gemini transport client for formatting requests.

Architectural role:
    Executes `generateContent` calls against the Gemini REST API and normalizes
    the reply into a plain string (or `None` when the model produced no text).

Model invocation flow:
    `pipeline.format_document` -> `GeminiClient.generate(parts, system_instruction)`
    -> `send_request(body)` on a worker thread -> parsed text.

Wire mapping:
    - `TextPart`   -> `{"text": ...}`
    - `InlinePart` -> `{"inlineData": {"mimeType": ..., "data": ...}}`
    - system instruction -> top-level `systemInstruction`

Retry behavior:
    No retry loop is implemented. Each HTTP call is attempted once.

Failure handling model:
    Missing keys, transport errors, HTTP error statuses and malformed bodies raise
    `ModelInvocationError` with a sanitized detail (status code, never the key).
"""

import asyncio
import logging

import requests

from finalformatter.core.errors import ModelInvocationError
from finalformatter.core.types import ContentPart, InlinePart, TextPart
from finalformatter.llm.provider_config import (
    GEMINI_KEY_FILE,
    GEMINI_URL_TEMPLATE,
    MODEL_NAME,
    REQUEST_TIMEOUT,
    load_key,
)


logger = logging.getLogger(__name__)


def _build_sanitized_http_error(err: requests.exceptions.RequestException) -> str:
    """Build HTTP error text without exposing raw internals.

    Args:
        err: Request exception instance.

    Returns:
        Sanitized error string with optional status code.
    """
    status_code = None
    if getattr(err, "response", None) is not None:
        status_code = getattr(err.response, "status_code", None)

    if status_code:
        return f"GEMINI HTTP ERROR ({status_code})"
    return f"GEMINI HTTP ERROR ({type(err).__name__})"


def part_to_wire(part: ContentPart) -> dict:
    """Map one content part to its Gemini JSON shape."""
    if isinstance(part, TextPart):
        return {"text": part.text}

    if isinstance(part, InlinePart):
        return {
            "inlineData": {
                "mimeType": part.mime_type,
                "data": part.base64_data,
            }
        }

    raise TypeError(f"unknown content part: {type(part).__name__}")


def build_request_body(parts, system_instruction: str) -> dict:
    """Build the `generateContent` body for an ordered part sequence."""
    return {
        "contents": [
            {
                "role": "user",
                "parts": [part_to_wire(part) for part in parts],
            }
        ],
        "systemInstruction": {
            "parts": [{"text": system_instruction}],
        },
    }


def extract_response_text(data: dict) -> str | None:
    """Return the concatenated text of the first candidate, or `None`.

    Edge cases:
        - No candidates (e.g. prompt blocked) -> `None`.
        - Candidate without text parts -> `None`.
    """
    candidates = data.get("candidates") or []
    if not candidates:
        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            logger.warning("Gemini returned no candidates: blockReason=%s", block_reason)
        return None

    content = candidates[0].get("content") or {}
    texts = [
        part["text"]
        for part in content.get("parts") or []
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    ]
    if not texts:
        return None

    return "".join(texts)


class GeminiClient:
    """Model collaborator backed by the Gemini REST API.

    Constructed once at startup and shared by all requests; holds no per-request
    state.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = MODEL_NAME,
        timeout: float | None = REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._http = session or requests

    @classmethod
    def from_env(cls) -> "GeminiClient":
        """Create a client from environment / key-file configuration."""
        return cls(api_key=load_key(GEMINI_KEY_FILE))

    @property
    def url(self) -> str:
        return GEMINI_URL_TEMPLATE.format(model=self.model)

    def send_request(self, body: dict) -> str | None:
        """Send one blocking request and parse the reply text."""
        if not self.api_key:
            raise ModelInvocationError("GEMINI API KEY NOT CONFIGURED")

        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

        try:
            response = self._http.post(
                self.url,
                headers=headers,
                json=body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.JSONDecodeError, ValueError) as err:
            logger.error("Gemini returned a non-JSON body")
            raise ModelInvocationError("GEMINI RESPONSE NOT JSON") from err
        except requests.exceptions.RequestException as err:
            safe_error = _build_sanitized_http_error(err)
            logger.error("Gemini request failed: %s", safe_error)
            raise ModelInvocationError(safe_error) from err

        if not isinstance(data, dict):
            raise ModelInvocationError("GEMINI RESPONSE MALFORMED")

        return extract_response_text(data)

    async def generate(self, parts, system_instruction: str) -> str | None:
        """Invoke the model with ordered parts plus the system instruction."""
        body = build_request_body(parts, system_instruction)
        return await asyncio.to_thread(self.send_request, body)
