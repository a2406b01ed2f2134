"""Request orchestration: artifact + instructions -> formatted document.

Architectural role:
    Provides the single execution pipeline used by the HTTP and CLI adapters. Both
    environments call `format_document` with the same inputs and therefore build
    identical model requests.

Control-flow model (per request):
    Received -> Classified -> Materialized -> Assembled -> Invoked -> Validated
    -> Completed | Failed

    1. Classify the artifact's declared type; unsupported types stop here.
    2. Reject blank instructions before any collaborator is contacted, then
       missing or blank pasted content.
    3. Materialize the artifact (DOCX extraction is the only awaited step).
    4. Assemble `[instructions, content]` plus the system instruction.
    5. Invoke the model collaborator and validate its reply.

Collaborators:
    `FormatterServices` bundles the model and extraction collaborators. It is
    built once at startup (`build_default_services`) and passed in explicitly;
    the pipeline never looks collaborators up on its own.

Error handling strategy:
    Every failure is a `FormatterError` subclass, logged with the state in which
    it happened and re-raised. Nothing is retried and no state survives the call.
"""

import logging
from dataclasses import dataclass

from finalformatter.core.errors import (
    FormatterError,
    MissingContentError,
    MissingInstructionsError,
)
from finalformatter.core.response_validator import validate_model_response
from finalformatter.core.types import (
    FileArtifact,
    FormattedResult,
    InputArtifact,
    PipelineState,
    RequestPayload,
    Strategy,
    TextArtifact,
)
from finalformatter.llm.service import ModelCollaborator, invoke_model
from finalformatter.multimodal.classifier import ensure_supported
from finalformatter.multimodal.materializer import TextExtractor, materialize
from finalformatter.prompting.prompt_builder import assemble_request


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormatterServices:
    """Process-wide collaborator handles, immutable after startup."""

    model: ModelCollaborator
    extractor: TextExtractor


def build_default_services() -> FormatterServices:
    """Create the Gemini model client and python-docx extractor from env config."""
    from finalformatter.llm.client import GeminiClient
    from finalformatter.multimodal.docx_extractor import DocxTextExtractor

    return FormatterServices(
        model=GeminiClient.from_env(),
        extractor=DocxTextExtractor(),
    )


class _StateTracker:
    """Records the current pipeline state for logging."""

    def __init__(self):
        self.state = PipelineState.RECEIVED

    def advance(self, state: PipelineState) -> None:
        logger.debug("Pipeline %s -> %s", self.state.value, state.value)
        self.state = state


def classify_artifact(artifact: InputArtifact) -> Strategy:
    """Classify an artifact; files by declared MIME type, text as pasted."""
    if isinstance(artifact, FileArtifact):
        return ensure_supported(artifact.mime_type or "")
    return ensure_supported(None)


def require_content(artifact: InputArtifact | None) -> InputArtifact:
    if artifact is None:
        raise MissingContentError("no artifact was supplied")
    if isinstance(artifact, TextArtifact) and not artifact.value.strip():
        raise MissingContentError("pasted text was blank")
    return artifact


def require_instructions(instructions: str | None) -> str:
    if not instructions or not instructions.strip():
        raise MissingInstructionsError("instructions were absent or blank")
    return instructions


async def _build_request(
    artifact: InputArtifact | None,
    instructions: str | None,
    services: FormatterServices,
    tracker: _StateTracker,
) -> RequestPayload:
    # Unsupported files are rejected before instructions are checked.
    if isinstance(artifact, FileArtifact):
        strategy = classify_artifact(artifact)
        tracker.advance(PipelineState.CLASSIFIED)

    instructions = require_instructions(instructions)

    if not isinstance(artifact, FileArtifact):
        strategy = classify_artifact(require_content(artifact))
        tracker.advance(PipelineState.CLASSIFIED)

    content_part = await materialize(artifact, strategy, services.extractor)
    tracker.advance(PipelineState.MATERIALIZED)

    payload = assemble_request(instructions, content_part)
    tracker.advance(PipelineState.ASSEMBLED)

    logger.info(
        "Assembled request: strategy=%s content_part=%s",
        strategy.value,
        type(content_part).__name__,
    )
    return payload


async def build_request(
    artifact: InputArtifact | None,
    instructions: str | None,
    services: FormatterServices,
) -> RequestPayload:
    """Run the pipeline up to `Assembled` without contacting the model.

    Same validation order as `format_document`; used for dry runs and for
    checking that identical inputs give identical payloads.
    """
    tracker = _StateTracker()
    try:
        return await _build_request(artifact, instructions, services, tracker)
    except FormatterError as exc:
        logger.warning(
            "Request failed in state %s: %s", tracker.state.value, type(exc).__name__
        )
        tracker.advance(PipelineState.FAILED)
        raise


async def format_document(
    artifact: InputArtifact | None,
    instructions: str | None,
    services: FormatterServices,
) -> FormattedResult:
    """Format one document through the model collaborator.

    Args:
        artifact: The request's single artifact (pasted text or file).
        instructions: User formatting instructions; must be non-blank.
        services: Collaborators initialized at startup.

    Returns:
        `FormattedResult` holding the model's text exactly as returned.

    Raises:
        UnsupportedMediaTypeError: Declared file type is not recognized.
        MissingInstructionsError: Instructions are absent or blank.
        MissingContentError: No artifact, or blank pasted text.
        ContentExtractionError: DOCX extraction failed.
        ModelInvocationError: The model call failed.
        EmptyModelResponseError: The model returned no text.
    """
    tracker = _StateTracker()
    try:
        payload = await _build_request(artifact, instructions, services, tracker)

        raw = await invoke_model(services.model, payload)
        tracker.advance(PipelineState.INVOKED)

        text = validate_model_response(raw)
        tracker.advance(PipelineState.VALIDATED)
    except FormatterError as exc:
        logger.warning(
            "Request failed in state %s: %s", tracker.state.value, type(exc).__name__
        )
        tracker.advance(PipelineState.FAILED)
        raise

    tracker.advance(PipelineState.COMPLETED)
    return FormattedResult(formatted_content=text)
