"""Payload-to-model adapter for formatting requests.

Architectural role:
    Bridges the assembled `RequestPayload` (prompting layer) to the model
    collaborator (`finalformatter.llm.client` or any object with the same
    `generate` coroutine).

Model call flow:
    payload -> `model.generate(payload.parts, payload.system_instruction)` -> raw text.

Failure scenarios:
    `ModelInvocationError` from the collaborator propagates unchanged. Any other
    exception is logged and wrapped so the transport layer always sees one of the
    pipeline error kinds.
"""

import logging
from typing import Protocol

from finalformatter.core.errors import ModelInvocationError
from finalformatter.core.types import RequestPayload


logger = logging.getLogger(__name__)


class ModelCollaborator(Protocol):
    """Minimal async interface required from a generative model backend."""

    async def generate(self, parts, system_instruction: str) -> str | None:
        """Return generated text for ordered parts, or `None` when empty."""
        ...


async def invoke_model(model: ModelCollaborator, payload: RequestPayload):
    """Send one assembled payload to the model collaborator.

    Args:
        model: Collaborator created at startup.
        payload: Ordered parts plus system instruction.

    Returns:
        The collaborator's raw output, unvalidated.
    """
    try:
        return await model.generate(list(payload.parts), payload.system_instruction)
    except ModelInvocationError:
        raise
    except Exception as exc:
        logger.exception("Model collaborator raised an unexpected error")
        raise ModelInvocationError(
            f"model collaborator failed: {type(exc).__name__}"
        ) from exc
