"""Validation of the model collaborator's reply.

The validator is a strict pass-through: a non-empty string is returned exactly
as received (no trimming, no markdown stripping), anything else fails.
"""

from finalformatter.core.errors import EmptyModelResponseError


def validate_model_response(raw) -> str:
    """Return `raw` when it is a non-empty string.

    Raises:
        EmptyModelResponseError: For `None`, `""` or any non-string value.
    """
    if not isinstance(raw, str):
        raise EmptyModelResponseError(
            f"model returned {type(raw).__name__} instead of text"
        )

    if not raw:
        raise EmptyModelResponseError("model returned an empty string")

    return raw
