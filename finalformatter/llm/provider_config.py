"""Provider/runtime configuration for the LLM layer.

Architectural role:
    Centralizes model selection and credential lookup for `finalformatter.llm.client`.

Determinism:
    Deterministic for a fixed process environment and key files. Values are resolved
    at import time (plus runtime key-file reads in `load_key`).

Failure behavior:
    Missing key material is represented as `None`; `client.GeminiClient` turns it
    into a `ModelInvocationError` at call time.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Primary model routing controls.
MODEL_NAME = os.getenv("MODEL_NAME", "gemini-2.5-flash")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "120"))

GEMINI_KEY_FILE = "config/gemini.key"

GEMINI_URL_TEMPLATE = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "{model}:generateContent"
)


def load_key(path):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/gemini.key` -> `GEMINI_API_KEY`).
        2. Generic `API_KEY` environment variable.
        3. Raw file contents at `path`.

    Args:
        path: Configured key file path or `None`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - `None` path returns `None`.
        - Missing or empty file returns `None`.
    """
    if not path:
        return None
    key_name = os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
    env_value = os.getenv(key_name) or os.getenv("API_KEY")
    if env_value:
        return env_value
    if not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None
