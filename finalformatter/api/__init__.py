"""FinalFormatter adapter package.

Architectural role:
- Defines the external interaction boundary for HTTP and CLI interfaces.
- Performs transport-level parsing, size limits and response shaping.
- Delegates classification, extraction and model calls to the core layer.
"""
