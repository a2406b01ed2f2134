"""Multimodal preprocessing package.

Architectural role:
- Classifies declared MIME types into handling strategies.
- Converts artifacts into the single content part sent to the model.

Scope:
- Content preprocessing only; no HTTP endpoint definitions.
"""
