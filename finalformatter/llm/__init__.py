"""LLM access package.

Architectural role:
    Provides provider configuration and the transport adapter used by the
    pipeline to invoke the formatting model.

Module split:
    - `provider_config`: environment-driven model configuration and key lookup.
    - `service`: payload-to-model adapter and collaborator protocol.
    - `client`: Gemini HTTP transport and response parsing.
"""
