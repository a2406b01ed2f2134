"""Core orchestration package.

Architectural role:
    Holds the request pipeline that sits between the API/CLI adapters and the
    lower layers (classification, materialization, prompting, model client).

Composition:
    - `types`: artifact/part/payload data contracts and the `Strategy` enum.
    - `errors`: the error kinds surfaced to transport adapters.
    - `response_validator`: model reply validation.
    - `pipeline`: per-request control flow and collaborator wiring.

Determinism and side effects:
    Package import itself is deterministic and side-effect free.
"""
