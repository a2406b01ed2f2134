"""Request assembly package.

Exposes `prompt_builder`, which orders instruction and content parts and holds
the process-wide system instruction.
"""
