"""FinalFormatter: turn an uploaded or pasted document into paste-ready plain text.

Package layout:
    - `core`: data contracts, errors, response validation, pipeline orchestration.
    - `multimodal`: modality classification, content materialization, DOCX extraction.
    - `prompting`: request assembly and the fixed system instruction.
    - `llm`: Gemini configuration and transport client.
    - `api`: HTTP and CLI adapters.
"""

__version__ = "0.1.0"
