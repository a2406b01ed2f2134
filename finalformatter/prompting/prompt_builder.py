"""Request assembly for the formatting model.

This module is intentionally narrow: it only orders already materialized parts
and attaches the system instruction. Classification, extraction and model
invocation happen outside this module.

Design constraints:
    - Deterministic construction for identical inputs.
    - Fixed ordering: instruction part first, content part second.
    - No hidden side effects (no I/O, no global state mutation).
"""

from finalformatter.core.types import ContentPart, RequestPayload, TextPart


# =========================================================
# SYSTEM INSTRUCTION (GLOBAL)
# =========================================================
# Sent on the model's system channel with every request. Set once at import,
# never modified per request.

SYSTEM_INSTRUCTION = """
You are "FinalFormatter", an AI that does 3 things in sequence:

1) If I upload a file (PDF, DOCX, image), first EXTRACT ALL TEXT from the document.
   - Do NOT summarize.
   - Do NOT correct anything.
   - Just extract the raw text as it appears.

2) Then, based on my instructions, CLEAN and FORMAT that text:
   - Fix grammar and readability only if I ask for it.
   - Apply headings, sections, bullets, spacing, and tone according to my instructions.
   - Preserve the original meaning.
   - Do NOT add new ideas unless I clearly ask.

3) Finally, give me the result as plain text that I can directly paste into MS Word or Google Docs:
   - NO markdown symbols (#, ##, *, -) unless I explicitly ask for markdown.
   - Use simple headings like: INTRODUCTION:, CONTEXT:, SUMMARY:, etc.
   - Use simple bullets like: • item

VERY IMPORTANT:
- Do NOT explain what you did.
- Do NOT add any commentary like “Here is your formatted text”.
- OUTPUT MUST BE ONLY THE FINAL DOCUMENT CONTENT, ready to export.
"""

INSTRUCTIONS_LABEL = "INSTRUCTIONS:\n"


def build_instruction_part(instructions: str) -> TextPart:
    """Wrap user formatting instructions with the fixed label."""
    return TextPart(text=f"{INSTRUCTIONS_LABEL}{instructions}")


def assemble_request(instructions: str, content_part: ContentPart) -> RequestPayload:
    """Build the ordered request payload for one formatting run.

    Args:
        instructions: Non-blank user formatting instructions.
        content_part: The single materialized content part.

    Returns:
        `RequestPayload` with parts `(instruction, content)` and the constant
        `SYSTEM_INSTRUCTION`.

    Edge cases:
        Instructions are inserted verbatim (no stripping); blank instructions
        are rejected upstream by the pipeline.
    """
    return RequestPayload(
        parts=(build_instruction_part(instructions), content_part),
        system_instruction=SYSTEM_INSTRUCTION,
    )
