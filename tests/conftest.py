import io

import docx
import pytest

from finalformatter.core.pipeline import FormatterServices


class StubModel:
    """Model collaborator that records every call and returns a canned reply."""

    def __init__(self, reply="FORMATTED", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def generate(self, parts, system_instruction):
        self.calls.append((list(parts), system_instruction))
        if self.error is not None:
            raise self.error
        return self.reply


class StubExtractor:
    """Extraction collaborator with a canned result."""

    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def extract_text(self, data):
        self.calls.append(data)
        if self.error is not None:
            raise self.error
        return self.text


def make_docx_bytes(*paragraphs, table=None) -> bytes:
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    if table:
        grid = document.add_table(rows=len(table), cols=len(table[0]))
        for r, row in enumerate(table):
            for c, value in enumerate(row):
                grid.cell(r, c).text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.fixture()
def stub_model():
    return StubModel()


@pytest.fixture()
def stub_extractor():
    return StubExtractor()


@pytest.fixture()
def services(stub_model, stub_extractor):
    return FormatterServices(model=stub_model, extractor=stub_extractor)
