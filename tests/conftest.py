import io
import json
import fitz
import pandas as pd
import pytest
from docx import Document
from insightflow.models.schemas import ChatReply, UploadedFile, FileCategory
from insightflow.services.ai_service import AIService
from insightflow.services.content_extractor import ContentExtractor
from insightflow.services.pdf_backend import PdfBackend


class FakeAIService(AIService):
    """Records requests and returns canned text, or raises a canned error"""

    def __init__(self, structured_text="", chat_reply=None, error=None):
        self.structured_text = structured_text
        self.chat_reply = chat_reply or ChatReply(text="ok")
        self.error = error
        self.structured_requests = []
        self.conversation_requests = []

    async def generate_structured(self, request):
        self.structured_requests.append(request)
        if self.error:
            raise self.error
        return self.structured_text

    async def converse(self, request):
        self.conversation_requests.append(request)
        if self.error:
            raise self.error
        return self.chat_reply


SAMPLE_RESPONSE = json.dumps({
    "summary": "ok",
    "kpis": [],
    "insights": [],
    "chartData": [{"name": "Q1", "value": 100}],
    "chartType": "bar",
    "suggestedQuestions": []
})


@pytest.fixture
def fake_ai():
    return FakeAIService(structured_text=SAMPLE_RESPONSE)


@pytest.fixture
def pdf_backend():
    return PdfBackend(init_timeout=4.0, load_timeout=10.0)


@pytest.fixture
def extractor(pdf_backend):
    return ContentExtractor(pdf_backend=pdf_backend)


def make_xlsx(sheets: dict) -> bytes:
    """Workbook bytes with one sheet per {name: rows}"""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, index=False, header=False)
    return buffer.getvalue()


def make_pdf(page_texts: list) -> bytes:
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def make_docx(paragraphs: list, table_rows: list = None) -> bytes:
    doc = Document()
    for text in paragraphs:
        doc.add_paragraph(text)
    if table_rows:
        table = doc.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for r, row in enumerate(table_rows):
            for c, value in enumerate(row):
                table.cell(r, c).text = value
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def make_file(name: str, content: str, category=FileCategory.TEXT, mime_type="text/plain") -> UploadedFile:
    return UploadedFile(name=name, type=mime_type, content=content, mime_type=mime_type, category=category)
