from docx import Document
from docx.oxml.text.paragraph import CT_P
from docx.oxml.table import CT_Tbl
from docx.table import Table
from docx.text.paragraph import Paragraph
import pandas as pd
from typing import Callable, List, Optional, Tuple
from pathlib import Path
import asyncio
import base64
import io
import mimetypes
import time
from insightflow.core.config import settings
from insightflow.core.exceptions import ExtractionError
from insightflow.core.logging_config import get_logger
from insightflow.models.schemas import FileCategory, UploadedFile
from insightflow.services.pdf_backend import PdfBackend
from insightflow.utils.dependencies import get_pdf_backend

logger = get_logger(__name__)

TRUNCATION_MARKER = "\n[TRUNCATED]"
SPREADSHEET_EXTENSIONS = {'.xlsx', '.xls'}
DEFAULT_MIME_TYPE = "application/octet-stream"

# (filename, raw bytes, declared content type)
RawUpload = Tuple[str, bytes, Optional[str]]


def truncate_text(text: str, limit: int, marker: str = TRUNCATION_MARKER) -> str:
    """Cut text to limit characters and append marker when it was longer"""
    if len(text) <= limit:
        return text
    return text[:limit] + marker


def resolve_mime_type(filename: str, declared: Optional[str]) -> str:
    """Use the declared MIME type, or guess one from the extension"""
    if declared and declared != DEFAULT_MIME_TYPE:
        return declared
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or declared or DEFAULT_MIME_TYPE


def classify_file(filename: str, mime_type: str) -> FileCategory:
    """Pick the extraction strategy for a file (first match wins)"""
    file_ext = Path(filename or "").suffix.lower()
    mime_type = (mime_type or "").lower()

    if mime_type.startswith("image/"):
        return FileCategory.IMAGE
    if file_ext in SPREADSHEET_EXTENSIONS:
        return FileCategory.SPREADSHEET
    if file_ext == ".pdf" or mime_type == "application/pdf":
        return FileCategory.DOCUMENT
    if file_ext == ".docx":
        return FileCategory.WORD
    return FileCategory.TEXT


class ContentExtractor:
    """
    Convert uploaded files into payloads safe to send to the AI service:
    - Images as base64 (never truncated)
    - Spreadsheets as CSV of the first sheet, capped
    - PDFs as text of the first page
    - Word documents as paragraphs and tables in document order
    - Everything else as plain text (capped later, at prompt assembly)
    """

    def __init__(self, pdf_backend: Optional[PdfBackend] = None, spreadsheet_max_chars: Optional[int] = None):
        self.pdf_backend = pdf_backend or get_pdf_backend()
        self.spreadsheet_max_chars = spreadsheet_max_chars or settings.SPREADSHEET_MAX_CHARS
        self.handlers = {
            FileCategory.IMAGE: self.extract_image,
            FileCategory.SPREADSHEET: self.extract_spreadsheet,
            FileCategory.DOCUMENT: self.extract_pdf,
            FileCategory.WORD: self.extract_docx,
            FileCategory.TEXT: self.extract_text,
        }
        missing = set(FileCategory) - set(self.handlers)
        if missing:
            raise RuntimeError(f"No extractor for categories: {sorted(c.value for c in missing)}")

    async def extract(self, filename: str, data: bytes, content_type: Optional[str] = None) -> UploadedFile:
        """Extract one file; raises ExtractionError when the file cannot be read"""
        mime_type = resolve_mime_type(filename, content_type)
        category = classify_file(filename, mime_type)
        handler = self.handlers[category]

        extract_start = time.time()
        try:
            content = await handler(filename, data)
        except Exception as e:
            raise ExtractionError(f"Error reading {filename}: {str(e)}") from e

        logger.info(
            f"Extracted {filename} as {category.value}: {len(content):,} chars "
            f"({time.time() - extract_start:.3f}s)"
        )
        return UploadedFile(
            name=filename,
            type=mime_type,
            content=content,
            mime_type=mime_type,
            category=category
        )

    async def extract_batch(self, uploads: List[RawUpload], progress_callback: Optional[Callable] = None) -> List[UploadedFile]:
        """
        Extract files one at a time in upload order.
        Files that fail are logged and left out of the result.
        """
        processed = []
        total = len(uploads)
        for idx, (filename, data, content_type) in enumerate(uploads):
            if progress_callback:
                progress = 10 + int((idx / total) * 40) if total else 10
                progress_callback("processing", f"Processing: {filename}...", progress)
            try:
                processed.append(await self.extract(filename, data, content_type))
            except Exception as e:
                logger.error(f"Error processing {filename}: {e}", exc_info=True)

        logger.info(f"Extracted {len(processed)}/{total} files")
        return processed

    async def extract_image(self, filename: str, data: bytes) -> str:
        return base64.b64encode(data).decode('utf-8')

    async def extract_text(self, filename: str, data: bytes) -> str:
        return data.decode('utf-8', errors='ignore')

    async def extract_pdf(self, filename: str, data: bytes) -> str:
        return await self.pdf_backend.read_first_page(data, filename)

    async def extract_spreadsheet(self, filename: str, data: bytes) -> str:
        return await asyncio.to_thread(self._read_first_sheet, data)

    async def extract_docx(self, filename: str, data: bytes) -> str:
        return await asyncio.to_thread(self._read_docx, data)

    def _read_first_sheet(self, data: bytes) -> str:
        """Serialize only the first sheet of a workbook to capped CSV"""
        with pd.ExcelFile(io.BytesIO(data)) as workbook:
            if not workbook.sheet_names:
                return ""
            sheet_name = workbook.sheet_names[0]
            df = workbook.parse(sheet_name, header=None)

        csv_text = df.to_csv(index=False, header=False)
        if not csv_text.strip():
            return ""
        return f"\n--- Sheet: {sheet_name} ---\n{truncate_text(csv_text, self.spreadsheet_max_chars)}"

    def _read_docx(self, data: bytes) -> str:
        """Paragraphs and tables of a DOCX file, in document order"""
        doc = Document(io.BytesIO(data))
        content_parts = []

        for element in doc.element.body:
            if isinstance(element, CT_P):
                text = Paragraph(element, doc).text.strip()
                if text:
                    content_parts.append(text)
            elif isinstance(element, CT_Tbl):
                table_data = self._extract_table_data(Table(element, doc))
                if table_data:
                    content_parts.append(f"[TABLE]\n{table_data}\n[/TABLE]")

        return "\n\n".join(content_parts)

    def _extract_table_data(self, table: Table) -> str:
        table_data = []
        for row in table.rows:
            row_data = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if row_data:
                table_data.append(" | ".join(row_data))
        return "\n".join(table_data)
