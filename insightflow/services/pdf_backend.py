"""PDF parsing backend with lazy, idempotent engine initialization"""
import asyncio
import importlib
import io
import time
from typing import Optional
from insightflow.core.logging_config import get_logger

logger = get_logger(__name__)


class PdfPlumberEngine:
    """pdfplumber (pdfminer.six) text extraction"""
    name = "pdfplumber"

    def __init__(self):
        self.pdfplumber = importlib.import_module("pdfplumber")

    def open(self, data: bytes):
        return self.pdfplumber.open(io.BytesIO(data))

    def page_count(self, doc) -> int:
        return len(doc.pages)

    def page_text(self, doc, index: int) -> str:
        words = doc.pages[index].extract_words()
        return " ".join(word["text"] for word in words)

    def close(self, doc):
        doc.close()


class PyMuPdfEngine:
    """PyMuPDF (fitz) text extraction"""
    name = "pymupdf"

    def __init__(self):
        self.fitz = importlib.import_module("fitz")

    def open(self, data: bytes):
        return self.fitz.open(stream=data, filetype="pdf")

    def page_count(self, doc) -> int:
        return doc.page_count

    def page_text(self, doc, index: int) -> str:
        # Word tuples: (x0, y0, x1, y1, text, block, line, word)
        words = doc[index].get_text("words")
        return " ".join(word[4] for word in words)

    def close(self, doc):
        doc.close()


ENGINES = {
    PdfPlumberEngine.name: PdfPlumberEngine,
    PyMuPdfEngine.name: PyMuPdfEngine,
}


class PdfBackend:
    """
    Reads the first page of PDF documents.

    The engine is chosen once, on the first call to ensure_ready():
    - the primary engine is initialized within init_timeout
    - on failure or timeout the fallback engine is initialized instead
    - if both fail, reads return a placeholder instead of raising
    """

    PAGE_LIMIT = 1

    def __init__(
        self,
        init_timeout: float = 4.0,
        load_timeout: float = 10.0,
        primary: str = PdfPlumberEngine.name,
        fallback: str = PyMuPdfEngine.name
    ):
        self.init_timeout = init_timeout
        self.load_timeout = load_timeout
        self.primary = primary
        self.fallback = fallback
        self.engine = None
        self._setup_task: Optional[asyncio.Task] = None

    @property
    def engine_name(self) -> Optional[str]:
        return self.engine.name if self.engine else None

    async def ensure_ready(self):
        """Initialize the engine once; concurrent callers share the same setup"""
        if self.engine is not None:
            return
        if self._setup_task is None:
            self._setup_task = asyncio.ensure_future(self._setup())
        await asyncio.shield(self._setup_task)

    async def _setup(self):
        setup_start = time.time()
        try:
            self.engine = await asyncio.wait_for(
                asyncio.to_thread(self._create_engine, self.primary),
                timeout=self.init_timeout
            )
        except Exception as e:
            logger.warning(
                f"PDF backend '{self.primary}' unavailable ({type(e).__name__}: {e}), "
                f"falling back to '{self.fallback}'"
            )
            try:
                self.engine = await asyncio.wait_for(
                    asyncio.to_thread(self._create_engine, self.fallback),
                    timeout=self.init_timeout
                )
            except Exception as fallback_error:
                logger.error(
                    f"PDF fallback backend '{self.fallback}' unavailable: {fallback_error}",
                    exc_info=True
                )
                # Allow a later call to retry the setup
                self._setup_task = None
                return

        logger.info(f"PDF backend ready: {self.engine.name} ({time.time() - setup_start:.3f}s)")

    def _create_engine(self, name: str):
        engine_cls = ENGINES.get(name)
        if engine_cls is None:
            raise ValueError(f"Unknown PDF backend: {name}")
        return engine_cls()

    async def read_first_page(self, data: bytes, filename: str) -> str:
        """
        Extract the text of page 1 under a page header.

        Never raises: an unreadable document yields an error placeholder
        naming the file, a failed page yields a page error marker.
        """
        try:
            await asyncio.wait_for(self.ensure_ready(), timeout=self.init_timeout * 2)
        except Exception as e:
            logger.warning(f"PDF backend setup issue, attempting read anyway: {e}")

        try:
            if self.engine is None:
                raise RuntimeError("No PDF backend available")
            return await asyncio.wait_for(
                asyncio.to_thread(self._read_pages, self.engine, data),
                timeout=self.load_timeout
            )
        except Exception as e:
            logger.error(f"PDF read error for {filename}: {e}", exc_info=True)
            return f"[PDF READ ERROR: {filename}]"

    def _read_pages(self, engine, data: bytes) -> str:
        doc = engine.open(data)
        try:
            text = ""
            max_pages = min(engine.page_count(doc), self.PAGE_LIMIT)
            for index in range(max_pages):
                try:
                    page_text = engine.page_text(doc, index)
                    text += f"\n--- PDF Page {index + 1} ---\n{page_text}"
                except Exception as page_error:
                    logger.warning(f"Page {index + 1} extraction failed: {page_error}")
                    text += f"\n--- PDF Page {index + 1} (error) ---"
            return text
        finally:
            engine.close(doc)
