"""Dependency injection utilities for external services"""
from typing import Optional
from openai import AsyncOpenAI
from insightflow.core.config import settings
from insightflow.core.exceptions import MissingCredentialsError
from insightflow.services.pdf_backend import PdfBackend
from insightflow.services.session_store import SessionStore

# Global clients (singleton pattern)
_openai_client: Optional[AsyncOpenAI] = None
_pdf_backend: Optional[PdfBackend] = None
_session_store: Optional[SessionStore] = None


def get_openai_client() -> AsyncOpenAI:
    """Get or create OpenAI client (singleton)"""
    global _openai_client
    if _openai_client is None:
        if not settings.has_openai_credentials:
            raise MissingCredentialsError()
        _openai_client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
    return _openai_client


def get_pdf_backend() -> PdfBackend:
    """Get or create the PDF parsing backend (singleton)"""
    global _pdf_backend
    if _pdf_backend is None:
        _pdf_backend = PdfBackend(
            init_timeout=settings.PDF_BACKEND_INIT_TIMEOUT,
            load_timeout=settings.PDF_LOAD_TIMEOUT,
            primary=settings.PDF_PRIMARY_BACKEND,
            fallback=settings.PDF_FALLBACK_BACKEND
        )
    return _pdf_backend


def get_session_store() -> SessionStore:
    """Get or create the in-memory session (singleton)"""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store
