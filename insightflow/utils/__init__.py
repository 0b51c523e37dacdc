"""Utility functions and helpers"""
from .dependencies import (
    get_openai_client,
    get_pdf_backend,
    get_session_store
)
from .validators import (
    validate_upload_filename,
    validate_chat_message
)

__all__ = [
    "get_openai_client",
    "get_pdf_backend",
    "get_session_store",
    "validate_upload_filename",
    "validate_chat_message"
]
