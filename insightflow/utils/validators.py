"""Validation utilities for incoming uploads and chat input"""
from pathlib import Path

ALLOWED_EXTENSIONS = {
    '.csv', '.txt', '.json', '.md',
    '.png', '.jpg', '.jpeg', '.webp',
    '.pdf', '.xls', '.xlsx', '.docx'
}


def validate_upload_filename(filename: str) -> bool:
    """Check that an uploaded file has one of the accepted extensions"""
    if not filename:
        return False
    
    file_ext = Path(filename).suffix.lower()
    return file_ext in ALLOWED_EXTENSIONS


def validate_chat_message(message: str) -> bool:
    """Validate chat message text"""
    if not message:
        return False
    
    return bool(str(message).strip())
