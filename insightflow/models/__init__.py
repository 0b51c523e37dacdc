"""Data models and types for the application"""
from .schemas import (
    FileCategory,
    UploadedFile,
    Kpi,
    Insight,
    ChartPoint,
    AnalysisResult,
    ChatMessage,
    ContentPart,
    StructuredRequest,
    ConversationTurn,
    ConversationRequest,
    Citation,
    ChatReply,
    ChatRequest,
    ChatResponse,
    SessionState,
    ReportHighlight,
    ReportDigest
)

__all__ = [
    "FileCategory",
    "UploadedFile",
    "Kpi",
    "Insight",
    "ChartPoint",
    "AnalysisResult",
    "ChatMessage",
    "ContentPart",
    "StructuredRequest",
    "ConversationTurn",
    "ConversationRequest",
    "Citation",
    "ChatReply",
    "ChatRequest",
    "ChatResponse",
    "SessionState",
    "ReportHighlight",
    "ReportDigest"
]
