"""Service for composing the exportable report digest"""
from typing import List
from datetime import datetime
from insightflow.core.config import settings
from insightflow.models.schemas import AnalysisResult, ChatMessage, ReportDigest, ReportHighlight

REPORT_TITLE = "InsightFlow Strategic Report"
SPEAKER_LABELS = {"user": "You", "assistant": "InsightFlow"}


def build_report(analysis: AnalysisResult, messages: List[ChatMessage]) -> ReportDigest:
    """Dashboard plus the last few chat turns, ready for a renderer"""
    limit = settings.REPORT_HIGHLIGHT_LIMIT
    recent = messages[-limit:] if limit > 0 else []

    return ReportDigest(
        title=REPORT_TITLE,
        generated_at=datetime.now(),
        analysis=analysis,
        highlights=[
            ReportHighlight(speaker=SPEAKER_LABELS[msg.role], text=msg.text)
            for msg in recent
        ]
    )
