"""Service for building conversation context and chat requests"""
from typing import List, Optional
from insightflow.core.config import settings
from insightflow.models.schemas import (
    AnalysisResult,
    ChatMessage,
    ContentPart,
    ConversationRequest,
    ConversationTurn,
    UploadedFile
)
from insightflow.services.ai_service import WEB_SEARCH_TOOL
from insightflow.services.content_extractor import truncate_text
from insightflow.utils.prompts import (
    MEMORY_PREAMBLE,
    build_chat_excerpt_block,
    build_chat_system_instruction
)

EXCERPT_MARKER = "\n[...]"


class ResponseBuilder:
    """Service for building conversation context and messages"""

    def __init__(self, excerpt_max_chars: Optional[int] = None, context_history_limit: Optional[int] = None):
        self.excerpt_max_chars = excerpt_max_chars or settings.CHAT_FILE_MAX_CHARS
        self.context_history_limit = context_history_limit or settings.CHAT_CONTEXT_HISTORY_LIMIT

    def build_request(
        self,
        message: str,
        history: List[ChatMessage],
        files: List[UploadedFile],
        analysis_context: Optional[AnalysisResult] = None
    ) -> ConversationRequest:
        """Build the complete chat request for the AI service"""
        memory_context = self.build_memory_context(analysis_context)

        return ConversationRequest(
            history=self.build_history(history),
            parts=self.build_turn_parts(message, history, files),
            system_instruction=build_chat_system_instruction(memory_context),
            temperature=settings.OPENAI_CHAT_TEMPERATURE,
            max_output_tokens=settings.OPENAI_CHAT_MAX_TOKENS,
            tools=[WEB_SEARCH_TOOL] if settings.CHAT_WEB_SEARCH_ENABLED else []
        )

    def build_memory_context(self, analysis_context: Optional[AnalysisResult]) -> str:
        """Digest of the last analysis, carried forward instead of the raw files"""
        memory_context = MEMORY_PREAMBLE
        if analysis_context:
            kpis = ", ".join(f"{kpi.label}: {kpi.value}" for kpi in analysis_context.kpis)
            memory_context += f"SUMMARY: {analysis_context.summary}\n"
            memory_context += f"KPIs: {kpis}\n"
        return memory_context

    def build_history(self, history: List[ChatMessage]) -> List[ConversationTurn]:
        return [ConversationTurn(role=msg.role, text=msg.text) for msg in history]

    def should_attach_files(self, history: List[ChatMessage]) -> bool:
        # Early turns get raw excerpts; later ones rely on the memory digest
        return len(history) < self.context_history_limit

    def build_turn_parts(self, message: str, history: List[ChatMessage], files: List[UploadedFile]) -> List[ContentPart]:
        parts = []
        if self.should_attach_files(history):
            for file in files:
                if file.is_image:
                    continue
                excerpt = truncate_text(file.content, self.excerpt_max_chars, EXCERPT_MARKER)
                parts.append(ContentPart(text=build_chat_excerpt_block(file.name, excerpt)))

        parts.append(ContentPart(text=message))
        return parts
