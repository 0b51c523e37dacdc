"""Main chat service - orchestrates one assistant reply"""
from typing import List, Optional
import time
from insightflow.core.logging_config import get_logger
from insightflow.models.schemas import AnalysisResult, ChatMessage, ChatReply, UploadedFile
from insightflow.services.ai_service import AIService, OpenAIService
from insightflow.services.response_builder import ResponseBuilder
from insightflow.utils.prompts import CHAT_APOLOGY, EMPTY_CHAT_REPLY, build_sources_section

logger = get_logger(__name__)


class ChatService:
    """Conversational assistant over the analyzed files"""

    def __init__(self, ai_service: Optional[AIService] = None, response_builder: Optional[ResponseBuilder] = None):
        self.ai_service = ai_service or OpenAIService()
        self.response_builder = response_builder or ResponseBuilder()

    async def reply(
        self,
        history: List[ChatMessage],
        message: str,
        files: List[UploadedFile],
        analysis_context: Optional[AnalysisResult] = None
    ) -> str:
        """
        Generate the assistant reply to a user turn.

        Never raises: any failure becomes the fixed apology text, so the
        user never sees raw technical errors from the chat path.
        """
        reply_start = time.time()
        try:
            request = self.response_builder.build_request(
                message=message,
                history=history,
                files=files,
                analysis_context=analysis_context
            )
            logger.info(
                f"Chat turn: {len(request.history)} prior turns, "
                f"{len(request.parts) - 1} file excerpts attached"
            )

            chat_reply = await self.ai_service.converse(request)
            text = self.format_reply(chat_reply)

            logger.info(f"Chat reply ready in {time.time() - reply_start:.3f}s")
            return text

        except Exception as e:
            logger.error(f"Chat error: {e}", exc_info=True)
            return CHAT_APOLOGY

    def format_reply(self, chat_reply: ChatReply) -> str:
        """Reply text followed by the deduplicated list of sources consulted"""
        text = chat_reply.text or EMPTY_CHAT_REPLY

        sources = []
        for citation in chat_reply.citations:
            source = f"[{citation.title}]({citation.uri})"
            if source not in sources:
                sources.append(source)

        return text + build_sources_section(sources)
