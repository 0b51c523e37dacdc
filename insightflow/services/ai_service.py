"""Generative AI service interface and its OpenAI implementation"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List
import time
from insightflow.core.config import settings
from insightflow.core.logging_config import get_logger
from insightflow.utils.dependencies import get_openai_client
from insightflow.models.schemas import (
    ChatReply,
    Citation,
    ContentPart,
    ConversationRequest,
    StructuredRequest
)

logger = get_logger(__name__)

WEB_SEARCH_TOOL = "web_search"


class AIService(ABC):
    """Black-box text generation used by the analysis and chat flows"""

    @abstractmethod
    async def generate_structured(self, request: StructuredRequest) -> str:
        """Single-shot request in JSON output mode; returns the raw response text"""

    @abstractmethod
    async def converse(self, request: ConversationRequest) -> ChatReply:
        """Multi-turn chat request; returns reply text and any cited sources"""


class OpenAIService(AIService):
    """AIService backed by the OpenAI API"""

    def __init__(self, analysis_model: str = None, chat_model: str = None, web_search_tool: str = None):
        self.analysis_model = analysis_model or settings.OPENAI_ANALYSIS_MODEL
        self.chat_model = chat_model or settings.OPENAI_CHAT_MODEL
        self.web_search_tool = web_search_tool or settings.OPENAI_WEB_SEARCH_TOOL

    def _client(self):
        # Resolved per call so a missing key surfaces as MissingCredentialsError
        return get_openai_client()

    async def generate_structured(self, request: StructuredRequest) -> str:
        client = self._client()
        call_start = time.time()

        response = await client.chat.completions.create(
            model=self.analysis_model,
            messages=[
                {"role": "system", "content": request.system_instruction},
                {"role": "user", "content": self._completion_content(request.parts)}
            ],
            response_format={"type": "json_object"},
            temperature=request.temperature,
            max_tokens=request.max_output_tokens
        )

        choice = response.choices[0] if response.choices else None
        text = choice.message.content if choice and choice.message else None
        logger.info(
            f"Structured generation finished in {time.time() - call_start:.3f}s "
            f"(finish_reason={choice.finish_reason if choice else None})"
        )
        return text or ""

    async def converse(self, request: ConversationRequest) -> ChatReply:
        client = self._client()
        call_start = time.time()

        input_items: List[Dict[str, Any]] = [
            {"role": turn.role, "content": turn.text} for turn in request.history
        ]
        input_items.append({"role": "user", "content": self._response_content(request.parts)})

        tools = [{"type": self.web_search_tool} for tool in request.tools if tool == WEB_SEARCH_TOOL]

        kwargs = {
            "model": self.chat_model,
            "instructions": request.system_instruction,
            "input": input_items,
            "temperature": request.temperature,
            "max_output_tokens": request.max_output_tokens,
        }
        if tools:
            kwargs["tools"] = tools

        response = await client.responses.create(**kwargs)

        citations = self._extract_citations(response)
        logger.info(
            f"Chat reply generated in {time.time() - call_start:.3f}s "
            f"({len(citations)} citations)"
        )
        return ChatReply(text=response.output_text or "", citations=citations)

    def _completion_content(self, parts: List[ContentPart]) -> List[Dict[str, Any]]:
        content = []
        for part in parts:
            if part.is_inline_data:
                content.append({
                    "type": "image_url",
                    "image_url": {"url": f"data:{part.mime_type};base64,{part.data}"}
                })
            else:
                content.append({"type": "text", "text": part.text or ""})
        return content

    def _response_content(self, parts: List[ContentPart]) -> List[Dict[str, Any]]:
        content = []
        for part in parts:
            if part.is_inline_data:
                content.append({
                    "type": "input_image",
                    "image_url": f"data:{part.mime_type};base64,{part.data}"
                })
            else:
                content.append({"type": "input_text", "text": part.text or ""})
        return content

    def _extract_citations(self, response) -> List[Citation]:
        """Collect url_citation annotations left by the web search tool"""
        citations = []
        for item in getattr(response, "output", None) or []:
            if getattr(item, "type", None) != "message":
                continue
            for content in getattr(item, "content", None) or []:
                for annotation in getattr(content, "annotations", None) or []:
                    if getattr(annotation, "type", None) == "url_citation":
                        citations.append(Citation(
                            title=annotation.title or annotation.url,
                            uri=annotation.url
                        ))
        return citations
