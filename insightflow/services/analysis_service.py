from typing import Any, Callable, Dict, List, Optional, Tuple
import time
from pydantic import ValidationError
from openai import RateLimitError
from insightflow.core.config import settings
from insightflow.core.exceptions import (
    AIServiceError,
    AnalysisError,
    EmptyResponseError,
    NoValidFilesError,
    RateLimitedError,
    ResponseFormatError
)
from insightflow.core.logging_config import get_logger
from insightflow.models.schemas import AnalysisResult, ContentPart, StructuredRequest, UploadedFile
from insightflow.services.ai_service import AIService, OpenAIService
from insightflow.services.content_extractor import ContentExtractor, RawUpload, truncate_text
from insightflow.services.response_normalizer import parse_json_response
from insightflow.utils.prompts import (
    DASHBOARD_PROMPT,
    DASHBOARD_SYSTEM_INSTRUCTION,
    build_analysis_file_block
)

logger = get_logger(__name__)

LIST_FIELDS = ("insights", "kpis", "chartData", "suggestedQuestions")
DEFAULT_CHART_TYPE = "area"


def is_rate_limit_error(error: Exception) -> bool:
    """Recognize an HTTP 429 in whatever shape the client raised it"""
    if isinstance(error, RateLimitError):
        return True
    if getattr(error, "status_code", None) == 429:
        return True
    return "429" in str(error)


class AnalysisService:
    """Service for turning uploaded files into a dashboard analysis"""

    def __init__(self, ai_service: Optional[AIService] = None, extractor: Optional[ContentExtractor] = None):
        self.ai_service = ai_service or OpenAIService()
        self.extractor = extractor or ContentExtractor()
        self.file_max_chars = settings.ANALYSIS_FILE_MAX_CHARS

    async def process_uploads(
        self,
        uploads: List[RawUpload],
        progress_callback: Optional[Callable] = None
    ) -> Tuple[List[UploadedFile], AnalysisResult]:
        """
        Full upload flow: extract every file, then analyze the survivors.
        Raises NoValidFilesError when no file could be extracted.
        """
        if progress_callback:
            progress_callback("reading", "Reading files...", 5)

        files = await self.extractor.extract_batch(uploads, progress_callback)
        if not files:
            raise NoValidFilesError()

        result = await self.analyze(files, progress_callback)
        return files, result

    async def analyze(self, files: List[UploadedFile], progress_callback: Optional[Callable] = None) -> AnalysisResult:
        """Produce one AnalysisResult from the extracted files"""
        if not files:
            raise NoValidFilesError()

        analysis_start = time.time()
        if progress_callback:
            progress_callback("processing", "Processing documents...", 60)
        request = self.build_request(files)

        if progress_callback:
            progress_callback("generating", "Generating strategic intelligence...", 80)
        try:
            response_text = await self.ai_service.generate_structured(request)
        except AnalysisError:
            raise
        except Exception as e:
            if is_rate_limit_error(e):
                logger.warning(f"AI service rate limited: {e}")
                raise RateLimitedError() from e
            logger.error(f"AI service error: {e}", exc_info=True)
            raise AIServiceError(str(e) or None) from e

        if not response_text or not response_text.strip():
            raise EmptyResponseError()

        result = self.normalize_result(parse_json_response(response_text))

        if progress_callback:
            progress_callback("complete", "Analysis complete", 100)
        logger.info(
            f"Analysis of {len(files)} files finished in {time.time() - analysis_start:.3f}s: "
            f"{len(result.kpis)} KPIs, {len(result.insights)} insights, "
            f"{len(result.chart_data)} chart points ({result.chart_type})"
        )
        return result

    def build_request(self, files: List[UploadedFile]) -> StructuredRequest:
        """One combined request: file parts in upload order, then the instruction"""
        parts = []
        for file in files:
            if file.is_image:
                parts.append(ContentPart(mime_type=file.mime_type, data=file.content))
            else:
                content = truncate_text(file.content, self.file_max_chars)
                parts.append(ContentPart(text=build_analysis_file_block(file.name, content)))

        parts.append(ContentPart(text=DASHBOARD_PROMPT))

        return StructuredRequest(
            parts=parts,
            system_instruction=DASHBOARD_SYSTEM_INSTRUCTION,
            temperature=settings.OPENAI_ANALYSIS_TEMPERATURE,
            max_output_tokens=settings.OPENAI_ANALYSIS_MAX_TOKENS
        )

    def normalize_result(self, payload: Dict[str, Any]) -> AnalysisResult:
        """Fill defaults for omitted fields and validate the dashboard shape"""
        data = dict(payload)
        for field in LIST_FIELDS:
            if not data.get(field):
                data[field] = []
        if not data.get("chartType"):
            data["chartType"] = DEFAULT_CHART_TYPE
        if data.get("summary") is None:
            data["summary"] = ""
        if isinstance(data["chartData"], list):
            data["chartData"] = data["chartData"][:settings.ANALYSIS_CHART_MAX_POINTS]

        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Analysis response failed validation: {e}")
            raise ResponseFormatError(
                "The AI response did not match the dashboard structure. Try again."
            ) from e
