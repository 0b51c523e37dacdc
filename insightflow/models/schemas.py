"""Pydantic schemas for session entities, AI requests and API payloads"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Literal, Union
from datetime import datetime
from enum import Enum
import uuid


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


class FileCategory(str, Enum):
    """Closed set of ingestion strategies, one extractor handler per member"""
    IMAGE = "image"
    SPREADSHEET = "spreadsheet"
    DOCUMENT = "document"
    WORD = "word"
    TEXT = "text"


class UploadedFile(BaseModel):
    """File converted into a transmit-safe payload"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    name: str
    type: str
    content: str
    mime_type: str
    category: FileCategory

    @property
    def is_image(self) -> bool:
        return self.category == FileCategory.IMAGE


class Kpi(BaseModel):
    label: str
    value: Union[str, int, float] = ""
    trend: Literal["up", "down", "neutral"] = "neutral"

    @field_validator("value", mode="before")
    @classmethod
    def coerce_missing_value(cls, v):
        return "" if v is None else v

    @field_validator("trend", mode="before")
    @classmethod
    def coerce_trend(cls, v):
        if v in ("up", "down", "neutral"):
            return v
        return "neutral"


class Insight(BaseModel):
    type: Literal["problem", "opportunity", "info"] = "info"
    title: str
    description: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v):
        if v in ("problem", "opportunity", "info"):
            return v
        return "info"


class ChartPoint(BaseModel):
    name: str
    value: float

    @field_validator("name", mode="before")
    @classmethod
    def stringify_name(cls, v):
        return v if isinstance(v, str) else str(v)


ChartType = Literal["area", "bar", "line", "pie"]


class AnalysisResult(BaseModel):
    """Dashboard produced by one analysis call"""
    model_config = ConfigDict(populate_by_name=True)

    summary: str = ""
    kpis: List[Kpi] = []
    insights: List[Insight] = []
    chart_data: List[ChartPoint] = Field(default=[], alias="chartData")
    chart_type: ChartType = Field(default="area", alias="chartType")
    suggested_questions: List[str] = Field(default=[], alias="suggestedQuestions")

    @field_validator("chart_type", mode="before")
    @classmethod
    def coerce_chart_type(cls, v):
        if v in ("area", "bar", "line", "pie"):
            return v
        return "area"


class ChatMessage(BaseModel):
    """Single chat turn, never mutated after creation"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    role: Literal["user", "assistant"]
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)


# AI service request/response shapes

class ContentPart(BaseModel):
    """Text block or inline base64 payload sent to the AI service"""
    text: Optional[str] = None
    mime_type: Optional[str] = None
    data: Optional[str] = None

    @property
    def is_inline_data(self) -> bool:
        return self.data is not None


class StructuredRequest(BaseModel):
    parts: List[ContentPart]
    system_instruction: str
    temperature: float
    max_output_tokens: int


class ConversationTurn(BaseModel):
    role: Literal["user", "assistant"]
    text: str


class ConversationRequest(BaseModel):
    history: List[ConversationTurn] = []
    parts: List[ContentPart]
    system_instruction: str
    temperature: float
    max_output_tokens: int
    tools: List[str] = []


class Citation(BaseModel):
    title: str
    uri: str


class ChatReply(BaseModel):
    text: str = ""
    citations: List[Citation] = []


# API payloads

class ChatRequest(BaseModel):
    """Chat message request model"""
    message: str


class ChatResponse(BaseModel):
    """Chat response model"""
    user_message: ChatMessage
    reply: ChatMessage


class SessionState(BaseModel):
    """Snapshot of the in-memory session"""
    files: List[UploadedFile] = []
    analysis: Optional[AnalysisResult] = None
    messages: List[ChatMessage] = []
    is_processing: bool = False
    is_chat_loading: bool = False
    processing_step: str = ""
    error: Optional[str] = None


class ReportHighlight(BaseModel):
    speaker: str
    text: str


class ReportDigest(BaseModel):
    """Textual export of the dashboard and the latest discussion"""
    title: str
    generated_at: datetime
    analysis: AnalysisResult
    highlights: List[ReportHighlight] = []
