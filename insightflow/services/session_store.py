"""In-memory session state shared by the API routes"""
from typing import List, Optional
from insightflow.core.logging_config import get_logger
from insightflow.models.schemas import (
    AnalysisResult,
    ChatMessage,
    SessionState,
    UploadedFile
)
from insightflow.utils.demo import DEMO_FILE, DEMO_GREETING, DEMO_RESULT

logger = get_logger(__name__)


class SessionStore:
    """
    Single-session state: files, analysis, chat history and UI flags.
    Mutated only after an async step completes; is_busy guards against
    overlapping submissions.
    """

    def __init__(self):
        self.reset()

    def reset(self):
        self.files: List[UploadedFile] = []
        self.analysis: Optional[AnalysisResult] = None
        self.messages: List[ChatMessage] = []
        self.is_processing = False
        self.is_chat_loading = False
        self.processing_step = ""
        self.error: Optional[str] = None

    @property
    def is_busy(self) -> bool:
        return self.is_processing or self.is_chat_loading

    def begin_analysis(self):
        """Start a new analysis; previous results and conversation are discarded"""
        self.files = []
        self.analysis = None
        self.messages = []
        self.error = None
        self.is_processing = True
        self.processing_step = "Reading files..."

    def update_step(self, message: str):
        self.processing_step = message

    def complete_analysis(self, files: List[UploadedFile], result: AnalysisResult):
        self.files = list(files)
        self.analysis = result
        self._finish_processing()

    def fail_analysis(self, message: str):
        self.error = message
        self._finish_processing()

    def _finish_processing(self):
        self.is_processing = False
        self.processing_step = ""

    def begin_chat(self):
        self.is_chat_loading = True

    def end_chat(self):
        self.is_chat_loading = False

    def add_message(self, role: str, text: str) -> ChatMessage:
        message = ChatMessage(role=role, text=text)
        self.messages.append(message)
        return message

    def history(self) -> List[ChatMessage]:
        return list(self.messages)

    def load_demo(self):
        """Populate the session with the fixed demo scenario"""
        self.reset()
        self.files = [DEMO_FILE]
        self.analysis = DEMO_RESULT
        self.add_message("assistant", DEMO_GREETING)
        logger.info("Demo scenario loaded")

    def snapshot(self) -> SessionState:
        return SessionState(
            files=self.files,
            analysis=self.analysis,
            messages=self.messages,
            is_processing=self.is_processing,
            is_chat_loading=self.is_chat_loading,
            processing_step=self.processing_step,
            error=self.error
        )
