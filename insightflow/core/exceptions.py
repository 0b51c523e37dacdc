"""Error taxonomy for the ingestion, analysis and chat flows"""


class InsightFlowError(Exception):
    """Base error carrying a user-facing message"""
    default_message = "Unexpected error."

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ExtractionError(InsightFlowError):
    """A single file could not be converted; the file is dropped from the batch"""
    default_message = "Could not read file."


class AnalysisError(InsightFlowError):
    """Any failure that aborts an analysis request"""
    default_message = "Analysis failed."


class NoValidFilesError(AnalysisError):
    default_message = "No valid file processed. Select the files again."


class MissingCredentialsError(AnalysisError):
    default_message = (
        "OpenAI API key not found. Set the OPENAI_API_KEY environment variable "
        "(or add it to the .env file) and restart the service."
    )


class RateLimitedError(AnalysisError):
    default_message = "Too many requests. Wait a moment and try again."


class EmptyResponseError(AnalysisError):
    default_message = "No response from the AI."


class AIServiceError(AnalysisError):
    default_message = "The AI service failed to respond."


class ResponseFormatError(AnalysisError):
    default_message = "Invalid format."


class TruncatedResponseError(ResponseFormatError):
    default_message = (
        "The AI response was cut off (output token limit). "
        "Try sending fewer files."
    )
