from pydantic_settings import BaseSettings
from typing import List, Optional
from pydantic import field_validator

class Settings(BaseSettings):
    # OpenAI Configuration
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_ANALYSIS_MODEL: str = "gpt-4o-mini"
    OPENAI_ANALYSIS_TEMPERATURE: float = 0.2  # Extraction task, keep it deterministic
    OPENAI_ANALYSIS_MAX_TOKENS: int = 8192
    OPENAI_CHAT_MODEL: str = "gpt-4o-mini"
    OPENAI_CHAT_TEMPERATURE: float = 0.7
    OPENAI_CHAT_MAX_TOKENS: int = 2000
    OPENAI_WEB_SEARCH_TOOL: str = "web_search"
    
    # Content Extraction Configuration
    SPREADSHEET_MAX_CHARS: int = 2000
    PDF_PRIMARY_BACKEND: str = "pdfplumber"
    PDF_FALLBACK_BACKEND: str = "pymupdf"
    PDF_BACKEND_INIT_TIMEOUT: float = 4.0  # seconds
    PDF_LOAD_TIMEOUT: float = 10.0  # seconds
    
    # Analysis Configuration
    ANALYSIS_FILE_MAX_CHARS: int = 6000
    ANALYSIS_CHART_MAX_POINTS: int = 7
    
    # Chat Configuration
    CHAT_FILE_MAX_CHARS: int = 2500
    CHAT_CONTEXT_HISTORY_LIMIT: int = 4  # Raw file excerpts only while history is shorter than this
    CHAT_WEB_SEARCH_ENABLED: bool = True
    
    # Report Configuration
    REPORT_HIGHLIGHT_LIMIT: int = 6
    
    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]
    
    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    
    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Split comma-separated string and strip whitespace
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v
    
    @property
    def has_openai_credentials(self) -> bool:
        return bool(self.OPENAI_API_KEY and self.OPENAI_API_KEY.strip())
    
    
    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

settings = Settings()
