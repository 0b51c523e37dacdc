import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional, Union

# Configure logging format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty parser and HTTP client loggers, capped at WARNING
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "pdfminer", "pdfplumber", "multipart")


def log_file_path(log_dir: Union[str, Path], day: Optional[datetime] = None) -> Path:
    """One log file per service day: <log_dir>/insightflow_YYYYMMDD.log"""
    day = day or datetime.now()
    return Path(log_dir) / f"insightflow_{day.strftime('%Y%m%d')}.log"


def setup_logging(log_level: str = "INFO", log_dir: Union[str, Path] = "logs") -> logging.Logger:
    """
    Set up logging configuration for the service
    
    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the daily log file, created if missing
    """
    # Create logs directory if it doesn't exist
    log_file = log_file_path(log_dir)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    
    # Convert string to logging level
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    
    # Configure root logger
    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[
            # Console handler (stdout)
            logging.StreamHandler(sys.stdout),
            # File handler
            logging.FileHandler(log_file, encoding='utf-8')
        ]
    )
    
    # Set specific loggers
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
    
    # Reduce noise from third-party libraries
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    
    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured. Log level: {log_level}. Log file: {log_file}")
    
    return logger

def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module (usually called with __name__)"""
    return logging.getLogger(name)
