from fastapi import APIRouter, HTTPException
from insightflow.models.schemas import ReportDigest, SessionState
from insightflow.services.report_service import build_report
from insightflow.utils.dependencies import get_session_store
from insightflow.core.logging_config import get_logger

router = APIRouter()
session_store = get_session_store()
logger = get_logger(__name__)

@router.get("/", response_model=SessionState)
async def get_session():
    """Get a snapshot of the current session"""
    return session_store.snapshot()

@router.post("/reset", response_model=SessionState)
async def reset_session():
    """Discard files, analysis and conversation"""
    if session_store.is_busy:
        raise HTTPException(status_code=409, detail="Another request is still being processed")
    session_store.reset()
    logger.info("Session reset")
    return session_store.snapshot()

@router.post("/demo", response_model=SessionState)
async def load_demo():
    """Load the sample scenario without calling the AI service"""
    if session_store.is_busy:
        raise HTTPException(status_code=409, detail="Another request is still being processed")
    session_store.load_demo()
    return session_store.snapshot()

@router.get("/report", response_model=ReportDigest)
async def get_report():
    """Get the exportable digest of the dashboard and recent discussion"""
    if session_store.analysis is None:
        raise HTTPException(status_code=404, detail="No analysis available")
    return build_report(session_store.analysis, session_store.messages)
