from fastapi import APIRouter, HTTPException
from typing import List
from insightflow.models.schemas import ChatMessage, ChatRequest, ChatResponse
from insightflow.services.chat_service import ChatService
from insightflow.utils.dependencies import get_session_store
from insightflow.utils.validators import validate_chat_message
from insightflow.core.logging_config import get_logger

router = APIRouter()
chat_service = ChatService()
session_store = get_session_store()
logger = get_logger(__name__)

@router.post("/message", response_model=ChatResponse)
async def send_message(request: ChatRequest):
    """Append the user turn, then the assistant reply"""
    if not validate_chat_message(request.message):
        raise HTTPException(status_code=400, detail="Message must not be empty")
    if session_store.is_busy:
        raise HTTPException(status_code=409, detail="Another request is still being processed")
    
    history = session_store.history()
    user_message = session_store.add_message("user", request.message)
    
    session_store.begin_chat()
    try:
        reply_text = await chat_service.reply(
            history=history,
            message=request.message,
            files=session_store.files,
            analysis_context=session_store.analysis
        )
    finally:
        session_store.end_chat()
    
    reply = session_store.add_message("assistant", reply_text)
    return ChatResponse(user_message=user_message, reply=reply)

@router.get("/history", response_model=List[ChatMessage])
async def get_history():
    """Get the chat messages in send order"""
    return session_store.history()
