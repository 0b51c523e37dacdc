from fastapi import APIRouter, UploadFile, File, HTTPException
from fastapi.responses import StreamingResponse
from contextlib import suppress
from typing import List
import time
import json
import asyncio
from insightflow.core.exceptions import AnalysisError
from insightflow.core.logging_config import get_logger
from insightflow.models.schemas import AnalysisResult
from insightflow.services.analysis_service import AnalysisService
from insightflow.services.content_extractor import RawUpload
from insightflow.utils.dependencies import get_session_store
from insightflow.utils.validators import ALLOWED_EXTENSIONS, validate_upload_filename

router = APIRouter()
analysis_service = AnalysisService()
session_store = get_session_store()
logger = get_logger(__name__)


def sse_event(event: dict) -> str:
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


async def stream_analysis(uploads: List[RawUpload], workflow_start: float):
    """Run the analysis, relaying progress updates as SSE events"""
    task = None
    try:
        yield sse_event({'type': 'start', 'status': 'reading', 'message': 'Reading files...', 'progress': 0})
        
        progress_queue: asyncio.Queue = asyncio.Queue()
        
        def progress_callback(status: str, message: str, progress: int):
            session_store.update_step(message)
            progress_queue.put_nowait({
                "type": "progress",
                "status": status,
                "message": message,
                "progress": progress
            })
        
        task = asyncio.create_task(analysis_service.process_uploads(uploads, progress_callback))
        
        # Yield progress updates while processing
        while not task.done() or not progress_queue.empty():
            try:
                event = await asyncio.wait_for(progress_queue.get(), timeout=0.1)
                yield sse_event(event)
            except asyncio.TimeoutError:
                continue
        
        processed_files, result = task.result()
        session_store.complete_analysis(processed_files, result)
        
        total_duration = time.time() - workflow_start
        yield sse_event({
            'type': 'complete',
            'success': True,
            'analysis': result.model_dump(mode='json', by_alias=True),
            'files': [
                {'id': f.id, 'name': f.name, 'type': f.type, 'category': f.category.value}
                for f in processed_files
            ],
            'processing_time': round(total_duration, 2)
        })
    except AnalysisError as e:
        logger.warning(f"Analysis failed: {e}")
        session_store.fail_analysis(str(e))
        yield sse_event({'type': 'error', 'error': str(e)})
    except Exception as e:
        logger.error(f"Unexpected analysis error: {e}", exc_info=True)
        session_store.fail_analysis(str(e) or "Unknown error.")
        yield sse_event({'type': 'error', 'error': str(e) or "Unknown error."})
    finally:
        # Client went away mid-stream: stop the analysis before releasing the session
        if task is not None and not task.done():
            logger.info("Upload stream closed early, cancelling analysis")
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        if session_store.is_processing:
            session_store.fail_analysis("Analysis interrupted.")


@router.post("/upload")
async def upload_files(files: List[UploadFile] = File(...)):
    """Extract uploaded files and generate the dashboard, streaming progress"""
    workflow_start = time.time()
    
    if session_store.is_busy:
        raise HTTPException(status_code=409, detail="Another request is still being processed")
    
    for file in files:
        if not validate_upload_filename(file.filename):
            raise HTTPException(
                status_code=400,
                detail=f"File type of {file.filename} not allowed. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )
    
    # Claim the session before the first await so a concurrent upload sees it busy
    session_store.begin_analysis()
    
    try:
        uploads = [(file.filename, await file.read(), file.content_type) for file in files]
    except Exception as e:
        logger.error(f"Failed to read uploaded files: {e}", exc_info=True)
        session_store.fail_analysis("Could not read the uploaded files.")
        raise HTTPException(status_code=400, detail="Could not read the uploaded files")
    logger.info(f"Received {len(uploads)} files ({sum(len(data) for _, data, _ in uploads) / 1024:.1f} KB)")
    
    return StreamingResponse(
        stream_analysis(uploads, workflow_start),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no"
        }
    )

@router.get("/", response_model=AnalysisResult)
async def get_analysis():
    """Get the current dashboard analysis"""
    if session_store.analysis is None:
        raise HTTPException(status_code=404, detail="No analysis available")
    return session_store.analysis
