from __future__ import annotations

import logging
import os
import sys
import uuid
from datetime import datetime
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse, StreamingResponse

from luthier.config.settings import settings
from luthier.loader.image_loader import ImageLoader, InvalidImageError
from luthier.pipeline.workbench import (
    ChatUnavailableError,
    NoImageError,
    OperationInProgressError,
    Workbench,
)
from luthier.schema.characteristics import vocabulary
from luthier.schema.input_schema import ChatRequest, ImageUploadRequest, SpecUpdateRequest, TabRequest
from luthier.schema.output_schema import WorkbenchView
from luthier.schema.specification import PRESETS, preset_catalog
from luthier.vision.client import LuthierClient, OpenAIVisionClient, VisionClient
from luthier.vision.gemini_client import GeminiLuthierClient
from luthier.vision.mock_client import MockLuthierClient


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Luthier Workbench API",
    description="Guitar modification simulator: image analysis, lutherie prompts, rendering and advisory chat",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

FRONTEND_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "frontend")

# Mount static files (frontend)
try:
    if os.path.exists(FRONTEND_PATH):
        app.mount("/static", StaticFiles(directory=FRONTEND_PATH), name="static")
        logger.info(f"Frontend mounted from: {FRONTEND_PATH}")
except Exception as e:
    logger.warning(f"Could not mount frontend: {e}")


luthier_client: Optional[LuthierClient] = None
vision_client: Optional[VisionClient] = None
image_loader = ImageLoader()
sessions: Dict[str, Workbench] = {}


@app.on_event("startup")
async def startup_event():
    global luthier_client, vision_client

    if luthier_client is not None:
        logger.info("Using pre-configured luthier client")
        return

    logger.info("Initializing collaborators...")

    if settings.USE_MOCK_CLIENT:
        logger.warning("LUTHIER_MOCK is set, using the offline mock client")
        luthier_client = MockLuthierClient()
        return

    if not os.getenv(settings.GEMINI_API_KEY_ENV):
        logger.error(f"{settings.GEMINI_API_KEY_ENV} is not set. Please set the environment variable.")
        sys.exit(1)

    luthier_client = GeminiLuthierClient()
    if settings.ANALYSIS_PROVIDER == "openai":
        vision_client = OpenAIVisionClient()
        logger.info("Image analysis routed to OpenAI")

    logger.info("Collaborators initialized successfully")


def _get_workbench(session_id: str) -> Workbench:
    workbench = sessions.get(session_id)
    if workbench is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return workbench


@app.post("/sessions", response_model=WorkbenchView)
async def create_session() -> WorkbenchView:
    if luthier_client is None:
        raise HTTPException(status_code=500, detail="Collaborators not initialized")

    session_id = uuid.uuid4().hex
    workbench = Workbench(luthier_client, analyzer=vision_client, image_loader=image_loader)
    sessions[session_id] = workbench
    logger.info(f"Session created: {session_id}, chat_available={workbench.chat_available}")
    return workbench.view(session_id)


@app.get("/sessions/{session_id}", response_model=WorkbenchView)
async def get_session(session_id: str) -> WorkbenchView:
    return _get_workbench(session_id).view(session_id)


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    _get_workbench(session_id)
    del sessions[session_id]
    logger.info(f"Session discarded: {session_id}")
    return {"deleted": session_id}


@app.post("/sessions/{session_id}/tab", response_model=WorkbenchView)
async def switch_tab(session_id: str, request: TabRequest) -> WorkbenchView:
    workbench = _get_workbench(session_id)
    workbench.switch_tab(request.tab)
    return workbench.view(session_id)


@app.post("/sessions/{session_id}/image", response_model=WorkbenchView)
async def upload_image(session_id: str, request: ImageUploadRequest) -> WorkbenchView:
    """
    Upload the source photo and analyze it.

    A failed analysis is not an HTTP error: the view comes back with the
    status string in `error` and no analysis.
    """
    workbench = _get_workbench(session_id)
    try:
        image = image_loader.load_base64(request.image, request.mime_type)
        await workbench.upload_image(image.data, image.mime_type)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OperationInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return workbench.view(session_id)


@app.post("/sessions/{session_id}/analyze", response_model=WorkbenchView)
async def analyze(session_id: str) -> WorkbenchView:
    workbench = _get_workbench(session_id)
    try:
        await workbench.analyze()
    except NoImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OperationInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return workbench.view(session_id)


@app.patch("/sessions/{session_id}/specs", response_model=WorkbenchView)
async def update_specs(session_id: str, request: SpecUpdateRequest) -> WorkbenchView:
    workbench = _get_workbench(session_id)
    try:
        workbench.update_specs(request.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return workbench.view(session_id)


@app.post("/sessions/{session_id}/presets/{name}", response_model=WorkbenchView)
async def apply_preset(session_id: str, name: str) -> WorkbenchView:
    workbench = _get_workbench(session_id)
    if name not in PRESETS:
        raise HTTPException(status_code=404, detail=f"Unknown preset: {name}")
    workbench.apply_preset(name)
    return workbench.view(session_id)


@app.post("/sessions/{session_id}/generate", response_model=WorkbenchView)
async def generate(session_id: str) -> WorkbenchView:
    workbench = _get_workbench(session_id)
    try:
        await workbench.generate()
    except NoImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OperationInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return workbench.view(session_id)


@app.post("/sessions/{session_id}/chat")
async def chat(session_id: str, request: ChatRequest) -> StreamingResponse:
    """
    Stream the advisory answer as NDJSON lines of {"type", "text"}.

    type is "fragment" for each piece of text, then "done" with the full
    answer, or "interrupted" with the notice that replaces it.
    """
    workbench = _get_workbench(session_id)
    try:
        text = workbench.begin_chat(request.message)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ChatUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except OperationInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    async def event_lines():
        async for event in workbench.stream_response(text):
            yield event.model_dump_json() + "\n"

    return StreamingResponse(event_lines(), media_type="application/x-ndjson")


@app.get("/vocabulary")
async def get_vocabulary():
    return {
        "options": vocabulary(),
        "presets": preset_catalog(),
    }


@app.get("/")
async def root():
    """
    Serve the frontend application.
    """
    index_path = os.path.join(FRONTEND_PATH, "index.html")

    if os.path.exists(index_path):
        return FileResponse(index_path)
    else:
        return {
            "message": "Luthier Workbench API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/health"
        }


@app.get("/health")
async def health():
    """
    Health check endpoint with system status.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "version": "1.0.0",
        "components": {
            "api": "operational",
            "gemini_configured": bool(os.getenv(settings.GEMINI_API_KEY_ENV)),
            "client_initialized": luthier_client is not None,
            "analysis_provider": settings.ANALYSIS_PROVIDER,
            "active_sessions": len(sessions),
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
