"""
NoteCalc API Server - FastAPI backend for an editor frontend.
Provides REST and WebSocket endpoints for incremental document evaluation.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from notecalc.constants import API_HOST, API_PORT, APP_NAME, APP_VERSION, CONSTANTS, FUNCTION_NAMES
from notecalc.document_manager import DocumentManager
from notecalc.syntax_highlighter import SyntaxHighlighter

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class DocumentCreateRequest(BaseModel):
    text: str = ""


class EvaluateRequest(BaseModel):
    text: str
    initial: bool = False


class DisplayRecordModel(BaseModel):
    type: str
    value: Any = ""
    name: Optional[str] = None
    display: str = ""


class EvaluateResponse(BaseModel):
    document_id: str
    title: str
    results: List[DisplayRecordModel]


class DocumentResponse(BaseModel):
    id: str
    title: str
    text: str
    created_at: str
    modified_at: str
    results: List[DisplayRecordModel] = []


class DocumentSummary(BaseModel):
    id: str
    title: str
    modified_at: str


class WebSocketEvaluateMessage(BaseModel):
    type: str
    document_id: Optional[str] = None
    text: str = ""
    initial: bool = False


class SyntaxHighlightRequest(BaseModel):
    text: str


class SyntaxHighlightResponse(BaseModel):
    highlights: List[Dict]


# =============================================================================
# FASTAPI APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=f"{APP_NAME} API",
    description=f"Backend API for the {APP_NAME} notepad calculator",
    version=APP_VERSION
)

# Enable CORS for a browser or desktop-shell frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

documents = DocumentManager()
highlighter = SyntaxHighlighter()


# WebSocket connection manager
class ConnectionManager:
    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def send_personal_message(self, message: Dict[str, Any], websocket: WebSocket):
        await websocket.send_text(json.dumps(message))

manager = ConnectionManager()


def _records(results) -> List[Dict[str, Any]]:
    return [record.to_dict() for record in results]


def _get_document_or_404(doc_id: str):
    document = documents.get_document(doc_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"Document not found: {doc_id}")
    return document


# =============================================================================
# API ENDPOINTS
# =============================================================================

@app.get("/")
@app.head("/")
async def root():
    """Health check endpoint"""
    return {
        "message": f"{APP_NAME} API Server",
        "version": APP_VERSION,
        "status": "running",
        "timestamp": datetime.now().isoformat()
    }


@app.post("/api/documents", response_model=DocumentResponse)
async def create_document(request: DocumentCreateRequest):
    """
    Create a document and evaluate its initial text.
    """
    document = documents.create_document(request.text)
    return document.to_dict(include_results=True)


@app.get("/api/documents", response_model=List[DocumentSummary])
async def list_documents():
    """
    List non-empty documents, most recently modified first.
    """
    return [
        {"id": d.id, "title": d.to_dict()["title"], "modified_at": d.modified_at.isoformat()}
        for d in documents.list_documents()
    ]


@app.get("/api/documents/{doc_id}", response_model=DocumentResponse)
async def get_document(doc_id: str):
    document = _get_document_or_404(doc_id)
    return document.to_dict(include_results=True)


@app.delete("/api/documents/{doc_id}")
async def delete_document(doc_id: str):
    _get_document_or_404(doc_id)
    documents.delete_document(doc_id)
    return {"status": "success", "message": "Document deleted"}


@app.post("/api/documents/{doc_id}/evaluate", response_model=EvaluateResponse)
async def evaluate_document(doc_id: str, request: EvaluateRequest):
    """
    Run one evaluation pass over the complete document text.
    """
    document = _get_document_or_404(doc_id)
    results = documents.update_document(doc_id, request.text, request.initial)
    return {
        "document_id": doc_id,
        "title": document.to_dict()["title"],
        "results": _records(results),
    }


@app.get("/api/documents/{doc_id}/results", response_model=EvaluateResponse)
async def get_results(doc_id: str):
    """
    Current results without re-evaluating.
    """
    document = _get_document_or_404(doc_id)
    return {
        "document_id": doc_id,
        "title": document.to_dict()["title"],
        "results": _records(documents.get_results(doc_id)),
    }


@app.post("/api/syntax-highlight", response_model=SyntaxHighlightResponse)
async def get_syntax_highlighting(request: SyntaxHighlightRequest):
    """
    Get syntax highlighting data for text without evaluation.
    """
    return SyntaxHighlightResponse(highlights=highlighter.highlight_text(request.text))


@app.get("/api/constants")
async def get_constants():
    """
    Named constants usable in any line.
    """
    return {"constants": CONSTANTS}


@app.get("/api/functions")
async def get_available_functions():
    """
    Get list of available functions for autocompletion.
    """
    functions = []
    for func_name in sorted(FUNCTION_NAMES):
        functions.append({
            "name": func_name,
            "description": f"{func_name.upper()} function"
        })

    return {"functions": functions}


# =============================================================================
# WEBSOCKET ENDPOINTS
# =============================================================================

@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for live evaluation while typing.

    Passes run synchronously on the event loop, so two passes over the
    same document never interleave. Clients debounce keystrokes themselves.
    """
    await manager.connect(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                message = None

            if not isinstance(message, dict):
                await manager.send_personal_message(
                    {"type": "error", "message": "Invalid JSON"}, websocket
                )
                continue

            if message.get("type") == "evaluate":
                try:
                    request = WebSocketEvaluateMessage(**message)
                except ValidationError as e:
                    await manager.send_personal_message({
                        "type": "error",
                        "message": f"Invalid evaluate message: {e.errors()}",
                    }, websocket)
                    continue

                doc_id = request.document_id
                if doc_id is None or documents.get_document(doc_id) is None:
                    doc_id = documents.create_document(doc_id=doc_id).id

                results = documents.update_document(
                    doc_id,
                    request.text,
                    request.initial
                )
                await manager.send_personal_message({
                    "type": "evaluation_result",
                    "document_id": doc_id,
                    "results": _records(results),
                }, websocket)
            else:
                await manager.send_personal_message({
                    "type": "error",
                    "message": f"Unknown message type: {message.get('type')}",
                }, websocket)

    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected")
    finally:
        manager.disconnect(websocket)


# =============================================================================
# SERVER STARTUP
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    logger.info("Starting %s API Server at http://%s:%d", APP_NAME, API_HOST, API_PORT)

    uvicorn.run(
        "notecalc.api_server:app",
        host=API_HOST,
        port=API_PORT,
        reload=True,
        log_level="info"
    )
