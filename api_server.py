"""
FastAPI server for the Mutual Fund FAQ Assistant
POST /api/ask, GET /api/health and the static chat assets
"""
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from config_loader import get_config
from constants import EMPTY_QUESTION_MESSAGE, INTERNAL_ERROR_MESSAGE
from enhanced_error_handler import EnhancedErrorHandler
from rag_system import RAGSystem
from structured_logger import configure_logger, generate_request_id

# Load .env for local development
load_dotenv()

config = get_config()
logger = configure_logger(config.log_level, config.log_file)
error_handler = EnhancedErrorHandler(include_debug=not config.is_production)

PUBLIC_DIR = Path(__file__).parent / "public"

app = FastAPI(title="Mutual Fund FAQ Assistant API")

# Initialized on startup unless already set (tests inject their own)
rag: Optional[RAGSystem] = None


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all: same answer shape as every other response"""
    logger.log_error(exc, {'endpoint': str(request.url), 'method': request.method})
    error_response = error_handler.format_error_response(exc, {'endpoint': request.url.path})

    content = {
        "error": error_response['message'],
        "answer": INTERNAL_ERROR_MESSAGE,
        "source_url": None
    }
    if 'debug' in error_response:
        content["debug"] = error_response['debug']
    return JSONResponse(status_code=500, content=content)


app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


@app.on_event("startup")
async def startup_event():
    global rag
    if rag is None:
        logger.info("Initializing RAG system...", event="system_startup")
        rag = RAGSystem.from_config(config, error_handler=error_handler)
    logger.info("RAG system ready", event="system_startup", mode=rag.mode)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down gracefully", event="system_shutdown")
    if rag is not None:
        await rag.close()


class AskRequest(BaseModel):
    # Any so a non-string question becomes a 400 with our message, not a 422
    question: Any = None


def _invalid_question(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": reason,
            "answer": EMPTY_QUESTION_MESSAGE,
            "source_url": None
        }
    )


@app.get("/api/health")
async def health():
    return {
        "status": "ok",
        "message": "FAQ Assistant API is running",
        "mode": rag.mode if rag else None,
        "errors": error_handler.get_error_stats()
    }


@app.post("/api/ask")
async def ask(ask_request: AskRequest):
    """Answer one question"""
    question = ask_request.question
    if not isinstance(question, str) or not question.strip():
        return _invalid_question("Please provide a valid question")
    if len(question) > config.max_query_length:
        return _invalid_question(f"Question is longer than {config.max_query_length} characters")

    if rag is None:
        return JSONResponse(
            status_code=503,
            content={"error": "System is initializing", "answer": INTERNAL_ERROR_MESSAGE, "source_url": None}
        )

    request_id = generate_request_id()
    logger.set_request_id(request_id)
    try:
        result = await rag.answer(question.strip())
    except Exception as e:
        logger.log_error(e, {'endpoint': '/api/ask', 'question': question[:100]})
        error_response = error_handler.format_error_response(e, {'request_id': request_id})
        return JSONResponse(
            status_code=500,
            content={"error": error_response['message'], "answer": INTERNAL_ERROR_MESSAGE, "source_url": None}
        )
    finally:
        logger.set_request_id(None)

    return {"answer": result['answer'], "source_url": result['source_url']}


if PUBLIC_DIR.is_dir():
    # Chat UI (index.html and its assets); mounted last so /api routes win
    app.mount("/", StaticFiles(directory=str(PUBLIC_DIR), html=True), name="public")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.server_host, port=config.server_port)
