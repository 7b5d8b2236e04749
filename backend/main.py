from typing import Optional, Union

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import get_settings
from errors import InputValidationError, StudyPipelineError
from logger import get_logger
from models import (
    AnswerResponse,
    AskRequest,
    ChatMessage,
    ContentRequest,
    ExtractedText,
    GenerateRequest,
    InfoResponse,
    InputKind,
    LinkRequest,
    ModelTextResponse,
    NoContentFound,
    RawInput,
    Session,
    SessionAnswerResponse,
    SessionAskRequest,
    SessionListResponse,
    SwitchSessionRequest,
)
from prompts import TUTOR_FAILURE_MESSAGE
from services.extraction import extract_file_text
from services.fetching import fetch_link
from services.generation import generate_study_materials
from services.normalizer import normalize_response
from services.sessions import SessionStore, get_store
from services.tutor import answer_question, session_context

log = get_logger(__name__)

app = FastAPI(
    title="SnapStudy API",
    description="Turn pasted text, links, or uploaded documents into notes, summaries, flashcards, quizzes, and an AI tutor.",
    version="1.0.0",
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Errors ────────────────────────────────────────────────────────────────────
@app.exception_handler(StudyPipelineError)
async def pipeline_error_handler(request: Request, exc: StudyPipelineError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.details)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request.", "details": details})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    log.exception("%s %s crashed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error.", "details": str(exc)})


# ── Helpers ───────────────────────────────────────────────────────────────────
async def _read_upload(file: Optional[UploadFile]) -> tuple[bytes, str, str]:
    if file is None or not file.filename:
        raise InputValidationError("No file uploaded.")

    file_bytes = await file.read()
    max_mb = get_settings().max_upload_mb
    if len(file_bytes) > max_mb * 1024 * 1024:
        raise InputValidationError(f"File too large. Maximum size is {max_mb} MB.")
    return file_bytes, file.content_type or "", file.filename


async def _extract_upload(file: Optional[UploadFile]) -> ExtractedText:
    file_bytes, media_type, filename = await _read_upload(file)
    return await run_in_threadpool(extract_file_text, file_bytes, media_type, filename)


async def _fetch(link: str) -> Union[ExtractedText, NoContentFound]:
    log.info("Fetching link %s", link)
    return await run_in_threadpool(fetch_link, link)


# ── Health ────────────────────────────────────────────────────────────────────
@app.get("/health")
async def health():
    return {"status": "ok"}


# ── Generate from text ────────────────────────────────────────────────────────
@app.post("/api/response", response_model=ModelTextResponse)
async def generate_from_text(data: ContentRequest):
    """Send pasted text to the model and return its raw reply."""
    if not data.content or not data.content.strip():
        raise InputValidationError("Content is required")

    extracted = ExtractedText(text=data.content, source_kind=InputKind.text)
    return ModelTextResponse(response=await generate_study_materials(extracted))


# ── Generate from an uploaded file ────────────────────────────────────────────
@app.post("/api/upload", response_model=ModelTextResponse)
async def generate_from_upload(file: Optional[UploadFile] = File(None)):
    """Extract text from a PDF, Word, text, or image upload and send it to the model."""
    extracted = await _extract_upload(file)
    return ModelTextResponse(response=await generate_study_materials(extracted))


# ── Generate from a link ──────────────────────────────────────────────────────
@app.post("/api/link", response_model=Union[ModelTextResponse, InfoResponse])
async def generate_from_link(data: LinkRequest):
    """
    Fetch the page behind a link and send its text to the model.
    Upstream failures are mirrored back; an empty page is reported, not failed.
    """
    if not data.link or not data.link.strip():
        raise InputValidationError("Please provide a link in the request body.")

    fetched = await _fetch(data.link.strip())
    if isinstance(fetched, NoContentFound):
        return InfoResponse(message=fetched.message)
    return ModelTextResponse(response=await generate_study_materials(fetched))


# ── AI Tutor ──────────────────────────────────────────────────────────────────
@app.post("/api/ask", response_model=AnswerResponse)
async def ask(data: AskRequest):
    """Answer a question against caller-supplied context."""
    if not data.question or not data.question.strip() or not data.aiContent or not data.aiContent.strip():
        raise InputValidationError("Question and AI content are required.")
    return AnswerResponse(answer=await answer_question(data.question, data.aiContent))


# ── Sessions ──────────────────────────────────────────────────────────────────
@app.post("/api/sessions", response_model=Session)
async def create_session(store: SessionStore = Depends(get_store)):
    return store.create()


@app.get("/api/sessions", response_model=SessionListResponse)
async def list_sessions(store: SessionStore = Depends(get_store)):
    return SessionListResponse(current_id=store.current_id, sessions=store.all())


@app.get("/api/sessions/current", response_model=Session)
async def current_session(store: SessionStore = Depends(get_store)):
    return store.current()


@app.put("/api/sessions/current", response_model=Session)
async def switch_session(data: SwitchSessionRequest, store: SessionStore = Depends(get_store)):
    return store.switch(data.session_id)


@app.get("/api/sessions/{session_id}", response_model=Session)
async def get_session(session_id: str, store: SessionStore = Depends(get_store)):
    return store.get(session_id)


async def _generate_into_session(
    store: SessionStore,
    session_id: str,
    extracted: ExtractedText,
) -> Session:
    raw = await generate_study_materials(extracted)
    materials = normalize_response(raw)
    log.info("Session %s: stored fresh study materials", session_id)
    return store.replace_materials(session_id, materials)


@app.post("/api/sessions/{session_id}/generate", response_model=Session)
async def generate_for_session(
    session_id: str,
    data: GenerateRequest,
    store: SessionStore = Depends(get_store),
):
    """
    Generate study materials from text or a link into one session.
    The session's previous materials survive any failure.
    """
    with store.in_flight(session_id, "generation"):
        if data.kind == "text":
            if not data.text or not data.text.strip():
                raise InputValidationError("Content is required")
            raw_input = RawInput.from_text(data.text)
            store.set_input(session_id, raw_input)
            extracted = ExtractedText(text=data.text, source_kind=InputKind.text)
        else:
            if not data.link or not data.link.strip():
                raise InputValidationError("Please provide a link in the request body.")
            raw_input = RawInput.from_link(data.link.strip())
            store.set_input(session_id, raw_input)
            fetched = await _fetch(raw_input.link)
            if isinstance(fetched, NoContentFound):
                return JSONResponse(status_code=200, content={"message": fetched.message})
            extracted = fetched

        await _generate_into_session(store, session_id, extracted)
    return store.get(session_id)


@app.post("/api/sessions/{session_id}/upload", response_model=Session)
async def upload_for_session(
    session_id: str,
    file: Optional[UploadFile] = File(None),
    store: SessionStore = Depends(get_store),
):
    """Generate study materials from an uploaded file into one session."""
    with store.in_flight(session_id, "generation"):
        extracted = await _extract_upload(file)
        store.set_input(session_id, RawInput.from_file(extracted.filename, file.content_type or ""))
        await _generate_into_session(store, session_id, extracted)
    return store.get(session_id)


@app.post("/api/sessions/{session_id}/ask", response_model=SessionAnswerResponse)
async def ask_in_session(
    session_id: str,
    data: SessionAskRequest,
    store: SessionStore = Depends(get_store),
):
    """
    Answer a question using the session's generated materials as context.
    The question and the answer (or an apology) are appended to the chat.
    """
    with store.in_flight(session_id, "tutor"):
        store.append_message(session_id, ChatMessage(role="user", content=data.question))
        context = session_context(store.get(session_id))
        try:
            answer = await answer_question(data.question, context)
        except StudyPipelineError:
            store.append_message(session_id, ChatMessage(role="system", content=TUTOR_FAILURE_MESSAGE))
            raise
        store.append_message(session_id, ChatMessage(role="ai", content=answer))

    return SessionAnswerResponse(answer=answer, session=store.get(session_id))
