from __future__ import annotations

import asyncio
import contextlib
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field

from libs.core import expiring_cache, logging as core_logging
from libs.tools import pdf_extract
from services.enhancer.enhance_core import (
    EnhanceError,
    InvalidInputError,
    analyze_resume,
    assemble,
    build_document,
    career_chat,
    generate_roadmap,
    prepare_request,
    render,
)
from services.enhancer.enhance_core import config
from services.enhancer.enhance_core.assembler import DOCX_CONTENT_TYPE, artifact_filename
from services.enhancer.enhance_core.service import recent_conversation

core_logging.configure_logging("enhancer")
LOGGER = core_logging.get_logger("enhancer")

PDF_CONTENT_TYPE = "application/pdf"
REPORT_KEY_PREFIX_CHARS = 100


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_query: Optional[str] = Field(None, alias="currentQuery")
    prev_conversation: Optional[str] = Field(None, alias="prevConversation")


class ChatResponse(BaseModel):
    text: str


class RoadmapRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_query: Optional[str] = Field(None, alias="currentQuery")


app = FastAPI(title="Resume Enhancement Service")
app.state.provider = config.create_provider_from_env()
app.state.cache = config.create_cache_from_env()
app.state.started_at = time.monotonic()


@app.on_event("startup")
async def _start_cache_sweeper() -> None:
    cache = app.state.cache
    if isinstance(cache, expiring_cache.InMemoryExpiringCache):
        app.state.sweeper_task = asyncio.create_task(
            expiring_cache.run_sweeper(cache, config.cache_sweep_interval_s())
        )


@app.on_event("shutdown")
async def _stop_cache_sweeper() -> None:
    task = getattr(app.state, "sweeper_task", None)
    if task is None:
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
    app.state.sweeper_task = None


def _http_error(error: EnhanceError) -> HTTPException:
    LOGGER.warning("request_failed", error=error.detail, status_code=error.status_code)
    return HTTPException(status_code=error.status_code, detail=error.user_message)


@contextlib.contextmanager
def _staged_upload(data: bytes) -> Iterator[Path]:
    handle = tempfile.NamedTemporaryFile(prefix="enhancer-", suffix=".pdf", delete=False)
    path = Path(handle.name)
    try:
        with handle:
            handle.write(data)
        yield path
    finally:
        path.unlink(missing_ok=True)


def _read_upload(file: Optional[UploadFile]) -> bytes:
    if file is None or not file.filename:
        raise InvalidInputError("No file was uploaded.")
    is_pdf = file.content_type == PDF_CONTENT_TYPE or file.filename.lower().endswith(".pdf")
    if not is_pdf:
        raise InvalidInputError("Only PDF files are allowed.")
    limit = config.upload_max_bytes()
    data = file.file.read(limit + 1)
    if len(data) > limit:
        raise InvalidInputError("File exceeds the upload size limit.")
    if not data:
        raise InvalidInputError("No file was uploaded.")
    return data


def _extract_upload(file: Optional[UploadFile]) -> str:
    data = _read_upload(file)
    with _staged_upload(data) as path:
        try:
            return pdf_extract.extract_text_from_path(path)
        except pdf_extract.PdfExtractError as exc:
            raise InvalidInputError(str(exc), user_message="Unable to read the uploaded PDF.") from exc


def _docx_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=DOCX_CONTENT_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _cached(cache: expiring_cache.ExpiringCache, key: str) -> Any:
    value = cache.get(key)
    if value is not None:
        LOGGER.info("cache_hit", operation=key.split(":", 1)[0])
    return value


@app.post("/generate-ideal-resume")
def generate_ideal_resume(
    request: Request,
    file: Optional[UploadFile] = File(None),
    job_role: str = Form("", alias="jobRole"),
    analysis_report: str = Form("", alias="analysisReport"),
) -> Response:
    try:
        raw_text = _extract_upload(file)
        enhancement = prepare_request(job_role, raw_text, analysis_report)
        filename = artifact_filename(enhancement.target_role)
        cache = request.app.state.cache
        key = expiring_cache.cache_key(
            "ideal-resume",
            enhancement.target_role,
            enhancement.source.text
            + "\n"
            + (enhancement.guidance_report or "")[:REPORT_KEY_PREFIX_CHARS],
        )
        cached = _cached(cache, key)
        if isinstance(cached, bytes):
            return _docx_response(cached, filename)
        document = build_document(enhancement, request.app.state.provider)
        artifact = assemble(render(document, enhancement.target_role), enhancement.target_role)
    except EnhanceError as exc:
        raise _http_error(exc) from exc
    cache.set(key, artifact.content)
    return _docx_response(artifact.content, artifact.filename)


@app.post("/upload-file", response_model=ChatResponse)
def upload_file(
    request: Request,
    file: Optional[UploadFile] = File(None),
    job_role: str = Form("", alias="jobRole"),
) -> ChatResponse:
    cache = request.app.state.cache
    try:
        raw_text = _extract_upload(file)
        key = expiring_cache.cache_key("resume", job_role, raw_text)
        cached = _cached(cache, key)
        if isinstance(cached, str):
            return ChatResponse(text=cached)
        analysis = analyze_resume(job_role, raw_text, request.app.state.provider)
    except EnhanceError as exc:
        raise _http_error(exc) from exc
    cache.set(key, analysis)
    return ChatResponse(text=analysis)


@app.post("/generate-content", response_model=ChatResponse)
def generate_content(request: Request, body: ChatRequest) -> ChatResponse:
    cache = request.app.state.cache
    context = recent_conversation(body.prev_conversation)
    key = expiring_cache.cache_key("chat", "", f"{body.current_query or ''}\n{context}")
    cached = _cached(cache, key)
    if isinstance(cached, str):
        return ChatResponse(text=cached)
    try:
        reply = career_chat(body.current_query, body.prev_conversation, request.app.state.provider)
    except EnhanceError as exc:
        raise _http_error(exc) from exc
    cache.set(key, reply)
    return ChatResponse(text=reply)


@app.post("/generate-roadmap")
def generate_roadmap_endpoint(request: Request, body: RoadmapRequest) -> Dict[str, Any]:
    cache = request.app.state.cache
    role = (body.current_query or "").strip()
    key = expiring_cache.cache_key("roadmap", role, role)
    cached = _cached(cache, key)
    if isinstance(cached, dict):
        return cached
    try:
        result = generate_roadmap(body.current_query, request.app.state.provider)
    except EnhanceError as exc:
        raise _http_error(exc) from exc
    if result["parsedData"]:
        cache.set(key, result)
    return result


@app.get("/health")
def health(request: Request) -> Dict[str, Any]:
    return {
        "status": "ok",
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        "cacheSize": len(request.app.state.cache),
    }
