"""FastAPI application with all routes."""
from __future__ import annotations

import logging
from contextlib import contextmanager

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

import httpx
from fastapi import FastAPI, HTTPException, Request
from starlette.datastructures import FormData, UploadFile

from wordsnap.config import Settings, load_settings, save_settings
from wordsnap.errors import (
    ModelUnreachable,
    NoFileError,
    RecoveryFailure,
    TranslationUnavailable,
    TransportError,
)
from wordsnap.extractor import analyze_image
from wordsnap.layout import sheet_rows
from wordsnap.pronunciation import PronunciationLookup, annotate
from wordsnap.reconciler import reconcile
from wordsnap.translator import MeaningTranslator, lookup

app = FastAPI(title="WordSnap")

# Global state (initialized in startup)
_settings: Settings | None = None
_analysis_busy = False

UPLOAD_FIELDS = ("image", "images", "file", "upload")
_TRUE = {"1", "true", "on", "yes", "exists"}

_log = logging.getLogger("wordsnap.app")


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


def _get_llm():
    from wordsnap.providers.factory import build_provider
    return build_provider(get_settings())


def _get_translator() -> MeaningTranslator:
    return MeaningTranslator.from_settings(_get_llm(), get_settings())


@app.on_event("startup")
async def startup():
    global _settings
    if _settings is not None:
        return  # Already initialized (e.g. by tests)
    _settings = load_settings()
    _log.info("Using %s/%s", _settings.llm_provider, _settings.llm_model)


# ── Upload helpers ────────────────────────────────────────────────────────

def _pick_upload(form: FormData) -> UploadFile:
    """First named file under any accepted field, else NoFileError."""
    for key in UPLOAD_FIELDS:
        for v in form.getlist(key):
            if isinstance(v, UploadFile) and v.filename:
                return v
    raise NoFileError(list(form.keys()), UPLOAD_FIELDS)


async def _read_image(request: Request) -> tuple[bytes, str, FormData]:
    form = await request.form()
    try:
        upload = _pick_upload(form)
    except NoFileError as e:
        raise HTTPException(400, str(e))
    data = await upload.read()
    limit = get_settings().max_upload_bytes
    if len(data) > limit:
        raise HTTPException(413, f"Image too large ({len(data)} bytes, limit {limit})")
    if not data:
        raise HTTPException(400, "Uploaded file is empty")
    return data, upload.content_type or "image/jpeg", form


def _flag(value, default: bool) -> bool:
    if value is None or value == "":
        return default
    return str(value).strip().lower() in _TRUE


@contextmanager
def _single_analysis():
    """Serialize analyses; a request arriving while one runs gets 409."""
    global _analysis_busy
    if _analysis_busy:
        raise HTTPException(409, "An analysis is already running")
    _analysis_busy = True
    try:
        yield
    finally:
        _analysis_busy = False


async def _run_extraction(image: bytes, mime: str):
    try:
        return await analyze_image(_get_llm(), image, mime, settings=get_settings())
    except (TransportError, ModelUnreachable, RecoveryFailure) as e:
        _log.error("Extraction failed: %s", e)
        raise HTTPException(502, str(e))


# ── API: Extraction ───────────────────────────────────────────────────────

@app.post("/api/extract")
async def api_extract(request: Request):
    image, mime, _ = await _read_image(request)
    with _single_analysis():
        result = await _run_extraction(image, mime)
    return {"items": result.to_list()}


@app.post("/api/analyze")
async def api_analyze(request: Request):
    image, mime, form = await _read_image(request)
    translate = _flag(form.get("translate"), True)
    image_has_meaning = _flag(form.get("image_has_meaning"), True)
    s = get_settings()

    with _single_analysis():
        result = await _run_extraction(image, mime)
        translator = _get_translator() if translate and not image_has_meaning else None
        rows = await reconcile(result, translate, image_has_meaning, translator)

        if s.fetch_pronunciations and rows:
            async with httpx.AsyncClient(timeout=10.0) as client:
                await annotate(rows, PronunciationLookup(client, s.dictionary_url))

    return {
        "count": len(result),
        "items": result.to_list(),
        "rows": [r.to_dict() for r in rows],
        "sheet": [row.to_list() for row in sheet_rows(rows, s.sheet_rows)],
    }


# ── API: Batch meanings ───────────────────────────────────────────────────

@app.post("/api/meanings")
async def api_meanings(request: Request):
    body = await request.json() if await request.body() else {}
    words = body.get("words") if isinstance(body, dict) else None
    words = [str(w) for w in words if w] if isinstance(words, list) else []
    if not words:
        raise HTTPException(400, "No words")

    try:
        mapping = await _get_translator().translate(words)
    except TranslationUnavailable as e:
        raise HTTPException(502, str(e))
    return {"items": [{"word": w, "meaning": lookup(mapping, w)} for w in words]}


# ── API: Settings ─────────────────────────────────────────────────────────

@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


@app.put("/api/settings")
async def api_update_settings(request: Request):
    body = await request.json()
    s = get_settings()
    known = {f.name for f in Settings.__dataclass_fields__.values()}
    for k, v in body.items():
        if k in known:
            setattr(s, k, v)
    save_settings(s)
    return s.to_dict()
