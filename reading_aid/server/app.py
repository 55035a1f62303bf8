"""FastAPI application exposing the text tools and settings over HTTP.

WHY: Front ends other than the mobile app (a web reader, a browser
extension, classroom tooling) need the simplifier, spelling corrector,
tokenizer and settings without embedding Python. FastAPI gives request
validation and OpenAPI docs for free.

HOW: One app with endpoints grouped by tags. The lexical engine is
built once at import (from READING_AID_RULES_PATH when set) and the
settings repository wraps a JsonFileStore (READING_AID_SETTINGS_PATH) or
a MemoryStore. Core errors map to HTTP errors with the ErrorResponse body.

RULES:
- Text endpoints are stateless and total (empty text is fine)
- A stale spelling position → 409 Conflict (client should re-check)
- Invalid settings values → 422 with a readable message; nothing saved
- The timing state machines are not exposed here; they run in the client
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import ValidationError

from reading_aid import __version__
from reading_aid.config import RULES_PATH, SETTINGS_PATH
from reading_aid.core.errors import IndexOutOfRangeError
from reading_aid.core.lexical import LexicalEngine, SpellingError
from reading_aid.core.tokenizer import tokenize
from reading_aid.server.models import (
    ApplySuggestionRequest,
    AutoCorrectRequest,
    ErrorResponse,
    HealthResponse,
    SettingsPatch,
    SpellingCheckResponse,
    SpellingErrorModel,
    TextRequest,
    TextResponse,
    TokenizeResponse,
    TokenModel,
)
from reading_aid.settings import ReaderSettings, SettingsRepository
from reading_aid.storage import JsonFileStore, MemoryStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and collaborators
# ---------------------------------------------------------------------------

engine = LexicalEngine.from_file(RULES_PATH) if RULES_PATH else LexicalEngine()
settings_repository = SettingsRepository(
    JsonFileStore(SETTINGS_PATH) if SETTINGS_PATH else MemoryStore()
)

app = FastAPI(
    title="Reading Aid API",
    description=(
        "Reading support tools for dyslexic readers: rule-based text "
        "simplification, dictionary spelling correction, word tokenization "
        "for highlighted read-aloud, and reader settings."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _to_core_error(model: SpellingErrorModel) -> SpellingError:
    return SpellingError(word=model.word, position=model.position, suggestions=list(model.suggestions))


def _to_error_model(error: SpellingError) -> SpellingErrorModel:
    return SpellingErrorModel(word=error.word, position=error.position, suggestions=error.suggestions)


# ---------------------------------------------------------------------------
# Endpoints: Text
# ---------------------------------------------------------------------------


@app.post(
    "/tokenize",
    response_model=TokenizeResponse,
    tags=["text"],
    summary="Split text into highlightable words",
    description="Splits on whitespace runs. Punctuation stays attached to its word.",
)
async def tokenize_text(request: TextRequest) -> TokenizeResponse:
    tokens = tokenize(request.text)
    return TokenizeResponse(
        tokens=[TokenModel(text=t.text, index=t.index) for t in tokens],
        count=len(tokens),
    )


@app.post(
    "/simplify",
    response_model=TextResponse,
    tags=["text"],
    summary="Simplify text",
    description=(
        "Lower-cases the text, swaps complex words for simpler ones, splits "
        "clauses at commas and capitalizes each sentence."
    ),
)
async def simplify_text(request: TextRequest) -> TextResponse:
    return TextResponse(text=engine.simplify(request.text))


# ---------------------------------------------------------------------------
# Endpoints: Spelling
# ---------------------------------------------------------------------------


@app.post(
    "/spelling/check",
    response_model=SpellingCheckResponse,
    tags=["spelling"],
    summary="Find known misspellings",
)
async def check_spelling(request: TextRequest) -> SpellingCheckResponse:
    errors = engine.detect_misspellings(request.text)
    return SpellingCheckResponse(errors=[_to_error_model(e) for e in errors])


@app.post(
    "/spelling/apply",
    response_model=TextResponse,
    tags=["spelling"],
    summary="Apply one suggestion at one position",
    description=(
        "Replaces the misspelling at error.position only. Whitespace is "
        "normalized to single spaces. Returns 409 if the text changed since "
        "the check and the position no longer fits."
    ),
    responses={
        409: {"model": ErrorResponse, "description": "Stale error position"},
    },
)
async def apply_spelling_suggestion(request: ApplySuggestionRequest) -> TextResponse:
    try:
        text = engine.apply_suggestion(
            request.text, _to_core_error(request.error), request.suggestion
        )
    except IndexOutOfRangeError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return TextResponse(text=text)


@app.post(
    "/spelling/autocorrect",
    response_model=TextResponse,
    tags=["spelling"],
    summary="Replace every misspelling with its top suggestion",
)
async def autocorrect_spelling(request: AutoCorrectRequest) -> TextResponse:
    if request.errors is None:
        errors = engine.detect_misspellings(request.text)
    else:
        errors = [_to_core_error(e) for e in request.errors]
    return TextResponse(text=engine.auto_correct_all(request.text, errors))


# ---------------------------------------------------------------------------
# Endpoints: Settings
# ---------------------------------------------------------------------------


@app.get(
    "/settings",
    response_model=ReaderSettings,
    tags=["settings"],
    summary="Get reader settings",
)
async def get_settings() -> ReaderSettings:
    return settings_repository.load()


@app.patch(
    "/settings",
    response_model=ReaderSettings,
    tags=["settings"],
    summary="Change reader settings",
    description="Only the provided fields change. Invalid values change nothing.",
    responses={
        422: {"model": ErrorResponse, "description": "Invalid setting value"},
    },
)
async def update_settings(patch: SettingsPatch) -> ReaderSettings:
    try:
        return settings_repository.update(**patch.changes())
    except ValidationError as exc:
        messages: List[str] = [
            "{}: {}".format(".".join(str(p) for p in err["loc"]), err["msg"])
            for err in exc.errors()
        ]
        raise HTTPException(status_code=422, detail="; ".join(messages))


@app.delete(
    "/settings",
    status_code=204,
    tags=["settings"],
    summary="Reset settings to defaults",
)
async def reset_settings() -> Response:
    settings_repository.reset()
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Serve the API with uvicorn (used by ``python -m reading_aid serve``)."""
    import uvicorn

    logger.info("Serving Reading Aid API on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)
