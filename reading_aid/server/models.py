"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: Each endpoint has a request and/or response model. Core dataclasses
(Token, SpellingError) are mirrored rather than exposed directly so the
wire format can stay stable if the core changes.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Settings use reading_aid.settings.ReaderSettings directly (single source)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TextRequest(BaseModel):
    text: str = Field(description="Input text. May be empty.")


class SpellingErrorModel(BaseModel):
    """A misspelling at a token position, as returned by /spelling/check."""

    word: str = Field(description="Cleaned, lower-cased misspelled word.")
    position: int = Field(ge=0, description="Whitespace-token index in the checked text.")
    suggestions: List[str] = Field(description="Replacements in priority order.")


class ApplySuggestionRequest(BaseModel):
    text: str = Field(description="Current text (must match the checked text's tokens).")
    error: SpellingErrorModel = Field(description="The error being resolved.")
    suggestion: str = Field(min_length=1, description="Replacement chosen by the user.")


class AutoCorrectRequest(BaseModel):
    text: str = Field(description="Text to correct.")
    errors: Optional[List[SpellingErrorModel]] = Field(
        default=None,
        description="Errors from /spelling/check. Detected afresh when omitted.",
    )


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TokenModel(BaseModel):
    text: str = Field(description="Word text, punctuation included.")
    index: int = Field(description="Position in reading order.")


class TokenizeResponse(BaseModel):
    tokens: List[TokenModel] = Field(description="Words in reading order.")
    count: int = Field(description="Number of tokens.")


class TextResponse(BaseModel):
    text: str = Field(description="Transformed text.")


class SpellingCheckResponse(BaseModel):
    errors: List[SpellingErrorModel] = Field(description="Detected misspellings, left to right.")

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "errors": [
                    {"word": "ths", "position": 0, "suggestions": ["this", "the", "thus"]},
                    {"word": "sentance", "position": 3, "suggestions": ["sentence"]},
                ]
            }
        ]
    }}


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})


class SettingsPatch(BaseModel):
    """Partial settings update; only provided fields change."""

    model_config = {"extra": "forbid"}

    font_size: Optional[str] = None
    font_family: Optional[str] = None
    word_spacing: Optional[str] = None
    high_contrast: Optional[bool] = None
    haptic_feedback: Optional[bool] = None
    auto_breaks: Optional[bool] = None
    break_interval_minutes: Optional[int] = None
    break_duration_minutes: Optional[int] = None
    parental_controls: Optional[bool] = None
    reading_speed: Optional[float] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
