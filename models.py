"""
Data models for SwiftLink.

ShortenedLink is stored with camelCase keys (originalUrl, shortCode, ...);
Python code uses the snake_case attribute names.
"""

from typing import Annotated, Optional, List
from pydantic import BaseModel, ConfigDict, Field


class ShortenedLink(BaseModel):
    """One shortened URL. Only `clicks` ever changes after creation."""

    model_config = ConfigDict(populate_by_name=True, strict=True, frozen=True)

    id: str
    original_url: str = Field(alias="originalUrl")
    short_code: str = Field(alias="shortCode")
    created_at: int = Field(alias="createdAt")  # epoch milliseconds
    clicks: int = Field(default=0, ge=0)
    tags: Optional[List[str]] = None
    ai_summary: Optional[str] = Field(default=None, alias="aiSummary")
    category: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize the way it is persisted (camelCase, unset fields omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AnnotationResult(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    tags: List[Annotated[str, Field(min_length=1)]] = Field(min_length=1)
    summary: str = Field(min_length=1)
    category: str = Field(min_length=1)


FALLBACK_ANNOTATION = AnnotationResult(
    tags=["Link"],
    summary="External Website",
    category="General",
)


class AnalysisOutcome(BaseModel):
    """Either a validated annotation from the model or the fixed fallback."""

    annotation: AnnotationResult
    fallback: bool = False
    reason: Optional[str] = None

    @classmethod
    def ok(cls, annotation: AnnotationResult) -> "AnalysisOutcome":
        return cls(annotation=annotation)

    @classmethod
    def fallback_for(cls, reason: str) -> "AnalysisOutcome":
        return cls(
            annotation=FALLBACK_ANNOTATION.model_copy(deep=True),
            fallback=True,
            reason=reason,
        )
