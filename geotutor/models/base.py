# =============================================================================
# Base Models and Mixins
# =============================================================================
# Shared base models and mixins for descriptive metadata fields.
# =============================================================================

"""Base models and mixins for shared metadata fields."""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

__all__ = ["DescriptiveMetadataMixin"]


class DescriptiveMetadataMixin(BaseModel):
    """
    Human-readable descriptive fields returned by the repository search index.

    All fields are optional because the caller chooses the field list (``fl``)
    of each query.

    Attributes:
        title: Dataset or object title
        abstract: Abstract / description
        keywords: Subject keywords (cleaned and deduplicated)
        origin: Creators / authors
    """

    title: Optional[str] = Field(None, description="Human-readable title")
    abstract: Optional[str] = Field(None, description="Abstract or description")
    keywords: list[str] = Field(
        default_factory=list,
        description="Subject keywords for discovery",
    )
    origin: list[str] = Field(default_factory=list, description="Creators / authors")

    @field_validator("keywords", "origin", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("keywords")
    @classmethod
    def validate_keywords(cls, v: list[str]) -> list[str]:
        """
        Clean and deduplicate keywords list.

        - Removes empty/whitespace-only keywords
        - Trims whitespace from valid keywords
        - Removes duplicates (preserves order)
        """
        cleaned = [kw.strip() for kw in v if kw and isinstance(kw, str) and kw.strip()]
        return list(dict.fromkeys(cleaned))
