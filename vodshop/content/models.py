from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator


class Category(str, Enum):
    MOVIE = "movie"
    VIDEO = "video"
    LIVE = "live"

CATEGORIES: List[str] = [c.value for c in Category]

# Colonnes autorisées pour /sorted (évite un tri sur une colonne arbitraire)
SORTABLE_FIELDS = ("title", "price", "category", "created_at")
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class TextBody(BaseModel):
    """Corps commun des commentaires et critiques."""
    text: str = Field(min_length=1, max_length=2000)

    @field_validator("text")
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("text is required")
        return v
