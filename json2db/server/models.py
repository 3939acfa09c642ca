from typing import Any

from pydantic import BaseModel, Field


class Success(BaseModel):
    success: bool = True


class SearchRequest(BaseModel):
    """Payload for searching a collection by id and filter."""

    ids: list[Any] | None = Field(
        default=None,
        description="Ids (file names, with or without extension) to consider.",
    )
    filter: dict[str, Any] = Field(
        default_factory=dict,
        description="Predicate each document must satisfy. Empty matches all.",
    )
    count: int | None = Field(
        default=None,
        ge=0,
        description="Maximum number of documents to return.",
    )


class SearchResponse(BaseModel):
    total: int = Field(description="Number of documents that matched the filter.")
    output: list[Any] = Field(default_factory=list)
