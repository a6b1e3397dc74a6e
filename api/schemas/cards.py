"""
Card document request and response schemas.

Request bodies are validated by the gateway (so a malformed body is
rejected with the same error shape as the rest of the API); these models
document the contract and shape the responses.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class DocumentResponse(BaseModel):
    """The full card document."""

    version: int = Field(
        ...,
        description="Document version, starts at 1",
        examples=[3],
    )
    cards: list[Any] = Field(
        default_factory=list,
        description="Ordered card records; 'id' identifies a card for upserts",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "version": 3,
                    "cards": [
                        {"id": "a", "name": "Alpha", "color": "blue"},
                        {"id": "b", "name": "Beta"},
                    ],
                }
            ]
        }
    }


class ReplaceRequest(BaseModel):
    """Body of PUT /cards."""

    version: Optional[int] = Field(
        default=None,
        description="New document version (defaults to 1)",
    )
    cards: list[Any] = Field(
        ...,
        description="Complete replacement card list",
    )


class UpsertRequest(BaseModel):
    """Body of POST /cards/upsert."""

    cards: list[Any] = Field(
        ...,
        description="Cards to merge by id; fields not sent are kept",
        examples=[[{"id": "a", "color": "blue"}]],
    )


class ReplaceResponse(BaseModel):
    ok: bool = True


class UpsertResponse(BaseModel):
    """Result of a merge-upsert."""

    ok: bool = True
    version: int = Field(..., description="Version after the merge")
    updated: int = Field(..., description="Number of cards received")


class ErrorResponse(BaseModel):
    error: str = Field(
        ...,
        examples=["unauthorized", "invalid_body", "write_failed"],
    )
