"""
Pydantic schemas for API request/response validation.
"""

from api.schemas.cards import (
    DocumentResponse,
    ErrorResponse,
    ReplaceRequest,
    ReplaceResponse,
    UpsertRequest,
    UpsertResponse,
)

__all__ = [
    "DocumentResponse",
    "ErrorResponse",
    "ReplaceRequest",
    "ReplaceResponse",
    "UpsertRequest",
    "UpsertResponse",
]
