"""
Card document endpoints.

- GET  /cards        - Read the document (public)
- PUT  /cards        - Replace the whole document (admin)
- POST /cards/upsert - Merge cards by id (admin)

Gateway errors are translated to responses by the handlers registered in
api.server.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, Request, Response

from api.dependencies import get_gateway
from api.schemas.cards import (
    DocumentResponse,
    ErrorResponse,
    ReplaceRequest,
    ReplaceResponse,
    UpsertRequest,
    UpsertResponse,
)
from core.logging import get_logger
from manager.gateway import CardsGateway


logger = get_logger(__name__)
router = APIRouter(prefix="/cards", tags=["Cards"])

ADMIN_SECRET_HEADER = "x-admin-secret"

_error_responses: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Body lacks a 'cards' array"},
    401: {"model": ErrorResponse, "description": "Missing or wrong admin secret"},
    500: {"model": ErrorResponse, "description": "Document could not be written"},
}


def _request_body_schema(model: type) -> dict[str, Any]:
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema()}},
        }
    }


async def _read_json(request: Request) -> Any:
    """Parsed JSON body, or None when the body is empty or not JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


@router.get("", response_model=DocumentResponse)
async def get_cards(
    response: Response,
    gateway: CardsGateway = Depends(get_gateway),
) -> DocumentResponse:
    """
    Get the current card document.

    Always answers 200; backend trouble yields the empty default document.
    """
    response.headers["Cache-Control"] = "no-store"
    document = await gateway.get_document()
    return DocumentResponse(**document.to_dict())


@router.put(
    "",
    response_model=ReplaceResponse,
    responses=_error_responses,
    openapi_extra=_request_body_schema(ReplaceRequest),
)
async def replace_cards(
    request: Request,
    x_admin_secret: Optional[str] = Header(default=None, alias=ADMIN_SECRET_HEADER),
    gateway: CardsGateway = Depends(get_gateway),
) -> ReplaceResponse:
    """
    Replace the entire card document.

    The previous document is snapshotted first. The body's version is
    stored as given (default 1).
    """
    body = await _read_json(request)
    document = await gateway.replace_document(x_admin_secret, body)

    logger.info(
        "Cards replaced",
        version=document.version,
        cards=len(document.cards),
    )
    return ReplaceResponse()


@router.post(
    "/upsert",
    response_model=UpsertResponse,
    responses=_error_responses,
    openapi_extra=_request_body_schema(UpsertRequest),
)
async def upsert_cards(
    request: Request,
    x_admin_secret: Optional[str] = Header(default=None, alias=ADMIN_SECRET_HEADER),
    gateway: CardsGateway = Depends(get_gateway),
) -> UpsertResponse:
    """
    Merge cards into the document by id.

    Cards not sent are kept; sent fields override stored ones. The version
    is bumped by one.
    """
    body = await _read_json(request)
    result = await gateway.upsert_document(x_admin_secret, body)

    logger.info(
        "Cards upserted",
        version=result.version,
        updated=result.updated,
    )
    return UpsertResponse(version=result.version, updated=result.updated)
