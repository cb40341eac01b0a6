from typing import Optional

from fastapi import APIRouter, Depends, Request

from revalidation_service.api.deps import get_gate, get_secret, read_changed_document
from revalidation_service.core.gate import RevalidationGate
from revalidation_service.models.schemas import RevalidationFailure, RevalidationResult

router = APIRouter(tags=["revalidation"])


@router.post(
    "/revalidate",
    response_model=RevalidationResult,
    openapi_extra={
        "parameters": [{
            "name": "secret",
            "in": "query",
            "required": False,
            "schema": {"type": "string"},
            "description": "Shared webhook secret; only the first occurrence is used",
        }],
    },
    responses={
        401: {"description": "Missing or invalid secret", "content": {"text/plain": {}}},
        502: {"model": RevalidationFailure, "description": "Upstream invalidation failed"},
    },
)
async def revalidate(
    request: Request,
    secret: Optional[str] = Depends(get_secret),
    gate: RevalidationGate = Depends(get_gate),
):
    """
    Invalidate the cached resume page after the CMS reports a content change.
    """
    gate.authorize(secret)
    # Only authorized callers get their body read
    document = await read_changed_document(request)
    return await gate.invalidate(document)
