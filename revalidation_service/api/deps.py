import json
import logging
from typing import Optional

from fastapi import Request
from pydantic import ValidationError

from revalidation_service.core.gate import RevalidationGate
from revalidation_service.models.schemas import ChangedDocument

logger = logging.getLogger(__name__)


def get_gate(request: Request) -> RevalidationGate:
    return request.app.state.gate


def get_secret(request: Request) -> Optional[str]:
    # A repeated parameter resolves to its first occurrence
    values = request.query_params.getlist("secret")
    return values[0] if values else None


async def read_changed_document(request: Request) -> Optional[ChangedDocument]:
    # The body is informational only; anything unreadable is ignored
    body = await request.body()
    if not body:
        return None
    try:
        data = json.loads(body)
    except ValueError:
        logger.debug("Ignoring non-JSON webhook body")
        return None
    if not isinstance(data, dict):
        return None
    try:
        return ChangedDocument.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Ignoring unrecognised webhook body: {e}")
        return None
