import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, Request

from mailaction.app.schemas.message import (
    DeleteRequest,
    ListRequest,
    MoveRequest,
    ToggleFlaggedRequest,
    ToggleSeenRequest,
    validate_payload,
)
from mailaction.services.api_client import ApiClient, get_api_client
from mailaction.services.errors import (
    BackendError,
    MailboxNotFoundError,
    PayloadValidationError,
)
from mailaction.services.message_service import (
    delete_messages,
    list_messages,
    update_messages,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["messages"])

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_payload(request: Request) -> Dict[str, Any]:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items()}

    body = await request.body()
    if not body:
        return {}
    try:
        data = await request.json()
    except ValueError:
        raise PayloadValidationError("Request body must be a JSON object or form")
    if not isinstance(data, dict):
        raise PayloadValidationError("Request body must be a JSON object or form")
    return data


def _error(detail: str) -> Dict[str, str]:
    return {"error": detail}


@router.post("/toggle/flagged")
async def toggle_flagged(
    request: Request,
    user_id: str = Query(..., description="User ID"),
    client: ApiClient = Depends(get_api_client),
):
    try:
        req = validate_payload(ToggleFlaggedRequest, await read_payload(request))
        return await update_messages(
            client, user_id, req.mailbox, req.message, {"flagged": req.flagged}
        )
    except PayloadValidationError as e:
        return _error(e.detail)
    except BackendError as e:
        logger.warning("toggle flagged failed for user %s: %s", user_id, e.detail)
        return _error(e.detail)


@router.post("/toggle/seen")
async def toggle_seen(
    request: Request,
    user_id: str = Query(..., description="User ID"),
    client: ApiClient = Depends(get_api_client),
):
    try:
        req = validate_payload(ToggleSeenRequest, await read_payload(request))
        return await update_messages(
            client, user_id, req.mailbox, req.message, {"seen": req.seen}
        )
    except PayloadValidationError as e:
        return _error(e.detail)
    except BackendError as e:
        logger.warning("toggle seen failed for user %s: %s", user_id, e.detail)
        return _error(e.detail)


@router.post("/move")
async def move(
    request: Request,
    user_id: str = Query(..., description="User ID"),
    client: ApiClient = Depends(get_api_client),
):
    try:
        req = validate_payload(MoveRequest, await read_payload(request))
        return await update_messages(
            client, user_id, req.mailbox, req.message, {"moveTo": req.target}
        )
    except PayloadValidationError as e:
        return _error(e.detail)
    except BackendError as e:
        logger.warning("move failed for user %s: %s", user_id, e.detail)
        return _error(e.detail)


@router.post("/delete")
async def delete(
    request: Request,
    user_id: str = Query(..., description="User ID"),
    client: ApiClient = Depends(get_api_client),
):
    try:
        req = validate_payload(DeleteRequest, await read_payload(request))
        return await delete_messages(client, user_id, req.mailbox, req.message)
    except PayloadValidationError as e:
        return _error(e.detail)
    except MailboxNotFoundError as e:
        return _error(e.detail)
    except BackendError as e:
        logger.warning("delete failed for user %s: %s", user_id, e.detail)
        return _error(e.detail)


@router.post("/list")
async def list_mailbox(
    request: Request,
    user_id: str = Query(..., description="User ID"),
    client: ApiClient = Depends(get_api_client),
):
    try:
        req = validate_payload(ListRequest, await read_payload(request))
        return await list_messages(client, user_id, req.mailbox, req.cursor_params())
    except PayloadValidationError as e:
        return _error(e.detail)
    except BackendError as e:
        logger.warning("list failed for user %s: %s", user_id, e.detail)
        return _error(e.detail)
