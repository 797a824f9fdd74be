import asyncio
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from starlette.concurrency import run_in_threadpool

from mailaction.services.address_format import render_addresses_html
from mailaction.services.api_client import ApiClient
from mailaction.services.errors import BackendError, MailboxNotFoundError

logger = logging.getLogger(__name__)

TRASH_SPECIAL_USE = "\\Trash"

_ID_TOKEN = re.compile(r"[0-9]+")


def parse_message_ids(selector: str) -> List[int]:
    ids: List[int] = []
    for token in selector.split(","):
        token = token.strip()
        if not _ID_TOKEN.fullmatch(token):
            continue
        mid = int(token)
        if mid:
            ids.append(mid)
    return ids


def resolve_mailboxes(
    mailboxes: List[Dict[str, Any]], mailbox_id: str
) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
    mailbox = next((m for m in mailboxes if m.get("id") == mailbox_id), None)
    trash = next(
        (m for m in mailboxes if m.get("specialUse") == TRASH_SPECIAL_USE), None
    )
    return mailbox, trash


def should_delete_permanently(
    mailbox: Dict[str, Any], trash: Optional[Dict[str, Any]]
) -> bool:
    return trash is None or mailbox.get("specialUse") == TRASH_SPECIAL_USE


async def update_messages(
    client: ApiClient,
    user_id: str,
    mailbox_id: str,
    message: str,
    patch: Dict[str, Any],
) -> Dict[str, Any]:
    # unset flags are left out of the patch rather than sent as null
    patch = {key: value for key, value in patch.items() if value is not None}
    return await run_in_threadpool(
        client.update_messages, user_id, mailbox_id, message, patch
    )


async def delete_permanently(
    client: ApiClient, user_id: str, mailbox_id: str, message_ids: List[int]
) -> List[list]:
    deleted: List[list] = []
    # one backend call in flight at a time, results in input order
    for mid in message_ids:
        try:
            response = await run_in_threadpool(
                client.delete_message, user_id, mailbox_id, mid
            )
        except BackendError as e:
            logger.warning(
                "delete of message %s in %s failed: %s", mid, mailbox_id, e.detail
            )
            deleted.append([mid, False, {"error": e.detail, "code": e.code}])
        else:
            success = bool(response.get("success")) if response else False
            deleted.append([mid, success])
        await asyncio.sleep(0)
    return deleted


async def delete_messages(
    client: ApiClient, user_id: str, mailbox_id: str, message: str
) -> Dict[str, Any]:
    """Delete messages, or move them to Trash when that is possible.

    Messages already in Trash, or of a user that has no Trash mailbox, are
    deleted permanently id by id. Anything else is moved to Trash with a
    single update covering the whole selector.
    """
    mailboxes = await run_in_threadpool(client.list_mailboxes, user_id, True)
    mailbox, trash = resolve_mailboxes(mailboxes, mailbox_id)
    if not mailbox:
        raise MailboxNotFoundError()

    if should_delete_permanently(mailbox, trash):
        ids = parse_message_ids(message)
        deleted = await delete_permanently(client, user_id, mailbox_id, ids)
        return {"success": True, "action": "delete", "id": deleted}

    response = await update_messages(
        client, user_id, mailbox_id, message, {"moveTo": trash["id"]}
    )
    response["action"] = "move"
    return response


async def list_messages(
    client: ApiClient, user_id: str, mailbox_id: str, params: Dict[str, str]
) -> Dict[str, Any]:
    response = await run_in_threadpool(
        client.list_messages, user_id, mailbox_id, params
    )
    for message in response.get("results") or []:
        message["fromHtml"] = render_addresses_html(message.get("from"), True)
    return response
