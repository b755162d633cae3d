"""
Action Items Router: Tasks assigned to staff, grouped by due date.

Assignment is enforced here rather than in the client: non-admins always
create tasks for themselves and may only delete their own tasks.
"""

import logging
from datetime import date, datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from iqol.auth import get_current_user
from iqol.database import get_db
from iqol.errors import AuthError, NotFoundError, ValidationError
from iqol.models import ActionItem, TaskStatus, User
from iqol.services.store import TableStore, safe_select
from iqol.services.task_guard import can_assign, can_delete, toggle
from iqol.utils import require_text

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request Models ────────────────────────────────────────────────────

class ActionItemRequest(BaseModel):
    due_date: Optional[date] = None  # Defaults to today
    assigned_to: Optional[str] = None  # Ignored for non-admins
    task: str = ""
    status: str = TaskStatus.PENDING.value


class ActionItemResponse(BaseModel):
    id: int
    due_date: date
    assigned_to: str
    task: str
    status: str
    can_delete: bool
    created_at: datetime


class ActionItemGroup(BaseModel):
    due_date: date
    items: list[ActionItemResponse]


def _to_response(item: ActionItem, user: User) -> ActionItemResponse:
    return ActionItemResponse(
        id=item.id,
        due_date=item.due_date,
        assigned_to=item.assigned_to,
        task=item.task,
        status=item.status,
        can_delete=can_delete(user, item),
        created_at=item.created_at,
    )


def group_by_due_date(items: list[ActionItemResponse]) -> list[ActionItemGroup]:
    """Groups in first-seen order, which is newest due date first for a sorted list."""
    groups: dict[date, list[ActionItemResponse]] = {}
    for item in items:
        groups.setdefault(item.due_date, []).append(item)
    return [ActionItemGroup(due_date=d, items=rows) for d, rows in groups.items()]


# ── Endpoints ─────────────────────────────────────────────────────────

@router.get("")
async def list_action_items(
    grouped: bool = Query(False),
    assigned_to: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """All action items, latest due date first. ?grouped=true groups them by due date."""
    items = await safe_select(
        TableStore(db, ActionItem),
        filters={"assigned_to": assigned_to} if assigned_to else None,
        order_by=["-due_date", "-id"],
    )
    rows = [_to_response(i, user) for i in items]
    if grouped:
        return group_by_due_date(rows)
    return rows


@router.post("", response_model=ActionItemResponse)
async def create_action_item(
    payload: ActionItemRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    task = require_text(payload.task, "Please fill in all fields")
    assignee = (can_assign(user, payload.assigned_to) or "").strip()
    if not assignee:
        raise ValidationError("Please fill in all fields")
    if not await TableStore(db, User).select(filters={"name": assignee}, limit=1):
        raise ValidationError(f"No user named {assignee!r}")
    if payload.status not in (TaskStatus.PENDING.value, TaskStatus.DONE.value):
        raise ValidationError("Status must be 'Pending' or 'Done'")

    item = await TableStore(db, ActionItem).insert({
        "due_date": payload.due_date or date.today(),
        "assigned_to": assignee,
        "task": task,
        "status": payload.status,
    })
    logger.info(f"User {user.id} created action item {item.id} for {assignee}")
    return _to_response(item, user)


@router.post("/{item_id}/toggle", response_model=ActionItemResponse)
async def toggle_action_item(
    item_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Flip Pending <-> Done. The stored status only changes if the write succeeds."""
    items = TableStore(db, ActionItem)
    item = await items.get(item_id)
    if item is None:
        raise NotFoundError("Action item not found")
    item = await items.update(item_id, {"status": toggle(item.status)})
    return _to_response(item, user)


@router.delete("/{item_id}")
async def delete_action_item(
    item_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    items = TableStore(db, ActionItem)
    item = await items.get(item_id)
    if item is None:
        raise NotFoundError("Action item not found")
    if not can_delete(user, item):
        logger.warning(f"User {user.id} denied deleting action item {item_id} assigned to {item.assigned_to}")
        raise AuthError.forbidden("You can only delete your own action items.")
    await items.delete(item_id)
    return {"ok": True}
