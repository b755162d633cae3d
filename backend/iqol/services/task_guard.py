"""
Task Assignment Guard: who may assign, delete and toggle action items.
"""

import logging

from iqol.models import Role, TaskStatus

logger = logging.getLogger(__name__)


def can_assign(user, proposed_assignee_name: str | None) -> str | None:
    """
    Return the assignee to store. Admins may assign anyone; everyone else is
    always assigned to themselves, whatever the client sent.
    """
    if user.role == Role.ADMIN.value:
        return proposed_assignee_name
    if proposed_assignee_name and proposed_assignee_name != user.name:
        logger.info(f"Overriding assignee {proposed_assignee_name!r} with {user.name!r} for non-admin")
    return user.name


def can_delete(user, item) -> bool:
    assigned_to = item.get("assigned_to") if isinstance(item, dict) else item.assigned_to
    return user.role == Role.ADMIN.value or user.name == assigned_to


def toggle(status: str) -> str:
    """Pending -> Done, anything else -> Pending."""
    if status == TaskStatus.PENDING.value:
        return TaskStatus.DONE.value
    return TaskStatus.PENDING.value
