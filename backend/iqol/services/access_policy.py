"""
Brand Access Policy: the single place that decides who may see or change a brand's data.

Admins have unrestricted access. Everyone else is limited to the brand ids in
their ``allowed_brands``. Read and write follow the same rule.
"""

import enum
import logging
from typing import Any, Iterable, Optional, Sequence

from iqol.errors import AuthError
from iqol.models import Role

logger = logging.getLogger(__name__)


class AccessMode(str, enum.Enum):
    READ = "read"
    WRITE = "write"


def _is_admin(user) -> bool:
    return getattr(user, "role", None) == Role.ADMIN.value


def _brand_key(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def allowed_brand_ids(user) -> Optional[set[int]]:
    """Brand ids a user may touch, or None meaning "all brands" (admins)."""
    if _is_admin(user):
        return None
    ids = set()
    for raw in getattr(user, "allowed_brands", None) or []:
        key = _brand_key(raw)
        if key is not None:
            ids.add(key)
    return ids


def can_access(user, brand_id, mode: AccessMode = AccessMode.READ) -> bool:
    if _is_admin(user):
        return True
    key = _brand_key(brand_id)
    if key is None:
        return False
    return key in allowed_brand_ids(user)


def require_brand_access(user, brand_id, mode: AccessMode = AccessMode.WRITE) -> None:
    """Raise AuthError.forbidden unless ``user`` may access ``brand_id`` in ``mode``."""
    if not can_access(user, brand_id, mode):
        logger.warning(
            f"Denied {mode.value} on brand {brand_id!r} for user {getattr(user, 'id', None)}"
        )
        raise AuthError.forbidden("You do not have access to this brand.")


def _record_brand(record, key: str):
    if isinstance(record, dict):
        return record.get(key)
    return getattr(record, key, None)


def scope(user, records: Iterable, brand_field: str = "brand_id") -> list:
    """
    Keep the records the user may read, preserving input order.
    ``brand_field`` names the attribute (or mapping key) holding the brand id;
    pass "id" when scoping the brands table itself.
    """
    records = list(records)
    if _is_admin(user):
        return records
    return [
        r for r in records
        if can_access(user, _record_brand(r, brand_field), AccessMode.READ)
    ]


def scope_filter(user, requested: Optional[Sequence[int]] = None) -> Optional[list[int]]:
    """
    Brand ids to push into a query's IN clause, or None for no restriction.
    ``requested`` narrows the result further (e.g. a ?brand_id= query param).
    """
    allowed = allowed_brand_ids(user)
    if requested is None:
        return None if allowed is None else sorted(allowed)
    wanted = {k for k in (_brand_key(r) for r in requested) if k is not None}
    if allowed is None:
        return sorted(wanted)
    return sorted(wanted & allowed)
