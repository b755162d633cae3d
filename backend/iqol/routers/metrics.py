"""
Daily Metrics Router: Log, edit and delete per-brand website/social numbers.
Only brands the caller may access are listed or written.
"""

import logging
import datetime as dt
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from iqol.auth import get_current_user
from iqol.config import get_settings
from iqol.database import get_db
from iqol.errors import ValidationError
from iqol.models import DailyMetric, User
from iqol.services.metrics_service import METRIC_FIELDS
from iqol.services.scoped_records import create_scoped, delete_scoped, list_scoped, update_scoped

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request Models ────────────────────────────────────────────────────

class MetricRequest(BaseModel):
    brand_id: Optional[int] = None
    date: Optional[dt.date] = None  # Defaults to today
    website_visits: Optional[int] = None
    linkedin_impressions: Optional[int] = None
    linkedin_followers: Optional[int] = None
    instagram_views: Optional[int] = None
    instagram_followers: Optional[int] = None


class MetricResponse(BaseModel):
    id: int
    brand_id: int
    date: dt.date
    website_visits: int
    linkedin_impressions: int
    linkedin_followers: int
    instagram_views: int
    instagram_followers: int
    created_at: dt.datetime


def _to_response(m: DailyMetric) -> MetricResponse:
    return MetricResponse(
        id=m.id,
        brand_id=m.brand_id,
        date=m.date,
        website_visits=m.website_visits or 0,
        linkedin_impressions=m.linkedin_impressions or 0,
        linkedin_followers=m.linkedin_followers or 0,
        instagram_views=m.instagram_views or 0,
        instagram_followers=m.instagram_followers or 0,
        created_at=m.created_at,
    )


def _values(payload: MetricRequest) -> dict:
    """Empty numbers are stored as 0; negatives are rejected."""
    values = {"brand_id": payload.brand_id, "date": payload.date or dt.date.today()}
    for field in METRIC_FIELDS:
        value = getattr(payload, field) or 0
        if value < 0:
            raise ValidationError(f"{field} cannot be negative")
        values[field] = value
    return values


# ── Endpoints ─────────────────────────────────────────────────────────

@router.get("", response_model=list[MetricResponse])
async def list_metrics(
    brand_id: Optional[int] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Most recently entered metrics first."""
    rows = await list_scoped(
        db, user, DailyMetric,
        order_by=["-created_at", "-id"],
        limit=limit or get_settings().recent_records_limit,
        brand_id=brand_id,
    )
    return [_to_response(m) for m in rows]


@router.post("", response_model=MetricResponse)
async def create_metric(
    payload: MetricRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await create_scoped(db, user, DailyMetric, _values(payload))
    logger.info(f"User {user.id} logged metrics for brand {row.brand_id} on {row.date}")
    return _to_response(row)


@router.put("/{metric_id}", response_model=MetricResponse)
async def update_metric(
    metric_id: int,
    payload: MetricRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await update_scoped(db, user, DailyMetric, metric_id, _values(payload), "Metric entry")
    return _to_response(row)


@router.delete("/{metric_id}")
async def delete_metric(
    metric_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_scoped(db, user, DailyMetric, metric_id, "Metric entry")
    return {"ok": True}
