"""
Blogs Router: Track published blogs, their views and AI-detection scores.
"""

import logging
from datetime import date, datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from iqol.auth import get_current_user
from iqol.config import get_settings
from iqol.database import get_db
from iqol.errors import ValidationError
from iqol.models import Blog, User
from iqol.services.metrics_service import ai_health_label
from iqol.services.scoped_records import create_scoped, delete_scoped, list_scoped, update_scoped
from iqol.utils import require_text

logger = logging.getLogger(__name__)

router = APIRouter()


class BlogRequest(BaseModel):
    brand_id: Optional[int] = None
    published_date: Optional[date] = None  # Defaults to today
    title: str = ""
    blog_link: Optional[str] = None
    views: Optional[int] = None
    ai_detection_score: Optional[int] = None  # 0-100, None = not measured


class BlogResponse(BaseModel):
    id: int
    brand_id: int
    published_date: Optional[date]
    title: str
    blog_link: Optional[str]
    views: int
    ai_detection_score: Optional[int]
    health: Optional[str]
    created_at: datetime


def blog_to_response(b: Blog) -> BlogResponse:
    return BlogResponse(
        id=b.id,
        brand_id=b.brand_id,
        published_date=b.published_date,
        title=b.title,
        blog_link=b.blog_link,
        views=b.views or 0,
        ai_detection_score=b.ai_detection_score,
        health=ai_health_label(b.ai_detection_score),
        created_at=b.created_at,
    )


def _values(payload: BlogRequest) -> dict:
    views = payload.views or 0
    if views < 0:
        raise ValidationError("views cannot be negative")
    score = payload.ai_detection_score
    if score is not None and not 0 <= score <= 100:
        raise ValidationError("AI detection score must be between 0 and 100")
    return {
        "brand_id": payload.brand_id,
        "published_date": payload.published_date or date.today(),
        "title": require_text(payload.title, "Please enter a blog title."),
        "blog_link": (payload.blog_link or "").strip() or None,
        "views": views,
        "ai_detection_score": score,
    }


@router.get("", response_model=list[BlogResponse])
async def list_blogs(
    brand_id: Optional[int] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Newest published first."""
    rows = await list_scoped(
        db, user, Blog,
        order_by=["-published_date", "-id"],
        limit=limit or get_settings().recent_records_limit,
        brand_id=brand_id,
    )
    return [blog_to_response(b) for b in rows]


@router.post("", response_model=BlogResponse)
async def create_blog(
    payload: BlogRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await create_scoped(db, user, Blog, _values(payload))
    logger.info(f"User {user.id} added blog {row.id} for brand {row.brand_id}")
    return blog_to_response(row)


@router.put("/{blog_id}", response_model=BlogResponse)
async def update_blog(
    blog_id: int,
    payload: BlogRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await update_scoped(db, user, Blog, blog_id, _values(payload), "Blog")
    return blog_to_response(row)


@router.delete("/{blog_id}")
async def delete_blog(
    blog_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_scoped(db, user, Blog, blog_id, "Blog")
    return {"ok": True}
