"""
Social Posts Router: LinkedIn and Instagram post performance per brand.
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
from iqol.models import Platform, SocialPost, User
from iqol.services.scoped_records import create_scoped, delete_scoped, list_scoped, update_scoped

logger = logging.getLogger(__name__)

router = APIRouter()

PLATFORMS = [p.value for p in Platform]


class SocialPostRequest(BaseModel):
    brand_id: Optional[int] = None
    platform: str = Platform.INSTAGRAM.value
    posted_date: Optional[date] = None  # Defaults to today
    post_name: Optional[str] = None
    post_link: Optional[str] = None
    impressions_views: Optional[int] = None
    likes: Optional[int] = None


class SocialPostResponse(BaseModel):
    id: int
    brand_id: int
    platform: str
    posted_date: Optional[date]
    post_name: Optional[str]
    post_link: Optional[str]
    impressions_views: int
    likes: int
    created_at: datetime


def post_to_response(p: SocialPost) -> SocialPostResponse:
    return SocialPostResponse(
        id=p.id,
        brand_id=p.brand_id,
        platform=p.platform,
        posted_date=p.posted_date,
        post_name=p.post_name,
        post_link=p.post_link,
        impressions_views=p.impressions_views or 0,
        likes=p.likes or 0,
        created_at=p.created_at,
    )


def _values(payload: SocialPostRequest) -> dict:
    if payload.platform not in PLATFORMS:
        raise ValidationError(f"Platform must be one of {', '.join(PLATFORMS)}")
    impressions = payload.impressions_views or 0
    likes = payload.likes or 0
    if impressions < 0 or likes < 0:
        raise ValidationError("Impressions and likes cannot be negative")
    return {
        "brand_id": payload.brand_id,
        "platform": payload.platform,
        "posted_date": payload.posted_date or date.today(),
        "post_name": (payload.post_name or "").strip() or None,
        "post_link": (payload.post_link or "").strip() or None,
        "impressions_views": impressions,
        "likes": likes,
    }


@router.get("", response_model=list[SocialPostResponse])
async def list_social_posts(
    brand_id: Optional[int] = Query(None),
    platform: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Newest posts first."""
    rows = await list_scoped(
        db, user, SocialPost,
        order_by=["-posted_date", "-id"],
        limit=limit or get_settings().recent_records_limit,
        brand_id=brand_id,
        filters={"platform": platform} if platform else None,
    )
    return [post_to_response(p) for p in rows]


@router.post("", response_model=SocialPostResponse)
async def create_social_post(
    payload: SocialPostRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await create_scoped(db, user, SocialPost, _values(payload))
    logger.info(f"User {user.id} tracked {row.platform} post {row.id} for brand {row.brand_id}")
    return post_to_response(row)


@router.put("/{post_id}", response_model=SocialPostResponse)
async def update_social_post(
    post_id: int,
    payload: SocialPostRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await update_scoped(db, user, SocialPost, post_id, _values(payload), "Social post")
    return post_to_response(row)


@router.delete("/{post_id}")
async def delete_social_post(
    post_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_scoped(db, user, SocialPost, post_id, "Social post")
    return {"ok": True}
