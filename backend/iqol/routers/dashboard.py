"""
Dashboard Router: Latest metrics with period-over-period change and the
top blogs / social posts for every brand the caller may see.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from iqol.auth import get_current_user
from iqol.config import get_settings
from iqol.database import get_db
from iqol.models import Blog, DailyMetric, SocialPost, User
from iqol.routers.blogs import BlogResponse, blog_to_response
from iqol.routers.brands import BrandResponse, visible_brands
from iqol.routers.social import SocialPostResponse, post_to_response
from iqol.services.metrics_service import build_dashboard
from iqol.services.scoped_records import list_scoped

logger = logging.getLogger(__name__)

router = APIRouter()


class BrandStats(BaseModel):
    website_visits: int
    linkedin_impressions: int
    linkedin_followers: int
    instagram_views: int
    instagram_followers: int
    website_change: int
    linkedin_imp_change: int
    linkedin_fol_change: int
    insta_view_change: int
    insta_fol_change: int
    current_date: Optional[str] = None
    previous_date: Optional[str] = None


class TopSocial(BaseModel):
    linkedin: list[SocialPostResponse]
    instagram: list[SocialPostResponse]


class BrandDashboard(BaseModel):
    brand: BrandResponse
    stats: BrandStats
    top_blogs: list[BlogResponse]
    top_social: TopSocial


@router.get("", response_model=list[BrandDashboard])
async def get_dashboard(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Per-brand dashboard, restricted to the caller's visible brands."""
    brands = await visible_brands(db, user)
    metrics = await list_scoped(db, user, DailyMetric, order_by=["-date", "-id"])
    blogs = await list_scoped(db, user, Blog, order_by=["-views", "-id"])
    posts = await list_scoped(db, user, SocialPost, order_by=["-impressions_views", "-id"])

    entries = build_dashboard(brands, metrics, blogs, posts, limit=get_settings().dashboard_top_n)
    return [
        BrandDashboard(
            brand=BrandResponse(id=e["brand"].id, name=e["brand"].name),
            stats=BrandStats(**{
                **e["stats"],
                "current_date": _iso(e["stats"]["current_date"]),
                "previous_date": _iso(e["stats"]["previous_date"]),
            }),
            top_blogs=[blog_to_response(b["blog"]) for b in e["top_blogs"]],
            top_social=TopSocial(
                linkedin=[post_to_response(p) for p in e["top_social"]["linkedin"]],
                instagram=[post_to_response(p) for p in e["top_social"]["instagram"]],
            ),
        )
        for e in entries
    ]


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None
