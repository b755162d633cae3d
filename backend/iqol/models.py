"""
IQOL Dashboard: Database Models
Staff profiles, brands, daily metrics, content records and action items.
Every metric/content row belongs to exactly one brand.
"""

import uuid
import enum
import datetime as dt
from datetime import datetime, timezone
from sqlalchemy import (
    String, Text, Integer, Boolean, Date, DateTime, JSON, Uuid,
    ForeignKey, Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from iqol.database import Base


def _utcnow() -> datetime:
    """Naive UTC now: matches DB columns (TIMESTAMP WITHOUT TIME ZONE)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class Role(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class TaskStatus(str, enum.Enum):
    PENDING = "Pending"
    DONE = "Done"


class Platform(str, enum.Enum):
    INSTAGRAM = "Instagram"
    LINKEDIN = "LinkedIn"


# ══════════════════════════════════════════════════════════════════════
#  PROFILES: Staff accounts with per-brand access
# ══════════════════════════════════════════════════════════════════════

class User(Base):
    """Dashboard user. Admins see every brand; users only their allowed_brands."""
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), default=Role.USER.value)  # admin, user
    allowed_brands: Mapped[list] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_login_at: Mapped[datetime] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("ix_profiles_email", "email"),
        Index("ix_profiles_role", "role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


# ══════════════════════════════════════════════════════════════════════
#  BRANDS: Tracked marketing entities
# ══════════════════════════════════════════════════════════════════════

class Brand(Base):
    """A company or sub-brand that owns metrics and content."""
    __tablename__ = "brands"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    metrics: Mapped[list["DailyMetric"]] = relationship("DailyMetric", back_populates="brand", cascade="all, delete-orphan")
    blogs: Mapped[list["Blog"]] = relationship("Blog", back_populates="brand", cascade="all, delete-orphan")
    social_posts: Mapped[list["SocialPost"]] = relationship("SocialPost", back_populates="brand", cascade="all, delete-orphan")


# ══════════════════════════════════════════════════════════════════════
#  DAILY METRICS: One logical entry per (brand, date); not enforced
# ══════════════════════════════════════════════════════════════════════

class DailyMetric(Base):
    """Website and social numbers for a brand on a given day."""
    __tablename__ = "daily_metrics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand_id: Mapped[int] = mapped_column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    website_visits: Mapped[int] = mapped_column(Integer, default=0)
    linkedin_impressions: Mapped[int] = mapped_column(Integer, default=0)
    linkedin_followers: Mapped[int] = mapped_column(Integer, default=0)
    instagram_views: Mapped[int] = mapped_column(Integer, default=0)
    instagram_followers: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    brand: Mapped["Brand"] = relationship("Brand", back_populates="metrics")

    __table_args__ = (
        Index("ix_daily_metrics_brand_date", "brand_id", "date"),
        Index("ix_daily_metrics_created_at", "created_at"),
    )


# ══════════════════════════════════════════════════════════════════════
#  BLOGS: Published articles with view counts
# ══════════════════════════════════════════════════════════════════════

class Blog(Base):
    __tablename__ = "blogs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand_id: Mapped[int] = mapped_column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False)
    published_date: Mapped[dt.date] = mapped_column(Date, nullable=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    blog_link: Mapped[str] = mapped_column(Text, nullable=True)
    views: Mapped[int] = mapped_column(Integer, default=0)
    ai_detection_score: Mapped[int] = mapped_column(Integer, nullable=True)  # 0-100
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    brand: Mapped["Brand"] = relationship("Brand", back_populates="blogs")

    __table_args__ = (
        Index("ix_blogs_brand_id", "brand_id"),
        Index("ix_blogs_published_date", "published_date"),
    )


# ══════════════════════════════════════════════════════════════════════
#  SOCIAL POSTS: LinkedIn / Instagram post performance
# ══════════════════════════════════════════════════════════════════════

class SocialPost(Base):
    __tablename__ = "social_posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand_id: Mapped[int] = mapped_column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False)
    platform: Mapped[str] = mapped_column(String(50), default=Platform.INSTAGRAM.value)
    posted_date: Mapped[dt.date] = mapped_column(Date, nullable=True)
    post_name: Mapped[str] = mapped_column(String(512), nullable=True)
    post_link: Mapped[str] = mapped_column(Text, nullable=True)
    impressions_views: Mapped[int] = mapped_column(Integer, default=0)
    likes: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    brand: Mapped["Brand"] = relationship("Brand", back_populates="social_posts")

    __table_args__ = (
        Index("ix_social_posts_brand_id", "brand_id"),
        Index("ix_social_posts_posted_date", "posted_date"),
    )


# ══════════════════════════════════════════════════════════════════════
#  ACTION ITEMS: Tasks assigned to staff by display name
# ══════════════════════════════════════════════════════════════════════

class ActionItem(Base):
    __tablename__ = "action_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    due_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    assigned_to: Mapped[str] = mapped_column(String(255), nullable=False)
    task: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=TaskStatus.PENDING.value)  # Pending, Done
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    __table_args__ = (
        Index("ix_action_items_due_date", "due_date"),
        Index("ix_action_items_assigned_to", "assigned_to"),
    )
