"""SQLAlchemy models for the marketplace tables the activity feed reads."""

from datetime import datetime
from typing import Optional
import uuid

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from activity_feed.constants import PRODUCT, SERVICE
from activity_feed.database import Base


def generate_id() -> str:
    """Generate a unique row ID."""
    return uuid.uuid4().hex


class ItemMixin:
    """Columns shared by products and services.

    Products and services are two near-identical tables; generators work
    against this common shape. Each subclass sets ``item_type`` and exposes
    its own name column as ``name``.
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    main_image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Denormalized review/rating stats, maintained by the marketplace API
    total_views: Mapped[int] = mapped_column(Integer, default=0)
    total_reviews: Mapped[int] = mapped_column(Integer, default=0)
    positive_reviews: Mapped[int] = mapped_column(Integer, default=0)
    negative_reviews: Mapped[int] = mapped_column(Integer, default=0)
    quick_rating_total: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class Product(ItemMixin, Base):
    __tablename__ = "products"

    item_type = PRODUCT

    product_name: Mapped[str] = mapped_column(String(255), nullable=False)

    @property
    def name(self) -> str:
        return self.product_name

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.product_name})>"


class Service(ItemMixin, Base):
    __tablename__ = "services"

    item_type = SERVICE

    service_name: Mapped[str] = mapped_column(String(255), nullable=False)

    @property
    def name(self) -> str:
        return self.service_name

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, name={self.service_name})>"


class Review(Base):
    """Sentiment review on exactly one product or service."""

    __tablename__ = "reviews"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    product_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=True
    )
    service_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("services.id", ondelete="CASCADE"), nullable=True
    )
    sentiment: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    product: Mapped[Optional["Product"]] = relationship("Product")
    service: Mapped[Optional["Service"]] = relationship("Service")

    __table_args__ = (
        Index("idx_reviews_product_created", "product_id", "created_at"),
        Index("idx_reviews_service_created", "service_id", "created_at"),
        Index("idx_reviews_created", "created_at"),
    )

    @property
    def item_id(self) -> Optional[str]:
        return self.product_id or self.service_id

    @property
    def item_type(self) -> str:
        return PRODUCT if self.product_id else SERVICE

    @property
    def item(self):
        return self.product or self.service


class Comment(Base):
    """Discussion comment on a product or service (soft-deletable)."""

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    product_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=True
    )
    service_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("services.id", ondelete="CASCADE"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_comments_product_created", "product_id", "created_at"),
        Index("idx_comments_service_created", "service_id", "created_at"),
    )
