"""Read-only queries over the marketplace tables."""

from collections.abc import Iterable
from datetime import datetime
from typing import Optional, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from activity_feed.constants import PRODUCT, SERVICE
from activity_feed.models import Comment, Product, Review, Service

Item = Union[Product, Service]


class ActivityRepository:
    """
    Query interface the activity generators read through.

    ``item_type`` arguments scope a query to products (``PRODUCT``), services
    (``SERVICE``) or both (``None``). Nothing here writes.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _item_models(item_type: Optional[str]) -> list[type[Item]]:
        if item_type == PRODUCT:
            return [Product]
        if item_type == SERVICE:
            return [Service]
        return [Product, Service]

    @staticmethod
    def _scope(model: type[Union[Review, Comment]], item_type: Optional[str]) -> list:
        if item_type == PRODUCT:
            return [model.product_id.is_not(None)]
        if item_type == SERVICE:
            return [model.service_id.is_not(None)]
        return []

    # ============ Reviews ============

    async def recent_reviews(
        self,
        since: datetime,
        until: Optional[datetime] = None,
        item_type: Optional[str] = None,
        sentiments: Optional[Iterable[str]] = None,
        with_items: bool = False,
    ) -> list[Review]:
        """
        Reviews created in ``[since, until)``, newest first.

        ``with_items`` eager-loads the reviewed product/service so callers
        can check it without another round trip.
        """
        query = select(Review).where(
            Review.created_at >= since,
            *self._scope(Review, item_type),
        )
        if until is not None:
            query = query.where(Review.created_at < until)
        if sentiments is not None:
            query = query.where(Review.sentiment.in_(list(sentiments)))
        if with_items:
            query = query.options(
                selectinload(Review.product),
                selectinload(Review.service),
            )
        query = query.order_by(Review.created_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def review_counts_by_item(
        self,
        since: datetime,
        item_type: Optional[str] = None,
    ) -> list[tuple[str, int]]:
        """Review counts per item since ``since``, highest count first."""
        item_id = func.coalesce(Review.product_id, Review.service_id)
        review_count = func.count(Review.id)

        query = (
            select(item_id.label("item_id"), review_count.label("review_count"))
            .where(
                Review.created_at >= since,
                item_id.is_not(None),
                *self._scope(Review, item_type),
            )
            .group_by(item_id)
            .order_by(review_count.desc(), item_id)
        )

        result = await self.db.execute(query)
        return [(row.item_id, row.review_count) for row in result.fetchall()]

    # ============ Comments ============

    async def comment_counts_by_item(
        self,
        since: datetime,
        item_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[tuple[str, int]]:
        """Non-deleted comment counts per item since ``since``, highest first."""
        item_id = func.coalesce(Comment.product_id, Comment.service_id)
        comment_count = func.count(Comment.id)

        query = (
            select(item_id.label("item_id"), comment_count.label("comment_count"))
            .where(
                Comment.created_at >= since,
                Comment.is_deleted == False,
                item_id.is_not(None),
                *self._scope(Comment, item_type),
            )
            .group_by(item_id)
            .order_by(comment_count.desc(), item_id)
        )
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return [(row.item_id, row.comment_count) for row in result.fetchall()]

    async def count_item_comments(self, item: Item, since: datetime) -> int:
        """Count comments on one item since ``since``, soft-deleted ones included."""
        column = Comment.product_id if item.item_type == PRODUCT else Comment.service_id
        result = await self.db.execute(
            select(func.count(Comment.id)).where(
                column == item.id,
                Comment.created_at >= since,
            )
        )
        return result.scalar_one()

    # ============ Items ============

    async def resolve_item(self, item_id: str) -> Optional[Item]:
        """Find an item by ID, trying products first and then services."""
        product = await self.db.get(Product, item_id)
        if product is not None:
            return product
        return await self.db.get(Service, item_id)

    async def new_items(
        self,
        since: datetime,
        item_type: Optional[str] = None,
    ) -> list[Item]:
        """Active items created since ``since``, newest first per table."""
        items: list[Item] = []
        for model in self._item_models(item_type):
            result = await self.db.execute(
                select(model)
                .where(model.is_active == True, model.created_at >= since)
                .order_by(model.created_at.desc())
            )
            items.extend(result.scalars().all())
        return items

    async def active_items(
        self,
        item_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Item]:
        """Active items, optionally capped at ``limit`` rows per table."""
        items: list[Item] = []
        for model in self._item_models(item_type):
            query = (
                select(model)
                .where(model.is_active == True)
                .order_by(model.created_at.desc(), model.id)
            )
            if limit is not None:
                query = query.limit(limit)
            result = await self.db.execute(query)
            items.extend(result.scalars().all())
        return items

    async def reset(self) -> None:
        """Roll back after a failed statement so the session stays usable."""
        await self.db.rollback()
