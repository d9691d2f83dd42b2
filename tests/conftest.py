"""
Shared fixtures.

- db: AsyncSession on a fresh in-memory SQLite database
- seed: helper for inserting products, services, reviews and comments
  with timestamps relative to NOW
"""

from datetime import datetime, timedelta
from typing import Optional

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from activity_feed.database import Base
from activity_feed.models import Comment, Product, Review, Service

NOW = datetime(2025, 6, 15, 12, 0, 0)


class Seeder:
    """Inserts marketplace rows; every timestamp is relative to NOW."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def product(
        self,
        name: Optional[str] = None,
        days_ago: float = 30,
        **fields,
    ) -> Product:
        product = Product(
            product_name=name or f"Product {self._next()}",
            created_at=NOW - timedelta(days=days_ago),
            **fields,
        )
        self.db.add(product)
        await self.db.commit()
        return product

    async def service(
        self,
        name: Optional[str] = None,
        days_ago: float = 30,
        **fields,
    ) -> Service:
        service = Service(
            service_name=name or f"Service {self._next()}",
            created_at=NOW - timedelta(days=days_ago),
            **fields,
        )
        self.db.add(service)
        await self.db.commit()
        return service

    async def review(self, item, sentiment: str, days_ago: float = 0) -> Review:
        is_product = isinstance(item, Product)
        review = Review(
            user_id=f"user-{self._next()}",
            product=item if is_product else None,
            service=None if is_product else item,
            sentiment=sentiment,
            created_at=NOW - timedelta(days=days_ago),
        )
        self.db.add(review)
        await self.db.commit()
        return review

    async def reviews(self, item, sentiments: list[str], start_days_ago: float = 0, step: float = 0.25):
        """Add reviews newest first: sentiments[0] is the most recent."""
        for idx, sentiment in enumerate(sentiments):
            await self.review(item, sentiment, days_ago=start_days_ago + idx * step)

    async def comments(
        self,
        item,
        count: int,
        days_ago: float = 0,
        is_deleted: bool = False,
    ) -> None:
        is_product = isinstance(item, Product)
        for _ in range(count):
            self.db.add(Comment(
                user_id=f"user-{self._next()}",
                product_id=item.id if is_product else None,
                service_id=None if is_product else item.id,
                content="Nice",
                is_deleted=is_deleted,
                created_at=NOW - timedelta(days=days_ago),
            ))
        await self.db.commit()


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database per test."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def seed(db):
    return Seeder(db)
