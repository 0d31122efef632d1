"""
Article repository.

Data access layer for Article model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.article import Article
from app.repositories.base import BaseRepository


class ArticleRepository(BaseRepository[Article]):
    """Article repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(Article, session)

    async def find_by_author_and_cid(
        self, author_id: int, cid: str
    ) -> Article | None:
        """
        Find an article of the author by its IPFS content identifier.

        Args:
            author_id: Author user ID
            cid: Content identifier (article data hash)

        Returns:
            Oldest matching article or None
        """
        stmt = (
            select(Article)
            .where(Article.author_id == author_id, Article.data_hash == cid)
            .order_by(Article.id.asc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
