"""
User repository.

Data access layer for User model.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def find_by_eth_address(self, eth_address: str) -> User | None:
        """
        Find user by wallet address (case-insensitive).

        Args:
            eth_address: Wallet address (any case)

        Returns:
            User or None
        """
        if not eth_address:
            return None

        stmt = (
            select(User)
            .where(func.lower(User.eth_address) == eth_address.lower())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
