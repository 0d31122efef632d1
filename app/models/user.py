"""
User model.

Represents a platform user. Only the fields needed to resolve on-chain
wallet addresses and deliver payment notices are mapped here.
"""

from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class User(Base):
    """User model - platform accounts with an optional linked wallet."""

    __tablename__ = "user"

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Profile
    user_name: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Wallet (normalized to lowercase)
    eth_address: Mapped[str | None] = mapped_column(
        String(42), unique=True, index=True, nullable=True
    )

    # Telegram chat used for payment notices
    telegram_id: Mapped[int | None] = mapped_column(
        BigInteger, unique=True, nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<User(id={self.id}, user_name={self.user_name})>"
