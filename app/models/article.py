"""
Article model.

Donation target. Articles are published to IPFS and the content
identifier is stored as ``data_hash``.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class Article(Base):
    """Article published by a user."""

    __tablename__ = "article"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    author_id: Mapped[int] = mapped_column(
        ForeignKey("user.id"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)

    # IPFS content identifier of the published article
    data_hash: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    media_hash: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Article(id={self.id}, author_id={self.author_id})>"
