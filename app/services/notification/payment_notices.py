"""
Payment notice functionality.

Notices sent when an on-chain donation settles.
"""

from html import escape
from typing import Any

from loguru import logger

from app.models.article import Article
from app.models.enums import NoticeType, PaymentNoticeKind
from app.models.transaction import Transaction
from app.models.user import User

PAYMENT_NOTICE_TEMPLATES = {
    PaymentNoticeKind.DONATED: (
        "💸 You donated <b>{amount} {currency}</b> to <i>{title}</i>."
    ),
    PaymentNoticeKind.RECEIVED_DONATION: (
        "🎉 You received a donation of <b>{amount} {currency}</b> for <i>{title}</i>."
    ),
}

NOTICE_TEMPLATES = {
    NoticeType.PAYMENT_RECEIVED_DONATION: (
        "🔔 {actor} supported your article <i>{title}</i>."
    ),
}


class PaymentNoticeMixin:
    """Mixin for donation settlement notices."""

    async def send_payment_notice(
        self,
        user: User,
        kind: PaymentNoticeKind,
        tx: Transaction,
        article: Article,
    ) -> bool:
        """
        Send a payment notice to one party of a donation.

        Args:
            user: Notified user
            kind: donated (sender) or received_donation (recipient)
            tx: Settled ledger transaction
            article: Donated article

        Returns:
            True if delivered
        """
        message = PAYMENT_NOTICE_TEMPLATES[kind].format(
            amount=f"{tx.amount.normalize():f}",
            currency=tx.currency,
            title=escape(article.title),
        )
        delivered = await self.send_message(user, message)
        logger.info(
            f"[Notification] Payment notice {kind} for transaction {tx.id} "
            f"to user {user.id}: {'sent' if delivered else 'not sent'}"
        )
        return delivered

    async def trigger(
        self,
        event: NoticeType,
        actor: User,
        recipient: User,
        entities: dict[str, Any],
    ) -> bool:
        """
        Trigger an in-app notice for the recipient.

        Args:
            event: Notice type
            actor: User causing the notice
            recipient: Notified user
            entities: Entities referenced by the notice (target, transaction)

        Returns:
            True if delivered
        """
        target = entities.get("target")
        message = NOTICE_TEMPLATES[event].format(
            actor=escape(actor.display_name),
            title=escape(getattr(target, "title", "")),
        )
        delivered = await self.send_message(recipient, message)
        logger.info(
            f"[Notification] Notice {event} from user {actor.id} "
            f"to user {recipient.id}: {'sent' if delivered else 'not sent'}"
        )
        return delivered
