"""
Notification service module.

Provides notification functionality for settled donations.

Structure:
- core.py: Core notification service with text delivery
- payment_notices.py: Payment notices and in-app notice triggers

Usage:
    from app.services.notification import NotificationService

    notification_service = NotificationService(bot)
    await notification_service.send_payment_notice(
        sender, PaymentNoticeKind.DONATED, tx, article
    )
"""

from app.services.notification.core import NotificationService as CoreNotificationService
from app.services.notification.payment_notices import PaymentNoticeMixin


class NotificationService(CoreNotificationService, PaymentNoticeMixin):
    """
    Combined notification service.

    Inherits from the core service and the payment notice mixin.
    """


__all__ = ["NotificationService"]
