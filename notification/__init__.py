"""
Notification package - best-effort delivery of match notifications.
"""

from notification.channels import (
    LogChannel,
    NotificationChannel,
    NotificationChannelFactory,
    TransientDeliveryError,
    WebhookChannel,
)
from notification.message_builder import MatchMessageBuilder, MatchNotificationContent
from notification.service import MatchNotificationService

__all__ = [
    'LogChannel',
    'NotificationChannel',
    'NotificationChannelFactory',
    'TransientDeliveryError',
    'WebhookChannel',
    'MatchMessageBuilder',
    'MatchNotificationContent',
    'MatchNotificationService',
]
