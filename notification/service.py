#!/usr/bin/env python3
"""
Match Notification Service

Implements the engine's MatchNotifier on top of a NotificationChannel.
Transient channel failures are retried with tenacity; after the last
attempt, or on any other error, notify() logs and returns False.

Usage:
    from notification.service import MatchNotificationService

    notifier = MatchNotificationService(channel_type="webhook",
                                        recipient="https://hooks.example.com/match")
    notifier.notify(worker_id, job_id, 0.83)
"""

import logging
from typing import Optional

from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from core.interfaces import MatchNotifier
from notification.channels import NotificationChannel, NotificationChannelFactory, TransientDeliveryError
from notification.message_builder import MatchMessageBuilder

logger = logging.getLogger(__name__)


class MatchNotificationService(MatchNotifier):
    """
    Sends one message per match through a single configured channel.
    """

    def __init__(
        self,
        channel: Optional[NotificationChannel] = None,
        channel_type: str = "log",
        recipient: Optional[str] = None,
        base_url: Optional[str] = None,
        max_attempts: int = 3,
        retry_wait_seconds: float = 2.0
    ):
        self.channel = channel or NotificationChannelFactory.get_channel(channel_type)
        self.recipient = recipient
        self.base_url = base_url
        self.max_attempts = max(1, max_attempts)
        self.retry_wait_seconds = retry_wait_seconds

    def notify(self, worker_id: str, job_id: str, score: float) -> bool:
        content = MatchMessageBuilder.build(worker_id, job_id, score, self.base_url)
        subject = MatchMessageBuilder.subject(content)
        body = MatchMessageBuilder.to_text(content)
        metadata = {
            'worker_id': worker_id,
            'job_id': job_id,
            'score': content.score,
            'payload': MatchMessageBuilder.to_payload(content),
        }
        # log channel addresses the worker; webhook channel needs the URL
        recipient = self.recipient or worker_id

        try:
            for attempt in Retrying(
                retry=retry_if_exception_type(TransientDeliveryError),
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_fixed(self.retry_wait_seconds),
                before_sleep=before_sleep_log(logger, logging.WARNING),
            ):
                with attempt:
                    sent = self.channel.send(recipient, subject, body, metadata)
        except RetryError as e:
            logger.error(
                f"Giving up notifying worker {worker_id} about job {job_id} "
                f"after {self.max_attempts} attempts: {e.last_attempt.exception()}"
            )
            return False
        except Exception as e:
            logger.error(f"Notification to worker {worker_id} about job {job_id} failed: {e}")
            return False

        if not sent:
            logger.warning(f"Channel {self.channel.channel_type} did not deliver match {job_id}/{worker_id}")
        return bool(sent)
