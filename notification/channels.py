#!/usr/bin/env python3
"""
Notification Channels

Pluggable delivery channels for match notifications. Each channel
implements NotificationChannel; the factory maps a config name to a
channel class.

Usage:
    from notification.channels import NotificationChannelFactory

    channel = NotificationChannelFactory.get_channel('webhook')
    channel.send(recipient, subject, body, metadata)

A channel returns False for permanent failures (bad URL, 4xx) and raises
TransientDeliveryError for failures worth retrying (timeouts, 5xx).
"""

from abc import ABC, abstractmethod
from typing import Dict, Any
from datetime import datetime, timezone
import logging
import urllib.parse
import ipaddress
import socket

import requests

logger = logging.getLogger(__name__)


class TransientDeliveryError(Exception):
    """Delivery failed in a way that may succeed on retry."""
    pass


def _validate_webhook_url(url: str) -> bool:
    """
    Validate webhook URL to prevent SSRF attacks.

    Checks:
    - Scheme is http or https
    - Hostname resolves to public IP (not private/loopback)
    """
    try:
        parsed = urllib.parse.urlparse(url)

        if parsed.scheme not in ('http', 'https'):
            logger.error(f"Invalid URL scheme: {parsed.scheme}")
            return False

        if not parsed.hostname:
            logger.error("URL missing hostname")
            return False

        try:
            addrinfo = socket.getaddrinfo(parsed.hostname, None)
            for _, _, _, _, sockaddr in addrinfo:
                ip = ipaddress.ip_address(sockaddr[0])
                if ip.is_private or ip.is_loopback or ip.is_reserved or ip.is_link_local:
                    logger.error(f"URL resolves to private/reserved IP: {ip}")
                    return False
        except socket.gaierror:
            logger.error(f"Could not resolve hostname: {parsed.hostname}")
            return False

        return True
    except ValueError as e:
        logger.error(f"URL validation error: {e}")
        return False


class NotificationChannel(ABC):
    """
    Abstract base class for all notification channels.
    """

    @property
    @abstractmethod
    def channel_type(self) -> str:
        """Return the channel type identifier."""
        pass

    @abstractmethod
    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        """
        Send a notification through this channel.

        Args:
            recipient: Target recipient (format depends on channel)
            subject: Notification subject/title
            body: Notification body
            metadata: Additional channel-specific metadata

        Returns:
            True if sent successfully, False on a permanent failure

        Raises:
            TransientDeliveryError: the send may succeed if retried
        """
        pass

    def validate_config(self) -> bool:
        return True


class LogChannel(NotificationChannel):
    """In-app channel: records the notification in the application log."""

    @property
    def channel_type(self) -> str:
        return 'log'

    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        logger.info(f"[notification] to={recipient} subject={subject!r} job={metadata.get('job_id')}")
        return True


class WebhookChannel(NotificationChannel):
    """Generic webhook notification channel."""

    def __init__(self, timeout: float = 30.0, allow_private_hosts: bool = False):
        self.timeout = timeout
        self.allow_private_hosts = allow_private_hosts

    @property
    def channel_type(self) -> str:
        return 'webhook'

    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        """Send webhook POST request."""
        webhook_url = recipient

        if not webhook_url:
            logger.error("Webhook URL not configured")
            return False
        if not self.allow_private_hosts and not _validate_webhook_url(webhook_url):
            logger.error(f"Invalid or unsafe webhook URL: {webhook_url}")
            return False

        headers = {
            'Content-Type': 'application/json',
            'User-Agent': 'StaffingMatch-Notification/1.0'
        }
        payload = dict(metadata.get('payload') or {'subject': subject, 'body': body})
        payload.setdefault('timestamp', datetime.now(timezone.utc).isoformat())

        try:
            response = requests.post(webhook_url, json=payload, headers=headers, timeout=self.timeout)
        except (requests.Timeout, requests.ConnectionError) as e:
            raise TransientDeliveryError(f"Webhook unreachable: {e}") from e

        if response.status_code >= 500 or response.status_code == 429:
            raise TransientDeliveryError(f"Webhook returned {response.status_code}")
        if response.status_code >= 400:
            logger.error(f"Webhook rejected notification: {response.status_code} - {response.text}")
            return False

        logger.info(f"Webhook notification sent ({response.status_code})")
        return True


class NotificationChannelFactory:
    """
    Factory for creating notification channel instances.

    New channels are added with register_channel() without touching the
    factory.
    """

    _channels: Dict[str, type] = {
        'log': LogChannel,
        'webhook': WebhookChannel,
    }

    @classmethod
    def get_channel(cls, channel_type: str, **kwargs) -> NotificationChannel:
        """
        Get a notification channel instance by type.

        Raises:
            ValueError: If channel type is not registered
        """
        channel_class = cls._channels.get(channel_type.lower())
        if not channel_class:
            raise ValueError(f"Unknown channel type: {channel_type}. "
                             f"Available: {', '.join(cls._channels.keys())}")
        return channel_class(**kwargs)

    @classmethod
    def register_channel(cls, channel_type: str, channel_class: type):
        if not isinstance(channel_class, type) or not issubclass(channel_class, NotificationChannel):
            raise ValueError("Channel class must extend NotificationChannel")

        cls._channels[channel_type.lower()] = channel_class
        logger.info(f"Registered new channel type: {channel_type}")

    @classmethod
    def list_channels(cls) -> list:
        return list(cls._channels.keys())
