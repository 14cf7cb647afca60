#!/usr/bin/env python3
"""
Tests for match notification delivery.

Tests cover:
1. Channels (log, webhook) and the channel factory
2. Message building
3. MatchNotificationService retry behaviour and its never-raise contract
"""

import unittest
from unittest.mock import Mock, patch

import requests

from core.interfaces import MatchNotifier
from notification import (
    LogChannel,
    MatchMessageBuilder,
    MatchNotificationService,
    NotificationChannel,
    NotificationChannelFactory,
    TransientDeliveryError,
    WebhookChannel,
)

HOOK = "https://hooks.example.com/match"


def response(status_code, text=""):
    mock = Mock()
    mock.status_code = status_code
    mock.text = text
    return mock


class TestChannels(unittest.TestCase):

    def test_log_channel_always_succeeds(self):
        self.assertTrue(LogChannel().send("w-1", "subject", "body", {'job_id': "job-1"}))

    @patch('notification.channels._validate_webhook_url', return_value=True)
    @patch('notification.channels.requests.post')
    def test_webhook_posts_payload(self, mock_post, _):
        mock_post.return_value = response(200)

        sent = WebhookChannel().send(HOOK, "subject", "body", {'payload': {'type': 'job_match'}})

        self.assertTrue(sent)
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], HOOK)
        self.assertEqual(kwargs['json']['type'], 'job_match')
        self.assertIn('timestamp', kwargs['json'])

    @patch('notification.channels._validate_webhook_url', return_value=True)
    @patch('notification.channels.requests.post')
    def test_webhook_client_error_is_permanent(self, mock_post, _):
        mock_post.return_value = response(404, "no such hook")
        self.assertFalse(WebhookChannel().send(HOOK, "s", "b", {}))

    @patch('notification.channels._validate_webhook_url', return_value=True)
    @patch('notification.channels.requests.post')
    def test_webhook_server_error_is_transient(self, mock_post, _):
        mock_post.return_value = response(503)
        with self.assertRaises(TransientDeliveryError):
            WebhookChannel().send(HOOK, "s", "b", {})

    @patch('notification.channels._validate_webhook_url', return_value=True)
    @patch('notification.channels.requests.post', side_effect=requests.Timeout("slow"))
    def test_webhook_timeout_is_transient(self, mock_post, _):
        with self.assertRaises(TransientDeliveryError):
            WebhookChannel().send(HOOK, "s", "b", {})

    @patch('notification.channels.requests.post')
    def test_webhook_rejects_private_hosts(self, mock_post):
        self.assertFalse(WebhookChannel().send("http://127.0.0.1/hook", "s", "b", {}))
        self.assertFalse(WebhookChannel().send("ftp://example.com/hook", "s", "b", {}))
        self.assertFalse(WebhookChannel().send("", "s", "b", {}))
        mock_post.assert_not_called()

    def test_factory(self):
        self.assertIsInstance(NotificationChannelFactory.get_channel('LOG'), LogChannel)
        self.assertIsInstance(NotificationChannelFactory.get_channel('webhook'), WebhookChannel)
        with self.assertRaises(ValueError):
            NotificationChannelFactory.get_channel('pigeon')

    def test_factory_registration(self):
        class PagerChannel(NotificationChannel):
            @property
            def channel_type(self):
                return 'pager'

            def send(self, recipient, subject, body, metadata):
                return True

        NotificationChannelFactory.register_channel('pager', PagerChannel)
        try:
            self.assertIn('pager', NotificationChannelFactory.list_channels())
            self.assertIsInstance(NotificationChannelFactory.get_channel('pager'), PagerChannel)
        finally:
            NotificationChannelFactory._channels.pop('pager', None)

        with self.assertRaises(ValueError):
            NotificationChannelFactory.register_channel('bad', dict)


class TestMessageBuilder(unittest.TestCase):

    def test_content(self):
        content = MatchMessageBuilder.build("w-1", "job-1", 0.83456, "http://localhost:8080/")

        self.assertEqual(content.score, 0.8346)
        self.assertEqual(content.match_url, "http://localhost:8080/jobs/job-1/matches/w-1")
        self.assertEqual(MatchMessageBuilder.subject(content), "New job match: 83% fit")
        self.assertIn("job-1", MatchMessageBuilder.to_text(content))
        self.assertEqual(MatchMessageBuilder.to_payload(content)['match']['worker_id'], "w-1")

    def test_without_base_url(self):
        content = MatchMessageBuilder.build("w-1", "job-1", 0.9)
        self.assertIsNone(content.match_url)
        self.assertNotIn("Details", MatchMessageBuilder.to_text(content))


class TestMatchNotificationService(unittest.TestCase):

    def setUp(self):
        self.channel = Mock(spec=NotificationChannel)
        self.channel.channel_type = 'mock'

    def _service(self, **kwargs):
        return MatchNotificationService(channel=self.channel, retry_wait_seconds=0, **kwargs)

    def test_is_a_match_notifier(self):
        self.assertIsInstance(self._service(), MatchNotifier)

    def test_success(self):
        self.channel.send.return_value = True

        self.assertTrue(self._service(recipient=HOOK).notify("w-1", "job-1", 0.8))

        recipient, subject, body, metadata = self.channel.send.call_args[0]
        self.assertEqual(recipient, HOOK)
        self.assertEqual(metadata['job_id'], "job-1")
        self.assertEqual(metadata['payload']['type'], 'job_match')

    def test_recipient_defaults_to_worker(self):
        self.channel.send.return_value = True
        self._service().notify("w-1", "job-1", 0.8)
        self.assertEqual(self.channel.send.call_args[0][0], "w-1")

    def test_transient_failure_is_retried(self):
        self.channel.send.side_effect = [TransientDeliveryError("503"), True]

        self.assertTrue(self._service(max_attempts=3).notify("w-1", "job-1", 0.8))
        self.assertEqual(self.channel.send.call_count, 2)

    def test_gives_up_after_max_attempts(self):
        self.channel.send.side_effect = TransientDeliveryError("503")

        self.assertFalse(self._service(max_attempts=3).notify("w-1", "job-1", 0.8))
        self.assertEqual(self.channel.send.call_count, 3)

    def test_unexpected_error_is_not_retried_and_not_raised(self):
        self.channel.send.side_effect = KeyError("boom")

        self.assertFalse(self._service(max_attempts=3).notify("w-1", "job-1", 0.8))
        self.assertEqual(self.channel.send.call_count, 1)

    def test_permanent_failure(self):
        self.channel.send.return_value = False
        self.assertFalse(self._service().notify("w-1", "job-1", 0.8))
        self.assertEqual(self.channel.send.call_count, 1)

    def test_builds_channel_from_type(self):
        service = MatchNotificationService(channel_type="log")
        self.assertIsInstance(service.channel, LogChannel)
        self.assertTrue(service.notify("w-1", "job-1", 0.8))


if __name__ == "__main__":
    unittest.main()
