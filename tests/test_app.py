"""
Tests for the notification Flask application wiring.
"""
import unittest
from datetime import datetime
from unittest.mock import Mock

from wechatpay.app import NotificationApp
from wechatpay.models.config import Config
from wechatpay.services.client import WechatPayClient

from tests.helpers import (
    PLATFORM_SERIAL,
    make_credential,
    make_gateway_certificate,
)


class TestNotificationApp(unittest.TestCase):
    """Test cases for NotificationApp."""

    def setUp(self):
        self.mock_config_service = Mock()
        self.mock_config_service.get_config.return_value = Config(webhook_port=9000)
        self.client = WechatPayClient(
            make_credential(), platform_certificates=[make_gateway_certificate()]
        )
        self.handler = Mock()
        self.notification_app = NotificationApp(self.mock_config_service, self.handler,
                                                client=self.client)
        self.test_client = self.notification_app.get_app().test_client()

    def test_health_check_lists_trusted_serials(self):
        response = self.test_client.get('/health')

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['status'], 'healthy')
        self.assertEqual(data['trusted_serials'], [PLATFORM_SERIAL])

    def test_health_timestamp_is_utc(self):
        data = self.test_client.get('/health').get_json()
        self.assertIsNotNone(datetime.fromisoformat(data['timestamp']).tzinfo)
        self.assertTrue(data['timestamp'].endswith('+00:00'))

    def test_notify_route_is_registered(self):
        response = self.test_client.post('/notify', data=b'{}')
        self.assertEqual(response.status_code, 400)
        self.handler.assert_not_called()

    def test_client_is_not_built_when_supplied(self):
        self.mock_config_service.load_credential.assert_not_called()

    def test_client_built_from_config(self):
        config_service = Mock()
        config_service.get_config.return_value = Config()
        config_service.load_credential.side_effect = FileNotFoundError("no key")

        with self.assertRaises(FileNotFoundError):
            NotificationApp(config_service, self.handler)


if __name__ == '__main__':
    unittest.main()
