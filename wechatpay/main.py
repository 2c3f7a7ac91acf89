"""
Command line entry point for the notification endpoint.
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

import requests

from .app import NotificationApp
from .exceptions import WechatPayError
from .models.notification import Notification, NotificationEvent, TradeNotificationEvent
from .services.client import WechatPayClient
from .services.config_service import ConfigService
from .services.logging_service import LoggingService


DEFAULT_CONFIG_PATHS = [
    "config/wechatpay.ini",
    "wechatpay.ini",
    os.path.expanduser("~/.wechatpay/config.ini"),
    "/etc/wechatpay/config.ini",
]

logger = logging.getLogger(__name__)


def find_config_path() -> str:
    """First existing default config location, or the first candidate."""
    for path in DEFAULT_CONFIG_PATHS:
        if os.path.exists(path):
            return path
    return DEFAULT_CONFIG_PATHS[0]


def log_notification(notification: Notification, event: NotificationEvent) -> None:
    """Default handler: record the notification and its business identifiers."""
    if isinstance(event, TradeNotificationEvent):
        logger.info(
            f"Trade {event.trade.out_trade_no} is {event.trade.trade_state.value} "
            f"(notification {notification.id})"
        )
    else:
        logger.info(
            f"Refund {event.refund.out_refund_no} is {event.refund.status.value} "
            f"(notification {notification.id})"
        )


def fetch_certificates(config_service: ConfigService) -> List[str]:
    """Download and verify platform certificates, returning their serials."""
    config = config_service.get_config()
    client = WechatPayClient(
        config_service.load_credential(config),
        fetch_platform_certificates=True,
        user_agent=config.user_agent,
        base_url=config.base_url,
        timeout=config.request_timeout_seconds
    )
    return client.trust_store.snapshot().serial_numbers()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='WeChat Pay notification endpoint')
    parser.add_argument('--config', '-c', help='Configuration file path')
    parser.add_argument('--host', default='127.0.0.1', help='Host to bind to (default: 127.0.0.1)')
    parser.add_argument('--port', type=int, help='Port to bind to (uses config if not specified)')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')
    parser.add_argument('--create-config', action='store_true',
                        help='Write a default configuration file and exit')
    parser.add_argument('--check-config', action='store_true', help='Check configuration and exit')
    parser.add_argument('--fetch-certificates', action='store_true',
                        help='Download and verify platform certificates and exit')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    config_path = args.config or find_config_path()

    if args.create_config:
        ConfigService().create_default_config_file(config_path)
        print(f"Created configuration file: {config_path}")
        return 0

    try:
        config_service = ConfigService(config_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"Failed to load configuration: {e}")
        return 1

    if args.check_config:
        config = config_service.get_config()
        try:
            config_service.load_credential(config)
        except (FileNotFoundError, ValueError) as e:
            print(f"Failed to load merchant credential: {e}")
            return 1
        print("Configuration check passed")
        print(f"Config path: {config_path}")
        print(f"Merchant id: {config.merchant_id}")
        print(f"Gateway: {config.base_url}")
        return 0

    logging_service = LoggingService(config_service.get_config())

    if args.fetch_certificates:
        try:
            serials = fetch_certificates(config_service)
        except WechatPayError as e:
            logger.error(f"Certificate download failed: {e.error_code}: {e.message}")
            return 1
        except (FileNotFoundError, ValueError, requests.RequestException) as e:
            logger.error(f"Certificate download failed: {e}")
            return 1
        for serial_no in serials:
            print(serial_no)
        return 0

    try:
        app = NotificationApp(config_service, log_notification, logging_service=logging_service)
    except WechatPayError as e:
        logger.error(f"Failed to start: {e.error_code}: {e.message}")
        return 1
    except (FileNotFoundError, ValueError, requests.RequestException) as e:
        logger.error(f"Failed to start: {e}")
        return 1

    try:
        app.run(host=args.host, port=args.port, debug=args.debug)
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
    return 0


if __name__ == '__main__':
    sys.exit(main())
