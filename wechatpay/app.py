"""
Flask application wiring configuration, logging, the client and the
notification endpoint together.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify

from .services.client import WechatPayClient
from .services.config_service import ConfigService
from .services.logging_service import LoggingService
from .services.notification_service import NotificationService
from .webhook import NotificationHandler, create_notification_blueprint


class NotificationApp:
    """Flask application receiving WeChat Pay notifications."""

    def __init__(self, config_service: ConfigService, handler: NotificationHandler,
                 client: Optional[WechatPayClient] = None,
                 logging_service: Optional[LoggingService] = None):
        """
        Initialize the application.

        Args:
            config_service: Service holding the loaded configuration
            handler: Callback receiving verified, decrypted notifications
            client: Prebuilt client; built from configuration when omitted
            logging_service: Optional logging service for performance stats
        """
        self.config_service = config_service
        self.config = config_service.get_config()
        self.logging_service = logging_service
        self.logger = logging.getLogger(__name__)

        self.client = client or self._create_client()
        self.notification_service = NotificationService(self.client)

        self.app = Flask(__name__)
        self.app.register_blueprint(
            create_notification_blueprint(self.notification_service, handler)
        )
        self._setup_routes()

    def _create_client(self) -> WechatPayClient:
        credential = self.config_service.load_credential(self.config)
        monitor = self.logging_service.performance_monitor if self.logging_service else None
        return WechatPayClient(
            credential,
            fetch_platform_certificates=True,
            user_agent=self.config.user_agent,
            base_url=self.config.base_url,
            timeout=self.config.request_timeout_seconds,
            performance_monitor=monitor
        )

    def _setup_routes(self):

        @self.app.route('/health', methods=['GET'])
        def health_check():
            """Health check including trusted certificate serials."""
            store = self.client.trust_store.snapshot()
            health_status = {
                'status': 'healthy',
                'service': 'wechatpay-notify',
                'trusted_serials': store.serial_numbers(),
                'timestamp': datetime.now(timezone.utc).isoformat()
            }
            if self.logging_service:
                health_status['performance'] = self.logging_service.get_performance_stats()
            return jsonify(health_status)

    def run(self, host: str = '127.0.0.1', port: Optional[int] = None, debug: bool = False):
        port = port or self.config.webhook_port
        self.logger.info(f"Starting notification endpoint on {host}:{port}")
        self.app.run(host=host, port=port, debug=debug)

    def get_app(self) -> Flask:
        return self.app


def create_app(config_path: str, handler: NotificationHandler) -> Flask:
    """Load configuration, set up logging and build the Flask app."""
    config_service = ConfigService(config_path)
    logging_service = LoggingService(config_service.get_config())
    return NotificationApp(config_service, handler, logging_service=logging_service).get_app()
