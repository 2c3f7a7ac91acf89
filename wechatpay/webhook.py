"""
Flask blueprint receiving payment and refund notifications.
"""
import logging
from typing import Callable

from flask import Blueprint, request, jsonify

from .exceptions import (
    ProtocolError,
    DecryptionError,
    SignatureInvalidError,
    TrustStoreError,
)
from .models.notification import Notification, NotificationEvent
from .services.notification_service import NotificationService


logger = logging.getLogger(__name__)

NotificationHandler = Callable[[Notification, NotificationEvent], None]


def _fail(message: str, status: int):
    return jsonify({'code': 'FAIL', 'message': message}), status


def create_notification_blueprint(notification_service: NotificationService,
                                  handler: NotificationHandler,
                                  url_prefix: str = '') -> Blueprint:
    """
    Create a blueprint exposing ``POST /notify``.

    The handler is called only after the notification has been verified
    and decrypted. Any response other than 200 makes the gateway retry.
    """
    blueprint = Blueprint('wechatpay_notify', __name__, url_prefix=url_prefix)

    @blueprint.route('/notify', methods=['POST'])
    def notify():
        """Receive a gateway notification."""
        body = request.get_data()

        try:
            notification, event = notification_service.handle(request.headers, body)
        except (SignatureInvalidError, TrustStoreError) as e:
            logger.warning(f"Rejected notification: {e.error_code}")
            return _fail('signature verification failed', 401)
        except DecryptionError as e:
            logger.warning(f"Rejected notification: {e.error_code}")
            return _fail('resource decryption failed', 400)
        except ProtocolError as e:
            logger.warning(f"Rejected notification: {e.message}")
            return _fail(e.message, 400)

        try:
            handler(notification, event)
        except Exception as e:
            logger.error(f"Notification handler failed for {notification.id}: {e}", exc_info=True)
            return _fail('handler error', 500)

        return jsonify({'code': 'SUCCESS', 'message': 'OK'})

    return blueprint
