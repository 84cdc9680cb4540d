"""
WebPoint - Notification Routes
Relay of site events to the agency inbox
"""
from flask import Blueprint, request, jsonify
import logging

from webpoint.services.email_service import email_service

logger = logging.getLogger(__name__)

notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('', methods=['POST'])
def send_notification():
    """
    POST /api/notifications
    {
        "type": "contact" | "newsletter",
        "payload": {...}
    }
    """
    data = request.get_json(silent=True) or {}
    notification_type = data.get('type')
    payload = data.get('payload') or {}

    if not isinstance(payload, dict):
        return jsonify({'error': 'payload must be an object'}), 400

    try:
        result = email_service.send_notification(notification_type, payload)
    except Exception as e:
        logger.error(f"Notification error ({notification_type}): {e}")
        return jsonify({'error': str(e)}), 400

    return jsonify(result)
