"""
WebPoint - Public Contact Routes
Contact info, contact form submissions and newsletter signup
"""
from flask import Blueprint, request, jsonify
import logging

from webpoint.models.forms import ContactRequestForm, parse_email
from webpoint.services.content_service import content_service

logger = logging.getLogger(__name__)

contact_bp = Blueprint('contact', __name__)

# Form endpoints get a tighter rate limit (see register_routes)
submissions_bp = Blueprint('submissions', __name__)


@contact_bp.route('/contact', methods=['GET'])
def get_contact():
    contact = content_service.get_contact()
    if not contact:
        return jsonify({'error': 'Contact info not configured'}), 404
    return jsonify(contact.to_dict())


@submissions_bp.route('/contact-requests', methods=['POST'])
def create_contact_request():
    """
    POST /api/contact-requests
    {
        "name": "Иван",
        "email": "ivan@example.com",
        "phone": "+37360000000",
        "projectType": "landing",
        "message": "Нужен лендинг для кофейни"
    }
    """
    data = request.get_json(silent=True) or {}
    form = ContactRequestForm.from_dict(data)

    try:
        contact_request = content_service.create_contact_request(form)
    except Exception as e:
        logger.error(f"Error saving contact request: {e}")
        return jsonify({'error': 'Failed to submit request. Please try again.'}), 500

    return jsonify({
        'success': True,
        'id': contact_request.id
    }), 201


@submissions_bp.route('/newsletter/subscribe', methods=['POST'])
def subscribe():
    """
    POST /api/newsletter/subscribe
    {"email": "reader@example.com"}

    Repeat signups succeed with message "already_subscribed".
    """
    data = request.get_json(silent=True) or {}
    email = parse_email(data)

    try:
        result = content_service.subscribe(email)
    except Exception as e:
        logger.error(f"Error subscribing {email}: {e}")
        return jsonify({'success': False, 'message': 'error'}), 500

    return jsonify(result)
