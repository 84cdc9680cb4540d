"""
WebPoint - Analytics Tracking Routes
Page view, event and duration beacons from the public site
"""
from flask import Blueprint, request, jsonify
import logging

from webpoint.services.analytics_service import (
    AnalyticsTracker, identity_from_request, update_session_duration, is_admin_path
)
from webpoint.utils import safe_int

logger = logging.getLogger(__name__)

analytics_bp = Blueprint('analytics', __name__)


def _tracker(data):
    identity, storages = identity_from_request(request, data)
    tracker = AnalyticsTracker(
        identity,
        user_agent=request.headers.get('User-Agent'),
        document_referrer=request.headers.get('Referer'),
        current_path=data.get('page_path') or '/'
    )
    return tracker, storages


def _respond(tracked: bool, tracker: AnalyticsTracker, storages):
    # Tracking never fails the caller
    response = jsonify({
        'tracked': tracked,
        'session_id': tracker.identity.get_session_id(),
        'visitor_id': tracker.identity.get_visitor_id()
    })
    for storage in storages:
        storage.apply(response)
    return response


@analytics_bp.route('/pageview', methods=['POST'])
def track_pageview():
    """
    POST /api/analytics/pageview
    {"page_path": "/blog", "referrer": "https://google.com", "session_id": "...", "visitor_id": "..."}
    """
    data = request.get_json(silent=True) or {}
    tracker, storages = _tracker(data)
    path = data.get('page_path') or '/'
    tracked = tracker.track_page_view(path, referrer=data.get('referrer'))
    return _respond(tracked, tracker, storages)


@analytics_bp.route('/event', methods=['POST'])
def track_event():
    """
    POST /api/analytics/event
    {"event_name": "order_cta", "event_label": "landing", "event_type": "click", "page_path": "/services"}
    """
    data = request.get_json(silent=True) or {}
    tracker, storages = _tracker(data)

    tracked = False
    if data.get('event_name'):
        tracked = tracker.track_event(
            data['event_name'],
            event_label=data.get('event_label'),
            event_type=data.get('event_type') or 'click'
        )
    return _respond(tracked, tracker, storages)


@analytics_bp.route('/duration', methods=['POST'])
def track_duration():
    """
    POST /api/analytics/duration
    {"session_id": "...", "duration": 42, "page_path": "/portfolio"}
    """
    data = request.get_json(silent=True) or {}
    tracker, storages = _tracker(data)
    duration = safe_int(data.get('duration'), 0, min_val=0)

    tracked = False
    if duration > 0 and not is_admin_path(data.get('page_path')):
        tracked = update_session_duration(tracker.identity.get_session_id(), duration)
    return _respond(tracked, tracker, storages)
