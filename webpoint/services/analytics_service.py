"""
WebPoint - Analytics Service
First-party page view and event tracking plus admin reporting
"""
import time
import uuid
import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional, Dict, List, Any, Callable, MutableMapping

from sqlalchemy import func

from webpoint.database import db
from webpoint.models.db_models import DBAnalyticsSession, DBAnalyticsEvent

logger = logging.getLogger(__name__)


VISITOR_ID_KEY = 'webpoint_visitor_id'
SESSION_ID_KEY = 'webpoint_session_id'

VISITOR_COOKIE_MAX_AGE = 365 * 24 * 3600

CONVERSION_EVENTS = ('form_submit', 'newsletter_subscribe')
ARTICLE_VIEW_EVENT = 'view_article'
PROJECT_VIEW_EVENT = 'view_project'

EVENT_LABELS = {
    'view_service_detail': 'Подробнее о услуге',
    'order_cta': 'Кнопка "Заказать"',
    'form_submit': 'Отправка формы',
    'newsletter_subscribe': 'Подписка на новости',
}

PAGE_SECTIONS = (
    ('services', '/services'),
    ('portfolio', '/portfolio'),
    ('blog', '/blog'),
    ('contact', '/contact'),
)


def is_admin_path(path: Optional[str]) -> bool:
    return bool(path) and path.startswith('/admin')


# ============================================
# Visitor / session identity
# ============================================

class IdentityProvider:
    """
    Visitor and session ids backed by two key/value storages.

    `durable` outlives the browser session (visitor id), `session` does not
    (session id). Missing ids are generated and written back on first read.
    """

    def __init__(self, durable: MutableMapping[str, str], session: MutableMapping[str, str]):
        self.durable = durable
        self.session = session

    @staticmethod
    def _get_or_create(storage: MutableMapping[str, str], key: str) -> str:
        value = storage.get(key)
        if not value:
            value = str(uuid.uuid4())
            storage[key] = value
        return value

    def get_visitor_id(self) -> str:
        return self._get_or_create(self.durable, VISITOR_ID_KEY)

    def get_session_id(self) -> str:
        return self._get_or_create(self.session, SESSION_ID_KEY)


class CookieStorage(dict):
    """
    Mapping over request cookies. Values set during the request are kept as
    pending and written to the response by `apply`.
    """

    def __init__(self, cookies, key: str, max_age: Optional[int] = None):
        super().__init__()
        self.key = key
        self.max_age = max_age
        self.pending = None
        if cookies.get(key):
            super().__setitem__(key, cookies[key])

    def __setitem__(self, key, value):
        super().__setitem__(key, value)
        if key == self.key:
            self.pending = value

    def apply(self, response):
        if self.pending:
            # max_age None gives a browser-session cookie
            response.set_cookie(self.key, self.pending, max_age=self.max_age,
                                httponly=True, samesite='Lax')
        return response


def identity_from_request(request, payload: Optional[Dict[str, Any]] = None):
    """
    IdentityProvider for an incoming tracking call. Ids posted by the client
    take precedence over cookies.

    Returns:
        tuple: (identity, [storages to apply to the response])
    """
    payload = payload or {}
    durable = CookieStorage(request.cookies, VISITOR_ID_KEY, max_age=VISITOR_COOKIE_MAX_AGE)
    session = CookieStorage(request.cookies, SESSION_ID_KEY)

    if payload.get('visitor_id'):
        dict.__setitem__(durable, VISITOR_ID_KEY, str(payload['visitor_id']))
    if payload.get('session_id'):
        dict.__setitem__(session, SESSION_ID_KEY, str(payload['session_id']))

    return IdentityProvider(durable, session), [durable, session]


# ============================================
# Tracking
# ============================================

class AnalyticsTracker:
    """Record page views and events; tracking never raises to the caller"""

    def __init__(self, identity: IdentityProvider, user_agent: Optional[str] = None,
                 document_referrer: Optional[str] = None, current_path: str = '/'):
        self.identity = identity
        self.user_agent = user_agent
        self.document_referrer = document_referrer
        self.current_path = current_path or '/'

    def track_page_view(self, path: str, referrer: Optional[str] = None) -> bool:
        if is_admin_path(path):
            return False

        try:
            db.session.add(DBAnalyticsSession(
                session_id=self.identity.get_session_id(),
                visitor_id=self.identity.get_visitor_id(),
                page_path=path,
                referrer=referrer or self.document_referrer or None,
                user_agent=self.user_agent,
                created_at=datetime.utcnow()
            ))
            db.session.commit()
            return True
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error tracking page view: {e}")
            return False

    def track_event(self, event_name: str, event_label: Optional[str] = None,
                    event_type: str = 'click', page_path: Optional[str] = None) -> bool:
        path = page_path or self.current_path
        if is_admin_path(path):
            return False

        try:
            db.session.add(DBAnalyticsEvent(
                session_id=self.identity.get_session_id(),
                event_type=event_type or 'click',
                event_name=event_name,
                event_label=event_label or None,
                page_path=path,
                created_at=datetime.utcnow()
            ))
            db.session.commit()
            return True
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error tracking event: {e}")
            return False


def update_session_duration(session_id: str, duration: int) -> bool:
    """Set the duration on the newest row for the session; no row is not an error"""
    try:
        session_row = DBAnalyticsSession.query.filter_by(session_id=session_id).order_by(
            DBAnalyticsSession.created_at.desc(),
            DBAnalyticsSession.id.desc()
        ).first()
        if not session_row:
            return False

        session_row.duration = int(duration)
        session_row.updated_at = datetime.utcnow()
        db.session.commit()
        return True
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating session duration: {e}")
        return False


class PageViewLifecycle:
    """
    Route-change driver: flushes the time spent on the previous page and
    records a view of the next one. `clock` returns seconds.
    """

    def __init__(self, tracker: AnalyticsTracker, clock: Callable[[], float] = time.monotonic,
                 update_duration: Callable[[str, int], Any] = None):
        self.tracker = tracker
        self.clock = clock
        self.update_duration = update_duration or update_session_duration
        self.current_path = None
        self.started_at = None

    def on_route_change(self, path: str):
        self.on_leave()

        self.current_path = path
        self.tracker.current_path = path
        if is_admin_path(path):
            self.started_at = None
            return

        self.tracker.track_page_view(path)
        self.started_at = self.clock()

    def on_leave(self):
        if self.started_at is None or is_admin_path(self.current_path):
            return
        duration = int(self.clock() - self.started_at)
        self.started_at = None
        if duration > 0:
            self.update_duration(self.tracker.identity.get_session_id(), duration)


# ============================================
# Admin reporting
# ============================================

def page_section(path: str) -> str:
    if not path or path == '/':
        return 'home'
    for section, prefix in PAGE_SECTIONS:
        if path == prefix or path.startswith(prefix + '/'):
            return section
    return 'other'


def event_display_label(event_name: str, event_label: Optional[str]) -> str:
    base = EVENT_LABELS.get(event_name, event_name)
    return f"{base} ({event_label})" if event_label else base


class AnalyticsReportService:
    """Aggregates for the admin analytics screen"""

    @staticmethod
    def _since(hours: int) -> datetime:
        return datetime.utcnow() - timedelta(hours=hours)

    def get_stats(self, hours: int) -> Dict[str, Any]:
        since = self._since(hours)
        sessions = DBAnalyticsSession.query.filter(DBAnalyticsSession.created_at >= since)

        avg_duration = db.session.query(func.avg(DBAnalyticsSession.duration)).filter(
            DBAnalyticsSession.created_at >= since,
            DBAnalyticsSession.duration.isnot(None)
        ).scalar()

        events = DBAnalyticsEvent.query.filter(DBAnalyticsEvent.created_at >= since)

        return {
            'total_sessions': sessions.count(),
            'unique_visitors': db.session.query(
                func.count(func.distinct(DBAnalyticsSession.visitor_id))
            ).filter(DBAnalyticsSession.created_at >= since).scalar() or 0,
            'avg_duration': int(round(avg_duration)) if avg_duration else 0,
            'total_events': events.count(),
            'total_conversions': events.filter(
                DBAnalyticsEvent.event_name.in_(CONVERSION_EVENTS)
            ).count(),
        }

    def get_top_events(self, limit: int, hours: int, kind: str = 'general') -> List[Dict[str, Any]]:
        """
        kind: 'general' (everything but content views), 'articles'
        (view_article by label) or 'projects' (view_project by label)
        """
        count = func.count(DBAnalyticsEvent.id).label('count')
        query = db.session.query(
            DBAnalyticsEvent.event_name, DBAnalyticsEvent.event_label, count
        ).filter(DBAnalyticsEvent.created_at >= self._since(hours))
        if kind == 'articles':
            query = query.filter(DBAnalyticsEvent.event_name == ARTICLE_VIEW_EVENT)
        elif kind == 'projects':
            query = query.filter(DBAnalyticsEvent.event_name == PROJECT_VIEW_EVENT)
        else:
            query = query.filter(DBAnalyticsEvent.event_name.notin_((ARTICLE_VIEW_EVENT, PROJECT_VIEW_EVENT)))

        rows = query.group_by(
            DBAnalyticsEvent.event_name, DBAnalyticsEvent.event_label
        ).order_by(count.desc(), DBAnalyticsEvent.event_name).limit(limit).all()

        return [{
            'event_name': name,
            'event_label': label,
            'display': event_display_label(name, label) if kind == 'general' else label,
            'count': total
        } for name, label, total in rows]

    def get_page_visits(self, hours: int) -> List[Dict[str, Any]]:
        paths = db.session.query(DBAnalyticsSession.page_path).filter(
            DBAnalyticsSession.created_at >= self._since(hours)
        ).all()
        counts = Counter(page_section(path) for (path,) in paths)
        return [{'category': category, 'count': count} for category, count in counts.most_common()]

    def get_report(self, hours: int) -> Dict[str, Any]:
        return {
            'stats': self.get_stats(hours),
            'top_events': self.get_top_events(10, hours, 'general'),
            'top_articles': self.get_top_events(5, hours, 'articles'),
            'top_projects': self.get_top_events(5, hours, 'projects'),
            'page_visits': self.get_page_visits(hours),
        }


# Singleton instance
analytics_report_service = AnalyticsReportService()
