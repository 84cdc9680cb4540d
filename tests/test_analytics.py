"""
WebPoint - Analytics Tests
"""
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from webpoint import create_app
from webpoint.config import TestingConfig
from webpoint.database import db
from webpoint.models.db_models import DBAnalyticsSession, DBAnalyticsEvent
from webpoint.services.analytics_service import (
    IdentityProvider, AnalyticsTracker, PageViewLifecycle, AnalyticsReportService,
    update_session_duration, page_section, event_display_label,
    VISITOR_ID_KEY, SESSION_ID_KEY
)


def make_tracker(path='/', visitor='visitor-1', session='session-1', **kwargs):
    identity = IdentityProvider({VISITOR_ID_KEY: visitor}, {SESSION_ID_KEY: session})
    return AnalyticsTracker(identity, current_path=path, **kwargs)


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


class TestIdentityProvider:

    def test_generates_and_persists_ids(self):
        durable, session = {}, {}
        identity = IdentityProvider(durable, session)

        visitor_id = identity.get_visitor_id()
        session_id = identity.get_session_id()

        assert durable[VISITOR_ID_KEY] == visitor_id
        assert session[SESSION_ID_KEY] == session_id
        assert identity.get_visitor_id() == visitor_id
        assert visitor_id != session_id

    def test_new_session_keeps_visitor(self):
        durable = {}
        first = IdentityProvider(durable, {})
        second = IdentityProvider(durable, {})

        assert first.get_visitor_id() == second.get_visitor_id()
        assert first.get_session_id() != second.get_session_id()


class TestAnalyticsTracker:

    def test_admin_paths_write_nothing(self, app):
        tracker = make_tracker(path='/admin/blog')

        assert tracker.track_page_view('/admin') is False
        assert tracker.track_page_view('/admin/portfolio') is False
        assert tracker.track_event('order_cta') is False

        assert DBAnalyticsSession.query.count() == 0
        assert DBAnalyticsEvent.query.count() == 0

    def test_page_view_row(self, app):
        tracker = make_tracker(user_agent='pytest-agent', document_referrer='https://google.com/')

        assert tracker.track_page_view('/portfolio') is True

        row = DBAnalyticsSession.query.one()
        assert row.session_id == 'session-1'
        assert row.visitor_id == 'visitor-1'
        assert row.page_path == '/portfolio'
        assert row.referrer == 'https://google.com/'
        assert row.user_agent == 'pytest-agent'
        assert row.duration is None

    def test_explicit_referrer_wins(self, app):
        tracker = make_tracker(document_referrer='https://google.com/')
        tracker.track_page_view('/', referrer='https://facebook.com/')

        assert DBAnalyticsSession.query.one().referrer == 'https://facebook.com/'

    def test_no_referrer_is_null(self, app):
        make_tracker(document_referrer='').track_page_view('/blog')
        assert DBAnalyticsSession.query.one().referrer is None

    def test_event_tagged_with_current_path(self, app):
        tracker = make_tracker(path='/services')

        assert tracker.track_event('order_cta', 'landing') is True

        event = DBAnalyticsEvent.query.one()
        assert event.event_name == 'order_cta'
        assert event.event_label == 'landing'
        assert event.event_type == 'click'
        assert event.page_path == '/services'

    def test_store_failure_is_swallowed(self, app):
        tracker = make_tracker()
        with patch.object(db.session, 'commit', side_effect=OperationalError('INSERT', {}, Exception('down'))):
            assert tracker.track_page_view('/') is False
            assert tracker.track_event('form_submit') is False


class TestSessionDuration:

    def test_updates_most_recent_row(self, app):
        tracker = make_tracker()
        tracker.track_page_view('/')
        tracker.track_page_view('/blog')
        older, newer = DBAnalyticsSession.query.order_by(DBAnalyticsSession.id).all()
        older.created_at = datetime.utcnow() - timedelta(minutes=5)
        db.session.commit()

        assert update_session_duration('session-1', 42) is True

        assert db.session.get(DBAnalyticsSession, newer.id).duration == 42
        assert db.session.get(DBAnalyticsSession, older.id).duration is None
        assert db.session.get(DBAnalyticsSession, newer.id).updated_at is not None

    def test_unknown_session_is_a_no_op(self, app):
        assert update_session_duration('nobody', 10) is False


class TestPageViewLifecycle:

    def test_route_change_flushes_previous_duration(self, app):
        clock = FakeClock()
        updates = []
        lifecycle = PageViewLifecycle(make_tracker(), clock=clock,
                                      update_duration=lambda sid, d: updates.append((sid, d)))

        lifecycle.on_route_change('/')
        clock.now += 12.7
        lifecycle.on_route_change('/blog')

        assert updates == [('session-1', 12)]
        assert [r.page_path for r in DBAnalyticsSession.query.order_by(DBAnalyticsSession.id)] == ['/', '/blog']

    def test_sub_second_visits_send_nothing(self, app):
        clock = FakeClock()
        updates = []
        lifecycle = PageViewLifecycle(make_tracker(), clock=clock,
                                      update_duration=lambda sid, d: updates.append(d))

        lifecycle.on_route_change('/')
        clock.now += 0.4
        lifecycle.on_leave()

        assert updates == []

    def test_admin_routes_neither_tracked_nor_timed(self, app):
        clock = FakeClock()
        updates = []
        lifecycle = PageViewLifecycle(make_tracker(), clock=clock,
                                      update_duration=lambda sid, d: updates.append(d))

        lifecycle.on_route_change('/admin')
        clock.now += 30
        lifecycle.on_route_change('/admin/blog')
        clock.now += 30
        lifecycle.on_leave()

        assert updates == []
        assert DBAnalyticsSession.query.count() == 0

    def test_leave_writes_duration(self, app):
        clock = FakeClock()
        lifecycle = PageViewLifecycle(make_tracker(), clock=clock)

        lifecycle.on_route_change('/contact')
        clock.now += 65
        lifecycle.on_leave()

        assert DBAnalyticsSession.query.one().duration == 65


class TestTrackingEndpoints:

    def test_pageview_sets_identity_cookies(self, client):
        response = client.post('/api/analytics/pageview', json={'page_path': '/services'})

        assert response.status_code == 200
        body = response.get_json()
        assert body['tracked'] is True
        cookies = response.headers.getlist('Set-Cookie')
        assert any(c.startswith('webpoint_visitor_id=') and 'Max-Age' in c for c in cookies)
        assert any(c.startswith('webpoint_session_id=') and 'Max-Age' not in c for c in cookies)
        assert DBAnalyticsSession.query.one().session_id == body['session_id']

    def test_admin_pageview_ignored(self, client):
        response = client.post('/api/analytics/pageview', json={'page_path': '/admin/analytics'})

        assert response.status_code == 200
        assert response.get_json()['tracked'] is False
        assert DBAnalyticsSession.query.count() == 0

    def test_event_and_duration(self, client):
        ids = {'session_id': 's-42', 'visitor_id': 'v-42'}
        client.post('/api/analytics/pageview', json=dict(ids, page_path='/blog/1'))
        client.post('/api/analytics/event', json=dict(ids, page_path='/blog/1',
                                                       event_name='view_article', event_label='CMS'))
        response = client.post('/api/analytics/duration', json=dict(ids, page_path='/blog/1', duration=33))

        assert response.get_json()['tracked'] is True
        assert DBAnalyticsEvent.query.one().event_label == 'CMS'
        assert DBAnalyticsSession.query.one().duration == 33

    def test_bad_payload_still_succeeds(self, client):
        response = client.post('/api/analytics/event', data='not json')
        assert response.status_code == 200
        assert response.get_json()['tracked'] is False


@pytest.fixture
def limited_client(monkeypatch):
    monkeypatch.setattr(TestingConfig, 'RATELIMIT_ENABLED', True)
    app = create_app('testing')
    with app.app_context():
        yield app.test_client()
        db.session.remove()
        db.drop_all()


class TestTrackingUnderRateLimits:

    def test_beacons_exempt_from_default_limits(self, limited_client):
        ids = {'session_id': 's-1', 'visitor_id': 'v-1'}
        codes = set()
        for i in range(60):
            codes.add(limited_client.post('/api/analytics/pageview', json=dict(ids, page_path=f'/blog/{i}')).status_code)
            codes.add(limited_client.post('/api/analytics/duration', json=dict(ids, page_path=f'/blog/{i}', duration=3)).status_code)

        assert codes == {200}
        assert DBAnalyticsSession.query.count() == 60

    def test_form_endpoints_still_limited(self, limited_client):
        codes = [limited_client.post('/api/contact-requests', json={}).status_code for _ in range(11)]

        assert codes[:10] == [400] * 10
        assert codes[10] == 429


class TestReporting:

    def _seed(self):
        now = datetime.utcnow()
        rows = [
            DBAnalyticsSession(session_id='a', visitor_id='v1', page_path='/', duration=30, created_at=now),
            DBAnalyticsSession(session_id='a', visitor_id='v1', page_path='/blog/3', duration=90, created_at=now),
            DBAnalyticsSession(session_id='b', visitor_id='v2', page_path='/portfolio', created_at=now),
            DBAnalyticsSession(session_id='c', visitor_id='v3', page_path='/services',
                               created_at=now - timedelta(days=10)),
            DBAnalyticsEvent(session_id='a', event_name='form_submit', page_path='/contact', created_at=now),
            DBAnalyticsEvent(session_id='a', event_name='order_cta', event_label='shop',
                             page_path='/services', created_at=now),
            DBAnalyticsEvent(session_id='b', event_name='order_cta', event_label='shop',
                             page_path='/services', created_at=now),
            DBAnalyticsEvent(session_id='b', event_name='view_article', event_label='CMS',
                             page_path='/blog/3', created_at=now),
        ]
        db.session.add_all(rows)
        db.session.commit()

    def test_stats_for_window(self, app):
        self._seed()
        stats = AnalyticsReportService().get_stats(hours=7 * 24)

        assert stats == {
            'total_sessions': 3,
            'unique_visitors': 2,
            'avg_duration': 60,
            'total_events': 4,
            'total_conversions': 1,
        }

    def test_top_events_split_by_kind(self, app):
        self._seed()
        report = AnalyticsReportService()

        general = report.get_top_events(10, 24, 'general')
        assert general[0]['event_name'] == 'order_cta'
        assert general[0]['count'] == 2
        assert general[0]['display'] == 'Кнопка "Заказать" (shop)'
        assert all(e['event_name'] != 'view_article' for e in general)

        articles = report.get_top_events(5, 24, 'articles')
        assert articles == [{'event_name': 'view_article', 'event_label': 'CMS', 'display': 'CMS', 'count': 1}]

    def test_top_events_grouped_and_limited(self, app):
        self._seed()
        db.session.add(DBAnalyticsEvent(session_id='c', event_name='order_cta', event_label='seo',
                                        page_path='/services', created_at=datetime.utcnow()))
        db.session.commit()
        report = AnalyticsReportService()

        top = report.get_top_events(2, 24, 'general')

        assert [(e['event_name'], e['event_label'], e['count']) for e in top] == [
            ('order_cta', 'shop', 2),
            ('form_submit', None, 1),
        ]
        assert len(report.get_top_events(10, 24, 'general')) == 3

    def test_page_visits_by_section(self, app):
        self._seed()
        visits = {v['category']: v['count'] for v in AnalyticsReportService().get_page_visits(24 * 30)}

        assert visits == {'home': 1, 'blog': 1, 'portfolio': 1, 'services': 1}

    def test_admin_endpoint(self, client, auth_headers):
        self._seed()
        response = client.get('/api/admin/analytics?range=24h', headers=auth_headers)

        assert response.status_code == 200
        body = response.get_json()
        assert body['range'] == '24h'
        assert body['stats']['total_sessions'] == 3
        assert set(body) >= {'top_events', 'top_articles', 'top_projects', 'page_visits'}

    def test_section_and_label_helpers(self):
        assert page_section('/') == 'home'
        assert page_section('/blog/12') == 'blog'
        assert page_section('/blogger') == 'other'
        assert event_display_label('newsletter_subscribe', None) == 'Подписка на новости'
        assert event_display_label('custom', 'x') == 'custom (x)'
