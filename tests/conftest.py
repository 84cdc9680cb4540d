"""
WebPoint - Test Fixtures
"""
from unittest.mock import MagicMock, patch

import pytest

from webpoint import create_app
from webpoint.database import db
from webpoint.routes.auth import create_admin_user, generate_token
from tests.helpers import FakeUpstream


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(app):
    return create_admin_user('admin', 'correct-horse-battery')


@pytest.fixture
def auth_headers(app, admin):
    return {'Authorization': f'Bearer {generate_token(admin)}'}


@pytest.fixture
def upstream():
    fake = FakeUpstream()
    with patch('requests.post', side_effect=fake):
        yield fake


@pytest.fixture
def sendgrid():
    with patch('webpoint.services.email_service.SendGridAPIClient') as client_class:
        client_class.return_value.send.return_value = MagicMock(status_code=202)
        yield client_class
