"""
WebPoint - Database Configuration
SQLAlchemy ORM setup (PostgreSQL in production, SQLite locally and in tests)
"""
import logging

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import text
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


db = SQLAlchemy(model_class=Base)


def init_db(app):
    """Bind the app and create any missing tables"""
    db.init_app(app)

    with app.app_context():
        # Import models to register them
        from webpoint.models import db_models  # noqa

        db.create_all()
        logger.info(f"✓ Database ready ({db.engine.dialect.name})")


def check_connection() -> str:
    """'connected' or a short error string for the health endpoint"""
    try:
        db.session.execute(text('SELECT 1'))
        return 'connected'
    except Exception as e:
        db.session.rollback()
        return f'error: {str(e)[:50]}'
