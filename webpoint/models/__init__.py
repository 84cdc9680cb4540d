"""
WebPoint - Data Models
SQLAlchemy ORM models and validated form payloads
"""
from webpoint.models.db_models import (
    DBAdminUser as AdminUser,
    DBBlogArticle as BlogArticle,
    DBPortfolioProject as PortfolioProject,
    DBContact as Contact,
    DBContactRequest as ContactRequest,
    DBNewsletterSubscriber as NewsletterSubscriber,
    DBAnalyticsSession as AnalyticsSession,
    DBAnalyticsEvent as AnalyticsEvent,
    Locale,
    ArticleCategory,
    ProjectType,
    RequestStatus
)
from webpoint.models.forms import ValidationError, PayloadError

__all__ = [
    'AdminUser',
    'BlogArticle',
    'PortfolioProject',
    'Contact',
    'ContactRequest',
    'NewsletterSubscriber',
    'AnalyticsSession',
    'AnalyticsEvent',
    'Locale',
    'ArticleCategory',
    'ProjectType',
    'RequestStatus',
    'ValidationError',
    'PayloadError'
]
