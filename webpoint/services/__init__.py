"""
WebPoint - Services
Business logic and external API integrations
"""
from webpoint.services.content_service import ContentService, content_service
from webpoint.services.translation_service import TranslationService, TranslationError, translation_service
from webpoint.services.storage_service import StorageService, StorageError, storage_service
from webpoint.services.email_service import EmailService, email_service
from webpoint.services.analytics_service import (
    AnalyticsTracker, IdentityProvider, PageViewLifecycle, analytics_report_service
)

__all__ = [
    'ContentService',
    'content_service',
    'TranslationService',
    'TranslationError',
    'translation_service',
    'StorageService',
    'StorageError',
    'storage_service',
    'EmailService',
    'email_service',
    'AnalyticsTracker',
    'IdentityProvider',
    'PageViewLifecycle',
    'analytics_report_service'
]
