"""
WebPoint - Content Service
Database-backed blog, portfolio, contact and newsletter operations
"""
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any, Callable

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from webpoint.database import db
from webpoint.models.db_models import (
    DBBlogArticle, DBPortfolioProject, DBContact, DBContactRequest,
    DBNewsletterSubscriber, RequestStatus, SubscriberStatus
)
from webpoint.models.forms import ArticleForm, ProjectForm, ContactInfoForm, ContactRequestForm
from webpoint.services.storage_service import storage_service
from webpoint.services.translation_service import translation_service
from webpoint.services.email_service import email_service, NotificationType

logger = logging.getLogger(__name__)


class ContentService:
    """
    Content store operations for the public site and the admin panel.

    List reads remember their last good result; when the database is
    unreachable the remembered copy is served instead of failing the page.
    """

    def __init__(self, storage=None, translator=None, notifier=None):
        self.storage = storage or storage_service
        self.translator = translator or translation_service
        self.notifier = notifier or email_service
        self._read_cache: Dict[str, List[dict]] = {}

    def _cached_read(self, key: str, loader: Callable[[], List[dict]]) -> List[dict]:
        try:
            result = loader()
        except SQLAlchemyError as e:
            db.session.rollback()
            if key in self._read_cache:
                logger.error(f"Error loading {key}, serving cached copy: {e}")
                return list(self._read_cache[key])
            raise
        self._read_cache[key] = list(result)
        return result

    def _commit(self):
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    # ============================================
    # Blog
    # ============================================

    def get_all_articles(self) -> List[dict]:
        """Newest first"""
        return self._cached_read('blog_articles', lambda: [
            a.to_dict() for a in DBBlogArticle.query.order_by(DBBlogArticle.id.desc()).all()
        ])

    def get_article(self, article_id: int) -> Optional[DBBlogArticle]:
        return db.session.get(DBBlogArticle, article_id)

    def _prepare_article(self, form: ArticleForm, image_file=None) -> Dict[str, Any]:
        # Upload and translation both finish before anything is written
        image = self.storage.upload_image(image_file) if image_file else form.image
        translations = self.translator.translate_blog_article(form.translatable_fields())
        return {
            'title': form.title,
            'excerpt': form.excerpt,
            'content': form.content,
            'image': image,
            'category_key': form.category_key,
            'category': form.category,
            'read_time': form.read_time,
            'date': form.date,
            'translations': translations,
        }

    def create_article(self, form: ArticleForm, image_file=None) -> DBBlogArticle:
        """
        Upload, translate, then persist a new article.

        Raises:
            StorageError, TranslationError: nothing has been written
        """
        values = self._prepare_article(form, image_file)
        article = DBBlogArticle(values.pop('title'), **values)
        db.session.add(article)
        self._commit()
        logger.info(f"Created blog article {article.id}: {article.title}")
        return article

    def update_article(self, article_id: int, form: ArticleForm, image_file=None) -> Optional[DBBlogArticle]:
        """Re-translates every field; returns None when the article is gone"""
        article = self.get_article(article_id)
        if not article:
            return None

        values = self._prepare_article(form, image_file)
        translations = values.pop('translations')
        for key, value in values.items():
            setattr(article, key, value)
        article.set_translations(translations)
        article.updated_at = datetime.utcnow()
        self._commit()
        logger.info(f"Updated blog article {article.id}")
        return article

    def delete_article(self, article_id: int) -> bool:
        article = self.get_article(article_id)
        if not article:
            return False
        image = article.image
        db.session.delete(article)
        self._commit()
        self.storage.delete_image(image)
        return True

    # ============================================
    # Portfolio
    # ============================================

    def _ordered_projects(self) -> List[DBPortfolioProject]:
        return DBPortfolioProject.query.order_by(
            DBPortfolioProject.priority.desc(),
            DBPortfolioProject.id.desc()
        ).all()

    def get_all_projects(self) -> List[dict]:
        """Display order: highest priority first"""
        return self._cached_read('portfolio_projects', lambda: [
            p.to_dict() for p in self._ordered_projects()
        ])

    def get_project(self, project_id: int) -> Optional[DBPortfolioProject]:
        return db.session.get(DBPortfolioProject, project_id)

    def _prepare_project(self, form: ProjectForm, image_file=None, image_files=None) -> Dict[str, Any]:
        image = self.storage.upload_image(image_file) if image_file else form.image
        images = list(form.images) + self.storage.upload_images(image_files or [])
        translations = self.translator.translate_portfolio_project(form.translatable_fields())
        return {
            'type': form.type,
            'title': form.title,
            'category': form.category,
            'image': image,
            'images': images,
            'problem': form.problem,
            'solution': form.solution,
            'result': form.result,
            'website': form.website,
            'technologies': form.technologies,
            'client': form.client,
            'date': form.date,
            'translations': translations,
        }

    def create_project(self, form: ProjectForm, image_file=None, image_files=None) -> DBPortfolioProject:
        """New projects go to the top of the display order"""
        values = self._prepare_project(form, image_file, image_files)
        top = db.session.query(func.max(DBPortfolioProject.priority)).scalar()
        values['priority'] = (top or 0) + 1
        project = DBPortfolioProject(values.pop('title'), **values)
        db.session.add(project)
        self._commit()
        logger.info(f"Created portfolio project {project.id}: {project.title}")
        return project

    def update_project(self, project_id: int, form: ProjectForm, image_file=None,
                       image_files=None) -> Optional[DBPortfolioProject]:
        project = self.get_project(project_id)
        if not project:
            return None

        values = self._prepare_project(form, image_file, image_files)
        project.set_images(values.pop('images'))
        project.set_technologies(values.pop('technologies'))
        project.set_translations(values.pop('translations'))
        for key, value in values.items():
            setattr(project, key, value)
        project.updated_at = datetime.utcnow()
        self._commit()
        logger.info(f"Updated portfolio project {project.id}")
        return project

    def delete_project(self, project_id: int) -> bool:
        project = self.get_project(project_id)
        if not project:
            return False
        images = [project.image] + project.get_images()
        db.session.delete(project)
        self._commit()
        for image in images:
            self.storage.delete_image(image)
        return True

    def move_project(self, project_id: int, direction: str) -> bool:
        """
        Swap priority with the neighbour in display order.

        Returns False when the project is missing or already at that end.
        Concurrent moves are not detected; the last commit wins.
        """
        if direction not in ('up', 'down'):
            raise ValueError("direction must be 'up' or 'down'")

        projects = self._ordered_projects()
        index = next((i for i, p in enumerate(projects) if p.id == project_id), None)
        if index is None:
            return False

        neighbour_index = index - 1 if direction == 'up' else index + 1
        if neighbour_index < 0 or neighbour_index >= len(projects):
            return False

        current, neighbour = projects[index], projects[neighbour_index]
        if current.priority == neighbour.priority:
            # Tied priorities cannot be swapped; spread them out in display order first
            for position, project in enumerate(projects):
                project.priority = len(projects) - position

        current.priority, neighbour.priority = neighbour.priority, current.priority
        self._commit()
        logger.info(f"Moved portfolio project {project_id} {direction}")
        return True

    # ============================================
    # Contact info
    # ============================================

    def get_contact(self) -> Optional[DBContact]:
        """The first row is the active contact record"""
        return DBContact.query.order_by(DBContact.id.asc()).first()

    def save_contact(self, form: ContactInfoForm) -> DBContact:
        contact = self.get_contact()
        if contact:
            contact.updated_at = datetime.utcnow()
        else:
            contact = DBContact()
            db.session.add(contact)

        contact.phone = form.phone
        contact.email = form.email
        contact.address = form.address
        contact.whatsapp_link = form.whatsapp_link
        contact.telegram_link = form.telegram_link
        contact.facebook_link = form.facebook_link
        contact.instagram_link = form.instagram_link
        self._commit()
        return contact

    # ============================================
    # Contact requests
    # ============================================

    def get_contact_requests(self, status: Optional[str] = None) -> List[dict]:
        """Newest first, optionally filtered by status"""
        def load():
            query = DBContactRequest.query
            if status and status != 'all':
                query = query.filter_by(status=status)
            return [r.to_dict() for r in query.order_by(DBContactRequest.created_at.desc(),
                                                        DBContactRequest.id.desc()).all()]
        return self._cached_read(f"contact_requests:{status or 'all'}", load)

    def get_contact_request(self, request_id: int) -> Optional[DBContactRequest]:
        return db.session.get(DBContactRequest, request_id)

    def create_contact_request(self, form: ContactRequestForm) -> DBContactRequest:
        """Persist a submission, then notify; a failed notification is only logged"""
        contact_request = DBContactRequest(
            name=form.name,
            email=form.email,
            phone=form.phone,
            project_type=form.project_type,
            message=form.message,
            status=RequestStatus.NEW,
            created_at=datetime.utcnow()
        )
        db.session.add(contact_request)
        self._commit()
        logger.info(f"New contact request {contact_request.id} ({form.project_type})")

        self.notifier.notify(NotificationType.CONTACT, form.to_dict())
        return contact_request

    def update_contact_request_status(self, request_id: int, status: str) -> Optional[DBContactRequest]:
        contact_request = self.get_contact_request(request_id)
        if not contact_request:
            return None
        contact_request.status = status
        contact_request.updated_at = datetime.utcnow()
        self._commit()
        return contact_request

    def delete_contact_request(self, request_id: int) -> bool:
        contact_request = self.get_contact_request(request_id)
        if not contact_request:
            return False
        db.session.delete(contact_request)
        self._commit()
        return True

    # ============================================
    # Newsletter
    # ============================================

    def subscribe(self, email: str) -> Dict[str, Any]:
        """
        Idempotent signup. The unique email column decides duplicates, so two
        racing requests still leave exactly one row.
        """
        email = (email or '').strip().lower()
        if DBNewsletterSubscriber.query.filter_by(email=email).first():
            return {'success': True, 'message': 'already_subscribed'}

        db.session.add(DBNewsletterSubscriber(
            email=email,
            status=SubscriberStatus.SUBSCRIBED,
            created_at=datetime.utcnow()
        ))
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return {'success': True, 'message': 'already_subscribed'}
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"New newsletter subscriber: {email}")
        self.notifier.notify(NotificationType.NEWSLETTER, {'email': email})
        return {'success': True, 'message': 'success'}

    # ============================================
    # Dashboard
    # ============================================

    def get_dashboard_counts(self) -> Dict[str, int]:
        return {
            'articles': DBBlogArticle.query.count(),
            'projects': DBPortfolioProject.query.count(),
            'new_requests': DBContactRequest.query.filter_by(status=RequestStatus.NEW).count(),
            'total_requests': DBContactRequest.query.count(),
            'subscribers': DBNewsletterSubscriber.query.filter_by(
                status=SubscriberStatus.SUBSCRIBED
            ).count(),
        }


# Singleton instance
content_service = ContentService()
