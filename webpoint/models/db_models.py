"""
WebPoint - SQLAlchemy Database Models
Content, contact and analytics tables backing the site and admin panel
"""
from datetime import datetime
from typing import Optional, List
import json

from sqlalchemy import String, Text, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from werkzeug.security import generate_password_hash, check_password_hash

from webpoint.database import db


def safe_json_loads(value, default=None):
    """Safely parse JSON, returning default if None or invalid"""
    if default is None:
        default = []
    if not value:
        return default
    try:
        return json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return default


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# ============================================
# Enumerations
# ============================================

class Locale:
    RU = 'ru'
    RO = 'ro'
    EN = 'en'

    BASE = RU
    TARGETS = (RO, EN)
    ALL = (RU, RO, EN)


class ArticleCategory:
    PRICES = 'prices'
    TIPS = 'tips'
    SEO = 'seo'
    DESIGN = 'design'
    ECOMMERCE = 'ecommerce'

    ALL = (PRICES, TIPS, SEO, DESIGN, ECOMMERCE)

    # Display labels in the authoring locale
    LABELS = {
        PRICES: 'Цены',
        TIPS: 'Советы',
        SEO: 'SEO',
        DESIGN: 'Дизайн',
        ECOMMERCE: 'E-commerce',
    }


class ProjectType:
    LANDING = 'landing'
    BUSINESS = 'business'
    SHOP = 'shop'
    TG_BASIC = 'tg-basic'
    TG_SHOP = 'tg-shop'
    TG_COMPLEX = 'tg-complex'
    AUTO_PARSING = 'auto-parsing'
    AUTO_SCRIPTS = 'auto-scripts'
    AUTO_COMPLEX = 'auto-complex'
    MOBILE_MVP = 'mobile-mvp'
    MOBILE_BUSINESS = 'mobile-business'
    MOBILE_SHOP = 'mobile-shop'

    ALL = (
        LANDING, BUSINESS, SHOP,
        TG_BASIC, TG_SHOP, TG_COMPLEX,
        AUTO_PARSING, AUTO_SCRIPTS, AUTO_COMPLEX,
        MOBILE_MVP, MOBILE_BUSINESS, MOBILE_SHOP,
    )


class RequestProjectType:
    LANDING = 'landing'
    BUSINESS = 'business'
    SHOP = 'shop'
    SUPPORT = 'support'
    SEO = 'seo'
    ADS = 'ads'

    ALL = (LANDING, BUSINESS, SHOP, SUPPORT, SEO, ADS)


class RequestStatus:
    NEW = 'new'
    READ = 'read'
    PROCESSED = 'processed'
    ARCHIVED = 'archived'

    ALL = (NEW, READ, PROCESSED, ARCHIVED)


class SubscriberStatus:
    SUBSCRIBED = 'subscribed'
    UNSUBSCRIBED = 'unsubscribed'


# ============================================
# Admin Users
# ============================================

class DBAdminUser(db.Model):
    """Admin panel account"""
    __tablename__ = 'admin_users'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __init__(self, username: str, password: str):
        self.username = username.strip().lower()
        self.set_password(password)
        self.created_at = datetime.utcnow()

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def verify_password(self, password: str) -> bool:
        if not self.password_hash or not password:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'username': self.username,
            'created_at': _iso(self.created_at),
            'last_login': _iso(self.last_login)
        }


# ============================================
# Blog
# ============================================

class DBBlogArticle(db.Model):
    """Blog article authored in Russian with optional ro/en translations"""
    __tablename__ = 'blog_articles'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    excerpt: Mapped[str] = mapped_column(Text, default='')
    content: Mapped[str] = mapped_column(Text, default='')
    image: Mapped[str] = mapped_column(String(1000), default='')
    category: Mapped[str] = mapped_column(String(100), default='')
    category_key: Mapped[str] = mapped_column(String(20), default=ArticleCategory.TIPS, index=True)
    read_time: Mapped[int] = mapped_column(Integer, default=5)
    date: Mapped[str] = mapped_column(String(100), default='')
    translations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __init__(self, title: str, **kwargs):
        self.title = title
        self.excerpt = kwargs.get('excerpt', '')
        self.content = kwargs.get('content', '')
        self.image = kwargs.get('image', '')
        self.category_key = kwargs.get('category_key', ArticleCategory.TIPS)
        self.category = kwargs.get('category') or ArticleCategory.LABELS.get(self.category_key, '')
        self.read_time = kwargs.get('read_time', 5)
        self.date = kwargs.get('date', '')
        self.set_translations(kwargs.get('translations'))
        self.created_at = kwargs.get('created_at') or datetime.utcnow()
        self.updated_at = kwargs.get('updated_at')

    def get_translations(self) -> dict:
        return safe_json_loads(self.translations, {})

    def set_translations(self, translations: Optional[dict]):
        self.translations = json.dumps(translations, ensure_ascii=False) if translations else None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'excerpt': self.excerpt,
            'content': self.content,
            'image': self.image,
            'category': self.category,
            'categoryKey': self.category_key,
            'readTime': self.read_time,
            'date': self.date,
            'translations': self.get_translations() or None,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


# ============================================
# Portfolio
# ============================================

class DBPortfolioProject(db.Model):
    """Portfolio case study; title is never translated"""
    __tablename__ = 'portfolio_projects'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    priority: Mapped[int] = mapped_column(Integer, default=0, index=True)
    type: Mapped[str] = mapped_column(String(30), default=ProjectType.LANDING, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[str] = mapped_column(String(255), default='')
    image: Mapped[str] = mapped_column(String(1000), default='')
    images: Mapped[str] = mapped_column(Text, default='[]')  # JSON array
    problem: Mapped[str] = mapped_column(Text, default='')
    solution: Mapped[str] = mapped_column(Text, default='')
    result: Mapped[str] = mapped_column(Text, default='')
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    technologies: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON array
    client: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    date: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    translations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __init__(self, title: str, **kwargs):
        self.title = title
        self.priority = kwargs.get('priority', 0)
        self.type = kwargs.get('type', ProjectType.LANDING)
        self.category = kwargs.get('category', '')
        self.image = kwargs.get('image', '')
        self.set_images(kwargs.get('images', []))
        self.problem = kwargs.get('problem', '')
        self.solution = kwargs.get('solution', '')
        self.result = kwargs.get('result', '')
        self.website = kwargs.get('website')
        self.set_technologies(kwargs.get('technologies'))
        self.client = kwargs.get('client')
        self.date = kwargs.get('date')
        self.set_translations(kwargs.get('translations'))
        self.created_at = datetime.utcnow()

    def get_images(self) -> List[str]:
        return safe_json_loads(self.images, [])

    def set_images(self, images: Optional[List[str]]):
        self.images = json.dumps(list(images or []))

    def get_technologies(self) -> Optional[List[str]]:
        return safe_json_loads(self.technologies) if self.technologies else None

    def set_technologies(self, technologies: Optional[List[str]]):
        self.technologies = json.dumps(list(technologies)) if technologies else None

    def get_translations(self) -> dict:
        return safe_json_loads(self.translations, {})

    def set_translations(self, translations: Optional[dict]):
        self.translations = json.dumps(translations, ensure_ascii=False) if translations else None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'priority': self.priority,
            'type': self.type,
            'title': self.title,
            'category': self.category,
            'image': self.image,
            'images': self.get_images(),
            'problem': self.problem,
            'solution': self.solution,
            'result': self.result,
            'website': self.website,
            'technologies': self.get_technologies(),
            'client': self.client,
            'date': self.date,
            'translations': self.get_translations() or None,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


# ============================================
# Contacts
# ============================================

class DBContact(db.Model):
    """Site contact info; the first row is the active record"""
    __tablename__ = 'contacts'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    phone: Mapped[str] = mapped_column(String(50), default='')
    email: Mapped[str] = mapped_column(String(255), default='')
    address: Mapped[str] = mapped_column(String(500), default='')
    whatsapp_link: Mapped[str] = mapped_column(String(500), default='')
    telegram_link: Mapped[str] = mapped_column(String(500), default='')
    facebook_link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    instagram_link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'phone': self.phone,
            'email': self.email,
            'address': self.address,
            'whatsapp_link': self.whatsapp_link,
            'telegram_link': self.telegram_link,
            'facebook_link': self.facebook_link,
            'instagram_link': self.instagram_link,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class DBContactRequest(db.Model):
    """Submission of the public contact form"""
    __tablename__ = 'contact_requests'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    project_type: Mapped[str] = mapped_column(String(20), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=RequestStatus.NEW, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'project_type': self.project_type,
            'message': self.message,
            'status': self.status,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class DBNewsletterSubscriber(db.Model):
    """Newsletter signup, one row per email"""
    __tablename__ = 'newsletter_subscribers'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), default=SubscriberStatus.SUBSCRIBED)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'email': self.email,
            'status': self.status,
            'created_at': _iso(self.created_at)
        }


# ============================================
# Analytics
# ============================================

class DBAnalyticsSession(db.Model):
    """One page view within a browser session"""
    __tablename__ = 'analytics_sessions'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    visitor_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    page_path: Mapped[str] = mapped_column(String(1000), nullable=False)
    referrer: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # seconds

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'session_id': self.session_id,
            'visitor_id': self.visitor_id,
            'page_path': self.page_path,
            'referrer': self.referrer,
            'user_agent': self.user_agent,
            'duration': self.duration,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class DBAnalyticsEvent(db.Model):
    """Discrete interaction (click, form submit, content view)"""
    __tablename__ = 'analytics_events'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    event_type: Mapped[str] = mapped_column(String(50), default='click')
    event_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    event_label: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    page_path: Mapped[str] = mapped_column(String(1000), default='/')

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'session_id': self.session_id,
            'event_type': self.event_type,
            'event_name': self.event_name,
            'event_label': self.event_label,
            'page_path': self.page_path,
            'created_at': _iso(self.created_at)
        }
