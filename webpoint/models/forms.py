"""
WebPoint - Form Models
Parsed and validated inbound payloads for the public and admin forms
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any

from webpoint.models.db_models import ArticleCategory, ProjectType, RequestProjectType, RequestStatus


EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

RU_MONTHS = (
    'января', 'февраля', 'марта', 'апреля', 'мая', 'июня',
    'июля', 'августа', 'сентября', 'октября', 'ноября', 'декабря',
)


class ValidationError(ValueError):
    """Inbound payload failed validation; `fields` maps field -> message"""

    def __init__(self, message: str = 'Validation failed', fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.fields = fields or {}

    def to_dict(self) -> dict:
        return {'error': self.message, 'fields': self.fields}


class PayloadError(ValidationError):
    """External payload (API response, stored JSON) could not be decoded"""


def format_ru_date(value: Optional[datetime] = None) -> str:
    """Display date in the authoring locale, e.g. '5 января 2024'"""
    value = value or datetime.utcnow()
    return f"{value.day} {RU_MONTHS[value.month - 1]} {value.year}"


def _text(data: Dict[str, Any], key: str, default: str = '') -> str:
    value = data.get(key)
    if value is None:
        return default
    return str(value).strip()


def _optional_text(data: Dict[str, Any], key: str) -> Optional[str]:
    value = _text(data, key)
    return value or None


def _string_list(value) -> List[str]:
    """Accept a JSON list or a comma/newline separated string"""
    if not value:
        return []
    if isinstance(value, str):
        parts = re.split(r'[,\n]', value)
    else:
        parts = value
    return [str(p).strip() for p in parts if str(p).strip()]


def _parse_int(value, field_name: str, errors: Dict[str, str], minimum: int = 1) -> int:
    try:
        result = int(value)
    except (ValueError, TypeError):
        errors[field_name] = 'Must be a whole number'
        return minimum
    if result < minimum:
        errors[field_name] = f'Must be at least {minimum}'
    return result


@dataclass
class ContactRequestForm:
    """Public contact form submission"""

    name: str
    email: str
    phone: str
    project_type: str
    message: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContactRequestForm":
        errors = {}

        name = _text(data, 'name')
        if len(name) < 2:
            errors['name'] = 'Минимум 2 символа'
        elif len(name) > 100:
            errors['name'] = 'Максимум 100 символов'

        email = _text(data, 'email')
        if not EMAIL_RE.match(email):
            errors['email'] = 'Неверный email'

        phone = _text(data, 'phone')
        if len(phone) < 6:
            errors['phone'] = 'Неверный номер телефона'

        # The site form posts camelCase
        project_type = _text(data, 'project_type') or _text(data, 'projectType')
        if project_type not in RequestProjectType.ALL:
            errors['project_type'] = 'Выберите тип проекта'

        message = _text(data, 'message')
        if len(message) < 10:
            errors['message'] = 'Минимум 10 символов'
        elif len(message) > 1000:
            errors['message'] = 'Максимум 1000 символов'

        if errors:
            raise ValidationError(fields=errors)

        return cls(
            name=name,
            email=email.lower(),
            phone=phone,
            project_type=project_type,
            message=message
        )

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'project_type': self.project_type,
            'message': self.message
        }


def parse_status(data: Dict[str, Any]) -> str:
    status = _text(data, 'status')
    if status not in RequestStatus.ALL:
        raise ValidationError(fields={'status': f"Must be one of: {', '.join(RequestStatus.ALL)}"})
    return status


def parse_email(data: Dict[str, Any]) -> str:
    email = _text(data, 'email').lower()
    if not EMAIL_RE.match(email):
        raise ValidationError(fields={'email': 'Неверный email'})
    return email


@dataclass
class ArticleForm:
    """Admin blog article form"""

    title: str
    excerpt: str
    content: str
    category_key: str
    read_time: int
    date: str
    image: str = ''

    @property
    def category(self) -> str:
        return ArticleCategory.LABELS[self.category_key]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], has_image_file: bool = False) -> "ArticleForm":
        errors = {}

        title = _text(data, 'title')
        excerpt = _text(data, 'excerpt')
        content = _text(data, 'content')
        for key, value in (('title', title), ('excerpt', excerpt), ('content', content)):
            if not value:
                errors[key] = 'Required'

        category_key = _text(data, 'categoryKey') or _text(data, 'category_key') or ArticleCategory.TIPS
        if category_key not in ArticleCategory.ALL:
            errors['categoryKey'] = f"Must be one of: {', '.join(ArticleCategory.ALL)}"

        read_time = _parse_int(
            data.get('readTime', data.get('read_time', 5)), 'readTime', errors
        )

        image = _text(data, 'image')
        if not image and not has_image_file:
            errors['image'] = 'Добавьте изображение или укажите ссылку'

        if errors:
            raise ValidationError(fields=errors)

        return cls(
            title=title,
            excerpt=excerpt,
            content=content,
            category_key=category_key,
            read_time=read_time,
            date=_text(data, 'date') or format_ru_date(),
            image=image
        )

    def translatable_fields(self) -> Dict[str, str]:
        return {
            'title': self.title,
            'excerpt': self.excerpt,
            'content': self.content,
            'category': self.category,
        }


@dataclass
class ProjectForm:
    """Admin portfolio project form"""

    type: str
    title: str
    category: str
    problem: str
    solution: str
    result: str
    image: str = ''
    images: List[str] = field(default_factory=list)
    website: Optional[str] = None
    technologies: List[str] = field(default_factory=list)
    client: Optional[str] = None
    date: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], has_image_file: bool = False) -> "ProjectForm":
        errors = {}

        project_type = _text(data, 'type') or ProjectType.LANDING
        if project_type not in ProjectType.ALL:
            errors['type'] = f"Must be one of: {', '.join(ProjectType.ALL)}"

        values = {}
        for key in ('title', 'category', 'problem', 'solution', 'result'):
            values[key] = _text(data, key)
            if not values[key]:
                errors[key] = 'Required'

        image = _text(data, 'image')
        if not image and not has_image_file:
            errors['image'] = 'Добавьте изображение или укажите ссылку'

        website = _optional_text(data, 'website')
        if website and not website.startswith(('http://', 'https://')):
            errors['website'] = 'URL must start with http:// or https://'

        if errors:
            raise ValidationError(fields=errors)

        return cls(
            type=project_type,
            image=image,
            images=_string_list(data.get('images')),
            website=website,
            technologies=_string_list(data.get('technologies')),
            client=_optional_text(data, 'client'),
            date=_optional_text(data, 'date'),
            **values
        )

    def translatable_fields(self) -> Dict[str, str]:
        return {
            'title': self.title,
            'category': self.category,
            'problem': self.problem,
            'solution': self.solution,
            'result': self.result,
        }


@dataclass
class ContactInfoForm:
    """Admin contact settings"""

    phone: str
    email: str
    address: str
    whatsapp_link: str
    telegram_link: str
    facebook_link: Optional[str] = None
    instagram_link: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContactInfoForm":
        errors = {}
        values = {}
        for key in ('phone', 'email', 'address', 'whatsapp_link', 'telegram_link'):
            values[key] = _text(data, key)
            if not values[key]:
                errors[key] = 'Required'

        if values['email'] and not EMAIL_RE.match(values['email']):
            errors['email'] = 'Неверный email'

        if errors:
            raise ValidationError(fields=errors)

        return cls(
            facebook_link=_optional_text(data, 'facebook_link'),
            instagram_link=_optional_text(data, 'instagram_link'),
            **values
        )
