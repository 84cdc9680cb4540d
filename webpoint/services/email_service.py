"""
WebPoint - Email Service
Contact and newsletter notifications via SendGrid
"""
import os
import html
import logging
from datetime import datetime
from typing import Dict, Any

from flask import current_app, has_app_context
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To

logger = logging.getLogger(__name__)


class NotificationType:
    CONTACT = 'contact'
    NEWSLETTER = 'newsletter'

    ALL = (CONTACT, NEWSLETTER)


def _setting(name: str, default: str = '') -> Any:
    if has_app_context():
        value = current_app.config.get(name)
        if value:
            return value
    return os.environ.get(name, default)


def _esc(value) -> str:
    return html.escape(str(value)) if value is not None else ''


# Shared dark card layout used by the site's transactional mail
_WRAPPER = (
    '<div style="font-family: sans-serif; background-color: #0d0d12; color: #ffffff; '
    'padding: 40px; max-width: 600px; margin: 0 auto; border-radius: 16px;">'
    '<div style="text-align: center; margin-bottom: 30px;">'
    '<h1 style="font-size: 32px; font-weight: 800; margin: 0; color: #ffffff;">WebPoint</h1>'
    '</div>{body}</div>'
)

_LABEL = ('<span style="font-size: 12px; font-weight: 700; color: #9b4dff; text-transform: uppercase; '
          'margin-bottom: 4px; display: block;">{label}</span>')
_VALUE = '<div style="font-size: 18px; font-weight: 500; color: #ffffff; margin-bottom: 12px;">{value}</div>'


def render_contact_admin_email(payload: Dict[str, Any]) -> tuple:
    project_type = payload.get('project_type') or 'Общая'
    subject = f"[WebPoint] Новая заявка: {project_type}"
    message = _esc(payload.get('message')).replace('\n', '<br>')
    rows = ''.join(
        _LABEL.format(label=label) + _VALUE.format(value=value)
        for label, value in (
            ('Клиент', _esc(payload.get('name'))),
            ('Email', f'<a href="mailto:{_esc(payload.get("email"))}" style="color: #ffffff;">'
                      f'{_esc(payload.get("email"))}</a>'),
            ('Телефон', _esc(payload.get('phone'))),
            ('Тип проекта', _esc(project_type)),
        )
    )
    body = (
        '<h2 style="font-size: 24px; font-weight: 700; margin-bottom: 16px;">🚀 Новая заявка!</h2>'
        '<p style="color: rgba(255, 255, 255, 0.7);">На сайте оставлена новая заявка на разработку. Детали ниже:</p>'
        f'<div style="padding: 24px; margin-bottom: 24px;">{rows}</div>'
        '<div style="padding: 24px; margin-bottom: 24px;">'
        + _LABEL.format(label='Сообщение от клиента') +
        f'<div style="border-left: 3px solid #00d2ff; padding: 16px; font-style: italic;">{message}</div>'
        '</div>'
        '<div style="text-align: center; font-size: 12px; color: rgba(255, 255, 255, 0.4);">'
        f'Отправлено автоматически с сайта webpoint.md<br>&copy; {datetime.utcnow().year} WebPoint'
        '</div>'
    )
    return subject, _WRAPPER.format(body=body)


def render_contact_client_email(payload: Dict[str, Any]) -> tuple:
    subject = 'Спасибо за обращение в WebPoint!'
    body = (
        '<h2 style="font-size: 24px; font-weight: 700; margin-bottom: 16px;">Ваша заявка принята! ✅</h2>'
        f'<p>Здравствуйте, <strong>{_esc(payload.get("name"))}</strong>!</p>'
        '<p>Благодарим вас за обращение в <strong>WebPoint</strong>. Мы получили ваш запрос '
        'и наша команда уже начала его изучать.</p>'
        '<p><strong>Что дальше?</strong><br>Мы свяжемся с вами в течение 24 часов для обсуждения '
        'деталей и назначения консультации.</p>'
        '<p>Детали вашей заявки:<br>'
        f'<strong>Тип:</strong> {_esc(payload.get("project_type"))}<br>'
        f'<strong>Телефон:</strong> {_esc(payload.get("phone"))}</p>'
        '<div style="text-align: center; font-size: 12px; color: rgba(255, 255, 255, 0.4);">'
        'С уважением, команда WebPoint<br>Это автоматическое уведомление, на него не нужно отвечать.'
        '</div>'
    )
    return subject, _WRAPPER.format(body=body)


def render_newsletter_admin_email(payload: Dict[str, Any]) -> tuple:
    subject = '[WebPoint] Новый подписчик'
    email = _esc(payload.get('email'))
    body = (
        '<h2 style="font-size: 24px; font-weight: 700;">📬 Новый подписчик на новости</h2>'
        f'<p><strong>Email:</strong> <a href="mailto:{email}" style="color: #ffffff;">{email}</a></p>'
        '<p style="font-size: 12px; color: rgba(255, 255, 255, 0.4);">Отправлено автоматически с сайта webpoint.md</p>'
    )
    return subject, _WRAPPER.format(body=body)


class EmailService:
    """Email notification service"""

    @property
    def sendgrid_key(self):
        return _setting('SENDGRID_API_KEY')

    @property
    def from_email(self):
        return _setting('FROM_EMAIL', 'onboarding@webpoint.md')

    @property
    def from_name(self):
        return _setting('FROM_NAME', 'WebPoint')

    @property
    def notify_email(self):
        return _setting('NOTIFY_EMAIL', 'developmentwebpoint@gmail.com')

    def send_html(self, to: str, subject: str, body: str, from_name: str = None) -> bool:
        """Send one HTML email; returns True on a 2xx from SendGrid"""
        if not self.sendgrid_key:
            logger.warning(f"Email not configured. Would send to {to}: {subject}")
            return False

        message = Mail(
            from_email=Email(self.from_email, from_name or self.from_name),
            to_emails=To(to),
            subject=subject,
            html_content=body
        )

        try:
            response = SendGridAPIClient(self.sendgrid_key).send(message)
        except Exception as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return False

        if response.status_code in (200, 201, 202):
            logger.info(f"Email sent to {to}: {subject}")
            return True

        logger.error(f"SendGrid error: {response.status_code}")
        return False

    def send_notification(self, notification_type: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Relay a site event to the fixed recipient.

        contact: admin notification, then an auto-reply to the submitter.
        Only the admin email decides success; a failed auto-reply is logged.

        Raises:
            ValueError: unknown notification type
            RuntimeError: the admin notification could not be sent
        """
        payload = payload or {}

        if notification_type == NotificationType.CONTACT:
            subject, body = render_contact_admin_email(payload)
            if not self.send_html(self.notify_email, subject, body, from_name='WebPoint Bot'):
                raise RuntimeError('Failed to send admin email')

            client_sent = False
            if payload.get('email'):
                subject, body = render_contact_client_email(payload)
                client_sent = self.send_html(payload['email'], subject, body)
                if not client_sent:
                    logger.error("Client auto-reply failed; admin email was sent successfully")

            return {'success': True, 'admin': True, 'client': client_sent}

        if notification_type == NotificationType.NEWSLETTER:
            subject, body = render_newsletter_admin_email(payload)
            if not self.send_html(self.notify_email, subject, body, from_name='WebPoint Bot'):
                raise RuntimeError('Failed to send email')
            return {'success': True, 'admin': True}

        raise ValueError('Unknown notification type')

    def notify(self, notification_type: str, payload: Dict[str, Any]) -> bool:
        """Best-effort variant for request handlers; never raises"""
        try:
            self.send_notification(notification_type, payload)
            return True
        except Exception as e:
            logger.error(f"Error sending {notification_type} notification: {e}")
            return False


# Singleton instance
email_service = EmailService()
