"""
WebPoint - Translation Service
Groq chat-completion integration translating Russian content to ro/en
"""
import os
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional, Any

import requests
from flask import current_app, has_app_context

from webpoint.models.db_models import Locale
from webpoint.models.forms import PayloadError
from webpoint.services.localization import TranslationBlock, ARTICLE_FIELDS, PROJECT_FIELDS

logger = logging.getLogger(__name__)


LANGUAGE_NAMES = {
    Locale.RO: 'Romanian',
    Locale.EN: 'English',
}

SYSTEM_PROMPT = (
    'You are a professional translator. Your task is to translate the provided Russian text '
    'to the target language. Return ONLY the translated text, without any explanations, '
    'comments, or additional text. Do not translate instructions or system messages.'
)

DEFAULT_MAX_TOKENS = 500
LONG_TEXT_MAX_TOKENS = 2000

ARTICLE_CONTEXTS = {
    'title': 'blog article title',
    'excerpt': 'blog article excerpt',
    'content': 'blog article content',
    'category': 'blog article category',
}

PROJECT_CONTEXTS = {
    'category': 'portfolio project category',
    'problem': 'portfolio project problem description',
    'solution': 'portfolio project solution description',
    'result': 'portfolio project result description',
}


class TranslationError(Exception):
    """A translation call failed; the content save must be aborted"""

    def __init__(self, message: str, locale: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.locale = locale
        self.field = field


def _setting(name: str, default: str = '') -> Any:
    if has_app_context():
        value = current_app.config.get(name)
        if value:
            return value
    return os.environ.get(name, default)


def build_prompt(text: str, target_language: str, context: str) -> str:
    return f"""Translate the following Russian text to {LANGUAGE_NAMES[target_language]}.

Context: {context}

Rules:
1. Translate ONLY the text provided below
2. Do NOT translate this instruction or any other text
3. Keep the translation professional and natural
4. Return ONLY the translated text, nothing else

Text to translate:
{text}

Your translation:"""


def parse_completion(data: Any) -> str:
    """
    Pull the first choice's message content out of a chat-completion body.
    Raises PayloadError when the shape is wrong or the content is empty.
    """
    if not isinstance(data, dict):
        raise PayloadError('Completion response is not an object')

    if 'error' in data:
        error = data['error']
        message = error.get('message', str(error)) if isinstance(error, dict) else str(error)
        raise PayloadError(f'Completion API error: {message}')

    choices = data.get('choices')
    if not isinstance(choices, list) or not choices:
        raise PayloadError('Completion response has no choices')

    first = choices[0]
    message = first.get('message') if isinstance(first, dict) else None
    content = message.get('content') if isinstance(message, dict) else None
    if not isinstance(content, str) or not content.strip():
        raise PayloadError('Empty translation response')

    return content.strip()


class TranslationService:
    """Translate authoring-locale text through the Groq API"""

    def __init__(self, max_workers: int = 8):
        self.max_workers = max_workers

    @property
    def api_key(self):
        return _setting('GROQ_API_KEY')

    @property
    def model(self):
        return _setting('GROQ_MODEL', 'llama-3.3-70b-versatile')

    @property
    def api_url(self):
        return _setting('GROQ_API_URL', 'https://api.groq.com/openai/v1/chat/completions')

    @property
    def timeout(self):
        return int(_setting('TRANSLATION_TIMEOUT', '60'))

    def _settings(self) -> Dict[str, Any]:
        # Resolved on the calling thread; worker threads have no app context
        return {
            'api_key': self.api_key,
            'model': self.model,
            'api_url': self.api_url,
            'timeout': self.timeout,
        }

    def translate_text(
        self,
        text: str,
        target_language: str,
        context: str = 'website content',
        max_tokens: int = DEFAULT_MAX_TOKENS,
        settings: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Translate one piece of text.

        Raises:
            TranslationError: missing key, network error, non-2xx status,
            malformed body or empty content
        """
        settings = settings or self._settings()

        if target_language not in LANGUAGE_NAMES:
            raise TranslationError(f'Unsupported target language: {target_language}', locale=target_language)

        if not settings['api_key']:
            raise TranslationError('Missing GROQ_API_KEY env var', locale=target_language)

        try:
            response = requests.post(
                settings['api_url'],
                headers={
                    'Authorization': f"Bearer {settings['api_key']}",
                    'Content-Type': 'application/json'
                },
                json={
                    'model': settings['model'],
                    'messages': [
                        {'role': 'system', 'content': SYSTEM_PROMPT},
                        {'role': 'user', 'content': build_prompt(text, target_language, context)}
                    ],
                    'temperature': 0.3,
                    'max_tokens': max_tokens
                },
                timeout=settings['timeout']
            )
        except requests.RequestException as e:
            logger.error(f"Translation request error ({target_language}, {context}): {e}")
            raise TranslationError(f'Translation request failed: {e}', locale=target_language)

        if response.status_code < 200 or response.status_code >= 300:
            error_text = response.text[:500]
            logger.error(f"Groq API error response ({response.status_code}): {error_text}")
            raise TranslationError(
                f'Groq API error: {response.status_code} - {error_text}',
                locale=target_language
            )

        try:
            data = response.json()
        except ValueError:
            raise TranslationError('Groq API returned a non-JSON body', locale=target_language)

        try:
            return parse_completion(data)
        except PayloadError as e:
            logger.error(f"Translation decode error ({target_language}, {context}): {e.message}")
            raise TranslationError(e.message, locale=target_language)

    def translate_fields(
        self,
        fields: Dict[str, str],
        contexts: Dict[str, str],
        max_tokens: Optional[Dict[str, int]] = None
    ) -> Dict[str, Dict[str, str]]:
        """
        One request per field per target locale, run in parallel.

        All-or-nothing: if any call fails a TranslationError is raised and no
        partial result is returned.

        Returns:
            {'ro': {field: text}, 'en': {field: text}}
        """
        max_tokens = max_tokens or {}
        settings = self._settings()
        jobs = [(locale, name) for locale in Locale.TARGETS for name in fields]

        logger.info(f"Translating {len(fields)} field(s) into {', '.join(Locale.TARGETS)}")

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(jobs) or 1)) as executor:
            futures = {
                job: executor.submit(
                    self.translate_text,
                    fields[job[1]],
                    job[0],
                    contexts.get(job[1], 'website content'),
                    max_tokens.get(job[1], DEFAULT_MAX_TOKENS),
                    settings
                )
                for job in jobs
            }

            result = {locale: {} for locale in Locale.TARGETS}
            first_error = None
            for (locale, name), future in futures.items():
                try:
                    result[locale][name] = future.result()
                except TranslationError as e:
                    if first_error is None:
                        e.field = name
                        first_error = e

        if first_error is not None:
            raise first_error

        return result

    def translate_blog_article(self, article: Dict[str, str]) -> Dict[str, Dict[str, str]]:
        """Translate title/excerpt/content/category; content gets a larger token budget"""
        fields = {name: article[name] for name in ARTICLE_FIELDS}
        translations = self.translate_fields(
            fields,
            ARTICLE_CONTEXTS,
            max_tokens={'content': LONG_TEXT_MAX_TOKENS}
        )
        return TranslationBlock.from_dict(translations, ARTICLE_FIELDS, require_complete=True).to_dict()

    def translate_portfolio_project(self, project: Dict[str, str]) -> Dict[str, Dict[str, str]]:
        """Translate everything except the title, which stays in the source language"""
        fields = {name: project[name] for name in PROJECT_CONTEXTS}
        translations = self.translate_fields(fields, PROJECT_CONTEXTS)
        for locale in Locale.TARGETS:
            translations[locale]['title'] = project['title']
        return TranslationBlock.from_dict(translations, PROJECT_FIELDS, require_complete=True).to_dict()


# Singleton instance
translation_service = TranslationService()
