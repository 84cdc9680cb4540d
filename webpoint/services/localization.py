"""
WebPoint - Locale Projection
Resolve the display view of a record for the selected UI locale
"""
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Any

from webpoint.models.db_models import Locale
from webpoint.models.forms import PayloadError


ARTICLE_FIELDS = ('title', 'excerpt', 'content', 'category')
PROJECT_FIELDS = ('title', 'category', 'problem', 'solution', 'result')
PROJECT_NEVER_TRANSLATED = ('title',)


def resolve_locale(value: Optional[str]) -> str:
    """
    Normalize ?lang= or an Accept-Language header to ru/ro/en.
    Anything unsupported falls back to the authoring locale.
    """
    if not value:
        return Locale.BASE
    for part in value.split(','):
        code = part.split(';')[0].strip().lower()[:2]
        if code in Locale.ALL:
            return code
    return Locale.BASE


@dataclass
class TranslationBlock:
    """
    Per-locale overrides attached to a content record.
    A locale missing from the stored JSON is None, not an empty dict.
    """

    fields: tuple
    ro: Optional[Dict[str, str]] = None
    en: Optional[Dict[str, str]] = None

    @classmethod
    def from_dict(cls, data: Any, fields: Iterable[str], require_complete: bool = False) -> "TranslationBlock":
        fields = tuple(fields)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise PayloadError('Translation block must be an object')

        locales = {}
        for locale in Locale.TARGETS:
            raw = data.get(locale)
            if raw is None:
                if require_complete:
                    raise PayloadError(f'Translation block is missing locale {locale!r}')
                locales[locale] = None
                continue
            if not isinstance(raw, dict):
                raise PayloadError(f'Translation for {locale!r} must be an object')
            entry = {}
            for name in fields:
                value = raw.get(name)
                if value is not None and not isinstance(value, str):
                    raise PayloadError(f'Translation {locale}.{name} must be a string')
                if require_complete and not value:
                    raise PayloadError(f'Translation {locale}.{name} is empty')
                entry[name] = value or ''
            locales[locale] = entry

        return cls(fields=fields, **locales)

    def get(self, locale: str) -> Optional[Dict[str, str]]:
        if locale == Locale.RO:
            return self.ro
        if locale == Locale.EN:
            return self.en
        return None

    @property
    def is_complete(self) -> bool:
        return all(
            entry is not None and all(entry.get(name) for name in self.fields)
            for entry in (self.ro, self.en)
        )

    def to_dict(self) -> dict:
        data = {}
        if self.ro is not None:
            data[Locale.RO] = dict(self.ro)
        if self.en is not None:
            data[Locale.EN] = dict(self.en)
        return data


def project_record(
    record: Dict[str, Any],
    locale: str,
    fields: Iterable[str],
    never_translated: Iterable[str] = ()
) -> Dict[str, Any]:
    """
    Display view of `record` for `locale`.

    Base values win unless the locale is ro/en, the block for it exists and
    the field's translated value is non-empty. Each field falls back on its
    own. Fields in `never_translated` always keep the base value. The raw
    `translations` key is dropped from the result.
    """
    fields = tuple(fields)
    skip = set(never_translated)
    projected = {key: value for key, value in record.items() if key != 'translations'}
    projected['locale'] = locale if locale in Locale.ALL else Locale.BASE

    if locale not in Locale.TARGETS:
        return projected

    raw = record.get('translations') or {}
    entry = raw.get(locale) if isinstance(raw, dict) else None
    if not isinstance(entry, dict):
        return projected

    for name in fields:
        if name in skip:
            continue
        value = entry.get(name)
        if isinstance(value, str) and value.strip():
            projected[name] = value

    return projected


def project_article(record: Dict[str, Any], locale: str) -> Dict[str, Any]:
    return project_record(record, locale, ARTICLE_FIELDS)


def project_portfolio(record: Dict[str, Any], locale: str) -> Dict[str, Any]:
    return project_record(record, locale, PROJECT_FIELDS, never_translated=PROJECT_NEVER_TRANSLATED)
