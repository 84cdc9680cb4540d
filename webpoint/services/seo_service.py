"""
WebPoint - SEO Artifacts
robots.txt and sitemap.xml generation
"""
from datetime import date, datetime
from typing import Iterable, List, Dict, Any, Optional, Union
from xml.sax.saxutils import escape


STATIC_ROUTES = [
    {'url': '/', 'changefreq': 'weekly', 'priority': 1.0},
    {'url': '/services', 'changefreq': 'monthly', 'priority': 0.9},
    {'url': '/portfolio', 'changefreq': 'monthly', 'priority': 0.8},
    {'url': '/blog', 'changefreq': 'weekly', 'priority': 0.8},
    {'url': '/contact', 'changefreq': 'monthly', 'priority': 0.7},
]

ARTICLE_CHANGEFREQ = 'monthly'
ARTICLE_PRIORITY = 0.6


def _date_part(value: Union[str, datetime, date, None]) -> Optional[str]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).split('T')[0]


def article_lastmod(article: Dict[str, Any], today: date) -> str:
    """updated_at, else created_at, else today; date part only"""
    return (
        _date_part(article.get('updated_at'))
        or _date_part(article.get('created_at'))
        or today.isoformat()
    )


def build_sitemap(base_url: str, static_routes: Iterable[Dict[str, Any]],
                  articles: Iterable[Dict[str, Any]], today: date) -> str:
    """
    Render the sitemap XML.

    Args:
        base_url: scheme://host without a trailing slash
        static_routes: dicts with url, changefreq, priority
        articles: dicts with id, updated_at, created_at
        today: lastmod for static routes
    """
    base_url = base_url.rstrip('/')
    entries: List[str] = []

    for route in static_routes:
        loc = base_url + route['url']
        entries.append(
            '  <url>\n'
            f'    <loc>{escape(loc)}</loc>\n'
            f'    <changefreq>{route["changefreq"]}</changefreq>\n'
            f'    <priority>{route["priority"]}</priority>\n'
            f'    <lastmod>{today.isoformat()}</lastmod>\n'
            '  </url>'
        )

    for article in articles:
        loc = f"{base_url}/blog/{article['id']}"
        entries.append(
            '  <url>\n'
            f'    <loc>{escape(loc)}</loc>\n'
            f'    <lastmod>{article_lastmod(article, today)}</lastmod>\n'
            f'    <changefreq>{ARTICLE_CHANGEFREQ}</changefreq>\n'
            f'    <priority>{ARTICLE_PRIORITY}</priority>\n'
            '  </url>'
        )

    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        + '\n'.join(entries)
        + ('\n' if entries else '')
        + '</urlset>\n'
    )


def build_robots(base_url: str) -> str:
    return (
        'User-agent: *\n'
        'Allow: /\n'
        '\n'
        '# Sitemap\n'
        f'Sitemap: {base_url.rstrip("/")}/sitemap.xml\n'
    )
