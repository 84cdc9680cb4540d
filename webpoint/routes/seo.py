"""
WebPoint - SEO Routes
robots.txt and sitemap.xml served at the site root
"""
from datetime import date
import logging

from flask import Blueprint, Response, request, current_app

from webpoint.services.content_service import content_service
from webpoint.services.seo_service import STATIC_ROUTES, build_sitemap, build_robots

logger = logging.getLogger(__name__)

seo_bp = Blueprint('seo', __name__)


def site_base_url() -> str:
    """
    Forwarded scheme/host (applied to the request by ProxyFix) when the
    request came through a proxy, else the configured SITE_URL.
    """
    if request.headers.get('X-Forwarded-Host') or request.headers.get('X-Forwarded-Proto'):
        return f'{request.scheme}://{request.host}'
    return current_app.config.get('SITE_URL') or f'https://{request.host}'


@seo_bp.route('/robots.txt', methods=['GET'])
def robots():
    return Response(build_robots(site_base_url()), mimetype='text/plain')


@seo_bp.route('/sitemap.xml', methods=['GET'])
def sitemap():
    try:
        articles = content_service.get_all_articles()
    except Exception as e:
        logger.error(f"Sitemap: could not load articles: {e}")
        articles = []

    xml = build_sitemap(site_base_url(), STATIC_ROUTES, articles, date.today())
    return Response(xml, mimetype='application/xml')
