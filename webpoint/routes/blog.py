"""
WebPoint - Public Blog Routes
Localized article listing and detail
"""
from flask import Blueprint, request, jsonify

from webpoint.services.content_service import content_service
from webpoint.services.localization import resolve_locale, project_article
from webpoint.services.storage_service import storage_service
from webpoint.utils import filter_items, paginate_request

blog_bp = Blueprint('blog', __name__)


def request_locale() -> str:
    return resolve_locale(request.args.get('lang') or request.headers.get('Accept-Language'))


def present_article(record, locale):
    """Localized article with its image reference turned into a public URL"""
    article = project_article(record, locale)
    article['image'] = storage_service.get_image_url(article.get('image'))
    return article


@blog_bp.route('', methods=['GET'])
def list_articles():
    """
    GET /api/blog?lang=ro&category=seo&page=1&per_page=6
    """
    locale = request_locale()
    articles = filter_items(content_service.get_all_articles(), 'categoryKey', request.args.get('category'))
    paginator = paginate_request(request, articles, default_per_page=6)

    result = paginator.to_dict(lambda article: present_article(article, locale))
    result['locale'] = locale
    return jsonify(result)


@blog_bp.route('/<int:article_id>', methods=['GET'])
def get_article(article_id):
    article = content_service.get_article(article_id)
    if not article:
        return jsonify({'error': 'Article not found'}), 404
    return jsonify(present_article(article.to_dict(), request_locale()))
