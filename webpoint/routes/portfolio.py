"""
WebPoint - Public Portfolio Routes
Localized project listing and detail
"""
from flask import Blueprint, request, jsonify

from webpoint.routes.blog import request_locale
from webpoint.services.content_service import content_service
from webpoint.services.localization import project_portfolio
from webpoint.services.storage_service import storage_service
from webpoint.utils import filter_items, paginate_request

portfolio_bp = Blueprint('portfolio', __name__)


def present_project(record, locale):
    project = project_portfolio(record, locale)
    project['image'] = storage_service.get_image_url(project.get('image'))
    if project.get('images'):
        project['images'] = [storage_service.get_image_url(path) for path in project['images']]
    return project


@portfolio_bp.route('', methods=['GET'])
def list_projects():
    """
    GET /api/portfolio?lang=en&type=shop&page=1&per_page=9

    Projects come back in display order (priority, highest first).
    """
    locale = request_locale()
    projects = filter_items(content_service.get_all_projects(), 'type', request.args.get('type'))
    paginator = paginate_request(request, projects, default_per_page=9)

    result = paginator.to_dict(lambda project: present_project(project, locale))
    result['locale'] = locale
    return jsonify(result)


@portfolio_bp.route('/<int:project_id>', methods=['GET'])
def get_project(project_id):
    project = content_service.get_project(project_id)
    if not project:
        return jsonify({'error': 'Project not found'}), 404
    return jsonify(present_project(project.to_dict(), request_locale()))
