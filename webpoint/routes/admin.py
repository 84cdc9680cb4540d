"""
WebPoint - Admin Routes
Content management, contact requests, analytics and dashboard
"""
from flask import Blueprint, request, jsonify
import logging

from webpoint.routes.auth import token_required
from webpoint.models.forms import ArticleForm, ProjectForm, ContactInfoForm, parse_status
from webpoint.models.db_models import RequestStatus
from webpoint.services.content_service import content_service
from webpoint.services.analytics_service import analytics_report_service
from webpoint.services.storage_service import StorageError
from webpoint.services.translation_service import TranslationError
from webpoint.utils import paginate_request, get_date_range_params

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__)


def _form_data() -> dict:
    """JSON body, or multipart fields when files are attached"""
    if request.is_json:
        return request.get_json(silent=True) or {}
    data = request.form.to_dict()
    for key in ('images', 'technologies'):
        values = request.form.getlist(key)
        if len(values) > 1:
            data[key] = values
    return data


def _image_file():
    image = request.files.get('image')
    return image if image and image.filename else None


def _save_error_response(error: Exception):
    if isinstance(error, TranslationError):
        logger.error(f"Translation failed, nothing saved: {error.message}")
        return jsonify({
            'error': 'Translation failed',
            'message': f'Ошибка перевода: {error.message}. Изменения не сохранены.',
            'locale': error.locale,
            'field': error.field
        }), 502
    logger.error(f"Image upload failed, nothing saved: {error.message}")
    return jsonify({
        'error': 'Image upload failed',
        'message': f'Ошибка загрузки изображения: {error.message}'
    }), 502


# ==========================================
# BLOG
# ==========================================

@admin_bp.route('/blog', methods=['GET'])
@token_required
def list_articles(current_user):
    paginator = paginate_request(request, content_service.get_all_articles(), default_per_page=10)
    return jsonify(paginator.to_dict())


@admin_bp.route('/blog', methods=['POST'])
@token_required
def create_article(current_user):
    """Validate, upload image, translate to ro/en, then save"""
    image_file = _image_file()
    form = ArticleForm.from_dict(_form_data(), has_image_file=image_file is not None)

    try:
        article = content_service.create_article(form, image_file=image_file)
    except (TranslationError, StorageError) as e:
        return _save_error_response(e)

    return jsonify(article.to_dict()), 201


@admin_bp.route('/blog/<int:article_id>', methods=['PUT'])
@token_required
def update_article(current_user, article_id):
    if not content_service.get_article(article_id):
        return jsonify({'error': 'Article not found'}), 404

    image_file = _image_file()
    form = ArticleForm.from_dict(_form_data(), has_image_file=image_file is not None)

    try:
        article = content_service.update_article(article_id, form, image_file=image_file)
    except (TranslationError, StorageError) as e:
        return _save_error_response(e)

    return jsonify(article.to_dict())


@admin_bp.route('/blog/<int:article_id>', methods=['DELETE'])
@token_required
def delete_article(current_user, article_id):
    if not content_service.delete_article(article_id):
        return jsonify({'error': 'Article not found'}), 404
    return jsonify({'success': True})


# ==========================================
# PORTFOLIO
# ==========================================

@admin_bp.route('/portfolio', methods=['GET'])
@token_required
def list_projects(current_user):
    paginator = paginate_request(request, content_service.get_all_projects(), default_per_page=10)
    return jsonify(paginator.to_dict())


@admin_bp.route('/portfolio', methods=['POST'])
@token_required
def create_project(current_user):
    image_file = _image_file()
    form = ProjectForm.from_dict(_form_data(), has_image_file=image_file is not None)

    try:
        project = content_service.create_project(
            form, image_file=image_file, image_files=request.files.getlist('images')
        )
    except (TranslationError, StorageError) as e:
        return _save_error_response(e)

    return jsonify(project.to_dict()), 201


@admin_bp.route('/portfolio/<int:project_id>', methods=['PUT'])
@token_required
def update_project(current_user, project_id):
    if not content_service.get_project(project_id):
        return jsonify({'error': 'Project not found'}), 404

    image_file = _image_file()
    form = ProjectForm.from_dict(_form_data(), has_image_file=image_file is not None)

    try:
        project = content_service.update_project(
            project_id, form, image_file=image_file, image_files=request.files.getlist('images')
        )
    except (TranslationError, StorageError) as e:
        return _save_error_response(e)

    return jsonify(project.to_dict())


@admin_bp.route('/portfolio/<int:project_id>', methods=['DELETE'])
@token_required
def delete_project(current_user, project_id):
    if not content_service.delete_project(project_id):
        return jsonify({'error': 'Project not found'}), 404
    return jsonify({'success': True})


@admin_bp.route('/portfolio/<int:project_id>/move', methods=['POST'])
@token_required
def move_project(current_user, project_id):
    """
    POST /api/admin/portfolio/<id>/move
    {"direction": "up" | "down"}
    """
    data = request.get_json(silent=True) or {}
    direction = data.get('direction')
    if direction not in ('up', 'down'):
        return jsonify({'error': "direction must be 'up' or 'down'"}), 400

    if not content_service.get_project(project_id):
        return jsonify({'error': 'Project not found'}), 404

    moved = content_service.move_project(project_id, direction)
    return jsonify({
        'success': True,
        'moved': moved,
        'projects': content_service.get_all_projects()
    })


# ==========================================
# CONTACT INFO
# ==========================================

@admin_bp.route('/contact', methods=['GET'])
@token_required
def get_contact(current_user):
    contact = content_service.get_contact()
    return jsonify(contact.to_dict() if contact else None)


@admin_bp.route('/contact', methods=['PUT'])
@token_required
def save_contact(current_user):
    form = ContactInfoForm.from_dict(request.get_json(silent=True) or {})
    contact = content_service.save_contact(form)
    return jsonify(contact.to_dict())


# ==========================================
# CONTACT REQUESTS
# ==========================================

@admin_bp.route('/contact-requests', methods=['GET'])
@token_required
def list_contact_requests(current_user):
    """
    GET /api/admin/contact-requests?status=new&page=1&per_page=20
    """
    status = request.args.get('status')
    if status and status != 'all' and status not in RequestStatus.ALL:
        return jsonify({'error': f"status must be one of: all, {', '.join(RequestStatus.ALL)}"}), 400

    requests_list = content_service.get_contact_requests(status)
    paginator = paginate_request(request, requests_list, default_per_page=10)
    return jsonify(paginator.to_dict())


@admin_bp.route('/contact-requests/<int:request_id>/status', methods=['PUT'])
@token_required
def update_contact_request_status(current_user, request_id):
    status = parse_status(request.get_json(silent=True) or {})
    contact_request = content_service.update_contact_request_status(request_id, status)
    if not contact_request:
        return jsonify({'error': 'Contact request not found'}), 404
    return jsonify(contact_request.to_dict())


@admin_bp.route('/contact-requests/<int:request_id>', methods=['DELETE'])
@token_required
def delete_contact_request(current_user, request_id):
    if not content_service.delete_contact_request(request_id):
        return jsonify({'error': 'Contact request not found'}), 404
    return jsonify({'success': True})


# ==========================================
# ANALYTICS & DASHBOARD
# ==========================================

@admin_bp.route('/analytics', methods=['GET'])
@token_required
def get_analytics(current_user):
    """
    GET /api/admin/analytics?range=24h|7d|30d
    """
    range_label, hours = get_date_range_params(request)
    report = analytics_report_service.get_report(hours)
    report['range'] = range_label
    return jsonify(report)


@admin_bp.route('/dashboard', methods=['GET'])
@token_required
def dashboard(current_user):
    return jsonify({
        'counts': content_service.get_dashboard_counts(),
        'recent_requests': content_service.get_contact_requests(RequestStatus.NEW)[:5]
    })
