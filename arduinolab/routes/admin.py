from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required

from arduinolab import cache
from arduinolab.auth import current_actor
from arduinolab.comments import get_recent_comments
from arduinolab.models import DraftError, ProjectDraft
from arduinolab.projects import list_admin_projects
from arduinolab.results import ActionResult, ErrorKind
from arduinolab.site_settings import get_site_settings, update_site_settings
from arduinolab.supabase_client import get_store
from arduinolab.sync import ProjectSynchronizer

admin_bp = Blueprint('admin', __name__)


def get_synchronizer():
    return ProjectSynchronizer.from_app(current_app, get_store())


def read_draft():
    """Draft from a JSON body or from the admin form encoding"""
    if request.is_json:
        return ProjectDraft.from_json(request.get_json())
    return ProjectDraft.from_form(request.form)


def respond(result: ActionResult):
    return jsonify(result.to_dict()), result.status_code


@admin_bp.route('/projects', methods=['GET'])
@jwt_required()
def admin_projects():
    actor = current_actor()
    views = current_app.extensions['arduinolab.views']
    path = f'{cache.ADMIN_LISTING}?author={"all" if actor.is_admin else actor.id}'
    projects = views.get_or_build(path, lambda: list_admin_projects(get_store(), actor))
    return jsonify(projects), 200


@admin_bp.route('/projects', methods=['POST'])
@jwt_required()
def create_project():
    actor = current_actor()
    try:
        draft = read_draft()
    except DraftError as e:
        return respond(ActionResult.fail(ErrorKind.VALIDATION_FAILED, str(e)))

    result = get_synchronizer().create_project(actor, draft)
    if result.success:
        current_app.logger.info("Project %s created by %s", result.project_id, actor.id)
        return jsonify(result.to_dict()), 201
    return respond(result)


@admin_bp.route('/projects/<project_id>', methods=['PUT'])
@jwt_required()
def update_project(project_id):
    actor = current_actor()
    try:
        draft = read_draft()
    except DraftError as e:
        return respond(ActionResult.fail(ErrorKind.VALIDATION_FAILED, str(e)))

    return respond(get_synchronizer().update_project(actor, project_id, draft))


@admin_bp.route('/projects/<project_id>', methods=['DELETE'])
@jwt_required()
def delete_project(project_id):
    return respond(get_synchronizer().delete_project(current_actor(), project_id))


@admin_bp.route('/comments/recent', methods=['GET'])
@jwt_required()
def recent_comments():
    limit = request.args.get('limit', 10, type=int)
    return jsonify(get_recent_comments(get_store(), limit=limit)), 200


@admin_bp.route('/settings', methods=['GET'])
def read_settings():
    settings = get_site_settings(get_store())
    if settings is None:
        return jsonify({'error': 'Settings not found'}), 404
    return jsonify(settings), 200


@admin_bp.route('/settings', methods=['PUT'])
@jwt_required()
def save_settings():
    result = update_site_settings(get_store(), current_actor(), request.get_json() or {})
    if result.success:
        current_app.extensions['arduinolab.views'].revalidate_layout()
    return respond(result)
