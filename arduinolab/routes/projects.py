from urllib.parse import urlencode

from flask import Blueprint, current_app, request, jsonify

from arduinolab import cache
from arduinolab.projects import build_sitemap, get_project_by_slug, get_projects
from arduinolab.supabase_client import get_store

projects_bp = Blueprint('projects', __name__)


def get_views() -> cache.ViewCache:
    return current_app.extensions['arduinolab.views']


@projects_bp.route('', methods=['GET'])
def list_projects():
    query = (request.args.get('q') or '').strip() or None
    category = request.args.get('category') or None

    params = {k: v for k, v in (('q', query), ('category', category)) if v}
    path = cache.PUBLIC_LISTING + ('?' + urlencode(sorted(params.items())) if params else '')

    views = get_views()
    projects = views.get(path)
    if projects is None:
        projects = get_projects(get_store(), query=query, category=category)
        if projects:
            views.set(path, projects)
    return jsonify(projects), 200


@projects_bp.route('/sitemap', methods=['GET'])
def sitemap():
    projects = get_projects(get_store())
    return jsonify(build_sitemap(current_app.config['SITE_URL'], projects)), 200


@projects_bp.route('/<slug>', methods=['GET'])
def project_detail(slug):
    path = cache.project_detail(slug)
    views = get_views()
    project = views.get(path)
    if project is None:
        project = get_project_by_slug(get_store(), slug)
        if project is None:
            return jsonify({'error': 'Project not found'}), 404
        views.set(path, project)
    return jsonify(project), 200
