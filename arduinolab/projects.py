"""
Read side of projects: public gallery listing, detail page and admin list.
"""
import logging

from arduinolab.models import LANGS
from arduinolab.storage import StorageError
from arduinolab.sync import ATTACHMENTS, PROJECTS, STEPS

logger = logging.getLogger(__name__)

LISTING_COLUMNS = (
    'id,title,description,category,slug,hero_image_url,instructor_name,school_name,'
    'author:author_id(full_name,school_name)'
)


def _matches_query(project, query):
    """Case-insensitive search across every language of title and description"""
    needle = query.lower()
    haystacks = [project.get('title') or {}, project.get('description') or {}]
    for values in haystacks:
        text = ' '.join(str(v) for v in values.values() if v).lower()
        if needle in text:
            return True
    return False


def get_projects(store, query=None, category=None):
    """Published projects, optionally filtered by category and search text.

    Category is filtered by the database; text search runs here because the
    multilingual fields are JSONB.
    """
    match = {'is_published': True}
    if category and category != 'All':
        match['category'] = category
    try:
        projects = store.select(PROJECTS, match, columns=LISTING_COLUMNS)
    except StorageError as e:
        logger.error("Error fetching projects: %s", e.message)
        return []

    if query:
        projects = [p for p in projects if _matches_query(p, query)]
    return projects


def get_project_by_slug(store, slug):
    """Full project (steps in display order, attachments) or None"""
    try:
        rows = store.select(PROJECTS, {'slug': slug}, columns=LISTING_COLUMNS, limit=1)
    except StorageError as e:
        logger.error("Error fetching project %s: %s", slug, e.message)
        return None
    if not rows:
        return None

    project = dict(rows[0])
    try:
        steps = store.select(STEPS, {'project_id': project['id']}, order='step_number')
        attachments = store.select(ATTACHMENTS, {'project_id': project['id']})
    except StorageError as e:
        logger.error("Error fetching content of project %s: %s", slug, e.message)
        return None
    project['steps'] = sorted(steps, key=lambda s: s['step_number'])
    project['attachments'] = attachments
    return project


def list_admin_projects(store, actor):
    """Newest first; non-admins only see what they authored"""
    match = None if actor.is_admin else {'author_id': actor.id}
    try:
        return store.select(PROJECTS, match, order='created_at', desc=True)
    except StorageError as e:
        logger.error("Error fetching admin projects: %s", e.message)
        return []


def build_sitemap(base_url, projects):
    """Sitemap entries: each locale home, the about page, and every project page"""
    base_url = base_url.rstrip('/')
    entries = [{'url': f'{base_url}/{lang}', 'change_frequency': 'daily', 'priority': 1.0}
               for lang in LANGS]
    entries.append({'url': f'{base_url}/en/about', 'change_frequency': 'monthly', 'priority': 0.8})
    for project in projects:
        if not project.get('slug'):
            continue
        for lang in LANGS:
            entries.append({
                'url': f"{base_url}/{lang}/projects/{project['slug']}",
                'change_frequency': 'weekly',
                'priority': 0.6,
            })
    return entries
