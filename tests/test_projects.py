from arduinolab.models import Actor
from arduinolab.projects import build_sitemap, get_project_by_slug, get_projects, list_admin_projects
from arduinolab.sync import ATTACHMENTS, PROJECTS, STEPS


def seed(store):
    store.insert(PROJECTS, [
        {'id': 'p1', 'slug': 'smart-plant', 'category': 'IoT', 'is_published': True,
         'author_id': 'u1', 'created_at': 1,
         'title': {'en': 'Smart plant', 'fr': 'Plante connectee', 'ar': 'نبتة ذكية'},
         'description': {'en': 'Soil moisture alerts', 'fr': '', 'ar': ''}},
        {'id': 'p2', 'slug': 'line-follower', 'category': 'Robotics', 'is_published': True,
         'author_id': 'u2', 'created_at': 2,
         'title': {'en': 'Line follower', 'fr': 'Suiveur de ligne', 'ar': ''},
         'description': {'en': 'IR sensors', 'fr': 'Capteurs infrarouges', 'ar': ''}},
        {'id': 'p3', 'slug': 'draft-arm', 'category': 'Robotics', 'is_published': False,
         'author_id': 'u1', 'created_at': 3,
         'title': {'en': 'Robot arm', 'fr': '', 'ar': ''}, 'description': {}},
    ])
    store.insert(STEPS, [
        {'project_id': 'p2', 'step_number': 2, 'title': {'en': 'Code'}},
        {'project_id': 'p2', 'step_number': 1, 'title': {'en': 'Chassis'}},
    ])
    store.insert(ATTACHMENTS, [{'project_id': 'p2', 'file_type': 'ino', 'file_name': 'lf.ino'}])


def slugs(projects):
    return sorted(p['slug'] for p in projects)


def test_only_published_projects_are_listed(store):
    seed(store)
    assert slugs(get_projects(store)) == ['line-follower', 'smart-plant']


def test_category_filter(store):
    seed(store)
    assert slugs(get_projects(store, category='Robotics')) == ['line-follower']
    assert slugs(get_projects(store, category='All')) == ['line-follower', 'smart-plant']


def test_search_matches_any_language(store):
    seed(store)
    assert slugs(get_projects(store, query='SUIVEUR')) == ['line-follower']
    assert slugs(get_projects(store, query='ذكية')) == ['smart-plant']
    assert slugs(get_projects(store, query='infrarouges')) == ['line-follower']
    assert get_projects(store, query='drone') == []


def test_listing_storage_error_returns_empty(store):
    store.fail_on(PROJECTS, 'select')
    assert get_projects(store) == []


def test_project_by_slug_orders_steps(store):
    seed(store)
    project = get_project_by_slug(store, 'line-follower')

    assert [s['step_number'] for s in project['steps']] == [1, 2]
    assert project['attachments'][0]['file_name'] == 'lf.ino'


def test_unknown_slug(store):
    seed(store)
    assert get_project_by_slug(store, 'nope') is None


def test_admin_list_is_scoped_for_non_admins(store):
    seed(store)
    own = list_admin_projects(store, Actor(id='u1'))
    everything = list_admin_projects(store, Actor(id='a', role='admin'))

    assert [p['id'] for p in own] == ['p3', 'p1']
    assert len(everything) == 3


def test_sitemap_lists_published_projects_in_every_language(store):
    seed(store)
    urls = [e['url'] for e in build_sitemap('https://lab.example/', get_projects(store))]

    assert urls[:4] == ['https://lab.example/en', 'https://lab.example/fr',
                        'https://lab.example/ar', 'https://lab.example/en/about']
    assert 'https://lab.example/ar/projects/smart-plant' in urls
    assert 'https://lab.example/fr/projects/line-follower' in urls
    assert not any('draft-arm' in url for url in urls)
    assert len(urls) == 4 + 2 * 3
