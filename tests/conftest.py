import itertools

import pytest
from flask_jwt_extended import create_access_token

from arduinolab.app import create_app
from arduinolab.config import TestConfig
from arduinolab.storage import StorageError

# Child tables removed with their parent, like the foreign keys in the database
CASCADES = {
    'projects': (('project_steps', 'project_id'), ('project_attachments', 'project_id'),
                 ('comments', 'project_id')),
    'comments': (('comment_likes', 'comment_id'),),
}


class FakeStore:
    """In-memory stand-in for SupabaseStore with scripted failures"""

    def __init__(self):
        self.tables = {}
        self.calls = []
        self._failures = {}
        self._ids = itertools.count(1)

    def fail_on(self, table, op, times=None, message='boom'):
        """Make ``op`` on ``table`` raise; ``times=None`` means always"""
        self._failures[(table, op)] = [times, message]

    def _check(self, table, op):
        self.calls.append((op, table))
        failure = self._failures.get((table, op))
        if not failure:
            return
        times, message = failure
        if times is not None:
            if times <= 0:
                return
            failure[0] = times - 1
        raise StorageError(message, code='XX000')

    def rows(self, table):
        return self.tables.setdefault(table, [])

    @staticmethod
    def _matches(row, match):
        for column, value in (match or {}).items():
            if isinstance(value, (list, tuple, set)):
                if row.get(column) not in value:
                    return False
            elif row.get(column) != value:
                return False
        return True

    def select(self, table, match=None, columns='*', order=None, desc=False, limit=None):
        self._check(table, 'select')
        result = [dict(r) for r in self.rows(table) if self._matches(r, match)]
        if order:
            result.sort(key=lambda r: r.get(order) or 0, reverse=desc)
        if limit:
            result = result[:limit]
        return result

    def insert(self, table, rows):
        self._check(table, 'insert')
        if isinstance(rows, dict):
            rows = [rows]
        created = []
        for row in rows:
            row = dict(row)
            row.setdefault('id', str(next(self._ids)))
            row.setdefault('created_at', len(self.rows(table)))
            self.rows(table).append(row)
            created.append(dict(row))
        return created

    def update(self, table, values, match):
        self._check(table, 'update')
        updated = []
        for row in self.rows(table):
            if self._matches(row, match):
                row.update(values)
                updated.append(dict(row))
        return updated

    def delete(self, table, match):
        self._check(table, 'delete')
        deleted = [r for r in self.rows(table) if self._matches(r, match)]
        self.tables[table] = [r for r in self.rows(table) if not self._matches(r, match)]
        for row in deleted:
            for child, key in CASCADES.get(table, ()):
                self.tables[child] = [r for r in self.rows(child) if r.get(key) != row['id']]
        return [dict(r) for r in deleted]


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def app(store):
    return create_app(TestConfig, store=store)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_headers(app):
    def _headers(user_id='user-1', role='user', email='instructor@school.tn'):
        with app.app_context():
            token = create_access_token(identity=user_id,
                                        additional_claims={'role': role, 'email': email})
        return {'Authorization': f'Bearer {token}'}
    return _headers


def localized(en, fr='', ar=''):
    return {'en': en, 'fr': fr, 'ar': ar}


def draft_payload(slug='line-follower', steps=('Materials', 'Assembly', 'Code'), attachments=()):
    return {
        'slug': slug,
        'category': 'Robotics',
        'hero_image_url': 'https://cdn.example/hero.png',
        'instructor_name': 'Mme Ben Salah',
        'school_name': 'Lycee Pilote',
        'title': localized('Line follower', 'Suiveur de ligne', 'متتبع الخط'),
        'description': localized('A robot that follows a black line'),
        'steps': [{'title': localized(name), 'content': localized(f'{name} details')}
                  for name in steps],
        'attachments': list(attachments),
    }
