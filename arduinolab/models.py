"""
Data models for the application.
Since we're using Supabase client, we don't need SQLAlchemy models.
These describe what the forms submit and what the handlers pass around;
persisted rows stay plain dicts.
"""
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

LANGS = ('en', 'fr', 'ar')
LANG_NAMES = {'en': 'English', 'fr': 'French', 'ar': 'Arabic'}


class DraftError(ValueError):
    """The submitted project draft could not be parsed."""


class FileType(str, Enum):
    STL = 'stl'
    INO = 'ino'
    IMAGE = 'image'
    ZIP = 'zip'
    OTHER = 'other'


def localized(value, field_name: str) -> Dict[str, str]:
    """Normalise a ``{en, fr, ar}`` mapping; missing languages become ''"""
    if value is None:
        return {lang: '' for lang in LANGS}
    if not isinstance(value, Mapping):
        raise DraftError(f"{field_name} must be an object with {', '.join(LANGS)} keys")
    return {lang: _text(value.get(lang), f'{field_name}.{lang}') for lang in LANGS}


def _text(value, field_name: str) -> str:
    if value is None:
        return ''
    if not isinstance(value, str):
        raise DraftError(f"{field_name} must be a string")
    return value


def _localized_from_form(form: Mapping, prefix: str) -> Dict[str, str]:
    return {lang: (form.get(f'{prefix}_{lang}') or '') for lang in LANGS}


def _json_list(raw, field_name: str) -> list:
    if raw is None or raw == '':
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise DraftError(f"{field_name} is not valid JSON: {e.msg}") from e
    if not isinstance(raw, list):
        raise DraftError(f"{field_name} must be a list")
    return raw


@dataclass
class Actor:
    """Whoever is calling; an empty id means nobody is signed in"""
    id: Optional[str] = None
    email: Optional[str] = None
    role: str = 'user'

    @property
    def is_authenticated(self) -> bool:
        return bool(self.id)

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == 'admin'


@dataclass
class StepDraft:
    title: Dict[str, str] = field(default_factory=lambda: localized(None, 'title'))
    content: Dict[str, str] = field(default_factory=lambda: localized(None, 'content'))
    image_url: Optional[str] = None
    code_snippet: Optional[str] = None

    @classmethod
    def from_dict(cls, data) -> 'StepDraft':
        if not isinstance(data, Mapping):
            raise DraftError("Each step must be an object")
        # ids from a previous save are not kept; steps are renumbered on every save
        return cls(
            title=localized(data.get('title'), 'step title'),
            content=localized(data.get('content'), 'step content'),
            image_url=data.get('image_url') or None,
            code_snippet=data.get('code_snippet') or None,
        )

    def to_row(self, project_id, step_number: int) -> Dict[str, Any]:
        return {
            'project_id': project_id,
            'step_number': step_number,
            'title': self.title,
            'content': self.content,
            'image_url': self.image_url,
            'code_snippet': self.code_snippet,
        }


@dataclass
class AttachmentDraft:
    file_type: FileType = FileType.OTHER
    file_name: str = ''
    file_url: str = ''
    file_size: Optional[int] = None

    @classmethod
    def from_dict(cls, data) -> 'AttachmentDraft':
        if not isinstance(data, Mapping):
            raise DraftError("Each attachment must be an object")
        try:
            file_type = FileType(data.get('file_type') or 'other')
        except ValueError:
            raise DraftError(f"Unknown attachment type: {data.get('file_type')!r}") from None
        if not data.get('file_url'):
            raise DraftError("Attachment file_url is required")
        size = data.get('file_size')
        if size is not None:
            try:
                size = int(size)
            except (TypeError, ValueError):
                raise DraftError(f"Invalid file_size: {size!r}") from None
        return cls(
            file_type=file_type,
            file_name=data.get('file_name') or '',
            file_url=data['file_url'],
            file_size=size,
        )

    def to_row(self, project_id) -> Dict[str, Any]:
        return {
            'project_id': project_id,
            'file_type': self.file_type.value,
            'file_name': self.file_name,
            'file_url': self.file_url,
            'file_size': self.file_size,
        }


@dataclass
class ProjectDraft:
    """Desired full state of a project as submitted by the authoring form"""
    slug: str = ''
    category: str = ''
    hero_image_url: Optional[str] = None
    instructor_name: Optional[str] = None
    school_name: Optional[str] = None
    title: Dict[str, str] = field(default_factory=lambda: localized(None, 'title'))
    description: Dict[str, str] = field(default_factory=lambda: localized(None, 'description'))
    steps: List[StepDraft] = field(default_factory=list)
    attachments: List[AttachmentDraft] = field(default_factory=list)
    id: Optional[str] = None

    def __post_init__(self):
        if not self.slug:
            raise DraftError("Slug is required")

    @classmethod
    def from_form(cls, form: Mapping) -> 'ProjectDraft':
        """Build a draft from the admin form encoding (title_en, steps_json, ...)"""
        return cls(
            id=form.get('id') or None,
            slug=_text(form.get('slug'), 'slug').strip(),
            category=_text(form.get('category'), 'category'),
            hero_image_url=form.get('hero_image_url') or None,
            instructor_name=form.get('instructor_name') or None,
            school_name=form.get('school_name') or None,
            title=_localized_from_form(form, 'title'),
            description=_localized_from_form(form, 'description'),
            steps=[StepDraft.from_dict(s) for s in _json_list(form.get('steps_json'), 'steps_json')],
            attachments=[AttachmentDraft.from_dict(a)
                         for a in _json_list(form.get('attachments_json'), 'attachments_json')],
        )

    @classmethod
    def from_json(cls, payload) -> 'ProjectDraft':
        if not isinstance(payload, Mapping):
            raise DraftError("Request body must be a JSON object")
        return cls(
            id=payload.get('id') or None,
            slug=_text(payload.get('slug'), 'slug').strip(),
            category=_text(payload.get('category'), 'category'),
            hero_image_url=payload.get('hero_image_url') or None,
            instructor_name=payload.get('instructor_name') or None,
            school_name=payload.get('school_name') or None,
            title=localized(payload.get('title'), 'title'),
            description=localized(payload.get('description'), 'description'),
            steps=[StepDraft.from_dict(s) for s in _json_list(payload.get('steps'), 'steps')],
            attachments=[AttachmentDraft.from_dict(a)
                         for a in _json_list(payload.get('attachments'), 'attachments')],
        )

    def metadata(self) -> Dict[str, Any]:
        """Parent row columns shared by create and update"""
        return {
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'slug': self.slug,
            'hero_image_url': self.hero_image_url,
            'instructor_name': self.instructor_name,
            'school_name': self.school_name,
        }

    def step_rows(self, project_id) -> List[Dict[str, Any]]:
        # step_number is always recomputed from list order, 1-based
        return [step.to_row(project_id, index + 1) for index, step in enumerate(self.steps)]

    def attachment_rows(self, project_id) -> List[Dict[str, Any]]:
        return [attachment.to_row(project_id) for attachment in self.attachments]


SITE_SETTINGS_FIELDS = (
    'linkedin_url',
    'dribbble_url',
    'organization_url',
    'sponsor_url',
    'contact_email',
    'contact_whatsapp',
    'organization_label',
    'sponsor_label',
)
