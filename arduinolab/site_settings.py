import logging

from arduinolab.models import SITE_SETTINGS_FIELDS
from arduinolab.results import ActionResult, ErrorKind
from arduinolab.storage import StorageError

logger = logging.getLogger(__name__)

SITE_SETTINGS = 'site_settings'
SETTINGS_ROW_ID = 1


def get_site_settings(store):
    """The single settings row, or None"""
    try:
        rows = store.select(SITE_SETTINGS, {'id': SETTINGS_ROW_ID}, limit=1)
    except StorageError as e:
        logger.error("Error fetching settings: %s", e.message)
        return None
    return rows[0] if rows else None


def update_site_settings(store, actor, values):
    """Partial update of the settings row (admins only); unknown keys are dropped"""
    if not actor.is_authenticated:
        return ActionResult.fail(ErrorKind.UNAUTHORIZED, 'Unauthorized')
    if not actor.is_admin:
        return ActionResult.fail(ErrorKind.FORBIDDEN, 'Only admins can change settings.')

    changes = {key: value for key, value in (values or {}).items() if key in SITE_SETTINGS_FIELDS}
    if not changes:
        return ActionResult.fail(ErrorKind.VALIDATION_FAILED, 'No settings to update.')
    try:
        store.update(SITE_SETTINGS, changes, {'id': SETTINGS_ROW_ID})
    except StorageError as e:
        logger.error("Error updating settings: %s", e.message)
        return ActionResult.fail(ErrorKind.STORAGE_WRITE_FAILED, e.message)
    return ActionResult.ok('Settings saved.')
