"""
Project content synchronizer.

Applies a full ``ProjectDraft`` to storage. The parent row lives in
``projects``; steps and attachments are never diffed, they are deleted and
re-inserted on every save with ``step_number`` recomputed from draft order.

PostgREST gives us no cross-table transaction, so a failed create is undone
with a compensating delete of the parent (children go with it through the
foreign-key cascade). Update is not atomic: a failure after the metadata
update leaves the new metadata in place.
"""
import logging
import time
from datetime import datetime, timezone

from arduinolab import cache
from arduinolab.models import Actor, ProjectDraft
from arduinolab.results import ActionResult, ErrorKind
from arduinolab.storage import StorageError

logger = logging.getLogger(__name__)

PROJECTS = 'projects'
STEPS = 'project_steps'
ATTACHMENTS = 'project_attachments'


class ProjectSynchronizer:
    def __init__(self, store, views=None, rollback_retries=3, rollback_backoff=0.5,
                 sleep=time.sleep):
        self.store = store
        self.views = views
        self.rollback_retries = max(1, rollback_retries)
        self.rollback_backoff = rollback_backoff
        self._sleep = sleep

    @classmethod
    def from_app(cls, app, store):
        return cls(
            store,
            views=app.extensions.get('arduinolab.views'),
            rollback_retries=app.config.get('ROLLBACK_RETRIES', 3),
            rollback_backoff=app.config.get('ROLLBACK_BACKOFF', 0.5),
        )

    def _ownership_match(self, actor: Actor, project_id) -> dict:
        match = {'id': project_id}
        # Non-admins only ever match their own rows; anything else matches nothing.
        if not actor.is_admin:
            match['author_id'] = actor.id
        return match

    def _revalidate(self, *paths, layout=False):
        if self.views is None:
            return
        if layout:
            self.views.revalidate_layout()
            return
        for path in paths:
            self.views.revalidate(path)

    def _rollback(self, project_id) -> bool:
        """Delete a just-created parent row, retrying with exponential backoff"""
        delay = self.rollback_backoff
        for attempt in range(1, self.rollback_retries + 1):
            try:
                self.store.delete(PROJECTS, {'id': project_id})
                logger.warning("Rolled back project %s", project_id)
                return True
            except StorageError as e:
                logger.warning("Rollback of project %s failed (attempt %d/%d): %s",
                               project_id, attempt, self.rollback_retries, e.message)
                if attempt < self.rollback_retries:
                    self._sleep(delay)
                    delay *= 2
        logger.error("Orphaned project %s left after failed rollback; needs manual cleanup",
                     project_id)
        return False

    def create_project(self, actor: Actor, draft: ProjectDraft) -> ActionResult:
        if not actor.is_authenticated:
            return ActionResult.fail(ErrorKind.UNAUTHORIZED, 'Unauthorized')

        row = draft.metadata()
        row['is_published'] = True
        row['author_id'] = actor.id
        try:
            created = self.store.insert(PROJECTS, row)
        except StorageError as e:
            logger.error("Project insert failed: %s", e.message)
            return ActionResult.fail(ErrorKind.STORAGE_WRITE_FAILED,
                                     f'Failed to create project: {e.message}')
        if not created:
            return ActionResult.fail(ErrorKind.STORAGE_WRITE_FAILED,
                                     'Failed to create project: no row returned')
        project_id = created[0]['id']

        children = (
            (STEPS, draft.step_rows(project_id)),
            (ATTACHMENTS, draft.attachment_rows(project_id)),
        )
        for table, rows in children:
            if not rows:
                continue
            try:
                self.store.insert(table, rows)
            except StorageError as e:
                logger.error("%s insert failed for project %s: %s", table, project_id, e.message)
                if self._rollback(project_id):
                    return ActionResult.fail(ErrorKind.ROLLED_BACK,
                                             f'Project creation failed (rolled back): {e.message}')
                # the parent row is still stored
                return ActionResult.fail(ErrorKind.STORAGE_WRITE_FAILED,
                                         f'Project creation failed: {e.message}', project_id=project_id)

        self._revalidate(cache.ADMIN_LISTING, cache.PUBLIC_LISTING)
        return ActionResult.ok('Project created successfully!', project_id=project_id)

    def update_project(self, actor: Actor, project_id, draft: ProjectDraft) -> ActionResult:
        if not actor.is_authenticated:
            return ActionResult.fail(ErrorKind.UNAUTHORIZED, 'Unauthorized')
        if not project_id:
            return ActionResult.fail(ErrorKind.VALIDATION_FAILED, 'Project ID missing')

        values = draft.metadata()
        values['updated_at'] = datetime.now(timezone.utc).isoformat()
        try:
            updated = self.store.update(PROJECTS, values, self._ownership_match(actor, project_id))
        except StorageError as e:
            logger.error("Project %s update failed: %s", project_id, e.message)
            return ActionResult.fail(ErrorKind.STORAGE_WRITE_FAILED,
                                     f'Failed to update project: {e.message}')
        if not updated:
            # Not owned or not there; reported like success, children untouched.
            logger.warning("Update of project %s by %s matched no rows", project_id, actor.id)
            return ActionResult.ok('Project updated successfully!', project_id=project_id,
                                   rows_matched=0)

        for table in (STEPS, ATTACHMENTS):
            try:
                self.store.delete(table, {'project_id': project_id})
            except StorageError as e:
                logger.error("Failed to delete old %s for project %s: %s",
                             table, project_id, e.message)
                return ActionResult.fail(ErrorKind.STORAGE_WRITE_FAILED,
                                         f'Failed to update {table}.')

        children = (
            (STEPS, draft.step_rows(project_id)),
            (ATTACHMENTS, draft.attachment_rows(project_id)),
        )
        for table, rows in children:
            if not rows:
                continue
            try:
                self.store.insert(table, rows)
            except StorageError as e:
                logger.error("%s insert failed for project %s: %s", table, project_id, e.message)
                return ActionResult.fail(ErrorKind.STORAGE_WRITE_FAILED,
                                         f'{table} update failed: {e.message}')

        self._revalidate(cache.ADMIN_LISTING, cache.PUBLIC_LISTING,
                         cache.project_detail(draft.slug))
        return ActionResult.ok('Project updated successfully!', project_id=project_id,
                               rows_matched=len(updated))

    def delete_project(self, actor: Actor, project_id) -> ActionResult:
        if not actor.is_authenticated:
            return ActionResult.fail(ErrorKind.UNAUTHORIZED, 'Unauthorized')

        try:
            deleted = self.store.delete(PROJECTS, self._ownership_match(actor, project_id))
        except StorageError as e:
            logger.error("Project %s delete failed: %s", project_id, e.message)
            return ActionResult.fail(ErrorKind.STORAGE_WRITE_FAILED, e.message)
        if not deleted:
            logger.warning("Delete of project %s by %s matched no rows", project_id, actor.id)

        self._revalidate(layout=True)
        return ActionResult.ok('Project deleted.', project_id=project_id,
                               rows_matched=len(deleted))
