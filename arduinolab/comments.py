"""
Comments on projects and anonymous likes.

Likes are keyed by a visitor id the browser generates and keeps; it only
deduplicates likes and is never treated as an identity.
"""
import logging

from arduinolab.rendering import render_to_dicts
from arduinolab.results import ActionResult, ErrorKind
from arduinolab.storage import StorageError

logger = logging.getLogger(__name__)

COMMENTS = 'comments'
LIKES = 'comment_likes'


def add_comment(store, actor, project_id, content):
    if not actor.is_authenticated:
        return ActionResult.fail(ErrorKind.UNAUTHORIZED, 'You must be logged in to comment.')
    if not project_id or not isinstance(content, str) or not content.strip():
        return ActionResult.fail(ErrorKind.VALIDATION_FAILED, 'Comment cannot be empty.')

    try:
        rows = store.insert(COMMENTS, {
            'project_id': project_id,
            'user_id': actor.id,
            'content': content.strip(),
        })
    except StorageError as e:
        logger.error("Add comment error: %s", e.message)
        return ActionResult.fail(ErrorKind.STORAGE_WRITE_FAILED, 'Could not post your comment.')

    comment_id = rows[0]['id'] if rows else None
    return ActionResult.ok('Comment added.', data={'comment_id': comment_id})


def delete_comment(store, actor, comment_id):
    if not actor.is_authenticated:
        return ActionResult.fail(ErrorKind.UNAUTHORIZED, 'Unauthorized')

    match = {'id': comment_id}
    if not actor.is_admin:
        match['user_id'] = actor.id
    try:
        deleted = store.delete(COMMENTS, match)
    except StorageError as e:
        logger.error("Delete comment error: %s", e.message)
        return ActionResult.fail(ErrorKind.STORAGE_WRITE_FAILED, e.message)
    return ActionResult.ok('Comment deleted.', rows_matched=len(deleted))


def toggle_like(store, comment_id, visitor_id):
    """Like the comment for this visitor, or remove the like if present"""
    if not isinstance(visitor_id, str) or not visitor_id.strip():
        return ActionResult.fail(ErrorKind.VALIDATION_FAILED, 'Visitor id is required.')

    try:
        existing = store.select(LIKES, {'comment_id': comment_id, 'visitor_id': visitor_id},
                                columns='id', limit=1)
        if existing:
            store.delete(LIKES, {'id': existing[0]['id']})
            liked = False
        else:
            store.insert(LIKES, {'comment_id': comment_id, 'visitor_id': visitor_id})
            liked = True
        count = len(store.select(LIKES, {'comment_id': comment_id}, columns='id'))
    except StorageError as e:
        logger.error("Toggle like error: %s", e.message)
        return ActionResult.fail(ErrorKind.STORAGE_WRITE_FAILED, e.message)
    return ActionResult.ok(data={'liked': liked, 'like_count': count})


def _like_count(comment):
    likes = comment.pop('comment_likes', None)
    # PostgREST returns the aggregate as [{"count": n}]
    if isinstance(likes, list) and likes and 'count' in likes[0]:
        return likes[0]['count']
    return len(likes or [])


def get_comments(store, project_id):
    """Comments of a project, newest first, each with like count and rendered nodes"""
    try:
        comments = store.select(
            COMMENTS,
            {'project_id': project_id},
            columns='id,content,created_at,user_id,profiles(full_name,avatar_url),comment_likes(count)',
            order='created_at',
            desc=True,
        )
    except StorageError as e:
        logger.error("Fetch comments error: %s", e.message)
        return []

    result = []
    for comment in comments:
        comment = dict(comment)
        comment['like_count'] = _like_count(comment)
        comment['nodes'] = render_to_dicts(comment.get('content') or '')
        result.append(comment)
    return result


def get_recent_comments(store, limit=10):
    try:
        return store.select(
            COMMENTS,
            columns='id,content,created_at,project_id,projects(title,slug),profiles(full_name)',
            order='created_at',
            desc=True,
            limit=limit,
        )
    except StorageError as e:
        logger.error("Fetch recent comments error: %s", e.message)
        return []
