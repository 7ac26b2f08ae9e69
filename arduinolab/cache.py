"""
In-process cache of rendered read views, keyed by view path.

Read routes store their JSON payload under the path they serve; writers
call ``revalidate`` after a successful change so the next read rebuilds it.
"""
import logging
import threading

logger = logging.getLogger(__name__)

PUBLIC_LISTING = '/projects'
ADMIN_LISTING = '/admin'
LAYOUT = '/'


def project_detail(slug):
    return f'/projects/{slug}'


class ViewCache:
    def __init__(self):
        self._views = {}
        self._lock = threading.Lock()

    def get(self, path):
        with self._lock:
            return self._views.get(path)

    def set(self, path, payload):
        with self._lock:
            self._views[path] = payload

    def get_or_build(self, path, build):
        payload = self.get(path)
        if payload is None:
            payload = build()
            self.set(path, payload)
        return payload

    def revalidate(self, path):
        """Drop one view and anything nested under it (query variants included)"""
        with self._lock:
            stale = [key for key in self._views
                     if key == path or key.startswith(path + '?')]
            for key in stale:
                del self._views[key]
        logger.debug("Revalidated %s (%d entries)", path, len(stale))

    def revalidate_layout(self):
        with self._lock:
            self._views.clear()
        logger.debug("Revalidated layout")

    def __contains__(self, path):
        with self._lock:
            return path in self._views
