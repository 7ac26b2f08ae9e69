from supabase import create_client, Client
from flask import current_app, g

from arduinolab.storage import SupabaseStore


def get_supabase() -> Client:
    """Get Supabase client for current request"""
    if 'supabase' not in g:
        g.supabase = create_client(
            current_app.config['SUPABASE_URL'],
            current_app.config['SUPABASE_KEY']
        )
    return g.supabase


def get_admin_supabase() -> Client:
    """Client authenticated with the service role key (user management)"""
    key = current_app.config.get('SUPABASE_SERVICE_ROLE_KEY')
    if not key:
        raise ValueError("SUPABASE_SERVICE_ROLE_KEY is not configured")
    return create_client(current_app.config['SUPABASE_URL'], key)


def get_store():
    """Row store for the current request.

    An app created with an explicit store (tests, scripts) always uses it.
    """
    store = current_app.extensions.get('arduinolab.store')
    if store is not None:
        return store
    if 'store' not in g:
        g.store = SupabaseStore(get_supabase())
    return g.store
