"""Supabase client for the persistent record store."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client(url: str | None = None, key: str | None = None) -> Client | None:
    """Return a cached client for the given project, or None when credentials are missing.

    Creating the client does not contact the server; the first query is what
    surfaces network or permission errors.
    """
    url = url or settings.supabase_url
    key = key or settings.supabase_key
    if not url or not key:
        logger.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(url, key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None


# Expected tables (snake_case columns mirror the domain dataclasses):
#
#   users(id serial, username text unique, password text)
#   load_requests(id serial, load_id text unique, customer_name text, ...,
#                 status text default 'pending', created_at timestamptz,
#                 approved_at timestamptz, notification_sent bool)
#   call_logs(id serial, phone_number text, duration int, status text,
#             transcription text, audio_file_url text, call_sid text,
#             load_request_id int references load_requests(id),
#             created_at timestamptz)
