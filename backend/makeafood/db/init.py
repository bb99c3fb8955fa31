# makeafood/db/init.py
# Supabase client construction
# Built once by create_app and handed to SupabaseStore; no module-level client.

from __future__ import annotations

from supabase import Client, create_client

from makeafood.core.config import ServiceConfig


def init_db(cfg: ServiceConfig) -> Client:
    # server side: service role key (bypasses RLS for session/saved writes)
    return create_client(cfg.base_url, cfg.service_role_key or cfg.api_key)
