"""Supabase client + logging helpers shared by the Match Wrapped services."""

from __future__ import annotations

from flask import current_app, has_app_context


def get_supabase_client():
    """The app's Supabase client, or None outside a request or when Supabase is switched off."""
    if not has_app_context():
        return None
    if not current_app.config.get("USE_SUPABASE"):
        return None
    client = current_app.config.get("SUPABASE_CLIENT")
    return client if client else None


def log_warning(message: str, *args) -> None:
    if not has_app_context():
        return
    logger = getattr(current_app, "logger", None)
    if logger:
        logger.warning(message, *args)
