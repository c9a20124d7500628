"""Map a presented ticket token to the ticket holder's handle."""

from __future__ import annotations

from typing import Any, Dict, Optional

from extensions import db
from models import Registration
from wrapped.clients import get_supabase_client, log_warning
from wrapped.lookup import normalize_handle


def registration_table(party_slug: str) -> str:
    """Per-party registrations live in ``registrations_<slug>`` on Supabase."""
    return f"registrations_{party_slug.replace('-', '_')}"


def find_ticket_holder(party_slug: str, ticket_token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the confirmed ticket holder for ``ticket_token`` or None."""
    token = (ticket_token or "").strip()
    if not token:
        return None

    client = get_supabase_client()
    if client:
        try:
            resp = (
                client.table(registration_table(party_slug))
                .select("name, andrewID, status")
                .eq("ticket_token", token)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            log_warning("Wrapped ticket lookup failed for %s: %s", party_slug, exc)
            raise
        rows = resp.data or []
        if not rows or rows[0].get("status") != Registration.STATUS_CONFIRMED:
            return None
        return {
            "name": rows[0].get("name") or "",
            "andrew_id": normalize_handle(rows[0].get("andrewID")),
        }

    registration = db.session.execute(
        db.select(Registration).filter_by(party_slug=party_slug, ticket_token=token)
    ).scalar_one_or_none()
    if registration is None or not registration.has_ticket:
        return None
    holder = registration.to_ticket_holder()
    holder["andrew_id"] = normalize_handle(holder["andrew_id"])
    return holder

