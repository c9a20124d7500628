"""JSON endpoints polled by the Match Wrapped modal on the ticket page."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from flask import Blueprint, current_app, jsonify, request

from wrapped.gates import compute_gate_state, load_unlock_schedule, to_utc_iso
from wrapped.rows import has_wrapped_match, load_match_rows
from wrapped.script import DEFAULT_DISPLAY_TIMEZONE, build_script
from wrapped.tickets import find_ticket_holder

DEFAULT_PARTY_SLUG = "meetcut-x-tsa-x-ksa-x-tcl"

Clock = Callable[[], datetime]


def _wall_clock() -> datetime:
    return datetime.now(tz=timezone.utc)


def create_wrapped_blueprint(clock: Optional[Clock] = None) -> Blueprint:
    """Factory so tests (and replays) can inject a fixed clock."""

    bp = Blueprint("wrapped", __name__)
    now_provider = clock or _wall_clock

    def _enabled_party() -> str:
        return current_app.config.get("WRAPPED_PARTY_SLUG") or DEFAULT_PARTY_SLUG

    def _check_party(party_id: Optional[str]):
        if not party_id:
            return jsonify({"error": "Missing partyId"}), 400
        if party_id != _enabled_party():
            return jsonify({"error": "Wrapped is disabled for this party"}), 403
        return None

    def _viewer_handle_from_request(party_id: str):
        ticket_token = (request.args.get("ticketToken") or "").strip()
        if ticket_token:
            holder = find_ticket_holder(party_id, ticket_token)
            if not holder:
                return None, (jsonify({"error": "Ticket not found"}), 404)
            return holder["andrew_id"], None
        handle = request.args.get("viewerHandle") or request.args.get("viewerAndrewID") or ""
        return handle, None

    @bp.get("/wrapped-script")
    def wrapped_script():
        party_id = (request.args.get("partyId") or "").strip()
        rejection = _check_party(party_id)
        if rejection:
            return rejection

        try:
            viewer_handle, rejection = _viewer_handle_from_request(party_id)
            if rejection:
                return rejection
            script = build_script(
                party_id,
                viewer_handle,
                now_provider(),
                schedule=load_unlock_schedule(),
                rows_loader=load_match_rows,
                display_timezone=current_app.config.get("WRAPPED_DISPLAY_TIMEZONE")
                or DEFAULT_DISPLAY_TIMEZONE,
            )
        except Exception:
            current_app.logger.exception("Failed to build wrapped script for %s", party_id)
            return jsonify({"error": "Failed to build wrapped script"}), 500

        response = jsonify(script.to_dict())
        response.headers["Cache-Control"] = "no-store"
        return response

    @bp.get("/wrapped-schedule")
    def wrapped_schedule():
        party_id = (request.args.get("partyId") or "").strip()
        rejection = _check_party(party_id)
        if rejection:
            return rejection

        try:
            schedule = load_unlock_schedule()
        except Exception:
            current_app.logger.exception("Failed to load wrapped schedule")
            return jsonify({"error": "Failed to load wrapped schedule"}), 500

        now = now_provider()
        response = jsonify(
            {
                "partyId": party_id,
                "now": to_utc_iso(now),
                "schedule": schedule.to_dict(),
                "gateState": compute_gate_state(now, schedule).to_dict(),
            }
        )
        response.headers["Cache-Control"] = "no-store"
        return response

    @bp.get("/wrapped-available")
    def wrapped_available():
        rejection = _check_party((request.args.get("partyId") or "").strip())
        if rejection:
            return rejection

        viewer_handle = request.args.get("viewerHandle") or request.args.get("viewerAndrewID")
        return jsonify({"available": has_wrapped_match(viewer_handle)})

    return bp
