"""Assemble the Match Wrapped card script for one viewer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from wrapped.gates import (
    GateState,
    UnlockSchedule,
    compute_gate_state,
    load_unlock_schedule,
    parse_timestamp,
    to_utc_iso,
)
from wrapped.lookup import (
    DEFAULT_MATCH_NAME,
    DEFAULT_VIEWER_NAME,
    MatchRow,
    Participant,
    fallback_participant,
    find_row_by_handle,
    normalize_handle,
    participant_from_row,
    resolve_match,
)
from wrapped.rows import load_match_rows

DEFAULT_DISPLAY_TIMEZONE = "America/New_York"
TIMEZONE_LABELS = {"America/New_York": "ET"}

BASE_OVERLAP_SCORE = 40
OVERLAP_SCORE_PER_HOBBY = 14
MAX_OVERLAP_SCORE = 98

THEME = {
    "palette": "neon-noir",
    "stickers": ["blobs", "sparkles", "pins"],
    "typeScale": "wrapped-bold",
}

RowsLoader = Callable[[], Sequence[MatchRow]]


@dataclass(frozen=True)
class Gate:
    key: str
    unlock_at: datetime
    unlock_iso: str

    def to_dict(self) -> dict:
        return {"unlockAt": self.unlock_iso, "key": self.key}


@dataclass(frozen=True)
class Card:
    """One slide. ``locked`` is what shows until the gate opens; ungated cards are always unlocked."""

    id: str
    type: str
    unlocked: Dict[str, Any]
    gate: Optional[Gate] = None
    locked: Optional[Dict[str, Any]] = None

    def is_unlocked(self, gate_state: GateState) -> bool:
        if self.gate is None:
            return True
        return gate_state.is_unlocked(self.gate.key)

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {}
        if self.locked is not None:
            data["locked"] = self.locked
        data["unlocked"] = self.unlocked
        payload: Dict[str, Any] = {"id": self.id, "type": self.type}
        if self.gate is not None:
            payload["gate"] = self.gate.to_dict()
        payload["data"] = data
        return payload


@dataclass(frozen=True)
class WrappedScript:
    party_id: str
    viewer_name: str
    now: datetime
    schedule: UnlockSchedule
    gate_state: GateState
    cards: List[Card]
    theme: Dict[str, Any] = field(default_factory=lambda: dict(THEME))

    def to_dict(self) -> dict:
        return {
            "meta": {
                "partyId": self.party_id,
                "viewerName": self.viewer_name,
                "now": to_utc_iso(self.now),
                "schedule": self.schedule.to_dict(),
                "gateState": self.gate_state.to_dict(),
            },
            "theme": {
                "palette": self.theme["palette"],
                "stickers": list(self.theme["stickers"]),
                "typeScale": self.theme["typeScale"],
            },
            "cards": [card.to_dict() for card in self.cards],
        }


def split_hobbies(raw: Optional[str]) -> List[str]:
    return [value.strip() for value in (raw or "").split(",") if value.strip()]


def overlap_score(viewer_hobbies: Optional[str], match_hobbies: Optional[str]) -> int:
    """40 plus 14 per hobby both people listed, capped at 98."""
    viewer_set = {value.lower() for value in split_hobbies(viewer_hobbies)}
    shared = sum(1 for value in split_hobbies(match_hobbies) if value.lower() in viewer_set)
    return min(MAX_OVERLAP_SCORE, BASE_OVERLAP_SCORE + shared * OVERLAP_SCORE_PER_HOBBY)


def unlock_time_label(unlock_at: datetime, display_timezone: str = DEFAULT_DISPLAY_TIMEZONE) -> str:
    local = unlock_at.astimezone(ZoneInfo(display_timezone))
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    suffix = TIMEZONE_LABELS.get(display_timezone) or local.tzname() or ""
    return f"{hour}:{local.minute:02d} {meridiem} {suffix}".rstrip()


def resolve_participants(rows: Sequence[MatchRow], viewer_handle: str) -> tuple[Participant, Participant]:
    viewer_row = find_row_by_handle(rows, viewer_handle)
    if viewer_row is None:
        return fallback_participant(DEFAULT_VIEWER_NAME), fallback_participant(DEFAULT_MATCH_NAME)
    return participant_from_row(viewer_row), resolve_match(viewer_row, rows)


def build_script(
    party_id: str,
    viewer_handle: Optional[str],
    now: Optional[datetime] = None,
    *,
    schedule: Optional[UnlockSchedule] = None,
    rows_loader: RowsLoader = load_match_rows,
    display_timezone: str = DEFAULT_DISPLAY_TIMEZONE,
) -> WrappedScript:
    """Build the full card script for ``viewer_handle`` as of ``now`` (wall clock when omitted)."""
    handle = normalize_handle(viewer_handle)
    rows = rows_loader()
    viewer, match = resolve_participants(rows, handle)

    snapshot = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    schedule = schedule or load_unlock_schedule()
    gate_state = compute_gate_state(snapshot, schedule)
    score = overlap_score(viewer.hobbies, match.hobbies)

    return WrappedScript(
        party_id=party_id,
        viewer_name=viewer.name,
        now=snapshot,
        schedule=schedule,
        gate_state=gate_state,
        cards=_build_cards(viewer, match, score, schedule, display_timezone),
    )


def _locked_payload(label: str, prefix: str, key: str, schedule: UnlockSchedule, display_timezone: str) -> dict:
    return {
        "label": label,
        "value": f"{prefix} {unlock_time_label(schedule.unlock_at(key), display_timezone)}",
        "countdownTo": schedule.iso(key),
    }


def _gated(key: str, schedule: UnlockSchedule) -> Gate:
    return Gate(key=key, unlock_at=schedule.unlock_at(key), unlock_iso=schedule.iso(key))


def _build_cards(
    viewer: Participant,
    match: Participant,
    score: int,
    schedule: UnlockSchedule,
    display_timezone: str,
) -> List[Card]:
    tz = display_timezone
    return [
        Card(
            id="vibe-snapshot",
            type="orbitalGravityIntro",
            unlocked={
                "title": "Your vibe snapshot",
                "subtitle": "This is your energy profile right now.",
                "mbti": viewer.mbti or "N/A",
                "idealFriday": viewer.ideal_friday or "N/A",
                "hobbies": viewer.hobbies or "N/A",
            },
        ),
        Card(
            id="match-loading",
            type="cipherCascade",
            unlocked={
                "title": "Your match is loading...",
                "subtitle": "You are matched with someone special. Your reveals unlock live.",
            },
        ),
        Card(
            id="major-minor",
            type="blueprintDraftReveal",
            gate=_gated("majorMinor", schedule),
            locked=_locked_payload("Major/Minor", "Unlocks at", "majorMinor", schedule, tz),
            unlocked={"label": "Major/Minor", "value": match.major_minor or "Undisclosed"},
        ),
        Card(
            id="hometown",
            type="topographicMorph",
            gate=_gated("hometown", schedule),
            locked=_locked_payload("Hometown", "Unlocks at", "hometown", schedule, tz),
            unlocked={"label": "Hometown", "value": match.hometown or "Undisclosed"},
        ),
        Card(
            id="hobbies",
            type="constellationBuild",
            gate=_gated("hobbies", schedule),
            locked=_locked_payload("Hobbies", "Unlocks at", "hobbies", schedule, tz),
            unlocked={
                "label": "Hobbies",
                "value": match.hobbies or "Undisclosed",
                "tags": split_hobbies(match.hobbies),
            },
        ),
        Card(
            id="compat-spectrum",
            type="spectrumSplit",
            unlocked={
                "title": "Your compatibility spectrum",
                "subtitle": "This is your non-identifying overlap signal.",
                "compatibilityScore": score,
                "axes": ["Lifestyle", "Interests", "Energy"],
            },
        ),
        Card(
            id="green-reactor",
            type="reactorSim",
            gate=_gated("full", schedule),
            locked=_locked_payload("MBTI Personality Reactor", "Unlocks at", "full", schedule, tz),
            unlocked={
                "title": "Your MBTI personality reactor",
                "mbtiPersonality": match.mbti or "N/A",
            },
        ),
        Card(
            id="pre-reveal-transition",
            type="neonFlashTransition",
            unlocked={
                "title": "Your final reveal is next",
                "subtitle": "Take a breath. Swipe up when you're ready.",
            },
        ),
        Card(
            id="full-reveal",
            type="panelCurtainReveal",
            gate=_gated("full", schedule),
            locked=_locked_payload("Full Reveal", "Full reveal at", "full", schedule, tz),
            unlocked={
                "title": "This is your match",
                "name": match.name or DEFAULT_MATCH_NAME,
                "profile": [
                    {"label": "Age", "value": match.age or "N/A"},
                    {"label": "Gender", "value": match.gender or "N/A"},
                    {"label": "Preferences", "value": match.preferences or "N/A"},
                    {"label": "Major/Minor", "value": match.major_minor or "Undisclosed"},
                    {"label": "Hometown", "value": match.hometown or "Undisclosed"},
                    {"label": "Hobbies", "value": match.hobbies or "Undisclosed"},
                    {"label": "Organizations", "value": match.organizations or "N/A"},
                    {"label": "MBTI Personality", "value": match.mbti or "N/A"},
                    {"label": "Compatibility Score", "value": f"{score}%"},
                    {"label": "Ideal Date", "value": match.ideal_date or "N/A"},
                    {"label": "Ideal Type Archetype", "value": match.ideal_type_archetype or "N/A"},
                ],
            },
        ),
    ]
