"""Participant lookup across match-table rows whose headers drifted between form exports."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

MatchRow = Mapping[str, Any]

# Ordered header spellings per semantic field; the first non-empty value wins.
VIEWER_HANDLE_KEYS = (
    "harvested_andrewIDs",
    "harvested_andrewids",
    "harvested_andrew_id",
    "andrew_id",
    "andrewID",
    "andrewid",
)
MATCHED_HANDLE_KEYS = (
    "matched_andrewID",
    "matched_andrewid",
    "matched_andrew_id",
    "match_andrew_id",
)
MATCHED_NAME_KEYS = ("match", "Match")
NAME_KEYS = ("name", "Name")
EMAIL_KEYS = ("email", "Email Address")

FIELD_ALIASES: Dict[str, Sequence[str]] = {
    "name": NAME_KEYS,
    "age": ("age", "Age"),
    "gender": ("gender", "Gender"),
    "preferences": ("preferred_gender", "preferences", "Preferences"),
    "major_minor": ("major", "major_minor", "Major/Minor"),
    "hometown": ("hometown", "Hometown"),
    "hobbies": ("hobbies", "Hobbies!!"),
    "organizations": (
        "organizations",
        "Organizations on campus",
        "organizations_on_campus",
    ),
    "mbti": ("mbti", "MBTI "),
    "ideal_friday": ("ideal_friday", "What's your ideal Friday night?"),
    "green_flag_like": (
        "ideal_flags",
        "green_flag_like",
        "What’s a green flag that immediately makes you like someone?",
    ),
    "biggest_green_flag": (
        "personal_qualities",
        "biggest_green_flag",
        "What do you think is your biggest green flag / favorite thing about yourself?",
    ),
    "ideal_date": ("ideal_date", "What's your ideal date? "),
    "ideal_type_archetype": (
        "ideal_type",
        "ideal_type_archetype",
        'Describe your ideal type in a 1 sentence archetype\n"theatre kid with mustache who is silly and goofy and will make me laugh"',
    ),
}

_HANDLE_SPLIT = re.compile(r"[\s,;]+")
_DOMAIN_SUFFIX = re.compile(r"@[^@]*$")


@dataclass(frozen=True)
class Participant:
    """One person's answers as shown on the wrapped cards."""

    andrew_id: str
    name: str
    age: str = "N/A"
    gender: str = "N/A"
    preferences: str = "N/A"
    major_minor: str = "Undisclosed"
    hometown: str = "Undisclosed"
    hobbies: str = "Undisclosed"
    organizations: str = "Undisclosed"
    mbti: str = "N/A"
    ideal_friday: str = "N/A"
    green_flag_like: str = "N/A"
    biggest_green_flag: str = "N/A"
    ideal_date: str = "N/A"
    ideal_type_archetype: str = "N/A"
    match: str = ""


UNKNOWN_PARTICIPANT = Participant(andrew_id="", name="")
DEFAULT_VIEWER_NAME = "You"
DEFAULT_MATCH_NAME = "Your match"


def fallback_participant(name: str) -> Participant:
    """Placeholder record for someone we could not find in the match table."""
    return replace(UNKNOWN_PARTICIPANT, name=name)


def normalize_handle(raw: Optional[str]) -> str:
    return _DOMAIN_SUFFIX.sub("", (raw or "").strip().lower())


def normalize_display_name(raw: Optional[str]) -> str:
    return (raw or "").strip().lower()


def resolve_field(row: MatchRow, candidate_keys: Iterable[str]) -> str:
    for key in candidate_keys:
        value = row.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def handle_candidates(row: MatchRow) -> List[str]:
    """Every handle a row answers to: its id field(s) plus the local part of its email."""
    candidates: List[str] = []
    id_field = resolve_field(row, VIEWER_HANDLE_KEYS)
    if id_field:
        candidates.extend(
            handle
            for handle in (normalize_handle(part) for part in _HANDLE_SPLIT.split(id_field))
            if handle
        )

    email = resolve_field(row, EMAIL_KEYS)
    if "@" in email:
        local_part = normalize_handle(email.split("@", 1)[0])
        if local_part:
            candidates.append(local_part)

    return list(dict.fromkeys(candidates))


def find_row_by_handle(rows: Sequence[MatchRow], handle: Optional[str]) -> Optional[MatchRow]:
    normalized = normalize_handle(handle)
    if not normalized:
        return None
    for row in rows:
        if normalized in handle_candidates(row):
            return row
    return None


def find_row_by_name(rows: Sequence[MatchRow], name: Optional[str]) -> Optional[MatchRow]:
    normalized = normalize_display_name(name)
    if not normalized:
        return None
    for row in rows:
        if normalize_display_name(resolve_field(row, NAME_KEYS)) == normalized:
            return row
    return None


def resolve_match_row(viewer_row: MatchRow, rows: Sequence[MatchRow]) -> Optional[MatchRow]:
    """Locate the viewer's match by recorded handle, falling back to the recorded name."""
    matched_handle = normalize_handle(resolve_field(viewer_row, MATCHED_HANDLE_KEYS))
    if matched_handle:
        row = find_row_by_handle(rows, matched_handle)
        if row is not None:
            return row
    return find_row_by_name(rows, resolve_field(viewer_row, MATCHED_NAME_KEYS))


def resolve_match(viewer_row: MatchRow, rows: Sequence[MatchRow]) -> Participant:
    """Like ``resolve_match_row`` but always returns something renderable."""
    match_row = resolve_match_row(viewer_row, rows)
    if match_row is not None:
        return participant_from_row(match_row)

    matched_handle = normalize_handle(resolve_field(viewer_row, MATCHED_HANDLE_KEYS))
    if matched_handle:
        return replace(fallback_participant(matched_handle), andrew_id=matched_handle)
    matched_name = resolve_field(viewer_row, MATCHED_NAME_KEYS)
    if matched_name:
        return fallback_participant(matched_name)
    return fallback_participant(DEFAULT_MATCH_NAME)


def participant_from_row(row: MatchRow) -> Participant:
    candidates = handle_candidates(row)
    fields = {field: resolve_field(row, keys) for field, keys in FIELD_ALIASES.items()}
    return Participant(
        andrew_id=candidates[0] if candidates else "",
        match=resolve_field(row, MATCHED_HANDLE_KEYS) or resolve_field(row, MATCHED_NAME_KEYS),
        **fields,
    )
