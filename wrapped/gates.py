"""Unlock schedule + gate state for Match Wrapped (edit wrapped/config/unlock_schedule.json to move the reveal)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Tuple

from dateutil import parser as date_parser

from wrapped.errors import ScheduleConfigError

BUNDLED_SCHEDULE_PATH = Path(__file__).resolve().parent / "config" / "unlock_schedule.json"
GATE_KEYS = ("majorMinor", "hometown", "hobbies", "full")
_SCHEDULE_CACHE: Dict[Tuple[Path, float], "UnlockSchedule"] = {}


@dataclass(frozen=True)
class UnlockSchedule:
    """The four reveal timestamps, non-decreasing by convention only.

    ``source`` keeps the configured strings so they go back out on the wire
    exactly as written.
    """

    major_minor_at: datetime
    hometown_at: datetime
    hobbies_at: datetime
    full_at: datetime
    source: Optional[Dict[str, str]] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        for name in ("major_minor_at", "hometown_at", "hobbies_at", "full_at"):
            object.__setattr__(self, name, _as_aware(getattr(self, name)))

    def unlock_at(self, key: str) -> datetime:
        return {
            "majorMinor": self.major_minor_at,
            "hometown": self.hometown_at,
            "hobbies": self.hobbies_at,
            "full": self.full_at,
        }[key]

    def iso(self, key: str) -> str:
        if self.source and key in self.source:
            return self.source[key]
        return to_iso(self.unlock_at(key))

    def to_dict(self) -> dict:
        return {f"{key}At": self.iso(key) for key in GATE_KEYS}

    @classmethod
    def from_dict(cls, payload: dict) -> "UnlockSchedule":
        try:
            raw = {key: str(payload[f"{key}At"]).strip() for key in GATE_KEYS}
            return cls(
                major_minor_at=parse_timestamp(raw["majorMinor"]),
                hometown_at=parse_timestamp(raw["hometown"]),
                hobbies_at=parse_timestamp(raw["hobbies"]),
                full_at=parse_timestamp(raw["full"]),
                source=raw,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ScheduleConfigError(f"Unlock schedule is malformed: {exc}") from exc


@dataclass(frozen=True)
class GateState:
    major_minor_unlocked: bool
    hometown_unlocked: bool
    hobbies_unlocked: bool
    full_unlocked: bool
    next_unlock_at: Optional[datetime]
    next_unlock_iso: Optional[str] = None

    def is_unlocked(self, key: str) -> bool:
        return {
            "majorMinor": self.major_minor_unlocked,
            "hometown": self.hometown_unlocked,
            "hobbies": self.hobbies_unlocked,
            "full": self.full_unlocked,
        }[key]

    def to_dict(self) -> dict:
        return {
            "majorMinorUnlocked": self.major_minor_unlocked,
            "hometownUnlocked": self.hometown_unlocked,
            "hobbiesUnlocked": self.hobbies_unlocked,
            "fullUnlocked": self.full_unlocked,
            "nextUnlockAt": self.next_unlock_iso,
        }


def compute_gate_state(now: datetime, schedule: UnlockSchedule) -> GateState:
    """Each gate opens once ``now`` reaches its timestamp; the next unlock is the earliest still ahead."""
    now = _as_aware(now)
    future_keys = [key for key in GATE_KEYS if schedule.unlock_at(key) > now]
    next_key = min(future_keys, key=schedule.unlock_at) if future_keys else None

    return GateState(
        major_minor_unlocked=now >= schedule.major_minor_at,
        hometown_unlocked=now >= schedule.hometown_at,
        hobbies_unlocked=now >= schedule.hobbies_at,
        full_unlocked=now >= schedule.full_at,
        next_unlock_at=schedule.unlock_at(next_key) if next_key else None,
        next_unlock_iso=schedule.iso(next_key) if next_key else None,
    )


def load_unlock_schedule(force_refresh: bool = False) -> UnlockSchedule:
    """Read the schedule named by WRAPPED_SCHEDULE_PATH (or the bundled one), cached per file version."""
    env_override = os.environ.get("WRAPPED_SCHEDULE_PATH")
    config_path = Path(env_override).expanduser() if env_override else BUNDLED_SCHEDULE_PATH
    try:
        cache_key = (config_path, config_path.stat().st_mtime)
    except OSError as exc:
        raise ScheduleConfigError(f"Unlock schedule missing: {config_path}") from exc

    if not force_refresh and cache_key in _SCHEDULE_CACHE:
        return _SCHEDULE_CACHE[cache_key]

    try:
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ScheduleConfigError(f"Unlock schedule is not valid JSON: {exc}") from exc

    schedule = UnlockSchedule.from_dict(payload)
    _SCHEDULE_CACHE.clear()
    _SCHEDULE_CACHE[cache_key] = schedule
    return schedule


def parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return _as_aware(value)
    return _as_aware(date_parser.isoparse(str(value)))


def to_iso(value: datetime) -> str:
    return value.isoformat()


def to_utc_iso(value: datetime) -> str:
    """UTC with milliseconds and a ``Z`` suffix, e.g. ``2026-02-12T02:15:00.000Z``."""
    utc = _as_aware(value).astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _as_aware(value: datetime) -> datetime:
    # Naive timestamps are treated as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
