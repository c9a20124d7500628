"""Shared test fixtures for the Match Wrapped app."""

from types import SimpleNamespace

import pytest
from dateutil import parser as date_parser

from app import create_app
from wrapped.gates import UnlockSchedule

PARTY_SLUG = "meetcut-x-tsa-x-ksa-x-tcl"
FIXED_NOW = date_parser.isoparse("2026-02-11T21:15:00-05:00")


class FakeQuery:
    """Enough of the supabase-py query builder for select/eq/limit/execute chains."""

    def __init__(self, rows, error=None):
        self._rows = list(rows)
        self._error = error
        self._filters = []
        self._limit = None

    def select(self, *_args, **_kwargs):
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self):
        if self._error is not None:
            raise self._error
        rows = [row for row in self._rows if all(row.get(col) == val for col, val in self._filters)]
        if self._limit is not None:
            rows = rows[: self._limit]
        return SimpleNamespace(data=rows)


class FakeSupabase:
    def __init__(self, tables=None, error=None):
        self.tables = tables or {}
        self.error = error
        self.requested = []

    def table(self, name):
        self.requested.append(name)
        return FakeQuery(self.tables.get(name, []), self.error)


@pytest.fixture()
def schedule():
    return UnlockSchedule(
        major_minor_at=date_parser.isoparse("2026-02-11T21:00:00-05:00"),
        hometown_at=date_parser.isoparse("2026-02-11T21:30:00-05:00"),
        hobbies_at=date_parser.isoparse("2026-02-11T22:00:00-05:00"),
        full_at=date_parser.isoparse("2026-02-11T23:00:00-05:00"),
    )


@pytest.fixture()
def match_rows():
    """Rows written by three different form exports, so header spellings differ."""
    return [
        {
            "harvested_andrewIDs": "jdoe",
            "name": "Jane Doe",
            "matched_andrewID": "asmith@andrew.cmu.edu",
            "hobbies": "reading, hiking, chess",
            "major": "Computer Science",
            "hometown": "Pittsburgh, PA",
            "mbti": "INTJ",
            "ideal_friday": "Board games with friends",
        },
        {
            "andrew_id": "ASmith",
            "Name": "Alex Smith",
            "Age": "20",
            "Gender": "Nonbinary",
            "Preferences": "Everyone",
            "Major/Minor": "Design / HCI",
            "Hometown": "Austin, TX",
            "Hobbies!!": "Hiking, chess, painting",
            "MBTI ": "ENFP",
            "What's your ideal date? ": "Night market crawl",
            "match": "Jane Doe",
        },
        {
            "email": "bkim@andrew.cmu.edu",
            "name": "Bo Kim",
            "match": "  alex SMITH ",
            "hobbies": "cooking",
        },
        {
            "harvested_andrewIDs": "cdoe",
            "name": "Cam Doe",
            "matched_andrewID": "ghost",
        },
        {
            "harvested_andrewIDs": "nomatch",
            "name": "Nora Lee",
        },
    ]


@pytest.fixture()
def fake_supabase(match_rows):
    return FakeSupabase(tables={"test_matches": match_rows})


@pytest.fixture()
def app(fake_supabase):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "USE_SUPABASE": True,
            "SUPABASE_CLIENT": fake_supabase,
            "WRAPPED_PARTY_SLUG": PARTY_SLUG,
        },
        clock=lambda: FIXED_NOW,
    )
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()