"""Tests for participant lookup across drifting match-table headers."""

import pytest

from wrapped.lookup import (
    UNKNOWN_PARTICIPANT,
    find_row_by_handle,
    find_row_by_name,
    handle_candidates,
    normalize_display_name,
    normalize_handle,
    participant_from_row,
    resolve_field,
    resolve_match,
    resolve_match_row,
)


class TestNormalize:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("jdoe", "jdoe"),
            ("  JDoe ", "jdoe"),
            ("Jdoe@Example.com", "jdoe"),
            ("jdoe@andrew.cmu.edu", "jdoe"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize_handle(self, raw, expected):
        assert normalize_handle(raw) == expected

    def test_normalize_display_name(self):
        assert normalize_display_name("  Jane DOE ") == "jane doe"
        assert normalize_display_name(None) == ""


class TestResolveField:
    def test_first_non_empty_alias_wins(self):
        row = {"major": "  ", "major_minor": "Physics", "Major/Minor": "Math"}
        assert resolve_field(row, ("major", "major_minor", "Major/Minor")) == "Physics"

    def test_missing_everywhere_is_empty(self):
        assert resolve_field({"other": "x"}, ("major", "Major/Minor")) == ""

    def test_non_string_values_are_stringified(self):
        assert resolve_field({"age": 21}, ("age", "Age")) == "21"
        assert resolve_field({"age": None, "Age": "22"}, ("age", "Age")) == "22"


class TestFindRowByHandle:
    def test_matches_regardless_of_case_and_domain(self, match_rows):
        assert find_row_by_handle(match_rows, "Jdoe@Example.com") is match_rows[0]
        assert find_row_by_handle(match_rows, "jdoe") is match_rows[0]
        assert find_row_by_handle(match_rows, "asmith") is match_rows[1]

    def test_email_local_part_is_a_handle(self, match_rows):
        assert find_row_by_handle(match_rows, "BKIM") is match_rows[2]

    def test_id_field_may_hold_several_handles(self):
        rows = [{"harvested_andrewIDs": "aaa; BBB@andrew.cmu.edu, ccc"}]
        assert handle_candidates(rows[0]) == ["aaa", "bbb", "ccc"]
        assert find_row_by_handle(rows, "bbb") is rows[0]

    def test_first_match_wins(self):
        rows = [{"andrew_id": "dup", "name": "First"}, {"andrew_id": "DUP", "name": "Second"}]
        assert find_row_by_handle(rows, "dup")["name"] == "First"

    def test_empty_handle_finds_nothing(self, match_rows):
        assert find_row_by_handle(match_rows, "") is None
        assert find_row_by_handle(match_rows, "   ") is None

    def test_unknown_handle(self, match_rows):
        assert find_row_by_handle(match_rows, "zzz") is None


class TestResolveMatch:
    def test_by_recorded_handle(self, match_rows):
        assert resolve_match_row(match_rows[0], match_rows) is match_rows[1]

    def test_falls_back_to_recorded_name(self, match_rows):
        assert resolve_match_row(match_rows[1], match_rows) is match_rows[0]
        assert resolve_match_row(match_rows[2], match_rows) is match_rows[1]

    def test_find_row_by_name_ignores_case_and_padding(self, match_rows):
        assert find_row_by_name(match_rows, " ALEX smith") is match_rows[1]
        assert find_row_by_name(match_rows, "") is None

    def test_unresolvable_handle_becomes_stub(self, match_rows):
        match = resolve_match(match_rows[3], match_rows)
        assert match.name == "ghost"
        assert match.andrew_id == "ghost"
        assert match.hometown == "Undisclosed"

    def test_nothing_on_file_uses_default_name(self, match_rows):
        match = resolve_match(match_rows[4], match_rows)
        assert match.name == "Your match"
        assert match.mbti == "N/A"

    def test_unresolvable_name_becomes_stub(self):
        viewer = {"andrew_id": "solo", "match": "Someone Else"}
        match = resolve_match(viewer, [viewer])
        assert match.name == "Someone Else"
        assert match.andrew_id == ""


class TestParticipantFromRow:
    def test_reads_every_alias_family(self, match_rows):
        person = participant_from_row(match_rows[1])
        assert person.andrew_id == "asmith"
        assert person.name == "Alex Smith"
        assert person.major_minor == "Design / HCI"
        assert person.hobbies == "Hiking, chess, painting"
        assert person.mbti == "ENFP"
        assert person.ideal_date == "Night market crawl"
        assert person.match == "Jane Doe"

    def test_missing_fields_are_empty(self, match_rows):
        person = participant_from_row(match_rows[4])
        assert person.hometown == ""
        assert person.match == ""

    def test_unknown_participant_is_shared(self):
        assert UNKNOWN_PARTICIPANT.hobbies == "Undisclosed"
        assert UNKNOWN_PARTICIPANT.major_minor == "Undisclosed"
