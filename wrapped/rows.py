"""Match-table row sources: Supabase when enabled, otherwise a CSV export of the form responses."""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Dict, List, Optional

from flask import current_app, has_app_context

from wrapped.clients import get_supabase_client, log_warning
from wrapped.errors import RowStoreError
from wrapped.lookup import VIEWER_HANDLE_KEYS, find_row_by_handle, normalize_handle

DEFAULT_MATCH_TABLE = "test_matches"


def load_match_rows() -> List[Dict[str, Any]]:
    """Fetch every row of the match table. Upstream failures propagate."""
    client = get_supabase_client()
    if client:
        return fetch_supabase_rows(client, _match_table())

    csv_path = _csv_path()
    if csv_path:
        return read_csv_rows(csv_path)

    raise RowStoreError("Match rows unavailable: no Supabase client and no WRAPPED_CSV_PATH")


def fetch_supabase_rows(client, table: str) -> List[Dict[str, Any]]:
    try:
        resp = client.table(table).select("*").execute()
    except Exception as exc:
        log_warning("Wrapped Supabase error while loading %s: %s", table, exc)
        raise
    return list(resp.data or [])


def read_csv_rows(path: str | Path) -> List[Dict[str, Any]]:
    csv_path = Path(path).expanduser()
    try:
        content = csv_path.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise RowStoreError(f"Match CSV unreadable: {csv_path}") from exc
    return parse_csv_rows(content)


def parse_csv_rows(content: str) -> List[Dict[str, Any]]:
    """Turn a form-response CSV into header-keyed rows, skipping blank lines."""
    records = [
        record
        for record in csv.reader(io.StringIO(content, newline=""))
        if any(value.strip() for value in record)
    ]
    if not records:
        return []

    header = [field.strip() for field in records[0]]
    rows: List[Dict[str, Any]] = []
    for record in records[1:]:
        rows.append(
            {
                field: record[index] if index < len(record) else ""
                for index, field in enumerate(header)
            }
        )
    return rows


def has_wrapped_match(viewer_handle: Optional[str]) -> bool:
    """True when the viewer has a row in the match table; lookup problems answer False."""
    handle = normalize_handle(viewer_handle)
    if not handle:
        return False

    client = get_supabase_client()
    try:
        if client:
            resp = (
                client.table(_match_table())
                .select(VIEWER_HANDLE_KEYS[0])
                .eq(VIEWER_HANDLE_KEYS[0], handle)
                .limit(1)
                .execute()
            )
            return bool(resp.data)
        return find_row_by_handle(load_match_rows(), handle) is not None
    except Exception as exc:
        log_warning("Wrapped availability check failed for %s: %s", handle, exc)
        return False


def _match_table() -> str:
    if has_app_context():
        return current_app.config.get("WRAPPED_MATCH_TABLE") or DEFAULT_MATCH_TABLE
    return DEFAULT_MATCH_TABLE


def _csv_path() -> Optional[str]:
    if not has_app_context():
        return None
    return current_app.config.get("WRAPPED_CSV_PATH") or None

