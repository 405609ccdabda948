"""
Google Sheets loader for the dashboard tables.

Each entity kind lives on its own tab in one of two workbooks (execution and
strategy). Tabs are fetched concurrently and a refresh only succeeds when
every tab does; without a configured workbook the built-in sample data is
served instead.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FetchTimeout
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple

import gspread
import pandas as pd
import streamlit as st
from google.oauth2.service_account import Credentials

from ops_dashboard.bootstrap_env import ensure_env, read_secrets
from ops_dashboard.config import CACHE_TTL_SECONDS, FETCH_MAX_WORKERS, FETCH_TIMEOUT_SECONDS
from ops_dashboard.data.sample_data import sample_tables
from ops_dashboard.data.schema import DASHBOARD_KINDS, ENTITIES, EXECUTION, STRATEGY

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
]

SENTINELS: Set[str] = {"", "None", "none", "N/A", "n/a", "NA", "na", "null", "Null", "-", "—"}

ROW_INDEX = "rowIndex"
# header is sheet row 1
FIRST_DATA_ROW = 2

SOURCE_SHEETS = "sheets"
SOURCE_SAMPLE = "sample"

TableFetcher = Callable[[str], pd.DataFrame]


class DataRefreshError(RuntimeError):
    """One or more tables could not be fetched; nothing from the refresh is used."""

    def __init__(self, failures: Mapping[str, str]):
        self.failures = dict(failures)
        details = "; ".join(f"{kind}: {reason}" for kind, reason in sorted(self.failures.items()))
        super().__init__(f"Failed to load {', '.join(sorted(self.failures))} ({details})")


@dataclass(frozen=True)
class SheetsConfig:
    execution_spreadsheet_id: Optional[str]
    strategy_spreadsheet_id: Optional[str]
    credentials_file: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.execution_spreadsheet_id or self.strategy_spreadsheet_id)

    def spreadsheet_id(self, workbook: Optional[str]) -> Optional[str]:
        if workbook == EXECUTION:
            return self.execution_spreadsheet_id
        if workbook == STRATEGY:
            return self.strategy_spreadsheet_id
        return None


@dataclass
class LoadResult:
    tables: Dict[str, pd.DataFrame]
    source: str


def _normalize_sentinels(df: pd.DataFrame) -> pd.DataFrame:
    """Replace sentinel string tokens with None (in-place) and record counts in df.attrs.

    Adds / updates:
        df.attrs['sentinel_replacements'] = {column: count_replaced, ...}
    """
    replacements = {}
    for col in df.columns:
        if pd.api.types.is_object_dtype(df[col]) or pd.api.types.is_string_dtype(df[col]):
            mask = df[col].apply(lambda v: isinstance(v, str) and v.strip() in SENTINELS)
            count = int(mask.sum())
            if count:
                replacements[col] = count
                df.loc[mask, col] = None
    if replacements:
        existing = df.attrs.get("sentinel_replacements", {})
        existing.update(replacements)
        df.attrs["sentinel_replacements"] = existing
    return df


def frame_from_records(records: Sequence[Mapping[str, object]]) -> pd.DataFrame:
    """Sheet records -> DataFrame with sentinels cleared and a sheet-row ``rowIndex``."""
    df = pd.DataFrame(list(records))
    df = _normalize_sentinels(df)
    if ROW_INDEX in df.columns:
        df = df.drop(columns=[ROW_INDEX])
    df.insert(0, ROW_INDEX, range(FIRST_DATA_ROW, len(df) + FIRST_DATA_ROW))
    return df


def empty_table() -> pd.DataFrame:
    return pd.DataFrame({ROW_INDEX: pd.Series(dtype=int)})


def _get_secret(name: str, default: Optional[str] = None) -> Optional[str]:
    """Try env first, then st.secrets (if available)."""
    val = os.getenv(name)
    if val:
        return val
    v = read_secrets().get(name)
    return str(v) if v is not None else default


def _repair_json_private_key(text: str) -> str:
    """If JSON text contains an unescaped multi-line private_key, escape newlines.
    This fixes the common case when TOML triple-quoted strings preserve newlines.
    """
    pattern = r'"private_key"\s*:\s*"(.*?)"'

    def _repl(m: re.Match) -> str:
        val = m.group(1)
        val = val.replace("\r\n", "\\n").replace("\n", "\\n")
        return f'"private_key": "{val}"'

    return re.sub(pattern, _repl, text, flags=re.DOTALL)


def _materialize_creds_if_inline(path_or_json: str) -> str:
    """If the credentials value is JSON content, write it to a temp file and return the path."""
    if os.path.exists(path_or_json):
        return path_or_json
    text = path_or_json.strip()
    if not (text.startswith("{") and text.endswith("}")):
        return path_or_json
    content = text
    try:
        json.loads(content)
    except ValueError:
        repaired = _repair_json_private_key(content)
        try:
            json.loads(repaired)
            content = repaired
        except ValueError:
            logger.warning("Inline service account JSON does not parse; writing it unchanged")
    tmp_path = os.path.join(tempfile.gettempdir(), "ops-dashboard-inline-credentials.json")
    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(content)
    return tmp_path


def resolve_sheets_config() -> SheetsConfig:
    creds_raw = _get_secret("GOOGLE_APPLICATION_CREDENTIALS", "google-credentials.json")
    return SheetsConfig(
        execution_spreadsheet_id=_get_secret("EXECUTION_SPREADSHEET_ID"),
        strategy_spreadsheet_id=_get_secret("STRATEGY_SPREADSHEET_ID"),
        credentials_file=_materialize_creds_if_inline(creds_raw) if creds_raw else None,
    )


def fetch_tables(
    fetch_one: TableFetcher,
    kinds: Sequence[str],
    max_workers: int = FETCH_MAX_WORKERS,
    timeout: Optional[float] = FETCH_TIMEOUT_SECONDS,
) -> Dict[str, pd.DataFrame]:
    """Run ``fetch_one`` for every kind concurrently; all succeed or DataRefreshError."""
    kinds = list(dict.fromkeys(kinds))
    if not kinds:
        return {}

    tables: Dict[str, pd.DataFrame] = {}
    failures: Dict[str, str] = {}
    started = time.monotonic()

    # Not a context manager: leaving ``with`` would join a hung fetch thread.
    executor = ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(kinds))))
    try:
        future_to_kind = {executor.submit(fetch_one, kind): kind for kind in kinds}
        try:
            for future in as_completed(future_to_kind, timeout=timeout):
                kind = future_to_kind[future]
                try:
                    tables[kind] = future.result()
                except Exception as exc:  # any fetch failure fails the refresh
                    logger.error("Fetching %s failed: %s", kind, exc)
                    failures[kind] = str(exc) or type(exc).__name__
        except FetchTimeout:
            for future, kind in future_to_kind.items():
                if not future.done():
                    failures[kind] = "timed out"
            logger.error("Timed out after %.1fs waiting for %s", timeout, sorted(failures))
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    if failures:
        raise DataRefreshError(failures)

    logger.info("Fetched %d tables in %.2fs", len(tables), time.monotonic() - started)
    return {kind: tables[kind] for kind in kinds}


def _authorize(credentials_file: str) -> gspread.Client:
    credentials = Credentials.from_service_account_file(credentials_file, scopes=SCOPES)
    return gspread.authorize(credentials)


@st.cache_data(show_spinner=False, ttl=CACHE_TTL_SECONDS)
def _load_tables_impl(
    execution_id: Optional[str],
    strategy_id: Optional[str],
    credentials_file: str,
    kinds: Tuple[str, ...],
) -> Dict[str, pd.DataFrame]:
    """Fetch every requested tab. Cached by workbook ids, credentials file and kinds."""
    config = SheetsConfig(execution_id, strategy_id, credentials_file)
    client = _authorize(credentials_file)

    workbooks: Dict[str, gspread.Spreadsheet] = {}
    for workbook in {ENTITIES[k].spreadsheet for k in kinds if ENTITIES[k].spreadsheet}:
        key = config.spreadsheet_id(workbook)
        if key:
            workbooks[workbook] = client.open_by_key(key)

    def fetch_one(kind: str) -> pd.DataFrame:
        entity = ENTITIES[kind]
        book = workbooks.get(entity.spreadsheet or "")
        if book is None or not entity.sheet_name:
            logger.warning("No workbook configured for %s; using an empty table", kind)
            return empty_table()
        ws = book.worksheet(entity.sheet_name)
        return frame_from_records(ws.get_all_records())

    return fetch_tables(fetch_one, kinds)


def clear_cache() -> None:
    _load_tables_impl.clear()


def load_tables(kinds: Optional[List[str]] = None) -> LoadResult:
    """Wrapper that resolves config and calls the cached implementation."""
    ensure_env()
    kinds = list(kinds or DASHBOARD_KINDS)
    config = resolve_sheets_config()

    if not config.is_configured:
        logger.warning("No spreadsheet configured; serving built-in sample data")
        return LoadResult(sample_tables(kinds), SOURCE_SAMPLE)

    if not config.credentials_file or not os.path.exists(config.credentials_file):
        raise FileNotFoundError(f"Service account file not found: {config.credentials_file}")

    tables = _load_tables_impl(
        config.execution_spreadsheet_id,
        config.strategy_spreadsheet_id,
        config.credentials_file,
        tuple(kinds),
    )
    return LoadResult(tables, SOURCE_SHEETS)
