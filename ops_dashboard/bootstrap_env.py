"""
Bootstrap environment for Streamlit Cloud & local dev:
- Flatten st.secrets into uppercase os.environ keys (nested -> PREFIX_CHILD)
- If GOOGLE_CREDENTIALS_JSON is provided (dict or JSON string), write it to a
  temp file and point GOOGLE_APPLICATION_CREDENTIALS at it
- Load .env (without overriding existing env vars)
- Configure logging from LOG_LEVEL
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from typing import Any, Iterator, Mapping, Optional, Tuple

import streamlit as st
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

CREDENTIALS_FILENAME = "ops-dashboard-google-credentials.json"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_logging_configured = False


def _sanitize_key(key: str) -> str:
    return re.sub(r"[^A-Za-z0-9_]", "_", key.upper())


def _flatten_secrets(prefix: str, val: Any) -> Iterator[Tuple[str, str]]:
    if isinstance(val, Mapping):
        for k, v in val.items():
            yield from _flatten_secrets(f"{prefix}_{k}", v)
    else:
        yield _sanitize_key(prefix), str(val)


def read_secrets() -> dict:
    """st.secrets as a plain dict; empty outside the Streamlit runtime or without secrets.toml."""
    try:
        secrets = getattr(st, "secrets", None)
        if not secrets:
            return {}
        return secrets.to_dict()
    except (FileNotFoundError, AttributeError, KeyError) as exc:
        logger.debug("No Streamlit secrets available: %s", exc)
        return {}
    except Exception as exc:  # streamlit raises its own parse errors for a bad secrets.toml
        logger.warning("Could not read Streamlit secrets: %s", exc)
        return {}


def _bridge_secrets_to_env(secrets: Mapping[str, Any]) -> None:
    for key, value in secrets.items():
        if isinstance(value, Mapping):
            if key == "GOOGLE_CREDENTIALS_JSON":
                continue
            for flat_k, flat_v in _flatten_secrets(key, value):
                os.environ.setdefault(flat_k, flat_v)
        else:
            os.environ.setdefault(_sanitize_key(key), str(value))


def _credentials_json_text(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        return json.dumps(dict(raw))
    text = str(raw).strip()
    try:
        json.loads(text)
    except ValueError:
        return None
    return text


def _materialize_google_credentials(secrets: Mapping[str, Any]) -> None:
    """Create a temp service account file from inline JSON if needed.

    Priority:
    1) GOOGLE_APPLICATION_CREDENTIALS already points at a file -> keep
    2) GOOGLE_APPLICATION_CREDENTIALS holds inline JSON -> write it out
    3) GOOGLE_CREDENTIALS_JSON (secrets or env) -> write it out
    """
    existing = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    if existing and os.path.exists(existing):
        return

    json_text = _credentials_json_text(existing) if existing else None
    if not json_text:
        raw = secrets.get("GOOGLE_CREDENTIALS_JSON") or os.getenv("GOOGLE_CREDENTIALS_JSON")
        json_text = _credentials_json_text(raw)
    if not json_text:
        return

    tmp_path = os.path.join(tempfile.gettempdir(), CREDENTIALS_FILENAME)
    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(json_text)
    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = tmp_path
    logger.info("Materialized Google service account credentials to %s", tmp_path)


def configure_logging(level: Optional[str] = None) -> None:
    """Install the root handler once; LOG_LEVEL picks the level (default INFO)."""
    global _logging_configured
    if _logging_configured:
        return
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    _logging_configured = True


def ensure_env() -> None:
    """Idempotent: make sure env vars, creds and logging are available.
    Safe to call multiple times, both inside and outside Streamlit runtime.
    """
    # load_dotenv does not override vars already set
    load_dotenv()
    secrets = read_secrets()
    _bridge_secrets_to_env(secrets)
    _materialize_google_credentials(secrets)
    configure_logging()
