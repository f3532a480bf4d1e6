"""Caching layer for full scrape results."""

import json
import logging
import sqlite3
from datetime import datetime, timedelta
from typing import Optional

from .. import config
from .database import get_connection


logger = logging.getLogger(__name__)


def _key(target: str) -> str:
    return " ".join(target.strip().lower().split()).rstrip("/")


def get_cached_result(target: str) -> Optional[dict]:
    """Get a cached scrape result if fresh (within TTL).

    A broken cache is logged and treated as a miss.
    """
    cutoff = datetime.now() - timedelta(minutes=config.RESULT_CACHE_TTL_MINUTES)
    try:
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT result_json FROM cached_results WHERE target = ? AND created_at > ?",
                (_key(target), cutoff.isoformat()),
            ).fetchone()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.warning("Result cache read failed for %r: %s", target, e)
        return None

    if row:
        return json.loads(row["result_json"])
    return None


def set_cached_result(target: str, result: dict):
    """Cache a scrape result."""
    try:
        conn = get_connection()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO cached_results (target, result_json, created_at)
                    VALUES (?, ?, ?)
                    """,
                    (_key(target), json.dumps(result), datetime.now().isoformat()),
                )
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.warning("Result cache write failed for %r: %s", target, e)


def clear_cached_results(target: Optional[str] = None):
    """Drop one cached result, or all of them."""
    try:
        conn = get_connection()
        try:
            with conn:
                if target is None:
                    conn.execute("DELETE FROM cached_results")
                else:
                    conn.execute("DELETE FROM cached_results WHERE target = ?", (_key(target),))
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.warning("Result cache clear failed: %s", e)
