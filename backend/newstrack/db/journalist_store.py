"""Data access layer for the journalists, topics and keywords tables."""

import json
import sqlite3
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Sequence

from ..models.schemas import DatabaseStats, JournalistRecord, OutletSummary
from ..services.errors import PersistenceUnavailable
from .database import get_connection


@contextmanager
def _transaction(action: str) -> Iterator[sqlite3.Connection]:
    """Connection scoped to one transaction; sqlite errors become PersistenceUnavailable."""
    try:
        conn = get_connection()
    except sqlite3.Error as e:
        raise PersistenceUnavailable(f"Could not open database to {action}: {e}") from e
    try:
        with conn:
            yield conn
    except sqlite3.Error as e:
        raise PersistenceUnavailable(f"Could not {action}: {e}") from e
    finally:
        conn.close()


def save_journalists(outlet: str, records: Sequence[JournalistRecord]) -> int:
    """Replace every stored journalist for outlet with records, atomically.

    Returns the number of rows written.
    """
    with _transaction(f"save journalists for {outlet}") as conn:
        conn.execute("DELETE FROM journalists WHERE outlet = ?", (outlet,))
        for record in records:
            cursor = conn.execute(
                """
                INSERT INTO journalists (
                    outlet, position, name, profile_url, section, beat,
                    article_count, latest_article, date, contact, email, twitter,
                    source, expertise_json, provenance_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    outlet,
                    record.id,
                    record.name,
                    record.profile_url,
                    record.section,
                    record.beat,
                    record.article_count,
                    record.latest_article,
                    record.date.isoformat(),
                    record.contact,
                    record.email,
                    record.twitter,
                    record.source,
                    json.dumps(record.expertise),
                    json.dumps(record.provenance),
                ),
            )
            journalist_id = cursor.lastrowid
            conn.executemany(
                "INSERT INTO topics (journalist_id, topic) VALUES (?, ?)",
                [(journalist_id, topic) for topic in record.topics],
            )
            conn.executemany(
                "INSERT INTO keywords (journalist_id, keyword) VALUES (?, ?)",
                [(journalist_id, keyword) for keyword in record.keywords],
            )
    return len(records)


def get_journalists(outlet: str) -> List[JournalistRecord]:
    """Stored journalists for outlet in their original batch order."""
    with _transaction(f"read journalists for {outlet}") as conn:
        rows = conn.execute(
            "SELECT * FROM journalists WHERE outlet = ? ORDER BY position",
            (outlet,),
        ).fetchall()
        topics = {}
        keywords = {}
        for row in conn.execute(
            """
            SELECT t.journalist_id, t.topic FROM topics t
            JOIN journalists j ON j.id = t.journalist_id
            WHERE j.outlet = ? ORDER BY t.id
            """,
            (outlet,),
        ):
            topics.setdefault(row["journalist_id"], []).append(row["topic"])
        for row in conn.execute(
            """
            SELECT k.journalist_id, k.keyword FROM keywords k
            JOIN journalists j ON j.id = k.journalist_id
            WHERE j.outlet = ? ORDER BY k.id
            """,
            (outlet,),
        ):
            keywords.setdefault(row["journalist_id"], []).append(row["keyword"])

    records = []
    for row in rows:
        records.append(
            JournalistRecord(
                id=row["position"],
                name=row["name"],
                profile_url=row["profile_url"],
                section=row["section"],
                beat=row["beat"],
                article_count=row["article_count"],
                latest_article=row["latest_article"],
                date=date.fromisoformat(row["date"]),
                topics=topics.get(row["id"], []),
                keywords=keywords.get(row["id"], []),
                expertise=json.loads(row["expertise_json"] or "[]"),
                contact=row["contact"],
                email=row["email"],
                twitter=row["twitter"],
                source=row["source"],
                provenance=json.loads(row["provenance_json"] or "{}"),
            )
        )
    return records


def list_outlets() -> List[OutletSummary]:
    """Every stored outlet with its journalist count, most recent first."""
    with _transaction("list outlets") as conn:
        rows = conn.execute(
            """
            SELECT outlet, COUNT(*) AS count, MAX(created_at) AS last_updated
            FROM journalists
            GROUP BY outlet
            ORDER BY last_updated DESC, outlet
            """
        ).fetchall()
    return [
        OutletSummary(outlet=row["outlet"], count=row["count"], last_updated=row["last_updated"])
        for row in rows
    ]


def delete_outlet(outlet: str) -> int:
    """Delete an outlet's journalists (topics/keywords cascade). Returns rows deleted."""
    with _transaction(f"delete outlet {outlet}") as conn:
        cursor = conn.execute("DELETE FROM journalists WHERE outlet = ?", (outlet,))
        return cursor.rowcount


def clear_all() -> int:
    """Delete every stored journalist. Returns rows deleted."""
    with _transaction("clear journalists") as conn:
        cursor = conn.execute("DELETE FROM journalists")
        return cursor.rowcount


def get_stats() -> DatabaseStats:
    """Row counts across the store."""
    with _transaction("read database stats") as conn:
        row = conn.execute(
            """
            SELECT
                (SELECT COUNT(*) FROM journalists) AS total_journalists,
                (SELECT COUNT(DISTINCT outlet) FROM journalists) AS total_outlets,
                (SELECT COUNT(*) FROM topics) AS total_topics,
                (SELECT COUNT(*) FROM keywords) AS total_keywords
            """
        ).fetchone()
    return DatabaseStats(**dict(row))
