"""SQLite database connection and initialization."""

import sqlite3
from pathlib import Path

from .. import config


def get_connection() -> sqlite3.Connection:
    """Get a database connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(config.DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db():
    """Initialize database tables."""
    Path(config.DATABASE_PATH).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection()
    cursor = conn.cursor()

    # One row per journalist per outlet; replaced wholesale on every scrape
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS journalists (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            outlet TEXT NOT NULL,
            position INTEGER NOT NULL,
            name TEXT NOT NULL,
            profile_url TEXT,
            section TEXT,
            beat TEXT,
            article_count INTEGER DEFAULT 0,
            latest_article TEXT,
            date TEXT,
            contact TEXT,
            email TEXT,
            twitter TEXT,
            source TEXT,
            expertise_json TEXT DEFAULT '[]',
            provenance_json TEXT DEFAULT '{}',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(outlet, name)
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS topics (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            journalist_id INTEGER NOT NULL,
            topic TEXT NOT NULL,
            FOREIGN KEY (journalist_id) REFERENCES journalists(id) ON DELETE CASCADE
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS keywords (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            journalist_id INTEGER NOT NULL,
            keyword TEXT NOT NULL,
            FOREIGN KEY (journalist_id) REFERENCES journalists(id) ON DELETE CASCADE
        )
    """)

    # Cache for full scrape results
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS cached_results (
            target TEXT PRIMARY KEY,
            result_json TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
    """)

    # Indexes for fast lookups
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_journalists_outlet ON journalists(outlet)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_topics_journalist ON topics(journalist_id)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_keywords_journalist ON keywords(journalist_id)")

    conn.commit()
    conn.close()


# Initialize on import
init_db()
