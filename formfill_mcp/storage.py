"""SQLite-backed profile and feedback storage for the formfill MCP server."""

import sqlite3
import time
import uuid
from pathlib import Path
from typing import Dict, List, Optional

from formfill import FeedbackRecord


class ProfileStore:
    """Persistent profile storage backed by SQLite.

    Stores free-text profiles with usage statistics, plus the feedback
    records reported for each profile. Deleting a profile deletes its
    feedback.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._init_db()

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS profiles (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                text TEXT NOT NULL,
                usage_count INTEGER NOT NULL DEFAULT 0,
                last_used REAL,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            );
            CREATE TABLE IF NOT EXISTS feedback (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                profile_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
                slot_id TEXT NOT NULL,
                predicted_value TEXT NOT NULL,
                actual_value TEXT NOT NULL,
                was_correct INTEGER NOT NULL,
                confidence REAL NOT NULL DEFAULT 0.0,
                user_feedback TEXT NOT NULL DEFAULT 'accepted',
                timestamp REAL NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_feedback_profile
                ON feedback(profile_id);
        """)
        self._conn.commit()

    def save_profile(self, name: str, text: str, profile_id: Optional[str] = None) -> Dict:
        """Create a profile, or replace the name and text of an existing one.

        Args:
            name: Display name (e.g. the site name)
            text: Free-text profile content
            profile_id: Existing id to update. A new id is generated when omitted.

        Returns:
            The stored profile as a dict
        """
        profile_id = profile_id or f"profile_{uuid.uuid4().hex[:12]}"
        self._conn.execute(
            """INSERT INTO profiles (id, name, text) VALUES (?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET name = excluded.name, text = excluded.text""",
            (profile_id, name, text),
        )
        self._conn.commit()
        return self.get_profile(profile_id)

    def get_profile(self, profile_id: str) -> Optional[Dict]:
        row = self._conn.execute(
            "SELECT * FROM profiles WHERE id = ?", (profile_id,)
        ).fetchone()
        return dict(row) if row else None

    def list_profiles(self) -> List[Dict]:
        """All profiles, most recently used first (never-used ones last)."""
        rows = self._conn.execute(
            """SELECT id, name, usage_count, last_used, created_at FROM profiles
               ORDER BY last_used IS NULL, last_used DESC, created_at DESC"""
        ).fetchall()
        return [dict(row) for row in rows]

    def touch_profile(self, profile_id: str) -> None:
        """Bump the usage count and last-used time after a fill."""
        self._conn.execute(
            "UPDATE profiles SET usage_count = usage_count + 1, last_used = ? WHERE id = ?",
            (time.time(), profile_id),
        )
        self._conn.commit()

    def delete_profile(self, profile_id: str) -> bool:
        """Delete a profile and its feedback. Returns False if it did not exist."""
        cursor = self._conn.execute("DELETE FROM profiles WHERE id = ?", (profile_id,))
        self._conn.commit()
        return cursor.rowcount > 0

    def add_feedback(self, record: FeedbackRecord) -> None:
        self._conn.execute(
            """INSERT INTO feedback
               (profile_id, slot_id, predicted_value, actual_value, was_correct,
                confidence, user_feedback, timestamp)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                record.profile_id, record.slot_id, record.predicted_value,
                record.actual_value, int(record.was_correct), record.confidence,
                record.user_feedback, record.timestamp,
            ),
        )
        self._conn.commit()

    def feedback_for(self, profile_id: str) -> List[FeedbackRecord]:
        """Feedback records for a profile, oldest first."""
        rows = self._conn.execute(
            "SELECT * FROM feedback WHERE profile_id = ? ORDER BY timestamp, id",
            (profile_id,),
        ).fetchall()
        return [
            FeedbackRecord(
                profile_id=row["profile_id"],
                slot_id=row["slot_id"],
                predicted_value=row["predicted_value"],
                actual_value=row["actual_value"],
                was_correct=bool(row["was_correct"]),
                confidence=row["confidence"],
                timestamp=row["timestamp"],
                user_feedback=row["user_feedback"],
            )
            for row in rows
        ]

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
