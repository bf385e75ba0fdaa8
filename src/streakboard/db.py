"""SQLite-backed user store for streakboard.

One JSON document per user id. Subscribers registered on this store object are
notified synchronously after every write.
"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Callable

from streakboard.config import DEFAULT_DB_PATH

logger = logging.getLogger(__name__)

RecordCallback = Callable[[dict | None], None]
AllRecordsCallback = Callable[[dict[str, dict]], None]


class UserStore:
    """Key-value store of user records with WAL mode and change subscriptions."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self._subscribers: dict[str, list[RecordCallback]] = {}
        self._all_subscribers: list[AllRecordsCallback] = []
        self.init_db()

    def init_db(self) -> None:
        """Create tables if they do not exist."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                uid TEXT PRIMARY KEY,
                data TEXT NOT NULL DEFAULT '{}',
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            );
        """)
        self.conn.commit()

    def get(self, uid: str) -> dict | None:
        """Return the record for uid, or None if absent."""
        row = self.conn.execute(
            "SELECT data FROM users WHERE uid = ?", (uid,)
        ).fetchone()
        return json.loads(row["data"]) if row else None

    def put(self, uid: str, record: dict, merge: bool = False) -> dict:
        """Write a record. With merge, only the supplied top-level fields change.

        Returns the stored record.
        """
        if merge:
            stored = {**(self.get(uid) or {}), **record}
        else:
            stored = dict(record)
        self.conn.execute(
            "INSERT INTO users (uid, data) VALUES (?, ?) "
            "ON CONFLICT(uid) DO UPDATE SET data = excluded.data, "
            "updated_at = CURRENT_TIMESTAMP",
            (uid, json.dumps(stored)),
        )
        self.conn.commit()
        logger.debug("Stored record for %s (merge=%s, fields=%s)", uid, merge, sorted(record))
        self._notify(uid, stored)
        return stored

    def delete(self, uid: str) -> bool:
        """Remove a record. Returns True if one existed."""
        cursor = self.conn.execute("DELETE FROM users WHERE uid = ?", (uid,))
        self.conn.commit()
        if cursor.rowcount:
            self._notify(uid, None)
        return bool(cursor.rowcount)

    def list_all(self) -> dict[str, dict]:
        """Return every record keyed by uid, in creation order."""
        rows = self.conn.execute("SELECT uid, data FROM users ORDER BY rowid").fetchall()
        return {row["uid"]: json.loads(row["data"]) for row in rows}

    def subscribe(self, uid: str, on_change: RecordCallback) -> Callable[[], None]:
        """Call on_change with uid's record now and after every change to it.

        Returns a function that removes the subscription.
        """
        self._subscribers.setdefault(uid, []).append(on_change)
        on_change(self.get(uid))

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(uid, [])
            if on_change in callbacks:
                callbacks.remove(on_change)

        return unsubscribe

    def subscribe_all(self, on_change: AllRecordsCallback) -> Callable[[], None]:
        """Call on_change with every record now and after any write."""
        self._all_subscribers.append(on_change)
        on_change(self.list_all())

        def unsubscribe() -> None:
            if on_change in self._all_subscribers:
                self._all_subscribers.remove(on_change)

        return unsubscribe

    def _notify(self, uid: str, record: dict | None) -> None:
        callbacks = list(self._subscribers.get(uid, []))
        all_callbacks = list(self._all_subscribers)
        logger.debug(
            "Notifying %d record and %d list subscribers for %s",
            len(callbacks), len(all_callbacks), uid,
        )
        for callback in callbacks:
            callback(record)
        if all_callbacks:
            everything = self.list_all()
            for callback in all_callbacks:
                callback(everything)

    def close(self) -> None:
        """Drop subscriptions and close the database connection."""
        self._subscribers.clear()
        self._all_subscribers.clear()
        self.conn.close()
