"""
Persisted Store — SQLite-backed document collections with schema versioning.

Each collection is a table of JSON documents keyed by id. Indexed fields are
SQLite expression indexes over ``json_extract``; only indexed fields may be
used for equality queries and ordered scans. The schema version lives in
``PRAGMA user_version`` and upgrades run once, when the store is opened.
"""

import json
import os
import sqlite3
from typing import Any, Callable, Optional

from config.log import get_logger
from models.errors import StorageUnavailableError
from models.job import default_slug

log = get_logger(__name__)

COLLECTIONS = ("jobs", "applications", "candidates", "assessments")

# Indexed fields per collection, per schema version
SCHEMA: dict[int, dict[str, tuple[str, ...]]] = {
    1: {
        "jobs": ("title", "company", "status", "postedAt"),
        "applications": ("jobId", "status", "appliedAt"),
        "candidates": ("name", "email", "status", "appliedAt"),
        "assessments": ("jobId", "createdAt"),
    },
    2: {
        "jobs": ("title", "company", "status", "postedAt", "order"),
    },
    3: {
        "jobs": ("title", "company", "status", "postedAt", "order", "archived", "slug"),
    },
}

SCHEMA_VERSION = max(SCHEMA)


def _encode(value: Any) -> Any:
    """Match how json_extract reports JSON booleans."""
    if isinstance(value, bool):
        return int(value)
    return value


class Collection:
    """One record collection (jobs, applications, candidates or assessments)."""

    def __init__(self, db: "Database", name: str):
        self._db = db
        self.name = name

    @property
    def _conn(self) -> sqlite3.Connection:
        return self._db.connection

    def _check_indexed(self, field: str) -> None:
        if field != "id" and field not in self._db.indexes(self.name):
            raise ValueError(f"'{field}' is not an indexed field of {self.name}")

    def _rows(self, sql: str, params: tuple = ()) -> list[dict]:
        cursor = self._conn.execute(sql, params)
        return [json.loads(row[0]) for row in cursor.fetchall()]

    def get(self, record_id: str) -> Optional[dict]:
        cursor = self._conn.execute(f"SELECT data FROM {self.name} WHERE id = ?", (record_id,))
        row = cursor.fetchone()
        return json.loads(row[0]) if row else None

    def all(self) -> list[dict]:
        """Every record, in insertion order."""
        return self._rows(f"SELECT data FROM {self.name} ORDER BY rowid")

    def count(self) -> int:
        cursor = self._conn.execute(f"SELECT COUNT(*) FROM {self.name}")
        return cursor.fetchone()[0]

    def where(self, field: str, value: Any) -> list[dict]:
        """Records whose indexed ``field`` equals ``value``."""
        self._check_indexed(field)
        return self._rows(
            f"SELECT data FROM {self.name} WHERE json_extract(data, '$.{field}') = ? ORDER BY rowid",
            (_encode(value),),
        )

    def first(self, field: str, value: Any) -> Optional[dict]:
        matches = self.where(field, value)
        return matches[0] if matches else None

    def order_by(self, field: str, descending: bool = False) -> list[dict]:
        """Ordered scan over an indexed field; ties keep insertion order."""
        self._check_indexed(field)
        direction = "DESC" if descending else "ASC"
        return self._rows(
            f"SELECT data FROM {self.name} ORDER BY json_extract(data, '$.{field}') {direction}, rowid"
        )

    def add(self, record: dict) -> str:
        with self._conn:
            self._insert(record)
        return record["id"]

    def bulk_add(self, records: list[dict]) -> int:
        with self._conn:
            for record in records:
                self._insert(record)
        return len(records)

    def _insert(self, record: dict) -> None:
        self._conn.execute(
            f"INSERT INTO {self.name} (id, data) VALUES (?, ?)",
            (record["id"], json.dumps(record)),
        )

    def update(self, record_id: str, changes: dict) -> bool:
        """Merge ``changes`` into the record. Returns False if it does not exist."""
        with self._conn:
            return self._patch(record_id, changes)

    def bulk_update(self, changes_by_id: dict[str, dict]) -> int:
        """Patch several records in a single transaction."""
        updated = 0
        with self._conn:
            for record_id, changes in changes_by_id.items():
                if self._patch(record_id, changes):
                    updated += 1
        return updated

    def _patch(self, record_id: str, changes: dict) -> bool:
        current = self.get(record_id)
        if current is None:
            return False
        current.update(changes)
        current["id"] = record_id
        self._conn.execute(
            f"UPDATE {self.name} SET data = ? WHERE id = ?",
            (json.dumps(current), record_id),
        )
        return True

    def delete(self, record_id: str) -> bool:
        with self._conn:
            cursor = self._conn.execute(f"DELETE FROM {self.name} WHERE id = ?", (record_id,))
        return cursor.rowcount > 0

    def clear(self) -> None:
        with self._conn:
            self._conn.execute(f"DELETE FROM {self.name}")


def _upgrade_v2(db: "Database") -> None:
    """Give every job without an order its position in insertion order."""
    jobs = db.jobs.all()
    changes = {job["id"]: {"order": i} for i, job in enumerate(jobs) if "order" not in job}
    if changes:
        db.jobs.bulk_update(changes)
    log.info("Schema v2: backfilled order on %d job(s)", len(changes))


def _upgrade_v3(db: "Database") -> None:
    """Backfill archived=false and a generated slug where missing."""
    changes = {}
    for job in db.jobs.all():
        patch = {}
        if "archived" not in job:
            patch["archived"] = False
        if not job.get("slug"):
            patch["slug"] = default_slug(job.get("title", ""), job["id"])
        if patch:
            changes[job["id"]] = patch
    if changes:
        db.jobs.bulk_update(changes)
    log.info("Schema v3: backfilled archived/slug on %d job(s)", len(changes))


UPGRADES: dict[int, Callable[["Database"], None]] = {
    2: _upgrade_v2,
    3: _upgrade_v3,
}


class Database:
    """
    The local embedded database holding the four record collections.

    Opening the database brings its schema up to ``version``. Any failure to
    open or migrate raises StorageUnavailableError; there is no in-memory
    fallback for a file that cannot be opened.
    """

    def __init__(self, path: str, version: int = SCHEMA_VERSION):
        self.path = path
        self.version = version
        try:
            if path != ":memory:":
                os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
            self.connection = sqlite3.connect(path)
            self._migrate()
        except (sqlite3.Error, OSError) as e:
            log.error("Storage unavailable at %s: %s", path, e)
            raise StorageUnavailableError(f"Cannot open database at {path}: {e}") from e

        self.jobs = Collection(self, "jobs")
        self.applications = Collection(self, "applications")
        self.candidates = Collection(self, "candidates")
        self.assessments = Collection(self, "assessments")

    def indexes(self, collection: str) -> tuple[str, ...]:
        """Indexed fields of a collection at the current schema version."""
        for version in range(self.version, 0, -1):
            if collection in SCHEMA.get(version, {}):
                return SCHEMA[version][collection]
        return ()

    def schema_version(self) -> int:
        return self.connection.execute("PRAGMA user_version").fetchone()[0]

    def _migrate(self) -> None:
        current = self.schema_version()
        if current > self.version:
            raise sqlite3.DatabaseError(
                f"database is at schema v{current}, newer than supported v{self.version}"
            )

        # Collections must exist before an upgrade can read them
        self.jobs = Collection(self, "jobs")

        for version in range(current + 1, self.version + 1):
            with self.connection:
                if version == 1:
                    for name in COLLECTIONS:
                        self.connection.execute(
                            f"CREATE TABLE IF NOT EXISTS {name} "
                            "(id TEXT PRIMARY KEY, data TEXT NOT NULL)"
                        )
                for name, fields in SCHEMA[version].items():
                    for field in fields:
                        self.connection.execute(
                            f"CREATE INDEX IF NOT EXISTS idx_{name}_{field} "
                            f"ON {name} (json_extract(data, '$.{field}'))"
                        )
            upgrade = UPGRADES.get(version)
            if upgrade:
                upgrade(self)
            with self.connection:
                self.connection.execute(f"PRAGMA user_version = {version}")
            log.info("Database %s upgraded to schema v%d", self.path, version)

    def close(self) -> None:
        self.connection.close()
