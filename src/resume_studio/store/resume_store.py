"""SQLite-backed résumé and version storage."""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path

from resume_studio.models.content import ResumeContent, ResumeTheme
from resume_studio.models.resume import Resume, ResumeSnapshot, ResumeVersion, utc_now

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".resume-studio" / "resumes.db"

# Columns callers may change through update_resume.
UPDATABLE_FIELDS = ("title", "template_id", "content", "theme")


class ResumeStore:
    """SQLite store for résumés and their version snapshots (WAL mode).

    Content, theme and snapshots live in JSON columns using the camelCase
    wire format. Writes are serialized by a process-local lock.
    """

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS resumes (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    template_id TEXT NOT NULL,
                    content_json TEXT NOT NULL,
                    theme_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS resume_versions (
                    id TEXT PRIMARY KEY,
                    resume_id TEXT NOT NULL REFERENCES resumes(id) ON DELETE CASCADE,
                    name TEXT NOT NULL,
                    snapshot_json TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_resumes_owner ON resumes(owner_id)")
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_versions_resume ON resume_versions(resume_id)"
            )

    # ------------------------------------------------------------------
    # Résumés
    # ------------------------------------------------------------------

    def create_resume(self, resume: Resume) -> Resume:
        with self._write_lock, self._connect() as conn:
            conn.execute(
                """INSERT INTO resumes
                   (id, owner_id, title, template_id, content_json, theme_json,
                    created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    resume.id,
                    resume.owner_id,
                    resume.title,
                    resume.template_id,
                    resume.content.model_dump_json(by_alias=True),
                    resume.theme.model_dump_json(by_alias=True),
                    resume.created_at.isoformat(),
                    resume.updated_at.isoformat(),
                ),
            )
        logger.debug("Created resume %s", resume.id)
        return resume

    def get_resume(self, resume_id: str, owner_id: str) -> Resume | None:
        """Résumé owned by ``owner_id``, or None."""
        with self._connect() as conn:
            row = conn.execute(
                """SELECT id, owner_id, title, template_id, content_json, theme_json,
                          created_at, updated_at
                   FROM resumes WHERE id = ? AND owner_id = ?""",
                (resume_id, owner_id),
            ).fetchone()
        return _row_to_resume(row) if row else None

    def list_resumes(self, owner_id: str) -> list[Resume]:
        """Owner's résumés, most recently updated first."""
        with self._connect() as conn:
            rows = conn.execute(
                """SELECT id, owner_id, title, template_id, content_json, theme_json,
                          created_at, updated_at
                   FROM resumes WHERE owner_id = ?
                   ORDER BY updated_at DESC""",
                (owner_id,),
            ).fetchall()
        return [_row_to_resume(row) for row in rows]

    def update_resume(self, resume_id: str, **fields) -> Resume | None:
        """Replace the given fields wholesale and bump ``updated_at``.

        Accepts ``title``, ``template_id``, ``content`` and ``theme``; None
        values are ignored. Returns the stored résumé, or None if missing.
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise TypeError(f"Cannot update resume fields: {', '.join(sorted(unknown))}")

        columns: dict[str, str] = {}
        if fields.get("title") is not None:
            columns["title"] = fields["title"]
        if fields.get("template_id") is not None:
            columns["template_id"] = fields["template_id"]
        if fields.get("content") is not None:
            columns["content_json"] = fields["content"].model_dump_json(by_alias=True)
        if fields.get("theme") is not None:
            columns["theme_json"] = fields["theme"].model_dump_json(by_alias=True)
        columns["updated_at"] = utc_now().isoformat()

        assignments = ", ".join(f"{name} = ?" for name in columns)
        with self._write_lock, self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE resumes SET {assignments} WHERE id = ?",
                (*columns.values(), resume_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                """SELECT id, owner_id, title, template_id, content_json, theme_json,
                          created_at, updated_at
                   FROM resumes WHERE id = ?""",
                (resume_id,),
            ).fetchone()
        logger.debug("Updated resume %s (%s)", resume_id, ", ".join(sorted(columns)))
        return _row_to_resume(row)

    def delete_resume(self, resume_id: str) -> bool:
        """Delete a résumé and its versions. Returns False if it did not exist."""
        with self._write_lock, self._connect() as conn:
            cursor = conn.execute("DELETE FROM resumes WHERE id = ?", (resume_id,))
        logger.debug("Deleted resume %s", resume_id)
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def create_version(self, version: ResumeVersion) -> ResumeVersion:
        with self._write_lock, self._connect() as conn:
            conn.execute(
                """INSERT INTO resume_versions (id, resume_id, name, snapshot_json, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (
                    version.id,
                    version.resume_id,
                    version.name,
                    version.snapshot.model_dump_json(by_alias=True),
                    version.created_at.isoformat(),
                ),
            )
        logger.debug("Saved version %s of resume %s", version.id, version.resume_id)
        return version

    def list_versions(self, resume_id: str) -> list[ResumeVersion]:
        """Versions of a résumé, newest first."""
        with self._connect() as conn:
            rows = conn.execute(
                """SELECT id, resume_id, name, snapshot_json, created_at
                   FROM resume_versions WHERE resume_id = ?
                   ORDER BY created_at DESC""",
                (resume_id,),
            ).fetchall()
        return [_row_to_version(row) for row in rows]

    def get_version(self, version_id: str, resume_id: str) -> ResumeVersion | None:
        with self._connect() as conn:
            row = conn.execute(
                """SELECT id, resume_id, name, snapshot_json, created_at
                   FROM resume_versions WHERE id = ? AND resume_id = ?""",
                (version_id, resume_id),
            ).fetchone()
        return _row_to_version(row) if row else None


def _row_to_resume(row: tuple) -> Resume:
    resume_id, owner_id, title, template_id, content_json, theme_json, created_at, updated_at = row
    return Resume(
        id=resume_id,
        owner_id=owner_id,
        title=title,
        template_id=template_id,
        content=ResumeContent.model_validate_json(content_json),
        theme=ResumeTheme.model_validate_json(theme_json),
        created_at=datetime.fromisoformat(created_at),
        updated_at=datetime.fromisoformat(updated_at),
    )


def _row_to_version(row: tuple) -> ResumeVersion:
    version_id, resume_id, name, snapshot_json, created_at = row
    return ResumeVersion(
        id=version_id,
        resume_id=resume_id,
        name=name,
        snapshot=ResumeSnapshot.model_validate_json(snapshot_json),
        created_at=datetime.fromisoformat(created_at),
    )
