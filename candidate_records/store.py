from __future__ import annotations  # Candidate record persistence layer

import json
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple
from uuid import uuid4

from interview_session.errors import ValidationFailure
from services.scoring import compute_total_score, heal_total_score

from .models import CandidateRecord, ProfileFields, StoredMessage, StoredQuestion

logger = logging.getLogger(__name__)

_PROFILE_COLUMNS = ("name", "email", "phone", "designation", "location", "github", "linkedin")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class CandidateStore:  # SQLite-backed persistence for candidate records
    def __init__(self, path: Path) -> None:  # Initialize store with database path
        self._path = Path(path)
        self._lock = threading.Lock()
        self._ensure_schema()

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:  # Open SQLite connection with row access by name
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:  # Create candidates table if missing
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS candidates (
                    id TEXT PRIMARY KEY,
                    session_id TEXT,
                    name TEXT NOT NULL DEFAULT '',
                    email TEXT NOT NULL DEFAULT '',
                    phone TEXT NOT NULL DEFAULT '',
                    designation TEXT NOT NULL DEFAULT '',
                    location TEXT NOT NULL DEFAULT '',
                    github TEXT NOT NULL DEFAULT '',
                    linkedin TEXT NOT NULL DEFAULT '',
                    resume_text TEXT NOT NULL DEFAULT '',
                    questions_json TEXT NOT NULL DEFAULT '[]',
                    chat_json TEXT NOT NULL DEFAULT '[]',
                    total_score INTEGER NOT NULL DEFAULT 0,
                    summary TEXT NOT NULL DEFAULT '',
                    status TEXT NOT NULL DEFAULT 'in-progress',
                    interview_started_at TEXT,
                    completed_at TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_candidates_email ON candidates(email)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_candidates_session ON candidates(session_id)")
            conn.commit()
        finally:
            conn.close()

    def save_progress(
        self,
        *,
        session_id: Optional[str],
        profile: Mapping[str, Any],
        chat: Optional[Sequence[Mapping[str, Any]]] = None,
        questions: Optional[Sequence[Mapping[str, Any]]] = None,
        resume_text: str = "",
        interview_started_at: Optional[str] = None,
    ) -> Tuple[str, bool]:
        """Upsert an in-progress record and return ``(candidate_id, created)``.

        The questions array, when given, replaces the stored one and is
        renumbered 1..n. A completed record keeps its status.
        """

        if not session_id:
            raise ValidationFailure("Session ID is required")
        fields = ProfileFields.model_validate(dict(profile or {}))
        now = _now()
        with self._lock:
            conn = self._connect()
            try:
                row = self._match(conn, email=fields.email, session_id=session_id)
                if row is None:
                    if not (fields.name.strip() and fields.email.strip()):
                        raise ValidationFailure("Name and email are required to create a record")
                    candidate_id = uuid4().hex
                    self._insert(
                        conn,
                        candidate_id,
                        fields=fields,
                        session_id=session_id,
                        resume_text=resume_text,
                        questions=_renumber(questions or []),
                        chat=_messages(chat or []),
                        status="in-progress",
                        interview_started_at=interview_started_at,
                        now=now,
                    )
                    conn.commit()
                    logger.info("Created in-progress candidate %s for session %s", candidate_id, session_id)
                    return candidate_id, True
                updates = {name: value for name, value in fields.model_dump().items() if value.strip()}
                updates["session_id"] = session_id
                if resume_text:
                    updates["resume_text"] = resume_text
                if questions is not None:
                    updates["questions_json"] = json.dumps([item.to_wire() for item in _renumber(questions)])
                if chat is not None:
                    updates["chat_json"] = json.dumps([item.to_wire() for item in _messages(chat)])
                if interview_started_at:
                    updates["interview_started_at"] = interview_started_at
                updates["updated_at"] = now
                self._update(conn, row["id"], updates)
                conn.commit()
                logger.info("Updated progress for candidate %s (status=%s)", row["id"], row["status"])
                return row["id"], False
            finally:
                conn.close()

    def update_chat(self, email: str, chat: Sequence[Mapping[str, Any]]) -> str:  # Replace chat of the newest record for email
        if not email or chat is None:
            raise ValidationFailure("Email and chat messages are required")
        with self._lock:
            conn = self._connect()
            try:
                row = conn.execute(
                    "SELECT id FROM candidates WHERE email = ? ORDER BY created_at DESC LIMIT 1",
                    (email,),
                ).fetchone()
                if row is None:
                    raise KeyError(f"Candidate with email '{email}' not found")
                payload = json.dumps([item.to_wire() for item in _messages(chat)])
                self._update(conn, row["id"], {"chat_json": payload, "updated_at": _now()})
                conn.commit()
                return row["id"]
            finally:
                conn.close()

    def finalize(
        self,
        *,
        profile: Mapping[str, Any],
        questions: Sequence[Mapping[str, Any]],
        session_id: Optional[str] = None,
        resume_text: str = "",
        total_score: Any = None,
        summary: str = "",
        chat: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> str:
        """Write the completed record and return its id.

        Matches an existing record like ``save_progress`` so that repeated
        calls for the same session leave a single record.
        """

        fields = ProfileFields.model_validate(dict(profile or {}))
        if not (fields.name.strip() and fields.email.strip()):
            raise ValidationFailure("Name and email are required")
        if not questions:
            raise ValidationFailure("Questions are required")
        stored = _renumber(questions)
        total = compute_total_score([item.score for item in stored], total_score)
        now = _now()
        with self._lock:
            conn = self._connect()
            try:
                row = self._match(conn, email=fields.email, session_id=session_id)
                if row is None:
                    candidate_id = uuid4().hex
                    self._insert(
                        conn,
                        candidate_id,
                        fields=fields,
                        session_id=session_id,
                        resume_text=resume_text,
                        questions=stored,
                        chat=_messages(chat or []),
                        status="completed",
                        interview_started_at=None,
                        now=now,
                    )
                    self._update(conn, candidate_id, {"total_score": total, "summary": summary or "", "completed_at": now})
                else:
                    candidate_id = row["id"]
                    updates = {name: value for name, value in fields.model_dump().items() if value.strip()}
                    updates.update(
                        questions_json=json.dumps([item.to_wire() for item in stored]),
                        total_score=total,
                        summary=summary or "",
                        status="completed",
                        completed_at=now,
                        updated_at=now,
                    )
                    if session_id:
                        updates["session_id"] = session_id
                    if resume_text:
                        updates["resume_text"] = resume_text
                    if chat is not None:
                        updates["chat_json"] = json.dumps([item.to_wire() for item in _messages(chat)])
                    self._update(conn, candidate_id, updates)
                conn.commit()
            finally:
                conn.close()
        logger.info("Finalized candidate %s total=%d", candidate_id, total)
        return candidate_id

    def list_candidates(self) -> List[CandidateRecord]:  # All records newest first, totals self-healed
        conn = self._connect()
        try:
            rows = conn.execute("SELECT * FROM candidates ORDER BY created_at DESC").fetchall()
        finally:
            conn.close()
        return [self._healed(_to_record(row)) for row in rows]

    def get(self, candidate_id: str) -> CandidateRecord:  # Load one record, total self-healed
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM candidates WHERE id = ?", (candidate_id,)).fetchone()
        finally:
            conn.close()
        if row is None:
            raise KeyError(f"Candidate '{candidate_id}' not found")
        return self._healed(_to_record(row))

    def delete(self, candidate_id: str) -> CandidateRecord:  # Remove and return a record
        with self._lock:
            conn = self._connect()
            try:
                row = conn.execute("SELECT * FROM candidates WHERE id = ?", (candidate_id,)).fetchone()
                if row is None:
                    raise KeyError(f"Candidate '{candidate_id}' not found")
                conn.execute("DELETE FROM candidates WHERE id = ?", (candidate_id,))
                conn.commit()
            finally:
                conn.close()
        logger.info("Deleted candidate %s", candidate_id)
        return _to_record(row)

    def find_by_email(self, email: str) -> Optional[str]:  # Newest record id for email, if any
        if not email:
            return None
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT id FROM candidates WHERE email = ? ORDER BY created_at DESC LIMIT 1",
                (email,),
            ).fetchone()
        finally:
            conn.close()
        return row["id"] if row else None

    def _healed(self, record: CandidateRecord) -> CandidateRecord:  # Recompute a zero/invalid total and persist it
        corrected = heal_total_score(record.total_score, [item.score for item in record.questions])
        if corrected is None:
            return record
        logger.info("Healed total score for %s: %s -> %d", record.id, record.total_score, corrected)
        with self._lock:
            conn = self._connect()
            try:
                self._update(conn, record.id, {"total_score": corrected})
                conn.commit()
            finally:
                conn.close()
        return record.model_copy(update={"total_score": corrected})

    def _match(self, conn: sqlite3.Connection, *, email: str, session_id: Optional[str]) -> Optional[sqlite3.Row]:
        rows = conn.execute(
            """
            SELECT id, session_id, status FROM candidates
            WHERE (email = ? AND email != '') OR (session_id = ? AND session_id IS NOT NULL)
            ORDER BY created_at DESC
            """,
            (email or "", session_id),
        ).fetchall()
        for row in rows:
            # A completed record from another session belongs to an earlier attempt.
            if row["status"] == "completed" and row["session_id"] and session_id and row["session_id"] != session_id:
                continue
            return row
        return None

    def _insert(
        self,
        conn: sqlite3.Connection,
        candidate_id: str,
        *,
        fields: ProfileFields,
        session_id: Optional[str],
        resume_text: str,
        questions: Iterable[StoredQuestion],
        chat: Iterable[StoredMessage],
        status: str,
        interview_started_at: Optional[str],
        now: str,
    ) -> None:
        conn.execute(
            """
            INSERT INTO candidates (
                id, session_id, name, email, phone, designation, location, github, linkedin,
                resume_text, questions_json, chat_json, status, interview_started_at, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                candidate_id,
                session_id,
                *(getattr(fields, name).strip() for name in _PROFILE_COLUMNS),
                resume_text or "",
                json.dumps([item.to_wire() for item in questions]),
                json.dumps([item.to_wire() for item in chat]),
                status,
                interview_started_at,
                now,
                now,
            ),
        )

    def _update(self, conn: sqlite3.Connection, candidate_id: str, values: Mapping[str, Any]) -> None:
        if not values:
            return
        assignments = ", ".join(f"{column} = ?" for column in values)
        conn.execute(f"UPDATE candidates SET {assignments} WHERE id = ?", (*values.values(), candidate_id))


def _renumber(questions: Sequence[Any]) -> List[StoredQuestion]:
    stored: List[StoredQuestion] = []
    for index, item in enumerate(questions):
        raw = item.to_wire() if hasattr(item, "to_wire") else dict(item)
        stored.append(StoredQuestion.model_validate(raw).model_copy(update={"question_number": index + 1}))
    return stored


def _messages(chat: Sequence[Any]) -> List[StoredMessage]:
    return [StoredMessage.model_validate(item.to_wire() if hasattr(item, "to_wire") else dict(item)) for item in chat]


def _to_record(row: sqlite3.Row) -> CandidateRecord:
    return CandidateRecord(
        id=row["id"],
        session_id=row["session_id"],
        **{name: row[name] for name in _PROFILE_COLUMNS},
        resume_text=row["resume_text"],
        questions=[StoredQuestion.model_validate(item) for item in json.loads(row["questions_json"] or "[]")],
        total_score=row["total_score"],
        summary=row["summary"],
        pre_interview_chat=[StoredMessage.model_validate(item) for item in json.loads(row["chat_json"] or "[]")],
        status=row["status"],
        interview_started_at=row["interview_started_at"],
        completed_at=row["completed_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


__all__ = ["CandidateStore"]
