"""Best-effort progress checkpoints sent to the records service."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Optional

from interview_session.errors import InterviewError
from interview_session.models import SessionSnapshot

logger = logging.getLogger(__name__)


class ProgressCheckpointer:
    """Send checkpoints in submission order on a single background worker.

    The first successful checkpoint uses ``save_progress``; later chat-only
    checkpoints use ``update_chat`` once a record is known. Failures are
    logged and never raised to the caller.
    """

    def __init__(self, client: Any, *, inline: bool = False) -> None:
        self._client = client
        self._executor = None if inline else ThreadPoolExecutor(max_workers=1, thread_name_prefix="checkpoint")
        self._lock = threading.Lock()
        self._candidate_id: Optional[str] = None
        self._last: Optional[Future] = None
        self.failures = 0

    @property
    def candidate_id(self) -> Optional[str]:
        with self._lock:
            return self._candidate_id

    def checkpoint(self, snapshot: SessionSnapshot, session_id: str, *, chat_only: bool = False) -> None:
        if self._executor is None:
            self._run(snapshot, session_id, chat_only)
            return
        self._last = self._executor.submit(self._run, snapshot, session_id, chat_only)

    def flush(self, timeout: Optional[float] = None) -> None:  # Wait for queued checkpoints
        if self._last is not None:
            self._last.result(timeout=timeout)

    def reset(self) -> None:  # Forget the known record after a start-over
        self.flush()
        with self._lock:
            self._candidate_id = None

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)

    def _run(self, snapshot: SessionSnapshot, session_id: str, chat_only: bool) -> None:
        profile = snapshot.profile
        known = self.candidate_id
        try:
            if chat_only and known and profile.email:
                self._client.update_chat(profile.email, snapshot.chat)
                return
            if known is None and not profile.has_identity():
                logger.debug("Skipping checkpoint for session %s: no name/email yet", session_id)
                return
            result = self._client.save_progress(
                profile,
                session_id=session_id,
                resume_text=snapshot.session.resume_text,
                questions=snapshot.session.questions,
                chat=snapshot.chat,
                interview_started_at=snapshot.session.start_time,
            )
        except InterviewError as exc:
            self.failures += 1
            logger.warning("Checkpoint failed for session %s: %s", session_id, exc)
            return
        except Exception:  # noqa: BLE001
            self.failures += 1
            logger.exception("Unexpected checkpoint error for session %s", session_id)
            return
        with self._lock:
            self._candidate_id = result.get("candidateId") or self._candidate_id


__all__ = ["ProgressCheckpointer"]
