from __future__ import annotations  # Re-export candidate_records public API

from .models import CandidateRecord, ProfileFields, RecordStatus, StoredMessage, StoredQuestion  # noqa: F401
from .store import CandidateStore  # noqa: F401

__all__ = [
    "CandidateRecord",
    "CandidateStore",
    "ProfileFields",
    "RecordStatus",
    "StoredMessage",
    "StoredQuestion",
]
