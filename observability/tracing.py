"""Simple span helper for recording workflow step timings."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from .logger import log_event


@contextmanager
def span(session_id: Optional[str], name: str, **fields: Any) -> Iterator[None]:
    start = time.time()
    outcome = "ok"
    try:
        yield
    except Exception:
        outcome = "error"
        raise
    finally:
        elapsed_ms = int((time.time() - start) * 1000)
        log_event("span", session_id or "-", step=name, ms=elapsed_ms, outcome=outcome, **fields)


__all__ = ["span"]
