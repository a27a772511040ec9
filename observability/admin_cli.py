"""Lightweight CLI helpers for reviewing stored candidate records."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from candidate_records import CandidateStore
from config.settings import settings


def _store(db_path: Optional[str] = None) -> CandidateStore:
    return CandidateStore(Path(db_path or settings.DB_PATH))


def list_candidates(store: CandidateStore) -> None:
    records = store.list_candidates()
    for record in records:
        print(f"[{record.created_at}] {record.id} {record.name} <{record.email}> {record.status} score={record.total_score}")
    print(f"{len(records)} candidate(s)")


def show_candidate(store: CandidateStore, candidate_id: str) -> None:
    record = store.get(candidate_id)
    print(f"{record.name} <{record.email}> phone={record.phone or '-'} status={record.status}")
    print(f"total score: {record.total_score}/100")
    for item in record.questions:
        score = "-" if item.score is None else f"{item.score:g}"
        print(f"  Q{item.question_number} [{item.difficulty}] score={score} time={item.time_taken}s")
        print(f"    {item.question}")
        print(f"    answer: {item.answer or '(no answer)'}")
        if item.feedback:
            print(f"    feedback: {item.feedback}")
    if record.summary:
        print(f"summary: {record.summary}")


def delete_candidate(store: CandidateStore, candidate_id: str) -> None:
    record = store.delete(candidate_id)
    print(f"deleted {record.id} ({record.name})")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Review interview candidates")
    parser.add_argument("--db", help="SQLite database path (defaults to DB_PATH)")
    parser.add_argument("--list", action="store_true", help="List candidates newest first")
    parser.add_argument("--show", metavar="ID", help="Show one candidate with per-question detail")
    parser.add_argument("--delete", metavar="ID", help="Delete one candidate")
    args = parser.parse_args(argv)

    store = _store(args.db)
    try:
        if args.show:
            show_candidate(store, args.show)
        elif args.delete:
            delete_candidate(store, args.delete)
        else:
            list_candidates(store)
    except KeyError as exc:
        print(f"error: {exc.args[0] if exc.args else exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
