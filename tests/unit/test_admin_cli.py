from candidate_records import CandidateStore
from observability import admin_cli


def _seed(db_path):
    store = CandidateStore(db_path)
    questions = [{"questionId": "q1", "difficulty": "easy", "question": "What is JSX?", "answer": "Syntax", "score": 70}]
    return store.finalize(
        profile={"name": "Ada", "email": "ada@example.com"},
        questions=questions,
        total_score=0,
        summary="Solid.",
    )


def test_list_and_show(tmp_db, capsys):
    candidate_id = _seed(tmp_db)
    assert admin_cli.main(["--db", str(tmp_db), "--list"]) == 0
    assert candidate_id in capsys.readouterr().out

    assert admin_cli.main(["--db", str(tmp_db), "--show", candidate_id]) == 0
    out = capsys.readouterr().out
    assert "total score: 70/100" in out
    assert "What is JSX?" in out


def test_delete_and_missing(tmp_db, capsys):
    candidate_id = _seed(tmp_db)
    assert admin_cli.main(["--db", str(tmp_db), "--delete", candidate_id]) == 0
    assert admin_cli.main(["--db", str(tmp_db), "--show", candidate_id]) == 1
    assert "not found" in capsys.readouterr().out
