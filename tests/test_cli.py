from __future__ import annotations

import io
import json
import sys
from typing import List

import pytest

from db.connection import get_connection
from db.repos.kv_repo import SQLiteKVRepo
from fixtures import CANONICAL_URL, PROFILE_URL, profile_html
from storage.cache import NamespacedStore
from storage.service import StorageService


def _run_cli_with_args(args_list: List[str]) -> None:
    """Run cli.py main() with provided argv in-process (no subprocess)."""
    argv_backup = sys.argv[:]
    try:
        sys.argv = ["cli.py"] + args_list
        # Import fresh to ensure clean parser each time
        if "cli" in sys.modules:
            del sys.modules["cli"]
        import cli  # type: ignore
        try:
            cli.main()  # type: ignore[attr-defined]
        except SystemExit as e:
            code = int(getattr(e, "code", 0) or 0)
            if code not in (0, None):
                raise
    finally:
        sys.argv = argv_backup


def _storage(db_path) -> StorageService:
    return StorageService(NamespacedStore(SQLiteKVRepo(get_connection(str(db_path)))))


@pytest.fixture()
def page(tmp_path, monkeypatch):
    monkeypatch.setenv("RUN_ID", "cli-test")
    path = tmp_path / "jane.html"
    path.write_text(profile_html(), encoding="utf-8")
    return path


def test_extract_caches_profile(tmp_path, page, capsys):
    db_path = tmp_path / "cli.db"
    _run_cli_with_args(["--db", str(db_path), "bootstrap"])
    _run_cli_with_args(["--db", str(db_path), "extract", "--html", str(page), "--url", PROFILE_URL])

    out = capsys.readouterr().out
    assert "Name: Jane Doe" in out
    assert "Quality: complete" in out

    cached = _storage(db_path).get_target_profile_by_url(CANONICAL_URL)
    assert cached is not None
    assert cached.current_company == "Acme Corp"


def test_extract_json_and_show_profile(tmp_path, page, capsys):
    db_path = tmp_path / "cli.db"
    _run_cli_with_args(["--db", str(db_path), "extract", "--html", str(page), "--url", PROFILE_URL, "--json"])
    out = capsys.readouterr().out
    assert '"extractionQuality": "complete"' in out

    _run_cli_with_args(["--db", str(db_path), "show-profile", "--url", CANONICAL_URL])
    assert '"name": "Jane Doe"' in capsys.readouterr().out


def test_show_profile_miss(tmp_path, capsys):
    _run_cli_with_args(["--db", str(tmp_path / "cli.db"), "show-profile", "--url", PROFILE_URL])
    assert "No cached profile" in capsys.readouterr().out


def test_invalid_page_exits_with_error(tmp_path, page, capsys):
    with pytest.raises(SystemExit):
        _run_cli_with_args(
            ["--db", str(tmp_path / "cli.db"), "extract", "--html", str(page), "--url", "https://www.linkedin.com/feed/"]
        )
    assert "INVALID_PAGE" in capsys.readouterr().out


def test_usage_forget_and_clear_all(tmp_path, page, capsys):
    db_path = tmp_path / "cli.db"
    _run_cli_with_args(["--db", str(db_path), "extract", "--html", str(page), "--url", PROFILE_URL])
    capsys.readouterr()

    _run_cli_with_args(["--db", str(db_path), "usage"])
    out = capsys.readouterr().out
    assert "sync:" in out and "local:" in out

    _run_cli_with_args(["--db", str(db_path), "sweep"])
    assert "Swept 0 expired records" in capsys.readouterr().out

    _run_cli_with_args(["--db", str(db_path), "forget", "--url", PROFILE_URL])
    assert "Removed 1 records" in capsys.readouterr().out

    _run_cli_with_args(["--db", str(db_path), "history"])
    assert "[]" in capsys.readouterr().out

    with pytest.raises(SystemExit):
        _run_cli_with_args(["--db", str(db_path), "clear-all", "--confirm", "nope"])
    _run_cli_with_args(["--db", str(db_path), "clear-all", "--confirm", "CONFIRM_DELETE_ALL"])
    assert "Cleared" in capsys.readouterr().out


def test_serve_answers_json_lines(tmp_path, monkeypatch, capsys):
    requests_in = [
        json.dumps({"type": "PING"}),
        "not json",
        json.dumps({"type": "EXTRACT_PROFILE", "payload": {"url": PROFILE_URL, "html": profile_html()}}),
        json.dumps({"type": "GET_CACHED_PROFILE", "payload": {"url": CANONICAL_URL}}),
    ]
    monkeypatch.setattr(sys, "stdin", io.StringIO("\n".join(requests_in) + "\n"))
    _run_cli_with_args(["--db", str(tmp_path / "cli.db"), "serve"])

    lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
    responses = [json.loads(line) for line in lines]
    assert responses[0] == {"success": True, "data": "pong"}
    assert responses[1]["error"]["code"] == "INVALID_REQUEST"
    assert responses[2]["quality"] == "complete"
    assert responses[3]["data"]["name"] == "Jane Doe"
