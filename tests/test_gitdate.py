"""Tests for git-backed page dates."""

from __future__ import annotations

import datetime as dt
import os
import shutil
import subprocess
from pathlib import Path

import pytest

from gdsite import gitdate
from gdsite.gitdate import git_date, git_history_date, git_log_args

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

CREATED = dt.datetime(2021, 3, 4, 5, 6, 7, tzinfo=dt.timezone.utc)
MODIFIED = dt.datetime(2023, 8, 9, 10, 11, 12, tzinfo=dt.timezone.utc)


def git(repo: Path, *args: str, when: dt.datetime | None = None) -> None:
    env = dict(os.environ)
    if when is not None:
        env["GIT_AUTHOR_DATE"] = when.isoformat()
        env["GIT_COMMITTER_DATE"] = when.isoformat()
    subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.org", *args],
        cwd=repo,
        env=env,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    git(tmp_path, "init", "-q")
    page = tmp_path / "page.md"
    page.write_text("# First\n", encoding="utf-8")
    git(tmp_path, "add", "page.md")
    git(tmp_path, "commit", "-q", "-m", "add page", when=CREATED)
    page.write_text("# First\n\nMore.\n", encoding="utf-8")
    git(tmp_path, "commit", "-q", "-am", "edit page", when=MODIFIED)
    return tmp_path


@requires_git
class TestGitHistory:
    def test_created(self, repo: Path) -> None:
        assert git_date(repo / "page.md", "created") == CREATED

    def test_modified(self, repo: Path) -> None:
        assert git_date(repo / "page.md", "modified") == MODIFIED

    def test_default_mode_is_created(self, repo: Path) -> None:
        assert git_date(repo / "page.md") == CREATED

    def test_renamed_file_keeps_creation_date(self, repo: Path) -> None:
        git(repo, "mv", "page.md", "renamed.md")
        git(repo, "commit", "-q", "-m", "rename", when=MODIFIED + dt.timedelta(days=1))
        assert git_date(repo / "renamed.md", "created") == CREATED

    def test_untracked_file_has_no_history(self, repo: Path) -> None:
        draft = repo / "draft.md"
        draft.write_text("draft", encoding="utf-8")
        assert git_history_date(draft, "modified") is None


class TestFallbacks:
    def test_birth_time_when_no_history(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        birth = dt.datetime(2019, 1, 1, tzinfo=dt.timezone.utc)
        monkeypatch.setattr(gitdate, "git_history_date", lambda path, mode: None)
        monkeypatch.setattr(gitdate, "file_birth_date", lambda path: birth)
        assert git_date(tmp_path / "page.md", "modified") == birth

    def test_history_wins_over_birth_time(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(gitdate, "git_history_date", lambda path, mode: MODIFIED)
        monkeypatch.setattr(gitdate, "file_birth_date", lambda path: CREATED)
        assert git_date(tmp_path / "page.md", "modified") == MODIFIED

    def test_current_time_last(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(gitdate, "git_history_date", lambda path, mode: None)
        monkeypatch.setattr(gitdate, "file_birth_date", lambda path: None)
        before = dt.datetime.now(dt.timezone.utc)
        result = git_date(tmp_path / "page.md")
        after = dt.datetime.now(dt.timezone.utc)
        assert before <= result <= after

    def test_missing_file_resolves(self, tmp_path: Path) -> None:
        result = git_date(tmp_path / "missing" / "page.md", "modified")
        assert isinstance(result, dt.datetime)

    def test_git_not_installed(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        def missing_git(*args, **kwargs):
            raise FileNotFoundError("git")

        monkeypatch.setattr(gitdate.subprocess, "run", missing_git)
        assert git_history_date(tmp_path / "page.md", "created") is None

    def test_git_timeout(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        def slow_git(*args, **kwargs):
            raise subprocess.TimeoutExpired(cmd="git", timeout=1)

        monkeypatch.setattr(gitdate.subprocess, "run", slow_git)
        assert git_history_date(tmp_path / "page.md", "created") is None

    def test_git_failure_exit_code(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(
            gitdate.subprocess,
            "run",
            lambda *args, **kwargs: subprocess.CompletedProcess(args, 128, "", "not a git repository"),
        )
        assert git_history_date(tmp_path / "page.md", "created") is None

    def test_unparsable_output(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(
            gitdate.subprocess,
            "run",
            lambda *args, **kwargs: subprocess.CompletedProcess(args, 0, "yesterday\n", ""),
        )
        assert git_history_date(tmp_path / "page.md", "created") is None


class TestGitLogArgs:
    def test_created_follows_additions(self) -> None:
        args = git_log_args(Path("docs/page.md"), "created")
        assert "--diff-filter=A" in args
        assert "--follow" in args
        assert args[-1] == "page.md"

    def test_modified_takes_latest_commit(self) -> None:
        args = git_log_args(Path("docs/page.md"), "modified")
        assert "--diff-filter=A" not in args
        assert "-1" in args

    def test_unknown_mode(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            git_date(tmp_path / "page.md", "deleted")
