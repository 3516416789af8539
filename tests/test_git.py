"""
Tests for the git wrapper. subprocess.run is replaced by a scripted fake,
so no repository is needed.

Run with:
    pytest tests/test_git.py -v
"""

import logging
import subprocess

import pytest

from pushscript.git.repo import FileChange, GitError, GitRepo, StagedChanges
from pushscript.security import SecretScanner


class FakeGit:
    """Scripted stand-in for subprocess.run keyed on the git arguments."""

    def __init__(self):
        self.calls: list[tuple[str, ...]] = []
        self.outputs: dict[tuple[str, ...], str] = {
            ('--version',): 'git version 2.43.0\n',
            ('rev-parse', '--git-dir'): '.git\n',
        }
        self.failures: dict[tuple[str, ...], str] = {}

    def __call__(self, cmd, **kwargs):
        args = tuple(cmd[1:])
        self.calls.append(args)
        if args in self.failures:
            raise subprocess.CalledProcessError(1, cmd, output='', stderr=self.failures[args])
        return subprocess.CompletedProcess(cmd, 0, stdout=self.outputs.get(args, ''), stderr='')


@pytest.fixture
def fake_git(monkeypatch):
    fake = FakeGit()
    monkeypatch.setattr("pushscript.git.repo.subprocess.run", fake)
    return fake


@pytest.fixture
def repo(fake_git):
    return GitRepo()


# ---------------------------------------------------------------------------
# Setup checks
# ---------------------------------------------------------------------------

class TestGitRepoInit:

    def test_outside_repository(self, fake_git):
        fake_git.failures[('rev-parse', '--git-dir')] = 'fatal: not a git repository'
        with pytest.raises(GitError, match="Not inside a git repository"):
            GitRepo()

    def test_git_missing(self, monkeypatch):
        def missing(*args, **kwargs):
            raise FileNotFoundError("git")
        monkeypatch.setattr("pushscript.git.repo.subprocess.run", missing)
        with pytest.raises(GitError, match="not installed"):
            GitRepo()


# ---------------------------------------------------------------------------
# Working tree and index
# ---------------------------------------------------------------------------

class TestStaging:

    def test_status_lines(self, repo, fake_git):
        fake_git.outputs[('status', '--porcelain')] = ' M src/app.py\n?? notes.txt\n'
        assert repo.status() == [' M src/app.py', '?? notes.txt']

    def test_clean_status(self, repo):
        assert repo.status() == []

    def test_stage_all(self, repo, fake_git):
        repo.stage_all()
        assert fake_git.calls[-1] == ('add', '--all')

    def test_unstage_all(self, repo, fake_git):
        repo.unstage_all()
        assert fake_git.calls[-1] == ('reset', '--quiet')

    def test_unstage_all_without_head(self, repo, fake_git):
        fake_git.failures[('reset', '--quiet')] = "fatal: ambiguous argument 'HEAD'"
        repo.unstage_all()
        assert fake_git.calls[-1] == ('rm', '--cached', '-r', '--quiet', '--ignore-unmatch', '.')


class TestStagedChanges:

    def test_combines_numstat_and_status(self, repo, fake_git):
        fake_git.outputs[('diff', '--staged', '--numstat')] = (
            "10\t2\tsrc/app.py\n"
            "5\t0\tdocs/new.md\n"
            "-\t-\tassets/logo.png\n"
        )
        fake_git.outputs[('diff', '--staged', '--name-status')] = (
            "M\tsrc/app.py\nA\tdocs/new.md\nA\tassets/logo.png\n"
        )
        fake_git.outputs[('diff', '--staged')] = "diff --git a/src/app.py b/src/app.py\n+x\n"

        changes = repo.get_staged_changes()

        assert changes.total_files == 3
        assert changes.files[0] == FileChange("src/app.py", 10, 2, "M")
        assert changes.files[1].status == "A"
        assert changes.files[2].additions == 0
        assert changes.total_additions == 15
        assert changes.total_deletions == 2
        assert "src/app.py" in changes.diff

    def test_nothing_staged(self, repo):
        assert repo.get_staged_changes().is_empty

    def test_with_status(self):
        changes = StagedChanges(files=[
            FileChange("a.py", 1, 0, "A"), FileChange("b.py", 1, 1, "M"),
        ])
        assert [f.path for f in changes.with_status("A")] == ["a.py"]


class TestReadStagedFiles:

    @pytest.fixture
    def workdir(self, tmp_path, fake_git):
        fake_git.outputs[('rev-parse', '--show-toplevel')] = f"{tmp_path}\n"
        return tmp_path

    def test_reads_raw_bytes(self, repo, fake_git, workdir):
        (workdir / "src").mkdir()
        (workdir / "src" / "app.py").write_text("token = 'abc'\n", encoding="utf-8")
        fake_git.outputs[('diff', '--staged', '--name-only', '--diff-filter=d', '-z')] = "src/app.py\0"

        files = repo.read_staged_files()

        assert len(files) == 1
        assert files[0].path == "src/app.py"
        assert files[0].content == b"token = 'abc'\n"

    def test_missing_file_is_warned(self, repo, fake_git, workdir, caplog):
        (workdir / "ok.txt").write_text("hello", encoding="utf-8")
        fake_git.outputs[('diff', '--staged', '--name-only', '--diff-filter=d', '-z')] = "gone.txt\0ok.txt\0"

        with caplog.at_level(logging.WARNING, logger="pushscript.git.repo"):
            files = repo.read_staged_files()

        assert [f.path for f in files] == ["ok.txt"]
        assert "gone.txt" in caplog.text

    def test_binary_and_invalid_utf8_are_skipped_by_the_scan(self, repo, fake_git, workdir, caplog):
        (workdir / "blob.bin").write_bytes(b"\x00\x01\x02AKIAIOSFODNN7PRODKEY\x00")
        (workdir / "latin1.txt").write_bytes("caf\xe9 = 'x'\n".encode("latin-1"))
        (workdir / "ok.txt").write_text("hello\n", encoding="utf-8")
        fake_git.outputs[('diff', '--staged', '--name-only', '--diff-filter=d', '-z')] = (
            "blob.bin\0latin1.txt\0ok.txt\0"
        )

        with caplog.at_level(logging.WARNING, logger="pushscript.security.scanner"):
            result = SecretScanner().scan_files(repo.read_staged_files())

        assert result.files_scanned == 1
        assert result.skipped_files == ["blob.bin", "latin1.txt"]
        assert "Skipping blob.bin: binary content" in caplog.text
        assert "Skipping latin1.txt: not valid UTF-8" in caplog.text
        assert result.is_clean


# ---------------------------------------------------------------------------
# Commit and push
# ---------------------------------------------------------------------------

class TestCommitAndPush:

    def test_commit(self, repo, fake_git):
        repo.commit("feat: add thing\n\n- detail")
        assert fake_git.calls[-1] == ('commit', '-m', "feat: add thing\n\n- detail")

    def test_current_branch(self, repo, fake_git):
        fake_git.outputs[('rev-parse', '--abbrev-ref', 'HEAD')] = "dev\n"
        assert repo.current_branch() == "dev"

    @pytest.mark.parametrize("status, expected", [
        ("# branch.oid abc\n# branch.head main\n# branch.ab +0 -0\n", True),
        ("# branch.oid abc\n# branch.head main\n# branch.ab +2 -0\n", False),
    ])
    def test_is_up_to_date(self, repo, fake_git, status, expected):
        fake_git.outputs[('status', '-b', '--porcelain=v2')] = status
        assert repo.is_up_to_date() is expected

    def test_push(self, repo, fake_git):
        repo.push("main")
        assert fake_git.calls[-1] == ('push', 'origin', 'main')

    def test_push_rejected(self, repo, fake_git):
        fake_git.failures[('push', 'origin', 'main')] = (
            " ! [rejected]        main -> main (fetch first)\n"
        )
        with pytest.raises(GitError, match="Pull first"):
            repo.push("main")

    def test_push_other_failure(self, repo, fake_git):
        fake_git.failures[('push', 'origin', 'main')] = "fatal: could not read Username"
        with pytest.raises(GitError, match="could not read Username"):
            repo.push("main")
