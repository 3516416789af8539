"""Git Repository - staging, staged content, commit and push."""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from pushscript.security.scanner import StagedFile

logger = logging.getLogger(__name__)

UP_TO_DATE_MARKER = '# branch.ab +0 -0'


@dataclass
class FileChange:
    """Represents a single file's changes."""
    path: str
    additions: int
    deletions: int
    status: str = "M"  # A, M, D, R as reported by --name-status

    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions

    @property
    def directory(self) -> str:
        """Top-level directory, used as the commit scope."""
        parts = Path(self.path).parts
        if len(parts) > 2 and parts[0] in ('src', 'lib', 'app'):
            return parts[1]
        return parts[0] if len(parts) > 1 else ''


@dataclass
class StagedChanges:
    """Complete picture of what's staged for commit."""
    files: list[FileChange] = field(default_factory=list)
    diff: str = ""

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_additions(self) -> int:
        return sum(f.additions for f in self.files)

    @property
    def total_deletions(self) -> int:
        return sum(f.deletions for f in self.files)

    @property
    def is_empty(self) -> bool:
        return len(self.files) == 0

    def with_status(self, status: str) -> list[FileChange]:
        return [f for f in self.files if f.status == status]


class GitError(Exception):
    """Raised when git operations fail."""
    pass


class GitRepo:
    """Thin wrapper over the git CLI for the commit/push workflow."""

    def __init__(self, cwd: str | None = None):
        self.cwd = cwd
        self._verify_git_available()
        self._verify_in_repo()

    def _run_git(self, *args: str) -> str:
        """Run a git command and return stdout."""
        logger.debug(f"git {' '.join(args)}")
        try:
            result = subprocess.run(
                ['git', *args],
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace',
                cwd=self.cwd,
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_git_available(self) -> None:
        try:
            self._run_git('--version')
        except GitError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_in_repo(self) -> None:
        try:
            self._run_git('rev-parse', '--git-dir')
        except GitError:
            raise GitError("Not inside a git repository")

    @property
    def root(self) -> Path:
        return Path(self._run_git('rev-parse', '--show-toplevel').strip())

    # -- working tree ------------------------------------------------------

    def status(self) -> list[str]:
        """Porcelain status lines, empty when the tree is clean."""
        output = self._run_git('status', '--porcelain')
        return [line for line in output.split('\n') if line.strip()]

    def stage_all(self) -> None:
        self._run_git('add', '--all')

    def unstage_all(self) -> None:
        """Remove everything from the index, keeping working-tree edits."""
        try:
            self._run_git('reset', '--quiet')
        except GitError:
            # No HEAD yet (first commit): nothing to reset to
            self._run_git('rm', '--cached', '-r', '--quiet', '--ignore-unmatch', '.')

    # -- staged content ----------------------------------------------------

    def get_staged_changes(self) -> StagedChanges:
        files = self._get_staged_files()
        diff = self._run_git('diff', '--staged')
        return StagedChanges(files=files, diff=diff)

    def _get_staged_files(self) -> list[FileChange]:
        """Combine 'git diff --staged --numstat' with '--name-status'."""
        numstat = self._run_git('diff', '--staged', '--numstat')
        if not numstat.strip():
            return []

        statuses = {}
        for line in self._run_git('diff', '--staged', '--name-status').strip().split('\n'):
            parts = line.split('\t')
            if len(parts) >= 2:
                statuses[parts[-1]] = parts[0][:1]

        files = []
        for line in numstat.strip().split('\n'):
            parts = line.split('\t')
            if len(parts) >= 3:
                additions = int(parts[0]) if parts[0] != '-' else 0
                deletions = int(parts[1]) if parts[1] != '-' else 0
                path = parts[-1]
                files.append(FileChange(
                    path=path, additions=additions, deletions=deletions,
                    status=statuses.get(path, 'M'),
                ))
        return files

    def staged_paths(self) -> list[str]:
        """Staged paths that still exist (deletions excluded)."""
        output = self._run_git('diff', '--staged', '--name-only', '--diff-filter=d', '-z')
        return [p for p in output.split('\0') if p]

    def read_staged_files(self) -> list[StagedFile]:
        """Raw working-tree bytes of every staged file; the scanner decides what is text."""
        root = self.root
        staged = []
        for rel_path in self.staged_paths():
            path = root / rel_path
            try:
                data = path.read_bytes()
            except OSError as e:
                logger.warning(f"Could not read {rel_path}: {e}")
                continue
            staged.append(StagedFile(path=rel_path, content=data))
        return staged

    # -- commit and push ---------------------------------------------------

    def commit(self, message: str) -> None:
        self._run_git('commit', '-m', message)

    def current_branch(self) -> str:
        return self._run_git('rev-parse', '--abbrev-ref', 'HEAD').strip()

    def is_up_to_date(self) -> bool:
        """True when the branch has nothing to push to its upstream."""
        return UP_TO_DATE_MARKER in self._run_git('status', '-b', '--porcelain=v2')

    def push(self, branch: str, remote: str = 'origin') -> None:
        try:
            self._run_git('push', remote, branch)
        except GitError as e:
            if 'non-fast-forward' in str(e) or 'fetch first' in str(e):
                raise GitError(f"Remote has new changes. Pull first: git pull --rebase {remote} {branch}")
            raise
