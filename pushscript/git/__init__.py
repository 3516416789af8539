"""Git Operations Package"""

from pushscript.git.repo import GitRepo, GitError, FileChange, StagedChanges
from pushscript.git.diff_processor import DiffProcessor, ProcessedDiff, ProcessorConfig, Priority

__all__ = [
    "GitRepo",
    "GitError",
    "FileChange",
    "StagedChanges",
    "DiffProcessor",
    "ProcessedDiff",
    "ProcessorConfig",
    "Priority",
]
