"""Diff Processor - Turn staged changes into LLM context for the commit message."""

import re
from dataclasses import dataclass, field
from enum import IntEnum

from pushscript.git.repo import FileChange, StagedChanges


class Priority(IntEnum):
    """Order in which files are shown to the LLM."""
    SOURCE = 1
    TEST = 2
    CONFIG = 3
    DOCS = 4
    NOISE = 99


PRIORITY_LABELS = {
    Priority.SOURCE: "Source",
    Priority.TEST: "Tests",
    Priority.CONFIG: "Config",
    Priority.DOCS: "Docs",
}

STATUS_LABELS = {'A': 'added', 'M': 'modified', 'D': 'deleted', 'R': 'renamed'}


@dataclass
class ProcessedDiff:
    """LLM-ready representation of staged changes."""
    summary: str
    detailed_diff: str
    total_files: int = 0
    included_files: int = 0
    filtered_files: int = 0
    truncated: bool = False
    file_details: list[tuple[str, int, int]] = field(default_factory=list)

    @property
    def estimated_tokens(self) -> int:
        """Rough token estimate (~4 chars per token)."""
        return (len(self.summary) + len(self.detailed_diff)) // 4


@dataclass
class ProcessorConfig:
    max_tokens: int = 3000
    max_lines_per_file: int = 200


class DiffProcessor:
    """Classifies staged files, drops generated noise and fits the diff into a token budget."""

    NOISE_PATTERNS: list[str] = [
        r'package-lock\.json$', r'yarn\.lock$', r'pnpm-lock\.yaml$',
        r'poetry\.lock$', r'uv\.lock$', r'Pipfile\.lock$', r'Cargo\.lock$',
        r'Gemfile\.lock$', r'composer\.lock$',
        r'\.min\.js$', r'\.min\.css$', r'\.map$', r'\.pyc$', r'__pycache__',
        r'\.class$', r'(^|/)dist/', r'(^|/)build/', r'\.egg-info/',
        r'\.idea/', r'\.vscode/', r'\.DS_Store$',
        r'node_modules/', r'vendor/', r'venv/', r'\.venv/',
    ]

    TEST_PATTERNS: list[str] = [
        r'(^|/)tests?/', r'(^|/)specs?/', r'__tests__/',
        r'\.test\.', r'\.spec\.', r'(^|/)test_[^/]+\.py$', r'_test\.', r'_spec\.',
    ]

    CONFIG_PATTERNS: list[str] = [
        r'\.json$', r'\.ya?ml$', r'\.toml$', r'\.ini$', r'\.cfg$', r'\.env',
        r'\.config\.', r'(^|/)config/', r'Makefile$', r'Dockerfile$', r'docker-compose',
    ]

    DOCS_PATTERNS: list[str] = [
        r'\.md$', r'\.rst$', r'\.txt$', r'(^|/)docs/',
        r'README', r'CHANGELOG', r'LICENSE',
    ]

    def __init__(self, config: ProcessorConfig | None = None):
        self.config = config or ProcessorConfig()
        self._rules = [
            (Priority.NOISE, [re.compile(p, re.IGNORECASE) for p in self.NOISE_PATTERNS]),
            (Priority.TEST, [re.compile(p, re.IGNORECASE) for p in self.TEST_PATTERNS]),
            (Priority.DOCS, [re.compile(p, re.IGNORECASE) for p in self.DOCS_PATTERNS]),
            (Priority.CONFIG, [re.compile(p, re.IGNORECASE) for p in self.CONFIG_PATTERNS]),
        ]

    def process(self, changes: StagedChanges) -> ProcessedDiff:
        classified = [(f, self.classify(f.path)) for f in changes.files]
        kept = [(f, p) for f, p in classified if p != Priority.NOISE]
        kept.sort(key=lambda item: (item[1], -item[0].total_changes))
        noise_count = len(classified) - len(kept)

        detailed_diff, included, truncated = self._fit_diff(kept, changes.diff)
        return ProcessedDiff(
            summary=self._build_summary(kept, noise_count),
            detailed_diff=detailed_diff,
            total_files=len(changes.files),
            included_files=included,
            filtered_files=noise_count,
            truncated=truncated,
            file_details=[(f.path, f.additions, f.deletions) for f, _ in kept],
        )

    def classify(self, path: str) -> Priority:
        for priority, rules in self._rules:
            if any(rule.search(path) for rule in rules):
                return priority
        return Priority.SOURCE

    def _build_summary(self, files: list[tuple[FileChange, Priority]], noise_count: int) -> str:
        lines = ["FILES CHANGED:"]
        current = None
        for change, priority in files:
            if priority != current:
                current = priority
                lines.append(f"\n[{PRIORITY_LABELS.get(priority, 'Other')}]")
            status = STATUS_LABELS.get(change.status, 'modified')
            lines.append(f"  {status}: {change.path} (+{change.additions} -{change.deletions})")

        if noise_count > 0:
            lines.append(f"\n[Filtered: {noise_count} files (lock files, generated code)]")
        return "\n".join(lines)

    def _fit_diff(self, files: list[tuple[FileChange, Priority]], full_diff: str) -> tuple[str, int, bool]:
        """Add per-file diffs in priority order until the token budget runs out."""
        if not full_diff:
            return "", 0, False

        per_file = split_diff_by_file(full_diff)
        parts: list[str] = []
        tokens_used = 0

        for change, _ in files:
            file_diff = per_file.get(change.path)
            if file_diff is None:
                continue
            file_diff = self._truncate(file_diff, change.path)
            cost = len(file_diff) // 4
            if tokens_used + cost > self.config.max_tokens:
                return "\n".join(parts), len(parts), True
            parts.append(file_diff)
            tokens_used += cost

        return "\n".join(parts), len(parts), False

    def _truncate(self, diff: str, path: str) -> str:
        lines = diff.split('\n')
        limit = self.config.max_lines_per_file
        if len(lines) <= limit:
            return diff
        return '\n'.join(lines[:limit] + [f"... [{len(lines) - limit} more lines truncated from {path}]"])


def split_diff_by_file(diff: str) -> dict[str, str]:
    """Map each path in a unified diff to its own section."""
    sections: dict[str, list[str]] = {}
    current = None
    for line in diff.split('\n'):
        if line.startswith('diff --git'):
            match = re.search(r'diff --git a/(.+?) b/', line)
            current = match.group(1) if match else None
            if current:
                sections[current] = []
        if current:
            sections[current].append(line)
    return {path: '\n'.join(lines) for path, lines in sections.items()}
