"""CLI Utility Functions"""

import re
from collections import Counter
from pathlib import PurePosixPath

from pushscript import COMMIT_TYPE_NAMES
from pushscript.git import DiffProcessor, Priority, StagedChanges
from pushscript.output import dim

TYPES_PATTERN = '|'.join(COMMIT_TYPE_NAMES)

JUNK_PATTERNS = re.compile(r'^(diff --git |@@\s|[+-]{3}\s[ab]/|index [0-9a-f]|```)')

STATUS_VERBS = {'A': 'add', 'D': 'remove', 'R': 'rename', 'M': 'update'}


def clean_commit_message(text: str) -> str:
    """Clean up LLM response to extract just the commit message."""
    lines = text.strip().split('\n')
    start_idx = 0
    for i, line in enumerate(lines):
        if re.match(rf'^[`\s]*({TYPES_PATTERN})[\(!:]', line):
            start_idx = i
            break

    # Cut off trailing diff output or code fences
    end_idx = len(lines)
    for i in range(start_idx + 1, len(lines)):
        if JUNK_PATTERNS.match(lines[i]):
            end_idx = i
            break

    lines = '\n'.join(lines[start_idx:end_idx]).rstrip().split('\n')
    lines[0] = lines[0].strip('`').strip()
    return '\n'.join(lines)


def simple_commit_message(changes: StagedChanges) -> str:
    """Conventional commit message built from file names alone, used when no LLM answers."""
    if changes.is_empty:
        return "chore: update files"

    processor = DiffProcessor()
    priorities = {processor.classify(f.path) for f in changes.files}
    added = changes.with_status('A')

    if priorities <= {Priority.DOCS}:
        commit_type = 'docs'
    elif priorities <= {Priority.TEST}:
        commit_type = 'test'
    elif added and Priority.SOURCE in {processor.classify(f.path) for f in added}:
        commit_type = 'feat'
    else:
        commit_type = 'chore'

    directories = Counter(f.directory for f in changes.files if f.directory)
    scope = f"({directories.most_common(1)[0][0]})" if directories else ""

    if changes.total_files == 1:
        change = changes.files[0]
        subject = f"{STATUS_VERBS.get(change.status, 'update')} {PurePosixPath(change.path).name}"
    elif added and len(added) == changes.total_files:
        subject = f"add {len(added)} files"
    else:
        subject = f"update {changes.total_files} files"

    return f"{commit_type}{scope}: {subject}"


def confirm(question: str, default: bool = False) -> bool:
    """Ask a yes/no question. EOF counts as the default answer.

    KeyboardInterrupt is left to the caller so it can abort cleanly.
    """
    suffix = "[Y/n]" if default else "[y/N]"
    try:
        answer = input(f"{question} {dim(suffix)} ").strip().lower()
    except EOFError:
        print()
        return default
    if not answer:
        return default
    return answer in ('y', 'yes')
