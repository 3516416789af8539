"""Secret scanner - applies the pattern registry to staged file contents."""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from pushscript.security.entropy import EntropyCache
from pushscript.security.patterns import SECRET_PATTERNS, SEVERITY_LEVELS, Pattern
from pushscript.security.validator import CONFIDENCE_RANK, LOW, ContextValidator

logger = logging.getLogger(__name__)

CONTEXT_LINES = 3  # lines kept on each side of a match
SECRET_PREVIEW_CHARS = 4  # leading characters of a secret shown in output
BLOCKING_SEVERITIES = ('critical', 'high')

BINARY_SNIFF_BYTES = 8192  # a NUL byte in this prefix marks a file as binary

SEVERITY_RANK = {'low': 0, 'medium': 1, 'high': 2, 'critical': 3}


def redact_secret(value: str, visible: int = SECRET_PREVIEW_CHARS) -> str:
    """Keep the first few characters of a secret and hide the rest."""
    if len(value) <= visible * 2:
        return '*' * len(value)
    return f"{value[:visible]}... ({len(value)} chars)"


@dataclass(frozen=True)
class StagedFile:
    """A staged path and its working-tree content. Raw bytes are decoded at scan time."""
    path: str
    content: str | bytes


@dataclass(frozen=True)
class Finding:
    """One validated match. ``secret_value`` is raw; display ``redacted``."""
    pattern_name: str
    secret_value: str = field(repr=False)
    description: str
    severity: str
    confidence: str
    reason: str
    entropy: float
    file: str
    line: int
    context: str = field(default="", repr=False)
    provider: str | None = None
    category: str = ""
    has_negative_signals: bool = False

    @property
    def redacted(self) -> str:
        return redact_secret(self.secret_value)

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}"

    @property
    def is_blocking(self) -> bool:
        return self.severity in BLOCKING_SEVERITIES


def group_by_severity(findings: Iterable[Finding]) -> dict[str, list[Finding]]:
    """Bucket findings into critical/high/medium/low, always with all four keys."""
    groups: dict[str, list[Finding]] = {level: [] for level in SEVERITY_LEVELS}
    for finding in findings:
        groups[finding.severity].append(finding)
    return groups


@dataclass
class ScanResult:
    """Everything one scan run produced."""
    findings: list[Finding] = field(default_factory=list)
    files_scanned: int = 0
    skipped_files: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.findings)

    @property
    def is_clean(self) -> bool:
        return not self.findings

    @property
    def files_skipped(self) -> int:
        return len(self.skipped_files)

    @property
    def should_block(self) -> bool:
        return any(f.is_blocking for f in self.findings)

    @property
    def by_severity(self) -> dict[str, list[Finding]]:
        return group_by_severity(self.findings)


class SecretScanner:
    """Runs every registered pattern over file contents.

    Owns the entropy cache for the lifetime of the scanner; create one per
    CLI run.
    """

    def __init__(self, patterns: Mapping[str, Pattern] | None = None,
                 cache: EntropyCache | None = None):
        self.patterns = SECRET_PATTERNS if patterns is None else patterns
        self.cache = cache if cache is not None else EntropyCache()
        self.validator = ContextValidator(self.cache)
        self._compiled = self._compile_patterns()

    def _compile_patterns(self) -> list[tuple[Pattern, re.Pattern]]:
        compiled = []
        for pattern in self.patterns.values():
            try:
                compiled.append((pattern, re.compile(pattern.regex)))
            except re.error as e:
                logger.warning(f"Skipping pattern {pattern.name}: invalid regex ({e})")
        return compiled

    @property
    def active_patterns(self) -> list[Pattern]:
        return [pattern for pattern, _ in self._compiled]

    def scan_file(self, path: str, content: str) -> list[Finding]:
        """Find secrets in one file. Low-confidence matches are dropped."""
        lines = content.split('\n')
        candidates: list[tuple[tuple[int, int], Finding, bool]] = []

        for pattern, regex in self._compiled:
            try:
                matches = list(regex.finditer(content))
            except (re.error, RecursionError) as e:
                logger.warning(f"Pattern {pattern.name} failed on {path}: {e}")
                continue

            for match in matches:
                value = match.group(0)
                line = content.count('\n', 0, match.start()) + 1
                context = self._context_window(lines, line)
                validation = self.validator.validate(value, context, pattern)

                if validation.confidence == LOW:
                    logger.debug(f"Discarded {pattern.name} at {path}:{line} ({validation.reason})")
                    continue

                candidates.append((match.span(), Finding(
                    pattern_name=pattern.name,
                    secret_value=value,
                    description=pattern.description,
                    severity=pattern.severity,
                    confidence=validation.confidence,
                    reason=validation.reason,
                    entropy=validation.entropy,
                    file=path,
                    line=line,
                    context=context,
                    provider=pattern.provider,
                    category=pattern.category,
                    has_negative_signals=validation.has_negative_signals,
                ), pattern.is_heuristic))

        return self._deduplicate(candidates)

    def scan_files(self, files: Iterable[StagedFile | Mapping[str, str]]) -> ScanResult:
        """Scan a batch of files. A file that cannot be scanned is skipped."""
        result = ScanResult()
        for staged in files:
            path, content = _unpack(staged)
            try:
                content = _as_text(content)
                findings = self.scan_file(path, content)
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping {path}: {e}")
                result.skipped_files.append(path)
                continue
            result.files_scanned += 1
            result.findings.extend(findings)

        logger.debug(
            f"Scanned {result.files_scanned} files, {result.total} findings, "
            f"entropy cache {self.cache.stats()}"
        )
        return result

    @staticmethod
    def _context_window(lines: list[str], line: int) -> str:
        start = max(0, line - 1 - CONTEXT_LINES)
        end = min(len(lines), line + CONTEXT_LINES)
        return '\n'.join(lines[start:end])

    @staticmethod
    def _deduplicate(candidates: list[tuple[tuple[int, int], Finding, bool]]) -> list[Finding]:
        """Keep one finding per exact span: most severe, then most confident, then first.

        A heuristic match lying inside a more severe literal-prefix match
        (the tail of ``sk-...`` caught by the generic key pattern) is dropped.
        """
        best: dict[tuple[int, int], tuple[Finding, bool]] = {}
        for span, finding, heuristic in candidates:
            current = best.get(span)
            if current is None or _rank(finding) > _rank(current[0]):
                best[span] = (finding, heuristic)

        literal = [(span, finding) for span, (finding, heuristic) in best.items() if not heuristic]
        kept = []
        for span in sorted(best):
            finding, heuristic = best[span]
            outer = heuristic and next((
                other for other_span, other in literal
                if _contains(other_span, span)
                and SEVERITY_RANK[other.severity] > SEVERITY_RANK[finding.severity]
            ), None)
            if outer:
                logger.debug(f"Dropped {finding.pattern_name} at {finding.location} inside {outer.pattern_name}")
                continue
            kept.append(finding)
        return kept


def _contains(outer: tuple[int, int], inner: tuple[int, int]) -> bool:
    return outer[0] <= inner[0] and inner[1] <= outer[1]


def _rank(finding: Finding) -> tuple[int, int]:
    return SEVERITY_RANK[finding.severity], CONFIDENCE_RANK[finding.confidence]


def _unpack(staged) -> tuple[str, object]:
    if isinstance(staged, Mapping):
        return staged['path'], staged['content']
    return staged.path, staged.content


def _as_text(content) -> str:
    if isinstance(content, bytes):
        if b'\0' in content[:BINARY_SNIFF_BYTES]:
            raise ValueError("binary content")
        try:
            content = content.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ValueError(f"not valid UTF-8 ({e.reason} at byte {e.start})") from e
    if not isinstance(content, str):
        raise TypeError(f"unsupported content type {type(content).__name__}")
    if '\x00' in content[:BINARY_SNIFF_BYTES]:
        raise ValueError("binary content")
    return content
