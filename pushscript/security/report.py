"""Scan reporting and the commit decision gate."""

from collections.abc import Iterable

from pushscript.output import (
    bold, dim, field, info, print_success, print_table, print_title, print_warning,
    severity_heading, warning,
)
from pushscript.security.entropy import DEFAULT_MIN_ENTROPY
from pushscript.security.patterns import SECRET_PATTERNS, SEVERITY_LEVELS, PatternStats, pattern_stats
from pushscript.security.scanner import CONTEXT_LINES, Finding, ScanResult, redact_secret

CONTEXT_PREVIEW_CHARS = 100


def should_block(findings: Iterable[Finding]) -> bool:
    """True if any finding is critical or high. Medium and low never block."""
    return any(f.is_blocking for f in findings)


def detection_config() -> dict:
    """Summary of the detection setup for status displays."""
    stats = pattern_stats()
    return {
        'patterns': stats.total,
        'categories': len(stats.by_category),
        'entropy_threshold': DEFAULT_MIN_ENTROPY,
        'context_lines': CONTEXT_LINES,
    }


def mask_context(context: str, secret_value: str) -> str:
    """Replace every line of the secret that appears in the context."""
    masked = context
    for part in secret_value.split('\n'):
        part = part.strip()
        if part:
            masked = masked.replace(part, redact_secret(part))
    return masked


def _format_finding(index: int, finding: Finding, verbose: bool) -> list[str]:
    lines = [
        f"  {index}. {bold(finding.description)}",
        field('Location', finding.location),
        field('Value', finding.redacted),
        field('Confidence', f"{finding.confidence} ({finding.reason})"),
    ]
    if verbose:
        lines.append(field('Entropy', f"{finding.entropy:.2f}"))
        if finding.provider:
            lines.append(field('Provider', finding.provider))
        lines.append(field('Category', finding.category))
        if finding.has_negative_signals:
            lines.append(f"     {warning('Potential test/example data')}")
        excerpt = mask_context(finding.context, finding.secret_value)
        lines.append(field('Context', excerpt.strip().replace('\n', ' | ')[:CONTEXT_PREVIEW_CHARS]))
    return lines


def display_scan_results(result: ScanResult, verbose: bool = False,
                         stats: PatternStats | None = None) -> None:
    """Print the scan summary: totals, coverage, then findings by severity."""
    stats = stats or pattern_stats(SECRET_PATTERNS)

    if result.is_clean:
        print_success(f"No secrets detected in {result.files_scanned} files")
    else:
        print_title(f"Secret scan: {result.total} potential secrets found")
        print(dim(f"  Using {stats.total} patterns across {len(stats.by_category)} categories"))
    if result.skipped_files:
        print(dim(f"  {result.files_skipped} files skipped: {', '.join(result.skipped_files)}"))
    if result.is_clean:
        return

    groups = result.by_severity
    for severity in SEVERITY_LEVELS:
        findings = groups[severity]
        if not findings:
            continue
        print(f"\n{severity_heading(severity, len(findings))}")
        for index, finding in enumerate(findings, 1):
            print('\n'.join(_format_finding(index, finding, verbose)))


def print_scan_verdict(result: ScanResult) -> None:
    """One-line outcome after the detailed report."""
    if should_block(result.findings):
        print_warning("Critical or high severity secrets detected. Review them before committing.")
    elif result.findings:
        print(info("Only medium/low severity findings. Consider moving them to environment variables."))


def display_pattern_stats(stats: PatternStats | None = None) -> None:
    """Print registry statistics (used by `pushscript patterns`)."""
    stats = stats or pattern_stats()
    print_title(f"Secret patterns: {stats.total}")
    print_table('By category:', sorted(stats.by_category.items()), value_style='info')
    print_table('By severity:', [(s, stats.by_severity[s]) for s in SEVERITY_LEVELS if s in stats.by_severity])
    print_table('By base confidence:', stats.by_confidence.items())
    print(f"\n  {dim(f'{len(stats.by_provider)} providers covered')}\n")
