"""Secret Detection Package"""

from pushscript.security.entropy import DEFAULT_MIN_ENTROPY, EntropyCache, shannon_entropy
from pushscript.security.patterns import (
    CATEGORIES,
    SECRET_PATTERNS,
    SEVERITY_LEVELS,
    Pattern,
    PatternStats,
    all_patterns,
    get_pattern,
    pattern_stats,
    patterns_by_category,
    patterns_by_provider,
)
from pushscript.security.report import detection_config, display_scan_results, should_block
from pushscript.security.scanner import (
    CONTEXT_LINES,
    Finding,
    ScanResult,
    SecretScanner,
    StagedFile,
    group_by_severity,
    redact_secret,
)
from pushscript.security.validator import ContextValidator, Validation, validate_context

__all__ = [
    "DEFAULT_MIN_ENTROPY",
    "EntropyCache",
    "shannon_entropy",
    "CATEGORIES",
    "SECRET_PATTERNS",
    "SEVERITY_LEVELS",
    "Pattern",
    "PatternStats",
    "all_patterns",
    "get_pattern",
    "pattern_stats",
    "patterns_by_category",
    "patterns_by_provider",
    "detection_config",
    "display_scan_results",
    "should_block",
    "CONTEXT_LINES",
    "Finding",
    "ScanResult",
    "SecretScanner",
    "StagedFile",
    "group_by_severity",
    "redact_secret",
    "ContextValidator",
    "Validation",
    "validate_context",
]
