"""
Tests for the context validator: entropy checks, keyword checks and
negative signals.

Run with:
    pytest tests/test_validator.py -v
"""

import pytest

from pushscript.security.entropy import EntropyCache
from pushscript.security.patterns import Pattern, get_pattern
from pushscript.security.validator import (
    CONFIDENCE_RANK, HIGH, LOW, MEDIUM, ContextValidator, validate_context,
)

HIGH_ENTROPY_VALUE = "Zq8Lw3Nv7Xp2Rk9Tb4Hm6Jc1Yf5Gd0Se"  # 32 distinct chars, 5.0 bits
LOW_ENTROPY_VALUE = "aaaaaaaabbbbbbbbaaaaaaaabbbbbbbb"


def make_pattern(**overrides) -> Pattern:
    fields = dict(
        name="custom", regex=r"\w+", description="Custom",
        severity="high", confidence="medium", category="security",
    )
    fields.update(overrides)
    return Pattern(**fields)


@pytest.fixture
def validator():
    return ContextValidator(EntropyCache())


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------

class TestEntropyCheck:

    @pytest.fixture
    def pattern(self):
        return make_pattern(requires_entropy=True, min_entropy=4.5)

    def test_high_entropy(self, validator, pattern):
        result = validator.validate(HIGH_ENTROPY_VALUE, "value here", pattern)
        assert result.confidence == HIGH
        assert result.reason.startswith("High entropy")
        assert result.entropy == pytest.approx(5.0)

    def test_low_entropy(self, validator, pattern):
        result = validator.validate(LOW_ENTROPY_VALUE, "value here", pattern)
        assert result.confidence == LOW
        assert result.reason.startswith("Low entropy")

    def test_threshold_is_inclusive(self, validator):
        pattern = make_pattern(requires_entropy=True, min_entropy=2.0)
        result = validator.validate("abcd", "", pattern)
        assert result.confidence == HIGH

    def test_entropy_is_cached(self, pattern):
        cache = EntropyCache()
        validator = ContextValidator(cache)
        validator.validate(HIGH_ENTROPY_VALUE, "", pattern)
        validator.validate(HIGH_ENTROPY_VALUE, "", pattern)
        assert cache.hits == 1


class TestKeywordChecks:

    @pytest.mark.parametrize("field, keyword, label", [
        ("context_keywords", "stripe", "context keywords"),
        ("nearby_keywords", "AKIA", "nearby keywords"),
        ("variable_names", "api_key", "variable name"),
    ])
    def test_found(self, validator, field, keyword, label):
        pattern = make_pattern(**{field: (keyword,)})
        result = validator.validate("x9Kq", f"config {keyword.upper()} = x9Kq", pattern)
        assert result.confidence == HIGH
        assert result.reason == f"Found {label}"

    @pytest.mark.parametrize("field, label", [
        ("context_keywords", "context keywords"),
        ("nearby_keywords", "nearby keywords"),
        ("variable_names", "variable name"),
    ])
    def test_missing(self, validator, field, label):
        pattern = make_pattern(**{field: ("stripe",)})
        result = validator.validate("x9Kq", "unrelated = x9Kq", pattern)
        assert result.confidence == LOW
        assert result.reason == f"Missing {label}"

    def test_requires_context_with_blank_context(self, validator):
        pattern = make_pattern(requires_context=True)
        result = validator.validate("x9Kq", "   \n  ", pattern)
        assert result.confidence == LOW
        assert result.reason == "Generic pattern requires context"

    def test_requires_context_satisfied_by_any_text(self, validator):
        pattern = make_pattern(requires_context=True)
        result = validator.validate("x9Kq", "value = x9Kq", pattern)
        assert result.confidence == MEDIUM


class TestNoChecks:

    @pytest.mark.parametrize("base", [HIGH, MEDIUM])
    def test_keeps_base_confidence(self, validator, base):
        pattern = make_pattern(confidence=base)
        result = validator.validate("x9Kq", "value = x9Kq", pattern)
        assert result.confidence == base
        assert result.reason == "Matched known token format"


# ---------------------------------------------------------------------------
# Combining checks
# ---------------------------------------------------------------------------

class TestCombination:

    def test_lowest_verdict_wins(self, validator):
        pattern = make_pattern(
            requires_entropy=True, min_entropy=4.5,
            context_keywords=("secret",),
            variable_names=("jwt_secret",),
        )
        result = validator.validate(HIGH_ENTROPY_VALUE, f"secret = '{HIGH_ENTROPY_VALUE}'", pattern)
        assert result.confidence == LOW
        assert result.reason == "Missing variable name"

    def test_later_failure_reported_on_tie(self, validator):
        pattern = make_pattern(
            requires_entropy=True, min_entropy=4.5,
            context_keywords=("secret",),
        )
        result = validator.validate(LOW_ENTROPY_VALUE, "nothing relevant", pattern)
        assert result.confidence == LOW
        assert result.reason == "Missing context keywords"

    def test_all_checks_pass(self, validator):
        pattern = make_pattern(
            requires_entropy=True, min_entropy=4.5,
            context_keywords=("secret",),
            variable_names=("jwt_secret",),
        )
        context = f"jwt_secret = '{HIGH_ENTROPY_VALUE}'"
        result = validator.validate(HIGH_ENTROPY_VALUE, context, pattern)
        assert result.confidence == HIGH


# ---------------------------------------------------------------------------
# Negative signals
# ---------------------------------------------------------------------------

class TestNegativeSignals:

    @pytest.fixture
    def pattern(self):
        return make_pattern(requires_entropy=True, min_entropy=4.5, context_keywords=("secret",))

    @pytest.mark.parametrize("marker", [
        "test", "example", "sample", "demo", "placeholder",
        "dummy", "fake", "mock", "stub", "sk_test", "EXAMPLE",
    ])
    def test_marker_forces_low(self, validator, pattern, marker):
        context = f"{marker} secret = '{HIGH_ENTROPY_VALUE}'"
        result = validator.validate(HIGH_ENTROPY_VALUE, context, pattern)
        assert result.confidence == LOW
        assert result.reason == "Likely test/example data"
        assert result.has_negative_signals is True

    def test_marker_in_value_counts(self, validator, pattern):
        value = "test" + HIGH_ENTROPY_VALUE
        result = validator.validate(value, "secret", pattern)
        assert result.confidence == LOW

    def test_marker_inside_a_word_is_ignored(self, validator, pattern):
        context = f"latest secret = '{HIGH_ENTROPY_VALUE}'"
        result = validator.validate(HIGH_ENTROPY_VALUE, context, pattern)
        assert result.confidence == HIGH
        assert result.has_negative_signals is False

    def test_marker_buried_in_random_value_is_not_seen(self, validator, pattern):
        value = "Zq8XtestK2mP9vR4wL7nB3cF6hJ1yT5d"
        result = validator.validate(value, f"jwt_secret = '{value}'", pattern)
        assert result.has_negative_signals is False

    def test_marker_overrides_literal_pattern(self, validator):
        pattern = make_pattern(confidence=HIGH)
        result = validator.validate("ghp_realtoken", "# example token", pattern)
        assert result.confidence == LOW

    def test_sequential_digits_downgrade_heuristic_patterns(self, validator, pattern):
        context = f"secret = '{HIGH_ENTROPY_VALUE}' # id 123456"
        result = validator.validate(HIGH_ENTROPY_VALUE, context, pattern)
        assert result.confidence == LOW
        assert result.has_negative_signals is True

    def test_sequential_digits_only_flag_literal_patterns(self, validator):
        pattern = make_pattern(confidence=HIGH)
        result = validator.validate("ghp_1234567890abcdef", "token: ghp_1234567890abcdef", pattern)
        assert result.confidence == HIGH
        assert result.has_negative_signals is True

    @pytest.mark.parametrize("context", [
        "secret = value",
        "no keywords at all",
        "",
        "jwt_secret = value",
    ])
    def test_adding_a_marker_never_raises_confidence(self, validator, pattern, context):
        before = validator.validate(HIGH_ENTROPY_VALUE, context, pattern)
        after = validator.validate(HIGH_ENTROPY_VALUE, context + "\n# sample", pattern)
        assert CONFIDENCE_RANK[after.confidence] <= CONFIDENCE_RANK[before.confidence]


class TestRegistryPatterns:

    def test_aws_secret_with_context(self):
        value = "wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY"
        result = validate_context(value, f"aws_secret_key: '{value}'", get_pattern('aws_secret_key'))
        assert result.confidence == HIGH
        assert result.entropy >= 4.5

    def test_generic_key_without_context(self):
        result = validate_context(HIGH_ENTROPY_VALUE, "", get_pattern('api_key_generic'))
        assert result.confidence == LOW
