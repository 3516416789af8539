"""Context validation - turns a raw regex match into a confidence tier."""

import re
from dataclasses import dataclass

from pushscript.security.entropy import EntropyCache
from pushscript.security.patterns import CONFIDENCE_LEVELS, Pattern

HIGH, MEDIUM, LOW = CONFIDENCE_LEVELS

# Lower rank = less trusted
CONFIDENCE_RANK = {LOW: 0, MEDIUM: 1, HIGH: 2}

# Words that mark fixtures and sample data. A marker only counts at the
# start of a word, so "latest" or "CYEXAMPLEKEY" do not trip it.
# Trade-off: a marker buried mid-word in a random value ("Zq8XtestK2...")
# is not seen either, so such a value can still rate high.
NEGATIVE_MARKERS = (
    'sk_test', 'pk_test', 'test_key', 'example_key', 'sample_key',
    'test', 'example', 'sample', 'demo', 'placeholder',
    'dummy', 'fake', 'mock', 'stub',
)
_MARKER_RE = re.compile(
    r'(?<![a-z])(?:' + '|'.join(re.escape(m) for m in NEGATIVE_MARKERS) + ')',
    re.IGNORECASE,
)

# Sequential digits are common in fixtures but also inside real
# literal-prefix tokens, so they only weaken heuristic matches.
WEAK_NEGATIVE_MARKER = '123456'


@dataclass(frozen=True)
class Validation:
    confidence: str
    reason: str
    entropy: float
    has_negative_signals: bool = False


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(k.lower() in lowered for k in keywords)


class ContextValidator:
    """Decides how much to trust a match.

    Every check a pattern enables (entropy, context keywords, nearby
    keywords, variable names, required context) gives a verdict and the
    lowest verdict wins. Patterns with no checks keep their base
    confidence. Negative signals are applied last and can only lower the
    result.
    """

    def __init__(self, cache: EntropyCache | None = None):
        self.cache = cache if cache is not None else EntropyCache()

    def validate(self, secret_value: str, context: str, pattern: Pattern) -> Validation:
        entropy = self.cache.entropy_of(secret_value)
        verdicts: list[tuple[str, str]] = []

        if pattern.requires_entropy:
            if entropy < pattern.min_entropy:
                verdicts.append((LOW, f"Low entropy ({entropy:.2f} < {pattern.min_entropy})"))
            else:
                verdicts.append((HIGH, f"High entropy ({entropy:.2f} >= {pattern.min_entropy})"))

        for label, keywords in (
            ('context keywords', pattern.context_keywords),
            ('nearby keywords', pattern.nearby_keywords),
            ('variable name', pattern.variable_names),
        ):
            if not keywords:
                continue
            if _contains_any(context, keywords):
                verdicts.append((HIGH, f"Found {label}"))
            else:
                verdicts.append((LOW, f"Missing {label}"))

        if pattern.requires_context and not context.strip():
            verdicts.append((LOW, "Generic pattern requires context"))

        if verdicts:
            confidence, reason = verdicts[0]
            for verdict in verdicts[1:]:
                if CONFIDENCE_RANK[verdict[0]] <= CONFIDENCE_RANK[confidence]:
                    confidence, reason = verdict
        else:
            confidence, reason = pattern.confidence, "Matched known token format"

        strong, weak = self._negative_signals(f"{secret_value}\n{context}")
        if strong or (weak and pattern.is_heuristic):
            confidence, reason = LOW, "Likely test/example data"

        return Validation(
            confidence=confidence,
            reason=reason,
            entropy=entropy,
            has_negative_signals=strong or weak,
        )

    @staticmethod
    def _negative_signals(text: str) -> tuple[bool, bool]:
        return bool(_MARKER_RE.search(text)), WEAK_NEGATIVE_MARKER in text


def validate_context(secret_value: str, context: str, pattern: Pattern,
                     cache: EntropyCache | None = None) -> Validation:
    """One-shot validation with an optional shared cache."""
    return ContextValidator(cache).validate(secret_value, context, pattern)
