"""Match scoring for launcher candidates.

Scoring is a prioritized rule chain. Each rule either rejects the candidate
(None) or returns a score; the first rule that accepts wins, so earlier
rules always dominate later ones:

    exact       10000
    prefix      8400 - len(candidate)
    word start  7900
    acronym     7700
    substring   7400 - 25 * offset
    fuzzy       1200 .. 4000 (only above a subsequence coverage floor)

System commands use a coverage-weighted raw fuzzy score plus an intent
adjustment instead.
"""

from collections.abc import Callable
from dataclasses import dataclass

from rapidfuzz import fuzz

from genie_mcp.search.models import SystemCommand

EXACT_SCORE = 10_000
PREFIX_BASE = 8_400
WORD_START_SCORE = 7_900
ACRONYM_SCORE = 7_700
SUBSTRING_BASE = 7_400
SUBSTRING_OFFSET_PENALTY = 25

FUZZY_BAND_BASE = 1_200
FUZZY_BAND_SPAN = 2_800

# Raw fuzzy scores fall in [0, FUZZY_MAX]
FUZZY_MAX = 500
FUZZY_CUTOFF = 50.0

SHORT_QUERY_LEN = 2
SHORT_QUERY_MIN_COVERAGE = 0.45
MIN_COVERAGE = 0.62

SYSTEM_INTENT_BONUS = 220
SYSTEM_NO_INTENT_PENALTY = 380
SYSTEM_MIN_SCORE = 120


def normalize_for_match(text: str) -> str:
    """Lower-case and drop every non-alphanumeric character."""
    return "".join(c for c in text.lower() if c.isalnum())


def _words(text: str) -> list[str]:
    words = []
    current: list[str] = []
    for c in text:
        if c.isalnum():
            current.append(c)
        elif current:
            words.append("".join(current))
            current = []
    if current:
        words.append("".join(current))
    return words


def acronym(text: str) -> str:
    """First letter of each alphanumeric word, lower-cased."""
    return "".join(word[0] for word in _words(text.lower()))


def subsequence_coverage(candidate: str, query: str) -> float:
    """Fraction of query characters found in order inside candidate."""
    if not query:
        return 0.0
    matched = 0
    for c in candidate:
        if matched < len(query) and c == query[matched]:
            matched += 1
    return matched / len(query)


def fuzzy_score(candidate: str, query: str) -> int | None:
    """General-purpose fuzzy similarity scaled to [0, FUZZY_MAX].

    Returns None when the similarity is below FUZZY_CUTOFF.
    """
    if not candidate or not query:
        return None
    ratio = fuzz.partial_ratio(query, candidate, score_cutoff=FUZZY_CUTOFF)
    if not ratio:
        return None
    return round(ratio * FUZZY_MAX / 100)


def system_match_score(text: str, query: str) -> int | None:
    """Raw fuzzy score for a system command label, weighted by coverage.

    Only a query spanning the whole label keeps its full score, so a partial
    overlap such as "e" or "and" cannot clear SYSTEM_MIN_SCORE without intent.
    """
    raw = fuzzy_score(text, query)
    if raw is None:
        return None
    coverage = min(1.0, len(query) / len(text))
    return round(raw * (0.5 + 0.5 * coverage))


@dataclass(frozen=True)
class Candidate:
    """Precomputed forms of a display name."""

    text: str  # Lower-cased display name
    normalized: str

    @classmethod
    def of(cls, name: str) -> "Candidate":
        text = name.lower()
        return cls(text=text, normalized=normalize_for_match(text))


Rule = Callable[[Candidate, str], int | None]


def exact_rule(candidate: Candidate, query: str) -> int | None:
    if candidate.normalized == query:
        return EXACT_SCORE
    return None


def prefix_rule(candidate: Candidate, query: str) -> int | None:
    # Shorter names with the same prefix rank higher
    if candidate.normalized.startswith(query):
        return PREFIX_BASE - len(candidate.text)
    return None


def word_start_rule(candidate: Candidate, query: str) -> int | None:
    if any(word.startswith(query) for word in _words(candidate.text)):
        return WORD_START_SCORE
    return None


def acronym_rule(candidate: Candidate, query: str) -> int | None:
    letters = acronym(candidate.text)
    if letters and letters.startswith(query):
        return ACRONYM_SCORE
    return None


def substring_rule(candidate: Candidate, query: str) -> int | None:
    index = candidate.normalized.find(query)
    if index < 0:
        return None
    return SUBSTRING_BASE - index * SUBSTRING_OFFSET_PENALTY


def fuzzy_rule(candidate: Candidate, query: str) -> int | None:
    coverage = subsequence_coverage(candidate.normalized, query)
    minimum = SHORT_QUERY_MIN_COVERAGE if len(query) <= SHORT_QUERY_LEN else MIN_COVERAGE
    if coverage < minimum:
        return None

    raw = fuzzy_score(candidate.normalized, query)
    if raw is None:
        return None
    mapped = raw * FUZZY_BAND_SPAN // FUZZY_MAX
    return FUZZY_BAND_BASE + max(0, min(mapped, FUZZY_BAND_SPAN))


RULES: tuple[Rule, ...] = (
    exact_rule,
    prefix_rule,
    word_start_rule,
    acronym_rule,
    substring_rule,
    fuzzy_rule,
)


def score_match(name: str, query: str) -> int | None:
    """Score a display name against a query.

    Args:
        name: Candidate display name (any case/punctuation)
        query: User query; normalized here before matching

    Returns:
        Score (higher is better) or None when the candidate does not match.
    """
    normalized_query = normalize_for_match(query)
    if not normalized_query:
        return None

    candidate = Candidate.of(name)
    for rule in RULES:
        score = rule(candidate, normalized_query)
        if score is not None:
            return score
    return None


def query_signals_intent(query: str, command: SystemCommand) -> bool:
    """Whether the query text names the command, e.g. "lock" for Lock Screen."""
    query = query.lower()
    return any(keyword in query for keyword in command.keywords)


def adjusted_system_score(base: int, command: SystemCommand, query: str) -> int | None:
    """Apply the intent bonus or penalty to a raw system command score.

    Without intent the command is only kept if it still clears
    SYSTEM_MIN_SCORE after the penalty.
    """
    if query_signals_intent(query, command):
        return base + SYSTEM_INTENT_BONUS

    score = base - SYSTEM_NO_INTENT_PENALTY
    if score >= SYSTEM_MIN_SCORE:
        return score
    return None
